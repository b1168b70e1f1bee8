"""Repository maturity scanner: scores a checkout against a versioned L1-L5 rubric."""

__version__ = "0.1.0"
