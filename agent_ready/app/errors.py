class AppError(Exception):
    """Base application error"""


class ConfigError(AppError):
    """Missing or invalid configuration"""


class ProfileNotFoundError(AppError):
    """Requested rubric profile is not registered"""


class EmptyRubricError(AppError):
    """Profile resolved to zero check definitions"""


class ScanContextError(AppError):
    """Repository snapshot could not be built or read"""


class CheckDefinitionError(AppError):
    """Malformed check parameter (bad glob, bad regex, unsupported type)"""


class EvaluationError(AppError):
    """Cross-pillar evaluation received unusable input"""


class RepoAcquisitionError(AppError):
    """Clone or checkout of the target repository failed"""


class DatabaseError(AppError):
    """MongoDB connection or query failure"""


class ScanNotFoundError(AppError):
    """Scan ID not found in the store"""


class InvalidScanTransitionError(AppError):
    """Scan lifecycle moved along an edge the state machine does not allow"""
