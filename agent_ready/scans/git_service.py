from __future__ import annotations

import logging
import shutil
import subprocess
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Protocol, Sequence
from urllib.parse import urlparse

from agent_ready.app.errors import RepoAcquisitionError

logger = logging.getLogger(__name__)


class RepoAcquirer(Protocol):
    def acquire(self, source: str, branch: Optional[str] = None):
        """Context manager yielding a local directory for `source`."""
        ...


def validate_repo_url(repo_url: str, allowed_hosts: Sequence[str]) -> str:
    """Return the URL's host, or raise RepoAcquisitionError if it is malformed or not allowed."""
    try:
        parsed = urlparse(repo_url)
    except ValueError as e:
        raise RepoAcquisitionError(f"Invalid repository URL: {repo_url}") from e
    if parsed.scheme not in ("https", "http") or not parsed.hostname:
        raise RepoAcquisitionError(f"Invalid repository URL: {repo_url}")
    host = parsed.hostname.lower()
    if host not in allowed_hosts:
        raise RepoAcquisitionError(f"Only {', '.join(allowed_hosts)} repositories are supported")
    return host


class GitCloneAcquirer:
    """
    Shallow-clones a remote repository into a temp dir. The directory is removed
    when the context exits, whether the scan succeeded or not.
    """

    def __init__(self, allowed_hosts: Sequence[str], timeout_s: int = 120):
        self.allowed_hosts = tuple(allowed_hosts)
        self.timeout_s = timeout_s

    @contextmanager
    def acquire(self, source: str, branch: Optional[str] = None) -> Iterator[Path]:
        validate_repo_url(source, self.allowed_hosts)

        tmp = Path(tempfile.mkdtemp(prefix="agent-ready-"))
        try:
            cmd = ["git", "clone", "--depth", "1", "--single-branch"]
            if branch:
                cmd += ["--branch", branch]
            cmd += [source, str(tmp)]
            try:
                p = subprocess.run(
                    cmd,
                    stdout=subprocess.PIPE,
                    stderr=subprocess.STDOUT,
                    text=True,
                    check=False,
                    timeout=self.timeout_s,
                )
            except subprocess.TimeoutExpired as e:
                raise RepoAcquisitionError(f"git clone timed out after {self.timeout_s}s") from e
            except OSError as e:
                raise RepoAcquisitionError(f"git is not available: {e}") from e
            if p.returncode != 0:
                raise RepoAcquisitionError(f"git clone failed: {(p.stdout or '').strip()[-500:]}")

            logger.info("repository cloned", extra={"repo_url": source, "branch": branch})
            yield tmp
        finally:
            shutil.rmtree(tmp, ignore_errors=True)


class LocalPathAcquirer:
    """Uses an existing checkout as-is; nothing is copied or cleaned up."""

    @contextmanager
    def acquire(self, source: str, branch: Optional[str] = None) -> Iterator[Path]:
        path = Path(source).expanduser()
        if not path.is_dir():
            raise RepoAcquisitionError(f"Local repository not found: {source}")
        yield path
