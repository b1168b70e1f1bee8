from __future__ import annotations

import logging
from typing import Callable, Optional

from agent_ready.app.errors import AppError, InvalidScanTransitionError
from agent_ready.core.clock import utc_now
from agent_ready.core.ids import new_scan_id
from agent_ready.db.schemas import ScanRecord
from agent_ready.graph.build_graph import run_pipeline
from agent_ready.schemas.report_schema import Report
from agent_ready.scans.git_service import RepoAcquirer
from agent_ready.scans.scan_store import ScanStore

logger = logging.getLogger(__name__)

PipelineFn = Callable[..., Report]


class ScanManager:
    """
    Drives one scan through queued -> cloning -> scanning -> completed|failed.
    The store owns the record; this class only requests transitions.
    """

    def __init__(
        self,
        store: ScanStore,
        acquirer: RepoAcquirer,
        pipeline: Optional[PipelineFn] = None,
        max_workers: int = 8,
    ):
        self.store = store
        self.acquirer = acquirer
        self.pipeline = pipeline or run_pipeline
        self.max_workers = max_workers

    def submit(
        self,
        repo_url: str,
        branch: Optional[str] = None,
        profile: str = "factory_compat",
        language: str = "en",
        level: Optional[str] = None,
    ) -> ScanRecord:
        record = ScanRecord(
            _id=new_scan_id(),
            repo_url=repo_url,
            branch=branch,
            profile=profile,
            language=language,
            level=level,
            status="queued",
            created_at=utc_now(),
        )
        self.store.create(record)
        logger.info("scan queued", extra={"scan_id": record.id, "repo_url": repo_url})
        return record

    def get(self, scan_id: str) -> ScanRecord:
        return self.store.get(scan_id)

    def process(self, scan_id: str) -> ScanRecord:
        """
        Run a queued scan to a terminal state. Any error from acquisition or the
        pipeline is recorded on the scan as `failed`; the returned record is the final one.
        """
        record = self.store.get(scan_id)
        if record.status != "queued":
            raise InvalidScanTransitionError(f"Scan {scan_id} is {record.status}, only queued scans can be processed")

        try:
            self.store.transition(scan_id, "cloning")
            with self.acquirer.acquire(record.repo_url, record.branch) as path:
                self.store.transition(scan_id, "scanning")
                report = self.pipeline(
                    str(path),
                    profile=record.profile,
                    language=record.language,
                    level=record.level,
                    max_workers=self.max_workers,
                )
        except (AppError, ValueError, OSError) as e:
            logger.warning("scan failed", extra={"scan_id": scan_id, "error": str(e)})
            return self.store.transition(scan_id, "failed", error=str(e) or e.__class__.__name__)
        except Exception as e:
            logger.exception("scan crashed", extra={"scan_id": scan_id})
            return self.store.transition(scan_id, "failed", error=f"{e.__class__.__name__}: {e}")

        done = self.store.transition(scan_id, "completed", result=report.model_dump(mode="json"))
        logger.info(
            "scan completed",
            extra={"scan_id": scan_id, "level": report.executive_summary.level, "score": report.executive_summary.score},
        )
        return done

    def run(self, repo_url: str, **kwargs) -> ScanRecord:
        """submit + process in one call."""
        record = self.submit(repo_url, **kwargs)
        return self.process(record.id)
