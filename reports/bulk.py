"""
Bulk collection of faculty analyses for the bulk report.

Each faculty member's analysis is a separate backend call. They run on a
small thread pool (FEEDBACK_BULK_WORKERS) and the outcome of every call is
kept: the caller gets the successes in input order plus the failures with
their reasons, and decides what to do with a partial batch.

requests.Session is not shared across threads: every pool thread gets its
own client from FeedbackApiClient.worker(), closed when the batch is done.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

from api.client import ApiError, FeedbackApiClient
from api.schemas import AnalysisResult, FacultyRecord
from app import settings

log = logging.getLogger(__name__)


@dataclass
class BatchResult:
    succeeded: list[tuple[FacultyRecord, AnalysisResult]] = field(default_factory=list)
    failed: list[tuple[FacultyRecord, str]] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.succeeded) + len(self.failed)


def collect_analyses(
    client: FeedbackApiClient,
    filters: dict[str, str],
    faculty: list[FacultyRecord],
    max_workers: int = settings.BULK_WORKERS,
) -> BatchResult:
    """Fetch the analysis of every faculty member with bounded concurrency."""
    local = threading.local()
    workers: list[FeedbackApiClient] = []
    lock = threading.Lock()

    def thread_client() -> FeedbackApiClient:
        worker = getattr(local, "client", None)
        if worker is None:
            worker = local.client = client.worker()
            with lock:
                workers.append(worker)
        return worker

    def fetch(member: FacultyRecord) -> AnalysisResult:
        if not member.staff_id:
            raise ApiError("Faculty record has no staff id")
        return thread_client().feedback(filters, member.staff_id)

    result = BatchResult()
    if not faculty:
        return result

    try:
        with ThreadPoolExecutor(max_workers=max(1, max_workers)) as pool:
            futures = [pool.submit(fetch, member) for member in faculty]

            # Walk in submission order so the report keeps the on-screen order.
            for member, future in zip(faculty, futures):
                try:
                    result.succeeded.append((member, future.result()))
                except ApiError as exc:
                    log.warning("Skipping %s: %s", member.staff_id, exc.message)
                    result.failed.append((member, exc.message))
    finally:
        for worker in workers:
            worker.close()

    log.info("Collected %d/%d analyses (%d failed)",
             len(result.succeeded), result.total, len(result.failed))
    return result
