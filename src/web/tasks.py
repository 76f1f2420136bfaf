"""
Asynchronous draft generation jobs.

Each create form has a current source-text snapshot (SHA-256 of the text).
A job is keyed by (form_id, snapshot). When the text changes before a job
finishes, the job's result no longer matches the form and is discarded
(state "stale") instead of being applied.
"""

from __future__ import annotations

import threading
import time
import uuid
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, Optional

from src.ai import DraftCancelled, DraftService
from src.logger import get_logger
from src.translation.exceptions import StaleDraftResult
from src.translation.models import TranslationDraft
from src.translation.utils import calculate_hash

logger = get_logger(__name__)

ACTIVE_STATES = ("pending", "running")
FINISHED_STATES = ("completed", "failed", "cancelled", "stale")


@dataclass
class DraftJob:
    """In-memory representation of a draft generation job."""

    job_id: str
    form_id: str
    source_text: str
    snapshot: str
    timeout: float = 60.0
    cancel_requested: bool = False
    state: str = "pending"  # pending|running|completed|failed|cancelled|stale
    created_at: float = field(default_factory=time.time)
    started_at: Optional[float] = None
    finished_at: Optional[float] = None
    result: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    last_update: float = field(default_factory=time.time)

    def request_cancel(self):
        """Mark this job as requested for cancellation."""
        self.cancel_requested = True
        self.last_update = time.time()

    def finish(self, state: str, error: str = None, error_code: str = None):
        self.state = state
        self.error = error
        self.error_code = error_code
        self.finished_at = time.time()
        self.last_update = self.finished_at

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


_jobs: Dict[str, DraftJob] = {}
_snapshots: Dict[str, str] = {}  # form_id -> snapshot of the text currently in the form
_jobs_lock = threading.Lock()
_JOB_RETENTION_SECONDS = 600  # Retain job info for 10 minutes after completion


def update_source_text(form_id: str, text: str) -> str:
    """
    Record the text currently in a form and cancel its jobs for older text.

    Returns:
        The new snapshot token.
    """
    snapshot = calculate_hash(text or "")
    with _jobs_lock:
        _snapshots[form_id] = snapshot
        for job in _jobs.values():
            if job.form_id == form_id and job.snapshot != snapshot and job.state in ACTIVE_STATES:
                job.request_cancel()
                logger.debug("Draft job %s superseded by newer text", job.job_id)
    return snapshot


def current_snapshot(form_id: str) -> Optional[str]:
    with _jobs_lock:
        return _snapshots.get(form_id)


def create_draft_job(
    service: DraftService,
    form_id: str,
    text: str,
    timeout: float = 60.0,
    background: bool = True,
) -> DraftJob:
    """
    Create (or reuse) a draft job for the text in a form.

    A live or completed job for the same form and text is returned as is,
    so repeated clicks do not start duplicate generations.

    Args:
        service: Draft service used by the worker.
        form_id: Identifier of the create form the text belongs to.
        text: English source text.
        timeout: Seconds after which a running job is reported as failed.
        background: Run on a daemon thread (True) or in the caller (False).
    """
    snapshot = update_source_text(form_id, text)

    with _jobs_lock:
        _cleanup_jobs_locked(keep_form=form_id)
        for job in _jobs.values():
            if job.form_id == form_id and job.snapshot == snapshot and job.state in ACTIVE_STATES + ("completed",):
                logger.debug("Reusing draft job %s for form %s", job.job_id, form_id)
                return job

        job = DraftJob(
            job_id=uuid.uuid4().hex,
            form_id=form_id,
            source_text=text,
            snapshot=snapshot,
            timeout=timeout,
        )
        _jobs[job.job_id] = job

    logger.info("Draft job %s started for form %s", job.job_id, form_id)

    if background:
        thread = threading.Thread(
            target=_run_draft_job,
            args=(job, service),
            name=f"draft-job-{job.job_id}",
            daemon=True,
        )
        thread.start()
    else:
        _run_draft_job(job, service)
    return job


def get_job(job_id: str) -> Optional[DraftJob]:
    """Fetch a job by ID (if still retained). Overdue running jobs are failed here."""
    with _jobs_lock:
        job = _jobs.get(job_id)
        if not job:
            return None
        if job.finished_at and (time.time() - job.finished_at) > _JOB_RETENTION_SECONDS:
            _jobs.pop(job_id, None)
            return None
        _expire_if_overdue_locked(job)
        return job


def cancel_job(job_id: str) -> bool:
    """
    Request cancellation of a running job.

    Returns:
        True if job was found and cancellation requested, False otherwise.
    """
    with _jobs_lock:
        job = _jobs.get(job_id)
        if not job or job.state in FINISHED_STATES:
            return False
        job.request_cancel()
        logger.info("Cancellation requested for draft job %s", job_id)
        return True


def serialize_job(job: DraftJob) -> Dict[str, Any]:
    """Convert DraftJob into JSON-safe dict (source text omitted)."""
    payload = job.to_dict()
    payload.pop("source_text", None)
    return payload


def reset_jobs():
    """Forget every job and snapshot."""
    with _jobs_lock:
        _jobs.clear()
        _snapshots.clear()


def _expire_if_overdue_locked(job: DraftJob):
    if job.state in ACTIVE_STATES and job.started_at and (time.time() - job.started_at) > job.timeout:
        job.request_cancel()
        job.finish("failed", f"Draft generation timed out after {job.timeout:g}s", "timeout")
        logger.warning("Draft job %s timed out", job.job_id)


def _apply_result_locked(job: DraftJob, draft: TranslationDraft):
    """Store a finished draft on the job, unless the form text moved on."""
    latest = _snapshots.get(job.form_id)
    if latest != job.snapshot:
        raise StaleDraftResult(job.snapshot, latest)
    job.result = draft.to_dict()
    job.finish("completed")


def _run_draft_job(job: DraftJob, service: DraftService):
    """Worker function executed in a background thread."""
    with _jobs_lock:
        job.state = "running"
        job.started_at = time.time()
        job.last_update = job.started_at

    def check_cancel() -> bool:
        with _jobs_lock:
            return job.cancel_requested

    try:
        draft = service.generate(job.source_text, cancel_check=check_cancel)
    except DraftCancelled:
        with _jobs_lock:
            if job.state in ACTIVE_STATES:
                superseded = _snapshots.get(job.form_id) != job.snapshot
                job.finish("stale" if superseded else "cancelled")
        logger.info("Draft job %s stopped before completion", job.job_id)
        return
    except Exception as exc:
        error_type = type(exc).__name__
        with _jobs_lock:
            if job.state in ACTIVE_STATES:
                job.finish("failed", f"{error_type}: {exc}", getattr(exc, "code", None))
        logger.exception("✗ Draft job %s failed: %s: %s", job.job_id, error_type, exc)
        return

    with _jobs_lock:
        if job.state not in ACTIVE_STATES:
            # Timed out while the provider was still working
            logger.info("Draft job %s finished after being closed (%s); result dropped", job.job_id, job.state)
            return
        try:
            _apply_result_locked(job, draft)
        except StaleDraftResult as exc:
            job.finish("stale", exc.message, exc.code)
            logger.info("Draft job %s result discarded: source text changed", job.job_id)
            return

    logger.info("Draft job %s completed", job.job_id)


def _cleanup_jobs_locked(keep_form: Optional[str] = None):
    """
    Remove completed jobs that exceeded retention period (call with lock held).

    Snapshots of forms left without any retained job go too, except keep_form.
    """
    now = time.time()
    expired = [
        job_id
        for job_id, job in _jobs.items()
        if job.finished_at and (now - job.finished_at) > _JOB_RETENTION_SECONDS
    ]
    for job_id in expired:
        _jobs.pop(job_id, None)

    active_forms = {job.form_id for job in _jobs.values()}
    for form_id in [f for f in _snapshots if f not in active_forms and f != keep_form]:
        del _snapshots[form_id]
