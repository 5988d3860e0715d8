from __future__ import annotations

import threading
import time
import uuid
from dataclasses import dataclass, replace
from typing import Callable, Optional

from ..core.constants import DEFAULT_PROGRESS_RETENTION_SECONDS
from ..core.enums import JobState
from ..core.exceptions import ValidationError

_FINISHED = {JobState.COMPLETED, JobState.FAILED, JobState.CANCELLED}


@dataclass
class ImportProgress:
    job_id: str
    total: int = 0
    processed: int = 0
    state: JobState = JobState.CREATED
    message: str = ""
    created_at: float = 0.0
    finished_at: Optional[float] = None
    cancel_requested: bool = False

    @property
    def percent(self) -> int:
        if self.total <= 0:
            return 100 if self.state in _FINISHED else 0
        return round(self.processed * 100 / self.total)

    def to_dict(self) -> dict:
        return {
            "job_id": self.job_id,
            "state": self.state.value,
            "total": self.total,
            "processed": self.processed,
            "percent": self.percent,
            "message": self.message,
            "cancel_requested": self.cancel_requested,
        }


class ImportProgressRegistry:
    """Progress of import jobs, keyed by job id.

    Finished jobs stay readable for `retention_seconds`, then are purged.
    Readers get snapshots, never the live object.
    """

    def __init__(
        self,
        *,
        retention_seconds: int = DEFAULT_PROGRESS_RETENTION_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._retention = retention_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._jobs: dict[str, ImportProgress] = {}

    def create(self, *, total: int, job_id: Optional[str] = None) -> ImportProgress:
        job_id = job_id or uuid.uuid4().hex
        with self._lock:
            self._purge_locked()
            if job_id in self._jobs:
                raise ValidationError(f"import job {job_id} already exists")
            progress = ImportProgress(job_id=job_id, total=int(total), created_at=self._clock())
            self._jobs[job_id] = progress
            return replace(progress)

    def get(self, job_id: str) -> Optional[ImportProgress]:
        with self._lock:
            self._purge_locked()
            progress = self._jobs.get(job_id)
            return replace(progress) if progress else None

    def start(self, job_id: str) -> None:
        self._update(job_id, state=JobState.RUNNING, message="Starting import...")

    def advance(self, job_id: str, processed: int, message: str = "") -> None:
        self._update(job_id, processed=int(processed), message=message)

    def finish(self, job_id: str, state: JobState, message: str = "") -> None:
        if state not in _FINISHED:
            raise ValueError(f"{state} is not a final state")
        self._update(job_id, state=state, message=message, finished_at=self._clock())

    def request_cancel(self, job_id: str) -> bool:
        with self._lock:
            progress = self._jobs.get(job_id)
            if progress is None or progress.state in _FINISHED:
                return False
            progress.cancel_requested = True
            return True

    def is_cancel_requested(self, job_id: str) -> bool:
        with self._lock:
            progress = self._jobs.get(job_id)
            return bool(progress and progress.cancel_requested)

    def _update(self, job_id: str, **changes) -> None:
        with self._lock:
            progress = self._jobs.get(job_id)
            if progress is None:
                raise KeyError(job_id)
            for key, value in changes.items():
                setattr(progress, key, value)

    def _purge_locked(self) -> None:
        now = self._clock()
        expired = [
            job_id
            for job_id, p in self._jobs.items()
            if p.finished_at is not None and now - p.finished_at > self._retention
        ]
        for job_id in expired:
            del self._jobs[job_id]
