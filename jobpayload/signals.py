from typing import Any, Optional

from .config import PayloadConfig
from .errors import FairSignalJobMalformedError, StoreUnavailableError
from .log import get_logger
from .models import is_fair_signal
from .store import shared_store

logger = get_logger(__name__)


class FairSignalEmitter:
    """
    Pushes job ids of fair-signal jobs onto '{prefix}{queue}:{partition}'.

    With no prefix configured nothing is emitted and no store is touched.
    Every call to `emit` pushes again: signals are at-least-once.
    """

    def __init__(self, config: PayloadConfig, store: Optional[Any] = None):
        self.config = config
        self._store = store

    @property
    def store(self):
        if self._store is None:
            self._store = shared_store(self.config)
        return self._store

    def applies_to(self, job: Any) -> bool:
        return self.config.signals_enabled and job is not None and is_fair_signal(job)

    def list_key(self, job: Any, job_id: Optional[str] = None) -> str:
        queue = getattr(job, "queue", None)
        partition = getattr(job, "partition", None)
        if queue is None or partition is None:
            raise FairSignalJobMalformedError(
                f"Fair-signal job needs queue and partition (queue={queue!r}, partition={partition!r})",
                job_id=job_id,
            )
        return f"{self.config.signal_key_prefix}{queue}:{partition}"

    def emit(self, job: Any, job_id: str) -> bool:
        """Push `job_id` for `job` if it is a fair-signal job. Returns True if pushed."""
        if not self.applies_to(job):
            return False

        try:
            key = self.list_key(job, job_id)
        except FairSignalJobMalformedError as e:
            logger.error("fair_signal_job_malformed", job_id=job_id, error=str(e))
            raise

        try:
            self.store.connection(self.config.signals_database).push_head(key, job_id)
        except StoreUnavailableError as e:
            e.job_id = job_id
            logger.error("fair_signal_push_failed", key=key, job_id=job_id, error=str(e))
            raise

        logger.debug("fair_signal_pushed", key=key, job_id=job_id)
        return True
