"""Connection lifecycle — one authoritative event stream per session.

Starting a job always supersedes the previous stream: the old connection is
marked closed and a new one is opened immediately with a fresh generation.
There is no waiting for the old stream to drain. Messages still in flight on
a superseded stream carry their old generation and are discarded by the
session, which is the only concurrency control needed.
"""
import logging

from models.connection import Connection
from models.events import ErrorEvent

logger = logging.getLogger(__name__)

TRANSPORT_FAILURE_MESSAGE = "WebSocket connection failed."


class ConnectionManager:
    def __init__(self) -> None:
        self._generation = 0
        self._current: Connection | None = None

    @property
    def current(self) -> Connection | None:
        return self._current

    def current_generation(self) -> int:
        """Generation of the authoritative connection; 0 before any job."""
        return self._generation

    def is_current(self, generation: int) -> bool:
        return self._current is not None and generation == self._generation

    def start_job(self, job_id: str) -> int:
        """Close any current connection and open a new one bound to ``job_id``.

        Returns the new generation token.
        """
        if not job_id:
            raise ValueError("job_id must be a non-empty string")

        self.close()
        self._generation += 1
        self._current = Connection(job_id=job_id, generation=self._generation)
        logger.info("Opened stream for job %s (generation %d)", job_id, self._generation)
        return self._generation

    def close(self) -> None:
        """Mark the current connection closed. Safe to call repeatedly."""
        if self._current is None or not self._current.is_open:
            return
        self._current = self._current.model_copy(update={"is_open": False})
        logger.info(
            "Closed stream for job %s (generation %d)",
            self._current.job_id,
            self._current.generation,
        )

    def fail(self, generation: int, reason: str = TRANSPORT_FAILURE_MESSAGE) -> ErrorEvent | None:
        """Handle a transport failure reported for ``generation``.

        Only the current, still-open connection produces a synthetic error
        event; failures of superseded streams are ignored. Never reconnects.
        """
        if not self.is_current(generation) or not self._current.is_open:
            logger.debug("Ignoring transport failure on stale generation %d", generation)
            return None

        logger.warning(
            "Transport failure for job %s (generation %d): %s",
            self._current.job_id,
            generation,
            reason,
        )
        self.close()
        return ErrorEvent(message=reason)
