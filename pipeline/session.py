"""Session controller — owns the pipeline state and the current connection.

Every inbound message arrives with the generation of the connection it was
received on. Messages from any other generation are discarded before
classification; the rest are classified and folded into the state one at a
time, in arrival order.
"""
import logging
from typing import Any

from models.events import AnalysisResultEvent, ClusterSummary, Event
from models.pipeline_state import PipelineState
from pipeline.classifier import classify
from pipeline.connection import TRANSPORT_FAILURE_MESSAGE, ConnectionManager
from pipeline.reducer import reduce, replay

logger = logging.getLogger(__name__)


class AnalysisSession:
    def __init__(self, connections: ConnectionManager | None = None) -> None:
        self.connections = connections or ConnectionManager()
        self._state = replay([])
        self._events: list[Event] = []
        self._analyzing = False

    # -- exposed view ------------------------------------------------------

    @property
    def state(self) -> PipelineState:
        return self._state

    @property
    def events(self) -> list[Event]:
        """Accepted events of the current job, in arrival order."""
        return list(self._events)

    @property
    def is_analyzing(self) -> bool:
        return self._analyzing

    @property
    def is_terminal(self) -> bool:
        return self._state.terminal

    @property
    def succeeded(self) -> bool:
        return self._state.succeeded

    @property
    def failed(self) -> bool:
        return self._state.failed

    @property
    def current_job_id(self) -> str | None:
        current = self.connections.current
        return current.job_id if current is not None else None

    def is_current(self, generation: int) -> bool:
        return self.connections.is_current(generation)

    # -- lifecycle ---------------------------------------------------------

    def start_job(self, job_id: str) -> int:
        """Supersede any running stream and reset the view for ``job_id``."""
        generation = self.connections.start_job(job_id)
        self._events = []
        self._state = replay(self._events)
        self._analyzing = True
        return generation

    def close(self) -> None:
        self.connections.close()

    def receive(self, raw: Any, generation: int) -> bool:
        """Apply one inbound message received on ``generation``.

        Returns True if the message changed the event history. Stale and
        malformed messages return False, as do messages a finished job ignores.
        """
        if not self.connections.is_current(generation):
            logger.debug(
                "Discarding message from stale generation %d (current %d)",
                generation,
                self.connections.current_generation(),
            )
            return False

        event = classify(raw)
        if event is None:
            return False

        return self._apply(event)

    def fail(self, generation: int, reason: str = TRANSPORT_FAILURE_MESSAGE) -> bool:
        """Report a transport failure; only the current generation is affected."""
        event = self.connections.fail(generation, reason)
        if event is None:
            return False
        return self._apply(event)

    def submit_result(self, job_id: str, data: ClusterSummary | dict) -> PipelineState:
        """Complete a job in one shot from a synchronous analysis result.

        No stream is involved: any running stream is superseded and the fresh
        state goes straight to fully complete.
        """
        summary = data if isinstance(data, ClusterSummary) else ClusterSummary.model_validate(data)
        self.start_job(job_id)
        self.connections.close()
        self._apply(AnalysisResultEvent(data=summary))
        return self._state

    def _apply(self, event: Event) -> bool:
        state = reduce(self._state, event)
        if self._state.terminal and state == self._state:
            logger.debug("Not recording %s event: job already finished", event.type)
            return False
        self._events.append(event)
        self._state = state
        if self._state.terminal and self._analyzing:
            self._analyzing = False
            logger.info(
                "Job %s finished: %s",
                self.current_job_id,
                "failed" if self._state.failed else "complete",
            )
        return True
