"""WebSocket transport — delivers a job's event stream into a session.

Each call to ``follow`` starts a new job on the session (superseding any
stream already running), connects to ``<ws_base_url>/ws/<job_id>`` and feeds
every frame to the session tagged with the generation it arrived on.

Reading stops when the job reaches a terminal state, when the server closes
the stream, or as soon as a newer job has taken over the session. A
connection that cannot be opened or drops abnormally becomes a single
synthetic error event on the current generation. Nothing is retried; a
reconnect is a new ``follow`` call.
"""
import asyncio
import logging
from typing import Any, Callable

import websockets
from websockets.exceptions import WebSocketException

from models.pipeline_state import PipelineState
from pipeline.session import AnalysisSession
from settings import Settings

logger = logging.getLogger(__name__)

CONNECTED_MESSAGE = {"type": "log", "message": "Connected to server"}


class WebSocketTransport:
    def __init__(self, settings: Settings, connect: Callable[..., Any] = websockets.connect) -> None:
        self._settings = settings
        self._connect = connect

    async def follow(self, session: AnalysisSession, job_id: str) -> PipelineState:
        """Stream ``job_id`` into ``session`` until it ends; return the final state."""
        generation = session.start_job(job_id)
        url = self._settings.stream_url(job_id)
        logger.info("Connecting to %s", url)

        try:
            async with self._connect(url, open_timeout=self._settings.open_timeout) as ws:
                session.receive(CONNECTED_MESSAGE, generation)
                async for message in ws:
                    if not session.is_current(generation):
                        logger.info("Job %s superseded, leaving its stream", job_id)
                        break
                    session.receive(message, generation)
                    if session.is_terminal:
                        break
        except (OSError, asyncio.TimeoutError, WebSocketException) as exc:
            logger.warning("Stream for job %s failed: %s", job_id, exc)
            session.fail(generation)
        finally:
            if session.is_current(generation):
                session.close()

        return session.state
