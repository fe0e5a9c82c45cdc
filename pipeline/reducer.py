"""Pipeline reducer — pure transition from (state, event) to the next state.

The reducer holds no state between calls and performs no I/O. Every input
yields a valid PipelineState; nothing raises across this boundary.

Step statuses only advance along the registry order:

    complete … complete, active, pending … pending

Step statuses are frozen once the state is terminal (after ``complete`` or
``error``). A late verification update still replaces the snapshot; every
other event is absorbed. Starting over is done by replaying an empty history.

Two primitive actions drive all transitions:

  complete(step, data)  step becomes complete (attaching data if given) and
                        the next step, if pending, becomes active.
  activate(step)        a pending step becomes active.

Both catch up any earlier step that is still pending or active, so the
frontier (the single active step) is always unique.
"""
import logging
from typing import Any, Callable, Iterable

from models.events import (
    AnalysisResultEvent,
    ClusteringResultEvent,
    CompleteEvent,
    ErrorEvent,
    Event,
    LogEvent,
    ProgressEvent,
    VerificationUpdateEvent,
)
from models.pipeline_state import PipelineState
from models.steps import Step, StepId, step_index

logger = logging.getLogger(__name__)

Steps = tuple[Step, ...]
Action = Callable[[Steps], Steps]


def reduce(state: PipelineState, event: Event) -> PipelineState:
    """Apply one classified event to ``state`` and return the new state."""
    if state.terminal:
        if isinstance(event, VerificationUpdateEvent) and event.data != state.verification_snapshot:
            return state.model_copy(update={"verification_snapshot": event.data})
        logger.debug("Ignoring %s event: pipeline is terminal", event.type)
        return state

    if isinstance(event, LogEvent):
        return _with_steps(state, _infer_from_log(state.steps, event.message))

    if isinstance(event, ProgressEvent):
        return _with_steps(state, complete(state.steps, event.step))

    if isinstance(event, ClusteringResultEvent):
        return _with_steps(state, _apply_clustering_result(state.steps, event.data))

    if isinstance(event, VerificationUpdateEvent):
        steps = activate(state.steps, StepId.NCBI_VERIFICATION)
        return state.model_copy(update={"steps": steps, "verification_snapshot": event.data})

    if isinstance(event, CompleteEvent):
        return _finish(state, state.steps)

    if isinstance(event, AnalysisResultEvent):
        return _finish(state, _apply_clustering_result(state.steps, event.data))

    if isinstance(event, ErrorEvent):
        return state.model_copy(update={
            "steps": _mark_frontier_failed(state.steps),
            "terminal": True,
            "error_message": event.message,
        })

    logger.warning("No transition for event type %r", getattr(event, "type", None))
    return state


def replay(events: Iterable[Event]) -> PipelineState:
    """Fold an event history from the initial registry state.

    An empty history yields the initial state: every step pending, no
    verification snapshot, not terminal.
    """
    state = PipelineState.initial()
    for event in events:
        state = reduce(state, event)
    return state


# ---------------------------------------------------------------------------
# Primitive actions
# ---------------------------------------------------------------------------

def complete(steps: Steps, step_id: StepId | str, result_data: Any = None) -> Steps:
    """Mark ``step_id`` complete and activate the step after it.

    Idempotent on an already complete step, except that new ``result_data``
    replaces the attached value. Unknown step ids are a no-op.
    """
    index = step_index(step_id)
    if index is None:
        logger.debug("complete(%r): unknown step, ignored", step_id)
        return steps

    current = steps[index]
    if current.status == "complete":
        if result_data is not None and current.result_data != result_data:
            return _replace(steps, index, current.model_copy(update={"result_data": result_data}))
        return steps
    if current.status == "error":
        return steps

    update: dict[str, Any] = {"status": "complete"}
    if result_data is not None:
        update["result_data"] = result_data
    new_steps = _catch_up(steps, index)
    new_steps = _replace(new_steps, index, current.model_copy(update=update))

    next_index = index + 1
    if next_index < len(new_steps) and new_steps[next_index].status == "pending":
        new_steps = _replace(
            new_steps, next_index, new_steps[next_index].model_copy(update={"status": "active"})
        )
    return new_steps


def activate(steps: Steps, step_id: StepId | str) -> Steps:
    """Mark a pending step active. Active, complete or unknown steps are left alone."""
    index = step_index(step_id)
    if index is None or steps[index].status != "pending":
        return steps
    new_steps = _catch_up(steps, index)
    return _replace(new_steps, index, steps[index].model_copy(update={"status": "active"}))


def _catch_up(steps: Steps, index: int) -> Steps:
    """Complete every step before ``index`` that is still pending or active."""
    return tuple(
        s.model_copy(update={"status": "complete"})
        if i < index and s.status in ("pending", "active")
        else s
        for i, s in enumerate(steps)
    )


def _replace(steps: Steps, index: int, step: Step) -> Steps:
    return steps[:index] + (step,) + steps[index + 1:]


# ---------------------------------------------------------------------------
# Log-message inference
# ---------------------------------------------------------------------------

def _contains(*phrases: str) -> Callable[[str], bool]:
    return lambda message: all(p in message for p in phrases)


# Evaluated top to bottom against the lower-cased message; first match wins.
LOG_RULES: tuple[tuple[Callable[[str], bool], tuple[Action, ...]], ...] = (
    (_contains("reading sequences"), (
        lambda s: activate(s, StepId.READ_SEQUENCES),
    )),
    (_contains("found", "sequences"), (
        lambda s: complete(s, StepId.READ_SEQUENCES),
    )),
    (_contains("generating", "embeddings"), (
        lambda s: activate(s, StepId.GENERATE_EMBEDDINGS),
    )),
    (_contains("running umap"), (
        lambda s: complete(s, StepId.GENERATE_EMBEDDINGS),
        lambda s: activate(s, StepId.UMAP_HDBSCAN),
    )),
    (_contains("clustering complete"), (
        lambda s: complete(s, StepId.UMAP_HDBSCAN),
    )),
    (_contains("ncbi verification"), (
        lambda s: activate(s, StepId.NCBI_VERIFICATION),
    )),
)


def _infer_from_log(steps: Steps, message: str) -> Steps:
    lowered = message.lower()
    for matches, actions in LOG_RULES:
        if matches(lowered):
            for action in actions:
                steps = action(steps)
            return steps
    return steps


# ---------------------------------------------------------------------------
# Composite transitions
# ---------------------------------------------------------------------------

def _apply_clustering_result(steps: Steps, data: Any) -> Steps:
    steps = complete(steps, StepId.UMAP_HDBSCAN)
    return complete(steps, StepId.CLUSTERING_RESULT, data)


def _finish(state: PipelineState, steps: Steps) -> PipelineState:
    steps = complete(steps, StepId.NCBI_VERIFICATION)
    steps = complete(steps, StepId.ANALYSIS_COMPLETE)
    return state.model_copy(update={"steps": steps, "terminal": True})


def _mark_frontier_failed(steps: Steps) -> Steps:
    return tuple(
        s.model_copy(update={"status": "error"}) if s.status == "active" else s
        for s in steps
    )


def _with_steps(state: PipelineState, steps: Steps) -> PipelineState:
    if steps is state.steps:
        return state
    return state.model_copy(update={"steps": steps})
