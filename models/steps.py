"""Step registry — the fixed, ordered catalog of analysis pipeline steps.

The order is significant: completing a step activates the one after it, and
status only ever advances along this order. Six entries, never resized.
"""
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict


class StepId(str, Enum):
    READ_SEQUENCES = "read_sequences"
    GENERATE_EMBEDDINGS = "generate_embeddings"
    UMAP_HDBSCAN = "umap_hdbscan"
    CLUSTERING_RESULT = "clustering_result"
    NCBI_VERIFICATION = "ncbi_verification"
    ANALYSIS_COMPLETE = "analysis_complete"


StepStatus = Literal["pending", "active", "complete", "error"]


class Step(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: StepId
    label: str
    status: StepStatus = "pending"
    result_data: Any = None  # e.g. ClusterSummary on clustering_result


STEP_REGISTRY: tuple[tuple[StepId, str], ...] = (
    (StepId.READ_SEQUENCES, "Reading Sequences"),
    (StepId.GENERATE_EMBEDDINGS, "Generating Embeddings"),
    (StepId.UMAP_HDBSCAN, "UMAP & HDBSCAN"),
    (StepId.CLUSTERING_RESULT, "Clustering Complete"),
    (StepId.NCBI_VERIFICATION, "NCBI Verification"),
    (StepId.ANALYSIS_COMPLETE, "Analysis Complete"),
)

_INDEX = {step_id.value: i for i, (step_id, _) in enumerate(STEP_REGISTRY)}


def initial_steps() -> tuple[Step, ...]:
    """All six steps in registry order, every one pending."""
    return tuple(Step(id=step_id, label=label) for step_id, label in STEP_REGISTRY)


def step_index(step_id: StepId | str) -> int | None:
    """Position of a step in the registry, or None for an unknown id."""
    key = step_id.value if isinstance(step_id, StepId) else step_id
    return _INDEX.get(key)
