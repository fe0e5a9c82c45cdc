"""Wire-level status events streamed by the analysis backend.

One JSON object per message, discriminated by its ``type`` field. The
backend produces these; the client only classifies and reduces them.
"""
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class TopGroup(BaseModel):
    model_config = ConfigDict(frozen=True, extra="allow")

    group_id: int
    count: int = Field(ge=0)
    percentage: float
    genus: str | None = None
    avg_prob: float | None = None  # mean HDBSCAN membership probability


class ClusterSummary(BaseModel):
    """Result of the UMAP + HDBSCAN clustering step.

    Immutable once attached to a step. A later clustering result replaces it
    wholesale; the two are never merged.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    total_reads: int = Field(ge=0)
    total_clusters: int = Field(ge=0)
    noise_percentage: float
    top_groups: tuple[TopGroup, ...] = ()


class VerificationSnapshot(BaseModel):
    """Latest NCBI verification detail for one cluster (e.g. status "NOVEL")."""

    model_config = ConfigDict(frozen=True, extra="allow")

    status: str
    cluster_id: int | str
    match_percentage: float
    description: str


class LogEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["log"] = "log"
    message: str


class ProgressEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["progress"] = "progress"
    step: str  # unknown step ids are accepted here and ignored by the reducer
    status: Literal["complete"] = "complete"


class ClusteringResultEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["clustering_result"] = "clustering_result"
    data: ClusterSummary


class VerificationUpdateEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["verification_update"] = "verification_update"
    data: VerificationSnapshot


class CompleteEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["complete"] = "complete"


class ErrorEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["error"] = "error"
    message: str = ""


class AnalysisResultEvent(BaseModel):
    """One-shot result of a synchronous analysis (no intermediate events).

    Equivalent to a clustering result immediately followed by completion.
    """

    model_config = ConfigDict(frozen=True)

    type: Literal["json_result"] = "json_result"
    data: ClusterSummary


Event = Annotated[
    Union[
        LogEvent,
        ProgressEvent,
        ClusteringResultEvent,
        VerificationUpdateEvent,
        CompleteEvent,
        ErrorEvent,
        AnalysisResultEvent,
    ],
    Field(discriminator="type"),
]
