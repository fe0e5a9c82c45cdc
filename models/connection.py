from pydantic import BaseModel, ConfigDict, Field


class Connection(BaseModel):
    """One event stream bound to one analysis job.

    ``generation`` identifies this connection instance; it is allocated by the
    ConnectionManager, strictly increasing and never reused.
    """

    model_config = ConfigDict(frozen=True)

    job_id: str = Field(min_length=1)
    generation: int = Field(ge=1)
    is_open: bool = True
