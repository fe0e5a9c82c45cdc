from pydantic import BaseModel, ConfigDict, Field

from models.events import VerificationSnapshot
from models.steps import Step, StepId, initial_steps, step_index


class PipelineState(BaseModel):
    """Derived view of one analysis job: six ordered steps plus outcome.

    Treated as a value. The reducer never mutates an instance; it returns a
    new one via ``model_copy``.
    """

    model_config = ConfigDict(frozen=True)

    steps: tuple[Step, ...] = Field(default_factory=initial_steps)
    verification_snapshot: VerificationSnapshot | None = None
    terminal: bool = False
    error_message: str | None = None

    @classmethod
    def initial(cls) -> "PipelineState":
        """All steps pending, no snapshot, not terminal."""
        return cls()

    def step(self, step_id: StepId | str) -> Step | None:
        index = step_index(step_id)
        return self.steps[index] if index is not None else None

    def status_of(self, step_id: StepId | str) -> str | None:
        step = self.step(step_id)
        return step.status if step is not None else None

    @property
    def frontier(self) -> Step | None:
        """The single active step, if any."""
        return next((s for s in self.steps if s.status == "active"), None)

    @property
    def failed(self) -> bool:
        return self.terminal and (
            self.error_message is not None
            or any(s.status == "error" for s in self.steps)
        )

    @property
    def succeeded(self) -> bool:
        return self.terminal and not self.failed
