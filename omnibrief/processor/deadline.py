import time
from dataclasses import dataclass

from omnibrief.processor.exceptions import PipelineTimeoutError


@dataclass(frozen=True)
class Deadline:
    """Wall-clock ceiling for one pipeline run, measured on the monotonic clock."""

    expires_at: float

    @classmethod
    def after(cls, seconds: float) -> "Deadline":
        return cls(expires_at=time.monotonic() + seconds)

    def remaining(self) -> float:
        return max(0.0, self.expires_at - time.monotonic())

    def expired(self) -> bool:
        return time.monotonic() >= self.expires_at

    def check(self, stage: str) -> None:
        """Raise PipelineTimeoutError if the ceiling passed before ``stage``."""
        if self.expired():
            raise PipelineTimeoutError(
                f"Processing timed out before {stage}. Try a shorter file."
            )
