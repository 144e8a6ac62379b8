"""Types shared by the Elasticsearch client, the batcher and the submitter."""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Callable, Mapping

Document = Mapping[str, str | int | date]
Batch = tuple[Document, ...]
FieldMapping = Mapping[str, str]


@dataclass(frozen=True)
class Outcome:
    """Result of a top-level operation: either a success, or a failure with its cause.

    `batches_succeeded` counts the bulk batches accepted by the endpoint before the
    operation finished. It is 0 for operations that are not bulk submissions.
    """

    success: bool
    error: Exception | None = None
    batches_succeeded: int = 0

    @classmethod
    def ok(cls, batches_succeeded: int = 0) -> "Outcome":
        """Build a successful outcome."""
        return cls(success=True, batches_succeeded=batches_succeeded)

    @classmethod
    def failure(cls, error: Exception, batches_succeeded: int = 0) -> "Outcome":
        """Build a failed outcome carrying its cause."""
        return cls(success=False, error=error, batches_succeeded=batches_succeeded)

    def __bool__(self) -> bool:
        return self.success


OutcomeCallback = Callable[[Outcome], Any]


class SubmissionPhase(Enum):
    """Phases of a sequential bulk submission."""

    IDLE = "idle"
    AWAITING_BATCH = "awaiting_batch"
    DONE = "done"
