"""
Error taxonomy for the reconciliation layer.

- ValidationError: a record is missing a natural-key field or is malformed.
  Raised before any write, never retried.
- UnresolvedReferenceError: a foreign natural key (external team id + season,
  league id, ...) has no matching row. Treated as a row-level failure.
- TransactionError: the unit of work could not be applied (commit failed, or a
  delete-then-reinsert step failed). Nothing in the unit was persisted.
- RowError: not an exception; the record of one skipped row in a batch.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional


class PipelineError(Exception):
    """Base class for all reconciliation errors."""


class ValidationError(PipelineError):
    """A record failed validation before any write was attempted."""

    def __init__(self, message: str, entity: Optional[str] = None, fields: Iterable[str] = ()):
        super().__init__(message)
        self.entity = entity
        self.fields = list(fields)


class UnresolvedReferenceError(PipelineError):
    """A foreign natural key could not be mapped to a stored row."""

    def __init__(self, entity: str, key: Dict[str, Any]):
        self.entity = entity
        self.key = dict(key)
        described = ", ".join(f"{k}={v!r}" for k, v in self.key.items())
        super().__init__(f"No {entity} found for {described}")


class TransactionError(PipelineError):
    """The whole unit of work was rolled back."""


@dataclass
class RowError:
    """A single record that was skipped while reconciling a batch."""
    index: int
    reason: str
    error_type: str
    record: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_exception(cls, index: int, record: Any, exc: Exception) -> "RowError":
        return cls(
            index=index,
            reason=str(exc),
            error_type=type(exc).__name__,
            record=dict(record) if isinstance(record, dict) else {"value": record},
        )

    def __repr__(self):
        return f"RowError(index={self.index}, type={self.error_type}, reason={self.reason!r})"
