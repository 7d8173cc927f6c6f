"""
Per-call context for table operations.

Mutating operations on :class:`~tabular.data.table.TabularTable` accept an
:class:`OperationContext` carrying who is making the change, the business
correlation id for ledger rows, and optionally a bound logger. Nothing of
this is stored on the table itself.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any

DEFAULT_ACTOR = "TABULARadmin"
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


@dataclass(frozen=True)
class OperationContext:
    """Context passed to mutating table operations.

    Attributes:
        actor: Identity written to ``Updated_By`` on inserts and updates.
        correlation_id: Change-request id (CRI) stamped on ledger rows.
        logger: Optional structlog logger; replaces the module logger.
        clock: Returns the current time; injectable for tests.
        metadata: Arbitrary key/value pairs forwarded to logging.
    """

    actor: str = DEFAULT_ACTOR
    correlation_id: str = ""
    logger: Any = None
    clock: Callable[[], datetime] = datetime.now
    metadata: dict[str, Any] = field(default_factory=dict)

    def timestamp(self) -> str:
        """Current time formatted for ``Updated_On``."""
        return self.clock().strftime(TIMESTAMP_FORMAT)

    def with_correlation(self, correlation_id: str) -> OperationContext:
        return replace(self, correlation_id=correlation_id)

    def bind_logger(self, default: Any) -> Any:
        """The context logger (or ``default``) with ``metadata`` bound."""
        log = self.logger if self.logger is not None else default
        return log.bind(**self.metadata) if self.metadata else log


__all__ = ["OperationContext", "DEFAULT_ACTOR", "TIMESTAMP_FORMAT"]
