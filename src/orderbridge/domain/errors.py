"""Error taxonomy shared by adapters, validation and persistence."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from orderbridge.domain.model.enums import ViolationKind

if TYPE_CHECKING:
    from collections.abc import Iterable


@dataclass(frozen=True, slots=True)
class Violation:
    """One failed rule, addressed by a field path such as ``items[1].quantity``."""

    field: str
    message: str
    kind: ViolationKind = ViolationKind.STRUCTURAL

    @classmethod
    def reference(cls, field: str, message: str) -> Violation:
        return cls(field=field, message=message, kind=ViolationKind.REFERENCE)


class OrderBridgeError(Exception):
    """Base class for all expected failures raised by orderbridge."""


class OrderRejected(OrderBridgeError):
    """The submitted order cannot be accepted; carries every violation found."""

    def __init__(self, violations: Iterable[Violation], message: str | None = None) -> None:
        self.violations: tuple[Violation, ...] = tuple(violations)
        if message is None:
            message = "; ".join(f"{v.field}: {v.message}" for v in self.violations)
        super().__init__(message or type(self).__name__)

    def to_dict(self) -> dict[str, list[str]]:
        grouped: dict[str, list[str]] = {}
        for violation in self.violations:
            grouped.setdefault(violation.field, []).append(violation.message)
        return grouped


class StructuralError(OrderRejected):
    """A required field is missing or malformed."""


class ReferenceNotFound(OrderRejected):
    """A referenced customer, supplier or product does not exist."""


class ConflictError(OrderBridgeError):
    """A uniqueness rule would be violated by a write."""


class PersistenceFailure(OrderBridgeError):
    """Storage or catalog transport failed; nothing was written."""
