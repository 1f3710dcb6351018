"""Pieces shared by the supplier payload schemas."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

from orderbridge.domain.errors import StructuralError, Violation

if TYPE_CHECKING:
    from pydantic_core import ErrorDetails


class SupplierBaseModel(BaseModel):
    """Supplier payloads use camelCase keys; unknown keys are dropped."""

    model_config = ConfigDict(
        extra="ignore", populate_by_name=True, alias_generator=to_camel, frozen=True
    )


def parse_payload[TModel: SupplierBaseModel](model: type[TModel], payload: object) -> TModel:
    """Validate ``payload`` against ``model``, reporting every problem at once."""

    if isinstance(payload, model):
        return payload
    if not isinstance(payload, Mapping):
        raise StructuralError(
            [Violation("payload", f"Expected a JSON object, got {type(payload).__name__}.")]
        )
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise StructuralError([_to_violation(error) for error in exc.errors()]) from exc


def _to_violation(error: ErrorDetails) -> Violation:
    return Violation(field=field_path(error["loc"]), message=error["msg"])


def field_path(loc: tuple[int | str, ...]) -> str:
    """Render a pydantic error location as ``lineItems[1].qty``."""

    path = ""
    for part in loc:
        if isinstance(part, int):
            path += f"[{part}]"
        else:
            path += f".{part}" if path else part
    return path or "payload"
