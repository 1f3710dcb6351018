"""Reference entities consumed by the order pipeline: customers, suppliers, products."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from orderbridge.domain.model.enums import SupplierTag

if TYPE_CHECKING:
    from uuid import UUID


@dataclass(eq=False, kw_only=True)
class Customer:
    id: int | None = None
    name: str
    email: str | None = None


@dataclass(eq=False, kw_only=True)
class Supplier:
    id: int | None = None
    name: str


@dataclass(eq=False, kw_only=True)
class Product:
    """Catalog product.

    ``id`` is the canonical identity used by order items; ``code`` is the immutable
    opaque identifier shared with suppliers that do not use our numeric ids.
    """

    id: int | None = None
    code: UUID
    name: str

    def identity(self) -> ProductIdentity:
        if self.id is None:
            raise ValueError("product has not been persisted yet")
        return ProductIdentity(id=self.id, code=self.code, name=self.name)


@dataclass(frozen=True, slots=True)
class ProductIdentity:
    """Read-only projection of a product returned by catalog lookups."""

    id: int
    code: UUID
    name: str


@dataclass(frozen=True, slots=True)
class SupplierRef:
    tag: SupplierTag
    id: int
    name: str

    def order_reference(self, order_id: int) -> str:
        return f"{self.tag}-{order_id}"


SPEEDY: Final = SupplierRef(tag=SupplierTag.SPEEDY, id=1, name="Speedy")
VAULT: Final = SupplierRef(tag=SupplierTag.VAULT, id=2, name="Vault")

KNOWN_SUPPLIERS: Final[dict[SupplierTag, SupplierRef]] = {
    SupplierTag.SPEEDY: SPEEDY,
    SupplierTag.VAULT: VAULT,
}


def supplier_ref(tag: SupplierTag | str) -> SupplierRef:
    try:
        return KNOWN_SUPPLIERS[SupplierTag(str(tag).upper())]
    except ValueError:
        known = ", ".join(t.value.lower() for t in SupplierTag)
        raise ValueError(f"Unknown supplier {tag!r}; expected one of: {known}") from None
