"""Structural and referential checks run on a canonical order before it is stored."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from email_validator import EmailNotValidError, validate_email

from orderbridge.domain.errors import ReferenceNotFound, StructuralError, Violation
from orderbridge.domain.model import OrderStatus, ViolationKind

if TYPE_CHECKING:
    from orderbridge.domain.model import Address, Order
    from orderbridge.domain.ports.persistence import (
        CustomerExistence,
        ProductExistence,
        SupplierExistence,
    )

MAX_EMAIL_LENGTH: Final = 200
# Largest value a signed 64-bit INTEGER column holds
MAX_STORED_INTEGER: Final = 2**63 - 1


@dataclass(frozen=True, slots=True)
class ValidationResult:
    violations: tuple[Violation, ...] = ()

    @property
    def is_valid(self) -> bool:
        return not self.violations

    def raise_for_violations(self) -> None:
        """Raise the aggregated rejection; structural problems take precedence."""

        if self.is_valid:
            return
        if any(v.kind is ViolationKind.STRUCTURAL for v in self.violations):
            raise StructuralError(self.violations)
        raise ReferenceNotFound(self.violations)


def check_email(value: str) -> str | None:
    """Return a problem description for ``value``, or ``None`` when it is acceptable."""

    if len(value) > MAX_EMAIL_LENGTH:
        return f"customerEmail cannot exceed {MAX_EMAIL_LENGTH} characters."
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        return "customerEmail must be a valid email address."
    return None


class OrderValidator:
    """Collects every rule violation of an order instead of stopping at the first one."""

    def __init__(
        self,
        *,
        customers: CustomerExistence,
        suppliers: SupplierExistence,
        products: ProductExistence,
    ) -> None:
        self._customers = customers
        self._suppliers = suppliers
        self._products = products

    async def validate(self, order: Order) -> ValidationResult:
        violations: list[Violation] = []
        await self._check_customer(order, violations)
        await self._check_supplier(order, violations)
        if order.order_date is None:
            violations.append(Violation("orderDate", "OrderDate is required."))
        if not _is_known_status(order.status):
            violations.append(Violation("orderStatus", "OrderStatus must be a valid status."))
        self._check_addresses(order, violations)
        await self._check_items(order, violations)
        return ValidationResult(tuple(violations))

    async def _check_customer(self, order: Order, violations: list[Violation]) -> None:
        email = order.customer_email
        has_email = email is not None and bool(email.strip())
        if order.customer_id is None and not has_email:
            violations.append(
                Violation("order", "Either CustomerId or CustomerEmail must be provided.")
            )

        if order.customer_id is not None:
            if order.customer_id <= 0:
                violations.append(
                    Violation("customerId", "CustomerId must be greater than zero when provided.")
                )
            elif order.customer_id > MAX_STORED_INTEGER:
                violations.append(Violation("customerId", "CustomerId is out of range."))
            elif not await self._customers.exists(order.customer_id):
                violations.append(
                    Violation.reference(
                        "customerId", f"Customer with ID {order.customer_id} does not exist."
                    )
                )

        if email is not None and has_email:
            problem = check_email(email)
            if problem is not None:
                violations.append(Violation("customerEmail", problem))

    async def _check_supplier(self, order: Order, violations: list[Violation]) -> None:
        if order.supplier_id <= 0:
            violations.append(Violation("supplierId", "SupplierId must be greater than zero."))
        elif order.supplier_id > MAX_STORED_INTEGER:
            violations.append(Violation("supplierId", "SupplierId is out of range."))
        elif not await self._suppliers.exists(order.supplier_id):
            violations.append(
                Violation.reference(
                    "supplierId", f"Supplier with ID {order.supplier_id} does not exist."
                )
            )

    @staticmethod
    def _check_addresses(order: Order, violations: list[Violation]) -> None:
        if order.billing_address is None:
            violations.append(Violation("billingAddress", "BillingAddress is required."))
        elif not _has_street(order.billing_address):
            violations.append(Violation("billingAddress.street", "Street is required."))
        if order.delivery_address is not None and not _has_street(order.delivery_address):
            violations.append(Violation("deliveryAddress.street", "Street is required."))

    async def _check_items(self, order: Order, violations: list[Violation]) -> None:
        if not order.items:
            violations.append(Violation("orderItems", "Order must contain at least one item."))
            return

        known: dict[int, bool] = {}
        for index, item in enumerate(order.items):
            path = f"orderItems[{index}]"
            if item.quantity <= 0:
                violations.append(Violation(f"{path}.quantity", "Quantity must be at least 1."))
            elif item.quantity > MAX_STORED_INTEGER:
                violations.append(Violation(f"{path}.quantity", "Quantity is out of range."))
            if item.price < 0:
                violations.append(
                    Violation(f"{path}.price", "Price must be greater than or equal to 0.")
                )
            if item.product_id <= 0:
                violations.append(
                    Violation(f"{path}.productId", "ProductId must be greater than zero.")
                )
                continue
            if item.product_id > MAX_STORED_INTEGER:
                violations.append(Violation(f"{path}.productId", "ProductId is out of range."))
                continue
            if item.product_id not in known:
                known[item.product_id] = await self._products.exists(item.product_id)
            if not known[item.product_id]:
                violations.append(
                    Violation.reference(
                        f"{path}.productId", f"Product with ID {item.product_id} does not exist."
                    )
                )


def _is_known_status(status: object) -> bool:
    try:
        OrderStatus(status)
    except ValueError:
        return False
    return True


def _has_street(address: Address) -> bool:
    return bool(address.street and address.street.strip())
