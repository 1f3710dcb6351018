from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING
from uuid import UUID

from dotenv import load_dotenv
from pydantic import BaseModel

from orderbridge.adapters.sqlalchemy.unit_of_work import is_started, shutdown
from orderbridge.app import (
    add_customer,
    add_product,
    delete_order,
    get_order,
    ingest_supplier_order,
    list_customer_orders,
    list_orders,
    list_orders_paged,
    list_supplier_orders,
    supported_suppliers,
    transform_supplier_order,
)
from orderbridge.config import DEFAULT_PAGE, configure_logging
from orderbridge.domain.errors import ConflictError, OrderRejected, PersistenceFailure
from orderbridge.domain.model import SupplierTag

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_REJECTED = 2

SUPPLIER_CHOICES = [tag.value.lower() for tag in SupplierTag]


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Ingest and query supplier orders")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    for command, help_text in (
        ("transform", "Transform a supplier payload without storing it"),
        ("ingest", "Transform, validate and store a supplier payload"),
    ):
        sub = subparsers.add_parser(command, help=help_text)
        sub.add_argument("supplier", choices=SUPPLIER_CHOICES, help="Payload format")
        sub.add_argument("payload", type=str, help="Path to a JSON payload ('-' for stdin)")

    orders = subparsers.add_parser("orders", help="Query and delete stored orders")
    orders_sub = orders.add_subparsers(dest="orders_command", required=True)

    orders_list = orders_sub.add_parser("list", help="List every order, newest first")
    orders_list.add_argument("--include-related", action="store_true")

    orders_page = orders_sub.add_parser("page", help="List one page of orders")
    orders_page.add_argument("--page", type=int, default=DEFAULT_PAGE)
    orders_page.add_argument(
        "--page-size", type=int, default=None, help="Orders per page (defaults to config)"
    )
    orders_page.add_argument("--include-related", action="store_true")

    orders_get = orders_sub.add_parser("get", help="Show one order with related data")
    orders_get.add_argument("order_id", type=int)

    orders_customer = orders_sub.add_parser("customer", help="List the orders of a customer")
    orders_customer.add_argument("customer_id", type=int)
    orders_customer.add_argument("--include-related", action="store_true")

    orders_supplier = orders_sub.add_parser("supplier", help="List the orders of a supplier")
    orders_supplier.add_argument("supplier_id", type=int)
    orders_supplier.add_argument("--include-related", action="store_true")

    orders_delete = orders_sub.add_parser("delete", help="Delete an order and its items")
    orders_delete.add_argument("order_id", type=int)

    subparsers.add_parser("suppliers", help="Describe the supported supplier formats")

    catalog = subparsers.add_parser("catalog", help="Catalog management commands")
    catalog_sub = catalog.add_subparsers(dest="catalog_command", required=True)
    add_customer_cmd = catalog_sub.add_parser("add-customer", help="Register a customer")
    add_customer_cmd.add_argument("--name", type=str, required=True)
    add_customer_cmd.add_argument("--email", type=str, help="Optional unique email address")
    add_product_cmd = catalog_sub.add_parser("add-product", help="Register a product")
    add_product_cmd.add_argument("--name", type=str, required=True)
    add_product_cmd.add_argument(
        "--code", type=str, help="Product code (UUID); generated when omitted"
    )

    return parser.parse_args(list(argv))


def _read_payload(source: str) -> object:
    try:
        text = sys.stdin.read() if source == "-" else Path(source).read_text(encoding="utf-8")
        return json.loads(text)
    except OSError as exc:
        raise ValueError(f"Cannot read payload {source}: {exc.strerror}") from exc
    except json.JSONDecodeError as exc:
        raise ValueError(f"Payload {source} is not valid JSON: {exc.msg}") from exc


def _parse_uuid(value: str) -> UUID:
    try:
        return UUID(value)
    except ValueError as exc:
        raise ValueError(f"Invalid UUID: {value}") from exc


async def _dispatch(args: argparse.Namespace) -> object:  # noqa: PLR0911
    if args.command == "transform":
        return await transform_supplier_order(args.supplier, _read_payload(args.payload))
    if args.command == "ingest":
        return await ingest_supplier_order(args.supplier, _read_payload(args.payload))
    if args.command == "suppliers":
        return supported_suppliers()
    if args.command == "orders":
        return await _dispatch_orders(args)
    if args.command == "catalog" and args.catalog_command == "add-customer":
        return await add_customer(args.name, args.email)
    if args.command == "catalog" and args.catalog_command == "add-product":
        return await add_product(args.name, _parse_uuid(args.code) if args.code else None)
    raise ValueError(f"Unsupported command: {args.command}")


async def _dispatch_orders(args: argparse.Namespace) -> object:  # noqa: PLR0911
    match args.orders_command:
        case "list":
            return await list_orders(include_related=args.include_related)
        case "page":
            return await list_orders_paged(
                args.page, args.page_size, include_related=args.include_related
            )
        case "get":
            order = await get_order(args.order_id)
            if order is None:
                raise LookupError(f"Order {args.order_id} not found")
            return order
        case "customer":
            return await list_customer_orders(
                args.customer_id, include_related=args.include_related
            )
        case "supplier":
            return await list_supplier_orders(
                args.supplier_id, include_related=args.include_related
            )
        case "delete":
            return await delete_order(args.order_id)
        case _:
            raise ValueError(f"Unsupported orders command: {args.orders_command}")


async def _run(args: argparse.Namespace) -> object:
    try:
        return await _dispatch(args)
    finally:
        if is_started():
            await shutdown()


def _render(result: object) -> str:
    if isinstance(result, BaseModel):
        return result.model_dump_json(by_alias=True, indent=2)
    if isinstance(result, list):
        items = [
            item.model_dump(mode="json", by_alias=True) if isinstance(item, BaseModel) else item
            for item in result
        ]
        return json.dumps(items, indent=2)
    return json.dumps(result, indent=2, default=str)


def _render_rejection(exc: OrderRejected) -> str:
    return json.dumps(
        {"error": type(exc).__name__, "message": str(exc), "errors": exc.to_dict()}, indent=2
    )


def main(argv: Sequence[str] | None = None) -> int:
    """Command line entry point; returns the process exit code."""

    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    try:
        result = asyncio.run(_run(parsed_args))
    except OrderRejected as exc:
        log.warning("Order rejected: %s", exc)
        sys.stdout.write(_render_rejection(exc) + "\n")
        return EXIT_REJECTED
    except (ConflictError, LookupError, ValueError) as exc:
        log.error("%s", exc)  # noqa: TRY400
        sys.stdout.write(json.dumps({"error": type(exc).__name__, "message": str(exc)}) + "\n")
        return EXIT_REJECTED
    except PersistenceFailure:
        log.exception("Storage failure")
        return EXIT_FAILURE
    except Exception:
        log.exception("Fatal error")
        return EXIT_FAILURE

    sys.stdout.write(_render(result) + "\n")
    return EXIT_OK


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    """Console script entry point."""

    load_dotenv()
    signal(SIGINT, sigint_handler)
    sys.exit(main())


if __name__ == "__main__":
    run()
