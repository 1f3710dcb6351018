from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import pytest

from orderbridge.adapters.sqlalchemy.unit_of_work import is_started
from orderbridge.ui import cli as cli_module
from orderbridge.ui.cli import EXIT_FAILURE, EXIT_OK, EXIT_REJECTED, main
from tests.helpers.orders import CODE_GADGET, CODE_WIDGET, speedy_payload, vault_payload

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture
def database(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    path = tmp_path / "cli.db"
    monkeypatch.setenv("DATABASE_URI", f"sqlite+aiosqlite:///{path}")
    return path


def _write_payload(tmp_path: Path, payload: Any, name: str = "payload.json") -> str:
    target = tmp_path / name
    target.write_text(json.dumps(payload), encoding="utf-8")
    return str(target)


def _run_json(capsys: pytest.CaptureFixture[str], argv: list[str]) -> tuple[int, Any]:
    code = main(argv)
    return code, json.loads(capsys.readouterr().out)


def test_suppliers_command_lists_formats(capsys: pytest.CaptureFixture[str]) -> None:
    code, output = _run_json(capsys, ["suppliers"])

    assert code == EXIT_OK
    assert [entry["name"] for entry in output] == ["Speedy", "Vault"]
    assert output[1]["referencePrefix"] == "VAULT-"


@pytest.mark.usefixtures("database")
def test_catalog_and_ingest_round_trip(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    code, customer = _run_json(
        capsys,
        ["catalog", "add-customer", "--name", "Buyer", "--email", "buyer@example.com"],
    )
    assert code == EXIT_OK
    _, widget = _run_json(
        capsys, ["catalog", "add-product", "--name", "Widget", "--code", str(CODE_WIDGET)]
    )
    _, gadget = _run_json(
        capsys, ["catalog", "add-product", "--name", "Gadget", "--code", str(CODE_GADGET)]
    )

    payload = speedy_payload(
        customerId=customer["id"],
        lineItems=[
            {"productId": widget["id"], "qty": 2, "unitPrice": 9.99},
            {"productId": gadget["id"], "qty": 1, "unitPrice": 4.50},
        ],
    )
    code, speedy = _run_json(capsys, ["ingest", "speedy", _write_payload(tmp_path, payload)])
    assert code == EXIT_OK
    assert speedy["orderReference"] == f"SPEEDY-{speedy['orderId']}"
    assert speedy["totalAmount"] == "24.48"

    code, vault = _run_json(
        capsys, ["ingest", "vault", _write_payload(tmp_path, vault_payload(), "vault.json")]
    )
    assert code == EXIT_OK
    assert vault["orderReference"] == f"VAULT-{vault['orderId']}"
    assert vault["totalAmount"] == "33.48"

    code, page = _run_json(capsys, ["orders", "page", "--page-size", "1"])
    assert code == EXIT_OK
    assert page["totalCount"] == 2
    assert page["totalPages"] == 2

    code, detail = _run_json(capsys, ["orders", "get", str(vault["orderId"])])
    assert code == EXIT_OK
    assert detail["supplierName"] == "Vault"
    assert [item["productName"] for item in detail["orderItems"]] == ["Widget", "Gadget"]

    code, deleted = _run_json(capsys, ["orders", "delete", str(speedy["orderId"])])
    assert code == EXIT_OK
    assert deleted == {"orderId": speedy["orderId"], "deleted": True}
    assert not is_started()


@pytest.mark.usefixtures("database")
def test_rejected_order_exits_with_violations(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    path = _write_payload(tmp_path, speedy_payload(customerId=404, lineItems=[]))

    code, output = _run_json(capsys, ["ingest", "speedy", path])

    assert code == EXIT_REJECTED
    assert output["error"] == "StructuralError"
    assert "lineItems" in output["errors"]


@pytest.mark.usefixtures("database")
def test_missing_order_is_reported(capsys: pytest.CaptureFixture[str]) -> None:
    code, output = _run_json(capsys, ["orders", "get", "42"])

    assert code == EXIT_REJECTED
    assert output["error"] == "LookupError"


def test_invalid_json_payload_is_rejected(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    target = tmp_path / "broken.json"
    target.write_text("{not json", encoding="utf-8")

    code, output = _run_json(capsys, ["transform", "vault", str(target)])

    assert code == EXIT_REJECTED
    assert "not valid JSON" in output["message"]


def test_page_command_forwards_arguments(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    captured: dict[str, object] = {}

    async def fake_list_orders_paged(
        page: int, page_size: int | None, *, include_related: bool
    ) -> dict[str, object]:
        captured.update(page=page, page_size=page_size, include_related=include_related)
        return {"ok": True}

    monkeypatch.setattr(cli_module, "list_orders_paged", fake_list_orders_paged)

    code = main(["orders", "page", "--page", "3", "--include-related"])

    assert code == EXIT_OK
    assert captured == {"page": 3, "page_size": None, "include_related": True}
    assert json.loads(capsys.readouterr().out) == {"ok": True}


def test_unexpected_errors_exit_with_failure(monkeypatch: pytest.MonkeyPatch) -> None:
    async def broken(*_: object, **__: object) -> None:
        raise RuntimeError("boom")

    monkeypatch.setattr(cli_module, "list_orders", broken)

    assert main(["orders", "list"]) == EXIT_FAILURE


def test_unknown_supplier_is_refused_by_the_parser() -> None:
    with pytest.raises(SystemExit):
        main(["ingest", "acme", "payload.json"])
