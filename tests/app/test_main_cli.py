from __future__ import annotations

import uuid
from datetime import timedelta

import pytest

from catalogsync import main as main_module
from catalogsync.config import MissingConfigurationError
from catalogsync.domain.catalog_import import FullImportResult, ImportFilters, ImportRunResult
from catalogsync.domain.errors import UnknownCategoryError
from catalogsync.domain.mapping import AutoMatchSummary
from catalogsync.domain.model import (
    CategoryMapping,
    FailureKind,
    ImportEntity,
    ImportFailure,
    ImportRunStatistics,
    IntegrationSource,
)
from catalogsync.domain.ports import ConnectionCheck

STORE = uuid.UUID("00000000-0000-4000-8000-000000000001")
SCOPE = ["--store", str(STORE), "--source", "woocommerce"]


def _result(*, success: bool = True, dry_run: bool = False) -> ImportRunResult:
    stats = ImportRunStatistics(entity_type=ImportEntity.PRODUCTS, total=2, imported=1, failed=1)
    stats.errors.append(
        ImportFailure(kind=FailureKind.PRODUCT, external_id="p2", name="Lamp", message="boom")
    )
    return ImportRunResult(
        success=success,
        stats=stats,
        dry_run=dry_run,
        preview=[{"external_id": "p1"}] if dry_run else [],
        message=None if success else "bad credentials",
    )


def _exit_code(argv: list[str]) -> int | str | None:
    with pytest.raises(SystemExit) as excinfo:
        main_module.main(argv)
    return excinfo.value.code


def test_import_products_passes_arguments(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    captured: dict[str, object] = {}

    def fake_run_import(entity: ImportEntity, **kwargs: object) -> ImportRunResult:
        captured.update(kwargs, entity=entity)
        return _result()

    monkeypatch.setattr(main_module, "run_import", fake_run_import)

    assert _exit_code(["import-products", *SCOPE, "--limit", "5"]) == 0

    assert captured["entity"] is ImportEntity.PRODUCTS
    assert captured["store_id"] == STORE
    assert captured["source"] is IntegrationSource.WOOCOMMERCE
    assert captured["limit"] == 5
    assert captured["dry_run"] is False
    out = capsys.readouterr().out
    assert "Imported 1, skipped 0, failed 1 of 2" in out
    assert "p2" in out


def test_import_categories_dry_run_prints_preview(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    captured: dict[str, object] = {}

    def fake_run_import(entity: ImportEntity, **kwargs: object) -> ImportRunResult:
        captured.update(kwargs, entity=entity)
        return _result(dry_run=True)

    monkeypatch.setattr(main_module, "run_import", fake_run_import)

    assert _exit_code(["import-categories", *SCOPE, "--dry-run"]) == 0

    assert captured["entity"] is ImportEntity.CATEGORIES
    assert captured["dry_run"] is True
    assert "Dry run: 2 records fetched" in capsys.readouterr().out


def test_failed_import_exits_with_one(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(main_module, "run_import", lambda *_, **__: _result(success=False))

    assert _exit_code(["import-products", *SCOPE]) == 1


def test_missing_configuration_exits_with_two(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_run_import(*_: object, **__: object) -> ImportRunResult:
        raise MissingConfigurationError(["WOOCOMMERCE_STORE_URL"])

    monkeypatch.setattr(main_module, "run_import", fake_run_import)

    assert _exit_code(["import-categories", *SCOPE]) == 2


def test_unexpected_error_exits_with_one(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_auto_match(**_: object) -> AutoMatchSummary:
        raise RuntimeError("database unavailable")

    monkeypatch.setattr(main_module, "auto_match_categories", fake_auto_match)

    assert _exit_code(["auto-match", *SCOPE]) == 1


@pytest.mark.parametrize(
    "argv",
    [
        ["import-products", "--store", "not-a-uuid", "--source", "woocommerce"],
        ["import-products", "--store", str(STORE), "--source", "magento"],
        ["import-products", *SCOPE, "--limit", "0"],
        ["map", *SCOPE, "--code", "15"],
        [],
    ],
)
def test_invalid_arguments_exit_with_two(argv: list[str]) -> None:
    assert _exit_code(argv) == 2


def test_auto_match_prints_summary(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr(
        main_module,
        "auto_match_categories",
        lambda **_: AutoMatchSummary(matched=3, unmatched=1),
    )

    assert _exit_code(["auto-match", *SCOPE]) == 0
    assert "Matched 3, unmatched 1" in capsys.readouterr().out


def test_map_passes_code_and_category(monkeypatch: pytest.MonkeyPatch) -> None:
    category_id = uuid.uuid4()
    captured: dict[str, object] = {}

    def fake_map(**kwargs: object) -> CategoryMapping:
        captured.update(kwargs)
        mapping = CategoryMapping(
            store_id=STORE,
            integration_source=IntegrationSource.WOOCOMMERCE,
            external_category_code="15",
        )
        mapping.link_manual(category_id)
        return mapping

    monkeypatch.setattr(main_module, "map_category", fake_map)

    assert _exit_code(["map", *SCOPE, "--code", "15", "--category", str(category_id)]) == 0
    assert captured == {
        "code": "15",
        "category_id": category_id,
        "store_id": STORE,
        "source": IntegrationSource.WOOCOMMERCE,
    }


def test_map_unknown_category_exits_with_two(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_map(**_: object) -> CategoryMapping:
        raise UnknownCategoryError("Category does not exist in this store")

    monkeypatch.setattr(main_module, "map_category", fake_map)

    assert _exit_code(["map", *SCOPE, "--code", "15", "--category", str(uuid.uuid4())]) == 2


def test_unmap_without_mapping_exits_with_one(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(main_module, "unmap_category", lambda **_: None)

    assert _exit_code(["unmap", *SCOPE, "--code", "15"]) == 1


def test_mappings_lists_rows(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    linked = CategoryMapping(
        store_id=STORE,
        integration_source=IntegrationSource.WOOCOMMERCE,
        external_category_code="15",
        external_category_name="Shoes",
    )
    category_id = uuid.uuid4()
    linked.link_auto(category_id, 0.95)
    captured: dict[str, object] = {}

    def fake_list(**kwargs: object) -> list[CategoryMapping]:
        captured.update(kwargs)
        return [linked]

    monkeypatch.setattr(main_module, "list_category_mappings", fake_list)

    assert _exit_code(["mappings", *SCOPE, "--unmapped"]) == 0
    assert captured["unmapped_only"] is True
    assert capsys.readouterr().out.strip() == f"15\tShoes\t{category_id}\tauto (0.95)"


def test_import_products_builds_filters(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}

    def fake_run_import(entity: ImportEntity, **kwargs: object) -> ImportRunResult:
        captured.update(kwargs)
        return _result()

    monkeypatch.setattr(main_module, "run_import", fake_run_import)

    argv = [
        "import-products",
        *SCOPE,
        "--family",
        "shoes",
        "--family",
        "hats",
        "--channel",
        "ecommerce",
        "--completeness",
        "80",
        "--updated-since",
        "24",
    ]
    assert _exit_code(argv) == 0

    filters = captured["filters"]
    assert isinstance(filters, ImportFilters)
    assert filters.families == frozenset({"shoes", "hats"})
    assert filters.channel == "ecommerce"
    assert filters.min_completeness == 80
    assert filters.updated_within == timedelta(hours=24)


def test_import_categories_builds_category_filters(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}

    def fake_run_import(entity: ImportEntity, **kwargs: object) -> ImportRunResult:
        captured.update(kwargs)
        return _result()

    monkeypatch.setattr(main_module, "run_import", fake_run_import)

    argv = ["import-categories", *SCOPE, "--root-category", "master", "--category-code", "a"]
    assert _exit_code(argv) == 0

    filters = captured["filters"]
    assert isinstance(filters, ImportFilters)
    assert filters.root_categories == ("master",)
    assert filters.category_codes == frozenset({"a"})


@pytest.mark.parametrize(
    "argv",
    [
        ["import-products", *SCOPE, "--completeness", "80"],
        ["import-products", *SCOPE, "--channel", "web", "--completeness", "150"],
        ["import-categories", *SCOPE, "--family", "shoes"],
        ["import-products", *SCOPE, "--root-category", "master"],
        ["check-connection"],
    ],
)
def test_invalid_filters_exit_with_two(argv: list[str]) -> None:
    assert _exit_code(argv) == 2


def test_import_all_reports_both_entities(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    captured: dict[str, object] = {}

    def fake_full_import(**kwargs: object) -> FullImportResult:
        captured.update(kwargs)
        return FullImportResult(categories=_result(), products=_result())

    monkeypatch.setattr(main_module, "run_full_import", fake_full_import)

    assert _exit_code(["import-all", *SCOPE, "--limit", "3", "--root-category", "master"]) == 0

    assert captured["limit"] == 3
    assert captured["store_id"] == STORE
    out = capsys.readouterr().out
    assert "Categories: Imported 1, skipped 0, failed 1 of 2" in out
    assert "Products: Imported 1, skipped 0, failed 1 of 2" in out


def test_import_all_with_skipped_products_exits_with_one(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr(
        main_module,
        "run_full_import",
        lambda **_: FullImportResult(categories=_result(success=False)),
    )

    assert _exit_code(["import-all", *SCOPE]) == 1
    assert "Products: skipped" in capsys.readouterr().err


@pytest.mark.parametrize(("success", "code"), [(True, 0), (False, 1)])
def test_check_connection_reports_outcome(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
    success: bool,
    code: int,
) -> None:
    captured: list[IntegrationSource] = []

    def fake_check(source: IntegrationSource) -> ConnectionCheck:
        captured.append(source)
        return ConnectionCheck(success=success, message="Connected" if success else "denied")

    monkeypatch.setattr(main_module, "check_connection", fake_check)

    assert _exit_code(["check-connection", "--source", "akeneo"]) == code
    assert captured == [IntegrationSource.AKENEO]
    output = capsys.readouterr()
    assert ("Connected" in output.out) is success
    assert ("denied" in output.err) is not success
