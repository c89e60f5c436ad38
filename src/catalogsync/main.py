#!/usr/bin/env python3

# ruff: noqa: T201

from __future__ import annotations

import argparse
import logging
import sys
from datetime import timedelta
from signal import SIGINT, signal
from typing import TYPE_CHECKING
from uuid import UUID

from dotenv import load_dotenv

from catalogsync.app import (
    auto_match_categories,
    check_connection,
    list_category_mappings,
    map_category,
    run_full_import,
    run_import,
    unmap_category,
)
from catalogsync.common.logging import configure_logging
from catalogsync.config import ConfigurationError
from catalogsync.domain.catalog_import import ImportFilters
from catalogsync.domain.errors import UnknownCategoryError
from catalogsync.domain.model import ImportEntity, IntegrationSource

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from catalogsync.domain.catalog_import import (
        FullImportResult,
        ImportProgress,
        ImportRunResult,
    )


def _uuid(value: str) -> UUID:
    try:
        return UUID(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"not a valid UUID: {value!r}") from exc


def _positive_int(value: str) -> int:
    number = int(value)
    if number <= 0:
        raise argparse.ArgumentTypeError("must be a positive integer")
    return number


def _add_source_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--source",
        type=IntegrationSource,
        choices=list(IntegrationSource),
        required=True,
        help="Integration to read from",
    )


def _add_scope_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--store", type=_uuid, required=True, help="Store UUID")
    _add_source_argument(parser)


def _add_category_filters(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--category-code",
        dest="category_codes",
        action="append",
        default=[],
        help="Only import this external category code (repeatable)",
    )
    parser.add_argument(
        "--root-category",
        dest="root_categories",
        action="append",
        default=[],
        help="Only import this category and its descendants (repeatable)",
    )


def _add_product_filters(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--family",
        dest="families",
        action="append",
        default=[],
        help="Only import products of this family (repeatable)",
    )
    parser.add_argument("--channel", help="Channel (scope) to read product values for")
    parser.add_argument(
        "--completeness",
        type=_positive_int,
        help="Minimum completeness percentage in --channel",
    )
    parser.add_argument(
        "--updated-since",
        type=_positive_int,
        metavar="HOURS",
        help="Only import products updated within the last HOURS hours",
    )
    parser.add_argument(
        "--limit",
        type=_positive_int,
        help="Maximum number of products to import",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="catalogsync",
        description="Synchronise external catalog data into a store's catalog",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output")
    commands = parser.add_subparsers(dest="command", required=True)

    for name, help_text in (
        ("import-categories", "Import the category tree"),
        ("import-products", "Import products"),
        ("import-all", "Import categories, then products"),
    ):
        command = commands.add_parser(name, help=help_text)
        _add_scope_arguments(command)
        command.add_argument(
            "--dry-run",
            action="store_true",
            help="Fetch and preview without writing anything",
        )
        if name != "import-products":
            _add_category_filters(command)
        if name != "import-categories":
            _add_product_filters(command)

    check = commands.add_parser("check-connection", help="Verify the integration credentials")
    _add_source_argument(check)

    auto_match = commands.add_parser("auto-match", help="Auto-match unmapped categories")
    _add_scope_arguments(auto_match)

    map_command = commands.add_parser("map", help="Map an external category manually")
    _add_scope_arguments(map_command)
    map_command.add_argument("--code", required=True, help="External category code")
    map_command.add_argument(
        "--category", type=_uuid, required=True, help="Internal category UUID"
    )

    unmap = commands.add_parser("unmap", help="Clear the mapping of an external category")
    _add_scope_arguments(unmap)
    unmap.add_argument("--code", required=True, help="External category code")

    mappings = commands.add_parser("mappings", help="List category mappings")
    _add_scope_arguments(mappings)
    mappings.add_argument(
        "--unmapped", action="store_true", help="Only list categories without a link"
    )
    return parser


def _filters(parser: argparse.ArgumentParser, args: argparse.Namespace) -> ImportFilters | None:
    if not args.command.startswith("import-"):
        return None
    updated_since = getattr(args, "updated_since", None)
    try:
        return ImportFilters(
            category_codes=frozenset(getattr(args, "category_codes", ())),
            root_categories=tuple(getattr(args, "root_categories", ())),
            families=frozenset(getattr(args, "families", ())),
            channel=getattr(args, "channel", None),
            min_completeness=getattr(args, "completeness", None),
            updated_within=timedelta(hours=updated_since) if updated_since else None,
        )
    except ValueError as exc:
        parser.error(str(exc))


def _print_progress(progress: ImportProgress) -> None:
    total = progress.total if progress.total is not None else "?"
    label = f" {progress.label}" if progress.label else ""
    print(f"[{progress.stage}] {progress.current}/{total}{label}", file=sys.stderr)


def _report_import(result: ImportRunResult, *, label: str = "") -> int:
    stats = result.stats
    if not result.success:
        print(f"{label}Import failed: {result.message}", file=sys.stderr)
        return 1
    if result.dry_run:
        print(f"{label}Dry run: {stats.total} records fetched")
        for item in result.preview:
            print(f"  {item}")
        return 0
    print(
        f"{label}Imported {stats.imported}, skipped {stats.skipped}, failed {stats.failed} "
        f"of {stats.total}"
    )
    for failure in result.errors:
        print(f"  {failure.kind}: {failure.external_id} {failure.name or ''}: {failure.message}")
    return 0


def _report_full_import(result: FullImportResult) -> int:
    code = _report_import(result.categories, label="Categories: ")
    if result.products is None:
        print("Products: skipped because the category import failed", file=sys.stderr)
        return 1
    return max(code, _report_import(result.products, label="Products: "))


def _dispatch(args: argparse.Namespace, filters: ImportFilters | None) -> int:
    if args.command == "check-connection":
        check = check_connection(args.source)
        print(check.message, file=sys.stdout if check.success else sys.stderr)
        return 0 if check.success else 1

    scope = {"store_id": args.store, "source": args.source}
    match args.command:
        case "import-categories":
            result = run_import(
                ImportEntity.CATEGORIES,
                dry_run=args.dry_run,
                progress=_print_progress,
                filters=filters,
                **scope,
            )
            return _report_import(result)
        case "import-products":
            result = run_import(
                ImportEntity.PRODUCTS,
                dry_run=args.dry_run,
                limit=args.limit,
                progress=_print_progress,
                filters=filters,
                **scope,
            )
            return _report_import(result)
        case "import-all":
            full_result = run_full_import(
                dry_run=args.dry_run,
                limit=args.limit,
                progress=_print_progress,
                filters=filters,
                **scope,
            )
            return _report_full_import(full_result)
        case "auto-match":
            summary = auto_match_categories(**scope)
            print(f"Matched {summary.matched}, unmatched {summary.unmatched}")
            return 0
        case "map":
            mapping = map_category(code=args.code, category_id=args.category, **scope)
            print(f"Mapped {mapping.external_category_code} -> {mapping.internal_category_id}")
            return 0
        case "unmap":
            mapping = unmap_category(code=args.code, **scope)
            if mapping is None:
                print(f"No mapping for code {args.code}", file=sys.stderr)
                return 1
            print(f"Unmapped {mapping.external_category_code}")
            return 0
        case "mappings":
            for mapping in list_category_mappings(unmapped_only=args.unmapped, **scope):
                target = mapping.internal_category_id or "-"
                confidence = mapping.confidence_score
                score = f" ({confidence:.2f})" if confidence is not None else ""
                print(
                    f"{mapping.external_category_code}\t{mapping.external_category_name or ''}"
                    f"\t{target}\t{mapping.mapping_type.KIND}{score}"
                )
            return 0
        case _:
            raise ValueError(f"Unknown command: {args.command}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    parser = _build_parser()
    try:
        parsed_args = parser.parse_args(list(argv) if argv is not None else sys.argv[1:])
        filters = _filters(parser, parsed_args)
    except SystemExit as exc:
        sys.exit(2 if exc.code else 0)

    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)
    try:
        code = _dispatch(parsed_args, filters)
    except (ConfigurationError, UnknownCategoryError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(2)
    except Exception as e:  # noqa: BLE001
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    sys.exit(code)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    print("\nClosed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    """Console script entry point."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
