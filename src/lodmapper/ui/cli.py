from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from lodmapper.app import analyze_records, load_source_records, suggest_reconciliations
from lodmapper.common.logging import configure_logging
from lodmapper.config import get_mapping_config
from lodmapper.domain.model import KeyCategory
from lodmapper.domain.session import Session

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from lodmapper.app import AnalysisResult

log = logging.getLogger(__name__)


def _add_source_arguments(parser: argparse.ArgumentParser) -> None:
    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "--url",
        type=str,
        help="Items URL of the collection API (defaults to LODMAPPER_SOURCE_URL)",
    )
    source.add_argument(
        "--file",
        type=Path,
        help="Local JSON export to read instead of the API",
    )
    parser.add_argument(
        "--per-page",
        type=int,
        help="Number of records to request per API page (defaults to config)",
    )
    parser.add_argument(
        "--max-items",
        type=int,
        help="Maximum number of records to load",
    )


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Map and reconcile JSON-LD collection records against Wikidata"
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze = subparsers.add_parser("analyze", help="Analyze keys and auto-map identifiers")
    _add_source_arguments(analyze)
    analyze.add_argument(
        "--ignore-file",
        type=Path,
        help="JSON file with ignoredKeyPatterns (defaults to LODMAPPER_IGNORE_KEYS)",
    )
    analyze.add_argument(
        "--no-auto-map",
        action="store_true",
        help="Skip the identifier auto-mapping lookups",
    )

    references = subparsers.add_parser("references", help="Detect reference URLs in records")
    _add_source_arguments(references)

    suggest = subparsers.add_parser(
        "suggest",
        help="Analyze, then pre-fetch entity candidates for mapped values",
    )
    _add_source_arguments(suggest)
    suggest.add_argument(
        "--limit",
        type=int,
        default=10,
        help="Candidates to keep per value (default: %(default)s)",
    )

    args = parser.parse_args(list(argv))
    if args.max_items is not None and args.max_items <= 0:
        raise ValueError("--max-items must be positive")
    if args.per_page is not None and args.per_page <= 0:
        raise ValueError("--per-page must be positive")
    return args


def _log_keys(result: AnalysisResult) -> None:
    for key in result.keys:
        line = f"{key.key}: {key.frequency}/{key.total_items} [{key.category}]"
        if key.category is KeyCategory.MAPPED:
            mapped = result.session.mapping.mappings_for_key(key.key)
            line += " -> " + ", ".join(
                f"{mapping.property.id} ({mapping.property.label})" for mapping in mapped
            )
        elif key.identifier.property_id:
            line += f" identifier={key.identifier.type}"
        log.info(line)
    for failure in result.auto_mapped.failures:
        log.warning(
            "Auto-mapping %s -> %s failed: %s", failure.key, failure.property_id, failure.message
        )


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    parsed_args: argparse.Namespace
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
    except ValueError:
        configure_logging()
        log.exception("CLI validation error")
        sys.exit(2)

    configure_logging(level=logging.DEBUG if parsed_args.debug else logging.INFO)

    try:
        records = load_source_records(
            source_url=parsed_args.url,
            records_file=parsed_args.file,
            per_page=parsed_args.per_page,
            max_items=parsed_args.max_items,
        )
        if parsed_args.command == "analyze":
            result = analyze_records(
                records,
                mapping_config=get_mapping_config(ignore_file=parsed_args.ignore_file),
                auto_map_identifiers=not parsed_args.no_auto_map,
            )
            _log_keys(result)
        elif parsed_args.command == "references":
            session = Session()
            session.load_records(records)
            for entry in session.references.summary_entries():
                log.info("%s: %d item(s)", entry.label, entry.count)
                for example in entry.examples:
                    log.info("  %s %s", example.item_id, example.url)
        elif parsed_args.command == "suggest":
            result = analyze_records(records)
            suggestion = suggest_reconciliations(result.session, limit=parsed_args.limit)
            progress = result.session.reconciliation.progress()
            log.info(
                "Suggestions ready: records=%d, link_backed=%d, updated=%d, failed_queries=%d, "
                "unreachable_urls=%d",
                progress.total,
                suggestion.link_backed,
                suggestion.suggestions.updated,
                len(suggestion.suggestions.failures),
                suggestion.unreachable_urls,
            )
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except Exception:
        log.exception("Fatal error")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
