"""
Command-line entry point: run one batch without the web UI.

    ssd-scan PMC1234567 PMC7654321
    ssd-scan --file ids.txt --csv results.csv
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from ssd_web.app_factory import build_batch_service
from ssd_web.config import MAX_WORKERS, IniConfig, configure_logging
from ssd_web.services.aggregation import summarize
from ssd_web.services.identifier_normalization import cap_batch, split_identifiers
from ssd_web.services.reporting import TABLE_COLUMNS, frequency_rows, table_rows, to_csv, to_dict

logger = logging.getLogger(__name__)


def _worker_count(value: str) -> int:
    workers = int(value)
    if not 1 <= workers <= MAX_WORKERS:
        raise ValueError(f"must be between 1 and {MAX_WORKERS}")
    return workers


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="ssd-scan",
        description="Detect statistical software mentioned in PubMed Central articles.",
    )
    p.add_argument("identifiers", nargs="*", help="PMC identifiers (PMC1234567 or 1234567)")
    p.add_argument("--file", type=Path, help="Read identifiers from a file (comma or newline separated)")
    p.add_argument("--ini", type=Path, help="INI file (defaults to $APP_INI or SoftwareDetection.ini)")
    p.add_argument(
        "--workers", type=_worker_count, help=f"Concurrent fetches, 1 to {MAX_WORKERS} (overrides fetch.max_workers)"
    )
    p.add_argument("--csv", type=Path, help="Write the results table to this CSV file")
    p.add_argument("--json", action="store_true", help="Print results as JSON instead of a table")
    return p


def _collect_identifiers(args: argparse.Namespace) -> List[str]:
    raw = "\n".join(args.identifiers or [])
    if args.file:
        raw += "\n" + args.file.read_text(encoding="utf-8")
    return split_identifiers(raw)


def _print_table(rows: List[dict]) -> None:
    widths = {c: max([len(c)] + [len(str(r[c])) for r in rows]) for c in TABLE_COLUMNS}
    print("  ".join(c.ljust(widths[c]) for c in TABLE_COLUMNS))
    for r in rows:
        print("  ".join(str(r[c]).ljust(widths[c]) for c in TABLE_COLUMNS))


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    ini = IniConfig(args.ini) if args.ini else IniConfig.from_env_or_default()
    settings = ini.load_settings()
    configure_logging(settings.log_level)

    identifiers = _collect_identifiers(args)
    if not identifiers:
        print("No identifiers given.", file=sys.stderr)
        return 2

    identifiers, truncated = cap_batch(identifiers, settings.max_batch)
    if truncated:
        logger.warning("Only the first %d identifiers will be processed", settings.max_batch)

    service = build_batch_service(settings, max_workers=args.workers)
    result = service.run(identifiers)
    summary = summarize(result)

    if args.csv:
        with args.csv.open("w", encoding="utf-8", newline="") as fh:
            fh.write(to_csv(result))
        logger.info("Wrote %s", args.csv)

    if args.json:
        print(json.dumps(to_dict(result, summary), indent=2))
        return 0

    _print_table(table_rows(result))
    print()
    print(f"Processed: {summary.total_count}  Accessible: {summary.accessible_count}  "
          f"With software: {summary.software_detected_count}  "
          f"Time: {summary.total_processing_seconds:.2f}s")
    for f in frequency_rows(summary):
        print(f"  {f['name']}: {f['count']} ({f['percent']}%)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
