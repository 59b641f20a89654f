"""Lab Result Entry Session Replay CLI.

Usage:
    python -m lab_results --input <session.json> [options]
    python -m lab_results --batch <dir> [options]
"""

from __future__ import annotations
import argparse
import json
import logging
import sys
from pathlib import Path


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lab_results",
        description="Replay recorded lab result entry sessions and compile their reports",
    )
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument(
        "--input",
        metavar="PATH",
        help="Path to a single session JSON file",
    )
    group.add_argument(
        "--batch", metavar="DIR", help="Directory of session JSON files to replay"
    )

    parser.add_argument(
        "--output",
        metavar="PATH",
        default=None,
        help="Write output to file (default: stdout)",
    )
    parser.add_argument(
        "--store",
        metavar="DIR",
        default=None,
        help="Keep drafts, rosters and reports as JSON files under DIR (default: in-memory)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Print action-by-action progress to stderr",
    )
    parser.add_argument(
        "--format",
        choices=["json", "summary"],
        default="json",
        help="Output format: json (machine-readable) or summary (human-readable table)",
    )
    return parser


COLUMN_WIDTHS = (24, 10, 12, 20, 14)


def _table_row(cells, fill: str = " ") -> str:
    padded = (
        f"{fill}{cell:{fill}<{width}}{fill}" for cell, width in zip(cells, COLUMN_WIDTHS)
    )
    return "|" + "|".join(padded) + "|"


def format_summary(result) -> str:
    """Format SessionResult as human-readable text tables, one per report."""
    lines = []
    session_name = Path(result.session_path).name
    lines.append(f"Lab Session -- {session_name}")
    lines.append("=" * (len(lines[0])))

    if result.error:
        lines.append(f"Error: {result.error}")

    if result.roster:
        collected = sum(1 for t in result.roster if t.status.collected)
        lines.append(f"Roster: {collected} of {len(result.roster)} tests collected")

    header = _table_row(("Parameter", "Value", "Unit", "Reference", "Flag"))
    separator = _table_row(("",) * len(COLUMN_WIDTHS), fill="-")

    for report in result.reports:
        lines.append("")
        lines.append(f"{report.test_name} (report {report.report_id})")
        if report.patient.name:
            lines.append(f"Patient: {report.patient.name}")
        lines.append(f"Collected by: {report.collected_by}")
        lines.append(header)
        lines.append(separator)

        for param in report.parameters:
            flag_str = (
                param.classification.value.upper()
                if param.classification.is_abnormal
                else ""
            )
            lines.append(
                _table_row(
                    (param.label, param.value, param.unit, param.ref_range, flag_str)
                )
            )

        lines.append(f"Flagged: {len(report.abnormal_parameters)} abnormal")

    for rejection in result.rejections:
        lines.append("")
        lines.append(f"Rejected {rejection.test_id} ({rejection.reason}): {rejection.message}")

    if result.notifications:
        lines.append("")
        lines.append("Notifications:")
        for note in result.notifications:
            lines.append(f"  [{note.code}] {note.message}")

    return "\n".join(lines)


def main() -> int:
    parser = build_parser()
    args = parser.parse_args()

    # Configure logging
    log_level = logging.DEBUG if args.verbose else logging.WARNING
    logging.basicConfig(
        level=log_level, format="%(levelname)s: %(message)s", stream=sys.stderr
    )

    from lab_results.pipeline.runner import build_stores, run_session
    from lab_results.schemas.config import WorkbenchConfig

    config = WorkbenchConfig()
    if args.store:
        config.store_dir = args.store
    stores = build_stores(config.store_dir if args.store else None)

    results = []

    if args.input:
        input_path = Path(args.input)
        if not input_path.exists():
            print(f"Error: input file not found: {args.input}", file=sys.stderr)
            return 2
        results = [run_session(str(input_path), stores, config)]

    elif args.batch:
        batch_dir = Path(args.batch)
        if not batch_dir.is_dir():
            print(f"Error: batch directory not found: {args.batch}", file=sys.stderr)
            return 2

        session_files = sorted(batch_dir.glob("*.json"))
        if not session_files:
            print(f"Error: no session files found in {args.batch}", file=sys.stderr)
            return 2

        for session_path in session_files:
            results.append(run_session(str(session_path), stores, config))

    # Format output
    if args.format == "summary":
        output_text = "\n\n".join(format_summary(r) for r in results)
    else:
        if len(results) == 1:
            output_data = results[0].model_dump(mode="json")
        else:
            output_data = [r.model_dump(mode="json") for r in results]
        output_text = json.dumps(output_data, indent=2)

    if args.output:
        Path(args.output).write_text(output_text)
    else:
        print(output_text)

    if any(not r.success for r in results):
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
