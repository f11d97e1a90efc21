#!/usr/bin/env python3

# ruff: noqa: T201

from __future__ import annotations

import argparse
import logging
import sys
from datetime import date
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from caseflow.adapters.stats import FileStatsEngine
from caseflow.app import build_workflow
from caseflow.config import configure_logging, get_stats_config
from caseflow.domain.errors import CaseflowError
from caseflow.domain.exclusion import ALL_SCOPE, ResetScope, format_duration
from caseflow.domain.model import CaseType, Department, Stage
from caseflow.domain.stages import get_stage

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from caseflow.app import Workflow
    from caseflow.domain.exclusion import ReconciledCase
    from caseflow.domain.results import MutationResult

_WORKFLOW_STAGES = [
    stage.value for stage in (Stage.DESIGN, Stage.PRODUCTION, Stage.FINISHING, Stage.QC)
]


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Track lab cases through their workflow")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    commands = parser.add_subparsers(dest="command", required=True)

    create = commands.add_parser("create", help="Create a case")
    create.add_argument("case_number")
    create.add_argument(
        "--department",
        choices=[department.value for department in Department],
        default=Department.DIGITAL.value,
    )
    create.add_argument("--due", required=True, help="Due date as YYYY-MM-DD")
    create.add_argument("--priority", action="store_true")
    create.add_argument("--rush", action="store_true")
    create.add_argument("--hold", action="store_true")
    create.add_argument(
        "--type",
        dest="case_type",
        choices=[case_type.value for case_type in CaseType],
        default=CaseType.GENERAL.value,
    )
    create.add_argument(
        "--repair", action="store_true", help="Send a Digital case straight to Finishing"
    )

    edit = commands.add_parser("edit", help="Edit a case's details")
    edit.add_argument("case_id")
    edit.add_argument("--case-number")
    edit.add_argument("--department", choices=[department.value for department in Department])
    edit.add_argument("--due", help="Due date as YYYY-MM-DD")
    for flag in ("priority", "rush", "hold"):
        edit.add_argument(f"--{flag}", action=argparse.BooleanOptionalAction)
    edit.add_argument(
        "--type", dest="case_type", choices=[case_type.value for case_type in CaseType]
    )

    list_cmd = commands.add_parser("list", help="List live cases ordered by due date")
    list_cmd.add_argument("--department", choices=[department.value for department in Department])

    move = commands.add_parser("move", help="Move a Digital case to another stage")
    move.add_argument("case_id")
    move.add_argument("stage", choices=_WORKFLOW_STAGES)
    move.add_argument("--repair", action="store_true")

    stage2 = commands.add_parser("stage2", help="Toggle stage 2 on a Metal case")
    stage2.add_argument("case_id")

    exclude = commands.add_parser("exclude", help="Exclude cases from stage statistics")
    exclude.add_argument("case_ids", nargs="+")
    exclude.add_argument("--stage", choices=_WORKFLOW_STAGES, help="Omit to exclude from all")
    exclude.add_argument("--reason")

    include = commands.add_parser("include", help="Include a case in statistics again")
    include.add_argument("case_id")
    include.add_argument(
        "--override-automatic",
        action="store_true",
        help="Record an inclusion override without checking the stage statistics",
    )
    include.add_argument(
        "--stats-dir",
        help="Directory holding <stage>.json engine output, checked for an automatic outlier",
    )

    reset = commands.add_parser("reset-exclusions", help="Remove manual exclusions in bulk")
    reset.add_argument("--stage", choices=_WORKFLOW_STAGES, help="Omit to reset every stage")

    view = commands.add_parser("stage-view", help="Show a stage's statistics breakdown")
    view.add_argument("--stage", required=True, choices=_WORKFLOW_STAGES)
    view.add_argument(
        "--stats-dir",
        help="Directory holding <stage>.json engine output (default: $CASEFLOW_STATS_DIR)",
    )

    history = commands.add_parser("history", help="Show a case's history")
    history.add_argument("case_id")

    return parser.parse_args(list(argv))


def _parse_due(value: str) -> date:
    try:
        return date.fromisoformat(value.strip())
    except ValueError as exc:
        raise ValueError(f"Invalid due date: {value}") from exc


def _report(result: MutationResult) -> None:
    if not result.ok:
        raise CaseflowError(f"Update of case {result.case_id} failed: {result.error}")
    print(f"{result.case_id}: {' '.join(result.tags) or '-'}")
    if result.audit_text:
        print(f"  {result.audit_text}")


def _print_case_row(case: ReconciledCase) -> None:
    label = case.case_number or case.id
    line = f"  {label:<20} {format_duration(case.time_in_stage):>8}"
    if case.exclusion_type is not None:
        line += f"  [{case.exclusion_type}] {case.exclusion_reason or ''}"
    print(line)


def _run(workflow: Workflow, args: argparse.Namespace) -> None:  # noqa: C901, PLR0912, PLR0915
    command = args.command
    if command == "create":
        result = workflow.intake.create_case(
            args.case_number,
            Department(args.department),
            _parse_due(args.due),
            priority=args.priority,
            rush=args.rush,
            hold=args.hold,
            case_type=CaseType(args.case_type),
            needs_repair=args.repair,
        )
        for duplicate in workflow.intake.find_duplicates(args.case_number, result.case_id):
            print(f"Possible duplicate: {duplicate.case_number} ({duplicate.id})")
        _report(result)
    elif command == "edit":
        _report(
            workflow.intake.update_case(
                workflow.get_case(args.case_id),
                case_number=args.case_number,
                department=Department(args.department) if args.department else None,
                due=_parse_due(args.due) if args.due else None,
                priority=args.priority,
                rush=args.rush,
                hold=args.hold,
                case_type=CaseType(args.case_type) if args.case_type else None,
            )
        )
    elif command == "list":
        department = Department(args.department) if args.department else None
        for case in workflow.sync.cases(department):
            stage = get_stage(case)
            print(
                f"{case.due.isoformat()}  {case.case_number:<20} {case.department:<8} "
                f"{stage.display_name:<18} {case.id}"
            )
    elif command == "move":
        case = workflow.get_case(args.case_id)
        _report(workflow.change_stage(case, args.stage, is_repair=args.repair))
    elif command == "stage2":
        _report(workflow.toggle_stage2(workflow.get_case(args.case_id)))
    elif command == "exclude":
        if len(args.case_ids) == 1:
            scope = args.stage or ALL_SCOPE
            _report(workflow.toggle_exclusion(args.case_ids[0], scope, args.reason))
        else:
            results = workflow.batch_toggle_exclusions(
                args.case_ids, exclude=True, stage=args.stage, reason=args.reason
            )
            failed = [item for item in results if not item.ok]
            print(f"Excluded {len(results) - len(failed)} cases, {len(failed)} failed")
    elif command == "include":
        if args.stats_dir:
            workflow.stats_engine = FileStatsEngine(args.stats_dir)
        _report(
            workflow.toggle_exclusion(
                args.case_id, None, automatic=True if args.override_automatic else None
            )
        )
    elif command == "reset-exclusions":
        scope = ResetScope.STAGE if args.stage else ResetScope.ALL
        report = workflow.reset_exclusions(scope, stage=args.stage)
        if report.error is not None:
            raise CaseflowError(f"Reset failed: {report.error}")
        print(f"Scanned {report.scanned}, updated {report.updated}, failed {len(report.failed)}")
    elif command == "stage-view":
        stats_dir = args.stats_dir or get_stats_config().directory
        workflow.stats_engine = FileStatsEngine(stats_dir)
        view = workflow.load_stage_view(args.stage)
        if view.error:
            print(f"Statistics error: {view.error}")
        elif view.no_data:
            print("No statistics available for this stage")
        for title, cases in (
            ("Active", view.active),
            ("Completed", view.completed),
            ("Excluded", view.excluded),
        ):
            print(f"{title} ({len(cases)})")
            for case in cases:
                _print_case_row(case)
        print(
            f"Total {view.total}, in statistics {view.included_in_stats}, "
            f"manual exclusions {view.manual_exclusions}, "
            f"automatic exclusions {view.automatic_exclusions}"
        )
    elif command == "history":
        for entry in workflow.history(args.case_id):
            print(f"{entry.created_at.isoformat()}  {entry.user_name or '-':<12} {entry.text}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    parsed_args: argparse.Namespace
    try:
        parsed_args = _parse_args(sys.argv[1:] if argv is None else argv)
        if parsed_args.command == "create":
            _parse_due(parsed_args.due)
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(2)

    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.WARNING)
    try:
        workflow = build_workflow(start_sync=parsed_args.command == "list")
        _run(workflow, parsed_args)
    except Exception as e:  # noqa: BLE001
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    print("\nClosed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
