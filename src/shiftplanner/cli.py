"""Command-line interface for the shift planner."""

import argparse
import json
import logging
import sys
from datetime import date
from pathlib import Path
from typing import Optional

from shiftplanner.domain.dates import expand_month
from shiftplanner.domain.models import (
    DEFAULT_WORK_RULES,
    DayRequest,
    HalfRequest,
    InputFormatError,
    SavedSchedule,
    ScheduleInput,
    Shift,
    StaffMember,
)
from shiftplanner.domain.normalize import normalize_input
from shiftplanner.output.csv_exporter import CSVExporter
from shiftplanner.output.pdf_generator import PDFGenerator
from shiftplanner.output.xlsx_exporter import XLSXExporter
from shiftplanner.scheduling.scheduler import (
    InvalidScheduleInputError,
    ScheduleResult,
    Scheduler,
)
from shiftplanner.storage.store import ScheduleStore, build_saved_schedule
from shiftplanner.validation.validator import InputValidator


def create_sample_staff(count: int = 5) -> list[StaffMember]:
    """Create sample staff for demos.

    Args:
        count: Number of staff members to create.
    """
    names = [
        "Alice", "Bob", "Carol", "David", "Eve", "Frank", "Grace", "Henry",
        "Ivy", "Jack", "Kate", "Leo", "Mia", "Noah", "Olivia", "Paul",
    ]

    staff = []
    for i in range(count):
        name = names[i % len(names)]
        if i >= len(names):
            name = f"{name}{i // len(names) + 1}"

        member = StaffMember(id=f"S{i + 1:03d}", name=name)

        # Vary availability
        if i % 5 == 0:
            # Opener
            member.available_shifts = {Shift.OPEN, Shift.MIDDLE}
            member.required_shift = Shift.OPEN
        elif i % 5 == 1:
            # Closer
            member.available_shifts = {Shift.MIDDLE, Shift.CLOSE}
            member.preferred_shift = Shift.CLOSE
        elif i % 5 == 2:
            member.priority = {Shift.OPEN: 2, Shift.MIDDLE: 4, Shift.CLOSE: 3}

        staff.append(member)

    return staff


def create_sample_requests(staff: list[StaffMember], dates: list[date]) -> list[DayRequest]:
    """Scatter off days, half days and busy days across the range."""
    requests = []
    for index, d in enumerate(dates):
        request = DayRequest(schedule_date=d)
        for i, member in enumerate(staff):
            if (index + i) % 7 == 6:
                request.off_staff_ids.add(member.id)
            elif (index + i) % 11 == 5:
                request.half_staff.append(HalfRequest(staff_id=member.id, shift=Shift.MIDDLE))
        if d.weekday() in (4, 5):
            request.need_delta = 1.0
        requests.append(request)
    return requests


def _load_input(path: str) -> ScheduleInput:
    with open(path, encoding="utf-8") as handle:
        return normalize_input(json.load(handle))


def _print_result(schedule_input: ScheduleInput, result: ScheduleResult) -> None:
    names = {s.id: s.name for s in schedule_input.staff}

    print(f"\n{'=' * 60}")
    print(f"Schedule: {schedule_input.start_date} to {schedule_input.end_date}")
    print(f"{'=' * 60}")

    for assignment in result.assignments:
        parts = []
        for shift in Shift:
            entries = ", ".join(
                f"{names.get(e.staff_id, e.staff_id)}({e.unit:g})"
                for e in assignment.by_shift[shift]
            )
            parts.append(f"{shift.value}: {entries or '-'}")
        day_name = assignment.schedule_date.strftime("%a")
        print(f"  {assignment.schedule_date} ({day_name})  " + "  |  ".join(parts))

    print(f"\nStaff Summary:")
    for stat in result.stats:
        print(f"  {stat.name} ({stat.staff_id}): {stat.work_units:g} units, "
              f"{stat.full_days} full, {stat.half_days} half, {stat.off_days} off")

    if result.is_valid:
        print("\nValidation: PASSED")
    else:
        print(f"\nValidation: FAILED ({len(result.errors)} errors)")
        for error in result.errors[:5]:
            print(f"    - {error}")
        if len(result.errors) > 5:
            print(f"    ... and {len(result.errors) - 5} more errors")


def _export(
    saved: SavedSchedule,
    pdf_path: Optional[str],
    csv_dir: Optional[str],
    xlsx_path: Optional[str] = None,
) -> None:
    if pdf_path:
        PDFGenerator().generate(saved, pdf_path)
        print(f"PDF written: {pdf_path}")
    if csv_dir:
        for path in CSVExporter().write(saved, csv_dir):
            print(f"CSV written: {path}")
    if xlsx_path:
        XLSXExporter().generate(saved, xlsx_path)
        print(f"Excel written: {xlsx_path}")


def run_generate(args: argparse.Namespace) -> int:
    """Generate a schedule from a JSON input file."""
    try:
        schedule_input = _load_input(args.input)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError, InputFormatError) as e:
        print(f"Cannot read input: {e}", file=sys.stderr)
        return 2

    scheduler = Scheduler(seed=args.seed)
    try:
        result = scheduler.generate(schedule_input)
    except InvalidScheduleInputError as e:
        print("Input is invalid:", file=sys.stderr)
        for message in e.errors:
            print(f"    - {message}", file=sys.stderr)
        return 2

    _print_result(schedule_input, result)
    if not result.is_valid:
        # Never save or export a schedule that failed validation.
        return 1

    saved = build_saved_schedule(
        schedule_input,
        result,
        schedule_id=args.id,
        edit_source_schedule_id=args.edit_source,
    )
    if args.save:
        ScheduleStore(args.save).upsert(saved)
        print(f"Saved schedule {saved.id} to {args.save}")
    if args.output_json:
        Path(args.output_json).write_text(
            json.dumps(saved.to_dict(), ensure_ascii=False, indent=2), encoding="utf-8"
        )
        print(f"JSON written: {args.output_json}")
    _export(saved, args.pdf, args.csv_dir, args.xlsx)
    return 0


def run_validate(args: argparse.Namespace) -> int:
    """Check an input file without generating."""
    try:
        schedule_input = _load_input(args.input)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError, InputFormatError) as e:
        print(f"Cannot read input: {e}", file=sys.stderr)
        return 2

    result = InputValidator().validate(schedule_input)
    if result.is_valid:
        print("Input: VALID")
    else:
        print(f"Input: INVALID ({len(result.errors)} errors)")
        for message in result.messages:
            print(f"    - {message}")
    for warning in result.warnings:
        print(f"    warning: {warning}")
    return 0 if result.is_valid else 1


def run_demo(args: argparse.Namespace) -> int:
    """Generate a demo schedule for one month."""
    today = date.today()
    year = args.year or today.year
    month = args.month or today.month
    print(f"Generating demo schedule for {args.count} staff, {year}-{month:02d}...")

    staff = create_sample_staff(args.count)
    schedule_input = ScheduleInput.for_month(
        year,
        month,
        work_rules=DEFAULT_WORK_RULES,
        staff=staff,
        requests=create_sample_requests(staff, expand_month(year, month)),
    )

    try:
        result = Scheduler(seed=args.seed).generate(schedule_input)
    except InvalidScheduleInputError as e:
        print(f"Demo input is invalid: {e}", file=sys.stderr)
        return 2

    _print_result(schedule_input, result)
    if result.is_valid and args.output:
        PDFGenerator().generate(build_saved_schedule(schedule_input, result), args.output)
        print(f"\nPDF created: {args.output}")
    return 0 if result.is_valid else 1


def run_export(args: argparse.Namespace) -> int:
    """Export a stored schedule."""
    saved = ScheduleStore(args.store).get(args.id)
    if saved is None:
        print(f"No schedule {args.id} in {args.store}", file=sys.stderr)
        return 1
    if not (args.pdf or args.csv_dir or args.xlsx):
        print("Nothing to do: pass --pdf, --csv-dir or --xlsx", file=sys.stderr)
        return 1
    _export(saved, args.pdf, args.csv_dir, args.xlsx)
    return 0


def run_list(args: argparse.Namespace) -> int:
    """List stored schedules, newest first."""
    store = ScheduleStore(args.store)
    schedules = store.filter_by_year(args.year) if args.year else store.load()
    if not schedules:
        print("No saved schedules.")
        return 0
    for saved in schedules:
        source = f" (edited from {saved.edit_source_schedule_id})" if saved.edit_source_schedule_id else ""
        print(f"  {saved.id}  {saved.start_date} ~ {saved.end_date}  "
              f"{len(saved.staff)} staff  updated {saved.updated_at:%Y-%m-%d %H:%M}{source}")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for CLI."""
    parser = argparse.ArgumentParser(
        description="Shift Planner - daily open/middle/close shift assignment",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s demo                            Demo for the current month
  %(prog)s demo --count 8 --seed 1         Reproducible demo with 8 staff
  %(prog)s validate input.json             Check an input file
  %(prog)s generate input.json --pdf s.pdf Generate and render a PDF
  %(prog)s generate input.json --save schedules.json
  %(prog)s list schedules.json             List saved schedules
  %(prog)s export schedules.json ID --csv-dir out/
  %(prog)s export schedules.json ID --xlsx s.xlsx
        """,
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    parser.add_argument("--quiet", "-q", action="store_true", help="Only log errors")

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    generate_parser = subparsers.add_parser("generate", help="Generate a schedule from JSON input")
    generate_parser.add_argument("input", help="Input JSON file")
    generate_parser.add_argument("--seed", type=int, help="Seed for tie-breaking")
    generate_parser.add_argument("--save", help="Schedule store file to save into")
    generate_parser.add_argument("--id", help="Id to save under (replaces an existing one)")
    generate_parser.add_argument("--edit-source", help="Id of the schedule this edits")
    generate_parser.add_argument("--output-json", help="Write the saved-schedule JSON here")
    generate_parser.add_argument("--pdf", help="Output PDF file path")
    generate_parser.add_argument("--csv-dir", help="Directory for CSV exports")
    generate_parser.add_argument("--xlsx", help="Output Excel file path")

    validate_parser = subparsers.add_parser("validate", help="Validate a JSON input file")
    validate_parser.add_argument("input", help="Input JSON file")

    demo_parser = subparsers.add_parser("demo", help="Run a demo month")
    demo_parser.add_argument(
        "--count", "-c",
        type=int,
        default=5,
        help="Number of staff to generate (default: 5)",
    )
    demo_parser.add_argument("--year", type=int, help="Year (default: current)")
    demo_parser.add_argument("--month", type=int, help="Month 1-12 (default: current)")
    demo_parser.add_argument("--seed", type=int, help="Seed for tie-breaking")
    demo_parser.add_argument("--output", "-o", help="Output PDF file path")

    export_parser = subparsers.add_parser("export", help="Export a saved schedule")
    export_parser.add_argument("store", help="Schedule store file")
    export_parser.add_argument("id", help="Schedule id")
    export_parser.add_argument("--pdf", help="Output PDF file path")
    export_parser.add_argument("--csv-dir", help="Directory for CSV exports")
    export_parser.add_argument("--xlsx", help="Output Excel file path")

    list_parser = subparsers.add_parser("list", help="List saved schedules")
    list_parser.add_argument("store", help="Schedule store file")
    list_parser.add_argument("--year", type=int, help="Only schedules of this year")

    args = parser.parse_args(argv)

    level = logging.WARNING
    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.ERROR
    logging.basicConfig(level=level, format="%(asctime)s - %(levelname)s - %(message)s")

    if args.command == "generate":
        return run_generate(args)
    elif args.command == "validate":
        return run_validate(args)
    elif args.command == "demo":
        return run_demo(args)
    elif args.command == "export":
        return run_export(args)
    elif args.command == "list":
        return run_list(args)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
