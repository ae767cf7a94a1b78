#!/usr/bin/env python3
"""
Unified CLI for customer service history tracking.

Commands:
  status  - Show predicted maintenance urgency per customer and service type
  due     - Show only maintenance that has reached its early threshold
  history - View service records with filters and sort order
  log     - Add a new service record
  update  - Change fields of an existing record
  delete  - Remove a record
  cycles  - List the maintenance cycle table
"""

import argparse
import asyncio
import sys
from datetime import date
from pathlib import Path
from tabulate import tabulate
from typing import List, Optional

from servicetrack import (
    ChangeBroadcaster,
    EntityCache,
    MaintenanceStatus,
    RecordFilter,
    ServiceRecord,
    ServiceRecordInput,
    SortSpec,
    Urgency,
    YamlFileGateway,
    summarize_by_year,
)
from servicetrack.config import Settings, configure_logging
from servicetrack.pipeline import SORT_FIELDS

# =============================================================================
# Formatting helpers
# =============================================================================


def format_amount(amount: Optional[float]) -> str:
    """Format amount for display."""
    return f"{amount:,.0f}" if amount is not None else "-"


def format_years(years: float) -> str:
    return f"{years:.1f}y"


def format_progress(percentage: float, width: int = 10) -> str:
    """Text progress bar, e.g. '[#####-----]  50%'."""
    filled = int(percentage / 100 * width)
    return f"[{'#' * filled}{'-' * (width - filled)}] {percentage:3.0f}%"


def truncate(text: Optional[str], max_len: int = 30) -> str:
    """Truncate text with ellipsis if too long."""
    if text is None:
        return "-"
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."


def print_message(level: str, text: str) -> None:
    if level == "error":
        print(f"Error: {text}")


# =============================================================================
# Status commands
# =============================================================================


def make_status_table(statuses: List[MaintenanceStatus]) -> List[List[str]]:
    """Convert maintenance statuses to table rows."""
    rows = []
    for status in statuses:
        rows.append(
            [
                str(status.customer_id),
                status.service_type,
                status.last_service_date.isoformat(),
                format_years(status.years_elapsed),
                status.next_recommended_date.isoformat(),
                format_progress(status.progress_percentage),
            ]
        )
    return rows


STATUS_HEADERS = ["Customer", "Service", "Last Done", "Elapsed", "Next", "Progress"]


def print_statuses(statuses: List[MaintenanceStatus]) -> None:
    for urgency in (Urgency.OVERDUE, Urgency.HIGH, Urgency.MEDIUM, Urgency.LOW):
        group = [s for s in statuses if s.urgency == urgency]
        if group:
            print(f"{urgency.value.upper()}:")
            print(tabulate(make_status_table(group), headers=STATUS_HEADERS, tablefmt="simple"))
            print()


async def cmd_status(args, cache: EntityCache, settings: Settings):
    """Show predicted maintenance urgency."""
    result = await cache.fetch(silent=True)
    if not result.success:
        print(f"Error: {result.error.message}")
        return 1

    statuses = cache.maintenance(settings.cycle_table())
    print(f"Records: {len(cache.records)}")
    print(f"Predictions: {len(statuses)}")
    print()
    if not statuses:
        print("No service records to predict from.")
        return 0
    print_statuses(statuses)
    return 0


async def cmd_due(args, cache: EntityCache, settings: Settings):
    """Show maintenance that has reached its early threshold."""
    result = await cache.fetch(silent=True)
    if not result.success:
        print(f"Error: {result.error.message}")
        return 1

    statuses = cache.due_maintenance(settings.cycle_table(), categories=args.category)
    if args.category:
        print(f"Filter: CATEGORIES: {', '.join(args.category)}")
    if not statuses:
        print("No maintenance due.")
        return 0
    print_statuses(statuses)

    if args.years:
        rows = []
        for summary in summarize_by_year(statuses, date.today().year, args.years):
            breakdown = ", ".join(f"{k}: {v}" for k, v in sorted(summary.by_category.items()))
            rows.append([summary.year, summary.total, breakdown or "-"])
        print(tabulate(rows, headers=["By Year", "Due", "Categories"], tablefmt="simple"))
    return 0


# =============================================================================
# History command
# =============================================================================


def make_history_table(records: List[ServiceRecord]) -> List[List[str]]:
    """Convert service records to table rows."""
    rows = []
    for record in records:
        rows.append(
            [
                str(record.record_id),
                str(record.customer_id),
                str(record.service_date),
                record.service_type or "-",
                format_amount(record.amount),
                record.status or "-",
                truncate(record.service_description),
            ]
        )
    return rows


async def cmd_history(args, cache: EntityCache, settings: Settings):
    """View service records."""
    result = await cache.fetch(silent=True)
    if not result.success:
        print(f"Error: {result.error.message}")
        return 1

    cache.set_filters(
        customer_id=args.customer,
        service_type=args.type,
        date_from=args.since,
        date_to=args.until,
        min_amount=args.min_amount,
        max_amount=args.max_amount,
        status=args.status,
    )
    cache.set_sort(args.sort, "asc" if args.asc else "desc")
    records = cache.visible

    total = sum(r.amount or 0 for r in records)
    print(f"Total records: {len(cache.records)}")
    if cache.filters.is_active:
        print(f"Showing: {len(records)} (filtered)")
    if total > 0:
        print(f"Total amount: {total:,.0f}")
    print()

    if not records:
        print("No service records found.")
        return 0

    headers = ["ID", "Customer", "Date", "Service", "Amount", "Status", "Description"]
    print(tabulate(make_history_table(records), headers=headers, tablefmt="simple"))
    return 0


# =============================================================================
# Mutation commands
# =============================================================================


def input_from_args(args) -> ServiceRecordInput:
    return ServiceRecordInput(
        customer_id=getattr(args, "customer", None),
        service_date=args.date,
        service_type=args.type,
        service_description=args.description,
        amount=args.amount,
        status=args.status,
        photo_path=args.photo,
    )


async def cmd_log(args, cache: EntityCache, settings: Settings):
    """Add a new service record."""
    data = input_from_args(args)
    if data.service_date is None:
        data.service_date = date.today().isoformat()

    print(f"Adding service record to {args.data_file}:")
    print(f"  Customer: {data.customer_id}")
    print(f"  Date:     {data.service_date}")
    if data.service_type:
        print(f"  Service:  {data.service_type}")
    if data.amount is not None:
        print(f"  Amount:   {format_amount(data.amount)}")
    print()

    if args.dry_run:
        print("(dry run - no changes made)")
        return 0

    result = await cache.create(data)
    if not result.success:
        return 1
    print(f"Record {result.data.record_id} saved.")
    return 0


async def cmd_update(args, cache: EntityCache, settings: Settings):
    """Change fields of an existing record."""
    result = await cache.update(args.record_id, input_from_args(args))
    if not result.success:
        return 1
    print(f"Record {args.record_id} updated.")
    return 0


async def cmd_delete(args, cache: EntityCache, settings: Settings):
    """Remove a record."""
    result = await cache.delete(args.record_id)
    if not result.success:
        return 1
    print(f"Record {args.record_id} deleted.")
    return 0


async def cmd_cycles(args, cache: EntityCache, settings: Settings):
    """List the maintenance cycle table."""
    table = settings.cycle_table()
    rows = [
        [name, cycle.early, cycle.standard, cycle.late]
        for name, cycle in sorted(table.items())
    ]
    print(tabulate(rows, headers=["Category", "Early", "Standard", "Late"], tablefmt="simple"))
    return 0


COMMANDS = {
    "status": cmd_status,
    "due": cmd_due,
    "history": cmd_history,
    "log": cmd_log,
    "update": cmd_update,
    "delete": cmd_delete,
    "cycles": cmd_cycles,
}


async def run(args, settings: Settings) -> int:
    broadcaster = ChangeBroadcaster()
    gateway = YamlFileGateway(args.data_file)
    with EntityCache(gateway, broadcaster, on_message=print_message, name="cli") as cache:
        return await COMMANDS[args.command](args, cache, settings)


# =============================================================================
# Main
# =============================================================================


def record_id(value: str):
    """Record ids are integers when they look like one."""
    return int(value) if value.isdigit() else value


def add_record_fields(parser, customer_required: bool) -> None:
    if customer_required:
        parser.add_argument("--customer", type=record_id, required=True, help="Customer id")
    parser.add_argument("--date", type=str, help="Service date (YYYY-MM-DD)")
    parser.add_argument("--type", type=str, help="Service type (e.g., 'exterior-paint')")
    parser.add_argument("--description", type=str, help="Description of the work")
    parser.add_argument("--amount", type=float, help="Amount charged")
    parser.add_argument(
        "--status",
        choices=["completed", "pending", "cancelled", "in-progress"],
        help="Record status",
    )
    parser.add_argument("--photo", type=str, help="Path to a photo of the work")


def main(argv=None):
    settings = Settings()
    parser = argparse.ArgumentParser(
        description="Customer service history tracker",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s records.yaml status
  %(prog)s records.yaml due --category roof-repair --category gutter --years 5
  %(prog)s records.yaml history --customer 1 --sort amount
  %(prog)s records.yaml log --customer 1 --type exterior-paint --amount 350000
  %(prog)s records.yaml update 3 --status cancelled
  %(prog)s records.yaml delete 3
""",
    )
    parser.add_argument(
        "data_file",
        type=Path,
        nargs="?",
        default=settings.data_file,
        help="Path to records YAML file (default: $SERVICE_TRACK_DATA or records.yaml)",
    )
    parser.add_argument("--log-level", default=settings.log_level, help="Logging level")

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("status", help="Show predicted maintenance urgency")

    due_parser = subparsers.add_parser("due", help="Show maintenance that is due")
    due_parser.add_argument(
        "--category",
        action="append",
        help="Restrict to a cycle table category (repeatable)",
    )
    due_parser.add_argument(
        "--years", type=int, default=0, help="Also summarize due counts for N years ahead"
    )

    history_parser = subparsers.add_parser("history", help="View service records")
    history_parser.add_argument("--customer", type=record_id, help="Filter to a customer id")
    history_parser.add_argument("--type", type=str, help="Filter by service type (substring)")
    history_parser.add_argument("--since", type=str, help="Only records on or after date")
    history_parser.add_argument("--until", type=str, help="Only records on or before date")
    history_parser.add_argument("--min-amount", type=float, help="Minimum amount")
    history_parser.add_argument("--max-amount", type=float, help="Maximum amount")
    history_parser.add_argument("--status", type=str, help="Filter by status")
    history_parser.add_argument(
        "--sort", choices=SORT_FIELDS, default="service_date", help="Sort field (default: service_date)"
    )
    history_parser.add_argument("--asc", action="store_true", help="Sort ascending instead of descending")

    log_parser = subparsers.add_parser("log", help="Add a new service record")
    add_record_fields(log_parser, customer_required=True)
    log_parser.add_argument(
        "--dry-run", action="store_true", help="Show what would be added without saving"
    )

    update_parser = subparsers.add_parser("update", help="Change fields of a record")
    update_parser.add_argument("record_id", type=record_id, help="Record id")
    add_record_fields(update_parser, customer_required=False)

    delete_parser = subparsers.add_parser("delete", help="Remove a record")
    delete_parser.add_argument("record_id", type=record_id, help="Record id")

    subparsers.add_parser("cycles", help="List the maintenance cycle table")

    args = parser.parse_args(argv)
    configure_logging(args.log_level.upper())

    if args.command not in ("log", "cycles") and not args.data_file.exists():
        print(f"Error: File not found: {args.data_file}")
        return 1

    return asyncio.run(run(args, settings))


if __name__ == "__main__":
    sys.exit(main() or 0)
