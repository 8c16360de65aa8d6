from __future__ import annotations

import argparse
import logging
import sys
import threading
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING
from uuid import UUID

from dotenv import load_dotenv

from rehabfinder.app import (
    apply_duplicate_cleanup,
    close_adapters,
    nearest_centres,
    reconcile_centres,
    scan_duplicates,
    set_centre_coordinates,
)
from rehabfinder.config import configure_logging
from rehabfinder.domain.deduplication import normalize_name
from rehabfinder.domain.mapping import format_distance
from rehabfinder.domain.model import Coordinates
from rehabfinder.domain.reconciliation import export_outcomes_csv

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)

_CANCEL = threading.Event()


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Maintain the rehabilitation centre directory")
    subparsers = parser.add_subparsers(dest="command", required=True)

    geocode = subparsers.add_parser("geocode", help="Resolve coordinates for active centres")
    geocode.add_argument(
        "--batch-size",
        type=int,
        default=5,
        help="Maximum number of centres to attempt in this run",
    )
    geocode.add_argument(
        "--country-id",
        type=str,
        help="Only consider centres in this country",
    )
    geocode.add_argument(
        "--include-resolved",
        action="store_true",
        help="Also re-resolve centres that already have coordinates",
    )
    geocode.add_argument(
        "--update-address",
        action="store_true",
        help="Replace the stored address with the provider's normalized address",
    )
    geocode.add_argument(
        "--export",
        type=Path,
        help="Write per-centre outcomes to this CSV file",
    )

    duplicates = subparsers.add_parser("duplicates", help="Find and remove duplicate centres")
    duplicates_sub = duplicates.add_subparsers(dest="duplicates_command", required=True)
    duplicates_sub.add_parser("scan", help="List duplicate groups without changing anything")
    duplicates_apply = duplicates_sub.add_parser("apply", help="Delete newer duplicates")
    selection = duplicates_apply.add_mutually_exclusive_group(required=True)
    selection.add_argument(
        "--all",
        action="store_true",
        help="Clean up every duplicate group",
    )
    selection.add_argument(
        "--name",
        action="append",
        help="Clean up the group with this name (repeatable)",
    )

    nearest = subparsers.add_parser("nearest", help="List centres nearest to a location")
    nearest.add_argument("--lat", type=float, required=True, help="Viewer latitude")
    nearest.add_argument("--lng", type=float, required=True, help="Viewer longitude")
    nearest.add_argument("--limit", type=int, default=10, help="Number of centres to list")

    set_coordinates = subparsers.add_parser(
        "set-coordinates", help="Assign coordinates to one centre"
    )
    set_coordinates.add_argument("--centre-id", type=str, required=True, help="Centre id")
    set_coordinates.add_argument("--lat", type=float, required=True, help="Latitude")
    set_coordinates.add_argument("--lng", type=float, required=True, help="Longitude")

    return parser.parse_args(list(argv))


def _parse_uuid(value: str) -> UUID:
    try:
        return UUID(value)
    except ValueError as exc:
        raise ValueError(f"Invalid UUID: {value}") from exc


def _run_geocode(args: argparse.Namespace) -> None:
    if args.batch_size < 1:
        raise ValueError("--batch-size must be at least 1")
    run = reconcile_centres(
        country_id=_parse_uuid(args.country_id) if args.country_id else None,
        batch_size=args.batch_size,
        include_already_resolved=args.include_resolved,
        update_address=args.update_address,
        cancel=_CANCEL,
    )
    log.info(
        "Geocoding finished: total=%s, processed=%s, successful=%s, failed=%s, skipped=%s",
        run.candidates,
        run.processed,
        run.successful,
        run.failed,
        run.skipped,
    )
    for centre_id, reason in run.failures():
        log.info("  %s: %s", centre_id, reason)
    if run.incomplete:
        log.warning("Run incomplete (%s); rerun later to continue", run.stop_reason)
    if args.export is not None:
        with args.export.open("w", newline="", encoding="utf-8") as stream:
            rows = export_outcomes_csv(run.outcomes, stream)
        log.info("Wrote %d outcome(s) to %s", rows, args.export)


def _run_duplicates(args: argparse.Namespace) -> None:
    groups, summary = scan_duplicates()
    if args.duplicates_command == "scan":
        print(
            f"{summary.total_records} record(s), {summary.duplicate_groups} duplicate group(s), "
            f"{summary.records_to_delete} to delete"
        )
        for group in groups:
            print(f"{group.normalized_name} ({len(group.members)})")
            for index, member in enumerate(group.members):
                action = "keep" if index == 0 else "delete"
                print(f"  [{action}] {member.id} {member.name!r} {member.created_at.isoformat()}")
        return

    if not args.all:
        wanted = {normalize_name(name) for name in args.name}
        groups = [group for group in groups if group.normalized_name in wanted]
    if not groups:
        log.info("No duplicate groups selected")
        return
    report = apply_duplicate_cleanup(groups)
    log.info(
        "Deleted %d of %d record(s); kept %d",
        report.deleted_count,
        len(report.requested_ids),
        len(report.kept_ids),
    )
    if not report.complete:
        log.error("Cleanup stopped early: %s", report.error)
        if report.partially_resolved_groups:
            log.warning(
                "Groups left partially cleaned: %s",
                ", ".join(report.partially_resolved_groups),
            )
        raise RuntimeError("Duplicate cleanup incomplete")


def _run_nearest(args: argparse.Namespace) -> None:
    viewer = Coordinates(args.lat, args.lng)
    for centre, distance in nearest_centres(viewer, limit=args.limit):
        label = format_distance(distance) or "location unknown"
        print(f"{centre.name} - {label}")


def _run_set_coordinates(args: argparse.Namespace) -> None:
    centre_id = _parse_uuid(args.centre_id)
    if not set_centre_coordinates(centre_id, args.lat, args.lng):
        raise ValueError(f"Centre not found: {centre_id}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)

    try:
        if parsed_args.command == "geocode":
            _run_geocode(parsed_args)
        elif parsed_args.command == "duplicates":
            _run_duplicates(parsed_args)
        elif parsed_args.command == "nearest":
            _run_nearest(parsed_args)
        elif parsed_args.command == "set-coordinates":
            _run_set_coordinates(parsed_args)
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)
    except Exception:
        log.exception("Fatal error")
        sys.exit(1)
    finally:
        close_adapters()


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C): cancel a running reconciliation, exit on the second press."""
    if _CANCEL.is_set():
        log.info("Closed by user (Ctrl+C)")
        sys.exit(0)
    log.info("Cancelling after the current centre (Ctrl+C again to quit)")
    _CANCEL.set()


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
