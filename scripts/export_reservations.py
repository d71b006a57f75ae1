"""Export Paylight X appointments as SmartCall RPA reservations (JSON).

Logs in to Paylight with the credentials from .env, fetches every event group
in the date range, converts active bookings to SmartCall reservations, and
prints the JSON array to stdout.

Run with: python scripts/export_reservations.py                   # today
Day:      python scripts/export_reservations.py 2025-01-10
Month:    python scripts/export_reservations.py 2025-01
Range:    python scripts/export_reservations.py 2025-01 2025-03    # Jan 1 - Mar 31
Cancel:   python scripts/export_reservations.py 2025-01-10 --operation cancel
Job body: python scripts/export_reservations.py 2025-01 --sync-cycle --callback-url https://...

Environment:
  PAYLIGHT_ID, PAYLIGHT_PW, PAYLIGHT_STORE (required)
  PAYLIGHT_PER_PAGE, LOG_LEVEL, LOG_JSON (optional)

Exit codes:
  0 = success (JSON on stdout, or file written with --output)
  1 = error (message on stderr)
"""

import argparse
import json
import os
import sys
from pathlib import Path

import requests
from dotenv import load_dotenv

load_dotenv()

# Add project root to path for src imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from src.paylight.auth import TokenManager  # noqa: E402
from src.paylight.client import PaylightClient  # noqa: E402
from src.paylight.config import get_config  # noqa: E402
from src.paylight.converter import (  # noqa: E402
    build_sync_cycle_request,
    convert_event_groups,
    reservations_to_json,
)
from src.paylight.logging import get_logger, setup_logging  # noqa: E402
from src.paylight.utils import resolve_date_range  # noqa: E402

log = get_logger(__name__)


def _id_list(value: str) -> list[int]:
    """argparse type for comma-separated integer IDs ("3,5,8")."""
    try:
        return [int(part) for part in value.split(",") if part.strip()]
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"expected comma-separated integers, got {value!r}"
        ) from None


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments using argparse."""
    parser = argparse.ArgumentParser(
        description="Export Paylight X appointments as SmartCall reservations.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "start",
        nargs="?",
        default=None,
        help="YYYY-MM-DD or YYYY-MM (default: today).",
    )
    parser.add_argument(
        "end",
        nargs="?",
        default=None,
        help="YYYY-MM-DD or YYYY-MM; YYYY-MM means the end of that month.",
    )
    parser.add_argument(
        "--operation",
        choices=["create", "cancel"],
        default="create",
        help="SmartCall operation for every reservation (default: create).",
    )
    parser.add_argument(
        "--staff-ids",
        type=_id_list,
        default=None,
        help="Only appointments for these staff IDs (comma-separated).",
    )
    parser.add_argument(
        "--location-ids",
        type=_id_list,
        default=None,
        help="Only appointments in these location IDs (comma-separated).",
    )
    parser.add_argument(
        "--per",
        type=int,
        default=None,
        help="Page size for the event group listing (default: PAYLIGHT_PER_PAGE).",
    )
    parser.add_argument(
        "--no-phone",
        action="store_true",
        help="Skip the per-customer detail lookup (phone stays empty).",
    )
    parser.add_argument(
        "--sync-cycle",
        action="store_true",
        help="Wrap reservations in a SmartCall sync-cycle request body.",
    )
    parser.add_argument(
        "--callback-url",
        type=str,
        default="",
        help="SmartCall result callback URL (required with --sync-cycle).",
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Write JSON to this file instead of stdout.",
    )
    args = parser.parse_args(argv)
    if args.sync_cycle and not args.callback_url:
        parser.error("--callback-url is required with --sync-cycle")
    return args


def main(args: argparse.Namespace) -> None:
    # Stderr logging first so a bad config can't print to stdout
    setup_logging()
    config = get_config()
    setup_logging(json_output=config.log_json, log_level=config.log_level)

    credentials = config.credentials()
    date_from, date_to = resolve_date_range(args.start, args.end)

    http = requests.Session()
    token_manager = TokenManager(credentials, http=http)
    client = PaylightClient(token_manager, http=http)

    token_manager.authenticate()
    log.info(
        "export_started",
        store_id=credentials.store_id,
        date_from=date_from.isoformat(),
        date_to=date_to.isoformat(),
    )

    event_groups = client.get_all_event_groups(
        date_from,
        date_to,
        per=args.per or config.paylight_per_page,
        staff_ids=args.staff_ids,
        location_ids=args.location_ids,
    )
    reservations = convert_event_groups(
        event_groups,
        operation=args.operation,
        customers=None if args.no_phone else client,
    )

    if args.sync_cycle:
        request = build_sync_cycle_request(
            reservations,
            external_shop_id=credentials.store_id,
            callback_url=args.callback_url,
            date_from=date_from,
            date_to=date_to,
        )
        output = json.dumps(
            request.model_dump(mode="json", exclude_none=True),
            indent=2,
            ensure_ascii=False,
        )
    else:
        output = reservations_to_json(reservations)

    if args.output:
        output_file = Path(args.output)
        output_file.parent.mkdir(parents=True, exist_ok=True)
        output_file.write_text(output + "\n", encoding="utf-8")
        log.info("export_written", path=str(output_file), count=len(reservations))
    else:
        print(output)


if __name__ == "__main__":
    args = _parse_args()
    try:
        main(args)
    except Exception as e:
        log.error("export_failed", error=str(e), type=type(e).__name__)
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)
