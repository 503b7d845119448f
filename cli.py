"""
Window Configurator command line.

Usage:
    # Price a window without the web UI
    python cli.py configure --width 100 --height 100 \
        --select material=pvc --select opening=battente \
        --select glass=double --select color=white

    # Import a supplier PDF into the persisted catalog
    python cli.py import-catalog catalogo_profili.pdf

    # Inspect or restore the catalog
    python cli.py show-catalog --category material
    python cli.py reset-catalog --yes
"""

import argparse
import asyncio
import json
import os
import sys

from dotenv import load_dotenv
load_dotenv(os.path.join(os.path.dirname(os.path.abspath(__file__)), ".env"))

import structlog

from config import configure_logging
from exceptions import AppError, ImportInputError, QuoteValidationError
from services.session_service import ConfiguratorSession

logger = structlog.get_logger(__name__)

EXIT_OK = 0
EXIT_UNEXPECTED = 1
EXIT_USAGE = 2

# AppError.code -> process exit code
EXIT_CODES = {
    "QUOTE_VALIDATION_ERROR": 3,
    "CATEGORY_NOT_FOUND": 4,
    "OPTION_NOT_FOUND": 5,
    "IMPORT_INPUT_ERROR": 6,
    "EXTRACTION_ERROR": 7,
    "IMPORT_IN_PROGRESS": 8,
    "NO_DATA_FOUND": 9,
    "DATABASE_ERROR": 10,
}

SEPARATOR = "=" * 60


def exit_code_for(error: AppError) -> int:
    return EXIT_CODES.get(error.code, EXIT_UNEXPECTED)


def parse_selection(raw: str) -> tuple[str, str]:
    """Split a CATEGORY=OPTION argument."""
    category_id, sep, option_id = raw.partition("=")
    if not sep or not category_id.strip() or not option_id.strip():
        raise argparse.ArgumentTypeError(
            f"Invalid selection '{raw}'. Use CATEGORY=OPTION, e.g. material=pvc"
        )
    return category_id.strip(), option_id.strip()


def emit(payload: dict, as_json: bool) -> None:
    if as_json:
        print(json.dumps(payload, indent=2, ensure_ascii=False))


# ─────────────────────────────────────────────────────────────
# COMMANDS
# ─────────────────────────────────────────────────────────────

def cmd_configure(session: ConfiguratorSession, args) -> int:
    """Apply dimensions and selections, then walk the wizard to completion."""
    if args.width is not None:
        session.set_dimension("width", args.width)
    if args.height is not None:
        session.set_dimension("height", args.height)

    for category_id, option_id in args.select:
        session.select_option(category_id, option_id)

    outcome = session.advance_step()
    while outcome.ok and not outcome.completed:
        outcome = session.advance_step()

    if not outcome.ok:
        raise QuoteValidationError(
            outcome.error.message,
            step_id=outcome.step_id,
            details=outcome.error.details,
        )

    summary = session.summary()
    if args.json:
        emit(summary.model_dump(mode="json"), True)
        return EXIT_OK

    print(SEPARATOR)
    print(f"  QUOTE -- {summary.width:g} x {summary.height:g} cm ({summary.area_m2:g} m2)")
    print(SEPARATOR)
    for line in summary.breakdown:
        print(f"  {line.label + ':':<20} {line.option_name:<35} EUR {line.amount:>10.2f}")
    print()
    print(f"  {'TOTAL:':<56} EUR {summary.total:>7}")
    for warning in summary.warnings:
        print(f"  WARNING: {warning}")
    print(SEPARATOR)
    return EXIT_OK


def cmd_import_catalog(session: ConfiguratorSession, args) -> int:
    """Run the PDF import and persist the merged catalog."""
    try:
        with open(args.pdf, "rb") as f:
            payload = f.read()
    except OSError as e:
        raise ImportInputError(f"Cannot read file: {args.pdf}", details={"reason": str(e)})

    # A local file has no declared content type; the %PDF signature check still applies
    result = asyncio.run(session.import_catalog(
        payload,
        filename=os.path.basename(args.pdf),
        content_type=None,
    ))

    if args.json:
        emit(result.model_dump(mode="json"), True)
    else:
        print(("OK  " if result.success else "FAIL  ") + result.message)
        if result.rejected_rows:
            print(f"  Rejected rows: {result.rejected_rows}")
        if result.skipped_rows:
            print(f"  Skipped rows (not frame/sash): {result.skipped_rows}")

    if result.success:
        return EXIT_OK
    return EXIT_CODES.get(result.error.code, EXIT_UNEXPECTED) if result.error else EXIT_UNEXPECTED


def cmd_reset_catalog(session: ConfiguratorSession, args) -> int:
    if not session.reset_catalog(confirm=args.yes):
        print("Reset not confirmed. Pass --yes to discard imported products.")
        return EXIT_USAGE
    print("Catalog restored to the built-in products.")
    return EXIT_OK


def cmd_show_catalog(session: ConfiguratorSession, args) -> int:
    categories = [session.get_category(args.category)] if args.category else session.catalog()

    if args.json:
        emit({"data": [c.model_dump(mode="json") for c in categories]}, True)
        return EXIT_OK

    for category in categories:
        print(f"{category.title} [{category.id}] -- {len(category.options)} options")
        for option in category.options:
            print(
                f"  {option.id:<30} {option.name:<40} "
                f"{option.base_price:>8g} x{option.price_multiplier:g}"
            )
    return EXIT_OK


COMMANDS = {
    "configure": cmd_configure,
    "import-catalog": cmd_import_catalog,
    "reset-catalog": cmd_reset_catalog,
    "show-catalog": cmd_show_catalog,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Window configurator: price quotes and manage the product catalog."
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print machine-readable JSON instead of text",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Override LOG_LEVEL (e.g. DEBUG, WARNING)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    configure = sub.add_parser("configure", help="Price a window from the command line")
    configure.add_argument("--width", type=float, default=None, help="Width in cm")
    configure.add_argument("--height", type=float, default=None, help="Height in cm")
    configure.add_argument(
        "--select",
        type=parse_selection,
        action="append",
        default=[],
        metavar="CATEGORY=OPTION",
        help="Option to select, repeatable (e.g. material=pvc)",
    )

    import_catalog = sub.add_parser("import-catalog", help="Import a supplier PDF catalog")
    import_catalog.add_argument("pdf", help="Path to the PDF file")

    reset = sub.add_parser("reset-catalog", help="Restore the built-in catalog")
    reset.add_argument(
        "--yes",
        action="store_true",
        help="Confirm: imported products are discarded",
    )

    show = sub.add_parser("show-catalog", help="List categories and options")
    show.add_argument("--category", default=None, help="Only this category id")

    return parser


def main(argv=None, session: ConfiguratorSession = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(args.log_level)

    try:
        session = session if session is not None else ConfiguratorSession()
        return COMMANDS[args.command](session, args)
    except AppError as e:
        logger.warning("cli_command_failed", command=args.command, code=e.code)
        if args.json:
            emit(e.to_dict(), True)
        else:
            print(f"ERROR: {e.message}")
        return exit_code_for(e)
    except Exception as e:
        logger.error("cli_unexpected_error", command=args.command, error=str(e), type=type(e).__name__)
        print(f"ERROR: {type(e).__name__}: {e}")
        return EXIT_UNEXPECTED


if __name__ == "__main__":
    sys.exit(main())
