"""CLI entry point for the social media report builder.

Runs the full pipeline: data directory loading, KPI aggregation, slide
composition, and read-back QA validation.

Usage::

    # Generate the March report for customer 42
    python -m social_report.cli generate \\
        --data exports/ --customer 42 --month 2024-03 \\
        --output output/

    # Facebook and ads only, with notes and the glossary slide
    python -m social_report.cli generate \\
        --data exports/ --customer 42 --month 2024-03 \\
        --platforms facebook ads --notes "Kampagnenstart am 12.03." \\
        --enable glossary

    # Validate an existing report
    python -m social_report.cli validate --pptx output/acme_2024-03.pptx

    # Show which slide modules would run, in order
    python -m social_report.cli inspect --platforms facebook instagram -v
"""

import argparse
import datetime
import logging
import sys
from pathlib import Path

from .errors import ReportError
from .generator.composer import DocumentComposer
from .processor.ingestion import load_dataset
from .qa.validator import QAValidator
from .schema.loader import load_settings
from .schema.models import REQUESTABLE_PLATFORMS, Platform, ReportRequest
from .slides import build_slide_list

_PLATFORM_CHOICES = [p.value for p in REQUESTABLE_PLATFORMS]


# ---------------------------------------------------------------------------
# Argument helpers
# ---------------------------------------------------------------------------

def _load_settings(args):
    """Load ReportSettings from --settings, or the defaults."""
    path = getattr(args, "settings", None)
    if path and not Path(path).exists():
        _error(f"Settings file not found: {path}")
    try:
        return load_settings(path)
    except ValueError as exc:
        _error(str(exc))


def _platforms(args) -> tuple[Platform, ...]:
    return tuple(Platform(p) for p in args.platforms)


def _overrides(args) -> dict[str, bool]:
    overrides = {module_id: True for module_id in args.enable or []}
    overrides.update({module_id: False for module_id in args.disable or []})
    return overrides


def _parse_as_of(value):
    try:
        return datetime.datetime.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid timestamp: {value!r}") from None


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def cmd_generate(args):
    """Generate a PPTX report."""
    settings = _load_settings(args)
    data_dir = Path(args.data)
    if not data_dir.is_dir():
        _error(f"Data directory not found: {data_dir}")

    _info(f"Loading data from {data_dir}")
    try:
        dataset = load_dataset(data_dir, as_of=args.as_of,
                               default_colors=settings.default_colors)
        request = ReportRequest(
            customer_id=args.customer,
            target_month=args.month,
            enabled_platforms=_platforms(args),
            notes=args.notes or "",
            slide_overrides=_overrides(args),
        )
    except (ReportError, ValueError) as exc:
        _error(str(exc))

    composer = DocumentComposer(dataset.directory, dataset.store, dataset.ads_source,
                                settings=settings, as_of=args.as_of)
    _info(f"Building report for customer {request.customer_id}, {request.target_month}...")
    try:
        result = composer.compose(request)
    except (ReportError, ValueError) as exc:
        _error(str(exc))

    _info(f"Rendered {len(result.slide_ids)} module(s): {', '.join(result.slide_ids)}")
    for failure in result.failures:
        _warn(str(failure))

    # QA validation
    if not args.skip_qa:
        _info("Running QA validation...")
        qa_result = QAValidator(settings).validate(result.content)

        if qa_result.passed:
            _info(qa_result.summary())
        else:
            _warn(qa_result.summary())
            if args.verbose:
                print(qa_result.report(), file=sys.stderr)

            if not args.force:
                _error("QA validation failed. Use --force to write anyway, "
                       "or --skip-qa to skip validation.")
    else:
        _info("QA validation skipped (--skip-qa)")

    # Write output
    output = Path(args.output)
    if output.suffix.lower() != ".pptx":
        output = output / result.filename
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(result.content)
    _info(f"Written: {output} ({result.size:,} bytes)")


def cmd_validate(args):
    """Validate an existing report PPTX."""
    settings = _load_settings(args)
    pptx_path = Path(args.pptx)
    if not pptx_path.exists():
        _error(f"PPTX file not found: {pptx_path}")

    _info(f"Validating {pptx_path}")
    qa_result = QAValidator(settings).validate(pptx_path.read_bytes(),
                                               expected_slides=args.slides)

    print(qa_result.report())
    sys.exit(0 if qa_result.passed else 1)


def cmd_inspect(args):
    """Show the resolved slide module order."""
    modules = build_slide_list(_platforms(args), _overrides(args))

    print(f"Platforms:   {', '.join(args.platforms)}")
    print(f"Modules:     {len(modules)}")
    print()
    for module in modules:
        line = f"  [{module.order:2d}] {module.id:<20} {module.platform.value:<10}"
        if args.verbose:
            line += f" {module.category.value:<8} {module.description or module.name}"
        print(line)


# ---------------------------------------------------------------------------
# Output helpers
# ---------------------------------------------------------------------------

def _info(msg):
    print(f"  {msg}", file=sys.stderr)


def _warn(msg):
    print(f"  WARNING: {msg}", file=sys.stderr)


def _error(msg):
    print(f"  ERROR: {msg}", file=sys.stderr)
    sys.exit(1)


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------

def build_parser():
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="social-report",
        description="Generate monthly social media report presentations.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # ---- generate ----
    gen = subparsers.add_parser(
        "generate",
        help="Generate a PPTX report for one customer and month.",
    )
    gen.add_argument(
        "--data",
        required=True,
        help="Data directory with customers.yaml, posts.csv, followers.csv, ads.csv.",
    )
    gen.add_argument(
        "--customer",
        required=True,
        help="Customer id as listed in customers.yaml.",
    )
    today = datetime.date.today()
    gen.add_argument(
        "--month",
        default=f"{today.year:04d}-{today.month:02d}",
        help="Report month as YYYY-MM (default: current month).",
    )
    _add_platform_args(gen)
    gen.add_argument(
        "--notes",
        help="Free text printed on the summary slide.",
    )
    gen.add_argument(
        "--as-of",
        dest="as_of",
        type=_parse_as_of,
        help="Ignore posts and snapshots after this ISO timestamp.",
    )
    _add_settings_args(gen)
    gen.add_argument(
        "-o", "--output",
        default=".",
        help="Output .pptx path or directory (default: current directory).",
    )
    gen.add_argument(
        "--skip-qa",
        action="store_true",
        default=False,
        help="Skip QA validation after generation.",
    )
    gen.add_argument(
        "--force",
        action="store_true",
        default=False,
        help="Write output even if QA validation fails.",
    )
    gen.add_argument(
        "-v", "--verbose",
        action="store_true",
        default=False,
        help="Show detailed output (full QA report on failure).",
    )
    gen.set_defaults(func=cmd_generate)

    # ---- validate ----
    val = subparsers.add_parser(
        "validate",
        help="Validate an existing report PPTX.",
    )
    _add_settings_args(val)
    val.add_argument(
        "--pptx",
        required=True,
        help="Path to the PPTX file to validate.",
    )
    val.add_argument(
        "--slides",
        type=int,
        help="Expected slide count.",
    )
    val.set_defaults(func=cmd_validate)

    # ---- inspect ----
    insp = subparsers.add_parser(
        "inspect",
        help="Show which slide modules run, in page order.",
    )
    _add_platform_args(insp)
    insp.add_argument(
        "-v", "--verbose",
        action="store_true",
        default=False,
        help="Show category and description per module.",
    )
    insp.set_defaults(func=cmd_inspect)

    return parser


def _add_platform_args(parser):
    """Add --platforms / --enable / --disable args to a subparser."""
    parser.add_argument(
        "--platforms",
        nargs="+",
        choices=_PLATFORM_CHOICES,
        default=list(_PLATFORM_CHOICES),
        help="Platforms to report on (default: all).",
    )
    parser.add_argument(
        "--enable",
        action="append",
        metavar="MODULE",
        help="Switch on a slide module that is off by default (repeatable).",
    )
    parser.add_argument(
        "--disable",
        action="append",
        metavar="MODULE",
        help="Switch off a slide module (repeatable).",
    )


def _add_settings_args(parser):
    parser.add_argument(
        "--settings",
        help="Path to a YAML settings file (agency branding, design, timeouts).",
    )


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main(argv=None):
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if getattr(args, "verbose", False) else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    args.func(args)


if __name__ == "__main__":
    main()
