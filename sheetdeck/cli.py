"""CLI entry point for SheetDeck.

Orchestrates one update run: load the template and workbook, substitute the
placeholders, QA the result and write the output deck.

Usage::

    # Fill a template from a workbook
    python -m sheetdeck.cli update \\
        --template templates/quarterly.pptx \\
        --workbook data/q1_2026.xlsx \\
        --output output/q1_2026.pptx

    # Same, with paths kept in a YAML job file
    python -m sheetdeck.cli update --config jobs/q1.yaml

    # List the placeholders in a template (and what the workbook resolves)
    python -m sheetdeck.cli inspect \\
        --template templates/quarterly.pptx \\
        --workbook data/q1_2026.xlsx

    # Check an existing deck for leftover placeholders
    python -m sheetdeck.cli validate --pptx output/q1_2026.pptx
"""

import argparse
import io
import sys
from pathlib import Path

from openpyxl import load_workbook
from pptx import Presentation

from sheetdeck.errors import ConfigurationError
from sheetdeck.generator.pptx_updater import PresentationUpdater
from sheetdeck.processor.placeholders import scan_presentation
from sheetdeck.processor.registry import build_registry
from sheetdeck.qa.validator import QAValidator
from sheetdeck.schema.loader import load_job
from sheetdeck.schema.models import (
    DEFAULT_SUBSTITUTIONS_SHEET,
    JobConfig,
    PlaceholderKind,
)


# ---------------------------------------------------------------------------
# Job loading
# ---------------------------------------------------------------------------

def _load_job(args) -> JobConfig:
    """Merge a --config job file with CLI flags (flags win)."""
    job = JobConfig()
    config = getattr(args, "config", None)
    if config:
        path = Path(config)
        if not path.exists():
            _error(f"Job file not found: {path}")
        try:
            job = load_job(path)
        except ConfigurationError as exc:
            _error(str(exc))

    for key in ("template", "workbook", "output"):
        value = getattr(args, key, None)
        if value:
            setattr(job, key, value)
    sheet = getattr(args, "substitutions_sheet", None)
    if sheet:
        job.substitutions_sheet = sheet
    return job


def _require(job: JobConfig, *keys: str) -> None:
    missing = [k for k in keys if not getattr(job, k)]
    if missing:
        flags = ", ".join(f"--{k}" for k in missing)
        _error(f"Missing required setting(s): {flags} (or set them in --config)")


def _open_template(path_str: str):
    path = Path(path_str)
    if not path.exists():
        _error(f"Template not found: {path}")
    _info(f"Template: {path}")
    return Presentation(str(path))


def _open_workbook(path_str: str):
    path = Path(path_str)
    if not path.exists():
        _error(f"Workbook not found: {path}")
    _info(f"Workbook: {path}")
    # Cached formula results, not the formulas themselves
    return load_workbook(str(path), data_only=True)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def cmd_update(args):
    """Fill a template's placeholders and write the output deck."""
    job = _load_job(args)
    _require(job, "template", "workbook", "output")

    prs = _open_template(job.template)
    wb = _open_workbook(job.workbook)

    registry = build_registry(wb, job.substitutions_sheet)
    _info(f"Registry: {len(registry.scalars())} scalar(s), "
          f"{len(registry.charts())} chart(s), {len(registry.ranges())} table(s)")
    if not registry.has_substitutions:
        _warn(f"Workbook has no {job.substitutions_sheet!r} sheet; "
              f"text placeholders cannot be resolved")

    _info("Substituting placeholders...")
    try:
        result = PresentationUpdater(registry).update(prs)
    except ConfigurationError as exc:
        _error(str(exc))
    _info(result.summary())

    for token in result.missing_sheet_tokens:
        _warn(f"No workbook entry for {token}")

    buf = io.BytesIO()
    prs.save(buf)
    pptx_bytes = buf.getvalue()

    # QA validation
    if not args.skip_qa:
        _info("Running QA validation...")
        qa_result = QAValidator(registry).validate(pptx_bytes)

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
    output = Path(job.output)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(pptx_bytes)
    _info(f"Written: {output} ({len(pptx_bytes):,} bytes)")


def cmd_validate(args):
    """Check an existing PPTX for leftover placeholders."""
    pptx_path = Path(args.pptx)
    if not pptx_path.exists():
        _error(f"PPTX file not found: {pptx_path}")

    _info(f"Validating {pptx_path}")
    qa_result = QAValidator().validate(pptx_path.read_bytes())

    print(qa_result.report())
    sys.exit(0 if qa_result.passed else 1)


def cmd_inspect(args):
    """Show the placeholders a template holds."""
    job = _load_job(args)
    _require(job, "template")

    prs = _open_template(job.template)
    found = scan_presentation(prs)

    print(f"Template:     {job.template}")
    print(f"Slides:       {len(prs.slides)}")
    print(f"Placeholders: {len(found)}")
    for kind in PlaceholderKind:
        count = sum(1 for f in found if f.kind == kind)
        print(f"  {kind.value:<6} {count}")

    if args.verbose:
        print()
        for f in found:
            print(f"  [{f.slide_index:2d}] {f.shape_name}"
                  f" - {f.token} ({f.kind.value})")

    if not job.workbook:
        return

    wb = _open_workbook(job.workbook)
    registry = build_registry(wb, job.substitutions_sheet)

    print()
    print(f"Workbook:     {job.workbook}")
    print(f"Entries:      {len(registry)}")
    if args.verbose:
        for token in registry:
            print(f"  {token}")

    unresolved = sorted({f.token for f in found if f.token not in registry})
    if not registry.has_substitutions:
        print(f"  (no {job.substitutions_sheet!r} sheet)")
    if unresolved:
        print()
        print(f"Without entry: {len(unresolved)}")
        for token in unresolved:
            print(f"  {token}")


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
        prog="sheetdeck",
        description="Fill PowerPoint templates with values, tables and charts "
                    "from an Excel workbook.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # ---- update ----
    upd = subparsers.add_parser(
        "update",
        help="Substitute a template's placeholders and write the result.",
    )
    _add_job_args(upd)
    upd.add_argument(
        "-o", "--output",
        help="Output PPTX file path.",
    )
    upd.add_argument(
        "--skip-qa",
        action="store_true",
        default=False,
        help="Skip QA validation after the update.",
    )
    upd.add_argument(
        "--force",
        action="store_true",
        default=False,
        help="Write output even if QA validation fails.",
    )
    upd.add_argument(
        "-v", "--verbose",
        action="store_true",
        default=False,
        help="Show detailed output (full QA report on failure).",
    )
    upd.set_defaults(func=cmd_update)

    # ---- validate ----
    val = subparsers.add_parser(
        "validate",
        help="Check an existing PPTX for leftover placeholders.",
    )
    val.add_argument(
        "--pptx",
        required=True,
        help="Path to the PPTX file to validate.",
    )
    val.set_defaults(func=cmd_validate)

    # ---- inspect ----
    insp = subparsers.add_parser(
        "inspect",
        help="List template placeholders and workbook entries.",
    )
    _add_job_args(insp)
    insp.add_argument(
        "-v", "--verbose",
        action="store_true",
        default=False,
        help="Show every placeholder and registry entry.",
    )
    insp.set_defaults(func=cmd_inspect)

    return parser


def _add_job_args(parser):
    """Add template / workbook / config args to a subparser."""
    parser.add_argument(
        "--config",
        help="YAML job file with template, workbook and output paths.",
    )
    parser.add_argument(
        "--template",
        help="Template presentation (.pptx).",
    )
    parser.add_argument(
        "--workbook",
        help="Companion workbook (.xlsx).",
    )
    parser.add_argument(
        "--substitutions-sheet",
        dest="substitutions_sheet",
        help=f"Name of the key/value sheet "
             f"(default: {DEFAULT_SUBSTITUTIONS_SHEET}).",
    )


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main(argv=None):
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    args.func(args)


if __name__ == "__main__":
    main()
