"""Command-line interface: plan, apply, redact and flatten.

Usage:
    # Locate an account number and save the plan for review
    pdf-redact plan -i statement.pdf -o statement.plan.json -p 123456789

    # Burn the reviewed plan into a copy of the document
    pdf-redact apply -p statement.plan.json -o statement.redacted.pdf

    # Both at once, with a regex rule
    pdf-redact redact -i form.pdf -o form.redacted.pdf -r -p '\\d{3}-\\d{2}-\\d{4}'

    # Rasterize so no text layer survives
    pdf-redact flatten -i form.redacted.pdf -o form.flat.pdf -d 200
"""

from __future__ import annotations

import argparse
import logging
import shutil
import sys
from collections import Counter
from pathlib import Path

from core.anonymizer.flatten import flatten_pdf
from core.anonymizer.masks import apply_masks
from core.locator import TextLocator
from core.persistence.plan_store import load_plan, save_plan
from models.schemas import RedactionPlan, RedactionRule

logger = logging.getLogger(__name__)


def _build_rules(args: argparse.Namespace) -> list[RedactionRule]:
    return [
        RedactionRule(
            pattern=pattern,
            is_regex=args.regex,
            case_sensitive=not args.ignore_case,
            fragment_aware=args.fragment_aware,
        )
        for pattern in args.patterns
    ]


def _print_summary(plan: RedactionPlan) -> None:
    per_page = Counter(r.page_number for r in plan.regions)
    for page_number in sorted(per_page):
        print(f"Page {page_number}: {per_page[page_number]} region(s)")
    print(f"Total: {plan.total_redactions} region(s)")


def _write_redacted(plan: RedactionPlan, output: str) -> None:
    if plan.regions:
        apply_masks(plan, output)
        return
    # Nothing to mask; the output is the untouched source
    Path(output).parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(plan.source_path, output)
    logger.info(f"Plan is empty, copied {plan.source_path} → {output}")


def cmd_plan(args: argparse.Namespace) -> None:
    """Locate the patterns and save a plan."""
    plan = TextLocator().locate_text(args.input, _build_rules(args))
    save_plan(plan, args.output)
    _print_summary(plan)


def cmd_apply(args: argparse.Namespace) -> None:
    """Apply a saved plan."""
    plan = load_plan(args.plan)
    _write_redacted(plan, args.output)
    _print_summary(plan)


def cmd_redact(args: argparse.Namespace) -> None:
    """Locate and apply in one step."""
    plan = TextLocator().locate_text(args.input, _build_rules(args))
    if args.save_plan:
        save_plan(plan, args.save_plan)
    _write_redacted(plan, args.output)
    _print_summary(plan)


def cmd_flatten(args: argparse.Namespace) -> None:
    """Rasterize every page."""
    pages = flatten_pdf(args.input, args.output, dpi=args.dpi)
    print(f"Flattened {pages} page(s)")


def _add_rule_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-p", "--pattern", dest="patterns", action="append", required=True,
                        help="Text or regex to redact (repeatable)")
    parser.add_argument("-r", "--regex", action="store_true", help="Treat patterns as regular expressions")
    parser.add_argument("-c", "--ignore-case", action="store_true", help="Case-insensitive matching")
    fragment = parser.add_mutually_exclusive_group()
    fragment.add_argument("--fragment-aware", dest="fragment_aware", action="store_const", const=True,
                          help="Always also match across spaced-out digit boxes")
    fragment.add_argument("--no-fragment-aware", dest="fragment_aware", action="store_const", const=False,
                          help="Never use fragment-aware matching")
    parser.set_defaults(fragment_aware=None)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pdf-redact",
        description="Locate text in PDFs and burn redaction masks over it",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    sub = parser.add_subparsers(dest="command", required=True)

    p_plan = sub.add_parser("plan", help="Create a redaction plan")
    p_plan.add_argument("-i", "--input", required=True, help="Source PDF")
    p_plan.add_argument("-o", "--output", required=True, help="Plan JSON to write")
    _add_rule_arguments(p_plan)

    p_apply = sub.add_parser("apply", help="Apply a saved plan")
    p_apply.add_argument("-p", "--plan", required=True, help="Plan JSON")
    p_apply.add_argument("-o", "--output", required=True, help="Redacted PDF to write")

    p_redact = sub.add_parser("redact", help="Plan and apply in one step")
    p_redact.add_argument("-i", "--input", required=True, help="Source PDF")
    p_redact.add_argument("-o", "--output", required=True, help="Redacted PDF to write")
    p_redact.add_argument("-s", "--save-plan", default=None, help="Also write the plan here")
    _add_rule_arguments(p_redact)

    p_flatten = sub.add_parser("flatten", help="Rasterize a PDF")
    p_flatten.add_argument("-i", "--input", required=True, help="Source PDF")
    p_flatten.add_argument("-o", "--output", required=True, help="Image-only PDF to write")
    p_flatten.add_argument("-d", "--dpi", type=int, default=None, help="Render resolution (72-600)")

    return parser


COMMANDS = {
    "plan": cmd_plan,
    "apply": cmd_apply,
    "redact": cmd_redact,
    "flatten": cmd_flatten,
}


def run(args: argparse.Namespace) -> int:
    """Dispatch a parsed command line; returns the process exit status."""
    try:
        COMMANDS[args.command](args)
    except (ValueError, OSError, RuntimeError) as e:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0
