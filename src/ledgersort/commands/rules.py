"""
ledgersort 'rules' command - List categories and rules, or apply a categories file.
"""

import json
import os
import sys

import yaml

from ..cli_utils import load_settings, open_document, print_warnings, save
from ..colors import C
from ..storage import category_to_dict, update_categories_from_dict


def _definition(detector):
    return (detector.vendor, detector.description, detector.pattern,
            detector.cents_min, detector.cents_max, detector.matching_pattern)


def apply_categories_file(document, path):
    """
    Overlay a categories file onto the document and re-validate affected rules.

    Returns:
        (new_or_changed_detectors, reclassified) where reclassified is True
        if any transaction changed category
    """
    with open(path, 'r', encoding='utf-8') as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Error parsing {path}: {e}")

    before = {d.id: _definition(d) for d in document.categories.detectors}

    with document.lock:
        update_categories_from_dict(document.categories, data)

        changed = [
            d for d in document.categories.detectors
            if d.category is not None and not d.is_null and not d.is_derived
            and before.get(d.id) != _definition(d)
        ]

        reclassified = False
        for detector in changed:
            if document.detector_updated(detector):
                reclassified = True

    return changed, reclassified


def cmd_rules(args):
    """Handle the 'rules' subcommand."""
    config = load_settings(args)
    document = open_document(config)

    if args.apply:
        try:
            changed, reclassified = apply_categories_file(document, args.apply)
        except (OSError, ValueError) as e:
            print(f"{C.RED}Error applying {args.apply}:{C.RESET} {e}", file=sys.stderr)
            sys.exit(1)

        print(f"Applied {args.apply}: {len(changed)} new or changed rule(s)")
        for d in changed:
            print(f"  {C.GREEN}✓{C.RESET} {d} {C.DIM}[{d.id}]{C.RESET}")
        if reclassified:
            print("Transactions were reclassified")

        path = save(document)
        print(f"\nSaved {os.path.relpath(path)}")
        print_warnings(config)
        return

    categories = list(document.categories)
    if args.category:
        categories = [c for c in categories if c.id == args.category]
        if not categories:
            print(f"{C.RED}Error:{C.RESET} No category '{args.category}'", file=sys.stderr)
            sys.exit(1)

    if args.format == 'json':
        output = [category_to_dict(c) for c in categories]
        print(json.dumps(output, indent=2))
        return

    for category in categories:
        builtin = document.categories.is_same_as_builtin(category)
        tag = f" {C.DIM}(built-in){C.RESET}" if builtin else ""
        print(f"{C.BOLD}{category.name}{C.RESET} {C.DIM}[{category.id}] {category.type}{C.RESET}{tag}")
        for detector in category.detectors:
            if detector.is_derived and not args.all:
                continue
            amount = ''
            if detector.has_amount_range:
                amount = f" {detector.cents_min / 100:,.2f}..{detector.cents_max / 100:,.2f}"
            print(f"  {detector} {C.DIM}[{detector.id}]{C.RESET}")
            print(f"    {C.CYAN}{detector.pattern}{C.RESET}{amount}")
            if detector.matching_pattern is not None:
                print(f"    {C.DIM}matches:{C.RESET} {detector.matching_pattern}")
        print()
