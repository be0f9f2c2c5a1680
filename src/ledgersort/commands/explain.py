"""
ledgersort 'explain' command - Show which rules match a description or transaction.
"""

import json
import sys
from datetime import date

from ..cli_utils import load_settings, open_document
from ..colors import C
from ..domain import Transaction
from ..readers import parse_amount


def _detector_info(detector):
    return {
        'id': detector.id,
        'category': detector.category.id if detector.category is not None else None,
        'label': str(detector),
        'pattern': detector.pattern,
        'cents_min': detector.cents_min,
        'cents_max': detector.cents_max,
        'matches': detector.matching_pattern,
    }


def _explain_description(args, document):
    try:
        cents = parse_amount(args.amount) if args.amount else 0
    except ValueError as e:
        print(f"{C.RED}Error:{C.RESET} {e}", file=sys.stderr)
        sys.exit(1)

    probe = Transaction(account=None, id='explain', date=date.today(),
                        description=args.description, cents=cents)

    results = []
    for category in document.categories:
        for detector in category.detectors:
            if not detector.matches_terms(probe):
                continue
            results.append({
                **_detector_info(detector),
                'needs_partner': detector.is_matching,
            })

    if args.format == 'json':
        print(json.dumps({'description': args.description, 'cents': cents, 'matches': results}, indent=2))
        return

    print(f"Description: {C.BOLD}{args.description}{C.RESET}")
    if args.amount:
        print(f"Amount: {cents / 100:,.2f}")
    print()

    if not results:
        print(f"{C.YELLOW}No rule matches this description.{C.RESET}")
        print("Patterns must match the whole description; try a trailing '.*'.")
        return

    for i, r in enumerate(results):
        marker = f"{C.GREEN}→{C.RESET}" if i == 0 else " "
        print(f"{marker} {r['label']} {C.DIM}[{r['id']}] {r['pattern']}{C.RESET}")
        if r['needs_partner']:
            print(f"    {C.DIM}transfer rule: also needs an opposite transaction matching {r['matches']}{C.RESET}")
    if not args.amount and any(r['cents_min'] or r['cents_max'] for r in results):
        print(f"\n{C.DIM}Some rules have amount ranges; pass --amount to check them.{C.RESET}")


def _explain_transaction(args, document):
    found = [t for t in document.transactions if t.id == args.id]
    if not found:
        print(f"{C.RED}Error:{C.RESET} No transaction with id '{args.id}'", file=sys.stderr)
        sys.exit(1)

    if args.format == 'json':
        output = []
        for t in found:
            partner = t.matching_transaction
            output.append({
                'id': t.id,
                'account': t.account.id if t.account is not None else None,
                'date': t.date.isoformat(),
                'description': t.description,
                'cents': t.cents,
                'category_detector': _detector_info(t.category_detector),
                'candidates': [_detector_info(d) for d in t.candidate_detectors],
                'matching_transaction': partner.id if partner is not None else None,
            })
        print(json.dumps(output, indent=2))
        return

    for t in found:
        account = t.account.short_name if t.account is not None else '-'
        print(f"{C.BOLD}{t.description}{C.RESET}  {t.date}  {t.cents / 100:,.2f}  ({account})")
        print(f"  Category: {t.category_detector}")
        if t.candidate_detectors:
            print("  Candidates:")
            for d in t.candidate_detectors:
                print(f"    {d} {C.DIM}[{d.id}]{C.RESET}")
        if t.matching_transaction is not None:
            m = t.matching_transaction
            print(f"  Transfer with: {m.description}  {m.date}  {m.cents / 100:,.2f}")
        print()


def cmd_explain(args):
    """Handle the 'explain' subcommand."""
    if not args.description and not args.id:
        print(f"{C.RED}Error:{C.RESET} Give a description or --id", file=sys.stderr)
        sys.exit(1)

    config = load_settings(args)
    document = open_document(config)

    if args.id:
        _explain_transaction(args, document)
    else:
        _explain_description(args, document)
