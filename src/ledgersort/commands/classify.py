"""
ledgersort 'classify' command - Run detection again for uncategorized transactions.
"""

import os

from ..cli_utils import load_settings, open_document, print_warnings, save
from ..colors import C


def cmd_classify(args):
    """Handle the 'classify' subcommand."""
    config = load_settings(args)
    document = open_document(config)

    found = document.reclassify_uncategorized()
    remaining = sum(1 for t in document.transactions if t.category is None)

    print(f"Categorized {C.GREEN}{found}{C.RESET} transaction(s)")
    if remaining:
        print(f"{C.YELLOW}{remaining} still uncategorized{C.RESET}")
        print(f"  Run: {C.GREEN}ledgersort explain \"<description>\"{C.RESET} to test rules against one")

    if found and not args.dry_run:
        path = save(document)
        print(f"\nSaved {os.path.relpath(path)}")

    print_warnings(config)
