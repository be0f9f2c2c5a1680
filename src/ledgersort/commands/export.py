"""
ledgersort 'export' command - Write classified transactions to CSV.
"""

import sys

from ..cli_utils import load_settings, open_document
from ..colors import C


def cmd_export(args):
    """Handle the 'export' subcommand."""
    config = load_settings(args)
    document = open_document(config)

    if args.category and document.categories.get(args.category) is None:
        print(f"{C.RED}Error:{C.RESET} No category '{args.category}'", file=sys.stderr)
        sys.exit(1)

    def predicate(t):
        if args.uncategorized and t.category is not None:
            return False
        if args.category and (t.category is None or t.category.id != args.category):
            return False
        return True

    try:
        written = document.export_csv(args.output, predicate)
    except OSError as e:
        print(f"{C.RED}Error writing {args.output}:{C.RESET} {e}", file=sys.stderr)
        sys.exit(1)

    print(f"Exported {C.GREEN}{written}{C.RESET} transaction(s) to {args.output}")
