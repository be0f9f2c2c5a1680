"""
ledgersort 'import' command - Read statement CSVs and classify new transactions.
"""

import os
import sys

from ..cli_utils import load_settings, open_document, print_warnings, save
from ..colors import C
from ..domain import Account
from ..readers import read_csv


def _account_for_source(document, source):
    """Get the account a data source imports into, creating it on first import."""
    account = document.accounts.get(source['account'])
    if account is None:
        account = document.accounts.add(Account(
            id=source['account'],
            name=source['account_name'],
            type=source['account_type'],
            institution=source['institution'],
        ))
        print(f"  {C.GREEN}+{C.RESET} New account: {account.name} ({account.type})")
    return account


def cmd_import(args):
    """Handle the 'import' subcommand."""
    config = load_settings(args)

    sources = config['data_sources']
    if args.source:
        sources = [s for s in sources if s['name'] == args.source]
        if not sources:
            print(f"{C.RED}Error:{C.RESET} No data source named '{args.source}'", file=sys.stderr)
            sys.exit(1)

    if not sources:
        print(f"{C.YELLOW}No data sources configured.{C.RESET}", file=sys.stderr)
        print("Add entries under data_sources in settings.yaml.", file=sys.stderr)
        sys.exit(1)

    document = open_document(config)

    records = []
    for source in sources:
        print(f"{C.BOLD}{source['name']}{C.RESET}")
        account = _account_for_source(document, source)
        for path in source['_paths']:
            try:
                rows = read_csv(path, source, account)
            except (OSError, ValueError) as e:
                print(f"{C.RED}Error reading {path}:{C.RESET} {e}", file=sys.stderr)
                sys.exit(1)
            print(f"  {os.path.relpath(path)}: {len(rows)} rows")
            records.extend(rows)

    added = document.import_transactions(records)
    uncategorized = sum(1 for t in added if t.category is None)
    transfers = sum(1 for t in added if t.matching_transaction is not None)

    print()
    print(f"Imported {C.GREEN}{len(added)}{C.RESET} new transaction(s), "
          f"skipped {len(records) - len(added)} already in the ledger")
    if added:
        print(f"  Categorized: {len(added) - uncategorized}")
        print(f"  Linked transfers: {transfers}")
        if uncategorized:
            print(f"  {C.YELLOW}Uncategorized: {uncategorized}{C.RESET}")

    if args.dry_run:
        print(f"\n{C.DIM}Dry run: ledger not saved{C.RESET}")
    else:
        path = save(document)
        print(f"\nSaved {os.path.relpath(path)}")

    print_warnings(config)
