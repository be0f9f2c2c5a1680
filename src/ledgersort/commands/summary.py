"""
ledgersort 'summary' command - Monthly totals per category.
"""

import json
import sys
from datetime import datetime

from ..cli_utils import load_settings, open_document, print_warnings
from ..colors import C
from ..summary import format_summary, summarize_by_month


def _parse_day(value, flag):
    try:
        return datetime.strptime(value, '%Y-%m-%d').date()
    except ValueError:
        print(f"{C.RED}Invalid date for {flag}:{C.RESET} {value}", file=sys.stderr)
        print("Use YYYY-MM-DD format (e.g., 2024-01-31)", file=sys.stderr)
        sys.exit(1)


def cmd_summary(args):
    """Handle the 'summary' subcommand."""
    config = load_settings(args)
    document = open_document(config)

    start = _parse_day(args.start, '--from') if args.start else None
    end = _parse_day(args.end, '--to') if args.end else None

    result = summarize_by_month(document.transactions, document.categories, start, end)

    if args.format == 'json':
        print(json.dumps(result, indent=2))
        return

    print(format_summary(result, config['title']))
    print_warnings(config)
