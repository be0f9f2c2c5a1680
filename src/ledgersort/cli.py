"""
ledgersort - classify bank and credit card transactions with pattern rules.

Usage:
    ledgersort init [dir]                 # Set up a new ledger directory
    ledgersort import                     # Import statement CSVs and classify them
    ledgersort classify                   # Re-run detection for uncategorized transactions
    ledgersort explain "<description>"    # Show which rules match a description
    ledgersort rules                      # List categories and rules
    ledgersort summary                    # Monthly totals per category
    ledgersort export <file.csv>          # Export classified transactions
"""

import argparse
import sys

from . import __version__


def _add_common_arguments(subparser, formats=None):
    subparser.add_argument(
        '--config', '-c',
        dest='config_dir',
        help='Path to config directory (default: auto-detect ./config)'
    )
    subparser.add_argument(
        '--settings', '-s',
        default='settings.yaml',
        help='Settings file name (default: settings.yaml)'
    )
    subparser.add_argument(
        '-v', '--verbose',
        action='count',
        default=0,
        help='Increase log output (-v for info, -vv for debug)'
    )
    if formats:
        subparser.add_argument(
            '--format', '-f',
            choices=formats,
            default=formats[0],
            help=f"Output format (default: {formats[0]})"
        )


def build_parser():
    parser = argparse.ArgumentParser(
        prog='ledgersort',
        description='Classify your bank and credit card transactions with pattern rules.',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="Run 'ledgersort init' to get started."
    )
    parser.add_argument('--version', action='version', version=f'ledgersort {__version__}')

    subparsers = parser.add_subparsers(dest='command', title='commands', metavar='<command>')

    # init subcommand
    init_parser = subparsers.add_parser(
        'init',
        help='Set up a new ledger folder with config files (run once to get started)'
    )
    init_parser.add_argument(
        'dir',
        nargs='?',
        default='ledgersort',
        help='Directory to initialize (default: ./ledgersort)'
    )

    # import subcommand
    import_parser = subparsers.add_parser(
        'import',
        help='Read statement CSVs, add new transactions and classify them'
    )
    _add_common_arguments(import_parser)
    import_parser.add_argument(
        '--source',
        help='Import only the data source with this name'
    )
    import_parser.add_argument(
        '--dry-run', '-n',
        action='store_true',
        help='Show what would be imported without saving the ledger'
    )

    # classify subcommand
    classify_parser = subparsers.add_parser(
        'classify',
        help='Run detection again for transactions that have no category'
    )
    _add_common_arguments(classify_parser)
    classify_parser.add_argument(
        '--dry-run', '-n',
        action='store_true',
        help='Do not save the ledger'
    )

    # explain subcommand
    explain_parser = subparsers.add_parser(
        'explain',
        help='Show which rules match a description, or why a transaction got its category'
    )
    _add_common_arguments(explain_parser, formats=['text', 'json'])
    explain_parser.add_argument(
        'description',
        nargs='?',
        help='Transaction description to test'
    )
    explain_parser.add_argument(
        '--amount', '-a',
        help='Signed amount to test against rule ranges (e.g., -45.99)'
    )
    explain_parser.add_argument(
        '--id',
        help='Explain a stored transaction by id instead'
    )

    # rules subcommand
    rules_parser = subparsers.add_parser(
        'rules',
        help='List categories and their rules, or apply a categories file'
    )
    _add_common_arguments(rules_parser, formats=['text', 'json'])
    rules_parser.add_argument(
        '--category',
        help='Show only this category id'
    )
    rules_parser.add_argument(
        '--all',
        action='store_true',
        help='Include the mirror half of transfer rules'
    )
    rules_parser.add_argument(
        '--apply',
        metavar='FILE',
        help='Overlay categories from a YAML file and reclassify affected transactions'
    )

    # summary subcommand
    summary_parser = subparsers.add_parser(
        'summary',
        help='Monthly income, expense and per-category totals'
    )
    _add_common_arguments(summary_parser, formats=['text', 'json'])
    summary_parser.add_argument(
        '--from',
        dest='start',
        help='First date to include (YYYY-MM-DD)'
    )
    summary_parser.add_argument(
        '--to',
        dest='end',
        help='Last date to include (YYYY-MM-DD)'
    )

    # export subcommand
    export_parser = subparsers.add_parser(
        'export',
        help='Export transactions with their categories to CSV'
    )
    _add_common_arguments(export_parser)
    export_parser.add_argument(
        'output',
        help='CSV file to write'
    )
    export_parser.add_argument(
        '--category',
        help='Export only this category id'
    )
    export_parser.add_argument(
        '--uncategorized',
        action='store_true',
        help='Export only transactions without a category'
    )

    return parser


def main(argv=None):
    """Main entry point for the ledgersort CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    # Commands are imported lazily so --help stays fast
    if args.command == 'init':
        from .commands import cmd_init
        cmd_init(args)
    elif args.command == 'import':
        from .commands import cmd_import
        cmd_import(args)
    elif args.command == 'classify':
        from .commands import cmd_classify
        cmd_classify(args)
    elif args.command == 'explain':
        from .commands import cmd_explain
        cmd_explain(args)
    elif args.command == 'rules':
        from .commands import cmd_rules
        cmd_rules(args)
    elif args.command == 'summary':
        from .commands import cmd_summary
        cmd_summary(args)
    elif args.command == 'export':
        from .commands import cmd_export
        cmd_export(args)


if __name__ == '__main__':
    main()
