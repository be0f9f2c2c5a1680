"""
ledgersort 'init' command - Initialize a new ledger directory.
"""

import os

from ..cli_utils import init_config
from ..colors import C


def cmd_init(args):
    """Handle the 'init' subcommand."""
    # Already inside a ledger directory: fill in missing files in place
    if args.dir == 'ledgersort' and os.path.isdir('./config'):
        target_dir = os.path.abspath('.')
        print(f"{C.CYAN}Found existing config/ directory{C.RESET}")
        print("  Adding missing starter files in place")
        print()
    else:
        target_dir = os.path.abspath(args.dir)

    rel_target = os.path.relpath(target_dir)
    if rel_target == '.':
        rel_target = './'

    print(f"Initializing ledger directory: {C.BOLD}{rel_target}{C.RESET}")
    print()

    created, skipped = init_config(target_dir)

    file_descriptions = {
        'config/settings.yaml': 'configure statement CSV sources',
        'config/categories.yaml': 'your own categories and rules',
    }

    all_files = sorted([(f, True) for f in created] + [(f, False) for f in skipped])
    for f, was_created in all_files:
        desc = file_descriptions.get(f, '')
        desc_str = f" {C.DIM}({desc}){C.RESET}" if desc else ""
        if was_created:
            print(f"  {C.GREEN}✓{C.RESET} {f}{desc_str}")
        else:
            print(f"  {C.YELLOW}→{C.RESET} {C.DIM}{f} (exists){C.RESET}")

    print()
    print(f"{C.BOLD}Next steps:{C.RESET}")
    print(f"  1. Copy statement CSVs into {os.path.join(rel_target, 'data')}{os.sep}")
    print(f"  2. Describe them under data_sources in {os.path.join(rel_target, 'config', 'settings.yaml')}")
    print(f"  3. Run: {C.GREEN}ledgersort import{C.RESET}")
