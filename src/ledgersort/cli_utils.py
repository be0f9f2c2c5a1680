"""
CLI utility functions for ledgersort commands.

Shared helpers used by the command modules, kept apart from the argument
parsing in cli.py.
"""

import logging
import os
import sys

from .colors import C
from .config_loader import load_config
from .templates import GITIGNORE, STARTER_CATEGORIES, STARTER_SETTINGS

logger = logging.getLogger(__name__)


def find_config_dir():
    """Find the config directory.

    Resolution order:
    1. LEDGERSORT_CONFIG environment variable (if set and exists)
    2. ./config
    3. ./ledgersort/config

    Returns None if no config directory is found.
    """
    env_config = os.environ.get('LEDGERSORT_CONFIG')
    if env_config:
        env_path = os.path.abspath(env_config)
        if os.path.isdir(env_path):
            return env_path

    for candidate in ('config', os.path.join('ledgersort', 'config')):
        path = os.path.abspath(candidate)
        if os.path.isdir(path):
            return path

    return None


def resolve_config_dir(args, required=True):
    """Resolve the config directory from --config or auto-detect.

    Args:
        args: Parsed argparse namespace with an optional 'config_dir' attribute
        required: If True, exit with an error when no config is found

    Returns:
        Absolute path to config directory, or None if not found and not required
    """
    if getattr(args, 'config_dir', None):
        config_dir = os.path.abspath(args.config_dir)
    else:
        config_dir = find_config_dir()

    if required and (config_dir is None or not os.path.isdir(config_dir)):
        print("Error: Config directory not found.", file=sys.stderr)
        print("Looked for: $LEDGERSORT_CONFIG, ./config and ./ledgersort/config", file=sys.stderr)
        print(f"\nRun '{C.GREEN}ledgersort init{C.RESET}' to create a new ledger directory.", file=sys.stderr)
        sys.exit(1)

    return config_dir


def configure_logging(verbose=0, default_level='WARNING'):
    """Set up root logging from -v flags (one -v: INFO, two: DEBUG) or the settings level."""
    if verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = getattr(logging, default_level, logging.WARNING)

    logging.basicConfig(
        level=level,
        format='%(levelname)s %(name)s: %(message)s',
        stream=sys.stderr,
        force=True,
    )


def load_settings(args):
    """Resolve, load and check the configuration. Exits on errors."""
    config_dir = resolve_config_dir(args, required=True)

    try:
        config = load_config(config_dir, getattr(args, 'settings', 'settings.yaml'))
    except (OSError, ValueError) as e:
        print(f"{C.RED}Error loading configuration:{C.RESET} {e}", file=sys.stderr)
        sys.exit(1)

    configure_logging(getattr(args, 'verbose', 0), config['log_level'])

    errors = [w for w in config['_warnings'] if w['type'] == 'error']
    if errors:
        print(f"{C.RED}Configuration errors:{C.RESET}", file=sys.stderr)
        for error in errors:
            print(f"  • {error['message']}", file=sys.stderr)
            print(f"    {C.DIM}{error['suggestion']}{C.RESET}", file=sys.stderr)
        sys.exit(1)

    return config


def print_warnings(config):
    """Print configuration warnings to stderr (keeps JSON output on stdout clean)."""
    warnings = [w for w in config.get('_warnings', []) if w['type'] == 'warning']
    if not warnings:
        return
    print(file=sys.stderr)
    print(f"{C.YELLOW}Warnings:{C.RESET}", file=sys.stderr)
    for warning in warnings:
        print(f"  • {warning['message']}", file=sys.stderr)
        print(f"    {C.DIM}{warning['suggestion']}{C.RESET}", file=sys.stderr)


def open_document(config):
    """Load the ledger named in the settings, or start an empty one if it does not exist yet."""
    from .document import Document
    from .storage import load_document

    path = config['document']
    if not os.path.exists(path):
        logger.info("No ledger at %s yet, starting a new one", path)
        document = Document()
        document.path = path
        return document

    try:
        return load_document(path)
    except (OSError, ValueError) as e:
        print(f"{C.RED}Error loading ledger {path}:{C.RESET} {e}", file=sys.stderr)
        sys.exit(1)


def save(document):
    from .storage import save_document

    try:
        return save_document(document)
    except (OSError, ValueError) as e:
        print(f"{C.RED}Error saving ledger:{C.RESET} {e}", file=sys.stderr)
        sys.exit(1)


def init_config(target_dir):
    """Initialize a new ledger directory with starter files.

    Returns:
        (files_created, files_skipped) as paths relative to target_dir
    """
    import datetime

    config_dir = os.path.join(target_dir, 'config')
    data_dir = os.path.join(target_dir, 'data')

    os.makedirs(config_dir, exist_ok=True)
    os.makedirs(data_dir, exist_ok=True)

    current_year = datetime.datetime.now().year
    files_created = []
    files_skipped = []

    starters = [
        ('config/settings.yaml', STARTER_SETTINGS.format(year=current_year)),
        ('config/categories.yaml', STARTER_CATEGORIES),
        ('.gitignore', GITIGNORE),
    ]

    for rel_path, content in starters:
        path = os.path.join(target_dir, *rel_path.split('/'))
        if os.path.exists(path):
            files_skipped.append(rel_path)
            continue
        with open(path, 'w', encoding='utf-8') as f:
            f.write(content)
        files_created.append(rel_path)

    return files_created, files_skipped
