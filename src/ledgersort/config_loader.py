"""
Configuration loader for ledgersort.

Reads settings.yaml from the config directory and returns a plain dict.
Problems that do not stop loading are collected in config['_warnings'] as
{'type': 'error' | 'warning', 'message': ..., 'suggestion': ...} entries.
"""

import logging
import os
from typing import Optional

import yaml

from .domain import AccountType
from .path_utils import resolve_data_source_paths, resolve_path

logger = logging.getLogger(__name__)

DEFAULT_DOCUMENT = 'data/ledger.yaml'

LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR')

REQUIRED_SOURCE_FIELDS = ('name', 'file', 'account', 'date_column', 'description_column', 'amount_column')


def _source_from_dict(config_dir: str, i: int, data: dict, warnings: list) -> Optional[dict]:
    """Normalize one data_sources entry. Returns None if it cannot be used."""
    if not isinstance(data, dict):
        warnings.append({
            'type': 'error',
            'message': f"Data source #{i+1} must be a mapping",
            'suggestion': "Each entry needs name, file, account and the column names.",
        })
        return None

    missing = [f for f in REQUIRED_SOURCE_FIELDS if not data.get(f)]
    if missing:
        warnings.append({
            'type': 'error',
            'message': f"Data source #{i+1} ({data.get('name', 'unnamed')}): missing {', '.join(missing)}",
            'suggestion': "See the commented example in settings.yaml.",
        })
        return None

    account_type = str(data.get('account_type', AccountType.CHECKING_ACCOUNT.name)).upper()
    try:
        AccountType(account_type)
    except ValueError:
        warnings.append({
            'type': 'error',
            'message': f"Data source '{data['name']}': unknown account_type '{data.get('account_type')}'",
            'suggestion': f"Use one of: {', '.join(t.name for t in AccountType)}",
        })
        return None

    paths, kind = resolve_data_source_paths(config_dir, data['file'])
    if not paths:
        warnings.append({
            'type': 'warning',
            'message': f"Data source '{data['name']}': no files found for '{data['file']}'",
            'suggestion': "Check the path, or drop statement CSVs into the data folder.",
        })

    return {
        'name': str(data['name']),
        'file': str(data['file']),
        'account': str(data['account']),
        'account_name': str(data.get('account_name') or data['name']),
        'account_type': account_type,
        'institution': str(data.get('institution') or ''),
        'date_column': str(data['date_column']),
        'description_column': str(data['description_column']),
        'amount_column': str(data['amount_column']),
        'address_column': data.get('address_column'),
        'negate_amounts': bool(data.get('negate_amounts', False)),
        'date_format': data.get('date_format'),
        '_paths': paths,
        '_kind': kind,
    }


def load_config(config_dir: str, settings_file: str = 'settings.yaml') -> dict:
    """
    Load settings.yaml.

    Args:
        config_dir: Path to config directory
        settings_file: Settings file name (relative to config_dir or absolute)

    Returns:
        Config dict with title, document (absolute path), data_sources,
        log_level, config_dir and _warnings

    Raises:
        FileNotFoundError: If the settings file does not exist
        ValueError: If the YAML is malformed
    """
    if os.path.isabs(settings_file):
        path = settings_file
    else:
        path = os.path.join(config_dir, settings_file)

    if not os.path.exists(path):
        raise FileNotFoundError(f"Settings file not found: {path}")

    with open(path, 'r', encoding='utf-8') as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Error parsing {path}: {e}")

    if not isinstance(data, dict):
        raise ValueError(f"Error loading {path}: top level must be a mapping")

    warnings = []

    log_level = str(data.get('log_level', 'WARNING')).upper()
    if log_level not in LOG_LEVELS:
        warnings.append({
            'type': 'warning',
            'message': f"Unknown log_level '{data.get('log_level')}', using WARNING",
            'suggestion': f"Use one of: {', '.join(LOG_LEVELS)}",
        })
        log_level = 'WARNING'

    sources = []
    for i, entry in enumerate(data.get('data_sources') or []):
        source = _source_from_dict(config_dir, i, entry, warnings)
        if source is not None:
            sources.append(source)

    names = [s['name'] for s in sources]
    for name in sorted({n for n in names if names.count(n) > 1}):
        warnings.append({
            'type': 'warning',
            'message': f"Data source name '{name}' is used more than once",
            'suggestion': "Give each data source a distinct name so --source can select it.",
        })

    config = {
        'title': data.get('title') or 'Ledger',
        'document': resolve_path(config_dir, data.get('document') or DEFAULT_DOCUMENT),
        'data_sources': sources,
        'log_level': log_level,
        'config_dir': os.path.abspath(config_dir),
        '_warnings': warnings,
    }

    logger.debug("Loaded %s: %d data source(s), %d warning(s)", path, len(sources), len(warnings))
    return config
