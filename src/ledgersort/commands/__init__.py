"""
Command handlers for the ledgersort CLI, one module per subcommand.
"""

from .classify import cmd_classify
from .explain import cmd_explain
from .export import cmd_export
from .import_cmd import cmd_import
from .init import cmd_init
from .rules import cmd_rules
from .summary import cmd_summary

__all__ = [
    'cmd_classify',
    'cmd_explain',
    'cmd_export',
    'cmd_import',
    'cmd_init',
    'cmd_rules',
    'cmd_summary',
]
