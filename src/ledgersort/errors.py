"""
Exceptions raised by the categorization core.

All of them derive from ValueError so callers that already guard
validation with ``except ValueError`` keep working.
"""


class InvalidRuleError(ValueError):
    """A rule definition is malformed (bad regex, wrong pattern kind for the category)."""


class MirrorStateError(ValueError):
    """A matching pattern change would leave a mirrored pair inconsistent."""


class DocumentLoadError(ValueError):
    """A saved document could not be loaded; nothing from it is kept."""
