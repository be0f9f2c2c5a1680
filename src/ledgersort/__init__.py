"""
ledgersort - rule-based transaction categorization.
"""

__version__ = '0.4.0'
