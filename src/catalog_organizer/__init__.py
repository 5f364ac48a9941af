"""
Catalog Organizer
Keyword-based product classification and stock reconciliation with a
preview -> apply workflow.
"""

__version__ = "0.1.0"
