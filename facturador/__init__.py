"""Invoice management: totals, normalization and PDF export."""

__version__ = "0.1.0"
