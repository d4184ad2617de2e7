"""
Macro regimes research pipeline.

FRED series -> month-end panel -> rate / inflation regime labels ->
monthly asset returns summarized by regime -> charts.
"""

__version__ = "0.1.0"
