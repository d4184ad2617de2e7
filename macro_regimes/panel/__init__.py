"""
Monthly panel construction.

Goal:
- One row per calendar month-end, one column per series, gaps kept as NaN.
- Point-in-time transforms (YoY, changes, returns) that only look backwards.
"""
