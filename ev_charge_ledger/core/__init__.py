"""
Core modules for EV Charge Ledger.

This package contains the derived-metrics engine: the chronological
ledger, monthly aggregation, facet filtering, expense breakdown and
share text.
"""
