"""
Smoke test that every public module imports cleanly.
"""

import importlib

import pytest


@pytest.mark.parametrize("module", [
    "ev_charge_ledger.core.months",
    "ev_charge_ledger.core.pricing",
    "ev_charge_ledger.core.ledger",
    "ev_charge_ledger.core.aggregator",
    "ev_charge_ledger.core.filters",
    "ev_charge_ledger.core.breakdown",
    "ev_charge_ledger.core.share",
    "ev_charge_ledger.core.overview",
    "ev_charge_ledger.storage.models",
    "ev_charge_ledger.storage.repository",
    "ev_charge_ledger.config.loader",
    "ev_charge_ledger.cli.main",
])
def test_module_imports(module):
    assert importlib.import_module(module) is not None
