"""Shared pytest configuration and fixtures for gridsheet tests."""

import pytest

from gridsheet import SheetStore


def pytest_addoption(parser):
    parser.addoption(
        "--run-slow",
        action="store_true",
        default=False,
        help="Include tests marked @pytest.mark.slow (e.g. large-sheet sweeps)",
    )


def pytest_configure(config):
    config.addinivalue_line("markers", "slow: marks tests as slow (skipped unless --run-slow)")


def pytest_collection_modifyitems(config, items):
    if config.getoption("--run-slow"):
        return
    skip = pytest.mark.skip(reason="slow test, pass --run-slow to include")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip)


@pytest.fixture
def store() -> SheetStore:
    return SheetStore(rows=10, cols=5)


@pytest.fixture
def sample_store() -> SheetStore:
    """A small sheet: a label column, a numeric column, and a total formula."""
    s = SheetStore(rows=10, cols=5)
    s.set_cell_value("A1", "apples")
    s.set_cell_value("A2", "pears")
    s.set_cell_value("A3", "plums")
    s.set_cell_value("B1", "2")
    s.set_cell_value("B2", "x")
    s.set_cell_value("B3", "4")
    s.set_cell_value("B4", "=SUM(B1:B3)")
    return s
