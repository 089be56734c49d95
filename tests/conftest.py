"""
Shared test configuration.

Keeps library logging quiet unless a test asks for it.
"""

import logging

import pytest


@pytest.fixture(autouse=True)
def _quiet_bibs_logging(caplog):
    caplog.set_level(logging.WARNING, logger="bibs")
    yield
