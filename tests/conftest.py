"""Shared fixtures for the test suite."""

import logging

import pytest


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Drop handlers installed by configure_logging so they don't outlive a test."""
    yield
    package_logger = logging.getLogger("tasktracker")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
    package_logger.setLevel(logging.NOTSET)
