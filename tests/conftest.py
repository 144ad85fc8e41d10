"""Shared fixtures for request log tests."""
import logging

import pytest


@pytest.fixture
def request_lines(caplog):
    """Messages written to the ``request`` logger during the test."""
    caplog.set_level(logging.INFO, logger="request")

    def lines():
        return [r.getMessage() for r in caplog.records if r.name == "request"]
    return lines
