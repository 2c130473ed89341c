"""Pytest configuration and shared fixtures."""

import logging

import pytest

from fakes import FakeGateway


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def logger():
    return logging.getLogger("tests.delivery")
