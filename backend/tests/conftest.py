"""Shared test configuration and fixtures."""

import pytest

from fakes import FakeCompletionClient


@pytest.fixture
def fake_client():
    return FakeCompletionClient()
