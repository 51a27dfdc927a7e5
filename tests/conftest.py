"""Pytest fixtures for mailbatch tests."""

import pytest

from tests.fakes import FakeVerifier


@pytest.fixture
def fake_verifier() -> FakeVerifier:
    """A verifier that answers "yes" immediately."""
    return FakeVerifier()


@pytest.fixture
def sample_emails() -> list:
    """Sample addresses for testing."""
    return ["a@x.com", "b@y.com", "c@z.org", "d@x.com", "e@y.com"]
