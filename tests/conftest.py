"""
Pytest configuration and shared fixtures for all boltmod tests.

The Lark grammar is compiled once per session; parsers are stateless
between parse() calls and safe to share.
"""

import sys
import pytest
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
from boltmod.frontend.parser import Parser
from boltmod.utils.config import ResolverConfig


# =============================================================================
# Session-scoped fixtures (shared across all tests)
# =============================================================================

@pytest.fixture(scope="session")
def session_parser():
    """Session-scoped parser shared across ALL tests."""
    return Parser()


# =============================================================================
# Function-scoped fixtures (default - one per test)
# =============================================================================

@pytest.fixture
def parser(session_parser):
    return session_parser


@pytest.fixture
def config():
    """Fresh resolver config per test (tests mutate it)."""
    return ResolverConfig()


@pytest.fixture
def no_color(monkeypatch):
    """Plain diagnostics regardless of the terminal."""
    monkeypatch.setenv("NO_COLOR", "1")


# =============================================================================
# Markers
# =============================================================================

def pytest_configure(config):
    """Register custom markers for test organization."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
