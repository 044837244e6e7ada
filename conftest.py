"""Root pytest configuration and fixtures.

This module provides:
- Environment setup (loads .env)
- Auto-skipping of integration tests without provider credentials
- Global test configuration
"""

from __future__ import annotations

from pathlib import Path

import pytest
from dotenv import load_dotenv

from layoutforge.config import get_available_llm_providers

# Load environment variables from .env file
load_dotenv()


# =============================================================================
# Configuration Constants
# =============================================================================

REPO_ROOT = Path(__file__).parent


# =============================================================================
# Pytest Hooks
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]):
    """Modify test collection based on available credentials.

    Auto-skips tests marked integration when no provider key is configured.
    """
    providers_available = bool(get_available_llm_providers())

    skip_integration = pytest.mark.skip(reason="No LLM provider credentials")

    for item in items:
        if "integration" in item.keywords and not providers_available:
            item.add_marker(skip_integration)


# =============================================================================
# Common Test Fixtures
# =============================================================================


@pytest.fixture(scope="session")
def repo_root() -> Path:
    """Repository root, used as the working directory for CLI tests.

    Returns:
        Path to the directory holding __main__.py.
    """
    return REPO_ROOT
