from __future__ import annotations

import pytest

from codecheck.config import Settings


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from the developer's environment and .env file."""
    return Settings(
        _env_file=None,
        GITHUB_API_URL="https://api.github.test",
        GITHUB_PERSONAL_ACCESS_TOKEN=None,
        W3C_VALIDATOR_URL="https://validator.test/nu/?out=json",
        USER_AGENT="codecheck-tests",
        MAX_TREE_DEPTH=8,
        NAVIGATION_TIMEOUT_MS=1000,
    )
