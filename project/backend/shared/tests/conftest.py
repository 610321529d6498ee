"""
Pytest configuration and fixtures.
"""

import pytest


@pytest.fixture
def test_env_file(tmp_path):
    """Create a temporary .env file for testing."""
    env_file = tmp_path / ".env"
    env_content = """
ENVIRONMENT=development
LOG_LEVEL=DEBUG
OUTPUT_MODE=video-encode
RETENTION_SECONDS=120
ASSET_FETCH_CONCURRENCY=4
"""
    env_file.write_text(env_content)
    return env_file
