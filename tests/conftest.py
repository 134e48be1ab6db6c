"""Pytest configuration and fixtures."""

from unittest.mock import AsyncMock

import pytest

from core.models import LookupResults


@pytest.fixture
def sample_package_json():
    """Sample package.json content for testing."""
    return """{
  "name": "test-project",
  "version": "1.0.0",
  "dependencies": {
    "express": "^4.0.0",
    "lodash": "4.17.x"
  },
  "devDependencies": {
    "jest": "~29.0.0"
  }
}
"""


@pytest.fixture
def latest_versions():
    """Registry versions matching sample_package_json."""
    return {"express": "5.1.0", "lodash": "4.17.21", "jest": "29.7.0"}


@pytest.fixture
def temp_manifest_file(tmp_path, sample_package_json):
    """Create a temporary package.json for testing."""
    manifest = tmp_path / "package.json"
    manifest.write_text(sample_package_json)
    return manifest


@pytest.fixture
def fake_resolver(latest_versions):
    """Stand-in for NpmResolver that answers from latest_versions."""
    resolver = AsyncMock()
    resolver.__aenter__.return_value = resolver
    resolver.__aexit__.return_value = False

    async def get_latest_versions(names, target="latest"):
        results = LookupResults()
        for name in names:
            if name in latest_versions:
                results.succeeded[name] = latest_versions[name]
            else:
                results.failed[name] = "Package not found"
        return results

    resolver.get_latest_versions.side_effect = get_latest_versions
    return resolver
