"""Tests for listing globally installed npm packages."""

import json
import subprocess
from unittest.mock import patch

import pytest

from core.errors import InstalledPackagesError
from core.installed import NPM_LIST_COMMAND, get_installed_packages, parse_npm_list

NPM_LS_OUTPUT = json.dumps({
    "name": "lib",
    "dependencies": {
        "npm": {"version": "9.8.1"},
        "typescript": {"version": "5.1.6", "overridden": False},
        "broken-link": {"missing": True},
    },
})


class TestParseNpmList:
    """Test parsing `npm ls --json` output."""

    def test_maps_names_to_versions(self):
        assert parse_npm_list(NPM_LS_OUTPUT) == {"npm": "9.8.1", "typescript": "5.1.6"}

    def test_invalid_json(self):
        with pytest.raises(InstalledPackagesError):
            parse_npm_list("npm ERR! something")

    def test_missing_dependencies(self):
        with pytest.raises(InstalledPackagesError) as exc_info:
            parse_npm_list('{"name": "lib"}')
        assert "Unable to retrieve npm package list" in str(exc_info.value)


class TestGetInstalledPackages:
    """Test running npm."""

    def test_runs_npm_ls(self):
        completed = subprocess.CompletedProcess(NPM_LIST_COMMAND, 0, stdout=NPM_LS_OUTPUT, stderr="")
        with patch("core.installed.subprocess.run", return_value=completed) as mock_run:
            assert get_installed_packages() == {"npm": "9.8.1", "typescript": "5.1.6"}

        assert mock_run.call_args[0][0] == NPM_LIST_COMMAND

    def test_nonzero_exit_with_listing(self):
        """npm ls exits 1 for extraneous packages but still lists them."""
        completed = subprocess.CompletedProcess(NPM_LIST_COMMAND, 1, stdout=NPM_LS_OUTPUT, stderr="npm ERR! extraneous")
        with patch("core.installed.subprocess.run", return_value=completed):
            assert get_installed_packages()["npm"] == "9.8.1"

    def test_npm_not_installed(self):
        with patch("core.installed.subprocess.run", side_effect=FileNotFoundError("npm")):
            with pytest.raises(InstalledPackagesError) as exc_info:
                get_installed_packages()
        assert "npm executable not found" in str(exc_info.value)
