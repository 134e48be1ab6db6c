"""Globally installed npm packages."""

import json
import logging
import subprocess

from .errors import InstalledPackagesError

logger = logging.getLogger(__name__)

NPM_LIST_COMMAND = ["npm", "ls", "--global", "--json", "--depth=0"]


def parse_npm_list(output: str) -> dict[str, str]:
    """Map the top-level packages of `npm ls --json` output to their versions."""
    try:
        data = json.loads(output)
    except json.JSONDecodeError as e:
        raise InstalledPackagesError(f"Unable to parse npm package list: {e}") from e

    packages = data.get("dependencies") if isinstance(data, dict) else None
    if not isinstance(packages, dict):
        raise InstalledPackagesError("Unable to retrieve npm package list")

    installed = {}
    for name, info in packages.items():
        version = info.get("version") if isinstance(info, dict) else None
        if version:
            installed[name] = version
    return installed


def get_installed_packages(timeout: float = 60.0) -> dict[str, str]:
    """Return package name -> installed version for global npm packages."""
    try:
        completed = subprocess.run(
            NPM_LIST_COMMAND,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except FileNotFoundError as e:
        raise InstalledPackagesError("npm executable not found") from e
    except subprocess.TimeoutExpired as e:
        raise InstalledPackagesError(f"npm ls timed out after {timeout}s") from e

    # npm exits non-zero for extraneous or missing packages but still prints the tree
    if completed.returncode != 0:
        logger.debug("npm ls exited with %s: %s", completed.returncode, completed.stderr.strip())

    return parse_npm_list(completed.stdout)
