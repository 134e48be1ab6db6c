"""Node.js package.json parsing."""

import json
from pathlib import Path

from .errors import ManifestError
from .filters import filter_dependencies
from .models import DependencyGroup

PROD_SECTION = "dependencies"
DEV_SECTION = "devDependencies"


class PackageJsonParser:
    """Parser for the dependency sections of package.json files."""

    def __init__(self, group: DependencyGroup | None = None, package_filter=None):
        self.group = group or DependencyGroup()
        self.package_filter = package_filter

    def _load(self, content: str) -> dict:
        if not content or not content.strip():
            raise ManifestError("package.json is empty")

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise ManifestError(f"package.json does not contain valid json: {e}") from e

        if not isinstance(data, dict):
            raise ManifestError("package.json does not contain a json object")
        return data

    def _section(self, data: dict, section: str) -> dict[str, str]:
        deps = data.get(section) or {}
        if not isinstance(deps, dict):
            raise ManifestError(f"package.json {section} must be an object")
        # Non-string values (nested objects, numbers) are not version declarations
        return {name: spec for name, spec in deps.items() if isinstance(spec, str)}

    def parse(self, content: str) -> dict[str, str]:
        """Return package name -> declaration for the selected sections."""
        data = self._load(content)

        dependencies: dict[str, str] = {}
        if self.group.include_prod:
            dependencies.update(self._section(data, PROD_SECTION))
        if self.group.include_dev:
            dependencies.update(self._section(data, DEV_SECTION))

        return filter_dependencies(dependencies, self.package_filter)


def parse_package_json(
    content: str, group: DependencyGroup | None = None, package_filter=None
) -> dict[str, str]:
    """Parse package.json content into a dependency collection.

    Args:
        content: The package.json file content
        group: Which dependency sections to include (both by default)
        package_filter: Optional name filter, see :mod:`core.filters`

    Returns:
        Package name -> current version declaration
    """
    parser = PackageJsonParser(group=group, package_filter=package_filter)
    return parser.parse(content)


def read_package_json(path: Path) -> str:
    """Read a package.json file, raising ManifestError if it is missing."""
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise ManifestError(f"File {path} not found") from e
    except OSError as e:
        raise ManifestError(f"Cannot read {path}: {e}") from e
