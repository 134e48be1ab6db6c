"""Upgrade pipeline: read manifest, query registry, upgrade, patch."""

import logging

from .models import DependencyGroup, UpgradeReport, VersionTarget
from .parse_node import parse_package_json
from .resolve_node import NpmResolver
from .update_node import update_package_data
from .upgrade import upgrade_dependencies

logger = logging.getLogger(__name__)


async def upgrade_dependency_map(
    current: dict[str, str],
    resolver: NpmResolver,
    target: VersionTarget | str = VersionTarget.LATEST,
) -> UpgradeReport:
    """Look up target versions for `current` and compute upgraded declarations."""
    target = VersionTarget.parse(target)
    lookups = await resolver.get_latest_versions(current.keys(), target)
    upgraded = upgrade_dependencies(current, lookups.succeeded)
    logger.debug("%d of %d dependencies upgradeable", len(upgraded), len(current))
    return UpgradeReport(current=current, upgraded=upgraded, failed=lookups.failed)


async def upgrade_package_json(
    content: str,
    resolver: NpmResolver,
    group: DependencyGroup | None = None,
    package_filter=None,
    target: VersionTarget | str = VersionTarget.LATEST,
) -> UpgradeReport:
    """Upgrade the declarations of a package.json document.

    Manifest, filter and target errors are raised before any registry
    lookup; lookup failures are reported in ``UpgradeReport.failed``.
    """
    target = VersionTarget.parse(target)
    current = parse_package_json(content, group=group, package_filter=package_filter)

    report = await upgrade_dependency_map(current, resolver, target)
    report.updated_content = update_package_data(content, current, report.upgraded)
    return report
