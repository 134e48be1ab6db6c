"""Core data models for depbump."""

from dataclasses import dataclass, field
from enum import Enum, IntEnum

from .errors import UnsupportedVersionTargetError


class DigitOrder(IntEnum):
    """Ordering of two version components."""

    LESS = -1
    EQUAL = 0
    GREATER = 1


class VersionTarget(Enum):
    """Which published version a dependency is upgraded toward."""

    LATEST = "latest"  # dist-tags.latest
    GREATEST = "greatest"  # highest published version

    @classmethod
    def parse(cls, tag: "str | VersionTarget | None") -> "VersionTarget":
        """Map a target tag onto the enum, defaulting to LATEST.

        Raises:
            UnsupportedVersionTargetError: If the tag is not a known target
        """
        if isinstance(tag, cls):
            return tag
        if not tag:
            return cls.LATEST

        try:
            return cls(tag.strip().lower())
        except ValueError:
            supported = ", ".join(target.value for target in cls)
            raise UnsupportedVersionTargetError(
                f"Unsupported version target: {tag}. Supported version targets are: {supported}"
            ) from None


@dataclass
class DependencyGroup:
    """Which package.json dependency sections to read."""

    prod: bool = False
    dev: bool = False

    @property
    def include_prod(self) -> bool:
        return self.prod or not self.dev

    @property
    def include_dev(self) -> bool:
        return self.dev or not self.prod


@dataclass
class LookupResults:
    """Outcome of resolving target versions for a batch of packages."""

    succeeded: dict[str, str] = field(default_factory=dict)
    failed: dict[str, str] = field(default_factory=dict)  # name -> failure reason


@dataclass
class UpgradeReport:
    """Upgrades proposed for a manifest, plus the patched manifest text."""

    current: dict[str, str]
    upgraded: dict[str, str]
    failed: dict[str, str]
    updated_content: str | None = None

    @property
    def has_changes(self) -> bool:
        return bool(self.upgraded)
