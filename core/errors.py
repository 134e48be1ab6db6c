"""Error types raised by the depbump core."""

from dataclasses import dataclass


class DepbumpError(Exception):
    """Base exception for all depbump errors."""


class ManifestError(DepbumpError):
    """Raised when a package manifest is missing or cannot be parsed."""


class InvalidFilterError(DepbumpError):
    """Raised when a package filter is not a regex, a name list or a delimited string."""


class UnsupportedVersionTargetError(DepbumpError):
    """Raised for a version target other than the supported ones."""


class RegistryNotInitializedError(DepbumpError):
    """Raised when the registry client is used before it has been initialized."""


class InstalledPackagesError(DepbumpError):
    """Raised when globally installed packages cannot be listed."""


@dataclass(eq=False)
class PackageLookupError(DepbumpError):
    """Raised when the target version of a single package cannot be resolved."""

    package: str
    reason: str

    def __str__(self) -> str:
        return f"{self.package}: {self.reason}"
