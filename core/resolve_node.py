"""npm registry version resolution."""

import asyncio
import logging
from collections.abc import Iterable
from urllib.parse import quote

import httpx
from semantic_version import Version

from .errors import PackageLookupError, RegistryNotInitializedError
from .models import LookupResults, VersionTarget

logger = logging.getLogger(__name__)

DEFAULT_REGISTRY = "https://registry.npmjs.org/"


class NpmResolver:
    """Resolver for npm package versions.

    The resolver must be initialized before use, either explicitly::

        resolver = await NpmResolver().initialize()
        ...
        await resolver.aclose()

    or as an async context manager::

        async with NpmResolver() as resolver:
            results = await resolver.get_latest_versions(["react"])
    """

    def __init__(
        self,
        registry_url: str = DEFAULT_REGISTRY,
        timeout: float = 30.0,
        max_concurrency: int = 6,
    ):
        """Initialize npm resolver.

        Args:
            registry_url: Base URL of the npm registry
            timeout: Request timeout in seconds
            max_concurrency: Maximum concurrent requests
        """
        self.registry_url = registry_url
        self.timeout = timeout
        self.max_concurrency = max_concurrency
        self._client: httpx.AsyncClient | None = None
        self._cache: dict[str, dict] = {}
        self._semaphore = asyncio.Semaphore(max_concurrency)

    @property
    def is_initialized(self) -> bool:
        return self._client is not None

    async def initialize(self, transport: httpx.AsyncBaseTransport | None = None) -> "NpmResolver":
        """Open the HTTP session used for registry lookups."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                headers={"Accept": "application/json"},
                follow_redirects=True,
                transport=transport,
            )
        return self

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "NpmResolver":
        return await self.initialize()

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    def _require_client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise RegistryNotInitializedError(
                "initialize must be called before using the npm resolver"
            )
        return self._client

    def package_url(self, package_name: str) -> str:
        # Scoped packages keep the @ but escape the slash: @scope%2Fname
        return f"{self.registry_url.rstrip('/')}/{quote(package_name, safe='@')}"

    async def get_latest_version(self, package_name: str) -> str:
        """Get the version tagged `latest` for a package.

        Args:
            package_name: Name of the package

        Returns:
            Latest version string
        """
        packument = await self._fetch_packument(package_name)
        latest = (packument.get("dist-tags") or {}).get("latest")
        if not latest:
            raise PackageLookupError(package_name, "No latest dist-tag published")
        return latest

    async def get_greatest_version(self, package_name: str) -> str:
        """Get the highest published version of a package.

        Args:
            package_name: Name of the package

        Returns:
            Greatest version string
        """
        packument = await self._fetch_packument(package_name)

        versions = []
        for version_str in (packument.get("versions") or {}).keys():
            try:
                versions.append(Version(version_str))
            except ValueError:
                continue  # Skip invalid versions

        if not versions:
            raise PackageLookupError(package_name, "No valid versions published")
        return str(max(versions))

    async def get_version(self, package_name: str, target: VersionTarget) -> str:
        lookups = {
            VersionTarget.LATEST: self.get_latest_version,
            VersionTarget.GREATEST: self.get_greatest_version,
        }
        return await lookups[target](package_name)

    async def get_latest_versions(
        self, package_names: Iterable[str], target: VersionTarget | str = VersionTarget.LATEST
    ) -> LookupResults:
        """Resolve target versions for many packages concurrently.

        A failed lookup does not abort the batch; it is reported in
        ``LookupResults.failed`` instead.

        Args:
            package_names: Names of the packages to query
            target: `latest` or `greatest`

        Returns:
            Succeeded (name -> version) and failed (name -> reason) lookups
        """
        target = VersionTarget.parse(target)
        self._require_client()
        names = list(dict.fromkeys(package_names))

        async def lookup(name: str) -> str:
            async with self._semaphore:
                return await self.get_version(name, target)

        outcomes = await asyncio.gather(*(lookup(name) for name in names), return_exceptions=True)

        results = LookupResults()
        for name, outcome in zip(names, outcomes):
            if isinstance(outcome, PackageLookupError):
                logger.warning("Lookup failed for %s: %s", name, outcome.reason)
                results.failed[name] = outcome.reason
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                logger.debug("Resolved %s %s -> %s", name, target.value, outcome)
                results.succeeded[name] = outcome
        return results

    async def _fetch_packument(self, package_name: str) -> dict:
        """Fetch package metadata (the packument) from the registry.

        Args:
            package_name: Name of the package

        Returns:
            Packument dict
        """
        client = self._require_client()

        # Check cache first
        if package_name in self._cache:
            return self._cache[package_name]

        url = self.package_url(package_name)
        logger.debug("GET %s", url)

        try:
            response = await client.get(url)
            if response.status_code == 404:
                raise PackageLookupError(package_name, "Package not found")
            response.raise_for_status()
            packument = response.json()
        except httpx.TimeoutException:
            raise PackageLookupError(package_name, f"Timeout after {self.timeout}s") from None
        except httpx.HTTPStatusError as e:
            raise PackageLookupError(package_name, f"HTTP error {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise PackageLookupError(package_name, f"Network error: {e}") from e
        except ValueError as e:
            raise PackageLookupError(package_name, f"Invalid registry response: {e}") from e

        if not isinstance(packument, dict):
            raise PackageLookupError(package_name, "Invalid registry response")

        self._cache[package_name] = packument
        return packument
