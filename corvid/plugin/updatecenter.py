"""
Update Center Gateway.

Fetches the remote catalog of installable plugin releases.

The catalog is a JSON document:

    {
      "plugins": [
        {"key": "java", "version": "5.1.0",
         "downloadUrl": "https://.../java-5.1.0.zip",
         "requires": ["licensing"]}
      ]
    }

get_catalog() returns None whenever no catalog is available: the update
center is deactivated, unreachable, or answers with an unusable document.
"""

import threading
from dataclasses import dataclass, field
from typing import Any

import httpx

from corvid.log import get_logger

logger = get_logger(__name__)


class CatalogError(Exception):
    """Raised when the catalog is malformed or lacks a requested plugin."""

    pass


@dataclass(frozen=True)
class PluginRelease:
    """
    One downloadable plugin release.

    Attributes:
        key: Plugin key
        version: Release version
        download_url: Where to fetch the archive
        requires: Keys of the plugins this release needs
    """

    key: str
    version: str
    download_url: str
    requires: tuple[str, ...] = ()

    @property
    def filename(self) -> str:
        return f"{self.key}-{self.version}.zip"


@dataclass
class Catalog:
    """Remote listing of installable plugin releases, indexed by key."""

    releases: dict[str, PluginRelease] = field(default_factory=dict)

    @classmethod
    def from_json(cls, data: Any) -> "Catalog":
        """
        Build a catalog from its decoded JSON document.

        Raises:
            CatalogError: If the document does not have the expected shape
        """
        if not isinstance(data, dict) or not isinstance(data.get("plugins"), list):
            raise CatalogError("Catalog must be an object with a 'plugins' list")

        releases = {}
        for entry in data["plugins"]:
            try:
                release = PluginRelease(
                    key=entry["key"],
                    version=entry["version"],
                    download_url=entry["downloadUrl"],
                    requires=tuple(entry.get("requires", ())),
                )
            except (KeyError, TypeError) as e:
                raise CatalogError(f"Invalid catalog entry {entry!r}: {e}") from e
            releases[release.key] = release

        return cls(releases=releases)

    def get(self, key: str) -> PluginRelease | None:
        return self.releases.get(key)

    def find_installable(self, key: str) -> list[PluginRelease]:
        """
        Releases needed to install a plugin.

        Args:
            key: Plugin key

        Returns:
            The required plugins' releases first (transitively, each once),
            then the release of key itself

        Raises:
            CatalogError: If key or one of its requirements is not in the catalog
        """
        ordered: list[PluginRelease] = []
        visiting: set[str] = set()
        done: set[str] = set()

        def visit(current: str, wanted_by: str | None) -> None:
            if current in done or current in visiting:
                return
            release = self.releases.get(current)
            if release is None:
                if wanted_by is None:
                    raise CatalogError(f"Plugin not found in catalog: {current}")
                raise CatalogError(
                    f"Plugin {wanted_by} requires {current}, which is not in the catalog"
                )
            visiting.add(current)
            for required in release.requires:
                visit(required, current)
            visiting.discard(current)
            done.add(current)
            ordered.append(release)

        visit(key, None)
        return ordered


class UpdateCenterGateway:
    """
    Access point to the update center.

    Settings not passed explicitly come from the [updatecenter] section.
    """

    def __init__(
        self,
        url: str | None = None,
        activate: bool | None = None,
        timeout: float | None = None,
        client: httpx.Client | None = None,
    ):
        if url is None or activate is None or timeout is None:
            import corvid.config

            cfg = corvid.config.get("updatecenter")
            url = cfg.url if url is None else url
            activate = cfg.activate if activate is None else activate
            timeout = cfg.timeout if timeout is None else timeout

        self.url = url
        self.activate = activate
        self._client = client or httpx.Client(timeout=timeout, follow_redirects=True)
        self._catalog: Catalog | None = None
        self._lock = threading.Lock()

    def get_catalog(self, force_refresh: bool = False) -> Catalog | None:
        """
        Get the plugin catalog.

        Args:
            force_refresh: Fetch again even when a catalog is cached

        Returns:
            The catalog, or None if the update center is deactivated or
            cannot be reached
        """
        if not self.activate:
            logger.debug("Update center is deactivated")
            return None

        with self._lock:
            if self._catalog is not None and not force_refresh:
                return self._catalog

            try:
                response = self._client.get(self.url)
                response.raise_for_status()
                self._catalog = Catalog.from_json(response.json())
            except (httpx.HTTPError, httpx.InvalidURL, ValueError, CatalogError) as e:
                logger.warning(f"Update center {self.url} is not available: {e}")
                self._catalog = None

            return self._catalog

    def close(self) -> None:
        self._client.close()
