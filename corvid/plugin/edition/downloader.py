"""
Edition Plugin Downloader.

Downloads the plugins of an edition, with the plugins they require, into
the downloads directory. Downloaded archives are installed by the server on
its next restart.

Downloads are all-or-nothing: archives are first written to a temporary
directory and only moved into the downloads directory once every one of
them has been fetched.
"""

import shutil
import tempfile
from collections.abc import Iterable
from pathlib import Path

import httpx

from corvid.log import get_logger
from corvid.plugin.edition.errors import DownloadError
from corvid.plugin.repository import PluginRepository
from corvid.plugin.updatecenter import Catalog, CatalogError, PluginRelease

logger = get_logger(__name__)


class EditionPluginDownloader:
    """Fetches plugin archives listed in the update center catalog."""

    def __init__(
        self,
        downloads_dir: Path,
        plugin_repository: PluginRepository | None = None,
        client: httpx.Client | None = None,
        timeout: float = 30.0,
    ):
        """
        Args:
            downloads_dir: Directory receiving the downloaded archives
            plugin_repository: When given, required plugins that are already
                installed are not downloaded again
            client: HTTP client (a default one is created when omitted)
            timeout: Timeout of the default client, in seconds
        """
        self.downloads_dir = Path(downloads_dir)
        self._repository = plugin_repository
        self._client = client or httpx.Client(timeout=timeout, follow_redirects=True)

    def install_edition(self, plugin_keys: Iterable[str], catalog: Catalog) -> list[Path]:
        """
        Download the given plugins and their requirements.

        Args:
            plugin_keys: Keys of the plugins to install
            catalog: Catalog used to resolve releases

        Returns:
            Paths of the downloaded archives

        Raises:
            DownloadError: If a release cannot be resolved or downloaded.
                Nothing is left in the downloads directory in that case.
        """
        releases = self._resolve(plugin_keys, catalog)
        if not releases:
            return []

        self.downloads_dir.mkdir(parents=True, exist_ok=True)
        tmp_dir = Path(tempfile.mkdtemp(prefix=".edition-", dir=self.downloads_dir.parent))

        try:
            for release in releases:
                logger.info(f"Downloading {release.key} {release.version}")
                self._download(release, tmp_dir / release.filename)

            downloaded = []
            try:
                for release in releases:
                    target = self.downloads_dir / release.filename
                    shutil.move(str(tmp_dir / release.filename), str(target))
                    downloaded.append(target)
            except OSError:
                for target in downloaded:
                    target.unlink(missing_ok=True)
                raise
            return downloaded

        except (httpx.HTTPError, OSError) as e:
            raise DownloadError(f"Failed to download edition plugins: {e}") from e
        finally:
            shutil.rmtree(tmp_dir, ignore_errors=True)

    def _resolve(self, plugin_keys: Iterable[str], catalog: Catalog) -> list[PluginRelease]:
        installed = self._repository.list_installed() if self._repository else set()
        wanted = set(plugin_keys)

        releases: dict[str, PluginRelease] = {}
        for key in sorted(wanted):
            try:
                candidates = catalog.find_installable(key)
            except CatalogError as e:
                raise DownloadError(str(e)) from e

            for release in candidates:
                # Requirements already present are kept as they are
                if release.key in installed and release.key not in wanted:
                    continue
                releases.setdefault(release.key, release)

        return list(releases.values())

    def _download(self, release: PluginRelease, target: Path) -> None:
        with self._client.stream("GET", release.download_url) as response:
            response.raise_for_status()
            with open(target, "wb") as f:
                for chunk in response.iter_bytes():
                    f.write(chunk)

    def cancel_downloads(self) -> int:
        """
        Delete every archive waiting in the downloads directory.

        Returns:
            Number of deleted archives
        """
        if not self.downloads_dir.exists():
            return 0

        count = 0
        for archive in self.downloads_dir.glob("*.zip"):
            archive.unlink()
            count += 1
        return count

    def close(self) -> None:
        self._client.close()
