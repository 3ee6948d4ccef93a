"""npm registry client: package existence, latest-release lookup, tarball fetch."""

from __future__ import annotations

import asyncio
import http.client
import io
import json
import shutil
import tarfile
import urllib.error
import urllib.parse
import urllib.request
from pathlib import Path

from dext.core.config import DEFAULT_REGISTRY
from dext.core.logging import get_logger
from dext.core.utils import plugin_path
from dext.errors import RegistryError

from .models import PackageInfo

log = get_logger(__name__)

USER_AGENT = "dext/0.1.0"
MAX_TARBALL_BYTES = 64 * 1024 * 1024  # 64MB


def _package_url(registry_url: str, name: str) -> str:
    # scoped names keep the leading @ but encode the slash: @scope%2Fpkg
    return f"{registry_url.rstrip('/')}/{urllib.parse.quote(name, safe='@')}"


def _strip_first_component(members: list[tarfile.TarInfo]) -> list[tarfile.TarInfo]:
    """Drop the top-level directory npm packs everything under (usually ``package/``)."""
    result = []
    for member in members:
        parts = member.name.removeprefix("./").split("/", 1)
        if len(parts) < 2 or not parts[1]:
            continue
        member.name = parts[1]
        result.append(member)
    return result


def _mapping(data: object, key: str, name: str) -> dict:
    """Return the object under *key*; anything else in the document is malformed."""
    if not isinstance(data, dict):
        raise RegistryError(f"invalid package document for {name}")
    value = data.get(key, {})
    if not isinstance(value, dict):
        raise RegistryError(f"invalid package document for {name}")
    return value


def _clear(dest: Path) -> None:
    """Remove a previous copy at *dest*. A file or symlink is unlinked, never followed."""
    if dest.is_symlink() or dest.is_file():
        dest.unlink()
    elif dest.exists():
        shutil.rmtree(dest)


class NpmRegistry:
    """Blocking HTTP calls to the registry, run in a worker thread."""

    def __init__(self, registry_url: str = DEFAULT_REGISTRY, timeout: float = 30.0):
        self.registry_url = registry_url
        self.timeout = timeout

    def _get(self, url: str, limit: int | None = None) -> bytes:
        req = urllib.request.Request(url, headers={"User-Agent": USER_AGENT})
        with urllib.request.urlopen(req, timeout=self.timeout) as resp:
            if not limit:
                return resp.read()
            body = resp.read(limit + 1)
        if len(body) > limit:
            raise RegistryError(f"response from {url} exceeds {limit} bytes")
        return body

    def _exists(self, name: str) -> bool:
        url = _package_url(self.registry_url, name)
        try:
            self._get(url)
        except urllib.error.HTTPError as e:
            if e.code != 404:
                log.warning("registry lookup failed", plugin=name, status=e.code)
            return False
        except (urllib.error.URLError, OSError, http.client.HTTPException, ValueError) as e:
            # ValueError: malformed registry URL (no scheme)
            log.warning("registry unreachable", plugin=name, error=str(e))
            return False
        return True

    def _latest(self, name: str) -> PackageInfo:
        url = _package_url(self.registry_url, name)
        try:
            data = json.loads(self._get(url))
        except urllib.error.HTTPError as e:
            raise RegistryError(f"HTTP {e.code} {e.reason} for {name}") from e
        except json.JSONDecodeError as e:
            raise RegistryError(f"invalid package document for {name}") from e
        except (urllib.error.URLError, OSError, http.client.HTTPException, ValueError) as e:
            raise RegistryError(f"cannot reach registry for {name}: {e}") from e

        dist_tags = _mapping(data, "dist-tags", name)
        version = dist_tags.get("latest", "")
        if not isinstance(version, str) or not version:
            raise RegistryError(f"no published release for {name}")
        release = _mapping(_mapping(data, "versions", name), version, name)
        tarball = _mapping(release, "dist", name).get("tarball", "")
        if not isinstance(tarball, str) or not tarball:
            raise RegistryError(f"no published release for {name}")
        return PackageInfo(name=name, version=version, tarball=tarball)

    def _fetch(self, name: str, dest_dir: Path) -> Path:
        info = self._latest(name)
        log.debug("downloading", plugin=name, version=info.version, url=info.tarball)
        try:
            raw = self._get(info.tarball, limit=MAX_TARBALL_BYTES)
        except (urllib.error.URLError, OSError, http.client.HTTPException, ValueError) as e:
            raise RegistryError(f"download failed for {name}: {e}") from e

        try:
            dest = plugin_path(dest_dir, name)
        except ValueError as e:
            raise RegistryError(str(e)) from e
        try:
            _clear(dest)
            dest.mkdir(parents=True)
            with tarfile.open(fileobj=io.BytesIO(raw), mode="r:*") as archive:
                members = _strip_first_component(archive.getmembers())
                archive.extractall(dest, members=members, filter="data")
        except (tarfile.TarError, OSError) as e:
            raise RegistryError(f"cannot unpack {name}@{info.version}: {e}") from e
        log.debug("unpacked", plugin=name, path=str(dest))
        return dest

    async def exists(self, name: str) -> bool:
        """True if the registry serves a package document for *name*.

        Transport and server errors are reported as "not found".
        """
        return await asyncio.to_thread(self._exists, name)

    async def latest(self, name: str) -> PackageInfo:
        return await asyncio.to_thread(self._latest, name)

    async def fetch(self, name: str, dest_dir: Path) -> Path:
        """Download the latest release of *name* and unpack it under *dest_dir*/*name*."""
        return await asyncio.to_thread(self._fetch, name, Path(dest_dir))
