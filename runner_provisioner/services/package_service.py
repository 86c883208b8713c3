from __future__ import annotations

import hashlib
import http.client
import tarfile
import urllib.request
from pathlib import Path
from urllib.error import HTTPError, URLError

from aws_lambda_powertools import Logger

from ..config import Settings
from ..errors import ChecksumError, DownloadError, ExtractError, ProvisionError
from ..models import RunnerPackage

CHUNK_SIZE = 64 * 1024
USER_AGENT = "runner-provisioner"
# Present in the runner home once the archive has been unpacked.
ENTRYPOINT = "config.sh"
# Names the archive whose contents currently sit in the runner home.
EXTRACTED_MARKER = ".runner-archive"


def sha256_of(path: Path) -> str:
    digest = hashlib.sha256()
    with open(path, "rb") as fh:
        for chunk in iter(lambda: fh.read(CHUNK_SIZE), b""):
            digest.update(chunk)
    return digest.hexdigest()


class PackageProvisioner:
    """
    Keeps a pinned runner release in a local cache directory.

    The archive is downloaded once and reused by filename on later runs;
    extraction is repeated when the unpacked files belong to another
    archive or the runner entry point is missing.
    """

    def __init__(self, settings: Settings, logger: Logger) -> None:
        self.settings = settings
        self.logger = logger

    def ensure_package(self, version: str, platform: str, cache_dir: Path | str) -> Path:
        package = RunnerPackage(version=version, platform=platform)
        cache_dir = Path(cache_dir)
        try:
            cache_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ProvisionError(f"cannot create runner home {cache_dir}: {e}") from e

        archive = cache_dir / package.filename
        downloaded = False
        if archive.is_file():
            self.logger.info("Using cached runner archive", extra={"archive": str(archive)})
        else:
            self._download(package.download_url(self.settings.runner_download_url), archive)
            downloaded = True

        stale = (
            self._extracted_archive(cache_dir) != package.filename
            or not (cache_dir / ENTRYPOINT).exists()
        )
        if downloaded or stale:
            self._verify(archive)
            self._extract(archive, cache_dir)
        return archive

    def _download(self, url: str, archive: Path) -> None:
        part = archive.with_name(archive.name + ".part")
        self.logger.info("Downloading runner archive", extra={"url": url})
        req = urllib.request.Request(url, headers={"User-Agent": USER_AGENT})
        written = 0
        expected = None
        try:
            with urllib.request.urlopen(req, timeout=self.settings.http_timeout) as resp, \
                    open(part, "wb") as fh:
                expected = resp.headers.get("Content-Length")
                while True:
                    chunk = resp.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    fh.write(chunk)
                    written += len(chunk)
        except HTTPError as e:
            part.unlink(missing_ok=True)
            raise DownloadError(f"download of {url} failed: {e.code} {e.reason}") from e
        except URLError as e:
            part.unlink(missing_ok=True)
            raise DownloadError(f"download of {url} failed: {e.reason}") from e
        except (OSError, http.client.HTTPException) as e:
            part.unlink(missing_ok=True)
            raise DownloadError(f"download of {url} failed: {e}") from e

        if expected is not None and written != int(expected):
            part.unlink(missing_ok=True)
            raise DownloadError(f"incomplete download: received {written} of {expected} bytes")

        part.replace(archive)
        self.logger.info("Downloaded runner archive", extra={"archive": str(archive), "bytes": written})

    def _verify(self, archive: Path) -> None:
        expected = self.settings.runner_sha256
        if not expected:
            return
        actual = sha256_of(archive)
        if actual.lower() != expected.strip().lower():
            archive.unlink(missing_ok=True)
            raise ChecksumError(
                f"checksum mismatch for {archive.name}: expected {expected}, got {actual}"
            )

    def _extracted_archive(self, cache_dir: Path) -> str | None:
        try:
            return (cache_dir / EXTRACTED_MARKER).read_text().strip()
        except FileNotFoundError:
            return None

    def _extract(self, archive: Path, cache_dir: Path) -> None:
        self.logger.info("Extracting runner archive", extra={"archive": str(archive)})
        marker = cache_dir / EXTRACTED_MARKER
        marker.unlink(missing_ok=True)
        try:
            with tarfile.open(archive, "r:gz") as tar:
                tar.extractall(cache_dir, filter="data")
        except (tarfile.TarError, OSError, EOFError) as e:
            raise ExtractError(
                f"cannot extract {archive.name}: {e}",
                hint=f"remove {archive} to force a fresh download",
            ) from e
        marker.write_text(archive.name + "\n")
