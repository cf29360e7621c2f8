"""Core updater — refresh libretro cores and core info files from the buildbot."""

from __future__ import annotations

import platform
import threading
import zipfile
import zlib
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING, BinaryIO, Callable

import httpx
import py7zr
from loguru import logger
from py7zr.exceptions import ArchiveError
from py7zr.io import Py7zIO, WriterFactory

from retroporter.core.progress import ProgressFactory, Reporter, TransferReporter
from retroporter.errors import ArchiveReadError, DownloadError, PackageWriteError

if TYPE_CHECKING:
    from retroporter.config import Config

DEFAULT_CHUNK_SIZE = 64 * 1024

# Buildbot directory names per platform.system()
_OS_MAP: dict[str, str] = {
    "Windows": "windows",
    "Linux": "linux",
    "Darwin": "apple/osx",
}

_ARCH_MAP: dict[str, str] = {
    "amd64": "x86_64",
    "x86_64": "x86_64",
    "x86": "x86",
    "i386": "x86",
    "i686": "x86",
    "arm64": "arm64",
    "aarch64": "arm64",
    "armv7l": "armhf",
}


def cores_url(buildbot_url: str, version: str, system: str | None = None, machine: str | None = None) -> str:
    """Download URL of the full core bundle for a release ('nightly' or a version number)."""
    system = system or platform.system()
    machine = (machine or platform.machine()).lower()
    os_dir = _OS_MAP.get(system, system.lower())
    arch_dir = _ARCH_MAP.get(machine, machine)
    release = version if version == "nightly" else f"stable/{version}"
    return f"{buildbot_url.rstrip('/')}/{release}/{os_dir}/{arch_dir}/RetroArch_cores.7z"


async def download_file(
    client: httpx.AsyncClient,
    url: str,
    path: Path,
    message: str,
    progress: ProgressFactory = TransferReporter,
) -> int:
    """Stream ``url`` into ``path``; one awaited chunk at a time. Returns bytes written."""
    downloaded = 0
    try:
        async with client.stream("GET", url) as response:
            response.raise_for_status()
            total = int(response.headers.get("content-length", 0) or 0)
            reporter = progress(total, message)
            try:
                path.parent.mkdir(parents=True, exist_ok=True)
                with open(path, "wb") as f:
                    async for chunk in response.aiter_bytes():
                        f.write(chunk)
                        downloaded += len(chunk)
                        reporter.increment(len(chunk))
            finally:
                reporter.finish()
    except httpx.HTTPError as e:
        raise DownloadError(url, e) from e
    except OSError as e:
        raise PackageWriteError(path, e) from e

    logger.debug(f"Downloaded {url} → {path} ({downloaded} bytes)")
    return downloaded


def _copy_stream(src: BinaryIO, dest: Path, reporter: Reporter, chunk_size: int) -> None:
    dest.parent.mkdir(parents=True, exist_ok=True)
    with open(dest, "wb") as out:
        while chunk := src.read(chunk_size):
            out.write(chunk)
            reporter.increment(len(chunk))


def extract_zip_file(
    archive: Path,
    destination: Path,
    message: str,
    progress: ProgressFactory = TransferReporter,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> list[Path]:
    """Extract every file of a ZIP into ``destination``, keeping entry paths."""
    extracted: list[Path] = []
    try:
        with zipfile.ZipFile(archive, "r") as zf:
            infos = [info for info in zf.infolist() if not info.is_dir()]
            reporter = progress(sum(info.file_size for info in infos), message)
            try:
                for info in infos:
                    parts = [p for p in PurePosixPath(info.filename).parts if p not in ("", ".", "..", "/")]
                    if not parts:
                        continue
                    dest = destination.joinpath(*parts)
                    with zf.open(info) as src:
                        _copy_stream(src, dest, reporter, chunk_size)
                    extracted.append(dest)
            finally:
                reporter.finish()
    except (
        OSError,
        zipfile.BadZipFile,
        zipfile.LargeZipFile,
        EOFError,
        zlib.error,
        NotImplementedError,  # compression method zipfile cannot decode (e.g. Deflate64)
        RuntimeError,  # encrypted entry
    ) as e:
        raise ArchiveReadError(archive, e) from e
    return extracted


class _FlatFile(Py7zIO):
    """Write-only sink for one archive member, opened directly at its final path."""

    def __init__(self, dest: Path, advance: Callable[[int], None]) -> None:
        dest.parent.mkdir(parents=True, exist_ok=True)
        self._file = open(dest, "wb")
        self._advance = advance
        self._written = 0

    def write(self, s: bytes | bytearray) -> int:
        n = self._file.write(s)
        self._written += n
        self._advance(n)
        return n

    def read(self, size: int | None = None) -> bytes:
        return b""

    def seek(self, offset: int, whence: int = 0) -> int:
        return self._file.seek(offset, whence)

    def flush(self) -> None:
        self._file.flush()

    def size(self) -> int:
        return self._written

    def close(self) -> None:
        if not self._file.closed:
            self._file.close()


class _FlatteningFactory(WriterFactory):
    """Routes every 7z member to ``<destination>/<basename>``; a later duplicate wins."""

    def __init__(self, destination: Path, reporter: Reporter) -> None:
        self._destination = destination
        self._reporter = reporter
        # py7zr decompresses independent folders on worker threads
        self._lock = threading.Lock()
        self.files: dict[Path, _FlatFile] = {}

    def create(self, filename: str) -> Py7zIO:
        dest = self._destination / PurePosixPath(filename.replace("\\", "/")).name
        previous = self.files.get(dest)
        if previous is not None:
            previous.close()
        sink = _FlatFile(dest, self._advance)
        self.files[dest] = sink
        return sink

    def _advance(self, n: int) -> None:
        with self._lock:
            self._reporter.increment(n)

    def close(self) -> None:
        for sink in self.files.values():
            sink.close()


def extract_7zip_file(
    archive: Path,
    destination: Path,
    message: str,
    progress: ProgressFactory = TransferReporter,
) -> list[Path]:
    """Extract a 7z archive, flattening every file to its basename in ``destination``."""
    try:
        with py7zr.SevenZipFile(archive, mode="r") as sz:
            total = sum(e.uncompressed or 0 for e in sz.list() if not e.is_directory)
            reporter = progress(total, message)
            factory = _FlatteningFactory(destination, reporter)
            try:
                sz.extractall(path=destination, factory=factory)
            finally:
                factory.close()
                reporter.finish()
    except (ArchiveError, OSError) as e:
        raise ArchiveReadError(archive, e) from e
    return list(factory.files)


def _http_client(config: Config | None) -> httpx.AsyncClient:
    """Create an httpx AsyncClient with optional proxy (read from config)."""
    kwargs: dict = {"follow_redirects": True, "timeout": 60.0}
    if config is not None:
        kwargs["timeout"] = config.http_timeout
        if config.proxy_url:
            kwargs["proxy"] = config.proxy_url
    return httpx.AsyncClient(**kwargs)


async def update_cores(
    version: str,
    cores_dir: Path,
    info_dir: Path,
    config: Config,
    progress: ProgressFactory = TransferReporter,
    client: httpx.AsyncClient | None = None,
) -> list[Path]:
    """Download and unpack the core bundle and the core info files. Returns extracted paths."""
    chunk_size = config.chunk_size
    core_url = cores_url(config.buildbot_url, version)
    core_archive = cores_dir / "cores.7z"
    info_archive = info_dir / "info.zip"

    owns_client = client is None
    client = client or _http_client(config)
    try:
        logger.info(f"Downloading cores ({version}) from {core_url}")
        await download_file(client, core_url, core_archive, "Downloading cores...", progress)
        extracted = extract_7zip_file(core_archive, cores_dir, "Extracting cores...", progress)
        core_archive.unlink(missing_ok=True)

        logger.info(f"Downloading core info files from {config.info_url}")
        await download_file(client, config.info_url, info_archive, "Downloading info files...", progress)
        extracted += extract_zip_file(info_archive, info_dir, "Extracting info files...", progress, chunk_size)
        info_archive.unlink(missing_ok=True)
    finally:
        if owns_client:
            await client.aclose()

    logger.info(f"Cores successfully updated ({len(extracted)} files)")
    return extracted

