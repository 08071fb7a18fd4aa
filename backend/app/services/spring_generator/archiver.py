"""
Project Archiver

Compresses an assembled project into a ZIP whose entries are the project's
relative POSIX paths, sorted, and verifies the result before it is streamed.
"""

import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import AsyncIterator, List

import aiofiles

from app.core.exceptions import ArchiveError, EmptyArchiveError
from app.core.logging_config import logger


@dataclass
class ArchiveResult:
    path: Path
    entries: List[str]
    size_bytes: int

    @property
    def entry_count(self) -> int:
        return len(self.entries)


class ProjectArchiver:
    def __init__(self, compression_level: int = 9):
        self.compression_level = compression_level

    def create_archive(self, source_path: Path, zip_path: Path) -> ArchiveResult:
        """
        Zip every file under `source_path` into `zip_path`.

        Raises:
            ArchiveError: source missing, entry count mismatch or corrupt member
            EmptyArchiveError: nothing was archived
        """
        source_path = Path(source_path)
        zip_path = Path(zip_path)
        if not source_path.is_dir():
            raise ArchiveError(f"Project folder not found at {source_path}", str(zip_path))

        files = sorted(
            (p for p in source_path.rglob("*") if p.is_file()),
            key=lambda p: p.relative_to(source_path).as_posix(),
        )
        entries = [p.relative_to(source_path).as_posix() for p in files]

        with zipfile.ZipFile(
            zip_path, "w", zipfile.ZIP_DEFLATED, compresslevel=self.compression_level
        ) as zipf:
            for file_path, arcname in zip(files, entries):
                zipf.write(file_path, arcname)

        size = zip_path.stat().st_size if zip_path.exists() else 0
        if size == 0 or not entries:
            raise EmptyArchiveError(str(zip_path))

        self._verify(zip_path, entries)
        logger.info(f"[Archiver] Created ZIP: {zip_path} ({len(entries)} entries, {size} bytes)")
        return ArchiveResult(path=zip_path, entries=entries, size_bytes=size)

    def _verify(self, zip_path: Path, entries: List[str]) -> None:
        try:
            with zipfile.ZipFile(zip_path) as zipf:
                names = zipf.namelist()
                bad_member = zipf.testzip()
        except zipfile.BadZipFile as e:
            raise ArchiveError(f"Generated zip is unreadable: {e}", str(zip_path)) from e

        if bad_member is not None:
            raise ArchiveError(f"Generated zip has a corrupt member: {bad_member}", str(zip_path))
        if len(names) != len(entries):
            raise ArchiveError(
                f"Generated zip has {len(names)} entries, expected {len(entries)}",
                str(zip_path),
            )


async def iter_file_chunks(path: Path, chunk_size: int = 8192) -> AsyncIterator[bytes]:
    async with aiofiles.open(path, "rb") as f:
        while chunk := await f.read(chunk_size):
            yield chunk
