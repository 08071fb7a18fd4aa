"""
Scratch workspace - one uniquely named project directory plus its archive
path per generation request.

The workspace is released exactly once whichever way the request ends:

    with ExitStack() as stack:
        workspace = stack.enter_context(ScratchWorkspace.allocate(root, prefix))
        ...                      # any exception releases it here
        stack.pop_all()          # success: ownership moves to the stream

    async for chunk in stream_workspace_archive(workspace): ...
"""

import secrets
import shutil
import time
from pathlib import Path
from typing import AsyncIterator, Optional

from app.core.logging_config import logger
from app.services.spring_generator.archiver import iter_file_chunks


def scratch_name(prefix: str) -> str:
    """<prefix>-<epoch ms>-<random hex>"""
    return f"{prefix}-{int(time.time() * 1000)}-{secrets.token_hex(4)}"


class ScratchWorkspace:
    def __init__(self, root: Path, name: str):
        self.root = Path(root)
        self.name = name
        self.project_dir = self.root / name
        self.archive_path = self.root / f"{name}.zip"
        self._released = False

    @classmethod
    def allocate(cls, root: Path, prefix: str, name: Optional[str] = None) -> "ScratchWorkspace":
        return cls(root, name or scratch_name(prefix))

    @property
    def released(self) -> bool:
        return self._released

    def __enter__(self) -> "ScratchWorkspace":
        self.project_dir.mkdir(parents=True, exist_ok=False)
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.release()
        return False

    def release(self) -> None:
        """Remove the project directory and archive. Failures are logged only."""
        if self._released:
            return
        self._released = True

        if self.project_dir.exists():
            try:
                shutil.rmtree(self.project_dir)
            except OSError as e:
                logger.warning(f"[Workspace] Failed to remove {self.project_dir}: {e}")
        try:
            self.archive_path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"[Workspace] Failed to remove {self.archive_path}: {e}")
        logger.debug(f"[Workspace] Released {self.name}")


async def stream_workspace_archive(workspace: ScratchWorkspace, chunk_size: int = 8192) -> AsyncIterator[bytes]:
    """Yield the archive in chunks; the workspace is released when the stream ends or is abandoned"""
    try:
        async for chunk in iter_file_chunks(workspace.archive_path, chunk_size):
            yield chunk
    finally:
        workspace.release()


def purge_stale_workspaces(root: Path, prefix: str, max_age_seconds: float = 3600) -> int:
    """Remove scratch entries left behind by a previous process. Returns how many were removed."""
    root = Path(root)
    if not root.is_dir():
        return 0

    cutoff = time.time() - max_age_seconds
    removed = 0
    for path in root.glob(f"{prefix}-*"):
        try:
            if path.stat().st_mtime >= cutoff:
                continue
            if path.is_dir():
                shutil.rmtree(path)
            else:
                path.unlink()
            removed += 1
        except OSError as e:
            logger.warning(f"[Workspace] Failed to purge {path}: {e}")
    return removed
