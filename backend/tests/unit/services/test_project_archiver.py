"""
Unit Tests for the Project Archiver and Scratch Workspace
"""
import os
import re
import time
import zipfile
from pathlib import Path

import pytest

from app.core.exceptions import ArchiveError, EmptyArchiveError
from app.services.spring_generator.archiver import ProjectArchiver
from app.services.spring_generator.workspace import (
    ScratchWorkspace,
    purge_stale_workspaces,
    scratch_name,
    stream_workspace_archive,
)


def make_project(root: Path) -> Path:
    files = {
        "pom.xml": "<project/>",
        "mvnw": "#!/bin/sh\n",
        "src/main/java/com/example/demo/model/User.java": "class User {}",
        "src/main/java/com/example/demo/model/Address.java": "class Address {}",
        ".mvn/wrapper/maven-wrapper.properties": "distributionUrl=x",
    }
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
    return root


class TestProjectArchiver:
    """Test zip creation and verification"""

    def test_entries_are_sorted_relative_paths(self, tmp_path):
        """Test entries have no root prefix and POSIX separators"""
        project = make_project(tmp_path / "project")
        result = ProjectArchiver().create_archive(project, tmp_path / "out.zip")

        with zipfile.ZipFile(result.path) as zipf:
            names = zipf.namelist()
        assert names == sorted(names)
        assert names == result.entries
        assert "pom.xml" in names
        assert "src/main/java/com/example/demo/model/User.java" in names
        assert not any(name.startswith("project/") for name in names)
        assert result.entry_count == 5
        assert result.size_bytes == (tmp_path / "out.zip").stat().st_size

    def test_members_are_deflated(self, tmp_path):
        """Test the configured compression is used"""
        project = make_project(tmp_path / "project")
        result = ProjectArchiver(compression_level=9).create_archive(project, tmp_path / "out.zip")

        with zipfile.ZipFile(result.path) as zipf:
            assert all(info.compress_type == zipfile.ZIP_DEFLATED for info in zipf.infolist())
            assert zipf.read("pom.xml") == b"<project/>"

    def test_empty_project_rejected(self, tmp_path):
        """Test a project with no files cannot be archived"""
        project = tmp_path / "empty"
        project.mkdir()

        with pytest.raises(EmptyArchiveError) as exc_info:
            ProjectArchiver().create_archive(project, tmp_path / "out.zip")
        assert exc_info.value.code == "EMPTY_ARCHIVE"
        assert exc_info.value.message == "Generated zip is empty"

    def test_missing_source(self, tmp_path):
        """Test a missing project folder is an archive error"""
        with pytest.raises(ArchiveError):
            ProjectArchiver().create_archive(tmp_path / "nope", tmp_path / "out.zip")

    def test_entry_count_mismatch(self, tmp_path):
        """Test verification compares entry counts"""
        project = make_project(tmp_path / "project")
        archiver = ProjectArchiver()
        result = archiver.create_archive(project, tmp_path / "out.zip")

        with pytest.raises(ArchiveError) as exc_info:
            archiver._verify(result.path, result.entries + ["extra.txt"])
        assert "expected 6" in exc_info.value.message

    def test_unreadable_zip(self, tmp_path):
        """Test a corrupt file fails verification"""
        bogus = tmp_path / "bogus.zip"
        bogus.write_bytes(b"definitely not a zip")

        with pytest.raises(ArchiveError):
            ProjectArchiver()._verify(bogus, ["a"])


class TestScratchWorkspace:
    """Test scoped scratch directories"""

    def test_name_format(self):
        """Test <prefix>-<epoch ms>-<random hex>"""
        name = scratch_name("generated-demo")

        assert re.fullmatch(r"generated-demo-\d{13,}-[0-9a-f]{8}", name)
        assert scratch_name("generated-demo") != name

    def test_released_on_success(self, tmp_path):
        """Test leaving the block removes directory and archive"""
        with ScratchWorkspace.allocate(tmp_path, "t") as workspace:
            assert workspace.project_dir.is_dir()
            workspace.archive_path.write_bytes(b"zip")

        assert workspace.released
        assert not workspace.project_dir.exists()
        assert not workspace.archive_path.exists()

    def test_released_on_failure(self, tmp_path):
        """Test an exception inside the block still cleans up"""
        with pytest.raises(RuntimeError):
            with ScratchWorkspace.allocate(tmp_path, "t") as workspace:
                (workspace.project_dir / "file.txt").write_text("x")
                raise RuntimeError("boom")

        assert not workspace.project_dir.exists()
        assert list(tmp_path.iterdir()) == []

    def test_release_is_idempotent(self, tmp_path):
        """Test releasing twice is harmless"""
        workspace = ScratchWorkspace.allocate(tmp_path, "t").__enter__()
        workspace.release()
        workspace.release()

        assert workspace.released

    def test_unique_per_allocation(self, tmp_path):
        """Test concurrent allocations never share a directory"""
        first = ScratchWorkspace.allocate(tmp_path, "t")
        second = ScratchWorkspace.allocate(tmp_path, "t")

        assert first.project_dir != second.project_dir

    @pytest.mark.asyncio
    async def test_stream_releases_after_last_chunk(self, tmp_path):
        """Test streaming yields the whole archive and then cleans up"""
        workspace = ScratchWorkspace.allocate(tmp_path, "t").__enter__()
        payload = os.urandom(20000)
        workspace.archive_path.write_bytes(payload)

        chunks = [chunk async for chunk in stream_workspace_archive(workspace, chunk_size=8192)]

        assert b"".join(chunks) == payload
        assert [len(c) for c in chunks] == [8192, 8192, 3616]
        assert workspace.released
        assert not workspace.archive_path.exists()

    @pytest.mark.asyncio
    async def test_abandoned_stream_releases(self, tmp_path):
        """Test a client that stops reading still triggers cleanup"""
        workspace = ScratchWorkspace.allocate(tmp_path, "t").__enter__()
        workspace.archive_path.write_bytes(os.urandom(30000))

        stream = stream_workspace_archive(workspace, chunk_size=1024)
        await stream.__anext__()
        await stream.aclose()

        assert workspace.released
        assert not workspace.project_dir.exists()


class TestPurgeStaleWorkspaces:
    """Test startup cleanup of leftovers"""

    def test_only_old_prefixed_entries_removed(self, tmp_path):
        """Test fresh and foreign entries survive"""
        old_dir = tmp_path / "generated-demo-1-aa"
        old_dir.mkdir()
        old_zip = tmp_path / "generated-demo-1-aa.zip"
        old_zip.write_bytes(b"x")
        fresh = tmp_path / "generated-demo-2-bb"
        fresh.mkdir()
        foreign = tmp_path / "unrelated"
        foreign.mkdir()

        past = time.time() - 7200
        for path in (old_dir, old_zip, foreign):
            os.utime(path, (past, past))

        removed = purge_stale_workspaces(tmp_path, "generated-demo", max_age_seconds=3600)

        assert removed == 2
        assert not old_dir.exists()
        assert not old_zip.exists()
        assert fresh.exists()
        assert foreign.exists()

    def test_missing_root(self, tmp_path):
        """Test a missing scratch root is a no-op"""
        assert purge_stale_workspaces(tmp_path / "nope", "generated-demo") == 0
