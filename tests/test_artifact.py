"""Tests for the specification artifact and its atomic writer."""

import os
import re
import stat
from datetime import datetime

import pytest

from specgen.common.artifact import ArtifactWriter, SpecificationArtifact
from specgen.common.errors import ArtifactWriteFailure


def test_name_uses_local_timestamp():
    artifact = SpecificationArtifact.create("body", now=datetime(2025, 12, 31, 23, 59, 58))
    assert artifact.name == "spec-20251231-235958.md"


def test_default_name_matches_pattern():
    assert re.fullmatch(r"spec-\d{8}-\d{6}\.md", SpecificationArtifact.create("x").name)


def test_round_trip_is_byte_exact(tmp_path):
    body = "# Spec\n\nUnicode: café ✅ 日本語\r\nTrailing spaces   \n"
    path = ArtifactWriter(tmp_path).write(SpecificationArtifact(body=body, name="spec-20240101-000000.md"))
    assert path == tmp_path / "spec-20240101-000000.md"
    assert path.read_bytes() == body.encode("utf-8")


def test_creates_output_dir(tmp_path):
    out = tmp_path / "nested" / "specs"
    path = ArtifactWriter(out).write(SpecificationArtifact.create("x"))
    assert path.parent == out
    assert path.exists()


def test_no_temp_files_left_behind(tmp_path):
    ArtifactWriter(tmp_path).write(SpecificationArtifact.create("x"))
    assert [p.name for p in tmp_path.iterdir() if p.name.endswith(".tmp")] == []


def test_failed_write_leaves_no_file(tmp_path, monkeypatch):
    def broken_replace(src, dst):
        raise OSError(28, "No space left on device")

    monkeypatch.setattr(os, "replace", broken_replace)
    with pytest.raises(ArtifactWriteFailure):
        ArtifactWriter(tmp_path).write(SpecificationArtifact(body="x", name="spec.md"))
    assert list(tmp_path.iterdir()) == []


def test_output_dir_is_a_file(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("x")
    with pytest.raises(ArtifactWriteFailure):
        ArtifactWriter(blocker).write(SpecificationArtifact.create("x"))


@pytest.mark.skipif(os.name != "posix", reason="POSIX permission bits")
def test_file_mode_follows_umask(tmp_path):
    previous = os.umask(0o022)
    try:
        path = ArtifactWriter(tmp_path).write(SpecificationArtifact.create("x"))
    finally:
        os.umask(previous)
    assert stat.S_IMODE(path.stat().st_mode) == 0o644
