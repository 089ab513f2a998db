"""
Tests for the working directory scope guard.
"""

import logging
import os
from pathlib import Path

import pytest

from buildgate.core.engine import workdir
from buildgate.core.engine.workdir import DirectoryTransitionError, enter_directory, with_directory


@pytest.fixture
def start(tmp_path: Path, monkeypatch) -> Path:
    (tmp_path / "sub" / "deeper").mkdir(parents=True)
    monkeypatch.chdir(tmp_path)
    return Path(os.getcwd())


class TestEnterDirectory:
    def test_enters_and_restores(self, start: Path):
        with enter_directory("sub") as inside:
            assert Path(os.getcwd()) == start / "sub"
            assert inside == start / "sub"
        assert Path(os.getcwd()) == start

    def test_restores_after_exception(self, start: Path):
        with pytest.raises(RuntimeError):
            with enter_directory("sub"):
                raise RuntimeError("stage blew up")
        assert Path(os.getcwd()) == start

    def test_nested(self, start: Path):
        with enter_directory("sub"):
            with enter_directory("deeper"):
                assert Path(os.getcwd()) == start / "sub" / "deeper"
            assert Path(os.getcwd()) == start / "sub"
        assert Path(os.getcwd()) == start

    def test_missing_directory_raises_before_body(self, start: Path):
        ran = []
        with pytest.raises(DirectoryTransitionError) as excinfo:
            with enter_directory("does-not-exist"):
                ran.append(True)
        assert ran == []
        assert excinfo.value.path == "does-not-exist"
        assert "does-not-exist" in str(excinfo.value)
        assert Path(os.getcwd()) == start

    def test_file_is_not_enterable(self, start: Path):
        (start / "afile").write_text("x")
        with pytest.raises(DirectoryTransitionError):
            with enter_directory("afile"):
                pass
        assert Path(os.getcwd()) == start

    def test_failed_restore_is_logged_not_raised(self, start: Path, monkeypatch, caplog):
        real_chdir = os.chdir
        calls = []

        def flaky_chdir(path):
            calls.append(path)
            if len(calls) == 2:
                raise FileNotFoundError(2, "No such file or directory")
            real_chdir(path)

        monkeypatch.setattr(workdir.os, "chdir", flaky_chdir)

        with caplog.at_level(logging.ERROR, logger="buildgate.core.engine.workdir"):
            with enter_directory("sub"):
                pass

        assert any("Failed to return" in r.message for r in caplog.records)
        real_chdir(start)

    def test_failed_restore_does_not_mask_body_error(self, start: Path, monkeypatch):
        real_chdir = os.chdir
        calls = []

        def flaky_chdir(path):
            calls.append(path)
            if len(calls) == 2:
                raise PermissionError(13, "Permission denied")
            real_chdir(path)

        monkeypatch.setattr(workdir.os, "chdir", flaky_chdir)

        with pytest.raises(ValueError, match="original"):
            with enter_directory("sub"):
                raise ValueError("original")
        real_chdir(start)


class TestWithDirectory:
    def test_returns_work_result(self, start: Path):
        result = with_directory("sub", lambda: Path(os.getcwd()))
        assert result == start / "sub"
        assert Path(os.getcwd()) == start

    def test_work_invoked_once(self, start: Path):
        calls = []
        with_directory("sub", lambda: calls.append(1))
        assert calls == [1]

    def test_work_not_invoked_when_enter_fails(self, start: Path):
        calls = []
        with pytest.raises(DirectoryTransitionError):
            with_directory("nope", lambda: calls.append(1))
        assert calls == []

    def test_restores_when_work_raises(self, start: Path):
        def work():
            raise KeyError("boom")

        with pytest.raises(KeyError):
            with_directory("sub", work)
        assert Path(os.getcwd()) == start

    def test_accepts_path_objects(self, start: Path):
        result = with_directory(start / "sub" / "deeper", os.getcwd)
        assert Path(result) == start / "sub" / "deeper"
        assert Path(os.getcwd()) == start
