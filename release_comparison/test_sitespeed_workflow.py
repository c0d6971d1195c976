#!/usr/bin/env python3
"""
Test suite for sitespeed_workflow.py

sitespeed.io itself is replaced by a fake runner; run_command is exercised
with the current Python interpreter as the child process.
"""
import json
import sys
import threading
from pathlib import Path

import pytest

from release_comparison.sitespeed_workflow import (
    CommandResult,
    WorkflowConfig,
    WorkflowError,
    build_sitespeed_command,
    main,
    move_directory,
    remove_directory,
    remove_unnecessary_files,
    run_command,
    run_workflow,
    validate_release_name,
)


SUMMARY = {"statistics": {"googleWebVitals": {"largestContentfulPaint": {"median": 2400}}}}


def make_config(tmp_path, release="release-29", **overrides):
    values = dict(
        release=release,
        site="homerun",
        urls_file=Path("scripts/homerun_urls.txt"),
        sitespeed_config=Path("scripts/config.json"),
        workdir=tmp_path,
        results_root=Path("homerun"),
        timeout_seconds=60,
    )
    values.update(overrides)
    return WorkflowConfig(**values)


def populate_output(folder):
    """Create a sitespeed.io-like output tree."""
    data = folder / "data"
    page = folder / "pages" / "www_example_com" / "PDP" / "data"
    data.mkdir(parents=True)
    page.mkdir(parents=True)
    (data / "browsertime.summary-total.json").write_text(json.dumps(SUMMARY))
    (data / "coach.summary-total.json").write_text("{}")
    (page / "browsertime.pageSummary.json").write_text(json.dumps({"googleWebVitals": {"ttfb": 400}}))
    (page / "browsertime.run-1.json").write_text("{}")
    (page / "browsertime.har.gz").write_bytes(b"\x1f\x8b")
    (folder / "index.html").write_text("<html></html>")


class FakeRunner:
    """Records calls and optionally creates the sitespeed.io output folder."""

    def __init__(self, returncode=0, produce_output=True, timed_out=False):
        self.returncode = returncode
        self.produce_output = produce_output
        self.timed_out = timed_out
        self.calls = []

    def __call__(self, cmd, timeout_seconds, cancel_event, cwd):
        self.calls.append((list(cmd), timeout_seconds, cwd))
        if self.produce_output:
            populate_output(Path(cwd) / cmd[-1])
        return CommandResult(returncode=self.returncode, timed_out=self.timed_out)


class TestReleaseName:
    """Test validate_release_name function."""

    @pytest.mark.parametrize("name", ["release-29", "v1.2.3", "rc_1"])
    def test_valid(self, name):
        assert validate_release_name(name) == name

    @pytest.mark.parametrize("name", ["", ".", "..", "../etc", "release 29", "a/b", "x;rm"])
    def test_invalid(self, name):
        with pytest.raises(ValueError, match="invalid characters"):
            validate_release_name(name)


class TestFileOperations:
    """Test directory and cleanup helpers."""

    def test_remove_missing_directory(self, tmp_path):
        remove_directory(tmp_path / "missing")

    def test_remove_directory(self, tmp_path):
        target = tmp_path / "release-1"
        populate_output(target)

        remove_directory(target)

        assert not target.exists()

    def test_move_replaces_destination(self, tmp_path):
        source = tmp_path / "release-1"
        populate_output(source)
        destination = tmp_path / "homerun" / "release-1"
        destination.mkdir(parents=True)
        (destination / "stale.txt").write_text("old")

        move_directory(source, destination)

        assert not source.exists()
        assert not (destination / "stale.txt").exists()
        assert (destination / "data" / "browsertime.summary-total.json").exists()

    def test_move_missing_source(self, tmp_path):
        with pytest.raises(WorkflowError, match="Output folder not found"):
            move_directory(tmp_path / "missing", tmp_path / "dest")

    def test_remove_unnecessary_files(self, tmp_path):
        populate_output(tmp_path)

        result = remove_unnecessary_files(tmp_path)

        kept = sorted(p.name for p in result.kept)
        deleted = sorted(p.name for p in result.deleted)
        assert kept == ["browsertime.pageSummary.json", "browsertime.summary-total.json"]
        assert deleted == ["browsertime.har.gz", "browsertime.run-1.json", "coach.summary-total.json"]
        assert (tmp_path / "index.html").exists()
        assert all(not p.exists() for p in result.deleted)

    def test_cleanup_missing_root(self, tmp_path):
        result = remove_unnecessary_files(tmp_path / "missing")
        assert result.kept == [] and result.deleted == []


class TestRunCommand:
    """Test run_command with real child processes."""

    def test_success(self):
        result = run_command([sys.executable, "-c", "pass"], timeout_seconds=30)

        assert result.ok
        assert result.returncode == 0
        assert result.describe() == "exit code 0"

    def test_failure_exit_code(self):
        result = run_command([sys.executable, "-c", "raise SystemExit(3)"], timeout_seconds=30)

        assert not result.ok
        assert result.returncode == 3
        assert not result.timed_out

    def test_timeout(self):
        result = run_command([sys.executable, "-c", "import time; time.sleep(30)"], timeout_seconds=0.5)

        assert result.timed_out
        assert not result.ok
        assert "timed out" in result.describe()

    def test_cancel(self):
        cancel = threading.Event()
        cancel.set()

        result = run_command([sys.executable, "-c", "import time; time.sleep(30)"],
                             timeout_seconds=30, cancel_event=cancel)

        assert result.cancelled
        assert not result.ok
        assert result.describe() == "cancelled"

    def test_command_not_found(self, capsys):
        result = run_command(["vitaldiff-no-such-command"], timeout_seconds=5)

        assert result.returncode == 127
        assert not result.ok
        assert "Command not found" in capsys.readouterr().err

    def test_cwd(self, tmp_path):
        script = "import pathlib; pathlib.Path('marker').write_text('x')"
        result = run_command([sys.executable, "-c", script], timeout_seconds=30, cwd=tmp_path)

        assert result.ok
        assert (tmp_path / "marker").exists()

    def test_invalid_timeout(self):
        with pytest.raises(ValueError, match="timeout_seconds must be > 0"):
            run_command([sys.executable, "-c", "pass"], timeout_seconds=0)


class TestRunWorkflow:
    """Test the full workflow with a fake sitespeed.io runner."""

    def test_command_line(self, tmp_path):
        cmd = build_sitespeed_command(make_config(tmp_path))

        assert cmd == [
            "sitespeed.io",
            str(tmp_path / "scripts" / "homerun_urls.txt"),
            "--config",
            str(tmp_path / "scripts" / "config.json"),
            "--outputFolder",
            "release-29",
        ]

    def test_successful_run(self, tmp_path):
        (tmp_path / "release-29").mkdir()
        (tmp_path / "release-29" / "stale.json").write_text("{}")
        runner = FakeRunner()

        cleanup = run_workflow(make_config(tmp_path), runner=runner)

        destination = tmp_path / "homerun" / "release-29"
        assert len(runner.calls) == 1
        assert runner.calls[0][1] == 60
        assert runner.calls[0][2] == tmp_path
        assert not (tmp_path / "release-29").exists()
        assert (destination / "data" / "browsertime.summary-total.json").exists()
        assert not (destination / "stale.json").exists()
        assert not list(destination.rglob("*.har.gz"))
        assert len(cleanup.kept) == 2

    def test_status_lines_name_site_and_release(self, tmp_path, capsys):
        run_workflow(make_config(tmp_path), runner=FakeRunner())

        out = capsys.readouterr().out
        assert "Testing homerun release-29" in out
        assert "homerun release-29 filed under" in out

    def test_failed_run_stops_workflow(self, tmp_path):
        runner = FakeRunner(returncode=1, produce_output=False)

        with pytest.raises(WorkflowError, match="exit code 1"):
            run_workflow(make_config(tmp_path), runner=runner)

        assert not (tmp_path / "homerun").exists()

    def test_timed_out_run(self, tmp_path):
        runner = FakeRunner(returncode=None, timed_out=True)

        with pytest.raises(WorkflowError, match="timed out"):
            run_workflow(make_config(tmp_path), runner=runner)

    def test_missing_output_folder(self, tmp_path):
        with pytest.raises(WorkflowError, match="Output folder not found"):
            run_workflow(make_config(tmp_path), runner=FakeRunner(produce_output=False))

    def test_unsafe_release_never_runs(self, tmp_path):
        runner = FakeRunner()

        with pytest.raises(ValueError):
            run_workflow(make_config(tmp_path, release="../x"), runner=runner)

        assert runner.calls == []

    def test_regenerates_report(self, tmp_path):
        previous = tmp_path / "homerun" / "release-28" / "data"
        previous.mkdir(parents=True)
        (previous / "browsertime.summary-total.json").write_text(json.dumps(SUMMARY))

        config = make_config(tmp_path, report_output=Path("reports/homerun.html"))
        run_workflow(config, runner=FakeRunner())

        html = (tmp_path / "reports" / "homerun.html").read_text(encoding="utf-8")
        assert "release-28" in html and "release-29" in html


class TestMain:
    """Test the workflow command line."""

    def test_invalid_release(self, capsys):
        assert main(["bad/name", "--site", "homerun"]) == 2
        assert "invalid characters" in capsys.readouterr().err

    def test_site_is_required(self):
        with pytest.raises(SystemExit) as exc_info:
            main(["release-1"])
        assert exc_info.value.code == 2

    def test_failure_exit_code(self, tmp_path, monkeypatch, capsys):
        monkeypatch.setattr(
            "release_comparison.sitespeed_workflow.run_command",
            FakeRunner(returncode=1, produce_output=False),
        )

        assert main(["release-1", "--site", "homerun", "--workdir", str(tmp_path)]) == 1
        assert "Workflow failed" in capsys.readouterr().err

    def test_success(self, tmp_path, monkeypatch):
        monkeypatch.setattr("release_comparison.sitespeed_workflow.run_command", FakeRunner())

        assert main(["release-1", "--site", "homerun", "--workdir", str(tmp_path)]) == 0
        assert (tmp_path / "homerun" / "release-1" / "data" / "browsertime.summary-total.json").exists()
