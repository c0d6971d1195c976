#!/usr/bin/env python3
"""Run sitespeed.io for a release and file its results.

Steps:
1. Remove any stale <release> output folder
2. Run sitespeed.io with --outputFolder <release>
3. Move the output to <results_root>/<release>
4. Delete HAR archives and every JSON except the browsertime summaries
5. Optionally regenerate the multi-release dashboard over <results_root>

All paths are resolved against an explicit working directory.
"""

import argparse
import re
import shutil
import subprocess
import sys
import threading
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from .constants import (
    SITESPEED_EXECUTABLE,
    SITESPEED_TIMEOUT_SECONDS,
    PROCESS_POLL_INTERVAL_SECONDS,
    PROCESS_TERMINATE_GRACE_SECONDS,
    COMMAND_NOT_FOUND_RETURNCODE,
    KEPT_SUMMARY_FILES,
    HAR_ARCHIVE_SUFFIX,
    EXIT_SUCCESS,
    EXIT_FAILURE,
    EXIT_PARSE_ERROR,
)


SAFE_TOKEN = re.compile(r"^[A-Za-z0-9._-]+$")


class WorkflowError(Exception):
    """Raised when a workflow step fails."""


@dataclass(frozen=True)
class WorkflowConfig:
    """Settings of one sitespeed.io workflow run.

    Attributes:
        release: Release name, also the sitespeed.io output folder name
        site: Site name, shown in the status lines
        urls_file: URL list passed to sitespeed.io
        sitespeed_config: sitespeed.io JSON configuration
        workdir: Directory every relative path is resolved against
        results_root: Directory collecting one sub-directory per release
        timeout_seconds: Maximum sitespeed.io run time
        report_output: Dashboard to regenerate after the run, if any
        report_config: Report configuration for the dashboard, if any
    """
    release: str
    site: str
    urls_file: Path
    sitespeed_config: Path
    workdir: Path
    results_root: Path
    timeout_seconds: float = SITESPEED_TIMEOUT_SECONDS
    report_output: Optional[Path] = None
    report_config: Optional[Path] = None

    def resolve(self, path: Path) -> Path:
        return path if path.is_absolute() else self.workdir / path

    @property
    def output_folder(self) -> Path:
        return self.resolve(Path(self.release))

    @property
    def destination(self) -> Path:
        return self.resolve(self.results_root) / self.release


@dataclass
class CommandResult:
    """Outcome of one external command."""
    returncode: Optional[int]
    timed_out: bool = False
    cancelled: bool = False
    duration_seconds: float = 0.0

    @property
    def ok(self) -> bool:
        return self.returncode == 0 and not self.timed_out and not self.cancelled

    def describe(self) -> str:
        if self.timed_out:
            return f"timed out after {self.duration_seconds:.0f}s"
        if self.cancelled:
            return "cancelled"
        return f"exit code {self.returncode}"


@dataclass
class CleanupResult:
    """Files deleted and kept by remove_unnecessary_files()."""
    deleted: List[Path] = field(default_factory=list)
    kept: List[Path] = field(default_factory=list)


CommandRunner = Callable[[Sequence[str], float, Optional[threading.Event], Optional[Path]], CommandResult]


def validate_release_name(name: str) -> str:
    """Reject release names that could escape the results directory.

    Raises:
        ValueError: If the name is empty or contains unsafe characters
    """
    if not name or not SAFE_TOKEN.match(name) or name in {".", ".."}:
        raise ValueError(
            f"release '{name}' contains invalid characters; allowed [A-Za-z0-9._-]"
        )
    return name


def remove_directory(path: Path) -> None:
    """Recursively remove a directory; a missing directory is not an error."""
    print(f"Attempting to remove directory: {path}")
    if not path.exists():
        return
    shutil.rmtree(path)
    print(f"Successfully removed directory: {path}")


def build_sitespeed_command(config: WorkflowConfig) -> List[str]:
    return [
        SITESPEED_EXECUTABLE,
        str(config.resolve(config.urls_file)),
        "--config",
        str(config.resolve(config.sitespeed_config)),
        "--outputFolder",
        config.release,
    ]


def _stop_process(proc: subprocess.Popen) -> None:
    proc.terminate()
    try:
        proc.wait(timeout=PROCESS_TERMINATE_GRACE_SECONDS)
    except subprocess.TimeoutExpired:
        proc.kill()
        proc.wait()


def run_command(
    cmd: Sequence[str],
    timeout_seconds: float,
    cancel_event: Optional[threading.Event] = None,
    cwd: Optional[Path] = None,
) -> CommandResult:
    """Run a command to completion, inheriting stdio.

    The child is terminated when the timeout elapses or cancel_event is set.

    Args:
        cmd: Command and arguments
        timeout_seconds: Maximum run time, must be positive
        cancel_event: Optional cancellation token
        cwd: Working directory of the child

    Returns:
        CommandResult
    """
    if timeout_seconds <= 0:
        raise ValueError("timeout_seconds must be > 0")

    print(f"\nExecuting command: {' '.join(cmd)}")
    start = time.monotonic()
    try:
        proc = subprocess.Popen(list(cmd), cwd=str(cwd) if cwd else None)
    except FileNotFoundError:
        print(f"❌ Command not found: {cmd[0]}", file=sys.stderr)
        return CommandResult(returncode=COMMAND_NOT_FOUND_RETURNCODE)

    deadline = start + timeout_seconds
    while True:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            _stop_process(proc)
            return CommandResult(
                returncode=proc.returncode,
                timed_out=True,
                duration_seconds=time.monotonic() - start,
            )
        try:
            returncode = proc.wait(timeout=min(PROCESS_POLL_INTERVAL_SECONDS, remaining))
        except subprocess.TimeoutExpired:
            if cancel_event is not None and cancel_event.is_set():
                _stop_process(proc)
                return CommandResult(
                    returncode=proc.returncode,
                    cancelled=True,
                    duration_seconds=time.monotonic() - start,
                )
            continue

        print(f"{cmd[0]} process exited with code {returncode}")
        return CommandResult(returncode=returncode, duration_seconds=time.monotonic() - start)


def move_directory(source: Path, destination: Path) -> None:
    """Move a directory, replacing whatever is at the destination."""
    print(f"\nMoving folder from {source} to {destination}")
    if not source.is_dir():
        raise WorkflowError(f"Output folder not found: {source}")

    destination.parent.mkdir(parents=True, exist_ok=True)
    remove_directory(destination)
    shutil.move(str(source), str(destination))
    print("Folder moved successfully!")


def remove_unnecessary_files(root: Path) -> CleanupResult:
    """Delete HAR archives and non-summary JSON files below root."""
    result = CleanupResult()
    if not root.exists():
        return result

    for path in sorted(root.rglob("*")):
        if not path.is_file():
            continue
        name = path.name
        if name.endswith(HAR_ARCHIVE_SUFFIX):
            path.unlink()
            result.deleted.append(path)
            print(f"🗑️ Deleted HAR: {path}")
        elif name.endswith(".json"):
            if name in KEPT_SUMMARY_FILES:
                result.kept.append(path)
                print(f"✅ Keeping: {path}")
            else:
                path.unlink()
                result.deleted.append(path)
                print(f"🗑️ Deleted JSON: {path}")

    return result


def run_workflow(
    config: WorkflowConfig,
    runner: Optional[CommandRunner] = None,
    cancel_event: Optional[threading.Event] = None,
) -> CleanupResult:
    """Run sitespeed.io for one release and file its results.

    Args:
        config: Workflow settings
        runner: Command runner, defaults to run_command
        cancel_event: Optional cancellation token for the sitespeed.io run

    Returns:
        CleanupResult of the filed results

    Raises:
        ValueError: If the release name is unsafe
        WorkflowError: If sitespeed.io fails or its output is missing
    """
    validate_release_name(config.release)
    run = runner or run_command
    print(f"🚀 Testing {config.site} {config.release}")

    remove_directory(config.output_folder)

    result = run(build_sitespeed_command(config), config.timeout_seconds, cancel_event, config.workdir)
    if not result.ok:
        raise WorkflowError(f"sitespeed.io command failed: {result.describe()}")

    move_directory(config.output_folder, config.destination)
    cleanup = remove_unnecessary_files(config.destination)

    if config.report_output is not None:
        from .compare_results import generate_release_report

        output = config.resolve(config.report_output)
        report_config = config.resolve(config.report_config) if config.report_config else None
        generate_release_report(output, config.resolve(config.results_root), report_config)
        print(f"✅ Report saved: {output}")

    print(f"✅ {config.site} {config.release} filed under {config.destination}")
    return cleanup


def main(argv: Optional[List[str]] = None) -> int:
    p = argparse.ArgumentParser(
        description="Run sitespeed.io for a release, file its results and refresh the dashboard."
    )
    p.add_argument("release", help="Release name, e.g. release-29")
    p.add_argument("--site", required=True, help="Site name, e.g. homerun")
    p.add_argument("--urls", default=None, help="URL list file (default: scripts/<site>_urls.txt)")
    p.add_argument("--sitespeed-config", default="scripts/config.json", help="sitespeed.io configuration")
    p.add_argument("--results-root", default=None, help="Results directory (default: <site>)")
    p.add_argument("--workdir", default=".", help="Directory relative paths are resolved against")
    p.add_argument("--timeout", type=float, default=SITESPEED_TIMEOUT_SECONDS,
                   help=f"sitespeed.io timeout in seconds (default: {SITESPEED_TIMEOUT_SECONDS})")
    p.add_argument("--report", default=None, help="Regenerate this dashboard HTML after the run")
    p.add_argument("--report-config", default=None, help="Report configuration JSON for --report")

    args = p.parse_args(argv)

    try:
        validate_release_name(args.release)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_PARSE_ERROR

    config = WorkflowConfig(
        release=args.release,
        site=args.site,
        urls_file=Path(args.urls or f"scripts/{args.site}_urls.txt"),
        sitespeed_config=Path(args.sitespeed_config),
        workdir=Path(args.workdir).resolve(),
        results_root=Path(args.results_root or args.site),
        timeout_seconds=args.timeout,
        report_output=Path(args.report) if args.report else None,
        report_config=Path(args.report_config) if args.report_config else None,
    )

    try:
        run_workflow(config)
    except (WorkflowError, OSError, ValueError, LookupError) as e:
        print(f"\nWorkflow failed: {e}", file=sys.stderr)
        return EXIT_FAILURE

    print("\nWorkflow completed successfully!")
    return EXIT_SUCCESS


if __name__ == "__main__":
    raise SystemExit(main())
