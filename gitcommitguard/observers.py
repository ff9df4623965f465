"""Observer pattern for validation runs."""

import sys
import uuid
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import List, Optional, TextIO

from rich.console import Console
from rich.markup import escape

from .models import Commit, CommitEvaluation, RefInfo, ValidationReport, Violation


def describe_commit(evaluation: CommitEvaluation) -> List[str]:
    """Diagnostic lines for an evaluated commit."""
    commit = evaluation.commit
    lines = [
        f"Commit hash: {commit.sha}",
        f"Commit author email: {commit.author.email}",
        f"Commit author name: {commit.author.name}",
        f"Commit author GitHub account: {commit.author.account}",
        f"Commit committer email: {commit.committer.email}",
        f"Commit committer name: {commit.committer.name}",
        f"Commit committer GitHub account: {commit.committer.account}",
        f"Commit has valid signature: {str(commit.signature_verified).lower()}",
    ]
    if evaluation.message is not None:
        lines.append(f"Commit message subject: {evaluation.message.subject}")
        lines.append(f"Commit message body: {evaluation.message.body}")
    return lines


def describe_ref(ref: RefInfo) -> List[str]:
    lines = []
    if ref.pull_request_title is not None:
        lines.append(f"Pull request title: {ref.pull_request_title}")
    if ref.branch_name is not None:
        lines.append(f"Branch name: {ref.branch_name}")
    if ref.tag_name is not None:
        lines.append(f"Tag name: {ref.tag_name}")
    return lines


class ValidationObserver(ABC):
    """Abstract base class for validation run observers."""

    @abstractmethod
    def on_ref_checked(self, ref: RefInfo, violations: List[Violation]) -> None:
        """Called after the pull request title, branch and tag are checked."""
        pass

    @abstractmethod
    def on_commit_evaluated(self, evaluation: CommitEvaluation) -> None:
        """Called after every non-merge commit is evaluated."""
        pass

    @abstractmethod
    def on_merge_commit_skipped(self, commit: Commit) -> None:
        """Called when a merge commit is exempted from the commit checks."""
        pass

    @abstractmethod
    def on_run_completed(self, report: ValidationReport) -> None:
        """Called once every entity has been evaluated."""
        pass


class ConsoleLogObserver(ValidationObserver):
    """Observer that logs the validation run to the console."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def _print_violations(self, violations: List[Violation]) -> None:
        for violation in violations:
            self.console.print(f"[red]✗ {escape(str(violation))}[/red]")

    def on_ref_checked(self, ref: RefInfo, violations: List[Violation]) -> None:
        for line in describe_ref(ref):
            self.console.print(escape(line))
        self._print_violations(violations)

    def on_commit_evaluated(self, evaluation: CommitEvaluation) -> None:
        self.console.print("-----")
        for line in describe_commit(evaluation):
            self.console.print(escape(line))
        self._print_violations(evaluation.violations)

    def on_merge_commit_skipped(self, commit: Commit) -> None:
        self.console.print(f"[dim]Merge commit detected: {commit.sha}[/dim]")

    def on_run_completed(self, report: ValidationReport) -> None:
        checked = len(report.evaluated_commits)
        if report.failed():
            self.console.print(
                f"\n[red]Validation failed: {len(report)} violation(s) in {checked} commit(s) checked[/red]"
            )
        else:
            self.console.print(f"\n[green]All checks passed ({checked} commit(s) checked)[/green]")


class FileLogObserver(ValidationObserver):
    """Observer that logs the validation run to a file."""

    def __init__(self, log_file: str):
        self.log_file = Path(log_file)
        # Ensure the parent directory exists
        self.log_file.parent.mkdir(parents=True, exist_ok=True)

    def _log(self, message: str) -> None:
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        with self.log_file.open("a") as f:
            f.write(f"{timestamp} - {message}\n")

    def on_ref_checked(self, ref: RefInfo, violations: List[Violation]) -> None:
        for line in describe_ref(ref):
            self._log(line)
        for violation in violations:
            self._log(f"Violation: {violation}")

    def on_commit_evaluated(self, evaluation: CommitEvaluation) -> None:
        for line in describe_commit(evaluation):
            self._log(line)
        for violation in evaluation.violations:
            self._log(f"Violation: {violation}")

    def on_merge_commit_skipped(self, commit: Commit) -> None:
        self._log(f"Merge commit detected: {commit.sha}")

    def on_run_completed(self, report: ValidationReport) -> None:
        status = "failed" if report.failed() else "passed"
        self._log(f"Validation {status} with {len(report)} violation(s)")


class GitHubActionsObserver(ValidationObserver):
    """Observer that writes the run log as GitHub Actions workflow commands.

    Used in place of ConsoleLogObserver on a runner. Each commit is folded
    into its own log group and every violation is raised as an error
    annotation. Subjects, bodies, titles and names come from whoever
    authored the commit or pull request, so they are written with workflow
    command processing suspended.
    """

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream or sys.stdout

    def _write(self, line: str) -> None:
        self.stream.write(line + "\n")

    def _write_untrusted(self, lines: List[str]) -> None:
        if not lines:
            return
        token = uuid.uuid4().hex
        self._write(f"::stop-commands::{token}")
        for line in lines:
            self._write(line)
        self._write(f"::{token}::")

    @staticmethod
    def _escape(data: str) -> str:
        return data.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")

    def _error(self, violation: Violation) -> None:
        self._write(f"::error title={violation.code.value}::{self._escape(str(violation))}")

    def on_ref_checked(self, ref: RefInfo, violations: List[Violation]) -> None:
        self._write_untrusted(describe_ref(ref))
        for violation in violations:
            self._error(violation)

    def on_commit_evaluated(self, evaluation: CommitEvaluation) -> None:
        self._write(f"::group::Commit {evaluation.commit.short_sha}")
        self._write_untrusted(describe_commit(evaluation))
        self._write("::endgroup::")
        for violation in evaluation.violations:
            self._error(violation)

    def on_merge_commit_skipped(self, commit: Commit) -> None:
        self._write(f"::notice::Merge commit detected: {commit.sha}")

    def on_run_completed(self, report: ValidationReport) -> None:
        checked = len(report.evaluated_commits)
        if report.failed():
            self._write(f"::error::{len(report)} commit policy violation(s) found")
        else:
            self._write(f"All checks passed ({checked} commit(s) checked)")
