"""Shared models for git-commit-guard."""
from collections import OrderedDict
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

SHORT_SHA_LENGTH = 7


class ViolationCode(str, Enum):
    TOO_SHORT = "TooShort"
    TOO_LONG = "TooLong"
    PATTERN_MISMATCH = "PatternMismatch"
    BLANK_LINE_PROHIBITED = "BlankLineProhibited"
    UNKNOWN_ACCOUNT = "UnknownAccount"
    UNSIGNED_COMMIT = "UnsignedCommit"


class Identity(BaseModel):
    model_config = ConfigDict(frozen=True)

    email: str
    name: str
    account: Optional[str] = Field(
        default=None,
        description="Login of the linked account on the hosting platform"
    )


class Commit(BaseModel):
    """A commit as handed to the rule engine by a commit source."""

    model_config = ConfigDict(frozen=True)

    sha: str = Field(min_length=SHORT_SHA_LENGTH)
    parent_count: int = Field(default=1, ge=0)
    author: Identity
    committer: Identity
    author_account_linked: bool = True
    committer_account_linked: bool = True
    signature_verified: bool = False
    message: str

    @property
    def short_sha(self) -> str:
        return self.sha[:SHORT_SHA_LENGTH]

    @property
    def is_merge(self) -> bool:
        return self.parent_count > 1


class RefInfo(BaseModel):
    """Names attached to the triggering event (pull request, branch, tag)."""

    model_config = ConfigDict(frozen=True)

    pull_request_title: Optional[str] = None
    branch_name: Optional[str] = None
    tag_name: Optional[str] = None

    @classmethod
    def from_git_ref(cls, ref: Optional[str], pull_request_title: Optional[str] = None) -> 'RefInfo':
        """Build a RefInfo from a fully-qualified ref such as refs/heads/main."""
        if ref and ref.startswith("refs/heads/"):
            return cls(pull_request_title=pull_request_title, branch_name=ref[len("refs/heads/"):])
        if ref and ref.startswith("refs/tags/"):
            return cls(pull_request_title=pull_request_title, tag_name=ref[len("refs/tags/"):])
        return cls(pull_request_title=pull_request_title)


@dataclass(frozen=True)
class ParsedMessage:
    subject: str
    body: Optional[str] = None


class Violation(BaseModel):
    model_config = ConfigDict(frozen=True)

    scope: Literal["ref", "commit"]
    identifier: str
    code: ViolationCode
    field: str
    message: str
    line_number: Optional[int] = None

    def __str__(self) -> str:
        return f"{self.message} ({self.identifier})"


@dataclass
class CommitEvaluation:
    """Outcome of evaluating one commit, kept for diagnostic output."""
    commit: Commit
    message: Optional[ParsedMessage] = None
    violations: List[Violation] = field(default_factory=list)
    skipped: bool = False


@dataclass
class ValidationReport:
    """Ordered collection of every violation found during a run.

    Violations keep the order in which they were produced, so the ref
    checks come first followed by each commit in the order supplied.
    """
    violations: List[Violation] = field(default_factory=list)
    evaluated_commits: List[str] = field(default_factory=list)
    skipped_commits: List[str] = field(default_factory=list)

    def extend(self, violations: List[Violation]) -> None:
        self.violations.extend(violations)

    def record(self, evaluation: CommitEvaluation) -> None:
        if evaluation.skipped:
            self.skipped_commits.append(evaluation.commit.sha)
        else:
            self.evaluated_commits.append(evaluation.commit.sha)
        self.extend(evaluation.violations)

    def failed(self) -> bool:
        return len(self.violations) > 0

    def messages(self) -> List[str]:
        return [str(violation) for violation in self.violations]

    def by_identifier(self) -> Dict[str, List[Violation]]:
        grouped: Dict[str, List[Violation]] = OrderedDict()
        for violation in self.violations:
            grouped.setdefault(violation.identifier, []).append(violation)
        return grouped

    def __iter__(self) -> Iterator[Violation]:
        return iter(self.violations)

    def __len__(self) -> int:
        return len(self.violations)
