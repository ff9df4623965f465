"""Commit checks using an aggregating Chain of Responsibility.

Unlike a classic chain, a handler never stops the chain: every handler
runs and its violations are placed ahead of those of the next handler,
so the order of the chain is the order of the report.
"""
from abc import ABC, abstractmethod
from typing import List, Literal, Optional

from ..config import RuleConfig
from ..models import Commit, ParsedMessage, Violation, ViolationCode
from .fields import FieldConstraint, validate_field, validate_lines

Role = Literal["author", "committer"]


class CommitCheck(ABC):
    """Abstract base class for commit checks."""

    def __init__(self, next_check: Optional['CommitCheck'] = None):
        self.next_check = next_check

    def handle(self, commit: Commit, message: ParsedMessage) -> List[Violation]:
        """Run this check and every check after it."""
        violations = self.check(commit, message)
        if self.next_check:
            violations.extend(self.next_check.handle(commit, message))
        return violations

    @abstractmethod
    def check(self, commit: Commit, message: ParsedMessage) -> List[Violation]:
        """Return the violations of this check alone."""
        pass


class UnknownAccountCheck(CommitCheck):
    """Rejects identities without a linked account on the hosting platform."""

    def __init__(self, role: Role, next_check: Optional[CommitCheck] = None):
        super().__init__(next_check)
        self.role = role

    def check(self, commit: Commit, message: ParsedMessage) -> List[Violation]:
        if getattr(commit, f"{self.role}_account_linked"):
            return []
        return [Violation(
            scope="commit",
            identifier=commit.short_sha,
            code=ViolationCode.UNKNOWN_ACCOUNT,
            field=f"{self.role}_account",
            message=f"Commit {self.role} does not exist on GitHub",
        )]


class IdentityPatternCheck(CommitCheck):
    """Matches the author or committer email/name against a pattern."""

    def __init__(self, role: Role, attribute: str, constraint: FieldConstraint,
                 next_check: Optional[CommitCheck] = None):
        super().__init__(next_check)
        self.role = role
        self.attribute = attribute
        self.constraint = constraint

    def check(self, commit: Commit, message: ParsedMessage) -> List[Violation]:
        identity = getattr(commit, self.role)
        return validate_field(getattr(identity, self.attribute), self.constraint, commit.short_sha)


class SignatureCheck(CommitCheck):
    """Rejects commits without a verified signature."""

    def check(self, commit: Commit, message: ParsedMessage) -> List[Violation]:
        if commit.signature_verified:
            return []
        return [Violation(
            scope="commit",
            identifier=commit.short_sha,
            code=ViolationCode.UNSIGNED_COMMIT,
            field="signature",
            message="Commit has no valid signature",
        )]


class SubjectCheck(CommitCheck):
    """Validates the subject line length and pattern."""

    def __init__(self, constraint: FieldConstraint, next_check: Optional[CommitCheck] = None):
        super().__init__(next_check)
        self.constraint = constraint

    def check(self, commit: Commit, message: ParsedMessage) -> List[Violation]:
        return validate_field(message.subject, self.constraint, commit.short_sha)


class BodyCheck(CommitCheck):
    """Validates body lines and the body pattern. Absent bodies are skipped."""

    def __init__(self, constraint: FieldConstraint, prohibit_blank_lines: bool = False,
                 next_check: Optional[CommitCheck] = None):
        super().__init__(next_check)
        self.constraint = constraint
        self.prohibit_blank_lines = prohibit_blank_lines

    def check(self, commit: Commit, message: ParsedMessage) -> List[Violation]:
        if message.body is None:
            return []
        return validate_lines(message.body, self.constraint, commit.short_sha, self.prohibit_blank_lines)


def _identity_constraint(config: RuleConfig, role: Role, attribute: str) -> FieldConstraint:
    return FieldConstraint(
        field=f"{role}_{attribute}",
        label=f"Commit {role} {attribute}",
        pattern=config.pattern(f"{role}_{attribute}"),
    )


def create_commit_chain(config: RuleConfig) -> CommitCheck:
    """Create the commit check chain for a configuration.

    Order: author account, author email, author name, committer account,
    committer email, committer name, signature, subject, body. Policy
    toggles that are off leave their check out of the chain.
    """
    body = BodyCheck(
        FieldConstraint(
            field="body",
            label="Commit message body",
            pattern=config.pattern("body"),
            min_length=config.body_min_length,
            max_length=config.body_max_length,
        ),
        prohibit_blank_lines=config.prohibit_blank_lines_cm_body,
    )
    head: CommitCheck = SubjectCheck(
        FieldConstraint(
            field="subject",
            label="Commit message subject",
            pattern=config.pattern("subject"),
            min_length=config.subject_min_length,
            max_length=config.subject_max_length,
        ),
        body,
    )
    if config.prohibit_unsigned_commits:
        head = SignatureCheck(head)

    for role, prohibit_unknown in (
        ("committer", config.prohibit_unknown_commit_committers),
        ("author", config.prohibit_unknown_commit_authors),
    ):
        head = IdentityPatternCheck(role, "name", _identity_constraint(config, role, "name"), head)
        head = IdentityPatternCheck(role, "email", _identity_constraint(config, role, "email"), head)
        if prohibit_unknown:
            head = UnknownAccountCheck(role, head)

    return head
