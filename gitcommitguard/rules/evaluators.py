"""Per-commit and per-ref policy evaluation."""
from typing import List

from ..config import RuleConfig
from ..models import Commit, CommitEvaluation, RefInfo, Violation
from .checks import create_commit_chain
from .fields import FieldConstraint, validate_field
from .splitter import split_message


class CommitPolicyEvaluator:
    """Evaluates every commit policy of a configuration against single commits.

    The evaluator keeps no state between calls; evaluating the same commit
    twice yields the same violations.
    """

    def __init__(self, config: RuleConfig):
        self.config = config
        self.chain = create_commit_chain(config)

    def inspect(self, commit: Commit) -> CommitEvaluation:
        """Evaluate a commit and keep the parsed message for diagnostics.

        Merge commits are returned as skipped without any check.

        Raises:
            MessageParseError: If the message does not match the split regex.
        """
        if commit.is_merge:
            return CommitEvaluation(commit=commit, skipped=True)

        message = split_message(commit.message, self.config.pattern("message_split"), commit.sha)
        return CommitEvaluation(
            commit=commit,
            message=message,
            violations=self.chain.handle(commit, message),
        )

    def evaluate(self, commit: Commit) -> List[Violation]:
        return self.inspect(commit).violations


class RefPolicyEvaluator:
    """Checks the pull request title, branch name and tag name."""

    def __init__(self, config: RuleConfig):
        self.constraints = [
            ("pull_request_title", "pull-request",
             FieldConstraint("pull_request_title", "Pull Request title", config.pattern("pull_request_title"))),
            ("branch_name", "branch",
             FieldConstraint("branch_name", "Branch name", config.pattern("branch_name"))),
            ("tag_name", "tag",
             FieldConstraint("tag_name", "Tag name", config.pattern("tag_name"))),
        ]

    def evaluate(self, ref: RefInfo) -> List[Violation]:
        violations = []
        for attribute, identifier, constraint in self.constraints:
            value = getattr(ref, attribute)
            if value is not None:
                violations.extend(validate_field(value, constraint, identifier, scope="ref"))
        return violations
