"""Core functionality for git-commit-guard."""
from typing import Iterable, List, Optional

from .config import RuleConfig
from .models import Commit, RefInfo, ValidationReport
from .observers import ValidationObserver
from .rules import CommitPolicyEvaluator, RefPolicyEvaluator


class PolicyValidator:
    """Runs the ref and commit policies of a configuration and collects a report.

    Observers are notified as each entity is evaluated, in the same order
    the violations appear in the report.
    """

    def __init__(self, config: RuleConfig):
        self.config = config
        self.ref_evaluator = RefPolicyEvaluator(config)
        self.commit_evaluator = CommitPolicyEvaluator(config)
        self.observers: List[ValidationObserver] = []

    def add_observer(self, observer: ValidationObserver) -> None:
        """Add an observer to be notified of the validation run."""
        self.observers.append(observer)

    def remove_observer(self, observer: ValidationObserver) -> None:
        """Remove an observer from the notification list."""
        self.observers.remove(observer)

    def validate(self, ref: Optional[RefInfo], commits: Iterable[Commit]) -> ValidationReport:
        """Evaluate the ref, then every commit in the order given.

        Raises:
            MessageParseError: On the first commit whose message cannot be
                split; no report is produced.
        """
        report = ValidationReport()

        if ref is not None:
            violations = self.ref_evaluator.evaluate(ref)
            report.extend(violations)
            for observer in self.observers:
                observer.on_ref_checked(ref, violations)

        for commit in commits:
            evaluation = self.commit_evaluator.inspect(commit)
            report.record(evaluation)
            for observer in self.observers:
                if evaluation.skipped:
                    observer.on_merge_commit_skipped(commit)
                else:
                    observer.on_commit_evaluated(evaluation)

        for observer in self.observers:
            observer.on_run_completed(report)

        return report
