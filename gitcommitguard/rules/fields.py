"""Field and line level checks shared by the commit and ref evaluators."""
import re
from dataclasses import dataclass
from typing import List, Literal, Optional

from ..config import UNBOUNDED
from ..models import Violation, ViolationCode

Scope = Literal["ref", "commit"]


@dataclass(frozen=True)
class FieldConstraint:
    """Constraints for a single field.

    Attributes:
        field: Machine-readable field name recorded on violations
        label: Human-readable name used in violation messages
        pattern: Regex searched anywhere in the value, if any
        min_length: Minimum length, or -1 for no bound
        max_length: Maximum length, or -1 for no bound
    """
    field: str
    label: str
    pattern: Optional[re.Pattern] = None
    min_length: int = UNBOUNDED
    max_length: int = UNBOUNDED


def _length_violations(
    value: str,
    constraint: FieldConstraint,
    identifier: str,
    scope: Scope,
    label: str,
    line_number: Optional[int] = None,
    check_min: bool = True,
) -> List[Violation]:
    violations = []

    if check_min and constraint.min_length != UNBOUNDED and len(value) < constraint.min_length:
        violations.append(Violation(
            scope=scope,
            identifier=identifier,
            code=ViolationCode.TOO_SHORT,
            field=constraint.field,
            message=f"{label} is too short",
            line_number=line_number,
        ))

    if constraint.max_length != UNBOUNDED and len(value) > constraint.max_length:
        violations.append(Violation(
            scope=scope,
            identifier=identifier,
            code=ViolationCode.TOO_LONG,
            field=constraint.field,
            message=f"{label} is too long",
            line_number=line_number,
        ))

    return violations


def _pattern_violations(value: str, constraint: FieldConstraint, identifier: str, scope: Scope) -> List[Violation]:
    if constraint.pattern is None or constraint.pattern.search(value):
        return []
    return [Violation(
        scope=scope,
        identifier=identifier,
        code=ViolationCode.PATTERN_MISMATCH,
        field=constraint.field,
        message=f"{constraint.label} does not match regex",
    )]


def validate_field(value: str, constraint: FieldConstraint, identifier: str, scope: Scope = "commit") -> List[Violation]:
    """Apply length bounds and the pattern to a single value.

    Every check runs, so one value can yield up to three violations.
    """
    violations = _length_violations(value, constraint, identifier, scope, constraint.label)
    violations.extend(_pattern_violations(value, constraint, identifier, scope))
    return violations


def validate_lines(
    body: str,
    constraint: FieldConstraint,
    identifier: str,
    prohibit_blank_lines: bool = False,
) -> List[Violation]:
    """Check every line of a message body, then the body as a whole.

    Lines are numbered from 1. Empty lines are reported when blank lines
    are prohibited and never get the minimum length check. The pattern is
    applied once to the unsplit body.
    """
    violations = []
    lines = body.split("\n") if body else []

    for line_number, line in enumerate(lines, start=1):
        if not line and prohibit_blank_lines:
            violations.append(Violation(
                scope="commit",
                identifier=identifier,
                code=ViolationCode.BLANK_LINE_PROHIBITED,
                field=constraint.field,
                message=f"Blank lines are not allowed in {constraint.label.lower()}; line {line_number}",
                line_number=line_number,
            ))

        violations.extend(_length_violations(
            line,
            constraint,
            identifier,
            "commit",
            f"{constraint.label} line {line_number}",
            line_number=line_number,
            check_min=bool(line),
        ))

    violations.extend(_pattern_violations(body, constraint, identifier, "commit"))
    return violations
