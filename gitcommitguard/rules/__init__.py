"""Validation rule engine."""

from .checks import (
    CommitCheck,
    UnknownAccountCheck,
    IdentityPatternCheck,
    SignatureCheck,
    SubjectCheck,
    BodyCheck,
    create_commit_chain,
)
from .evaluators import CommitPolicyEvaluator, RefPolicyEvaluator
from .fields import FieldConstraint, validate_field, validate_lines
from .splitter import split_message

__all__ = [
    'CommitCheck',
    'UnknownAccountCheck',
    'IdentityPatternCheck',
    'SignatureCheck',
    'SubjectCheck',
    'BodyCheck',
    'create_commit_chain',
    'CommitPolicyEvaluator',
    'RefPolicyEvaluator',
    'FieldConstraint',
    'validate_field',
    'validate_lines',
    'split_message',
]
