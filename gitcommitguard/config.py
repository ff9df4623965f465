"""Rule configuration for git-commit-guard."""
import os
import re
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

import tomli
import tomli_w
from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, ValidationError, field_validator

from .errors import ConfigurationError

DEFAULT_CONFIG_FILENAME = ".gitcommitguard.toml"
CONFIG_SECTION = "gitcommitguard"
INPUT_ENV_PREFIX = "INPUT_"
UNBOUNDED = -1

DEFAULT_MESSAGE_SPLIT = r"^([^\n]*)(?:\n\n(.*))?$"

# Semantic pattern name -> (config field, flags)
PATTERN_FIELDS: Dict[str, Tuple[str, int]] = {
    "branch_name": ("re_branch_name", 0),
    "tag_name": ("re_tag_name", 0),
    "pull_request_title": ("re_pull_request_title", 0),
    "author_email": ("re_commit_author_email", 0),
    "author_name": ("re_commit_author_name", 0),
    "committer_email": ("re_commit_committer_email", 0),
    "committer_name": ("re_commit_committer_name", 0),
    "subject": ("re_commit_message_subject", 0),
    "body": ("re_commit_message_body", re.DOTALL),
    "message_split": ("re_commit_message_split", re.DOTALL),
}
_FLAGS_BY_FIELD = {field_name: flags for field_name, flags in PATTERN_FIELDS.values()}


def _compile(field_name: str, source: str) -> re.Pattern:
    try:
        return re.compile(source, _FLAGS_BY_FIELD[field_name])
    except re.error as e:
        raise ValueError(f"invalid regular expression {source!r}: {e}")


class RuleConfig(BaseModel):
    """Immutable snapshot of every rule applied during a run.

    Fields carry the action input names as aliases, so a config can be
    built either from attribute names or from the hyphenated input names
    used in the workflow file and in the TOML config file.

    Patterns are Python regular expressions. ``$`` also matches just before
    a trailing newline, so ``^feat: .+$`` accepts ``"feat: x\\n"``; anchor
    with ``\\Z`` to reject anything after the last character.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    subject_min_length: int = Field(default=UNBOUNDED, ge=UNBOUNDED, alias="commit-message-subject-min-length")
    subject_max_length: int = Field(default=UNBOUNDED, ge=UNBOUNDED, alias="commit-message-subject-max-length")
    body_min_length: int = Field(default=UNBOUNDED, ge=UNBOUNDED, alias="commit-message-body-min-length")
    body_max_length: int = Field(default=UNBOUNDED, ge=UNBOUNDED, alias="commit-message-body-max-length")

    prohibit_blank_lines_cm_body: bool = Field(default=False, alias="prohibit-blank-lines-cm-body")
    prohibit_unknown_commit_authors: bool = Field(default=False, alias="prohibit-unknown-commit-authors")
    prohibit_unknown_commit_committers: bool = Field(default=False, alias="prohibit-unknown-commit-committers")
    prohibit_unsigned_commits: bool = Field(default=False, alias="prohibit-unsigned-commits")

    re_branch_name: str = Field(default="", alias="re-branch-name")
    re_tag_name: str = Field(default="", alias="re-tag-name")
    re_pull_request_title: str = Field(default="", alias="re-pull-request-title")
    re_commit_author_email: str = Field(default="", alias="re-commit-author-email")
    re_commit_author_name: str = Field(default="", alias="re-commit-author-name")
    re_commit_committer_email: str = Field(default="", alias="re-commit-committer-email")
    re_commit_committer_name: str = Field(default="", alias="re-commit-committer-name")
    re_commit_message_subject: str = Field(default="", alias="re-commit-message-subject")
    re_commit_message_body: str = Field(default="", alias="re-commit-message-body")
    re_commit_message_split: str = Field(default=DEFAULT_MESSAGE_SPLIT, alias="re-commit-message-split")

    _patterns: Dict[str, re.Pattern] = PrivateAttr(default_factory=dict)

    @field_validator(*_FLAGS_BY_FIELD.keys())
    @classmethod
    def _check_pattern(cls, value: str, info) -> str:
        compiled = _compile(info.field_name, value)
        if info.field_name == "re_commit_message_split" and compiled.groups < 2:
            raise ValueError("split regex must define two capture groups (subject, body)")
        return value

    def model_post_init(self, __context: Any) -> None:
        self._patterns = {
            name: _compile(field_name, getattr(self, field_name))
            for name, (field_name, _) in PATTERN_FIELDS.items()
        }

    @property
    def patterns(self) -> Dict[str, re.Pattern]:
        """Compiled patterns keyed by semantic field name."""
        return dict(self._patterns)

    def pattern(self, name: str) -> re.Pattern:
        return self._patterns[name]

    @classmethod
    def build(cls, data: Mapping[str, Any]) -> 'RuleConfig':
        """Create a config, converting validation failures to ConfigurationError."""
        try:
            return cls(**data)
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
                for error in e.errors()
            )
            raise ConfigurationError(f"Invalid configuration: {problems}") from e

    @classmethod
    def load(cls, repo_path: Path, config_file: Optional[Path] = None) -> 'RuleConfig':
        """Load configuration from a TOML file.

        Args:
            repo_path: Repository root searched for the default config file
            config_file: Explicit config file; it must exist when given

        Returns:
            RuleConfig: Values from the [gitcommitguard] table, or defaults
                when no default config file exists
        """
        config_path = config_file or repo_path / DEFAULT_CONFIG_FILENAME

        if not config_path.exists():
            if config_file is not None:
                raise ConfigurationError(f"Config file not found: {config_path}")
            return cls()

        try:
            with config_path.open('rb') as f:
                config_data = tomli.load(f)
        except (OSError, tomli.TOMLDecodeError) as e:
            raise ConfigurationError(f"Error reading config file {config_path}: {e}") from e

        return cls.build(config_data.get(CONFIG_SECTION, {}))

    @classmethod
    def from_environment(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        base: Optional['RuleConfig'] = None,
    ) -> 'RuleConfig':
        """Overlay action inputs (INPUT_<NAME> variables) on top of a base config.

        Empty inputs are ignored. Numeric inputs of -1 disable the bound and
        boolean inputs are true only for the literal string "true".
        """
        environ = os.environ if environ is None else environ
        data = base.model_dump() if base is not None else {}

        for field_name, field_info in cls.model_fields.items():
            raw = environ.get(INPUT_ENV_PREFIX + field_info.alias.upper())
            if raw is None or raw.strip() == "":
                continue
            raw = raw.strip() if field_info.annotation is not str else raw

            if field_info.annotation is bool:
                data[field_name] = raw == "true"
            elif field_info.annotation is int:
                try:
                    data[field_name] = int(raw)
                except ValueError:
                    raise ConfigurationError(f"Input '{field_info.alias}' must be an integer, got {raw!r}")
            else:
                data[field_name] = raw

        return cls.build(data)

    @classmethod
    def resolve(
        cls,
        repo_path: Path,
        environ: Optional[Mapping[str, str]] = None,
        config_file: Optional[Path] = None,
    ) -> 'RuleConfig':
        """Defaults, then the TOML file, then environment inputs."""
        return cls.from_environment(environ, base=cls.load(repo_path, config_file))

    def save(self, repo_path: Path) -> Path:
        """Write the configuration to the default config file.

        Args:
            repo_path: Directory the config file is written to

        Returns:
            Path: The written file
        """
        config_path = repo_path / DEFAULT_CONFIG_FILENAME
        with config_path.open('wb') as f:
            tomli_w.dump({CONFIG_SECTION: self.model_dump(by_alias=True)}, f)
        return config_path

    def settings(self) -> List[Tuple[str, Any]]:
        """Input name and current value of every setting, in declaration order."""
        return [
            (field_info.alias, getattr(self, field_name))
            for field_name, field_info in type(self).model_fields.items()
        ]
