"""
Configuration linter for Toolgate.

Where load_config() stops at the first problem, lint_config() keeps going
and reports everything it can find in one pass:

    file_read_error   the file could not be read
    yaml_parse_error  the file is not valid YAML
    schema_error      a field has the wrong type or an unknown key
    missing_policy    no ``policy`` section (warning; defaults apply)
    invalid_regex     a command pattern does not compile
    invalid_glob      a tool or path glob does not compile

Pattern problems are taken from the compiled policy, so the linter reports
exactly the patterns the engine would drop at runtime.
"""

from enum import Enum
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from toolgate.policy import compile_policy
from toolgate.schema import Config


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


class LintIssue(BaseModel):
    """A single finding."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    severity: Severity
    code: str = Field(..., description="Stable machine-readable code")
    message: str
    location: str | None = Field(default=None, description="Config key path, if known")


class LintResult(BaseModel):
    """All findings for one configuration file."""

    path: str
    issues: list[LintIssue] = Field(default_factory=list)

    def add(
        self,
        severity: Severity,
        code: str,
        message: str,
        location: str | None = None,
    ) -> None:
        self.issues.append(
            LintIssue(severity=severity, code=code, message=message, location=location)
        )

    @property
    def error_count(self) -> int:
        return sum(1 for i in self.issues if i.severity == Severity.ERROR)

    @property
    def warning_count(self) -> int:
        return sum(1 for i in self.issues if i.severity == Severity.WARNING)

    @property
    def has_errors(self) -> bool:
        return self.error_count > 0

    @property
    def is_clean(self) -> bool:
        return not self.issues


def _location(loc: tuple[int | str, ...]) -> str:
    parts: list[str] = []
    for item in loc:
        if isinstance(item, int):
            parts.append(f"[{item}]")
        elif parts:
            parts.append(f".{item}")
        else:
            parts.append(str(item))
    return "".join(parts)


def lint_config(path: Path | str) -> LintResult:
    """
    Lint a configuration file.

    Args:
        path: Path to the YAML file

    Returns:
        LintResult with every finding; never raises for content problems
    """
    path = Path(path)
    result = LintResult(path=str(path))

    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        result.add(Severity.ERROR, "file_read_error", f"Failed to read file: {e}")
        return result

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        result.add(Severity.ERROR, "yaml_parse_error", f"YAML parse error: {e}")
        return result

    if data is None:
        data = {}
    if not isinstance(data, dict):
        result.add(
            Severity.ERROR,
            "yaml_parse_error",
            f"Configuration root must be a mapping, got {type(data).__name__}",
        )
        return result

    if "policy" not in data:
        result.add(
            Severity.WARNING,
            "missing_policy",
            "No 'policy' section found, using defaults",
            location="policy",
        )

    try:
        config = Config.model_validate(data)
    except ValidationError as e:
        for error in e.errors():
            result.add(
                Severity.ERROR,
                "schema_error",
                error["msg"],
                location=_location(error["loc"]) or None,
            )
        return result

    for issue in compile_policy(config).issues:
        result.add(
            Severity.ERROR,
            f"invalid_{issue.kind}",
            f"Invalid {issue.kind} '{issue.pattern}': {issue.message}",
            location=issue.location,
        )

    return result
