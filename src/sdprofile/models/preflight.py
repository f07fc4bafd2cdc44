"""Preflight report models."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .enums import PreflightSeverity


class PreflightIssue(BaseModel):
    """One problem found while checking a profile before export."""

    model_config = ConfigDict(frozen=True)

    severity: PreflightSeverity
    code: str = Field(description="Stable machine-readable issue code")
    message: str

    @property
    def dedupe_key(self) -> str:
        return f"{self.severity.code}|{self.code}|{self.message}"

    def __str__(self) -> str:
        return f"[{self.severity.code}] {self.code}: {self.message}"


class PreflightReport(BaseModel):
    """Issues found in one profile, sorted by severity then message."""

    checked_at: datetime = Field(default_factory=datetime.now)
    issues: list[PreflightIssue] = Field(default_factory=list)

    @model_validator(mode="after")
    def _sort_issues(self) -> "PreflightReport":
        self.issues = sorted(
            self.issues, key=lambda issue: (issue.severity.sort_rank, issue.message.casefold())
        )
        return self

    def _count(self, severity: PreflightSeverity) -> int:
        return sum(1 for issue in self.issues if issue.severity is severity)

    @property
    def error_count(self) -> int:
        return self._count(PreflightSeverity.ERROR)

    @property
    def warning_count(self) -> int:
        return self._count(PreflightSeverity.WARNING)

    @property
    def info_count(self) -> int:
        return self._count(PreflightSeverity.INFO)

    @property
    def is_clean(self) -> bool:
        return not self.issues

    @property
    def summary(self) -> str:
        if self.is_clean:
            return "No issues"

        parts = []
        if self.error_count:
            parts.append(f"{self.error_count} error{'s' if self.error_count != 1 else ''}")
        if self.warning_count:
            parts.append(f"{self.warning_count} warning{'s' if self.warning_count != 1 else ''}")
        if self.info_count:
            parts.append(f"{self.info_count} info")
        return ", ".join(parts)

    def codes(self) -> list[str]:
        return [issue.code for issue in self.issues]
