"""Exceptions raised by the substitution engine."""

from __future__ import annotations


class ConfigurationError(ValueError):
    """Raised when the workbook or template cannot support an update cycle.

    Aborts the whole cycle; substitutions already applied stay applied.
    """

    def __init__(self, issues: list[str] | str):
        if isinstance(issues, str):
            issues = [issues]
        self.issues = [str(i).strip() for i in issues if str(i).strip()]
        if not self.issues:
            self.issues = ["Invalid configuration"]
        super().__init__(self._format())

    def _format(self) -> str:
        if len(self.issues) == 1:
            return self.issues[0]
        lines = ["Configuration errors:"]
        for issue in self.issues:
            lines.append(f"- {issue}")
        return "\n".join(lines)
