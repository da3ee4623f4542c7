"""Annotation model shared by every check.

Each check returns a CheckResult rather than raising: the severity of what
it found travels as data and the runner aggregates it into a RunReport.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class Kind(str, Enum):
    FAIL = "fail"  # blocking: marks the check as failed
    WARN = "warn"  # advisory
    MESSAGE = "message"  # informational
    MARKDOWN = "markdown"  # rendered markup block


class Status(str, Enum):
    OK = "ok"
    ADVISORY = "advisory"
    BLOCKING = "blocking"


_STATUS_RANK = {Status.OK: 0, Status.ADVISORY: 1, Status.BLOCKING: 2}


@dataclass(frozen=True)
class Annotation:
    kind: Kind
    body: str
    path: str | None = None
    line: int | None = None

    @property
    def location(self) -> str:
        """``path#Lline`` when tied to a file, else an empty string."""
        if not self.path:
            return ""
        if self.line:
            return f"{self.path}#L{self.line}"
        return self.path


@dataclass
class CheckResult:
    """Annotations produced by one check, tagged with the worst severity seen."""

    name: str
    annotations: list[Annotation] = field(default_factory=list)

    def fail(self, body: str, path: str | None = None, line: int | None = None) -> None:
        self.annotations.append(Annotation(Kind.FAIL, body, path, line))

    def warn(self, body: str, path: str | None = None, line: int | None = None) -> None:
        self.annotations.append(Annotation(Kind.WARN, body, path, line))

    def message(self, body: str, path: str | None = None, line: int | None = None) -> None:
        self.annotations.append(Annotation(Kind.MESSAGE, body, path, line))

    def markdown(self, body: str, path: str | None = None, line: int | None = None) -> None:
        self.annotations.append(Annotation(Kind.MARKDOWN, body, path, line))

    @property
    def status(self) -> Status:
        kinds = {a.kind for a in self.annotations}
        if Kind.FAIL in kinds:
            return Status.BLOCKING
        if Kind.WARN in kinds:
            return Status.ADVISORY
        return Status.OK


@dataclass
class RunReport:
    """Aggregate of every CheckResult from one run, in launch order."""

    results: list[CheckResult] = field(default_factory=list)

    @property
    def annotations(self) -> list[Annotation]:
        return [a for r in self.results for a in r.annotations]

    def _of_kind(self, kind: Kind) -> list[Annotation]:
        return [a for a in self.annotations if a.kind == kind]

    @property
    def fails(self) -> list[Annotation]:
        return self._of_kind(Kind.FAIL)

    @property
    def warnings(self) -> list[Annotation]:
        return self._of_kind(Kind.WARN)

    @property
    def messages(self) -> list[Annotation]:
        return self._of_kind(Kind.MESSAGE)

    @property
    def markdowns(self) -> list[Annotation]:
        return self._of_kind(Kind.MARKDOWN)

    @property
    def status(self) -> Status:
        return max((r.status for r in self.results), key=_STATUS_RANK.__getitem__, default=Status.OK)
