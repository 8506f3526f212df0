"""
Diagnostics sink for one planner run.

The engine never keeps module-level state. A caller that wants to know why a
run produced few (or no) schedules passes a Diagnostics instance and reads it
afterwards:

    diag = Diagnostics()
    result = generate_schedules(selections, catalog, diagnostics=diag)
    for issue in diag.issues:
        print(issue.code, issue.message)

Every recorded issue is also forwarded to the standard logging module, so
running the CLI with -v shows them without any extra wiring.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class Issue:
    """One data-quality warning raised during a run."""

    code: str
    message: str
    context: dict[str, Any] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        payload.update(self.context)
        return payload


@dataclass(slots=True)
class Diagnostics:
    """Collects warnings and search counters while the engine runs."""

    issues: list[Issue] = field(default_factory=list)
    counters: Counter = field(default_factory=Counter)

    def warn(self, code: str, message: str, **context: Any) -> None:
        self.issues.append(Issue(code=code, message=message, context=context))
        logger.warning("%s: %s", code, message)

    def count(self, name: str, amount: int = 1) -> None:
        self.counters[name] += amount

    def codes(self) -> list[str]:
        return [issue.code for issue in self.issues]

    def summary(self) -> dict[str, int]:
        """Counters as a plain dict, sorted by name for stable output."""
        return {name: int(self.counters[name]) for name in sorted(self.counters)}


def warn(diagnostics: Diagnostics | None, code: str, message: str, **context: Any) -> None:
    """Record on the sink if one was passed, otherwise only log."""
    if diagnostics is not None:
        diagnostics.warn(code, message, **context)
    else:
        logger.warning("%s: %s", code, message)


def count(diagnostics: Diagnostics | None, name: str, amount: int = 1) -> None:
    if diagnostics is not None:
        diagnostics.count(name, amount)
