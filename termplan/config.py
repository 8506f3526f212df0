"""
Planner settings.

There is no settings file: the CLI builds a PlannerConfig from its flags and
from the overload choice stored in the cart.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from termplan.errors import InvalidConfigError

DEFAULT_MAX_PER_TERM = 6
OVERLOAD_MIN = 7
OVERLOAD_MAX = 11

# What to do when a course's accepted sections are missing from the term it
# was placed in
MISSING_SKIP = "skip"
MISSING_ERROR = "error"
MISSING_POLICIES = (MISSING_SKIP, MISSING_ERROR)


@dataclass(frozen=True)
class PlannerConfig:
    overload_enabled: bool = False
    max_per_term: int = DEFAULT_MAX_PER_TERM
    missing_sections: str = MISSING_SKIP

    def __post_init__(self) -> None:
        if self.overload_enabled and not (OVERLOAD_MIN <= self.max_per_term <= OVERLOAD_MAX):
            raise InvalidConfigError(
                f"Overload limit must be an integer between {OVERLOAD_MIN} and {OVERLOAD_MAX}, "
                f"got {self.max_per_term!r}"
            )
        if self.missing_sections not in MISSING_POLICIES:
            raise InvalidConfigError(
                f"Unknown missing-section policy {self.missing_sections!r}, "
                f"expected one of {', '.join(MISSING_POLICIES)}"
            )

    @property
    def capacity(self) -> int:
        """Courses allowed per term."""
        return self.max_per_term if self.overload_enabled else DEFAULT_MAX_PER_TERM

    @classmethod
    def with_overload(cls, limit: Optional[int], missing_sections: str = MISSING_SKIP) -> "PlannerConfig":
        """None disables overload."""
        if limit is None:
            return cls(missing_sections=missing_sections)
        return cls(overload_enabled=True, max_per_term=limit, missing_sections=missing_sections)

    def overload_dict(self) -> dict[str, Any]:
        return {"enabled": self.overload_enabled, "max_per_term": self.capacity}
