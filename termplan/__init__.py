"""termplan: two-term course schedule planner."""

from termplan.catalog import Catalog, build_catalog
from termplan.config import PlannerConfig
from termplan.diagnostics import Diagnostics
from termplan.engine import generate_schedules
from termplan.model import Blockout, PlanResult, Schedule, Selection

__all__ = [
    "Blockout",
    "Catalog",
    "Diagnostics",
    "PlanResult",
    "PlannerConfig",
    "Schedule",
    "Selection",
    "build_catalog",
    "generate_schedules",
]
