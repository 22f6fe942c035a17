"""Survey flight-path planning: coverage grids, battery segments and QGroundControl plans."""

from survey_scope.core.pipeline import PlanResult, plan

__all__ = ["PlanResult", "plan"]
