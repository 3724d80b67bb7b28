"""Capacity planning for Azure Container Apps environments."""

from .catalog import NODE_CATALOG, capacity_key, find_smallest_fitting_node
from .models import (
    AppPlan,
    AppRequirement,
    HostingPlan,
    Issue,
    IssueKind,
    NodeAssignment,
    NodeType,
    PhaseResult,
    PlanResult,
)
from .planner import plan, recommend_plan
from .settings import DEFAULT_SETTINGS, PlannerSettings
from .subnet import available_ips, parse_prefix_length

__all__ = [
    "AppPlan",
    "AppRequirement",
    "DEFAULT_SETTINGS",
    "HostingPlan",
    "Issue",
    "IssueKind",
    "NODE_CATALOG",
    "NodeAssignment",
    "NodeType",
    "PhaseResult",
    "PlanResult",
    "PlannerSettings",
    "available_ips",
    "capacity_key",
    "find_smallest_fitting_node",
    "parse_prefix_length",
    "plan",
    "recommend_plan",
]
