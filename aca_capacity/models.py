# aca_capacity/models.py
#
# Value types shared by the catalog, validator, planner and UI.
# Everything here is frozen; collections are tuples so that two plans built
# from the same input compare equal.

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


class HostingPlan(str, Enum):
    CONSUMPTION = "Consumption"
    DEDICATED = "Dedicated"
    MIX = "Mix"

    @classmethod
    def parse(cls, value: Union["HostingPlan", str]) -> "HostingPlan":
        """Accept an enum member or its name/value in any letter case."""
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower()
        for plan in cls:
            if text in (plan.value.lower(), plan.name.lower()):
                return plan
        raise ValueError(f"Unknown hosting plan: {value!r}")


class IssueKind(str, Enum):
    # Validation errors (block planning)
    CONSUMPTION_LIMIT = "consumption_limit"
    REPLICA_RANGE = "replica_range"
    INVALID_RESOURCE = "invalid_resource"
    INVALID_PLAN = "invalid_plan"

    # Warnings (planning still completes)
    NO_FITTING_NODE = "no_fitting_node"
    ZERO_CAPACITY = "zero_capacity"
    PEAK_EXCEEDS_SUBNET = "peak_exceeds_subnet"
    UPGRADE_EXCEEDS_SUBNET = "upgrade_exceeds_subnet"


BLOCKING_KINDS = frozenset(
    {
        IssueKind.CONSUMPTION_LIMIT,
        IssueKind.REPLICA_RANGE,
        IssueKind.INVALID_RESOURCE,
        IssueKind.INVALID_PLAN,
    }
)


@dataclass(frozen=True)
class Issue:
    kind: IssueKind
    message: str
    app: Optional[str] = None
    values: tuple[tuple[str, object], ...] = ()

    @property
    def is_blocking(self) -> bool:
        return self.kind in BLOCKING_KINDS

    def value(self, key: str, default=None):
        return dict(self.values).get(key, default)

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class NodeType:
    name: str
    cpu: float
    ram_gb: float
    gpu: int = 0


@dataclass(frozen=True)
class AppRequirement:
    """Per-replica resource needs and scaling bounds of one container app."""

    name: str
    cpu: float
    ram_gb: float
    gpu: int = 0
    min_replicas: int = 1
    max_replicas: int = 1
    baseline_replicas: Optional[int] = None
    plan: Optional[HostingPlan] = None  # only read under Mix

    @property
    def baseline(self) -> int:
        if self.baseline_replicas is None:
            return self.min_replicas
        return self.baseline_replicas


@dataclass(frozen=True)
class NodeAssignment:
    node_index: int       # 1-based within the app's node sequence
    node_type: str
    hosted: tuple[tuple[str, int], ...]
    first_replica: int
    last_replica: int

    @property
    def replica_count(self) -> int:
        return sum(count for _, count in self.hosted)

    @property
    def label(self) -> str:
        apps = ", ".join(f"{name} x{count}" for name, count in self.hosted)
        return (
            f"{self.node_type} #{self.node_index}: {apps} "
            f"(replicas {self.first_replica}-{self.last_replica})"
        )


@dataclass(frozen=True)
class AppPlan:
    name: str
    plan: HostingPlan
    replicas: int
    ip_cost: int
    node_type: Optional[str] = None
    per_node_capacity: Optional[int] = None
    nodes: tuple[NodeAssignment, ...] = ()

    @property
    def node_count(self) -> int:
        return len(self.nodes)

    @property
    def node_type_label(self) -> str:
        if self.plan is HostingPlan.CONSUMPTION:
            return "-"
        return self.node_type or "N/A"

    @property
    def node_labels(self) -> tuple[str, ...]:
        return tuple(node.label for node in self.nodes)


@dataclass(frozen=True)
class PhaseResult:
    phase: str            # "peak" or "upgrade"
    total_ips: int
    apps: tuple[AppPlan, ...] = ()


@dataclass(frozen=True)
class PlanResult:
    selected_plan: HostingPlan
    subnet: str
    prefix_length: Optional[int]
    available_ips: Optional[int]
    total_ips: Optional[int] = None
    total_ips_upgrade: Optional[int] = None
    peak: Optional[PhaseResult] = None
    upgrade: Optional[PhaseResult] = None
    warnings: tuple[Issue, ...] = ()
    errors: tuple[Issue, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def per_app(self) -> tuple[AppPlan, ...]:
        return self.peak.apps if self.peak else ()
