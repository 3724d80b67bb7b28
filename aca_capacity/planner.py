# aca_capacity/planner.py
#
# Capacity planning for Azure Container Apps environments.
#
# Packing policy: every Dedicated app gets its own node sequence of a single
# workload profile (the smallest one that fits one replica), filled in
# replica order. Apps never share a node.

import logging
import math
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Union

from .catalog import NODE_CATALOG, find_smallest_fitting_node
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
from .settings import DEFAULT_SETTINGS, PlannerSettings
from .subnet import ips_for_prefix, parse_prefix_length
from .validation import app_label, fits_consumption, validate_apps

logger = logging.getLogger(__name__)

PEAK = "peak"
UPGRADE = "upgrade"


# ------------------------------
# Core helpers
# ------------------------------

def ceil_div(a: int, b: int) -> int:
    return math.ceil(a / b) if b > 0 else 0


def _whole_units(capacity: float, per_replica: float) -> int:
    # Small epsilon so 8 / 0.2 does not floor to 39 on float noise
    return math.floor(capacity / per_replica + 1e-9)


def per_node_capacity(node: NodeType, app: AppRequirement) -> int:
    """How many replicas of app fit on one node of this type."""
    limits = [
        _whole_units(node.cpu, app.cpu),
        _whole_units(node.ram_gb, app.ram_gb),
    ]
    if app.gpu > 0:
        limits.append(_whole_units(node.gpu, app.gpu))
    return max(0, min(limits))


def nodes_needed(replicas: int, per_node: int) -> int:
    return ceil_div(replicas, per_node)


def consumption_ips(replicas: int, settings: PlannerSettings = DEFAULT_SETTINGS) -> int:
    return ceil_div(replicas, settings.replicas_per_ip)


def assign_replicas(
    app_name: str,
    node_type: str,
    replicas: int,
    per_node: int,
) -> tuple[NodeAssignment, ...]:
    """
    Sequential fill: node k hosts replicas (k-1)*per_node+1 .. min(k*per_node, replicas).
    """
    assignments = []
    for index in range(1, nodes_needed(replicas, per_node) + 1):
        first = (index - 1) * per_node + 1
        last = min(index * per_node, replicas)
        assignments.append(
            NodeAssignment(
                node_index=index,
                node_type=node_type,
                hosted=((app_name, last - first + 1),),
                first_replica=first,
                last_replica=last,
            )
        )
    return tuple(assignments)


# ------------------------------
# Plan selection
# ------------------------------

def recommend_app_plan(
    app: AppRequirement,
    settings: PlannerSettings = DEFAULT_SETTINGS,
) -> HostingPlan:
    if fits_consumption(app, settings):
        return HostingPlan.CONSUMPTION
    return HostingPlan.DEDICATED


def recommend_plan(
    apps: Iterable[AppRequirement],
    settings: PlannerSettings = DEFAULT_SETTINGS,
) -> HostingPlan:
    """
    Consumption when every app fits its limits, Dedicated when none does,
    Mix otherwise.
    """
    fits = [fits_consumption(app, settings) for app in apps]
    if all(fits):
        return HostingPlan.CONSUMPTION
    if not any(fits):
        return HostingPlan.DEDICATED
    return HostingPlan.MIX


def effective_plans(
    apps: Sequence[AppRequirement],
    selected: HostingPlan,
    settings: PlannerSettings = DEFAULT_SETTINGS,
) -> list[HostingPlan]:
    """Resolve the plan each app is actually hosted on."""
    if selected is not HostingPlan.MIX:
        return [selected] * len(apps)

    plans = []
    for app in apps:
        try:
            tag = HostingPlan.parse(app.plan) if app.plan is not None else None
        except ValueError:
            tag = None  # reported by validate_apps
        if tag is None or tag is HostingPlan.MIX:
            tag = recommend_app_plan(app, settings)
        plans.append(tag)
    return plans


# ------------------------------
# Per-app accounting
# ------------------------------

@dataclass(frozen=True)
class NodeFit:
    """Workload profile chosen for one Dedicated app."""

    node: Optional[NodeType]
    per_node: int = 0


def resolve_node(
    app: AppRequirement,
    label: str,
    catalog: Iterable[NodeType] = NODE_CATALOG,
) -> tuple[NodeFit, list[Issue]]:
    node = find_smallest_fitting_node(app.cpu, app.ram_gb, app.gpu, catalog)
    if node is None:
        return NodeFit(None), [
            Issue(
                kind=IssueKind.NO_FITTING_NODE,
                app=label,
                message=(
                    f"{label}: no suitable node type for {app.cpu} CPU, "
                    f"{app.ram_gb} GB RAM, {app.gpu} GPU per replica"
                ),
                values=(("cpu", app.cpu), ("ram_gb", app.ram_gb), ("gpu", app.gpu)),
            )
        ]

    return check_capacity(app, label, node)


def check_capacity(
    app: AppRequirement,
    label: str,
    node: NodeType,
) -> tuple[NodeFit, list[Issue]]:
    per_node = per_node_capacity(node, app)
    if per_node <= 0:
        return NodeFit(node, 0), [
            Issue(
                kind=IssueKind.ZERO_CAPACITY,
                app=label,
                message=f"{label}: a {node.name} node cannot host a single replica",
                values=(("node_type", node.name), ("per_node", per_node)),
            )
        ]
    return NodeFit(node, per_node), []


def account_consumption(
    label: str,
    replicas: int,
    settings: PlannerSettings = DEFAULT_SETTINGS,
) -> AppPlan:
    return AppPlan(
        name=label,
        plan=HostingPlan.CONSUMPTION,
        replicas=replicas,
        ip_cost=consumption_ips(replicas, settings),
    )


def account_dedicated(label: str, replicas: int, fit: NodeFit) -> AppPlan:
    if fit.node is None:
        return AppPlan(name=label, plan=HostingPlan.DEDICATED, replicas=replicas, ip_cost=0)

    nodes = assign_replicas(label, fit.node.name, replicas, fit.per_node)
    return AppPlan(
        name=label,
        plan=HostingPlan.DEDICATED,
        replicas=replicas,
        ip_cost=len(nodes),  # one IP per node
        node_type=fit.node.name,
        per_node_capacity=fit.per_node,
        nodes=nodes,
    )


def evaluate_phase(
    phase: str,
    labels: Sequence[str],
    replica_counts: Sequence[int],
    plans: Sequence[HostingPlan],
    fits: Sequence[Optional[NodeFit]],
    settings: PlannerSettings = DEFAULT_SETTINGS,
) -> PhaseResult:
    rows = []
    for label, replicas, app_plan, fit in zip(labels, replica_counts, plans, fits):
        if app_plan is HostingPlan.CONSUMPTION:
            rows.append(account_consumption(label, replicas, settings))
        else:
            rows.append(account_dedicated(label, replicas, fit))

    total = sum(row.ip_cost for row in rows)
    logger.debug("%s phase: %d IPs across %d app(s)", phase, total, len(rows))
    return PhaseResult(phase=phase, total_ips=total, apps=tuple(rows))


def _subnet_issue(
    kind: IssueKind,
    what: str,
    required: int,
    available: int,
    subnet: str,
) -> Issue:
    return Issue(
        kind=kind,
        message=(
            f"{what} needs {required} IPs but subnet {subnet.strip()} "
            f"only provides {available}"
        ),
        values=(("required", required), ("available", available)),
    )


# ------------------------------
# Entry point
# ------------------------------

def plan(
    apps: Iterable[AppRequirement],
    subnet: str,
    plan_choice: Union[HostingPlan, str, None] = None,
    settings: PlannerSettings = DEFAULT_SETTINGS,
    catalog: Iterable[NodeType] = NODE_CATALOG,
) -> PlanResult:
    """
    Estimate IP usage for apps deployed into a subnet.

    plan_choice=None lets the planner recommend a plan. Invalid input comes
    back as PlanResult.errors with no totals; unsatisfiable node fits and
    subnet exhaustion come back as warnings.
    """
    apps = tuple(apps)
    catalog = tuple(catalog)
    subnet = "" if subnet is None else str(subnet)

    if plan_choice is None:
        selected = recommend_plan(apps, settings)
    else:
        selected = HostingPlan.parse(plan_choice)

    prefix = parse_prefix_length(subnet)
    available = None if prefix is None else ips_for_prefix(prefix, settings.reserved_ips)

    plans = effective_plans(apps, selected, settings)
    errors = validate_apps(apps, plans, settings, mix=selected is HostingPlan.MIX)
    if errors:
        return PlanResult(
            selected_plan=selected,
            subnet=subnet,
            prefix_length=prefix,
            available_ips=available,
            errors=tuple(errors),
        )

    labels = [app_label(app, index) for index, app in enumerate(apps)]
    warnings = []
    fits = []
    for app, label, app_plan in zip(apps, labels, plans):
        if app_plan is HostingPlan.CONSUMPTION:
            fits.append(None)
            continue
        fit, issues = resolve_node(app, label, catalog)
        fits.append(fit)
        warnings.extend(issues)

    peak = evaluate_phase(
        PEAK, labels, [int(app.max_replicas) for app in apps], plans, fits, settings
    )
    upgrade = evaluate_phase(
        UPGRADE,
        labels,
        [int(app.baseline) * settings.upgrade_multiplier for app in apps],
        plans,
        fits,
        settings,
    )

    if available is not None:
        for kind, what, phase in (
            (IssueKind.PEAK_EXCEEDS_SUBNET, "Peak load", peak),
            (IssueKind.UPGRADE_EXCEEDS_SUBNET, "Zero-downtime upgrade", upgrade),
        ):
            if phase.total_ips > available:
                logger.info(
                    "%s phase needs %d IPs, subnet %s has %d",
                    phase.phase, phase.total_ips, subnet, available,
                )
                warnings.append(
                    _subnet_issue(kind, what, phase.total_ips, available, subnet)
                )

    return PlanResult(
        selected_plan=selected,
        subnet=subnet,
        prefix_length=prefix,
        available_ips=available,
        total_ips=peak.total_ips,
        total_ips_upgrade=upgrade.total_ips,
        peak=peak,
        upgrade=upgrade,
        warnings=tuple(warnings),
    )
