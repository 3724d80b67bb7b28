# aca_capacity/render.py
#
# Helpers that turn editor rows into requirements and results into tables
# and graphviz diagrams for the Streamlit page.

import math

from graphviz import Digraph

from .models import AppPlan, AppRequirement, HostingPlan, PhaseResult

MAX_NODES_DRAWN = 12


def _missing(value) -> bool:
    return value is None or (isinstance(value, float) and math.isnan(value))


def _number(value, default=0):
    return default if _missing(value) else value


def _count(value, default=0):
    if _missing(value):
        return default
    return int(value) if float(value).is_integer() else value


def row_to_app(row: dict) -> AppRequirement:
    """Convert one data-editor row to an AppRequirement; blanks become zero."""
    plan_tag = row.get("plan")
    return AppRequirement(
        name="" if _missing(row.get("name")) else str(row["name"]),
        cpu=float(_number(row.get("cpu"))),
        ram_gb=float(_number(row.get("ram_gb"))),
        gpu=_count(row.get("gpu")),
        min_replicas=_count(row.get("min_replicas")),
        max_replicas=_count(row.get("max_replicas")),
        baseline_replicas=_count(row.get("baseline_replicas"), default=None),
        plan=None if _missing(plan_tag) or not plan_tag else HostingPlan.parse(plan_tag),
    )


def phase_rows(phase: PhaseResult) -> list[dict]:
    return [
        {
            "App": row.name,
            "Plan": row.plan.value,
            "Replicas": row.replicas,
            "Node type": row.node_type_label,
            "Replicas per node": row.per_node_capacity,
            "Nodes": row.node_count if row.plan is HostingPlan.DEDICATED else None,
            "IPs": row.ip_cost,
        }
        for row in phase.apps
    ]


def build_node_graph(app_plan: AppPlan, max_nodes: int = MAX_NODES_DRAWN) -> Digraph:
    """
    Build a simplified diagram of one dedicated app's node layout:

      App                                   (top)
      Nodes, one box per node with the replica range it hosts
      A single summary box for nodes past max_nodes
    """
    dot = Digraph(comment=f"{app_plan.name} nodes")
    dot.attr(rankdir="TB", splines="polyline")
    dot.attr("node", shape="box")

    app_node = "app"
    dot.node(
        app_node,
        f"{app_plan.name}\n(replicas = {app_plan.replicas}, "
        f"{app_plan.per_node_capacity} per {app_plan.node_type})",
    )

    for node in app_plan.nodes[:max_nodes]:
        node_id = f"node_{node.node_index}"
        dot.node(
            node_id,
            f"{node.node_type} #{node.node_index}\n"
            f"(replicas {node.first_replica}-{node.last_replica})",
        )
        dot.edge(app_node, node_id)

    hidden = app_plan.node_count - max_nodes
    if hidden > 0:
        more_id = "more"
        dot.node(more_id, f"... {hidden} more {app_plan.node_type} nodes", shape="plaintext")
        dot.edge(app_node, more_id, style="dashed")

    return dot
