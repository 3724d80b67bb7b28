# app.py
#
# Streamlit-based Azure Container Apps capacity planner
# Run with: streamlit run app.py

import logging

import pandas as pd
import streamlit as st

from aca_capacity import NODE_CATALOG, HostingPlan, PhaseResult, PlannerSettings, plan
from aca_capacity.render import build_node_graph, phase_rows, row_to_app
from aca_capacity.settings import RESERVED_IPS, REPLICAS_PER_IP

logging.basicConfig(level=logging.INFO)


# ------------------------------
# UI constants
# ------------------------------

PLAN_OPTIONS = ["Auto", "Consumption", "Dedicated", "Mix"]

DEFAULT_APPS = pd.DataFrame(
    [
        {
            "name": "api",
            "cpu": 1.0,
            "ram_gb": 2.0,
            "gpu": 0,
            "min_replicas": 2,
            "baseline_replicas": float("nan"),
            "max_replicas": 25,
            "plan": "Consumption",
        },
        {
            "name": "worker",
            "cpu": 20.0,
            "ram_gb": 200.0,
            "gpu": 0,
            "min_replicas": 1,
            "baseline_replicas": float("nan"),
            "max_replicas": 5,
            "plan": "Dedicated",
        },
    ]
)


# ------------------------------
# Streamlit UI
# ------------------------------

st.set_page_config(
    page_title="Azure Container Apps Capacity Planner",
    layout="wide",
)

st.title("Azure Container Apps Capacity Planner")

st.markdown(
    """
This tool estimates how many subnet IPs an Azure Container Apps environment needs
and recommends a hosting plan:

- **Consumption**: one IP per started block of 10 replicas (max 4 CPU / 8 GB per replica, no GPU)
- **Dedicated**: each app runs on the smallest workload profile that fits one replica; one IP per node
- **Mix**: each app uses its own plan

Usage is computed twice: at **peak** (max replicas) and during a **zero-downtime upgrade**
(baseline replicas doubled, baseline defaults to min replicas).
"""
)

# ---- Sidebar inputs ----
st.sidebar.header("Environment inputs")

subnet = st.sidebar.text_input(
    "Subnet size (/N, N, or netmask)",
    value="/27",
)

plan_choice = st.sidebar.selectbox(
    "Hosting plan",
    options=PLAN_OPTIONS,
    index=0,  # default Auto
)

with st.sidebar.expander("Platform constants", expanded=False):
    reserved_ips = st.number_input(
        "Reserved IPs per subnet",
        min_value=0,
        value=RESERVED_IPS,
        step=1,
    )
    replicas_per_ip = st.number_input(
        "Consumption replicas per IP",
        min_value=1,
        value=REPLICAS_PER_IP,
        step=1,
    )

settings = PlannerSettings(
    reserved_ips=int(reserved_ips),
    replicas_per_ip=int(replicas_per_ip),
)

st.header("Apps")
st.caption("Per-replica requirements. The plan column is only used with the Mix plan.")

edited_apps = st.data_editor(
    DEFAULT_APPS,
    num_rows="dynamic",
    column_config={
        "name": st.column_config.TextColumn("App name"),
        "cpu": st.column_config.NumberColumn("CPU", min_value=0.0, step=0.25),
        "ram_gb": st.column_config.NumberColumn("RAM (GB)", min_value=0.0, step=0.5),
        "gpu": st.column_config.NumberColumn("GPU", min_value=0, step=1),
        "min_replicas": st.column_config.NumberColumn("Min replicas", min_value=0, step=1),
        "baseline_replicas": st.column_config.NumberColumn(
            "Baseline replicas", min_value=0, step=1
        ),
        "max_replicas": st.column_config.NumberColumn("Max replicas", min_value=0, step=1),
        "plan": st.column_config.SelectboxColumn(
            "Plan (Mix)",
            options=[HostingPlan.CONSUMPTION.value, HostingPlan.DEDICATED.value],
        ),
    },
    key="apps",
)

# ------------------------------
# Calculations
# ------------------------------

apps = [row_to_app(row) for row in edited_apps.to_dict("records")]

result = plan(
    apps,
    subnet,
    None if plan_choice == "Auto" else plan_choice,
    settings=settings,
)

if not result.ok:
    st.error("Fix the following before a plan can be computed:")
    for error in result.errors:
        st.write(f"- {error}")
    st.stop()

# ------------------------------
# Output: high-level summary
# ------------------------------

st.header("Plan summary")

col1, col2, col3, col4 = st.columns(4)

with col1:
    st.metric("Hosting plan", result.selected_plan.value)
    if plan_choice == "Auto":
        st.caption("Recommended from the Consumption plan limits.")

with col2:
    st.metric(
        "Available IPs",
        "unknown" if result.available_ips is None else f"{result.available_ips}",
    )
    if result.available_ips is None:
        st.warning("Subnet size not recognised; subnet checks are skipped.")
    else:
        st.caption(f"/{result.prefix_length} minus {settings.reserved_ips} reserved addresses.")

with col3:
    st.metric("Peak IPs", f"{result.total_ips}")
    if result.available_ips is not None:
        if result.total_ips <= result.available_ips:
            st.success("Peak load fits the subnet.")
        else:
            st.error(
                f"Peak load exceeds the subnet by "
                f"{result.total_ips - result.available_ips} IPs."
            )

with col4:
    st.metric("Upgrade-phase IPs", f"{result.total_ips_upgrade}")
    if result.available_ips is not None:
        if result.total_ips_upgrade <= result.available_ips:
            st.success("Zero-downtime upgrade fits the subnet.")
        else:
            st.error(
                f"Zero-downtime upgrade exceeds the subnet by "
                f"{result.total_ips_upgrade - result.available_ips} IPs."
            )

for warning in result.warnings:
    st.warning(str(warning))

# ------------------------------
# Phase details
# ------------------------------

def render_phase_section(phase: PhaseResult, title: str, show_graphs: bool):
    st.markdown(f"### {title}")
    st.metric("Total IPs", phase.total_ips)
    st.dataframe(phase_rows(phase), hide_index=True)

    dedicated = [row for row in phase.apps if row.nodes]
    if not dedicated:
        return

    st.markdown("**Node assignments**")
    for row in dedicated:
        with st.expander(f"{row.name}: {row.node_count} x {row.node_type}"):
            st.write("\n".join(f"- {label}" for label in row.node_labels))
            if show_graphs:
                st.graphviz_chart(build_node_graph(row))


tab_peak, tab_upgrade, tab_catalog = st.tabs(
    ["Peak load", "Zero-downtime upgrade", "Node catalog"]
)

with tab_peak:
    render_phase_section(result.peak, "Peak load (max replicas)", show_graphs=True)

with tab_upgrade:
    render_phase_section(
        result.upgrade,
        "Upgrade phase (baseline replicas x2)",
        show_graphs=False,
    )

with tab_catalog:
    st.dataframe(
        [
            {"Node type": node.name, "CPU": node.cpu, "RAM (GB)": node.ram_gb, "GPU": node.gpu}
            for node in NODE_CATALOG
        ],
        hide_index=True,
    )
    st.caption("Listed smallest first; dedicated apps use the first entry that fits one replica.")

st.info(
    "Note: IP counts are **sizing approximations** based on per-replica requests and the "
    "platform's published profile sizes. They are a planning aid, not a guarantee of "
    "what Azure will allocate."
)
