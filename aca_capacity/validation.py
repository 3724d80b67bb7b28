# aca_capacity/validation.py
#
# Input checks that must pass before any plan is computed. All problems are
# collected; nothing here stops at the first one.

import logging
import math
from numbers import Real
from typing import Iterable

from .models import AppRequirement, HostingPlan, Issue, IssueKind
from .settings import DEFAULT_SETTINGS, PlannerSettings

logger = logging.getLogger(__name__)


def _is_number(value) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool) and math.isfinite(value)


def _is_count(value) -> bool:
    return _is_number(value) and float(value).is_integer()


def fits_consumption(app: AppRequirement, settings: PlannerSettings = DEFAULT_SETTINGS) -> bool:
    """True when one replica stays inside the Consumption plan limits."""
    if not all(_is_number(value) for value in (app.cpu, app.ram_gb, app.gpu)):
        return False
    return (
        app.cpu <= settings.consumption_max_cpu
        and app.ram_gb <= settings.consumption_max_ram_gb
        and app.gpu <= settings.consumption_max_gpu
    )


def app_label(app: AppRequirement, index: int) -> str:
    name = (app.name or "").strip()
    return name if name else f"App {index + 1}"


def check_resources(app: AppRequirement, label: str) -> list[Issue]:
    issues = []
    for field_name, value, allow_zero in (
        ("cpu", app.cpu, False),
        ("ram_gb", app.ram_gb, False),
        ("gpu", app.gpu, True),
    ):
        valid = _is_number(value) and (value >= 0 if allow_zero else value > 0)
        if field_name == "gpu" and valid:
            valid = _is_count(value)
        if not valid:
            bound = ">= 0" if allow_zero else "> 0"
            issues.append(
                Issue(
                    kind=IssueKind.INVALID_RESOURCE,
                    app=label,
                    message=f"{label}: {field_name} must be a number {bound} (got {value!r})",
                    values=(("field", field_name), ("value", value)),
                )
            )
    return issues


def check_replicas(app: AppRequirement, label: str) -> list[Issue]:
    counts = (
        ("min_replicas", app.min_replicas),
        ("baseline_replicas", app.baseline),
        ("max_replicas", app.max_replicas),
    )
    bad = [(name, value) for name, value in counts if not _is_count(value) or value < 0]
    if bad:
        return [
            Issue(
                kind=IssueKind.REPLICA_RANGE,
                app=label,
                message=f"{label}: {name} must be a whole number >= 0 (got {value!r})",
                values=(("field", name), ("value", value)),
            )
            for name, value in bad
        ]

    if not app.min_replicas <= app.baseline <= app.max_replicas:
        return [
            Issue(
                kind=IssueKind.REPLICA_RANGE,
                app=label,
                message=(
                    f"{label}: replicas must satisfy min <= baseline <= max "
                    f"(min={app.min_replicas}, baseline={app.baseline}, "
                    f"max={app.max_replicas})"
                ),
                values=tuple(counts),
            )
        ]
    return []


def check_plan_tag(app: AppRequirement, label: str) -> list[Issue]:
    if app.plan is None:
        return []
    try:
        HostingPlan.parse(app.plan)
    except ValueError:
        return [
            Issue(
                kind=IssueKind.INVALID_PLAN,
                app=label,
                message=(
                    f"{label}: plan {app.plan!r} is not one of "
                    f"{HostingPlan.CONSUMPTION.value} or {HostingPlan.DEDICATED.value}"
                ),
                values=(("field", "plan"), ("value", app.plan)),
            )
        ]
    return []


def check_consumption_limits(
    app: AppRequirement,
    label: str,
    settings: PlannerSettings = DEFAULT_SETTINGS,
) -> list[Issue]:
    issues = []
    for field_name, value, limit in (
        ("cpu", app.cpu, settings.consumption_max_cpu),
        ("ram_gb", app.ram_gb, settings.consumption_max_ram_gb),
        ("gpu", app.gpu, settings.consumption_max_gpu),
    ):
        if _is_number(value) and value > limit:
            issues.append(
                Issue(
                    kind=IssueKind.CONSUMPTION_LIMIT,
                    app=label,
                    message=(
                        f"{label}: {field_name} {value} exceeds the Consumption "
                        f"plan limit of {limit}"
                    ),
                    values=(("field", field_name), ("value", value), ("limit", limit)),
                )
            )
    return issues


def validate_apps(
    apps: Iterable[AppRequirement],
    effective_plans: Iterable[HostingPlan],
    settings: PlannerSettings = DEFAULT_SETTINGS,
    mix: bool = False,
) -> list[Issue]:
    """
    Check every app and return all blocking issues found.

    effective_plans pairs with apps and gives the plan each app will really
    be hosted on (Mix already resolved to Consumption or Dedicated). Per-app
    plan tags are only checked when mix is set.
    """
    errors = []
    for index, (app, plan) in enumerate(zip(apps, effective_plans)):
        label = app_label(app, index)
        errors.extend(check_resources(app, label))
        errors.extend(check_replicas(app, label))
        if mix:
            errors.extend(check_plan_tag(app, label))
        if plan is HostingPlan.CONSUMPTION:
            errors.extend(check_consumption_limits(app, label, settings))

    if errors:
        logger.info("Validation failed with %d error(s)", len(errors))
    return errors
