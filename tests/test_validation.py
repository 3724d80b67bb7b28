from aca_capacity import AppRequirement, HostingPlan, IssueKind, plan
from aca_capacity.validation import fits_consumption, validate_apps


def make_app(name="api", cpu=1.0, ram_gb=2.0, gpu=0, min_replicas=1, max_replicas=3, **kwargs):
    return AppRequirement(
        name=name,
        cpu=cpu,
        ram_gb=ram_gb,
        gpu=gpu,
        min_replicas=min_replicas,
        max_replicas=max_replicas,
        **kwargs,
    )


def test_consumption_cpu_limit_blocks_planning():
    result = plan([make_app(name="billing", cpu=5)], "/27", HostingPlan.CONSUMPTION)

    assert not result.ok
    assert result.total_ips is None
    assert result.total_ips_upgrade is None
    assert result.per_app == ()

    (error,) = result.errors
    assert error.kind is IssueKind.CONSUMPTION_LIMIT
    assert error.is_blocking
    assert error.app == "billing"
    assert error.value("field") == "cpu"
    assert error.value("limit") == 4.0
    assert "billing" in error.message
    assert "cpu" in error.message and "4" in error.message


def test_errors_are_collected_for_every_app():
    apps = [
        make_app(name="a", cpu=6, ram_gb=16),
        make_app(name="b", gpu=1),
        make_app(name="c", min_replicas=5, max_replicas=2),
    ]
    result = plan(apps, "/24", "Consumption")

    kinds = [(e.app, e.kind, e.value("field")) for e in result.errors]
    assert ("a", IssueKind.CONSUMPTION_LIMIT, "cpu") in kinds
    assert ("a", IssueKind.CONSUMPTION_LIMIT, "ram_gb") in kinds
    assert ("b", IssueKind.CONSUMPTION_LIMIT, "gpu") in kinds
    assert any(app == "c" and kind is IssueKind.REPLICA_RANGE for app, kind, _ in kinds)
    assert len(result.errors) == 4


def test_dedicated_ignores_consumption_limits():
    result = plan([make_app(cpu=5, ram_gb=20)], "/27", HostingPlan.DEDICATED)
    assert result.ok


def test_baseline_must_sit_between_min_and_max():
    app = make_app(min_replicas=2, max_replicas=4, baseline_replicas=5)
    errors = validate_apps([app], [HostingPlan.DEDICATED])

    (error,) = errors
    assert error.kind is IssueKind.REPLICA_RANGE
    assert "baseline=5" in error.message


def test_negative_and_fractional_replicas_are_rejected():
    errors = validate_apps(
        [make_app(min_replicas=-1, max_replicas=2.5)], [HostingPlan.DEDICATED]
    )
    fields = {e.value("field") for e in errors}
    assert fields == {"min_replicas", "baseline_replicas", "max_replicas"}
    assert all(e.kind is IssueKind.REPLICA_RANGE for e in errors)


def test_resources_must_be_positive():
    errors = validate_apps(
        [make_app(cpu=0, ram_gb=-1, gpu=0.5)], [HostingPlan.DEDICATED]
    )
    assert [e.value("field") for e in errors] == ["cpu", "ram_gb", "gpu"]
    assert all(e.kind is IssueKind.INVALID_RESOURCE for e in errors)


def test_non_numeric_resources_are_reported_not_raised():
    result = plan([make_app(cpu="lots")], "/27")
    assert not result.ok
    assert result.errors[0].kind is IssueKind.INVALID_RESOURCE


def test_unnamed_apps_are_labelled_by_position():
    errors = validate_apps(
        [make_app(name="ok"), make_app(name="  ", cpu=9)],
        [HostingPlan.CONSUMPTION, HostingPlan.CONSUMPTION],
    )
    assert errors[0].app == "App 2"


def test_mix_validates_only_consumption_tagged_apps():
    apps = [
        make_app(name="tagged", cpu=6, plan=HostingPlan.CONSUMPTION),
        make_app(name="untagged", cpu=6),
        make_app(name="dedicated", cpu=6, plan=HostingPlan.DEDICATED),
    ]
    result = plan(apps, "/27", HostingPlan.MIX)

    assert [e.app for e in result.errors] == ["tagged"]


def test_fits_consumption():
    assert fits_consumption(make_app(cpu=4, ram_gb=8))
    assert not fits_consumption(make_app(cpu=4.5))
    assert not fits_consumption(make_app(ram_gb=8.5))
    assert not fits_consumption(make_app(gpu=1))
    assert not fits_consumption(make_app(cpu=None))


def test_unknown_plan_tag_under_mix_is_a_validation_error():
    result = plan([make_app(name="api", plan="Premium")], "/27", HostingPlan.MIX)

    assert not result.ok
    assert result.total_ips is None
    (error,) = result.errors
    assert error.kind is IssueKind.INVALID_PLAN
    assert error.is_blocking
    assert error.app == "api"
    assert error.value("value") == "Premium"
    assert "Premium" in error.message


def test_plan_tag_is_ignored_outside_mix():
    result = plan([make_app(plan="Premium")], "/27", HostingPlan.DEDICATED)
    assert result.ok


def test_plan_tag_accepts_names_in_any_case():
    result = plan([make_app(cpu=6, plan="dedicated")], "/27", HostingPlan.MIX)
    assert result.ok
    assert result.per_app[0].plan is HostingPlan.DEDICATED
