"""Recovery planning — immediate actions, two-tier plan, recovery estimate."""
from diagnostics import Layer, ModuleRCAResult, ModuleStatus, Priority, ServiceHealthStatus, ServiceStatus
from diagnostics import fixes
from rca.planner import RecoveryWindows, plan_recovery


def svc(name, status=ServiceStatus.HEALTHY, critical_path=True):
    return ServiceHealthStatus(service=name, layer=Layer.BACKEND, status=status,
                               details=f"{name} check", critical_path=critical_path)


def mod(name, status=ModuleStatus.OPERATIONAL, priority=Priority.LOW, fixes_=(), rollback=False,
        root_cause=None, downtime="5-15 minutes"):
    return ModuleRCAResult(module=name, layer=Layer.FRONTEND, status=status, priority=priority,
                           estimated_downtime=downtime, rollback_required=rollback,
                           root_cause=root_cause, fixes=tuple(fixes_))


HEALTHY_SERVICES = [svc("storage"), svc("authentication"), svc("api-gateway"), svc("presentation-layer")]


def test_healthy_system_has_empty_plan():
    modules = [mod("identity"), mod("billing"), mod("reporting")]
    brief = plan_recovery(HEALTHY_SERVICES, modules)
    assert brief.immediate_actions == ()
    assert brief.recovery_plan.immediate == ()
    assert brief.recovery_plan.short_term == ()
    assert brief.rollback_recommendation is False
    assert brief.estimated_recovery_time == RecoveryWindows().degraded_only


def test_critical_module_gets_exactly_one_immediate_entry():
    strategy = mod("strategy-engine", ModuleStatus.FAILED, Priority.CRITICAL,
                   fixes_=[fixes.CHECK_STRATEGY_LOGS, fixes.INIT_BEHAVIOR_LOGS],
                   rollback=True, root_cause="Strategy generation service failure",
                   downtime="15-30 minutes")
    brief = plan_recovery(HEALTHY_SERVICES, [mod("identity"), strategy])

    assert len(brief.recovery_plan.immediate) == 1
    entry = brief.recovery_plan.immediate[0]
    assert entry.action == f"Fix strategy-engine: {fixes.CHECK_STRATEGY_LOGS}"
    assert entry.eta == "15-30 minutes"
    assert entry.owner == "Ops/SRE"
    assert brief.immediate_actions == (
        "CRITICAL: Fix strategy-engine - Strategy generation service failure",
    )
    assert brief.rollback_recommendation is True
    assert brief.estimated_recovery_time == RecoveryWindows().single_critical


def test_critical_module_without_fixes_falls_back_to_restart():
    broken = mod("guided-setup", ModuleStatus.FAILED, Priority.CRITICAL)
    brief = plan_recovery(HEALTHY_SERVICES, [broken])
    assert brief.recovery_plan.immediate[0].action == "Fix guided-setup: Restart service"


def test_high_and_medium_modules_go_to_short_term():
    modules = [
        mod("billing", ModuleStatus.DEGRADED, Priority.MEDIUM, fixes_=[fixes.VERIFY_PAYMENT_FORM]),
        mod("identity", ModuleStatus.DEGRADED, Priority.HIGH),
        mod("reporting"),
    ]
    brief = plan_recovery(HEALTHY_SERVICES, modules, short_term_eta="1-2 hours")
    assert [a.action for a in brief.recovery_plan.short_term] == [
        f"Stabilize billing: {fixes.VERIFY_PAYMENT_FORM}",
        "Stabilize identity: Monitor and optimize",
    ]
    assert all(a.eta == "1-2 hours" for a in brief.recovery_plan.short_term)
    assert all(a.owner == "Engineering" for a in brief.recovery_plan.short_term)


def test_down_services_and_identity_hint_in_immediate_actions():
    services = [svc("storage", ServiceStatus.DOWN), svc("api-gateway", ServiceStatus.DOWN, critical_path=False)]
    modules = [mod("identity", ModuleStatus.DEGRADED, Priority.HIGH)]
    brief = plan_recovery(services, modules)
    assert brief.immediate_actions == (
        "IMMEDIATE: Restart storage - storage check",
        "IMMEDIATE: Restart api-gateway - api-gateway check",
        f"IMMEDIATE: {fixes.CLEAR_AUTH_CACHE}",
    )


def test_recovery_time_counts_only_critical_failed_modules():
    services = [svc("storage", ServiceStatus.DOWN), svc("authentication")]
    brief = plan_recovery(services, [mod("identity"), mod("strategy-engine")])
    assert brief.estimated_recovery_time == RecoveryWindows().degraded_only

    modules = [mod("identity", ModuleStatus.FAILED, Priority.CRITICAL)]
    assert plan_recovery(services, modules).estimated_recovery_time == RecoveryWindows().single_critical

    modules.append(mod("strategy-engine", ModuleStatus.FAILED, Priority.CRITICAL))
    assert plan_recovery(services, modules).estimated_recovery_time == RecoveryWindows().multiple_critical

    # High-priority failures do not count toward the tier
    high = [mod("content-library", ModuleStatus.FAILED, Priority.HIGH)]
    assert plan_recovery(HEALTHY_SERVICES, high).estimated_recovery_time == RecoveryWindows().degraded_only
