"""Export documents and the on-disk report archive."""
from datetime import datetime, timedelta, timezone

import pytest

from diagnostics import Layer, ModuleRCAResult, ModuleStatus, Priority, ServiceHealthStatus, ServiceStatus
from rca import (
    CRITICAL_PATH,
    ExportFormatError,
    OverallStatus,
    RecoveryAction,
    RecoveryPlan,
    ReportArchive,
    SystemRCAReport,
    from_document,
    to_document,
)
from rca.export import dumps, loads


def _report(**overrides) -> SystemRCAReport:
    fields = dict(
        overall_status=OverallStatus.CRITICAL_FAILURE,
        primary_root_cause="Strategy generation service failure",
        estimated_recovery_time="15-30 minutes (single critical failure)",
        cascading_failures=(
            "Strategy engine failure → Strategy generation blocked",
            "Behavior logging → Core product functionality unavailable",
        ),
        critical_path=CRITICAL_PATH,
        service_health=(
            ServiceHealthStatus(service="storage", layer=Layer.BACKEND, status=ServiceStatus.HEALTHY,
                                details="User data accessible", critical_path=True, latency=0.4),
            ServiceHealthStatus(service="api-gateway", layer=Layer.MIDDLEWARE, status=ServiceStatus.DOWN,
                                details="API gateway unreachable", critical_path=True,
                                error_rate=100.0, error="connection refused"),
        ),
        module_analysis=(
            ModuleRCAResult(module="strategy-engine", layer=Layer.BACKEND, status=ModuleStatus.FAILED,
                            priority=Priority.CRITICAL, estimated_downtime="15-30 minutes",
                            rollback_required=True, root_cause="Strategy generation service failure",
                            symptoms=("Backend: Strategy service internal error",),
                            fixes=("Check strategy service logs and restart if needed",),
                            faulted_layers=(Layer.BACKEND,), tags=("data-store",)),
        ),
        immediate_actions=("CRITICAL: Fix strategy-engine - Strategy generation service failure",),
        recovery_plan=RecoveryPlan(
            immediate=(RecoveryAction("Fix strategy-engine: Check logs", "15-30 minutes", "Ops/SRE"),),
            short_term=(
                RecoveryAction("Stabilize billing: Verify payment form", "30-60 minutes", "Engineering"),
                RecoveryAction("Stabilize reporting: Monitor and optimize", "30-60 minutes", "Engineering"),
            ),
        ),
        rollback_recommendation=True,
    )
    fields.update(overrides)
    return SystemRCAReport(**fields)


def test_document_envelope():
    doc = to_document(_report(), exported_by="ops-dashboard")
    assert doc["report_type"] == "system_rca"
    assert doc["schema_version"] == 1
    assert doc["exported_by"] == "ops-dashboard"
    assert "exported_at" in doc
    assert doc["report"]["overall_status"] == "critical_failure"


def test_round_trip_preserves_every_field():
    report = _report()
    assert from_document(to_document(report)) == report


def test_json_round_trip_preserves_plan_order():
    restored = loads(dumps(_report()))
    assert [a.action for a in restored.recovery_plan.short_term] == [
        "Stabilize billing: Verify payment form",
        "Stabilize reporting: Monitor and optimize",
    ]
    assert restored.module_analysis[0].faulted_layers == (Layer.BACKEND,)
    assert restored.module_analysis[0].tags == ("data-store",)


def test_wrong_report_type_rejected():
    doc = to_document(_report())
    doc["report_type"] = "incident"
    with pytest.raises(ExportFormatError):
        from_document(doc)


def test_malformed_body_rejected():
    doc = to_document(_report())
    del doc["report"]["overall_status"]
    with pytest.raises(ExportFormatError):
        from_document(doc)


def test_archive_save_list_get(tmp_path):
    archive = ReportArchive(tmp_path)
    now = datetime.now(timezone.utc)
    older = _report(timestamp=now - timedelta(minutes=5))
    newer = _report(timestamp=now, overall_status=OverallStatus.OPERATIONAL)

    path = archive.save(older)
    archive.save(newer)

    assert path.name.startswith(f"rca_{older.report_id}_")
    listed = archive.list_documents()
    assert [d["report"]["report_id"] for d in listed] == [newer.report_id, older.report_id]
    assert from_document(archive.get_document(older.report_id)) == older
    assert archive.get_document("missing") is None


def test_archive_skips_unreadable_files(tmp_path):
    archive = ReportArchive(tmp_path)
    archive.save(_report())
    (tmp_path / "rca_broken_20990101T000000000000Z.json").write_text("{not json")
    assert len(archive.list_documents()) == 1
