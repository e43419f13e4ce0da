"""Functional module probes.

Each probe walks the module's presentation surface, its API routes and any
locally cached state, recording every symptom it finds rather than stopping
at the first one.
"""

import json

from .. import fixes
from ..schemas import Layer, ModuleStatus, Priority
from ..snapshot import (
    BEHAVIOR_LOGS_KEY,
    BILLING_SURFACE,
    CURRENT_USER_KEY,
    DASHBOARD_SURFACE,
    LIBRARY_SURFACE,
    SESSION_TOKEN_KEY,
    SETUP_PROGRESS_KEY,
    SETUP_SURFACE,
    SIGN_IN_SURFACE,
    STRATEGY_SURFACE,
    SUBSCRIPTION_KEY,
)
from .base import (
    TAG_DATA_STORE,
    TAG_MISSING_ROUTE,
    TAG_UNREACHABLE,
    ModuleFindings,
    ModuleProbe,
    ProbeContext,
)


def _by_status(status: ModuleStatus, failed: str, degraded: str, ok: str) -> str:
    if status == ModuleStatus.FAILED:
        return failed
    if status == ModuleStatus.DEGRADED:
        return degraded
    return ok


class IdentityProbe(ModuleProbe):
    """Identity & session management."""

    module = "identity"
    layer = Layer.FRONTEND
    restart_fix = fixes.RESTART_AUTH_SERVICE
    signin_path = "/api/auth/signin"

    async def inspect(self, ctx: ProbeContext, findings: ModuleFindings) -> None:
        surface = ctx.snapshot.surface(SIGN_IN_SURFACE)
        if not surface.has("sign-up-form"):
            findings.record(Layer.FRONTEND, "Sign-up UI components not rendering",
                            fixes.FORCE_REMOUNT, ModuleStatus.FAILED, tag="not-rendering")
        if not surface.has("password-input"):
            findings.record(Layer.FRONTEND, "Password input fields missing",
                            fixes.CHECK_FORM_COMPONENTS, ModuleStatus.DEGRADED)
        if not surface.has("oauth-providers"):
            # Cosmetic: noted, but does not change status
            findings.record(Layer.FRONTEND, "OAuth provider buttons not visible", fixes.VERIFY_OAUTH)

        await self.check_api(
            ctx, findings, "POST", self.signin_path,
            not_found=("Auth endpoints returning 404", fixes.VERIFY_API_ROUTING),
            unreachable=("Auth service unreachable", fixes.RESTART_AUTH_SERVICE),
            json={"probe": True},
        )

        has_token = ctx.snapshot.stored(SESSION_TOKEN_KEY) is not None
        has_user = ctx.snapshot.stored(CURRENT_USER_KEY) is not None
        if has_token and not has_user:
            findings.record(Layer.BACKEND, "Token exists but user session corrupted",
                            fixes.CLEAR_CORRUPTED_SESSION, ModuleStatus.DEGRADED)

    def root_cause(self, findings: ModuleFindings) -> str:
        if findings.status == ModuleStatus.OPERATIONAL:
            return "Authentication module operational"
        if findings.tags & {TAG_UNREACHABLE, TAG_MISSING_ROUTE}:
            return "API service connectivity failure"
        if "not-rendering" in findings.tags:
            return "Frontend component mounting failure"
        return "Authentication state corruption"

    def priority(self, status: ModuleStatus) -> Priority:
        return Priority.CRITICAL if status == ModuleStatus.FAILED else Priority.HIGH

    def estimated_downtime(self, status: ModuleStatus) -> str:
        return "5-15 minutes" if status == ModuleStatus.FAILED else "2-5 minutes"

    def rollback_required(self, findings: ModuleFindings) -> bool:
        return findings.status == ModuleStatus.FAILED and TAG_UNREACHABLE in findings.tags


class GuidedSetupProbe(ModuleProbe):
    """Guided multi-step setup."""

    module = "guided-setup"
    layer = Layer.FRONTEND
    restart_fix = fixes.RESTART_SETUP_SERVICE
    progress_path = "/api/user/onboarding"

    async def inspect(self, ctx: ProbeContext, findings: ModuleFindings) -> None:
        raw = ctx.snapshot.stored(SETUP_PROGRESS_KEY)
        if raw is not None:
            try:
                progress = json.loads(raw)
            except ValueError:
                findings.record(Layer.FRONTEND, "Guided setup data parsing failed",
                                fixes.CLEAR_SETUP_DATA, ModuleStatus.DEGRADED)
            else:
                if (
                    not isinstance(progress, dict)
                    or progress.get("data") is None
                    or progress.get("step") is None
                ):
                    findings.record(Layer.FRONTEND, "Guided setup state corrupted",
                                    fixes.RESET_SETUP_STATE, ModuleStatus.DEGRADED)

        await self.check_api(
            ctx, findings, "PUT", self.progress_path,
            not_found=("Guided setup API endpoint not found", fixes.VERIFY_SETUP_ROUTING),
            unreachable=("Guided setup API unreachable", fixes.RESTART_SETUP_SERVICE),
            json={"probe": True},
        )

        if not ctx.snapshot.surface(SETUP_SURFACE).has("form-validation"):
            findings.record(Layer.FRONTEND, "Form validation not implemented",
                            fixes.ADD_FORM_VALIDATION, ModuleStatus.DEGRADED)

    def root_cause(self, findings: ModuleFindings) -> str:
        return _by_status(
            findings.status,
            "Guided setup API service failure",
            "Guided setup state management issues",
            "Guided setup module operational",
        )

    def priority(self, status: ModuleStatus) -> Priority:
        return Priority.CRITICAL if status == ModuleStatus.FAILED else Priority.MEDIUM

    def estimated_downtime(self, status: ModuleStatus) -> str:
        return "3-10 minutes"


class BillingProbe(ModuleProbe):
    """Subscription & billing."""

    module = "billing"
    layer = Layer.MIDDLEWARE
    restart_fix = fixes.RESTART_PAYMENT_SERVICE
    webhook_path = "/api/payments/webhook"

    async def inspect(self, ctx: ProbeContext, findings: ModuleFindings) -> None:
        surface = ctx.snapshot.surface(BILLING_SURFACE)
        if not surface.has("payment-form"):
            findings.record(Layer.FRONTEND, "Payment UI not loaded",
                            fixes.VERIFY_PAYMENT_FORM, ModuleStatus.DEGRADED)

        has_subscription = (
            ctx.snapshot.stored(SUBSCRIPTION_KEY) is not None
            or surface.has("subscription-summary")
        )
        if not has_subscription:
            findings.record(Layer.BACKEND, "Subscription data not available",
                            fixes.INIT_SUBSCRIPTION, ModuleStatus.DEGRADED)

        await self.check_api(
            ctx, findings, "POST", self.webhook_path,
            not_found=("Payment webhook endpoint missing", fixes.CONFIGURE_PAYMENT_WEBHOOK),
            unreachable=("Payment service unreachable", fixes.RESTART_PAYMENT_SERVICE),
            json={"probe": True},
        )

    def root_cause(self, findings: ModuleFindings) -> str:
        return _by_status(
            findings.status,
            "Payment processing service failure",
            "Subscription state management issues",
            "Billing module operational",
        )

    def priority(self, status: ModuleStatus) -> Priority:
        return Priority.HIGH if status == ModuleStatus.FAILED else Priority.MEDIUM

    def estimated_downtime(self, status: ModuleStatus) -> str:
        return "10-20 minutes"

    def rollback_required(self, findings: ModuleFindings) -> bool:
        return findings.status == ModuleStatus.FAILED


class StrategyEngineProbe(ModuleProbe):
    """Recommendation / strategy generation."""

    module = "strategy-engine"
    layer = Layer.BACKEND
    restart_fix = fixes.RESTART_STRATEGY_SERVICE
    strategy_path = "/api/ai/child-strategy"

    async def inspect(self, ctx: ProbeContext, findings: ModuleFindings) -> None:
        surface = ctx.snapshot.surface(STRATEGY_SURFACE)
        if not surface.has("strategy-view"):
            findings.record(Layer.FRONTEND, "Strategy UI not rendering",
                            fixes.VERIFY_BEHAVIOR_COMPONENTS, ModuleStatus.DEGRADED)

        result = await self.check_api(
            ctx, findings, "POST", self.strategy_path,
            not_found=("Strategy endpoints not found", fixes.VERIFY_STRATEGY_ROUTING),
            unreachable=("Strategy service completely unreachable", fixes.RESTART_STRATEGY_SERVICE),
            json={"behaviorDescription": "probe", "context": "probe", "severity": "low"},
        )
        if result.server_error:
            findings.record(Layer.BACKEND, "Strategy service internal error",
                            fixes.CHECK_STRATEGY_LOGS, ModuleStatus.FAILED)

        has_logs = (
            ctx.snapshot.stored(BEHAVIOR_LOGS_KEY) is not None
            or surface.has("behavior-log")
        )
        if not has_logs:
            findings.record(Layer.BACKEND, "Behavior log store empty",
                            fixes.INIT_BEHAVIOR_LOGS, ModuleStatus.DEGRADED, tag=TAG_DATA_STORE)

    def root_cause(self, findings: ModuleFindings) -> str:
        return _by_status(
            findings.status,
            "Strategy generation service failure",
            "Strategy data pipeline issues",
            "Strategy engine operational",
        )

    def priority(self, status: ModuleStatus) -> Priority:
        return Priority.CRITICAL

    def estimated_downtime(self, status: ModuleStatus) -> str:
        return "15-30 minutes"

    def rollback_required(self, findings: ModuleFindings) -> bool:
        return findings.status == ModuleStatus.FAILED


class ContentLibraryProbe(ModuleProbe):
    """Content library. Presentation-only checks; it has no API route of its own."""

    module = "content-library"
    layer = Layer.FRONTEND
    restart_fix = fixes.VERIFY_LIBRARY_LOADING

    async def inspect(self, ctx: ProbeContext, findings: ModuleFindings) -> None:
        surface = ctx.snapshot.surface(LIBRARY_SURFACE)
        if not surface.has("resource-list"):
            findings.record(Layer.FRONTEND, "Content library not loading",
                            fixes.VERIFY_LIBRARY_LOADING, ModuleStatus.DEGRADED)
        if not surface.has("content-filter"):
            findings.record(Layer.FRONTEND, "Content filtering not functional",
                            fixes.RESTORE_FILTERING, ModuleStatus.DEGRADED)
        if not surface.has("resource-download"):
            findings.record(Layer.FRONTEND, "Resource download functionality missing",
                            fixes.RESTORE_DOWNLOADS, ModuleStatus.DEGRADED)

    def root_cause(self, findings: ModuleFindings) -> str:
        return _by_status(
            findings.status,
            "Content library failure",
            "Content library feature degradation",
            "Content library operational",
        )

    def priority(self, status: ModuleStatus) -> Priority:
        return Priority.MEDIUM

    def estimated_downtime(self, status: ModuleStatus) -> str:
        return "5-10 minutes"


class ReportingProbe(ModuleProbe):
    """Reporting & analytics."""

    module = "reporting"
    layer = Layer.BACKEND
    restart_fix = fixes.RESTART_ANALYTICS_SERVICE
    reports_path = "/api/analytics/reports"

    async def inspect(self, ctx: ProbeContext, findings: ModuleFindings) -> None:
        surface = ctx.snapshot.surface(DASHBOARD_SURFACE)
        if not surface.has("dashboard-data"):
            findings.record(Layer.FRONTEND, "Dashboard data not loading",
                            fixes.VERIFY_ANALYTICS_PIPELINE, ModuleStatus.DEGRADED)

        await self.check_api(
            ctx, findings, "GET", self.reports_path,
            not_found=("Analytics API endpoints missing", fixes.DEPLOY_ANALYTICS_ENDPOINTS),
            unreachable=("Analytics service unreachable", fixes.RESTART_ANALYTICS_SERVICE),
        )

        if not surface.has("charts"):
            findings.record(Layer.FRONTEND, "Data visualization components missing",
                            fixes.RESTORE_CHARTS, ModuleStatus.DEGRADED)

    def root_cause(self, findings: ModuleFindings) -> str:
        return _by_status(
            findings.status,
            "Analytics service infrastructure failure",
            "Dashboard data pipeline issues",
            "Reporting module operational",
        )

    def priority(self, status: ModuleStatus) -> Priority:
        return Priority.MEDIUM

    def estimated_downtime(self, status: ModuleStatus) -> str:
        return "10-20 minutes"

    def rollback_required(self, findings: ModuleFindings) -> bool:
        return findings.status == ModuleStatus.FAILED


def default_module_probes(timeout: float = 5.0) -> list[ModuleProbe]:
    """The fixed set of functional modules, in report order."""
    return [
        IdentityProbe(timeout, name="Identity"),
        GuidedSetupProbe(timeout, name="GuidedSetup"),
        BillingProbe(timeout, name="Billing"),
        StrategyEngineProbe(timeout, name="StrategyEngine"),
        ContentLibraryProbe(timeout, name="ContentLibrary"),
        ReportingProbe(timeout, name="Reporting"),
    ]
