"""Probe implementations."""
from .base import (
    BaseProbe,
    ModuleFindings,
    ModuleProbe,
    ProbeContext,
    ProbeError,
    ServiceCheck,
    ServiceProbe,
)
from .modules import (
    BillingProbe,
    ContentLibraryProbe,
    GuidedSetupProbe,
    IdentityProbe,
    ReportingProbe,
    StrategyEngineProbe,
    default_module_probes,
)
from .services import (
    ApiGatewayProbe,
    AuthenticationProbe,
    PresentationProbe,
    StorageProbe,
    default_service_probes,
)

__all__ = [
    "BaseProbe",
    "ModuleFindings",
    "ModuleProbe",
    "ProbeContext",
    "ProbeError",
    "ServiceCheck",
    "ServiceProbe",
    "BillingProbe",
    "ContentLibraryProbe",
    "GuidedSetupProbe",
    "IdentityProbe",
    "ReportingProbe",
    "StrategyEngineProbe",
    "default_module_probes",
    "ApiGatewayProbe",
    "AuthenticationProbe",
    "PresentationProbe",
    "StorageProbe",
    "default_service_probes",
]
