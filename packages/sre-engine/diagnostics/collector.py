"""Collectors — run a fixed probe set concurrently and gather one record per target."""

import asyncio
import logging
from typing import Generic, TypeVar

from .probes.base import BaseProbe, ModuleProbe, ProbeContext, ServiceProbe
from .schemas import ModuleRCAResult, ServiceHealthStatus

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Collector(Generic[T]):
    """
    Runs every probe in its set with bounded parallelism.

    Completes only after each probe has returned or been forced to a failure
    record, and always yields exactly one record per probe, in definition
    order. Probes that escape their own boundary are converted here.
    """

    def __init__(self, probes: list[BaseProbe[T]], max_concurrency: int = 4):
        """
        Initialize collector.

        Args:
            probes: The fixed probe set; each target must be unique
            max_concurrency: Maximum probes running at the same time
        """
        if not probes:
            raise ValueError("At least one probe is required")
        targets = [p.target for p in probes]
        if len(set(targets)) != len(targets):
            raise ValueError(f"Duplicate probe targets: {targets}")
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")

        self.probes = probes
        self.max_concurrency = max_concurrency

    @property
    def targets(self) -> list[str]:
        return [p.target for p in self.probes]

    async def collect(self, ctx: ProbeContext) -> list[T]:
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def _bounded(probe: BaseProbe[T]) -> T:
            async with semaphore:
                return await probe.run(ctx)

        results = await asyncio.gather(
            *(_bounded(probe) for probe in self.probes),
            return_exceptions=True,
        )

        records: list[T] = []
        for probe, result in zip(self.probes, results):
            if isinstance(result, BaseException):
                logger.error("Probe %s escaped its boundary: %r", probe.name, result)
                records.append(probe.failure(str(result) or result.__class__.__name__))
            else:
                records.append(result)

        logger.debug("%s collected %d records", self.__class__.__name__, len(records))
        return records


class ServiceHealthCollector(Collector[ServiceHealthStatus]):
    """Runs the foundational-service probes."""

    def __init__(self, probes: list[ServiceProbe], max_concurrency: int = 4):
        super().__init__(probes, max_concurrency)


class ModuleDiagnosisCollector(Collector[ModuleRCAResult]):
    """Runs the functional-module probes."""

    def __init__(self, probes: list[ModuleProbe], max_concurrency: int = 4):
        super().__init__(probes, max_concurrency)
