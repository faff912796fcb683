"""Shared test doubles for cpuview."""

from __future__ import annotations

import pytest

from cpuview.metrics import MetricsUnavailable


class FakeMetricsSource:
    """In-memory MetricsSource that records how it was sampled."""

    def __init__(
        self,
        name: str = "Intel Core i7-9700K",
        mhz: float = 3600.0,
        core_ids: list[str] | None = None,
        usage: list[float] | None = None,
        fail_topology: bool = False,
        fail_sampling: bool = False,
    ) -> None:
        self.name = name
        self.mhz = mhz
        self.core_ids = ["0", "1"] if core_ids is None else core_ids
        self.usage = [10.5, 20.3] if usage is None else usage
        self.fail_topology = fail_topology
        self.fail_sampling = fail_sampling
        self.samples: list[tuple[float, bool]] = []

    def describe_topology(self) -> tuple[str, float, list[str]]:
        if self.fail_topology:
            raise MetricsUnavailable("failed to fetch CPU info: boom")
        return self.name, self.mhz, list(self.core_ids)

    def sample_utilization(
        self, interval: float, per_cpu: bool = True
    ) -> list[float]:
        self.samples.append((interval, per_cpu))
        if self.fail_sampling:
            raise MetricsUnavailable("error fetching CPU percentages: boom")
        return list(self.usage)


@pytest.fixture
def fake_source() -> FakeMetricsSource:
    return FakeMetricsSource()
