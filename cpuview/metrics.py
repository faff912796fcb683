"""Processor topology and utilisation retrieval.

The renderer only ever sees a :class:`Snapshot`. Snapshots are assembled by
:func:`build_snapshot` from any :class:`MetricsSource`; the real one reads
``/proc/cpuinfo`` for topology and asks psutil for per-CPU utilisation.
"""

from __future__ import annotations

import platform
from dataclasses import dataclass, field
from typing import Protocol

import psutil

CPUINFO_PATH = "/proc/cpuinfo"


class MetricsUnavailable(RuntimeError):
    """The operating system could not describe or sample the processor."""


# ── Data types ─────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Snapshot:
    """Topology and per-thread usage for one refresh tick."""

    name: str
    clock_mhz: float
    core_count: int
    threads_per_core: int
    usage: list[float] = field(default_factory=lambda: list[float]())

    @property
    def required_samples(self) -> int:
        """Usage entries the renderer will index into."""
        return self.core_count * self.threads_per_core


class MetricsSource(Protocol):
    def describe_topology(self) -> tuple[str, float, list[str]]:
        """Return (model name, clock MHz, core id of each logical unit)."""
        ...

    def sample_utilization(
        self, interval: float, per_cpu: bool = True
    ) -> list[float]:
        """Return one utilisation percentage per logical unit."""
        ...


# ── /proc/cpuinfo ──────────────────────────────────────────────────────────


def parse_cpuinfo(text: str) -> list[dict[str, str]]:
    """Split /proc/cpuinfo into one dict per ``processor`` stanza."""
    units: list[dict[str, str]] = []
    current: dict[str, str] = {}
    for line in text.splitlines():
        if not line.strip():
            if "processor" in current:
                units.append(current)
            current = {}
            continue
        key, sep, value = line.partition(":")
        if sep:
            current[key.strip()] = value.strip()
    if "processor" in current:
        units.append(current)
    return units


def _clock_from_psutil() -> float:
    try:
        freq = psutil.cpu_freq()
    except (AttributeError, NotImplementedError, OSError):
        return 0.0
    return float(freq.current) if freq is not None else 0.0


class PsutilMetricsSource:
    """Reads the local machine: /proc/cpuinfo where present, psutil otherwise."""

    def __init__(self, cpuinfo_path: str = CPUINFO_PATH) -> None:
        self._cpuinfo_path = cpuinfo_path

    def describe_topology(self) -> tuple[str, float, list[str]]:
        try:
            with open(self._cpuinfo_path, encoding="utf-8") as f:
                units = parse_cpuinfo(f.read())
        except OSError:
            return self._topology_from_psutil()

        if not units:
            raise MetricsUnavailable(
                f"failed to fetch CPU info: no processors in {self._cpuinfo_path}"
            )

        first = units[0]
        name = first.get("model name") or platform.processor() or "Unknown CPU"
        try:
            mhz = float(first["cpu MHz"])
        except (KeyError, ValueError):
            mhz = _clock_from_psutil()
        # A lone vCPU under KVM has no "core id"
        core_ids = [u.get("core id", u["processor"]) for u in units]
        return name, mhz, core_ids

    def _topology_from_psutil(self) -> tuple[str, float, list[str]]:
        logical = psutil.cpu_count(logical=True)
        physical = psutil.cpu_count(logical=False) or logical
        if not logical:
            raise MetricsUnavailable("failed to fetch CPU info: no logical CPUs")
        per_core = max(1, logical // physical)
        core_ids = [str(i // per_core) for i in range(logical)]
        name = platform.processor() or platform.machine() or "Unknown CPU"
        return name, _clock_from_psutil(), core_ids

    def sample_utilization(
        self, interval: float, per_cpu: bool = True
    ) -> list[float]:
        try:
            usage = psutil.cpu_percent(interval=interval, percpu=per_cpu)
        except (OSError, psutil.Error) as e:
            raise MetricsUnavailable(f"error fetching CPU percentages: {e}") from e
        if isinstance(usage, float):
            return [usage]
        return [float(u) for u in usage]


# ── Snapshot assembly ──────────────────────────────────────────────────────


def build_snapshot(source: MetricsSource, interval: float = 1.0) -> Snapshot:
    """Query *source* once and derive the core/thread layout.

    Physical cores are the distinct core ids. Threads per core is the unit
    count divided by the core count, truncated, so uneven topologies lose
    their remainder threads.

    Raises:
        MetricsUnavailable: If the topology is empty or the sampler returns
            fewer values than the layout needs.
    """
    name, mhz, core_ids = source.describe_topology()
    if not core_ids:
        raise MetricsUnavailable("failed to fetch CPU info: no logical CPUs")

    usage = source.sample_utilization(interval, per_cpu=True)

    core_count = len(set(core_ids))
    threads_per_core = len(core_ids) // core_count
    snapshot = Snapshot(
        name=name,
        clock_mhz=mhz,
        core_count=core_count,
        threads_per_core=threads_per_core,
        usage=list(usage),
    )
    if len(snapshot.usage) < snapshot.required_samples:
        raise MetricsUnavailable(
            f"got {len(snapshot.usage)} CPU percentages, "
            f"need {snapshot.required_samples}"
        )
    return snapshot
