"""
envprint — Probe Registry

The registry maps unique probe names to their callables.

Registration happens when the embedding application assembles its probe set.
The registry is then treated as immutable for the duration of a run; the
scheduler takes a snapshot of the registrations when the run starts.

Programming errors (empty names, duplicate names, non-callables) fail fast
here, at registration time, so that a run itself never has to raise.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping

import structlog

from envprint.systems.collection.types import Probe, ProbeRegistration

logger = structlog.get_logger()


def ensure_unique(registrations: Iterable[ProbeRegistration]) -> list[ProbeRegistration]:
    """
    Materialise registrations, raising ValueError if any name repeats.

    A repeated name would collapse two probes into one outcome slot and break
    the one-outcome-per-registration guarantee.
    """
    items = list(registrations)
    seen: set[str] = set()
    for registration in items:
        if registration.name in seen:
            raise ValueError(f"Probe {registration.name!r} registered more than once")
        seen.add(registration.name)
    return items


class ProbeRegistry:
    """
    Ordered, name-unique collection of probes.

    Built once, queried at run time.
    """

    def __init__(self, probes: Mapping[str, Probe] | None = None) -> None:
        self._probes: dict[str, Probe] = {}
        self._logger = logger.bind(system="collection.registry")
        for name, probe in (probes or {}).items():
            self.register(name, probe)

    def register(self, name: str, probe: Probe) -> None:
        """
        Register a probe under a unique name.

        Raises ValueError if the name is empty or already registered, or if
        the probe is not callable.
        """
        if not name:
            raise ValueError(f"Probe {probe!r} has no name")
        if not callable(probe):
            raise ValueError(f"Probe {name!r} is not callable: {probe!r}")
        if name in self._probes:
            raise ValueError(
                f"Probe {name!r} already registered. "
                f"existing: {self._probes[name]!r}, new: {probe!r}"
            )
        self._probes[name] = probe
        self._logger.debug("probe_registered", probe=name)

    def get(self, name: str) -> Probe | None:
        return self._probes.get(name)

    def registrations(self) -> list[ProbeRegistration]:
        """Snapshot of all registrations in registration order."""
        return [ProbeRegistration(name=name, probe=probe) for name, probe in self._probes.items()]

    def names(self) -> list[str]:
        return list(self._probes)

    def __len__(self) -> int:
        return len(self._probes)

    def __contains__(self, name: object) -> bool:
        return name in self._probes

    def __iter__(self) -> Iterator[ProbeRegistration]:
        return iter(self.registrations())

    def __repr__(self) -> str:
        return f"<ProbeRegistry probes={len(self._probes)}>"
