"""
# event.py is a part of the EVIL package.
# Copyright (C) 2025 EVIL authors (see AUTHORS for details).
# EVIL is licensed under the GNU GPL v3 or later, see LICENSE for details.
# Please respect the MCnet Guidelines, see GUIDELINES for details.
"""
from typing import Any, Dict, Iterable, Iterator, Mapping, Sequence, Tuple

import attr

from evil.physics.particles import Particle

# Status code of outgoing particles in LHEF and HepMC records.
OUTGOING = 1


@attr.frozen
class Event:
    """Outgoing particles of one event, in generator order."""

    outgoing: Tuple[Particle, ...] = attr.field(factory=tuple, converter=tuple)

    def __len__(self) -> int:
        return len(self.outgoing)

    def __iter__(self) -> Iterator[Particle]:
        return iter(self.outgoing)

    def __getitem__(self, i: int) -> Particle:
        return self.outgoing[i]

    @classmethod
    def from_particles(cls, particles: Iterable[Tuple[int, Sequence[float]]]) -> "Event":
        """Build an event from (PDG ID, (E, px, py, pz)) pairs."""
        return cls(Particle(pid, p) for pid, p in particles)

    @classmethod
    def from_records(cls, records: Iterable[Mapping[str, Any]]) -> "Event":
        """Build an event from evtjsonl particle records.

        Records carrying a status other than 1 are dropped, records without a
        status are taken to be outgoing.
        """
        return cls(
            Particle(r["id"], (r["E"], r["px"], r["py"], r["pz"]))
            for r in sorted(records, key=lambda r: r.get("i", 0))
            if int(r.get("status", OUTGOING)) == OUTGOING
        )

    @classmethod
    def from_lhe(cls, lhe_event: Any) -> "Event":
        """Build an event from a `pylhe` event."""
        return cls(
            Particle(int(p.id), (p.e, p.px, p.py, p.pz))
            for p in lhe_event.particles
            if int(p.status) == OUTGOING
        )

    @classmethod
    def from_hepmc(cls, gen_event: Any) -> "Event":
        """Build an event from a `pyhepmc` GenEvent."""
        outgoing = []
        for p in gen_event.particles:
            if p.status != OUTGOING:
                continue
            m = p.momentum
            outgoing.append(Particle(p.pid, (m.e, m.px, m.py, m.pz)))
        return cls(outgoing)

    def to_records(self) -> Dict[str, Any]:
        """evtjsonl `data` block, with the cached kinematics of each particle."""
        particles = []
        for i, p in enumerate(self.outgoing):
            e, px, py, pz = p.momentum
            particles.append({
                "i": i,
                "id": p.id,
                "px": px,
                "py": py,
                "pz": pz,
                "E": e,
                "y": p.y,
                "phi": p.phi,
                "pt": p.pt,
            })
        return {"n_particles": len(particles), "particles": particles}
