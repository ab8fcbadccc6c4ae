"""
# particles.py is a part of the EVIL package.
# Copyright (C) 2025 EVIL authors (see AUTHORS for details).
# EVIL is licensed under the GNU GPL v3 or later, see LICENSE for details.
# Please respect the MCnet Guidelines, see GUIDELINES for details.
"""
"""
Final-state particles and their classification by PDG ID.
"""
import enum
import functools
import math
from typing import Callable, Sequence

import attr
import particle as pdg
from particle.pdgid import is_hadron as _pdgid_is_hadron

from evil.physics import kinematics

GLUON = 21


class SpinType(enum.Enum):
    BOSON = "boson"
    FERMION = "fermion"
    UNKNOWN = "unknown"


class PartonDefinition(enum.Enum):
    """Which particles count as clusterable partons."""
    PARTONS = "partons"
    PARTONS_AND_HADRONS = "partons_and_hadrons"

    @classmethod
    def from_name(cls, value) -> "PartonDefinition":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ValueError(
                f"Unknown parton definition '{value}'. Use one of {[d.value for d in cls]}"
            ) from None


def is_parton(pid: int) -> bool:
    """Quarks d, u, s, c, b (and their antiquarks) or the gluon."""
    return pid == GLUON or 1 <= abs(pid) <= 5


@functools.lru_cache()
def is_hadron(pid: int) -> bool:
    """Whether the PDG ID denotes a hadron. Cached, since events repeat the same IDs."""
    return bool(_pdgid_is_hadron(pid))


def is_parton_or_hadron(pid: int) -> bool:
    return is_parton(pid) or is_hadron(pid)


def clusterable(definition: PartonDefinition = PartonDefinition.PARTONS) -> Callable[[int], bool]:
    """Return the PDG ID predicate selecting the clustering input."""
    definition = PartonDefinition.from_name(definition)
    if definition is PartonDefinition.PARTONS_AND_HADRONS:
        return is_parton_or_hadron
    return is_parton


def spin_type(pid: int) -> SpinType:
    apid = abs(pid)
    if 1 <= apid <= 16:
        return SpinType.FERMION
    if 21 <= apid <= 25:
        return SpinType.BOSON
    return SpinType.UNKNOWN


@functools.lru_cache()
def particle_name(pid: int) -> str:
    """Display name of a particle, "N/A" if the PDG ID is unknown."""
    try:
        return pdg.Particle.from_pdgid(pid).name
    except (pdg.ParticleNotFound, pdg.InvalidParticle):
        return "N/A"


def _as_momentum(p: Sequence[float]):
    if len(p) != 4:
        raise ValueError(f"Expected four-momentum (E, px, py, pz), got {p!r}")
    return tuple(float(x) for x in p)


@attr.frozen
class Particle:
    """An outgoing particle of an event.

    Attributes:
        id: PDG particle ID.
        momentum: Four-momentum (E, px, py, pz).
        y: Rapidity.
        phi: Azimuthal angle in (-pi, pi].
        pt: Transverse momentum.
    """

    id: int = attr.field(converter=int)
    momentum: kinematics.FourMomentum = attr.field(converter=_as_momentum)
    y: float = attr.field(init=False)
    phi: float = attr.field(init=False)
    pt: float = attr.field(init=False)

    def __attrs_post_init__(self) -> None:
        object.__setattr__(self, "y", float(kinematics.rapidity(self.momentum)))
        object.__setattr__(self, "phi", float(kinematics.azimuthal_angle(self.momentum)))
        object.__setattr__(self, "pt", float(kinematics.pt(self.momentum)))

    @property
    def name(self) -> str:
        return particle_name(self.id)

    @property
    def spin_type(self) -> SpinType:
        return spin_type(self.id)

    @property
    def is_antiparticle(self) -> bool:
        return self.id < 0

    @property
    def is_parton(self) -> bool:
        return is_parton(self.id)

    @property
    def is_finite(self) -> bool:
        return all(math.isfinite(x) for x in self.momentum)
