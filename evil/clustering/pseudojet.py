"""
# pseudojet.py is a part of the EVIL package.
# Copyright (C) 2025 EVIL authors (see AUTHORS for details).
# EVIL is licensed under the GNU GPL v3 or later, see LICENSE for details.
# Please respect the MCnet Guidelines, see GUIDELINES for details.
"""
import math
from typing import Sequence, Tuple

import attr

from evil.physics import kinematics


def _as_momentum(p: Sequence[float]) -> kinematics.FourMomentum:
    if len(p) != 4:
        raise ValueError(f"Expected four-momentum (E, px, py, pz), got {p!r}")
    return tuple(float(x) for x in p)  # type: ignore


@attr.frozen
class PseudoJet:
    """Four-momentum with cached kinematics, used both while clustering and as an output jet.

    Attributes:
        momentum: Four-momentum (E, px, py, pz).
        constituents: Indices of the event particles which were combined into this object.
        rapidity: Cached rapidity.
        azimuthal_angle: Cached azimuthal angle in (-pi, pi].
        pt2: Cached transverse momentum squared.
    """

    momentum: kinematics.FourMomentum = attr.field(converter=_as_momentum)
    constituents: Tuple[int, ...] = attr.field(default=(), converter=tuple)
    rapidity: float = attr.field(init=False, eq=False)
    azimuthal_angle: float = attr.field(init=False, eq=False)
    pt2: float = attr.field(init=False, eq=False)

    def __attrs_post_init__(self) -> None:
        object.__setattr__(self, "rapidity", float(kinematics.rapidity(self.momentum)))
        object.__setattr__(self, "azimuthal_angle", float(kinematics.azimuthal_angle(self.momentum)))
        object.__setattr__(self, "pt2", float(kinematics.pt2(self.momentum)))

    @property
    def pt(self) -> float:
        return math.sqrt(self.pt2)

    @property
    def e(self) -> float:
        return self.momentum[kinematics.E]

    @property
    def px(self) -> float:
        return self.momentum[kinematics.PX]

    @property
    def py(self) -> float:
        return self.momentum[kinematics.PY]

    @property
    def pz(self) -> float:
        return self.momentum[kinematics.PZ]

    @property
    def m(self) -> float:
        return float(kinematics.invariant_mass(self.momentum))

    def __add__(self, other: "PseudoJet") -> "PseudoJet":
        if not isinstance(other, PseudoJet):
            return NotImplemented
        return PseudoJet(
            momentum=kinematics.add(self.momentum, other.momentum),
            constituents=self.constituents + other.constituents,
        )
