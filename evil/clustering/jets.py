"""
# jets.py is a part of the EVIL package.
# Copyright (C) 2025 EVIL authors (see AUTHORS for details).
# EVIL is licensed under the GNU GPL v3 or later, see LICENSE for details.
# Please respect the MCnet Guidelines, see GUIDELINES for details.
"""
"""
Jet definitions and the interface between events and the clustering engine.
"""
import logging
import math
from typing import Any, Iterable, List, Optional, Sequence

import attr

from evil.clustering import engine
from evil.clustering.distance import JetAlgorithm
from evil.clustering.pseudojet import PseudoJet
from evil.physics.particles import Particle, PartonDefinition, clusterable

logger = logging.getLogger(__name__)


def _finite_non_negative(instance: Any, attribute: "attr.Attribute[float]", value: float) -> None:
    if not math.isfinite(value) or value < 0:
        raise ValueError(f"{attribute.name} must be finite and non-negative, got {value}")


@attr.frozen
class JetDefinition:
    """Clustering configuration.

    Attributes:
        algorithm: Jet algorithm. Strings such as "anti-kt", "kt" or "ca" are accepted.
        radius: Jet radius R. R = 0 is allowed and disables all merging.
        min_pt: Minimum jet transverse momentum, applied after clustering.
    """

    algorithm: JetAlgorithm = attr.field(default=JetAlgorithm.ANTI_KT, converter=JetAlgorithm.from_name)
    radius: float = attr.field(default=0.4, converter=float, validator=_finite_non_negative)
    min_pt: float = attr.field(default=0.0, converter=float, validator=_finite_non_negative)

    def cluster_event(self, event: Any, parton_definition: PartonDefinition = PartonDefinition.PARTONS) -> List[PseudoJet]:
        return cluster_event(event, self, parton_definition=parton_definition)

    def cluster_partons(self, partons: Iterable[PseudoJet]) -> List[PseudoJet]:
        return cluster_pseudojets(partons, self)


def clustering_input(
    particles: Sequence[Particle],
    parton_definition: PartonDefinition = PartonDefinition.PARTONS,
) -> List[PseudoJet]:
    """Select the clusterable particles and convert them to pseudojets.

    The pseudojets remember the index of their particle in `particles`.
    Particles with non-finite momentum components are skipped, as are
    particles whose rapidity or azimuth is undefined (spacelike or null momenta).
    """
    selected = clusterable(parton_definition)
    pseudojets = []
    for i, p in enumerate(particles):
        if not selected(p.id):
            continue
        if not p.is_finite:
            logger.warning(f"Skipping particle {i} (id {p.id}) with non-finite momentum {p.momentum}")
            continue
        if not (math.isfinite(p.y) and math.isfinite(p.phi)):
            logger.warning(f"Skipping particle {i} (id {p.id}) with degenerate momentum {p.momentum}")
            continue
        pseudojets.append(PseudoJet(momentum=p.momentum, constituents=(i,)))
    return pseudojets


def cluster_pseudojets(pseudojets: Iterable[PseudoJet], jet_def: JetDefinition) -> List[PseudoJet]:
    return engine.cluster(pseudojets, jet_def.algorithm, jet_def.radius, min_pt=jet_def.min_pt)


def cluster_event(
    event: Any,
    jet_def: JetDefinition,
    parton_definition: PartonDefinition = PartonDefinition.PARTONS,
) -> List[PseudoJet]:
    """Cluster the outgoing partons of an event into jets.

    Args:
        event: Event, or any sequence of particles.
        jet_def: Jet definition.
        parton_definition: Which particles are clustered. Default: quarks and gluons only.
    Returns:
        Jets with pt > jet_def.min_pt, in no particular order.
    """
    particles = getattr(event, "outgoing", event)
    return cluster_pseudojets(clustering_input(particles, parton_definition), jet_def)


@attr.define
class ClusterSettings:
    """Application level clustering settings.

    Attributes:
        clustering_enabled: If False, no jets are formed at all.
        jet_def: Jet definition.
        parton_definition: Which particles are clustered.
    """

    clustering_enabled: bool = attr.field(default=True, converter=bool)
    jet_def: JetDefinition = attr.field(factory=JetDefinition)
    parton_definition: PartonDefinition = attr.field(
        default=PartonDefinition.PARTONS, converter=PartonDefinition.from_name
    )

    @classmethod
    def from_config(cls, config_module: Optional[Any] = None, **overrides: Any) -> "ClusterSettings":
        """Build settings from the `config` module, with optional overrides.

        Overrides with value None are ignored, so that unset command line options fall back to the config.
        """
        if config_module is None:
            import config as config_module
        values = {
            "clustering_enabled": getattr(config_module, "clustering_enabled", True),
            "algorithm": getattr(config_module, "jet_algorithm", JetAlgorithm.ANTI_KT),
            "radius": getattr(config_module, "jet_radius", 0.4),
            "min_pt": getattr(config_module, "jet_min_pt", 0.0),
            "parton_definition": getattr(config_module, "parton_definition", PartonDefinition.PARTONS),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        unknown = set(values) - {"clustering_enabled", "algorithm", "radius", "min_pt", "parton_definition"}
        if unknown:
            raise ValueError(f"Unknown clustering settings: {sorted(unknown)}")
        return cls(
            clustering_enabled=values["clustering_enabled"],
            jet_def=JetDefinition(
                algorithm=values["algorithm"],
                radius=values["radius"],
                min_pt=values["min_pt"],
            ),
            parton_definition=values["parton_definition"],
        )

    def cluster(self, event: Any) -> List[PseudoJet]:
        if not self.clustering_enabled:
            return []
        return cluster_event(event, self.jet_def, parton_definition=self.parton_definition)
