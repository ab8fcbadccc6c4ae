"""
# engine.py is a part of the EVIL package.
# Copyright (C) 2025 EVIL authors (see AUTHORS for details).
# EVIL is licensed under the GNU GPL v3 or later, see LICENSE for details.
# Please respect the MCnet Guidelines, see GUIDELINES for details.
"""
"""
Generalised sequential recombination.

Starting from the input pseudojets, repeatedly find the smallest of all pair
distances d_ij and all beam distances d_iB:

1. if it is a pair distance, replace i and j by their four-momentum sum;
2. otherwise move i to the list of final jets.

until no pseudojets remain. The minimum pT cut is applied to the final jets
only after clustering has finished.

The working set is an arena of stable slots. Each merge frees two slots and
fills a new one, so 2n - 1 slots are enough for n inputs. Pair distances are
cached in a (2n - 1) x (2n - 1) matrix, and only the row and column of a newly
inserted pseudojet are evaluated. The result is identical to recomputing all
distances on every iteration.
"""
import logging
from typing import Iterable, List, Optional

import numpy as np

from evil.clustering.distance import DistanceMeasure, JetAlgorithm, distance_measure
from evil.clustering.pseudojet import PseudoJet
from evil.physics import kinematics

logger = logging.getLogger(__name__)


def _nan_to_inf(d: np.ndarray) -> np.ndarray:
    # NaN never compares as a minimum and would stall the loop.
    return np.where(np.isnan(d), np.inf, d)


class _WorkingSet:
    """Pseudojets still taking part in the clustering."""

    def __init__(self, pseudojets: List[PseudoJet], measure: DistanceMeasure):
        capacity = max(2 * len(pseudojets) - 1, 0)
        self.measure = measure
        self.jets: List[Optional[PseudoJet]] = [None] * capacity
        self.live = np.zeros(capacity, dtype=bool)
        self.n_live = 0
        self.size = 0
        self.y = np.zeros(capacity)
        self.phi = np.zeros(capacity)
        self.pt2 = np.zeros(capacity)
        self.beam = np.full(capacity, np.inf)
        self.pair = np.full((capacity, capacity), np.inf)
        for jet in pseudojets:
            self.insert(jet)

    def insert(self, jet: PseudoJet) -> int:
        k = self.size
        self.size += 1
        self.jets[k] = jet
        self.y[k] = jet.rapidity
        self.phi[k] = jet.azimuthal_angle
        self.pt2[k] = jet.pt2

        others = np.flatnonzero(self.live[:k])
        if others.size:
            dr2 = kinematics.delta_r2(self.y[k], self.phi[k], self.y[others], self.phi[others])
            d = _nan_to_inf(self.measure.pair_distance(self.pt2[k], self.pt2[others], dr2))
            self.pair[k, others] = d
            self.pair[others, k] = d
        self.beam[k] = _nan_to_inf(self.measure.beam_distance(self.pt2[k]))

        self.live[k] = True
        self.n_live += 1
        return k

    def remove(self, k: int) -> PseudoJet:
        jet = self.jets[k]
        self.jets[k] = None
        self.live[k] = False
        self.n_live -= 1
        self.pair[k, :] = np.inf
        self.pair[:, k] = np.inf
        self.beam[k] = np.inf
        return jet

    def closest_to_beam(self):
        live = np.flatnonzero(self.live)
        i = int(live[np.argmin(self.beam[live])])
        return i, self.beam[i]

    def closest_pair(self):
        n = self.size
        flat = int(np.argmin(self.pair[:n, :n]))
        i, j = divmod(flat, n)
        return i, j, self.pair[i, j]


def recombine(pseudojets: Iterable[PseudoJet], measure: DistanceMeasure) -> List[PseudoJet]:
    """Run the sequential recombination without any pT cut.

    Args:
        pseudojets: Input pseudojets.
        measure: Distance measure, see `distance_measure`.
    Returns:
        All final jets, in the order in which they were finalised.
    """
    working = _WorkingSet(list(pseudojets), measure)
    jets: List[PseudoJet] = []
    while working.n_live:
        i_beam, d_beam = working.closest_to_beam()
        i, j, d_pair = working.closest_pair()
        # Exact ties go to the beam.
        if d_pair < d_beam:
            merged = working.remove(i) + working.remove(j)
            working.insert(merged)
        else:
            jets.append(working.remove(i_beam))
    return jets


def apply_min_pt(jets: Iterable[PseudoJet], min_pt: float) -> List[PseudoJet]:
    """Keep jets with pt > min_pt. Compared via pt^2 to avoid the square root."""
    min_pt2 = min_pt * min_pt
    return [jet for jet in jets if jet.pt2 > min_pt2]


def cluster(
    pseudojets: Iterable[PseudoJet],
    algorithm: JetAlgorithm,
    radius: float,
    min_pt: float = 0.0,
) -> List[PseudoJet]:
    """Cluster pseudojets into jets.

    Args:
        pseudojets: Input pseudojets.
        algorithm: Jet algorithm.
        radius: Jet radius R.
        min_pt: Minimum jet pt, applied after clustering. Default: 0.
    Returns:
        Jets passing the pt cut. The order is not meaningful.
    """
    pseudojets = list(pseudojets)
    measure = distance_measure(algorithm, radius)
    jets = recombine(pseudojets, measure)
    selected = apply_min_pt(jets, min_pt)
    logger.debug(
        f"Clustered {len(pseudojets)} pseudojets into {len(jets)} jets with {measure.algorithm}, R={radius}."
        f" {len(selected)} jets pass pt > {min_pt}"
    )
    return selected
