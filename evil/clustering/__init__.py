"""
# __init__.py is a part of the EVIL package.
# Copyright (C) 2025 EVIL authors (see AUTHORS for details).
# EVIL is licensed under the GNU GPL v3 or later, see LICENSE for details.
# Please respect the MCnet Guidelines, see GUIDELINES for details.
"""
"""Sequential recombination jet clustering (anti-kt, kt, Cambridge/Aachen)."""
from .distance import DistanceMeasure, JetAlgorithm, distance_measure
from .engine import apply_min_pt, cluster, recombine
from .jets import ClusterSettings, JetDefinition, cluster_event, cluster_pseudojets, clustering_input
from .pseudojet import PseudoJet
