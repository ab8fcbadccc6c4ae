"""
# __init__.py is a part of the EVIL package.
# Copyright (C) 2025 EVIL authors (see AUTHORS for details).
# EVIL is licensed under the GNU GPL v3 or later, see LICENSE for details.
# Please respect the MCnet Guidelines, see GUIDELINES for details.
"""
"""evil: event illustrator. Kinematics and jet clustering of collider events."""

# Re-export subpackages for convenient imports
from . import physics
from . import clustering
from . import events
# The agent tools need orchestral and are imported explicitly: `from evil import tools`

from .clustering import JetAlgorithm, JetDefinition, ClusterSettings, PseudoJet, cluster, cluster_event
from .events import Event
from .physics import Particle

__version__ = "0.1.0"
