"""
# __init__.py is a part of the EVIL package.
# Copyright (C) 2025 EVIL authors (see AUTHORS for details).
# EVIL is licensed under the GNU GPL v3 or later, see LICENSE for details.
# Please respect the MCnet Guidelines, see GUIDELINES for details.
"""
"""Four-momentum kinematics and particle classification."""
from . import kinematics
from .particles import (
    Particle,
    PartonDefinition,
    SpinType,
    clusterable,
    is_hadron,
    is_parton,
    particle_name,
    spin_type,
)
