"""
# config.py is a part of the EVIL package.
# Copyright (C) 2025 EVIL authors (see AUTHORS for details).
# EVIL is licensed under the GNU GPL v3 or later, see LICENSE for details.
# Please respect the MCnet Guidelines, see GUIDELINES for details.
"""
# Form jets from the outgoing partons of each event.
clustering_enabled = True

# Jet algorithm: "anti-kt", "kt" or "Cambridge/Aachen".
jet_algorithm = "anti-kt"

# Jet radius R. R = 0 disables merging.
jet_radius = 0.4

# Minimum jet transverse momentum [GeV], applied after clustering.
jet_min_pt = 0.0

# Clustering input: "partons" (quarks and gluons) or "partons_and_hadrons".
parton_definition = "partons"

# Log verbosity: "off", "error", "warn", "info", "debug" or "trace".
verbosity = "info"
