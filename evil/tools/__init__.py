"""
# __init__.py is a part of the EVIL package.
# Copyright (C) 2025 EVIL authors (see AUTHORS for details).
# EVIL is licensed under the GNU GPL v3 or later, see LICENSE for details.
# Please respect the MCnet Guidelines, see GUIDELINES for details.
"""
"""Agent tools for event conversion and jet clustering."""
from .conversions import EventFileToJSONLTool, JetsJSONLToNumpyTool
from .jet_clustering import ClusterJetsTool

__all__ = [
    'EventFileToJSONLTool',
    'JetsJSONLToNumpyTool',
    'ClusterJetsTool',
]
