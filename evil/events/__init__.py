"""
# __init__.py is a part of the EVIL package.
# Copyright (C) 2025 EVIL authors (see AUTHORS for details).
# EVIL is licensed under the GNU GPL v3 or later, see LICENSE for details.
# Please respect the MCnet Guidelines, see GUIDELINES for details.
"""
"""Events and event files."""
from .event import Event
from .files import (
    EventFormat,
    detect_format,
    load_events,
    read_events,
    read_events_jsonl,
    write_events_jsonl,
)
