"""
# files.py is a part of the EVIL package.
# Copyright (C) 2025 EVIL authors (see AUTHORS for details).
# EVIL is licensed under the GNU GPL v3 or later, see LICENSE for details.
# Please respect the MCnet Guidelines, see GUIDELINES for details.
"""
"""
Reading and writing events and jets.

Parsing of the event formats themselves is left to pylhe (LHEF) and pyhepmc
(HepMC); this module only detects the format and adapts the records.

evtjsonl-1.0 schema, one event per line:
  {
    "schema": "evtjsonl-1.0",
    "event_id": <int>,
    "data": {
      "n_particles": <int>,
      "particles": [{"i", "id", "px", "py", "pz", "E", "y", "phi", "pt"}, ...]
    }
  }

Jets schema, one event per line:
  {
    "event_index": <int>,
    "algorithm": <str>, "R": <float>, "ptmin": <float>,
    "data": {"n_jets": <int>, "jets": [{"px", "py", "pz", "E", "m", "pT", "y", "phi", "n_const", "constituents"}, ...]}
  }
"""
import enum
import gzip
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, IO, Iterable, Iterator, List, Optional, Sequence, Union

import numpy as np

from evil.clustering.jets import JetDefinition
from evil.clustering.pseudojet import PseudoJet
from evil.events.event import Event
from evil.physics.particles import Particle

logger = logging.getLogger(__name__)

SCHEMA_VERSION = "evtjsonl-1.0"

PathLike = Union[str, os.PathLike]

_GZIP_MAGIC = b"\x1f\x8b"

# Columns of padded arrays
EVENT_COLUMNS = ("px", "py", "pz", "E", "pid")
JET_COLUMNS = ("px", "py", "pz", "E", "pT", "y", "phi")


class EventFormat(enum.Enum):
    LHEF = "LHEF"
    HEPMC = "HepMC"
    JSONL = "evtjsonl"


def _require_pylhe() -> Any:
    """Ensure pylhe is available, or raise ImportError."""
    try:
        import pylhe
        return pylhe
    except Exception as e:
        raise ImportError("pylhe is not available, install to read LHEF files (e.g. `pip install pylhe`).") from e


def _require_pyhepmc() -> Any:
    """Ensure pyhepmc is available, or raise ImportError."""
    try:
        import pyhepmc
        return pyhepmc
    except Exception as e:
        raise ImportError("pyhepmc is not available, install to read HepMC files (e.g. `pip install pyhepmc`).") from e


def _open_text(path: PathLike) -> IO[str]:
    """Open a text file, transparently decompressing gzip."""
    with open(path, "rb") as f:
        magic = f.read(2)
    if magic == _GZIP_MAGIC:
        return gzip.open(path, "rt", encoding="utf-8")
    return open(path, "r", encoding="utf-8")


def detect_format(path: PathLike) -> EventFormat:
    """Determine the event file format from the first characters of the file.

    Raises:
        ValueError: If the format is not recognised.
    """
    with open(path, "rb") as f:
        raw = f.read(256)
    if raw.startswith(_GZIP_MAGIC):
        with gzip.open(path, "rb") as f:
            raw = f.read(256)
    head = raw.decode("utf-8", errors="replace").lstrip()
    if head.startswith("<LesHouchesEvents") or (head.startswith("<?xml") and "<LesHouchesEvents" in head):
        return EventFormat.LHEF
    if head.startswith("HepMC"):
        return EventFormat.HEPMC
    if head.startswith("{"):
        return EventFormat.JSONL
    raise ValueError(f"Failed to import {path}: Unknown file format")


def read_events(path: PathLike) -> Iterator[Event]:
    """Iterate over the events in a LHEF, HepMC or evtjsonl file."""
    fmt = detect_format(path)
    logger.debug(f"Trying to import {path} as {fmt.value} file")
    if fmt is EventFormat.LHEF:
        pylhe = _require_pylhe()
        for lhe_event in pylhe.LHEFile.fromfile(str(path)).events:
            yield Event.from_lhe(lhe_event)
    elif fmt is EventFormat.HEPMC:
        pyhepmc = _require_pyhepmc()
        with pyhepmc.open(str(path)) as f:
            for gen_event in f:
                yield Event.from_hepmc(gen_event)
    else:
        yield from read_events_jsonl(path)


def read_events_jsonl(path: PathLike) -> Iterator[Event]:
    with _open_text(path) as f:
        for line in f:
            if not line.strip():
                continue
            ev = json.loads(line)
            yield Event.from_records(ev["data"]["particles"])


def read_event_jsonl(path: PathLike, index: int) -> Event:
    """Read the event at `index` from an evtjsonl file."""
    if index < 0:
        raise IndexError(f"event_index {index} must be non-negative")
    for i, event in enumerate(read_events_jsonl(path)):
        if i == index:
            return event
    raise IndexError(f"event_index {index} out of range for {path}")


def write_events_jsonl(events: Iterable[Event], outfile: IO[str]) -> int:
    """Write events in the evtjsonl-1.0 schema. Returns the number of events written."""
    n_written = 0
    for event_id, event in enumerate(events):
        row = {
            "schema": SCHEMA_VERSION,
            "event_id": event_id,
            "finals_only": True,
            "data": event.to_records(),
        }
        outfile.write(json.dumps(row, separators=(",", ":"), ensure_ascii=False) + "\n")
        n_written += 1
    return n_written


def event_from_array(rows: np.ndarray) -> Event:
    """Build an event from one zero-padded [px, py, pz, E, pid] array."""
    particles = []
    for px, py, pz, e, pid in np.asarray(rows, dtype=np.float64).tolist():
        # Skip pad row.
        if px == 0 and py == 0 and pz == 0 and e == 0 and pid == 0:
            continue
        particles.append(Particle(int(pid), (e, px, py, pz)))
    return Event(particles)


def jet_to_record(jet: PseudoJet, index: Optional[int] = None) -> Dict[str, Any]:
    record = {
        "px": jet.px,
        "py": jet.py,
        "pz": jet.pz,
        "E": jet.e,
        "m": jet.m,
        "pT": jet.pt,
        "y": jet.rapidity,
        "phi": jet.azimuthal_angle,
        "n_const": len(jet.constituents),
        "constituents": list(jet.constituents),
    }
    if index is not None:
        record = {"index": index, **record}
    return record


def jets_result(jets: Sequence[PseudoJet], jet_def: JetDefinition, event_index: Optional[int] = None) -> Dict[str, Any]:
    """Jets of one event in the jets schema. Jets are ordered by decreasing pT."""
    ordered = sorted(jets, key=lambda j: j.pt2, reverse=True)
    result: Dict[str, Any] = {
        "algorithm": str(jet_def.algorithm),
        "R": jet_def.radius,
        "ptmin": jet_def.min_pt,
        "data": {
            "n_jets": len(ordered),
            "jets": [jet_to_record(jet, index=i) for i, jet in enumerate(ordered)],
        },
    }
    if event_index is not None:
        result["event_index"] = event_index
    return result


def write_jets_jsonl(results: Iterable[Dict[str, Any]], outfile: IO[str]) -> int:
    n_written = 0
    for result in results:
        outfile.write(json.dumps(result, separators=(",", ":"), ensure_ascii=False) + "\n")
        n_written += 1
    return n_written


def jets_to_array(jets_per_event: Sequence[Sequence[Dict[str, Any]]]) -> np.ndarray:
    """Zero-padded array of shape (N_events, N_jets_max, 7) with columns JET_COLUMNS."""
    max_len = max((len(jets) for jets in jets_per_event), default=0)
    out = np.zeros((len(jets_per_event), max_len, len(JET_COLUMNS)))
    for i, jets in enumerate(jets_per_event):
        for j, jet in enumerate(jets):
            out[i, j] = [jet[c] for c in JET_COLUMNS]
    return out


def load_events(paths: Iterable[PathLike]) -> List[Event]:
    """Read all events from a list of files."""
    events: List[Event] = []
    for path in paths:
        logger.info(f"Loading events from {path}")
        events.extend(read_events(Path(path)))
    logger.info(f"Loaded {len(events)} events")
    return events
