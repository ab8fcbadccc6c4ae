#!/usr/bin/env python3
"""
# test_files.py is a part of the EVIL package.
# Copyright (C) 2025 EVIL authors (see AUTHORS for details).
# EVIL is licensed under the GNU GPL v3 or later, see LICENSE for details.
# Please respect the MCnet Guidelines, see GUIDELINES for details.
"""
"""
Event Files Test Suite

Tests cover:
- Format detection for LHEF, HepMC and evtjsonl files (plain and gzipped)
- Reading LHEF files via pylhe and HepMC files via pyhepmc
- evtjsonl round trip and random access by event index
- Zero-padded event arrays and jet arrays
- Jet records ordered by decreasing pT
"""

# Standard library imports
import gzip
import io
import json
import shutil
import sys
import tempfile
from pathlib import Path

# Third-party imports
import numpy as np

# Path setup
SCRIPT_PATH = Path(__file__).resolve()
EVENTS_DIR = SCRIPT_PATH.parent                               # .../evil/evil/events
REPO_ROOT = EVENTS_DIR.parent.parent                          # .../evil

# Add repository root to path for local imports
sys.path.insert(0, str(REPO_ROOT))

from evil.clustering.jets import JetDefinition
from evil.clustering.pseudojet import PseudoJet
from evil.events.event import Event
from evil.events.files import (
    JET_COLUMNS,
    EventFormat,
    detect_format,
    event_from_array,
    jets_result,
    jets_to_array,
    load_events,
    read_event_jsonl,
    read_events,
    read_events_jsonl,
    write_events_jsonl,
)

# Minimal valid LHE file with both intermediate and final particles
LHE_CONTENT = """<LesHouchesEvents version="1.0">
<header>
</header>
<init>
2212 2212 6.500000e+03 6.500000e+03 0 0 247000 247000 -4 1
1.000000e+00 0.000000e+00 1.000000e+00 1
</init>
<event>
4 1 1.000000e+00 1.000000e+02 7.546772e-03 1.180000e-01
21 -1 0 0 501 502 0.000000e+00 0.000000e+00 1.000000e+02 1.000000e+02 0.000000e+00 0.0000e+00 1.0000e+00
21 -1 0 0 502 501 0.000000e+00 0.000000e+00 -1.000000e+02 1.000000e+02 0.000000e+00 0.0000e+00 -1.0000e+00
21 1 1 2 501 503 5.000000e+01 0.000000e+00 0.000000e+00 5.000000e+01 0.000000e+00 0.0000e+00 1.0000e+00
21 1 1 2 503 502 -5.000000e+01 0.000000e+00 0.000000e+00 5.000000e+01 0.000000e+00 0.0000e+00 -1.0000e+00
</event>
<event>
4 1 1.000000e+00 1.000000e+02 7.546772e-03 1.180000e-01
21 -1 0 0 501 502 0.000000e+00 0.000000e+00 1.000000e+02 1.000000e+02 0.000000e+00 0.0000e+00 1.0000e+00
21 -1 0 0 502 501 0.000000e+00 0.000000e+00 -1.000000e+02 1.000000e+02 0.000000e+00 0.0000e+00 -1.0000e+00
11 1 1 2 0 0 5.000000e+01 0.000000e+00 0.000000e+00 5.000000e+01 0.000511e+00 0.0000e+00 1.0000e+00
-11 1 1 2 0 0 -5.000000e+01 0.000000e+00 0.000000e+00 5.000000e+01 0.000511e+00 0.0000e+00 -1.0000e+00
</event>
</LesHouchesEvents>
"""


def _make_dir():
    return Path(tempfile.mkdtemp(prefix="evil_test_files_"))


def _write_hepmc(path):
    """Write one e+ e- -> u ubar event with pyhepmc."""
    import pyhepmc

    event = pyhepmc.GenEvent()
    beam1 = pyhepmc.GenParticle(pyhepmc.FourVector(0.0, 0.0, 50.0, 50.0), 11, 4)
    beam2 = pyhepmc.GenParticle(pyhepmc.FourVector(0.0, 0.0, -50.0, 50.0), -11, 4)
    quark = pyhepmc.GenParticle(pyhepmc.FourVector(30.0, 40.0, 0.0, 50.0), 2, 1)
    antiquark = pyhepmc.GenParticle(pyhepmc.FourVector(-30.0, -40.0, 0.0, 50.0), -2, 1)
    vertex = pyhepmc.GenVertex()
    vertex.add_particle_in(beam1)
    vertex.add_particle_in(beam2)
    vertex.add_particle_out(quark)
    vertex.add_particle_out(antiquark)
    event.add_vertex(vertex)
    with pyhepmc.open(str(path), "w") as f:
        f.write(event)


# ============================================================================
# Test Functions
# ============================================================================

def test_detect_format():
    """Test format detection from the first characters of a file."""
    print(">> Testing format detection...\n")

    test_dir = _make_dir()
    try:
        lhe = test_dir / "events.lhe"
        lhe.write_text(LHE_CONTENT)
        assert detect_format(lhe) is EventFormat.LHEF
        print("[✓] Test 1 passed: LHEF detected")

        xml = test_dir / "events_xml.lhe"
        xml.write_text('<?xml version="1.0"?>\n' + LHE_CONTENT)
        assert detect_format(xml) is EventFormat.LHEF
        print("[✓] Test 2 passed: LHEF with XML declaration detected")

        gz = test_dir / "events.lhe.gz"
        with gzip.open(gz, "wt") as f:
            f.write(LHE_CONTENT)
        assert detect_format(gz) is EventFormat.LHEF
        print("[✓] Test 3 passed: Gzipped LHEF detected")

        hepmc = test_dir / "events.hepmc"
        hepmc.write_text("HepMC::Version 3.02.06\nHepMC::Asciiv3-START_EVENT_LISTING\n")
        assert detect_format(hepmc) is EventFormat.HEPMC
        print("[✓] Test 4 passed: HepMC detected")

        jsonl = test_dir / "events.jsonl"
        jsonl.write_text('{"schema": "evtjsonl-1.0"}\n')
        assert detect_format(jsonl) is EventFormat.JSONL
        print("[✓] Test 5 passed: evtjsonl detected")

        for name, content in (("garbage.txt", b"hello world\n"), ("empty.txt", b""), ("binary.npy", b"\x93NUMPY\x01\x00")):
            path = test_dir / name
            path.write_bytes(content)
            try:
                detect_format(path)
            except ValueError as e:
                assert "Unknown file format" in str(e)
            else:
                raise AssertionError(f"Expected ValueError for {name}")
        print("[✓] Test 6 passed: Unknown formats rejected")
    finally:
        shutil.rmtree(test_dir, ignore_errors=True)

    print("\nAll format detection tests passed! [✓]\n")


def test_read_lhe():
    """Test that only outgoing particles of LHEF events are kept."""
    print(">> Testing LHEF reading...\n")

    test_dir = _make_dir()
    try:
        lhe = test_dir / "events.lhe"
        lhe.write_text(LHE_CONTENT)
        events = list(read_events(lhe))
        assert len(events) == 2
        assert [p.id for p in events[0]] == [21, 21]
        assert [p.id for p in events[1]] == [11, -11]
        assert events[0][0].momentum == (50.0, 50.0, 0.0, 0.0)
        assert events[0][1].phi == np.pi
        print("[✓] Test 1 passed: Incoming partons dropped, momenta in (E, px, py, pz) order")

        events = load_events([lhe, lhe])
        assert len(events) == 4
        print("[✓] Test 2 passed: Events of several files concatenated")
    finally:
        shutil.rmtree(test_dir, ignore_errors=True)

    print("\nAll LHEF tests passed! [✓]\n")


def test_read_hepmc():
    """Test reading HepMC files written by pyhepmc."""
    print(">> Testing HepMC reading...\n")

    test_dir = _make_dir()
    try:
        path = test_dir / "events.hepmc"
        _write_hepmc(path)
        assert detect_format(path) is EventFormat.HEPMC
        events = list(read_events(path))
        assert len(events) == 1
        assert [p.id for p in events[0]] == [2, -2]
        assert events[0][0].momentum == (50.0, 30.0, 40.0, 0.0)
        print("[✓] Test 1 passed: Outgoing quarks read, beams dropped")
    finally:
        shutil.rmtree(test_dir, ignore_errors=True)

    print("\nAll HepMC tests passed! [✓]\n")


def test_jsonl_round_trip():
    """Test writing and reading evtjsonl files."""
    print(">> Testing evtjsonl round trip...\n")

    events = [
        Event.from_particles([(21, (50.0, 30.0, 40.0, 0.0)), (1, (20.0, 0.0, 12.0, 16.0))]),
        Event(),
        Event.from_particles([(-5, (10.0, 6.0, 8.0, 0.0))]),
    ]
    buf = io.StringIO()
    assert write_events_jsonl(events, buf) == 3

    lines = buf.getvalue().splitlines()
    first = json.loads(lines[0])
    assert first["schema"] == "evtjsonl-1.0" and first["event_id"] == 0
    assert first["data"]["n_particles"] == 2
    assert set(first["data"]["particles"][0]) == {"i", "id", "px", "py", "pz", "E", "y", "phi", "pt"}
    print("[✓] Test 1 passed: Schema, event ids and particle records")

    test_dir = _make_dir()
    try:
        path = test_dir / "events.jsonl"
        path.write_text(buf.getvalue())
        assert list(read_events_jsonl(path)) == events
        print("[✓] Test 2 passed: Events read back unchanged")

        assert read_event_jsonl(path, 2) == events[2]
        for index in (3, -1):
            try:
                read_event_jsonl(path, index)
            except IndexError:
                continue
            raise AssertionError(f"Expected IndexError for index {index}")
        print("[✓] Test 3 passed: Random access by index, out of range rejected")
    finally:
        shutil.rmtree(test_dir, ignore_errors=True)

    records = [
        {"i": 1, "id": 21, "status": 1, "px": 1.0, "py": 0.0, "pz": 0.0, "E": 1.0},
        {"i": 0, "id": 2, "status": -1, "px": 0.0, "py": 0.0, "pz": 1.0, "E": 1.0},
        {"i": 2, "id": 1, "px": 0.0, "py": 2.0, "pz": 0.0, "E": 2.0},
    ]
    assert [p.id for p in Event.from_records(records)] == [21, 1]
    print("[✓] Test 4 passed: Records sorted by index, non-outgoing records dropped")

    print("\nAll evtjsonl tests passed! [✓]\n")


def test_padded_arrays():
    """Test events from padded arrays and jets to padded arrays."""
    print(">> Testing padded arrays...\n")

    rows = np.array([
        [30.0, 40.0, 0.0, 50.0, 21.0],
        [0.0, 0.0, 10.0, 10.0, -3.0],
        [0.0, 0.0, 0.0, 0.0, 0.0],  # padding
    ])
    event = event_from_array(rows)
    assert len(event) == 2
    assert event[0].id == 21 and event[0].momentum == (50.0, 30.0, 40.0, 0.0)
    assert event[1].id == -3
    print("[✓] Test 1 passed: Pad rows skipped, columns reordered to (E, px, py, pz)")

    jets_per_event = [
        [{c: float(k + 1) for c in JET_COLUMNS} for k in range(2)],
        [],
        [{c: 7.0 for c in JET_COLUMNS}],
    ]
    arr = jets_to_array(jets_per_event)
    assert arr.shape == (3, 2, len(JET_COLUMNS))
    assert np.all(arr[0, 1] == 2.0) and np.all(arr[1] == 0.0) and np.all(arr[2, 1] == 0.0)
    print("[✓] Test 2 passed: Jets zero-padded to the largest multiplicity")

    assert jets_to_array([]).shape == (0, 0, len(JET_COLUMNS))
    print("[✓] Test 3 passed: No events give an empty array")

    print("\nAll padded array tests passed! [✓]\n")


def test_jets_result():
    """Test the jet records of one event."""
    print(">> Testing jet records...\n")

    soft = PseudoJet((10.0, 6.0, 8.0, 0.0), constituents=(2,))
    hard = PseudoJet((50.0, 30.0, 40.0, 0.0), constituents=(0, 1))
    result = jets_result([soft, hard], JetDefinition("kt", 0.6, 5.0), event_index=4)

    assert result["algorithm"] == "kt" and result["R"] == 0.6 and result["ptmin"] == 5.0
    assert result["event_index"] == 4
    assert result["data"]["n_jets"] == 2
    jets = result["data"]["jets"]
    assert [j["index"] for j in jets] == [0, 1]
    assert jets[0]["pT"] == 50.0 and jets[1]["pT"] == 10.0
    assert jets[0]["constituents"] == [0, 1] and jets[0]["n_const"] == 2
    assert abs(jets[0]["m"]) < 1e-9
    print("[✓] Test 1 passed: Jets ordered by decreasing pT with constituents")

    json.dumps(result)
    print("[✓] Test 2 passed: Result is JSON serialisable")

    print("\nAll jet record tests passed! [✓]\n")


def main():
    """Run all tests."""
    try:
        test_detect_format()
        test_read_lhe()
        test_read_hepmc()
        test_jsonl_round_trip()
        test_padded_arrays()
        test_jets_result()

        print()
        print("=" * 70)
        print("Test suite completed successfully! [✓]")
        print("=" * 70)

    except AssertionError as e:
        print("\n" + "=" * 70)
        print("Test suite completed with failures! [✗]")
        print("=" * 70)
        print(f"Assertion error: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
