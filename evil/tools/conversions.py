"""
# conversions.py is a part of the EVIL package.
# Copyright (C) 2025 EVIL authors (see AUTHORS for details).
# EVIL is licensed under the GNU GPL v3 or later, see LICENSE for details.
# Please respect the MCnet Guidelines, see GUIDELINES for details.
"""
import json
import os
import sys
from typing import Optional

import numpy as np
from orchestral.tools.base.tool import BaseTool
from orchestral.tools.base.field_utils import RuntimeField, StateField
from tqdm import tqdm

from evil.events.files import JET_COLUMNS, detect_format, jets_to_array, read_events, write_events_jsonl

# Configure tqdm to prevent multiple line printing
TQDM_CONFIG = {
    'file': sys.stderr,
    'ncols': 80,
    'leave': True,
    'dynamic_ncols': False
}

# ====================================================================== #
# ===================== Event file \to JSONL tool ====================== #
# ====================================================================== #

class EventFileToJSONLTool(BaseTool):
    """
    Convert an event file (LHEF or HepMC, optionally gzipped) into the
    JSONL (evtjsonl-1.0) schema.

    Parsing is delegated to pylhe and pyhepmc. Only outgoing (status 1)
    particles are kept, each with its rapidity, azimuthal angle and pT.

    Input (runtime):
      - event_path: path to the event file, must live under base_directory
      - jsonl_path: output path for events.jsonl (relative to base_directory)

    Output:
      JSON string:
      {
        "status": "ok",
        "format": "LHEF" | "HepMC" | "evtjsonl",
        "events_jsonl": "<relative path>",
        "n_events": <int>
      }
    """
    # --------------------------- Runtime fields --------------------------- #

    event_path: str = RuntimeField(description="Path to LHEF or HepMC event file (.gz ok)")
    jsonl_path: str = RuntimeField(description="Relative path to write events.jsonl")

    # ---------------------------------------------------------------------- #

    # ---------------------------- State fields ---------------------------- #

    base_directory: str = StateField(default=".", description="Base sandbox root")

    # ---------------------------------------------------------------------- #

    def _setup(self):
        """Set up the tool by resolving paths."""
        self.base_directory = os.path.abspath(self.base_directory)
        if not os.path.isdir(self.base_directory):
            raise ValueError(f"Base directory does not exist or is not a directory: {self.base_directory}")

    def _safe_path(self, rel_or_abs: str) -> Optional[str]:
        """Ensures that the path is within the allowed base directory."""
        if not rel_or_abs:
            return None
        full = os.path.abspath(os.path.join(self.base_directory, rel_or_abs))
        if full.startswith(self.base_directory + os.sep) or full == self.base_directory:
            return full
        return None

    def _run(self) -> str:
        """Run the tool."""
        try:
            self._setup()
        except Exception as e:
            return self.format_error(error="Path Error", reason=str(e))

        src = self._safe_path(self.event_path)
        dst = self._safe_path(self.jsonl_path)

        if src is None:
            return self.format_error(
                error="Access Denied",
                reason="event_path is outside allowed base_directory",
                context=self.event_path,
                suggestion="Copy the event file under base_directory or adjust base_directory"
            )
        if dst is None:
            return self.format_error(
                error="Access Denied",
                reason="jsonl_path escapes base_directory",
                context=self.jsonl_path,
                suggestion="Use a relative output path inside base_directory"
            )
        if not os.path.exists(src):
            return self.format_error(
                error="File Not Found",
                reason="Event file not found",
                context=self.event_path
            )

        try:
            fmt = detect_format(src)
        except ValueError as e:
            return self.format_error(
                error="Unknown Format",
                reason=str(e),
                suggestion="Provide a Les Houches Event File or a HepMC file"
            )

        try:
            os.makedirs(os.path.dirname(dst), exist_ok=True)
            with open(dst, "w", encoding="utf-8") as outfp:
                events = tqdm(read_events(src), desc="Converting events to JSONL", unit="evt", **TQDM_CONFIG)
                n_written = write_events_jsonl(events, outfp)
        except ImportError as e:
            return self.format_error(
                error="Dependency Missing",
                reason=str(e),
                suggestion="pip install pylhe pyhepmc"
            )
        except Exception as e:
            return self.format_error(
                error="Read Error",
                reason=f"Failed to convert {fmt.value} file: {e}",
                context=f"path={src}",
                suggestion="Check file integrity"
            )

        result = {
            "status": "ok",
            "format": fmt.value,
            "events_jsonl": os.path.relpath(dst, self.base_directory),
            "n_events": int(n_written),
        }
        return json.dumps(result, separators=(",", ":"), ensure_ascii=False)

# ====================================================================== #
# ====================== Jets JSONL to Numpy tool ===================== #
# ====================================================================== #

class JetsJSONLToNumpyTool(BaseTool):
    """
    Convert a JSONL jets dataset into a zero-padded NumPy array.

    This tool handles the jets schema produced by ClusterJetsTool.
    Each event becomes an array of shape (N_jets, 7) with columns
    [px, py, pz, E, pT, y, phi]; shorter events are zero-padded.
    """
    # --------------------------- Runtime fields --------------------------- #
    jets_jsonl_path: str = RuntimeField(description="Relative path to jets.jsonl file")
    output_path: str = RuntimeField(description="Relative path to save .npy file (e.g. 'data/run/jets.npy')")
    # ---------------------------------------------------------------------- #

    # ---------------------------- State fields ---------------------------- #
    base_directory: str = StateField(default=".", description="Base directory for safe paths")
    # ---------------------------------------------------------------------- #

    def _setup(self):
        """Setup base directory and validate it exists."""
        self.base_directory = os.path.abspath(self.base_directory)
        if not os.path.exists(self.base_directory):
            raise ValueError(f"Base directory does not exist: {self.base_directory}")

    def _safe_path(self, rel: str) -> Optional[str]:
        """Ensures that the path is within the allowed base directory."""
        if not rel:
            return None
        full = os.path.abspath(os.path.join(self.base_directory, rel))
        if full.startswith(self.base_directory + os.sep) or full == self.base_directory:
            return full
        return None

    def _run(self) -> str:
        """Run the conversion from jets JSONL to NumPy array."""
        try:
            self._setup()
        except Exception as e:
            return self.format_error(error="Path Error", reason=str(e))

        src = self._safe_path(self.jets_jsonl_path)
        dst = self._safe_path(self.output_path)

        if not src or not dst:
            return self.format_error(
                error="Access Denied",
                reason="jets_jsonl_path or output_path escapes base_directory",
                suggestion="Use relative paths inside base_directory"
            )
        if not os.path.exists(src):
            return self.format_error(
                error="File Not Found",
                reason="Jets JSONL file not found",
                context=f"path={self.jets_jsonl_path}",
                suggestion="Run ClusterJetsTool with cluster_all=True first"
            )

        try:
            with open(src, "r", encoding="utf-8") as f:
                jets_per_event = [json.loads(line)["data"]["jets"] for line in f if line.strip()]
        except (json.JSONDecodeError, KeyError) as e:
            return self.format_error(
                error="Read Error",
                reason=str(e),
                context=f"path={src}",
                suggestion="Ensure the file follows the jets schema written by ClusterJetsTool"
            )

        try:
            final_array = jets_to_array(jets_per_event)
            # np.save() adds the .npy extension itself
            save_path = dst[:-4] if dst.endswith('.npy') else dst
            os.makedirs(os.path.dirname(dst), exist_ok=True)
            np.save(save_path, final_array)
        except Exception as e:
            return self.format_error(
                error="Processing Error",
                reason=str(e),
                suggestion="Ensure every jet carries the fields " + ", ".join(JET_COLUMNS)
            )

        result = {
            "status": "ok",
            "input_events": len(jets_per_event),
            "max_jets": int(final_array.shape[1]) if final_array.ndim == 3 else 0,
            "columns": list(JET_COLUMNS),
            "output_shape": list(final_array.shape),
            "saved_path": os.path.relpath(save_path + ".npy", self.base_directory),
        }
        return json.dumps(result, separators=(",", ":"), ensure_ascii=False)
