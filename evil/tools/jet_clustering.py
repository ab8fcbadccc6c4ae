"""
# jet_clustering.py is a part of the EVIL package.
# Copyright (C) 2025 EVIL authors (see AUTHORS for details).
# EVIL is licensed under the GNU GPL v3 or later, see LICENSE for details.
# Please respect the MCnet Guidelines, see GUIDELINES for details.
"""
import json
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import numpy as np
from orchestral.tools.base.tool import BaseTool
from orchestral.tools.base.field_utils import RuntimeField, StateField
from tqdm import tqdm

from evil.clustering.jets import ClusterSettings, JetDefinition
from evil.events.event import Event
from evil.events.files import event_from_array, jets_result, read_event_jsonl, read_events_jsonl

# Configure tqdm to prevent multiple line printing
TQDM_CONFIG = {
    'file': sys.stderr,
    'ncols': 80,
    'leave': True,
    'dynamic_ncols': False
}

# ====================================================================== #
# ========================= Jet clustering tool ======================== #
# ====================================================================== #

class ClusterJetsTool(BaseTool):
    """
    Cluster the outgoing partons of events into jets with a sequential
    recombination algorithm (anti-kt, kt or Cambridge/Aachen).

    Input (choose ONE):
      - jsonl_path + event_index   (evtjsonl-1.0 schema)
      - npy_path  + event_index    (zero-padded array shape [N_ev, N_max, 5] with [px,py,pz,E,pid])
      Set cluster_all=True together with output_path to cluster every event.

    Params:
      - algorithm: 'anti-kt' | 'kt' | 'Cambridge/Aachen' (also 'antikt', 'ca')
      - R: radius parameter (e.g. 0.4), R = 0 disables merging
      - ptmin: minimum jet pT (GeV), applied after clustering
      - parton_definition: 'partons' (quarks and gluons) | 'partons_and_hadrons'
      - clustering_enabled: if False no jets are formed

    Output:
      JSON with jets [{index, px, py, pz, E, m, pT, y, phi, n_const, constituents:[indices]}],
      ordered by decreasing pT. Constituent indices refer to the outgoing particles of the event.
    """

    # Tool arguments
    jsonl_path: Optional[str] = RuntimeField(default=None, description="Path to events.jsonl")
    npy_path: Optional[str] = RuntimeField(default=None, description="Path to padded events .npy")
    output_path: Optional[str] = RuntimeField(default=None, description="Path to save output .jsonl (if cluster_all=True)")
    event_index: Optional[int] = RuntimeField(default=None, description="0-based event index to cluster (not needed if cluster_all=True)")
    cluster_all: bool = RuntimeField(default=False, description="Cluster all events in dataset")

    # Clustering arguments
    algorithm: str = RuntimeField(default="anti-kt", description="anti-kt | kt | Cambridge/Aachen")
    R: float = RuntimeField(default=0.4, description="Jet radius")
    ptmin: float = RuntimeField(default=0.0, description="Min jet pT [GeV]")
    parton_definition: str = RuntimeField(default="partons", description="partons | partons_and_hadrons")
    clustering_enabled: bool = RuntimeField(default=True, description="Form jets at all")

    # Sandbox root
    base_directory: str = StateField(default=".", description="Base directory for safe path resolution")

    def _setup(self):
        """Setup base directory and validate it exists."""
        self.base_directory = os.path.abspath(self.base_directory)
        if not os.path.isdir(self.base_directory):
            raise ValueError(f"Base directory does not exist or is not a directory: {self.base_directory}")

    def _safe_path(self, rel: Optional[str]) -> Optional[str]:
        """
        Resolve rel against base_directory.
        Return absolute path if and only if it is inside base_directory.
        Otherwise return None.
        """
        if not rel:
            return None
        # If user passed an absolute path, interpret it relative to base_directory anyway
        # so that "/tmp/x" cannot escape.
        rel_norm = rel.lstrip(os.sep)
        full = os.path.abspath(os.path.join(self.base_directory, rel_norm))
        if not full.startswith(self.base_directory + os.sep) and full != self.base_directory:
            return None
        return full

    def _settings(self) -> ClusterSettings:
        return ClusterSettings(
            clustering_enabled=self.clustering_enabled,
            jet_def=JetDefinition(algorithm=self.algorithm, radius=self.R, min_pt=self.ptmin),
            parton_definition=self.parton_definition,
        )

    def _cluster(self, event: Event, settings: ClusterSettings, idx: int) -> Dict[str, Any]:
        """Cluster a single event into the jets schema."""
        return jets_result(settings.cluster(event), settings.jet_def, event_index=idx)

    def _run(self) -> str:
        """Run jet clustering and return JSON summary."""
        try:
            self._setup()
        except Exception as e:
            return self.format_error(error="Path Error", reason=str(e))

        try:
            settings = self._settings()
        except ValueError as e:
            return self.format_error(
                error="Invalid Parameters",
                reason=str(e),
                suggestion="Use a known algorithm, R >= 0 and ptmin >= 0"
            )

        has_jsonl_arg = bool(self.jsonl_path)
        has_npy_arg = bool(self.npy_path)

        src_jsonl = self._safe_path(self.jsonl_path) if has_jsonl_arg else None
        src_npy = self._safe_path(self.npy_path) if has_npy_arg else None

        if has_jsonl_arg and src_jsonl is None:
            return self.format_error(error="Path Error", reason="jsonl_path is outside allowed base_directory")
        if has_npy_arg and src_npy is None:
            return self.format_error(error="Path Error", reason="npy_path is outside allowed base_directory")
        if not has_jsonl_arg and not has_npy_arg:
            return self.format_error(error="Invalid Parameters", reason="No input source provided")

        use_jsonl = has_jsonl_arg
        src = src_jsonl if use_jsonl else src_npy
        if not Path(src).exists():
            return self.format_error(error="File Not Found", reason=f"{src} not found")

        n_events = 0
        results = []  # Only used for single-event mode
        outpath = None

        try:
            if self.cluster_all:
                if not self.output_path:
                    return self.format_error(
                        error="Missing Parameter",
                        reason="output_path is required when cluster_all=True",
                        suggestion="Provide output_path to save clustered jets"
                    )

                outpath = self._safe_path(self.output_path)
                if outpath is None:
                    return self.format_error(
                        error="Path Error",
                        reason="output_path is outside allowed base_directory"
                    )
                os.makedirs(os.path.dirname(outpath), exist_ok=True)

                if use_jsonl:
                    events = read_events_jsonl(src)
                else:
                    events = (event_from_array(rows) for rows in np.load(src, allow_pickle=False))

                # Stream results directly to file
                with open(outpath, "w", encoding="utf-8") as outfile:
                    for idx, event in enumerate(tqdm(events, desc="Clustering events", unit="evt", **TQDM_CONFIG)):
                        result = self._cluster(event, settings, idx)
                        outfile.write(json.dumps(result, separators=(",", ":"), ensure_ascii=False) + "\n")
                        n_events += 1
            else:
                if self.event_index is None:
                    return self.format_error(
                        error="Missing Parameter",
                        reason="event_index is required when cluster_all=False",
                        suggestion="Provide event_index to cluster a single event or set cluster_all=True"
                    )
                idx = int(self.event_index)
                if use_jsonl:
                    event = read_event_jsonl(src, idx)
                else:
                    arr = np.load(src, allow_pickle=False)
                    if idx < 0 or idx >= arr.shape[0]:
                        raise IndexError(f"event_index {idx} out of range for {src}")
                    event = event_from_array(arr[idx])
                if not len(event):
                    return self.format_error(error="Empty Event", reason="No particles at event_index")
                results = [self._cluster(event, settings, idx)]
                n_events = 1
        except Exception as e:
            return self.format_error(error="Clustering Error", reason=str(e))

        if self.cluster_all:
            # Streaming mode - return summary only
            return json.dumps(
                {
                    "status": "ok",
                    "n_events": n_events,
                    "output_file": os.path.relpath(outpath, self.base_directory)
                },
                separators=(",", ":"),
                ensure_ascii=False
            )
        return json.dumps(
            {"status": "ok", "n_events": n_events, "results": results},
            separators=(",", ":"),
            ensure_ascii=False
        )
