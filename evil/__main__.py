"""
# __main__.py is a part of the EVIL package.
# Copyright (C) 2025 EVIL authors (see AUTHORS for details).
# EVIL is licensed under the GNU GPL v3 or later, see LICENSE for details.
# Please respect the MCnet Guidelines, see GUIDELINES for details.
"""
"""
Cluster the events of one or more event files.

Usage:
    evil events.lhe.gz                          # cluster with the settings from config.py
    evil -a kt -R 0.6 --min-pt 20 events.hepmc  # override the jet definition
    evil -o jets.jsonl events.lhe               # write the jets of all events
    evil -v debug events.lhe                    # more output
"""
import argparse
import logging
import sys
from typing import List, Optional, Sequence

from tqdm import tqdm

import config
from evil.clustering.jets import ClusterSettings
from evil.events.files import jets_result, load_events, write_jets_jsonl
from evil.helpers import VERBOSITY_LEVELS, setup_logging, verbosity_to_level

logger = logging.getLogger("evil")

# Configure tqdm to prevent multiple line printing
TQDM_CONFIG = {
    'file': sys.stderr,
    'ncols': 80,
    'leave': True,
    'dynamic_ncols': False
}


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="evil",
        description="Visualise collider events: load event files and cluster them into jets",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-v", "--verbosity",
        default=getattr(config, "verbosity", "info"),
        choices=list(VERBOSITY_LEVELS),
        help="Verbosity level (default: %(default)s)",
    )
    parser.add_argument("-a", "--algorithm", default=None, help="Jet algorithm: anti-kt, kt or Cambridge/Aachen")
    parser.add_argument("-R", "--radius", type=float, default=None, help="Jet radius")
    parser.add_argument("--min-pt", type=float, default=None, help="Minimum jet transverse momentum")
    parser.add_argument(
        "--parton-definition",
        default=None,
        choices=["partons", "partons_and_hadrons"],
        help="Particles used as clustering input",
    )
    parser.add_argument(
        "--no-clustering",
        dest="clustering_enabled",
        action="store_const",
        const=False,
        default=None,
        help="Only load the events, do not cluster",
    )
    parser.add_argument("-o", "--output", default=None, help="Write the jets of all events to this JSONL file")
    parser.add_argument("files", nargs="+", help="Event files to import")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging(level=verbosity_to_level(args.verbosity))

    try:
        settings = ClusterSettings.from_config(
            config,
            clustering_enabled=args.clustering_enabled,
            algorithm=args.algorithm,
            radius=args.radius,
            min_pt=args.min_pt,
            parton_definition=args.parton_definition,
        )
    except ValueError as e:
        logger.error(f"Invalid clustering settings: {e}")
        return 2

    try:
        events = load_events(args.files)
    except (OSError, ValueError, ImportError) as e:
        logger.error(str(e))
        return 1

    if not settings.clustering_enabled:
        logger.info("Jet clustering disabled")
        return 0

    jet_def = settings.jet_def
    logger.info(f"Clustering with {jet_def.algorithm}, R = {jet_def.radius}, pT > {jet_def.min_pt}")
    results = []
    for idx, event in enumerate(tqdm(events, desc="Clustering events", unit="evt", **TQDM_CONFIG)):
        result = jets_result(settings.cluster(event), jet_def, event_index=idx)
        logger.debug(f"Event {idx}: {len(event)} outgoing particles, {result['data']['n_jets']} jets")
        results.append(result)

    n_jets = sum(r["data"]["n_jets"] for r in results)
    logger.info(f"Found {n_jets} jets in {len(results)} events")

    if args.output:
        with open(args.output, "w", encoding="utf-8") as outfile:
            write_jets_jsonl(results, outfile)
        logger.info(f"Wrote jets to {args.output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
