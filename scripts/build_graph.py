#!/usr/bin/env python3
"""
Build Atlas Graph Script

Builds one atlas graph snapshot (nodes, edges, matched maps, fit target)
and writes it as JSON.

Display mode defaults to the stored preferences (paths.preferences_path);
--heatmap / --no-heatmap and --voidstones override them for this run.

Input:
    - Map records, JSON or Parquet (paths.maps_path)

Output:
    - Snapshot JSON (stdout or --output)

Usage:
    python scripts/build_graph.py
    python scripts/build_graph.py --query "strand" --heatmap
    python scripts/build_graph.py --no-heatmap --voidstones 4 --output data/exports/atlas.json
"""

import argparse
import json
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from atlas_core import POSSIBLE_VOIDSTONES, DisplayMode, get_logger, config
from atlas_graph import AtlasPipeline
from storage import MapStore, PreferenceStore, load_display_mode

logger = get_logger("build_graph")


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Build an atlas graph snapshot from map records"
    )
    parser.add_argument(
        "--maps",
        default=config.get("paths.maps_path"),
        help=f"Map records (default: {config.get('paths.maps_path')})"
    )
    parser.add_argument("--query", default="", help="Search query (default: none)")
    parser.add_argument(
        "--heatmap",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Color by market score (--no-heatmap: by tier). Default: stored preference"
    )
    parser.add_argument(
        "--voidstones",
        type=int,
        choices=POSSIBLE_VOIDSTONES,
        help="Voidstone level (default: stored preference)"
    )
    parser.add_argument("--output", help="Write JSON here instead of stdout")
    return parser.parse_args(argv)


def resolve_mode(args: argparse.Namespace, stored: DisplayMode) -> DisplayMode:
    """Command-line flags override the stored display mode."""
    mode = stored
    if args.heatmap is not None:
        mode = mode.with_score_heatmap(args.heatmap)
    if args.voidstones is not None:
        mode = mode.with_voidstones(args.voidstones)
    return mode


def main(argv=None):
    args = parse_args(argv)
    mode = resolve_mode(args, load_display_mode(PreferenceStore()))

    store = MapStore.load(args.maps)
    snapshot = AtlasPipeline().run(store.entities, args.query, mode)

    logger.info(
        f"Snapshot: {len(snapshot.graph.nodes)} nodes, {len(snapshot.graph.edges)} edges, "
        f"{len(snapshot.matched_ids)} matched"
    )

    payload = json.dumps(snapshot.to_dict(), indent=2)
    if args.output:
        output = Path(args.output)
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(payload)
        logger.info(f"Wrote snapshot to {output}")
    else:
        print(payload)


if __name__ == "__main__":
    main()
