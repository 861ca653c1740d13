#!/usr/bin/env python3
"""
Start Visualizer Script

Starts the web UI server for exploring the atlas.

All parameters read from config.json under "visualizer" and "paths".

Input:
    - Map records from JSON or Parquet (paths.maps_path)
    - Display preferences (paths.preferences_path)

Output:
    - Web server at configured host:port

Usage:
    python scripts/start_visualizer.py
    python scripts/start_visualizer.py --port 8000
    python scripts/start_visualizer.py --host 0.0.0.0 --maps data/maps.parquet
"""

import argparse
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from atlas_core import get_logger, config
from storage import MapStore

logger = get_logger("visualizer")


def main():
    parser = argparse.ArgumentParser(
        description="Start Visualizer - Web UI for atlas exploration"
    )

    # All params default to config.json values
    parser.add_argument(
        "--host",
        default=config.get("visualizer.host"),
        help=f"Host to bind (default: {config.get('visualizer.host')})"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=config.get("visualizer.port"),
        help=f"Port to listen (default: {config.get('visualizer.port')})"
    )
    parser.add_argument(
        "--static-dir",
        default=config.get("visualizer.static_dir"),
        help="Static files directory"
    )
    parser.add_argument(
        "--maps",
        default=config.get("paths.maps_path"),
        help="Map records (JSON or Parquet)"
    )

    args = parser.parse_args()

    config.validate()

    logger.info("=" * 60)
    logger.info("VISUALIZER")
    logger.info("=" * 60)
    logger.info(f"Server: http://{args.host}:{args.port}")
    logger.info(f"Maps:   {args.maps}")
    logger.info("=" * 60)

    # Import and start
    from visualizer.server import AtlasServer

    server = AtlasServer(
        host=args.host,
        port=args.port,
        static_dir=args.static_dir,
        store=MapStore.load(args.maps),
    )

    server.start()


if __name__ == "__main__":
    main()
