"""
Atlas Visualizer Server - static web UI and REST API.

Backend serves atlas graph snapshots (nodes, deduplicated edges, fit target)
for the current search and display mode.  The browser renderer draws them
over the atlas background image.

Start:
    python scripts/start_visualizer.py
    python scripts/start_visualizer.py --port 8000
"""

import argparse
import json
import threading
from http.server import HTTPServer, SimpleHTTPRequestHandler
from pathlib import Path
from typing import Any, Dict, Optional, Tuple
from urllib.parse import parse_qs, unquote, urlparse

from atlas_core.config import config
from atlas_core.errors import AtlasConfigError
from atlas_core.logging import get_logger
from atlas_core.types import DisplayMode
from atlas_graph.pipeline import AtlasPipeline
from storage.map_store import MapStore
from storage.preferences import PreferenceStore, load_display_mode

logger = get_logger("visualizer")

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _parse_flag(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError(f"not a boolean: {value!r}")


class AtlasAPIHandler(SimpleHTTPRequestHandler):
    """
    HTTP request handler for Atlas API and static files.

    API Endpoints:
        GET /api/atlas          - Graph snapshot (?q=, ?heatmap=, ?voidstones=)
        GET /api/maps           - All map records
        GET /api/maps/:name     - Single map record
        GET /api/stats          - Map and graph counts
        GET /api/preferences    - Stored display mode
    """

    store: Optional[MapStore] = None
    preferences: Optional[PreferenceStore] = None
    pipeline: Optional[AtlasPipeline] = None
    static_dir: Optional[Path] = None

    def __init__(self, *args, directory=None, **kwargs):
        if AtlasAPIHandler.static_dir:
            directory = str(AtlasAPIHandler.static_dir)
        super().__init__(*args, directory=directory, **kwargs)

    def log_message(self, format, *args):
        logger.info(f"{self.address_string()} - {format % args}")

    def do_GET(self):
        parsed = urlparse(self.path)
        if parsed.path.startswith('/api/'):
            self._handle_api(parsed.path, parsed.query)
        else:
            super().do_GET()

    def _handle_api(self, path: str, query_string: str):
        params = {k: v[-1] for k, v in parse_qs(query_string, keep_blank_values=True).items()}

        try:
            if path == '/api/atlas':
                self._api_atlas(params)
            elif path == '/api/maps':
                self._api_maps()
            elif path.startswith('/api/maps/'):
                self._api_map_detail(unquote(path[len('/api/maps/'):]))
            elif path == '/api/stats':
                self._api_stats(params)
            elif path == '/api/preferences':
                self._api_preferences()
            else:
                self._send_error(404, "Endpoint not found")
        except (AtlasConfigError, ValueError) as e:
            self._send_error(400, str(e))
        except Exception as e:
            logger.error(f"API error on {path}: {e}", exc_info=True)
            self._send_error(500, str(e))

    # --- Response helpers ---

    def _send_json(self, data: Any, status: int = 200):
        self.send_response(status)
        self.send_header('Content-Type', 'application/json')
        self.send_header('Access-Control-Allow-Origin', '*')
        self.end_headers()
        self.wfile.write(json.dumps(data, default=str).encode('utf-8'))

    def _send_error(self, status: int, message: str):
        self._send_json({'error': message, 'status': status}, status)

    # --- Request parsing ---

    def _display_mode(self, params: Dict[str, str]) -> DisplayMode:
        """Explicit parameters win over stored preferences."""
        stored = load_display_mode(self.preferences) if self.preferences else DisplayMode()
        heatmap = stored.score_heatmap
        voidstones = stored.voidstones
        if params.get('heatmap'):
            heatmap = _parse_flag(params['heatmap'])
        if params.get('voidstones'):
            voidstones = int(params['voidstones'])
        return DisplayMode(score_heatmap=heatmap, voidstones=voidstones)

    def _snapshot(self, params: Dict[str, str]):
        return self.pipeline.run(self.store.entities, params.get('q', ''), self._display_mode(params))

    # --- Endpoints ---

    def _api_atlas(self, params: Dict[str, str]):
        self._send_json(self._snapshot(params).to_dict())

    def _api_maps(self):
        maps = [e.to_dict() for e in self.store]
        self._send_json({'maps': maps, 'count': len(maps)})

    def _api_map_detail(self, name: str):
        entity = self.store.get(name)
        if entity:
            self._send_json(entity.to_dict())
        else:
            self._send_error(404, "Map not found")

    def _api_stats(self, params: Dict[str, str]):
        snapshot = self._snapshot(params)
        stats = self.store.stats()
        stats.update({
            'nodes': snapshot.graph.node_count,
            'edges': len(snapshot.graph.edges),
            'matched': len(snapshot.matched_ids),
        })
        self._send_json(stats)

    def _api_preferences(self):
        mode = load_display_mode(self.preferences) if self.preferences else DisplayMode()
        self._send_json({'scoreHeatmap': mode.score_heatmap, 'voidstones': mode.voidstones})


class AtlasServer:
    """Atlas visualization server. Serves REST API + static UI."""

    def __init__(
        self,
        host: str = 'localhost',
        port: int = 8080,
        static_dir: Optional[str] = None,
        store: Optional[MapStore] = None,
        preferences: Optional[PreferenceStore] = None,
        pipeline: Optional[AtlasPipeline] = None,
    ):
        self.host = host
        self.port = port

        if static_dir:
            self.static_dir = Path(static_dir).resolve()
        else:
            self.static_dir = (Path(__file__).parent / 'static').resolve()

        self.static_dir.mkdir(parents=True, exist_ok=True)
        self._ensure_index()

        self.store = store if store is not None else MapStore.load()
        self.preferences = preferences if preferences is not None else PreferenceStore()
        self.pipeline = pipeline or AtlasPipeline()
        AtlasAPIHandler.store = self.store
        AtlasAPIHandler.preferences = self.preferences
        AtlasAPIHandler.pipeline = self.pipeline
        AtlasAPIHandler.static_dir = self.static_dir
        self.server: Optional[HTTPServer] = None

    def _ensure_index(self):
        """Creates a minimal fallback if index.html is missing."""
        index_path = self.static_dir / 'index.html'
        if index_path.exists():
            return
        index_path.write_text(
            '<!DOCTYPE html><html><head><title>Voidstone Atlas</title>'
            '<style>body{background:#000;color:#eee;font-family:sans-serif;'
            'display:flex;align-items:center;justify-content:center;min-height:100vh;margin:0}'
            'code{background:#222;padding:2px 6px;border-radius:3px;color:#ffc107}</style></head>'
            '<body><div style="text-align:center"><h1 style="color:#ffc107">Voidstone Atlas</h1>'
            '<p>UI missing. Restore <code>visualizer/static/index.html</code></p>'
            '<p style="font-size:12px;color:#888;margin-top:12px">API active at <code>/api/atlas</code></p>'
            '</div></body></html>'
        )
        logger.info(f"Created fallback UI at {index_path}")

    def _bind(self) -> HTTPServer:
        if self.server is None:
            self.server = HTTPServer((self.host, self.port), AtlasAPIHandler)
            self.port = self.server.server_address[1]
        return self.server

    @property
    def address(self) -> Tuple[str, int]:
        return self.host, self.port

    def start(self):
        server = self._bind()
        logger.info(f"Starting Atlas Visualizer at http://{self.host}:{self.port}")
        print(f"\n{'='*60}")
        print(f"  Voidstone Atlas Visualizer")
        print(f"  Running at: http://{self.host}:{self.port}")
        print(f"  Press Ctrl+C to stop")
        print(f"{'='*60}\n")
        try:
            server.serve_forever()
        except KeyboardInterrupt:
            logger.info("Shutting down server...")
            server.shutdown()

    def start_background(self) -> threading.Thread:
        server = self._bind()
        thread = threading.Thread(target=server.serve_forever, daemon=True)
        thread.start()
        return thread

    def stop(self):
        if self.server is not None:
            self.server.shutdown()
            self.server.server_close()
            self.server = None


def main():
    parser = argparse.ArgumentParser(description="Atlas Visualizer Server")
    parser.add_argument("--host", default=config.get("visualizer.host"), help="Host to bind to")
    parser.add_argument("--port", type=int, default=config.get("visualizer.port"), help="Port")
    parser.add_argument("--static-dir", default=config.get("visualizer.static_dir"), help="Static files directory")
    parser.add_argument("--maps", default=config.get("paths.maps_path"), help="Map records (JSON or Parquet)")
    args = parser.parse_args()

    server = AtlasServer(
        host=args.host,
        port=args.port,
        static_dir=args.static_dir,
        store=MapStore.load(args.maps),
    )
    server.start()


if __name__ == "__main__":
    main()
