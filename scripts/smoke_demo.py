from __future__ import annotations

import argparse
import json
import time
import urllib.error
import urllib.request
from pathlib import Path

DEFAULT_GRAPH = Path(__file__).resolve().parents[1] / "examples" / "graphs" / "sample.json"


def fetch(url: str, payload: dict | None = None) -> tuple[int, bytes]:
    data = None
    headers = {}
    if payload is not None:
        data = json.dumps(payload).encode("utf-8")
        headers["Content-Type"] = "application/json"
    req = urllib.request.Request(url, data=data, headers=headers)
    with urllib.request.urlopen(req, timeout=10) as resp:
        return resp.status, resp.read()


def wait_for(url: str, timeout: int) -> bytes:
    deadline = time.time() + timeout
    last_error: Exception | None = None
    while time.time() < deadline:
        try:
            status, body = fetch(url)
            if status == 200:
                return body
        except (urllib.error.URLError, OSError) as exc:
            last_error = exc
        time.sleep(1)
    raise RuntimeError(f"Timed out waiting for {url}: {last_error}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Smoke test for a running depgraph server.")
    parser.add_argument("--base", default="http://localhost:8080")
    parser.add_argument("--graph", type=Path, default=DEFAULT_GRAPH)
    parser.add_argument("--timeout", type=int, default=60)
    args = parser.parse_args()

    base = args.base.rstrip("/")
    graph = json.loads(args.graph.read_text(encoding="utf-8"))

    wait_for(f"{base}/health", args.timeout)

    _, body = fetch(f"{base}/api/layout", graph)
    positions = json.loads(body.decode("utf-8")).get("nodes", [])
    if len(positions) != len(graph.get("nodes", [])):
        raise RuntimeError("Layout returned a different number of nodes")

    _, body = fetch(f"{base}/api/draw-list", {"graph": graph})
    draw_list = json.loads(body.decode("utf-8"))
    if not draw_list.get("node_draws"):
        raise RuntimeError("Draw list has no nodes")

    status, svg = fetch(f"{base}/api/render.svg", {"graph": graph})
    if status != 200 or not svg.startswith(b"<svg"):
        raise RuntimeError("SVG render failed")

    print("Smoke test passed.")


if __name__ == "__main__":
    main()
