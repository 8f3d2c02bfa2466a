"""Export a visual's persisted layout from the configured store to a JSON file."""

from __future__ import annotations

import asyncio
import json
import sys

from src.config import get_settings
from src.graph.serialization import load_snapshot
from src.main import build_store
from src.utils.logging import setup_logging


async def main(visual_id: str) -> None:
    setup_logging(log_level="INFO", log_format="console")
    settings = get_settings()

    store = build_store(settings)
    try:
        blob = await store.read(visual_id)
        if blob is None:
            print(f"No saved layout for visual {visual_id}.")
            sys.exit(0)

        snapshot = load_snapshot(blob)
        filename = f"layout_{visual_id}.json"
        with open(filename, "w") as f:
            json.dump(snapshot.model_dump(mode="json", by_alias=True), f, indent=2)
        print(f"Layout exported to {filename}")
        print(f"  Nodes: {len(snapshot.nodes)}")
        print(f"  Edges: {len(snapshot.edges)}")
    finally:
        await store.close()


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print("usage: python -m scripts.export_layout <visual_id>")
        sys.exit(2)
    asyncio.run(main(sys.argv[1]))
