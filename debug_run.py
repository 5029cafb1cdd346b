from __future__ import annotations

import logging
import sys

from api.config import load_config
from pipeline.features import DEFAULT_FEATURES
from pipeline.graph import build_graph

logging.basicConfig(
    level=logging.DEBUG,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)


def main() -> None:
    """
    Run a sample debug pass through the annotation pipeline.

    Usage: python debug_run.py [image_path] [features]

    Defaults to `test.jpg` and the relay's feature list. Credentials are
    read the same way the server reads them.
    """
    image_path = sys.argv[1] if len(sys.argv) > 1 else "test.jpg"
    feature_spec = sys.argv[2] if len(sys.argv) > 2 else DEFAULT_FEATURES

    with open(image_path, "rb") as f:
        image = f.read()

    pipeline = build_graph(load_config().client)
    initial_state = {
        "image": image,
        "feature_spec": feature_spec,
        "error": None,
    }

    # Stream: see each node's state delta live
    for step in pipeline.stream(initial_state):
        node = list(step.keys())[0]
        print("\n" + "=" * 40)
        print(f"NODE: {node}")
        if node == "serialize":
            print(step[node].get("body") or step[node])
        elif node == "encode":
            print(f"DELTA: <{len(step[node].get('content') or '')} base64 chars>")
        else:
            print(f"DELTA: {step[node]}")


if __name__ == "__main__":
    main()
