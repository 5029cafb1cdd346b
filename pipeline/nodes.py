from __future__ import annotations

import base64
import json
import logging
from typing import Any, Callable, Dict

from pipeline.features import parse_features
from pipeline.state import AnnotationState
from vision.client import AnnotationClient
from vision.schemas import AnnotateImageRequest, BatchAnnotateImagesRequest, Image

log = logging.getLogger(__name__)

Node = Callable[[AnnotationState], Dict[str, Any]]


def node_encode(state: AnnotationState) -> Dict[str, Any]:
    """Base64-encodes the uploaded bytes (standard alphabet, padded)."""
    image = state.get("image")
    if image is None:
        return {"error": "no image content"}

    content = base64.b64encode(image).decode("ascii")
    log.info("[ENCODE] %d bytes -> %d chars", len(image), len(content))
    return {"content": content}


def node_features(state: AnnotationState) -> Dict[str, Any]:
    """
    Node wrapper around the feature-list parser.

    `InvalidFeatureError` is not caught here; it leaves the graph as is.
    """
    features = parse_features(state["feature_spec"])
    log.info("[FEATURES] %s", [f.type.value for f in features])
    return {"features": features}


def node_build_request(state: AnnotationState) -> Dict[str, Any]:
    """Packs image + features into a batch holding exactly one request."""
    request = AnnotateImageRequest(
        image=Image(content=state["content"]),
        features=state["features"],
    )
    return {"batch": BatchAnnotateImagesRequest(requests=[request])}


def make_annotate_node(client: AnnotationClient) -> Node:
    """Returns the annotate node bound to `client`."""

    def node_annotate(state: AnnotationState) -> Dict[str, Any]:
        try:
            result = client.batch_annotate(state["batch"])
        except Exception as e:
            log.error("[ANNOTATE] %s", e)
            return {"error": str(e)}

        responses = result.get("responses", [])
        if not isinstance(responses, list):
            log.error("[ANNOTATE] responses is a %s, not a list", type(responses).__name__)
            return {"error": "malformed response from vision service: responses is not a list"}
        if not responses:
            log.error("[ANNOTATE] empty batch response")
            return {"error": "annotation service returned no responses"}

        log.info("[ANNOTATE] got %d response(s), keeping the first", len(responses))
        return {"response": responses[0]}

    return node_annotate


def node_serialize(state: AnnotationState) -> Dict[str, Any]:
    """Serializes the first annotation response as tab-indented JSON."""
    try:
        body = json.dumps(state["response"], indent="\t")
    except (TypeError, ValueError) as e:
        log.error("[SERIALIZE] %s", e)
        return {"error": str(e)}

    log.info("[SERIALIZE] %d chars", len(body))
    return {"body": body}
