from langgraph.graph import StateGraph, END
from pipeline.state import AnnotationState
from pipeline.nodes import (
    node_encode,
    node_features,
    node_build_request,
    make_annotate_node,
    node_serialize,
)
from vision.client import AnnotationClient


def continue_unless_error(next_node):
    """Router factory: stop the graph as soon as a node records an error."""

    def route(state):
        if state.get("error"):
            return END
        return next_node

    return route


def build_graph(client: AnnotationClient):
    workflow = StateGraph(AnnotationState)

    # Add all nodes
    workflow.add_node("encode", node_encode)
    workflow.add_node("features", node_features)
    workflow.add_node("build_request", node_build_request)
    workflow.add_node("annotate", make_annotate_node(client))
    workflow.add_node("serialize", node_serialize)

    # Set entry point
    workflow.set_entry_point("encode")

    workflow.add_conditional_edges(
        "encode",
        continue_unless_error("features"),
        {"features": "features", END: END},
    )
    workflow.add_edge("features", "build_request")
    workflow.add_edge("build_request", "annotate")

    # Upstream failures skip serialization
    workflow.add_conditional_edges(
        "annotate",
        continue_unless_error("serialize"),
        {"serialize": "serialize", END: END},
    )
    workflow.add_edge("serialize", END)

    return workflow.compile()
