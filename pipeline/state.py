from typing import Any, Dict, List, Optional, TypedDict

from vision.schemas import BatchAnnotateImagesRequest, Feature


class AnnotationState(TypedDict, total=False):
    """
    State passed between LangGraph nodes for one relay request.

    Nothing here outlives the request that created it.
    """

    image: bytes  # raw upload
    feature_spec: str  # "label", "face,text"

    # Outputs from encode / features / build_request
    content: Optional[str]  # base64 of `image`
    features: Optional[List[Feature]]
    batch: Optional[BatchAnnotateImagesRequest]

    # Outputs from annotate / serialize
    response: Optional[Dict[str, Any]]  # responses[0], untouched
    body: Optional[str]  # indented JSON text

    error: Optional[str]
