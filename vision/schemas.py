from __future__ import annotations

from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field


class FeatureType(str, Enum):
    FACE_DETECTION = "FACE_DETECTION"
    LANDMARK_DETECTION = "LANDMARK_DETECTION"
    LOGO_DETECTION = "LOGO_DETECTION"
    LABEL_DETECTION = "LABEL_DETECTION"
    TEXT_DETECTION = "TEXT_DETECTION"
    SAFE_SEARCH_DETECTION = "SAFE_SEARCH_DETECTION"
    IMAGE_PROPERTIES = "IMAGE_PROPERTIES"


class Feature(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    type: FeatureType
    max_results: int = Field(default=5, alias="maxResults")


class Image(BaseModel):
    content: str  # standard padded base64


class AnnotateImageRequest(BaseModel):
    image: Image
    features: List[Feature]


class BatchAnnotateImagesRequest(BaseModel):
    requests: List[AnnotateImageRequest]

    def to_wire(self) -> dict:
        """Body for `images:annotate`, enum values and camelCase names."""
        return self.model_dump(mode="json", by_alias=True)
