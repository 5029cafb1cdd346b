from __future__ import annotations

from typing import Dict, List

from vision.schemas import Feature, FeatureType

MAX_RESULTS = 5

# Identifiers requested for every upload to the relay.
DEFAULT_FEATURES = "label"

FEATURE_TYPES: Dict[str, FeatureType] = {
    "face": FeatureType.FACE_DETECTION,
    "landmark": FeatureType.LANDMARK_DETECTION,
    "logo": FeatureType.LOGO_DETECTION,
    "label": FeatureType.LABEL_DETECTION,
    "text": FeatureType.TEXT_DETECTION,
    "safe_search": FeatureType.SAFE_SEARCH_DETECTION,
    "image_properties": FeatureType.IMAGE_PROPERTIES,
}


class InvalidFeatureError(ValueError):
    def __init__(self, feature: str):
        super().__init__(f"Invalid feature: {feature}")
        self.feature = feature


def parse_features(names: str) -> List[Feature]:
    """
    Translate a comma-separated list of identifiers into feature requests.

    Args:
        names: e.g. "face,text". Split on "," exactly; whitespace is kept,
            so " text" is not "text".

    Returns:
        One `Feature` per identifier, in input order, each with
        `max_results=5`.

    Raises:
        InvalidFeatureError: on the first unrecognized identifier.
    """
    features: List[Feature] = []
    for name in names.split(","):
        kind = FEATURE_TYPES.get(name)
        if kind is None:
            raise InvalidFeatureError(name)
        features.append(Feature(type=kind, max_results=MAX_RESULTS))
    return features
