from __future__ import annotations

import pytest

from api.config import RelayConfig
from api.main import create_app

LABELS = {
    "labelAnnotations": [
        {"mid": "/m/01yrx", "description": "Cat", "score": 0.98, "topicality": 0.98},
        {"mid": "/m/0jbk", "description": "Animal", "score": 0.91, "topicality": 0.91},
    ]
}


class FakeVisionClient:
    """Stands in for the vision service; records every batch it receives."""

    def __init__(self, result=None, error=None):
        self.result = {"responses": [LABELS]} if result is None else result
        self.error = error
        self.batches = []

    def batch_annotate(self, batch):
        self.batches.append(batch)
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def make_client():
    return FakeVisionClient


@pytest.fixture
def fake_client():
    return FakeVisionClient()


@pytest.fixture
def labels():
    return LABELS


@pytest.fixture
def make_app():
    def _make(client, basic_auth=None):
        return create_app(RelayConfig(client=client, basic_auth=basic_auth))

    return _make
