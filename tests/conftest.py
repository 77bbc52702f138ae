"""Shared fixtures: a tiny vocabulary and an in-memory inference backend."""

import pytest

from apps.spam_api import SpamClassifier
from apps.spam_api.model import LazyModel
from apps.spam_api.vocabulary import Vocabulary
from lib.config.spam_api_loader import SpamApiConfig

from tests.fakes import FakeBackend


@pytest.fixture
def vocabulary():
    return Vocabulary(lookup={"buy": 5, "now": 6, "free": 7, "money": 8}, pad=0, start=3, unknown=1)


@pytest.fixture
def backend():
    return FakeBackend(probability=0.93)


@pytest.fixture
def classifier(vocabulary, backend):
    return SpamClassifier(vocabulary, LazyModel(backend, "memory://spam-model"))


@pytest.fixture
def config(tmp_path):
    return SpamApiConfig(vocabulary_path=str(tmp_path / "unused.yaml"), cors_enabled=True)
