"""Spam classification service.

:class:`SpamClassifier` is the single seam between the HTTP layer and the
model: it encodes the text with the vocabulary table, asks the lazily loaded
model for a probability and applies the fixed spam threshold.  The inference
runtime is pluggable through :mod:`apps.spam_api.backends` so the same
pipeline serves Keras and ONNX artifacts.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from lib.config.spam_api_loader import SpamApiConfig

from .backends import InferenceBackend, get_backend
from .encoder import SEQUENCE_LENGTH, encode
from .model import LazyModel
from .vocabulary import Vocabulary, load_vocabulary


SPAM_THRESHOLD = 0.8


@dataclass(frozen=True)
class SpamVerdict:
    spam_probability: float
    is_spam: bool


class SpamClassifier:
    """Encode text, run the model and threshold the result."""

    def __init__(self, vocabulary: Vocabulary, model: LazyModel) -> None:
        self.vocabulary = vocabulary
        self.model = model

    @classmethod
    def from_config(
        cls, cfg: SpamApiConfig, backend: Optional[InferenceBackend] = None
    ) -> "SpamClassifier":
        """Build the classifier described by ``cfg``.

        The vocabulary is read immediately; the model is only located here and
        loaded on first use (or by :meth:`warm_up`).
        """

        vocabulary = load_vocabulary(cfg.vocabulary_path)
        backend = backend or get_backend(cfg.backend, cache_dir=cfg.model_cache_dir)
        return cls(vocabulary, LazyModel(backend, cfg.model_url))

    def encode(self, text: str) -> List[int]:
        return encode(text, self.vocabulary, SEQUENCE_LENGTH)

    def classify(self, text: str) -> SpamVerdict:
        probability = self.model.predict(self.encode(text))
        return SpamVerdict(spam_probability=probability, is_spam=probability > SPAM_THRESHOLD)

    def warm_up(self) -> None:
        self.model.warm_up()


__all__ = ["SPAM_THRESHOLD", "SpamClassifier", "SpamVerdict"]
