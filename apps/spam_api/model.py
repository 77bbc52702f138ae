"""Lazily loaded model handle shared by all requests."""

from __future__ import annotations

import threading
from typing import Optional, Sequence

from lib.telemetry.logger import get_logger

from .backends import InferenceBackend, LoadedModel
from .encoder import to_matrix


logger = get_logger(__name__)


class ModelLoadError(RuntimeError):
    """The model artifact could not be loaded."""


class LazyModel:
    """Load the model on first use and keep it for the process lifetime.

    ``Unloaded -> Loading -> Loaded``.  Loading runs under a lock with a
    double check, so concurrent first calls share one load.  A failed load
    leaves the handle unloaded and the next call tries again.
    """

    def __init__(self, backend: InferenceBackend, location: Optional[str]) -> None:
        self.backend = backend
        self.location = location
        self._model: Optional[LoadedModel] = None
        self._lock = threading.Lock()
        self._loading = False

    @property
    def is_loaded(self) -> bool:
        return self._model is not None

    @property
    def state(self) -> str:
        if self._model is not None:
            return "loaded"
        return "loading" if self._loading else "unloaded"

    def get(self) -> LoadedModel:
        model = self._model
        if model is not None:
            return model
        with self._lock:
            if self._model is None:
                self._model = self._load()
            return self._model

    def _load(self) -> LoadedModel:
        if not self.location:
            raise ModelLoadError("no model location configured (set SPAM_MODEL_URL)")
        self._loading = True
        try:
            model = self.backend.load(self.location)
        except Exception as exc:
            logger.error("Failed to load %s model from %s: %s", self.backend.name, self.location, exc)
            raise ModelLoadError(f"could not load model from {self.location}") from exc
        finally:
            self._loading = False
        logger.info("Model loaded successfully (%s, %s)", self.backend.name, self.location)
        return model

    def warm_up(self) -> None:
        self.get()

    def predict(self, sequence: Sequence[int]) -> float:
        """Return the spam probability for one encoded sequence."""

        return self.get().predict(to_matrix(sequence))


__all__ = ["LazyModel", "ModelLoadError"]
