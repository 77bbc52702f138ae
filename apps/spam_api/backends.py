"""Inference backends.

A backend turns a model location (local path or ``http(s)://`` URL) into a
:class:`LoadedModel` whose :meth:`~LoadedModel.predict` takes the encoded
``1 x 20`` matrix and returns the spam probability.  Three backends ship:

``keras``
    TensorFlow/Keras saved model.  Remote artifacts are downloaded into a
    local cache directory because ``load_model`` only reads files.
``onnx``
    ONNX Runtime session.  Remote artifacts are fetched into memory.
``tfjs``
    TensorFlow.js layers model (``model.json`` plus weight shards), read
    through the ``tensorflowjs`` converter.  Shards listed in the weights
    manifest are fetched from next to ``model.json``.

Remote artifacts are fetched again on every load, so a model republished
under the same URL is picked up by the next process.  The copy on disk is
only read by the load that fetched it.

The heavy runtimes are imported when a model is loaded, so the service and
its tests import without them.
"""

from __future__ import annotations

import hashlib
import json
import math
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Protocol, Type
from urllib.parse import urljoin, urlparse

import httpx
import numpy as np

from lib.telemetry.logger import get_logger


logger = get_logger(__name__)

DOWNLOAD_TIMEOUT = 60.0


class PredictionError(RuntimeError):
    """The model returned something that is not a probability."""


class LoadedModel(Protocol):
    def predict(self, matrix: np.ndarray) -> float: ...


class InferenceBackend(Protocol):
    name: str

    def load(self, location: str) -> LoadedModel: ...


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def is_remote(location: str) -> bool:
    return urlparse(location).scheme in ("http", "https")


def fetch_bytes(url: str) -> bytes:
    response = httpx.get(url, follow_redirects=True, timeout=DOWNLOAD_TIMEOUT)
    response.raise_for_status()
    return response.content


def artifact_dir(url: str, cache_dir: str) -> Path:
    digest = hashlib.sha256(url.encode("utf-8")).hexdigest()[:12]
    target = Path(cache_dir) / digest
    target.mkdir(parents=True, exist_ok=True)
    return target


def write_atomic(target: Path, data: bytes) -> None:
    fd, tmp = tempfile.mkstemp(dir=target.parent, suffix=".part")
    with os.fdopen(fd, "wb") as fh:
        fh.write(data)
    os.replace(tmp, target)


def download(url: str, cache_dir: str) -> Path:
    """Fetch ``url`` into ``cache_dir`` and return the local path.

    The file is always fetched again and replaces any earlier copy.  The
    file name keeps the URL's basename so format detection by suffix
    (``.keras``, ``.h5``) still works.
    """

    name = Path(urlparse(url).path).name or "model"
    target = artifact_dir(url, cache_dir) / name
    logger.info("Downloading model artifact from %s", url)
    write_atomic(target, fetch_bytes(url))
    return target


def download_tfjs(url: str, cache_dir: str) -> Path:
    """Fetch a TF.js ``model.json`` and every shard its manifest lists.

    Shard paths are resolved against the ``model.json`` URL and stored next
    to the local copy, where the converter expects them.
    """

    target = download(url, cache_dir)
    manifest = json.loads(target.read_bytes())
    for group in manifest.get("weightsManifest", []):
        for shard in group.get("paths", []):
            local = target.parent / shard
            local.parent.mkdir(parents=True, exist_ok=True)
            write_atomic(local, fetch_bytes(urljoin(url, shard)))
    return target


def first_scalar(output: Any) -> float:
    """Read the first value of a model output as a probability."""

    try:
        flat = np.asarray(output, dtype=np.float64).reshape(-1)
    except (TypeError, ValueError) as exc:
        raise PredictionError(f"non-numeric model output: {exc}") from exc
    if flat.size == 0:
        raise PredictionError("model returned an empty output")
    value = float(flat[0])
    if not math.isfinite(value):
        raise PredictionError(f"model returned a non-finite value: {value}")
    return value


# ---------------------------------------------------------------------------
# Keras
# ---------------------------------------------------------------------------

class KerasModel:
    def __init__(self, model: Any) -> None:
        self.model = model

    def predict(self, matrix: np.ndarray) -> float:
        return first_scalar(self.model.predict(matrix, verbose=0))


class KerasBackend:
    name = "keras"

    def __init__(self, cache_dir: str = ".cache/spam_model") -> None:
        self.cache_dir = cache_dir

    def load(self, location: str) -> KerasModel:
        import tensorflow as tf

        path = download(location, self.cache_dir) if is_remote(location) else Path(location)
        return KerasModel(tf.keras.models.load_model(str(path), compile=False))


# ---------------------------------------------------------------------------
# ONNX Runtime
# ---------------------------------------------------------------------------

# ONNX element types the encoded matrix may be cast to.
ONNX_DTYPES: Dict[str, Any] = {
    "tensor(float)": np.float32,
    "tensor(double)": np.float64,
    "tensor(int32)": np.int32,
    "tensor(int64)": np.int64,
}


class OnnxModel:
    def __init__(self, session: Any) -> None:
        self.session = session
        first = session.get_inputs()[0]
        self.input_name = first.name
        self.input_dtype = ONNX_DTYPES.get(first.type, np.float32)

    def predict(self, matrix: np.ndarray) -> float:
        feed = {self.input_name: matrix.astype(self.input_dtype)}
        outputs = self.session.run(None, feed)
        if not outputs:
            raise PredictionError("model returned no outputs")
        return first_scalar(outputs[0])


class OnnxBackend:
    name = "onnx"

    def __init__(self, cache_dir: str = ".cache/spam_model") -> None:
        self.cache_dir = cache_dir

    def load(self, location: str) -> OnnxModel:
        import onnxruntime as ort

        source = fetch_bytes(location) if is_remote(location) else location
        session = ort.InferenceSession(source, providers=["CPUExecutionProvider"])
        return OnnxModel(session)


# ---------------------------------------------------------------------------
# TensorFlow.js
# ---------------------------------------------------------------------------

class TfjsBackend:
    name = "tfjs"

    def __init__(self, cache_dir: str = ".cache/spam_model") -> None:
        self.cache_dir = cache_dir

    def load(self, location: str) -> KerasModel:
        import tensorflowjs as tfjs

        path = download_tfjs(location, self.cache_dir) if is_remote(location) else Path(location)
        return KerasModel(tfjs.converters.load_keras_model(str(path)))


BACKENDS: Dict[str, Type] = {
    KerasBackend.name: KerasBackend,
    OnnxBackend.name: OnnxBackend,
    TfjsBackend.name: TfjsBackend,
}


def get_backend(name: str, cache_dir: str = ".cache/spam_model") -> InferenceBackend:
    try:
        cls = BACKENDS[name.lower()]
    except KeyError:
        raise ValueError(f"unknown inference backend {name!r}; expected one of {sorted(BACKENDS)}") from None
    return cls(cache_dir=cache_dir)


__all__ = [
    "BACKENDS",
    "InferenceBackend",
    "KerasBackend",
    "LoadedModel",
    "OnnxBackend",
    "PredictionError",
    "TfjsBackend",
    "first_scalar",
    "get_backend",
]
