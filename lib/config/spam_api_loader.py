import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from lib.utils.validation import ensure

from .yaml_loader import load_yaml

DEFAULT_CONFIG_PATH = "config/spam_api.yaml"
CONFIG_PATH_ENV = "SPAM_API_CONFIG"
MODEL_URL_ENV = "SPAM_MODEL_URL"
BACKENDS = ("keras", "onnx", "tfjs")


@dataclass
class SpamApiConfig:
    """Typed view over ``spam_api.yaml``.

    Every key is optional; a missing file produces the defaults below.  The
    raw mapping is retained for callers that need a value without a typed
    field.

    ``vocabulary_path`` left unset selects the table packaged with
    :mod:`apps.spam_api`.

    The model location is the one setting read from the environment
    (``SPAM_MODEL_URL``); when set it wins over ``model.url``.
    """

    raw: Dict[str, Any] = field(default_factory=dict)
    backend: str = "keras"
    model_url: Optional[str] = None
    model_cache_dir: str = ".cache/spam_model"
    preload: bool = False
    vocabulary_path: Optional[str] = None
    cors_enabled: bool = True
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"


def load_spam_api_config(
    path: Optional[str] = None, env: Optional[Dict[str, str]] = None
) -> SpamApiConfig:
    """Load ``spam_api.yaml`` and return a :class:`SpamApiConfig`.

    Parameters
    ----------
    path:
        File system path to the YAML configuration file.  Defaults to
        ``$SPAM_API_CONFIG`` and then ``config/spam_api.yaml``.
    env:
        Mapping consulted for environment overrides, ``os.environ`` when
        omitted.
    """

    env = os.environ if env is None else env
    path = path or env.get(CONFIG_PATH_ENV) or DEFAULT_CONFIG_PATH
    raw = load_yaml(path) if Path(path).exists() else {}

    model = raw.get("model", {}) or {}
    vocabulary = raw.get("vocabulary", {}) or {}
    cors = raw.get("cors", {}) or {}
    server = raw.get("server", {}) or {}
    logging_cfg = raw.get("logging", {}) or {}

    defaults = SpamApiConfig()
    cfg = SpamApiConfig(
        raw=raw,
        backend=str(model.get("backend", defaults.backend)).lower(),
        model_url=env.get(MODEL_URL_ENV) or model.get("url") or None,
        model_cache_dir=str(model.get("cache_dir", defaults.model_cache_dir)),
        preload=bool(model.get("preload", defaults.preload)),
        vocabulary_path=vocabulary.get("path") or None,
        cors_enabled=bool(cors.get("enabled", defaults.cors_enabled)),
        host=str(server.get("host", defaults.host)),
        port=int(server.get("port", defaults.port)),
        log_level=str(logging_cfg.get("level", defaults.log_level)),
    )

    ensure(cfg.backend in BACKENDS, f"model.backend must be one of {BACKENDS}, got {cfg.backend!r}")
    ensure(0 < cfg.port < 65536, f"server.port out of range: {cfg.port}")
    return cfg

