import pytest

from lib.config.spam_api_loader import load_spam_api_config


def test_defaults_when_file_missing(tmp_path):
    cfg = load_spam_api_config(str(tmp_path / "missing.yaml"), env={})
    assert cfg.backend == "keras"
    assert cfg.model_url is None
    assert cfg.cors_enabled is True
    assert cfg.port == 8000
    assert cfg.vocabulary_path is None


def test_values_from_file(tmp_path):
    path = tmp_path / "spam_api.yaml"
    path.write_text(
        "model:\n  backend: ONNX\n  url: /srv/spam.onnx\n  preload: true\n"
        "cors:\n  enabled: false\nserver:\n  port: 9100\nlogging:\n  level: debug\n"
    )
    cfg = load_spam_api_config(str(path), env={})
    assert cfg.backend == "onnx"
    assert cfg.model_url == "/srv/spam.onnx"
    assert cfg.preload is True
    assert cfg.cors_enabled is False
    assert cfg.port == 9100
    assert cfg.log_level == "debug"


def test_model_url_env_overrides_file(tmp_path):
    path = tmp_path / "spam_api.yaml"
    path.write_text("model:\n  url: /srv/old.keras\n")
    cfg = load_spam_api_config(str(path), env={"SPAM_MODEL_URL": "https://cdn.example.com/spam.keras"})
    assert cfg.model_url == "https://cdn.example.com/spam.keras"


def test_config_path_from_env(tmp_path):
    path = tmp_path / "other.yaml"
    path.write_text("server:\n  port: 7000\n")
    cfg = load_spam_api_config(env={"SPAM_API_CONFIG": str(path)})
    assert cfg.port == 7000


def test_unknown_backend_is_rejected(tmp_path):
    path = tmp_path / "spam_api.yaml"
    path.write_text("model:\n  backend: tfjs\n")
    with pytest.raises(ValueError):
        load_spam_api_config(str(path), env={})


def test_top_level_must_be_mapping(tmp_path):
    path = tmp_path / "spam_api.yaml"
    path.write_text("- just\n- a list\n")
    with pytest.raises(ValueError):
        load_spam_api_config(str(path), env={})


def test_tfjs_backend_is_accepted(tmp_path):
    path = tmp_path / "spam_api.yaml"
    path.write_text("model:\n  backend: tfjs\n  url: https://cdn.example.com/model.json\n")
    cfg = load_spam_api_config(str(path), env={})
    assert cfg.backend == "tfjs"
