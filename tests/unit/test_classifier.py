import pytest

from apps.spam_api import SPAM_THRESHOLD, SpamClassifier
from apps.spam_api.model import LazyModel
from lib.config.spam_api_loader import SpamApiConfig

from tests.fakes import FakeBackend


def make(vocabulary, probability):
    return SpamClassifier(vocabulary, LazyModel(FakeBackend(probability=probability), "m"))


@pytest.mark.parametrize(
    "probability, expected",
    [(0.0, False), (0.5, False), (0.8, False), (0.8000001, True), (0.99, True)],
)
def test_threshold_is_strictly_greater_than(vocabulary, probability, expected):
    verdict = make(vocabulary, probability).classify("free money")
    assert verdict.spam_probability == probability
    assert verdict.is_spam is expected


def test_threshold_value():
    assert SPAM_THRESHOLD == 0.8


def test_classify_feeds_encoded_sequence(vocabulary, classifier, backend):
    classifier.classify("buy now free money")
    assert backend.model.calls[0][0].tolist() == [5, 6, 7, 8] + [0] * 16


def test_from_config(tmp_path):
    vocab_path = tmp_path / "vocab.yaml"
    vocab_path.write_text("lookup:\n  win: 4\n")
    backend = FakeBackend()
    cfg = SpamApiConfig(vocabulary_path=str(vocab_path), model_url="/srv/spam.onnx")

    clf = SpamClassifier.from_config(cfg, backend=backend)

    assert clf.encode("win")[0] == 4
    assert not clf.model.is_loaded
    clf.warm_up()
    assert backend.locations == ["/srv/spam.onnx"]


def test_from_config_defaults_to_bundled_vocabulary(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    clf = SpamClassifier.from_config(SpamApiConfig(model_url="m"), backend=FakeBackend())
    assert clf.encode("free money")[:2] == [41, 110]
