"""Text to fixed-length index sequence."""

from __future__ import annotations

import re
from typing import List, Sequence

import numpy as np

from .vocabulary import Vocabulary


SEQUENCE_LENGTH = 20
WS_RE = re.compile(r"\s+")


def tokenize(text: str) -> List[str]:
    """Lowercase and split on whitespace runs.

    No stripping happens first, so ``""`` gives ``[""]`` and surrounding
    whitespace gives empty tokens at the edges.
    """

    return WS_RE.split(text.lower())


def encode(text: str, vocabulary: Vocabulary, length: int = SEQUENCE_LENGTH) -> List[int]:
    """Return exactly ``length`` indices for ``text``.

    Tokens past ``length`` are dropped; short inputs are right-padded with
    ``vocabulary.pad``.  Unknown tokens map to ``vocabulary.unknown``.
    """

    indices = [vocabulary.index_of(tok) for tok in tokenize(text)][:length]
    indices.extend([vocabulary.pad] * (length - len(indices)))
    return indices


def to_matrix(sequence: Sequence[int]) -> np.ndarray:
    """Shape a single sequence as the ``1 x N`` batch the models expect."""

    return np.asarray([list(sequence)], dtype=np.float32)


__all__ = ["SEQUENCE_LENGTH", "encode", "to_matrix", "tokenize"]
