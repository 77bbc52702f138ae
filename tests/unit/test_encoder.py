from apps.spam_api.encoder import SEQUENCE_LENGTH, encode, to_matrix, tokenize
from apps.spam_api.vocabulary import Vocabulary


def test_known_tokens_are_looked_up_and_padded(vocabulary):
    assert encode("buy now free money", vocabulary) == [5, 6, 7, 8] + [0] * 16


def test_input_is_lowercased(vocabulary):
    assert encode("BUY Now", vocabulary)[:3] == [5, 6, 0]


def test_unknown_tokens_map_to_unknown_index(vocabulary):
    assert encode("buy cheap pills", vocabulary)[:4] == [5, 1, 1, 0]


def test_long_input_is_truncated_to_first_tokens(vocabulary):
    text = " ".join(["buy"] * 20 + ["money"] * 5)
    seq = encode(text, vocabulary)
    assert seq == [5] * 20
    assert 8 not in seq


def test_length_is_fixed_for_any_input(vocabulary):
    for text in ["", "buy", "x " * 19, "x " * 20, "free " * 1000, "\n\t  "]:
        assert len(encode(text, vocabulary)) == SEQUENCE_LENGTH


def test_empty_text_is_one_empty_token(vocabulary):
    assert tokenize("") == [""]
    assert encode("", vocabulary) == [1] + [0] * 19


def test_empty_token_uses_table_entry_when_present():
    vocab = Vocabulary(lookup={"": 9}, pad=0, start=3, unknown=1)
    assert encode("", vocab)[0] == 9


def test_surrounding_whitespace_yields_edge_tokens(vocabulary):
    assert tokenize("  buy\tnow \n") == ["", "buy", "now", ""]
    assert encode("  buy\tnow \n", vocabulary)[:5] == [1, 5, 6, 1, 0]


def test_start_token_is_never_inserted(vocabulary):
    seq = encode("buy now", vocabulary)
    assert seq[0] == 5
    assert vocabulary.start not in seq


def test_to_matrix_shape():
    matrix = to_matrix([1] * SEQUENCE_LENGTH)
    assert matrix.shape == (1, SEQUENCE_LENGTH)
