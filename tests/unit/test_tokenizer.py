"""
Unit tests for the tokenizer
"""

from mrwordfreq.worker.tokenizer import normalize, count_tokens, iter_tokens


class TestNormalize:

    def test_splits_on_punctuation_and_whitespace(self):
        assert normalize(b"The cat sat. The dog sat!") == ["the", "cat", "sat", "the", "dog", "sat"]

    def test_lowercases(self):
        assert normalize(b"HeLLo WORLD") == ["hello", "world"]

    def test_digits_are_word_characters(self):
        assert normalize(b"route 66, area51") == ["route", "66", "area51"]

    def test_underscore_and_apostrophe_split_words(self):
        assert normalize(b"snake_case don't") == ["snake", "case", "don", "t"]

    def test_hyphenated_words_split(self):
        assert normalize(b"well-known") == ["well", "known"]

    def test_unicode_letters(self):
        assert normalize("Café CRÈME über".encode('utf-8')) == ["café", "crème", "über"]

    def test_empty_and_separator_only_input(self):
        assert normalize(b"") == []
        assert normalize(b" \n\t.,;!?-- ") == []

    def test_partial_multibyte_character_is_dropped(self):
        data = "naïve".encode('utf-8')
        # Cut in the middle of the two-byte "ï"
        assert normalize(data[:3]) == ["na"]

    def test_invalid_byte_separates_words(self):
        assert normalize(b"ab\xffcd") == ["ab", "cd"]

    def test_latin1_input_does_not_join_words(self):
        assert normalize(b"caf\xe9 bar na\xefve") == ["caf", "bar", "na", "ve"]

    def test_lowercasing_never_adds_non_letters(self):
        # "İ".lower() is "i" followed by a combining dot above
        tokens = normalize("İstanbul".encode('utf-8'))
        assert tokens == ["i", "stanbul"]
        assert all(token.isalnum() for token in tokens)

    def test_iter_tokens_is_lazy(self):
        tokens = iter_tokens(b"one two")
        assert next(tokens) == "one"
        assert next(tokens) == "two"


class TestCountTokens:

    def test_counts(self):
        assert count_tokens(b"a b a, A!") == {"a": 3, "b": 1}

    def test_returns_plain_dict(self):
        table = count_tokens(b"x")
        assert type(table) is dict
        assert table.get("missing") is None

    def test_boundary_split_word_counts_as_two_tokens(self):
        data = b"wordword"
        first, second = data[:4], data[4:]
        assert normalize(first) == ["word"]
        assert normalize(second) == ["word"]
