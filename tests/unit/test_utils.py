"""Tests for text helpers."""

import pytest

from rag_router.common.utils import clean_text, tokenize

pytestmark = pytest.mark.unit


class TestCleanText:
    def test_removes_bom_and_replacement_chars(self):
        assert clean_text("\ufeffHello\ufffd world") == "Hello world"

    def test_nfkc_normalization(self):
        assert clean_text("\ufb01ne") == "fine"
        assert clean_text("\ufb01ne", normalize=False) == "\ufb01ne"

    def test_empty(self):
        assert clean_text("") == ""


class TestTokenize:
    def test_lowercases_and_drops_stop_words(self):
        assert tokenize("What is Machine Learning?") == ["machine", "learning"]

    def test_drops_single_characters(self):
        assert tokenize("a b c model x") == ["model"]

    def test_keeps_digits(self):
        assert tokenize("GPT4 has 175B parameters") == ["gpt4", "175b", "parameters"]

    def test_keeps_duplicates(self):
        assert tokenize("language and language") == ["language", "language"]
