"""Tests for text normalisation and term extraction."""

import pytest
from hypothesis import given, settings, strategies as st

from form_autopilot.matching.normalizer import extract_terms, normalize, slugify_key


class TestNormalize:
    """Test cases for normalize."""

    def test_lowercases_and_strips_punctuation(self):
        assert normalize("E-Mail Address:") == "email address"

    def test_collapses_whitespace(self):
        assert normalize("  first \t\n  name  ") == "first name"

    def test_underscores_are_removed(self):
        assert normalize("user_email Your email") == "useremail your email"

    def test_empty_string(self):
        assert normalize("") == ""

    @given(st.text())
    @settings(max_examples=200)
    def test_output_alphabet(self, text):
        """Normalised text only ever holds lower-case alphanumerics and single spaces."""
        result = normalize(text)
        assert result == result.strip()
        assert "  " not in result
        assert all(ch == " " or ch.isdigit() or "a" <= ch <= "z" for ch in result)

    @given(st.text())
    @settings(max_examples=100)
    def test_idempotent(self, text):
        assert normalize(normalize(text)) == normalize(text)


class TestExtractTerms:
    """Test cases for extract_terms."""

    def test_drops_short_noise_words(self):
        assert extract_terms("Date of birth id") == {"date", "birth"}

    def test_empty_string_returns_empty_set(self):
        assert extract_terms("") == set()

    def test_punctuation_only_returns_empty_set(self):
        assert extract_terms("?!-") == set()

    def test_custom_minimum_length(self):
        assert extract_terms("zip code of area", min_length=4) == {"code", "area"}

    def test_minimum_length_defaults_to_settings(self):
        assert extract_terms("po box", min_length=None) == {"box"}
        assert extract_terms("po box", min_length=0) == {"po", "box"}

    @given(st.text())
    @settings(max_examples=200)
    def test_terms_are_longer_than_two(self, text):
        for term in extract_terms(text):
            assert len(term) > 2
            assert term in normalize(text).split(" ")


class TestSlugifyKey:
    """Test cases for slugify_key."""

    @pytest.mark.parametrize("label,expected", [
        ("First Name", "first_name"),
        ("E-mail address", "e_mail_address"),
        ("  Phone #  ", "phone"),
        ("", ""),
    ])
    def test_slugify(self, label, expected):
        assert slugify_key(label) == expected
