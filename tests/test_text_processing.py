"""토큰 분리 및 편집 거리 테스트"""

import time

import pytest

from modules.search_analytics.text_processing import (
    extract_marked_text,
    extract_marked_word,
    levenshtein_distance,
    strip_html_tags,
    tokenize,
)


class TestTokenize:
    """tokenize 테스트"""

    def test_splits_on_whitespace_hyphen_underscore(self):
        assert tokenize("grade-12_science test") == ["grade", "12", "science", "test"]

    def test_blank_text_has_no_tokens(self):
        assert tokenize("   ") == []
        assert tokenize("") == []

    def test_preserves_case_and_collapses_separators(self):
        assert tokenize("  Grade--12 __ Physics ") == ["Grade", "12", "Physics"]


class TestLevenshteinDistance:
    """levenshtein_distance 테스트"""

    def test_empty_string(self):
        assert levenshtein_distance("", "abc") == 3
        assert levenshtein_distance("abc", "") == 3
        assert levenshtein_distance("", "") == 0

    def test_classic_example(self):
        assert levenshtein_distance("kitten", "sitting") == 3

    @pytest.mark.parametrize("word", ["a", "math", "mathematics", "12th"])
    def test_identity(self, word):
        assert levenshtein_distance(word, word) == 0

    @pytest.mark.parametrize("a,b", [
        ("mathematcs", "mathematics"),
        ("flaw", "lawn"),
        ("physics", "physiks"),
    ])
    def test_symmetry(self, a, b):
        assert levenshtein_distance(a, b) == levenshtein_distance(b, a)

    def test_triangle_inequality(self):
        a, b, c = "exam", "exams", "example"
        assert levenshtein_distance(a, c) <= levenshtein_distance(a, b) + levenshtein_distance(b, c)

    def test_case_sensitive(self):
        assert levenshtein_distance("Math", "math") == 1


class TestHighlightHelpers:
    """하이라이트 스니펫 처리 테스트"""

    def test_strip_html_tags(self):
        assert strip_html_tags("<mark>Mat</mark>hematics ") == "Mathematics"

    def test_extract_marked_text(self):
        assert extract_marked_text("Grade <mark> 12 </mark> (Science)") == "12"
        assert extract_marked_text("no marks here") is None

    def test_extract_marked_word_extends_to_word_boundary(self):
        assert extract_marked_word("<mark>Mat</mark>hematics") == ("Mat", "Mathematics")
        assert extract_marked_word("<mark>12</mark>th Grade") == ("12", "12th")
        assert extract_marked_word("Grade <mark>12</mark> (Science)") == ("12", "12")

    def test_extract_marked_word_stops_at_hyphen(self):
        assert extract_marked_word("pre-<mark>alg</mark>ebra") == ("alg", "algebra")

    def test_extract_marked_word_without_mark(self):
        assert extract_marked_word("plain snippet") is None
        assert extract_marked_word("<mark> </mark>word") is None

    def test_extract_marked_word_first_mark_only(self):
        assert extract_marked_word("<mark>Alg</mark>ebra and <mark>Geo</mark>metry") == ("Alg", "Algebra")

    def test_extract_marked_word_long_unbroken_text(self):
        # URL, base64, 띄어쓰기 없는 CJK 텍스트 등 긴 단어
        run = "x" * 200000
        started = time.perf_counter()

        assert extract_marked_word(run + " <mark>a</mark>") == ("a", "a")
        assert extract_marked_word(run + "<mark>a</mark>" + run) == ("a", run + "a" + run)
        assert extract_marked_word(run) is None

        assert time.perf_counter() - started < 2.0
