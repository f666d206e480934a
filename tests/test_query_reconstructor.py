"""검색어 재구성 테스트"""

import pytest

from modules.search_analytics import AnalyticsOptions, HighlightSnippet, SearchQueryReconstructor, parse_document


@pytest.fixture
def reconstructor() -> SearchQueryReconstructor:
    return SearchQueryReconstructor(AnalyticsOptions())


def _highlights(*items):
    return [HighlightSnippet.model_validate(item) for item in items]


class TestEntityExpansion:
    """구조화 필드 하이라이트 기반 엔티티 확장"""

    def test_grade_token_expands_to_full_value(self, reconstructor):
        # Given: grades 필드에서 '12'가 하이라이트됨
        document = parse_document({"type": "book", "title": "Physics", "grades": ["Grade 12 (Science)"]})
        highlights = _highlights({"field": "grades", "snippet": "Grade <mark>12</mark> (Science)"})

        # When
        reconstructed = reconstructor.reconstruct("grade 12", highlights, document)

        # Then: '12'가 전체 값으로 치환되고 한 번만 포함
        assert reconstructed.count("Grade 12 (Science)") == 1
        assert reconstructed.endswith("Grade 12 (Science)")

    def test_expansion_not_overwritten_by_typo_correction(self, reconstructor):
        document = parse_document({"type": "book", "title": "Grade 12 Physics"})
        highlights = _highlights(
            {"field": "grades", "snippet": "Grade <mark>12</mark> (Science)"},
            {"field": "title", "snippet": "Grade <mark>12</mark> Physics"},
        )

        reconstructed = reconstructor.reconstruct("12", highlights, document)

        assert reconstructed == "Grade 12 (Science)"

    def test_expansion_overrides_earlier_typo_correction(self, reconstructor):
        document = parse_document({"type": "book", "title": "Grade 12 Physics"})
        highlights = _highlights(
            {"field": "title", "snippet": "Grade <mark>12</mark> Physics"},
            {"field": "grades", "snippet": "Grade <mark>12</mark> (Science)"},
        )

        replacements = reconstructor.build_highlight_replacements(highlights)

        assert replacements["12"] == "Grade 12 (Science)"

    def test_partial_mark_registers_enclosing_word(self, reconstructor):
        highlights = _highlights({"field": "grades", "snippet": "<mark>12</mark>th Grade"})

        replacements = reconstructor.build_highlight_replacements(highlights)

        assert replacements == {"12": "12th Grade", "12th": "12th Grade"}


class TestTypoCorrection:
    """하이라이트 및 편집 거리 기반 오타 보정"""

    def test_mark_inside_word_corrects_to_full_word(self, reconstructor):
        document = parse_document({"type": "book", "title": "Mathematics"})
        highlights = _highlights({"field": "title", "snippet": "<mark>Mat</mark>hematics"})

        assert reconstructor.reconstruct("Mat", highlights, document) == "Mathematics"

    def test_matched_tokens_fallback_without_mark(self, reconstructor):
        document = parse_document({"type": "note", "title": "Organic chemistry"})
        highlights = _highlights({
            "field": "description",
            "matched_tokens": [["Organic"], ["chem"]],
            "snippet": "Organic chemistry basics",
        })

        replacements = reconstructor.build_highlight_replacements(highlights)

        assert replacements == {"organic": "Organic chemistry basics"}

    def test_levenshtein_fallback_without_highlights(self, reconstructor):
        # Given: 10자 토큰, 편집 거리 1
        document = parse_document({"type": "book", "title": "Mathematics"})

        # When
        reconstructed = reconstructor.reconstruct("mathematcs", [], document)

        # Then
        assert reconstructed == "mathematics"

    def test_short_token_allows_single_edit(self, reconstructor):
        document = parse_document({"type": "book", "title": "Atoms"})

        assert reconstructor.reconstruct("atms", [], document) == "atoms"
        assert reconstructor.reconstruct("tms", [], document) == "tms"

    def test_stop_words_are_not_corrected(self, reconstructor):
        document = parse_document({"type": "book", "title": "Tho Thermodynamics"})

        assert reconstructor.reconstruct("the thermodynamcs", [], document) == "the thermodynamics"

    def test_tie_break_is_lexicographic(self, reconstructor):
        # 'cat'은 'bat'과 'hat' 모두 거리 1
        assert reconstructor.find_closest_word("cat", ["hat", "bat"]) == "bat"
        assert reconstructor.find_closest_word("cat", ["bat", "hat"]) == "bat"

    def test_prefers_smaller_distance_over_order(self, reconstructor):
        assert reconstructor.find_closest_word("physiks", ["phasics", "physics"]) == "physics"

    def test_no_candidate_outside_allowed_distance(self, reconstructor):
        assert reconstructor.find_closest_word("exam", ["mathematics"]) is None


class TestCanonicalWords:
    """문서 정규 단어 수집"""

    def test_scans_configured_fields_and_filters(self, reconstructor):
        document = parse_document({
            "type": "book",
            "title": "The Theory of Relativity",
            "slug": "ignored-slug",
            "description": "A primer",
            "grades": ["Grade 12"],
        })

        words = reconstructor.get_canonical_document_words(document)

        assert words == ["theory", "relativity", "primer", "grade", "12"]

    def test_question_document_content(self, reconstructor):
        document = parse_document({"type": "question", "title": "Why", "content": "photosynthesis in plants"})

        assert "photosynthesis" in reconstructor.get_canonical_document_words(document)


class TestCollapseAndTags:
    """후처리 및 구조화 태그 추출"""

    def test_collapse_adjacent_duplicates(self):
        collapse = SearchQueryReconstructor.collapse_adjacent_duplicates

        assert collapse(["Physics", "physics", "", "exam", "Physics"]) == "Physics exam Physics"

    def test_extract_tags_from_expandable_fields(self, reconstructor):
        highlights = _highlights(
            {"field": "grades", "snippets": ["<mark>12</mark>th Grade", "12th Grade", "1"]},
            {"field": "title", "snippet": "<mark>Mat</mark>hematics"},
            {"field": "tags", "snippet": "<mark>algebra</mark>"},
        )

        assert reconstructor.extract_tags(highlights) == ["12th Grade", "algebra"]

    def test_extract_tags_with_explicit_fields(self, reconstructor):
        highlights = _highlights({"field": "title", "snippet": "<mark>Mat</mark>hematics"})

        assert reconstructor.extract_tags(highlights, ["title"], 2) == ["Mathematics"]
