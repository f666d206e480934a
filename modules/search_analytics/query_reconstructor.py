"""Search 질의 재구성 서비스

최상위 히트의 하이라이트와 문서 어휘를 이용해 검색어를 복원
- 엔티티 확장: 구조화 필드 하이라이트 값으로 토큰 치환 ('12' -> 'Grade 12 (Science)')
- 오타 보정: <mark> 단어 또는 문서 어휘와의 편집 거리로 토큰 치환
"""

from typing import Dict, Iterable, List, Optional

import structlog

from .documents import SearchDocument
from .schema import AnalyticsOptions, HighlightSnippet
from .text_processing import (
    extract_marked_word,
    levenshtein_distance,
    strip_html_tags,
    tokenize,
)

logger = structlog.get_logger(__name__)

# 편집 거리 허용치: 5자 이하 토큰 1, 더 긴 토큰 2
SHORT_TOKEN_LENGTH = 5
SHORT_TOKEN_MAX_DISTANCE = 1
LONG_TOKEN_MAX_DISTANCE = 2


class SearchQueryReconstructor:
    """검색어 재구성 및 구조화 태그 추출 서비스"""

    def __init__(self, options: AnalyticsOptions):
        self.options = options

    # === 메인 재구성 함수 ===

    def reconstruct(
        self,
        original_query: str,
        highlights: List[HighlightSnippet],
        document: SearchDocument
    ) -> str:
        """검색어 재구성

        Args:
            original_query: 정리된 원본 검색어
            highlights: 최상위 히트의 하이라이트 목록
            document: 최상위 히트 문서

        Returns:
            복원된 검색어
        """
        tokens = tokenize(original_query)

        # 1. 하이라이트 기반 치환 맵
        replacements = self.build_highlight_replacements(highlights)
        highlighted_keys = len(replacements)

        # 2. 하이라이트되지 않은 토큰은 문서 어휘와의 편집 거리로 보정
        canonical_words = self.get_canonical_document_words(document)
        for token in tokens:
            lower_token = token.lower()
            if lower_token in replacements or lower_token in self.options.stop_words:
                continue

            candidate = self.find_closest_word(lower_token, canonical_words)
            if candidate:
                replacements[lower_token] = candidate

        # 3. 토큰 치환
        rebuilt = [replacements.get(token.lower()) or token for token in tokens]

        # 4. 인접 중복 제거 (대소문자 무시)
        result = self.collapse_adjacent_duplicates(rebuilt)

        logger.debug(
            "검색어 재구성 완료",
            original=original_query[:50],
            reconstructed=result[:50],
            highlight_replacements=highlighted_keys,
            fuzzy_replacements=len(replacements) - highlighted_keys
        )

        return result

    def build_highlight_replacements(self, highlights: List[HighlightSnippet]) -> Dict[str, str]:
        """하이라이트에서 토큰 치환 맵 생성

        확장 필드(엔티티 확장) 항목은 이후의 오타 보정 항목에 덮어써지지 않는다.
        """
        replacements: Dict[str, str] = {}
        expandable = self.options.expandable_fields

        for highlight in highlights:
            field_name = highlight.field or "default"
            is_expandable = field_name in expandable
            matched_tokens = [t.lower() for t in highlight.flat_matched_tokens()]

            for snippet in highlight.snippet_list():
                clean_value = strip_html_tags(snippet)
                marked = extract_marked_word(snippet)

                # 우선순위: <mark> 텍스트 > 백엔드 matched_tokens
                if marked:
                    triggering_token: Optional[str] = marked[0].lower()
                else:
                    lower_value = clean_value.lower()
                    triggering_token = next((mt for mt in matched_tokens if mt and mt in lower_value), None)

                if not triggering_token:
                    continue

                if is_expandable:
                    value = clean_value
                else:
                    value = marked[1] if marked else clean_value
                if not value:
                    continue

                for key in self._lookup_keys(triggering_token, marked):
                    if key in replacements and not is_expandable:
                        continue
                    replacements[key] = value

        return replacements

    def _lookup_keys(self, triggering_token: str, marked) -> List[str]:
        """치환 맵 키: 트리거 토큰의 첫 토큰, <mark>를 포함한 단어가 다르면 그 단어도 추가"""
        keys: List[str] = []
        first = next(iter(tokenize(triggering_token)), triggering_token)
        if first:
            keys.append(first)

        if marked:
            word_tokens = tokenize(marked[1].lower())
            word = word_tokens[0] if word_tokens else ""
            if word and word not in keys:
                keys.append(word)

        return keys

    # === 편집 거리 기반 보정 ===

    def get_canonical_document_words(self, document: SearchDocument) -> List[str]:
        """문서 주요 필드의 정규 단어 목록 (불용어, 짧은 단어 제외, 등장 순서 유지)"""
        words: Dict[str, None] = {}
        for field_name in self.options.canonical_fields:
            value = document.text_value(field_name)
            if not value:
                continue
            for word in tokenize(value):
                lower_word = word.lower()
                if len(lower_word) >= self.options.min_query_length and lower_word not in self.options.stop_words:
                    words.setdefault(lower_word, None)
        return list(words)

    def find_closest_word(self, token: str, candidates: Iterable[str]) -> Optional[str]:
        """허용 편집 거리 이내에서 가장 가까운 단어

        거리가 같으면 사전순으로 앞선 단어를 선택한다.
        """
        max_distance = LONG_TOKEN_MAX_DISTANCE if len(token) > SHORT_TOKEN_LENGTH else SHORT_TOKEN_MAX_DISTANCE

        best_candidate: Optional[str] = None
        best_distance = max_distance + 1

        for word in candidates:
            # 길이 차이는 편집 거리의 하한
            if abs(len(word) - len(token)) > max_distance:
                continue
            distance = levenshtein_distance(token, word)
            if distance < best_distance or (
                distance == best_distance and best_candidate is not None and word < best_candidate
            ):
                best_distance = distance
                best_candidate = word

        return best_candidate

    # === 후처리 ===

    @staticmethod
    def collapse_adjacent_duplicates(tokens: List[str]) -> str:
        """빈 토큰과 인접 중복 토큰(대소문자 무시)을 제거하고 공백으로 연결"""
        result: List[str] = []
        for item in tokens:
            if not item:
                continue
            if result and item.lower() == result[-1].lower():
                continue
            result.append(item)
        return " ".join(result)

    # === 구조화 태그 추출 ===

    def extract_tags(
        self,
        highlights: List[HighlightSnippet],
        expandable_fields: Optional[Iterable[str]] = None,
        min_length: Optional[int] = None
    ) -> List[str]:
        """확장 필드 하이라이트에서 보조 제안용 태그 추출

        Args:
            highlights: 하이라이트 목록
            expandable_fields: 대상 필드 (기본: 옵션의 확장 필드)
            min_length: 최소 길이 (기본: 옵션의 최소 검색어 길이)

        Returns:
            중복 제거된 태그 목록 (등장 순서 유지)
        """
        fields = set(expandable_fields) if expandable_fields is not None else self.options.expandable_fields
        min_length = self.options.min_query_length if min_length is None else min_length

        tags: Dict[str, None] = {}
        for highlight in highlights:
            if (highlight.field or "") not in fields:
                continue
            for snippet in highlight.snippet_list():
                clean = strip_html_tags(snippet)
                if len(clean) >= min_length:
                    tags.setdefault(clean, None)
        return list(tags)
