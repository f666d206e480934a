"""Search Analytics 모듈 공개 인터페이스

검색 백엔드 결과를 바탕으로 검색어 품질을 판정하고,
오타 보정과 엔티티 확장으로 복원한 검색어를 인기 검색어 집계에 전달합니다.

사용 예시:
    from modules.search_analytics import SearchAnalyticsOrchestrator

    analytics = SearchAnalyticsOrchestrator({"min_query_length": 2})

    analysis = analytics.safe_analyze("Mat exam 12th", raw_result)
    if analysis.should_track:
        for candidate in analysis.queries_to_track:
            await sink.record(candidate, user_id=user_id)
"""

__version__ = "1.0.0"

from .collection_profile import (
    CONTENT_PROFILE,
    QUESTION_PROFILE,
    CollectionProfile,
    profile_for_type,
)
from .documents import ContentDocument, GenericDocument, QuestionDocument, parse_document
from .exceptions import AnalysisError, AnalyticsConfigError, SearchAnalyticsError
from .orchestrator import SearchAnalyticsOrchestrator
from .popular_queries import (
    PopularQuerySink,
    RedisPopularQuerySink,
    format_popular_query,
    parse_popular_query,
    track_search,
)
from .quality_gate import SearchQualityGate
from .query_reconstructor import SearchQueryReconstructor
from .schema import (
    AnalysisOutcome,
    AnalysisResult,
    AnalyticsOptions,
    HighlightSnippet,
    PopularQuerySuggestion,
    QueryCandidate,
    QueryMetrics,
    QueryQualityMetrics,
    ScoreWeights,
    SearchHit,
    SearchResult,
    TextMatchInfo,
)
from .text_processing import levenshtein_distance, tokenize

__all__ = [
    # 오케스트레이터
    "SearchAnalyticsOrchestrator",
    # 구성 요소
    "SearchQualityGate",
    "SearchQueryReconstructor",
    "tokenize",
    "levenshtein_distance",
    # 컬렉션
    "CollectionProfile",
    "CONTENT_PROFILE",
    "QUESTION_PROFILE",
    "profile_for_type",
    # 문서
    "ContentDocument",
    "QuestionDocument",
    "GenericDocument",
    "parse_document",
    # 데이터 모델
    "AnalyticsOptions",
    "ScoreWeights",
    "SearchResult",
    "SearchHit",
    "HighlightSnippet",
    "TextMatchInfo",
    "QueryMetrics",
    "QueryQualityMetrics",
    "QueryCandidate",
    "AnalysisResult",
    "AnalysisOutcome",
    "PopularQuerySuggestion",
    # 인기 검색어
    "PopularQuerySink",
    "RedisPopularQuerySink",
    "format_popular_query",
    "parse_popular_query",
    "track_search",
    # 예외
    "SearchAnalyticsError",
    "AnalyticsConfigError",
    "AnalysisError",
    # 버전
    "__version__",
]
