"""Search Analytics 오케스트레이터

검색어 품질 분석 전체 흐름을 조율하는 핵심 컴포넌트
토큰 분리 → 품질 게이트 → 점수 계산 → 검색어 재구성 → 태그 추출 → 후보 정리

오케스트레이터는 생성 시점의 불변 옵션만 보유하므로
하나의 인스턴스를 여러 요청에서 동시에 사용해도 안전하다.
"""

from typing import Any, Dict, List, Optional, Union

import structlog
from pydantic import ValidationError

from .collection_profile import CONTENT_PROFILE, CollectionProfile
from .documents import parse_document
from .exceptions import AnalysisError, AnalyticsConfigError
from .quality_gate import SearchQualityGate, compute_match_stats
from .query_reconstructor import SearchQueryReconstructor
from .schema import (
    AnalysisOutcome,
    AnalysisResult,
    AnalyticsOptions,
    QueryCandidate,
    QueryMetrics,
    QueryQualityMetrics,
    SearchHit,
    SearchResult,
)
from .text_processing import tokenize

logger = structlog.get_logger(__name__)

INTERNAL_ERROR_REASON = "Internal Analytics Error"


class SearchAnalyticsOrchestrator:
    """검색어 품질 분석 오케스트레이터

    컬렉션(서비스)당 하나의 인스턴스를 생성해 재사용한다.
    """

    def __init__(
        self,
        options: Optional[Union[AnalyticsOptions, Dict[str, Any]]] = None,
        profile: Optional[CollectionProfile] = None
    ):
        """SearchAnalyticsOrchestrator 초기화

        Args:
            options: 분석 옵션 또는 옵션 딕셔너리
            profile: 대상 컬렉션 프로파일 (기본: 콘텐츠 컬렉션)

        Raises:
            AnalyticsConfigError: 옵션 검증 실패 (잘못된 정규식 등)
        """
        self.options = self._build_options(options)
        self.profile = profile or CONTENT_PROFILE

        self.quality_gate = SearchQualityGate(self.options)
        self.reconstructor = SearchQueryReconstructor(self.options)

        logger.debug(
            "SearchAnalyticsOrchestrator 초기화 완료",
            collection=self.profile.name,
            min_query_length=self.options.min_query_length,
            min_token_match_ratio=self.options.min_token_match_ratio,
            exclude_patterns=len(self.options.exclude_patterns)
        )

    @classmethod
    def from_settings(cls, settings, profile: Optional[CollectionProfile] = None) -> "SearchAnalyticsOrchestrator":
        """전역 설정으로 오케스트레이터 생성"""
        try:
            options = AnalyticsOptions.from_settings(settings)
        except ValidationError as e:
            raise AnalyticsConfigError(f"잘못된 분석 설정: {e}") from e
        return cls(options, profile=profile)

    @staticmethod
    def _build_options(options: Optional[Union[AnalyticsOptions, Dict[str, Any]]]) -> AnalyticsOptions:
        if options is None:
            return AnalyticsOptions()
        if isinstance(options, AnalyticsOptions):
            return options
        try:
            return AnalyticsOptions.model_validate(options)
        except ValidationError as e:
            raise AnalyticsConfigError(f"잘못된 분석 옵션: {e}") from e

    # === 메인 분석 함수 ===

    def analyze(self, query: str, result: Union[SearchResult, Dict[str, Any]]) -> AnalysisResult:
        """검색어 품질 분석

        Args:
            query: 사용자 원본 검색어
            result: 검색 백엔드 결과

        Returns:
            품질 지표와 집계할 검색어 후보 목록

        Raises:
            AnalysisError: 검색 결과 형식 오류
        """
        # 분석 중 기록되는 모든 로그에 컬렉션 이름을 바인딩
        with structlog.contextvars.bound_contextvars(collection=self.profile.name):
            return self._analyze(query, result)

    def _analyze(self, query: str, result: Union[SearchResult, Dict[str, Any]]) -> AnalysisResult:
        search_result = self._coerce_result(result)
        clean_query = query.strip()
        hit = search_result.top_hit

        # 1. 매칭 지표
        query_tokens = tokenize(clean_query)
        token_match_ratio, fields_matched = compute_match_stats(query_tokens, search_result)

        # 2. 품질 게이트
        gate = self.quality_gate.evaluate(clean_query, search_result, token_match_ratio)

        quality_score = 0
        if gate.gates_passed:
            quality_score = self.quality_gate.calculate_score(
                token_match_ratio,
                fields_matched,
                search_result.found
            )

        metrics = QueryQualityMetrics(
            original_query=clean_query,
            is_quality_query=gate.gates_passed,
            quality_score=quality_score,
            metrics=QueryMetrics(
                results_found=search_result.found,
                token_match_ratio=token_match_ratio,
                fields_matched=fields_matched,
            ),
            failure_reasons=gate.reasons,
        )

        # 3. 검색어 후보 구성
        if gate.gates_passed and hit is not None and hit.highlights is not None:
            candidates = self._build_candidates(clean_query, hit)
        else:
            candidates = [clean_query]

        # 4. 중복 제거 및 소문자화
        content_type = hit.document_type if hit is not None else None
        queries_to_track = [
            QueryCandidate(query=candidate, type=content_type)
            for candidate in self._dedupe_lower(candidates)
        ]

        logger.info(
            "검색어 품질 분석 완료",
            query=clean_query[:50],
            is_quality_query=metrics.is_quality_query,
            quality_score=metrics.quality_score,
            failure_reasons=metrics.failure_reasons,
            candidates_count=len(queries_to_track)
        )

        return AnalysisResult(metrics=metrics, queries_to_track=queries_to_track)

    def try_analyze(self, query: str, result: Union[SearchResult, Dict[str, Any]]) -> AnalysisOutcome:
        """analyze 결과를 성공/오류 값으로 반환 (예외를 전파하지 않음)"""
        try:
            return AnalysisOutcome(result=self.analyze(query, result))
        except Exception as e:
            return AnalysisOutcome(error=str(e), error_type=type(e).__name__)

    def safe_analyze(self, query: str, result: Union[SearchResult, Dict[str, Any], None]) -> AnalysisResult:
        """실패하지 않는 분석

        내부 오류 발생 시 품질 미달로 강등된 기본 결과를 반환한다.
        """
        outcome = self.try_analyze(query, result)
        if outcome.ok:
            return outcome.result

        logger.error(
            "검색어 품질 분석 실패",
            collection=self.profile.name,
            query=str(query)[:50],
            error=outcome.error,
            error_type=outcome.error_type
        )
        return self._degraded_result(query)

    # === 내부 헬퍼 함수 ===

    def _build_candidates(self, clean_query: str, hit: SearchHit) -> List[str]:
        """우선순위 순서의 검색어 후보: 복원 검색어 > 구조화 태그 > 원본 검색어"""
        candidates: List[str] = []
        document = parse_document(hit.document)

        repaired_query = self.reconstructor.reconstruct(clean_query, hit.highlights, document)
        if repaired_query:
            candidates.append(repaired_query)

        repaired_lower = repaired_query.lower()
        clean_lower = clean_query.lower()

        for tag in self.reconstructor.extract_tags(hit.highlights):
            tag_lower = tag.lower()
            if tag_lower != repaired_lower and tag_lower != clean_lower:
                candidates.append(tag)

        if repaired_lower != clean_lower:
            candidates.append(clean_query)

        return candidates

    @staticmethod
    def _dedupe_lower(candidates: List[str]) -> List[str]:
        """대소문자 무시 중복 제거 후 소문자화 (첫 등장 순서 유지)"""
        unique: Dict[str, None] = {}
        for candidate in candidates:
            unique.setdefault(candidate.lower(), None)
        return list(unique)

    @staticmethod
    def _coerce_result(result: Union[SearchResult, Dict[str, Any]]) -> SearchResult:
        if isinstance(result, SearchResult):
            return result
        try:
            return SearchResult.model_validate(result)
        except ValidationError as e:
            raise AnalysisError(f"검색 결과 형식 오류: {e.error_count()}개 필드") from e

    @staticmethod
    def _degraded_result(query: Any) -> AnalysisResult:
        """내부 오류 시 반환하는 기본 결과"""
        fallback_query = query.strip() if isinstance(query, str) else ""
        return AnalysisResult(
            metrics=QueryQualityMetrics(
                original_query=fallback_query,
                is_quality_query=False,
                quality_score=0,
                metrics=QueryMetrics(),
                failure_reasons=[INTERNAL_ERROR_REASON],
            ),
            queries_to_track=[QueryCandidate(query=fallback_query.lower(), type=None)],
        )
