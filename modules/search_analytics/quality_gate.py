"""Search 품질 게이트 및 품질 점수 계산

검색어 + 검색 결과 쌍이 학습할 가치가 있는지 판정하고
게이트를 통과한 검색어에 대해 0-100 품질 점수를 계산
"""

import math
from typing import List, Optional, Tuple

import structlog

from .schema import AnalyticsOptions, QualityGateResult, ScoreWeights, SearchResult
from .text_processing import tokenize

logger = structlog.get_logger(__name__)

# 점수에 반영하는 최대 매칭 필드 수
MAX_SCORED_FIELDS = 3


def compute_match_stats(query_tokens: List[str], result: SearchResult) -> Tuple[float, int]:
    """최상위 히트 기준 토큰 매칭 비율과 매칭 필드 수

    Returns:
        (token_match_ratio, fields_matched)
    """
    hit = result.top_hit
    info = hit.text_match_info if hit else None
    tokens_matched = info.tokens_matched if info else 0
    fields_matched = info.fields_matched if info else 0

    total_tokens = len(query_tokens)
    ratio = tokens_matched / total_tokens if total_tokens > 0 else 0.0
    # 백엔드가 질의 토큰 수보다 많은 매칭을 보고해도 비율은 [0, 1]
    return min(1.0, max(0.0, ratio)), fields_matched


def _round_half_up(value: float) -> int:
    """0.5는 올림하는 반올림"""
    return int(math.floor(value + 0.5))


def _round_percentage(ratio: float) -> int:
    """비율을 반올림된 백분율로 변환"""
    return _round_half_up(ratio * 100)


class SearchQualityGate:
    """검색어 품질 게이트"""

    def __init__(self, options: AnalyticsOptions):
        self.options = options

    def evaluate(
        self,
        query: str,
        result: SearchResult,
        token_match_ratio: Optional[float] = None
    ) -> QualityGateResult:
        """품질 게이트 평가

        모든 검사를 순서대로 수행하고 실패 사유를 전부 수집한다.

        Args:
            query: 원본 검색어
            result: 검색 백엔드 결과
            token_match_ratio: 미리 계산된 토큰 매칭 비율 (없으면 계산)

        Returns:
            게이트 통과 여부와 실패 사유 목록
        """
        clean_query = query.strip()
        if token_match_ratio is None:
            token_match_ratio, _ = compute_match_stats(tokenize(clean_query), result)

        reasons: List[str] = []

        if len(clean_query) < self.options.min_query_length:
            reasons.append("Query too short")

        if result.found < self.options.min_results_found:
            reasons.append("No results found")

        if token_match_ratio < self.options.min_token_match_ratio:
            reasons.append(f"Low match ratio: {_round_percentage(token_match_ratio)}%")

        if any(pattern.search(clean_query) for pattern in self.options.exclude_patterns):
            reasons.append("Excluded pattern match")

        if reasons:
            logger.debug("품질 게이트 실패", query=clean_query[:50], reasons=reasons)

        return QualityGateResult(gates_passed=not reasons, reasons=reasons)

    def calculate_score(
        self,
        token_match_ratio: float,
        fields_matched: int,
        results_found: int,
        weights: Optional[ScoreWeights] = None
    ) -> int:
        """품질 점수 계산 (0-100)

        score = ratio * w.token_ratio
              + min(fields_matched, 3) * w.fields_matched
              + (results_found > 0 ? w.has_results : 0)
        """
        weights = weights or self.options.quality_score_weights

        score = token_match_ratio * weights.token_ratio
        score += min(fields_matched, MAX_SCORED_FIELDS) * weights.fields_matched
        score += weights.has_results if results_found > 0 else 0

        return _round_half_up(min(100.0, max(0.0, score)))
