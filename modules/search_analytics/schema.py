"""Search Analytics 모듈 데이터 스키마 정의

Pydantic v2를 사용한 데이터 계약 정의
검색 백엔드 결과 입력 모델, 분석 옵션, 품질 분석 출력 모델 포함
"""

import re
from typing import Any, Dict, FrozenSet, List, Optional, Tuple

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

# 기본 불용어 (사용자 지정 불용어는 이 집합에 합쳐짐)
DEFAULT_STOP_WORDS: FrozenSet[str] = frozenset({
    "a", "an", "the", "and", "or", "but", "is", "are", "was", "were",
    "in", "on", "at", "to", "for", "of", "with", "by", "from",
})

# 하이라이트 값 전체로 토큰을 치환하는 필드 (엔티티 확장)
DEFAULT_EXPANDABLE_FIELDS: FrozenSet[str] = frozenset({
    "grades", "grade", "author", "category", "genre", "slug", "tags", "id",
})

# 오타 보정 후보 단어를 수집하는 문서 필드 (순서 유지)
DEFAULT_CANONICAL_FIELDS: Tuple[str, ...] = ("title", "description", "content", "grades")

DEFAULT_FIELD_WEIGHTS: Dict[str, float] = {
    "title": 10,
    "grades": 10,
    "description": 2,
    "default": 1,
}

# 특수문자만으로 구성된 검색어 제외
DEFAULT_EXCLUDE_PATTERNS: Tuple[re.Pattern, ...] = (
    re.compile(r"^[^a-z0-9]+$", re.IGNORECASE),
)


# === 검색 백엔드 결과 (입력) ===


class TextMatchInfo(BaseModel):
    """최상위 히트의 토큰/필드 매칭 통계"""
    model_config = ConfigDict(populate_by_name=True)

    fields_matched: int = Field(
        default=0,
        ge=0,
        validation_alias=AliasChoices("fields_matched", "fieldsMatched"),
        description="매칭된 필드 수"
    )
    tokens_matched: int = Field(
        default=0,
        ge=0,
        validation_alias=AliasChoices("tokens_matched", "tokensMatched"),
        description="매칭된 토큰 수"
    )


class HighlightSnippet(BaseModel):
    """하이라이트 스니펫 (<mark> 태그로 매칭 구간 표시)"""
    model_config = ConfigDict(populate_by_name=True)

    field: Optional[str] = Field(None, description="매칭된 문서 필드 이름")
    matched_tokens: List[Any] = Field(
        default_factory=list,
        validation_alias=AliasChoices("matched_tokens", "matchedTokens"),
        description="매칭된 토큰 목록 (다중 필드 그룹은 한 단계 중첩)"
    )
    snippet: Optional[str] = Field(None, description="단일 스니펫")
    snippets: Optional[List[str]] = Field(None, description="스니펫 목록")

    def snippet_list(self) -> List[str]:
        """snippets가 없으면 snippet을 단일 목록으로 반환"""
        if self.snippets is not None:
            return list(self.snippets)
        return [self.snippet] if self.snippet else []

    def flat_matched_tokens(self) -> List[str]:
        """중첩된 matched_tokens를 한 단계 평탄화하여 문자열만 반환"""
        flat: List[str] = []
        for token in self.matched_tokens:
            if isinstance(token, list):
                flat.extend(t for t in token if isinstance(t, str))
            elif isinstance(token, str):
                flat.append(token)
        return flat


class SearchHit(BaseModel):
    """개별 검색 히트"""
    model_config = ConfigDict(populate_by_name=True)

    document: Dict[str, Any] = Field(default_factory=dict, description="문서 필드")
    highlights: Optional[List[HighlightSnippet]] = Field(None, description="하이라이트 목록")
    text_match_info: Optional[TextMatchInfo] = Field(
        None,
        validation_alias=AliasChoices("text_match_info", "textMatchInfo"),
        description="토큰 매칭 통계"
    )

    @property
    def document_type(self) -> Optional[str]:
        """문서 type 필드 (문자열이 아니면 None)"""
        value = self.document.get("type")
        return value if isinstance(value, str) else None


class SearchResult(BaseModel):
    """검색 백엔드 결과"""
    found: int = Field(default=0, ge=0, description="전체 히트 수")
    hits: List[SearchHit] = Field(default_factory=list, description="히트 목록 (첫 히트만 분석)")

    @property
    def top_hit(self) -> Optional[SearchHit]:
        """분석 대상 최상위 히트"""
        return self.hits[0] if self.hits else None


# === 분석 옵션 ===


class ScoreWeights(BaseModel):
    """품질 점수 가중치"""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    token_ratio: float = Field(
        default=50,
        validation_alias=AliasChoices("token_ratio", "tokenRatio"),
        description="토큰 매칭 비율 가중치"
    )
    fields_matched: float = Field(
        default=10,
        validation_alias=AliasChoices("fields_matched", "fieldsMatched"),
        description="매칭 필드 수 가중치 (최대 3개까지 반영)"
    )
    has_results: float = Field(
        default=20,
        validation_alias=AliasChoices("has_results", "hasResults"),
        description="결과 존재 가중치"
    )


class AnalyticsOptions(BaseModel):
    """검색 품질 분석 옵션

    생성 시점에 한 번 확정되는 불변 설정. 잘못된 정규식이나 범위를 벗어난
    값은 생성 시점에 검증 오류로 실패한다.
    """
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    min_query_length: int = Field(
        default=2,
        ge=0,
        validation_alias=AliasChoices("min_query_length", "minQueryLength"),
        description="최소 검색어 길이"
    )
    min_results_found: int = Field(
        default=1,
        ge=0,
        validation_alias=AliasChoices("min_results_found", "minResultsFound"),
        description="최소 검색 결과 수"
    )
    min_token_match_ratio: float = Field(
        default=0.5,
        ge=0.0,
        le=1.0,
        validation_alias=AliasChoices("min_token_match_ratio", "minTokenMatchRatio"),
        description="최소 토큰 매칭 비율"
    )
    exclude_patterns: Tuple[re.Pattern, ...] = Field(
        default=DEFAULT_EXCLUDE_PATTERNS,
        validation_alias=AliasChoices("exclude_patterns", "excludePatterns"),
        description="제외 패턴 정규식 목록"
    )
    stop_words: FrozenSet[str] = Field(
        default=DEFAULT_STOP_WORDS,
        validation_alias=AliasChoices("stop_words", "stopWords"),
        description="불용어 (기본 불용어와 합집합)"
    )
    field_weights: Dict[str, float] = Field(
        default_factory=lambda: dict(DEFAULT_FIELD_WEIGHTS),
        validation_alias=AliasChoices("field_weights", "fieldWeights"),
        description="필드별 가중치 (기본값 위에 병합)"
    )
    quality_score_weights: ScoreWeights = Field(
        default_factory=ScoreWeights,
        validation_alias=AliasChoices("quality_score_weights", "qualityScoreWeights"),
        description="품질 점수 가중치 (기본값 위에 병합)"
    )
    expandable_fields: FrozenSet[str] = Field(
        default=DEFAULT_EXPANDABLE_FIELDS,
        validation_alias=AliasChoices("expandable_fields", "expandableFields"),
        description="엔티티 확장 대상 필드"
    )
    canonical_fields: Tuple[str, ...] = Field(
        default=DEFAULT_CANONICAL_FIELDS,
        validation_alias=AliasChoices("canonical_fields", "canonicalFields"),
        description="오타 보정 후보 단어를 수집할 문서 필드"
    )

    @field_validator("exclude_patterns", mode="before")
    @classmethod
    def compile_exclude_patterns(cls, v: Any) -> Tuple[re.Pattern, ...]:
        """문자열 패턴을 컴파일 (잘못된 정규식은 즉시 실패)"""
        if isinstance(v, (str, re.Pattern)):
            v = [v]
        compiled = []
        for pattern in v:
            if isinstance(pattern, re.Pattern):
                compiled.append(pattern)
                continue
            try:
                compiled.append(re.compile(pattern))
            except re.error as e:
                raise ValueError(f"Invalid exclude pattern {pattern!r}: {e}") from e
        return tuple(compiled)

    @field_validator("stop_words", mode="before")
    @classmethod
    def merge_stop_words(cls, v: Any) -> FrozenSet[str]:
        """사용자 불용어를 기본 불용어에 합침"""
        if isinstance(v, str):
            v = [v]
        return DEFAULT_STOP_WORDS | frozenset(word.lower() for word in v)

    @field_validator("field_weights", mode="before")
    @classmethod
    def merge_field_weights(cls, v: Any) -> Dict[str, float]:
        """필드 가중치를 기본값 위에 병합"""
        return {**DEFAULT_FIELD_WEIGHTS, **dict(v or {})}

    @field_validator("expandable_fields", mode="before")
    @classmethod
    def normalize_expandable_fields(cls, v: Any) -> FrozenSet[str]:
        if isinstance(v, str):
            v = [v]
        return frozenset(v)

    def weight_of(self, field_name: str) -> float:
        """필드 가중치 조회 (미등록 필드는 default 가중치)

        검색 백엔드 요청 구성용 설정 값이며 품질 분석과 점수 계산에는 사용하지 않는다.
        """
        return self.field_weights.get(field_name, self.field_weights.get("default", 1))

    @classmethod
    def from_settings(cls, settings) -> "AnalyticsOptions":
        """전역 설정에서 분석 옵션 생성"""
        data: Dict[str, Any] = {
            "min_query_length": settings.analytics_min_query_length,
            "min_results_found": settings.analytics_min_results_found,
            "min_token_match_ratio": settings.analytics_min_token_match_ratio,
            "stop_words": settings.extra_stop_words_list,
            "quality_score_weights": {
                "token_ratio": settings.analytics_weight_token_ratio,
                "fields_matched": settings.analytics_weight_fields_matched,
                "has_results": settings.analytics_weight_has_results,
            },
        }
        extra_patterns = settings.exclude_patterns_list
        if extra_patterns:
            data["exclude_patterns"] = [*DEFAULT_EXCLUDE_PATTERNS, *extra_patterns]
        return cls(**data)


# === 분석 결과 (출력) ===


class QualityGateResult(BaseModel):
    """품질 게이트 평가 결과"""
    gates_passed: bool = Field(..., description="모든 게이트 통과 여부")
    reasons: List[str] = Field(default_factory=list, description="실패 사유 목록")


class QueryMetrics(BaseModel):
    """검색어 매칭 지표"""
    results_found: int = Field(default=0, ge=0, description="검색 결과 수")
    token_match_ratio: float = Field(default=0.0, ge=0.0, le=1.0, description="토큰 매칭 비율")
    fields_matched: int = Field(default=0, ge=0, description="매칭 필드 수")


class QueryQualityMetrics(BaseModel):
    """검색어 품질 분석 결과"""
    original_query: str = Field(..., description="정리된 원본 검색어")
    is_quality_query: bool = Field(..., description="학습 가치가 있는 검색어 여부")
    quality_score: int = Field(default=0, ge=0, le=100, description="품질 점수 (0-100)")
    metrics: QueryMetrics = Field(default_factory=QueryMetrics, description="매칭 지표")
    failure_reasons: List[str] = Field(default_factory=list, description="실패 사유 목록")


class QueryCandidate(BaseModel):
    """인기 검색어 집계 후보"""
    query: str = Field(..., description="소문자 검색어")
    type: Optional[str] = Field(None, description="최상위 히트의 문서 유형")


class AnalysisResult(BaseModel):
    """analyze 출력"""
    metrics: QueryQualityMetrics = Field(..., description="품질 분석 결과")
    queries_to_track: List[QueryCandidate] = Field(default_factory=list, description="집계할 검색어 후보")

    @property
    def should_track(self) -> bool:
        """인기 검색어 집계 대상 여부"""
        return self.metrics.is_quality_query and bool(self.queries_to_track)


class AnalysisOutcome(BaseModel):
    """try_analyze 출력 (성공 결과 또는 오류)"""
    result: Optional[AnalysisResult] = Field(None, description="분석 결과")
    error: Optional[str] = Field(None, description="오류 메시지")
    error_type: Optional[str] = Field(None, description="오류 유형")

    @property
    def ok(self) -> bool:
        return self.result is not None

    def unwrap_or(self, default: AnalysisResult) -> AnalysisResult:
        """성공 시 결과, 실패 시 기본값 반환"""
        return self.result if self.result is not None else default


class PopularQuerySuggestion(BaseModel):
    """인기 검색어 제안"""
    query: str = Field(..., description="검색어")
    type: str = Field(..., description="문서 유형")
    count: int = Field(default=0, ge=0, description="집계 횟수")
