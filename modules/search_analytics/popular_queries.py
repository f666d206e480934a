"""인기 검색어 집계

품질 분석을 통과한 검색어 후보를 Redis sorted set에 집계하고
자동완성용 인기 검색어 제안을 조회
"""

from typing import List, Optional, Protocol, Tuple, Union

import redis.asyncio as redis
import structlog
from redis.exceptions import RedisError

from infra.core.config import Settings, get_settings

from .collection_profile import profile_for_type
from .documents import CONTENT_TYPES, QUESTION_TYPE
from .orchestrator import SearchAnalyticsOrchestrator
from .schema import AnalysisResult, PopularQuerySuggestion, QueryCandidate, SearchResult

logger = structlog.get_logger(__name__)

QUERY_TYPE_SEPARATOR = ": "
DEFAULT_QUERY_TYPE = "content"
ALL_TYPES = "all"


def format_popular_query(query: str, query_type: Optional[str] = None) -> str:
    """집계 키 형식: '<type>: <query>'"""
    return f"{query_type or DEFAULT_QUERY_TYPE}{QUERY_TYPE_SEPARATOR}{query}"


def parse_popular_query(raw: str) -> Tuple[str, str]:
    """집계 키를 (검색어, 유형)으로 분리

    알 수 없는 유형 접두어는 'content'로 취급한다.
    """
    parts = raw.split(QUERY_TYPE_SEPARATOR)
    prefix = parts[0]
    if prefix == QUESTION_TYPE or prefix in CONTENT_TYPES:
        query_type = prefix
    else:
        query_type = DEFAULT_QUERY_TYPE
    query = QUERY_TYPE_SEPARATOR.join(parts[1:]) if len(parts) > 1 else parts[0]
    return query, query_type


def _matches_type(query_type: str, requested: str) -> bool:
    if requested == ALL_TYPES:
        return True
    if requested == DEFAULT_QUERY_TYPE:
        return query_type != QUESTION_TYPE
    return query_type == requested


def _matches_prefix(query: str, prefix: str) -> bool:
    prefix = prefix.strip().lower()
    if not prefix:
        return True
    return query.startswith(prefix) or any(word.startswith(prefix) for word in query.split())


class PopularQuerySink(Protocol):
    """인기 검색어 집계 대상"""

    async def record(self, candidate: QueryCandidate, user_id: Optional[str] = None) -> bool:
        ...


class RedisPopularQuerySink:
    """Redis sorted set 기반 인기 검색어 집계"""

    def __init__(self, redis_client: "redis.Redis", key: str, scan_limit: int = 1000):
        """
        Args:
            redis_client: decode_responses=True로 생성된 Redis 클라이언트
            key: 집계 sorted set 키
            scan_limit: 제안 조회 시 읽을 최대 항목 수 (인기순)
        """
        self.redis_client = redis_client
        self.key = key
        self.scan_limit = scan_limit

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "RedisPopularQuerySink":
        """설정으로 Redis 클라이언트를 생성하여 집계기 구성"""
        settings = settings or get_settings()
        client = redis.from_url(
            settings.redis_url,
            password=settings.redis_password,
            db=settings.redis_db,
            decode_responses=True,
            socket_connect_timeout=5,
            socket_timeout=5,
            max_connections=settings.redis_max_connections
        )
        return cls(client, settings.popular_queries_key)

    async def record(self, candidate: QueryCandidate, user_id: Optional[str] = None) -> bool:
        """검색어 후보 집계 (실패해도 예외를 전파하지 않음)

        Returns:
            집계 성공 여부
        """
        member = format_popular_query(candidate.query, candidate.type)
        try:
            await self.redis_client.zincrby(self.key, 1, member)
        except RedisError as e:
            logger.error("인기 검색어 집계 실패", member=member, user_id=user_id, error=str(e))
            return False

        logger.debug(
            "인기 검색어 집계",
            member=member,
            collection=profile_for_type(candidate.type).name,
            user_id=user_id
        )
        return True

    async def get_suggestions(
        self,
        prefix: str,
        query_type: str = DEFAULT_QUERY_TYPE,
        limit: int = 5
    ) -> List[PopularQuerySuggestion]:
        """접두어로 시작하는 인기 검색어 (집계 횟수 내림차순)

        Args:
            prefix: 입력 중인 검색어
            query_type: 'all', 'content'(질문 제외) 또는 개별 문서 유형
            limit: 최대 제안 수
        """
        try:
            entries = await self.redis_client.zrevrange(self.key, 0, self.scan_limit - 1, withscores=True)
        except RedisError as e:
            logger.error("인기 검색어 조회 실패", prefix=prefix[:50], error=str(e))
            return []

        suggestions: List[PopularQuerySuggestion] = []
        for member, score in entries:
            query, parsed_type = parse_popular_query(member)
            if not _matches_type(parsed_type, query_type) or not _matches_prefix(query, prefix):
                continue
            suggestions.append(PopularQuerySuggestion(query=query, type=parsed_type, count=int(score)))
            if len(suggestions) >= limit:
                break

        return suggestions

    async def close(self) -> None:
        """Redis 연결 해제"""
        await self.redis_client.aclose()


async def track_search(
    orchestrator: SearchAnalyticsOrchestrator,
    query: str,
    result: Union[SearchResult, dict],
    sink: PopularQuerySink,
    user_id: Optional[str] = None
) -> AnalysisResult:
    """검색 요청 분석 후 품질 검색어만 인기 검색어로 집계

    Returns:
        분석 결과 (집계 여부와 무관)
    """
    # 분석과 집계 로그에 요청 컨텍스트를 바인딩
    with structlog.contextvars.bound_contextvars(collection=orchestrator.profile.name, user_id=user_id):
        return await _track_analysis(orchestrator.safe_analyze(query, result), sink, user_id)


async def _track_analysis(
    analysis: AnalysisResult,
    sink: PopularQuerySink,
    user_id: Optional[str]
) -> AnalysisResult:
    if not analysis.should_track:
        logger.debug(
            "인기 검색어 집계 제외",
            query=analysis.metrics.original_query[:50],
            failure_reasons=analysis.metrics.failure_reasons
        )
        return analysis

    recorded = 0
    for candidate in analysis.queries_to_track:
        if await sink.record(candidate, user_id=user_id):
            recorded += 1

    logger.info(
        "인기 검색어 집계 완료",
        query=analysis.metrics.original_query[:50],
        candidates=len(analysis.queries_to_track),
        recorded=recorded
    )
    return analysis
