"""Search Analytics 테스트 공통 픽스처"""

from typing import Any, Dict, List, Tuple

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from modules.search_analytics import SearchAnalyticsOrchestrator


class InMemoryRedis:
    """sorted set 명령만 지원하는 Redis 테스트 대역"""

    def __init__(self, fail: bool = False):
        self.sorted_sets: Dict[str, Dict[str, float]] = {}
        self.fail = fail
        self.closed = False

    async def zincrby(self, name: str, amount: float, value: str) -> float:
        if self.fail:
            raise RedisConnectionError("connection refused")
        scores = self.sorted_sets.setdefault(name, {})
        scores[value] = scores.get(value, 0) + amount
        return scores[value]

    async def zrevrange(self, name: str, start: int, end: int, withscores: bool = False) -> List[Any]:
        if self.fail:
            raise RedisConnectionError("connection refused")
        items: List[Tuple[str, float]] = sorted(
            self.sorted_sets.get(name, {}).items(),
            key=lambda item: (-item[1], item[0])
        )
        stop = None if end == -1 else end + 1
        items = items[start:stop]
        return items if withscores else [member for member, _ in items]

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def analytics() -> SearchAnalyticsOrchestrator:
    """기본 옵션 오케스트레이터"""
    return SearchAnalyticsOrchestrator()


@pytest.fixture
def fake_redis() -> InMemoryRedis:
    return InMemoryRedis()


@pytest.fixture
def math_exam_result() -> Dict[str, Any]:
    """'Mat exam 12th' 검색 결과"""
    return {
        "found": 3,
        "hits": [
            {
                "document": {"type": "book", "title": "Mathematics"},
                "textMatchInfo": {"fieldsMatched": 2, "tokensMatched": 2},
                "highlights": [
                    {"field": "title", "snippet": "<mark>Mat</mark>hematics"},
                    {"field": "grades", "snippet": "<mark>12</mark>th Grade"},
                ],
            }
        ],
    }


@pytest.fixture
def failing_redis() -> InMemoryRedis:
    """모든 명령이 연결 오류를 내는 Redis 대역"""
    return InMemoryRedis(fail=True)
