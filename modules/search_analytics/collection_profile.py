"""Search 컬렉션 프로파일

컬렉션 유형별 검색 필드 지원 여부와 필드 가중치를 제공하는 불변 설정

프로파일은 호출자가 검색 백엔드 요청(query_by, query_by_weights)을 구성할 때 쓰는
설정 표면이다. 품질 게이트, 점수 계산, 검색어 재구성은 프로파일을 참조하지 않으며
오케스트레이터와 집계기는 로그 컨텍스트의 컬렉션 이름으로만 사용한다.
"""

from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple

from .documents import CONTENT_TYPES, QUESTION_TYPE


class CollectionProfile:
    """컬렉션 검색 필드 정보"""

    def __init__(
        self,
        name: str,
        searchable_fields: Tuple[str, ...],
        field_weights: Mapping[str, float],
        document_types: Tuple[str, ...] = ()
    ):
        self._name = name
        self._searchable_fields = tuple(searchable_fields)
        self._field_weights = MappingProxyType(dict(field_weights))
        self._document_types = tuple(document_types)

    @property
    def name(self) -> str:
        return self._name

    @property
    def searchable_fields(self) -> Tuple[str, ...]:
        return self._searchable_fields

    @property
    def document_types(self) -> Tuple[str, ...]:
        return self._document_types

    def supports(self, field_name: str) -> bool:
        """검색 대상 필드 여부"""
        return field_name in self._searchable_fields

    def weight_of(self, field_name: str) -> float:
        """필드 가중치 (미등록 필드는 default 가중치, 없으면 1)"""
        return self._field_weights.get(field_name, self._field_weights.get("default", 1))

    def holds_type(self, document_type: Optional[str]) -> bool:
        """해당 문서 유형을 저장하는 컬렉션인지 여부"""
        return document_type in self._document_types

    def search_params(self) -> Dict[str, str]:
        """검색 백엔드 query_by / query_by_weights 파라미터"""
        return {
            "query_by": ",".join(self._searchable_fields),
            "query_by_weights": ",".join(
                _format_weight(self.weight_of(field_name)) for field_name in self._searchable_fields
            ),
        }

    def __repr__(self) -> str:
        return f"CollectionProfile(name={self._name!r}, fields={self._searchable_fields!r})"


def _format_weight(weight: float) -> str:
    return str(int(weight)) if float(weight).is_integer() else str(weight)


CONTENT_PROFILE = CollectionProfile(
    name="ked_content",
    searchable_fields=("title", "slug", "description", "type"),
    field_weights={"title": 4, "slug": 2, "description": 1, "type": 1, "default": 1},
    document_types=CONTENT_TYPES,
)

QUESTION_PROFILE = CollectionProfile(
    name="ked_questions",
    searchable_fields=("title", "slug", "content", "tags"),
    field_weights={"title": 4, "slug": 2, "content": 1, "tags": 2, "default": 1},
    document_types=(QUESTION_TYPE,),
)


def profile_for_type(document_type: Optional[str]) -> CollectionProfile:
    """문서 유형이 속한 컬렉션 프로파일 (질문 외에는 콘텐츠)"""
    if QUESTION_PROFILE.holds_type(document_type):
        return QUESTION_PROFILE
    return CONTENT_PROFILE
