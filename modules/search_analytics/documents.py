"""Search 히트 문서 스키마

컬렉션 유형별 문서 레코드 (콘텐츠 / 질문)
오타 보정 시 문서 필드는 text_value() 접근자로만 읽는다
"""

from typing import Any, Dict, List, Literal, Optional, Union

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = structlog.get_logger(__name__)

CONTENT_TYPES = ("book", "topic", "subtopic", "note")
QUESTION_TYPE = "question"


class BaseDocument(BaseModel):
    """검색 문서 공통 필드"""
    # 숫자 ID, 숫자 학년 등은 문자열로 받아들인다
    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    id: Optional[str] = Field(None, description="문서 ID")
    title: Optional[str] = Field(None, description="제목")
    slug: Optional[str] = Field(None, description="슬러그")

    def text_value(self, field_name: str) -> Optional[str]:
        """필드 값을 텍스트로 반환

        배열은 공백으로 연결하고, 문자열이 아닌 값은 None.
        """
        if field_name in type(self).model_fields:
            value = getattr(self, field_name)
        else:
            value = (self.model_extra or {}).get(field_name)

        if isinstance(value, (list, tuple)):
            return " ".join(str(item) for item in value if isinstance(item, (str, int, float)))
        if isinstance(value, str):
            return value
        return None


class ContentDocument(BaseDocument):
    """콘텐츠 컬렉션 문서 (책, 토픽, 서브토픽, 노트)"""
    type: Literal["book", "topic", "subtopic", "note"]
    description: Optional[str] = Field(None, description="설명")
    category: Optional[str] = Field(None, description="카테고리")
    difficulty_level: Optional[str] = Field(None, alias="difficultyLevel", description="난이도")
    grades: List[str] = Field(default_factory=list, description="학년")
    author_id: Optional[str] = Field(None, alias="authorId", description="작성자 ID")


class QuestionDocument(BaseDocument):
    """질문 컬렉션 문서"""
    type: Literal["question"]
    content: Optional[str] = Field(None, description="질문 본문")
    tags: List[str] = Field(default_factory=list, description="태그")
    is_solved: Optional[bool] = Field(None, alias="isSolved", description="해결 여부")
    author_id: Optional[str] = Field(None, alias="authorId", description="작성자 ID")


class GenericDocument(BaseDocument):
    """유형을 알 수 없거나 스키마와 맞지 않는 문서

    값의 형식을 검증하지 않는 필드 → 값 매핑
    """
    id: Any = None
    title: Any = None
    slug: Any = None
    type: Any = None


SearchDocument = Union[ContentDocument, QuestionDocument, GenericDocument]


def parse_document(raw: Dict[str, Any]) -> SearchDocument:
    """type 필드로 문서 스키마를 선택하여 검증

    알려진 유형의 문서가 스키마와 맞지 않으면 GenericDocument로 읽는다.
    """
    doc_type = raw.get("type")
    if doc_type in CONTENT_TYPES:
        schema = ContentDocument
    elif doc_type == QUESTION_TYPE:
        schema = QuestionDocument
    else:
        return GenericDocument.model_validate(raw)

    try:
        return schema.model_validate(raw)
    except ValidationError as e:
        logger.warning(
            "문서 스키마 불일치, 일반 문서로 처리",
            document_type=doc_type,
            document_id=str(raw.get("id"))[:50],
            error_count=e.error_count()
        )
        return GenericDocument.model_validate(raw)
