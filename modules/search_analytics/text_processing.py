"""Search Analytics 텍스트 처리 유틸리티

토큰 분리, 편집 거리 계산, 하이라이트 스니펫 정리
모든 함수는 상태가 없는 순수 함수
"""

import re
from typing import List, Optional, Tuple

# 정규식 패턴
REGEX = {
    # <mark>Value</mark> -> "Value"
    "mark_tag_content": re.compile(r"<mark>([^<]+)</mark>"),
    "html_tags": re.compile(r"<[^>]+>"),
    # 공백, 하이픈, 언더스코어 기준 분리
    "token_split": re.compile(r"[\s\-_]+"),
}

# <mark> 구간을 포함하는 단어의 경계 문자 (공백 외)
WORD_BOUNDARY_CHARS = frozenset("-_<>")


def tokenize(text: str) -> List[str]:
    """텍스트를 단어 토큰으로 분리

    공백/하이픈/언더스코어 연속 구간에서 분리하고 빈 토큰은 제거한다.
    대소문자는 유지한다.

    Args:
        text: 분리할 텍스트

    Returns:
        토큰 목록
    """
    return [token for token in REGEX["token_split"].split(text) if token]


def levenshtein_distance(s1: str, s2: str) -> int:
    """두 문자열의 Levenshtein 편집 거리

    (m+1) x (n+1) 동적 계획법 테이블, 삽입/삭제/치환 비용 1.
    대소문자 정규화는 호출자 책임.
    """
    m = len(s1)
    n = len(s2)
    if m == 0:
        return n
    if n == 0:
        return m

    dp = [[0] * (n + 1) for _ in range(m + 1)]

    for i in range(m + 1):
        dp[i][0] = i
    for j in range(n + 1):
        dp[0][j] = j

    for i in range(1, m + 1):
        for j in range(1, n + 1):
            cost = 0 if s1[i - 1] == s2[j - 1] else 1
            dp[i][j] = min(
                dp[i - 1][j] + 1,         # 삭제
                dp[i][j - 1] + 1,         # 삽입
                dp[i - 1][j - 1] + cost,  # 치환
            )

    return dp[m][n]


def strip_html_tags(snippet: str) -> str:
    """HTML 태그를 제거한 표시용 값"""
    return REGEX["html_tags"].sub("", snippet).strip()


def extract_marked_text(snippet: str) -> Optional[str]:
    """첫 번째 <mark> 태그 내부 텍스트 (없으면 None)"""
    match = REGEX["mark_tag_content"].search(snippet)
    if not match:
        return None
    marked = match.group(1).strip()
    return marked or None


def extract_marked_word(snippet: str) -> Optional[Tuple[str, str]]:
    """첫 번째 <mark> 구간과 그 구간을 포함하는 단어 전체

    Returns:
        (mark 내부 텍스트, mark를 포함하는 단어) 또는 None
    """
    match = REGEX["mark_tag_content"].search(snippet)
    if not match:
        return None
    marked = match.group(1).strip()
    if not marked:
        return None

    # 태그 바깥쪽으로 단어 경계까지 확장
    start = match.start()
    while start > 0 and not _is_word_boundary(snippet[start - 1]):
        start -= 1
    end = match.end()
    while end < len(snippet) and not _is_word_boundary(snippet[end]):
        end += 1

    return marked, f"{snippet[start:match.start()]}{marked}{snippet[match.end():end]}"


def _is_word_boundary(char: str) -> bool:
    return char.isspace() or char in WORD_BOUNDARY_CHARS
