"""Search Analytics 모듈 예외"""


class SearchAnalyticsError(Exception):
    """검색 분석 모듈 기본 예외"""


class AnalyticsConfigError(SearchAnalyticsError):
    """분석 옵션 오류 (오케스트레이터 생성 시점에 발생)"""


class AnalysisError(SearchAnalyticsError):
    """검색어 분석 중 발생한 오류"""
