"""
검색 분석 엔진 코어 인프라 모듈

설정 관리와 로깅 초기화 등 공통 인프라 컴포넌트
"""

from .config import Settings, settings, get_settings
from .logging import setup_logging, get_logger

__all__ = [
    # 설정
    "Settings",
    "settings",
    "get_settings",

    # 로깅
    "setup_logging",
    "get_logger",
]
