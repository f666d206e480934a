"""
검색 분석 엔진 로깅 설정 및 초기화

structlog 기반 구조화 로깅 설정
분석 요청 컨텍스트(collection, user_id)는 structlog.contextvars로 바인딩되어
요청 중 기록되는 모든 로그에 자동으로 병합된다.
"""

import sys
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, List, Optional

import structlog
from structlog.processors import JSONRenderer
from structlog.stdlib import LoggerFactory
import colorama
from colorama import Fore, Style

from .config import Settings, get_settings

# 크기 단위 (바이트)
SIZE_UNITS = {"KB": 1024, "MB": 1024 ** 2, "GB": 1024 ** 3}

# 콘솔 렌더러에서 이벤트 앞에 표시하는 요청 컨텍스트 키
CONTEXT_KEYS = ("collection", "user_id")


def setup_logging(settings: Optional[Settings] = None) -> None:
    """로깅 시스템을 초기화합니다.

    Args:
        settings: 사용할 설정 (없으면 전역 설정)
    """
    settings = settings or get_settings()

    logging.basicConfig(
        level=getattr(logging, settings.app_log_level),
        format="%(message)s",
        handlers=_build_handlers(settings),
        force=True,
    )
    # Redis 클라이언트 연결 로그는 경고 이상만
    logging.getLogger("redis").setLevel(logging.WARNING)

    if settings.log_format == "json":
        renderer = JSONRenderer(ensure_ascii=False)
    else:
        colorama.init()
        renderer = AnalyticsConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            renderer,
        ],
        context_class=dict,
        logger_factory=LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    get_logger(__name__).info(
        "로깅 시스템이 초기화되었습니다",
        app=settings.app_name,
        environment=settings.app_environment,
        log_level=settings.app_log_level,
        log_format=settings.log_format,
        log_file=settings.log_file_path or None
    )


def _build_handlers(settings: Settings) -> List[logging.Handler]:
    handlers: List[logging.Handler] = []

    if settings.log_file_path:
        log_path = Path(settings.log_file_path)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(RotatingFileHandler(
            filename=log_path,
            maxBytes=_parse_size(settings.log_file_max_size),
            backupCount=settings.log_file_backup_count,
            encoding="utf-8"
        ))

    if settings.log_console_enabled:
        handlers.append(logging.StreamHandler(sys.stdout))

    return handlers


def _parse_size(size_str: str) -> int:
    """'10MB' 형식의 크기 문자열을 바이트로 변환"""
    size_str = size_str.strip().upper()
    for unit, multiplier in SIZE_UNITS.items():
        if size_str.endswith(unit):
            return int(size_str[:-len(unit)]) * multiplier
    return int(size_str)


class AnalyticsConsoleRenderer:
    """개발 환경용 콘솔 렌더러

    출력 형식: ``HH:MM:SS LEVEL [collection user_id] 이벤트 key=value ...``
    """

    LEVEL_COLORS = {
        "debug": Fore.CYAN,
        "info": Fore.GREEN,
        "warning": Fore.YELLOW,
        "error": Fore.RED,
        "critical": Fore.RED + Style.BRIGHT,
    }

    def __call__(self, logger: Any, method_name: str, event_dict: Dict[str, Any]) -> str:
        event_dict = dict(event_dict)
        level = str(event_dict.pop("level", method_name)).lower()
        color = self.LEVEL_COLORS.get(level, "")
        timestamp = str(event_dict.pop("timestamp", ""))
        event = event_dict.pop("event", "")
        event_dict.pop("logger", None)

        context = [str(event_dict.pop(key)) for key in CONTEXT_KEYS if event_dict.get(key) is not None]
        for key in CONTEXT_KEYS:
            event_dict.pop(key, None)

        line = f"{Style.DIM}{timestamp[11:19]}{Style.RESET_ALL} {color}{level.upper():<8}{Style.RESET_ALL}"
        if context:
            line += f" {Fore.MAGENTA}[{' '.join(context)}]{Style.RESET_ALL}"
        line += f" {event}"

        if "query" in event_dict:
            line += f' query="{event_dict.pop("query")}"'
        if event_dict:
            line += " " + " ".join(f"{key}={value}" for key, value in sorted(event_dict.items()))

        return line


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """구조화된 로거를 반환합니다."""
    return structlog.get_logger(name)
