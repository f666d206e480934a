"""
검색 분석 엔진 전역 설정 및 환경변수 관리

Pydantic Settings를 사용한 타입 안전한 설정 관리
"""

from typing import List, Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """애플리케이션 전역 설정"""

    # 애플리케이션 기본 설정
    app_name: str = Field(default="search-analytics", description="애플리케이션 이름")
    app_version: str = Field(default="1.0.0", description="애플리케이션 버전")
    app_environment: str = Field(default="development", description="실행 환경")
    app_log_level: str = Field(default="INFO", description="로그 레벨")

    # 품질 게이트 설정
    analytics_min_query_length: int = Field(default=2, ge=0, description="최소 검색어 길이")
    analytics_min_results_found: int = Field(default=1, ge=0, description="최소 검색 결과 수")
    analytics_min_token_match_ratio: float = Field(
        default=0.5,
        ge=0.0,
        le=1.0,
        description="최소 토큰 매칭 비율"
    )
    analytics_extra_stop_words: str = Field(
        default="",
        description="기본 불용어에 추가할 단어 목록 (쉼표 구분)"
    )
    analytics_exclude_patterns: str = Field(
        default="",
        description="추가 제외 패턴 정규식 목록 (쉼표 구분)"
    )

    # 품질 점수 가중치
    analytics_weight_token_ratio: float = Field(default=50, description="토큰 매칭 비율 가중치")
    analytics_weight_fields_matched: float = Field(default=10, description="매칭 필드 수 가중치")
    analytics_weight_has_results: float = Field(default=20, description="결과 존재 가중치")

    # Redis 설정 (인기 검색어 집계)
    redis_url: str = Field(default="redis://localhost:6379", description="Redis 연결 URL")
    redis_db: int = Field(default=0, description="Redis 데이터베이스 번호")
    redis_password: Optional[str] = Field(default=None, description="Redis 비밀번호")
    redis_max_connections: int = Field(default=10, description="Redis 최대 연결 수")
    popular_queries_key: str = Field(
        default="search:popular_queries",
        description="인기 검색어 sorted set 키"
    )

    # 로깅 설정
    log_format: str = Field(default="json", description="로그 형식")
    log_file_path: str = Field(default="./logs/search_analytics.log", description="로그 파일 경로")
    log_file_max_size: str = Field(default="10MB", description="로그 파일 최대 크기")
    log_file_backup_count: int = Field(default=5, description="로그 파일 백업 개수")
    log_console_enabled: bool = Field(default=True, description="콘솔 로그 활성화")

    @field_validator("app_environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """환경 설정 검증"""
        valid_environments = ["development", "testing", "staging", "production"]
        if v not in valid_environments:
            raise ValueError(f"Invalid environment: {v}. Must be one of {valid_environments}")
        return v

    @field_validator("app_log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """로그 레벨 검증"""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v.upper()

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """로그 형식 검증"""
        valid_formats = ["json", "console"]
        if v not in valid_formats:
            raise ValueError(f"Invalid log format: {v}. Must be one of {valid_formats}")
        return v

    @property
    def extra_stop_words_list(self) -> List[str]:
        """추가 불용어를 리스트로 반환"""
        return [word.strip().lower() for word in self.analytics_extra_stop_words.split(",") if word.strip()]

    @property
    def exclude_patterns_list(self) -> List[str]:
        """추가 제외 패턴을 리스트로 반환"""
        return [pattern.strip() for pattern in self.analytics_exclude_patterns.split(",") if pattern.strip()]

    @property
    def is_production(self) -> bool:
        """프로덕션 환경 여부"""
        return self.app_environment == "production"

    @property
    def is_testing(self) -> bool:
        """테스트 환경 여부"""
        return self.app_environment == "testing"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


# 전역 설정 인스턴스
settings = Settings()


def get_settings() -> Settings:
    """설정 인스턴스 반환 (의존성 주입용)"""
    return settings
