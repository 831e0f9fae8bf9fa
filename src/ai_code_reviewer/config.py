"""
Configuration Management

시스템 설정 관리
"""

import os
import yaml
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, List
from pathlib import Path
import logging


INCREMENTAL_STRATEGIES = {'previous_head', 'base'}

DEFAULT_MANIFEST_PATHS = [
    "package.json",
    "pyproject.toml",
    "setup.cfg",
    "go.mod",
    "Cargo.toml",
]


def _getenv(*names: str, default: Optional[str] = None) -> Optional[str]:
    """여러 환경 변수 이름 중 처음으로 값이 있는 것을 반환"""
    for name in names:
        value = os.getenv(name)
        if value:
            return value
    return default


def split_csv(value: Optional[str]) -> List[str]:
    """콤마로 구분된 문자열을 trim된 리스트로 변환"""
    if not value:
        return []
    return [part.strip() for part in value.split(',') if part.strip()]


@dataclass
class ModelConfig:
    """LLM 모델 설정"""
    model_id: str = "gpt-4o"
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    temperature: float = 0.2
    max_tokens: int = 700
    top_p: float = 1.0
    timeout_seconds: int = 120


@dataclass
class GitHubConfig:
    """GitHub API 설정"""
    token: Optional[str] = None
    api_base_url: str = "https://api.github.com"
    timeout_seconds: int = 30
    max_file_bytes: int = 1024 * 1024
    max_concurrent_fetches: int = 8
    webhook_secret: Optional[str] = None


@dataclass
class ReviewConfig:
    """리뷰 생성 설정"""
    custom_instructions: str = ""
    exclude_patterns: List[str] = field(default_factory=list)
    incremental_strategy: str = "previous_head"
    manifest_paths: List[str] = field(default_factory=lambda: list(DEFAULT_MANIFEST_PATHS))
    max_repo_context_chars: int = 4000
    max_comments_per_file: int = 0  # 0 means unlimited
    drop_unanchored_comments: bool = False
    dry_run: bool = False


@dataclass
class LoggingConfig:
    """로깅 설정"""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file_path: Optional[str] = None
    max_file_size: int = 10 * 1024 * 1024  # 10MB
    backup_count: int = 5


@dataclass
class AppConfig:
    """전체 애플리케이션 설정"""
    model: ModelConfig = field(default_factory=ModelConfig)
    github: GitHubConfig = field(default_factory=GitHubConfig)
    review: ReviewConfig = field(default_factory=ReviewConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    debug: bool = False

    @classmethod
    def from_env(cls) -> "AppConfig":
        """환경 변수에서 설정 로드 (GitHub Actions의 INPUT_* 포함)"""
        model_id = _getenv("MODEL_ID", "OPENAI_API_MODEL", "INPUT_OPENAI_API_MODEL", default="gpt-4o")
        if model_id.startswith("claude-"):
            api_key = _getenv("MODEL_API_KEY", "ANTHROPIC_API_KEY")
        else:
            api_key = _getenv("MODEL_API_KEY", "OPENAI_API_KEY", "INPUT_OPENAI_API_KEY")

        return cls(
            model=ModelConfig(
                model_id=model_id,
                api_key=api_key,
                base_url=_getenv("MODEL_BASE_URL"),
                temperature=float(_getenv("MODEL_TEMPERATURE", default="0.2")),
                max_tokens=int(_getenv("MODEL_MAX_TOKENS", default="700")),
                timeout_seconds=int(_getenv("MODEL_TIMEOUT", default="120")),
            ),
            github=GitHubConfig(
                token=_getenv("GITHUB_TOKEN", "INPUT_GITHUB_TOKEN"),
                api_base_url=_getenv("GITHUB_API_URL", default="https://api.github.com"),
                timeout_seconds=int(_getenv("GITHUB_TIMEOUT", default="30")),
                max_file_bytes=int(_getenv("GITHUB_MAX_FILE_BYTES", default=str(1024 * 1024))),
                max_concurrent_fetches=int(_getenv("GITHUB_MAX_CONCURRENT_FETCHES", default="8")),
                webhook_secret=_getenv("GITHUB_WEBHOOK_SECRET"),
            ),
            review=ReviewConfig(
                custom_instructions=_getenv("CUSTOM_INSTRUCTIONS", "INPUT_CUSTOM_INSTRUCTIONS", default=""),
                exclude_patterns=split_csv(_getenv("EXCLUDE_PATTERNS", "INPUT_EXCLUDE")),
                incremental_strategy=_getenv("INCREMENTAL_STRATEGY", default="previous_head"),
                manifest_paths=split_csv(_getenv("MANIFEST_PATHS")) or list(DEFAULT_MANIFEST_PATHS),
                max_repo_context_chars=int(_getenv("MAX_REPO_CONTEXT_CHARS", default="4000")),
                max_comments_per_file=int(_getenv("MAX_COMMENTS_PER_FILE", default="0")),
                drop_unanchored_comments=_getenv("DROP_UNANCHORED_COMMENTS", default="false").lower() == "true",
                dry_run=_getenv("DRY_RUN", default="false").lower() == "true",
            ),
            logging=LoggingConfig(
                level=_getenv("LOG_LEVEL", default="INFO"),
                format=_getenv("LOG_FORMAT", default="%(asctime)s - %(name)s - %(levelname)s - %(message)s"),
                file_path=_getenv("LOG_FILE"),
                max_file_size=int(_getenv("LOG_MAX_SIZE", default=str(10 * 1024 * 1024))),
                backup_count=int(_getenv("LOG_BACKUP_COUNT", default="5")),
            ),
            debug=_getenv("DEBUG", default="false").lower() == "true",
        )

    @classmethod
    def from_yaml(cls, config_path: str) -> "AppConfig":
        """YAML 파일에서 설정 로드"""
        config_file = Path(config_path)
        if not config_file.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_file, 'r', encoding='utf-8') as f:
            config_data = yaml.safe_load(f) or {}

        review_data = dict(config_data.get('review', {}))
        # 콤마 구분 문자열도 허용
        if isinstance(review_data.get('exclude_patterns'), str):
            review_data['exclude_patterns'] = split_csv(review_data['exclude_patterns'])

        return cls(
            model=ModelConfig(**config_data.get('model', {})),
            github=GitHubConfig(**config_data.get('github', {})),
            review=ReviewConfig(**review_data),
            logging=LoggingConfig(**config_data.get('logging', {})),
            debug=config_data.get('debug', False),
        )

    def validate(self) -> None:
        """설정 유효성 검사"""
        errors = []

        if not self.github.token:
            errors.append("GitHub token is required")

        if not self.model.api_key:
            errors.append("Model API key is required")

        if not self.model.model_id:
            errors.append("Model id is required")

        if self.review.incremental_strategy not in INCREMENTAL_STRATEGIES:
            errors.append(f"Invalid incremental strategy: {self.review.incremental_strategy}")

        if not 0.0 <= self.model.temperature <= 2.0:
            errors.append("Temperature must be between 0.0 and 2.0")

        if self.model.max_tokens <= 0:
            errors.append("Max tokens must be positive")

        if self.github.max_concurrent_fetches <= 0:
            errors.append("Max concurrent fetches must be positive")

        if self.review.max_comments_per_file < 0:
            errors.append("Max comments per file must be non-negative")

        valid_log_levels = {'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'}
        if self.logging.level.upper() not in valid_log_levels:
            errors.append(f"Invalid log level: {self.logging.level}")

        if errors:
            raise ValueError(f"Configuration validation failed: {'; '.join(errors)}")

    def to_dict(self) -> Dict[str, Any]:
        """설정을 딕셔너리로 변환"""
        return {
            'model': {
                'model_id': self.model.model_id,
                'base_url': self.model.base_url,
                'temperature': self.model.temperature,
                'max_tokens': self.model.max_tokens,
                'top_p': self.model.top_p,
                'timeout_seconds': self.model.timeout_seconds,
                # 보안상 API 키는 제외
            },
            'github': {
                'api_base_url': self.github.api_base_url,
                'timeout_seconds': self.github.timeout_seconds,
                'max_file_bytes': self.github.max_file_bytes,
                'max_concurrent_fetches': self.github.max_concurrent_fetches,
                # 보안상 토큰과 webhook secret은 제외
            },
            'review': {
                'custom_instructions': self.review.custom_instructions,
                'exclude_patterns': list(self.review.exclude_patterns),
                'incremental_strategy': self.review.incremental_strategy,
                'manifest_paths': list(self.review.manifest_paths),
                'max_repo_context_chars': self.review.max_repo_context_chars,
                'max_comments_per_file': self.review.max_comments_per_file,
                'drop_unanchored_comments': self.review.drop_unanchored_comments,
                'dry_run': self.review.dry_run,
            },
            'logging': {
                'level': self.logging.level,
                'format': self.logging.format,
                'file_path': self.logging.file_path,
                'max_file_size': self.logging.max_file_size,
                'backup_count': self.logging.backup_count,
            },
            'debug': self.debug,
        }


def setup_logging(logging_config: LoggingConfig) -> None:
    """로깅 설정"""
    logging.basicConfig(
        level=getattr(logging, logging_config.level.upper()),
        format=logging_config.format,
    )

    # 파일 로깅이 설정된 경우 로테이션 설정
    if logging_config.file_path:
        from logging.handlers import RotatingFileHandler

        handler = RotatingFileHandler(
            logging_config.file_path,
            maxBytes=logging_config.max_file_size,
            backupCount=logging_config.backup_count,
        )
        handler.setFormatter(logging.Formatter(logging_config.format))

        # 루트 로거에 핸들러 추가
        root_logger = logging.getLogger()
        root_logger.addHandler(handler)
