import json
import logging
import os
from typing import Optional

from pydantic import BaseModel, Field, validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class ExtractorConfig(BaseModel):
    binary: str = Field(default="yt-dlp", description="yt-dlp executable")
    url_timeout: float = Field(default=60.0, gt=0, description="Timeout for media URL lookups in seconds")
    title_timeout: float = Field(default=15.0, gt=0, description="Timeout for title lookups in seconds")
    metadata_timeout: float = Field(default=30.0, gt=0, description="Timeout for metadata lookups in seconds")
    max_output_bytes: int = Field(default=1024 * 1024, ge=1024, description="Max captured stdout/stderr size")
    socket_timeout: int = Field(default=10, ge=1, description="Socket timeout passed to yt-dlp")
    combined_output: bool = Field(default=True, description="Fetch URL and title with one yt-dlp call")
    no_check_certificates: bool = Field(default=True, description="Pass --no-check-certificates")


class LinkConfig(BaseModel):
    ttl_seconds: int = Field(default=300, ge=1, description="Lifetime of a proxy link")
    cleanup_interval: int = Field(default=60, ge=1, description="Expired link sweep interval in seconds")
    single_use: bool = Field(default=False, description="Evict a link on its first resolution")


class DownloadConfig(BaseModel):
    response_mode: str = Field(default="direct", description="'direct' returns the media URL, 'proxy' a /file link")
    title_max_length: int = Field(default=80, ge=8, description="Max title length used in filenames")

    @validator('response_mode')
    def validate_response_mode(cls, v):
        if v.lower() not in ('direct', 'proxy'):
            raise ValueError("response_mode must be 'direct' or 'proxy'")
        return v.lower()


class ProxyConfig(BaseModel):
    timeout_seconds: float = Field(default=30.0, gt=0, description="Upstream read timeout")
    connect_timeout: float = Field(default=10.0, gt=0, description="Upstream connect timeout")
    chunk_size: int = Field(default=64 * 1024, ge=1024, description="Streaming chunk size")
    allow_raw_urls: bool = Field(default=True, description="Enable GET /proxy?url=")


class RedisConfig(BaseModel):
    enabled: bool = Field(default=False, description="Use Redis for links and caches")
    url: str = Field(default="redis://redis:6379", description="Redis connection URL")
    socket_timeout: int = Field(default=5, description="Redis socket timeout in seconds")


class SecurityConfig(BaseModel):
    enable_ssrf_protection: bool = Field(default=True, description="Enable SSRF protection for /proxy")
    allow_private_ips: bool = Field(default=False, description="Allow private IP ranges")
    allow_localhost: bool = Field(default=False, description="Allow localhost access")


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO", description="Log level (DEBUG, INFO, WARNING, ERROR)")
    format: str = Field(default="%(message)s", description="Log format")
    enable_rich: bool = Field(default=True, description="Enable rich console logging")

    @validator('level')
    def validate_log_level(cls, v):
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v.upper()


class I18nConfig(BaseModel):
    default_locale: str = Field(default="en", description="Default locale")
    supported_locales: list = Field(default=["en", "ja"], description="Supported locales")


class ApiConfig(BaseModel):
    title: str = Field(default="YouFaceInsta Backend API", description="API title")
    version: str = Field(default="1.0.0", description="API version")
    cors_origins: list = Field(default=["*"], description="CORS allowed origins")
    debug: bool = Field(default=False, description="Enable debug mode")
    host: str = Field(default="0.0.0.0", description="Bind address")
    port: int = Field(default=3000, description="Bind port")


class Config(BaseSettings):
    """Main configuration model. Environment variables use '__' between sections."""

    model_config = SettingsConfigDict(env_nested_delimiter="__", extra="ignore")

    extractor: ExtractorConfig = Field(default_factory=ExtractorConfig)
    links: LinkConfig = Field(default_factory=LinkConfig)
    download: DownloadConfig = Field(default_factory=DownloadConfig)
    proxy: ProxyConfig = Field(default_factory=ProxyConfig)
    redis: RedisConfig = Field(default_factory=RedisConfig)
    security: SecurityConfig = Field(default_factory=SecurityConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    i18n: I18nConfig = Field(default_factory=I18nConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)

    @classmethod
    def load_from_file(cls, config_path: str) -> "Config":
        """Load configuration from a JSON file; sections it omits still read the environment"""
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                config_data = json.load(f)
            logger.info(f"Configuration loaded from {config_path}")
            return cls(**config_data)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to load config from {config_path}: {str(e)}")
            logger.info("Using default configuration")
            return cls()


def load_config(config_path: Optional[str] = None) -> Config:
    """Load configuration with priority: config file > env vars > defaults"""
    config_path = config_path or os.getenv("CONFIG_PATH", "config.json")

    if os.path.exists(config_path):
        return Config.load_from_file(config_path)

    logger.debug(f"Config file not found at {config_path}, using environment")
    return Config()


config = load_config()
