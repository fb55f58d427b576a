"""Pydantic configuration models with validation."""

from __future__ import annotations

import re
from typing import Any, Literal, Optional

from pydantic import (
    AliasChoices,
    AliasPath,
    BaseModel,
    Field,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

from linkhop.domain.entities.routing import DEFAULT_RECONSTRUCTION_TEMPLATE

Environment = Literal["dev", "test", "prod"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]
LogFormat = Literal["json", "console"]
ElevatedTier = Literal["preferred", "trusted"]
StrategyName = Literal[
    "variable_assignment",
    "anchor_token",
    "redirect_payload",
    "layered_payload",
]


def _validate_patterns(patterns: list[str]) -> list[str]:
    """Reject regexes that do not compile, at load time instead of per request."""
    for pattern in patterns:
        try:
            re.compile(pattern)
        except re.error as e:
            raise ValueError(f"Invalid regex {pattern!r}: {e}") from e
    return patterns


class HostRuleConfig(BaseModel):
    """One entry of the ordered host tier list (first match wins)."""

    name: str = Field(description="Display name for the matched server.")
    pattern: str = Field(description="Regex matched against the link URL.")
    tier: ElevatedTier = Field(default="trusted")

    @field_validator("pattern")
    @classmethod
    def _validate_pattern(cls, v: str) -> str:
        _validate_patterns([v])
        return v


class ResolverConfig(BaseModel):
    """Hop chain settings (YAML section: resolver.*)."""

    max_hops: int = Field(
        default=2,
        description="Page fetches per chain; the last one is the terminal page.",
    )
    hop_timeout_seconds: float = Field(
        default=8.0,
        description="Timeout for a single hop fetch (seconds).",
    )
    variable_names: list[str] = Field(
        default=["url"],
        description="JS variable names holding the next-hop URL.",
    )
    token_query_key: str = Field(
        default="token",
        description="Query key marking tokenized next-hop anchors.",
    )
    strategies: list[StrategyName] = Field(
        default=["variable_assignment", "anchor_token"],
        description="Extraction strategies, tried in this order.",
    )
    reconstruction_url_template: str = Field(
        default=DEFAULT_RECONSTRUCTION_TEMPLATE,
        description="Start URL template for legacy id-only routing tokens.",
    )
    archive_extensions: list[str] = Field(
        default=[".zip"],
        description="Terminal title suffixes that mark download-only archives.",
    )

    @field_validator("max_hops")
    @classmethod
    def _validate_max_hops(cls, v: int) -> int:
        if v < 1:
            raise ValueError("max_hops must be >= 1")
        return v

    @field_validator("hop_timeout_seconds")
    @classmethod
    def _validate_hop_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("hop_timeout_seconds must be > 0")
        return v

    @field_validator("strategies")
    @classmethod
    def _validate_strategies(cls, v: list[str]) -> list[str]:
        if not v:
            raise ValueError("at least one extraction strategy is required")
        return v

    @field_validator("reconstruction_url_template")
    @classmethod
    def _validate_template(cls, v: str) -> str:
        if "{id}" not in v:
            raise ValueError("reconstruction_url_template must contain '{id}'")
        return v


class ClassifierConfig(BaseModel):
    """Terminal page classification (YAML section: classifier.*)."""

    button_selector: str = Field(
        default="a.btn",
        description="CSS selector for action-button anchors.",
    )
    exclusion_patterns: list[str] = Field(
        default=[r"telegram", r"discord", r"whatsapp"],
        description="Button texts matching any of these are discarded.",
    )
    host_rules: list[HostRuleConfig] = Field(
        default_factory=lambda: [
            HostRuleConfig(name="V-Cloud", pattern=r"vcloud\.", tier="preferred"),
            HostRuleConfig(name="Hub-Cloud", pattern=r"hubcloud\.", tier="preferred"),
            HostRuleConfig(name="FSL Server", pattern=r"fsl\.blockxpiracy\.org"),
            HostRuleConfig(name="Pixeldrain", pattern=r"pixeldrain\.(?:dev|com)"),
            HostRuleConfig(name="Pub-Dev", pattern=r"pub-.*?\.dev"),
        ],
        description="Ordered host regexes; first match assigns the tier.",
    )
    blacklist_patterns: list[str] = Field(
        default=[r"10gbps", r"gpdl2\.hubcdn\.fans", r"server.*:.*10gbps"],
        description="Label/URL regexes that demote a candidate to blacklisted.",
    )

    @field_validator("exclusion_patterns", "blacklist_patterns")
    @classmethod
    def _validate_regexes(cls, v: list[str]) -> list[str]:
        return _validate_patterns(v)


class AggregatorConfig(BaseModel):
    """Quality and unit grouping (YAML section: aggregator.*)."""

    batch_keywords: list[str] = Field(
        default=["batch", "zip", "complete", "season"],
        description="Label/section keywords that mark a batch unit.",
    )
    default_size_ranges: dict[str, str] = Field(
        default={
            "2160p": "8–12GB",
            "4k": "8–12GB",
            "1080p": "2–4GB",
            "720p": "1–2GB",
            "480p": "500–800MB",
        },
        description="Fallback size estimate per normalized quality.",
    )
    unknown_size: str = Field(
        default="Unknown",
        description="Size estimate when neither sizes nor a default exist.",
    )


class AppConfig(BaseModel):
    """Validated linkhop settings.

    The engine sections (resolver, classifier, aggregator) are nested models.
    HTTP and logging settings are flat fields that also accept the sectioned
    YAML form (`http.timeout_seconds`, `logging.level`) through aliases.
    Layering happens in `load.py`; this model only validates the result.
    """

    app_name: str = Field(default="linkhop", description="Application name.")
    environment: Environment = Field(
        default="dev",
        description="dev, test or prod; prod switches logging to JSON.",
    )

    # http.*
    http_timeout_seconds: float = Field(
        default=30.0,
        validation_alias=AliasChoices(
            "http_timeout_seconds",
            AliasPath("http", "timeout_seconds"),
        ),
        description="Client-wide timeout; each hop fetch also has its own.",
    )
    http_follow_redirects: bool = Field(
        default=True,
        validation_alias=AliasChoices(
            "http_follow_redirects",
            AliasPath("http", "follow_redirects"),
        ),
        description="Follow 3xx responses inside a single hop fetch.",
    )
    http_user_agent: str = Field(
        default=(
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
        ),
        validation_alias=AliasChoices(
            "http_user_agent",
            AliasPath("http", "user_agent"),
        ),
        description="Browser User-Agent sent on every hop fetch.",
    )
    http_max_retries: int = Field(
        default=0,
        validation_alias=AliasChoices(
            "http_max_retries",
            AliasPath("http", "max_retries"),
        ),
        description="Retries on 429/503 per request (0 = fail fast).",
    )
    http_backoff_base: float = Field(
        default=1.0,
        validation_alias=AliasChoices(
            "http_backoff_base",
            AliasPath("http", "backoff_base"),
        ),
        description="Base delay for exponential retry backoff (seconds).",
    )
    http_max_backoff: float = Field(
        default=10.0,
        validation_alias=AliasChoices(
            "http_max_backoff",
            AliasPath("http", "max_backoff"),
        ),
        description="Upper bound for a single retry delay (seconds).",
    )

    # logging.*
    log_level: LogLevel = Field(
        default="INFO",
        validation_alias=AliasChoices(
            "log_level",
            AliasPath("logging", "level"),
        ),
        description="Level for linkhop and uvicorn loggers.",
    )
    log_format: Optional[LogFormat] = Field(
        default=None,
        validation_alias=AliasChoices(
            "log_format",
            AliasPath("logging", "format"),
        ),
        description="console or json; unset means json in prod, console elsewhere.",
    )

    resolver: ResolverConfig = Field(default_factory=ResolverConfig)
    classifier: ClassifierConfig = Field(default_factory=ClassifierConfig)
    aggregator: AggregatorConfig = Field(default_factory=AggregatorConfig)

    @field_validator("http_timeout_seconds")
    @classmethod
    def _validate_http_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("http_timeout_seconds must be > 0")
        return v

    @field_validator("http_max_retries")
    @classmethod
    def _validate_max_retries(cls, v: int) -> int:
        if v < 0:
            raise ValueError("http_max_retries must be >= 0")
        return v

    @model_validator(mode="after")
    def _derive_log_format(self) -> "AppConfig":
        if self.log_format is None:
            self.log_format = "json" if self.environment == "prod" else "console"
        return self

    def to_sectioned_dict(self) -> dict[str, Any]:
        """The settings in the same nested layout `config.yaml` uses."""
        return {
            "app_name": self.app_name,
            "environment": self.environment,
            "http": {
                "timeout_seconds": self.http_timeout_seconds,
                "follow_redirects": self.http_follow_redirects,
                "user_agent": self.http_user_agent,
                "max_retries": self.http_max_retries,
                "backoff_base": self.http_backoff_base,
                "max_backoff": self.http_max_backoff,
            },
            "logging": {"level": self.log_level, "format": self.log_format},
            "resolver": self.resolver.model_dump(),
            "classifier": self.classifier.model_dump(),
            "aggregator": self.aggregator.model_dump(),
        }


class EnvOverrides(BaseSettings):
    """`LINKHOP_*` variables; unset ones stay None and are not merged.

    Names are flat, for example:
    - LINKHOP_HTTP_TIMEOUT_SECONDS
    - LINKHOP_HTTP_MAX_RETRIES
    - LINKHOP_LOG_LEVEL
    - LINKHOP_MAX_HOPS
    - LINKHOP_HOP_TIMEOUT_SECONDS
    """

    model_config = SettingsConfigDict(
        env_prefix="LINKHOP_",
        extra="ignore",
        case_sensitive=False,
    )

    app_name: Optional[str] = None
    environment: Optional[Environment] = None

    http_timeout_seconds: Optional[float] = None
    http_follow_redirects: Optional[bool] = None
    http_user_agent: Optional[str] = None
    http_max_retries: Optional[int] = None

    log_level: Optional[LogLevel] = None
    log_format: Optional[LogFormat] = None

    max_hops: Optional[int] = None
    hop_timeout_seconds: Optional[float] = None
    reconstruction_url_template: Optional[str] = None

    def to_update_dict(self) -> dict[str, Any]:
        """Values set in the environment, keyed by their flat names."""
        return self.model_dump(exclude_none=True)
