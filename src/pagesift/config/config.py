"""
Configuration management for PageSift using Pydantic.

Every scoring heuristic keeps its coefficients here so that each one can be
tuned and tested on its own.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any, ClassVar, List, cast

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# --- Setup Logging ---
log = logging.getLogger(__name__)

# --- Nested Configuration Models ---


class RegionScoringWeights(BaseModel):
    """Coefficients of the content region score."""

    optimal_min_chars: int = 200
    optimal_max_chars: int = 2000
    min_chars: int = 100
    optimal_length_bonus: float = 0.4
    length_bonus: float = 0.2
    text_density_weight: float = 0.3
    low_link_density: float = 0.3
    low_link_density_bonus: float = 0.2
    high_link_density: float = 0.7
    high_link_density_penalty: float = 0.3
    structured_data_bonus: float = 0.2
    main_bonus: float = 0.3
    ad_or_navigation_penalty: float = 0.5
    sidebar_penalty: float = 0.2
    keep_above: float = Field(default=0.1, description="Regions at or below this score are discarded.")


class ExtractionSettings(BaseModel):
    """Input validation and main-content extraction."""

    min_html_length: int = Field(default=100, description="Shorter input is treated as empty.")
    max_html_length: int = Field(default=10_000_000, description="Size ceiling in characters.")
    readability_retry_length: int = Field(default=500, description="Readability minimum article length.")
    readability_min_text_length: int = Field(
        default=25, description="Readability output shorter than this counts as no content."
    )
    min_main_region_score: float = Field(default=0.3, ge=0.0, le=1.0)
    min_region_score: float = Field(default=0.2, ge=0.0, le=1.0)
    region_min_chars: int = Field(default=100, description="Regions shorter than this skip the quality pre-check.")
    region_quality_floor: float = Field(default=0.3, ge=0.0, le=1.0)
    region_sentiment_floor: float = Field(default=0.2, ge=0.0, le=1.0)
    extra_boilerplate_selectors: List[str] = Field(default_factory=list)
    min_markdown_length: int = Field(default=50, description="Cleaned Markdown shorter than this is reported as too short.")
    region_weights: RegionScoringWeights = Field(default_factory=RegionScoringWeights)

    @field_validator("max_html_length")
    @classmethod
    def validate_ceiling(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("max_html_length must be positive")
        return v


class MarkdownSettings(BaseModel):
    """HTML to Markdown conversion and artifact cleanup."""

    max_link_url_length: int = Field(
        default=150, description="Longer hrefs degrade to plain text in both conversion and cleanup."
    )
    max_table_columns: int = 5
    max_table_rows: int = 10
    max_table_header_length: int = 30
    max_sample_cell_length: int = 50
    min_heading_length: int = 3


class QualityWeights(BaseModel):
    """Coefficients of the 0-100 chunk quality score."""

    base: int = 50
    sweet_spot_min_words: int = 30
    sweet_spot_max_words: int = 300
    short_min_words: int = 10
    long_words: int = 500
    sweet_spot_bonus: int = 20
    short_bonus: int = 10
    very_short_penalty: int = 25
    very_long_penalty: int = 10
    digit_bonus: int = 10
    proper_noun_bonus: int = 10
    structure_bonus: int = 15
    min_sentence_terminators: int = 2
    rich_vocabulary_ratio: float = 0.7
    rich_vocabulary_bonus: int = 10
    poor_vocabulary_ratio: float = 0.3
    poor_vocabulary_penalty: int = 15
    promotional_penalty: int = 8
    navigation_penalty: int = 6
    metadata_penalty: int = 4
    loading_penalty: int = 15
    repetition_min_count: int = 3
    repetition_word_ratio: float = 0.1
    repetition_share: float = 0.3
    repetition_penalty: int = 20
    informational_bonus: int = 8
    factual_bonus: int = 10


class QualityConfig(BaseModel):
    """Configuration for chunk quality gating."""

    min_score: int = Field(default=25, ge=0, le=100, description="Chunks scoring below this are dropped.")
    weights: QualityWeights = Field(default_factory=QualityWeights)


class DensityWeights(BaseModel):
    """Coefficients of the information density score. All non-negative so the score is monotonic."""

    informativeness: float = Field(default=20.0, ge=0)
    per_entity: float = Field(default=2.0, ge=0)
    per_number: float = Field(default=1.0, ge=0)
    vocabulary_ratio: float = 0.6
    vocabulary_bonus: float = Field(default=10.0, ge=0)
    structure_bonus: float = Field(default=5.0, ge=0)
    keyword_density: float = 0.3
    keyword_density_bonus: float = Field(default=8.0, ge=0)
    high_threshold: float = 20.0
    medium_threshold: float = 10.0


class ClassifierConfig(BaseModel):
    """Configuration for entity extraction and content classification."""

    spacy_model: str = Field(default="en_core_web_sm", description="spaCy pipeline used for entities and sentences.")
    max_key_entities: int = 12
    max_key_terms: int = 8
    domain_match_floor: int = Field(default=1, description="A domain wins only with more matches than this.")
    list_line_threshold: int = Field(default=3, description="More bullet lines than this marks list structure.")
    density: DensityWeights = Field(default_factory=DensityWeights)


class ChunkingConfig(BaseModel):
    """Configuration for semantic chunking."""

    max_chunk_words: int = Field(default=700, gt=0, description="Base word budget per chunk.")
    high_quality_score: int = 70
    medium_quality_score: int = 50
    low_quality_score: int = 30
    high_quality_multiplier: float = 1.4
    medium_quality_multiplier: float = 1.2
    low_quality_multiplier: float = 0.8
    near_duplicate_threshold: float = Field(default=0.85, ge=0.0, le=1.0)


class CircuitBreakerConfig(BaseModel):
    failure_threshold: int = 5
    recovery_timeout_seconds: float = 300.0


class SummarizationConfig(BaseModel):
    """Configuration for the summarization backend and the multi-stage summarizer."""

    models: List[str] = Field(
        default=[
            "sshleifer/distilbart-cnn-6-6",
            "sshleifer/distilbart-cnn-12-6",
            "facebook/bart-large-cnn",
        ],
        description="Candidate models, tried in order at initialization.",
    )
    init_timeout: float = Field(default=30.0, gt=0, description="Seconds allowed for loading one model.")
    pass_timeout: float = Field(default=30.0, gt=0, description="Seconds allowed for one summarization call.")
    document_timeout: float = Field(default=120.0, gt=0, description="Seconds allowed for a whole document.")
    max_attempts: int = Field(default=2, ge=1)
    retry_wait_seconds: float = Field(default=1.0, ge=0)
    min_input_chars: int = 50
    min_validation_score: int = Field(default=60, description="Summaries scoring below this are rejected.")
    min_output_chars: int = 20
    high_quality_score: int = Field(default=70, description="Chunks scoring at least this use the high tier.")
    medium_quality_score: int = Field(default=50, description="Chunks scoring at least this use the medium tier.")
    high_quality_min_words: int = 300
    medium_quality_min_words: int = 500
    high_quality_target: int = 70
    high_quality_data_target: int = 90
    medium_quality_target: int = 60
    medium_quality_list_target: int = 50
    low_quality_target: int = 40
    circuit_breaker: CircuitBreakerConfig = Field(default_factory=CircuitBreakerConfig)

    @field_validator("models")
    @classmethod
    def validate_models(cls, v: List[str]) -> List[str]:
        if not v:
            raise ValueError("models must contain at least one candidate")
        return v


class MonitoringConfig(BaseModel):
    """Configuration for logging."""

    log_level: str = Field(default="INFO", description="Logging level (e.g., DEBUG, INFO, WARNING).")
    log_file: str | None = Field(default=None, description="Path to log file. If None, logs to console.")

    @field_validator("log_file", mode="before")
    @classmethod
    def create_parent_dir(cls, v: str | Path | None) -> str | None:
        if v is None:
            return None
        path = Path(v)
        path.parent.mkdir(parents=True, exist_ok=True)
        return str(path)


# --- Main Configuration Class ---


class Config(BaseSettings):
    project_name: str = "PageSift"
    version: str = "0.1.0"
    extraction: ExtractionSettings = Field(default_factory=ExtractionSettings)
    markdown: MarkdownSettings = Field(default_factory=MarkdownSettings)
    quality: QualityConfig = Field(default_factory=QualityConfig)
    classifier: ClassifierConfig = Field(default_factory=ClassifierConfig)
    chunking: ChunkingConfig = Field(default_factory=ChunkingConfig)
    summarization: SummarizationConfig = Field(default_factory=SummarizationConfig)
    monitoring: MonitoringConfig = Field(default_factory=MonitoringConfig)

    model_config = SettingsConfigDict(env_prefix="PAGESIFT_", env_nested_delimiter="__", case_sensitive=False)

    @classmethod
    def from_yaml(cls, path: Path) -> Config:
        log.debug("Loading configuration from YAML file: %s", path)
        if not path.is_file():
            raise FileNotFoundError(f"Configuration file not found or is not a file: {path}")
        with open(path, "r", encoding="utf-8") as f:
            yaml_data = yaml.safe_load(f)
        if not yaml_data:
            log.warning("Configuration file is empty: %s. Using default settings.", path)
            return cls.model_validate({})
        return cls.model_validate(yaml_data)


def find_config_file() -> Path | None:
    current_dir = Path.cwd()
    for path in (current_dir / "pagesift.yaml", current_dir / "pagesift.yml", current_dir / "config.yaml"):
        if path.exists():
            return path
    return None


# --- Lazy Configuration Loader ---


class LazyConfig:
    """
    A proxy for the Config object that delays its loading and validation
    until an attribute is first accessed.
    """

    _config: ClassVar[Config | None] = None
    _lock: ClassVar[threading.Lock] = threading.Lock()

    def __getattr__(self, name: str) -> Any:
        if self.__class__._config is None:
            with self.__class__._lock:
                if self.__class__._config is None:
                    self.__class__._config = self._load_config_with_fallback()
        return getattr(self.__class__._config, name)

    def _load_config_with_fallback(self) -> Config:
        config_path = find_config_file()
        if config_path:
            try:
                log.info("Lazy loading configuration from: %s", config_path)
                return Config.from_yaml(config_path)
            except (ValidationError, FileNotFoundError, yaml.YAMLError) as e:
                log.error(
                    "Failed to load or validate configuration from '%s': %s. Falling back to default settings.",
                    config_path,
                    e,
                    exc_info=log.getEffectiveLevel() <= logging.DEBUG,
                )
        else:
            log.info("No config file found. Using default settings for lazy load.")

        try:
            return Config()
        except ValidationError as e:
            log.critical("FATAL: Default configuration is invalid: %s", e, exc_info=True)
            raise RuntimeError(f"Default configuration is invalid, cannot start: {e}") from e


# --- Global Settings Instance ---
settings: "Config" = cast("Config", LazyConfig())
