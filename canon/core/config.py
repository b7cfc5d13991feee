"""Curation config: YAML loader, Pydantic models, and config hashing."""

import hashlib
import json
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel


class ConfigurationError(RuntimeError):
    """Fatal setup problem: missing datastore, unreadable or invalid config."""


# ── Defaults ─────────────────────────────────────────────────────────

FAST_MOVING_KEYWORDS = (
    "ai agents",
    "multimodal",
    "reasoning",
    "open source",
    "frontier models",
    "llm",
    "gpt",
    "claude",
    "gemini",
    "alignment",
    "agi",
    "superintelligence",
    "regulation",
    "safety",
)

DOMAINS: dict[int, str] = {
    1: "AI Technical Capabilities",
    2: "AI & Society",
    3: "Enterprise AI Adoption",
    4: "AI Governance & Oversight",
    5: "Future of Work",
}

DEFAULT_MODEL = "qwen3:8b"


class _ConfigModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


# ── Thresholds ───────────────────────────────────────────────────────


class FreshnessBands(_ConfigModel):
    """Day cut-offs for the 30/20/10 freshness points, strictly increasing."""

    full: int = Field(ge=1)
    partial: int = Field(ge=1)
    minimal: int = Field(ge=1)

    @field_validator("minimal")
    @classmethod
    def increasing(cls, v: int, info) -> int:
        full = info.data.get("full")
        partial = info.data.get("partial")
        if full is not None and partial is not None and not (full < partial < v):
            raise ValueError(
                f"Freshness bands must increase: {full} < {partial} < {v}"
            )
        return v


class StalenessThresholds(_ConfigModel):
    """Day thresholds used by the author, topic, and canon scorers."""

    # Author priority: +80 / +50 / +30 past these ages
    author_critical_days: int = 730
    author_high_days: int = 365
    author_medium_days: int = 180
    fast_moving: FreshnessBands = FreshnessBands(full=60, partial=120, minimal=180)
    regular: FreshnessBands = FreshnessBands(full=90, partial=180, minimal=365)
    # Canon health age buckets: current < 90, moderate < 180, else stale
    current_days: int = 90
    moderate_days: int = 180


# ── Curation Config (top-level) ──────────────────────────────────────


class CurationConfig(_ConfigModel):
    """Engine constants, loaded once and passed explicitly to scorers and pipeline."""

    batch_size: int = Field(default=5, ge=1)
    staleness_thresholds: StalenessThresholds = StalenessThresholds()
    fast_moving_keywords: tuple[str, ...] = FAST_MOVING_KEYWORDS
    domains: dict[int, str] = Field(default_factory=lambda: dict(DOMAINS))
    model: str = DEFAULT_MODEL
    skip_specific_dates: bool = False

    @field_validator("fast_moving_keywords")
    @classmethod
    def lowercase_keywords(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(k.strip().lower() for k in v if k.strip())

    def domain_label(self, domain_id: int | None) -> str:
        return self.domains.get(domain_id, "Unknown")

    def config_hash(self) -> str:
        """SHA-256 of the whole config (canonical JSON)."""
        return _canonical_hash(self.model_dump(mode="json"))


# ── Helpers ──────────────────────────────────────────────────────────


def _canonical_hash(data: dict) -> str:
    """Deterministic SHA-256 hash of a dict via sorted-key JSON."""
    blob = json.dumps(data, sort_keys=True, default=str).encode()
    return hashlib.sha256(blob).hexdigest()


def default_config() -> CurationConfig:
    return CurationConfig()


def load_config(path: str | Path) -> CurationConfig:
    """Load a YAML curation config from disk and return a validated model."""
    path = Path(path)
    if not path.is_file():
        raise ConfigurationError(f"Config file not found: {path}")
    try:
        with open(path) as f:
            raw = yaml.safe_load(f) or {}
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Cannot parse curation config {path}: {exc}") from exc
    try:
        return CurationConfig.model_validate(raw)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid curation config {path}: {exc}") from exc
