"""Publication-date inference agent using Ollama structured output."""

import json
import logging
import re
from typing import Literal, Optional

import ollama
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from canon.core.config import DEFAULT_MODEL
from canon.core.models import Source

logger = logging.getLogger(__name__)


class EnrichmentParseError(ValueError):
    """The model's reply could not be read as a list of dated results."""


# ── Structured Output Models ─────────────────────────────────────────


class EnrichedSourceDate(BaseModel):
    """Inferred date for one input source, matched back by title."""

    model_config = ConfigDict(populate_by_name=True)

    original_title: str = Field(
        validation_alias=AliasChoices("original_title", "originalTitle")
    )
    original_date: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("original_date", "originalDate")
    )
    enriched_date: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("enriched_date", "enrichedDate"),
        description="YYYY-MM-DD, YYYY-MM, YYYY, or null if it can't be determined",
    )
    confidence: Literal["high", "medium", "low"] = "low"
    reasoning: str = Field(default="", description="Brief, max 10 words")
    source: str = Field(
        default="", description="Where found: ArXiv URL, Conference date, URL path, etc."
    )


class EnrichmentOutput(BaseModel):
    """Schema used for Ollama structured output."""

    dates: list[EnrichedSourceDate]


_RESULT_LIST = TypeAdapter(list[EnrichedSourceDate])
_ARRAY_RE = re.compile(r"\[.*\]", re.DOTALL)
_THINK_RE = re.compile(r"<think>.*?</think>", re.DOTALL)


# ── Prompt Builder ───────────────────────────────────────────────────


def build_enrichment_prompt(sources: list[Source], author_name: str) -> str:
    """Build the date-inference prompt for one author's sources."""
    blocks = []
    for idx, s in enumerate(sources, 1):
        if s.published_date is not None:
            current = s.published_date.isoformat()
        elif s.year is not None:
            current = str(s.year)
        else:
            current = "none"
        blocks.append(
            f'{idx}. Title: "{s.title}"\n'
            f"   URL: {s.url or 'unknown'}\n"
            f"   Current date info: {current}"
        )
    source_text = "\n\n".join(blocks)

    return f"""You are a research assistant helping to find accurate publication dates for academic and professional content.

AUTHOR: {author_name}

SOURCES TO DATE (find publication dates for these):
{source_text}

TASK: For each source, determine the most accurate publication date you can find.

USE THESE SIGNALS:
- ArXiv URLs contain dates: arxiv.org/abs/2301.12345 → January 2023
- Conference papers: Check known conference dates (NeurIPS, ICML, ICLR, etc.)
- Blog post URLs often have dates: /2023/05/article-name/
- Paper venues: "Presented at NeurIPS 2023" → December 2023
- Books: Publication year usually in title or description

CONFIDENCE LEVELS:
- high: Date found in URL, arXiv ID, or explicit mention
- medium: Inferred from conference/venue
- low: Best guess from context

For every source return an entry with "original_title" copied exactly,
"original_date", "enriched_date" (YYYY-MM-DD, YYYY-MM, YYYY, or null if you
can't determine it), "confidence", "reasoning" and "source".

Respond with JSON only: {{"dates": [...]}}"""


# ── Response Parsing ─────────────────────────────────────────────────


def parse_enrichment_response(raw: str) -> list[EnrichedSourceDate]:
    """Read ``{"dates": [...]}`` or a bare JSON array, tolerating prose around it."""
    text = _THINK_RE.sub("", raw or "").strip()
    if not text:
        raise EnrichmentParseError("Empty response from date enrichment model")

    try:
        return EnrichmentOutput.model_validate_json(text).dates
    except ValidationError:
        pass

    match = _ARRAY_RE.search(text)
    if not match:
        raise EnrichmentParseError(f"No JSON array found in response: {text[:200]!r}")
    try:
        return _RESULT_LIST.validate_python(json.loads(match.group(0)))
    except (json.JSONDecodeError, ValidationError) as exc:
        raise EnrichmentParseError(f"Unparseable enrichment results: {exc}") from exc


# ── Agent ────────────────────────────────────────────────────────────


class DateEnricher:
    """Async date-inference collaborator backed by a local Ollama model."""

    def __init__(self, model: str = DEFAULT_MODEL, client: ollama.AsyncClient | None = None):
        self.model = model
        self._client = client or ollama.AsyncClient()

    async def enrich_dates(
        self, sources: list[Source], author_name: str
    ) -> list[EnrichedSourceDate]:
        """Return one result per input source (order not guaranteed)."""
        if not sources:
            return []

        logger.info("Inferring dates for %d sources by %s", len(sources), author_name)
        response = await self._client.chat(
            model=self.model,
            messages=[
                {
                    "role": "system",
                    "content": (
                        "You are a research assistant that dates publications. "
                        "Be systematic and check URLs carefully for date patterns. "
                        "If you can't find a date, set enriched_date to null. "
                        "Respond ONLY with the requested JSON."
                    ),
                },
                {"role": "user", "content": build_enrichment_prompt(sources, author_name)},
            ],
            format=EnrichmentOutput.model_json_schema(),
            options={"temperature": 0},
            think=False,
        )

        results = parse_enrichment_response(response.message.content or "")
        logger.debug("%s: model returned %d dated results", author_name, len(results))
        return results
