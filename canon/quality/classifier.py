"""Source specificity classifier: ordered URL and title rule tables.

Each table is evaluated top to bottom and the first matching rule decides.
Order matters: a dated blog path must be recognised before the broad
"has some path" rule, and a blog homepage before a blog post.
"""

import re
from typing import Callable, Literal, NamedTuple
from urllib.parse import urlsplit

from pydantic import BaseModel

Quality = Literal["specific", "generic", "ambiguous"]

SPECIFIC_REASON = "Source appears to be specific, citable content"


class SourceClassification(BaseModel):
    quality: Quality
    reason: str


class Rule(NamedTuple):
    name: str
    predicate: Callable[[str], bool]
    quality: Quality
    reason: str


# ── URL parsing ──────────────────────────────────────────────────────


class _Url(NamedTuple):
    raw: str  # lowercased full URL
    host: str  # lowercased host without "www."
    path: str  # lowercased path, no trailing slash
    query: str

    @property
    def segments(self) -> list[str]:
        return [s for s in self.path.split("/") if s]


def _parse_url(url: str) -> _Url:
    lowered = url.strip().lower()
    candidate = lowered if "://" in lowered else f"//{lowered}"
    try:
        parts = urlsplit(candidate)
        host = parts.hostname or ""
    except ValueError:
        return _Url(lowered, "", "", "")
    if host.startswith("www."):
        host = host[4:]
    return _Url(lowered, host, parts.path.rstrip("/"), parts.query)


def _host_is(u: _Url, *domains: str) -> bool:
    return any(u.host == d or u.host.endswith("." + d) for d in domains)


_DATE_SEGMENT_RE = re.compile(r"/\d{4}/\d{2}/")
_NEWS_RE = re.compile(r"/(news|press|press-release|releases)/")
_BLOG_POST_RE = re.compile(r"/blog/[^/]+")
_PODCAST_EPISODE_RE = re.compile(r"/podcast/[^/]+")


def _url_rules() -> tuple[Rule, ...]:
    def on(pred: Callable[[_Url], bool]) -> Callable[[str], bool]:
        return lambda url: pred(_parse_url(url))

    return (
        # ── Generic: channels, homepages, profiles ──
        Rule(
            "empty",
            lambda url: not url.strip(),
            "generic",
            "No URL provided",
        ),
        Rule(
            "youtube_channel",
            on(lambda u: _host_is(u, "youtube.com")
               and bool(u.segments)
               and (u.segments[0].startswith("@") or u.segments[0] in ("channel", "user", "c"))),
            "generic",
            "YouTube channel URL (need specific video: youtube.com/watch?v=...)",
        ),
        Rule(
            "homepage",
            on(lambda u: bool(u.host) and not u.segments and not u.query),
            "generic",
            "Homepage URL with no specific path",
        ),
        Rule(
            "about_page",
            on(lambda u: bool(u.segments) and u.segments[-1] == "about"),
            "generic",
            "About page (need specific content)",
        ),
        Rule(
            "blog_homepage",
            on(lambda u: bool(u.segments) and u.segments[-1] == "blog"),
            "generic",
            "Blog homepage (need specific post: /blog/post-title/)",
        ),
        Rule(
            "podcast_homepage",
            on(lambda u: bool(u.segments) and u.segments[-1] == "podcast"),
            "generic",
            "Podcast homepage (need specific episode)",
        ),
        Rule(
            "social_profile",
            on(lambda u: _host_is(u, "twitter.com", "x.com") and len(u.segments) == 1),
            "generic",
            "Social media profile (need specific post: /status/...)",
        ),
        Rule(
            "linkedin_profile",
            on(lambda u: _host_is(u, "linkedin.com")
               and len(u.segments) == 2 and u.segments[0] == "in"),
            "generic",
            "LinkedIn profile (need specific post: /posts/...)",
        ),
        Rule(
            "github_profile",
            on(lambda u: _host_is(u, "github.com") and len(u.segments) == 1),
            "generic",
            "GitHub profile (need specific repo or discussion)",
        ),
        # ── Specific: individually addressable content ──
        Rule(
            "youtube_video",
            lambda url: "youtube.com/watch?v=" in url.lower() or "youtu.be/" in url.lower(),
            "specific",
            "Specific YouTube video",
        ),
        Rule(
            "article_path",
            lambda url: "/article/" in url.lower() or "/articles/" in url.lower(),
            "specific",
            "Article URL path",
        ),
        Rule(
            "blog_post",
            lambda url: bool(_BLOG_POST_RE.search(url.lower())),
            "specific",
            "Specific blog post",
        ),
        Rule(
            "podcast_episode",
            lambda url: "/episode" in url.lower() or bool(_PODCAST_EPISODE_RE.search(url.lower())),
            "specific",
            "Specific podcast episode",
        ),
        Rule(
            "arxiv_paper",
            lambda url: "arxiv.org/abs/" in url.lower() or "arxiv.org/pdf/" in url.lower(),
            "specific",
            "Specific ArXiv paper",
        ),
        Rule(
            "doi",
            lambda url: "doi.org/" in url.lower() or "/doi/" in url.lower(),
            "specific",
            "DOI link to specific publication",
        ),
        Rule(
            "pdf",
            on(lambda u: u.path.endswith(".pdf")),
            "specific",
            "PDF document",
        ),
        Rule(
            "date_in_path",
            lambda url: bool(_DATE_SEGMENT_RE.search(url.lower())),
            "specific",
            "Date in URL path (likely specific post)",
        ),
        Rule(
            "social_post",
            lambda url: "/status/" in url.lower() or "/posts/" in url.lower(),
            "specific",
            "Specific social media post",
        ),
        Rule(
            "news_article",
            lambda url: bool(_NEWS_RE.search(url.lower())),
            "specific",
            "News/press article",
        ),
        # ── Ambiguous: some path, specificity unclear ──
        Rule(
            "nested_path",
            on(lambda u: len(u.segments) >= 2),
            "ambiguous",
            "URL has path but specificity unclear - verify manually",
        ),
        Rule(
            "single_path",
            on(lambda u: len(u.segments) == 1 or bool(u.query)),
            "ambiguous",
            "URL has a short path - verify it points at specific content",
        ),
    )


URL_RULES: tuple[Rule, ...] = _url_rules()
URL_FALLBACK = SourceClassification(
    quality="generic", reason="Cannot determine URL specificity - no distinguishing path"
)


# ── Title rules ──────────────────────────────────────────────────────

_BLOG_TITLE_RE = re.compile(r"^.+ blog$")
_EPISODE_RE = re.compile(r"#\d+|episode \d+")
_INTERVIEW_RE = re.compile(r"interview|conversation|podcast.*with|talk.*with")
_NAME_RE = re.compile(r"^[A-Z][a-z]+ [A-Z][a-z]+$")


def _title_rules() -> tuple[Rule, ...]:
    low = str.lower

    return (
        # ── Generic: the title names a venue, not a piece of content ──
        Rule(
            "missing",
            lambda t: len(t.strip()) < 3,
            "generic",
            "Title too short or missing",
        ),
        Rule(
            "channel",
            lambda t: "channel" in low(t) and "podcast" not in low(t),
            "generic",
            "Title indicates channel, not specific content",
        ),
        Rule(
            "homepage",
            lambda t: "homepage" in low(t) or low(t).strip() == "home",
            "generic",
            "Title indicates homepage",
        ),
        Rule(
            "website",
            lambda t: "website" in low(t),
            "generic",
            "Title indicates website, not specific content",
        ),
        Rule(
            "profile",
            lambda t: "profile" in low(t) and "company profile" not in low(t),
            "generic",
            "Title indicates profile page",
        ),
        Rule(
            "blog_in_general",
            lambda t: bool(_BLOG_TITLE_RE.match(low(t).strip()))
            and "post" not in low(t) and ":" not in t,
            "generic",
            "Title indicates blog in general, not specific post",
        ),
        Rule(
            "category",
            lambda t: low(t).strip() in ("blog", "articles", "publications"),
            "generic",
            "Generic publication category, not specific content",
        ),
        # ── Specific ──
        Rule(
            "episode_number",
            lambda t: bool(_EPISODE_RE.search(low(t))),
            "specific",
            "Title includes episode/issue number",
        ),
        Rule(
            "interview",
            lambda t: bool(_INTERVIEW_RE.search(low(t))),
            "specific",
            "Title indicates specific interview/conversation",
        ),
        Rule(
            "topic_or_question",
            lambda t: ":" in t or "?" in t,
            "specific",
            "Title describes specific topic/question",
        ),
        Rule(
            "long_descriptive",
            lambda t: len(t) > 50 and "blog" not in low(t) and "channel" not in low(t),
            "specific",
            "Long descriptive title suggests specific content",
        ),
        # ── Ambiguous ──
        Rule(
            "short",
            lambda t: len(t) < 15,
            "ambiguous",
            "Title is short - verify it describes specific content",
        ),
        Rule(
            "bare_name",
            lambda t: bool(_NAME_RE.match(t.strip())),
            "ambiguous",
            "Title appears to be just a name - likely a profile",
        ),
    )


TITLE_RULES: tuple[Rule, ...] = _title_rules()
TITLE_FALLBACK = SourceClassification(
    quality="specific", reason="Title appears to describe specific content"
)


# ── Public API ───────────────────────────────────────────────────────


def first_match(
    rules: tuple[Rule, ...], value: str, fallback: SourceClassification
) -> SourceClassification:
    for rule in rules:
        if rule.predicate(value):
            return SourceClassification(quality=rule.quality, reason=rule.reason)
    return fallback


def classify_url(url: str | None) -> SourceClassification:
    return first_match(URL_RULES, url or "", URL_FALLBACK)


def classify_title(title: str | None) -> SourceClassification:
    return first_match(TITLE_RULES, title or "", TITLE_FALLBACK)


def classify(url: str | None, title: str | None) -> SourceClassification:
    """Combine URL and title verdicts: generic beats ambiguous beats specific."""
    by_url = classify_url(url)
    by_title = classify_title(title)

    if "generic" in (by_url.quality, by_title.quality):
        return SourceClassification(
            quality="generic", reason=f"{by_url.reason}; {by_title.reason}"
        )
    if by_url.quality == "ambiguous":
        return by_url
    if by_title.quality == "ambiguous":
        return by_title
    return SourceClassification(quality="specific", reason=SPECIFIC_REASON)
