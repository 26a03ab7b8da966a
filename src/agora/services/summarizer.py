"""Client for the external post summarization service.

Summaries are produced by an OpenAI-compatible chat completion endpoint. This
module builds the prompt from a post and its most upvoted comments and wraps
the HTTP exchange with error handling suited to request-time use.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

import httpx

from agora.core.settings import settings

logger = logging.getLogger(__name__)

HTTP_OK = 200
TOP_COMMENT_LIMIT = 10
EMPTY_SUMMARY_FALLBACK = "Unable to generate summary"

SYSTEM_PROMPT = (
    "You are a helpful assistant that summarizes community posts and discussions. "
    "Focus on the most upvoted content as it represents community consensus."
)

SUMMARY_INSTRUCTIONS = """Please provide a concise summary highlighting:
1. Main topic and key points from the post
2. Most upvoted opinions and perspectives from comments
3. Any consensus or popular viewpoints
4. Important disagreements or alternative views (if highly upvoted)"""


class SummarizerError(RuntimeError):
    """Base exception raised when a summary cannot be produced."""


class SummarizerDisabledError(SummarizerError):
    """Raised when summarization is requested without an API key configured."""


@dataclass(frozen=True)
class CommentDigest:
    """Comment fields that feed into the summary prompt."""

    body: str
    author: str
    vote_count: int
    created_at: datetime | None = None


@dataclass(frozen=True)
class SummaryRequest:
    """Post content submitted for summarization."""

    title: str
    body: str
    vote_count: int
    comments: Sequence[CommentDigest] = field(default_factory=tuple)


@dataclass(frozen=True)
class SummarizerConfig:
    """Immutable configuration for the summarization client."""

    api_key: str | None
    base_url: str
    model: str
    timeout_seconds: float
    temperature: float
    max_tokens: int


def load_summarizer_config() -> SummarizerConfig:
    """Build configuration object from global settings."""

    return SummarizerConfig(
        api_key=settings.summarizer_api_key,
        base_url=settings.summarizer_base_url,
        model=settings.summarizer_model,
        timeout_seconds=float(settings.summarizer_timeout_seconds),
        temperature=settings.summarizer_temperature,
        max_tokens=settings.summarizer_max_tokens,
    )


def select_top_comments(
    comments: Iterable[CommentDigest],
    limit: int = TOP_COMMENT_LIMIT,
) -> list[CommentDigest]:
    """Return the most upvoted comments, ties kept in their original order."""
    ranked = sorted(comments, key=lambda comment: comment.vote_count, reverse=True)
    return ranked[:limit]


def build_prompt(request: SummaryRequest, top_comments: Sequence[CommentDigest]) -> str:
    """Render the user prompt sent to the completion endpoint."""
    reception = "positive" if request.vote_count > 0 else "negative"
    lines = [
        "Summarize this post and conversation. Put emphasis on more upvotes. "
        "Give me the main points.",
        "",
        f"POST TITLE: {request.title}",
        f"POST VOTES: {request.vote_count} ({reception} reception)",
        "",
    ]

    if request.body:
        lines.extend(["POST CONTENT:", request.body, ""])

    if top_comments:
        lines.extend(["TOP COMMENTS (sorted by upvotes):", ""])
        for index, comment in enumerate(top_comments, start=1):
            lines.append(f"Comment {index} ({comment.vote_count} votes) by {comment.author}:")
            lines.extend([comment.body, ""])
    else:
        lines.extend(["No comments yet.", ""])

    lines.append(SUMMARY_INSTRUCTIONS)
    return "\n".join(lines)


class SummarizerClient:
    """HTTP client wrapper for the summarization service."""

    def __init__(
        self,
        config: SummarizerConfig | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config or load_summarizer_config()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._client_lock = asyncio.Lock()

    @property
    def enabled(self) -> bool:
        return bool(self.config.api_key)

    async def _ensure_client(self) -> httpx.AsyncClient:
        if not self.enabled:
            raise SummarizerDisabledError("Summarization API key is not configured")

        async with self._client_lock:
            if self._client is None:
                self._client = httpx.AsyncClient(
                    base_url=self.config.base_url,
                    timeout=httpx.Timeout(self.config.timeout_seconds),
                    headers={"Authorization": f"Bearer {self.config.api_key}"},
                    transport=self._transport,
                )

        return self._client

    def _build_payload(self, request: SummaryRequest) -> dict[str, Any]:
        prompt = build_prompt(request, select_top_comments(request.comments))
        return {
            "model": self.config.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            "temperature": self.config.temperature,
            "max_tokens": self.config.max_tokens,
        }

    async def summarize(self, request: SummaryRequest) -> str:
        """Generate a summary for a post and its discussion.

        Raises:
            SummarizerDisabledError: If no API key is configured.
            SummarizerError: If the service is unreachable or answers badly.
        """
        client = await self._ensure_client()

        try:
            response = await client.post("/chat/completions", json=self._build_payload(request))
        except httpx.HTTPError as exc:
            raise SummarizerError(f"Summarization request failed: {exc}") from exc

        if response.status_code != HTTP_OK:
            raise SummarizerError(
                f"Summarization service responded with {response.status_code}"
            )

        try:
            content = response.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise SummarizerError("Malformed summarization response") from exc

        return content or EMPTY_SUMMARY_FALLBACK

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None


class _SummarizerClientSingleton:
    """Lazily created process-wide summarizer client."""

    _instance: SummarizerClient | None = None

    @classmethod
    def get_instance(cls) -> SummarizerClient:
        if cls._instance is None:
            cls._instance = SummarizerClient()
        return cls._instance


def get_summarizer_client() -> SummarizerClient:
    """Return a singleton summarizer client instance."""
    return _SummarizerClientSingleton.get_instance()
