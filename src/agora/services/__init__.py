"""Business logic services for the Agora application."""

from .membership import rebuild_member_counts, record_contribution
from .summarizer import SummarizerClient, SummarizerError, get_summarizer_client
from .summary_freshness import should_regenerate

__all__ = [
    "SummarizerClient",
    "SummarizerError",
    "get_summarizer_client",
    "rebuild_member_counts",
    "record_contribution",
    "should_regenerate",
]
