from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence

from pulse.catalog import SALES_DEPARTMENT
from pulse.records import Record

logger = logging.getLogger(__name__)

DEFAULT_SUMMARY_LIMIT = 300
BOARD_ALERT_LIMIT = 50
MAX_READING_MINUTES = 5
TRUNCATION_MARKER = {"metric": "... (data truncated for summary)", "plan": 0, "actual": 0}

BOARD_ALERT_FALLBACK = "Board Alert: System error during audit generation. Please check manual dashboard."


@dataclass(frozen=True)
class SummaryResult:
    executive_summary: str
    detailed_analysis: str
    actions: List[str] = field(default_factory=list)
    reading_time_minutes: float = 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "executiveSummary": self.executive_summary,
            "detailedAnalysis": self.detailed_analysis,
            "actions": list(self.actions),
            "readingTimeMinutes": self.reading_time_minutes,
        }


FALLBACK_SUMMARY = SummaryResult(
    executive_summary="Strategic overview unavailable due to an analysis error.",
    detailed_analysis=(
        "The dataset provided was too large or improperly formatted for the current AI context window. "
        "Please verify 'Sales' sheet columns."
    ),
    actions=[
        "Check API Key configuration",
        "Ensure 'Target' and 'Actual' columns are numeric",
        "Try uploading a smaller date range",
    ],
    reading_time_minutes=1,
)


class Summarizer(Protocol):
    def summarize(self, payload: List[Dict[str, Any]]) -> Mapping[str, Any]: ...

    def board_alert(self, payload: List[Dict[str, Any]]) -> Mapping[str, Any]: ...


def build_summary_payload(records: Sequence[Record], limit: int = DEFAULT_SUMMARY_LIMIT) -> List[Dict[str, Any]]:
    sales = [r.to_dict() for r in records if r.department == SALES_DEPARTMENT]
    if len(sales) > limit:
        return sales[:limit] + [dict(TRUNCATION_MARKER)]
    return sales


def parse_summary(raw: Mapping[str, Any]) -> SummaryResult:
    """Validate a structured summary; raises ``ValueError`` when a field is missing."""
    missing = [k for k in ("executiveSummary", "detailedAnalysis", "actions", "readingTimeMinutes") if k not in raw]
    if missing:
        raise ValueError(f"summary missing fields: {', '.join(missing)}")
    actions = raw["actions"]
    if not isinstance(actions, list):
        raise ValueError("summary actions must be a list")
    minutes = float(raw["readingTimeMinutes"])
    return SummaryResult(
        executive_summary=str(raw["executiveSummary"]),
        detailed_analysis=str(raw["detailedAnalysis"]),
        actions=[str(a) for a in actions],
        reading_time_minutes=max(0.0, min(float(MAX_READING_MINUTES), minutes)),
    )


def summarize_operations(
    records: Sequence[Record],
    summarizer: Optional[Summarizer],
    *,
    limit: int = DEFAULT_SUMMARY_LIMIT,
) -> SummaryResult:
    """Narrative summary of the Sales records; never raises."""
    if summarizer is None:
        return FALLBACK_SUMMARY
    try:
        return parse_summary(summarizer.summarize(build_summary_payload(records, limit)))
    except Exception:
        logger.exception("summary generation failed; using fallback")
        return FALLBACK_SUMMARY


def board_alert(records: Sequence[Record], summarizer: Optional[Summarizer]) -> str:
    payload = [
        r.to_dict() for r in records if r.department == SALES_DEPARTMENT and r.status != "on-track"
    ][:BOARD_ALERT_LIMIT]
    if summarizer is None:
        return BOARD_ALERT_FALLBACK
    try:
        message = summarizer.board_alert(payload).get("whatsappMessage")
    except Exception:
        logger.exception("board alert generation failed; using fallback")
        return BOARD_ALERT_FALLBACK
    return str(message) if message else BOARD_ALERT_FALLBACK


SUMMARY_PROMPT = """You are an executive auditor. Analyze the provided pharmaceutical sales data.
The summary must take no more than 5 minutes to read.
Return JSON with keys: executiveSummary (2-3 sentences), detailedAnalysis (markdown, broken down by
team: Achievers, Passionate, Concord, Dynamic, highlighting products with major shortfalls),
actions (5 strategic action points), readingTimeMinutes (number).

DATA (Sales only):
{data}
"""

BOARD_ALERT_PROMPT = """Create a concise WhatsApp message (max 150 words) for the Board of Directors
summarizing critical sales shortfalls. Focus on the most alarming gaps.
Return JSON with the key whatsappMessage.

Data: {data}
"""


class OpenAISummarizer:
    """Summarizer backed by the OpenAI chat completions API (JSON response format)."""

    def __init__(self, model: str = "gpt-4.1-mini", client: Any = None) -> None:
        if client is None:
            from openai import OpenAI

            client = OpenAI()  # uses OPENAI_API_KEY
        self.client = client
        self.model = model

    def _complete_json(self, prompt: str) -> Mapping[str, Any]:
        resp = self.client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
            response_format={"type": "json_object"},
            temperature=0.2,
        )
        text = resp.choices[0].message.content or "{}"
        return json.loads(text)

    def summarize(self, payload: List[Dict[str, Any]]) -> Mapping[str, Any]:
        return self._complete_json(SUMMARY_PROMPT.format(data=json.dumps(payload, indent=2)))

    def board_alert(self, payload: List[Dict[str, Any]]) -> Mapping[str, Any]:
        return self._complete_json(BOARD_ALERT_PROMPT.format(data=json.dumps(payload)))
