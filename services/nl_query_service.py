"""
services/nl_query_service.py

Natural-language questions about attendance.
Flow: sanitize -> reject harmful -> build context from the report summary and triggered alerts
-> LLM (JSON mode) -> normalize the answer. LLM failures degrade to a fixed apology response.
"""

import json
import logging
import re
from datetime import date
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from config.settings import settings
from schemas.llm import LLMResponse
from services.alert_service import AlertService
from services.exceptions import BusinessRuleError, LLMUnavailableError
from services.llm.base import LLMClient
from services.llm.llm_gemini import GeminiClient, LLMCallError
from services.report_service import ReportService

logger = logging.getLogger(__name__)

MAX_QUERY_LENGTH = 1000

_HTML_TAG = re.compile(r"<[^>]*>")
_SQL_KEYWORDS = re.compile(r"\b(SELECT|INSERT|UPDATE|DELETE|DROP|ALTER|CREATE)\b", re.IGNORECASE)
_HARMFUL_PATTERNS = (
    re.compile(r"\b(hack|exploit|attack|steal|fraud|illegal)\b", re.IGNORECASE),
    re.compile(r"\b(password|credential|token|key)\b.*\b(share|get|steal|find)\b", re.IGNORECASE),
    re.compile(r"\b(bypass|circumvent|evade)\b.*\b(security|authentication|verification)\b", re.IGNORECASE),
)

SYSTEM_PROMPT = """You are an attendance assistant for a school.
Answer the teacher's question using ONLY the data in the CONTEXT block.
Respond with a JSON object:
{
  "naturalLanguageAnswer": "conversational answer",
  "structuredData": { ... optional supporting figures ... },
  "suggestedActions": ["short follow-up actions"],
  "confidence": 0.0
}
confidence is a number between 0 and 1. If the context does not contain the answer, say so."""

FALLBACK_ANSWER = (
    "I'm sorry, but I couldn't process your query at this time. Our system might be experiencing "
    "high demand. Please try again with a simpler question."
)


def sanitize_query(query: str, max_length: int = MAX_QUERY_LENGTH) -> str:
    if not query:
        return ""
    cleaned = _HTML_TAG.sub("", query.strip())
    cleaned = _SQL_KEYWORDS.sub("", cleaned)
    for token in ("--", ";", "/*", "*/"):
        cleaned = cleaned.replace(token, "")
    return cleaned[:max_length]


def is_harmful_query(query: str) -> bool:
    return any(p.search(query) for p in _HARMFUL_PATTERNS)


def normalize_llm_payload(payload: Dict[str, Any]) -> LLMResponse:
    """Map the camelCase JSON contract onto LLMResponse; missing keys get defaults, confidence is clamped."""
    try:
        confidence = float(payload.get("confidence", 0.5))
    except (TypeError, ValueError):
        confidence = 0.5
    confidence = min(max(confidence, 0.0), 1.0)

    structured = payload.get("structuredData")
    actions = payload.get("suggestedActions") or []
    if isinstance(actions, str):
        actions = [actions]

    return LLMResponse(
        natural_language_answer=str(payload.get("naturalLanguageAnswer") or "No answer was provided."),
        structured_data=structured if isinstance(structured, dict) else None,
        suggested_actions=[str(a) for a in actions],
        confidence=confidence,
    )


def fallback_response(error: str) -> LLMResponse:
    return LLMResponse(
        natural_language_answer=FALLBACK_ANSWER,
        structured_data=None,
        suggested_actions=["Try rephrasing your question", "Check the reports page for the same data"],
        confidence=0.0,
        error=error,
    )


class NLQueryService:
    def __init__(self, db: Session, llm: Optional[LLMClient] = None):
        self.db = db
        self._llm = llm

    @property
    def llm(self) -> LLMClient:
        if self._llm is None:
            if not settings.LLM_ENABLED:
                raise LLMUnavailableError("Natural-language queries are disabled: GEMINI_API_KEY is not configured")
            self._llm = GeminiClient()
        return self._llm

    def build_context(self, today: Optional[date] = None) -> Dict[str, Any]:
        report = ReportService(self.db).generate_report(use_cache=True, today=today)
        alerts = AlertService(self.db).evaluate_all(today=today, only_triggered=True)
        return {
            "summary": report.summary.model_dump(mode="json"),
            "insights": report.insights.model_dump(mode="json"),
            "student_stats": [
                {
                    "student_id": s.student_id,
                    "student_name": s.student_name,
                    "attendance_rate": s.attendance_rate,
                    "late_rate": s.late_rate,
                    "consecutive_absences": s.consecutive_absences,
                    "trend": s.trend,
                }
                for s in report.student_stats
            ],
            "triggered_alerts": [
                {
                    "student_id": a.student_id,
                    "student_name": a.student_name,
                    "alerts": [t.model_dump(mode="json") for t in a.result.triggered_alerts],
                }
                for a in alerts
            ],
        }

    async def answer(self, raw_query: str, today: Optional[date] = None) -> LLMResponse:
        query = sanitize_query(raw_query)
        if not query.strip():
            raise BusinessRuleError("Query parameter is required",
                                    details=[{"field": "query", "message": "Query is empty after sanitizing"}])
        if is_harmful_query(query):
            raise BusinessRuleError("Query was rejected", code="HARMFUL_QUERY")

        llm = self.llm
        context = self.build_context(today)
        user_prompt = (
            f"CONTEXT:\n{json.dumps(context, ensure_ascii=False, default=str)}\n\nQUESTION: {query}"
        )

        try:
            payload = await llm.generate_json(SYSTEM_PROMPT, user_prompt)
        except LLMCallError as e:
            logger.warning("natural-language query failed: %s", e)
            return fallback_response(str(e))

        return normalize_llm_payload(payload)
