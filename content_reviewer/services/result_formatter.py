from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from content_reviewer.domain.models import (
    AiUsage,
    ReportSection,
    ReportSummary,
    ReviewJob,
    ReviewReport,
)

NO_DATA = "No data"

# (display key, backend key, title) in display/export order
SECTION_LAYOUT: List[Tuple[str, str, str]] = [
    ("overallAssessment", "overallAssessment", "Overall Assessment"),
    ("contentQuality", "contentQuality", "Content Quality"),
    ("plainEnglish", "plainEnglishReview", "Plain English Review"),
    ("styleGuide", "styleGuideCompliance", "GOV.UK Style Guide Compliance"),
    ("govspeak", "govspeakReview", "Govspeak & Formatting Review"),
    ("accessibility", "accessibilityReview", "Accessibility Review"),
    ("passiveVoice", "passiveVoiceReview", "Passive Voice Analysis"),
    ("summaryOfFindings", "summaryOfFindings", "Summary of Findings"),
    ("exampleImprovements", "exampleImprovements", "Example Improvements"),
]

SCORE_BY_STATUS = {
    "pass": 95,
    "pass_with_recommendations": 80,
    "needs_improvement": 60,
    "fail": 40,
}


def overall_score(status: Optional[str]) -> int:
    return SCORE_BY_STATUS.get((status or "").strip().lower(), 0)


def _parse_iso(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def processing_time(started: Optional[str], finished: Optional[str]) -> str:
    start, end = _parse_iso(started), _parse_iso(finished)
    if start is None or end is None:
        return "N/A"

    seconds = max(0, round((end - start).total_seconds()))
    if seconds < 60:
        return f"{seconds} seconds"
    return f"{seconds // 60}m {seconds % 60}s"


def display_date(value: Optional[str]) -> str:
    """en-GB style timestamp; unparseable values are shown as-is."""
    parsed = _parse_iso(value)
    if parsed is None:
        return value or ""
    return parsed.strftime("%d/%m/%Y, %H:%M:%S")


def _count(metrics: Dict[str, Any], key: str, fallback: Any = 0) -> int:
    try:
        return int(metrics.get(key) or fallback or 0)
    except (TypeError, ValueError):
        return 0


def _text(value: Any, default: str) -> str:
    if value is None:
        return default
    text = str(value).strip()
    return text or default


def build_report(job: ReviewJob, now: Optional[datetime] = None) -> ReviewReport:
    """Shape a completed job for the results page and both exports."""
    result = job.result or {}
    metadata = job.metadata or {}
    sections_raw = result.get("sections") if isinstance(result.get("sections"), dict) else {}
    metrics = result.get("metrics") if isinstance(result.get("metrics"), dict) else {}
    ai_meta = result.get("aiMetadata") if isinstance(result.get("aiMetadata"), dict) else {}

    status = _text(result.get("overallStatus"), "")
    review_date = job.completed_at or (now or datetime.now(timezone.utc)).isoformat()

    sections = []
    for key, backend_key, title in SECTION_LAYOUT:
        default = "No assessment available" if key == "overallAssessment" else NO_DATA
        sections.append(ReportSection(key=key, title=title, body=_text(sections_raw.get(backend_key), default)))

    return ReviewReport(
        review_id=job.review_id,
        document_name=job.filename or "Unknown Document",
        review_date=review_date,
        status=status or "completed",
        llm_model=_text(ai_meta.get("model"), "N/A"),
        processing_time=processing_time(job.created_at, job.completed_at),
        summary=ReportSummary(
            overall_score=overall_score(status),
            overall_status=status or "unknown",
            issues_found=_count(metrics, "totalIssues"),
            words_to_avoid=_count(metrics, "wordsToAvoidCount"),
            passive_sentences=_count(metrics, "passiveSentencesCount"),
            word_count=_count(metrics, "wordCount", metadata.get("wordCount")),
        ),
        ai_usage=AiUsage(
            input_tokens=_count(ai_meta, "inputTokens"),
            output_tokens=_count(ai_meta, "outputTokens"),
        ),
        sections=sections,
        full_review_text=_text(result.get("reviewText"), "No review text available"),
    )


def document_information(report: ReviewReport) -> List[Tuple[str, str]]:
    return [
        ("Document", report.document_name),
        ("Review Date", display_date(report.review_date)),
        ("Status", report.status),
        ("LLM Model", report.llm_model),
        ("Processing Time", report.processing_time),
        ("Input Tokens", str(report.ai_usage.input_tokens)),
        ("Output Tokens", str(report.ai_usage.output_tokens)),
        ("Total Tokens", str(report.ai_usage.total_tokens)),
    ]


def summary_rows(report: ReviewReport) -> List[Tuple[str, str]]:
    s = report.summary
    return [
        ("Overall Score", f"{s.overall_score}/100"),
        ("Overall Status", s.overall_status),
        ("Issues Found", str(s.issues_found)),
        ("Word Count", str(s.word_count)),
        ("Words to Avoid", str(s.words_to_avoid)),
        ("Passive Sentences", str(s.passive_sentences)),
    ]
