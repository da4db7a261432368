######## models.py
########

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from content_reviewer.domain.errors import ValidationError

NEITHER_INPUT_MESSAGE = "Please either upload a file or enter text content to review"
BOTH_INPUTS_MESSAGE = "Please upload a file or enter text content, not both."


@dataclass(frozen=True)
class SubmissionFile:
    filename: str
    content: bytes
    mime_type: Optional[str] = None

    @property
    def size_bytes(self) -> int:
        return len(self.content)


@dataclass(frozen=True)
class Submission:
    """Exactly one of text / file per attempt."""
    text: Optional[str] = None
    file: Optional[SubmissionFile] = None

    def __post_init__(self) -> None:
        has_text = bool((self.text or "").strip())
        has_file = self.file is not None
        if has_text and has_file:
            raise ValidationError(BOTH_INPUTS_MESSAGE)
        if not has_text and not has_file:
            raise ValidationError(NEITHER_INPUT_MESSAGE)


class ReviewStatus(str, Enum):
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, raw: Any) -> "ReviewStatus":
        value = str(raw or "").strip().lower()
        for member in cls:
            if member.value == value and member is not cls.UNKNOWN:
                return member
        return cls.UNKNOWN


@dataclass(frozen=True)
class ReviewJob:
    review_id: str
    status: ReviewStatus
    filename: Optional[str] = None
    created_at: Optional[str] = None
    completed_at: Optional[str] = None
    progress: int = 0
    result: Optional[Dict[str, Any]] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    error_message: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.status in (ReviewStatus.COMPLETED, ReviewStatus.FAILED)


@dataclass(frozen=True)
class ReviewAccepted:
    review_id: str
    filename: Optional[str] = None


@dataclass(frozen=True)
class ReviewSummary:
    review_id: str
    filename: str
    status: str
    created_at: Optional[str] = None
    source_type: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "reviewId": self.review_id,
            "filename": self.filename,
            "status": self.status,
            "createdAt": self.created_at,
            "sourceType": self.source_type,
        }


@dataclass(frozen=True)
class Pagination:
    total: int
    limit: int
    skip: int

    def to_dict(self) -> Dict[str, int]:
        return {"total": self.total, "limit": self.limit, "skip": self.skip}


@dataclass(frozen=True)
class ReviewPage:
    reviews: List[ReviewSummary]
    pagination: Pagination


@dataclass(frozen=True)
class ReportSection:
    key: str
    title: str
    body: str


@dataclass(frozen=True)
class ReportSummary:
    overall_score: int
    overall_status: str
    issues_found: int
    words_to_avoid: int
    passive_sentences: int
    word_count: int


@dataclass(frozen=True)
class AiUsage:
    input_tokens: int
    output_tokens: int

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens


@dataclass(frozen=True)
class ReviewReport:
    review_id: str
    document_name: str
    review_date: str
    status: str
    llm_model: str
    processing_time: str
    summary: ReportSummary
    ai_usage: AiUsage
    sections: List[ReportSection]
    full_review_text: str


@dataclass
class ConversationMessage:
    content: str
    role: str          # "user" | "bot"
    timestamp: str


@dataclass
class Conversation:
    id: str
    title: str
    created_at: str
    messages: List[ConversationMessage] = field(default_factory=list)


class UploadStatus(str, Enum):
    PENDING = "pending"
    READY = "ready"
    REJECTED = "rejected"


@dataclass(frozen=True)
class UploadSession:
    upload_id: str
    upload_status: UploadStatus
    upload_url: Optional[str] = None
    file_metadata: Dict[str, Any] = field(default_factory=dict)
    rejected_files: int = 0
    error_message: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.upload_status in (UploadStatus.READY, UploadStatus.REJECTED)
