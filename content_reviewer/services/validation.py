from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from content_reviewer.config import AppSettings
from content_reviewer.domain.errors import ValidationError
from content_reviewer.domain.models import Submission

MIB = 1024 * 1024

def format_megabytes(size_bytes: int) -> str:
    return f"{size_bytes / MIB:.2f}MB"


@dataclass(frozen=True)
class InputValidator:
    """
    Pure checks for a candidate file or text.
    Each check returns None when valid, otherwise the message to show the user.
    """
    max_bytes: int = 10 * MIB
    allowed_mime_types: Tuple[str, ...] = (
        "application/pdf",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    )
    allowed_extensions: Tuple[str, ...] = ("pdf", "doc", "docx")
    min_text_length: int = 10
    max_text_length: int = 50_000

    @classmethod
    def from_settings(cls, settings: AppSettings) -> "InputValidator":
        return cls(
            max_bytes=settings.max_upload_bytes,
            allowed_mime_types=settings.allowed_mime_types,
            allowed_extensions=settings.allowed_extensions,
            min_text_length=settings.text_min_length,
            max_text_length=settings.text_max_length,
        )

    def size_error(self, size_bytes: int) -> str:
        limit_mb = self.max_bytes // MIB if self.max_bytes % MIB == 0 else round(self.max_bytes / MIB, 2)
        return f"File too large. Maximum size is {limit_mb}MB. Your file is {format_megabytes(size_bytes)}."

    def type_error(self) -> str:
        listed = ", ".join(f".{ext}" for ext in self.allowed_extensions)
        return f"Invalid file type. Please upload a PDF or Word document ({listed})."

    def _type_allowed(self, filename: str, mime_type: Optional[str]) -> bool:
        mime = (mime_type or "").split(";", 1)[0].strip().lower()
        if mime in self.allowed_mime_types:
            return True
        # absent/generic MIME types fall through to the extension; so does a
        # specific one, browsers disagree on Word MIME types
        name = (filename or "").strip().lower()
        extension = name.rsplit(".", 1)[-1] if "." in name else ""
        return extension in self.allowed_extensions

    def check_file(self, filename: str, size_bytes: int, mime_type: Optional[str]) -> Optional[str]:
        if size_bytes > self.max_bytes:
            return self.size_error(size_bytes)
        if size_bytes <= 0:
            return "The selected file is empty."
        if not self._type_allowed(filename, mime_type):
            return self.type_error()
        return None

    def check_text(self, text: Optional[str]) -> Optional[str]:
        content = (text or "").strip()
        if len(content) < self.min_text_length:
            return f"Text content too short. Please provide at least {self.min_text_length} characters."
        if len(content) > self.max_text_length:
            return (
                f"Text content too long. Maximum {self.max_text_length} characters. "
                f"Your content has {len(content)} characters."
            )
        return None

    def check(self, submission: Submission) -> Optional[str]:
        if submission.file is not None:
            f = submission.file
            return self.check_file(f.filename, f.size_bytes, f.mime_type)
        return self.check_text(submission.text)

    def require_valid(self, submission: Submission) -> Submission:
        problem = self.check(submission)
        if problem:
            raise ValidationError(problem)
        return submission
