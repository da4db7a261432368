from .review_service import ReviewService
from .validation import InputValidator

__all__ = [
    "ReviewService",
    "InputValidator",
]
