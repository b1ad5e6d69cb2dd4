"""
Services module containing the enrollment and grading engine.
"""

from .enrollment_service import EnrollmentService, TranscriptLine, DEFAULT_TOP_N

__all__ = [
    "EnrollmentService",
    "TranscriptLine",
    "DEFAULT_TOP_N",
]
