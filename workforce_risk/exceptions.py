"""Exceptions surfaced to API callers."""


class AssessmentError(Exception):
    """Base error carrying the HTTP status it maps to."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BadRequestError(AssessmentError):
    """Missing identifier or unresolvable current company."""

    status_code = 400


class SubjectNotFoundError(AssessmentError):
    """Subject resolution returned no person records."""

    status_code = 404
