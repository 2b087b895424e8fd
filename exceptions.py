"""
Custom exceptions for the School Portal API.

Routers and services raise these instead of building HTTP responses by hand;
the handler registered in main.py turns them into the usual
``{"success": false, "message": ...}`` body with the matching status code.
"""

from typing import Optional, Any, Dict


class SchoolPortalError(Exception):
    """Base exception for all portal errors"""

    status_code = 500

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        body = {"success": False, "code": self.code, "message": self.message}
        if self.details:
            body["details"] = self.details
        return body


# ============================================
# Lookup & uniqueness
# ============================================

class NotFoundError(SchoolPortalError):
    """Requested record does not exist"""

    status_code = 404

    def __init__(self, resource: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(f"{resource} not found", code="NOT_FOUND", details=details)


class DuplicateRecordError(SchoolPortalError):
    """Insert or update would break a uniqueness rule"""

    status_code = 409

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="DUPLICATE", details=details)


# ============================================
# Result evaluation
# ============================================

class MalformedMarkError(SchoolPortalError):
    """A subject mark has no usable written score"""

    status_code = 422

    def __init__(self, subject: str, reason: str):
        super().__init__(
            f"Malformed mark for subject '{subject}': {reason}",
            code="MALFORMED_MARK",
            details={"subject": subject}
        )
        self.subject = subject


class MeritLookupError(SchoolPortalError):
    """The target roll could not be placed inside its cohort"""

    status_code = 409


class DuplicateRollError(MeritLookupError):
    """Cohort holds more than one record for the same roll"""

    def __init__(self, roll: str, count: int):
        super().__init__(
            f"Roll {roll} appears {count} times in its cohort",
            code="DUPLICATE_ROLL",
            details={"roll": roll, "count": count}
        )


class RollNotInCohortError(MeritLookupError):
    """Passing target is missing from the cohort it is ranked against"""

    def __init__(self, roll: str):
        super().__init__(
            f"Roll {roll} is not part of the fetched cohort",
            code="ROLL_NOT_IN_COHORT",
            details={"roll": roll}
        )


# ============================================
# Auth & uploads
# ============================================

class AuthenticationError(SchoolPortalError):
    """Login failed"""

    status_code = 401

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message, code="AUTH_FAILED")


class InvalidUploadError(SchoolPortalError):
    """Uploaded file or form is unusable"""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message, code="INVALID_UPLOAD")
