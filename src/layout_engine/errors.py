"""
Error taxonomy for the document tools.

Every failure a user can trigger maps to exactly one of these classes, and
each class carries the single message shown for it.
"""

from enum import Enum


class DocumentToolError(Exception):
    """Base class for all tool failures"""

    user_message = "An unexpected error occurred."

    def __init__(self, detail: str = "", user_message: str = ""):
        super().__init__(detail or user_message or self.user_message)
        if user_message:
            self.user_message = user_message


class InvalidInputError(DocumentToolError):
    """Wrong file type or extension for the selected tool"""

    user_message = "This file type is not supported by the selected tool."


class RangeErrorReason(Enum):
    SYNTAX = "syntax"
    OUT_OF_RANGE = "out_of_range"
    EMPTY = "empty"


class PageRangeError(DocumentToolError):
    """Page range text could not be accepted"""

    user_message = 'Invalid page range. Please use "all" or a format like "1, 3-5, 8".'

    def __init__(self, reason: RangeErrorReason, detail: str = ""):
        super().__init__(detail or reason.value)
        self.reason = reason


class CorruptOrProtectedError(DocumentToolError):
    """The source document could not be opened"""

    user_message = "Could not read the file. It might be corrupted or password-protected."

    def __init__(self, detail: str = "", password_required: bool = False):
        message = ""
        if password_required:
            message = "Could not open the file. It is password-protected."
        super().__init__(detail, user_message=message)
        self.password_required = password_required


class RenderFailure(DocumentToolError):
    """Rendering or encoding failed after the input was accepted"""

    user_message = ("An error occurred during conversion. The file might contain "
                    "unsupported features.")


class PreconditionViolation(DocumentToolError, AssertionError):
    """An internal invariant was broken. Always a defect, never user-caused."""

    user_message = "An internal error occurred."
