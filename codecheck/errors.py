"""
Error taxonomy for a repository check run.

Every run-level failure is a ``CheckError`` tagged with an ``ErrorKind`` and a
machine-readable ``code``. Callers branch on ``kind`` (see ``is_fatal``), the
subclasses only supply defaults.
"""
from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    REPO_NOT_FOUND = "repo_not_found"
    NETWORK = "network_error"
    BROWSER = "browser_error"
    UNKNOWN = "unknown_error"


class CheckError(Exception):
    kind: ErrorKind = ErrorKind.UNKNOWN
    default_message: str = "An unknown error occurred"

    def __init__(self, message: Optional[str] = None, code: Optional[str] = None):
        self.message = message or self.default_message
        self.code = code or self.kind.value
        super().__init__(self.message)

    @property
    def is_fatal(self) -> bool:
        """A dead browser invalidates every check that would follow."""
        return self.kind is ErrorKind.BROWSER

    def to_dict(self) -> dict:
        return {"error": self.code, "message": self.message}


class RepoNotFound(CheckError):
    kind = ErrorKind.REPO_NOT_FOUND
    default_message = "Repository not found"


class NetworkError(CheckError):
    kind = ErrorKind.NETWORK
    default_message = "Network error occurred"


class BrowserError(CheckError):
    kind = ErrorKind.BROWSER
    default_message = "Browser error occurred"


class UnknownError(CheckError):
    kind = ErrorKind.UNKNOWN
    default_message = "An unknown error occurred"


def is_fatal(exc: BaseException) -> bool:
    return isinstance(exc, CheckError) and exc.is_fatal
