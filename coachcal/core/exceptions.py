"""Base error type shared by every coachcal package.

The embedding application maps ``code`` and ``details`` onto its own transport
(HTTP problem documents, job failure records) without importing engine classes.
"""


class DomainError(Exception):
    def __init__(self, code: str, message: str, details: dict | None = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r})"

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message, "details": self.details}
