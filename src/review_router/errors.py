from __future__ import annotations


class RouterError(Exception):
    """An upstream outcome that terminates the request with a plain-text response."""

    status: int = 500

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        if status is not None:
            self.status = status

    @property
    def message(self) -> str:
        return str(self)


class ReviewNotFound(RouterError):
    status = 404

    def __init__(self):
        super().__init__("Review Not Found")


class ManifestError(RouterError):
    def __init__(self, status: int):
        super().__init__(f"Manifest Error ({status})", status=status)


class MetadataError(Exception):
    """metadata.json could not be loaded; handled by the outermost 500 handler."""
