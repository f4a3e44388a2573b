"""Error variants raised by the catalog.

Each variant carries the HTTP status the API answers with, so the
blueprint can map any of them to ``{"message": ...}`` in one place.
"""


class CatalogError(Exception):
    status_code = 500

    def __init__(self, message):
        super().__init__(message if isinstance(message, str) else "Invalid input")
        self.message = message

    def to_dict(self):
        return {"message": self.message}


class ValidationError(CatalogError):
    """Missing or malformed input. ``errors`` maps field -> list of messages."""

    status_code = 400

    def __init__(self, errors):
        if isinstance(errors, str):
            errors = {"error": [errors]}
        self.errors = errors
        super().__init__(errors)

    def __str__(self):
        return "; ".join(f"{k}: {', '.join(v)}" for k, v in self.errors.items())


class ConflictError(CatalogError):
    status_code = 409


class NotFoundError(CatalogError):
    status_code = 404

    def __init__(self, message="Book not found"):
        super().__init__(message)


class StorageError(CatalogError):
    status_code = 500


class ExternalServiceError(CatalogError):
    status_code = 500
