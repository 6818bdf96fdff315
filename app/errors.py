# app/errors.py
# Role: Typed error kinds raised by the ledger core.
#       Routes never build error payloads themselves; the handler registered in
#       app/main.py turns any LedgerError into a JSON envelope.

"""
Error hierarchy for the finance ledger.

- ValidationError: bad input, raised before any mutation
- NotFoundError:   unknown account / transaction id, raised before any mutation
- StorageError:    persistence failure, raised after the write unit rolled back
"""


class LedgerError(Exception):
    """Base exception for all ledger errors."""

    code = "LEDGER_ERROR"
    http_status = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_response(self) -> dict:
        """Convert to the JSON error envelope returned by the API."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
            }
        }


class ValidationError(LedgerError):
    """Input failed validation (empty field, non-positive amount, unknown kind...)."""

    code = "VALIDATION_ERROR"
    http_status = 400

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field

    def to_response(self) -> dict:
        body = super().to_response()
        body["error"]["field"] = self.field
        return body


class NotFoundError(LedgerError):
    """Referenced account or transaction does not exist."""

    code = "NOT_FOUND"
    http_status = 404

    def __init__(self, resource_type: str, resource_id):
        super().__init__(f"{resource_type} {resource_id!r} not found")
        self.resource_type = resource_type
        self.resource_id = resource_id


class StorageError(LedgerError):
    """Underlying database operation failed; nothing was committed."""

    code = "STORAGE_ERROR"
    http_status = 503

    def __init__(self, operation: str, detail: str):
        super().__init__(f"{operation} failed: {detail}")
        self.operation = operation
        self.detail = detail

    def to_response(self) -> dict:
        # Driver messages stay in the logs.
        return {
            "error": {
                "code": self.code,
                "message": f"{self.operation} failed",
            }
        }
