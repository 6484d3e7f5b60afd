"""Error types for the KPI query layer.

Remote database errors are not wrapped; they reach the caller unchanged.
"""


class MissingClientIdError(ValueError):
    """Raised before any remote call when a query has no client id."""

    def __init__(self, operation: str):
        super().__init__(f"Cliente ID required for {operation}")
        self.operation = operation


class ResponseShapeError(ValueError):
    """Raised when a procedure returns a payload that does not match its schema."""

    def __init__(self, procedure: str, detail: str):
        super().__init__(f"Unexpected response shape from {procedure}: {detail}")
        self.procedure = procedure
