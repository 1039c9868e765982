"""Domain errors raised by the ledger engine and the business store.

Views translate these into the matching ``rest_framework.exceptions`` so the
engine itself never depends on the HTTP layer.
"""


class LedgerError(Exception):
    """Base class for every error raised by the ledger and the store."""


class NotFound(LedgerError):
    """A referenced customer, product, sale or payment does not exist."""

    def __init__(self, entity: str, object_id):
        self.entity = entity
        self.object_id = object_id
        super().__init__(f"{entity} {object_id!r} not found.")


class ValidationError(LedgerError):
    """Input that the engine refuses to apply.

    ``field`` names the offending input when there is a single one so the API
    layer can report the error against it.
    """

    def __init__(self, message: str, field: str | None = None):
        self.message = message
        self.field = field
        super().__init__(message)

    def as_dict(self):
        if self.field:
            return {self.field: [self.message]}
        return {"non_field_errors": [self.message]}
