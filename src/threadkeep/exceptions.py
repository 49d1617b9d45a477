"""Custom exceptions for ThreadKeep."""


class InvalidSyncPayloadError(Exception):
    """Raised when a sync request body is structurally unusable."""

    def __init__(self, message: str = "conversations array required"):
        self.message = message
        super().__init__(message)


class OwnershipConflictError(Exception):
    """Raised when an upsert targets a record that belongs to another owner."""

    def __init__(self, entity: str, entity_id: object):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} belongs to a different owner")
