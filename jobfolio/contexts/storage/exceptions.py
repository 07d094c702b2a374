"""Custom exceptions for the storage layer and everything built on it."""

from typing import Optional


class EntityNotFoundError(LookupError):
    """
    Raised when an operation targets an id absent from its collection.

    Attributes:
        entity_type: Name of the collection entity (e.g., 'CVVersion')
        entity_id: The id that was looked up
        partition: Partition the lookup ran against, if any
    """

    def __init__(self, entity_type: str, entity_id: str, partition: Optional[str] = None):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.partition = partition

        message = f"{entity_type} not found: {entity_id}"
        if partition:
            message += f" (partition '{partition}')"
        super().__init__(message)


class InvalidBackupFormatError(ValueError):
    """
    Raised when a backup payload matches neither the dual-partition nor the
    legacy single-partition layout.

    Raised before any write happens, so no partial state change is left behind.
    """

    def __init__(self, message: str, source: Optional[str] = None):
        self.message = message
        self.source = source

        parts = [message]
        if source:
            parts.append(f"Source: {source}")
        super().__init__("\n".join(parts))


class StorageQuotaExceededError(Exception):
    """
    Raised by a key-value store when a write would exceed its byte quota.

    Attributes:
        requested_bytes: Total bytes the store would hold after the write
        quota_bytes: Configured quota
    """

    def __init__(self, requested_bytes: int, quota_bytes: int):
        self.requested_bytes = requested_bytes
        self.quota_bytes = quota_bytes
        super().__init__(
            f"Storage quota exceeded: write needs {requested_bytes} bytes, quota is {quota_bytes}"
        )
