"""Storage-level errors shared by repository implementations."""


class StorageError(Exception):
    """The backing store failed to apply or read a change."""
