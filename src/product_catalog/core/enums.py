"""Enumerations used across the catalog service."""

from enum import Enum


class ErrorKind(str, Enum):
    """Expected, caller-recoverable outcomes carried by ``OperationResult``."""

    VALIDATION_FAILED = "validation_failed"
    NOT_FOUND = "not_found"
    INVALID_ARGUMENT = "invalid_argument"


class StorageBackend(str, Enum):
    MEMORY = "memory"
    SQLALCHEMY = "sqlalchemy"


class PublisherBackend(str, Enum):
    NOOP = "noop"
    REDIS_STREAMS = "redis_streams"
