"""Custom exception hierarchy for the catalog service."""

from __future__ import annotations

from dataclasses import dataclass


class CatalogError(Exception):
    """Base exception for all catalog errors."""


# --- Configuration ---
class ConfigError(CatalogError):
    """Invalid or missing configuration."""


# --- Domain ---
@dataclass(frozen=True)
class FieldError:
    """One rejected input field."""

    field: str
    message: str


class ValidationFailed(CatalogError):
    """Input rejected before any side effect."""

    def __init__(self, field_errors: list[FieldError] | tuple[FieldError, ...]):
        self.field_errors = tuple(field_errors)
        summary = "; ".join(f"{e.field}: {e.message}" for e in self.field_errors)
        super().__init__(f"Validation failed: {summary}")


class NotFound(CatalogError):
    """Target aggregate does not exist."""

    def __init__(self, resource: str, resource_id: str):
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(f"{resource} with id {resource_id} not found")


class InvalidArgument(CatalogError):
    """Request argument outside its accepted range (e.g. page size)."""


# --- Messaging ---
class DeliveryFailed(CatalogError):
    """Broker unreachable or rejected the publish."""

    def __init__(self, exchange: str, routing_key: str, reason: str):
        self.exchange = exchange
        self.routing_key = routing_key
        self.reason = reason
        super().__init__(
            f"Delivery to {exchange!r} with routing key {routing_key!r} failed: {reason}"
        )


# --- Wiring ---
class WiringError(CatalogError):
    """Startup-time handler wiring defect. Fatal, not user-facing."""


class NoHandlerRegistered(WiringError):
    """Dispatch to an intent type that has no bound handler."""

    def __init__(self, intent_type: type):
        self.intent_type = intent_type
        super().__init__(f"No handler registered for {intent_type.__name__}")


class MultipleHandlersRegistered(WiringError):
    """More than one handler bound to the same intent type."""

    def __init__(self, intent_type: type):
        self.intent_type = intent_type
        super().__init__(
            f"A handler is already registered for {intent_type.__name__}"
        )
