"""Runtime contracts for generated domain model code."""

from .contracts import (
    AggregateRoot,
    Command,
    DomainEvent,
    DomainEvents,
    Entity,
    Message,
    Query,
    ValueObject,
    ValueValidationError,
)

__all__ = [
    "AggregateRoot",
    "Command",
    "DomainEvent",
    "DomainEvents",
    "Entity",
    "Message",
    "Query",
    "ValueObject",
    "ValueValidationError",
]
