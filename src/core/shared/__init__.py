"""
Shared Domain Components.

Contém componentes compartilhados entre todos os domínios:
- Exceções de domínio
- Interfaces (Ports)
- Base classes para Domain Events
- Locks por chave para adapters em memória
"""

from .exceptions import (
    DomainException,
    ValidationError,
    EntityNotFoundError,
    BusinessRuleViolationError,
    InvalidTransitionError,
    SlotUnavailableError,
    SectorInactiveError,
    ConcurrencyError,
    TransientStoreError,
)
from .events import DomainEvent
from .interfaces import UnitOfWork, EventPublisher
from .concurrency import KeyedLocks

__all__ = [
    "DomainException",
    "ValidationError",
    "EntityNotFoundError",
    "BusinessRuleViolationError",
    "InvalidTransitionError",
    "SlotUnavailableError",
    "SectorInactiveError",
    "ConcurrencyError",
    "TransientStoreError",
    "DomainEvent",
    "UnitOfWork",
    "EventPublisher",
    "KeyedLocks",
]
