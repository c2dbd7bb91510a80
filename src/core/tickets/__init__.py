"""
Domínio de Senhas - Ciclo de Vida e Fila de Atendimento.

Este módulo contém toda a lógica de negócio relacionada às senhas
de atendimento ao cidadão, incluindo:
- Entidades (TicketEntity, TicketStatus, TicketType, TicketEvent)
- Máquina de estados (TicketLifecycle)
- Ordenação da fila (QueueScheduler)
- Use Cases (emissão, transição, chamada da próxima, consultas)
- Domain Events (TicketCreated, TicketCalled, TicketFinished...)
- DTOs (Input/Output Data Transfer Objects)
- Ports (TicketStore)

Características do Domínio:
- Transições calculadas sobre cópias e gravadas com compare-and-swap
- Preferenciais antes das demais; agendadas só após o horário
- Eventos disparados para side-effects assíncronos
"""

from .entities import TicketEntity, TicketStatus, TicketType, TicketEvent
from .lifecycle import TicketLifecycle
from .scheduler import QueueScheduler
from .events import (
    TicketCreatedEvent,
    TicketCalledEvent,
    TicketServiceStartedEvent,
    TicketFinishedEvent,
    TicketMarkedAbsentEvent,
    TicketRedirectedEvent,
)
from .dtos import (
    CreateTicketInputDTO,
    TransitionTicketInputDTO,
    SelectNextInputDTO,
    TicketOutputDTO,
    TransitionOutputDTO,
    QueueItemDTO,
    SectorDailySummaryDTO,
    TicketListDTO,
)
from .ports import TicketStore, InMemoryTicketStore
from .use_cases import (
    CreateTicketService,
    TransitionTicketService,
    SelectNextTicketService,
    GetTicketService,
    GetTicketByCodeService,
    ListWaitingQueueService,
    ListCitizenTicketsService,
    SectorDailySummaryService,
)

__all__ = [
    # Entities
    "TicketEntity",
    "TicketStatus",
    "TicketType",
    "TicketEvent",
    "TicketLifecycle",
    "QueueScheduler",
    # Events
    "TicketCreatedEvent",
    "TicketCalledEvent",
    "TicketServiceStartedEvent",
    "TicketFinishedEvent",
    "TicketMarkedAbsentEvent",
    "TicketRedirectedEvent",
    # DTOs
    "CreateTicketInputDTO",
    "TransitionTicketInputDTO",
    "SelectNextInputDTO",
    "TicketOutputDTO",
    "TransitionOutputDTO",
    "QueueItemDTO",
    "SectorDailySummaryDTO",
    "TicketListDTO",
    # Ports
    "TicketStore",
    "InMemoryTicketStore",
    # Use Cases
    "CreateTicketService",
    "TransitionTicketService",
    "SelectNextTicketService",
    "GetTicketService",
    "GetTicketByCodeService",
    "ListWaitingQueueService",
    "ListCitizenTicketsService",
    "SectorDailySummaryService",
]
