"""
Mappers para conversão entre Entities (Core) e Models (Django).

Responsabilidades:
- Converter TicketEntity → dados do TicketModel (para persistência)
- Converter TicketModel → TicketEntity (para uso no Core)
- Converter DomainEvent → DomainEventModel (para Event Store)

Princípios:
- Mappers são stateless
- Não contêm lógica de negócio
- Tratam apenas conversão de dados
"""

import json
from typing import Any, Dict, List

from src.core.shared.events import DomainEvent
from src.core.tickets.entities import TicketEntity, TicketStatus, TicketType

from .models import DomainEventModel, TicketModel


class TicketMapper:
    """
    Mapper para conversão entre TicketEntity e TicketModel.

    Responsável por:
    - to_fields(): Entity → campos graváveis (sem id e version)
    - to_model(): Entity → Model
    - to_entity(): Model → Entity
    """

    @staticmethod
    def to_fields(entity: TicketEntity) -> Dict[str, Any]:
        """
        Campos mutáveis da senha.

        Usado pelo UPDATE condicional: `id` e `version` são
        controlados pelo repositório.
        """
        return {
            'code': entity.code,
            'sector_id': entity.sector_id,
            'citizen_ref': entity.citizen_ref,
            'is_priority': entity.is_priority,
            'priority_reason': entity.priority_reason,
            'type': entity.type.value,
            'scheduled_date': entity.scheduled_date,
            'scheduled_time': entity.scheduled_time,
            'status': entity.status.value,
            'created_at': entity.created_at,
            'called_at': entity.called_at,
            'called_by': entity.called_by,
            'started_at': entity.started_at,
            'finished_at': entity.finished_at,
            'redirected_to': entity.redirected_to,
            'redirected_from': entity.redirected_from,
            'observations': entity.observations,
        }

    @classmethod
    def to_model(cls, entity: TicketEntity) -> TicketModel:
        """
        Converte TicketEntity para TicketModel.

        Note:
            Não chama .save() - deixa isso para o Repository
        """
        return TicketModel(id=entity.id, version=entity.version, **cls.to_fields(entity))

    @staticmethod
    def to_entity(model: TicketModel) -> TicketEntity:
        """
        Converte TicketModel para TicketEntity.

        Note:
            Bypassa validações do factory method .create()
            pois dados já foram validados na emissão
        """
        return TicketEntity(
            id=model.id,
            code=model.code,
            sector_id=model.sector_id,
            citizen_ref=model.citizen_ref,
            is_priority=model.is_priority,
            priority_reason=model.priority_reason,
            type=TicketType(model.type),
            scheduled_date=model.scheduled_date,
            scheduled_time=model.scheduled_time,
            status=TicketStatus(model.status),
            created_at=model.created_at,
            called_at=model.called_at,
            called_by=model.called_by,
            started_at=model.started_at,
            finished_at=model.finished_at,
            redirected_to=model.redirected_to,
            redirected_from=model.redirected_from,
            observations=model.observations,
            version=model.version,
        )

    @classmethod
    def to_entity_list(cls, models: List[TicketModel]) -> List[TicketEntity]:
        """Converte lista de Models para lista de Entities."""
        return [cls.to_entity(model) for model in models]


class DomainEventMapper:
    """Mapper para Domain Events → Event Store."""

    @staticmethod
    def to_model(event: DomainEvent) -> DomainEventModel:
        """
        Converte DomainEvent para DomainEventModel.

        Os dados passam por json (default=str) para que datas e
        horários caibam no JSONField.
        """
        data = json.loads(json.dumps(event.to_dict()["data"], default=str))
        return DomainEventModel(
            event_id=event.event_id,
            event_type=event.event_type,
            aggregate_type=event.aggregate_type,
            aggregate_id=event.aggregate_id,
            event_data=data,
            version=event.version,
            occurred_at=event.occurred_at,
        )
