"""
Repositórios Django para persistência de Senhas.

Implementam as interfaces (Ports) definidas no Core.
São DRIVEN ADAPTERS - acionados pelo Core em resposta a operações.

Responsabilidades:
- Implementar o TicketStore com compare-and-swap em `version`
- Sequência diária de códigos atômica por (setor, dia)
- Event Store
- Traduzir falhas transitórias do banco em TransientStoreError

Princípios:
- Repository não contém lógica de negócio
- Usa Mapper para conversões
- Nenhum lock é mantido entre leitura e escrita
"""

from datetime import date, datetime, time, timedelta
from typing import Iterable, List, Optional
import logging

from django.db import IntegrityError, transaction
from django.db.models import F

from src.core.shared.events import DomainEvent
from src.core.shared.exceptions import ConcurrencyError, EntityNotFoundError, ValidationError
from src.core.tickets.entities import OPEN_TICKET_MESSAGE, TicketEntity, TicketStatus

from ..shared.database import translate_store_errors
from .mappers import DomainEventMapper, TicketMapper
from .models import DomainEventModel, TicketModel, TicketSequenceModel

logger = logging.getLogger(__name__)


def _day_range(day: date):
    start = datetime.combine(day, time.min)
    return start, start + timedelta(days=1)


class DjangoTicketStore:
    """
    Implementação Django do TicketStore.

    A transição é gravada com um único UPDATE condicional:
        UPDATE tickets SET ..., version = v + 1
        WHERE id = ? AND version = v
    Zero linhas afetadas significa que outra operação gravou antes.

    Example:
        store = DjangoTicketStore()
        store.add(ticket)
        called = lifecycle.apply(ticket, TicketEvent.CALL, "op-1")
        store.save(called, expected_version=ticket.version)
    """

    def __init__(self):
        self._mapper = TicketMapper()

    @translate_store_errors
    def add(self, ticket: TicketEntity) -> TicketEntity:
        try:
            with transaction.atomic():
                model = self._mapper.to_model(ticket)
                model.version = 0
                model.save(force_insert=True)
        except IntegrityError:
            if TicketModel.objects.filter(id=ticket.id).exists():
                raise ConcurrencyError(f"Senha {ticket.id} já existe")
            # ticket_one_open_per_citizen
            raise ValidationError(OPEN_TICKET_MESSAGE, field="citizen_ref")
        logger.debug("Ticket added: %s (%s)", ticket.code, ticket.id)
        return self._mapper.to_entity(model)

    @translate_store_errors
    def save(self, ticket: TicketEntity, expected_version: int) -> TicketEntity:
        fields = self._mapper.to_fields(ticket)
        updated = TicketModel.objects.filter(
            id=ticket.id,
            version=expected_version,
        ).update(version=F('version') + 1, **fields)

        if not updated:
            current = TicketModel.objects.filter(id=ticket.id).values_list('version', flat=True).first()
            if current is None:
                raise EntityNotFoundError(
                    f"Senha {ticket.id} não encontrada",
                    entity_type="Ticket",
                    entity_id=ticket.id,
                )
            raise ConcurrencyError(
                f"Senha {ticket.id} foi modificada por outro processo "
                f"(versão {current}, esperada {expected_version})"
            )

        logger.debug("Ticket saved: %s v%d", ticket.id, expected_version + 1)
        return self._mapper.to_entity(TicketModel.objects.get(id=ticket.id))

    @translate_store_errors
    def get_by_id(self, ticket_id: str) -> Optional[TicketEntity]:
        try:
            return self._mapper.to_entity(TicketModel.objects.get(id=ticket_id))
        except TicketModel.DoesNotExist:
            logger.debug("Ticket not found: %s", ticket_id)
            return None

    @translate_store_errors
    def get_by_code(self, code: str, day: date) -> Optional[TicketEntity]:
        start, end = _day_range(day)
        model = TicketModel.objects.filter(
            code=(code or "").strip().upper(),
            created_at__gte=start,
            created_at__lt=end,
        ).first()
        return self._mapper.to_entity(model) if model else None

    @translate_store_errors
    def list_by_sector(
        self,
        sector_id: str,
        statuses: Optional[Iterable[TicketStatus]] = None,
        created_on: Optional[date] = None,
    ) -> List[TicketEntity]:
        qs = TicketModel.objects.filter(sector_id=sector_id)
        if statuses is not None:
            qs = qs.filter(status__in=[s.value for s in statuses])
        if created_on is not None:
            start, end = _day_range(created_on)
            qs = qs.filter(created_at__gte=start, created_at__lt=end)
        return self._mapper.to_entity_list(list(qs))

    @translate_store_errors
    def list_by_citizen(
        self,
        citizen_ref: str,
        statuses: Optional[Iterable[TicketStatus]] = None,
    ) -> List[TicketEntity]:
        qs = TicketModel.objects.filter(citizen_ref=citizen_ref)
        if statuses is not None:
            qs = qs.filter(status__in=[s.value for s in statuses])
        return self._mapper.to_entity_list(list(qs))

    @translate_store_errors
    def next_sequence(self, sector_id: str, day: date) -> int:
        with transaction.atomic():
            row, _ = TicketSequenceModel.objects.get_or_create(sector_id=sector_id, day=day)
            TicketSequenceModel.objects.filter(id=row.id).update(last_value=F('last_value') + 1)
            return TicketSequenceModel.objects.values_list(
                'last_value', flat=True
            ).get(id=row.id)

    @translate_store_errors
    def count(self) -> int:
        return TicketModel.objects.count()


class DjangoEventStore:
    """
    Event Store sobre DomainEventModel.

    Chamado pelo DjangoUnitOfWork dentro da transação, antes do commit.
    """

    @translate_store_errors
    def append(self, event: DomainEvent) -> None:
        DomainEventMapper.to_model(event).save(force_insert=True)
        logger.debug("Event stored: %s %s", event.event_type, event.aggregate_id)

    @translate_store_errors
    def list_for_aggregate(self, aggregate_id: str) -> List[dict]:
        return list(
            DomainEventModel.objects.filter(aggregate_id=aggregate_id)
            .order_by('occurred_at')
            .values('event_id', 'event_type', 'event_data', 'occurred_at')
        )

    @translate_store_errors
    def delete_older_than(self, cutoff: datetime) -> int:
        deleted, _ = DomainEventModel.objects.filter(occurred_at__lt=cutoff).delete()
        return deleted
