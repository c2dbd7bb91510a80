"""
Testes do Unit of Work (Django e em memória).
"""

from datetime import datetime

import pytest

from src.adapters.django_app.events.publishers import (
    CompositeEventPublisher,
    InMemoryEventPublisher,
    LoggingEventPublisher,
    get_event_publisher,
    CeleryEventPublisher,
)
from src.adapters.django_app.shared.unit_of_work import DjangoUnitOfWork, InMemoryUnitOfWork
from src.adapters.django_app.tickets.models import DomainEventModel, TicketModel
from src.core.shared.exceptions import SlotUnavailableError
from src.core.tickets.entities import TicketEntity
from src.core.tickets.events import TicketCreatedEvent


def created_event(ticket):
    return TicketCreatedEvent(
        aggregate_id=ticket.id,
        sector_id=ticket.sector_id,
        code=ticket.code,
        citizen_ref=ticket.citizen_ref,
    )


def new_ticket(code="PRO001"):
    return TicketEntity.create(
        sector_id="sec-pro",
        citizen_ref=f"cidadao-{code}",
        code=code,
        created_at=datetime(2024, 3, 4, 9, 0),
    )


@pytest.mark.django_db
class TestDjangoUnitOfWork:

    def test_commit_persiste_e_publica(self, ticket_store, event_store):
        publisher = InMemoryEventPublisher()
        uow = DjangoUnitOfWork(event_publisher=publisher, event_store=event_store)
        ticket = new_ticket()

        with uow:
            ticket_store.add(ticket)
            uow.publish_event(created_event(ticket))
            assert publisher.published_events == []

        assert uow.is_committed
        assert TicketModel.objects.filter(id=ticket.id).exists()
        assert DomainEventModel.objects.filter(aggregate_id=ticket.id).count() == 1
        assert [e.event_type for e in publisher.published_events] == ["TicketCreatedEvent"]

    def test_rollback_desfaz_e_descarta_eventos(self, ticket_store, event_store):
        publisher = InMemoryEventPublisher()
        uow = DjangoUnitOfWork(event_publisher=publisher, event_store=event_store)
        ticket = new_ticket()

        with pytest.raises(SlotUnavailableError):
            with uow:
                ticket_store.add(ticket)
                uow.publish_event(created_event(ticket))
                raise SlotUnavailableError("Horário esgotado")

        assert uow.is_rolled_back
        assert not TicketModel.objects.filter(id=ticket.id).exists()
        assert DomainEventModel.objects.count() == 0
        assert publisher.published_events == []

    def test_reutilizavel(self, ticket_store):
        uow = DjangoUnitOfWork()

        for code in ("PRO001", "PRO002"):
            with uow:
                ticket_store.add(new_ticket(code))

        assert TicketModel.objects.count() == 2

    def test_falha_no_publisher_nao_desfaz(self, ticket_store):
        class BrokenPublisher(InMemoryEventPublisher):
            def publish(self, event):
                raise RuntimeError("broker fora do ar")

        uow = DjangoUnitOfWork(event_publisher=BrokenPublisher())
        ticket = new_ticket()

        with uow:
            ticket_store.add(ticket)
            uow.publish_event(created_event(ticket))

        assert TicketModel.objects.filter(id=ticket.id).exists()


class TestInMemoryUnitOfWork:

    def test_commit_entrega_eventos(self):
        publisher = InMemoryEventPublisher()
        uow = InMemoryUnitOfWork(event_publisher=publisher)
        ticket = new_ticket()

        with uow:
            uow.publish_event(created_event(ticket))

        assert uow.committed
        assert len(uow.published_events) == 1
        assert len(publisher.get_events_by_type("TicketCreatedEvent")) == 1

    def test_rollback_descarta_eventos(self):
        uow = InMemoryUnitOfWork()

        with pytest.raises(ValueError):
            with uow:
                uow.publish_event(created_event(new_ticket()))
                raise ValueError("falha")

        assert uow.rolled_back
        assert uow.published_events == []


class TestEventPublishers:

    def test_handlers_locais(self):
        publisher = LoggingEventPublisher()
        received = []
        publisher.register_handler("TicketCreatedEvent", received.append)

        publisher.publish(created_event(new_ticket()))

        assert len(received) == 1

    def test_composite_isola_falhas(self):
        class BrokenPublisher(InMemoryEventPublisher):
            def publish(self, event):
                raise RuntimeError("falha")

        healthy = InMemoryEventPublisher()
        composite = CompositeEventPublisher([BrokenPublisher(), healthy])

        composite.publish_batch([created_event(new_ticket())])

        assert len(healthy.published_events) == 1

    def test_factory(self):
        assert isinstance(get_event_publisher("celery"), CeleryEventPublisher)
        assert isinstance(get_event_publisher("sync"), LoggingEventPublisher)
