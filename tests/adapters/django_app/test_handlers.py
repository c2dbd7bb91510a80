"""
Testes dos handlers Celery de eventos de senha.

As tasks são executadas diretamente (sem broker); `.delay` das
tasks encadeadas é substituído por mocks.
"""

from datetime import datetime, timedelta
from unittest.mock import patch

import pytest

from src.adapters.django_app.events import handlers
from src.adapters.django_app.events.publishers import CeleryEventPublisher
from src.core.tickets.dtos import CreateTicketInputDTO
from src.core.tickets.events import TicketCalledEvent, TicketFinishedEvent


def called_event():
    return TicketCalledEvent(
        aggregate_id="ticket-1",
        sector_id="sec-pro",
        code="PRO001",
        operator_ref="op-1",
        wait_minutes=12,
    )


class TestDispatcher:

    def test_todos_os_eventos_de_senha_tem_handler(self):
        assert set(handlers.EVENT_HANDLERS) == {
            "TicketCreatedEvent",
            "TicketCalledEvent",
            "TicketServiceStartedEvent",
            "TicketFinishedEvent",
            "TicketMarkedAbsentEvent",
            "TicketRedirectedEvent",
        }

    def test_roteia_para_handler(self):
        event = called_event()

        with patch.object(handlers.handle_ticket_called, "delay") as delay:
            routed = handlers.dispatch_domain_event("TicketCalledEvent", event.to_dict())

        assert routed is True
        delay.assert_called_once_with(event.to_dict())

    def test_evento_desconhecido(self):
        assert handlers.dispatch_domain_event("TicketReopenedEvent", {}) is False


class TestTicketHandlers:

    def test_chamada_registra_espera(self):
        with patch.object(handlers.record_metric, "delay") as delay:
            handlers.handle_ticket_called(called_event().to_dict())

        delay.assert_called_once_with(
            metric_name="ticket_wait_minutes",
            value=12,
            tags={"sector_id": "sec-pro"},
        )

    def test_finalizada_registra_duracao(self):
        event = TicketFinishedEvent(
            aggregate_id="ticket-1", sector_id="sec-pro", code="PRO001",
            operator_ref="op-1", service_minutes=None,
        )

        with patch.object(handlers.record_metric, "delay") as delay:
            handlers.handle_ticket_finished(event.to_dict())

        assert delay.call_args.kwargs["value"] == 0

    def test_publisher_celery_enfileira_dispatch(self):
        event = called_event()

        with patch.object(handlers.dispatch_domain_event, "delay") as delay:
            CeleryEventPublisher(also_log=False).publish(event)

        delay.assert_called_once_with("TicketCalledEvent", event.to_dict())

    def test_publisher_celery_nao_propaga_falha(self):
        with patch.object(handlers.dispatch_domain_event, "delay",
                          side_effect=ConnectionError("broker fora do ar")):
            CeleryEventPublisher().publish(called_event())


class TestScheduledTasks:

    def test_resumo_diario_por_setor(self, testing_container):
        testing_container.create_ticket_service().execute(
            CreateTicketInputDTO(sector_id="sec-pro", citizen_ref="cidadao-1")
        )

        reports = handlers.generate_daily_report(day="2024-03-04")

        by_sector = {report["sector_id"]: report for report in reports}
        assert set(by_sector) == {"sec-pro", "sec-tri", "sec-ipt"}
        assert by_sector["sec-pro"]["generated"] == 1
        assert by_sector["sec-tri"]["generated"] == 0

    @pytest.mark.django_db
    def test_limpeza_de_eventos_antigos(self, event_store):
        now = datetime.now()
        event_store.append(TicketCalledEvent(aggregate_id="t-1", occurred_at=now - timedelta(days=120)))
        event_store.append(TicketCalledEvent(aggregate_id="t-2", occurred_at=now))

        assert handlers.cleanup_old_events(days=90) == 1
