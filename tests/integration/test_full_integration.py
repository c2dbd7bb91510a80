"""
Testes de Integração End-to-End.

Fluxo completo com o container real (stores Django, banco de teste):
- Request HTTP → View → Use Case → Repository → Database
- Domain Events → Unit of Work → Event Store

Os testes de concorrência com threads só rodam com PostgreSQL e
--run-integration (SQLite em memória não compartilha conexões).
"""

import json
from concurrent.futures import ThreadPoolExecutor
from datetime import date, datetime, time
from threading import Barrier

import pytest
from dependency_injector import providers
from django.db import connection, connections
from django.test import Client

from src.adapters.django_app.scheduling.models import SlotReservationModel
from src.adapters.django_app.tickets.models import DomainEventModel, TicketModel
from src.core.scheduling.entities import ScheduleRule, SectorEntity, SectorType, Weekday
from src.core.tickets.dtos import CreateTicketInputDTO, SelectNextInputDTO


NOW = datetime(2024, 3, 4, 9, 0)  # segunda-feira


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def container():
    """Container real (adapters Django) com relógio fixo."""
    from src.config.container import get_container

    container = get_container()
    container.clock.override(providers.Object(lambda: NOW))
    yield container
    container.clock.reset_override()


@pytest.fixture
def sectors(container):
    normal = SectorEntity.create(
        id="sec-pro", code="PRO", name="Protocolo",
        max_capacity=2, estimated_service_minutes=10,
    )
    special = SectorEntity.create(
        id="sec-ipt", code="IPT", name="IPTU", type=SectorType.SPECIAL,
        max_capacity=1, estimated_service_minutes=30,
    )
    for sector in (normal, special):
        container.sector_repository().save(sector)
    container.schedule_rule_repository().save(ScheduleRule.create(
        sector_id=special.id,
        weekday=Weekday.MONDAY,
        start_time=time(8, 0),
        end_time=time(10, 0),
        interval_minutes=30,
        capacity_per_slot=1,
    ))
    container.schedule_registry().refresh()
    return {"normal": normal, "special": special}


@pytest.fixture
def client(sectors):
    return Client()


def post(client, url, payload):
    return client.post(url, data=json.dumps(payload), content_type="application/json")


# =============================================================================
# Fluxos
# =============================================================================

@pytest.mark.django_db
class TestAttendanceFlow:

    def test_ciclo_completo_persistido(self, client):
        created = post(client, "/api/tickets/", {
            "sector_id": "sec-pro", "citizen_ref": "cidadao-1",
        }).json()["data"]
        ticket_id = created["id"]

        called = post(client, "/api/sectors/sec-pro/next/", {"operator_ref": "guiche-1"})
        assert called.json()["data"]["ticket"]["id"] == ticket_id

        for event in ("start", "finish"):
            response = post(client, f"/api/tickets/{ticket_id}/transition/",
                            {"event": event, "operator_ref": "guiche-1"})
            assert response.status_code == 200

        row = TicketModel.objects.get(id=ticket_id)
        assert row.status == "FINISHED"
        assert row.version == 3
        assert row.called_by == "guiche-1"
        assert sorted(
            DomainEventModel.objects.filter(aggregate_id=ticket_id)
            .values_list("event_type", flat=True)
        ) == sorted([
            "TicketCreatedEvent",
            "TicketCalledEvent",
            "TicketServiceStartedEvent",
            "TicketFinishedEvent",
        ])

    def test_agendamento_reserva_e_ausencia_devolve(self, client):
        response = post(client, "/api/tickets/", {
            "sector_id": "sec-ipt", "citizen_ref": "cidadao-1",
            "scheduled_date": "2024-03-04", "scheduled_time": "09:30",
        })
        ticket_id = response.json()["data"]["id"]

        assert response.status_code == 201
        assert SlotReservationModel.objects.get(
            sector_id="sec-ipt", slot_date=date(2024, 3, 4), slot_time=time(9, 30),
        ).reserved == 1

        full = post(client, "/api/tickets/", {
            "sector_id": "sec-ipt", "citizen_ref": "cidadao-2",
            "scheduled_date": "2024-03-04", "scheduled_time": "09:30",
        })
        assert full.status_code == 409

        slots = client.get("/api/sectors/sec-ipt/slots/?from=2024-03-04&to=2024-03-04").json()
        assert [s["time"] for s in slots["data"]] == ["09:00"]

        absent = post(client, f"/api/tickets/{ticket_id}/transition/", {
            "event": "mark_absent", "operator_ref": "guiche-1",
            "observations": "Não compareceu",
        })

        assert absent.status_code == 200
        assert SlotReservationModel.objects.get(
            sector_id="sec-ipt", slot_date=date(2024, 3, 4), slot_time=time(9, 30),
        ).reserved == 0

    def test_codigos_sequenciais_no_banco(self, container, sectors):
        service = container.create_ticket_service()

        codes = [
            service.execute(CreateTicketInputDTO(sector_id="sec-pro", citizen_ref=f"c{i}")).code
            for i in range(3)
        ]

        assert codes == ["PRO001", "PRO002", "PRO003"]

    def test_health(self, client):
        response = client.get("/health/")

        assert response.status_code == 200
        assert response.json()["database"]["status"] == "healthy"


# =============================================================================
# Concorrência (PostgreSQL)
# =============================================================================

@pytest.mark.integration
@pytest.mark.django_db(transaction=True)
class TestConcurrentCalls:

    def test_operadores_simultaneos_nao_repetem_senha(self, container, sectors):
        if connection.vendor != "postgresql":
            pytest.skip("requer PostgreSQL")

        create = container.create_ticket_service()
        for i in range(4):
            create.execute(CreateTicketInputDTO(sector_id="sec-pro", citizen_ref=f"c{i}"))

        workers = 8
        barrier = Barrier(workers)

        def call_next(index):
            try:
                barrier.wait()
                output = container.select_next_ticket_service().execute(
                    SelectNextInputDTO(sector_id="sec-pro", operator_ref=f"guiche-{index}")
                )
                return output.id if output else None
            finally:
                connections.close_all()

        with ThreadPoolExecutor(max_workers=workers) as pool:
            results = list(pool.map(call_next, range(workers)))

        called = [r for r in results if r is not None]
        assert len(called) == 4
        assert len(set(called)) == 4
        assert TicketModel.objects.filter(status="CALLED").count() == 4
