"""
Testes dos repositórios Django (banco de teste).

Testa:
- TicketMapper e DjangoTicketStore (compare-and-swap, sequência, consultas)
- Repositórios de setores e regras
- DjangoSlotLedger (UPDATE condicional por horário)
- DjangoEventStore
"""

from datetime import date, datetime, time, timedelta
from unittest.mock import patch

import pytest
from django.db import OperationalError

from src.adapters.django_app.tickets.mappers import TicketMapper
from src.adapters.django_app.tickets.models import DomainEventModel, TicketModel
from src.core.scheduling.entities import ScheduleRule, SectorType, Weekday
from src.core.shared.exceptions import (
    ConcurrencyError,
    EntityNotFoundError,
    TransientStoreError,
    ValidationError,
)
from src.core.tickets.entities import TicketEntity, TicketStatus, TicketType
from src.core.tickets.events import TicketCalledEvent


MONDAY = date(2024, 3, 4)
NOW = datetime(2024, 3, 4, 9, 0)


def make_ticket(code="PRO001", sector_id="sec-pro", citizen="cidadao-1", **kwargs):
    kwargs.setdefault("created_at", NOW)
    return TicketEntity.create(sector_id=sector_id, citizen_ref=citizen, code=code, **kwargs)


class TestTicketMapper:

    def test_ida_e_volta_preserva_campos(self):
        ticket = make_ticket(
            code="IPT001",
            sector_id="sec-ipt",
            is_priority=True,
            priority_reason="Idoso",
            scheduled_date=MONDAY,
            scheduled_time=time(9, 30),
        )
        ticket.version = 4

        model = TicketMapper.to_model(ticket)
        entity = TicketMapper.to_entity(model)

        assert model.type == "SPECIAL"
        assert model.status == "CREATED"
        assert entity.type == TicketType.SPECIAL
        assert entity.scheduled_at == datetime(2024, 3, 4, 9, 30)
        assert entity.priority_reason == "Idoso"
        assert entity.version == 4

    def test_to_fields_sem_id_e_versao(self):
        fields = TicketMapper.to_fields(make_ticket())

        assert "id" not in fields
        assert "version" not in fields
        assert fields["status"] == "CREATED"


@pytest.mark.django_db
class TestDjangoTicketStore:

    def test_add_e_get_by_id(self, ticket_store):
        ticket = make_ticket()

        saved = ticket_store.add(ticket)
        loaded = ticket_store.get_by_id(ticket.id)

        assert saved.version == 0
        assert loaded.code == "PRO001"
        assert loaded.status == TicketStatus.CREATED
        assert loaded.created_at == NOW
        assert TicketModel.objects.count() == 1

    def test_add_duplicado(self, ticket_store):
        ticket = make_ticket()
        ticket_store.add(ticket)

        with pytest.raises(ConcurrencyError):
            ticket_store.add(ticket)

    def test_segunda_senha_aberta_do_cidadao(self, ticket_store):
        ticket_store.add(make_ticket(code="PRO001"))

        with pytest.raises(ValidationError) as exc:
            ticket_store.add(make_ticket(code="TRI001", sector_id="sec-tri"))

        assert exc.value.field == "citizen_ref"
        assert TicketModel.objects.filter(citizen_ref="cidadao-1").count() == 1

    def test_nova_senha_apos_encerrar(self, ticket_store):
        first = ticket_store.add(make_ticket(code="PRO001"))
        first.status = TicketStatus.FINISHED
        ticket_store.save(first, expected_version=0)

        ticket_store.add(make_ticket(code="PRO002"))

        assert len(ticket_store.list_by_citizen("cidadao-1")) == 2

    def test_get_by_id_inexistente(self, ticket_store):
        assert ticket_store.get_by_id("nao-existe") is None

    def test_save_incrementa_versao(self, ticket_store):
        ticket = ticket_store.add(make_ticket())
        ticket.status = TicketStatus.CALLED
        ticket.called_at = NOW
        ticket.called_by = "op-1"

        saved = ticket_store.save(ticket, expected_version=0)

        assert saved.version == 1
        assert ticket_store.get_by_id(ticket.id).called_by == "op-1"

    def test_save_versao_desatualizada(self, ticket_store):
        """O segundo save com a mesma versão lida perde a disputa."""
        original = ticket_store.add(make_ticket())
        first = original.copy()
        first.called_by = "op-1"
        second = original.copy()
        second.called_by = "op-2"

        ticket_store.save(first, expected_version=0)
        with pytest.raises(ConcurrencyError):
            ticket_store.save(second, expected_version=0)

        stored = ticket_store.get_by_id(original.id)
        assert stored.called_by == "op-1"
        assert stored.version == 1

    def test_save_inexistente(self, ticket_store):
        with pytest.raises(EntityNotFoundError):
            ticket_store.save(make_ticket(), expected_version=0)

    def test_get_by_code_por_dia(self, ticket_store):
        ticket_store.add(make_ticket(code="PRO001"))
        ticket_store.add(make_ticket(
            code="PRO001", citizen="cidadao-2", created_at=NOW + timedelta(days=1),
        ))

        found = ticket_store.get_by_code("pro001", MONDAY)

        assert found.citizen_ref == "cidadao-1"
        assert ticket_store.get_by_code("PRO001", date(2024, 3, 5)).citizen_ref == "cidadao-2"
        assert ticket_store.get_by_code("PRO001", date(2024, 3, 6)) is None

    def test_list_by_sector_com_filtros(self, ticket_store):
        ticket_store.add(make_ticket(code="PRO001"))
        closed = make_ticket(code="PRO002", citizen="c2")
        closed.status = TicketStatus.FINISHED
        ticket_store.add(closed)
        ticket_store.add(make_ticket(code="PRO003", citizen="c3", created_at=NOW - timedelta(days=1)))
        ticket_store.add(make_ticket(code="TRI001", sector_id="sec-tri", citizen="c4"))

        assert len(ticket_store.list_by_sector("sec-pro")) == 3
        assert len(ticket_store.list_by_sector("sec-pro", created_on=MONDAY)) == 2
        pending = ticket_store.list_by_sector(
            "sec-pro", statuses=[TicketStatus.CREATED], created_on=MONDAY,
        )
        assert [t.code for t in pending] == ["PRO001"]

    def test_list_by_citizen(self, ticket_store):
        closed = make_ticket(code="PRO001")
        closed.status = TicketStatus.FINISHED
        ticket_store.add(closed)
        ticket_store.add(make_ticket(code="TRI001", sector_id="sec-tri"))
        ticket_store.add(make_ticket(code="PRO002", citizen="outro"))

        assert len(ticket_store.list_by_citizen("cidadao-1")) == 2
        assert ticket_store.list_by_citizen("cidadao-1", statuses=[TicketStatus.ABSENT]) == []

    def test_next_sequence_por_setor_e_dia(self, ticket_store):
        assert ticket_store.next_sequence("sec-pro", MONDAY) == 1
        assert ticket_store.next_sequence("sec-pro", MONDAY) == 2
        assert ticket_store.next_sequence("sec-tri", MONDAY) == 1
        assert ticket_store.next_sequence("sec-pro", date(2024, 3, 5)) == 1

    def test_falha_transitoria(self, ticket_store):
        with patch.object(TicketModel.objects, "get", side_effect=OperationalError("timeout")):
            with pytest.raises(TransientStoreError):
                ticket_store.get_by_id("qualquer")


@pytest.mark.django_db
class TestSchedulingRepositories:

    def test_setor_salvo_e_lido(self, sector_repository, saved_sectors):
        sector = sector_repository.get_by_id("sec-ipt")

        assert sector.code == "IPT"
        assert sector.type == SectorType.SPECIAL
        assert sector.estimated_service_minutes == 30
        assert sector_repository.get_by_id("nao-existe") is None
        assert {s.code for s in sector_repository.list_all()} == {"PRO", "TRI", "IPT"}

    def test_setor_atualizado(self, sector_repository, saved_sectors):
        sector = saved_sectors["PRO"]
        sector.active = False
        sector_repository.save(sector)

        assert not sector_repository.get_by_id("sec-pro").active

    def test_regras_do_setor(self, rule_repository, saved_sectors):
        rules = rule_repository.list_by_sector("sec-ipt")

        assert len(rules) == 1
        assert rules[0].weekday == Weekday.MONDAY
        assert rules[0].slot_times() == [time(8, 0), time(8, 30), time(9, 0), time(9, 30)]
        assert rule_repository.list_by_sector("sec-pro") == []

    def test_alteracao_descarta_cache_da_agenda(
        self, sector_repository, rule_repository, saved_sectors
    ):
        from src.config.container import get_container

        registry = get_container().schedule_registry()
        assert registry.get_sector("sec-pro").active
        assert len(registry.rules_for_sector("sec-ipt")) == 1

        sector = saved_sectors["PRO"]
        sector.active = False
        sector_repository.save(sector)
        rule_repository.save(ScheduleRule.create(
            sector_id="sec-ipt",
            weekday=Weekday.TUESDAY,
            start_time=time(8, 0),
            end_time=time(9, 0),
            interval_minutes=30,
            capacity_per_slot=1,
        ))

        assert not registry.get_sector("sec-pro").active
        assert len(registry.rules_for_sector("sec-ipt")) == 2


@pytest.mark.django_db
class TestDjangoSlotLedger:

    KEY = ("sec-ipt", MONDAY, time(9, 30))

    def test_reserva_ate_capacidade(self, slot_ledger, saved_sectors):
        assert slot_ledger.reserve(self.KEY, 2)
        assert slot_ledger.reserve(self.KEY, 2)
        assert not slot_ledger.reserve(self.KEY, 2)
        assert slot_ledger.count(self.KEY) == 2

    def test_release(self, slot_ledger, saved_sectors):
        slot_ledger.reserve(self.KEY, 2)
        slot_ledger.release(self.KEY)
        slot_ledger.release(self.KEY)

        assert slot_ledger.count(self.KEY) == 0
        assert slot_ledger.reserve(self.KEY, 1)

    def test_booked_no_intervalo(self, slot_ledger, saved_sectors):
        slot_ledger.reserve(self.KEY, 2)
        slot_ledger.reserve(("sec-ipt", date(2024, 3, 11), time(8, 0)), 2)
        slot_ledger.reserve(("sec-ipt", date(2024, 3, 25), time(8, 0)), 2)

        booked = slot_ledger.booked("sec-ipt", MONDAY, date(2024, 3, 11))

        assert booked == {
            (MONDAY, time(9, 30)): 1,
            (date(2024, 3, 11), time(8, 0)): 1,
        }


@pytest.mark.django_db
class TestDjangoEventStore:

    def test_append_e_list(self, event_store):
        event = TicketCalledEvent(
            aggregate_id="ticket-1", sector_id="sec-pro", code="PRO001",
            operator_ref="op-1", wait_minutes=7,
        )

        event_store.append(event)
        stored = event_store.list_for_aggregate("ticket-1")

        assert len(stored) == 1
        assert stored[0]["event_type"] == "TicketCalledEvent"
        assert stored[0]["event_data"]["wait_minutes"] == 7

    def test_delete_older_than(self, event_store):
        old = TicketCalledEvent(aggregate_id="ticket-1", occurred_at=NOW - timedelta(days=100))
        recent = TicketCalledEvent(aggregate_id="ticket-1", occurred_at=NOW)
        event_store.append(old)
        event_store.append(recent)

        deleted = event_store.delete_older_than(NOW - timedelta(days=90))

        assert deleted == 1
        assert list(DomainEventModel.objects.values_list("event_id", flat=True)) == [
            recent.event_id
        ]
