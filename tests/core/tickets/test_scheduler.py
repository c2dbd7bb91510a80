"""
Testes da ordenação da fila (QueueScheduler).
"""

from datetime import date, datetime, time

import pytest

from src.core.tickets.entities import TicketEntity, TicketStatus
from src.core.tickets.scheduler import QueueScheduler, queue_key


MONDAY = date(2024, 3, 4)


def at(hour, minute):
    return datetime.combine(MONDAY, time(hour, minute))


def normal(code, created, priority=False):
    return TicketEntity.create(
        sector_id="sec-1",
        citizen_ref=f"cidadao-{code}",
        code=code,
        is_priority=priority,
        priority_reason="Idoso" if priority else None,
        created_at=created,
    )


def special(code, slot, created):
    return TicketEntity.create(
        sector_id="sec-1",
        citizen_ref=f"cidadao-{code}",
        code=code,
        scheduled_date=MONDAY,
        scheduled_time=slot,
        created_at=created,
    )


@pytest.fixture
def scheduler():
    return QueueScheduler()


class TestQueueOrder:

    def test_cenario_prioridade_chegada_horario(self, scheduler):
        """Às 10:06: A (preferencial), B (chegou 09:50), C (agendada 10:05)."""
        a = normal("A", at(10, 0), priority=True)
        b = normal("B", at(9, 50))
        c = special("C", time(10, 5), created=at(8, 0))

        ordered = scheduler.candidates([c, b, a], now=at(10, 6))

        assert [t.code for t in ordered] == ["A", "B", "C"]

    def test_agendada_antes_do_horario_nao_e_candidata(self, scheduler):
        b = normal("B", at(9, 50))
        c = special("C", time(10, 5), created=at(8, 0))

        assert [t.code for t in scheduler.candidates([b, c], now=at(10, 0))] == ["B"]

    def test_agendada_aparece_na_fila_exibida(self, scheduler):
        """order() mostra a agendada na posição do seu horário."""
        b = normal("B", at(9, 50))
        c = special("C", time(10, 5), created=at(8, 0))
        d = normal("D", at(10, 10))

        assert [t.code for t in scheduler.order([d, c, b], now=at(10, 0))] == ["B", "C", "D"]

    def test_agendada_no_horario_exato(self, scheduler):
        c = special("C", time(10, 5), created=at(8, 0))

        assert scheduler.candidates([c], now=at(10, 5)) == [c]

    def test_preferenciais_por_chegada(self, scheduler):
        late = normal("P2", at(9, 30), priority=True)
        early = normal("P1", at(9, 10), priority=True)
        regular = normal("N1", at(8, 0))

        ordered = scheduler.candidates([late, regular, early], now=at(10, 0))

        assert [t.code for t in ordered] == ["P1", "P2", "N1"]

    def test_empate_decidido_por_id(self, scheduler):
        first = normal("X", at(9, 0))
        second = normal("Y", at(9, 0))
        first.id, second.id = "aaa", "bbb"

        assert scheduler.order([second, first], now=at(10, 0)) == [first, second]
        assert queue_key(first) < queue_key(second)

    def test_somente_pendentes_na_fila(self, scheduler):
        waiting = normal("W", at(9, 0))
        called = normal("C", at(8, 0))
        called.status = TicketStatus.CALLED
        done = normal("F", at(7, 0))
        done.status = TicketStatus.FINISHED

        assert scheduler.order([done, called, waiting], now=at(10, 0)) == [called, waiting]
        assert scheduler.candidates([done, called, waiting], now=at(10, 0)) == [waiting]

    def test_fila_vazia(self, scheduler):
        assert scheduler.candidates([], now=at(10, 0)) == []
