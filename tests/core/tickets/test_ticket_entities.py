"""
Testes Unitários para Entidades do Domínio de Senhas.

Coverage:
- TicketEntity.create(): validações de emissão
- Propriedades calculadas (prontidão, tempos)
- Conversão de enums a partir de strings
"""

import pytest
from datetime import date, datetime, time

from src.core.tickets.entities import (
    OPEN_STATUSES,
    TicketEntity,
    TicketEvent,
    TicketStatus,
    TicketType,
)
from src.core.shared.exceptions import ValidationError


CREATED_AT = datetime(2024, 3, 4, 9, 0)


class TestTicketEntityCreate:
    """Testes para emissão de senhas."""

    def test_create_senha_normal(self):
        """Deve emitir senha NORMAL sem horário."""
        ticket = TicketEntity.create(
            sector_id="sec-1",
            citizen_ref=" cidadao-1 ",
            code="PRO001",
            created_at=CREATED_AT,
        )

        assert len(ticket.id) == 36  # UUID
        assert ticket.citizen_ref == "cidadao-1"
        assert ticket.type == TicketType.NORMAL
        assert ticket.status == TicketStatus.CREATED
        assert ticket.version == 0
        assert ticket.scheduled_at is None
        assert not ticket.is_special

    def test_create_senha_agendada(self):
        """Deve ser SPECIAL quando data e hora são informadas."""
        ticket = TicketEntity.create(
            sector_id="sec-1",
            citizen_ref="cidadao-1",
            scheduled_date=date(2024, 3, 4),
            scheduled_time=time(9, 30),
            created_at=CREATED_AT,
        )

        assert ticket.type == TicketType.SPECIAL
        assert ticket.scheduled_at == datetime(2024, 3, 4, 9, 30)

    def test_create_prioridade_com_motivo(self):
        ticket = TicketEntity.create(
            sector_id="sec-1",
            citizen_ref="cidadao-1",
            is_priority=True,
            priority_reason="  Idoso ",
        )

        assert ticket.is_priority
        assert ticket.priority_reason == "Idoso"

    def test_motivo_ignorado_sem_prioridade(self):
        ticket = TicketEntity.create(
            sector_id="sec-1",
            citizen_ref="cidadao-1",
            priority_reason="Idoso",
        )

        assert ticket.priority_reason is None

    @pytest.mark.parametrize("kwargs, field", [
        ({"sector_id": "", "citizen_ref": "c"}, "sector_id"),
        ({"sector_id": "sec-1", "citizen_ref": "   "}, "citizen_ref"),
        ({"sector_id": "sec-1", "citizen_ref": "c", "is_priority": True}, "priority_reason"),
        ({"sector_id": "sec-1", "citizen_ref": "c", "is_priority": True,
          "priority_reason": " "}, "priority_reason"),
        ({"sector_id": "sec-1", "citizen_ref": "c",
          "scheduled_date": date(2024, 3, 4)}, "requested_slot"),
        ({"sector_id": "sec-1", "citizen_ref": "c",
          "scheduled_time": time(9, 0)}, "requested_slot"),
    ])
    def test_create_dados_invalidos(self, kwargs, field):
        """Deve rejeitar emissão inválida indicando o campo."""
        with pytest.raises(ValidationError) as exc_info:
            TicketEntity.create(**kwargs)

        assert exc_info.value.field == field


class TestTicketEntityProperties:

    def test_prontidao_normal_pela_emissao(self):
        ticket = TicketEntity.create(sector_id="s", citizen_ref="c", created_at=CREATED_AT)

        assert ticket.readiness_time == CREATED_AT
        assert ticket.is_due(CREATED_AT)

    def test_prontidao_agendada_pelo_horario(self):
        ticket = TicketEntity.create(
            sector_id="s",
            citizen_ref="c",
            scheduled_date=date(2024, 3, 4),
            scheduled_time=time(10, 0),
            created_at=CREATED_AT,
        )

        assert ticket.readiness_time == datetime(2024, 3, 4, 10, 0)
        assert not ticket.is_due(datetime(2024, 3, 4, 9, 59))
        assert ticket.is_due(datetime(2024, 3, 4, 10, 0))

    def test_wait_minutes(self):
        ticket = TicketEntity.create(sector_id="s", citizen_ref="c", created_at=CREATED_AT)

        assert ticket.wait_minutes(datetime(2024, 3, 4, 9, 12, 30)) == 12

        ticket.called_at = datetime(2024, 3, 4, 9, 5)
        assert ticket.wait_minutes(datetime(2024, 3, 4, 11, 0)) == 5

    def test_service_minutes(self):
        ticket = TicketEntity.create(sector_id="s", citizen_ref="c", created_at=CREATED_AT)
        assert ticket.service_minutes() is None

        ticket.started_at = datetime(2024, 3, 4, 9, 10)
        ticket.finished_at = datetime(2024, 3, 4, 9, 35)
        assert ticket.service_minutes() == 25

    def test_copy_independente(self):
        ticket = TicketEntity.create(sector_id="s", citizen_ref="c")
        copy = ticket.copy()

        copy.status = TicketStatus.CALLED

        assert ticket.status == TicketStatus.CREATED
        assert copy == ticket  # igualdade por id

    def test_status_terminais_e_abertos(self):
        assert TicketStatus.FINISHED.is_terminal
        assert TicketStatus.REDIRECTED.is_terminal
        assert not TicketStatus.IN_SERVICE.is_terminal
        assert TicketStatus.CALLED.is_pending
        assert not TicketStatus.IN_SERVICE.is_pending
        assert TicketStatus.IN_SERVICE in OPEN_STATUSES


class TestEnumConversion:

    @pytest.mark.parametrize("value, expected", [
        ("call", TicketEvent.CALL),
        ("START", TicketEvent.START),
        ("mark-absent", TicketEvent.MARK_ABSENT),
        ("mark_absent", TicketEvent.MARK_ABSENT),
    ])
    def test_evento_from_string(self, value, expected):
        assert TicketEvent.from_string(value) == expected

    def test_evento_invalido(self):
        with pytest.raises(ValueError):
            TicketEvent.from_string("reopen")

    def test_status_from_string(self):
        assert TicketStatus.from_string("in service") == TicketStatus.IN_SERVICE

        with pytest.raises(ValueError):
            TicketStatus.from_string("ABERTO")
