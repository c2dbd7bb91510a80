"""
Entidades do Domínio de Senhas.

Este módulo define as entidades de domínio que encapsulam
regras de negócio relacionadas às senhas de atendimento.

Entidades:
- TicketEntity: Agregado principal do domínio (uma senha)
- TicketStatus: Estados possíveis de uma senha
- TicketType: Senha de chegada (NORMAL) ou agendada (SPECIAL)
- TicketEvent: Eventos aceitos pela máquina de estados

Regras de Negócio Encapsuladas:
- Validação de dados na emissão
- Prioridade exige motivo; senha agendada exige horário
- Tempos de espera e de atendimento
- Momento de prontidão usado na ordenação da fila
"""

from dataclasses import dataclass, field, replace
from datetime import date, datetime, time
from enum import Enum
from typing import Optional
import uuid

from src.core.shared.exceptions import ValidationError


class TicketStatus(Enum):
    """
    Estados possíveis de uma senha.

    Fluxo de Estados:
        CREATED → CALLED → IN_SERVICE → FINISHED
           │         │
           │         └──→ ABSENT / REDIRECTED
           └──→ ABSENT / REDIRECTED

    FINISHED, ABSENT e REDIRECTED são terminais.
    """

    CREATED = "CREATED"
    CALLED = "CALLED"
    IN_SERVICE = "IN_SERVICE"
    FINISHED = "FINISHED"
    ABSENT = "ABSENT"
    REDIRECTED = "REDIRECTED"

    @classmethod
    def from_string(cls, value: str) -> "TicketStatus":
        """
        Converte string para enum.

        Raises:
            ValueError: Se valor inválido
        """
        try:
            return cls[(value or "").strip().upper().replace(" ", "_")]
        except KeyError:
            raise ValueError(f"Status inválido: {value}")

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES

    @property
    def is_pending(self) -> bool:
        """Aguardando na fila (emitida ou chamada)."""
        return self in PENDING_STATUSES


TERMINAL_STATUSES = frozenset({
    TicketStatus.FINISHED,
    TicketStatus.ABSENT,
    TicketStatus.REDIRECTED,
})

PENDING_STATUSES = frozenset({TicketStatus.CREATED, TicketStatus.CALLED})

# Senhas que impedem o cidadão de retirar outra
OPEN_STATUSES = frozenset({
    TicketStatus.CREATED,
    TicketStatus.CALLED,
    TicketStatus.IN_SERVICE,
})

OPEN_TICKET_MESSAGE = "O cidadão já possui uma senha em aberto"


class TicketType(Enum):
    """NORMAL: ordem de chegada. SPECIAL: hora marcada."""

    NORMAL = "NORMAL"
    SPECIAL = "SPECIAL"


class TicketEvent(Enum):
    """Eventos aceitos pela máquina de estados da senha."""

    CALL = "call"
    START = "start"
    FINISH = "finish"
    MARK_ABSENT = "mark_absent"
    REDIRECT = "redirect"

    @classmethod
    def from_string(cls, value: str) -> "TicketEvent":
        """
        Converte string para enum ("call", "CALL", "mark-absent"...).

        Raises:
            ValueError: Se valor inválido
        """
        normalized = (value or "").strip().lower().replace("-", "_")
        for event in cls:
            if event.value == normalized:
                return event
        raise ValueError(f"Evento inválido: {value}")


@dataclass
class TicketEntity:
    """
    Entidade de Domínio: Senha de atendimento.

    Agregado raiz. Criada uma vez, alterada somente por transições
    da TicketLifecycle e nunca removida (estados terminais ficam no
    histórico).

    Invariantes:
    - citizen_ref é obrigatório
    - is_priority ⇒ priority_reason não vazio
    - type == SPECIAL ⇔ scheduled_date e scheduled_time definidos
    - version cresce a cada transição persistida (compare-and-swap)

    Attributes:
        id: Identificador único (UUID)
        code: Código legível (código do setor + sequência diária, ex: INT001)
        sector_id: Setor de atendimento
        citizen_ref: Referência ao cidadão
        is_priority: Atendimento preferencial
        priority_reason: Motivo da prioridade
        type: NORMAL ou SPECIAL
        scheduled_date: Data do horário agendado (SPECIAL)
        scheduled_time: Hora do horário agendado (SPECIAL)
        status: Estado atual
        created_at: Emissão
        called_at: Chamada
        called_by: Operador que chamou
        started_at: Início do atendimento
        finished_at: Encerramento (finalizada ou ausente)
        redirected_to: Senha criada no setor de destino
        redirected_from: Senha de origem (quando fruto de redirecionamento)
        observations: Observações acumuladas
        version: Contador de versão para compare-and-swap
    """

    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    code: str = ""
    sector_id: str = ""
    citizen_ref: str = ""
    is_priority: bool = False
    priority_reason: Optional[str] = None
    type: TicketType = TicketType.NORMAL
    scheduled_date: Optional[date] = None
    scheduled_time: Optional[time] = None
    status: TicketStatus = TicketStatus.CREATED
    created_at: datetime = field(default_factory=datetime.now)
    called_at: Optional[datetime] = None
    called_by: Optional[str] = None
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    redirected_to: Optional[str] = None
    redirected_from: Optional[str] = None
    observations: Optional[str] = None
    version: int = 0

    @classmethod
    def create(
        cls,
        sector_id: str,
        citizen_ref: str,
        code: str = "",
        is_priority: bool = False,
        priority_reason: Optional[str] = None,
        scheduled_date: Optional[date] = None,
        scheduled_time: Optional[time] = None,
        redirected_from: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ) -> "TicketEntity":
        """
        Factory method para emitir senha com validações.

        O tipo é SPECIAL quando um horário é informado e NORMAL caso
        contrário. A validação do horário contra a agenda do setor é
        responsabilidade do SlotCalculator, antes da emissão.

        Raises:
            ValidationError: Se dados de entrada inválidos

        Example:
            ticket = TicketEntity.create(
                sector_id="sec-1",
                citizen_ref="cidadao-42",
                code="INT001",
                is_priority=True,
                priority_reason="Idoso",
            )
        """
        if not sector_id:
            raise ValidationError("Setor é obrigatório", field="sector_id")

        if not citizen_ref or not citizen_ref.strip():
            raise ValidationError("Cidadão é obrigatório", field="citizen_ref")

        reason = priority_reason.strip() if priority_reason else None
        if is_priority and not reason:
            raise ValidationError(
                "Motivo da prioridade é obrigatório",
                field="priority_reason"
            )

        if (scheduled_date is None) != (scheduled_time is None):
            raise ValidationError(
                "Horário agendado exige data e hora",
                field="requested_slot"
            )

        scheduled = scheduled_date is not None
        return cls(
            code=code,
            sector_id=sector_id,
            citizen_ref=citizen_ref.strip(),
            is_priority=is_priority,
            priority_reason=reason if is_priority else None,
            type=TicketType.SPECIAL if scheduled else TicketType.NORMAL,
            scheduled_date=scheduled_date,
            scheduled_time=scheduled_time,
            redirected_from=redirected_from,
            created_at=created_at or datetime.now(),
        )

    # =========================================================================
    # PROPRIEDADES CALCULADAS
    # =========================================================================

    @property
    def is_special(self) -> bool:
        return self.type == TicketType.SPECIAL

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @property
    def is_pending(self) -> bool:
        return self.status.is_pending

    @property
    def scheduled_at(self) -> Optional[datetime]:
        """Data/hora do horário agendado (None para senhas NORMAL)."""
        if self.scheduled_date is None or self.scheduled_time is None:
            return None
        return datetime.combine(self.scheduled_date, self.scheduled_time)

    @property
    def readiness_time(self) -> datetime:
        """
        Momento a partir do qual a senha disputa a fila.

        NORMAL: emissão. SPECIAL: horário agendado.
        """
        return self.scheduled_at if self.is_special else self.created_at

    def is_due(self, now: datetime) -> bool:
        """Se a senha já pode ser chamada (SPECIAL só após o horário)."""
        return not self.is_special or self.scheduled_at <= now

    def wait_minutes(self, now: Optional[datetime] = None) -> int:
        """Minutos entre emissão e chamada (ou até agora)."""
        end = self.called_at or now or datetime.now()
        return max(0, int((end - self.created_at).total_seconds() // 60))

    def service_minutes(self, now: Optional[datetime] = None) -> Optional[int]:
        """Minutos de atendimento (None se não iniciado)."""
        if self.started_at is None:
            return None
        end = self.finished_at or now or datetime.now()
        return max(0, int((end - self.started_at).total_seconds() // 60))

    def copy(self) -> "TicketEntity":
        """Cópia rasa: transições nunca alteram a instância original."""
        return replace(self)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TicketEntity):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def __repr__(self) -> str:
        return (
            f"TicketEntity(id={self.id[:8]}..., "
            f"code={self.code}, "
            f"status={self.status.value}, "
            f"priority={self.is_priority})"
        )
