"""
Data Transfer Objects (DTOs) do Domínio de Senhas.

DTOs são estruturas simples para transportar dados entre camadas,
evitando vazamento de modelos internos (entidades) para camadas externas.

Tipos de DTOs:
- Input DTOs: Recebem dados de entrada (de APIs)
- Output DTOs: Formatam dados para resposta
- Query DTOs: Fila de espera e resumo diário
"""

from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import List, Optional

from .entities import TicketEntity


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


# =============================================================================
# INPUT DTOs (Entrada)
# =============================================================================

@dataclass(frozen=True)
class CreateTicketInputDTO:
    """
    DTO de entrada para emitir senha.

    Imutável (frozen=True) para garantir que dados recebidos
    não sejam alterados acidentalmente.

    Attributes:
        sector_id: Setor de atendimento
        citizen_ref: Referência ao cidadão
        is_priority: Atendimento preferencial
        priority_reason: Motivo (obrigatório se preferencial)
        scheduled_date: Data do horário pedido (setor SPECIAL)
        scheduled_time: Hora do horário pedido (setor SPECIAL)
    """

    sector_id: str
    citizen_ref: str
    is_priority: bool = False
    priority_reason: Optional[str] = None
    scheduled_date: Optional[date] = None
    scheduled_time: Optional[time] = None

    @property
    def has_requested_slot(self) -> bool:
        return self.scheduled_date is not None or self.scheduled_time is not None

    def to_dict(self) -> dict:
        """Converte para dicionário."""
        return {
            "sector_id": self.sector_id,
            "citizen_ref": self.citizen_ref,
            "is_priority": self.is_priority,
            "priority_reason": self.priority_reason,
            "scheduled_date": self.scheduled_date.isoformat() if self.scheduled_date else None,
            "scheduled_time": self.scheduled_time.strftime("%H:%M") if self.scheduled_time else None,
        }


@dataclass(frozen=True)
class TransitionTicketInputDTO:
    """
    DTO de entrada para transição de senha.

    Attributes:
        ticket_id: ID da senha
        event: Evento (call, start, finish, mark_absent, redirect)
        operator_ref: Operador que executa a ação
        observations: Observações / motivo
        target_sector_id: Destino (apenas redirect)
        scheduled_date: Data pedida no destino SPECIAL (apenas redirect)
        scheduled_time: Hora pedida no destino SPECIAL (apenas redirect)
    """

    ticket_id: str
    event: str
    operator_ref: str
    observations: Optional[str] = None
    target_sector_id: Optional[str] = None
    scheduled_date: Optional[date] = None
    scheduled_time: Optional[time] = None


@dataclass(frozen=True)
class SelectNextInputDTO:
    """DTO de entrada para chamar a próxima senha do setor."""

    sector_id: str
    operator_ref: str


# =============================================================================
# OUTPUT DTOs (Saída)
# =============================================================================

@dataclass
class TicketOutputDTO:
    """
    DTO de saída completo com dados da senha.

    Attributes:
        id: Identificador único
        code: Código legível (ex: INT001)
        sector_id: Setor
        citizen_ref: Cidadão
        is_priority: Preferencial
        priority_reason: Motivo da prioridade
        type: NORMAL ou SPECIAL
        status: Estado atual
        scheduled_date: Data agendada (SPECIAL)
        scheduled_time: Hora agendada "HH:MM" (SPECIAL)
        created_at: Emissão
        called_at: Chamada
        called_by: Operador que chamou
        started_at: Início do atendimento
        finished_at: Encerramento
        redirected_to: Senha criada no redirecionamento
        redirected_from: Senha de origem
        observations: Observações acumuladas
        wait_minutes: Espera até a chamada (ou até agora)
        service_minutes: Duração do atendimento
        version: Versão para compare-and-swap
    """

    id: str
    code: str
    sector_id: str
    citizen_ref: str
    is_priority: bool
    priority_reason: Optional[str]
    type: str
    status: str
    scheduled_date: Optional[date]
    scheduled_time: Optional[str]
    created_at: datetime
    called_at: Optional[datetime]
    called_by: Optional[str]
    started_at: Optional[datetime]
    finished_at: Optional[datetime]
    redirected_to: Optional[str]
    redirected_from: Optional[str]
    observations: Optional[str]
    wait_minutes: int
    service_minutes: Optional[int]
    version: int

    @classmethod
    def from_entity(cls, entity: TicketEntity) -> "TicketOutputDTO":
        """
        Factory method para converter entidade em DTO.

        Args:
            entity: Entidade TicketEntity

        Returns:
            DTO com dados da entidade
        """
        return cls(
            id=entity.id,
            code=entity.code,
            sector_id=entity.sector_id,
            citizen_ref=entity.citizen_ref,
            is_priority=entity.is_priority,
            priority_reason=entity.priority_reason,
            type=entity.type.value,
            status=entity.status.value,
            scheduled_date=entity.scheduled_date,
            scheduled_time=(
                entity.scheduled_time.strftime("%H:%M") if entity.scheduled_time else None
            ),
            created_at=entity.created_at,
            called_at=entity.called_at,
            called_by=entity.called_by,
            started_at=entity.started_at,
            finished_at=entity.finished_at,
            redirected_to=entity.redirected_to,
            redirected_from=entity.redirected_from,
            observations=entity.observations,
            wait_minutes=entity.wait_minutes(),
            service_minutes=entity.service_minutes(),
            version=entity.version,
        )

    def to_dict(self) -> dict:
        """Converte para dicionário (serialização JSON)."""
        return {
            "id": self.id,
            "code": self.code,
            "sector_id": self.sector_id,
            "citizen_ref": self.citizen_ref,
            "is_priority": self.is_priority,
            "priority_reason": self.priority_reason,
            "type": self.type,
            "status": self.status,
            "scheduled_date": self.scheduled_date.isoformat() if self.scheduled_date else None,
            "scheduled_time": self.scheduled_time,
            "created_at": _iso(self.created_at),
            "called_at": _iso(self.called_at),
            "called_by": self.called_by,
            "started_at": _iso(self.started_at),
            "finished_at": _iso(self.finished_at),
            "redirected_to": self.redirected_to,
            "redirected_from": self.redirected_from,
            "observations": self.observations,
            "wait_minutes": self.wait_minutes,
            "service_minutes": self.service_minutes,
            "version": self.version,
        }


@dataclass
class TransitionOutputDTO:
    """
    Resultado de uma transição.

    Attributes:
        ticket: Senha após a transição
        redirected_ticket: Senha criada no destino (apenas redirect)
    """

    ticket: TicketOutputDTO
    redirected_ticket: Optional[TicketOutputDTO] = None

    def to_dict(self) -> dict:
        result = {"ticket": self.ticket.to_dict()}
        if self.redirected_ticket:
            result["redirected_ticket"] = self.redirected_ticket.to_dict()
        return result


@dataclass
class QueueItemDTO:
    """
    Posição de uma senha na fila de espera.

    Attributes:
        position: Posição (1 = próxima)
        ticket_id: ID da senha
        code: Código legível
        status: CREATED ou CALLED
        is_priority: Preferencial
        type: NORMAL ou SPECIAL
        readiness_time: Emissão (NORMAL) ou horário agendado (SPECIAL)
        wait_minutes: Espera acumulada
        estimated_wait_minutes: Estimativa até ser atendida
    """

    position: int
    ticket_id: str
    code: str
    status: str
    is_priority: bool
    type: str
    readiness_time: datetime
    wait_minutes: int
    estimated_wait_minutes: int

    def to_dict(self) -> dict:
        return {
            "position": self.position,
            "ticket_id": self.ticket_id,
            "code": self.code,
            "status": self.status,
            "is_priority": self.is_priority,
            "type": self.type,
            "readiness_time": self.readiness_time.isoformat(),
            "wait_minutes": self.wait_minutes,
            "estimated_wait_minutes": self.estimated_wait_minutes,
        }


@dataclass
class SectorDailySummaryDTO:
    """
    Resumo diário de atendimento de um setor.

    Attributes:
        sector_id: Setor
        day: Data de emissão considerada
        generated: Senhas emitidas
        finished: Atendimentos finalizados
        absent: Ausências
        redirected: Redirecionamentos
        pending: Senhas ainda abertas
        efficiency: % de finalizadas sobre emitidas
        absence_rate: % de ausentes sobre emitidas
        average_wait_minutes: Espera média das senhas chamadas
        average_service_minutes: Duração média dos atendimentos finalizados
    """

    sector_id: str
    day: date
    generated: int = 0
    finished: int = 0
    absent: int = 0
    redirected: int = 0
    pending: int = 0
    efficiency: float = 0.0
    absence_rate: float = 0.0
    average_wait_minutes: float = 0.0
    average_service_minutes: float = 0.0
    by_status: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "sector_id": self.sector_id,
            "day": self.day.isoformat(),
            "generated": self.generated,
            "finished": self.finished,
            "absent": self.absent,
            "redirected": self.redirected,
            "pending": self.pending,
            "efficiency": self.efficiency,
            "absence_rate": self.absence_rate,
            "average_wait_minutes": self.average_wait_minutes,
            "average_service_minutes": self.average_service_minutes,
            "by_status": dict(self.by_status),
        }


@dataclass
class TicketListDTO:
    """Lista simples de senhas (ex: histórico do cidadão)."""

    items: List[TicketOutputDTO] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.items)

    def to_dict(self) -> dict:
        return {
            "items": [item.to_dict() for item in self.items],
            "total": self.total,
        }
