"""
Domain Events do Domínio de Senhas.

Este módulo define os eventos de domínio disparados quando algo
significativo acontece com uma senha.

Eventos:
- TicketCreatedEvent: Senha emitida
- TicketCalledEvent: Senha chamada por um operador
- TicketServiceStartedEvent: Atendimento iniciado
- TicketFinishedEvent: Atendimento finalizado
- TicketMarkedAbsentEvent: Cidadão não compareceu
- TicketRedirectedEvent: Senha redirecionada para outro setor

Uso:
    Eventos são criados nos use cases e publicados através do
    UnitOfWork após commit bem-sucedido.

    with uow:
        store.add(ticket)
        uow.publish_event(TicketCreatedEvent(aggregate_id=ticket.id, ...))
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from src.core.shared.events import DomainEvent


@dataclass
class TicketDomainEvent(DomainEvent):
    """
    Base dos eventos de senha.

    Attributes:
        sector_id: Setor da senha
        code: Código legível da senha
    """

    sector_id: str = ""
    code: str = ""

    @property
    def aggregate_type(self) -> str:
        return "Ticket"


@dataclass
class TicketCreatedEvent(TicketDomainEvent):
    """
    Evento: Senha emitida.

    Handlers típicos:
    - Atualizar painel de chamadas do setor
    - Registrar estatísticas de emissão
    """

    citizen_ref: str = ""
    is_priority: bool = False
    ticket_type: str = "NORMAL"
    scheduled_at: Optional[str] = None


@dataclass
class TicketCalledEvent(TicketDomainEvent):
    """
    Evento: Senha chamada.

    Handlers típicos:
    - Exibir código e guichê no painel
    - Emitir aviso sonoro
    """

    operator_ref: str = ""
    wait_minutes: int = 0


@dataclass
class TicketServiceStartedEvent(TicketDomainEvent):
    """Evento: Atendimento iniciado pelo operador que chamou."""

    operator_ref: str = ""


@dataclass
class TicketFinishedEvent(TicketDomainEvent):
    """Evento: Atendimento finalizado."""

    operator_ref: str = ""
    service_minutes: Optional[int] = None


@dataclass
class TicketMarkedAbsentEvent(TicketDomainEvent):
    """
    Evento: Cidadão ausente.

    Quando a senha é agendada, o horário já foi devolvido ao
    livro de reservas ao publicar este evento.
    """

    operator_ref: str = ""
    reason: str = ""


@dataclass
class TicketRedirectedEvent(TicketDomainEvent):
    """
    Evento: Senha redirecionada.

    Attributes:
        target_sector_id: Setor de destino
        new_ticket_id: Senha criada no destino
        new_code: Código da nova senha
        reason: Motivo informado pelo operador
    """

    operator_ref: str = ""
    target_sector_id: str = ""
    new_ticket_id: str = ""
    new_code: str = ""
    reason: str = ""

    def _get_event_data(self) -> Dict[str, Any]:
        return {
            "sector_id": self.sector_id,
            "code": self.code,
            "operator_ref": self.operator_ref,
            "target_sector_id": self.target_sector_id,
            "new_ticket_id": self.new_ticket_id,
            "new_code": self.new_code,
            "reason": self.reason,
        }
