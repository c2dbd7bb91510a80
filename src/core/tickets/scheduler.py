"""
Ordenação da fila de um setor (QueueScheduler).

Função pura sobre um snapshot de senhas: não guarda estado, não
acessa repositórios. A seleção atômica da próxima senha fica no
SelectNextTicketService, que combina esta ordenação com o
compare-and-swap da transição `call`.

Critérios, na ordem (o primeiro que diferir decide):
1. Prioridade: preferenciais antes das demais
2. Prontidão: NORMAL pela emissão, SPECIAL pelo horário agendado
3. Desempate: emissão e, por fim, id
"""

from datetime import datetime
from typing import Iterable, List, Tuple

from .entities import TicketEntity, TicketStatus


def queue_key(ticket: TicketEntity) -> Tuple[bool, datetime, datetime, str]:
    """Chave de ordenação total e determinística."""
    return (
        not ticket.is_priority,
        ticket.readiness_time,
        ticket.created_at,
        ticket.id,
    )


class QueueScheduler:
    """
    Ordena senhas pendentes de um setor.

    Example:
        scheduler = QueueScheduler()
        fila = scheduler.order(tickets, now=datetime.now())
        proximas = scheduler.candidates(tickets, now=datetime.now())
    """

    def order(self, tickets: Iterable[TicketEntity], now: datetime) -> List[TicketEntity]:
        """
        Senhas pendentes (CREATED ou CALLED) na ordem de atendimento.

        Inclui senhas SPECIAL ainda não vencidas, na posição do seu
        horário: serve para exibir a fila, não para chamar.
        """
        pending = [t for t in tickets if t.is_pending]
        return sorted(pending, key=queue_key)

    def candidates(self, tickets: Iterable[TicketEntity], now: datetime) -> List[TicketEntity]:
        """
        Senhas que podem ser chamadas agora, na ordem de atendimento.

        Somente CREATED; SPECIAL apenas quando o horário agendado
        já chegou (não furam a fila antes da hora).
        """
        return [
            ticket for ticket in self.order(tickets, now)
            if ticket.status == TicketStatus.CREATED and ticket.is_due(now)
        ]
