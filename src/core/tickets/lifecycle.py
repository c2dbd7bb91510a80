"""
Máquina de estados da senha (TicketLifecycle).

Valida transições, aplica pré-condições e registra os horários de
cada etapa. Não depende de repositórios: recebe uma senha e devolve
uma NOVA instância com a transição aplicada. A instância recebida
nunca é alterada, então uma violação não deixa mutação parcial.

Transições:
    CREATED    --call-->        CALLED       (registra called_at/called_by)
    CALLED     --start-->       IN_SERVICE   (só quem chamou)
    IN_SERVICE --finish-->      FINISHED     (acrescenta observações)
    CREATED    --mark_absent--> ABSENT       (observações obrigatórias)
    CALLED     --mark_absent--> ABSENT
    CREATED    --redirect-->    REDIRECTED   (cria senha no setor de destino)
    CALLED     --redirect-->    REDIRECTED
"""

from datetime import date, datetime, time
from typing import Dict, List, Optional, Tuple

from src.core.scheduling.entities import SectorEntity
from src.core.shared.exceptions import InvalidTransitionError

from .entities import TicketEntity, TicketEvent, TicketStatus


TRANSITIONS: Dict[Tuple[TicketStatus, TicketEvent], TicketStatus] = {
    (TicketStatus.CREATED, TicketEvent.CALL): TicketStatus.CALLED,
    (TicketStatus.CALLED, TicketEvent.START): TicketStatus.IN_SERVICE,
    (TicketStatus.IN_SERVICE, TicketEvent.FINISH): TicketStatus.FINISHED,
    (TicketStatus.CREATED, TicketEvent.MARK_ABSENT): TicketStatus.ABSENT,
    (TicketStatus.CALLED, TicketEvent.MARK_ABSENT): TicketStatus.ABSENT,
    (TicketStatus.CREATED, TicketEvent.REDIRECT): TicketStatus.REDIRECTED,
    (TicketStatus.CALLED, TicketEvent.REDIRECT): TicketStatus.REDIRECTED,
}


def _append(current: Optional[str], text: Optional[str]) -> Optional[str]:
    text = (text or "").strip()
    if not text:
        return current
    return f"{current}\n{text}" if current else text


class TicketLifecycle:
    """
    Regras de transição de uma senha.

    Example:
        lifecycle = TicketLifecycle()
        called = lifecycle.apply(ticket, TicketEvent.CALL, operator_ref="op-1")
        ticket.status    # CREATED (inalterada)
        called.status    # CALLED
    """

    def allowed_events(self, status: TicketStatus) -> List[TicketEvent]:
        """Eventos aceitos no estado (vazio para estados terminais)."""
        return [event for (source, event) in TRANSITIONS if source == status]

    def can_apply(self, status: TicketStatus, event: TicketEvent) -> bool:
        return (status, event) in TRANSITIONS

    def target_status(self, ticket: TicketEntity, event: TicketEvent) -> TicketStatus:
        """
        Estado de destino do evento.

        Raises:
            InvalidTransitionError: Se o evento não é aceito no estado atual
        """
        target = TRANSITIONS.get((ticket.status, event))
        if target is None:
            if ticket.is_terminal:
                message = (
                    f"Senha {ticket.code or ticket.id} já está encerrada "
                    f"({ticket.status.value})"
                )
            else:
                message = (
                    f"Evento '{event.value}' não é permitido para senha "
                    f"no estado {ticket.status.value}"
                )
            raise InvalidTransitionError(
                message,
                from_status=ticket.status.value,
                event=event.value,
            )
        return target

    def apply(
        self,
        ticket: TicketEntity,
        event: TicketEvent,
        operator_ref: str,
        observations: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> TicketEntity:
        """
        Aplica call, start, finish ou mark_absent.

        Redirecionamento cria outra senha e passa por `redirect()`.

        Args:
            ticket: Senha atual (não é alterada)
            event: Evento a aplicar
            operator_ref: Operador que executa a ação
            observations: Observações (obrigatórias para mark_absent)
            now: Momento da transição (default: agora)

        Returns:
            Nova instância com a transição aplicada

        Raises:
            InvalidTransitionError: Se evento não permitido ou
                pré-condição não atendida
        """
        if event == TicketEvent.REDIRECT:
            raise InvalidTransitionError(
                "Redirecionamento exige setor de destino",
                from_status=ticket.status.value,
                event=event.value,
            )

        target = self.target_status(ticket, event)
        now = now or datetime.now()
        updated = ticket.copy()

        if event == TicketEvent.CALL:
            updated.called_at = now
            updated.called_by = operator_ref

        elif event == TicketEvent.START:
            if ticket.called_by != operator_ref:
                raise InvalidTransitionError(
                    "Somente o operador que chamou a senha pode iniciar o atendimento",
                    from_status=ticket.status.value,
                    event=event.value,
                    rule="operador_divergente",
                )
            updated.started_at = now

        elif event == TicketEvent.FINISH:
            updated.finished_at = now
            updated.observations = _append(ticket.observations, observations)

        elif event == TicketEvent.MARK_ABSENT:
            if not observations or not observations.strip():
                raise InvalidTransitionError(
                    "Informe o motivo da ausência",
                    from_status=ticket.status.value,
                    event=event.value,
                    rule="observacao_obrigatoria",
                )
            updated.finished_at = now
            updated.observations = _append(ticket.observations, observations)

        updated.status = target
        return updated

    def redirect(
        self,
        ticket: TicketEntity,
        target_sector: SectorEntity,
        reason: str,
        new_code: str,
        now: Optional[datetime] = None,
        scheduled_date: Optional[date] = None,
        scheduled_time: Optional[time] = None,
    ) -> Tuple[TicketEntity, TicketEntity]:
        """
        Redireciona a senha para outro setor.

        A nova senha herda cidadão e prioridade. É SPECIAL somente
        quando o destino é SPECIAL e um horário (já reservado pelo
        chamador) é informado; caso contrário é NORMAL.

        Args:
            ticket: Senha de origem (não é alterada)
            target_sector: Setor de destino
            reason: Motivo do redirecionamento
            new_code: Código da nova senha no setor de destino
            now: Momento da transição
            scheduled_date: Data reservada no destino (SPECIAL)
            scheduled_time: Hora reservada no destino (SPECIAL)

        Returns:
            (origem REDIRECTED, nova senha CREATED)

        Raises:
            InvalidTransitionError: Se estado não permite, destino igual
                ao atual, destino inativo ou motivo vazio
        """
        target = self.target_status(ticket, TicketEvent.REDIRECT)

        def reject(message: str, rule: str) -> InvalidTransitionError:
            return InvalidTransitionError(
                message,
                from_status=ticket.status.value,
                event=TicketEvent.REDIRECT.value,
                rule=rule,
            )

        if target_sector.id == ticket.sector_id:
            raise reject("Setor de destino deve ser diferente do atual", "mesmo_setor")
        if not target_sector.active:
            raise reject(f"Setor de destino {target_sector.code} está inativo", "setor_inativo")
        if not reason or not reason.strip():
            raise reject("Informe o motivo do redirecionamento", "motivo_obrigatorio")

        now = now or datetime.now()
        scheduled = target_sector.is_special and scheduled_date is not None

        new_ticket = TicketEntity.create(
            sector_id=target_sector.id,
            citizen_ref=ticket.citizen_ref,
            code=new_code,
            is_priority=ticket.is_priority,
            priority_reason=ticket.priority_reason,
            scheduled_date=scheduled_date if scheduled else None,
            scheduled_time=scheduled_time if scheduled else None,
            redirected_from=ticket.id,
            created_at=now,
        )

        source = ticket.copy()
        source.status = target
        source.redirected_to = new_ticket.id
        source.observations = _append(ticket.observations, reason)
        return source, new_ticket
