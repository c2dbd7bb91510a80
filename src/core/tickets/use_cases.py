"""
Use Cases (Application Services) do Domínio de Senhas.

Este módulo contém os casos de uso da aplicação, que orquestram
a lógica de negócio coordenando entidades, agenda, armazenamento
e eventos.

Use Cases implementados:
- CreateTicketService: Emite senha (NORMAL ou agendada)
- TransitionTicketService: Aplica call/start/finish/mark_absent/redirect
- SelectNextTicketService: Chama a próxima senha do setor
- GetTicketService: Obtém senha por ID
- GetTicketByCodeService: Consulta pública por código e data
- ListWaitingQueueService: Fila de espera com posição e estimativa
- ListCitizenTicketsService: Histórico de senhas de um cidadão
- SectorDailySummaryService: Resumo diário do setor

Responsabilidades dos Use Cases:
- Validar entrada (via DTOs)
- Coordenar entidades, TicketLifecycle e SlotCalculator
- Gerenciar transações (via UoW)
- Disparar eventos de domínio
- Retornar DTOs de saída

Princípios:
- Um Use Case = Uma operação de negócio
- Dependências injetadas (DI)
- Sem lógica de infraestrutura
- Nenhuma operação deixa mutação parcial
"""

from datetime import date, datetime
from typing import Callable, List, Optional
import logging

from src.core.scheduling.entities import SectorEntity
from src.core.scheduling.registry import ScheduleRegistry
from src.core.scheduling.slots import SlotCalculator
from src.core.shared.exceptions import (
    ConcurrencyError,
    EntityNotFoundError,
    InvalidTransitionError,
    SectorInactiveError,
    ValidationError,
)
from src.core.shared.interfaces import UnitOfWork

from .dtos import (
    CreateTicketInputDTO,
    QueueItemDTO,
    SectorDailySummaryDTO,
    SelectNextInputDTO,
    TicketListDTO,
    TicketOutputDTO,
    TransitionOutputDTO,
    TransitionTicketInputDTO,
)
from .entities import (
    OPEN_STATUSES,
    OPEN_TICKET_MESSAGE,
    PENDING_STATUSES,
    TicketEntity,
    TicketEvent,
    TicketStatus,
)
from .events import (
    TicketCalledEvent,
    TicketCreatedEvent,
    TicketFinishedEvent,
    TicketMarkedAbsentEvent,
    TicketRedirectedEvent,
    TicketServiceStartedEvent,
)
from .lifecycle import TicketLifecycle
from .ports import TicketStore
from .scheduler import QueueScheduler


logger = logging.getLogger(__name__)

DEFAULT_SELECT_NEXT_MAX_ROUNDS = 10

Clock = Callable[[], datetime]


def _ticket_code(sector: SectorEntity, sequence: int) -> str:
    """Código legível: código do setor + sequência diária com 3 dígitos."""
    return f"{sector.code}{sequence:03d}"


def _ensure_active(sector: SectorEntity) -> None:
    if not sector.active:
        raise SectorInactiveError(
            f"Setor {sector.code} está inativo",
            sector_id=sector.id,
        )


def _get_ticket(store: TicketStore, ticket_id: str) -> TicketEntity:
    ticket = store.get_by_id(ticket_id)
    if not ticket:
        raise EntityNotFoundError(
            f"Senha {ticket_id} não encontrada",
            entity_type="Ticket",
            entity_id=ticket_id,
        )
    return ticket


class CreateTicketService:
    """
    Use Case: Emitir uma nova senha.

    Fluxo:
    1. Validar dados de entrada e estado do setor
    2. Recusar cidadão que já tem senha em aberto
    3. Setor SPECIAL: reservar o horário pedido (atômico por horário)
    4. Gerar código diário e persistir
    5. Disparar evento TicketCreated

    Attributes:
        store: Armazenamento de senhas
        registry: Setores e regras de horário
        calculator: Validação/reserva de horários
        uow: Unit of Work para transações

    Example:
        service = CreateTicketService(store, registry, calculator, uow)
        output = service.execute(CreateTicketInputDTO(
            sector_id="sec-1",
            citizen_ref="cidadao-42",
        ))
        print(output.code)  # INT001
    """

    def __init__(
        self,
        store: TicketStore,
        registry: ScheduleRegistry,
        calculator: SlotCalculator,
        uow: UnitOfWork,
        clock: Clock = datetime.now,
    ):
        """
        Inicializa service com dependências injetadas.

        Args:
            store: Armazenamento de senhas
            registry: Fonte de setores
            calculator: Reserva de horários de setores SPECIAL
            uow: Unit of Work para transação atômica
            clock: Relógio civil (injetável em testes)
        """
        self.store = store
        self.registry = registry
        self.calculator = calculator
        self.uow = uow
        self.clock = clock

    def execute(self, input_dto: CreateTicketInputDTO) -> TicketOutputDTO:
        """
        Executa emissão de senha.

        Args:
            input_dto: Dados de entrada

        Returns:
            DTO com dados da senha emitida

        Raises:
            ValidationError: Se dados inválidos ou cidadão com senha aberta
            EntityNotFoundError: Se setor não existe
            SectorInactiveError: Se setor desativado
            SlotUnavailableError: Se horário não ofertado ou esgotado
        """
        now = self.clock()
        sector = self.registry.current_sector(input_dto.sector_id)
        _ensure_active(sector)

        if sector.is_special and not (input_dto.scheduled_date and input_dto.scheduled_time):
            raise ValidationError(
                f"Setor {sector.code} atende somente com horário agendado",
                field="requested_slot"
            )
        if not sector.is_special and input_dto.has_requested_slot:
            raise ValidationError(
                f"Setor {sector.code} não trabalha com agendamento",
                field="requested_slot"
            )

        # Validações da entidade antes de qualquer reserva
        ticket = TicketEntity.create(
            sector_id=sector.id,
            citizen_ref=input_dto.citizen_ref,
            is_priority=input_dto.is_priority,
            priority_reason=input_dto.priority_reason,
            scheduled_date=input_dto.scheduled_date,
            scheduled_time=input_dto.scheduled_time,
            created_at=now,
        )

        # Falha cedo; a garantia sob concorrência é do store.add
        if self.store.list_by_citizen(ticket.citizen_ref, statuses=OPEN_STATUSES):
            raise ValidationError(OPEN_TICKET_MESSAGE, field="citizen_ref")

        with self.uow:
            reserved = False
            if ticket.is_special:
                self.calculator.reserve(
                    sector.id, ticket.scheduled_date, ticket.scheduled_time, now
                )
                reserved = True
            try:
                sequence = self.store.next_sequence(sector.id, now.date())
                ticket.code = _ticket_code(sector, sequence)
                saved = self.store.add(ticket)
            except Exception:
                if reserved:
                    self.calculator.release(
                        sector.id, ticket.scheduled_date, ticket.scheduled_time
                    )
                raise

            self.uow.publish_event(
                TicketCreatedEvent(
                    aggregate_id=saved.id,
                    sector_id=saved.sector_id,
                    code=saved.code,
                    citizen_ref=saved.citizen_ref,
                    is_priority=saved.is_priority,
                    ticket_type=saved.type.value,
                    scheduled_at=saved.scheduled_at.isoformat() if saved.scheduled_at else None,
                )
            )

        logger.info("Senha %s emitida no setor %s", saved.code, sector.code)
        return TicketOutputDTO.from_entity(saved)


class TransitionTicketService:
    """
    Use Case: Aplicar um evento à senha.

    A transição é calculada sobre uma cópia (TicketLifecycle) e
    gravada com compare-and-swap na versão lida. Se outra operação
    gravar antes, a perdedora recebe InvalidTransitionError e a
    senha fica como a vencedora deixou.

    Example:
        service = TransitionTicketService(store, registry, calculator, uow)
        result = service.execute(TransitionTicketInputDTO(
            ticket_id=ticket_id,
            event="start",
            operator_ref="op-1",
        ))
    """

    def __init__(
        self,
        store: TicketStore,
        registry: ScheduleRegistry,
        calculator: SlotCalculator,
        uow: UnitOfWork,
        lifecycle: Optional[TicketLifecycle] = None,
        clock: Clock = datetime.now,
    ):
        self.store = store
        self.registry = registry
        self.calculator = calculator
        self.uow = uow
        self.lifecycle = lifecycle or TicketLifecycle()
        self.clock = clock

    def execute(self, input_dto: TransitionTicketInputDTO) -> TransitionOutputDTO:
        """
        Executa a transição.

        Returns:
            Senha após a transição (e a nova senha, se redirect)

        Raises:
            ValidationError: Se evento desconhecido ou operador ausente
            EntityNotFoundError: Se senha ou setor de destino não existe
            InvalidTransitionError: Se transição não permitida ou perdida
                para uma operação concorrente
            SlotUnavailableError: Se horário pedido no destino indisponível
        """
        try:
            event = TicketEvent.from_string(input_dto.event)
        except ValueError:
            raise ValidationError(f"Evento inválido: {input_dto.event}", field="event")

        if not input_dto.operator_ref or not input_dto.operator_ref.strip():
            raise ValidationError("Operador é obrigatório", field="operator_ref")

        ticket = _get_ticket(self.store, input_dto.ticket_id)

        if event == TicketEvent.REDIRECT:
            return self._redirect(ticket, input_dto)

        now = self.clock()
        updated = self.lifecycle.apply(
            ticket,
            event,
            operator_ref=input_dto.operator_ref,
            observations=input_dto.observations,
            now=now,
        )

        with self.uow:
            saved = self._compare_and_swap(updated, ticket.version, event)
            if event == TicketEvent.MARK_ABSENT and saved.is_special:
                self.calculator.release(
                    saved.sector_id, saved.scheduled_date, saved.scheduled_time
                )
            self.uow.publish_event(self._event_for(saved, event, input_dto))

        logger.info(
            "Senha %s: %s -> %s (%s)",
            saved.code, ticket.status.value, saved.status.value, input_dto.operator_ref,
        )
        return TransitionOutputDTO(ticket=TicketOutputDTO.from_entity(saved))

    def _compare_and_swap(
        self,
        updated: TicketEntity,
        expected_version: int,
        event: TicketEvent,
    ) -> TicketEntity:
        try:
            return self.store.save(updated, expected_version=expected_version)
        except ConcurrencyError:
            logger.debug("Transição %s perdida para a senha %s", event.value, updated.id)
            current = self.store.get_by_id(updated.id)
            status = current.status.value if current else None
            raise InvalidTransitionError(
                "A senha foi alterada por outra operação",
                from_status=status,
                event=event.value,
                rule="transicao_concorrente",
            )

    def _redirect(
        self,
        ticket: TicketEntity,
        input_dto: TransitionTicketInputDTO,
    ) -> TransitionOutputDTO:
        if not input_dto.target_sector_id:
            raise ValidationError(
                "Setor de destino é obrigatório",
                field="target_sector_id"
            )

        target = self.registry.current_sector(input_dto.target_sector_id)
        wants_slot = input_dto.scheduled_date is not None or input_dto.scheduled_time is not None
        if wants_slot and not target.is_special:
            raise ValidationError(
                f"Setor {target.code} não trabalha com agendamento",
                field="requested_slot"
            )

        now = self.clock()
        # Valida todas as pré-condições antes de reservar ou gerar código
        source, new_ticket = self.lifecycle.redirect(
            ticket,
            target,
            reason=input_dto.observations or "",
            new_code="",
            now=now,
            scheduled_date=input_dto.scheduled_date,
            scheduled_time=input_dto.scheduled_time,
        )

        with self.uow:
            reserved = False
            if new_ticket.is_special:
                self.calculator.reserve(
                    target.id, new_ticket.scheduled_date, new_ticket.scheduled_time, now
                )
                reserved = True
            try:
                sequence = self.store.next_sequence(target.id, now.date())
                new_ticket.code = _ticket_code(target, sequence)
                saved_source = self._compare_and_swap(
                    source, ticket.version, TicketEvent.REDIRECT
                )
            except Exception:
                if reserved:
                    self.calculator.release(
                        target.id, new_ticket.scheduled_date, new_ticket.scheduled_time
                    )
                raise

            saved_new = self.store.add(new_ticket)
            if saved_source.is_special:
                self.calculator.release(
                    saved_source.sector_id,
                    saved_source.scheduled_date,
                    saved_source.scheduled_time,
                )

            self.uow.publish_event(
                TicketRedirectedEvent(
                    aggregate_id=saved_source.id,
                    sector_id=saved_source.sector_id,
                    code=saved_source.code,
                    operator_ref=input_dto.operator_ref,
                    target_sector_id=target.id,
                    new_ticket_id=saved_new.id,
                    new_code=saved_new.code,
                    reason=input_dto.observations or "",
                )
            )
            self.uow.publish_event(
                TicketCreatedEvent(
                    aggregate_id=saved_new.id,
                    sector_id=saved_new.sector_id,
                    code=saved_new.code,
                    citizen_ref=saved_new.citizen_ref,
                    is_priority=saved_new.is_priority,
                    ticket_type=saved_new.type.value,
                    scheduled_at=(
                        saved_new.scheduled_at.isoformat() if saved_new.scheduled_at else None
                    ),
                )
            )

        logger.info(
            "Senha %s redirecionada para %s como %s",
            saved_source.code, target.code, saved_new.code,
        )
        return TransitionOutputDTO(
            ticket=TicketOutputDTO.from_entity(saved_source),
            redirected_ticket=TicketOutputDTO.from_entity(saved_new),
        )

    def _event_for(self, ticket: TicketEntity, event: TicketEvent, input_dto):
        common = {
            "aggregate_id": ticket.id,
            "sector_id": ticket.sector_id,
            "code": ticket.code,
            "operator_ref": input_dto.operator_ref,
        }
        if event == TicketEvent.CALL:
            return TicketCalledEvent(wait_minutes=ticket.wait_minutes(), **common)
        if event == TicketEvent.START:
            return TicketServiceStartedEvent(**common)
        if event == TicketEvent.FINISH:
            return TicketFinishedEvent(service_minutes=ticket.service_minutes(), **common)
        return TicketMarkedAbsentEvent(reason=input_dto.observations or "", **common)


class SelectNextTicketService:
    """
    Use Case: Chamar a próxima senha do setor.

    Combina leitura das candidatas e a transição `call` com retry
    otimista, sem lock do setor:
    1. Ler senhas pendentes e ordenar (QueueScheduler)
    2. Tentar o compare-and-swap na melhor candidata
    3. Em conflito, tentar a próxima; esgotadas, reler
    Duas chamadas simultâneas nunca recebem a mesma senha.

    Example:
        service = SelectNextTicketService(store, registry, uow)
        output = service.execute(SelectNextInputDTO("sec-1", "op-1"))
        if output is None:
            print("Nenhuma senha disponível")
    """

    def __init__(
        self,
        store: TicketStore,
        registry: ScheduleRegistry,
        uow: UnitOfWork,
        scheduler: Optional[QueueScheduler] = None,
        lifecycle: Optional[TicketLifecycle] = None,
        clock: Clock = datetime.now,
        max_rounds: int = DEFAULT_SELECT_NEXT_MAX_ROUNDS,
    ):
        self.store = store
        self.registry = registry
        self.uow = uow
        self.scheduler = scheduler or QueueScheduler()
        self.lifecycle = lifecycle or TicketLifecycle()
        self.clock = clock
        self.max_rounds = max_rounds

    def execute(self, input_dto: SelectNextInputDTO) -> Optional[TicketOutputDTO]:
        """
        Returns:
            Senha chamada, ou None se nenhuma está disponível

        Raises:
            ValidationError: Se operador ausente
            EntityNotFoundError: Se setor não existe
            SectorInactiveError: Se setor desativado
            ConcurrencyError: Se todas as rodadas perderam a disputa
        """
        if not input_dto.operator_ref or not input_dto.operator_ref.strip():
            raise ValidationError("Operador é obrigatório", field="operator_ref")

        sector = self.registry.current_sector(input_dto.sector_id)
        _ensure_active(sector)

        for attempt in range(1, self.max_rounds + 1):
            now = self.clock()
            pending = self.store.list_by_sector(sector.id, statuses=PENDING_STATUSES)
            candidates = self.scheduler.candidates(pending, now)
            if not candidates:
                return None

            for candidate in candidates:
                called = self._try_call(candidate, input_dto.operator_ref, now)
                if called is not None:
                    logger.info(
                        "Senha %s chamada por %s no setor %s",
                        called.code, input_dto.operator_ref, sector.code,
                    )
                    return TicketOutputDTO.from_entity(called)

            logger.debug(
                "Todas as candidatas do setor %s foram disputadas (rodada %d)",
                sector.code, attempt,
            )

        raise ConcurrencyError(
            f"Não foi possível chamar senha no setor {sector.code} "
            f"após {self.max_rounds} tentativas"
        )

    def _try_call(
        self,
        candidate: TicketEntity,
        operator_ref: str,
        now: datetime,
    ) -> Optional[TicketEntity]:
        try:
            called = self.lifecycle.apply(
                candidate, TicketEvent.CALL, operator_ref=operator_ref, now=now
            )
            with self.uow:
                saved = self.store.save(called, expected_version=candidate.version)
                self.uow.publish_event(
                    TicketCalledEvent(
                        aggregate_id=saved.id,
                        sector_id=saved.sector_id,
                        code=saved.code,
                        operator_ref=operator_ref,
                        wait_minutes=saved.wait_minutes(),
                    )
                )
            return saved
        except (ConcurrencyError, InvalidTransitionError):
            logger.debug("Senha %s já foi chamada por outro operador", candidate.code)
            return None


class GetTicketService:
    """Use Case: Obter senha por ID."""

    def __init__(self, store: TicketStore):
        self.store = store

    def execute(self, ticket_id: str) -> TicketOutputDTO:
        """
        Raises:
            EntityNotFoundError: Se senha não existe
        """
        return TicketOutputDTO.from_entity(_get_ticket(self.store, ticket_id))


class GetTicketByCodeService:
    """
    Use Case: Consulta pública de senha pelo código.

    Códigos reiniciam a cada dia; sem data, consulta o dia corrente.
    """

    def __init__(self, store: TicketStore, clock: Clock = datetime.now):
        self.store = store
        self.clock = clock

    def execute(self, code: str, day: Optional[date] = None) -> TicketOutputDTO:
        """
        Raises:
            ValidationError: Se código vazio
            EntityNotFoundError: Se nenhuma senha com o código no dia
        """
        if not code or not code.strip():
            raise ValidationError("Código da senha é obrigatório", field="code")

        day = day or self.clock().date()
        ticket = self.store.get_by_code(code.strip().upper(), day)
        if not ticket:
            raise EntityNotFoundError(
                f"Senha {code} não encontrada em {day.isoformat()}",
                entity_type="Ticket",
                entity_id=code,
            )
        return TicketOutputDTO.from_entity(ticket)


class ListWaitingQueueService:
    """
    Use Case: Fila de espera do setor.

    Ordem de atendimento (QueueScheduler.order) com posição e
    estimativa de espera:
        estimativa = posição / capacidade máxima × tempo estimado
    """

    def __init__(
        self,
        store: TicketStore,
        registry: ScheduleRegistry,
        scheduler: Optional[QueueScheduler] = None,
        clock: Clock = datetime.now,
    ):
        self.store = store
        self.registry = registry
        self.scheduler = scheduler or QueueScheduler()
        self.clock = clock

    def execute(self, sector_id: str) -> List[QueueItemDTO]:
        """
        Raises:
            EntityNotFoundError: Se setor não existe
        """
        sector = self.registry.get_sector(sector_id)
        now = self.clock()
        ordered = self.scheduler.order(
            self.store.list_by_sector(sector.id, statuses=PENDING_STATUSES), now
        )

        items = []
        for position, ticket in enumerate(ordered, start=1):
            estimate = position / sector.max_capacity * sector.estimated_service_minutes
            items.append(QueueItemDTO(
                position=position,
                ticket_id=ticket.id,
                code=ticket.code,
                status=ticket.status.value,
                is_priority=ticket.is_priority,
                type=ticket.type.value,
                readiness_time=ticket.readiness_time,
                wait_minutes=ticket.wait_minutes(now),
                estimated_wait_minutes=int(round(estimate)),
            ))
        return items


class ListCitizenTicketsService:
    """Use Case: Senhas de um cidadão, mais recentes primeiro."""

    def __init__(self, store: TicketStore):
        self.store = store

    def execute(self, citizen_ref: str) -> TicketListDTO:
        if not citizen_ref or not citizen_ref.strip():
            raise ValidationError("Cidadão é obrigatório", field="citizen_ref")

        tickets = sorted(
            self.store.list_by_citizen(citizen_ref.strip()),
            key=lambda t: (t.created_at, t.id),
            reverse=True,
        )
        return TicketListDTO(items=[TicketOutputDTO.from_entity(t) for t in tickets])


class SectorDailySummaryService:
    """
    Use Case: Resumo diário de atendimento do setor.

    Considera as senhas emitidas no dia:
    - eficiência = finalizadas / emitidas × 100
    - taxa de ausência = ausentes / emitidas × 100
    - espera média: senhas chamadas (emissão → chamada)
    - atendimento médio: senhas finalizadas (início → fim)
    """

    def __init__(
        self,
        store: TicketStore,
        registry: ScheduleRegistry,
        clock: Clock = datetime.now,
    ):
        self.store = store
        self.registry = registry
        self.clock = clock

    def execute(self, sector_id: str, day: Optional[date] = None) -> SectorDailySummaryDTO:
        sector = self.registry.get_sector(sector_id)
        day = day or self.clock().date()
        tickets = self.store.list_by_sector(sector.id, created_on=day)

        summary = SectorDailySummaryDTO(sector_id=sector.id, day=day)
        summary.generated = len(tickets)
        summary.by_status = {status.value: 0 for status in TicketStatus}
        for ticket in tickets:
            summary.by_status[ticket.status.value] += 1

        summary.finished = summary.by_status[TicketStatus.FINISHED.value]
        summary.absent = summary.by_status[TicketStatus.ABSENT.value]
        summary.redirected = summary.by_status[TicketStatus.REDIRECTED.value]
        summary.pending = len([t for t in tickets if t.status in OPEN_STATUSES])

        if summary.generated:
            summary.efficiency = round(summary.finished / summary.generated * 100, 1)
            summary.absence_rate = round(summary.absent / summary.generated * 100, 1)

        waits = [t.wait_minutes() for t in tickets if t.called_at]
        if waits:
            summary.average_wait_minutes = round(sum(waits) / len(waits), 1)

        services = [
            t.service_minutes() for t in tickets
            if t.status == TicketStatus.FINISHED and t.started_at
        ]
        if services:
            summary.average_service_minutes = round(sum(services) / len(services), 1)

        return summary
