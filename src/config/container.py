"""
Dependency Injection Container.

Configura e gerencia todas as dependências da aplicação.
Usa dependency-injector para lazy-loading e injeção automática.

Padrões:
- Singleton: Uma instância para toda app (stores, ledger, registry)
- Factory: Nova instância por chamada (services, UoW)
- Configuration: valores vindos do settings do Django

Os adapters Django são importados sob demanda (dentro das factories),
para que o container possa ser importado antes do django.setup().
"""

from datetime import datetime
from typing import Optional

from dependency_injector import containers, providers

from src.core.scheduling.registry import DEFAULT_CACHE_TTL_SECONDS, ScheduleRegistry
from src.core.scheduling.slots import DEFAULT_HORIZON_DAYS, SlotCalculator
from src.core.scheduling.use_cases import ListOfferableSlotsService
from src.core.tickets.lifecycle import TicketLifecycle
from src.core.tickets.scheduler import QueueScheduler
from src.core.tickets.use_cases import (
    DEFAULT_SELECT_NEXT_MAX_ROUNDS,
    CreateTicketService,
    GetTicketByCodeService,
    GetTicketService,
    ListCitizenTicketsService,
    ListWaitingQueueService,
    SectorDailySummaryService,
    SelectNextTicketService,
    TransitionTicketService,
)


# =============================================================================
# Factories de infraestrutura (lazy imports)
# =============================================================================

def _event_publisher(mode: str):
    from src.adapters.django_app.events.publishers import get_event_publisher
    return get_event_publisher(mode)


def _event_store():
    from src.adapters.django_app.tickets.repositories import DjangoEventStore
    return DjangoEventStore()


def _ticket_store():
    from src.adapters.django_app.tickets.repositories import DjangoTicketStore
    return DjangoTicketStore()


def _sector_repository():
    from src.adapters.django_app.scheduling.repositories import DjangoSectorRepository
    return DjangoSectorRepository()


def _schedule_rule_repository():
    from src.adapters.django_app.scheduling.repositories import DjangoScheduleRuleRepository
    return DjangoScheduleRuleRepository()


def _slot_ledger():
    from src.adapters.django_app.scheduling.repositories import DjangoSlotLedger
    return DjangoSlotLedger()


def _unit_of_work(event_publisher, event_store):
    from src.adapters.django_app.shared.unit_of_work import DjangoUnitOfWork
    return DjangoUnitOfWork(event_publisher=event_publisher, event_store=event_store)


class Container(containers.DeclarativeContainer):
    """
    Container principal de Dependency Injection.

    Organização:
    - Configuration: Variáveis de ambiente/settings
    - Infrastructure: Event publisher, Event Store
    - Repositories: Senhas, setores, regras, reservas de horário
    - Domain services: ScheduleRegistry, SlotCalculator
    - Unit of Work: Transações
    - Services: Use Cases

    Example:
        from src.config.container import get_container

        container = get_container()
        service = container.create_ticket_service()
        result = service.execute(input_dto)
    """

    # =========================================================================
    # Configuration
    # =========================================================================

    config = providers.Configuration(default={
        'slot_horizon_days': DEFAULT_HORIZON_DAYS,
        'select_next_max_rounds': DEFAULT_SELECT_NEXT_MAX_ROUNDS,
        'schedule_cache_ttl_seconds': DEFAULT_CACHE_TTL_SECONDS,
        'event_publisher_mode': 'sync',
    })

    # Relógio civil; testes substituem com override
    clock = providers.Object(datetime.now)

    # =========================================================================
    # Infrastructure
    # =========================================================================

    event_publisher = providers.Singleton(
        _event_publisher,
        mode=config.event_publisher_mode,
    )

    event_store = providers.Singleton(_event_store)

    # =========================================================================
    # Repositories (Singleton - uma instância por app)
    # =========================================================================

    ticket_store = providers.Singleton(_ticket_store)
    sector_repository = providers.Singleton(_sector_repository)
    schedule_rule_repository = providers.Singleton(_schedule_rule_repository)
    slot_ledger = providers.Singleton(_slot_ledger)

    # =========================================================================
    # Domain services
    # =========================================================================

    schedule_registry = providers.Singleton(
        ScheduleRegistry,
        sector_repo=sector_repository,
        rule_repo=schedule_rule_repository,
        ttl_seconds=config.schedule_cache_ttl_seconds.as_int(),
    )

    slot_calculator = providers.Singleton(
        SlotCalculator,
        registry=schedule_registry,
        ledger=slot_ledger,
        horizon_days=config.slot_horizon_days.as_int(),
    )

    lifecycle = providers.Singleton(TicketLifecycle)
    queue_scheduler = providers.Singleton(QueueScheduler)

    # =========================================================================
    # Unit of Work (Factory - nova instância por operação)
    # =========================================================================

    unit_of_work = providers.Factory(
        _unit_of_work,
        event_publisher=event_publisher,
        event_store=event_store,
    )

    # =========================================================================
    # Services / Use Cases (Factory - nova instância por chamada)
    # =========================================================================

    create_ticket_service = providers.Factory(
        CreateTicketService,
        store=ticket_store,
        registry=schedule_registry,
        calculator=slot_calculator,
        uow=unit_of_work,
        clock=clock,
    )

    transition_ticket_service = providers.Factory(
        TransitionTicketService,
        store=ticket_store,
        registry=schedule_registry,
        calculator=slot_calculator,
        uow=unit_of_work,
        lifecycle=lifecycle,
        clock=clock,
    )

    select_next_ticket_service = providers.Factory(
        SelectNextTicketService,
        store=ticket_store,
        registry=schedule_registry,
        uow=unit_of_work,
        scheduler=queue_scheduler,
        lifecycle=lifecycle,
        clock=clock,
        max_rounds=config.select_next_max_rounds.as_int(),
    )

    # Leitura (sem UoW)
    get_ticket_service = providers.Factory(
        GetTicketService,
        store=ticket_store,
    )

    get_ticket_by_code_service = providers.Factory(
        GetTicketByCodeService,
        store=ticket_store,
        clock=clock,
    )

    list_waiting_queue_service = providers.Factory(
        ListWaitingQueueService,
        store=ticket_store,
        registry=schedule_registry,
        scheduler=queue_scheduler,
        clock=clock,
    )

    list_citizen_tickets_service = providers.Factory(
        ListCitizenTicketsService,
        store=ticket_store,
    )

    sector_daily_summary_service = providers.Factory(
        SectorDailySummaryService,
        store=ticket_store,
        registry=schedule_registry,
        clock=clock,
    )

    list_offerable_slots_service = providers.Factory(
        ListOfferableSlotsService,
        calculator=slot_calculator,
        clock=clock,
    )


# =============================================================================
# Container Global (Singleton)
# =============================================================================

_container: Optional[Container] = None


def get_container() -> Container:
    """
    Retorna instância global do container.

    Cria se não existir (lazy initialization), lendo a configuração
    de domínio do settings do Django.

    Returns:
        Container configurado
    """
    global _container

    if _container is None:
        from django.conf import settings

        container = Container()
        container.config.from_dict({
            'slot_horizon_days': getattr(settings, 'SLOT_HORIZON_DAYS', DEFAULT_HORIZON_DAYS),
            'select_next_max_rounds': getattr(
                settings, 'SELECT_NEXT_MAX_ROUNDS', DEFAULT_SELECT_NEXT_MAX_ROUNDS
            ),
            'schedule_cache_ttl_seconds': getattr(
                settings, 'SCHEDULE_CACHE_TTL_SECONDS', DEFAULT_CACHE_TTL_SECONDS
            ),
            'event_publisher_mode': getattr(settings, 'EVENT_PUBLISHER_MODE', 'sync'),
        })
        _container = container

    return _container


def set_container(container: Optional[Container]) -> None:
    """Substitui o container global (testes, scripts)."""
    global _container
    _container = container


def reset_container() -> None:
    """
    Reset do container (para testes).

    Permite criar novo container limpo.
    """
    set_container(None)


# =============================================================================
# Testing Container
# =============================================================================

def create_testing_container(clock=None) -> Container:
    """
    Container para testes com implementações em memória.

    Sobrescreve stores, ledger, publisher e Unit of Work; os services
    continuam os mesmos do container principal.

    Args:
        clock: Relógio fixo opcional (callable sem argumentos)

    Example:
        container = create_testing_container(clock=lambda: datetime(2024, 3, 4, 10, 0))
        container.sector_repository().save(sector)
        output = container.create_ticket_service().execute(dto)
    """
    from src.adapters.django_app.events.publishers import InMemoryEventPublisher
    from src.adapters.django_app.shared.unit_of_work import InMemoryUnitOfWork
    from src.core.scheduling.ports import (
        InMemoryScheduleRuleRepository,
        InMemorySectorRepository,
        InMemorySlotLedger,
    )
    from src.core.tickets.ports import InMemoryTicketStore

    container = Container()
    container.event_publisher.override(providers.Singleton(InMemoryEventPublisher))
    container.ticket_store.override(providers.Singleton(InMemoryTicketStore))
    container.sector_repository.override(providers.Singleton(InMemorySectorRepository))
    container.schedule_rule_repository.override(
        providers.Singleton(InMemoryScheduleRuleRepository)
    )
    container.slot_ledger.override(providers.Singleton(InMemorySlotLedger))
    container.unit_of_work.override(
        providers.Factory(InMemoryUnitOfWork, event_publisher=container.event_publisher)
    )
    if clock is not None:
        container.clock.override(providers.Object(clock))
    return container
