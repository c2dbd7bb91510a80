"""
Fixtures do Core: adapters em memória, relógio fixo e Unit of Work fake.

Datas de referência: 2024-03-04 é uma segunda-feira.
"""

from datetime import date, datetime, time, timedelta
from typing import List

import pytest

from src.core.scheduling.entities import ScheduleRule, SectorEntity, SectorType, Weekday
from src.core.scheduling.ports import (
    InMemoryScheduleRuleRepository,
    InMemorySectorRepository,
    InMemorySlotLedger,
)
from src.core.scheduling.registry import ScheduleRegistry
from src.core.scheduling.slots import SlotCalculator
from src.core.shared.events import DomainEvent
from src.core.tickets.ports import InMemoryTicketStore


MONDAY = date(2024, 3, 4)
TUESDAY = date(2024, 3, 5)


class FixedClock:
    """Relógio controlável pelos testes."""

    def __init__(self, moment: datetime):
        self.moment = moment

    def __call__(self) -> datetime:
        return self.moment

    def set(self, moment: datetime) -> datetime:
        self.moment = moment
        return moment

    def advance(self, minutes: int = 0, days: int = 0) -> datetime:
        self.moment += timedelta(minutes=minutes, days=days)
        return self.moment


class FakeUnitOfWork:
    """
    Fake Unit of Work para testes.

    Permite testar:
    - Comportamento de commit/rollback
    - Eventos publicados (somente após commit)

    Não é thread-safe: testes concorrentes criam um por thread.
    """

    def __init__(self):
        self._events: List[DomainEvent] = []
        self.published_events: List[DomainEvent] = []
        self.commits = 0
        self.rollbacks = 0

    def __enter__(self):
        self._events = []
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is not None:
            self.rollback()
        else:
            self.commit()
        return False

    def commit(self):
        self.commits += 1
        self.published_events.extend(self._events)
        self._events = []

    def rollback(self):
        self.rollbacks += 1
        self._events = []

    def publish_event(self, event: DomainEvent):
        self._events.append(event)

    def collect_events(self) -> List[DomainEvent]:
        return list(self._events)

    def event_types(self) -> List[str]:
        return [e.event_type for e in self.published_events]


@pytest.fixture
def clock():
    """Segunda-feira, 09:00."""
    return FixedClock(datetime.combine(MONDAY, time(9, 0)))


@pytest.fixture
def sector_repo():
    return InMemorySectorRepository()


@pytest.fixture
def rule_repo():
    return InMemoryScheduleRuleRepository()


@pytest.fixture
def ledger():
    return InMemorySlotLedger()


@pytest.fixture
def store():
    return InMemoryTicketStore()


@pytest.fixture
def uow():
    return FakeUnitOfWork()


@pytest.fixture
def uow_factory():
    """Cria um FakeUnitOfWork por chamada (um por thread)."""
    return FakeUnitOfWork


@pytest.fixture
def registry(sector_repo, rule_repo):
    return ScheduleRegistry(sector_repo, rule_repo)


@pytest.fixture
def calculator(registry, ledger):
    return SlotCalculator(registry, ledger, horizon_days=30)


@pytest.fixture
def normal_sector(sector_repo):
    """Setor por ordem de chegada: 2 guichês, 10 minutos por atendimento."""
    sector = SectorEntity.create(
        id="sec-pro",
        code="pro",
        name="Protocolo",
        type=SectorType.NORMAL,
        max_capacity=2,
        estimated_service_minutes=10,
    )
    sector_repo.save(sector)
    return sector


@pytest.fixture
def other_sector(sector_repo):
    sector = SectorEntity.create(
        id="sec-tri",
        code="TRI",
        name="Tributos",
        type=SectorType.NORMAL,
        max_capacity=1,
        estimated_service_minutes=20,
    )
    sector_repo.save(sector)
    return sector


@pytest.fixture
def special_sector(sector_repo, rule_repo):
    """Setor agendado: segundas 08:00-10:00, a cada 30 minutos, 2 pessoas."""
    sector = SectorEntity.create(
        id="sec-ipt",
        code="IPT",
        name="IPTU",
        type=SectorType.SPECIAL,
        max_capacity=1,
        estimated_service_minutes=30,
    )
    sector_repo.save(sector)
    rule_repo.save(ScheduleRule.create(
        sector_id=sector.id,
        weekday=Weekday.MONDAY,
        start_time=time(8, 0),
        end_time=time(10, 0),
        interval_minutes=30,
        capacity_per_slot=2,
    ))
    return sector


@pytest.fixture
def inactive_sector(sector_repo):
    sector = SectorEntity.create(
        id="sec-off",
        code="OFF",
        name="Setor desativado",
        active=False,
    )
    sector_repo.save(sector)
    return sector
