"""
Configuração pytest para testes com Django.

O Django é configurado pelo pytest-django (DJANGO_SETTINGS_MODULE no
pyproject.toml); sem DATABASE_URL os testes usam SQLite em memória.

Fixtures:
- Repositórios Django (banco de teste)
- Setores e regras persistidos
- Container de testes com adapters em memória e relógio fixo
"""

from datetime import datetime, time

import pytest

from src.core.scheduling.entities import ScheduleRule, SectorEntity, SectorType, Weekday


NOW = datetime(2024, 3, 4, 9, 0)  # segunda-feira


@pytest.fixture
def ticket_store(db):
    from src.adapters.django_app.tickets.repositories import DjangoTicketStore
    return DjangoTicketStore()


@pytest.fixture
def event_store(db):
    from src.adapters.django_app.tickets.repositories import DjangoEventStore
    return DjangoEventStore()


@pytest.fixture
def sector_repository(db):
    from src.adapters.django_app.scheduling.repositories import DjangoSectorRepository
    return DjangoSectorRepository()


@pytest.fixture
def rule_repository(db):
    from src.adapters.django_app.scheduling.repositories import DjangoScheduleRuleRepository
    return DjangoScheduleRuleRepository()


@pytest.fixture
def slot_ledger(db):
    from src.adapters.django_app.scheduling.repositories import DjangoSlotLedger
    return DjangoSlotLedger()


def make_sectors():
    """Setor por ordem de chegada, setor de destino e setor agendado."""
    normal = SectorEntity.create(
        id="sec-pro", code="PRO", name="Protocolo",
        max_capacity=2, estimated_service_minutes=10,
    )
    other = SectorEntity.create(
        id="sec-tri", code="TRI", name="Tributos",
        max_capacity=1, estimated_service_minutes=20,
    )
    special = SectorEntity.create(
        id="sec-ipt", code="IPT", name="IPTU", type=SectorType.SPECIAL,
        max_capacity=1, estimated_service_minutes=30,
    )
    rule = ScheduleRule.create(
        sector_id=special.id,
        weekday=Weekday.MONDAY,
        start_time=time(8, 0),
        end_time=time(10, 0),
        interval_minutes=30,
        capacity_per_slot=2,
    )
    return [normal, other, special], [rule]


@pytest.fixture
def saved_sectors(sector_repository, rule_repository):
    """Persiste os setores de exemplo no banco de teste."""
    sectors, rules = make_sectors()
    for sector in sectors:
        sector_repository.save(sector)
    for rule in rules:
        rule_repository.save(rule)
    return {sector.code: sector for sector in sectors}


@pytest.fixture
def testing_container():
    """
    Container com adapters em memória, relógio fixo e setores de exemplo.

    Instalado como container global; o reset acontece no conftest raiz.
    """
    from src.config.container import create_testing_container, set_container

    container = create_testing_container(clock=lambda: NOW)
    sectors, rules = make_sectors()
    for sector in sectors:
        container.sector_repository().save(sector)
    for rule in rules:
        container.schedule_rule_repository().save(rule)
    set_container(container)
    return container
