"""
Testes do ScheduleRegistry (cache de setores e regras).
"""

from datetime import date, time

import pytest

from src.core.scheduling.entities import ScheduleRule, SectorEntity, SectorType, Weekday
from src.core.scheduling.registry import ScheduleRegistry
from src.core.shared.exceptions import EntityNotFoundError


def add_rule(rule_repo, sector_id, **overrides):
    data = {
        "sector_id": sector_id,
        "weekday": Weekday.MONDAY,
        "start_time": time(8, 0),
        "end_time": time(10, 0),
        "interval_minutes": 30,
        "capacity_per_slot": 2,
    }
    data.update(overrides)
    rule = ScheduleRule.create(**data)
    rule_repo.save(rule)
    return rule


class TestScheduleRegistry:

    def test_get_sector_inexistente(self, registry):
        """Deve lançar EntityNotFoundError para setor desconhecido."""
        with pytest.raises(EntityNotFoundError) as exc_info:
            registry.get_sector("nao-existe")

        assert exc_info.value.entity_id == "nao-existe"

    def test_setor_normal_nao_tem_regras(self, registry, rule_repo, normal_sector):
        """Setores NORMAL nunca consultam regras de horário."""
        add_rule(rule_repo, normal_sector.id)

        assert registry.rules_for_sector(normal_sector.id) == []
        assert not registry.accepts_bookings(normal_sector.id)

    def test_regras_ordenadas(self, registry, rule_repo, special_sector):
        """Deve ordenar por dia da semana e hora de início."""
        add_rule(rule_repo, special_sector.id, weekday=Weekday.WEDNESDAY)
        add_rule(rule_repo, special_sector.id, weekday=Weekday.MONDAY,
                 start_time=time(13, 0), end_time=time(15, 0))

        rules = registry.rules_for_sector(special_sector.id)

        assert [(r.weekday, r.start_time) for r in rules] == [
            (Weekday.MONDAY, time(8, 0)),
            (Weekday.MONDAY, time(13, 0)),
            (Weekday.WEDNESDAY, time(8, 0)),
        ]

    def test_cache_ate_refresh(self, registry, rule_repo, special_sector):
        """Alterações administrativas só aparecem após refresh."""
        assert len(registry.rules_for_sector(special_sector.id)) == 1

        add_rule(rule_repo, special_sector.id, weekday=Weekday.FRIDAY)
        assert len(registry.rules_for_sector(special_sector.id)) == 1

        registry.refresh(special_sector.id)
        assert len(registry.rules_for_sector(special_sector.id)) == 2

    def test_refresh_geral_recarrega_setor(self, registry, sector_repo, normal_sector):
        assert registry.get_sector(normal_sector.id).active

        normal_sector.active = False
        sector_repo.save(normal_sector)
        registry.refresh()

        assert not registry.get_sector(normal_sector.id).active

    def test_cache_expira_apos_ttl(self, sector_repo, rule_repo, special_sector):
        elapsed = [0.0]
        registry = ScheduleRegistry(
            sector_repo, rule_repo, ttl_seconds=60, timer=lambda: elapsed[0],
        )
        assert len(registry.rules_for_sector(special_sector.id)) == 1

        add_rule(rule_repo, special_sector.id, weekday=Weekday.FRIDAY)
        elapsed[0] = 59.0
        assert len(registry.rules_for_sector(special_sector.id)) == 1

        elapsed[0] = 60.0
        assert len(registry.rules_for_sector(special_sector.id)) == 2

    def test_ttl_none_mantem_ate_refresh(self, sector_repo, rule_repo, special_sector):
        elapsed = [0.0]
        registry = ScheduleRegistry(
            sector_repo, rule_repo, ttl_seconds=None, timer=lambda: elapsed[0],
        )
        registry.rules_for_sector(special_sector.id)
        add_rule(rule_repo, special_sector.id, weekday=Weekday.FRIDAY)
        elapsed[0] = 3600.0

        assert len(registry.rules_for_sector(special_sector.id)) == 1

    def test_current_sector_rele_repositorio(self, registry, sector_repo, normal_sector):
        assert registry.get_sector(normal_sector.id).active

        sector_repo.save(SectorEntity.create(
            id=normal_sector.id, code="PRO", name="Protocolo", active=False,
        ))

        assert not registry.current_sector(normal_sector.id).active
        assert not registry.get_sector(normal_sector.id).active

    def test_current_sector_troca_de_tipo_descarta_regras(
        self, registry, sector_repo, rule_repo, normal_sector
    ):
        add_rule(rule_repo, normal_sector.id)
        assert registry.rules_for_sector(normal_sector.id) == []

        sector_repo.save(SectorEntity.create(
            id=normal_sector.id, code="PRO", name="Protocolo", type=SectorType.SPECIAL,
        ))
        registry.current_sector(normal_sector.id)

        assert len(registry.rules_for_sector(normal_sector.id)) == 1

    def test_accepts_bookings(self, registry, special_sector):
        assert registry.accepts_bookings(special_sector.id)

    def test_setor_special_sem_regras_ativas(self, registry, rule_repo, sector_repo):
        sector = SectorEntity.create(code="AGD", name="Agenda", type=SectorType.SPECIAL)
        sector_repo.save(sector)
        add_rule(rule_repo, sector.id, active=False)

        assert registry.active_rules(sector.id) == []
        assert not registry.accepts_bookings(sector.id)

    def test_rules_for_date(self, registry, special_sector):
        assert len(registry.rules_for_date(special_sector.id, date(2024, 3, 4))) == 1
        assert registry.rules_for_date(special_sector.id, date(2024, 3, 5)) == []

    def test_is_within_schedule(self, registry, special_sector):
        assert registry.is_within_schedule(special_sector.id, Weekday.MONDAY, time(9, 45))
        assert not registry.is_within_schedule(special_sector.id, Weekday.MONDAY, time(10, 0))
        assert not registry.is_within_schedule(special_sector.id, Weekday.TUESDAY, time(9, 0))

    def test_overlapping_rules(self, registry, rule_repo, special_sector):
        """Deve listar pares de regras sobrepostas para revisão."""
        overlapping = add_rule(
            rule_repo, special_sector.id,
            start_time=time(9, 0), end_time=time(11, 0), interval_minutes=60,
        )
        add_rule(rule_repo, special_sector.id, start_time=time(14, 0), end_time=time(16, 0))
        registry.refresh(special_sector.id)

        pairs = registry.overlapping_rules(special_sector.id)

        assert len(pairs) == 1
        assert overlapping in pairs[0]
