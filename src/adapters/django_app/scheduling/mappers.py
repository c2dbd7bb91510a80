"""
Mappers para conversão entre Entities de Agenda e Models Django.

Princípios:
- Mappers são stateless
- Não contêm lógica de negócio
- Model → Entity não repete validações (dados já validados)
"""

from typing import List

from src.core.scheduling.entities import (
    ScheduleRule,
    SectorEntity,
    SectorType,
    Weekday,
)

from .models import ScheduleRuleModel, SectorModel


class SectorMapper:
    """Conversão entre SectorEntity e SectorModel."""

    @staticmethod
    def to_model(entity: SectorEntity) -> SectorModel:
        return SectorModel(
            id=entity.id,
            code=entity.code,
            name=entity.name,
            type=entity.type.value,
            max_capacity=entity.max_capacity,
            estimated_service_minutes=entity.estimated_service_minutes,
            active=entity.active,
        )

    @staticmethod
    def to_entity(model: SectorModel) -> SectorEntity:
        return SectorEntity(
            id=model.id,
            code=model.code,
            name=model.name,
            type=SectorType(model.type),
            max_capacity=model.max_capacity,
            estimated_service_minutes=model.estimated_service_minutes,
            active=model.active,
        )


class ScheduleRuleMapper:
    """Conversão entre ScheduleRule e ScheduleRuleModel."""

    @staticmethod
    def to_model(entity: ScheduleRule) -> ScheduleRuleModel:
        return ScheduleRuleModel(
            id=entity.id,
            sector_id=entity.sector_id,
            weekday=entity.weekday.value,
            start_time=entity.start_time,
            end_time=entity.end_time,
            interval_minutes=entity.interval_minutes,
            capacity_per_slot=entity.capacity_per_slot,
            active=entity.active,
        )

    @staticmethod
    def to_entity(model: ScheduleRuleModel) -> ScheduleRule:
        return ScheduleRule(
            id=model.id,
            sector_id=model.sector_id,
            weekday=Weekday(model.weekday),
            start_time=model.start_time,
            end_time=model.end_time,
            interval_minutes=model.interval_minutes,
            capacity_per_slot=model.capacity_per_slot,
            active=model.active,
        )

    @classmethod
    def to_entity_list(cls, models: List[ScheduleRuleModel]) -> List[ScheduleRule]:
        return [cls.to_entity(model) for model in models]
