"""
Repositórios Django do domínio de Agenda.

Implementam os Ports definidos em src/core/scheduling/ports.py.

- DjangoSectorRepository: SectorRepository
- DjangoScheduleRuleRepository: ScheduleRuleRepository
- DjangoSlotLedger: SlotLedger com UPDATE condicional por horário
"""

from datetime import date, time
from typing import Dict, List, Optional, Tuple
import logging

from django.db import transaction
from django.db.models import F

from src.core.scheduling.entities import ScheduleRule, SectorEntity
from src.core.scheduling.ports import SlotKey

from ..shared.database import translate_store_errors
from .mappers import ScheduleRuleMapper, SectorMapper
from .models import ScheduleRuleModel, SectorModel, SlotReservationModel

logger = logging.getLogger(__name__)


class DjangoSectorRepository:
    """Implementação Django do SectorRepository."""

    def __init__(self):
        self._mapper = SectorMapper()

    @translate_store_errors
    def get_by_id(self, sector_id: str) -> Optional[SectorEntity]:
        try:
            return self._mapper.to_entity(SectorModel.objects.get(id=sector_id))
        except SectorModel.DoesNotExist:
            logger.debug("Sector not found: %s", sector_id)
            return None

    @translate_store_errors
    def save(self, sector: SectorEntity) -> None:
        SectorModel.objects.update_or_create(
            id=sector.id,
            defaults={
                'code': sector.code,
                'name': sector.name,
                'type': sector.type.value,
                'max_capacity': sector.max_capacity,
                'estimated_service_minutes': sector.estimated_service_minutes,
                'active': sector.active,
            },
        )
        logger.debug("Sector saved: %s", sector.code)

    @translate_store_errors
    def list_all(self) -> List[SectorEntity]:
        return [self._mapper.to_entity(m) for m in SectorModel.objects.all()]


class DjangoScheduleRuleRepository:
    """Implementação Django do ScheduleRuleRepository."""

    def __init__(self):
        self._mapper = ScheduleRuleMapper()

    @translate_store_errors
    def list_by_sector(self, sector_id: str) -> List[ScheduleRule]:
        models = ScheduleRuleModel.objects.filter(sector_id=sector_id)
        return self._mapper.to_entity_list(list(models))

    @translate_store_errors
    def save(self, rule: ScheduleRule) -> None:
        ScheduleRuleModel.objects.update_or_create(
            id=rule.id,
            defaults={
                'sector_id': rule.sector_id,
                'weekday': rule.weekday.value,
                'start_time': rule.start_time,
                'end_time': rule.end_time,
                'interval_minutes': rule.interval_minutes,
                'capacity_per_slot': rule.capacity_per_slot,
                'active': rule.active,
            },
        )
        logger.debug("Schedule rule saved: %s", rule.id)


class DjangoSlotLedger:
    """
    Implementação Django do SlotLedger.

    A reserva é um único UPDATE condicional:
        UPDATE slot_reservations SET reserved = reserved + 1
        WHERE id = ? AND reserved < capacidade
    O banco serializa escritas na mesma linha; reservas de horários
    diferentes não disputam lock.
    """

    @translate_store_errors
    def reserve(self, key: SlotKey, capacity: int) -> bool:
        sector_id, slot_date, slot_time = key
        with transaction.atomic():
            row, _ = SlotReservationModel.objects.get_or_create(
                sector_id=sector_id,
                slot_date=slot_date,
                slot_time=slot_time,
            )
            updated = SlotReservationModel.objects.filter(
                id=row.id,
                reserved__lt=capacity,
            ).update(reserved=F('reserved') + 1)
        logger.debug("Slot reserve %s -> %s", key, bool(updated))
        return bool(updated)

    @translate_store_errors
    def release(self, key: SlotKey) -> None:
        sector_id, slot_date, slot_time = key
        SlotReservationModel.objects.filter(
            sector_id=sector_id,
            slot_date=slot_date,
            slot_time=slot_time,
            reserved__gt=0,
        ).update(reserved=F('reserved') - 1)

    @translate_store_errors
    def booked(
        self,
        sector_id: str,
        from_date: date,
        to_date: date,
    ) -> Dict[Tuple[date, time], int]:
        rows = SlotReservationModel.objects.filter(
            sector_id=sector_id,
            slot_date__gte=from_date,
            slot_date__lte=to_date,
            reserved__gt=0,
        ).values_list('slot_date', 'slot_time', 'reserved')
        return {(slot_date, slot_time): reserved for slot_date, slot_time, reserved in rows}

    @translate_store_errors
    def count(self, key: SlotKey) -> int:
        sector_id, slot_date, slot_time = key
        row = SlotReservationModel.objects.filter(
            sector_id=sector_id, slot_date=slot_date, slot_time=slot_time
        ).first()
        return row.reserved if row else 0
