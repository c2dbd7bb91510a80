"""
Domínio de Agenda (Setores, Regras de Horário e Horários Ofertáveis).
"""

from .entities import SectorEntity, SectorType, Weekday, ScheduleRule, Slot
from .ports import (
    SectorRepository,
    ScheduleRuleRepository,
    SlotLedger,
    InMemorySectorRepository,
    InMemoryScheduleRuleRepository,
    InMemorySlotLedger,
)
from .registry import ScheduleRegistry
from .slots import SlotCalculator
from .dtos import OfferableSlotsQueryDTO, SlotOutputDTO
from .use_cases import ListOfferableSlotsService

__all__ = [
    "SectorEntity",
    "SectorType",
    "Weekday",
    "ScheduleRule",
    "Slot",
    "SectorRepository",
    "ScheduleRuleRepository",
    "SlotLedger",
    "InMemorySectorRepository",
    "InMemoryScheduleRuleRepository",
    "InMemorySlotLedger",
    "ScheduleRegistry",
    "SlotCalculator",
    "OfferableSlotsQueryDTO",
    "SlotOutputDTO",
    "ListOfferableSlotsService",
]
