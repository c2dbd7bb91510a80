"""
Data Transfer Objects (DTOs) do Domínio de Agenda.
"""

from dataclasses import dataclass
from datetime import date
from typing import Optional

from .entities import Slot


@dataclass(frozen=True)
class OfferableSlotsQueryDTO:
    """
    Consulta de horários ofertáveis.

    Attributes:
        sector_id: ID do setor
        from_date: Primeira data (default: hoje)
        to_date: Última data (default: fim do horizonte)
    """

    sector_id: str
    from_date: Optional[date] = None
    to_date: Optional[date] = None


@dataclass
class SlotOutputDTO:
    """Horário ofertável com capacidade restante."""

    sector_id: str
    date: date
    time: str
    capacity: int
    remaining_capacity: int

    @classmethod
    def from_slot(cls, slot: Slot) -> "SlotOutputDTO":
        return cls(
            sector_id=slot.sector_id,
            date=slot.date,
            time=slot.time.strftime("%H:%M"),
            capacity=slot.capacity,
            remaining_capacity=slot.remaining_capacity,
        )

    def to_dict(self) -> dict:
        return {
            "sector_id": self.sector_id,
            "date": self.date.isoformat(),
            "time": self.time,
            "capacity": self.capacity,
            "remaining_capacity": self.remaining_capacity,
        }
