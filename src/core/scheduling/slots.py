"""
Cálculo de horários ofertáveis (SlotCalculator).

Expande as regras semanais de um setor SPECIAL em horários
(data, hora) dentro de um horizonte, desconta as reservas do
SlotLedger e valida/reserva um horário no momento da emissão
da senha.

Regras:
- Inícios são todo `t` com start_time <= t < end_time, de intervalo
  em intervalo. O último intervalo pode ser parcial.
- Regras sobrepostas do mesmo dia são unidas; um início presente em
  mais de uma regra usa a maior capacidade entre elas.
- Horários sem capacidade restante não são ofertados.
- No dia corrente, inícios anteriores a `now` não são ofertados.
"""

from datetime import date, datetime, time, timedelta
from typing import Dict, List, Optional
import logging

from src.core.shared.exceptions import (
    SectorInactiveError,
    SlotUnavailableError,
    ValidationError,
)

from .entities import Slot
from .ports import SlotLedger
from .registry import ScheduleRegistry


logger = logging.getLogger(__name__)

DEFAULT_HORIZON_DAYS = 30


class SlotCalculator:
    """
    Calculadora de horários de atendimento agendado.

    Funções puras sobre o snapshot de regras (via registry) e de
    reservas (via ledger). A única operação com efeito é `reserve`,
    atômica por (setor, data, hora) graças ao SlotLedger.

    Example:
        calculator = SlotCalculator(registry, ledger, horizon_days=30)
        slots = calculator.offerable_slots("sec-1", now=datetime.now())
        calculator.reserve("sec-1", slots[0].date, slots[0].time)
    """

    def __init__(
        self,
        registry: ScheduleRegistry,
        ledger: SlotLedger,
        horizon_days: int = DEFAULT_HORIZON_DAYS,
    ):
        if horizon_days < 1:
            raise ValueError("horizon_days deve ser maior que 0")
        self.registry = registry
        self.ledger = ledger
        self.horizon_days = horizon_days

    def horizon(self, today: date) -> date:
        """Última data ofertável a partir de `today` (inclusive)."""
        return today + timedelta(days=self.horizon_days - 1)

    def capacities_for_date(self, sector_id: str, day: date) -> Dict[time, int]:
        """
        Inícios de atendimento de uma data com a capacidade de cada um.

        Returns:
            Dict {hora: capacidade}, união de todas as regras do dia
        """
        capacities: Dict[time, int] = {}
        for rule in self.registry.rules_for_date(sector_id, day):
            for slot_time in rule.slot_times():
                capacities[slot_time] = max(
                    capacities.get(slot_time, 0), rule.capacity_per_slot
                )
        return capacities

    def offerable_slots(
        self,
        sector_id: str,
        now: datetime,
        from_date: Optional[date] = None,
        to_date: Optional[date] = None,
    ) -> List[Slot]:
        """
        Lista horários ofertáveis, ordenados por data e hora.

        O intervalo pedido é recortado ao horizonte [hoje, hoje + N - 1].
        Setores NORMAL e setores desativados retornam lista vazia.

        Args:
            sector_id: ID do setor
            now: Data/hora civil corrente
            from_date: Primeira data (default: hoje)
            to_date: Última data (default: fim do horizonte)

        Raises:
            EntityNotFoundError: Se setor não existe
            ValidationError: Se from_date > to_date
        """
        today = now.date()
        start = max(from_date or today, today)
        end = min(to_date or self.horizon(today), self.horizon(today))

        if from_date and to_date and from_date > to_date:
            raise ValidationError(
                "Data inicial deve ser anterior ou igual à final",
                field="from_date"
            )

        sector = self.registry.current_sector(sector_id)
        if not (sector.is_special and sector.active) or start > end:
            return []

        booked = self.ledger.booked(sector_id, start, end)
        slots: List[Slot] = []
        day = start
        while day <= end:
            capacities = self.capacities_for_date(sector_id, day)
            for slot_time in sorted(capacities):
                if day == today and slot_time < now.time():
                    continue
                capacity = capacities[slot_time]
                remaining = capacity - booked.get((day, slot_time), 0)
                if remaining <= 0:
                    continue
                slots.append(Slot(
                    sector_id=sector_id,
                    date=day,
                    time=slot_time,
                    capacity=capacity,
                    remaining_capacity=remaining,
                ))
            day += timedelta(days=1)
        return slots

    def validate(self, sector_id: str, slot_date: date, slot_time: time, now: datetime) -> int:
        """
        Confere se o horário pertence ao conjunto ofertável agora.

        Returns:
            Capacidade total do horário

        Raises:
            SectorInactiveError: Se setor desativado
            SlotUnavailableError: Se o horário não é ofertado
        """
        sector = self.registry.current_sector(sector_id)
        if not sector.active:
            raise SectorInactiveError(
                f"Setor {sector.code} está inativo",
                sector_id=sector_id,
            )

        unavailable = SlotUnavailableError(
            f"Horário {slot_date.isoformat()} {slot_time.strftime('%H:%M')} "
            f"indisponível para o setor {sector.code}",
            sector_id=sector_id,
            slot_date=slot_date,
            slot_time=slot_time,
        )

        if not sector.is_special:
            raise unavailable

        today = now.date()
        if slot_date < today or slot_date > self.horizon(today):
            raise unavailable
        if slot_date == today and slot_time < now.time():
            raise unavailable

        capacity = self.capacities_for_date(sector_id, slot_date).get(slot_time)
        if not capacity:
            raise unavailable

        booked = self.ledger.booked(sector_id, slot_date, slot_date)
        if booked.get((slot_date, slot_time), 0) >= capacity:
            raise unavailable

        return capacity

    def reserve(self, sector_id: str, slot_date: date, slot_time: time, now: datetime) -> None:
        """
        Valida e ocupa uma unidade do horário atomicamente.

        A validação decide se o horário é ofertável; o ledger decide,
        sob lock por chave, se ainda há vaga. Duas reservas simultâneas
        para a última vaga resultam em um sucesso e um
        SlotUnavailableError.

        Raises:
            SectorInactiveError: Se setor desativado
            SlotUnavailableError: Se indisponível ou corrida perdida
        """
        capacity = self.validate(sector_id, slot_date, slot_time, now)
        key = (sector_id, slot_date, slot_time)
        if not self.ledger.reserve(key, capacity):
            logger.debug("Reserva perdida para %s", key)
            raise SlotUnavailableError(
                f"Horário {slot_date.isoformat()} {slot_time.strftime('%H:%M')} "
                f"esgotado",
                sector_id=sector_id,
                slot_date=slot_date,
                slot_time=slot_time,
            )
        logger.debug("Horário reservado: %s", key)

    def release(self, sector_id: str, slot_date: date, slot_time: time) -> None:
        """Devolve uma unidade do horário ao ledger."""
        self.ledger.release((sector_id, slot_date, slot_time))
        logger.debug("Horário liberado: %s %s %s", sector_id, slot_date, slot_time)
