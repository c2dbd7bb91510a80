"""
Use Cases do Domínio de Agenda.

Use Cases implementados:
- ListOfferableSlotsService: Lista horários ofertáveis de um setor
"""

from datetime import datetime
from typing import Callable, List

from .dtos import OfferableSlotsQueryDTO, SlotOutputDTO
from .slots import SlotCalculator


class ListOfferableSlotsService:
    """
    Use Case: Listar horários ofertáveis.

    Somente leitura; não usa Unit of Work.

    Example:
        service = ListOfferableSlotsService(calculator)
        slots = service.execute(OfferableSlotsQueryDTO(sector_id="sec-1"))
    """

    def __init__(
        self,
        calculator: SlotCalculator,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.calculator = calculator
        self.clock = clock

    def execute(self, query: OfferableSlotsQueryDTO) -> List[SlotOutputDTO]:
        """
        Returns:
            Horários com capacidade restante >= 1, por data e hora

        Raises:
            EntityNotFoundError: Se setor não existe
            ValidationError: Se intervalo de datas inválido
        """
        slots = self.calculator.offerable_slots(
            query.sector_id,
            now=self.clock(),
            from_date=query.from_date,
            to_date=query.to_date,
        )
        return [SlotOutputDTO.from_slot(slot) for slot in slots]
