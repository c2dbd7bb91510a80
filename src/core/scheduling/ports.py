"""
Ports (Interfaces) do Domínio de Agenda.

Define os contratos que os Adapters de infraestrutura devem implementar
para fornecer setores, regras de horário e o livro de reservas.

Tipos de Ports:
- SectorRepository: leitura de setores (SectorInfo)
- ScheduleRuleRepository: leitura das regras semanais de um setor
- SlotLedger: contagem atômica de reservas por (setor, data, hora)

Princípio:
    Core define interfaces → Adapters implementam
    Dependências sempre apontam para o Core
"""

from collections import defaultdict
from datetime import date, time
from typing import Dict, List, Optional, Protocol, Tuple, runtime_checkable

from src.core.shared.concurrency import KeyedLocks

from .entities import ScheduleRule, SectorEntity


SlotKey = Tuple[str, date, time]


@runtime_checkable
class SectorRepository(Protocol):
    """
    Interface de leitura de setores.

    Setores são administrados fora do núcleo; aqui só consultamos
    tipo, estado e capacidade.
    """

    def get_by_id(self, sector_id: str) -> Optional[SectorEntity]:
        """
        Busca setor por ID.

        Returns:
            Setor encontrado ou None
        """
        ...

    def save(self, sector: SectorEntity) -> None:
        """Persiste setor (usado pela administração e por fixtures)."""
        ...

    def list_all(self) -> List[SectorEntity]:
        """Lista todos os setores (relatórios)."""
        ...


@runtime_checkable
class ScheduleRuleRepository(Protocol):
    """Interface de leitura das regras de horário."""

    def list_by_sector(self, sector_id: str) -> List[ScheduleRule]:
        """
        Lista todas as regras do setor, ativas ou não.

        Args:
            sector_id: ID do setor

        Returns:
            Lista de regras (ordem não garantida)
        """
        ...

    def save(self, rule: ScheduleRule) -> None:
        """Persiste regra (usado pela administração e por fixtures)."""
        ...


@runtime_checkable
class SlotLedger(Protocol):
    """
    Livro de reservas por horário.

    Mantém, para cada (setor, data, hora), quantas unidades de
    capacidade estão ocupadas por senhas que não terminaram como
    ausentes ou redirecionadas.

    A operação `reserve` DEVE ser atômica por chave: duas reservas
    simultâneas para a última vaga resultam em exatamente um sucesso.
    É independente do lock por senha, pois a reserva acontece antes
    da senha existir.
    """

    def reserve(self, key: SlotKey, capacity: int) -> bool:
        """
        Ocupa uma unidade se ainda houver capacidade.

        Args:
            key: (sector_id, data, hora)
            capacity: Capacidade total do horário

        Returns:
            True se reservou, False se o horário está lotado
        """
        ...

    def release(self, key: SlotKey) -> None:
        """Devolve uma unidade (senha ausente, redirecionada ou falha)."""
        ...

    def booked(
        self,
        sector_id: str,
        from_date: date,
        to_date: date,
    ) -> Dict[Tuple[date, time], int]:
        """
        Reservas ocupadas do setor no intervalo (inclusive).

        Returns:
            Dict {(data, hora): unidades ocupadas}
        """
        ...


class InMemorySectorRepository:
    """
    Implementação em memória do SectorRepository.

    Útil para testes unitários e prototipagem. Não usar em produção!
    """

    def __init__(self):
        self._sectors: Dict[str, SectorEntity] = {}

    def save(self, sector: SectorEntity) -> None:
        self._sectors[sector.id] = sector

    def get_by_id(self, sector_id: str) -> Optional[SectorEntity]:
        return self._sectors.get(sector_id)

    def list_all(self) -> List[SectorEntity]:
        return list(self._sectors.values())

    def clear(self) -> None:
        """Limpa todos os dados (útil para testes)."""
        self._sectors.clear()


class InMemoryScheduleRuleRepository:
    """Implementação em memória do ScheduleRuleRepository."""

    def __init__(self):
        self._rules: Dict[str, ScheduleRule] = {}

    def save(self, rule: ScheduleRule) -> None:
        self._rules[rule.id] = rule

    def list_by_sector(self, sector_id: str) -> List[ScheduleRule]:
        return [r for r in self._rules.values() if r.sector_id == sector_id]

    def clear(self) -> None:
        self._rules.clear()


class InMemorySlotLedger:
    """
    Implementação em memória do SlotLedger.

    Usa um lock por chave: reservas de horários diferentes não
    competem entre si.

    Example:
        ledger = InMemorySlotLedger()
        key = ("sec-1", date(2026, 10, 20), time(9, 0))
        ledger.reserve(key, capacity=1)  # True
        ledger.reserve(key, capacity=1)  # False
    """

    def __init__(self):
        self._counts: Dict[SlotKey, int] = defaultdict(int)
        self._locks = KeyedLocks()

    def reserve(self, key: SlotKey, capacity: int) -> bool:
        with self._locks.hold(key):
            if self._counts[key] >= capacity:
                return False
            self._counts[key] += 1
            return True

    def release(self, key: SlotKey) -> None:
        with self._locks.hold(key):
            if self._counts[key] > 0:
                self._counts[key] -= 1

    def booked(
        self,
        sector_id: str,
        from_date: date,
        to_date: date,
    ) -> Dict[Tuple[date, time], int]:
        return {
            (slot_date, slot_time): count
            for (sid, slot_date, slot_time), count in list(self._counts.items())
            if sid == sector_id and from_date <= slot_date <= to_date and count > 0
        }

    def count(self, key: SlotKey) -> int:
        """Unidades ocupadas de um horário (útil para testes)."""
        return self._counts.get(key, 0)
