"""
Registro de agendas dos setores.

Mantém em cache, por setor, o tipo do setor e suas regras semanais
de atendimento. É um valor explícito passado ao SlotCalculator: não há
estado global. Quando a administração altera setores ou regras,
o chamador invoca `refresh()` para descartar o cache; no Django os
signals do app de agenda fazem isso no processo que gravou.

Entradas expiram após `ttl_seconds`, para que os demais processos
vejam a alteração mesmo sem o signal. Emissão, chamada,
redirecionamento, reserva e listagem de horários usam
`current_sector()`, que relê o setor do repositório.
"""

from datetime import date, time
from time import monotonic
from typing import Any, Callable, Dict, List, Optional, Tuple
import logging
import threading

from src.core.shared.exceptions import EntityNotFoundError

from .entities import ScheduleRule, SectorEntity, SectorType, Weekday
from .ports import ScheduleRuleRepository, SectorRepository


logger = logging.getLogger(__name__)

DEFAULT_CACHE_TTL_SECONDS = 60

# (carregado_em, valor)
_Entry = Tuple[float, Any]


class ScheduleRegistry:
    """
    Cache de leitura de setores e regras de horário.

    Attributes:
        sector_repo: Fonte dos setores
        rule_repo: Fonte das regras de horário
        ttl_seconds: Validade de cada entrada (None = até o refresh)

    Example:
        registry = ScheduleRegistry(sector_repo, rule_repo, ttl_seconds=60)
        registry.rules_for_sector("sec-1")
        registry.refresh("sec-1")  # após edição administrativa
    """

    def __init__(
        self,
        sector_repo: SectorRepository,
        rule_repo: ScheduleRuleRepository,
        ttl_seconds: Optional[float] = DEFAULT_CACHE_TTL_SECONDS,
        timer: Callable[[], float] = monotonic,
    ):
        self.sector_repo = sector_repo
        self.rule_repo = rule_repo
        self.ttl_seconds = ttl_seconds
        self._timer = timer
        self._lock = threading.Lock()
        self._sectors: Dict[str, _Entry] = {}
        self._rules: Dict[str, _Entry] = {}

    def _cached(self, cache: Dict[str, _Entry], key: str) -> Any:
        with self._lock:
            entry = cache.get(key)
            if entry is None:
                return None
            loaded_at, value = entry
            if self.ttl_seconds is not None and self._timer() - loaded_at >= self.ttl_seconds:
                del cache[key]
                return None
            return value

    def _store(self, cache: Dict[str, _Entry], key: str, value: Any) -> None:
        with self._lock:
            cache[key] = (self._timer(), value)

    def refresh(self, sector_id: Optional[str] = None) -> None:
        """
        Descarta o cache.

        Args:
            sector_id: Setor a recarregar; None recarrega todos
        """
        with self._lock:
            if sector_id is None:
                self._sectors.clear()
                self._rules.clear()
            else:
                self._sectors.pop(sector_id, None)
                self._rules.pop(sector_id, None)
        logger.debug("Agenda recarregada: %s", sector_id or "todos os setores")

    def _load_sector(self, sector_id: str) -> SectorEntity:
        sector = self.sector_repo.get_by_id(sector_id)
        if sector is None:
            self.refresh(sector_id)
            raise EntityNotFoundError(
                f"Setor {sector_id} não encontrado",
                entity_type="Sector",
                entity_id=sector_id,
            )
        self._store(self._sectors, sector_id, sector)
        return sector

    def get_sector(self, sector_id: str) -> SectorEntity:
        """
        Retorna o setor (do cache ou do repositório).

        Raises:
            EntityNotFoundError: Se setor não existe
        """
        sector = self._cached(self._sectors, sector_id)
        if sector is not None:
            return sector
        return self._load_sector(sector_id)

    def current_sector(self, sector_id: str) -> SectorEntity:
        """
        Relê o setor do repositório e atualiza o cache.

        Raises:
            EntityNotFoundError: Se setor não existe
        """
        cached = self._cached(self._sectors, sector_id)
        sector = self._load_sector(sector_id)
        if cached is not None and cached.type != sector.type:
            with self._lock:
                self._rules.pop(sector_id, None)
        return sector

    def sector_type(self, sector_id: str) -> SectorType:
        return self.get_sector(sector_id).type

    def rules_for_sector(self, sector_id: str) -> List[ScheduleRule]:
        """
        Regras do setor ordenadas por dia da semana e hora de início.

        Setores NORMAL nunca consultam regras: retornam lista vazia.
        """
        if self.sector_type(sector_id) != SectorType.SPECIAL:
            return []

        cached = self._cached(self._rules, sector_id)
        if cached is not None:
            return list(cached)

        rules = sorted(self.rule_repo.list_by_sector(sector_id), key=ScheduleRule.sort_key)
        self._store(self._rules, sector_id, rules)
        return list(rules)

    def active_rules(self, sector_id: str) -> List[ScheduleRule]:
        return [r for r in self.rules_for_sector(sector_id) if r.active]

    def rules_for_date(self, sector_id: str, day: date) -> List[ScheduleRule]:
        """Regras ativas que valem para a data."""
        return [r for r in self.rules_for_sector(sector_id) if r.applies_to(day)]

    def accepts_bookings(self, sector_id: str) -> bool:
        """
        Setor SPECIAL ativo com pelo menos uma regra ativa.

        Setores NORMAL não aceitam reservas (não têm agenda).
        """
        sector = self.get_sector(sector_id)
        return sector.active and sector.is_special and bool(self.active_rules(sector_id))

    def is_within_schedule(self, sector_id: str, weekday: Weekday, moment: time) -> bool:
        """
        Se o horário está dentro de alguma janela ativa do dia.

        Example:
            registry.is_within_schedule("sec-1", Weekday.MONDAY, time(9, 30))
        """
        return any(
            rule.weekday == weekday and rule.covers(moment)
            for rule in self.active_rules(sector_id)
        )

    def overlapping_rules(self, sector_id: str) -> List[Tuple[ScheduleRule, ScheduleRule]]:
        """
        Pares de regras ativas que se sobrepõem no mesmo dia.

        Sobreposição é permitida (os horários são unidos); a lista serve
        para a administração revisar conflitos.
        """
        rules = self.active_rules(sector_id)
        pairs = []
        for index, rule in enumerate(rules):
            for other in rules[index + 1:]:
                if rule.overlaps(other):
                    pairs.append((rule, other))
        return pairs
