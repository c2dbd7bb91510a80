"""
Entidades do Domínio de Agenda (Setores e Horários).

Este módulo define as entidades que descrevem onde e quando um
cidadão pode ser atendido.

Entidades:
- SectorEntity: Setor (departamento/guichê) que presta o serviço
- ScheduleRule: Janela semanal recorrente de atendimento com hora marcada
- Slot: Horário ofertável derivado das regras (não persistido)

Regras de Negócio Encapsuladas:
- Validação de dados de setor e de regra de horário
- Expansão de uma regra em inícios de atendimento
- Detecção de sobreposição entre regras do mesmo dia
"""

from dataclasses import dataclass, field
from datetime import date, datetime, time
from enum import Enum
from typing import ClassVar, List, Optional, Tuple
import uuid

from src.core.shared.exceptions import ValidationError


class SectorType(Enum):
    """
    Tipo de setor.

    NORMAL: atendimento por ordem de chegada (sem agenda).
    SPECIAL: atendimento apenas com hora marcada.
    """

    NORMAL = "NORMAL"
    SPECIAL = "SPECIAL"

    @classmethod
    def from_string(cls, value: str) -> "SectorType":
        """
        Converte string para enum.

        Aceita também o rótulo legado "ESPECIAL".

        Raises:
            ValueError: Se valor inválido
        """
        normalized = (value or "").strip().upper()
        if normalized == "ESPECIAL":
            return cls.SPECIAL
        try:
            return cls[normalized]
        except KeyError:
            raise ValueError(f"Tipo de setor inválido: {value}")


class Weekday(Enum):
    """Dias da semana, na ordem de `date.weekday()` (segunda = 0)."""

    MONDAY = "MONDAY"
    TUESDAY = "TUESDAY"
    WEDNESDAY = "WEDNESDAY"
    THURSDAY = "THURSDAY"
    FRIDAY = "FRIDAY"
    SATURDAY = "SATURDAY"
    SUNDAY = "SUNDAY"

    @property
    def index(self) -> int:
        """Posição do dia (segunda = 0 ... domingo = 6)."""
        return list(Weekday).index(self)

    @classmethod
    def from_date(cls, day: date) -> "Weekday":
        """Dia da semana de uma data civil."""
        return list(cls)[day.weekday()]

    @classmethod
    def from_string(cls, value: str) -> "Weekday":
        """
        Converte string para enum.

        Aceita o nome completo ("MONDAY") ou a abreviação de três
        letras ("MON").

        Raises:
            ValueError: Se valor inválido
        """
        normalized = (value or "").strip().upper()
        for weekday in cls:
            if normalized in (weekday.value, weekday.value[:3]):
                return weekday
        raise ValueError(f"Dia da semana inválido: {value}")


def _seconds(value: time) -> int:
    return value.hour * 3600 + value.minute * 60 + value.second


def _from_seconds(value: int) -> time:
    return time(value // 3600, (value % 3600) // 60, value % 60)


@dataclass
class SectorEntity:
    """
    Entidade de Domínio: Setor.

    Somente leitura para o núcleo de atendimento; criada e editada
    pela administração de setores.

    Invariantes:
    - Código é obrigatório (prefixo das senhas, ex: "INT")
    - Capacidade máxima e tempo estimado são positivos
    - Setor SPECIAL só aceita reservas se tiver regra de horário ativa

    Attributes:
        id: Identificador único
        code: Código curto usado no código das senhas
        name: Nome de exibição
        type: NORMAL ou SPECIAL
        max_capacity: Guichês atendendo simultaneamente
        estimated_service_minutes: Duração média de um atendimento
        active: Se o setor está aceitando operações
    """

    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    code: str = ""
    name: str = ""
    type: SectorType = SectorType.NORMAL
    max_capacity: int = 1
    estimated_service_minutes: int = 15
    active: bool = True

    @classmethod
    def create(
        cls,
        code: str,
        name: str,
        type: SectorType = SectorType.NORMAL,
        max_capacity: int = 1,
        estimated_service_minutes: int = 15,
        active: bool = True,
        id: Optional[str] = None,
    ) -> "SectorEntity":
        """
        Factory method para criar setor com validações.

        Raises:
            ValidationError: Se dados de entrada inválidos
        """
        if not code or not code.strip():
            raise ValidationError("Código do setor é obrigatório", field="code")

        if not name or not name.strip():
            raise ValidationError("Nome do setor é obrigatório", field="name")

        if max_capacity < 1:
            raise ValidationError(
                "A capacidade máxima deve ser maior que 0",
                field="max_capacity"
            )

        if estimated_service_minutes < 1:
            raise ValidationError(
                "O tempo estimado deve ser maior que 0",
                field="estimated_service_minutes"
            )

        sector = cls(
            code=code.strip().upper(),
            name=name.strip(),
            type=type,
            max_capacity=max_capacity,
            estimated_service_minutes=estimated_service_minutes,
            active=active,
        )
        if id:
            sector.id = id
        return sector

    @property
    def is_special(self) -> bool:
        """Setor com atendimento exclusivamente agendado."""
        return self.type == SectorType.SPECIAL

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SectorEntity):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)


@dataclass(frozen=True)
class ScheduleRule:
    """
    Regra semanal de atendimento agendado de um setor.

    Cada regra gera inícios de atendimento a partir de `start_time`,
    de `interval_minutes` em `interval_minutes`, enquanto o início
    for estritamente anterior a `end_time`. O último início pode
    terminar depois de `end_time` (intervalo parcial é ofertado).

    Invariantes:
    - start_time < end_time
    - interval_minutes entre 5 e 120
    - capacity_per_slot entre 1 e 50
    - Regras do mesmo dia podem se sobrepor; os inícios são unidos
    """

    sector_id: str
    weekday: Weekday
    start_time: time
    end_time: time
    interval_minutes: int
    capacity_per_slot: int
    active: bool = True
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    # Constantes de validação
    INTERVAL_MIN: ClassVar[int] = 5
    INTERVAL_MAX: ClassVar[int] = 120
    CAPACITY_MIN: ClassVar[int] = 1
    CAPACITY_MAX: ClassVar[int] = 50

    @classmethod
    def create(
        cls,
        sector_id: str,
        weekday: Weekday,
        start_time: time,
        end_time: time,
        interval_minutes: int,
        capacity_per_slot: int,
        active: bool = True,
        id: Optional[str] = None,
    ) -> "ScheduleRule":
        """
        Factory method para criar regra com validações.

        Raises:
            ValidationError: Se dados de entrada inválidos

        Example:
            rule = ScheduleRule.create(
                sector_id="sec-1",
                weekday=Weekday.MONDAY,
                start_time=time(8, 0),
                end_time=time(12, 0),
                interval_minutes=30,
                capacity_per_slot=2,
            )
        """
        if not sector_id:
            raise ValidationError("Setor é obrigatório", field="sector_id")

        if start_time >= end_time:
            raise ValidationError(
                "A hora de início deve ser anterior à hora de término",
                field="end_time"
            )

        if not cls.INTERVAL_MIN <= interval_minutes <= cls.INTERVAL_MAX:
            raise ValidationError(
                f"Intervalo deve estar entre {cls.INTERVAL_MIN} e "
                f"{cls.INTERVAL_MAX} minutos",
                field="interval_minutes"
            )

        if not cls.CAPACITY_MIN <= capacity_per_slot <= cls.CAPACITY_MAX:
            raise ValidationError(
                f"Capacidade deve estar entre {cls.CAPACITY_MIN} e "
                f"{cls.CAPACITY_MAX} pessoas",
                field="capacity_per_slot"
            )

        kwargs = {"id": id} if id else {}
        return cls(
            sector_id=sector_id,
            weekday=weekday,
            start_time=start_time,
            end_time=end_time,
            interval_minutes=interval_minutes,
            capacity_per_slot=capacity_per_slot,
            active=active,
            **kwargs,
        )

    def slot_times(self) -> List[time]:
        """
        Inícios de atendimento gerados pela regra.

        Inclui todo `t` com start_time <= t < end_time, em passos de
        `interval_minutes`.
        """
        step = self.interval_minutes * 60
        if step <= 0:
            return []
        end = _seconds(self.end_time)
        return [
            _from_seconds(current)
            for current in range(_seconds(self.start_time), end, step)
        ]

    @property
    def slot_count(self) -> int:
        """Quantidade de inícios de atendimento por dia."""
        return len(self.slot_times())

    def applies_to(self, day: date) -> bool:
        """Se a regra vale para a data (ativa e mesmo dia da semana)."""
        return self.active and Weekday.from_date(day) == self.weekday

    def covers(self, moment: time) -> bool:
        """Se o horário está dentro da janela [start_time, end_time)."""
        return self.start_time <= moment < self.end_time

    def overlaps(self, other: "ScheduleRule") -> bool:
        """Se as janelas das duas regras se sobrepõem no mesmo dia."""
        if self.weekday != other.weekday:
            return False
        return self.start_time < other.end_time and other.start_time < self.end_time

    def sort_key(self) -> Tuple[int, time]:
        """Chave de ordenação por dia da semana e hora de início."""
        return (self.weekday.index, self.start_time)


@dataclass(frozen=True)
class Slot:
    """
    Horário ofertável de um setor SPECIAL.

    Derivado das regras de horário; `remaining_capacity` já desconta
    as reservas existentes para o mesmo (setor, data, hora).
    """

    sector_id: str
    date: date
    time: time
    capacity: int
    remaining_capacity: int

    @property
    def starts_at(self) -> datetime:
        """Data/hora civil de início do atendimento."""
        return datetime.combine(self.date, self.time)

    @property
    def key(self) -> Tuple[str, date, time]:
        """Chave de contenção da reserva."""
        return (self.sector_id, self.date, self.time)

    def to_dict(self) -> dict:
        return {
            "sector_id": self.sector_id,
            "date": self.date.isoformat(),
            "time": self.time.strftime("%H:%M"),
            "capacity": self.capacity,
            "remaining_capacity": self.remaining_capacity,
        }
