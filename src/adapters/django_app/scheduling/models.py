"""
Django Models para o domínio de Agenda.

Estes models são ADAPTERS - implementam a persistência para as
entidades definidas em src/core/scheduling/entities.py.

IMPORTANTE:
- Models NÃO contêm lógica de negócio
- Validações ficam nas Entities do Core
- Models são mapeados para/de Entities via Mappers

Tabelas:
- SectorModel: Setores de atendimento
- ScheduleRuleModel: Regras semanais de horário
- SlotReservationModel: Contador de reservas por (setor, data, hora)
"""

from django.db import models


class SectorTypeChoices(models.TextChoices):
    """Choices para tipo de setor (espelha SectorType do Core)."""
    NORMAL = 'NORMAL', 'Normal'
    SPECIAL = 'SPECIAL', 'Especial (com agendamento)'


class WeekdayChoices(models.TextChoices):
    """Choices para dia da semana (espelha Weekday do Core)."""
    MONDAY = 'MONDAY', 'Segunda-feira'
    TUESDAY = 'TUESDAY', 'Terça-feira'
    WEDNESDAY = 'WEDNESDAY', 'Quarta-feira'
    THURSDAY = 'THURSDAY', 'Quinta-feira'
    FRIDAY = 'FRIDAY', 'Sexta-feira'
    SATURDAY = 'SATURDAY', 'Sábado'
    SUNDAY = 'SUNDAY', 'Domingo'


class SectorModel(models.Model):
    """
    Model Django para persistência de Setores.

    Fields:
        id: UUID (gerado pela Entity)
        code: Código curto, prefixo das senhas
        name: Nome de exibição
        type: NORMAL ou SPECIAL
        max_capacity: Guichês atendendo simultaneamente
        estimated_service_minutes: Duração média do atendimento
        active: Se aceita operações
    """

    id = models.CharField(
        max_length=36,
        primary_key=True,
        editable=False,
        help_text="UUID único do setor"
    )

    code = models.CharField(
        max_length=10,
        unique=True,
        help_text="Código curto usado no código das senhas"
    )

    name = models.CharField(
        max_length=200,
        help_text="Nome do setor"
    )

    type = models.CharField(
        max_length=10,
        choices=SectorTypeChoices.choices,
        default=SectorTypeChoices.NORMAL,
        help_text="Tipo de atendimento"
    )

    max_capacity = models.PositiveIntegerField(
        default=1,
        help_text="Atendimentos simultâneos"
    )

    estimated_service_minutes = models.PositiveIntegerField(
        default=15,
        help_text="Tempo estimado de atendimento (minutos)"
    )

    active = models.BooleanField(
        default=True,
        db_index=True,
        help_text="Setor ativo"
    )

    class Meta:
        db_table = 'sectors'
        verbose_name = 'Setor'
        verbose_name_plural = 'Setores'
        ordering = ['code']

    def __str__(self):
        return f"{self.code} - {self.name}"


class ScheduleRuleModel(models.Model):
    """
    Model Django para persistência de Regras de Horário.

    Fields:
        id: UUID (gerado pela Entity)
        sector: Setor da regra
        weekday: Dia da semana
        start_time / end_time: Janela [início, fim)
        interval_minutes: Intervalo entre inícios
        capacity_per_slot: Pessoas por horário
        active: Se a regra gera horários
    """

    id = models.CharField(
        max_length=36,
        primary_key=True,
        editable=False,
        help_text="UUID único da regra"
    )

    sector = models.ForeignKey(
        SectorModel,
        on_delete=models.CASCADE,
        related_name='schedule_rules',
        help_text="Setor da regra"
    )

    weekday = models.CharField(
        max_length=10,
        choices=WeekdayChoices.choices,
        help_text="Dia da semana"
    )

    start_time = models.TimeField(help_text="Hora de início")

    end_time = models.TimeField(help_text="Hora de término (exclusiva)")

    interval_minutes = models.PositiveIntegerField(
        default=30,
        help_text="Intervalo entre horários (minutos)"
    )

    capacity_per_slot = models.PositiveIntegerField(
        default=1,
        help_text="Capacidade de cada horário"
    )

    active = models.BooleanField(
        default=True,
        help_text="Regra ativa"
    )

    class Meta:
        db_table = 'schedule_rules'
        verbose_name = 'Regra de Horário'
        verbose_name_plural = 'Regras de Horário'
        ordering = ['sector', 'weekday', 'start_time']
        indexes = [
            models.Index(fields=['sector', 'active'], name='sched_rule_sector_active_idx'),
        ]

    def __str__(self):
        return (
            f"{self.sector_id[:8]} {self.weekday} "
            f"{self.start_time:%H:%M}-{self.end_time:%H:%M}"
        )


class SlotReservationModel(models.Model):
    """
    Contador de reservas de um horário.

    Uma linha por (setor, data, hora). `reserved` só é incrementado
    por UPDATE condicional (reserved < capacidade), o que serializa
    as reservas concorrentes no banco.
    """

    id = models.BigAutoField(primary_key=True)

    sector_id = models.CharField(
        max_length=36,
        db_index=True,
        help_text="Setor do horário"
    )

    slot_date = models.DateField(help_text="Data do horário")

    slot_time = models.TimeField(help_text="Hora do horário")

    reserved = models.PositiveIntegerField(
        default=0,
        help_text="Unidades de capacidade ocupadas"
    )

    class Meta:
        db_table = 'slot_reservations'
        verbose_name = 'Reserva de Horário'
        verbose_name_plural = 'Reservas de Horário'
        constraints = [
            models.UniqueConstraint(
                fields=['sector_id', 'slot_date', 'slot_time'],
                name='uniq_slot_reservation',
            ),
        ]

    def __str__(self):
        return f"{self.sector_id[:8]} {self.slot_date} {self.slot_time:%H:%M} ({self.reserved})"
