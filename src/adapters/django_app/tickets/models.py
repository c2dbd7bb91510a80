"""
Django Models para o domínio de Senhas.

Estes models são ADAPTERS - implementam a persistência para as
entidades de domínio definidas em src/core/tickets/entities.py.

IMPORTANTE:
- Models NÃO contêm lógica de negócio
- Lógica de negócio fica nas Entities do Core
- Models são mapeados para/de Entities via Mappers

Tabelas:
- TicketModel: Senhas (com coluna `version` para compare-and-swap)
- TicketSequenceModel: Sequência diária de códigos por setor
- DomainEventModel: Event Store
"""

from django.db import models


class TicketStatusChoices(models.TextChoices):
    """Choices para status da senha (espelha TicketStatus do Core)."""
    CREATED = 'CREATED', 'Emitida'
    CALLED = 'CALLED', 'Chamada'
    IN_SERVICE = 'IN_SERVICE', 'Em atendimento'
    FINISHED = 'FINISHED', 'Finalizada'
    ABSENT = 'ABSENT', 'Ausente'
    REDIRECTED = 'REDIRECTED', 'Redirecionada'


# Espelha OPEN_STATUSES do Core
OPEN_STATUS_VALUES = ['CREATED', 'CALLED', 'IN_SERVICE']


class TicketTypeChoices(models.TextChoices):
    """Choices para tipo de senha (espelha TicketType do Core)."""
    NORMAL = 'NORMAL', 'Normal'
    SPECIAL = 'SPECIAL', 'Agendada'


class TicketModel(models.Model):
    """
    Model Django para persistência de Senhas.

    Este model é um ADAPTER que persiste dados do TicketEntity.
    NÃO contém lógica de negócio - apenas estrutura de dados.

    Toda alteração de estado passa pelo UPDATE condicional em
    `version` do DjangoTicketStore; nunca por `.save()` direto.
    """

    # Primary Key - UUID gerado pela Entity
    id = models.CharField(
        max_length=36,
        primary_key=True,
        editable=False,
        help_text="UUID único da senha"
    )

    code = models.CharField(
        max_length=20,
        db_index=True,
        help_text="Código legível (setor + sequência diária)"
    )

    # Referências (strings para flexibilidade de integração)
    sector_id = models.CharField(
        max_length=36,
        db_index=True,
        help_text="Setor de atendimento"
    )

    citizen_ref = models.CharField(
        max_length=100,
        db_index=True,
        help_text="Referência ao cidadão"
    )

    # Prioridade
    is_priority = models.BooleanField(
        default=False,
        help_text="Atendimento preferencial"
    )

    priority_reason = models.CharField(
        max_length=200,
        null=True,
        blank=True,
        help_text="Motivo da prioridade"
    )

    type = models.CharField(
        max_length=10,
        choices=TicketTypeChoices.choices,
        default=TicketTypeChoices.NORMAL,
        help_text="NORMAL ou agendada"
    )

    scheduled_date = models.DateField(
        null=True,
        blank=True,
        help_text="Data do horário agendado"
    )

    scheduled_time = models.TimeField(
        null=True,
        blank=True,
        help_text="Hora do horário agendado"
    )

    # Estado
    status = models.CharField(
        max_length=20,
        choices=TicketStatusChoices.choices,
        default=TicketStatusChoices.CREATED,
        db_index=True,
        help_text="Estado atual da senha"
    )

    # Timestamps
    created_at = models.DateTimeField(db_index=True, help_text="Emissão")
    called_at = models.DateTimeField(null=True, blank=True, help_text="Chamada")
    called_by = models.CharField(
        max_length=100,
        null=True,
        blank=True,
        help_text="Operador que chamou"
    )
    started_at = models.DateTimeField(null=True, blank=True, help_text="Início do atendimento")
    finished_at = models.DateTimeField(null=True, blank=True, help_text="Encerramento")

    # Redirecionamento
    redirected_to = models.CharField(max_length=36, null=True, blank=True)
    redirected_from = models.CharField(max_length=36, null=True, blank=True)

    observations = models.TextField(null=True, blank=True)

    # Compare-and-swap
    version = models.PositiveIntegerField(
        default=0,
        help_text="Versão para controle de concorrência otimista"
    )

    class Meta:
        db_table = 'tickets'
        verbose_name = 'Senha'
        verbose_name_plural = 'Senhas'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['sector_id', 'status'], name='ticket_sector_status_idx'),
            models.Index(fields=['citizen_ref', 'status'], name='ticket_citizen_status_idx'),
            models.Index(fields=['code', 'created_at'], name='ticket_code_created_idx'),
        ]
        constraints = [
            # Uma senha em aberto por cidadão
            models.UniqueConstraint(
                fields=['citizen_ref'],
                condition=models.Q(status__in=OPEN_STATUS_VALUES),
                name='ticket_one_open_per_citizen',
            ),
        ]

    def __str__(self):
        return f"[{self.code}] {self.status}"

    def __repr__(self):
        return f"<TicketModel id={self.id[:8]} status={self.status} v{self.version}>"


class TicketSequenceModel(models.Model):
    """
    Sequência diária de códigos de senha por setor.

    Incrementada com F() dentro de transação; uma linha por
    (setor, dia).
    """

    id = models.BigAutoField(primary_key=True)
    sector_id = models.CharField(max_length=36)
    day = models.DateField()
    last_value = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = 'ticket_sequences'
        verbose_name = 'Sequência de Senhas'
        verbose_name_plural = 'Sequências de Senhas'
        constraints = [
            models.UniqueConstraint(fields=['sector_id', 'day'], name='uniq_ticket_sequence'),
        ]

    def __str__(self):
        return f"{self.sector_id[:8]} {self.day}: {self.last_value}"


class DomainEventModel(models.Model):
    """
    Event Store genérico para Domain Events.

    Persiste todos os eventos de domínio para:
    - Histórico de chamadas e atendimentos
    - Replay de eventos
    - Integração com outros sistemas
    """

    event_id = models.CharField(
        max_length=36,
        primary_key=True,
        help_text="UUID único do evento"
    )

    event_type = models.CharField(
        max_length=100,
        db_index=True,
        help_text="Tipo do evento (ex: TicketCalledEvent)"
    )

    aggregate_type = models.CharField(
        max_length=100,
        db_index=True,
        help_text="Tipo do agregado (ex: Ticket)"
    )

    aggregate_id = models.CharField(
        max_length=36,
        db_index=True,
        help_text="ID do agregado que gerou o evento"
    )

    event_data = models.JSONField(
        default=dict,
        help_text="Dados serializados do evento"
    )

    version = models.IntegerField(
        default=1,
        help_text="Versão do schema do evento"
    )

    occurred_at = models.DateTimeField(help_text="Quando o evento ocorreu")

    recorded_at = models.DateTimeField(
        auto_now_add=True,
        help_text="Quando o evento foi persistido"
    )

    class Meta:
        db_table = 'domain_events'
        verbose_name = 'Evento de Domínio'
        verbose_name_plural = 'Eventos de Domínio'
        ordering = ['recorded_at']
        indexes = [
            models.Index(fields=['aggregate_id', 'occurred_at'], name='event_aggregate_idx'),
            models.Index(fields=['event_type', 'recorded_at'], name='event_type_idx'),
        ]

    def __str__(self):
        return f"{self.event_type} - {self.aggregate_id[:8]} @ {self.occurred_at}"
