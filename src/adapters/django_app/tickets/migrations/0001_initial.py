"""
Migration inicial para o domínio de Senhas.

Cria as tabelas:
- tickets: Senhas de atendimento
- ticket_sequences: Sequência diária de códigos por setor
- domain_events: Event Store
"""

from django.db import migrations, models


class Migration(migrations.Migration):
    """Migration inicial."""

    initial = True

    dependencies = [
    ]

    operations = [
        # =================================================================
        # Tabela: tickets
        # =================================================================
        migrations.CreateModel(
            name='TicketModel',
            fields=[
                ('id', models.CharField(
                    max_length=36,
                    primary_key=True,
                    serialize=False,
                    editable=False,
                    help_text='UUID único da senha'
                )),
                ('code', models.CharField(
                    max_length=20,
                    db_index=True,
                    help_text='Código legível (setor + sequência diária)'
                )),
                ('sector_id', models.CharField(
                    max_length=36,
                    db_index=True,
                    help_text='Setor de atendimento'
                )),
                ('citizen_ref', models.CharField(
                    max_length=100,
                    db_index=True,
                    help_text='Referência ao cidadão'
                )),
                ('is_priority', models.BooleanField(
                    default=False,
                    help_text='Atendimento preferencial'
                )),
                ('priority_reason', models.CharField(
                    max_length=200,
                    null=True,
                    blank=True,
                    help_text='Motivo da prioridade'
                )),
                ('type', models.CharField(
                    max_length=10,
                    choices=[('NORMAL', 'Normal'), ('SPECIAL', 'Agendada')],
                    default='NORMAL',
                    help_text='NORMAL ou agendada'
                )),
                ('scheduled_date', models.DateField(
                    null=True,
                    blank=True,
                    help_text='Data do horário agendado'
                )),
                ('scheduled_time', models.TimeField(
                    null=True,
                    blank=True,
                    help_text='Hora do horário agendado'
                )),
                ('status', models.CharField(
                    max_length=20,
                    choices=[
                        ('CREATED', 'Emitida'),
                        ('CALLED', 'Chamada'),
                        ('IN_SERVICE', 'Em atendimento'),
                        ('FINISHED', 'Finalizada'),
                        ('ABSENT', 'Ausente'),
                        ('REDIRECTED', 'Redirecionada'),
                    ],
                    default='CREATED',
                    db_index=True,
                    help_text='Estado atual da senha'
                )),
                ('created_at', models.DateTimeField(db_index=True, help_text='Emissão')),
                ('called_at', models.DateTimeField(null=True, blank=True, help_text='Chamada')),
                ('called_by', models.CharField(
                    max_length=100,
                    null=True,
                    blank=True,
                    help_text='Operador que chamou'
                )),
                ('started_at', models.DateTimeField(
                    null=True, blank=True, help_text='Início do atendimento'
                )),
                ('finished_at', models.DateTimeField(
                    null=True, blank=True, help_text='Encerramento'
                )),
                ('redirected_to', models.CharField(max_length=36, null=True, blank=True)),
                ('redirected_from', models.CharField(max_length=36, null=True, blank=True)),
                ('observations', models.TextField(null=True, blank=True)),
                ('version', models.PositiveIntegerField(
                    default=0,
                    help_text='Versão para controle de concorrência otimista'
                )),
            ],
            options={
                'verbose_name': 'Senha',
                'verbose_name_plural': 'Senhas',
                'db_table': 'tickets',
                'ordering': ['-created_at'],
            },
        ),
        migrations.AddIndex(
            model_name='ticketmodel',
            index=models.Index(
                fields=['sector_id', 'status'],
                name='ticket_sector_status_idx'
            ),
        ),
        migrations.AddIndex(
            model_name='ticketmodel',
            index=models.Index(
                fields=['citizen_ref', 'status'],
                name='ticket_citizen_status_idx'
            ),
        ),
        migrations.AddIndex(
            model_name='ticketmodel',
            index=models.Index(
                fields=['code', 'created_at'],
                name='ticket_code_created_idx'
            ),
        ),

        # =================================================================
        # Tabela: ticket_sequences
        # =================================================================
        migrations.CreateModel(
            name='TicketSequenceModel',
            fields=[
                ('id', models.BigAutoField(primary_key=True, serialize=False)),
                ('sector_id', models.CharField(max_length=36)),
                ('day', models.DateField()),
                ('last_value', models.PositiveIntegerField(default=0)),
            ],
            options={
                'verbose_name': 'Sequência de Senhas',
                'verbose_name_plural': 'Sequências de Senhas',
                'db_table': 'ticket_sequences',
            },
        ),
        migrations.AddConstraint(
            model_name='ticketsequencemodel',
            constraint=models.UniqueConstraint(
                fields=('sector_id', 'day'),
                name='uniq_ticket_sequence'
            ),
        ),

        # =================================================================
        # Tabela: domain_events (Event Store)
        # =================================================================
        migrations.CreateModel(
            name='DomainEventModel',
            fields=[
                ('event_id', models.CharField(
                    max_length=36,
                    primary_key=True,
                    serialize=False,
                    help_text='UUID único do evento'
                )),
                ('event_type', models.CharField(
                    max_length=100,
                    db_index=True,
                    help_text='Tipo do evento (ex: TicketCalledEvent)'
                )),
                ('aggregate_type', models.CharField(
                    max_length=100,
                    db_index=True,
                    help_text='Tipo do agregado (ex: Ticket)'
                )),
                ('aggregate_id', models.CharField(
                    max_length=36,
                    db_index=True,
                    help_text='ID do agregado que gerou o evento'
                )),
                ('event_data', models.JSONField(
                    default=dict,
                    help_text='Dados serializados do evento'
                )),
                ('version', models.IntegerField(
                    default=1,
                    help_text='Versão do schema do evento'
                )),
                ('occurred_at', models.DateTimeField(help_text='Quando o evento ocorreu')),
                ('recorded_at', models.DateTimeField(
                    auto_now_add=True,
                    help_text='Quando o evento foi persistido'
                )),
            ],
            options={
                'verbose_name': 'Evento de Domínio',
                'verbose_name_plural': 'Eventos de Domínio',
                'db_table': 'domain_events',
                'ordering': ['recorded_at'],
            },
        ),
        migrations.AddIndex(
            model_name='domaineventmodel',
            index=models.Index(
                fields=['aggregate_id', 'occurred_at'],
                name='event_aggregate_idx'
            ),
        ),
        migrations.AddIndex(
            model_name='domaineventmodel',
            index=models.Index(
                fields=['event_type', 'recorded_at'],
                name='event_type_idx'
            ),
        ),
    ]
