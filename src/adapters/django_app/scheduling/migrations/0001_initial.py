"""
Migration inicial para o domínio de Agenda.

Cria as tabelas:
- sectors: Setores de atendimento
- schedule_rules: Regras semanais de horário
- slot_reservations: Contadores de reserva por horário
"""

from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):
    """Migration inicial."""

    initial = True

    dependencies = [
    ]

    operations = [
        # =================================================================
        # Tabela: sectors
        # =================================================================
        migrations.CreateModel(
            name='SectorModel',
            fields=[
                ('id', models.CharField(
                    max_length=36,
                    primary_key=True,
                    serialize=False,
                    editable=False,
                    help_text='UUID único do setor'
                )),
                ('code', models.CharField(
                    max_length=10,
                    unique=True,
                    help_text='Código curto usado no código das senhas'
                )),
                ('name', models.CharField(
                    max_length=200,
                    help_text='Nome do setor'
                )),
                ('type', models.CharField(
                    max_length=10,
                    choices=[
                        ('NORMAL', 'Normal'),
                        ('SPECIAL', 'Especial (com agendamento)'),
                    ],
                    default='NORMAL',
                    help_text='Tipo de atendimento'
                )),
                ('max_capacity', models.PositiveIntegerField(
                    default=1,
                    help_text='Atendimentos simultâneos'
                )),
                ('estimated_service_minutes', models.PositiveIntegerField(
                    default=15,
                    help_text='Tempo estimado de atendimento (minutos)'
                )),
                ('active', models.BooleanField(
                    default=True,
                    db_index=True,
                    help_text='Setor ativo'
                )),
            ],
            options={
                'verbose_name': 'Setor',
                'verbose_name_plural': 'Setores',
                'db_table': 'sectors',
                'ordering': ['code'],
            },
        ),

        # =================================================================
        # Tabela: schedule_rules
        # =================================================================
        migrations.CreateModel(
            name='ScheduleRuleModel',
            fields=[
                ('id', models.CharField(
                    max_length=36,
                    primary_key=True,
                    serialize=False,
                    editable=False,
                    help_text='UUID único da regra'
                )),
                ('weekday', models.CharField(
                    max_length=10,
                    choices=[
                        ('MONDAY', 'Segunda-feira'),
                        ('TUESDAY', 'Terça-feira'),
                        ('WEDNESDAY', 'Quarta-feira'),
                        ('THURSDAY', 'Quinta-feira'),
                        ('FRIDAY', 'Sexta-feira'),
                        ('SATURDAY', 'Sábado'),
                        ('SUNDAY', 'Domingo'),
                    ],
                    help_text='Dia da semana'
                )),
                ('start_time', models.TimeField(help_text='Hora de início')),
                ('end_time', models.TimeField(help_text='Hora de término (exclusiva)')),
                ('interval_minutes', models.PositiveIntegerField(
                    default=30,
                    help_text='Intervalo entre horários (minutos)'
                )),
                ('capacity_per_slot', models.PositiveIntegerField(
                    default=1,
                    help_text='Capacidade de cada horário'
                )),
                ('active', models.BooleanField(
                    default=True,
                    help_text='Regra ativa'
                )),
                ('sector', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='schedule_rules',
                    to='scheduling.sectormodel',
                    help_text='Setor da regra'
                )),
            ],
            options={
                'verbose_name': 'Regra de Horário',
                'verbose_name_plural': 'Regras de Horário',
                'db_table': 'schedule_rules',
                'ordering': ['sector', 'weekday', 'start_time'],
            },
        ),
        migrations.AddIndex(
            model_name='schedulerulemodel',
            index=models.Index(
                fields=['sector', 'active'],
                name='sched_rule_sector_active_idx'
            ),
        ),

        # =================================================================
        # Tabela: slot_reservations
        # =================================================================
        migrations.CreateModel(
            name='SlotReservationModel',
            fields=[
                ('id', models.BigAutoField(primary_key=True, serialize=False)),
                ('sector_id', models.CharField(
                    max_length=36,
                    db_index=True,
                    help_text='Setor do horário'
                )),
                ('slot_date', models.DateField(help_text='Data do horário')),
                ('slot_time', models.TimeField(help_text='Hora do horário')),
                ('reserved', models.PositiveIntegerField(
                    default=0,
                    help_text='Unidades de capacidade ocupadas'
                )),
            ],
            options={
                'verbose_name': 'Reserva de Horário',
                'verbose_name_plural': 'Reservas de Horário',
                'db_table': 'slot_reservations',
            },
        ),
        migrations.AddConstraint(
            model_name='slotreservationmodel',
            constraint=models.UniqueConstraint(
                fields=('sector_id', 'slot_date', 'slot_time'),
                name='uniq_slot_reservation'
            ),
        ),
    ]
