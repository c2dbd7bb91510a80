"""
Configuração do Celery para processamento assíncrono.

O Celery é usado para:
- Processar Domain Events de forma assíncrona
- Tarefas agendadas (resumo diário por setor, limpeza do Event Store)

Arquitetura:
- Broker: RabbitMQ (mensagens entre Django e Workers)
- Backend: Redis (resultados de tarefas)
- Workers: Processos que executam as tarefas

Uso:
    # Iniciar worker
    celery -A src.config.celery worker -l INFO

    # Iniciar beat (tarefas agendadas)
    celery -A src.config.celery beat -l INFO
"""

import os

from celery import Celery
from celery.schedules import crontab
from kombu import Exchange, Queue

# Definir módulo de settings do Django
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'src.config.settings')

app = Celery('balcao')

# Carregar configurações do Django (prefixo CELERY_)
app.config_from_object('django.conf:settings', namespace='CELERY')

app.conf.update(
    timezone='America/Sao_Paulo',
    enable_utc=False,

    # ACK após execução
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    worker_prefetch_multiplier=1,

    task_default_retry_delay=60,
    task_max_retries=3,

    result_expires=3600,

    worker_send_task_events=True,
    task_send_sent_event=True,
)

# Filas
app.conf.task_queues = (
    Queue('default', Exchange('default'), routing_key='default'),
    Queue('events', Exchange('events'), routing_key='events.#'),
    Queue('reports', Exchange('reports'), routing_key='reports.#'),
)
app.conf.task_default_queue = 'default'

# Roteamento de tarefas para filas
app.conf.task_routes = {
    'src.adapters.django_app.events.handlers.generate_daily_report': {'queue': 'reports'},
    'src.adapters.django_app.events.handlers.cleanup_old_events': {'queue': 'reports'},
    'src.adapters.django_app.events.handlers.*': {'queue': 'events'},
}

app.autodiscover_tasks([
    'src.adapters.django_app.events',
], related_name='handlers')

# Tarefas agendadas (beat)
app.conf.beat_schedule = {
    # Resumo de atendimento do dia, após o fechamento dos balcões
    'daily-report': {
        'task': 'src.adapters.django_app.events.handlers.generate_daily_report',
        'schedule': crontab(hour=20, minute=0),
    },

    # Limpar eventos antigos semanalmente
    'cleanup-old-events': {
        'task': 'src.adapters.django_app.events.handlers.cleanup_old_events',
        'schedule': crontab(hour=3, minute=0, day_of_week='sunday'),
    },
}
