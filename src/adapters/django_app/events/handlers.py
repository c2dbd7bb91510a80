"""
Event Handlers - Processadores de Eventos de Domínio.

Handlers são executados de forma assíncrona via Celery quando
Domain Events são publicados pelo CeleryEventPublisher (sempre
depois do commit da transação que os gerou).

Tipos de Handlers:
- Eventos de senha: registro e métricas de atendimento
- Agendados (beat): resumo diário por setor, limpeza do Event Store

Padrão:
    @shared_task(bind=True, ...)
    def handle_<evento>(self, event_data: dict) -> None:
        # event_data = DomainEvent.to_dict()
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List

from celery import shared_task

logger = logging.getLogger(__name__)


def _payload(event_data: Dict[str, Any]) -> Dict[str, Any]:
    return event_data.get('data') or {}


# =============================================================================
# Event Handlers - Senhas
# =============================================================================

@shared_task(
    bind=True,
    max_retries=3,
    default_retry_delay=60,
    acks_late=True,
)
def handle_ticket_created(self, event_data: Dict[str, Any]) -> None:
    """
    Handler para TicketCreatedEvent.

    Ações:
    - Registrar emissão
    - Métrica de senhas emitidas por setor e tipo
    """
    data = _payload(event_data)
    logger.info(
        "[HANDLER] TicketCreated: %s | setor=%s | tipo=%s | preferencial=%s",
        data.get('code'), data.get('sector_id'),
        data.get('ticket_type'), data.get('is_priority'),
    )
    record_metric.delay(
        metric_name='tickets_created',
        value=1,
        tags={
            'sector_id': data.get('sector_id'),
            'type': data.get('ticket_type'),
            'priority': str(bool(data.get('is_priority'))).lower(),
        },
    )


@shared_task(
    bind=True,
    max_retries=3,
    default_retry_delay=60,
    acks_late=True,
)
def handle_ticket_called(self, event_data: Dict[str, Any]) -> None:
    """
    Handler para TicketCalledEvent.

    Ações:
    - Registrar chamada (painel de senhas consome este log)
    - Métrica de tempo de espera
    """
    data = _payload(event_data)
    logger.info(
        "[HANDLER] TicketCalled: %s | setor=%s | operador=%s | espera=%smin",
        data.get('code'), data.get('sector_id'),
        data.get('operator_ref'), data.get('wait_minutes'),
    )
    record_metric.delay(
        metric_name='ticket_wait_minutes',
        value=data.get('wait_minutes') or 0,
        tags={'sector_id': data.get('sector_id')},
    )


@shared_task(bind=True, max_retries=3, default_retry_delay=60, acks_late=True)
def handle_ticket_service_started(self, event_data: Dict[str, Any]) -> None:
    """Handler para TicketServiceStartedEvent."""
    data = _payload(event_data)
    logger.info(
        "[HANDLER] TicketServiceStarted: %s | operador=%s",
        data.get('code'), data.get('operator_ref'),
    )


@shared_task(bind=True, max_retries=3, default_retry_delay=60, acks_late=True)
def handle_ticket_finished(self, event_data: Dict[str, Any]) -> None:
    """
    Handler para TicketFinishedEvent.

    Ações:
    - Métrica de duração do atendimento
    """
    data = _payload(event_data)
    logger.info(
        "[HANDLER] TicketFinished: %s | operador=%s | atendimento=%smin",
        data.get('code'), data.get('operator_ref'), data.get('service_minutes'),
    )
    record_metric.delay(
        metric_name='ticket_service_minutes',
        value=data.get('service_minutes') or 0,
        tags={'sector_id': data.get('sector_id')},
    )


@shared_task(bind=True, max_retries=3, default_retry_delay=60, acks_late=True)
def handle_ticket_marked_absent(self, event_data: Dict[str, Any]) -> None:
    """Handler para TicketMarkedAbsentEvent."""
    data = _payload(event_data)
    logger.info(
        "[HANDLER] TicketMarkedAbsent: %s | operador=%s | motivo=%s",
        data.get('code'), data.get('operator_ref'), data.get('reason'),
    )
    record_metric.delay(
        metric_name='tickets_absent',
        value=1,
        tags={'sector_id': data.get('sector_id')},
    )


@shared_task(bind=True, max_retries=3, default_retry_delay=60, acks_late=True)
def handle_ticket_redirected(self, event_data: Dict[str, Any]) -> None:
    """Handler para TicketRedirectedEvent."""
    data = _payload(event_data)
    logger.info(
        "[HANDLER] TicketRedirected: %s -> %s | setor destino=%s | motivo=%s",
        data.get('code'), data.get('new_code'),
        data.get('target_sector_id'), data.get('reason'),
    )
    record_metric.delay(
        metric_name='tickets_redirected',
        value=1,
        tags={
            'sector_id': data.get('sector_id'),
            'target_sector_id': data.get('target_sector_id'),
        },
    )


EVENT_HANDLERS = {
    'TicketCreatedEvent': handle_ticket_created,
    'TicketCalledEvent': handle_ticket_called,
    'TicketServiceStartedEvent': handle_ticket_service_started,
    'TicketFinishedEvent': handle_ticket_finished,
    'TicketMarkedAbsentEvent': handle_ticket_marked_absent,
    'TicketRedirectedEvent': handle_ticket_redirected,
}


# =============================================================================
# Event Dispatcher (Router)
# =============================================================================

@shared_task(bind=True, max_retries=5, default_retry_delay=30)
def dispatch_domain_event(self, event_type: str, event_data: Dict[str, Any]) -> bool:
    """
    Dispatcher central para Domain Events.

    Roteia eventos para os handlers apropriados.

    Args:
        event_type: Tipo do evento (ex: 'TicketCalledEvent')
        event_data: Evento serializado (DomainEvent.to_dict())

    Returns:
        True se havia handler para o tipo
    """
    handler = EVENT_HANDLERS.get(event_type)

    if handler is None:
        logger.warning("[DISPATCHER] Handler não encontrado para %s", event_type)
        return False

    logger.debug("[DISPATCHER] Roteando %s para %s", event_type, handler.name)
    handler.delay(event_data)
    return True


# =============================================================================
# Metric Tasks
# =============================================================================

@shared_task(bind=True, ignore_result=True)
def record_metric(
    self,
    metric_name: str,
    value: float,
    tags: Dict[str, str] = None
) -> None:
    """
    Registra métrica de atendimento no log estruturado.

    Args:
        metric_name: Nome da métrica
        value: Valor
        tags: Tags para dimensões
    """
    logger.info("[METRIC] %s=%s | tags=%s", metric_name, value, tags or {})


# =============================================================================
# Scheduled Tasks (Beat)
# =============================================================================

@shared_task(bind=True)
def generate_daily_report(self, day: str = None) -> List[Dict[str, Any]]:
    """
    Gera o resumo diário de atendimento de cada setor.

    Executada diariamente pelo Celery Beat.

    Args:
        day: Data "AAAA-MM-DD" (default: hoje)

    Returns:
        Lista de resumos (um por setor)
    """
    from src.config.container import get_container

    container = get_container()
    target_day = datetime.strptime(day, '%Y-%m-%d').date() if day else None
    summary_service = container.sector_daily_summary_service()

    reports = []
    for sector in container.sector_repository().list_all():
        summary = summary_service.execute(sector.id, target_day)
        reports.append(summary.to_dict())
        logger.info(
            "[SCHEDULED] Resumo %s %s: emitidas=%d finalizadas=%d ausentes=%d eficiência=%.1f%%",
            sector.code, summary.day, summary.generated,
            summary.finished, summary.absent, summary.efficiency,
        )

    return reports


@shared_task(bind=True)
def cleanup_old_events(self, days: int = None) -> int:
    """
    Limpa eventos antigos do Event Store.

    Executada semanalmente pelo Celery Beat.

    Args:
        days: Dias de retenção (default: settings.EVENT_RETENTION_DAYS)

    Returns:
        Número de eventos removidos
    """
    from django.conf import settings

    from src.config.container import get_container

    days = days or getattr(settings, 'EVENT_RETENTION_DAYS', 90)
    logger.info("[SCHEDULED] Limpando eventos com mais de %d dias...", days)

    cutoff_date = datetime.now() - timedelta(days=days)
    deleted = get_container().event_store().delete_older_than(cutoff_date)

    logger.info("[SCHEDULED] %d eventos removidos", deleted)
    return deleted
