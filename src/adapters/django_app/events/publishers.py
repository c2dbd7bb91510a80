"""
Event Publishers - Publicadores de Eventos de Domínio.

Responsável por entregar os eventos de senha aos consumidores
(painel de chamadas, estatísticas, integrações).

Implementações:
- LoggingEventPublisher: Loga e executa handlers locais (desenvolvimento)
- CeleryEventPublisher: Enfileira no Celery (produção)
- InMemoryEventPublisher: Guarda eventos para verificação (testes)
- CompositeEventPublisher: Repassa para vários publishers

Padrão Observer/Pub-Sub para desacoplamento.
"""

from typing import Callable, Dict, List, Optional
import json
import logging

from src.core.shared.events import DomainEvent
from src.core.shared.interfaces import EventPublisher

logger = logging.getLogger(__name__)

EventHandler = Callable[[DomainEvent], None]


class _HandlerRegistry:
    """Handlers síncronos locais por tipo de evento."""

    def __init__(self):
        self._handlers: Dict[str, List[EventHandler]] = {}

    def register_handler(self, event_type: str, handler: EventHandler) -> None:
        """Registra handler para tipo de evento."""
        self._handlers.setdefault(event_type, []).append(handler)

    def _dispatch_to_handlers(self, event: DomainEvent) -> None:
        for handler in self._handlers.get(event.event_type, []):
            try:
                handler(event)
            except Exception as e:
                logger.error("Erro em handler para %s: %s", event.event_type, e)


class LoggingEventPublisher(_HandlerRegistry, EventPublisher):
    """
    Publisher que loga eventos.

    Usado em desenvolvimento para acompanhar chamadas e atendimentos
    sem infraestrutura de mensageria.
    """

    def __init__(self, log_level: int = logging.INFO):
        super().__init__()
        self._log_level = log_level

    def publish(self, event: DomainEvent) -> None:
        logger.log(
            self._log_level,
            "[EVENT] %s | aggregate=%s | data=%s",
            event.event_type,
            event.aggregate_id,
            json.dumps(event.to_dict(), default=str),
        )
        self._dispatch_to_handlers(event)

    def publish_batch(self, events: List[DomainEvent]) -> None:
        for event in events:
            self.publish(event)


class CeleryEventPublisher(EventPublisher):
    """
    Publisher que envia eventos para o Celery.

    Usado em produção para processamento assíncrono. Falha de
    enfileiramento é logada e não interrompe a operação de origem.
    """

    def __init__(self, also_log: bool = True):
        self._also_log = also_log

    def publish(self, event: DomainEvent) -> None:
        if self._also_log:
            logger.info(
                "[EVENT->CELERY] %s | aggregate=%s",
                event.event_type, event.aggregate_id,
            )

        from src.adapters.django_app.events.handlers import dispatch_domain_event

        try:
            dispatch_domain_event.delay(event.event_type, event.to_dict())
        except Exception as e:
            logger.error("Falha ao publicar evento no Celery: %s", e, exc_info=True)

    def publish_batch(self, events: List[DomainEvent]) -> None:
        for event in events:
            self.publish(event)


class InMemoryEventPublisher(_HandlerRegistry, EventPublisher):
    """
    Publisher em memória para testes.

    Armazena eventos publicados para verificação em testes.
    """

    def __init__(self):
        super().__init__()
        self._published_events: List[DomainEvent] = []

    def publish(self, event: DomainEvent) -> None:
        self._published_events.append(event)
        self._dispatch_to_handlers(event)

    def publish_batch(self, events: List[DomainEvent]) -> None:
        for event in events:
            self.publish(event)

    @property
    def published_events(self) -> List[DomainEvent]:
        """Retorna eventos publicados."""
        return self._published_events.copy()

    def clear(self) -> None:
        """Limpa eventos armazenados."""
        self._published_events.clear()

    def get_events_by_type(self, event_type: str) -> List[DomainEvent]:
        """Filtra eventos por tipo."""
        return [e for e in self._published_events if e.event_type == event_type]


class CompositeEventPublisher(EventPublisher):
    """
    Publisher que delega para múltiplos publishers.

    Falha em um publisher não impede os demais.
    """

    def __init__(self, publishers: Optional[List[EventPublisher]] = None):
        self._publishers = list(publishers or [])

    def add_publisher(self, publisher: EventPublisher) -> None:
        self._publishers.append(publisher)

    def publish(self, event: DomainEvent) -> None:
        for publisher in self._publishers:
            try:
                publisher.publish(event)
            except Exception as e:
                logger.error(
                    "Erro ao publicar em %s: %s", publisher.__class__.__name__, e
                )

    def publish_batch(self, events: List[DomainEvent]) -> None:
        for event in events:
            self.publish(event)


def get_event_publisher(mode: str = "sync") -> EventPublisher:
    """
    Factory para obter publisher apropriado.

    Args:
        mode: "celery" para processamento assíncrono; qualquer outro
            valor usa o LoggingEventPublisher

    Returns:
        Publisher configurado
    """
    if mode == "celery":
        return CeleryEventPublisher()
    return LoggingEventPublisher()
