"""
Unit of Work - Implementação Django.

Agrupa as escritas de uma operação em uma transação atômica e
publica os eventos de domínio somente após o commit.

Responsabilidades:
- Abrir/fechar `transaction.atomic()` (aninha em transações externas)
- Commit/Rollback coordenado
- Persistir eventos no Event Store antes do commit
- Publicar eventos após commit bem-sucedido

A atomicidade de cada transição de senha vem do UPDATE condicional
do DjangoTicketStore; o UoW garante que escritas relacionadas
(ex.: redirecionamento e reserva de horário) entrem juntas.
"""

from typing import List, Optional
import logging

from django.db import transaction

from src.core.shared.events import DomainEvent
from src.core.shared.interfaces import EventPublisher, UnitOfWork

logger = logging.getLogger(__name__)


class DjangoUnitOfWork(UnitOfWork):
    """
    Implementação Django do Unit of Work.

    Usa django.db.transaction.atomic para a transação. Reutilizável:
    cada bloco `with` abre uma nova transação.

    Example:
        uow = DjangoUnitOfWork(event_publisher=publisher, event_store=store)
        with uow:
            ticket_store.save(ticket, expected_version=3)
            uow.publish_event(TicketCalledEvent(...))
        # Commit automático + eventos publicados

    Example com rollback:
        with uow:
            ticket_store.add(ticket)
            raise SlotUnavailableError(...)
        # Rollback automático, eventos descartados
    """

    def __init__(
        self,
        event_publisher: Optional[EventPublisher] = None,
        event_store=None,
    ):
        """
        Inicializa Unit of Work.

        Args:
            event_publisher: Publicador de eventos (logging, Celery)
            event_store: Store para persistência de eventos (opcional)
        """
        super().__init__()
        self._event_publisher = event_publisher
        self._event_store = event_store
        self._atomic = None
        self._committed = False
        self._rolled_back = False

    def _begin_transaction(self) -> None:
        self._committed = False
        self._rolled_back = False
        self.clear_events()
        self._atomic = transaction.atomic()
        self._atomic.__enter__()
        logger.debug("Transaction started")

    def commit(self) -> None:
        """
        Persiste todas as mudanças e publica eventos.

        Ordem de execução:
        1. Persistir eventos no Event Store (dentro da transação)
        2. Commit da transação
        3. Publicar eventos para handlers
        """
        if self._committed or self._rolled_back:
            logger.warning("Transaction already finalized")
            return

        try:
            if self._event_store and self._events:
                for event in self._events:
                    self._event_store.append(event)
        except Exception:
            self.rollback()
            raise

        atomic, self._atomic = self._atomic, None
        if atomic is not None:
            atomic.__exit__(None, None, None)
            logger.debug("Transaction committed")
        self._committed = True

        events = list(self._events)
        self.clear_events()
        self._publish_events(events)

    def rollback(self) -> None:
        """
        Desfaz todas as mudanças e descarta eventos.

        Chamado automaticamente se exceção ocorrer dentro do contexto.
        """
        if self._committed or self._rolled_back:
            return

        atomic, self._atomic = self._atomic, None
        try:
            if atomic is not None:
                transaction.set_rollback(True)
                atomic.__exit__(None, None, None)
                logger.debug("Transaction rolled back")
        finally:
            self._rolled_back = True
            self.clear_events()

    def _publish_events(self, events: List[DomainEvent]) -> None:
        """
        Publica eventos para handlers.

        Falhas de publicação são logadas e não desfazem a operação:
        o estado já foi gravado e o evento consta no Event Store.
        """
        for event in events:
            logger.debug(
                "Publishing event: %s for aggregate %s",
                event.event_type, event.aggregate_id,
            )
            if self._event_publisher:
                try:
                    self._event_publisher.publish(event)
                except Exception as e:
                    logger.error("Failed to publish event %s: %s", event.event_type, e)

    @property
    def is_committed(self) -> bool:
        """Verifica se transação foi comitada."""
        return self._committed

    @property
    def is_rolled_back(self) -> bool:
        """Verifica se transação foi revertida."""
        return self._rolled_back


class InMemoryUnitOfWork(UnitOfWork):
    """
    Unit of Work em memória para testes e desenvolvimento.

    Não há transação: os adapters em memória gravam na hora. Eventos
    só são entregues ao publisher no commit.

    Example:
        uow = InMemoryUnitOfWork()
        with uow:
            uow.publish_event(event)

        assert uow.committed
        assert len(uow.published_events) == 1
    """

    def __init__(self, event_publisher: Optional[EventPublisher] = None):
        super().__init__()
        self._event_publisher = event_publisher
        self._committed = False
        self._rolled_back = False
        self._published_events: List[DomainEvent] = []

    def _begin_transaction(self) -> None:
        self.clear_events()

    def commit(self) -> None:
        self._committed = True
        events = list(self._events)
        self._published_events.extend(events)
        self.clear_events()
        if self._event_publisher:
            self._event_publisher.publish_batch(events)

    def rollback(self) -> None:
        self._rolled_back = True
        self.clear_events()

    @property
    def committed(self) -> bool:
        """Verifica se foi comitado."""
        return self._committed

    @property
    def rolled_back(self) -> bool:
        """Verifica se foi revertido."""
        return self._rolled_back

    @property
    def published_events(self) -> List[DomainEvent]:
        """Retorna eventos que foram 'publicados'."""
        return list(self._published_events)

    def reset(self) -> None:
        """Reset para próximo teste."""
        self._committed = False
        self._rolled_back = False
        self._published_events.clear()
        self.clear_events()
