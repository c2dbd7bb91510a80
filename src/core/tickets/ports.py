"""
Ports (Interfaces) do Domínio de Senhas.

Define os contratos que os Adapters de infraestrutura devem implementar
para persistência e consulta de senhas.

Tipos de Ports:
- TicketStore: persistência com compare-and-swap por senha,
  enumeração por setor/cidadão e sequência diária de códigos

Princípio:
    Core define interfaces → Adapters implementam
    Dependências sempre apontam para o Core

Example:
    # No Adapter (Django)
    class DjangoTicketStore:
        def save(self, ticket, expected_version):
            updated = TicketModel.objects.filter(
                id=ticket.id, version=expected_version
            ).update(..., version=expected_version + 1)
"""

from collections import defaultdict
from datetime import date
from typing import (
    Dict,
    Iterable,
    List,
    Optional,
    Protocol,
    Tuple,
    runtime_checkable,
)

from src.core.shared.concurrency import KeyedLocks
from src.core.shared.exceptions import ConcurrencyError, EntityNotFoundError, ValidationError

from .entities import OPEN_STATUSES, OPEN_TICKET_MESSAGE, TicketEntity, TicketStatus


@runtime_checkable
class TicketStore(Protocol):
    """
    Interface para persistência de Senhas.

    A única garantia exigida é read-modify-write atômico por senha:
    `save` compara a versão esperada e incrementa a versão na mesma
    operação. Nenhum lock é mantido entre a leitura e a escrita.

    Implementações:
    - DjangoTicketStore (banco via ORM, UPDATE condicional)
    - InMemoryTicketStore (testes, lock por senha)
    """

    def get_by_id(self, ticket_id: str) -> Optional[TicketEntity]:
        """
        Busca senha por ID.

        Returns:
            Cópia da senha ou None se não existir
        """
        ...

    def get_by_code(self, code: str, day: date) -> Optional[TicketEntity]:
        """
        Busca senha pelo código legível emitido no dia.

        Códigos reiniciam diariamente por setor; o dia desambigua.
        """
        ...

    def add(self, ticket: TicketEntity) -> TicketEntity:
        """
        Insere senha nova (versão 0).

        A verificação de senha em aberto do cidadão é atômica com a
        inserção (lock por cidadão ou restrição única no banco).

        Raises:
            ConcurrencyError: Se já existir senha com o mesmo ID
            ValidationError: Se a senha está aberta e o cidadão já tem
                outra em aberto (field="citizen_ref")
        """
        ...

    def save(self, ticket: TicketEntity, expected_version: int) -> TicketEntity:
        """
        Grava a senha se a versão armazenada for `expected_version`.

        Args:
            ticket: Estado novo da senha
            expected_version: Versão lida antes da transição

        Returns:
            Senha gravada, com versão expected_version + 1

        Raises:
            EntityNotFoundError: Se senha não existe
            ConcurrencyError: Se outra transição gravou antes
        """
        ...

    def list_by_sector(
        self,
        sector_id: str,
        statuses: Optional[Iterable[TicketStatus]] = None,
        created_on: Optional[date] = None,
    ) -> List[TicketEntity]:
        """
        Lista senhas do setor.

        Args:
            sector_id: ID do setor
            statuses: Filtra por estados (None = todos)
            created_on: Filtra pela data de emissão
        """
        ...

    def list_by_citizen(
        self,
        citizen_ref: str,
        statuses: Optional[Iterable[TicketStatus]] = None,
    ) -> List[TicketEntity]:
        """Lista senhas de um cidadão."""
        ...

    def next_sequence(self, sector_id: str, day: date) -> int:
        """
        Próximo número da sequência diária do setor (começa em 1).

        Atômico por (setor, dia).
        """
        ...


class InMemoryTicketStore:
    """
    Implementação em memória do TicketStore.

    Útil para:
    - Testes unitários (inclusive de concorrência)
    - Prototipagem
    - Desenvolvimento local

    Não usar em produção!

    Sempre devolve e guarda cópias, para que nenhum chamador altere
    o estado armazenado sem passar pelo compare-and-swap.

    Example:
        store = InMemoryTicketStore()
        store.add(ticket)
        called = lifecycle.apply(store.get_by_id(ticket.id), TicketEvent.CALL, "op-1")
        store.save(called, expected_version=called.version)
    """

    def __init__(self):
        self._tickets: Dict[str, TicketEntity] = {}
        self._sequences: Dict[Tuple[str, date], int] = defaultdict(int)
        self._locks = KeyedLocks()

    def add(self, ticket: TicketEntity) -> TicketEntity:
        with self._locks.hold(("citizen", ticket.citizen_ref)), self._locks.hold(ticket.id):
            if ticket.id in self._tickets:
                raise ConcurrencyError(f"Senha {ticket.id} já existe")
            if ticket.status in OPEN_STATUSES and self._has_open_ticket(ticket.citizen_ref):
                raise ValidationError(OPEN_TICKET_MESSAGE, field="citizen_ref")
            stored = ticket.copy()
            stored.version = 0
            self._tickets[ticket.id] = stored
            return stored.copy()

    def _has_open_ticket(self, citizen_ref: str) -> bool:
        return any(
            t.citizen_ref == citizen_ref and t.status in OPEN_STATUSES
            for t in list(self._tickets.values())
        )

    def save(self, ticket: TicketEntity, expected_version: int) -> TicketEntity:
        with self._locks.hold(ticket.id):
            current = self._tickets.get(ticket.id)
            if current is None:
                raise EntityNotFoundError(
                    f"Senha {ticket.id} não encontrada",
                    entity_type="Ticket",
                    entity_id=ticket.id,
                )
            if current.version != expected_version:
                raise ConcurrencyError(
                    f"Senha {ticket.id} foi modificada por outro processo "
                    f"(versão {current.version}, esperada {expected_version})"
                )
            stored = ticket.copy()
            stored.version = expected_version + 1
            self._tickets[ticket.id] = stored
            return stored.copy()

    def get_by_id(self, ticket_id: str) -> Optional[TicketEntity]:
        ticket = self._tickets.get(ticket_id)
        return ticket.copy() if ticket else None

    def get_by_code(self, code: str, day: date) -> Optional[TicketEntity]:
        normalized = (code or "").strip().upper()
        for ticket in list(self._tickets.values()):
            if ticket.code == normalized and ticket.created_at.date() == day:
                return ticket.copy()
        return None

    def list_by_sector(
        self,
        sector_id: str,
        statuses: Optional[Iterable[TicketStatus]] = None,
        created_on: Optional[date] = None,
    ) -> List[TicketEntity]:
        wanted = set(statuses) if statuses is not None else None
        return [
            t.copy() for t in list(self._tickets.values())
            if t.sector_id == sector_id
            and (wanted is None or t.status in wanted)
            and (created_on is None or t.created_at.date() == created_on)
        ]

    def list_by_citizen(
        self,
        citizen_ref: str,
        statuses: Optional[Iterable[TicketStatus]] = None,
    ) -> List[TicketEntity]:
        wanted = set(statuses) if statuses is not None else None
        return [
            t.copy() for t in list(self._tickets.values())
            if t.citizen_ref == citizen_ref
            and (wanted is None or t.status in wanted)
        ]

    def next_sequence(self, sector_id: str, day: date) -> int:
        key = (sector_id, day)
        with self._locks.hold(key):
            self._sequences[key] += 1
            return self._sequences[key]

    def count(self) -> int:
        """Conta total."""
        return len(self._tickets)

    def clear(self) -> None:
        """Limpa todos os dados (útil para testes)."""
        self._tickets.clear()
        self._sequences.clear()
