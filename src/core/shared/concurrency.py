"""
Primitivas de concorrência para implementações em memória dos Ports.

Os adapters de produção delegam a serialização ao banco
(UPDATE condicional); as implementações em memória usadas em testes
e desenvolvimento precisam de um lock por chave para oferecer a mesma
garantia de compare-and-swap sem travar o conjunto inteiro.
"""

from contextlib import contextmanager
from typing import Dict, Hashable, Iterator
import threading


class KeyedLocks:
    """
    Conjunto de locks independentes, um por chave.

    Locks são criados sob demanda e mantidos enquanto o objeto existir.
    Cada lock deve ser segurado apenas durante a seção crítica
    (ler-comparar-escrever), nunca durante I/O.

    Example:
        locks = KeyedLocks()
        with locks.hold(ticket_id):
            ...  # compare-and-swap
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[Hashable, threading.Lock] = {}

    def _lock_for(self, key: Hashable) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._locks[key] = lock
            return lock

    @contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        """Segura o lock da chave durante o bloco `with`."""
        lock = self._lock_for(key)
        with lock:
            yield
