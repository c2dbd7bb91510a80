"""
Database helpers - Falhas transitórias e verificação de conexão.

Os repositórios Django traduzem falhas do driver (timeout de
statement, conexão perdida) para TransientStoreError, o único erro
de infraestrutura que o Core conhece. Nenhum estado é alterado
quando a tradução acontece: a transação em curso é desfeita pelo
Unit of Work.
"""

from functools import wraps
from typing import Any, Callable, Dict, TypeVar
import logging

from django.db import DatabaseError, IntegrityError, InterfaceError, OperationalError, connection

from src.core.shared.exceptions import TransientStoreError

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def translate_store_errors(func: F) -> F:
    """
    Decorator: converte falhas transitórias do banco em TransientStoreError.

    IntegrityError é erro de dados, não transitório, e é propagado.

    Example:
        class DjangoTicketStore:
            @translate_store_errors
            def get_by_id(self, ticket_id): ...
    """

    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except IntegrityError:
            raise
        except (OperationalError, InterfaceError) as e:
            logger.warning("Falha transitória em %s: %s", func.__qualname__, e)
            raise TransientStoreError(f"Armazenamento indisponível: {e}") from e

    return wrapper  # type: ignore[return-value]


def check_database_connection() -> Dict[str, Any]:
    """
    Verifica conexão com o banco (health check).

    Returns:
        Dict com status, engine e mensagem de erro (se houver)
    """
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
        return {"status": "healthy", "engine": connection.vendor}
    except DatabaseError as e:
        logger.error("Database health check failed: %s", e)
        return {"status": "unhealthy", "engine": connection.vendor, "error": str(e)}
