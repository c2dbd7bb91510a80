"""
Base das APIs JSON.

Formato:
- Entrada: JSON (body) e query string
- Saída: JSON com estrutura {success, data/error, meta}

Mapeamento de erros do domínio para HTTP:
- ValidationError → 400
- EntityNotFoundError → 404
- InvalidTransitionError, SlotUnavailableError, ConcurrencyError → 409
- SectorInactiveError e demais regras de negócio → 422
- TransientStoreError → 503
"""

import json
import logging
from datetime import date, datetime, time
from typing import Any, Dict, Optional

from django.http import HttpRequest, JsonResponse
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt

from src.config.container import get_container
from src.core.shared.exceptions import (
    BusinessRuleViolationError,
    ConcurrencyError,
    DomainException,
    EntityNotFoundError,
    InvalidTransitionError,
    SlotUnavailableError,
    TransientStoreError,
    ValidationError,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Helpers
# =============================================================================

def json_response(success: bool, data: Any = None, error: str = None,
                  status: int = 200, meta: Dict = None) -> JsonResponse:
    """
    Cria resposta JSON padronizada.

    Args:
        success: Se operação foi bem sucedida
        data: Dados da resposta
        error: Mensagem de erro (se aplicável)
        status: HTTP status code
        meta: Metadados adicionais

    Returns:
        JsonResponse formatada
    """
    response = {'success': success}

    if data is not None:
        response['data'] = data

    if error is not None:
        response['error'] = error

    if meta is not None:
        response['meta'] = meta

    return JsonResponse(response, status=status)


def parse_json_body(request: HttpRequest) -> Dict:
    """
    Parseia body JSON do request.

    Raises:
        ValueError: Se JSON inválido ou não for um objeto
    """
    if not request.body:
        return {}

    try:
        data = json.loads(request.body)
    except json.JSONDecodeError as e:
        raise ValueError(f"JSON inválido: {e}")

    if not isinstance(data, dict):
        raise ValueError("O corpo da requisição deve ser um objeto JSON")
    return data


def parse_str(data: Dict, field: str, default: Optional[str] = None) -> Optional[str]:
    """
    Lê um campo texto do body JSON.

    Ausente ou null retorna `default`.

    Raises:
        ValidationError: Se o valor não for string
    """
    value = data.get(field)
    if value is None:
        return default
    if not isinstance(value, str):
        raise ValidationError(f"Campo {field} deve ser texto", field=field)
    return value


def parse_bool(data: Dict, field: str, default: bool = False) -> bool:
    """Lê um booleano JSON do body; strings como "false" são rejeitadas."""
    value = data.get(field)
    if value is None:
        return default
    if not isinstance(value, bool):
        raise ValidationError(f"Campo {field} deve ser true ou false", field=field)
    return value


def parse_date(value: Optional[str], field: str) -> Optional[date]:
    """Converte "YYYY-MM-DD" em date (None se vazio)."""
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Data inválida: {value} (use AAAA-MM-DD)", field=field)


def parse_time(value: Optional[str], field: str) -> Optional[time]:
    """Converte "HH:MM" em time (None se vazio)."""
    if not value:
        return None
    try:
        return datetime.strptime(value, "%H:%M").time()
    except (TypeError, ValueError):
        raise ValidationError(f"Hora inválida: {value} (use HH:MM)", field=field)


# =============================================================================
# Base API View
# =============================================================================

@method_decorator(csrf_exempt, name='dispatch')
class BaseAPIView(View):
    """
    View base para APIs JSON.

    Fornece:
    - Parsing de JSON
    - Acesso ao container DI
    - Tratamento de erros padronizado
    """

    def get_container(self):
        """Retorna container de DI."""
        return get_container()

    def get_service(self, service_name: str):
        """Obtém service do container (nova instância por chamada)."""
        return getattr(self.get_container(), service_name)()

    def parse_body(self, request: HttpRequest) -> Dict:
        """Parseia body JSON."""
        return parse_json_body(request)

    def handle_exception(self, e: Exception) -> JsonResponse:
        """
        Trata exceções e retorna resposta apropriada.

        Args:
            e: Exceção capturada

        Returns:
            JsonResponse com erro
        """
        if isinstance(e, ValidationError):
            return json_response(
                success=False,
                error=str(e),
                status=400,
                meta={'field': getattr(e, 'field', None)}
            )

        if isinstance(e, EntityNotFoundError):
            return json_response(
                success=False,
                error=str(e),
                status=404
            )

        if isinstance(e, (InvalidTransitionError, SlotUnavailableError)):
            return json_response(
                success=False,
                error=str(e),
                status=409,
                meta={'rule': getattr(e, 'rule', None)}
            )

        if isinstance(e, ConcurrencyError):
            return json_response(
                success=False,
                error=str(e),
                status=409
            )

        if isinstance(e, BusinessRuleViolationError):
            return json_response(
                success=False,
                error=str(e),
                status=422,
                meta={'rule': getattr(e, 'rule', None)}
            )

        if isinstance(e, TransientStoreError):
            logger.warning("Armazenamento indisponível: %s", e)
            return json_response(
                success=False,
                error=str(e),
                status=503
            )

        if isinstance(e, (DomainException, ValueError)):
            return json_response(
                success=False,
                error=str(e),
                status=400
            )

        # Erro inesperado
        logger.exception("Erro inesperado na API: %s", e)
        return json_response(
            success=False,
            error="Erro interno do servidor",
            status=500
        )
