"""
Exceções de Domínio do Balcão de Atendimento.

Este módulo define exceções específicas do domínio que permitem
comunicar erros de forma clara e tipada entre as camadas.

Hierarquia:
    DomainException (base)
    ├── ValidationError (validação de entrada)
    ├── EntityNotFoundError (entidade não existe)
    ├── BusinessRuleViolationError (regra de negócio violada)
    │   ├── InvalidTransitionError (máquina de estados)
    │   ├── SlotUnavailableError (horário esgotado ou não ofertado)
    │   └── SectorInactiveError (setor desativado)
    ├── ConcurrencyError (compare-and-swap perdido)
    └── TransientStoreError (falha transitória do armazenamento)
"""

from datetime import date, time
from typing import Optional


class DomainException(Exception):
    """
    Exceção base para todos os erros de domínio.

    Todas as exceções específicas do domínio devem herdar desta classe.
    Isso permite capturar qualquer erro de domínio de forma genérica.

    Example:
        try:
            lifecycle.apply(ticket, TicketEvent.CALL, operator_ref="op-1")
        except DomainException as e:
            logger.error(f"Erro de domínio: {e}")
    """

    def __init__(self, message: str, code: str = None):
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> dict:
        """Serializa exceção para dicionário (útil para APIs)."""
        return {
            "error": self.code,
            "message": self.message,
        }


class ValidationError(DomainException):
    """
    Erro de validação de dados de entrada.

    Lançada quando dados fornecidos não atendem aos requisitos
    mínimos para processamento.

    Example:
        if is_priority and not priority_reason:
            raise ValidationError("Motivo da prioridade é obrigatório",
                                  field="priority_reason")
    """

    def __init__(self, message: str, field: str = None):
        self.field = field
        code = f"VALIDATION_ERROR_{field.upper()}" if field else "VALIDATION_ERROR"
        super().__init__(message, code)

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.field:
            result["field"] = self.field
        return result


class EntityNotFoundError(DomainException):
    """
    Entidade não encontrada no repositório.

    Lançada quando uma busca por ID não retorna resultado.

    Example:
        ticket = store.get_by_id(ticket_id)
        if not ticket:
            raise EntityNotFoundError(f"Senha {ticket_id} não encontrada")
    """

    def __init__(self, message: str, entity_type: str = None, entity_id: str = None):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(message, "ENTITY_NOT_FOUND")

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.entity_type:
            result["entity_type"] = self.entity_type
        if self.entity_id:
            result["entity_id"] = self.entity_id
        return result


class BusinessRuleViolationError(DomainException):
    """
    Violação de regra de negócio.

    Lançada quando uma operação viola uma regra de negócio
    estabelecida no domínio.
    """

    def __init__(self, message: str, rule: str = None, code: str = None):
        self.rule = rule
        super().__init__(message, code or "BUSINESS_RULE_VIOLATION")

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.rule:
            result["rule"] = self.rule
        return result


class InvalidTransitionError(BusinessRuleViolationError):
    """
    Transição de estado inválida para a senha.

    Lançada quando o evento não é aceito no estado atual ou quando
    uma pré-condição da transição não é atendida. A senha permanece
    inalterada. Nunca é repetida automaticamente.

    Example:
        raise InvalidTransitionError(
            "Senha já finalizada",
            from_status="FINISHED",
            event="call",
        )
    """

    def __init__(
        self,
        message: str,
        from_status: Optional[str] = None,
        event: Optional[str] = None,
        rule: str = "transicao_invalida",
    ):
        self.from_status = from_status
        self.event = event
        super().__init__(message, rule=rule, code="INVALID_TRANSITION")

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.from_status:
            result["from_status"] = self.from_status
        if self.event:
            result["event"] = self.event
        return result


class SlotUnavailableError(BusinessRuleViolationError):
    """
    Horário de atendimento indisponível.

    O horário solicitado não está entre os ofertados no momento da
    reserva (fora das regras, no passado, ou sem capacidade restante).
    O chamador deve recarregar os horários e tentar de novo.
    """

    def __init__(
        self,
        message: str,
        sector_id: Optional[str] = None,
        slot_date: Optional[date] = None,
        slot_time: Optional[time] = None,
    ):
        self.sector_id = sector_id
        self.slot_date = slot_date
        self.slot_time = slot_time
        super().__init__(message, rule="horario_indisponivel", code="SLOT_UNAVAILABLE")

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.sector_id:
            result["sector_id"] = self.sector_id
        if self.slot_date:
            result["date"] = self.slot_date.isoformat()
        if self.slot_time:
            result["time"] = self.slot_time.strftime("%H:%M")
        return result


class SectorInactiveError(BusinessRuleViolationError):
    """Operação sobre setor desativado. Fatal para a requisição."""

    def __init__(self, message: str, sector_id: Optional[str] = None):
        self.sector_id = sector_id
        super().__init__(message, rule="setor_inativo", code="SECTOR_INACTIVE")

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.sector_id:
            result["sector_id"] = self.sector_id
        return result


class ConcurrencyError(DomainException):
    """
    Erro de concorrência/conflito de versão.

    Lançada quando uma operação falha devido a modificação
    concorrente da entidade.

    Example:
        if stored.version != expected_version:
            raise ConcurrencyError("Senha foi modificada por outro processo")
    """

    def __init__(self, message: str):
        super().__init__(message, "CONCURRENCY_ERROR")


class TransientStoreError(DomainException):
    """
    Falha transitória de acesso ao armazenamento (timeout, conexão).

    Nenhum estado foi alterado. O chamador decide repetir com backoff.
    """

    def __init__(self, message: str):
        super().__init__(message, "TRANSIENT_STORE_ERROR")
