"""
API Views JSON para o domínio de Senhas.

Endpoints:
- POST /api/tickets/ - Emitir senha
- GET /api/tickets/<id>/ - Obter senha
- POST /api/tickets/<id>/transition/ - Aplicar evento (call, start, ...)
- GET /api/tickets/code/<code>/?day=AAAA-MM-DD - Consulta pública
- GET /api/citizens/<citizen_ref>/tickets/ - Senhas do cidadão
- POST /api/sectors/<sector_id>/next/ - Chamar próxima senha
- GET /api/sectors/<sector_id>/queue/ - Fila de espera
- GET /api/sectors/<sector_id>/summary/?day=AAAA-MM-DD - Resumo diário
"""

import logging

from django.http import HttpRequest, JsonResponse

from src.core.tickets.dtos import (
    CreateTicketInputDTO,
    SelectNextInputDTO,
    TransitionTicketInputDTO,
)

from ..shared.api import (
    BaseAPIView,
    json_response,
    parse_bool,
    parse_date,
    parse_str,
    parse_time,
)

logger = logging.getLogger(__name__)


class TicketAPICreateView(BaseAPIView):
    """
    API para emitir senhas.

    POST /api/tickets/
    """

    def post(self, request: HttpRequest) -> JsonResponse:
        """
        Emite nova senha.

        Body JSON:
        {
            "sector_id": "string (obrigatório)",
            "citizen_ref": "string (obrigatório)",
            "is_priority": bool (opcional),
            "priority_reason": "string (obrigatório se preferencial)",
            "scheduled_date": "AAAA-MM-DD (setor agendado)",
            "scheduled_time": "HH:MM (setor agendado)"
        }
        """
        try:
            data = self.parse_body(request)

            input_dto = CreateTicketInputDTO(
                sector_id=parse_str(data, 'sector_id', ''),
                citizen_ref=parse_str(data, 'citizen_ref', ''),
                is_priority=parse_bool(data, 'is_priority'),
                priority_reason=parse_str(data, 'priority_reason'),
                scheduled_date=parse_date(data.get('scheduled_date'), 'scheduled_date'),
                scheduled_time=parse_time(data.get('scheduled_time'), 'scheduled_time'),
            )

            output = self.get_service('create_ticket_service').execute(input_dto)
            logger.info("API: Senha emitida: %s", output.code)

            return json_response(
                success=True,
                data=output.to_dict(),
                status=201
            )

        except Exception as e:
            return self.handle_exception(e)


class TicketAPIDetailView(BaseAPIView):
    """GET /api/tickets/<id>/"""

    def get(self, request: HttpRequest, pk: str) -> JsonResponse:
        try:
            ticket = self.get_service('get_ticket_service').execute(pk)
            return json_response(success=True, data=ticket.to_dict())

        except Exception as e:
            return self.handle_exception(e)


class TicketAPIByCodeView(BaseAPIView):
    """GET /api/tickets/code/<code>/?day=AAAA-MM-DD"""

    def get(self, request: HttpRequest, code: str) -> JsonResponse:
        try:
            day = parse_date(request.GET.get('day'), 'day')
            ticket = self.get_service('get_ticket_by_code_service').execute(code, day)
            return json_response(success=True, data=ticket.to_dict())

        except Exception as e:
            return self.handle_exception(e)


class TicketAPITransitionView(BaseAPIView):
    """
    API para transições de senha.

    POST /api/tickets/<id>/transition/
    """

    def post(self, request: HttpRequest, pk: str) -> JsonResponse:
        """
        Aplica evento à senha.

        Body JSON:
        {
            "event": "call|start|finish|mark_absent|redirect",
            "operator_ref": "string (obrigatório)",
            "observations": "string (obrigatório em mark_absent e redirect)",
            "target_sector_id": "string (redirect)",
            "scheduled_date": "AAAA-MM-DD (redirect para setor agendado)",
            "scheduled_time": "HH:MM (redirect para setor agendado)"
        }
        """
        try:
            data = self.parse_body(request)

            input_dto = TransitionTicketInputDTO(
                ticket_id=pk,
                event=parse_str(data, 'event', ''),
                operator_ref=parse_str(data, 'operator_ref', ''),
                observations=parse_str(data, 'observations'),
                target_sector_id=parse_str(data, 'target_sector_id'),
                scheduled_date=parse_date(data.get('scheduled_date'), 'scheduled_date'),
                scheduled_time=parse_time(data.get('scheduled_time'), 'scheduled_time'),
            )

            output = self.get_service('transition_ticket_service').execute(input_dto)

            return json_response(
                success=True,
                data=output.to_dict(),
                status=201 if output.redirected_ticket else 200
            )

        except Exception as e:
            return self.handle_exception(e)


class CitizenTicketsAPIView(BaseAPIView):
    """GET /api/citizens/<citizen_ref>/tickets/"""

    def get(self, request: HttpRequest, citizen_ref: str) -> JsonResponse:
        try:
            result = self.get_service('list_citizen_tickets_service').execute(citizen_ref)
            return json_response(
                success=True,
                data=[item.to_dict() for item in result.items],
                meta={'total': result.total}
            )

        except Exception as e:
            return self.handle_exception(e)


class SectorNextTicketAPIView(BaseAPIView):
    """
    API para chamar a próxima senha.

    POST /api/sectors/<sector_id>/next/
    Body JSON: {"operator_ref": "string (obrigatório)"}

    Sem senha disponível, responde 200 com `data.ticket = null`.
    """

    def post(self, request: HttpRequest, sector_id: str) -> JsonResponse:
        try:
            data = self.parse_body(request)

            output = self.get_service('select_next_ticket_service').execute(
                SelectNextInputDTO(
                    sector_id=sector_id,
                    operator_ref=parse_str(data, 'operator_ref', ''),
                )
            )

            return json_response(
                success=True,
                data={'ticket': output.to_dict() if output else None}
            )

        except Exception as e:
            return self.handle_exception(e)


class SectorQueueAPIView(BaseAPIView):
    """GET /api/sectors/<sector_id>/queue/"""

    def get(self, request: HttpRequest, sector_id: str) -> JsonResponse:
        try:
            items = self.get_service('list_waiting_queue_service').execute(sector_id)
            return json_response(
                success=True,
                data=[item.to_dict() for item in items],
                meta={'total': len(items)}
            )

        except Exception as e:
            return self.handle_exception(e)


class SectorSummaryAPIView(BaseAPIView):
    """GET /api/sectors/<sector_id>/summary/?day=AAAA-MM-DD"""

    def get(self, request: HttpRequest, sector_id: str) -> JsonResponse:
        try:
            day = parse_date(request.GET.get('day'), 'day')
            summary = self.get_service('sector_daily_summary_service').execute(sector_id, day)
            return json_response(success=True, data=summary.to_dict())

        except Exception as e:
            return self.handle_exception(e)
