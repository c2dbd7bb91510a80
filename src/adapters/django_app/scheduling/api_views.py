"""
API Views JSON para a Agenda.

Endpoints:
- GET /api/sectors/<sector_id>/slots/?from=AAAA-MM-DD&to=AAAA-MM-DD
"""

from django.http import HttpRequest, JsonResponse

from src.core.scheduling.dtos import OfferableSlotsQueryDTO

from ..shared.api import BaseAPIView, json_response, parse_date


class OfferableSlotsAPIView(BaseAPIView):
    """
    Horários ofertáveis de um setor agendado.

    Sem `from`/`to`, lista de hoje até o fim do horizonte. Setor
    NORMAL responde lista vazia.
    """

    def get(self, request: HttpRequest, sector_id: str) -> JsonResponse:
        try:
            query = OfferableSlotsQueryDTO(
                sector_id=sector_id,
                from_date=parse_date(request.GET.get('from'), 'from_date'),
                to_date=parse_date(request.GET.get('to'), 'to_date'),
            )
            slots = self.get_service('list_offerable_slots_service').execute(query)
            return json_response(
                success=True,
                data=[slot.to_dict() for slot in slots],
                meta={'total': len(slots)}
            )

        except Exception as e:
            return self.handle_exception(e)
