"""
URL Configuration do Balcão de Atendimento.

Estrutura:
- /api/ - API JSON de Senhas e Agenda
- /health/ - Health check (banco de dados)
"""

from django.http import JsonResponse
from django.urls import include, path

from src.adapters.django_app.shared.database import check_database_connection


def health(request):
    database = check_database_connection()
    status = 200 if database['status'] == 'healthy' else 503
    return JsonResponse({'status': 'ok' if status == 200 else 'degraded', 'database': database},
                        status=status)


urlpatterns = [
    path('api/', include('src.adapters.django_app.tickets.urls')),
    path('api/', include('src.adapters.django_app.scheduling.urls')),
    path('health/', health),
]
