"""
URLs da API de Senhas.
"""

from django.urls import path

from . import api_views

app_name = 'tickets'

urlpatterns = [
    path('tickets/', api_views.TicketAPICreateView.as_view(), name='create'),
    path('tickets/code/<str:code>/', api_views.TicketAPIByCodeView.as_view(), name='by_code'),
    path('tickets/<str:pk>/', api_views.TicketAPIDetailView.as_view(), name='detail'),
    path(
        'tickets/<str:pk>/transition/',
        api_views.TicketAPITransitionView.as_view(),
        name='transition'
    ),
    path(
        'citizens/<str:citizen_ref>/tickets/',
        api_views.CitizenTicketsAPIView.as_view(),
        name='citizen_tickets'
    ),
    path(
        'sectors/<str:sector_id>/next/',
        api_views.SectorNextTicketAPIView.as_view(),
        name='select_next'
    ),
    path('sectors/<str:sector_id>/queue/', api_views.SectorQueueAPIView.as_view(), name='queue'),
    path(
        'sectors/<str:sector_id>/summary/',
        api_views.SectorSummaryAPIView.as_view(),
        name='summary'
    ),
]
