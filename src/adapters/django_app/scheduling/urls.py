"""
URLs da API de Agenda.
"""

from django.urls import path

from . import api_views

app_name = 'scheduling'

urlpatterns = [
    path(
        'sectors/<str:sector_id>/slots/',
        api_views.OfferableSlotsAPIView.as_view(),
        name='offerable_slots'
    ),
]
