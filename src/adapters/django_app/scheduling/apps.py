"""
Configuração do Django App de Agenda (setores e regras de horário).
"""

from django.apps import AppConfig


class SchedulingConfig(AppConfig):
    """Configuração do app Scheduling."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'src.adapters.django_app.scheduling'
    label = 'scheduling'
    verbose_name = 'Agenda de Setores'

    def ready(self):
        """Registra os signals que descartam o cache de agenda."""
        from . import signals  # noqa: F401
