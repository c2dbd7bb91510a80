"""
Signals do app de Agenda.

Descarta o cache do ScheduleRegistry do container quando setores ou
regras de horário são gravados ou removidos neste processo. Os demais
processos dependem da expiração do cache (SCHEDULE_CACHE_TTL_SECONDS).
"""

import logging

from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from .models import ScheduleRuleModel, SectorModel

logger = logging.getLogger(__name__)


def _refresh_registry(sector_id: str) -> None:
    from src.config.container import get_container

    get_container().schedule_registry().refresh(sector_id)
    logger.debug("Cache de agenda descartado para o setor %s", sector_id)


@receiver(post_save, sender=SectorModel, dispatch_uid='scheduling_sector_saved')
@receiver(post_delete, sender=SectorModel, dispatch_uid='scheduling_sector_deleted')
def sector_changed(sender, instance, **kwargs):
    _refresh_registry(instance.id)


@receiver(post_save, sender=ScheduleRuleModel, dispatch_uid='scheduling_rule_saved')
@receiver(post_delete, sender=ScheduleRuleModel, dispatch_uid='scheduling_rule_deleted')
def schedule_rule_changed(sender, instance, **kwargs):
    _refresh_registry(instance.sector_id)
