#!/usr/bin/env python
"""
Setup rápido para desenvolvimento local.

Este script:
1. Configura Django settings
2. Verifica a conexão com o banco
3. Executa migrations
4. Cria setores e regras de horário de exemplo (opcional)

Uso:
    python scripts/quick_setup.py
    python scripts/quick_setup.py --with-sample-data
    python scripts/quick_setup.py --check-only
"""

import argparse
import os
import sys
from datetime import time

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


WORKDAYS = ('MONDAY', 'TUESDAY', 'WEDNESDAY', 'THURSDAY', 'FRIDAY')


def setup_django():
    """Configura Django para uso standalone."""
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'src.config.settings')

    import django
    django.setup()


def run_migrations():
    """Executa migrations."""
    from django.core.management import call_command

    print("📦 Executando migrations...")
    call_command('migrate', verbosity=1)
    print("✅ Migrations concluídas!")


def create_sample_data():
    """Cria setores de exemplo: um por ordem de chegada e um agendado."""
    from src.adapters.django_app.scheduling.repositories import (
        DjangoScheduleRuleRepository,
        DjangoSectorRepository,
    )
    from src.core.scheduling.entities import ScheduleRule, SectorEntity, SectorType, Weekday

    sectors = DjangoSectorRepository()
    rules = DjangoScheduleRuleRepository()

    print("📝 Criando setores de exemplo...")

    protocolo = SectorEntity.create(
        code='PRO',
        name='Protocolo Geral',
        type=SectorType.NORMAL,
        max_capacity=3,
        estimated_service_minutes=10,
    )
    iptu = SectorEntity.create(
        code='IPT',
        name='Atendimento IPTU',
        type=SectorType.SPECIAL,
        max_capacity=2,
        estimated_service_minutes=20,
    )
    for sector in (protocolo, iptu):
        sectors.save(sector)
        print(f"   ✓ {sector.code} - {sector.name} ({sector.type.value})")

    for weekday in WORKDAYS:
        rules.save(ScheduleRule.create(
            sector_id=iptu.id,
            weekday=Weekday(weekday),
            start_time=time(8, 0),
            end_time=time(12, 0),
            interval_minutes=20,
            capacity_per_slot=2,
        ))
        rules.save(ScheduleRule.create(
            sector_id=iptu.id,
            weekday=Weekday(weekday),
            start_time=time(13, 30),
            end_time=time(17, 0),
            interval_minutes=30,
            capacity_per_slot=2,
        ))

    print(f"✅ Regras de horário criadas para {iptu.code} ({len(WORKDAYS) * 2})")


def check_connection():
    """Verifica conexão com o banco."""
    from src.adapters.django_app.shared.database import check_database_connection

    print("🔍 Verificando conexão com o banco...")

    result = check_database_connection()
    if result['status'] == 'healthy':
        print(f"✅ Conexão OK! ({result['engine']})")
        return True

    print(f"❌ Erro de conexão: {result.get('error')}")
    return False


def show_info():
    """Mostra informações do setup."""
    from django.conf import settings

    print("\n" + "=" * 60)
    print("📊 Informações do Setup")
    print("=" * 60)
    print(f"  Database Engine: {settings.DATABASES['default']['ENGINE']}")
    print(f"  Database Name: {settings.DATABASES['default']['NAME']}")
    print(f"  Horizonte de agenda: {settings.SLOT_HORIZON_DAYS} dias")
    print(f"  Event publisher: {settings.EVENT_PUBLISHER_MODE}")
    print("=" * 60)
    print("\n🚀 Próximos passos:")
    print("   1. django-admin runserver --settings=src.config.settings --pythonpath=.")
    print("   2. GET  http://localhost:8000/api/sectors/<id>/slots/")
    print("   3. POST http://localhost:8000/api/tickets/")
    print("\n")


def main():
    parser = argparse.ArgumentParser(description='Setup rápido para desenvolvimento')
    parser.add_argument(
        '--with-sample-data',
        action='store_true',
        help='Criar setores e regras de exemplo'
    )
    parser.add_argument(
        '--check-only',
        action='store_true',
        help='Apenas verificar conexão'
    )

    args = parser.parse_args()

    print("\n" + "=" * 60)
    print("🔧 Balcão de Atendimento - Quick Setup")
    print("=" * 60 + "\n")

    setup_django()

    if args.check_only:
        check_connection()
        return

    if not check_connection():
        print("\n⚠️  Certifique-se de que o banco de dados está rodando.")
        print("   Sem DATABASE_URL/DATABASE_HOST o SQLite local é usado.")
        return

    run_migrations()

    if args.with_sample_data:
        create_sample_data()

    show_info()


if __name__ == '__main__':
    main()
