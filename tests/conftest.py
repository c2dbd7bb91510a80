"""
Configurações globais do Pytest para o Balcão de Atendimento.

Este arquivo é carregado automaticamente pelo pytest e
fornece fixtures e configurações compartilhadas.

O Django é configurado pelo pytest-django a partir de
DJANGO_SETTINGS_MODULE (pyproject.toml).
"""

from pathlib import Path

import pytest


@pytest.fixture(scope="session")
def project_root():
    """Retorna o caminho raiz do projeto."""
    return Path(__file__).parent.parent


@pytest.fixture(autouse=True)
def reset_di_container():
    """
    Reset do container global entre testes.

    Garante que cada teste inicia com stores e cache de agenda limpos.
    """
    from src.config.container import reset_container

    reset_container()
    yield
    reset_container()


def pytest_collection_modifyitems(config, items):
    """Pula testes de integração sem --run-integration."""
    if config.getoption("--run-integration", default=False):
        return

    skip_integration = pytest.mark.skip(reason="use --run-integration para executar")
    for item in items:
        if item.get_closest_marker("integration"):
            item.add_marker(skip_integration)


def pytest_addoption(parser):
    """Adiciona opções de linha de comando."""
    parser.addoption(
        "--run-integration",
        action="store_true",
        default=False,
        help="run integration tests",
    )
