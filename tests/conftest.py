"""
Configuração do pytest e fixtures compartilhadas.
"""

import sys
from datetime import date
from pathlib import Path

import pytest

# Raiz do repositório no path para importar `licencas`
sys.path.insert(0, str(Path(__file__).parent.parent))

from licencas.pipeline.eventos import EnriquecedorEventos  # noqa: E402
from licencas.pipeline.periodos import CalculadoraPeriodos  # noqa: E402
from licencas.pipeline.servidores import AgregadorServidores  # noqa: E402


@pytest.fixture
def hoje():
    """Data de referência fixa dos testes."""
    return date(2025, 5, 1)


@pytest.fixture
def enriquecedor(hoje):
    return EnriquecedorEventos(hoje=hoje)


@pytest.fixture
def calculadora(hoje):
    return CalculadoraPeriodos(hoje=hoje)


@pytest.fixture
def agregador(enriquecedor, calculadora):
    return AgregadorServidores(enriquecedor=enriquecedor, calculadora=calculadora)


@pytest.fixture
def evento_bruto():
    """Linha de gozo como vem da planilha de origem."""
    return {
        "A_PARTIR": "01/06/2025",
        "TERMINO": "30/06/2025",
        "GOZO": "30",
        "RESTANDO": "60(DIAS)",
        "AQUISITIVO_INICIO": "01/01/2020",
        "AQUISITIVO_FIM": "31/12/2024",
    }


@pytest.fixture
def servidor_bruto(evento_bruto):
    """Servidor com dois gozos no mesmo período aquisitivo."""
    return {
        "NOME": "Maria da Silva",
        "CPF": "123.456.789-00",
        "CARGO": "Analista",
        "LOTACAO": "ceac-aracaju.",
        "UNIDADE": "SEFAZ",
        "licencas": [
            evento_bruto,
            {
                "A_PARTIR": "2023-02-01",
                "DIAS": 30,
                "AQUISITIVO_INICIO": "01/01/2020",
                "AQUISITIVO_FIM": "31/12/2024",
            },
        ],
    }
