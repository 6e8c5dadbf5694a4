# licencas/config.py
"""
Configuração do pipeline de licença-prêmio.

Propósito
---------
Centralizar parâmetros lidos de variáveis de ambiente (com valores padrão
seguros) e utilitários de ambiente compartilhados pelos módulos do pipeline:
- regras legais (90 dias por período aquisitivo de 5 anos);
- padrões de preenchimento (duração padrão de 30 dias);
- lista de unidades genéricas ignoradas na resolução da lotação;
- nível/forma de logging e fuso horário de referência para "hoje".

Variáveis de ambiente
---------------------
- LOG_LEVEL: nível de logging (padrão INFO).
- LICENCAS_DEBUG_LOG: quando 1/true/yes habilita logs por registro.
- LICENCAS_TZ: fuso usado para calcular a data de referência (padrão America/Sao_Paulo).
- LICENCAS_DIAS_POR_PERIODO: dias de direito por período aquisitivo (padrão 90).
- LICENCAS_ANOS_POR_PERIODO: duração em anos do período aquisitivo (padrão 5).
- LICENCAS_DIAS_PADRAO: duração assumida quando o evento não informa datas nem dias (padrão 30).
- LICENCAS_DIAS_POR_MES: dias considerados por mês de licença (padrão 30).
- LICENCAS_PERIODOS_SINTETICOS: quantidade de períodos provisórios (padrão 5).
- LICENCAS_UNIDADES_GENERICAS: lista separada por vírgulas que substitui a padrão.
- LICENCAS_MAX_WORKERS: threads usadas pelo processamento em lote (padrão 1).
"""

from __future__ import annotations

import logging
import os
from datetime import date, datetime
from typing import Optional, Tuple
from zoneinfo import ZoneInfo


def _env_bool(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


def _env_int(name: str, default: int) -> int:
    """
    Lê um inteiro positivo do ambiente.

    Valores ausentes, não numéricos ou menores que 1 resultam no padrão.
    """
    raw = os.getenv(name, "").strip()
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value >= 1 else default


def _env_list(name: str, default: Tuple[str, ...]) -> Tuple[str, ...]:
    raw = os.getenv(name)
    if raw is None:
        return default
    return tuple(p.strip() for p in raw.split(",") if p.strip())


# ------------------------------------------------------------------------------
# Logging
# ------------------------------------------------------------------------------
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
DEBUG_LOG = _env_bool("LICENCAS_DEBUG_LOG")

# ------------------------------------------------------------------------------
# Regras de licença-prêmio
# ------------------------------------------------------------------------------
TIMEZONE = os.getenv("LICENCAS_TZ", "America/Sao_Paulo")
DIAS_POR_PERIODO = _env_int("LICENCAS_DIAS_POR_PERIODO", 90)
ANOS_POR_PERIODO = _env_int("LICENCAS_ANOS_POR_PERIODO", 5)
DIAS_PADRAO = _env_int("LICENCAS_DIAS_PADRAO", 30)
DIAS_POR_MES = _env_int("LICENCAS_DIAS_POR_MES", 30)
PERIODOS_SINTETICOS = _env_int("LICENCAS_PERIODOS_SINTETICOS", 5)
MAX_WORKERS = _env_int("LICENCAS_MAX_WORKERS", 1)

SEM_LOTACAO = "Sem lotação"

# Nomes de órgão amplos demais para servir como lotação de exibição.
UNIDADES_GENERICAS = _env_list(
    "LICENCAS_UNIDADES_GENERICAS",
    (
        "SEFAZ",
        "SECRETARIA DE ESTADO DA FAZENDA",
        "SECRETARIA DA FAZENDA",
        "SECRETARIA DE FAZENDA",
        "GOVERNO DO ESTADO",
        "ESTADO",
        "ORGAO",
        "UNIDADE",
    ),
)


def hoje_referencia(tz: Optional[str] = None) -> date:
    """
    Data de referência ("hoje") no fuso configurado.

    Deve ser capturada uma única vez por lote e repassada explicitamente aos
    componentes, para que todos os registros sejam classificados contra o
    mesmo instante.

    Parâmetros
    ----------
    tz : Optional[str]
        Nome IANA do fuso; quando ausente usa `TIMEZONE`.

    Retorna
    -------
    date
        Data corrente no fuso informado.
    """
    return datetime.now(ZoneInfo(tz or TIMEZONE)).date()


def configurar_logging(level: Optional[str] = None) -> None:
    """
    Aplica a configuração básica de logging (nível e formato padronizados).

    Pensado para o ponto de entrada da aplicação consumidora; os módulos do
    pipeline apenas obtêm seus loggers e nunca configuram handlers.
    """
    logging.basicConfig(level=(level or LOG_LEVEL).upper(), format=LOG_FORMAT)
