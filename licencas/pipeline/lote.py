# licencas/pipeline/lote.py
"""
Processamento em lote de servidores.

Propósito
---------
Ponto de entrada do pipeline para a aplicação consumidora:
- `agrupar_por_servidor`: converte linhas de planilha (uma por evento) em
  registros de servidor com a lista de eventos embutida;
- `processar_lote`: captura "hoje" uma única vez, monta os componentes e
  agrega todos os servidores;
- `resumo_lote`: totais do lote para o painel, com a situação de cada
  servidor e as licenças que começam nos próximos 30/60/90 dias.

Tratamento de erros
-------------------
- Entrada que não é uma sequência: lista vazia + log de erro.
- Itens que não são mapeamentos: ignorados com aviso.
- Falha inesperada em um servidor: `logger.exception` e o servidor é
  ignorado; o lote sempre termina.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import date
from typing import Any, Dict, List, Mapping, Optional, Sequence

from licencas import config
from licencas.pipeline.eventos import CAMPOS_FIM, CAMPOS_INICIO, CAMPOS_PERIODO, EnriquecedorEventos
from licencas.pipeline.periodos import CalculadoraPeriodos
from licencas.pipeline.servidores import (
    CAMPOS_CARGO,
    CAMPOS_CPF,
    CAMPOS_LOTACAO,
    CAMPOS_MATRICULA,
    CAMPOS_NOME,
    CAMPOS_UNIDADE,
    AgregadorServidores,
)
from licencas.pipeline.urgencia import URGENTES, contar_por_urgencia
from licencas.schemas import ServidorAgregado, StatusLicenca, Urgencia
from licencas.utils.campos import primeiro_valor, texto
from licencas.utils.datas import normalizar_data, parse_periodo_texto

logger = logging.getLogger(__name__)


def _tem_data_gozo(linha: Mapping[str, Any]) -> bool:
    if normalizar_data(primeiro_valor(linha, CAMPOS_INICIO)) is not None:
        return True
    if normalizar_data(primeiro_valor(linha, CAMPOS_FIM)) is not None:
        return True
    return parse_periodo_texto(primeiro_valor(linha, CAMPOS_PERIODO)) is not None


def _chave_servidor(linha: Mapping[str, Any]) -> Optional[str]:
    nome = texto(primeiro_valor(linha, CAMPOS_NOME))
    if not nome:
        return None
    cpf = texto(primeiro_valor(linha, CAMPOS_CPF))
    return f"cpf:{cpf}" if cpf else f"nome:{nome.upper()}"


def agrupar_por_servidor(linhas: Sequence[Any]) -> List[Dict[str, Any]]:
    """
    Agrupa linhas de planilha (uma por evento) em registros de servidor.

    Regras
    ------
    - Chave: CPF; na falta dele, o nome em maiúsculas.
    - Linhas sem nome são ignoradas (aviso).
    - Lotação e unidade: vale o último valor não vazio.
    - Linhas sem data de gozo (ex.: 30/12/1899 de célula vazia) só
      contribuem com a identificação, sem gerar evento.

    Retorna
    -------
    List[Dict[str, Any]]
        Registros `{nome, cpf, matricula, cargo, lotacao, unidade, licencas}`
        na ordem da primeira aparição de cada servidor.
    """
    grupos: Dict[str, Dict[str, Any]] = {}
    for i, linha in enumerate(linhas or []):
        if not isinstance(linha, Mapping):
            logger.warning("[LICENCAS] linha %d ignorada: tipo %s", i, type(linha).__name__)
            continue
        chave = _chave_servidor(linha)
        if chave is None:
            logger.warning("[LICENCAS] linha %d ignorada: servidor sem nome", i)
            continue

        grupo = grupos.get(chave)
        if grupo is None:
            grupo = {
                "nome": texto(primeiro_valor(linha, CAMPOS_NOME)),
                "cpf": texto(primeiro_valor(linha, CAMPOS_CPF)),
                "matricula": "",
                "cargo": "",
                "lotacao": "",
                "unidade": "",
                "licencas": [],
            }
            grupos[chave] = grupo

        for campo, aliases in (("matricula", CAMPOS_MATRICULA), ("cargo", CAMPOS_CARGO)):
            if not grupo[campo]:
                grupo[campo] = texto(primeiro_valor(linha, aliases))
        for campo, aliases in (("lotacao", CAMPOS_LOTACAO), ("unidade", CAMPOS_UNIDADE)):
            valor = texto(primeiro_valor(linha, aliases))
            if valor:
                grupo[campo] = valor

        if _tem_data_gozo(linha):
            grupo["licencas"].append(dict(linha))

    return list(grupos.values())


def _e_sequencia(valor: Any) -> bool:
    return isinstance(valor, Sequence) and not isinstance(valor, (str, bytes, bytearray))


def processar_lote(
    servidores: Any,
    hoje: Optional[date] = None,
    max_workers: Optional[int] = None,
) -> List[ServidorAgregado]:
    """
    Agrega todos os servidores de um lote.

    Parâmetros
    ----------
    servidores : Sequence[Mapping[str, Any]]
        Registros de servidor com os eventos em `licencas` (ver
        `agrupar_por_servidor`).
    hoje : Optional[date]
        Data de referência; quando ausente, `config.hoje_referencia()`.
    max_workers : Optional[int]
        Threads para processar servidores em paralelo (padrão
        `config.MAX_WORKERS`). A ordem de saída é sempre a de entrada.

    Retorna
    -------
    List[ServidorAgregado]
    """
    if not _e_sequencia(servidores):
        logger.error("[LICENCAS] lote inválido: esperada uma lista de servidores, recebido %s", type(servidores).__name__)
        return []

    hoje = hoje or config.hoje_referencia()
    workers = max_workers or config.MAX_WORKERS
    agregador = AgregadorServidores(
        enriquecedor=EnriquecedorEventos(hoje=hoje),
        calculadora=CalculadoraPeriodos(hoje=hoje),
    )

    def processar(indice_servidor) -> Optional[ServidorAgregado]:
        i, servidor = indice_servidor
        if not isinstance(servidor, Mapping):
            logger.warning("[LICENCAS] servidor %d ignorado: tipo %s", i, type(servidor).__name__)
            return None
        try:
            return agregador.agregar(servidor)
        except Exception:
            logger.exception("[LICENCAS] falha ao agregar servidor %d (%s)", i, texto(primeiro_valor(servidor, CAMPOS_NOME)))
            return None

    itens = list(enumerate(servidores))
    if workers > 1 and len(itens) > 1:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            resultados = list(pool.map(processar, itens))
    else:
        resultados = [processar(item) for item in itens]

    agregados = [r for r in resultados if r is not None]
    logger.info(
        "[LICENCAS] lote processado em %s: %d servidor(es), %d ignorado(s)",
        hoje.isoformat(), len(agregados), len(itens) - len(agregados),
    )
    return agregados


CONTAGEM_STATUS = ("em_andamento", "agendadas", "concluidas", "nao_agendadas")

# Faixas de urgência dos eventos futuros -> chave do resumo
FAIXAS_PROXIMAS = {
    Urgencia.CRITICA: "dias_30",
    Urgencia.ALTA: "dias_60",
    Urgencia.MODERADA: "dias_90",
}


def situacao_servidor(agregado: ServidorAgregado) -> str:
    """
    Situação única de um servidor no lote.

    Prioridade: em_andamento > agendadas > concluidas. Servidores sem
    eventos ficam em nao_agendadas.
    """
    status = {e.status for e in agregado.eventos}
    if not status:
        return "nao_agendadas"
    if StatusLicenca.EM_GOZO in status:
        return "em_andamento"
    if StatusLicenca.AGENDADA in status:
        return "agendadas"
    return "concluidas"


def contar_status_servidores(agregados: Sequence[ServidorAgregado]) -> Dict[str, int]:
    """Servidores por situação; todas as chaves aparecem, inclusive com zero."""
    contagem = {chave: 0 for chave in CONTAGEM_STATUS}
    for a in agregados:
        contagem[situacao_servidor(a)] += 1
    return contagem


def contar_proximas_licencas(agregados: Sequence[ServidorAgregado]) -> Dict[str, int]:
    """
    Eventos (não servidores) que começam em até 30, 31-60 e 61-90 dias.

    As faixas são disjuntas e seguem a urgência de cada evento; eventos
    em gozo ou já encerrados não entram.
    """
    contagem = {chave: 0 for chave in FAIXAS_PROXIMAS.values()}
    for a in agregados:
        for e in a.eventos:
            chave = FAIXAS_PROXIMAS.get(e.urgencia)
            if chave:
                contagem[chave] += 1
    return contagem


def resumo_lote(agregados: Sequence[ServidorAgregado]) -> Dict[str, Any]:
    """
    Totais do lote para o painel.

    Chaves: total_servidores, total_eventos, total_dias_gozados,
    total_dias_disponiveis, servidores_urgentes, servidores_sinteticos,
    por_urgencia (contagem por pior urgência, todas as faixas presentes),
    por_status (`contar_status_servidores`) e proximas
    (`contar_proximas_licencas`).
    """
    return {
        "total_servidores": len(agregados),
        "total_eventos": sum(a.total_eventos for a in agregados),
        "total_dias_gozados": sum(a.total_dias_gozados for a in agregados),
        "total_dias_disponiveis": sum(a.total_dias_disponiveis for a in agregados),
        "servidores_urgentes": sum(1 for a in agregados if a.pior_urgencia in URGENTES),
        "servidores_sinteticos": sum(1 for a in agregados if a.periodos_sinteticos),
        "por_urgencia": contar_por_urgencia(a.pior_urgencia for a in agregados),
        "por_status": contar_status_servidores(agregados),
        "proximas": contar_proximas_licencas(agregados),
    }
