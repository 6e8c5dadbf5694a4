# licencas/pipeline/servidores.py
"""
Agregação de licença-prêmio por servidor.

Propósito
---------
Consolidar, para um servidor, a identificação, os eventos enriquecidos, os
períodos aquisitivos e os totais exibidos no painel de licenças.

Regras
------
- Lotação de exibição: campo explícito (LOTACAO/setor) → unidade, desde que
  não seja um nome genérico de órgão → "Sem lotação". Nunca vazia.
- `total_dias_gozados` é sempre a soma de `dias_gozados` dos eventos; o
  consumo por período serve apenas ao detalhamento.
- `total_dias_disponiveis = max(0, Σ dias_direito - total_dias_gozados)`.
- Sem eventos válidos: pior urgência "indefinida" e sem próxima licença.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Callable, Iterable, List, Mapping, Optional, Sequence

from licencas import config
from licencas.pipeline.eventos import EnriquecedorEventos
from licencas.pipeline.periodos import CalculadoraPeriodos
from licencas.pipeline.urgencia import URGENTES, pior_urgencia
from licencas.schemas import EventoLicenca, PeriodoAquisitivo, ServidorAgregado, TipoPeriodo
from licencas.utils.campos import chave_comparacao, formatar_lotacao, primeiro_valor, texto

logger = logging.getLogger(__name__)

CAMPOS_NOME = ("NOME", "nome", "SERVIDOR", "servidor")
CAMPOS_CPF = ("CPF", "cpf")
CAMPOS_MATRICULA = ("MATRICULA", "MATRÍCULA", "matricula", "SIAPE", "siape")
CAMPOS_CARGO = ("CARGO", "cargo")
CAMPOS_LOTACAO = ("LOTACAO", "LOTAÇÃO", "lotacao", "lotação", "SETOR", "setor")
CAMPOS_UNIDADE = ("UNIDADE", "unidade")
CAMPOS_EVENTOS = ("licencas", "LICENCAS", "eventos", "EVENTOS")


def eventos_do_servidor(servidor: Mapping[str, Any]) -> List[Any]:
    """
    Lista bruta de eventos embutida no registro do servidor.

    Retorna lista vazia quando o campo está ausente ou não é uma lista.
    """
    bruto = primeiro_valor(servidor, CAMPOS_EVENTOS)
    if isinstance(bruto, (list, tuple)):
        return list(bruto)
    if bruto is not None:
        logger.warning("[LICENCAS] campo de eventos com tipo inesperado (%s) ignorado", type(bruto).__name__)
    return []


def anos_completos(inicio: Optional[date], hoje: date) -> int:
    """Anos completos entre `inicio` e `hoje` (0 quando ausente ou futuro)."""
    if inicio is None:
        return 0
    anos = hoje.year - inicio.year - ((hoje.month, hoje.day) < (inicio.month, inicio.day))
    return max(0, anos)


class AgregadorServidores:
    """
    Monta o `ServidorAgregado` de cada servidor.

    Parâmetros
    ----------
    enriquecedor : EnriquecedorEventos
        Enriquecedor já configurado com a data de referência do lote.
    calculadora : CalculadoraPeriodos
        Calculadora de períodos aquisitivos (mesma data de referência).
    formatador_lotacao : Callable[[Any], str]
        Padronização de exibição da lotação (injetável).
    unidades_genericas : Iterable[str]
        Nomes de unidade que não servem como lotação (comparação sem
        acentos e sem diferenciar maiúsculas).
    """

    def __init__(
        self,
        enriquecedor: EnriquecedorEventos,
        calculadora: CalculadoraPeriodos,
        formatador_lotacao: Callable[[Any], str] = formatar_lotacao,
        unidades_genericas: Iterable[str] = config.UNIDADES_GENERICAS,
    ) -> None:
        self.enriquecedor = enriquecedor
        self.calculadora = calculadora
        self._formatar_lotacao = formatador_lotacao
        self._genericas = frozenset(chave_comparacao(u) for u in unidades_genericas)

    @property
    def hoje(self) -> date:
        return self.enriquecedor.hoje

    def agregar(
        self,
        servidor: Mapping[str, Any],
        eventos_brutos: Optional[Sequence[Any]] = None,
    ) -> ServidorAgregado:
        """
        Agrega um servidor.

        Parâmetros
        ----------
        servidor : Mapping[str, Any]
            Registro de identificação (nome, cpf, cargo, lotação, unidade...).
        eventos_brutos : Optional[Sequence[Any]]
            Eventos brutos; quando omitido, lidos de `servidor["licencas"]`
            (ou aliases).

        Retorna
        -------
        ServidorAgregado
        """
        if eventos_brutos is None:
            eventos_brutos = eventos_do_servidor(servidor)
        brutos = list(eventos_brutos)

        eventos = self.enriquecedor.enriquecer_todos(brutos)
        periodos = self.calculadora.calcular(eventos)

        total_gozados = sum(e.dias_gozados for e in eventos)
        total_direito = sum(p.dias_direito for p in periodos)
        admissao = self._data_admissao(periodos)
        nome = texto(primeiro_valor(servidor, CAMPOS_NOME))

        descartados = len(brutos) - len(eventos)
        if descartados and config.DEBUG_LOG:
            logger.debug("[LICENCAS] %s: %d evento(s) sem data de início descartado(s)", nome, descartados)

        return ServidorAgregado(
            nome=nome,
            cpf=texto(primeiro_valor(servidor, CAMPOS_CPF)),
            matricula=texto(primeiro_valor(servidor, CAMPOS_MATRICULA)),
            cargo=texto(primeiro_valor(servidor, CAMPOS_CARGO)),
            lotacao=self.resolver_lotacao(servidor),
            unidade=texto(primeiro_valor(servidor, CAMPOS_UNIDADE)),
            eventos=tuple(eventos),
            periodos=tuple(periodos),
            total_eventos=len(eventos),
            total_dias_gozados=total_gozados,
            total_dias_disponiveis=max(0, total_direito - total_gozados),
            pior_urgencia=pior_urgencia(e.urgencia for e in eventos),
            proxima_licenca=self._proxima_licenca(eventos),
            data_admissao=admissao,
            anos_servico=anos_completos(admissao, self.hoje),
            tem_licenca_urgente=any(e.urgencia in URGENTES for e in eventos),
        )

    def resolver_lotacao(self, servidor: Mapping[str, Any]) -> str:
        """
        Lotação de exibição do servidor.

        Ordem: lotação explícita → unidade não genérica → "Sem lotação".
        """
        explicita = self._formatar_lotacao(primeiro_valor(servidor, CAMPOS_LOTACAO))
        if explicita:
            return explicita
        unidade = primeiro_valor(servidor, CAMPOS_UNIDADE)
        if unidade is not None and chave_comparacao(unidade) not in self._genericas:
            formatada = self._formatar_lotacao(unidade)
            if formatada:
                return formatada
        return config.SEM_LOTACAO

    @staticmethod
    def _proxima_licenca(eventos: Sequence[EventoLicenca]) -> Optional[date]:
        return min((e.inicio for e in eventos if e.inicio is not None), default=None)

    @staticmethod
    def _data_admissao(periodos: Sequence[PeriodoAquisitivo]) -> Optional[date]:
        reais = [p.inicio for p in periodos if p.tipo == TipoPeriodo.REAL]
        return min(reais, default=None)
