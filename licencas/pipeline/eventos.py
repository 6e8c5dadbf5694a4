# licencas/pipeline/eventos.py
"""
Enriquecimento de eventos de licença-prêmio.

Propósito
---------
Converter um registro bruto de gozo (campos com nomes variados, datas em
formatos mistos, dados parciais) em um `EventoLicenca` consistente:
- datas de início/fim normalizadas;
- fim derivado de início + dias - 1 quando ausente;
- dias derivados de fim - início + 1 (ou meses x 30, ou 30 por padrão);
- consumo (`dias_gozados`) igual à duração; o valor informado pela origem
  fica em `dias_gozados_fonte` apenas para auditoria;
- saldo numérico extraído de textos como "30(DIAS)";
- status e urgência calculados contra a data de referência do lote.

Regras
------
- Eventos sem data de início utilizável são descartados (`None`).
- Datas invertidas (fim < início) são corrigidas por troca.
- Um `PERIODO` com vários intervalos ("jan/2025 a fev/2025; jun/2025 a
  jul/2025") vira um evento por intervalo em `enriquecer_todos`.
- Nenhuma entrada malformada gera exceção.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Any, Callable, Iterable, List, Mapping, Optional, Tuple

from licencas import config
from licencas.pipeline.urgencia import classificar_urgencia
from licencas.schemas import EventoLicenca, StatusLicenca
from licencas.utils.campos import extrair_inteiro, inteiro_opcional, primeiro_valor, texto
from licencas.utils.datas import dias_inclusivos, dividir_periodos, normalizar_data, parse_periodo_texto, somar_anos

logger = logging.getLogger(__name__)

CAMPOS_INICIO = ("A_PARTIR", "INICIO", "INÍCIO", "inicio", "data_inicio", "dataInicio", "start")
CAMPOS_FIM = ("TERMINO", "TÉRMINO", "FINAL", "FIM", "termino", "fim", "data_fim", "dataFim", "end")
CAMPOS_DIAS = ("DIAS", "dias", "days", "DURACAO", "duracao")
CAMPOS_GOZO = ("GOZO", "gozo", "diasGozados", "dias_gozados")
CAMPOS_MESES = ("MESES", "meses")
CAMPOS_SALDO = ("RESTANDO", "restando", "SALDO", "saldo")
CAMPOS_AQUISITIVO_INICIO = ("AQUISITIVO_INICIO", "aquisitivoInicio", "aquisitivo_inicio")
CAMPOS_AQUISITIVO_FIM = ("AQUISITIVO_FIM", "aquisitivoFim", "aquisitivo_fim")
CAMPOS_DESCRICAO = ("DESCRICAO", "descricao", "OBS", "obs", "observacao")
CAMPOS_TIPO = ("TIPO", "tipo")
CAMPOS_PERIODO = ("PERIODO", "periodo")

TIPO_PADRAO = "periodo-gozo"

# Durações acima disto são tratadas como erro de digitação da origem.
DIAS_MAXIMO = 3650

Normalizador = Callable[[Any], Optional[date]]


def calcular_status(inicio: date, fim: date, saldo_dias: int, hoje: date) -> StatusLicenca:
    """
    Status temporal de um evento.

    - hoje < início: agendada
    - início <= hoje <= fim: em-gozo
    - hoje > fim: expirada, ou expirada-com-saldo quando ainda há saldo
    """
    if hoje < inicio:
        return StatusLicenca.AGENDADA
    if hoje <= fim:
        return StatusLicenca.EM_GOZO
    if saldo_dias > 0:
        return StatusLicenca.EXPIRADA_COM_SALDO
    return StatusLicenca.EXPIRADA


class EnriquecedorEventos:
    """
    Enriquece registros brutos de gozo.

    Uso
    ---
        enriquecedor = EnriquecedorEventos(hoje=date(2025, 5, 1))
        evento = enriquecedor.enriquecer({"A_PARTIR": "01/06/2025", "DIAS": 90})

    Parâmetros
    ----------
    hoje : date
        Data de referência do lote (capturada uma vez pelo chamador).
    normalizador : Callable[[Any], Optional[date]]
        Função de normalização de datas (injetada; padrão `normalizar_data`).
    dias_padrao : int
        Duração assumida quando nem datas nem dias/meses são informados.
    dias_por_mes : int
        Conversão de meses informados para dias.
    anos_por_periodo : int
        Duração do período aquisitivo, usada para completar um limite ausente.
    """

    def __init__(
        self,
        hoje: date,
        normalizador: Normalizador = normalizar_data,
        dias_padrao: int = config.DIAS_PADRAO,
        dias_por_mes: int = config.DIAS_POR_MES,
        anos_por_periodo: int = config.ANOS_POR_PERIODO,
    ) -> None:
        self.hoje = hoje
        self._normalizar = normalizador
        self.dias_padrao = dias_padrao
        self.dias_por_mes = dias_por_mes
        self.anos_por_periodo = anos_por_periodo

    def enriquecer(self, bruto: Any) -> Optional[EventoLicenca]:
        """
        Converte um registro bruto em `EventoLicenca`.

        Retorna
        -------
        Optional[EventoLicenca]
            O evento enriquecido, ou `None` quando o registro não é um
            mapeamento ou não tem data de início utilizável.
        """
        if not isinstance(bruto, Mapping):
            logger.debug("[LICENCAS] registro de evento ignorado (tipo %s)", type(bruto).__name__)
            return None

        inicio, fim = self._datas_gozo(bruto)
        if inicio is None:
            if config.DEBUG_LOG:
                logger.debug("[LICENCAS] evento sem data de início descartado: %r", dict(bruto))
            return None

        meses = extrair_inteiro(primeiro_valor(bruto, CAMPOS_MESES))
        dias = self._dias(bruto, inicio, fim, meses)
        if fim is None:
            fim = inicio + timedelta(days=dias - 1)

        saldo_bruto = texto(primeiro_valor(bruto, CAMPOS_SALDO))
        saldo_dias = extrair_inteiro(saldo_bruto)
        aq_inicio, aq_fim = self._periodo_aquisitivo(bruto)

        return EventoLicenca(
            inicio=inicio,
            fim=fim,
            tipo=texto(primeiro_valor(bruto, CAMPOS_TIPO)) or TIPO_PADRAO,
            descricao=texto(primeiro_valor(bruto, CAMPOS_DESCRICAO)),
            dias=dias,
            dias_gozados=dias,
            dias_gozados_fonte=inteiro_opcional(primeiro_valor(bruto, CAMPOS_GOZO)),
            meses=meses,
            saldo_bruto=saldo_bruto,
            saldo_dias=saldo_dias,
            aquisitivo_inicio=aq_inicio,
            aquisitivo_fim=aq_fim,
            status=calcular_status(inicio, fim, saldo_dias, self.hoje),
            urgencia=classificar_urgencia(inicio, fim, self.hoje),
        )

    def enriquecer_todos(self, brutos: Iterable[Any]) -> List[EventoLicenca]:
        """
        Enriquece vários registros, descarta os inválidos e ordena por início.

        Registros com vários períodos textuais são expandidos antes (ver
        `expandir`).
        """
        expandidos = (parte for b in brutos for parte in self.expandir(b))
        eventos = [e for e in (self.enriquecer(b) for b in expandidos) if e is not None]
        return sorted(eventos, key=lambda e: e.inicio)

    def expandir(self, bruto: Any) -> List[Any]:
        """
        Separa um registro cujo `PERIODO` lista vários intervalos em um
        registro por intervalo. Registros com datas explícitas de início ou
        fim, ou com um único intervalo, voltam inalterados.
        """
        if not isinstance(bruto, Mapping):
            return [bruto]
        if primeiro_valor(bruto, CAMPOS_INICIO) is not None or primeiro_valor(bruto, CAMPOS_FIM) is not None:
            return [bruto]
        trechos = dividir_periodos(primeiro_valor(bruto, CAMPOS_PERIODO))
        if len(trechos) < 2:
            return [bruto]
        campo = next((k for k in CAMPOS_PERIODO if k in bruto), CAMPOS_PERIODO[0])
        logger.debug("[LICENCAS] período com %d intervalos expandido", len(trechos))
        return [{**bruto, campo: trecho} for trecho in trechos]

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _datas_gozo(self, bruto: Mapping[str, Any]) -> Tuple[Optional[date], Optional[date]]:
        inicio = self._normalizar(primeiro_valor(bruto, CAMPOS_INICIO))
        fim = self._normalizar(primeiro_valor(bruto, CAMPOS_FIM))
        if inicio is None and fim is None:
            periodo = parse_periodo_texto(
                primeiro_valor(bruto, CAMPOS_PERIODO), self._normalizar, self.dias_por_mes
            )
            if periodo:
                inicio, fim = periodo
        if inicio is not None and fim is not None and fim < inicio:
            inicio, fim = fim, inicio
        return inicio, fim

    def _dias(self, bruto: Mapping[str, Any], inicio: date, fim: Optional[date], meses: int) -> int:
        dias = extrair_inteiro(primeiro_valor(bruto, CAMPOS_DIAS))
        if 0 < dias <= DIAS_MAXIMO:
            return dias
        if fim is not None:
            return dias_inclusivos(inicio, fim)
        if 0 < meses * self.dias_por_mes <= DIAS_MAXIMO:
            return meses * self.dias_por_mes
        return self.dias_padrao

    def _periodo_aquisitivo(self, bruto: Mapping[str, Any]) -> Tuple[Optional[date], Optional[date]]:
        aq_inicio = self._normalizar(primeiro_valor(bruto, CAMPOS_AQUISITIVO_INICIO))
        aq_fim = self._normalizar(primeiro_valor(bruto, CAMPOS_AQUISITIVO_FIM))
        if aq_inicio is not None and aq_fim is None:
            aq_fim = somar_anos(aq_inicio, self.anos_por_periodo) - timedelta(days=1)
        elif aq_fim is not None and aq_inicio is None:
            aq_inicio = somar_anos(aq_fim + timedelta(days=1), -self.anos_por_periodo)
        if aq_inicio is not None and aq_fim is not None and aq_fim < aq_inicio:
            aq_inicio, aq_fim = aq_fim, aq_inicio
        return aq_inicio, aq_fim
