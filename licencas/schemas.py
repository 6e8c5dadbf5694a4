# licencas/schemas.py
"""
Esquemas (Pydantic v2) do pipeline de licença-prêmio.

Visão geral
-----------
- `EventoLicenca`: evento de gozo normalizado e enriquecido (datas, dias,
  saldo, período aquisitivo, status e urgência).
- `PeriodoAquisitivo`: janela de 5 anos que gera 90 dias de direito, com
  consumo e saldo; pode ser real (dados de origem), projetada (próximo
  ciclo) ou sintética (aproximação quando a origem não informa janelas).
- `ServidorAgregado`: consolidação por servidor (eventos, períodos e totais).

Decisões de projeto
-------------------
- Todos os modelos são imutáveis (`frozen=True`): são construídos uma única
  vez por execução e descartados quando o conjunto de dados é substituído.
- `populate_by_name=True, extra="ignore"`: aceita nomes alternativos e ignora campos extras.
- Datas são `datetime.date` válidas ou `None`; contadores são inteiros não
  negativos (validados por `Field(ge=0)`).
"""

from __future__ import annotations

import enum
from datetime import date
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, computed_field


class StatusLicenca(str, enum.Enum):
    """
    Situação temporal de um evento em relação à data de referência.

    Recalculada a cada execução; não há transições persistidas.
    """
    AGENDADA = "agendada"
    EM_GOZO = "em-gozo"
    EXPIRADA = "expirada"
    EXPIRADA_COM_SALDO = "expirada-com-saldo"


class Urgencia(str, enum.Enum):
    """Faixa de prioridade conforme os dias que faltam para o início do gozo."""
    CRITICA = "critica"
    ALTA = "alta"
    MODERADA = "moderada"
    BAIXA = "baixa"
    EM_GOZO = "em-gozo"
    EXPIRADA = "expirada"
    INDEFINIDA = "indefinida"


class TipoPeriodo(str, enum.Enum):
    """Origem de um período aquisitivo."""
    REAL = "real"
    PROJETADO = "projetado"
    SINTETICO = "sintetico"


class EventoLicenca(BaseModel):
    """
    Evento de gozo de licença-prêmio já normalizado.

    Atributos
    ---------
    inicio, fim : Optional[date]
        Período de gozo (inclusivo). Eventos sem `inicio` não chegam a ser
        construídos pelo enriquecedor.
    tipo : str
        Natureza do registro (padrão "periodo-gozo").
    descricao : str
        Texto livre de origem.
    dias : int
        Duração do gozo em dias.
    dias_gozados : int
        Consumo considerado nos totais; sempre igual a `dias`.
    dias_gozados_fonte : Optional[int]
        Consumo informado pela origem (ex.: coluna GOZO), mantido para auditoria.
    meses : int
        Meses de licença informados pela origem (0 quando ausente).
    saldo_bruto : str
        Texto original do saldo (ex.: "30(DIAS)").
    saldo_dias : int
        Primeiro número extraído de `saldo_bruto` (0 quando ausente).
    aquisitivo_inicio, aquisitivo_fim : Optional[date]
        Limites do período aquisitivo informados pela origem.
    status : StatusLicenca
    urgencia : Urgencia
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    inicio: Optional[date] = None
    fim: Optional[date] = None
    tipo: str = "periodo-gozo"
    descricao: str = ""
    dias: int = Field(default=0, ge=0)
    dias_gozados: int = Field(default=0, ge=0)
    dias_gozados_fonte: Optional[int] = Field(default=None, ge=0)
    meses: int = Field(default=0, ge=0)
    saldo_bruto: str = ""
    saldo_dias: int = Field(default=0, ge=0)
    aquisitivo_inicio: Optional[date] = None
    aquisitivo_fim: Optional[date] = None
    status: StatusLicenca = StatusLicenca.AGENDADA
    urgencia: Urgencia = Urgencia.INDEFINIDA

    @computed_field  # type: ignore[prop-decorator]
    @property
    def divergencia_gozo(self) -> bool:
        """True quando a origem informa um consumo diferente da duração do evento."""
        return self.dias_gozados_fonte is not None and self.dias_gozados_fonte != self.dias_gozados

    @property
    def tem_periodo_aquisitivo(self) -> bool:
        return self.aquisitivo_inicio is not None and self.aquisitivo_fim is not None


class PeriodoAquisitivo(BaseModel):
    """
    Período aquisitivo (janela de 5 anos) e seu saldo.

    Invariante: `dias_disponiveis == max(0, dias_direito - dias_gozados)`.
    Use `PeriodoAquisitivo.criar(...)` para obter o saldo já calculado.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    label: str
    inicio: date
    fim: date
    dias_direito: int = Field(default=90, ge=0)
    dias_gozados: int = Field(default=0, ge=0)
    dias_disponiveis: int = Field(default=90, ge=0)
    expirado: bool = False
    tipo: TipoPeriodo = TipoPeriodo.REAL

    @classmethod
    def criar(
        cls,
        inicio: date,
        fim: date,
        *,
        hoje: date,
        dias_direito: int,
        dias_gozados: int = 0,
        tipo: TipoPeriodo = TipoPeriodo.REAL,
        label: Optional[str] = None,
    ) -> "PeriodoAquisitivo":
        """Constrói o período calculando saldo, expiração e rótulo."""
        return cls(
            label=label or rotulo_periodo(inicio, fim),
            inicio=inicio,
            fim=fim,
            dias_direito=dias_direito,
            dias_gozados=dias_gozados,
            dias_disponiveis=max(0, dias_direito - dias_gozados),
            expirado=fim < hoje,
            tipo=tipo,
        )

    @property
    def sintetico(self) -> bool:
        return self.tipo == TipoPeriodo.SINTETICO

    def contem(self, d: Optional[date]) -> bool:
        return d is not None and self.inicio <= d <= self.fim


def rotulo_periodo(inicio: date, fim: date) -> str:
    """Rótulo por anos: "2020-2024", ou "2025" quando o período cabe em um ano."""
    if inicio.year == fim.year:
        return str(inicio.year)
    return f"{inicio.year}-{fim.year}"


class ServidorAgregado(BaseModel):
    """
    Consolidação de licença-prêmio de um servidor.

    Atributos
    ---------
    nome, cpf, matricula, cargo, unidade : str
        Identificação (strings vazias quando ausentes).
    lotacao : str
        Lotação de exibição; nunca vazia ("Sem lotação" quando desconhecida).
    eventos : Tuple[EventoLicenca, ...]
        Eventos válidos, em ordem cronológica de início.
    periodos : Tuple[PeriodoAquisitivo, ...]
        Períodos aquisitivos, sem sobreposição, em ordem de início.
    total_eventos, total_dias_gozados, total_dias_disponiveis : int
        Totais; o consumo vem sempre da soma dos eventos.
    pior_urgencia : Urgencia
        Urgência mais severa entre os eventos.
    proxima_licenca : Optional[date]
        Menor data de início entre os eventos.
    data_admissao : Optional[date]
        Início do período aquisitivo real mais antigo.
    anos_servico : int
        Anos completos entre `data_admissao` e a data de referência.
    tem_licenca_urgente : bool
        Algum evento com urgência crítica ou alta.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    nome: str = ""
    cpf: str = ""
    matricula: str = ""
    cargo: str = ""
    lotacao: str = Field(min_length=1)
    unidade: str = ""
    eventos: Tuple[EventoLicenca, ...] = ()
    periodos: Tuple[PeriodoAquisitivo, ...] = ()
    total_eventos: int = Field(default=0, ge=0)
    total_dias_gozados: int = Field(default=0, ge=0)
    total_dias_disponiveis: int = Field(default=0, ge=0)
    pior_urgencia: Urgencia = Urgencia.INDEFINIDA
    proxima_licenca: Optional[date] = None
    data_admissao: Optional[date] = None
    anos_servico: int = Field(default=0, ge=0)
    tem_licenca_urgente: bool = False

    @property
    def total_dias_direito(self) -> int:
        return sum(p.dias_direito for p in self.periodos)

    @property
    def periodos_sinteticos(self) -> bool:
        """True quando os períodos são aproximações (origem sem dados de período aquisitivo)."""
        return any(p.sintetico for p in self.periodos)

    @property
    def divergencias_gozo(self) -> Tuple[EventoLicenca, ...]:
        """Eventos cujo consumo informado pela origem difere da duração."""
        return tuple(e for e in self.eventos if e.divergencia_gozo)

    def periodo_do_evento(self, evento: EventoLicenca) -> Optional[PeriodoAquisitivo]:
        """Período aquisitivo ao qual o evento pertence (ver `periodo_para`)."""
        from licencas.pipeline.periodos import periodo_para

        return periodo_para(evento, self.periodos)
