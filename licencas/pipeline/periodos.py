# licencas/pipeline/periodos.py
"""
Cálculo dos períodos aquisitivos de licença-prêmio.

Propósito
---------
A partir dos eventos enriquecidos de um servidor, reconstruir os períodos
aquisitivos (5 anos = 90 dias de direito) e o saldo de cada um.

Modos
-----
- Real: algum evento informa os limites do período aquisitivo. Os eventos
  são agrupados pela chave (início, fim), o consumo é somado por grupo e um
  período "projetado" (próximo ciclo, sem consumo) é acrescentado logo após
  o último período real.
- Sintético: nenhum evento informa período aquisitivo. São gerados 5
  períodos de um ano civil (os 5 anos mais recentes), com direito integral e
  sem consumo. É uma aproximação explícita, marcada como
  `TipoPeriodo.SINTETICO`, e não uma estimativa do consumo real.

Em ambos os modos o resultado sai ordenado por data de início e sem
sobreposição.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from functools import reduce
from typing import Dict, Iterable, List, NamedTuple, Optional, Sequence, Tuple

from licencas import config
from licencas.schemas import EventoLicenca, PeriodoAquisitivo, TipoPeriodo
from licencas.utils.datas import somar_anos

logger = logging.getLogger(__name__)


class ChaveJanela(NamedTuple):
    """Chave composta de um período aquisitivo, comparada por valor."""
    inicio: date
    fim: date


Consumo = Tuple[Tuple[ChaveJanela, int], ...]


def _acumular(acc: Dict[ChaveJanela, int], evento: EventoLicenca) -> Dict[ChaveJanela, int]:
    chave = ChaveJanela(evento.aquisitivo_inicio, evento.aquisitivo_fim)
    return {**acc, chave: acc.get(chave, 0) + evento.dias_gozados}


def consumo_por_janela(eventos: Iterable[EventoLicenca]) -> Consumo:
    """
    Soma `dias_gozados` por período aquisitivo informado.

    Eventos sem período aquisitivo não entram na soma. O resultado é uma
    tupla de pares (chave, dias) ordenada pela chave.
    """
    com_janela = (e for e in eventos if e.tem_periodo_aquisitivo)
    acumulado = reduce(_acumular, com_janela, {})
    return tuple(sorted(acumulado.items()))


def _sem_sobreposicao(consumo: Consumo) -> Consumo:
    """
    Funde períodos de origem que se sobrepõem ao anterior.

    O período mais antigo mantém seus limites e recebe o consumo do período
    sobreposto.
    """
    def juntar(acc: Consumo, item: Tuple[ChaveJanela, int]) -> Consumo:
        chave, dias = item
        if acc and chave.inicio <= acc[-1][0].fim:
            anterior, dias_anterior = acc[-1]
            logger.warning(
                "[LICENCAS] período aquisitivo %s–%s sobrepõe %s–%s; consumo somado ao anterior",
                chave.inicio, chave.fim, anterior.inicio, anterior.fim,
            )
            return acc[:-1] + ((anterior, dias_anterior + dias),)
        return acc + ((chave, dias),)

    return reduce(juntar, consumo, ())


class CalculadoraPeriodos:
    """
    Calcula os períodos aquisitivos de um servidor.

    Parâmetros
    ----------
    hoje : date
        Data de referência do lote (define `expirado` e os anos sintéticos).
    dias_por_periodo : int
        Dias de direito por período (padrão 90).
    anos_por_periodo : int
        Duração do período aquisitivo em anos (padrão 5).
    periodos_sinteticos : int
        Quantidade de períodos provisórios no modo sintético (padrão 5).
    """

    def __init__(
        self,
        hoje: date,
        dias_por_periodo: int = config.DIAS_POR_PERIODO,
        anos_por_periodo: int = config.ANOS_POR_PERIODO,
        periodos_sinteticos: int = config.PERIODOS_SINTETICOS,
    ) -> None:
        self.hoje = hoje
        self.dias_por_periodo = dias_por_periodo
        self.anos_por_periodo = anos_por_periodo
        self.periodos_sinteticos = periodos_sinteticos

    def calcular(self, eventos: Sequence[EventoLicenca]) -> List[PeriodoAquisitivo]:
        """
        Retorna os períodos aquisitivos ordenados por início.

        O modo (real ou sintético) é escolhido automaticamente conforme a
        presença de limites de período aquisitivo nos eventos.
        """
        consumo = consumo_por_janela(eventos)
        if consumo:
            periodos = self._reais(consumo)
        else:
            periodos = self._sinteticos()
        return sorted(periodos, key=lambda p: p.inicio)

    def _reais(self, consumo: Consumo) -> List[PeriodoAquisitivo]:
        periodos = [
            PeriodoAquisitivo.criar(
                chave.inicio,
                chave.fim,
                hoje=self.hoje,
                dias_direito=self.dias_por_periodo,
                dias_gozados=dias,
                tipo=TipoPeriodo.REAL,
            )
            for chave, dias in _sem_sobreposicao(consumo)
        ]
        periodos.append(self._projetado(periodos[-1]))
        return periodos

    def _projetado(self, ultimo: PeriodoAquisitivo) -> PeriodoAquisitivo:
        inicio = ultimo.fim + timedelta(days=1)
        fim = somar_anos(inicio, self.anos_por_periodo) - timedelta(days=1)
        return PeriodoAquisitivo.criar(
            inicio,
            fim,
            hoje=self.hoje,
            dias_direito=self.dias_por_periodo,
            tipo=TipoPeriodo.PROJETADO,
        )

    def _sinteticos(self) -> List[PeriodoAquisitivo]:
        ano_atual = self.hoje.year
        primeiro = ano_atual - self.periodos_sinteticos + 1
        return [
            PeriodoAquisitivo.criar(
                date(ano, 1, 1),
                date(ano, 12, 31),
                hoje=self.hoje,
                dias_direito=self.dias_por_periodo,
                tipo=TipoPeriodo.SINTETICO,
            )
            for ano in range(primeiro, ano_atual + 1)
        ]


def periodo_para(
    evento: EventoLicenca, periodos: Sequence[PeriodoAquisitivo]
) -> Optional[PeriodoAquisitivo]:
    """
    Período aquisitivo ao qual o evento pertence.

    Regras
    ------
    - Evento com período aquisitivo informado: período com os mesmos
      limites; se ele tiver sido fundido a outro por sobreposição, o
      período que contém `aquisitivo_inicio`.
    - Evento sem período informado: o período que contém `inicio`; com
      períodos sintéticos, o mais próximo quando nenhum contém.
    """
    if evento.tem_periodo_aquisitivo:
        chave = ChaveJanela(evento.aquisitivo_inicio, evento.aquisitivo_fim)
        for p in periodos:
            if ChaveJanela(p.inicio, p.fim) == chave:
                return p
        return next((p for p in periodos if p.contem(evento.aquisitivo_inicio)), None)
    if evento.inicio is None:
        return None
    contem = next((p for p in periodos if p.contem(evento.inicio)), None)
    if contem is not None or not any(p.sintetico for p in periodos):
        return contem
    return min(periodos, key=lambda p: _distancia(p, evento.inicio))


def _distancia(periodo: PeriodoAquisitivo, d: date) -> int:
    return min(abs((periodo.inicio - d).days), abs((periodo.fim - d).days))
