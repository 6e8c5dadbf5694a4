# licencas/utils/datas.py
"""
Normalização e formatação de datas.

Propósito
---------
Converter valores de data em formatos heterogêneos (objetos `date`/`datetime`,
texto ISO, texto brasileiro DD/MM/AAAA, "jan/2025", "03/2025", números de
série de planilha) em `datetime.date`, sem nunca lançar exceções.

Detalhes de implementação
-------------------------
- O normalizador é uma lista ordenada e explícita de estratégias nomeadas;
  a primeira que retornar uma data vence.
- DD/MM/AAAA é sempre tentado antes de MM/AAAA, para que um não seja lido
  como o outro.
- Datas impossíveis (ex.: 31/02/2025) resultam em `None`; não há "rolagem"
  para o mês seguinte.
- 30/12/1899 é a marca de célula vazia das planilhas de origem e também é
  tratada como ausência de data, assim como qualquer ano fora de 1900-2199.
"""

from __future__ import annotations

import logging
import re
import unicodedata
from datetime import date, datetime, timedelta
from typing import Any, Callable, List, Optional, Tuple

logger = logging.getLogger(__name__)

DATA_VAZIA_PLANILHA = date(1899, 12, 30)
TEXTOS_VAZIOS = {"", "-", "--", "null", "none", "nan"}

# Anos fora desta faixa não são plausíveis para registros funcionais.
ANO_MIN = 1900
ANO_MAX = 2199

MESES = {
    "jan": 1, "janeiro": 1,
    "fev": 2, "fevereiro": 2,
    "mar": 3, "marco": 3,
    "abr": 4, "abril": 4,
    "mai": 5, "maio": 5,
    "jun": 6, "junho": 6,
    "jul": 7, "julho": 7,
    "ago": 8, "agosto": 8,
    "set": 9, "setembro": 9,
    "out": 10, "outubro": 10,
    "nov": 11, "novembro": 11,
    "dez": 12, "dezembro": 12,
}

MESES_EXTENSO = (
    "janeiro", "fevereiro", "março", "abril", "maio", "junho",
    "julho", "agosto", "setembro", "outubro", "novembro", "dezembro",
)

ISO_RX = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})(?:$|[\sT])")
DMA_RX = re.compile(r"^(\d{1,2})[/.-](\d{1,2})[/.-](\d{4})(?:$|\s)")
MES_EXTENSO_RX = re.compile(r"^([a-z]+)\.?\s*(?:/|-|\s+de\s+|\s+)\s*(\d{4})$")
MES_ANO_RX = re.compile(r"^(\d{1,2})/(\d{4})$")
ISO_COMPLETA_RX = re.compile(r"^\d{4}-\d{1,2}-\d{1,2}$")
DMA_COMPLETA_RX = re.compile(r"^\d{1,2}[/.-]\d{1,2}[/.-]\d{4}$")

# Separadores de períodos em texto livre
SEPARADOR_PERIODOS_RX = re.compile(r"[,;]")
INTERVALO_RX = re.compile(r"\s+(?:a|até|ate)\s+", re.IGNORECASE)
HIFEN_RX = re.compile(r"\s*[-–]\s*")
MESES_A_PARTIR_RX = re.compile(r"^(\d+)\s*m[eê]s(?:es)?\s*(?:a\s*partir\s*de|em)\s*(.+)$", re.IGNORECASE)
MESES_MAXIMO = 120

# Faixa aceita para números de série: de 1927 até o fim de 2199.
SERIAL_MIN = 10000
SERIAL_MAX = 109572


def _sem_acentos(s: str) -> str:
    return "".join(
        c for c in unicodedata.normalize("NFD", s) if unicodedata.category(c) != "Mn"
    )


def _montar(ano: int, mes: int, dia: int) -> Optional[date]:
    try:
        return date(ano, mes, dia)
    except ValueError:
        return None


def _estrategia_data(v: Any) -> Optional[date]:
    if isinstance(v, datetime):
        return v.date()
    if isinstance(v, date):
        return v
    return None


def _estrategia_iso(v: Any) -> Optional[date]:
    if not isinstance(v, str):
        return None
    m = ISO_RX.match(v.strip())
    if not m:
        return None
    return _montar(int(m.group(1)), int(m.group(2)), int(m.group(3)))


def _estrategia_dia_mes_ano(v: Any) -> Optional[date]:
    if not isinstance(v, str):
        return None
    m = DMA_RX.match(v.strip())
    if not m:
        return None
    return _montar(int(m.group(3)), int(m.group(2)), int(m.group(1)))


def _estrategia_mes_extenso_ano(v: Any) -> Optional[date]:
    if not isinstance(v, str):
        return None
    m = MES_EXTENSO_RX.match(_sem_acentos(v.strip().lower()))
    if not m:
        return None
    mes = MESES.get(m.group(1))
    if mes is None:
        return None
    return _montar(int(m.group(2)), mes, 1)


def _estrategia_mes_ano(v: Any) -> Optional[date]:
    if not isinstance(v, str):
        return None
    m = MES_ANO_RX.match(v.strip())
    if not m:
        return None
    return _montar(int(m.group(2)), int(m.group(1)), 1)


def _estrategia_serial_planilha(v: Any) -> Optional[date]:
    """
    Converte números de série de planilha (base 30/12/1899) em data.

    Aceita int/float ou texto puramente numérico; booleanos são ignorados.
    """
    if isinstance(v, bool):
        return None
    if isinstance(v, (int, float)):
        n = v
    elif isinstance(v, str) and re.fullmatch(r"\d+(?:[.,]\d+)?", v.strip()):
        n = float(v.strip().replace(",", "."))
    else:
        return None
    if n != n or not (SERIAL_MIN <= n <= SERIAL_MAX):
        return None
    return DATA_VAZIA_PLANILHA + timedelta(days=int(n))


def _estrategia_generica(v: Any) -> Optional[date]:
    if not isinstance(v, str):
        return None
    s = v.strip()
    try:
        return datetime.fromisoformat(s.replace("Z", "+00:00")).date()
    except ValueError:
        return None


Estrategia = Tuple[str, Callable[[Any], Optional[date]]]

ESTRATEGIAS_PADRAO: Tuple[Estrategia, ...] = (
    ("data", _estrategia_data),
    ("iso", _estrategia_iso),
    ("dia_mes_ano", _estrategia_dia_mes_ano),
    ("mes_extenso_ano", _estrategia_mes_extenso_ano),
    ("mes_ano", _estrategia_mes_ano),
    ("serial_planilha", _estrategia_serial_planilha),
    ("generico", _estrategia_generica),
)


class NormalizadorDatas:
    """
    Normalizador de datas baseado em estratégias nomeadas.

    Uso
    ---
        normalizar = NormalizadorDatas()
        normalizar("15/03/2025")   # date(2025, 3, 15)
        normalizar("lixo")         # None

    Parâmetros
    ----------
    estrategias : Tuple[Estrategia, ...]
        Pares (nome, função) tentados em ordem; cada função recebe o valor
        bruto e devolve `date` ou `None`.
    """

    def __init__(self, estrategias: Tuple[Estrategia, ...] = ESTRATEGIAS_PADRAO) -> None:
        self._estrategias = tuple(estrategias)

    @property
    def nomes(self) -> Tuple[str, ...]:
        return tuple(nome for nome, _ in self._estrategias)

    def __call__(self, valor: Any) -> Optional[date]:
        return self.normalizar(valor)

    def normalizar(self, valor: Any) -> Optional[date]:
        """
        Converte `valor` em `date` ou retorna `None` quando não interpretável.

        Nunca lança exceção: falhas inesperadas de uma estratégia são
        registradas em DEBUG e a próxima estratégia é tentada.
        """
        return self._aplicar(valor)[1]

    def estrategia_aplicada(self, valor: Any) -> Optional[str]:
        """Nome da estratégia que produziu a data de `valor` (diagnóstico)."""
        return self._aplicar(valor)[0]

    def _aplicar(self, valor: Any) -> Tuple[Optional[str], Optional[date]]:
        if valor is None:
            return None, None
        if isinstance(valor, str) and valor.strip().lower() in TEXTOS_VAZIOS:
            return None, None
        for nome, estrategia in self._estrategias:
            try:
                d = estrategia(valor)
            except (TypeError, ValueError, OverflowError) as e:
                logger.debug("[LICENCAS] estratégia %s falhou para %r: %s", nome, valor, e)
                continue
            if d is not None:
                if ANO_MIN <= d.year <= ANO_MAX:
                    return nome, d
                return None, None
        return None, None


_PADRAO = NormalizadorDatas()


def normalizar_data(valor: Any) -> Optional[date]:
    """Atalho para o normalizador padrão."""
    return _PADRAO.normalizar(valor)


def formatar_data(d: Optional[date], formato: str = "curto") -> str:
    """
    Formata uma data no padrão brasileiro.

    Parâmetros
    ----------
    d : Optional[date]
        Data a formatar.
    formato : str
        "curto" (DD/MM/AAAA) ou "longo" (15 de março de 2025).

    Retorna
    -------
    str
        Texto formatado, ou "-" quando a data é ausente.
    """
    if not isinstance(d, date):
        return "-"
    if isinstance(d, datetime):
        d = d.date()
    if formato == "longo":
        return f"{d.day} de {MESES_EXTENSO[d.month - 1]} de {d.year}"
    return d.strftime("%d/%m/%Y")


def dias_inclusivos(a: date, b: date) -> int:
    """
    Calcula a quantidade de dias entre a e b (contagem inclusiva).
    """
    return (b - a).days + 1


def somar_anos(d: date, anos: int) -> date:
    """Soma anos a uma data; 29/02 vira 28/02 em anos não bissextos."""
    try:
        return d.replace(year=d.year + anos)
    except ValueError:
        return d.replace(year=d.year + anos, day=28)


def ultimo_dia_do_mes(d: date) -> date:
    proximo = date(d.year + (d.month // 12), d.month % 12 + 1, 1)
    return proximo - timedelta(days=1)


def dividir_periodos(texto: Any) -> List[str]:
    """Separa um texto com vários períodos ("a; b" ou "a, b") em trechos."""
    if not isinstance(texto, str):
        return []
    return [p.strip() for p in SEPARADOR_PERIODOS_RX.split(texto) if p.strip()]


def parse_periodos_texto(
    periodo: Any,
    normalizar: Callable[[Any], Optional[date]] = normalizar_data,
    dias_por_mes: int = 30,
) -> List[Tuple[date, date]]:
    """
    Interpreta todos os períodos de um texto livre.

    Formatos por trecho
    -------------------
    - "jan/2025 a mar/2025", "março de 2025 até maio de 2025"
    - "01/01/2025 - 31/03/2025", "jan/2025-mar/2025"
    - "3 meses a partir de jan/2025" (meses de `dias_por_mes` dias)
    - "jan/2025" ou "15/03/2025" (data única)

    Trechos separados por "," ou ";" geram um período cada; trechos não
    interpretáveis são omitidos.
    """
    periodos = []
    for trecho in dividir_periodos(periodo):
        p = _parse_trecho(trecho, normalizar, dias_por_mes)
        if p is not None:
            periodos.append(p)
    return periodos


def parse_periodo_texto(
    periodo: Any,
    normalizar: Callable[[Any], Optional[date]] = normalizar_data,
    dias_por_mes: int = 30,
) -> Optional[Tuple[date, date]]:
    """
    Primeiro período interpretável de um texto livre (ver `parse_periodos_texto`).

    Regras
    ------
    - Quando só há um mês ("jan/2025"), início e fim ficam no mesmo mês.
    - Meses sem dia (mês/ano) terminam no último dia do mês.
    - Cada lado precisa ser uma data completa; "01/01/2025 xyz" não é aceito.
    - Retorna `None` quando nenhum trecho é interpretável.
    """
    periodos = parse_periodos_texto(periodo, normalizar, dias_por_mes)
    return periodos[0] if periodos else None


def _parse_trecho(
    trecho: str,
    normalizar: Callable[[Any], Optional[date]],
    dias_por_mes: int,
) -> Optional[Tuple[date, date]]:
    m = MESES_A_PARTIR_RX.match(trecho)
    if m:
        meses = int(m.group(1))
        ini = normalizar(m.group(2)) if _data_isolada(m.group(2)) else None
        if ini is None or not (1 <= meses <= MESES_MAXIMO):
            return None
        return ini, ini + timedelta(days=meses * dias_por_mes - 1)

    if _data_isolada(trecho):
        lados: Optional[Tuple[str, str]] = (trecho, trecho)
    else:
        lados = _dividir(trecho, INTERVALO_RX) or _dividir(trecho, HIFEN_RX)
    if lados is None:
        return None

    lado_ini, lado_fim = lados
    ini = normalizar(lado_ini)
    fim = normalizar(lado_fim)
    if ini is None or fim is None:
        return None
    if _sem_dia(lado_fim):
        fim = ultimo_dia_do_mes(fim)
    if fim < ini:
        return None
    return ini, fim


def _dividir(trecho: str, separador: "re.Pattern[str]") -> Optional[Tuple[str, str]]:
    # Testa cada ocorrência do separador: "2025-01-01 - 2025-03-31" tem vários hífens.
    for m in separador.finditer(trecho):
        esquerda, direita = trecho[:m.start()].strip(), trecho[m.end():].strip()
        if _data_isolada(esquerda) and _data_isolada(direita):
            return esquerda, direita
    return None


def _data_isolada(texto: str) -> bool:
    """True quando o texto inteiro tem forma de uma única data."""
    s = _sem_acentos(texto.strip().lower())
    return any(rx.match(s) for rx in (ISO_COMPLETA_RX, DMA_COMPLETA_RX, MES_EXTENSO_RX, MES_ANO_RX))


def _sem_dia(texto: str) -> bool:
    s = _sem_acentos(texto.strip().lower())
    return bool(MES_ANO_RX.match(s) or MES_EXTENSO_RX.match(s))
