# licencas/utils/campos.py
"""
Leitura tolerante de campos de registros brutos.

Propósito
---------
Os registros de origem chegam com nomes de coluna heterogêneos ("GOZO",
"gozo", "diasGozados"...), valores numéricos com anotações ("30(DIAS)") e
campos ausentes. Este módulo oferece helpers que nunca lançam exceção:
- `primeiro_valor`: primeiro valor não vazio dentre uma lista de aliases;
- `extrair_inteiro`: primeiro inteiro presente em texto livre;
- `texto`: conversão para `str` aparada;
- `formatar_lotacao` / `chave_comparacao`: padronização de nomes de lotação.
"""

from __future__ import annotations

import math
import re
import unicodedata
from typing import Any, Iterable, Mapping, Optional

INTEIRO_RX = re.compile(r"-?\d+")


def texto(x: Any) -> str:
    """Converte valores para `str` aparada; retorna string vazia para nulos."""
    if x is None:
        return ""
    return str(x).strip()


def vazio(v: Any) -> bool:
    """
    Indica se um valor bruto deve ser tratado como ausente.

    São vazios: None, strings em branco e floats NaN (células vazias de planilha).
    """
    if v is None:
        return True
    if isinstance(v, str):
        return v.strip() == ""
    if isinstance(v, float):
        return math.isnan(v)
    return False


def primeiro_valor(registro: Mapping[str, Any], aliases: Iterable[str]) -> Any:
    """
    Retorna o primeiro valor não vazio dentre os aliases informados.

    A chave exata tem preferência; depois as chaves do registro são
    comparadas sem acentos, maiúsculas, espaços nas pontas e separadores
    ("Data Início" casa com "data_inicio", "INICIO " com "INICIO").

    Parâmetros
    ----------
    registro : Mapping[str, Any]
        Registro bruto (chaves arbitrárias).
    aliases : Iterable[str]
        Nomes de campo em ordem de preferência.

    Retorna
    -------
    Any
        O valor encontrado, ou None.
    """
    normalizadas = None
    for nome in aliases:
        v = registro.get(nome)
        if not vazio(v):
            return v
        if normalizadas is None:
            normalizadas = [(chave_comparacao(k), valor) for k, valor in registro.items()]
        alvo = chave_comparacao(nome)
        for chave, valor in normalizadas:
            if chave == alvo and not vazio(valor):
                return valor
    return None


def extrair_inteiro(v: Any, default: int = 0) -> int:
    """
    Extrai o primeiro inteiro não negativo de um valor.

    Formatos aceitos: 30, 30.0, "30", "30(DIAS)", "(0) DIAS", "0(ZERO)".
    Textos sem dígitos e números negativos (inclusive em texto, como "-5"),
    NaN ou infinitos retornam `default`. Um hífen colado a uma palavra
    ("DIAS-30") é separador, não sinal.

    Exemplo
    -------
    >>> extrair_inteiro("45 (DIAS)")
    45
    """
    if vazio(v) or isinstance(v, bool):
        return default
    if isinstance(v, (int, float)):
        if isinstance(v, float) and not math.isfinite(v):
            return default
        n = int(v)
        return n if n >= 0 else default
    s = str(v)
    m = INTEIRO_RX.search(s)
    if not m:
        return default
    token = m.group(0)
    if token.startswith("-") and m.start() > 0 and s[m.start() - 1].isalnum():
        token = token[1:]
    n = int(token)
    return n if n >= 0 else default


def inteiro_opcional(v: Any) -> Optional[int]:
    """Como `extrair_inteiro`, mas devolve None quando não há número."""
    sentinela = -1
    n = extrair_inteiro(v, default=sentinela)
    return None if n == sentinela else n


def sem_acentos(s: str) -> str:
    return "".join(
        c for c in unicodedata.normalize("NFD", s) if unicodedata.category(c) != "Mn"
    )


def formatar_lotacao(lotacao: Any) -> str:
    """
    Padroniza um nome de lotação para exibição.

    Regras
    ------
    1. Apara e converte para maiúsculas (acentos preservados).
    2. Hífens/sublinhados viram " - " e espaços múltiplos viram um só.
    3. Remove pontuação no final.

    Exemplo
    -------
    >>> formatar_lotacao("  ceac-aracaju. ")
    'CEAC - ARACAJU'
    """
    s = texto(lotacao).upper()
    s = re.sub(r"\s*[-_]+\s*", " - ", s)
    s = re.sub(r"\s+", " ", s).strip()
    s = re.sub(r"[.,;:!?]+$", "", s).strip()
    return s.strip(" -")


def chave_comparacao(s: Any) -> str:
    """Forma canônica para comparação: sem acentos, maiúsculas, só letras/dígitos e espaços."""
    base = sem_acentos(texto(s)).upper()
    base = re.sub(r"[^A-Z0-9]+", " ", base)
    return re.sub(r"\s+", " ", base).strip()
