# licencas/pipeline/urgencia.py
"""
Faixas de urgência: classificação, severidade e consolidação.

Faixas por dias até o início do gozo
------------------------------------
- < 0 e ainda dentro do período: em-gozo
- < 0 e período encerrado:       expirada
- 0..30:                         critica
- 31..60:                        alta
- 61..90:                        moderada
- > 90:                          baixa
- sem data de início:            indefinida

Severidade (para o "pior caso" do servidor e ordenação)
-------------------------------------------------------
critica > alta > moderada > baixa > em-gozo >= expirada > indefinida.
Servidor já em gozo tem baixa prioridade de alerta.
"""

from __future__ import annotations

from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence, TypeVar

from licencas.schemas import Urgencia

SEVERIDADE: Dict[Urgencia, int] = {
    Urgencia.CRITICA: 6,
    Urgencia.ALTA: 5,
    Urgencia.MODERADA: 4,
    Urgencia.BAIXA: 3,
    Urgencia.EM_GOZO: 2,
    Urgencia.EXPIRADA: 1,
    Urgencia.INDEFINIDA: 0,
}

URGENTES = (Urgencia.CRITICA, Urgencia.ALTA)

T = TypeVar("T")


def classificar_urgencia(inicio: Optional[date], fim: Optional[date], hoje: date) -> Urgencia:
    """
    Classifica a urgência de um evento.

    Parâmetros
    ----------
    inicio : Optional[date]
        Início do gozo; ausente resulta em `INDEFINIDA`.
    fim : Optional[date]
        Fim do gozo; usado apenas quando o início já passou.
    hoje : date
        Data de referência do lote.
    """
    if inicio is None:
        return Urgencia.INDEFINIDA
    dias = (inicio - hoje).days
    if dias < 0:
        if fim is not None and hoje <= fim:
            return Urgencia.EM_GOZO
        return Urgencia.EXPIRADA
    if dias <= 30:
        return Urgencia.CRITICA
    if dias <= 60:
        return Urgencia.ALTA
    if dias <= 90:
        return Urgencia.MODERADA
    return Urgencia.BAIXA


def severidade(u: Urgencia) -> int:
    return SEVERIDADE.get(u, 0)


def pior_urgencia(urgencias: Iterable[Urgencia]) -> Urgencia:
    """Urgência mais severa; `INDEFINIDA` quando não há nenhuma."""
    return max(urgencias, key=severidade, default=Urgencia.INDEFINIDA)


def e_urgente(u: Urgencia) -> bool:
    return u in URGENTES


def ordenar_por_urgencia(itens: Sequence[T], chave=lambda item: item.urgencia) -> List[T]:
    """
    Ordena itens do mais para o menos urgente (ordenação estável).

    `chave` extrai a urgência do item; por padrão lê `item.urgencia`. Para
    servidores agregados use `chave=lambda s: s.pior_urgencia`.
    """
    return sorted(itens, key=lambda item: -severidade(chave(item)))


def contar_por_urgencia(urgencias: Iterable[Urgencia]) -> Dict[str, int]:
    """Contagem por faixa; todas as faixas aparecem, inclusive com zero."""
    contagem = {u.value: 0 for u in Urgencia}
    for u in urgencias:
        contagem[u.value] += 1
    return contagem
