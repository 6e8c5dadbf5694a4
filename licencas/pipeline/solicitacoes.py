# licencas/pipeline/solicitacoes.py
"""
Validação de solicitações de gozo de licença-prêmio.

Propósito
---------
Conferir uma solicitação (início + quantidade de dias) contra o agregado do
servidor, devolvendo mensagens legíveis (pt-BR) para exibição, sem lançar
exceções.

Uso rápido
----------
    resultado = validar_solicitacao(agregado, "01/07/2025", 30, hoje)
    if not resultado.valida:
        ...  # exibir resultado.erros

Regras
------
Erros (tornam a solicitação inválida):
- quantidade de dias não positiva;
- data de início não interpretável;
- servidor sem saldo disponível;
- dias solicitados acima do saldo;
- sobreposição com um evento já registrado.

Avisos (não bloqueiam):
- início no passado;
- saldo calculado sobre períodos sintéticos (origem sem período aquisitivo).
"""

from __future__ import annotations

import math
from datetime import date, timedelta
from typing import Any, Callable, List, Optional

from pydantic import BaseModel, ConfigDict

from licencas.schemas import ServidorAgregado
from licencas.utils.datas import formatar_data, normalizar_data


class ResultadoSolicitacao(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    valida: bool
    erros: List[str] = []
    avisos: List[str] = []
    dias_disponiveis: int = 0
    dias_solicitados: int = 0
    fim_previsto: Optional[date] = None


def _quantidade_dias(dias: Any) -> int:
    """Quantidade solicitada; 0 quando não numérica (negativos são preservados)."""
    if isinstance(dias, bool):
        return 0
    if isinstance(dias, int):
        return dias
    if isinstance(dias, float):
        return int(dias) if math.isfinite(dias) else 0
    try:
        return int(str(dias).strip())
    except ValueError:
        return 0


def validar_solicitacao(
    agregado: ServidorAgregado,
    inicio: Any,
    dias: Any,
    hoje: date,
    normalizador: Callable[[Any], Optional[date]] = normalizar_data,
) -> ResultadoSolicitacao:
    """
    Valida uma solicitação de gozo.

    Parâmetros
    ----------
    agregado : ServidorAgregado
        Consolidação do servidor (saldo e eventos existentes).
    inicio : Any
        Data de início desejada (qualquer formato aceito pelo normalizador).
    dias : Any
        Quantidade de dias solicitada.
    hoje : date
        Data de referência.

    Retorna
    -------
    ResultadoSolicitacao
        `valida` é True quando não há erros; avisos não afetam a validade.
    """
    erros: List[str] = []
    avisos: List[str] = []

    quantidade = _quantidade_dias(dias)
    disponiveis = agregado.total_dias_disponiveis
    data_inicio = normalizador(inicio)

    if quantidade <= 0:
        erros.append("A quantidade de dias deve ser maior que zero.")
    if data_inicio is None:
        erros.append("Data de início inválida.")
    if disponiveis <= 0:
        erros.append("Servidor sem saldo de licença-prêmio disponível.")
    elif quantidade > disponiveis:
        erros.append(
            f"Dias solicitados ({quantidade}) excedem o saldo disponível ({disponiveis})."
        )

    fim_previsto: Optional[date] = None
    if data_inicio is not None and quantidade > 0:
        try:
            fim_previsto = data_inicio + timedelta(days=quantidade - 1)
        except OverflowError:
            fim_previsto = date.max
        for evento in agregado.eventos:
            if evento.inicio is None or evento.fim is None:
                continue
            if evento.inicio <= fim_previsto and data_inicio <= evento.fim:
                erros.append(
                    "Período solicitado se sobrepõe ao gozo de "
                    f"{formatar_data(evento.inicio)} a {formatar_data(evento.fim)}."
                )
        if data_inicio < hoje:
            avisos.append("Data de início anterior à data de referência.")

    if agregado.periodos_sinteticos:
        avisos.append("Saldo calculado sobre períodos provisórios (sem período aquisitivo na origem).")

    return ResultadoSolicitacao(
        valida=not erros,
        erros=erros,
        avisos=avisos,
        dias_disponiveis=disponiveis,
        dias_solicitados=max(0, quantidade),
        fim_previsto=fim_previsto,
    )
