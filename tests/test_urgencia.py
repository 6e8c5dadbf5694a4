"""Testes das faixas de urgência."""

from datetime import date, timedelta

import pytest

from licencas.pipeline.urgencia import (
    classificar_urgencia,
    contar_por_urgencia,
    e_urgente,
    ordenar_por_urgencia,
    pior_urgencia,
    severidade,
)
from licencas.schemas import Urgencia

HOJE = date(2025, 5, 1)


class TestClassificarUrgencia:
    @pytest.mark.parametrize(
        "dias, esperado",
        [
            (0, Urgencia.CRITICA),
            (10, Urgencia.CRITICA),
            (30, Urgencia.CRITICA),
            (31, Urgencia.ALTA),
            (60, Urgencia.ALTA),
            (61, Urgencia.MODERADA),
            (90, Urgencia.MODERADA),
            (91, Urgencia.BAIXA),
            (400, Urgencia.BAIXA),
        ],
    )
    def test_limites_das_faixas(self, dias, esperado):
        inicio = HOJE + timedelta(days=dias)
        assert classificar_urgencia(inicio, inicio + timedelta(days=29), HOJE) == esperado

    def test_ja_iniciada_e_em_andamento(self):
        assert classificar_urgencia(HOJE - timedelta(days=5), HOJE + timedelta(days=5), HOJE) == Urgencia.EM_GOZO
        assert classificar_urgencia(HOJE - timedelta(days=5), HOJE, HOJE) == Urgencia.EM_GOZO

    def test_encerrada(self):
        assert classificar_urgencia(HOJE - timedelta(days=40), HOJE - timedelta(days=10), HOJE) == Urgencia.EXPIRADA
        assert classificar_urgencia(HOJE - timedelta(days=1), None, HOJE) == Urgencia.EXPIRADA

    def test_sem_inicio(self):
        assert classificar_urgencia(None, None, HOJE) == Urgencia.INDEFINIDA


class TestSeveridade:
    def test_ordem(self):
        ordem = [
            Urgencia.CRITICA,
            Urgencia.ALTA,
            Urgencia.MODERADA,
            Urgencia.BAIXA,
            Urgencia.EM_GOZO,
            Urgencia.EXPIRADA,
            Urgencia.INDEFINIDA,
        ]
        assert [severidade(u) for u in ordem] == sorted((severidade(u) for u in ordem), reverse=True)

    def test_pior_urgencia(self):
        assert pior_urgencia([Urgencia.BAIXA, Urgencia.ALTA, Urgencia.EM_GOZO]) == Urgencia.ALTA
        assert pior_urgencia([Urgencia.EM_GOZO, Urgencia.BAIXA]) == Urgencia.BAIXA
        assert pior_urgencia([Urgencia.EXPIRADA, Urgencia.INDEFINIDA]) == Urgencia.EXPIRADA

    def test_pior_urgencia_sem_eventos(self):
        assert pior_urgencia([]) == Urgencia.INDEFINIDA

    def test_e_urgente(self):
        assert e_urgente(Urgencia.CRITICA)
        assert e_urgente(Urgencia.ALTA)
        assert not e_urgente(Urgencia.MODERADA)
        assert not e_urgente(Urgencia.EM_GOZO)


class TestOrdenacaoEContagem:
    def test_ordenar_estavel(self):
        itens = [
            ("a", Urgencia.INDEFINIDA),
            ("b", Urgencia.BAIXA),
            ("c", Urgencia.CRITICA),
            ("d", Urgencia.BAIXA),
        ]
        ordenados = ordenar_por_urgencia(itens, chave=lambda item: item[1])
        assert [nome for nome, _ in ordenados] == ["c", "b", "d", "a"]

    def test_contar_inclui_faixas_zeradas(self):
        contagem = contar_por_urgencia([Urgencia.ALTA, Urgencia.ALTA, Urgencia.BAIXA])
        assert contagem["alta"] == 2
        assert contagem["baixa"] == 1
        assert contagem["critica"] == 0
        assert set(contagem) == {u.value for u in Urgencia}
