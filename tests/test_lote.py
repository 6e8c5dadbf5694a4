"""Testes do processamento em lote."""

import logging
from datetime import date

import pytest

from licencas.pipeline import lote
from licencas.pipeline.lote import (
    agrupar_por_servidor,
    contar_proximas_licencas,
    contar_status_servidores,
    processar_lote,
    resumo_lote,
    situacao_servidor,
)
from licencas.schemas import Urgencia

LINHAS = [
    {"NOME": "Maria da Silva", "CPF": "111", "CARGO": "Analista", "LOTACAO": "GEFIS", "A_PARTIR": "01/06/2025", "DIAS": 30},
    {"NOME": "João Souza", "UNIDADE": "Gerência de TI", "A_PARTIR": "30/12/1899"},
    {"NOME": "Maria da Silva", "CPF": "111", "LOTACAO": "CEAC - ARACAJU", "A_PARTIR": "01/09/2025", "DIAS": 30},
    {"CPF": "999", "A_PARTIR": "01/06/2025"},
    {"NOME": "joão souza", "PERIODO": "jan/2025 a fev/2025"},
]


class TestAgruparPorServidor:
    def test_agrupa_por_cpf_e_por_nome(self):
        servidores = agrupar_por_servidor(LINHAS)

        assert [s["nome"] for s in servidores] == ["Maria da Silva", "João Souza"]
        maria, joao = servidores
        assert len(maria["licencas"]) == 2
        assert maria["cargo"] == "Analista"
        assert len(joao["licencas"]) == 1
        assert joao["unidade"] == "Gerência de TI"

    def test_ultima_lotacao_vence(self):
        maria = agrupar_por_servidor(LINHAS)[0]
        assert maria["lotacao"] == "CEAC - ARACAJU"

    def test_linha_sem_nome_e_ignorada(self, caplog):
        with caplog.at_level(logging.WARNING):
            servidores = agrupar_por_servidor([{"CPF": "999", "A_PARTIR": "01/06/2025"}, "lixo"])
        assert servidores == []
        assert "sem nome" in caplog.text

    def test_marca_de_celula_vazia_nao_gera_evento(self):
        servidores = agrupar_por_servidor([{"NOME": "Ana", "A_PARTIR": "30/12/1899"}])
        assert servidores[0]["licencas"] == []

    def test_entrada_vazia(self):
        assert agrupar_por_servidor([]) == []
        assert agrupar_por_servidor(None) == []


class TestProcessarLote:
    def test_agrega_na_ordem_de_entrada(self):
        servidores = agrupar_por_servidor(LINHAS)
        agregados = processar_lote(servidores, hoje=date(2025, 5, 1))

        assert [a.nome for a in agregados] == ["Maria da Silva", "João Souza"]
        assert agregados[0].lotacao == "CEAC - ARACAJU"
        assert agregados[0].total_dias_gozados == 60
        assert agregados[1].lotacao == "GERÊNCIA DE TI"
        assert agregados[1].eventos[0].fim == date(2025, 2, 28)

    def test_paralelo_preserva_ordem(self):
        servidores = [{"NOME": f"Servidor {i}", "licencas": [{"A_PARTIR": "01/06/2025"}]} for i in range(20)]
        sequencial = processar_lote(servidores, hoje=date(2025, 5, 1), max_workers=1)
        paralelo = processar_lote(servidores, hoje=date(2025, 5, 1), max_workers=4)
        assert paralelo == sequencial
        assert [a.nome for a in paralelo] == [f"Servidor {i}" for i in range(20)]

    @pytest.mark.parametrize("entrada", [None, "servidores", {"NOME": "Ana"}, 42])
    def test_entrada_que_nao_e_lista(self, entrada, caplog):
        with caplog.at_level(logging.ERROR):
            assert processar_lote(entrada, hoje=date(2025, 5, 1)) == []
        assert "lote inválido" in caplog.text

    def test_itens_invalidos_sao_ignorados(self, caplog):
        with caplog.at_level(logging.WARNING):
            agregados = processar_lote([{"NOME": "Ana"}, "lixo", None], hoje=date(2025, 5, 1))
        assert [a.nome for a in agregados] == ["Ana"]
        assert "ignorado" in caplog.text

    def test_falha_em_um_servidor_nao_interrompe_o_lote(self, monkeypatch, caplog):
        original = lote.AgregadorServidores.agregar

        def agregar(self, servidor, eventos_brutos=None):
            if servidor.get("NOME") == "Falha":
                raise RuntimeError("erro inesperado")
            return original(self, servidor, eventos_brutos)

        monkeypatch.setattr(lote.AgregadorServidores, "agregar", agregar)
        with caplog.at_level(logging.ERROR):
            agregados = processar_lote([{"NOME": "Ana"}, {"NOME": "Falha"}, {"NOME": "Bia"}], hoje=date(2025, 5, 1))

        assert [a.nome for a in agregados] == ["Ana", "Bia"]
        assert "falha ao agregar" in caplog.text

    def test_hoje_padrao(self, monkeypatch):
        monkeypatch.setattr(lote.config, "hoje_referencia", lambda tz=None: date(2025, 5, 1))
        agregado = processar_lote([{"NOME": "Ana", "licencas": [{"A_PARTIR": "11/05/2025"}]}])[0]
        assert agregado.pior_urgencia == Urgencia.CRITICA


class TestResumoLote:
    def test_totais(self):
        agregados = processar_lote(
            [
                {"NOME": "Ana", "licencas": [{"A_PARTIR": "10/05/2025", "DIAS": 30}]},
                {"NOME": "Bia", "licencas": [{"A_PARTIR": "01/01/2026", "DIAS": 60, "AQUISITIVO_INICIO": "01/01/2020"}]},
                {"NOME": "Caio"},
            ],
            hoje=date(2025, 5, 1),
        )
        resumo = resumo_lote(agregados)

        assert resumo["total_servidores"] == 3
        assert resumo["total_eventos"] == 2
        assert resumo["total_dias_gozados"] == 90
        assert resumo["servidores_urgentes"] == 1
        assert resumo["servidores_sinteticos"] == 2
        assert resumo["por_urgencia"]["critica"] == 1
        assert resumo["por_urgencia"]["baixa"] == 1
        assert resumo["por_urgencia"]["indefinida"] == 1

    def test_lote_vazio(self):
        resumo = resumo_lote([])
        assert resumo["total_servidores"] == 0
        assert sum(resumo["por_urgencia"].values()) == 0

    def test_situacao_dos_servidores(self):
        agregados = processar_lote(
            [
                {"NOME": "Ana", "licencas": [{"A_PARTIR": "20/04/2025", "TERMINO": "10/05/2025"}, {"A_PARTIR": "01/09/2025"}]},
                {"NOME": "Bia", "licencas": [{"A_PARTIR": "01/01/2024"}, {"A_PARTIR": "01/09/2025"}]},
                {"NOME": "Caio", "licencas": [{"A_PARTIR": "01/01/2024"}]},
                {"NOME": "Davi"},
            ],
            hoje=date(2025, 5, 1),
        )

        assert [situacao_servidor(a) for a in agregados] == ["em_andamento", "agendadas", "concluidas", "nao_agendadas"]
        assert resumo_lote(agregados)["por_status"] == {
            "em_andamento": 1,
            "agendadas": 1,
            "concluidas": 1,
            "nao_agendadas": 1,
        }

    def test_proximas_licencas_contam_eventos(self):
        agregados = processar_lote(
            [
                {"NOME": "Ana", "licencas": [{"A_PARTIR": "10/05/2025"}, {"A_PARTIR": "15/06/2025"}]},
                {"NOME": "Bia", "licencas": [{"A_PARTIR": "31/05/2025"}, {"A_PARTIR": "20/07/2025"}]},
                {"NOME": "Caio", "licencas": [{"A_PARTIR": "01/01/2025"}, {"A_PARTIR": "01/01/2026"}]},
            ],
            hoje=date(2025, 5, 1),
        )

        assert contar_proximas_licencas(agregados) == {"dias_30": 2, "dias_60": 1, "dias_90": 1}
        assert resumo_lote(agregados)["proximas"] == {"dias_30": 2, "dias_60": 1, "dias_90": 1}

    def test_contagens_do_lote_vazio(self):
        resumo = resumo_lote([])
        assert resumo["por_status"] == {"em_andamento": 0, "agendadas": 0, "concluidas": 0, "nao_agendadas": 0}
        assert resumo["proximas"] == {"dias_30": 0, "dias_60": 0, "dias_90": 0}
        assert contar_status_servidores([]) == resumo["por_status"]


class TestLinhasComVariosPeriodos:
    def test_periodo_com_varios_intervalos(self):
        servidores = agrupar_por_servidor(
            [{"Nome": "Ana", "Periodo": "jan/2025 a fev/2025; jun/2025 a jul/2025"}]
        )
        agregado = processar_lote(servidores, hoje=date(2025, 5, 1))[0]

        assert agregado.total_eventos == 2
        assert [e.fim for e in agregado.eventos] == [date(2025, 2, 28), date(2025, 7, 31)]
        assert agregado.total_dias_gozados == 59 + 61
