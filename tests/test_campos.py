"""Testes dos helpers de leitura de campos."""

import pytest

from licencas.utils.campos import (
    chave_comparacao,
    extrair_inteiro,
    formatar_lotacao,
    inteiro_opcional,
    primeiro_valor,
    texto,
    vazio,
)


class TestExtrairInteiro:
    @pytest.mark.parametrize(
        "valor, esperado",
        [
            (30, 30),
            (30.0, 30),
            ("30", 30),
            ("30(DIAS)", 30),
            ("(0) DIAS", 0),
            ("0(ZERO)", 0),
            ("45 (DIAS)", 45),
        ],
    )
    def test_valores_validos(self, valor, esperado):
        assert extrair_inteiro(valor) == esperado

    @pytest.mark.parametrize("valor", [None, "", "sem saldo", -5, float("nan"), float("inf"), True])
    def test_valores_malformados_viram_zero(self, valor):
        assert extrair_inteiro(valor) == 0

    @pytest.mark.parametrize("valor", ["-5", " -10 ", "-5(DIAS)"])
    def test_negativo_em_texto_vira_zero(self, valor):
        assert extrair_inteiro(valor) == 0
        assert inteiro_opcional(valor) is None

    def test_hifen_colado_a_palavra_nao_e_sinal(self):
        assert extrair_inteiro("DIAS-30") == 30

    def test_default(self):
        assert extrair_inteiro("abc", default=7) == 7

    def test_inteiro_opcional(self):
        assert inteiro_opcional("x") is None
        assert inteiro_opcional(None) is None
        assert inteiro_opcional("0") == 0
        assert inteiro_opcional("20 dias") == 20


class TestPrimeiroValor:
    def test_ignora_vazios(self):
        registro = {"GOZO": "", "gozo": None, "diasGozados": 30}
        assert primeiro_valor(registro, ("GOZO", "gozo", "diasGozados")) == 30

    def test_ignora_nan(self):
        assert primeiro_valor({"DIAS": float("nan"), "dias": 10}, ("DIAS", "dias")) == 10

    def test_ausente(self):
        assert primeiro_valor({}, ("A", "B")) is None

    def test_zero_nao_e_vazio(self):
        assert not vazio(0)
        assert primeiro_valor({"DIAS": 0}, ("DIAS",)) == 0

    @pytest.mark.parametrize("chave", ["Inicio", "a_partir", "Data Início", "INICIO ", "início"])
    def test_chave_com_grafia_diferente(self, chave):
        aliases = ("A_PARTIR", "INICIO", "data_inicio")
        assert primeiro_valor({chave: "01/06/2025"}, aliases) == "01/06/2025"

    def test_chave_exata_tem_preferencia(self):
        registro = {"inicio": "02/06/2025", "INICIO": "01/06/2025"}
        assert primeiro_valor(registro, ("INICIO",)) == "01/06/2025"

    def test_chave_parecida_vazia_e_ignorada(self):
        assert primeiro_valor({"Inicio": "", "A_PARTIR ": "01/06/2025"}, ("INICIO", "A_PARTIR")) == "01/06/2025"


class TestTexto:
    def test_converte_e_apara(self):
        assert texto("  Maria ") == "Maria"
        assert texto(123) == "123"
        assert texto(None) == ""


class TestLotacao:
    def test_formatacao_de_exibicao(self):
        assert formatar_lotacao("  ceac-aracaju. ") == "CEAC - ARACAJU"
        assert formatar_lotacao("gerência   de  ti") == "GERÊNCIA DE TI"
        assert formatar_lotacao("DIRETORIA_FINANCEIRA;") == "DIRETORIA - FINANCEIRA"

    def test_vazia(self):
        assert formatar_lotacao(None) == ""
        assert formatar_lotacao(" - ") == ""

    def test_chave_de_comparacao(self):
        assert chave_comparacao("Secretaria de Estado da Fazenda") == "SECRETARIA DE ESTADO DA FAZENDA"
        assert chave_comparacao("  Órgão ") == "ORGAO"
        assert chave_comparacao("sefaz.") == "SEFAZ"
