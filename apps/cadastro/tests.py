import importlib
import json
import tempfile
from decimal import Decimal
from io import StringIO
from pathlib import Path
from unittest import mock

from django.apps import apps as django_apps
from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.core.management import CommandError, call_command
from django.db import DatabaseError
from django.test import SimpleTestCase, TestCase

from .horarios import (
    REGRAS,
    contar_horarios,
    extrair_horarios,
    extrair_token,
    migrar_horarios,
    parse_horarios,
    resolver_dia_semana,
    reverter_horarios,
)
from .migracao import migrar_funcionarios, reverter_funcionarios
from .models import Loja, Funcionario, Servico

EXEMPLO = {
    "tuesday": ["08:00", "10:00", "16:00", "19:30"],
    "saturday": ["10:00", "14:00", "18:00"],
    "thursday": ["08:00", "10:00", "12:00", "19:30"],
}


class ResolverDiaSemanaTests(SimpleTestCase):
    def test_nomes_em_ingles(self):
        self.assertEqual(resolver_dia_semana("sunday"), 0)
        self.assertEqual(resolver_dia_semana("Tuesday"), 2)
        self.assertEqual(resolver_dia_semana("SATURDAY"), 6)

    def test_nomes_em_portugues(self):
        self.assertEqual(resolver_dia_semana("domingo"), 0)
        self.assertEqual(resolver_dia_semana("segunda"), 1)
        self.assertEqual(resolver_dia_semana("terça"), 2)
        self.assertEqual(resolver_dia_semana("Terça-feira"), 2)
        self.assertEqual(resolver_dia_semana("sábado"), 6)
        self.assertEqual(resolver_dia_semana("sabado"), 6)

    def test_abreviacoes(self):
        self.assertEqual(resolver_dia_semana("seg"), 1)
        self.assertEqual(resolver_dia_semana("qui"), 4)
        self.assertEqual(resolver_dia_semana("2a"), 1)
        self.assertEqual(resolver_dia_semana("6ª"), 5)

    def test_dia_desconhecido(self):
        self.assertIsNone(resolver_dia_semana("feriado"))
        self.assertIsNone(resolver_dia_semana("8a"))
        self.assertIsNone(resolver_dia_semana(None))

    def test_ordinais_seguem_o_uso_brasileiro(self):
        # Os seeds antigos liam "2a" como tuesday e aceitavam "1a"/"7a".
        self.assertEqual(resolver_dia_semana("2a"), resolver_dia_semana("segunda"))
        self.assertEqual(resolver_dia_semana("3ª"), resolver_dia_semana("terça"))
        self.assertEqual(resolver_dia_semana("6a"), resolver_dia_semana("sexta"))
        self.assertIsNone(resolver_dia_semana("1a"))
        self.assertIsNone(resolver_dia_semana("7a"))
        self.assertEqual(parse_horarios(["2a - 8:00"]), {"monday": ["08:00"]})


class RegrasHorarioTests(SimpleTestCase):
    def test_ordem_das_regras(self):
        self.assertEqual(
            [r.nome for r in REGRAS],
            ["hora_simples", "intervalo_com_h", "hora_com_h", "intervalo_com_as"],
        )

    def test_hora_simples(self):
        self.assertEqual(extrair_token("8:00"), ["08:00"])
        self.assertEqual(extrair_token("09:00"), ["09:00"])
        self.assertEqual(extrair_token("19:30."), ["19:30"])

    def test_hora_com_h(self):
        self.assertEqual(extrair_token("6h30"), ["06:30"])

    def test_intervalo_com_h_emite_as_duas_pontas(self):
        self.assertEqual(extrair_token("6h30 às 7h30"), ["06:30", "07:30"])

    def test_intervalo_com_as_emite_so_o_inicio(self):
        self.assertEqual(extrair_token("16:00 às 20:00 horas horário do Brasil"), ["16:00"])

    def test_minuto_nao_e_validado(self):
        self.assertEqual(extrair_token("8:75"), ["08:75"])

    def test_token_sem_horario(self):
        self.assertEqual(extrair_token("a combinar"), [])


class ExtrairHorariosTests(SimpleTestCase):
    def test_linha_com_virgulas_e_conjuncao(self):
        horarios = extrair_horarios("2a - 8:00, 10:00, 16:00 e 19:30")
        self.assertEqual(horarios, ["08:00", "10:00", "16:00", "19:30"])

    def test_linha_com_dez_horarios(self):
        linha = "6a - 08:00, 09:00, 10:00, 11:00, 15:00, 16:00, 17:00, 18:00, 19:00, 21:00"
        self.assertEqual(
            extrair_horarios(linha),
            ["08:00", "09:00", "10:00", "11:00", "15:00", "16:00", "17:00", "18:00", "19:00", "21:00"],
        )

    def test_remove_repetidos_e_ordena(self):
        self.assertEqual(extrair_horarios("3a - 15:00, 10:00 e 10:00"), ["10:00", "15:00"])

    def test_linha_malformada(self):
        self.assertEqual(extrair_horarios("invalid line"), [])
        self.assertEqual(extrair_horarios(""), [])

    def test_parse_horarios_monta_formato_legado(self):
        legado = parse_horarios([
            "2a - 8:00 e 09:00, 19:00 e 20:00.",
            "sábado - 6h30 às 7h30",
            "feriado - 10:00",
            "invalid line",
            "segunda-feira - 21:00",
        ])
        self.assertEqual(list(legado), ["monday", "saturday"])
        self.assertEqual(legado["monday"], ["08:00", "09:00", "19:00", "20:00", "21:00"])
        self.assertEqual(legado["saturday"], ["06:30", "07:30"])

    def test_parse_horarios_avisa_dia_desconhecido(self):
        with self.assertLogs("apps.cadastro.horarios", level="WARNING") as logs:
            self.assertEqual(parse_horarios(["feriado - 10:00"]), {})
        self.assertIn("feriado", logs.output[0])


class MigrarHorariosTests(SimpleTestCase):
    def test_exemplo_gera_um_slot_por_horario(self):
        migrado = migrar_horarios(EXEMPLO)
        self.assertEqual(len(migrado["timeSlots"]), 11)
        self.assertEqual(migrado["timeOffs"], [])

        primeiro = migrado["timeSlots"][0]
        self.assertEqual(primeiro, {
            "id": "slot_2_0800_0",
            "dayOfWeek": 2,
            "startTime": "08:00",
            "endTime": "09:00",
            "isRecurring": True,
            "isActive": True,
            "specificDate": None,
        })
        self.assertEqual([s["dayOfWeek"] for s in migrado["timeSlots"]], [2] * 4 + [6] * 3 + [4] * 4)

    def test_quantidade_igual_soma_dos_dias_reconhecidos(self):
        legado = {"monday": ["08:00", "09:00"], "Sexta": ["10:00"], "feriado": ["11:00"]}
        with self.assertLogs("apps.cadastro.horarios", level="WARNING"):
            migrado = migrar_horarios(legado)
        self.assertEqual(len(migrado["timeSlots"]), 3)
        self.assertEqual(contar_horarios(legado), 3)

    def test_hora_fim_soma_uma_hora_sem_virar_o_dia(self):
        migrado = migrar_horarios({"friday": ["19:30", "23:30"]})
        fins = [s["endTime"] for s in migrado["timeSlots"]]
        self.assertEqual(fins, ["20:30", "24:30"])
        for slot in migrado["timeSlots"]:
            h_ini, m_ini = slot["startTime"].split(":")
            h_fim, m_fim = slot["endTime"].split(":")
            self.assertEqual(m_ini, m_fim)
            self.assertEqual(int(h_ini) + 1, int(h_fim))

    def test_ids_distintos_para_horarios_repetidos(self):
        migrado = migrar_horarios({"monday": ["08:00", "08:00"]})
        ids = [s["id"] for s in migrado["timeSlots"]]
        self.assertEqual(ids, ["slot_1_0800_0", "slot_1_0800_1"])

    def test_deterministico(self):
        self.assertEqual(migrar_horarios(EXEMPLO), migrar_horarios(dict(EXEMPLO)))

    def test_idempotente(self):
        uma_vez = migrar_horarios(EXEMPLO)
        self.assertEqual(migrar_horarios(uma_vez), uma_vez)

    def test_entrada_vazia_volta_sem_alteracao(self):
        self.assertEqual(migrar_horarios({}), {})
        self.assertIsNone(migrar_horarios(None))

    def test_valor_que_nao_e_lista(self):
        with self.assertRaises(TypeError):
            migrar_horarios({"monday": "08:00"})

    def test_reverter_e_o_inverso(self):
        self.assertEqual(reverter_horarios(migrar_horarios(EXEMPLO)), EXEMPLO)

    def test_reverter_formato_legado_nao_altera(self):
        self.assertEqual(reverter_horarios(EXEMPLO), EXEMPLO)

    def test_reverter_dia_invalido(self):
        with self.assertRaises(ValueError):
            reverter_horarios({"timeSlots": [{"id": "x", "dayOfWeek": 9, "startTime": "08:00"}]})


class BaseLojaTestCase(TestCase):
    def setUp(self):
        User = get_user_model()
        self.owner = User.objects.create_user(
            email="owner@example.com", password="123", is_owner=True
        )
        self.loja = Loja.objects.create(owner=self.owner, nome="Loja Teste")

    def criar_funcionario(self, nome, horarios):
        return Funcionario.objects.create(loja=self.loja, nome=nome, horarios_trabalho=horarios)


class FuncionarioModelTests(BaseLojaTestCase):
    def test_slug_unico_por_loja(self):
        a = self.criar_funcionario("Ana", None)
        b = self.criar_funcionario("Ana", None)
        self.assertEqual(a.slug, "ana")
        self.assertEqual(b.slug, "ana-2")

    def test_clean_rejeita_formato_invalido(self):
        with self.assertRaises(ValidationError):
            Funcionario(loja=self.loja, nome="X", horarios_trabalho=["08:00"]).clean()
        with self.assertRaises(ValidationError):
            Funcionario(loja=self.loja, nome="X", horarios_trabalho={"monday": "08:00"}).clean()
        with self.assertRaises(ValidationError):
            Funcionario(loja=self.loja, nome="X", horarios_trabalho={"timeSlots": {}}).clean()

    def test_clean_aceita_os_dois_formatos(self):
        Funcionario(loja=self.loja, nome="X", horarios_trabalho=EXEMPLO).clean()
        Funcionario(loja=self.loja, nome="X", horarios_trabalho=migrar_horarios(EXEMPLO)).clean()

    def test_total_horarios(self):
        func = self.criar_funcionario("Bob", EXEMPLO)
        self.assertEqual(func.total_horarios, 11)


class MigracaoEmLoteTests(BaseLojaTestCase):
    def _todos(self):
        return Funcionario.objects.filter(horarios_trabalho__isnull=False).order_by("pk")

    def test_migra_e_conta(self):
        func = self.criar_funcionario("Bob", EXEMPLO)
        self.criar_funcionario("Sem horário", None)
        self.criar_funcionario("Vazio", {})

        relatorio = migrar_funcionarios(self._todos())

        self.assertEqual((relatorio.migrados, relatorio.ignorados, relatorio.falhas), (1, 1, 0))
        self.assertEqual(relatorio.total, 2)
        func.refresh_from_db()
        self.assertEqual(func.horarios_trabalho, migrar_horarios(EXEMPLO))

    def test_ja_migrado_e_ignorado(self):
        novo = migrar_horarios(EXEMPLO)
        func = self.criar_funcionario("Bob", novo)

        relatorio = migrar_funcionarios(self._todos())

        self.assertEqual(relatorio.migrados, 0)
        self.assertEqual(relatorio.ignorados, 1)
        func.refresh_from_db()
        self.assertEqual(func.horarios_trabalho, novo)

    def test_falha_em_um_registro_nao_interrompe_o_lote(self):
        ruim = self.criar_funcionario("Ruim", {"monday": "08:00"})
        bom = self.criar_funcionario("Bom", {"monday": ["09:00"]})

        with self.assertLogs("apps.cadastro.migracao", level="ERROR") as logs:
            relatorio = migrar_funcionarios(self._todos())

        self.assertEqual((relatorio.migrados, relatorio.falhas), (1, 1))
        self.assertIn("Ruim", logs.output[0])
        ruim.refresh_from_db()
        bom.refresh_from_db()
        self.assertEqual(ruim.horarios_trabalho, {"monday": "08:00"})
        self.assertEqual(bom.horarios_trabalho["timeSlots"][0]["id"], "slot_1_0900_0")

    def test_migrar_duas_vezes(self):
        func = self.criar_funcionario("Bob", EXEMPLO)
        migrar_funcionarios(self._todos())
        func.refresh_from_db()
        primeira = func.horarios_trabalho

        relatorio = migrar_funcionarios(self._todos())
        func.refresh_from_db()
        self.assertEqual(relatorio.ignorados, 1)
        self.assertEqual(func.horarios_trabalho, primeira)

    def test_reverter(self):
        func = self.criar_funcionario("Bob", migrar_horarios(EXEMPLO))
        self.criar_funcionario("Legado", {"monday": ["09:00"]})

        relatorio = reverter_funcionarios(self._todos())

        self.assertEqual((relatorio.migrados, relatorio.ignorados), (1, 1))
        func.refresh_from_db()
        self.assertEqual(func.horarios_trabalho, EXEMPLO)


class ComandoHorariosTrabalhoTests(BaseLojaTestCase):
    def _call(self, *args):
        out = StringIO()
        call_command("horarios_trabalho", *args, stdout=out)
        return out.getvalue()

    def test_sem_acao_mostra_uso(self):
        self.criar_funcionario("Bob", EXEMPLO)
        saida = self._call()
        self.assertIn("Uso:", saida)
        self.assertEqual(Funcionario.objects.get().horarios_trabalho, EXEMPLO)

    def test_acao_desconhecida_mostra_uso(self):
        self.assertIn("Comandos disponíveis", self._call("apagar"))

    def test_test_imprime_antes_e_depois(self):
        saida = self._call("test")
        self.assertIn("Formato antigo", saida)
        self.assertIn("slot_2_0800_0", saida)
        self.assertIn("Total de horários: 11", saida)

    def test_migrate(self):
        self.criar_funcionario("Bob", EXEMPLO)
        self.criar_funcionario("Já migrado", migrar_horarios({"monday": ["08:00"]}))

        saida = self._call("migrate")

        self.assertIn("Encontrados 2 funcionários", saida)
        self.assertIn("Migrados: 1", saida)
        self.assertIn("Ignorados: 1", saida)
        self.assertIn("Total processados: 2", saida)

    def test_rollback(self):
        func = self.criar_funcionario("Bob", EXEMPLO)
        self._call("migrate")
        saida = self._call("rollback")

        self.assertIn("Revertidos: 1", saida)
        func.refresh_from_db()
        self.assertEqual(func.horarios_trabalho, EXEMPLO)

    def test_erro_ao_ler_funcionarios_e_fatal(self):
        alvo = "apps.cadastro.management.commands.horarios_trabalho.Funcionario"
        with mock.patch(alvo) as funcionario_mock:
            funcionario_mock.objects.filter.side_effect = DatabaseError("sem conexão")
            with self.assertRaises(CommandError):
                self._call("migrate")


class SeedProfissionaisTests(TestCase):
    def setUp(self):
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.arquivo = Path(tmp.name) / "profissionais.json"
        self.arquivo.write_text(json.dumps([
            {
                "nome": "Ana Júlia Souza",
                "contato": "+55 85 99999-0000",
                "convite": "Sim",
                "horarios": ["2a - 8:00, 10:00 e 19:30", "sábado - 6h30 às 7h30"],
            },
            {"nome": "Bruno Lima", "convite": "Não", "horarios": ["3a - 10:00"]},
            {"nome": "Carla", "horarios": ["invalid line"]},
        ]), encoding="utf-8")

    def _seed(self, **opcoes):
        out, err = StringIO(), StringIO()
        call_command(
            "seed_profissionais", str(self.arquivo),
            loja="clinica-teste", dominio_email="exemplo.com",
            stdout=out, stderr=err, **opcoes,
        )
        return out.getvalue()

    def test_cria_loja_e_profissionais(self):
        saida = self._seed(servico="Sessão", preco=Decimal("250"))

        loja = Loja.objects.get(slug="clinica-teste")
        self.assertTrue(loja.owner.is_owner)
        self.assertEqual(loja.owner.email, "contato@exemplo.com")

        func = Funcionario.objects.get()
        self.assertEqual(func.nome, "Ana Júlia Souza")
        self.assertEqual(func.email, "ana.julia.souza@exemplo.com")
        self.assertEqual(func.telefone, "+5585999990000")
        self.assertEqual(func.horarios_trabalho, {
            "monday": ["08:00", "10:00", "19:30"],
            "saturday": ["06:30", "07:30"],
        })
        self.assertTrue(func.user.check_password("Mudar@123"))

        servico = Servico.objects.get()
        self.assertEqual(list(servico.profissionais.all()), [func])
        self.assertIn("Profissionais pulados: 2", saida)

    def test_rodar_duas_vezes_nao_duplica(self):
        self._seed()
        self._seed()
        self.assertEqual(Loja.objects.count(), 1)
        self.assertEqual(Funcionario.objects.count(), 1)

    def test_normalizar(self):
        self._seed(normalizar=True)
        horarios = Funcionario.objects.get().horarios_trabalho
        self.assertEqual(len(horarios["timeSlots"]), 5)
        self.assertEqual(horarios["timeSlots"][0]["id"], "slot_1_0800_0")

    def test_arquivo_inexistente(self):
        with self.assertRaises(CommandError):
            call_command("seed_profissionais", "/nao/existe.json", loja="x", stdout=StringIO())

    def _escrever(self, profissionais):
        self.arquivo.write_text(json.dumps(profissionais), encoding="utf-8")

    def test_owner_sem_senha_utilizavel(self):
        self._seed()
        owner = Loja.objects.get(slug="clinica-teste").owner
        self.assertFalse(owner.has_usable_password())

    def test_email_remove_hifen_do_nome(self):
        self._escrever([{"nome": "Ana-Maria Lopes", "horarios": ["3a - 10:00"]}])
        self._seed()
        self.assertEqual(Funcionario.objects.get().email, "anamaria.lopes@exemplo.com")

    def test_nomes_que_geram_o_mesmo_email(self):
        self._escrever([
            {"nome": "Ana Souza", "horarios": ["2a - 8:00"]},
            {"nome": "Ana Souzá", "horarios": ["3a - 9:00"]},
        ])
        saida = self._seed()

        emails = sorted(Funcionario.objects.values_list("email", flat=True))
        self.assertEqual(emails, ["ana.souza2@exemplo.com", "ana.souza@exemplo.com"])
        self.assertIn("Profissionais salvos: 2", saida)

        # rodar de novo reaproveita os mesmos usuários
        self._seed()
        self.assertEqual(Funcionario.objects.count(), 2)
        self.assertEqual(get_user_model().objects.filter(email__startswith="ana.souza").count(), 2)


class MigracaoDeDadosTests(BaseLojaTestCase):
    """RunPython da 0002 aplicado sobre registros existentes."""

    def setUp(self):
        super().setUp()
        self.migracao = importlib.import_module("apps.cadastro.migrations.0002_normalizar_horarios_trabalho")

    def test_normalizar_e_reverter(self):
        func = self.criar_funcionario("Bob", EXEMPLO)
        ja_migrado = self.criar_funcionario("Carla", migrar_horarios({"monday": ["08:00"]}))
        sem_horario = self.criar_funcionario("Davi", None)

        self.migracao.normalizar(django_apps, None)

        func.refresh_from_db()
        self.assertEqual(func.horarios_trabalho, migrar_horarios(EXEMPLO))
        ja_migrado.refresh_from_db()
        self.assertEqual(ja_migrado.horarios_trabalho, migrar_horarios({"monday": ["08:00"]}))
        sem_horario.refresh_from_db()
        self.assertIsNone(sem_horario.horarios_trabalho)

        self.migracao.reverter(django_apps, None)

        func.refresh_from_db()
        self.assertEqual(func.horarios_trabalho, EXEMPLO)
        ja_migrado.refresh_from_db()
        self.assertEqual(ja_migrado.horarios_trabalho, {"monday": ["08:00"]})
