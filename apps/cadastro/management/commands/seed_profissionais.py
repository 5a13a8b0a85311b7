import json
import re
from decimal import Decimal
from pathlib import Path

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction
from django.utils.text import slugify

from apps.cadastro.horarios import migrar_horarios, parse_horarios
from apps.cadastro.models import Loja, Funcionario, Servico


def gerar_email(nome: str, dominio: str, indice: int = 1) -> str:
    """``"José da Silva"`` -> ``"jose.da.silva@<dominio>"``; ``indice`` > 1 vira sufixo."""
    # hífen e sublinhado somem; só os espaços viram ponto
    local = slugify(nome.replace('-', '').replace('_', '')).replace('-', '.')
    local = re.sub(r'\.+', '.', local).strip('.') or 'profissional'
    if indice > 1:
        local = f"{local}{indice}"
    return f"{local}@{dominio}"


def normalizar_telefone(contato):
    if not contato:
        return None
    digitos = re.sub(r'\D', '', str(contato))
    if not 10 <= len(digitos) <= 15:
        return None
    return f"+{digitos}" if str(contato).strip().startswith('+') else digitos


class Command(BaseCommand):
    help = 'Cria/atualiza uma loja e seus profissionais a partir de um JSON com horários em texto livre.'

    def add_arguments(self, parser):
        parser.add_argument('arquivo', help='JSON: lista de {nome, contato, horarios: [...], observacoes}')
        parser.add_argument('--loja', required=True, help='slug da loja (criada se não existir)')
        parser.add_argument('--nome-loja', help='nome da loja (padrão: derivado do slug)')
        parser.add_argument('--dominio-email', help='domínio dos e-mails gerados (padrão: <slug>.com)')
        parser.add_argument('--senha-padrao', default='Mudar@123', help='senha inicial dos profissionais')
        parser.add_argument('--cargo', default=Funcionario.Cargo.OUTRO, choices=Funcionario.Cargo.values)
        parser.add_argument('--servico', help='cria um serviço e associa todos os profissionais')
        parser.add_argument('--duracao', type=int, default=60, help='duração do serviço em minutos')
        parser.add_argument('--preco', type=Decimal, default=Decimal('0'), help='preço do serviço')
        parser.add_argument('--limpar', action='store_true', help='remove os profissionais atuais da loja antes')
        parser.add_argument('--normalizar', action='store_true', help='grava os horários já no formato timeSlots')

    def _ler_arquivo(self, caminho):
        try:
            dados = json.loads(Path(caminho).read_text(encoding='utf-8'))
        except FileNotFoundError as exc:
            raise CommandError(f'Arquivo não encontrado: {caminho}') from exc
        except json.JSONDecodeError as exc:
            raise CommandError(f'JSON inválido em {caminho}: {exc}') from exc
        if not isinstance(dados, list):
            raise CommandError('O arquivo deve conter uma lista de profissionais.')
        return dados

    def _usuario_profissional(self, User, loja, nome, dominio, senha):
        """
        Usuário do profissional. Reaproveita o já vinculado a ele nesta loja;
        se o e-mail gerado pertence a outro profissional, tenta nome2@, nome3@...
        """
        existente = Funcionario.objects.filter(loja=loja, nome=nome).select_related('user').first()
        if existente and existente.user:
            return existente.user

        i = 1
        email = gerar_email(nome, dominio)
        while Funcionario.objects.filter(user__email=email).exists():
            i += 1
            email = gerar_email(nome, dominio, i)

        return (
            User.objects.filter(email=email).first()
            or User.objects.create_user(email=email, password=senha, full_name=nome)
        )

    @transaction.atomic
    def handle(self, *args, **options):
        profissionais = self._ler_arquivo(options['arquivo'])
        slug = slugify(options['loja'])
        if not slug:
            raise CommandError('Informe um slug de loja válido.')
        dominio = options['dominio_email'] or f'{slug}.com'
        nome_loja = options['nome_loja'] or slug.replace('-', ' ').title()

        User = get_user_model()
        email_owner = User.objects.normalize_email(f'contato@{dominio}')
        # create_user: sem senha informada, o owner fica com senha inutilizável
        owner = (
            User.objects.filter(email=email_owner).first()
            or User.objects.create_user(email=email_owner, is_owner=True, full_name=nome_loja)
        )
        loja, criada = Loja.objects.get_or_create(
            slug=slug,
            defaults={'owner': owner, 'nome': nome_loja, 'email': owner.email},
        )
        self.stdout.write(f"Loja {'criada' if criada else 'encontrada'}: {loja.nome} ({loja.slug})")

        if options['limpar']:
            removidos, _ = loja.funcionarios.all().delete()
            self.stdout.write(f'Profissionais removidos: {removidos}')

        self.stdout.write(f'Encontrados {len(profissionais)} profissionais no arquivo')

        criados = []
        pulados = 0
        for dados in profissionais:
            nome = (dados.get('nome') or '').strip()
            if not nome:
                self.stderr.write(self.style.WARNING(f'Registro sem nome ignorado: {dados!r}'))
                pulados += 1
                continue

            convite = dados.get('convite')
            if convite is not None and str(convite).strip().lower() != 'sim':
                self.stdout.write(f'Pulando {nome} - convite: "{convite}"')
                pulados += 1
                continue

            horarios = parse_horarios(dados.get('horarios') or [])
            if not horarios:
                self.stderr.write(self.style.WARNING(f'Pulando {nome} - sem horários válidos'))
                pulados += 1
                continue
            dias = len(horarios)
            if options['normalizar']:
                horarios = migrar_horarios(horarios)

            user = self._usuario_profissional(User, loja, nome, dominio, options['senha_padrao'])
            email = user.email

            funcionario, _ = Funcionario.objects.update_or_create(
                loja=loja,
                nome=nome,
                defaults={
                    'user': user,
                    'email': email,
                    'telefone': normalizar_telefone(dados.get('contato')),
                    'cargo': options['cargo'],
                    'horarios_trabalho': horarios,
                    'ativo': True,
                },
            )
            criados.append(funcionario)
            self.stdout.write(self.style.SUCCESS(f'Profissional salvo: {nome} <{email}> - {dias} dias da semana'))

        if options['servico'] and criados:
            servico, _ = Servico.objects.get_or_create(
                loja=loja,
                nome=options['servico'],
                defaults={'duracao_minutos': options['duracao'], 'preco': options['preco']},
            )
            servico.profissionais.add(*criados)
            self.stdout.write(f'Serviço "{servico.nome}" associado a {len(criados)} profissionais')

        self.stdout.write('\nResumo:')
        self.stdout.write(f'  - Total no arquivo: {len(profissionais)}')
        self.stdout.write(f'  - Profissionais salvos: {len(criados)}')
        self.stdout.write(f'  - Profissionais pulados: {pulados}')
        if criados:
            self.stdout.write(self.style.WARNING('Todos devem alterar a senha padrão no primeiro acesso!'))
