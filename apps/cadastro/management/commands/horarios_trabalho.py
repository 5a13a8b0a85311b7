import json

from django.core.management.base import BaseCommand, CommandError
from django.db import DatabaseError

from apps.cadastro.horarios import migrar_horarios
from apps.cadastro.migracao import migrar_funcionarios, reverter_funcionarios
from apps.cadastro.models import Funcionario

USO = """Uso: python manage.py horarios_trabalho [migrate|test|rollback]

Comandos disponíveis:
  migrate  - Executa a migração completa
  test     - Testa a migração com dados de exemplo
  rollback - Reverte a migração (use com cuidado!)"""

EXEMPLO = {
    'tuesday': ['08:00', '10:00', '16:00', '19:30'],
    'saturday': ['10:00', '14:00', '18:00'],
    'thursday': ['08:00', '10:00', '12:00', '19:30'],
}


class Command(BaseCommand):
    help = 'Converte os horários de trabalho dos funcionários para o formato com timeSlots.'

    def add_arguments(self, parser):
        parser.add_argument('acao', nargs='?', help='migrate, test ou rollback')

    def handle(self, *args, **options):
        acoes = {
            'migrate': self.migrar,
            'test': self.testar,
            'rollback': self.reverter,
        }
        acao = acoes.get(options['acao'])
        if acao is None:
            self.stdout.write(USO)
            return
        acao()

    def _funcionarios(self):
        try:
            return list(
                Funcionario.objects
                .filter(horarios_trabalho__isnull=False)
                .select_related('loja')
                .order_by('pk')
            )
        except DatabaseError as exc:
            raise CommandError(f'Erro ao buscar funcionários: {exc}') from exc

    def migrar(self):
        self.stdout.write('Iniciando migração de horários de trabalho...')
        funcionarios = self._funcionarios()
        self.stdout.write(f'Encontrados {len(funcionarios)} funcionários para migrar')

        relatorio = migrar_funcionarios(funcionarios)

        self.stdout.write('\nResumo da migração:')
        self.stdout.write(self.style.SUCCESS(f'Migrados: {relatorio.migrados}'))
        self.stdout.write(f'Ignorados: {relatorio.ignorados}')
        if relatorio.falhas:
            self.stdout.write(self.style.ERROR(f'Falhas: {relatorio.falhas}'))
        self.stdout.write(f'Total processados: {relatorio.total}')

    def testar(self):
        self.stdout.write('Testando migração com dados de exemplo...')
        migrado = migrar_horarios(EXEMPLO)
        self.stdout.write(f'Formato antigo: {json.dumps(EXEMPLO, indent=2)}')
        self.stdout.write(f'Formato novo: {json.dumps(migrado, indent=2)}')
        self.stdout.write(f"Total de horários: {len(migrado['timeSlots'])}")

    def reverter(self):
        self.stdout.write(self.style.WARNING(
            'ATENÇÃO: Esta operação irá reverter TODOS os horários para o formato antigo! '
            'Folgas (timeOffs) não existem no formato antigo e serão descartadas.'
        ))
        funcionarios = self._funcionarios()
        relatorio = reverter_funcionarios(funcionarios)

        self.stdout.write('\nResumo do rollback:')
        self.stdout.write(self.style.SUCCESS(f'Revertidos: {relatorio.migrados}'))
        self.stdout.write(f'Ignorados: {relatorio.ignorados}')
        if relatorio.falhas:
            self.stdout.write(self.style.ERROR(f'Falhas: {relatorio.falhas}'))
        self.stdout.write(f'Total processados: {relatorio.total}')
