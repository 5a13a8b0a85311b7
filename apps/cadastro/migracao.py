"""
Migração em lote dos horários de trabalho dos funcionários.

Processa um funcionário por vez, na ordem recebida. Falha em um registro
é registrada no log e não interrompe o lote.
"""
import logging
from dataclasses import dataclass, replace

from django.db import DatabaseError, transaction

from .horarios import esta_normalizado, migrar_horarios, reverter_horarios

logger = logging.getLogger(__name__)

MIGRADO = 'migrado'
IGNORADO = 'ignorado'
FALHA = 'falha'

# Erros de formato dos dados ou de escrita no banco; qualquer outro sobe.
ERROS_POR_REGISTRO = (ValueError, TypeError, KeyError, AttributeError, DatabaseError)


@dataclass(frozen=True)
class RelatorioMigracao:
    migrados: int = 0
    ignorados: int = 0
    falhas: int = 0

    @property
    def total(self) -> int:
        return self.migrados + self.ignorados + self.falhas

    def registrar(self, status: str) -> 'RelatorioMigracao':
        if status == MIGRADO:
            return replace(self, migrados=self.migrados + 1)
        if status == IGNORADO:
            return replace(self, ignorados=self.ignorados + 1)
        return replace(self, falhas=self.falhas + 1)


def _salvar_horarios(funcionario, horarios):
    funcionario.horarios_trabalho = horarios
    # savepoint: um erro de escrita não contamina a transação externa
    with transaction.atomic():
        funcionario.save(update_fields=['horarios_trabalho'])


def migrar_funcionario(funcionario) -> str:
    horarios = funcionario.horarios_trabalho

    if esta_normalizado(horarios):
        logger.info("Funcionário %s já está no novo formato", funcionario.nome)
        return IGNORADO

    if not horarios:
        logger.info("Funcionário %s não tem horários para migrar", funcionario.nome)
        return IGNORADO

    novo = migrar_horarios(horarios)
    _salvar_horarios(funcionario, novo)
    logger.info("Migrado: %s - %d horários", funcionario.nome, len(novo['timeSlots']))
    return MIGRADO


def reverter_funcionario(funcionario) -> str:
    horarios = funcionario.horarios_trabalho

    if not esta_normalizado(horarios):
        logger.info("Funcionário %s já está no formato antigo", funcionario.nome)
        return IGNORADO

    if horarios.get('timeOffs'):
        logger.warning(
            "Funcionário %s tem %d folgas cadastradas; elas serão descartadas no formato antigo",
            funcionario.nome, len(horarios['timeOffs']),
        )

    legado = reverter_horarios(horarios)
    _salvar_horarios(funcionario, legado)
    logger.info("Revertido: %s", funcionario.nome)
    return MIGRADO


def _processar(funcionarios, acao) -> RelatorioMigracao:
    relatorio = RelatorioMigracao()
    for funcionario in funcionarios:
        try:
            status = acao(funcionario)
        except ERROS_POR_REGISTRO as exc:
            logger.error("Erro ao processar funcionário %s: %s", funcionario.nome, exc)
            status = FALHA
        relatorio = relatorio.registrar(status)
    return relatorio


def migrar_funcionarios(funcionarios) -> RelatorioMigracao:
    """Converte para o formato com ``timeSlots`` todos os funcionários recebidos."""
    return _processar(funcionarios, migrar_funcionario)


def reverter_funcionarios(funcionarios) -> RelatorioMigracao:
    """Volta ao formato legado todos os funcionários já migrados."""
    return _processar(funcionarios, reverter_funcionario)
