"""
Horários de trabalho dos profissionais.

Dois formatos convivem em ``Funcionario.horarios_trabalho``:

- legado, indexado pelo nome do dia::

    {"tuesday": ["08:00", "10:00"], "saturday": ["10:00"]}

- normalizado, com um registro por horário::

    {"timeSlots": [{"id": "slot_2_0800_0", "dayOfWeek": 2, ...}], "timeOffs": []}

Também converte as linhas de texto livre usadas nos cadastros
(ex.: ``"2a - 8:00, 10:00, 16:00 e 19:30"``) para o formato legado.
"""
import logging
import re
from typing import Callable, NamedTuple

from django.utils.text import slugify

logger = logging.getLogger(__name__)

# 0=Domingo ... 6=Sábado
DIAS_SEMANA = (
    'sunday',
    'monday',
    'tuesday',
    'wednesday',
    'thursday',
    'friday',
    'saturday',
)

# Ordinais "2a".."6a" seguem o uso brasileiro (2ª-feira = segunda = monday).
# Os seeds antigos liam "Na" como o N-ésimo dia a partir de monday ("2a" = tuesday,
# "1a"/"7a" aceitos); aqui "1a" e "7a" não existem e "2a" cai um dia antes.
_NOMES_DIAS = {
    0: ('sunday', 'sun', 'domingo', 'dom'),
    1: ('monday', 'mon', 'segunda', 'seg', '2a'),
    2: ('tuesday', 'tue', 'tues', 'terca', 'ter', '3a'),
    3: ('wednesday', 'wed', 'quarta', 'qua', '4a'),
    4: ('thursday', 'thu', 'thur', 'thurs', 'quinta', 'qui', '5a'),
    5: ('friday', 'fri', 'sexta', 'sex', '6a'),
    6: ('saturday', 'sat', 'sabado', 'sab'),
}

DIA_PARA_NUMERO = {nome: numero for numero, nomes in _NOMES_DIAS.items() for nome in nomes}


def resolver_dia_semana(token):
    """
    Converte um nome de dia (pt ou en, com ou sem acento) em 0..6, domingo=0.
    Retorna ``None`` quando o nome não é reconhecido.

    >>> resolver_dia_semana('Terça-feira')
    2
    >>> resolver_dia_semana('2ª')
    1
    """
    if not isinstance(token, str):
        return None
    # slugify remove acentos e normaliza "ª" para "a"
    chave = slugify(token)
    if chave.endswith('-feira'):
        chave = chave[:-len('-feira')]
    return DIA_PARA_NUMERO.get(chave)


# ========== TEXTO LIVRE -> FORMATO LEGADO ==========

class Regra(NamedTuple):
    nome: str
    padrao: re.Pattern
    extrair: Callable[[re.Match], list]


def _fmt(hora: str, minuto: str) -> str:
    # minuto é mantido como veio (não valida 0-59)
    return f"{int(hora):02d}:{minuto}"


# Avaliadas em ordem; a primeira que casar decide o token.
# O intervalo "6h30 às 7h30" vem antes do "6h30" solto para não ser engolido por ele.
REGRAS = (
    Regra(
        'hora_simples',
        re.compile(r'^(\d{1,2}):(\d{2})$'),
        lambda m: [_fmt(m.group(1), m.group(2))],
    ),
    Regra(
        'intervalo_com_h',
        re.compile(r'^(\d{1,2})h(\d{2})\s*[àa]s\s*(\d{1,2})h(\d{2})', re.IGNORECASE),
        lambda m: [_fmt(m.group(1), m.group(2)), _fmt(m.group(3), m.group(4))],
    ),
    Regra(
        'hora_com_h',
        re.compile(r'^(\d{1,2})h(\d{2})', re.IGNORECASE),
        lambda m: [_fmt(m.group(1), m.group(2))],
    ),
    Regra(
        'intervalo_com_as',
        re.compile(r'^(\d{1,2}):(\d{2})\s*[àa]s', re.IGNORECASE),
        lambda m: [_fmt(m.group(1), m.group(2))],
    ),
)

LINHA_RE = re.compile(r'^\s*(?P<dia>\w+(?:-feira)?)\.?\s*-\s*(?P<horarios>.+)$', re.IGNORECASE)
SEPARADOR_RE = re.compile(r'\s*(?:,|;|\be\b)\s*', re.IGNORECASE)


def extrair_token(token: str) -> list:
    """Aplica as regras a um único token (ex.: ``"8:00"``, ``"6h30 às 7h30"``)."""
    token = token.strip().rstrip('.').strip()
    for regra in REGRAS:
        m = regra.padrao.match(token)
        if m:
            return regra.extrair(m)
    return []


def separar_linha(linha):
    """
    Divide ``"2a - 8:00, 10:00"`` em ``("2a", "8:00, 10:00")``.
    Linhas fora desse formato retornam ``None``.
    """
    if not isinstance(linha, str):
        return None
    m = LINHA_RE.match(linha)
    if not m:
        return None
    return m.group('dia'), m.group('horarios')


def extrair_horarios(linha: str) -> list:
    """
    Extrai os horários de início de uma linha de disponibilidade.

    Retorna a lista ordenada e sem repetições no formato ``HH:MM``.
    Linhas malformadas não geram erro, apenas lista vazia.
    """
    partes = separar_linha(linha)
    if not partes:
        return []
    _, texto = partes

    horarios = set()
    for token in SEPARADOR_RE.split(texto):
        if token:
            horarios.update(extrair_token(token))
    return sorted(horarios)


def parse_horarios(linhas) -> dict:
    """
    Converte a lista de linhas de disponibilidade no formato legado,
    indexado pelo nome do dia em inglês, na ordem em que os dias aparecem.
    Dias repetidos são unidos; dias sem horários ficam de fora.
    """
    legado = {}
    for linha in linhas or []:
        partes = separar_linha(linha)
        if not partes:
            logger.debug("Linha de horário ignorada: %r", linha)
            continue

        dia = resolver_dia_semana(partes[0])
        if dia is None:
            logger.warning("Dia não reconhecido: %s", partes[0])
            continue

        horarios = extrair_horarios(linha)
        if not horarios:
            continue

        chave = DIAS_SEMANA[dia]
        legado[chave] = sorted(set(legado.get(chave, [])) | set(horarios))
    return legado


# ========== FORMATO LEGADO <-> FORMATO NORMALIZADO ==========

def esta_normalizado(horarios) -> bool:
    return isinstance(horarios, dict) and 'timeSlots' in horarios


def hora_fim(inicio: str) -> str:
    """Início + 1h. Não dá a volta em 24h: ``"23:30"`` vira ``"24:30"``."""
    hora, minuto = inicio.split(':')
    return f"{int(hora) + 1:02d}:{int(minuto):02d}"


def gerar_slot_id(dia: int, inicio: str, indice: int) -> str:
    return f"slot_{dia}_{inicio.replace(':', '', 1)}_{indice}"


def migrar_horarios(legado):
    """
    Converte o formato legado para ``{"timeSlots": [...], "timeOffs": []}``.

    - Dias não reconhecidos são ignorados (com aviso).
    - A ordem dos slots segue a ordem das chaves do dicionário de entrada.
    - Se a entrada já tiver ``timeSlots`` ou estiver vazia, é devolvida sem alteração.
    """
    if not legado or esta_normalizado(legado):
        return legado

    slots = []
    for nome_dia, inicios in legado.items():
        dia = resolver_dia_semana(nome_dia)
        if dia is None:
            logger.warning("Dia não reconhecido: %s", nome_dia)
            continue
        if not isinstance(inicios, (list, tuple)):
            raise TypeError(f'Horários de "{nome_dia}" devem ser uma lista, recebido {type(inicios).__name__}')

        for indice, inicio in enumerate(inicios):
            slots.append({
                'id': gerar_slot_id(dia, inicio, indice),
                'dayOfWeek': dia,
                'startTime': inicio,
                'endTime': hora_fim(inicio),
                'isRecurring': True,
                'isActive': True,
                'specificDate': None,
            })

    return {'timeSlots': slots, 'timeOffs': []}


def reverter_horarios(normalizado):
    """
    Inverso de :func:`migrar_horarios`: agrupa os ``startTime`` por dia
    (nome em inglês), na ordem dos slots. Entrada sem ``timeSlots`` volta intacta.
    """
    if not esta_normalizado(normalizado):
        return normalizado

    legado = {}
    for slot in normalizado['timeSlots']:
        dia = slot['dayOfWeek']
        if not isinstance(dia, int) or not 0 <= dia <= 6:
            raise ValueError(f"dayOfWeek inválido no slot {slot.get('id')}: {dia!r}")
        legado.setdefault(DIAS_SEMANA[dia], []).append(slot['startTime'])
    return legado


def contar_horarios(horarios) -> int:
    """Quantidade de horários em qualquer um dos dois formatos."""
    if not horarios or not isinstance(horarios, dict):
        return 0
    if esta_normalizado(horarios):
        return len(horarios['timeSlots'] or [])
    return sum(
        len(inicios)
        for dia, inicios in horarios.items()
        if resolver_dia_semana(dia) is not None and isinstance(inicios, (list, tuple))
    )
