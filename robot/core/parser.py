import re
from typing import List, Optional, Pattern
from ..schema.models import ExtractedRecord
from .vehicle_resolver import DEFAULT_CLAUSE_ANCHOR, VehicleIdentifierResolver

DEFAULT_CITY_ANCHOR = "Fortaleza"

# Cada campo tem uma lista ordenada de padrões: o primeiro que casar vence.
# As âncoras são frases literais do modelo de ofício; nenhum padrão tenta
# generalizar para outros tipos de documento.

OS_NUMBER_PATTERNS = [
    re.compile(r'ordem de servi[çc]o\s*(?:N\s*[º°o]|N\.?)\s*(\d+)', re.IGNORECASE),
    re.compile(r'ordem de servi[çc]o\s*(\d+)', re.IGNORECASE),
]

WORKSHOP_PATTERNS = [
    re.compile(
        r'na oficina\s*([^,;]+?)\s*(?:[,;]\s*referente ao servi[çc]o|;\s*no valor de R\$|\.\s*Todo o servi[çc]o)',
        re.IGNORECASE
    ),
]

DEFECT_PATTERNS = [
    re.compile(
        r'referente ao servi[çc]o\s*(?:de\s+)?([^;]+?)\s*(?:;\s*no valor de R\$|\.\s*Todo o servi[çc]o)',
        re.IGNORECASE
    ),
]

# Valor capturado literalmente (1.250,00 | 1250.00 | 980); conversão numérica fica a jusante
VALUE_PATTERNS = [
    re.compile(r'valor de R\$\s*(\d[\d.,]*\d|\d)', re.IGNORECASE),
]


def office_date_patterns(city: str) -> List[Pattern]:
    return [
        re.compile(re.escape(city) + r',\s*(\d{1,2} de [^\d]+?\d{4})', re.IGNORECASE),
    ]


def first_match(patterns: List[Pattern], text: str) -> Optional[str]:
    """Avalia os padrões em ordem e devolve o grupo 1 do primeiro que casar."""
    for pattern in patterns:
        m = pattern.search(text)
        if m:
            value = m.group(1).strip()
            if value:
                return value

    return None


# EXTRATORES DE CAMPO (texto normalizado -> valor ou None)

def extract_office_date(text: str, city: str = DEFAULT_CITY_ANCHOR) -> Optional[str]:
    """
    Data do ofício por extenso: "Fortaleza, 15 de março de 2024".
    Sem fallback: ausência da linha de data significa ofício fora do modelo.
    """
    return first_match(office_date_patterns(city), text)

def extract_os_number(text: str) -> Optional[str]:
    return first_match(OS_NUMBER_PATTERNS, text)

def extract_workshop(text: str) -> Optional[str]:
    """Nome da oficina entre "na oficina" e a primeira frase de fechamento."""
    return first_match(WORKSHOP_PATTERNS, text)

def extract_defect(text: str) -> Optional[str]:
    return first_match(DEFECT_PATTERNS, text)

def extract_value(text: str) -> Optional[str]:
    return first_match(VALUE_PATTERNS, text)


def extract_from_text(
        text: str,
        source_filename: Optional[str] = None,
        city_anchor: str = DEFAULT_CITY_ANCHOR,
        clause_anchor: str = DEFAULT_CLAUSE_ANCHOR
) -> ExtractedRecord:
    """
    Parser principal do ofício de ordem de serviço.

    Pipeline:
    1. Extrai os campos textuais com seus padrões em cascata
    2. Resolve a tripla da viatura (cadastro, modelo, placa)
    3. Retorna o registro SEM classificar: COMPLETO só é definido
       depois do cruzamento com a frota
    """
    vehicle = VehicleIdentifierResolver(clause_anchor).resolve(text)

    return ExtractedRecord(
        cadastro=vehicle.cadastro,
        modelo=vehicle.modelo,
        placa=vehicle.placa,
        defeito=extract_defect(text),
        oficina=extract_workshop(text),
        num_os=extract_os_number(text),
        data_of=extract_office_date(text, city_anchor),
        valor_os=extract_value(text),
        arquivo=source_filename or "",
    )
