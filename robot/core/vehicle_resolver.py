import re
from typing import Callable, List, Optional, Tuple

from ..schema.models import VehicleIdentity

DEFAULT_CLAUSE_ANCHOR = "Solicito de V. Sª. que seja efetuado o pagamento da ordem de serviço"

# Fallback: "realizado [na] viatura|veículo [qualificador]" ... "na oficina"
REALIZADO_PATTERN = re.compile(
    r'realizado\s*(?:n[ao]\s*)?'
    r'(?:(?:viatura|ve[íi]culo)(?!\s+ADMINISTRATIV)\s*'
    r'(?:operacional|administrativa|de Transporte Animal deste Regimento,|de Transporte Policial deste Regimento,)?)?'
    r'\s*(.+?)\s*na\s*oficina',
    re.IGNORECASE
)

# CADASTRO [(MODELO)] [de placas PLACA]
# Cadastros são escritos em caixa alta no ofício; só a conectiva "de placas" ignora caixa
VEHICLE_PATTERN = re.compile(
    r'(?<!\w)([A-ZÀ-Ý][A-ZÀ-Ý0-9\-]+(?:\s(?!(?i:de\s*placas?)(?!\w))[A-ZÀ-Ý0-9][A-ZÀ-Ý0-9\-]*)?)(?!\w)'
    r'\s*(?:\(([A-Za-zÀ-ÿ0-9\s/.\-]+)\))?'
    r'\s*(?:(?i:de\s*placas?)\s*([A-Za-z0-9\-]{5,8})(?!\w))?'
)

PLATE_PATTERN = re.compile(r'placas?\s*([A-Z0-9\-]{5,8})(?!\w)', re.IGNORECASE)

CADASTRO_PATTERN = re.compile(r'\b(CAV\d+|PMF-\d+|DUSTER|TA\d+|COD\d+)\b', re.IGNORECASE)

REGISTRATION_PREFIXES = ("CAV", "TA", "COD", "PMF")

ADMINISTRATIVE_VEHICLE = ("VEÍCULO ADMINISTRATIVO", "VEICULO ADMINISTRATIVO")

# Modelos usados no lugar do cadastro em alguns ofícios
KNOWN_MODEL_CODES = [
    "DUSTER",
    "TRAILBLAZER",
    "GM S10 4X4",
    "TOYOTA SW4",
    "HILUX SW4",
    "IVECO DAILY",
]


# ============================================
# FASE 1: ISOLAR A CLÁUSULA DA VIATURA
# ============================================

def primary_clause_pattern(anchor: str) -> re.Pattern:
    """A cláusula fica entre o primeiro ponto após a âncora e "na oficina"."""
    return re.compile(re.escape(anchor) + r'[^.]+\.\s*(.+?)\s*na\s*oficina', re.IGNORECASE)


def isolate_vehicle_clause(text: str, anchor: str = DEFAULT_CLAUSE_ANCHOR) -> Tuple[str, str]:
    """
    Retorna (modo, cláusula).
    Modos em confiança decrescente: "anchor" > "realizado" > "full_text".
    """
    locators = [
        ("anchor", primary_clause_pattern(anchor)),
        ("realizado", REALIZADO_PATTERN),
    ]

    for mode, pattern in locators:
        m = pattern.search(text)
        if m and m.group(1).strip():
            return mode, m.group(1).strip()

    return "full_text", text


# ============================================
# FASE 2: DESAMBIGUAÇÃO DO PRIMEIRO GRUPO
# ============================================

def administrative_vehicle(first: str, second: Optional[str]) -> Optional[VehicleIdentity]:
    if first in ADMINISTRATIVE_VEHICLE:
        return VehicleIdentity(cadastro=first, modelo=second)
    return None

def registration_prefix(first: str, second: Optional[str]) -> Optional[VehicleIdentity]:
    if first.startswith(REGISTRATION_PREFIXES) or first == "DUSTER":
        return VehicleIdentity(cadastro=first, modelo=second)
    return None

def parenthesized_model(first: str, second: Optional[str]) -> Optional[VehicleIdentity]:
    # Primeiro grupo fora do padrão de cadastro, mas o parêntese traz o modelo
    if second:
        return VehicleIdentity(cadastro=first, modelo=second)
    return None

def bare_token(first: str, second: Optional[str]) -> Optional[VehicleIdentity]:
    return VehicleIdentity(cadastro=first)

# Avaliadas em ordem; a primeira regra que aceita decide a leitura dos grupos
DISAMBIGUATION_RULES: List[Callable[[str, Optional[str]], Optional[VehicleIdentity]]] = [
    administrative_vehicle,
    registration_prefix,
    parenthesized_model,
    bare_token,
]


def disambiguate(first: str, second: Optional[str]) -> VehicleIdentity:
    for rule in DISAMBIGUATION_RULES:
        identity = rule(first, second)
        if identity is not None:
            return identity

    return VehicleIdentity(cadastro=first)


# ============================================
# FASE 3: ESTRATÉGIAS EM CONFIANÇA DECRESCENTE
# ============================================
# Cada estratégia recebe (texto completo, cláusula, identidade atual) e
# só preenche campos ainda vazios, via VehicleIdentity.fill.

def parse_vehicle_clause(text: str, clause: str, current: VehicleIdentity) -> VehicleIdentity:
    m = VEHICLE_PATTERN.search(clause)
    if not m:
        return current

    first = m.group(1).strip().upper()
    second = (m.group(2) or "").strip() or None
    plate = (m.group(3) or "").strip().upper() or None

    parsed = disambiguate(first, second)

    return current.fill(cadastro=parsed.cadastro, modelo=parsed.modelo, placa=plate)


def backfill_model_from_cadastro(text: str, clause: str, current: VehicleIdentity) -> VehicleIdentity:
    if current.modelo is None and current.cadastro in KNOWN_MODEL_CODES:
        return current.fill(modelo=current.cadastro)

    return current


def find_plate_anywhere(text: str, clause: str, current: VehicleIdentity) -> VehicleIdentity:
    if current.placa is not None:
        return current

    m = PLATE_PATTERN.search(text)
    if m:
        return current.fill(placa=m.group(1).strip().upper())

    return current


def find_cadastro_anywhere(text: str, clause: str, current: VehicleIdentity) -> VehicleIdentity:
    if current.cadastro is not None:
        return current

    m = CADASTRO_PATTERN.search(text)
    if m:
        return current.fill(cadastro=m.group(1).strip().upper())

    return current


# A ordem é o contrato: trocar estratégias de lugar muda o resultado em ofícios ambíguos.
# O backfill de modelo roda de novo no fim porque o cadastro pode ter sido achado só agora.
VEHICLE_STRATEGIES = [
    parse_vehicle_clause,
    backfill_model_from_cadastro,
    find_plate_anywhere,
    find_cadastro_anywhere,
    backfill_model_from_cadastro,
]


class VehicleIdentifierResolver:
    """
    Extrai (CADASTRO, MODELO, PLACA) de um ofício já normalizado.

    1. Isola a cláusula da viatura (âncora configurável > "realizado" > texto completo)
    2. Aplica VEHICLE_STRATEGIES em ordem, sem sobrescrever campos resolvidos
    """

    def __init__(self, clause_anchor: str = DEFAULT_CLAUSE_ANCHOR, strategies: Optional[list] = None):
        self.clause_anchor = clause_anchor
        self.strategies = strategies if strategies is not None else VEHICLE_STRATEGIES

    def resolve(self, text: str) -> VehicleIdentity:
        _, clause = isolate_vehicle_clause(text, self.clause_anchor)

        identity = VehicleIdentity()
        for strategy in self.strategies:
            identity = strategy(text, clause, identity)

        return identity


def resolve_vehicle(text: str, clause_anchor: str = DEFAULT_CLAUSE_ANCHOR) -> VehicleIdentity:
    return VehicleIdentifierResolver(clause_anchor).resolve(text)
