import pytest

from robot.core.vehicle_resolver import (
    VEHICLE_STRATEGIES,
    VehicleIdentifierResolver,
    disambiguate,
    isolate_vehicle_clause,
    resolve_vehicle,
)
from robot.schema.models import VehicleIdentity

pytestmark = pytest.mark.unit

ANCHOR = "Solicito de V. Sª. que seja efetuado o pagamento da ordem de serviço Nº 1, conforme anexo."


def _memo(clause: str) -> str:
    return f"{ANCHOR} {clause} na oficina OFICINA CENTRAL, referente ao serviço de revisão; no valor de R$ 10,00."


# ============================================
# CENÁRIOS DO MODELO DE OFÍCIO
# ============================================

def test_cadastro_modelo_placa_in_clause():
    """✅ CADASTRO (MODELO) de placas PLACA"""
    identity = resolve_vehicle(_memo("CAV12 (TRAILBLAZER) de placas SBQ0D65"))

    assert identity.to_sentinel_dict() == {
        "CADASTRO": "CAV12",
        "MODELO": "TRAILBLAZER",
        "PLACA": "SBQ0D65",
    }

def test_model_code_used_as_cadastro():
    """✅ DUSTER sozinho: modelo copiado do cadastro, placa ausente"""
    identity = resolve_vehicle(_memo("DUSTER"))

    assert identity.to_sentinel_dict() == {
        "CADASTRO": "DUSTER",
        "MODELO": "DUSTER",
        "PLACA": "S/A",
    }

def test_administrative_vehicle_keeps_literal_cadastro():
    """✅ VEÍCULO ADMINISTRATIVO (VW GOL): o cadastro é a própria frase"""
    identity = resolve_vehicle(_memo("VEÍCULO ADMINISTRATIVO (VW GOL)"))

    assert identity.to_sentinel_dict() == {
        "CADASTRO": "VEÍCULO ADMINISTRATIVO",
        "MODELO": "VW GOL",
        "PLACA": "S/A",
    }

def test_anchor_clause_is_isolated():
    mode, clause = isolate_vehicle_clause(_memo("Serviço realizado na viatura CAV12 (TRAILBLAZER)"))

    assert mode == "anchor"
    assert clause == "Serviço realizado na viatura CAV12 (TRAILBLAZER)"


# ============================================
# FALLBACKS
# ============================================

def test_realizado_fallback_without_anchor():
    texto = "Serviço realizado na viatura operacional TA02 de placas PNM9507 na oficina X, referente ao serviço de pneus"

    mode, clause = isolate_vehicle_clause(texto)
    identity = resolve_vehicle(texto)

    assert mode == "realizado"
    assert clause == "TA02 de placas PNM9507"
    assert identity.cadastro == "TA02"
    assert identity.placa == "PNM9507"
    assert identity.modelo is None

def test_full_text_mode_when_no_clause():
    mode, clause = isolate_vehicle_clause("Relatório sem cláusula de viatura")

    assert mode == "full_text"
    assert clause == "Relatório sem cláusula de viatura"

def test_plate_found_anywhere():
    identity = resolve_vehicle("Viatura CAV08, placa ORZ-3930, em manutenção.")

    assert identity.cadastro == "CAV08"
    assert identity.placa == "ORZ-3930"

def test_lowercase_tokens_found_by_text_search():
    """✅ Cadastro e placa em caixa baixa só são achados pelas buscas no texto todo"""
    identity = resolve_vehicle("serviço na viatura cav11, placa orz3945, sem oficina informada")

    assert identity.cadastro == "CAV11"
    assert identity.placa == "ORZ3945"

def test_model_backfill_after_late_cadastro():
    identity = resolve_vehicle("viatura duster na oficina central")

    assert identity.cadastro == "DUSTER"
    assert identity.modelo == "DUSTER"

def test_clause_plate_wins_over_later_mention():
    texto = _memo("CAV12 (TRAILBLAZER) de placas SBQ0D65") + " Placa antiga ABC1234."

    assert resolve_vehicle(texto).placa == "SBQ0D65"

def test_custom_clause_anchor():
    texto = "Requeiro o pagamento da OS 12. CAV06 (TRAILBLAZER) na oficina Y, referente ao serviço de freio."

    mode, clause = isolate_vehicle_clause(texto, anchor="Requeiro o pagamento da OS")
    identity = VehicleIdentifierResolver(clause_anchor="Requeiro o pagamento da OS").resolve(texto)

    assert mode == "anchor"
    assert clause == "CAV06 (TRAILBLAZER)"
    assert identity.cadastro == "CAV06"
    assert identity.modelo == "TRAILBLAZER"


# ============================================
# REGRAS E INVARIANTES
# ============================================

@pytest.mark.parametrize(
    "first,second,esperado",
    [
        ("VEÍCULO ADMINISTRATIVO", "VW GOL", ("VEÍCULO ADMINISTRATIVO", "VW GOL")),
        ("CAV12", "TRAILBLAZER", ("CAV12", "TRAILBLAZER")),
        ("PMF-8020", None, ("PMF-8020", None)),
        ("GOL", "VW GOL", ("GOL", "VW GOL")),
        ("XPTO", None, ("XPTO", None)),
    ],
)
def test_disambiguation_rules(first, second, esperado):
    identity = disambiguate(first, second)

    assert (identity.cadastro, identity.modelo) == esperado

def test_fill_never_overwrites():
    identity = VehicleIdentity(cadastro="CAV12")

    filled = identity.fill(cadastro="CAV99", modelo="TRAILBLAZER", placa="S/A")

    assert filled.cadastro == "CAV12"
    assert filled.modelo == "TRAILBLAZER"
    assert filled.placa is None

def test_strategies_are_applied_in_order():
    chamadas = []

    def spy(nome):
        def strategy(text, clause, current):
            chamadas.append(nome)
            return current
        return strategy

    VehicleIdentifierResolver(strategies=[spy("a"), spy("b"), spy("c")]).resolve("texto")

    assert chamadas == ["a", "b", "c"]

def test_no_strategies_resolves_nothing():
    identity = VehicleIdentifierResolver(strategies=[]).resolve(_memo("CAV12"))

    assert identity == VehicleIdentity()

def test_default_strategy_order():
    nomes = [s.__name__ for s in VEHICLE_STRATEGIES]

    assert nomes == [
        "parse_vehicle_clause",
        "backfill_model_from_cadastro",
        "find_plate_anywhere",
        "find_cadastro_anywhere",
        "backfill_model_from_cadastro",
    ]

def test_uppercase_connective_is_not_part_of_cadastro():
    """✅ Cláusula toda em caixa alta: "DE PLACAS" não vira segunda palavra do cadastro"""
    identity = resolve_vehicle(_memo("CAV12 DE PLACAS SBQ0D65"))

    assert identity.cadastro == "CAV12"
    assert identity.placa == "SBQ0D65"

def test_two_word_cadastro_still_accepted():
    identity = resolve_vehicle(_memo("MP 1360 de placas ABC1D23"))

    assert identity.cadastro == "MP 1360"
    assert identity.placa == "ABC1D23"
