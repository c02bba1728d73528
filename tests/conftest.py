from pathlib import Path

import docx
import pytest

from robot.core.registry import SEED_FLEET, InMemoryFleetRegistry


MEMO_COMPLETO = """
GOVERNO DO ESTADO DO CEARÁ
POLÍCIA MILITAR DO CEARÁ
REGIMENTO DE POLÍCIA MONTADA

Ofício nº 245/2024 - COLOG

Fortaleza, 15 de março de 2024.

Ao Senhor
Coordenador de Logística

Assunto: Pagamento de ordem de serviço

Senhor Coordenador,

Solicito de V. Sª. que seja efetuado o pagamento da ordem de serviço Nº 4567, conforme nota fiscal em anexo.
Serviço realizado na viatura operacional CAV12 (TRAILBLAZER) de placas SBQ0D65
na oficina AUTO CENTER PARANGABA LTDA, referente ao serviço de troca das pastilhas
de freio e alinhamento; no valor de R$ 1.250,00. Todo o serviço foi acompanhado
pelo motorista da viatura.

Atenciosamente,
"""

# Só o cadastro aparece no ofício; modelo e placa vêm da frota
MEMO_SO_CADASTRO = """
Fortaleza, 2 de abril de 2024.

Solicito de V. Sª. que seja efetuado o pagamento da ordem de serviço N° 88, conforme orçamento aprovado.
Serviço realizado na viatura CAV05 na oficina MECÂNICA SÃO JOSÉ, referente ao serviço de revisão
de 40.000 km; no valor de R$ 980,50. Todo o serviço foi conferido pelo setor de transportes.
"""

# Sem a cláusula "na oficina": fora do modelo
MEMO_SEM_OFICINA = """
Fortaleza, 10 de maio de 2024.

Solicito de V. Sª. que seja efetuado o pagamento da ordem de serviço Nº 991, conforme anexo.
Serviço realizado na viatura CAV13 (TRAILBLAZER) de placas SBP4F05, referente ao serviço de
troca de óleo; no valor de R$ 350,00.
"""


@pytest.fixture
def memo_completo() -> str:
    return MEMO_COMPLETO


@pytest.fixture
def memo_so_cadastro() -> str:
    return MEMO_SO_CADASTRO


@pytest.fixture
def memo_sem_oficina() -> str:
    return MEMO_SEM_OFICINA


@pytest.fixture
def seed_registry() -> InMemoryFleetRegistry:
    return InMemoryFleetRegistry(SEED_FLEET)


def write_docx(path: Path, text: str) -> Path:
    """Gera um .docx com um parágrafo por linha do texto."""
    path.parent.mkdir(parents=True, exist_ok=True)
    document = docx.Document()
    for line in text.strip().splitlines():
        document.add_paragraph(line)
    document.save(str(path))
    return path


@pytest.fixture
def docx_factory():
    return write_docx
