from pydantic import BaseModel, ConfigDict
from typing import Any, Dict, Optional

SENTINEL = "S/A"  ##     Marcador de "não disponível" usado na fronteira de persistência

REGISTRY_FIELDS = ("CADASTRO", "MODELO", "PLACA")

# Campos exigidos pelo classificador de completude, na ordem do ofício
REQUIRED_FIELDS = (
    "CADASTRO",
    "MODELO",
    "PLACA",
    "NUM_OS",
    "DATA_OF",
    "VALOR_OS",
    "OFICINA",
    "DEFEITO",
)


def to_sentinel(value: Optional[str]) -> str:
    return value if value else SENTINEL


def from_sentinel(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    if not value or value == SENTINEL:
        return None
    return value


class VehicleIdentity(BaseModel): ##     Tripla de identificação da viatura (None = não resolvido)
    model_config = ConfigDict(frozen=True)

    cadastro: Optional[str] = None
    modelo: Optional[str] = None
    placa: Optional[str] = None

    def fill(self, cadastro: Optional[str] = None, modelo: Optional[str] = None, placa: Optional[str] = None) -> "VehicleIdentity":
        """
        Preenche apenas os campos ainda não resolvidos.
        Um campo já resolvido nunca é sobrescrito por uma fonte posterior.
        """
        return VehicleIdentity(
            cadastro=self.cadastro or from_sentinel(cadastro),
            modelo=self.modelo or from_sentinel(modelo),
            placa=self.placa or from_sentinel(placa),
        )

    def first_known(self) -> Optional[tuple]:
        """Primeiro campo conhecido na prioridade CADASTRO > MODELO > PLACA."""
        for field, value in zip(REGISTRY_FIELDS, (self.cadastro, self.modelo, self.placa)):
            if value:
                return field, value
        return None

    def to_sentinel_dict(self) -> Dict[str, str]:
        return {
            "CADASTRO": to_sentinel(self.cadastro),
            "MODELO": to_sentinel(self.modelo),
            "PLACA": to_sentinel(self.placa),
        }


class RegistryVehicle(BaseModel): ##     Linha da frota (somente leitura)
    CADASTRO: str = ""
    MODELO: str = ""
    PLACA: str = ""


class ExtractedRecord(BaseModel): ##     Objeto central do pipeline, montado uma única vez por documento
    model_config = ConfigDict(frozen=True)

    cadastro: Optional[str] = None
    modelo: Optional[str] = None
    placa: Optional[str] = None
    defeito: Optional[str] = None
    oficina: Optional[str] = None
    num_os: Optional[str] = None
    data_of: Optional[str] = None
    valor_os: Optional[str] = None
    arquivo: str = ""

    # Derivado: só o classificador de completude define este campo
    completo: bool = False

    @property
    def vehicle(self) -> VehicleIdentity:
        return VehicleIdentity(cadastro=self.cadastro, modelo=self.modelo, placa=self.placa)

    def with_vehicle(self, identity: VehicleIdentity) -> "ExtractedRecord":
        return self.model_copy(update={
            "cadastro": identity.cadastro,
            "modelo": identity.modelo,
            "placa": identity.placa,
        })

    def to_sentinel_dict(self) -> Dict[str, Any]:
        """Visão do registro com as chaves do ofício e "S/A" no lugar de ausências."""
        return {
            "CADASTRO": to_sentinel(self.cadastro),
            "MODELO": to_sentinel(self.modelo),
            "PLACA": to_sentinel(self.placa),
            "DEFEITO": to_sentinel(self.defeito),
            "OFICINA": to_sentinel(self.oficina),
            "NUM_OS": to_sentinel(self.num_os),
            "DATA_OF": to_sentinel(self.data_of),
            "VALOR_OS": to_sentinel(self.valor_os),
            "ARQUIVO": self.arquivo,
            "COMPLETO": self.completo,
        }


class PersistedServiceOrder(BaseModel): ##     Projeção gravada no store (nomes exatos do esquema legado)
    cadastroViatura: str
    dataCriacao: str
    dataOS: str
    modeloViatura: str
    numeroOS: str
    observacao: str
    oficinaResponsavel: str
    placaViatura: str
    valorOS: str
    arquivoOriginal: str


class ErrorEntry(BaseModel): ##     Entrada do log de erros para revisão manual
    file: str
    reason: str
    details: Optional[Dict[str, Any]] = None


class BatchSummary(BaseModel):
    execution_id: str
    found: int = 0
    processed: int = 0
    persisted: int = 0
    errored: int = 0
    error_log_path: Optional[str] = None
    error_log_error: Optional[str] = None
