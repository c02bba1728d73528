import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple, Union

import pandas as pd

from ..schema.models import REGISTRY_FIELDS, RegistryVehicle, VehicleIdentity
from .exceptions import RegistryLookupError

logger = logging.getLogger(__name__)

# Frota de referência do ambiente de homologação
SEED_FLEET: List[Dict[str, str]] = [
    {"CADASTRO": "CAV12", "MODELO": "TRAILBLAZER", "PLACA": "SBQ0D65"},
    {"CADASTRO": "CAV08", "MODELO": "GM S10 4X4", "PLACA": "ORZ-3930"},
    {"CADASTRO": "PMF-8020", "MODELO": "TOYOTA Hilux SW4", "PLACA": "PMF-8020"},
    {"CADASTRO": "DUSTER", "MODELO": "DUSTER", "PLACA": "PNK8927"},
    {"CADASTRO": "CAV05", "MODELO": "TOYOTA SW4", "PLACA": "PME5810"},
    {"CADASTRO": "CAV13", "MODELO": "TRAILBLAZER", "PLACA": "SBP4F05"},
    {"CADASTRO": "TA01", "MODELO": "VW 24280", "PLACA": "ORX-3312"},
    {"CADASTRO": "TA02", "MODELO": "IVECO DAILY", "PLACA": "PNM9507"},
    {"CADASTRO": "CAV06", "MODELO": "TRAILBLAZER", "PLACA": "ORZ-3940"},
    {"CADASTRO": "CAV11", "MODELO": "TRAILBLAZER", "PLACA": "ORZ-3945"},
    {"CADASTRO": "COD20", "MODELO": "TOYOTA HILUX SW4", "PLACA": "PMF-8020"},
    {"CADASTRO": "MP 1360", "MODELO": "YAMAHA/LANDER XTZ", "PLACA": "N/D"},
]


class FleetRegistry(ABC):
    """Consulta de igualdade na frota por CADASTRO, MODELO ou PLACA."""

    @abstractmethod
    def find_by(self, field: str, value: str) -> Optional[RegistryVehicle]:
        raise NotImplementedError


def _check_field(field: str) -> None:
    if field not in REGISTRY_FIELDS:
        raise ValueError(f"Campo de consulta inválido: {field} (esperado {REGISTRY_FIELDS})")


class InMemoryFleetRegistry(FleetRegistry):

    def __init__(self, rows: Iterable[Dict[str, str]] = ()):
        self._rows = [RegistryVehicle(**row) for row in rows]

    def find_by(self, field: str, value: str) -> Optional[RegistryVehicle]:
        _check_field(field)
        for row in self._rows:
            if getattr(row, field) == value:
                return row
        return None


class DataFrameFleetRegistry(FleetRegistry):
    """
    Frota carregada de planilha (CSV ou XLSX) via pandas.
    Cabeçalhos são normalizados para caixa alta; todos os valores são lidos como texto.
    """

    def __init__(self, frame: pd.DataFrame):
        frame = frame.rename(columns=lambda c: str(c).strip().upper())

        missing = [c for c in REGISTRY_FIELDS if c not in frame.columns]
        if missing:
            raise ValueError(f"Planilha da frota sem as colunas: {', '.join(missing)}")

        frame = frame[list(REGISTRY_FIELDS)].fillna("").astype(str)
        self._frame = frame.apply(lambda col: col.str.strip())

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "DataFrameFleetRegistry":
        path = Path(path)
        suffix = path.suffix.lower()

        if suffix == ".csv":
            frame = pd.read_csv(path, dtype=str, keep_default_na=False)
        elif suffix in (".xlsx", ".xls"):
            frame = pd.read_excel(path, dtype=str)
        else:
            raise ValueError(f"Formato de planilha não suportado: {path.suffix}")

        logger.info(f"Frota carregada de {path}: {len(frame)} viaturas")
        return cls(frame)

    def __len__(self) -> int:
        return len(self._frame)

    def find_by(self, field: str, value: str) -> Optional[RegistryVehicle]:
        _check_field(field)
        try:
            matches = self._frame[self._frame[field] == value]
        except (KeyError, TypeError) as e:
            raise RegistryLookupError(f"Falha ao consultar frota por {field}: {e}") from e

        if matches.empty:
            return None

        row = matches.iloc[0]
        return RegistryVehicle(**{f: row[f] for f in REGISTRY_FIELDS})


def load_fleet_registry(path: Union[str, Path]) -> FleetRegistry:
    """
    Carrega a frota do disco.
    Planilha ausente não aborta o lote: toda consulta passa a ser "não encontrado".
    """
    path = Path(path)
    if not path.exists():
        logger.warning(f"Planilha da frota não encontrada em {path}; cruzamento desativado")
        return InMemoryFleetRegistry()

    return DataFrameFleetRegistry.from_file(path)


# CRUZAMENTO COM A FROTA

def lookup_vehicle(identity: VehicleIdentity, registry: FleetRegistry) -> Tuple[Optional[str], Optional[RegistryVehicle]]:
    """
    Consulta a frota pelo PRIMEIRO campo conhecido (CADASTRO > MODELO > PLACA).
    Sem campo conhecido não há consulta. Falha do backend conta como "não encontrado".
    """
    key = identity.first_known()
    if key is None:
        return None, None

    field, value = key
    try:
        return field, registry.find_by(field, value)
    except Exception as e:
        logger.warning(f"Erro ao buscar viatura na frota ({field}={value}): {e}")
        return field, None


def fill_from_registry(identity: VehicleIdentity, vehicle: Optional[RegistryVehicle]) -> VehicleIdentity:
    """
    Preenche com a linha da frota apenas os campos que a extração não resolveu.
    Valor extraído tem precedência sobre o da frota.
    """
    if vehicle is None:
        return identity

    return identity.fill(cadastro=vehicle.CADASTRO, modelo=vehicle.MODELO, placa=vehicle.PLACA)


def cross_reference(identity: VehicleIdentity, registry: FleetRegistry) -> VehicleIdentity:
    _, vehicle = lookup_vehicle(identity, registry)
    return fill_from_registry(identity, vehicle)
