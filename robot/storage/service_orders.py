import logging
import uuid
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Tuple, Union

import pandas as pd

from ..core.exceptions import PersistenceError
from ..schema.models import PersistedServiceOrder

logger = logging.getLogger(__name__)

COLUMNS = ["id"] + list(PersistedServiceOrder.model_fields)


class ServiceOrderStore(ABC):
    """Gravação append-only das ordens de serviço. Sem caminho de atualização."""

    @abstractmethod
    def add(self, order: PersistedServiceOrder) -> str:
        """Grava a ordem e retorna o identificador gerado."""
        raise NotImplementedError


class InMemoryServiceOrderStore(ServiceOrderStore):

    def __init__(self):
        self.orders: List[Tuple[str, PersistedServiceOrder]] = []

    def add(self, order: PersistedServiceOrder) -> str:
        order_id = uuid.uuid4().hex
        self.orders.append((order_id, order))
        return order_id


class CsvServiceOrderStore(ServiceOrderStore):
    """
    Uma linha por ordem de serviço em CSV (UTF-8).
    O cabeçalho só é escrito quando o arquivo ainda não existe.
    """

    def __init__(self, output_path: Union[str, Path]):
        self.output_path = Path(output_path)

    def add(self, order: PersistedServiceOrder) -> str:
        order_id = uuid.uuid4().hex
        row = {"id": order_id, **order.model_dump()}

        try:
            self.output_path.parent.mkdir(parents=True, exist_ok=True)
            header = not self.output_path.exists()
            df = pd.DataFrame([row], columns=COLUMNS)
            df.to_csv(self.output_path, index=False, mode='a', header=header, encoding="utf-8")
        except (OSError, ValueError) as e:
            raise PersistenceError(f"Erro ao salvar ordem de serviço em {self.output_path}: {e}") from e

        return order_id

    def read_all(self) -> pd.DataFrame:
        if not self.output_path.exists():
            return pd.DataFrame(columns=COLUMNS)
        return pd.read_csv(self.output_path, dtype=str, keep_default_na=False)
