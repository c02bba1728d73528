import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Union

from ..core.exceptions import PersistenceError
from ..schema.models import ErrorEntry


class ErrorLog(ABC):
    """Destino do log de erros do lote: uma única escrita no fim da execução."""

    @abstractmethod
    def write(self, entries: List[ErrorEntry]) -> None:
        raise NotImplementedError


class InMemoryErrorLog(ErrorLog):

    def __init__(self):
        self.entries: List[ErrorEntry] = []

    def write(self, entries: List[ErrorEntry]) -> None:
        self.entries.extend(entries)


class JsonErrorLog(ErrorLog):
    """Grava as entradas como array JSON (indentado, acentos preservados) para revisão manual."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def write(self, entries: List[ErrorEntry]) -> None:
        payload = [entry.model_dump() for entry in entries]
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
        except OSError as e:
            raise PersistenceError(f"Erro ao gravar log de erros em {self.path}: {e}") from e


def read_error_log(path: Union[str, Path]) -> List[ErrorEntry]:
    path = Path(path)
    if not path.exists():
        return []
    return [ErrorEntry(**item) for item in json.loads(path.read_text(encoding="utf-8"))]
