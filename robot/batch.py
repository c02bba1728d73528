import logging
import os
import uuid
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Union

from .core.exceptions import DocumentDiscoveryError, PersistenceError
from .core.registry import load_fleet_registry
from .orchestrator import Orchestrator
from .schema.models import BatchSummary, ErrorEntry
from .schema.orchestrator_models import PipelineResult
from .storage.error_log import ErrorLog, JsonErrorLog
from .storage.service_orders import CsvServiceOrderStore, InMemoryServiceOrderStore

logger = logging.getLogger(__name__)

DEFAULT_EXTENSIONS = (".docx", ".pdf")


def _walk(directory: Path, extensions: tuple) -> Iterator[Path]:
    try:
        with os.scandir(directory) as it:
            entries = sorted(it, key=lambda e: e.name)
    except OSError as e:
        logger.warning(f"Subpasta ignorada ({directory}): {e}")
        return

    for entry in entries:
        if entry.is_dir(follow_symlinks=False):
            yield from _walk(Path(entry.path), extensions)
        elif entry.is_file() and entry.name.lower().endswith(extensions) and not entry.name.startswith("~$"):
            yield Path(entry.path)


def iter_documents(root: Union[str, Path], extensions: Iterable[str] = DEFAULT_EXTENSIONS) -> Iterator[Path]:
    """
    Sequência preguiçosa, em profundidade, dos documentos sob root.
    Dentro de cada pasta a ordem é alfabética. Raiz ilegível é fatal e
    é verificada antes de qualquer documento ser entregue.
    """
    root = Path(root)
    extensions = tuple(ext.lower() for ext in extensions)

    if not root.is_dir():
        raise DocumentDiscoveryError(f"Pasta de documentos não encontrada: {root}")
    try:
        os.scandir(root).close()
    except OSError as e:
        raise DocumentDiscoveryError(f"Erro ao ler a pasta de documentos {root}: {e}") from e

    return _walk(root, extensions)


class BatchRunner:
    """
    Driver do lote: um documento por vez, na ordem de descoberta.
    O log de erros é gravado uma única vez, no fim, mesmo vazio.
    """

    def __init__(self, orchestrator: Orchestrator, error_log: ErrorLog, extensions: Iterable[str] = DEFAULT_EXTENSIONS):
        self.orchestrator = orchestrator
        self.error_log = error_log
        self.extensions = tuple(extensions)

    def run(self, root: Union[str, Path], execution_id: Optional[str] = None) -> BatchSummary:
        execution_id = execution_id or f"batch_{uuid.uuid4().hex[:12]}"
        documents = iter_documents(root, self.extensions)

        logger.info(f"Iniciando lote {execution_id} em {root}")

        summary = BatchSummary(execution_id=execution_id)
        errors: List[ErrorEntry] = []

        for index, path in enumerate(documents, start=1):
            logger.info(f"Processando arquivo {index}: {path.name}")
            result: PipelineResult = self.orchestrator.process(path, execution_id=execution_id)

            summary.found += 1
            summary.processed += 1
            if result.status == "persisted":
                summary.persisted += 1
            elif result.error is not None:
                errors.append(result.error)

        summary.errored = len(errors)
        try:
            self.error_log.write(errors)
            summary.error_log_path = str(getattr(self.error_log, "path", "")) or None
        except PersistenceError as e:
            logger.error(f"Log de erros não gravado: {e}")
            summary.error_log_error = str(e)

        logger.info(
            f"Extração concluída. {summary.persisted} registros salvos; "
            f"{summary.errored} arquivos ignorados ou com erro."
        )
        return summary


def build_batch_runner(config, dry_run: bool = False, registry=None) -> BatchRunner:
    """
    Monta o lote a partir das configurações (rpa_config.Settings).
    dry_run grava as ordens só em memória; o log de erros continua sendo escrito.
    """
    store = InMemoryServiceOrderStore() if dry_run else CsvServiceOrderStore(config.SERVICE_ORDERS_PATH)
    orchestrator = Orchestrator(
        registry=registry if registry is not None else load_fleet_registry(config.FLEET_REGISTRY_PATH),
        store=store,
        city_anchor=config.CITY_ANCHOR,
        clause_anchor=config.VEHICLE_CLAUSE_ANCHOR,
    )
    return BatchRunner(orchestrator, JsonErrorLog(config.ERROR_LOG_PATH), extensions=config.DOC_EXTENSIONS)
