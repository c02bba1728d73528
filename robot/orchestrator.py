import logging
import time
import uuid
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional, Union

from .core.document_reader import read_document_text
from .core.mapper import map_to_persisted
from .core.parser import DEFAULT_CITY_ANCHOR, extract_from_text
from .core.registry import FleetRegistry, fill_from_registry, lookup_vehicle
from .core.text_normalizer import normalize_text
from .core.validators import classify_record, completeness_validator
from .core.vehicle_resolver import DEFAULT_CLAUSE_ANCHOR
from .schema.models import ErrorEntry
from .schema.orchestrator_models import OrchestratorEvent, PipelineResult
from .storage.service_orders import ServiceOrderStore

logger = logging.getLogger(__name__)

REASON_TEMPLATE_DEVIATION = "Não segue o modelo de OS ou dados incompletos"


class Orchestrator:
    """
    Coordenador do pipeline de UM documento.
    Reader -> Normalizer -> Parser -> Frota -> Classificador -> Store.

    Toda exceção de estágio é convertida em ErrorEntry dentro de process();
    nenhuma falha de documento escapa para o lote.
    Fonte de texto, frota e store são injetados: o ciclo de vida é de quem chama.
    """

    def __init__(
        self,
        registry: FleetRegistry,
        store: ServiceOrderStore,
        reader: Callable[[Union[str, Path]], str] = read_document_text,
        city_anchor: str = DEFAULT_CITY_ANCHOR,
        clause_anchor: str = DEFAULT_CLAUSE_ANCHOR,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.registry = registry
        self.store = store
        self.reader = reader
        self.city_anchor = city_anchor
        self.clause_anchor = clause_anchor
        self.clock = clock

    def _fail(self, result: PipelineResult, stage: str, error: Exception, details: Optional[dict] = None) -> PipelineResult:
        result.events.append(OrchestratorEvent(
            stage=stage,
            status="FAILURE",
            details={"error": str(error)},
            error_policy="ABORT"
        ))
        result.status = "error"
        result.error = ErrorEntry(file=result.file, reason=str(error), details=details)
        return result

    def process(self, path: Union[str, Path], execution_id: str = "unknown_exec") -> PipelineResult:
        """
        Executa o pipeline completo para um arquivo.

        Args:
            path: Caminho do documento (.docx ou .pdf).
            execution_id: Identificador do lote, repetido em cada resultado.
        """
        path = Path(path)
        result = PipelineResult(
            trace_id=str(uuid.uuid4()),
            execution_id=execution_id,
            file=path.name,
            start_time=datetime.now(),
            status="error", # Pessimista por padrão
        )

        try:
            return self._run(path, result)
        finally:
            result.end_time = datetime.now()

    def _run(self, path: Path, result: PipelineResult) -> PipelineResult:
        # ====================================================
        # 1. READ STAGE
        # ====================================================
        start_read = time.time()
        try:
            raw_text = self.reader(path)
        except Exception as e:
            logger.error(f"Erro em {path.name}: {e}")
            return self._fail(result, "READ", e)

        result.events.append(OrchestratorEvent(
            stage="READ",
            status="SUCCESS",
            details={
                "duration_sec": round(time.time() - start_read, 4),
                "chars": len(raw_text),
                "input_source": str(path),
            },
            error_policy="CONTINUE"
        ))

        # ====================================================
        # 2. NORMALIZE + PARSE STAGES
        # ====================================================
        try:
            normalized_text = normalize_text(raw_text)
        except Exception as e:
            logger.error(f"Erro ao normalizar {path.name}: {e}")
            return self._fail(result, "NORMALIZE", e)

        result.events.append(OrchestratorEvent(
            stage="NORMALIZE",
            status="SUCCESS",
            details={
                "reduction_ratio": round(1 - (len(normalized_text) / len(raw_text)), 2) if len(raw_text) > 0 else 0
            },
            error_policy="CONTINUE"
        ))

        start_parse = time.time()
        try:
            record = extract_from_text(
                normalized_text,
                source_filename=path.name,
                city_anchor=self.city_anchor,
                clause_anchor=self.clause_anchor,
            )
        except Exception as e:
            logger.error(f"Erro ao extrair campos de {path.name}: {e}")
            return self._fail(result, "PARSE", e)

        result.events.append(OrchestratorEvent(
            stage="PARSE",
            status="SUCCESS",
            details={
                "duration_sec": round(time.time() - start_parse, 4),
                "vehicle": record.vehicle.to_sentinel_dict(),
            },
            error_policy="CONTINUE"
        ))

        # ====================================================
        # 3. CROSS_REFERENCE STAGE (falha da frota = não encontrado)
        # ====================================================
        lookup_field, vehicle = lookup_vehicle(record.vehicle, self.registry)
        record = record.with_vehicle(fill_from_registry(record.vehicle, vehicle))

        result.events.append(OrchestratorEvent(
            stage="CROSS_REFERENCE",
            status="SUCCESS",
            details={"lookup_field": lookup_field, "found": vehicle is not None},
            error_policy="CONTINUE"
        ))

        # ====================================================
        # 4. CLASSIFY STAGE
        # ====================================================
        record = classify_record(record)
        result.record = record
        raw_record = record.to_sentinel_dict()

        if not record.completo:
            validacao = completeness_validator(record)
            result.events.append(OrchestratorEvent(
                stage="CLASSIFY",
                status="FAILURE",
                details={"campos_ausentes": validacao["campos_ausentes"]},
                error_policy="CONTINUE"
            ))
            result.status = "rejected"
            result.error = ErrorEntry(file=path.name, reason=REASON_TEMPLATE_DEVIATION, details=raw_record)

            logger.warning(f"Ignorado: {path.name} ({REASON_TEMPLATE_DEVIATION}; ausentes: {', '.join(validacao['campos_ausentes'])})")
            logger.debug(f"Texto extraído de {path.name} (ignorado):\n{raw_text}")
            return result

        result.events.append(OrchestratorEvent(
            stage="CLASSIFY",
            status="SUCCESS",
            error_policy="CONTINUE"
        ))

        # ====================================================
        # 5. PERSIST STAGE (sem retentativa na mesma execução)
        # ====================================================
        try:
            order = map_to_persisted(record, self.clock() if self.clock else None)
            persisted_id = self.store.add(order)
        except Exception as e:
            logger.error(f"Erro ao salvar {path.name}: {e}")
            return self._fail(result, "PERSIST", e, details=raw_record)

        result.events.append(OrchestratorEvent(
            stage="PERSIST",
            status="SUCCESS",
            details={"persisted_id": persisted_id},
            error_policy="CONTINUE"
        ))
        result.status = "persisted"
        result.persisted_id = persisted_id

        logger.info(f"Extraído e salvo: {path.name} (ID: {persisted_id})")
        return result
