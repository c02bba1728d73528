from typing import List, Optional, Dict, Literal, Any
from datetime import datetime
from pydantic import BaseModel, Field
from .models import ExtractedRecord, ErrorEntry

Stage = Literal["READ", "NORMALIZE", "PARSE", "CROSS_REFERENCE", "CLASSIFY", "PERSIST"]


class OrchestratorEvent(BaseModel):
    """
    Representa um evento imutável ocorrido durante o processamento de um documento.
    Usado para auditoria e observabilidade do lote.
    """
    timestamp: datetime = Field(default_factory=datetime.now)
    stage: Stage
    status: Literal["SUCCESS", "FAILURE"]
    # Details deve ser flat e serializável
    details: Dict[str, Any] = Field(default_factory=dict)
    error_policy: Literal["ABORT", "CONTINUE"] = "ABORT"


class PipelineResult(BaseModel):
    """
    Resultado do processamento de UM documento.
    Contém o histórico (Audit Trail) e o desfecho: gravado, rejeitado ou erro.
    """
    trace_id: str
    execution_id: str
    file: str

    start_time: datetime
    end_time: Optional[datetime] = None

    # persisted = gravado no store | rejected = incompleto | error = exceção em algum estágio
    status: Literal["persisted", "rejected", "error"]

    # Audit Trail: Lista ordenada de eventos
    events: List[OrchestratorEvent] = Field(default_factory=list)

    record: Optional[ExtractedRecord] = None
    persisted_id: Optional[str] = None

    # Só existe quando status != persisted
    error: Optional[ErrorEntry] = None
