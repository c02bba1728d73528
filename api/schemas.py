"""
Pydantic schemas for API contracts.
Separates batch control from the extraction core.
"""
from typing import Optional, Literal, Dict, List
from datetime import datetime
from pydantic import BaseModel, Field, field_validator

from robot.schema.models import ErrorEntry


class BatchRunRequest(BaseModel):
    """
    Disparo de um lote sobre uma pasta de ofícios.
    NEVER contains document content - only where to find it.
    """
    docs_root: Optional[str] = Field(None, description="Pasta raiz; padrão DOCS_ROOT")
    dry_run: bool = Field(default=False, description="Simulation mode flag: não grava ordens")

    @field_validator("docs_root")
    @classmethod
    def validate_docs_root(cls, v: Optional[str]) -> Optional[str]:
        """Rejeita caminhos vazios ou só com espaços."""
        if v is not None and not v.strip():
            raise ValueError("docs_root must not be blank")
        return v


class BatchRunResponse(BaseModel):
    """
    Resumo do lote executado.
    """
    execution_id: str
    status: Literal["completed"] = "completed"
    found: int
    processed: int
    persisted: int
    errored: int
    error_log_path: Optional[str] = None
    error_log_error: Optional[str] = None
    dry_run: bool = False
    timestamp: datetime = Field(default_factory=datetime.now)


class ErrorLogResponse(BaseModel):
    """
    Log de erros do último lote. READ-ONLY - never triggers reprocessing.
    """
    path: str
    entries: List[ErrorEntry] = Field(default_factory=list)


class HealthResponse(BaseModel):
    """
    Health check response.
    """
    status: Literal["healthy", "degraded", "unhealthy"]
    version: str
    timestamp: datetime = Field(default_factory=datetime.now)
    checks: Dict[str, bool] = Field(default_factory=dict)
