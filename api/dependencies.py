"""
FastAPI dependency injection utilities.
Builds the batch pipeline from settings; tests override get_settings.
"""
from pathlib import Path
from typing import Annotated, Optional
from fastapi import Depends, HTTPException, status

from rpa_config import Settings, settings
from robot.batch import BatchRunner, build_batch_runner


def get_settings() -> Settings:
    return settings


def resolve_docs_root(docs_root: Optional[str], config: Settings) -> Path:
    """
    Resolve the batch root directory.

    Raises:
        HTTPException: 404 if the directory does not exist
    """
    root = Path(docs_root or config.DOCS_ROOT)
    if not root.is_dir():
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Pasta de documentos não encontrada: {root}"
        )
    return root


def get_runner_factory(config: Annotated[Settings, Depends(get_settings)]):
    """Factory so the dry_run flag from the body decides the store."""
    def factory(dry_run: bool) -> BatchRunner:
        return build_batch_runner(config, dry_run=dry_run)
    return factory
