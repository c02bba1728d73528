from pathlib import Path
from typing import Union

import docx
import fitz

from .exceptions import DocumentReadError

SUPPORTED_SUFFIXES = (".docx", ".pdf")


def docx_path_to_text(path: Union[str, Path]) -> str:
    """Lê um .docx do disco: parágrafos e, em seguida, as células das tabelas."""
    document = docx.Document(str(path))
    text_parts = [p.text for p in document.paragraphs]

    for table in document.tables:
        for row in table.rows:
            text_parts.append(" ".join(cell.text for cell in row.cells))

    return "\n".join(text_parts)


def pdf_path_to_text(path: Union[str, Path]) -> str:
    """Lê um PDF do disco e retorna o texto concatenado."""
    doc = fitz.open(str(path))
    text_parts = []

    for page in doc:
        text_parts.append(page.get_text())

    doc.close()
    return "\n".join(text_parts)


READERS = {
    ".docx": docx_path_to_text,
    ".pdf": pdf_path_to_text,
}


def read_document_text(path: Union[str, Path]) -> str:
    """
    Fonte de texto do pipeline: escolhe o leitor pela extensão.
    Qualquer falha (extensão, arquivo corrompido, permissão) vira DocumentReadError.
    """
    path = Path(path)
    reader = READERS.get(path.suffix.lower())
    if reader is None:
        raise DocumentReadError(f"Formato não suportado: {path.name}")

    try:
        return reader(path)
    except Exception as e:
        raise DocumentReadError(f"Falha ao ler {path.name}: {e}") from e
