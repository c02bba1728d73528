import re
from datetime import date, datetime
from typing import Optional

from ..schema.models import SENTINEL, ExtractedRecord, PersistedServiceOrder
from .validators import completeness_validator

MONTHS = {
    "janeiro": 1, "fevereiro": 2, "março": 3, "abril": 4,
    "maio": 5, "junho": 6, "julho": 7, "agosto": 8,
    "setembro": 9, "outubro": 10, "novembro": 11, "dezembro": 12,
}

MONTH_NAMES = {number: name for name, number in MONTHS.items()}

OFFICE_DATE_PATTERN = re.compile(r'(\d{1,2}) de ([a-zç]+) de (\d{4})', re.IGNORECASE)


def convert_date_to_iso(date_str: Optional[str]) -> str:
    """
    "15 de março de 2024" -> "2024-03-15".
    Qualquer entrada fora desse formato (ou data inexistente) retorna "S/A", nunca levanta.
    """
    if not date_str:
        return SENTINEL

    m = OFFICE_DATE_PATTERN.search(date_str)
    if not m:
        return SENTINEL

    month = MONTHS.get(m.group(2).lower())
    if month is None:
        return SENTINEL

    try:
        return date(int(m.group(3)), month, int(m.group(1))).isoformat()
    except ValueError:
        return SENTINEL


def format_creation_timestamp(now: Optional[datetime] = None) -> str:
    """
    Data de criação no formato de exibição legado:
    "19 de outubro de 2026 às 14:05:09 UTC-03:00"
    """
    now = now or datetime.now().astimezone()
    if now.tzinfo is None:
        now = now.astimezone()

    offset = now.utcoffset()
    offset_minutes = int(offset.total_seconds() // 60) if offset else 0
    sign = "+" if offset_minutes >= 0 else "-"
    hours, minutes = divmod(abs(offset_minutes), 60)

    date_part = f"{now.day} de {MONTH_NAMES[now.month]} de {now.year}"
    return f"{date_part} às {now.strftime('%H:%M:%S')} UTC{sign}{hours:02d}:{minutes:02d}"


def map_to_persisted(record: ExtractedRecord, now: Optional[datetime] = None) -> PersistedServiceOrder:
    """Projeta um registro COMPLETO no esquema gravado."""
    validacao = completeness_validator(record)
    if not validacao["valido"]:
        raise ValueError(f"Registro incompleto não pode ser gravado: {validacao['erro']}")

    return PersistedServiceOrder(
        cadastroViatura=record.cadastro,
        dataCriacao=format_creation_timestamp(now),
        dataOS=convert_date_to_iso(record.data_of),
        modeloViatura=record.modelo,
        numeroOS=record.num_os,
        observacao=record.defeito,
        oficinaResponsavel=record.oficina,
        placaViatura=record.placa,
        valorOS=record.valor_os,
        arquivoOriginal=record.arquivo,
    )
