from typing import Any, Dict, Mapping, Union

from ..schema.models import REQUIRED_FIELDS, SENTINEL, ExtractedRecord

RecordLike = Union[ExtractedRecord, Mapping[str, Any]]


def _required_values(record: RecordLike) -> Dict[str, Any]:
    if isinstance(record, ExtractedRecord):
        record = record.to_sentinel_dict()

    return {field: record.get(field) for field in REQUIRED_FIELDS}


def completeness_validator(record: RecordLike) -> Dict[str, Any]: ##     VALIDAÇÃO DO MODELO DE OS
    """
    Conjunção estrita dos 8 campos obrigatórios.
    Aceita o registro tipado ou a visão com chaves do ofício ("S/A" = ausente).
    Retorna dict com status e os campos ausentes.
    """
    values = _required_values(record)

    ausentes = [
        field for field, value in values.items()
        if not isinstance(value, str) or not value.strip() or value == SENTINEL
    ]

    if ausentes:
        return {
            "valido": False,
            "erro": f"Campos ausentes: {', '.join(ausentes)}",
            "campos_ausentes": ausentes,
        }

    return {
        "valido": True,
        "campos_ausentes": [],
    }


def is_complete(record: RecordLike) -> bool:
    return completeness_validator(record)["valido"]


def classify_record(record: ExtractedRecord) -> ExtractedRecord:
    """Único ponto onde COMPLETO é definido; roda depois do cruzamento com a frota."""
    return record.model_copy(update={"completo": is_complete(record)})
