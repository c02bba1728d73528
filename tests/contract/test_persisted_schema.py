import json

import pandas as pd
import pytest

from robot.core.exceptions import PersistenceError
from robot.schema.models import ErrorEntry, PersistedServiceOrder
from robot.storage.error_log import JsonErrorLog, read_error_log
from robot.storage.service_orders import COLUMNS, CsvServiceOrderStore

pytestmark = pytest.mark.contract

# Esquema legado consumido pelas telas de conferência: nomes e ordem são contrato
PERSISTED_FIELDS = [
    "cadastroViatura",
    "dataCriacao",
    "dataOS",
    "modeloViatura",
    "numeroOS",
    "observacao",
    "oficinaResponsavel",
    "placaViatura",
    "valorOS",
    "arquivoOriginal",
]


def _order(numero: str = "4567") -> PersistedServiceOrder:
    return PersistedServiceOrder(
        cadastroViatura="CAV12",
        dataCriacao="15 de março de 2024 às 10:30:05 UTC-03:00",
        dataOS="2024-03-15",
        modeloViatura="TRAILBLAZER",
        numeroOS=numero,
        observacao="troca das pastilhas de freio",
        oficinaResponsavel="AUTO CENTER PARANGABA LTDA",
        placaViatura="SBQ0D65",
        valorOS="1.250,00",
        arquivoOriginal=f"os_{numero}.docx",
    )


def test_persisted_field_names():
    assert list(PersistedServiceOrder.model_fields) == PERSISTED_FIELDS
    assert COLUMNS == ["id"] + PERSISTED_FIELDS

def test_error_entry_shape():
    entry = ErrorEntry(file="a.docx", reason="Falha ao ler a.docx")

    assert entry.model_dump() == {"file": "a.docx", "reason": "Falha ao ler a.docx", "details": None}


def test_csv_store_appends_with_single_header(tmp_path):
    """✅ Cabeçalho só na primeira gravação; cada add gera um id novo"""
    store = CsvServiceOrderStore(tmp_path / "saida" / "ordens.csv")

    first = store.add(_order("1"))
    second = store.add(_order("2"))

    df = store.read_all()
    assert first != second
    assert list(df.columns) == COLUMNS
    assert df["id"].tolist() == [first, second]
    assert df["numeroOS"].tolist() == ["1", "2"]
    assert df.loc[0, "dataCriacao"] == "15 de março de 2024 às 10:30:05 UTC-03:00"

    lines = (tmp_path / "saida" / "ordens.csv").read_text(encoding="utf-8").splitlines()
    assert sum(1 for line in lines if line.startswith("id,")) == 1

def test_csv_store_empty_read(tmp_path):
    df = CsvServiceOrderStore(tmp_path / "ordens.csv").read_all()

    assert df.empty
    assert list(df.columns) == COLUMNS

def test_csv_store_failure_is_persistence_error(tmp_path):
    bloqueio = tmp_path / "arquivo"
    bloqueio.write_text("", encoding="utf-8")

    with pytest.raises(PersistenceError):
        CsvServiceOrderStore(bloqueio / "ordens.csv").add(_order())


def test_json_error_log(tmp_path):
    path = tmp_path / "erros.json"
    entries = [
        ErrorEntry(file="quebrado.docx", reason="Falha ao ler quebrado.docx"),
        ErrorEntry(
            file="os_991.docx",
            reason="Não segue o modelo de OS ou dados incompletos",
            details={"OFICINA": "S/A", "COMPLETO": False},
        ),
    ]

    JsonErrorLog(path).write(entries)

    raw = path.read_text(encoding="utf-8")
    assert "Não segue o modelo" in raw  # acentos preservados
    assert json.loads(raw)[1] == {
        "file": "os_991.docx",
        "reason": "Não segue o modelo de OS ou dados incompletos",
        "details": {"OFICINA": "S/A", "COMPLETO": False},
    }
    assert read_error_log(path) == entries

def test_empty_error_log_is_still_written(tmp_path):
    path = tmp_path / "erros.json"

    JsonErrorLog(path).write([])

    assert json.loads(path.read_text(encoding="utf-8")) == []

def test_read_missing_error_log(tmp_path):
    assert read_error_log(tmp_path / "nada.json") == []
