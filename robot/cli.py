"""
Linha de comando do extrator de ordens de serviço.

    os-extractor run [--docs-root PASTA] [--registry PLANILHA] [--output CSV] [--errors JSON] [--dry-run]
    os-extractor inspect ARQUIVO
"""
import argparse
import json
import logging
import sys
from typing import List, Optional

from rpa_config import Settings, configure_logging, settings as default_settings

from .batch import build_batch_runner
from .core.document_reader import read_document_text
from .core.exceptions import DocumentDiscoveryError, DocumentReadError
from .core.parser import extract_from_text
from .core.registry import cross_reference, load_fleet_registry
from .core.text_normalizer import normalize_text
from .core.validators import classify_record, completeness_validator

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_READ_ERROR = 1
EXIT_DISCOVERY_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="os-extractor", description="Extração de ordens de serviço a partir de ofícios")
    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="Processa todos os ofícios de uma pasta (recursivo)")
    run.add_argument("--docs-root", help="Pasta raiz dos ofícios")
    run.add_argument("--registry", help="Planilha da frota (.csv ou .xlsx)")
    run.add_argument("--output", help="CSV de ordens de serviço gravadas")
    run.add_argument("--errors", help="Arquivo JSON do log de erros")
    run.add_argument("--dry-run", action="store_true", help="Não grava ordens; só gera o log de erros")

    inspect = sub.add_parser("inspect", help="Mostra texto normalizado e campos extraídos de um ofício")
    inspect.add_argument("file")

    return parser


def _override(config: Settings, args: argparse.Namespace) -> Settings:
    updates = {
        "DOCS_ROOT": args.docs_root,
        "FLEET_REGISTRY_PATH": args.registry,
        "SERVICE_ORDERS_PATH": args.output,
        "ERROR_LOG_PATH": args.errors,
    }
    return config.model_copy(update={k: v for k, v in updates.items() if v})


def cmd_run(config: Settings, args: argparse.Namespace) -> int:
    config = _override(config, args)
    runner = build_batch_runner(config, dry_run=args.dry_run)

    try:
        summary = runner.run(config.DOCS_ROOT)
    except DocumentDiscoveryError as e:
        logger.error(str(e))
        print(f"❌ {e}", file=sys.stderr)
        return EXIT_DISCOVERY_ERROR

    print(f"🔍 Encontrados {summary.found} arquivos; {summary.processed} processados.")
    print(f"✅ {summary.persisted} ordens de serviço gravadas.")
    if summary.error_log_error:
        print(f"❌ {summary.errored} arquivos ignorados ou com erro; log de erros não gravado: {summary.error_log_error}", file=sys.stderr)
    else:
        print(f"⚠️ {summary.errored} arquivos ignorados ou com erro. Detalhes em '{summary.error_log_path}'.")
    return EXIT_OK


def cmd_inspect(config: Settings, args: argparse.Namespace) -> int:
    try:
        raw = read_document_text(args.file)
    except DocumentReadError as e:
        print(f"❌ {e}", file=sys.stderr)
        return EXIT_READ_ERROR

    normalized = normalize_text(raw)
    record = extract_from_text(normalized, source_filename=args.file,
                               city_anchor=config.CITY_ANCHOR, clause_anchor=config.VEHICLE_CLAUSE_ANCHOR)
    registry = load_fleet_registry(config.FLEET_REGISTRY_PATH)
    record = classify_record(record.with_vehicle(cross_reference(record.vehicle, registry)))

    print("\n================ NORMALIZED TEXT ================\n")
    print(normalized[:3000])
    print("\n================ PARSER OUTPUT ================\n")
    print(json.dumps(record.to_sentinel_dict(), indent=2, ensure_ascii=False))
    print(json.dumps(completeness_validator(record), indent=2, ensure_ascii=False))
    return EXIT_OK


COMMANDS = {
    "run": cmd_run,
    "inspect": cmd_inspect,
}


def main(argv: Optional[List[str]] = None, config: Optional[Settings] = None) -> int:
    config = config or default_settings
    args = build_parser().parse_args(argv)
    configure_logging(config)

    return COMMANDS[args.command](config, args)


if __name__ == "__main__":
    sys.exit(main())
