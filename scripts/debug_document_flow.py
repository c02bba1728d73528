import sys
from pprint import pprint

from robot.core.document_reader import read_document_text
from robot.core.text_normalizer import normalize_text
from robot.core.vehicle_resolver import VEHICLE_STRATEGIES, isolate_vehicle_clause
from robot.schema.models import VehicleIdentity
from robot.core.parser import extract_from_text

if len(sys.argv) < 2:
    sys.exit("uso: python scripts/debug_document_flow.py OFICIO.docx")

DOC_PATH = sys.argv[1]

# 1. Extração literal
raw_text = read_document_text(DOC_PATH)

print("\n================ RAW TEXT ================\n")
print(raw_text[:3000])  # corta para não explodir o terminal

# 2. Normalização
normalized_text = normalize_text(raw_text)

print("\n================ NORMALIZED TEXT ================\n")
print(normalized_text[:3000])

# 3. Cláusula da viatura e cada estratégia em ordem
mode, clause = isolate_vehicle_clause(normalized_text)

print(f"\n================ VEHICLE CLAUSE ({mode}) ================\n")
print(clause[:500])

identity = VehicleIdentity()
for strategy in VEHICLE_STRATEGIES:
    identity = strategy(normalized_text, clause, identity)
    print(f"{strategy.__name__:32} -> {identity.to_sentinel_dict()}")

# 4. Parser completo
parsed = extract_from_text(normalized_text, source_filename=DOC_PATH)

print("\n================ PARSER OUTPUT ================\n")
pprint(parsed.to_sentinel_dict())
