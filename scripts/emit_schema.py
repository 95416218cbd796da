import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from Generate.orchestrator import emit_params_schema


if __name__ == "__main__":
    out = sys.argv[1] if len(sys.argv) > 1 else "schemas/params.schema.json"
    emit_params_schema(out)
    print(f"Wrote {out}")
