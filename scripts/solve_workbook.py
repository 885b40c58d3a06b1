from __future__ import annotations

from passwordgame.facts.tables import load_providers
from passwordgame.pipeline import solve_excel

# --- Workbook configuration ---
INPUT_PATH = "data/Reglas.xlsx"
SHEET_NAME = "Reglas"

# Rule texts live in one column (1-based)
COLUMN = 1
START_ROW = 2

POLICY_PATH = "policies/default.yaml"
DATA_DIR = "data"


def main() -> int:
    session = solve_excel(
        input_path=INPUT_PATH,
        sheet_name=SHEET_NAME,
        column=COLUMN,
        start=START_ROW,
        policy_path=POLICY_PATH,
        providers=load_providers(DATA_DIR),
        save=True,
    )

    print(f"[Workbook] status={session.status.value} password={session.text!r}")
    if session.skipped:
        print(f"[Workbook] {len(session.skipped)} rule text(s) could not be parsed")
    return 0 if session.ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
