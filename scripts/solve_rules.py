from __future__ import annotations

import logging

from passwordgame.facts.tables import load_providers
from passwordgame.io.policy import load_policy
from passwordgame.pipeline import solve

# --- Session configuration ---
RULES_PATH = "data/rules.txt"
DATA_DIR = "data"
POLICY_PATH = "policies/default.yaml"
LOG_LEVEL = logging.INFO


def main() -> int:
    logging.basicConfig(level=LOG_LEVEL, format="%(levelname)s %(name)s: %(message)s")

    with open(RULES_PATH, "r", encoding="utf-8") as f:
        rule_texts = [line.strip() for line in f if line.strip()]

    session = solve(
        rule_texts,
        policy=load_policy(POLICY_PATH),
        providers=load_providers(DATA_DIR),
    )

    print(f"[Solve] status={session.status.value} rules={len(session.rules)}")
    print(f"[Solve] password={session.text!r}")
    for idx, entry in enumerate(session.rules):
        mark = "ok" if entry.satisfied else "--"
        print(f"  {idx:2d} [{mark}] {entry.rule.describe()}")

    if session.skipped:
        print("[Solve] Skipped rule texts:")
        for raw in session.skipped:
            print(f"  {raw}")

    if session.result is not None and session.result.conflict:
        print("[Solve] Conflicting rules (subset-minimal):")
        for rule in session.result.conflict:
            print(f"  {rule.describe()}")

    return 0 if session.ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
