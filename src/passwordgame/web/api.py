from __future__ import annotations

from typing import Any

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from passwordgame.errors import ParseError
from passwordgame.pipeline import solve
from passwordgame.rules.parse import parse

app = FastAPI(title="passwordgame")


class ParseRequest(BaseModel):
    text: str


class SolveRequest(BaseModel):
    rules: list[str]
    initial_text: str = ""


def _jsonable(value: Any) -> Any:
    if isinstance(value, tuple):
        return [_jsonable(v) for v in value]
    return value


@app.get("/api/ping")
def ping() -> JSONResponse:
    """Simple health check endpoint."""
    return JSONResponse({"status": "ok"})


@app.post("/api/parse")
def parse_rule(body: ParseRequest) -> JSONResponse:
    """Recognise one rule text; 422 when it cannot be parsed."""
    try:
        rule = parse(body.text)
    except ParseError as exc:
        return JSONResponse(
            {"error": exc.kind.value, "family": exc.family, "detail": str(exc)},
            status_code=422,
        )
    return JSONResponse(
        {
            "rule_id": rule.rule_id,
            "params": {k: _jsonable(v) for k, v in rule.params.items()},
            "description": rule.describe(),
        }
    )


@app.post("/api/solve")
def solve_rules(body: SolveRequest) -> JSONResponse:
    """Reveal the rules in order and return the resulting password."""
    session = solve(body.rules, initial_text=body.initial_text)
    conflict = session.result.conflict if session.result is not None else ()
    return JSONResponse(
        {
            "status": session.status.value,
            "password": session.text,
            "rules": [
                {"rule_id": entry.rule.rule_id, "satisfied": entry.satisfied}
                for entry in session.rules
            ],
            "skipped": list(session.skipped),
            "conflict": [rule.rule_id for rule in conflict],
        }
    )
