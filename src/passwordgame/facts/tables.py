"""Fact providers backed by in-memory tables (see `passwordgame.io.tables`)."""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Optional

import pandas as pd

from passwordgame.facts.base import FactProviders
from passwordgame.io.tables import (
    load_chess_table,
    load_geo_table,
    load_video_table,
    load_wordle_table,
)

__all__ = [
    "TableVideoProvider",
    "TableGeoProvider",
    "TableChessProvider",
    "TableWordleProvider",
    "board_key",
    "load_providers",
]


def board_key(fen: str) -> str:
    """Piece placement and side to move; clocks and castling do not change the answer key."""
    parts = fen.split()
    return " ".join(parts[:2]) if len(parts) > 1 else f"{parts[0]} w"


class TableVideoProvider:
    def __init__(self, table: pd.DataFrame):
        self._by_seconds = dict(zip(table["seconds"].astype(int), table["video_id"].astype(str)))

    @classmethod
    def from_csv(cls, path: str) -> "TableVideoProvider":
        return cls(load_video_table(path))

    def video_for(self, seconds: int) -> Optional[str]:
        return self._by_seconds.get(int(seconds))


class TableGeoProvider:
    """Nearest listed coordinate within `tolerance` degrees."""

    def __init__(self, table: pd.DataFrame, tolerance: float = 0.5):
        self.table = table.reset_index(drop=True)
        self.tolerance = tolerance

    @classmethod
    def from_csv(cls, path: str, tolerance: float = 0.5) -> "TableGeoProvider":
        return cls(load_geo_table(path), tolerance)

    def country_at(self, lat: float, lon: float) -> Optional[str]:
        if self.table.empty:
            return None
        dist = (self.table["lat"] - lat) ** 2 + (self.table["lon"] - lon) ** 2
        idx = dist.idxmin()
        if dist[idx] > self.tolerance**2:
            return None
        return str(self.table.at[idx, "country"])


class TableChessProvider:
    def __init__(self, table: pd.DataFrame):
        self._by_board = {
            board_key(fen): move for fen, move in zip(table["fen"], table["move"])
        }

    @classmethod
    def from_csv(cls, path: str) -> "TableChessProvider":
        return cls(load_chess_table(path))

    def best_move(self, fen: str) -> Optional[str]:
        return self._by_board.get(board_key(fen))


class TableWordleProvider:
    def __init__(self, table: pd.DataFrame):
        self._by_day = dict(zip(table["date"], table["answer"]))

    @classmethod
    def from_csv(cls, path: str) -> "TableWordleProvider":
        return cls(load_wordle_table(path))

    def answer(self, day: date) -> Optional[str]:
        return self._by_day.get(day)


def load_providers(data_dir: str) -> FactProviders:
    """Build providers from whichever of videos/countries/chess/wordle.csv exist."""
    root = Path(data_dir)
    providers = FactProviders()
    if (root / "videos.csv").exists():
        providers.videos = TableVideoProvider.from_csv(str(root / "videos.csv"))
    if (root / "countries.csv").exists():
        providers.geo = TableGeoProvider.from_csv(str(root / "countries.csv"))
    if (root / "chess.csv").exists():
        providers.chess = TableChessProvider.from_csv(str(root / "chess.csv"))
    if (root / "wordle.csv").exists():
        providers.wordle = TableWordleProvider.from_csv(str(root / "wordle.csv"))
    return providers
