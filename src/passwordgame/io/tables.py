"""CSV loaders for the fact tables.

Each loader returns a DataFrame with exactly the expected columns, typed, and
raises ValueError naming the missing columns otherwise.
"""

from __future__ import annotations

import pandas as pd

__all__ = ["load_video_table", "load_geo_table", "load_chess_table", "load_wordle_table"]


def _read(path: str, columns: tuple[str, ...]) -> pd.DataFrame:
    df = pd.read_csv(path, skipinitialspace=True)
    df.columns = [str(c).strip().lower() for c in df.columns]
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise ValueError(f"Table {path} is missing column(s): {', '.join(missing)}")
    return df[list(columns)].dropna()


def load_video_table(path: str) -> pd.DataFrame:
    """`seconds,video_id` rows."""
    df = _read(path, ("seconds", "video_id"))
    return df.astype({"seconds": int, "video_id": str})


def load_geo_table(path: str) -> pd.DataFrame:
    """`lat,lon,country` rows."""
    df = _read(path, ("lat", "lon", "country"))
    return df.astype({"lat": float, "lon": float, "country": str})


def load_chess_table(path: str) -> pd.DataFrame:
    """`fen,move` rows."""
    df = _read(path, ("fen", "move"))
    return df.astype({"fen": str, "move": str})


def load_wordle_table(path: str) -> pd.DataFrame:
    """`date,answer` rows; dates are ISO formatted."""
    df = _read(path, ("date", "answer"))
    df = df.astype({"answer": str})
    df["date"] = pd.to_datetime(df["date"]).dt.date
    return df
