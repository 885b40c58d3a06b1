"""Module to handle input and output of excel files"""

import shutil
from pathlib import Path
from typing import Protocol, Sequence

import pandas as pd
from openpyxl import Workbook, load_workbook

from passwordgame.state import RuleEntry

LEDGER_HEADER = ("#", "rule", "description", "satisfied")


class Ledger(Protocol):
    """Anything carrying rule entries and a password (a ConstraintState, a SessionResult)."""

    text: str
    rules: Sequence[RuleEntry]


def load_rule_texts(
    file_path: str, sheet_name: str, column: int = 1, start: int = 1
) -> list[str]:
    """loads rule texts, one per row, from a single column.

    args:
        file_path: The path to the Excel file
        sheet_name: The name of the sheet to load data from
        column: The 1-based column holding the rule texts
        start: The first (1-based) row to read

    returns:
        The non-empty rule texts in row order
    """

    df = pd.read_excel(file_path, sheet_name=sheet_name, header=None, engine="openpyxl")

    if column - 1 >= df.shape[1]:
        raise ValueError(f"Sheet '{sheet_name}' has no column {column}.")

    cells = df.iloc[start - 1 :, column - 1]
    return [str(cell).strip() for cell in cells if pd.notna(cell) and str(cell).strip()]


def copy_excel_file(original_path: str, fname_extension: str) -> str:
    """Copies an Excel file and saves it with a new filename in the same directory.

    args:
        original_path: The path to the original Excel file
        fname_extension: A string to add to the original filename

    returns:
        The path of the copied file
    """
    original = Path(original_path)
    new_path = original.with_name(original.stem + fname_extension + original.suffix)
    shutil.copy2(original, new_path)
    return str(new_path)


def save_ledger(file_path: str, sheet_name: str, state: Ledger) -> None:
    """Writes the rule ledger and the final password into a sheet.

    The sheet is created if missing (and the workbook too); an existing sheet
    of that name is replaced.

    args:
        file_path: The path to the Excel file
        sheet_name: The name of the sheet to save data to
        state: The session ledger (or a finished session)
    """

    if Path(file_path).exists():
        wb = load_workbook(file_path)
    else:
        wb = Workbook()
        wb.active.title = sheet_name

    position = None
    if sheet_name in wb.sheetnames:
        position = wb.sheetnames.index(sheet_name)
        wb.remove(wb[sheet_name])
    sheet = wb.create_sheet(sheet_name, position)

    sheet.append(LEDGER_HEADER)
    for index, entry in enumerate(state.rules):
        sheet.append((index, entry.rule.rule_id, entry.rule.describe(), entry.satisfied))
    sheet.append(())
    sheet.append(("password", state.text))

    wb.save(file_path)
