"""Common data transformation utilities."""

import pandas as pd

type ColumnMapping = dict[str, str]


def _token(name: str) -> str:
    return str(name).strip().replace("_", "").replace(" ", "").replace("-", "").lower()


def normalize_columns(df: pd.DataFrame, mapping: ColumnMapping | None = None) -> pd.DataFrame:
    """Rename columns through a case- and separator-insensitive mapping.

    Mapping keys are compared after dropping underscores, spaces and dashes
    and lowercasing, so "ShiftStartTime", "shiftStartTime" and
    "shift_start_time" all hit the same entry. Unmapped columns are kept.
    """
    if not mapping:
        return df

    lookup = {_token(src): dst for src, dst in mapping.items()}
    renames = {}
    for col in df.columns:
        target = lookup.get(_token(col))
        if target and target not in renames.values():
            renames[col] = target

    return df.rename(columns=renames)


def coerce_numeric(df: pd.DataFrame, columns: list[str]) -> pd.DataFrame:
    """Force columns to float, turning missing or non-numeric values into 0."""
    for col in columns:
        if col in df.columns:
            df[col] = pd.to_numeric(df[col], errors="coerce").fillna(0.0).astype(float)
        else:
            df[col] = 0.0
    return df


def count_numeric(df: pd.DataFrame, columns: list[str]) -> pd.DataFrame:
    """Flag, per column, which rows carry a genuinely numeric value."""
    flags = pd.DataFrame(index=df.index)
    for col in columns:
        if col in df.columns:
            flags[col] = pd.to_numeric(df[col], errors="coerce").notna().astype(int)
        else:
            flags[col] = 0
    return flags


def row_sum(df: pd.DataFrame, columns: list[str]) -> pd.Series:
    """Sum a set of already-coerced columns row by row."""
    present = [c for c in columns if c in df.columns]
    if not present:
        return pd.Series(0.0, index=df.index)
    return df[present].sum(axis=1).astype(float)
