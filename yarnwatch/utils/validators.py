"""Data validation utilities using pandera."""

import pandas as pd
import pandera as pa
from pandera import DataFrameSchema

type ValidationResult = dict[str, str | bool | list[str]]


def _describe_failures(failure_cases: pd.DataFrame) -> list[str]:
    """One message per failing column and check, with a row count and sample values."""
    messages = []
    for (column, check), cases in failure_cases.groupby(["column", "check"], dropna=False, sort=False):
        sample = ", ".join(str(v) for v in cases["failure_case"].head(3))
        messages.append(f"Column '{column}' failed {check} on {len(cases)} rows (e.g. {sample})")
    return messages


def validate_dataframe(df: pd.DataFrame, schema: DataFrameSchema) -> ValidationResult:
    """Validate a normalized frame, summarizing every failing column and check."""
    try:
        schema.validate(df, lazy=True)
    except pa.errors.SchemaErrors as exc:
        return {"valid": False, "status": "error", "errors": _describe_failures(exc.failure_cases)}
    return {"valid": True, "status": "ok", "errors": []}


def validate_record_batch(records) -> ValidationResult:
    """Structural check of a raw API payload before normalization."""
    match records:
        case list() if all(isinstance(r, dict) for r in records):
            return {"valid": True, "status": "ok", "errors": []}
        case list():
            bad = sum(1 for r in records if not isinstance(r, dict))
            return {"valid": False, "status": "error", "errors": [f"{bad} entries are not record objects"]}
        case _:
            return {
                "valid": False,
                "status": "error",
                "errors": [f"Expected a list of records, got {type(records).__name__}"],
            }
