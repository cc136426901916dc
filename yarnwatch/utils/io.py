"""File and HTTP I/O utilities for reading records and writing report output."""

import json
import logging
import time
from pathlib import Path

import httpx
import pandas as pd
from rich.console import Console

type FilePath = str | Path
type QueryParams = dict[str, str]

logger = logging.getLogger(__name__)
console = Console()


def read_records_file(path: FilePath) -> list[dict]:
    """Load production records exported as JSON, CSV or Parquet."""
    path = Path(path)

    match path.suffix.lower():
        case ".json":
            with open(path) as f:
                payload = json.load(f)
            match payload:
                case list():
                    return payload
                case {"data": list() as rows}:
                    return rows
                case _:
                    raise ValueError(f"{path} does not contain a list of records")
        case ".csv":
            return pd.read_csv(path).to_dict(orient="records")
        case ".parquet":
            return pd.read_parquet(path).to_dict(orient="records")
        case ext:
            raise ValueError(f"Unsupported record file format: {ext}")


def fetch_json(
    client: httpx.Client,
    path: str,
    params: QueryParams | None = None,
    max_retries: int = 3,
    backoff: float = 0.5,
):
    """GET a JSON document, retrying transport errors and 5xx responses."""
    attempt = 0
    while True:
        attempt += 1
        try:
            response = client.get(path, params=params or None)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as exc:
            if exc.response.status_code < 500 or attempt >= max_retries:
                logger.error(f"GET {path} failed with HTTP {exc.response.status_code}")
                raise
            logger.warning(f"GET {path} returned {exc.response.status_code}, retry {attempt}/{max_retries}")
        except httpx.TransportError as exc:
            if attempt >= max_retries:
                logger.error(f"GET {path} failed after {attempt} attempts: {exc}")
                raise
            logger.warning(f"GET {path} transport error ({exc}), retry {attempt}/{max_retries}")
        time.sleep(backoff * attempt)


def write_output(df: pd.DataFrame, path: FilePath, fmt: str = "csv") -> None:
    """Export a report table, keeping its row labels as leading columns."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    match fmt:
        case "csv":
            df.to_csv(path)
        case "parquet":
            df.reset_index().to_parquet(path, index=False)
        case "json":
            df.reset_index().to_json(path, orient="records", indent=2)
        case other:
            raise ValueError(f"Unsupported table format: {other}")

    console.print(f"  Wrote {len(df)} report rows to {path}")


def write_json(payload: dict | list, path: FilePath) -> None:
    """Write a report payload (e.g. a TrendResponse) as JSON."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2))
    console.print(f"  Wrote report to {path}")

