"""Long-term report session: one background worker for fetches and aggregation passes."""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import date

import httpx
import pandas as pd

from yarnwatch.aggregation.assemble import TrendTable
from yarnwatch.aggregation.filters import unique_values
from yarnwatch.aggregation.finalize import TREND_POLICY, FinalizerPolicy
from yarnwatch.aggregation.request import AggregationRequest
from yarnwatch.aggregation.transform import normalize_records
from yarnwatch.aggregation.trend import build_trend
from yarnwatch.config import DashboardConfig, load_dashboard_config
from yarnwatch.domains.long_term.ingest import ingest_article_suggestions, ingest_long_term_records
from yarnwatch.domains.long_term.search import SearchReport, build_search_report

logger = logging.getLogger(__name__)


class ReportSession:
    """Holds the loaded record set and serializes work on a single worker.

    An aggregation requested while a fetch is still running waits for that
    fetch to finish and then reads the fresh records. A failed fetch leaves
    the session with no records, so aggregations return empty tables.
    """

    def __init__(
        self,
        env: str = "production",
        client: httpx.Client | None = None,
        config: DashboardConfig | None = None,
        fetcher=ingest_long_term_records,
        suggester=ingest_article_suggestions,
    ):
        self.env = env
        self.config = config or load_dashboard_config(env)
        self._client = client
        self._fetcher = fetcher
        self._suggester = suggester
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="yarnwatch-session")
        self._lock = threading.Lock()
        self._pending: Future | None = None
        self._generation = 0
        self._records = normalize_records([])

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def close(self) -> None:
        self._executor.shutdown(wait=True)

    @property
    def records(self) -> pd.DataFrame:
        self._wait_for_data()
        return self._current_records()

    def load(
        self,
        start_date: date | str | None = None,
        end_date: date | str | None = None,
        lot_ids: str | None = None,
        articles: str | None = None,
    ) -> Future:
        """Start fetching records in the background; resolves to the record count."""
        with self._lock:
            future = self._executor.submit(
                self._fetch, self._generation, start_date, end_date, lot_ids, articles
            )
            self._pending = future
        return future

    def load_records(self, records) -> None:
        """Replace the record set with already fetched (or file-loaded) records.

        Fetches still in flight are superseded and their results dropped.
        """
        frame = normalize_records(records)
        with self._lock:
            self._generation += 1
            self._pending = None
            self._records = frame

    def _fetch(self, generation: int, start_date, end_date, lot_ids, articles) -> int:
        try:
            raw = self._fetcher(
                start_date=start_date,
                end_date=end_date,
                lot_ids=lot_ids,
                articles=articles,
                client=self._client,
                env=self.env,
            )
            frame = normalize_records(raw)
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning(f"Long-term fetch failed, continuing with an empty record set: {exc}")
            frame = normalize_records([])

        with self._lock:
            if generation != self._generation:
                logger.debug(f"Dropping superseded fetch of {len(frame)} records")
            else:
                self._records = frame
        return len(frame)

    def _wait_for_data(self) -> None:
        with self._lock:
            pending = self._pending
        if pending is None:
            return
        if not pending.done():
            logger.debug("Aggregation queued behind an in-flight fetch")
        pending.result()

    def _current_records(self) -> pd.DataFrame:
        with self._lock:
            return self._records

    def trend(self, request: AggregationRequest, policy: FinalizerPolicy = TREND_POLICY) -> TrendTable:
        return build_trend(self.records, request, policy, self.config.report.shift_hours)

    def search(self, request: AggregationRequest, visible_columns: list[str] | None = None) -> SearchReport:
        return build_search_report(self.records, request, visible_columns)

    def submit_trend(self, request: AggregationRequest, policy: FinalizerPolicy = TREND_POLICY) -> Future:
        """Run a trend pass on the worker.

        The worker runs jobs in submission order, so every fetch queued before
        this call has finished when the pass reads the records. Fetches queued
        afterwards are not waited for.
        """
        shift_hours = self.config.report.shift_hours
        return self._executor.submit(
            lambda: build_trend(self._current_records(), request, policy, shift_hours)
        )

    def filter_options(self, field: str, fallback: str | None = None) -> list[str]:
        return unique_values(self.records, field, fallback or self.config.report.trend_fallback_label)

    def article_suggestions(self, query: str) -> list[str]:
        """Article numbers matching a partial query; empty when the lookup fails."""
        try:
            return self._suggester(query, client=self._client, env=self.env)
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning(f"Article lookup for {query!r} failed: {exc}")
            return []
