"""
Insight Request Builder and narrative-service client.

The builder turns the product list and headline stats into one compact JSON
payload; the client posts it to the text-generation service and validates
the reply. Nothing here retries: a failed or empty answer is surfaced to the
caller, who may re-invoke.

`InsightClient.submit` runs the blocking call on a worker thread and hands
back an `InsightTask`, so a slow service never holds up classification or
aggregation and the caller can abandon the request at any time.
"""

import logging
import threading
from concurrent.futures import CancelledError, Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

import requests

from . import settings, utils
from .classifier import classify_product
from .dead_stock import days_since_last_sale
from .errors import (
    InsightCancelled,
    NoInsightReturned,
    NothingToAnalyze,
    UpstreamUnavailable,
)
from .schemas import InsightProduct, InsightRequest, InventoryStats, Product

logger = logging.getLogger(__name__)


def build_insight_request(
    products: list[Product],
    stats: InventoryStats,
    now: datetime | None = None,
    max_products: int = settings.INSIGHTS_MAX_PRODUCTS,
) -> InsightRequest:
    """
    Builds the single payload sent to the narrative service.
    Raises NothingToAnalyze when there are no products.
    Lists longer than max_products are cut and flagged as truncated;
    the stats always describe the full inventory.
    """
    if not products:
        raise NothingToAnalyze()

    now = now or utils.utc_now()
    selected = products[:max_products]
    return InsightRequest(
        products=[
            InsightProduct(
                name=p.name,
                sku=p.sku,
                quantity=p.quantity,
                price=p.price,
                reorder_level=p.reorder_level,
                status=classify_product(p),
                days_since_last_sale=days_since_last_sale(p.last_sold_at, now),
            )
            for p in selected
        ],
        stats=stats,
        truncated=len(products) > len(selected),
    )


def parse_insight_response(status_code: int, body: Any) -> str:
    """
    Validates the narrative service's reply.
    - non-2xx -> UpstreamUnavailable with the service's 'error'/'details' message
      (or the raw text body), else a generic "Request failed with status N".
    - 2xx without a non-empty 'insights' field -> NoInsightReturned.
    """
    if not 200 <= status_code < 300:
        message = None
        if isinstance(body, dict):
            message = body.get("error") or body.get("details")
        elif isinstance(body, str) and body.strip():
            message = body.strip()
        raise UpstreamUnavailable(
            message or f"Request failed with status {status_code}", status_code
        )

    insights = body.get("insights") if isinstance(body, dict) else None
    if not isinstance(insights, str) or not insights.strip():
        raise NoInsightReturned()
    return insights


def describe_insight_error(error: Exception) -> str:
    """One user-facing message per failure kind."""
    if isinstance(error, NothingToAnalyze):
        return "No products available to analyze. Add products first."
    if isinstance(error, NoInsightReturned):
        return "The analysis finished but returned no insights. Please try again."
    if isinstance(error, InsightCancelled):
        return "Insight request cancelled."
    if isinstance(error, UpstreamUnavailable):
        return f"Insight request failed: {error.message}"
    return "An unexpected error occurred while generating insights."


@dataclass
class InsightTask:
    """Handle on an in-flight insight request."""

    future: Future
    cancel_event: threading.Event = field(default_factory=threading.Event)

    def cancel(self) -> None:
        self.cancel_event.set()
        self.future.cancel()

    @property
    def cancelled(self) -> bool:
        return self.cancel_event.is_set()

    def done(self) -> bool:
        return self.future.done()

    def result(self, timeout: float | None = None) -> str:
        """Blocks until the narrative arrives. Raises the typed error on failure."""
        try:
            return self.future.result(timeout=timeout)
        except CancelledError:
            raise InsightCancelled() from None


class InsightClient:
    def __init__(
        self,
        url: str | None = None,
        timeout: int | None = None,
        api_key: str | None = None,
        max_workers: int | None = None,
    ):
        self.url = url or settings.INSIGHTS_URL
        self.timeout = timeout or settings.INSIGHTS_TIMEOUT
        self.api_key = api_key if api_key is not None else settings.INSIGHTS_API_KEY
        self._max_workers = max_workers or settings.INSIGHT_WORKERS
        self._executor: ThreadPoolExecutor | None = None
        self._lock = threading.Lock()

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def generate(
        self, request: InsightRequest, cancel_event: threading.Event | None = None
    ) -> str:
        """Blocking, single-shot call to the narrative service."""
        if cancel_event is not None and cancel_event.is_set():
            raise InsightCancelled()

        payload = request.model_dump(mode="json", by_alias=True)
        logger.info(f"📤 Requesting insights for {len(request.products)} products")

        try:
            response = requests.post(
                self.url, json=payload, headers=self._headers(), timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"❌ Insight service unreachable: {e}")
            raise UpstreamUnavailable(str(e)) from e

        # The caller walked away while we were waiting; drop the answer.
        if cancel_event is not None and cancel_event.is_set():
            logger.info("Insight request cancelled, discarding response.")
            raise InsightCancelled()

        try:
            body = response.json()
        except ValueError:
            body = response.text

        logger.info(f"📡 Insight service responded with status {response.status_code}")
        insights = parse_insight_response(response.status_code, body)
        logger.info(f"✅ Insights received ({len(insights)} characters)")
        return insights

    def submit(self, request: InsightRequest) -> InsightTask:
        """Runs generate() on a worker thread and returns immediately."""
        cancel_event = threading.Event()
        future = self._get_executor().submit(self.generate, request, cancel_event)
        return InsightTask(future=future, cancel_event=cancel_event)

    def _get_executor(self) -> ThreadPoolExecutor:
        with self._lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self._max_workers, thread_name_prefix="insights"
                )
            return self._executor

    def close(self) -> None:
        with self._lock:
            if self._executor is not None:
                self._executor.shutdown(wait=False, cancel_futures=True)
                self._executor = None
