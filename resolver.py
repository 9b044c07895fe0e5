"""
Fetches the detail row behind each umbrella order and builds normalized orders.

A failed or empty detail read is not an error here: the order is still shown,
just without details.
"""
import logging
from concurrent.futures import ThreadPoolExecutor

from flask import current_app, has_app_context

from dispatcher import OrderBoard
from errors import StoreError
from normalizer import assign_sequential_ids, normalize_order
from order_types import ORDER_SOURCES, source_for

logger = logging.getLogger(__name__)


def fetch_detail(store, order_type, foreign_key):
    source = ORDER_SOURCES.get(order_type) if isinstance(order_type, str) else None
    if source is None or not foreign_key:
        return {}
    try:
        row = store.select_one(source.table, {"id": foreign_key})
    except StoreError as e:
        logger.warning("Could not load %s %s: %s", source.table, foreign_key, e)
        return {}
    if row is None:
        logger.warning("No %s row with id %s", source.table, foreign_key)
        return {}
    return row


def _fetch_all(store, stubs, workers):
    """One detail read per stub, at most `workers` in flight at a time."""
    jobs = []
    for stub in stubs:
        order_type, _, key = source_for(stub)
        jobs.append((order_type, key))
    if workers <= 1 or len(jobs) <= 1:
        return [fetch_detail(store, order_type, key) for order_type, key in jobs]

    app = current_app._get_current_object() if has_app_context() else None

    def run(job):
        if app is None:
            return fetch_detail(store, *job)
        # each worker thread gets its own app context and db session
        with app.app_context():
            return fetch_detail(store.fresh(), *job)

    with ThreadPoolExecutor(max_workers=workers) as pool:
        return list(pool.map(run, jobs))


def resolve_orders(store, stubs, profiles=None, workers=1):
    profiles_by_id = {p["id"]: p for p in (profiles or [])}
    numbered = assign_sequential_ids(stubs)
    details = _fetch_all(store, [stub for _, stub in numbered], workers)
    return [
        normalize_order(stub, detail, profiles_by_id.get(stub.get("user_id")), seq)
        for (seq, stub), detail in zip(numbered, details)
    ]


def load_order_board(store, workers=1, filters=None):
    """Read every order stub and profile once, then resolve details."""
    stubs = store.select("orders", filters)
    profiles = store.select("profiles")
    return OrderBoard(resolve_orders(store, stubs, profiles, workers))
