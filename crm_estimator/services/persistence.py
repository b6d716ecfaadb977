"""
Estimate persistence: JSON (de)serialization with default backfill, and the
EstimateStore that reads/writes ``estimates`` rows.

Stored blobs come from several generations of the estimate sheet, so loading
never trusts the shape of what it finds:

* malformed JSON or a non-object payload -> all-default document (logged)
* missing top-level sections -> their defaults
* calculatedValues / hoursSummary -> merged over defaults key by key
* empty sovItems -> five blank lines; empty nonSovItems -> the standard five
* general-info fields stored flat (older rows) are folded into generalInfo
"""
import json
import logging
import random
import threading

from sqlalchemy.exc import SQLAlchemyError

from crm_estimator import db
from crm_estimator.errors import NotFoundError, PersistenceError, SaveInProgressError
from crm_estimator.estimating.defaults import (
    GENERAL_INFO_FIELDS,
    TRAVEL_LEDGERS,
    default_calculated_values,
    default_document,
    default_general_info,
    default_hours_summary,
    default_ledger_entry,
    default_non_sov_items,
    default_sov_items,
    normalize_line_item,
)
from crm_estimator.estimating.sheet import recalculate
from crm_estimator.estimating.travel import recalculate_travel
from crm_estimator.models.estimate import Estimate
from crm_estimator.models.opportunity import Opportunity
from crm_estimator.services.notifications import notify_estimate_saved

logger = logging.getLogger(__name__)

DISPLAY_NUMBER_MIN = 100000
DISPLAY_NUMBER_MAX = 999999


def serialize_document(document):
    return json.dumps({
        "generalInfo": document.get("generalInfo") or default_general_info(),
        "sovItems": document.get("sovItems") or [],
        "nonSovItems": document.get("nonSovItems") or [],
        "calculatedValues": document.get("calculatedValues") or {},
        "hoursSummary": document.get("hoursSummary") or {},
    })


def serialize_travel(travel_data):
    if travel_data is None:
        return None
    return json.dumps(travel_data)


def _parse(raw):
    if isinstance(raw, (dict, list)):
        return raw
    if raw is None or raw == "":
        return None
    return json.loads(raw)


def _merge(defaults, stored):
    merged = dict(defaults)
    if isinstance(stored, dict):
        merged.update(stored)
    return merged


def _items(stored, fallback):
    if not isinstance(stored, list) or not stored:
        return fallback()
    return [normalize_line_item(item) for item in stored]


def backfill_document(parsed):
    if not isinstance(parsed, dict):
        raise ValueError(f"estimate data must be an object, got {type(parsed).__name__}")

    info_source = parsed.get("generalInfo")
    if not isinstance(info_source, dict):
        info_source = {key: parsed.get(key) for key in GENERAL_INFO_FIELDS}
    general_info = default_general_info(**{
        key: value for key, value in info_source.items() if key in GENERAL_INFO_FIELDS
    })

    return {
        "generalInfo": general_info,
        "sovItems": _items(parsed.get("sovItems"), default_sov_items),
        "nonSovItems": _items(parsed.get("nonSovItems"), default_non_sov_items),
        "calculatedValues": _merge(default_calculated_values(), parsed.get("calculatedValues")),
        "hoursSummary": _merge(default_hours_summary(), parsed.get("hoursSummary")),
    }


def deserialize_document(raw):
    try:
        return backfill_document(_parse(raw))
    except (ValueError, TypeError) as e:
        logger.warning("[ESTIMATE] stored estimate data unreadable, using defaults: %s", e)
        return default_document()


def backfill_travel(parsed):
    if not isinstance(parsed, dict):
        raise ValueError(f"travel data must be an object, got {type(parsed).__name__}")
    travel = {}
    for ledger in TRAVEL_LEDGERS:
        entries = parsed.get(ledger)
        if not isinstance(entries, list) or not entries:
            travel[ledger] = [default_ledger_entry(ledger)]
            continue
        travel[ledger] = [_merge(default_ledger_entry(ledger), entry) for entry in entries]
    return travel


def deserialize_travel(raw):
    """Travel tree, or None when the estimate was saved without travel."""
    try:
        parsed = _parse(raw)
        if parsed is None:
            return None
        return backfill_travel(parsed)
    except (ValueError, TypeError) as e:
        logger.warning("[ESTIMATE] stored travel data unreadable, travel disabled: %s", e)
        return None


def random_display_number():
    return str(random.randint(DISPLAY_NUMBER_MIN, DISPLAY_NUMBER_MAX))


class EstimateStore:
    """
    Reads and writes estimate rows. A save replaces the whole row.

    Re-entrant saves of the same document are refused while one is in flight;
    nothing is queued or retried.
    """

    _in_flight = set()
    _in_flight_lock = threading.Lock()

    def __init__(self, session=None):
        self.session = session or db.session

    # --- reads ---

    def get_opportunity(self, opportunity_id):
        opportunity = self.session.get(Opportunity, opportunity_id)
        if opportunity is None:
            raise NotFoundError(f"opportunity {opportunity_id} not found")
        return opportunity

    def load_opportunity(self, opportunity_id):
        opportunity = self.get_opportunity(opportunity_id)
        customer = opportunity.customer
        contact = customer.primary_contact if customer else None
        return {
            "id": opportunity.id,
            "description": opportunity.description or "",
            "quoteNumber": opportunity.quote_number or "",
            "customer": {
                "id": customer.id if customer else None,
                "name": (customer.name if customer else "") or "",
                "companyName": (customer.company_name if customer else "") or "",
                "address": (customer.address if customer else "") or "",
            },
            "primaryContact": contact.to_dict() if contact else None,
        }

    def load_estimates(self, opportunity_id):
        self.get_opportunity(opportunity_id)
        rows = (
            Estimate.query
            .filter(Estimate.opportunity_id == opportunity_id)
            .order_by(Estimate.created_at.desc(), Estimate.id.desc())
            .all()
        )
        return [row.to_record() for row in rows]

    def get_estimate(self, estimate_id):
        estimate = self.session.get(Estimate, estimate_id)
        if estimate is None:
            raise NotFoundError(f"estimate {estimate_id} not found")
        return estimate

    def load_estimate(self, estimate_id):
        estimate = self.get_estimate(estimate_id)
        return {
            "record": estimate.to_record(),
            "document": deserialize_document(estimate.data),
            "travelData": deserialize_travel(estimate.travel_data),
        }

    def new_document(self, opportunity_id):
        opportunity = self.get_opportunity(opportunity_id)
        customer = opportunity.customer
        return default_document(
            client=customer.display_name if customer else "",
            jobDescription=opportunity.description or "",
            location=(customer.address if customer else "") or "",
        )

    # --- writes ---

    def save_estimate(self, opportunity_id, document, travel_data=None):
        opportunity = self.get_opportunity(opportunity_id)
        with self._saving(("opportunity", opportunity.id)):
            data, travel = self._prepare(document, travel_data)
            estimate = Estimate(
                opportunity_id=opportunity.id,
                data=data,
                travel_data=travel,
                display_number=random_display_number(),
            )
            self._commit(estimate, "insert")
        logger.info("[ESTIMATE] inserted id=%s opportunity_id=%s display_number=%s",
                    estimate.id, opportunity.id, estimate.display_number)
        notify_estimate_saved(estimate, "insert")
        return estimate.to_record()

    def update_estimate(self, estimate_id, document, travel_data=None):
        estimate = self.get_estimate(estimate_id)
        with self._saving(("estimate", estimate.id)):
            data, travel = self._prepare(document, travel_data)
            estimate.data = data
            estimate.travel_data = travel
            self._commit(estimate, "update")
        logger.info("[ESTIMATE] updated id=%s opportunity_id=%s", estimate.id, estimate.opportunity_id)
        notify_estimate_saved(estimate, "update")
        return estimate.to_record()

    # --- internals ---

    def _prepare(self, document, travel_data):
        """Backfill, recompute every derived field, and serialize."""
        doc = backfill_document(document)
        travel = backfill_travel(travel_data) if travel_data is not None else None
        if travel is not None:
            travel = recalculate_travel(travel)
        doc = recalculate(doc, travel)
        return serialize_document(doc), serialize_travel(travel)

    def _commit(self, estimate, action):
        try:
            self.session.add(estimate)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.exception("[ESTIMATE] %s failed: %s", action, e)
            raise PersistenceError(f"Error saving quote: {e}")

    def _saving(self, key):
        return _SaveGuard(self, key)


class _SaveGuard:
    def __init__(self, store, key):
        self.store = store
        self.key = key

    def __enter__(self):
        with self.store._in_flight_lock:
            if self.key in self.store._in_flight:
                raise SaveInProgressError("a save for this estimate is already in progress")
            self.store._in_flight.add(self.key)
        return self

    def __exit__(self, exc_type, exc, tb):
        with self.store._in_flight_lock:
            self.store._in_flight.discard(self.key)
        return False
