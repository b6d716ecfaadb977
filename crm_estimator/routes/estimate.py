from flask import Blueprint, jsonify, request, render_template, current_app
from crm_estimator.errors import ValidationError
from crm_estimator.estimating.sheet import summarize_estimate
from crm_estimator.estimating.travel import (
    apply_travel_change,
    recalculate_travel,
    total_travel_cost,
    total_travel_hours,
)
from crm_estimator.request_utils import get_json_body
from crm_estimator.services.persistence import EstimateStore, backfill_document, backfill_travel
from crm_estimator.services.theme import compute_theme, normalize_theme


estimate_bp = Blueprint('estimate', __name__)


def document_from_payload(payload):
    document = payload.get("document")
    if not isinstance(document, dict):
        raise ValidationError("'document' must be a JSON object")
    return backfill_document(document)


def travel_from_payload(payload):
    """None means travel is disabled for this estimate."""
    travel = payload.get("travelData")
    if travel is None:
        return None
    if not isinstance(travel, dict):
        raise ValidationError("'travelData' must be a JSON object or null")
    return backfill_travel(travel)


def estimate_response(loaded):
    summary = summarize_estimate(loaded["document"], loaded["travelData"])
    return {
        "record": loaded["record"],
        "document": summary["document"],
        "travelData": summary["travelData"],
        "travelCost": summary["travelCost"],
        "pricing": summary["pricing"],
        "sovItemPrices": summary["sovItemPrices"],
        "warnings": summary["warnings"],
    }


@estimate_bp.route('/opportunities/<int:opportunity_id>/estimates')
def estimate_list(opportunity_id):
    current_app.logger.info("[ROUTE] /opportunities/%s/estimates called", opportunity_id)
    return jsonify(EstimateStore().load_estimates(opportunity_id))


@estimate_bp.route('/opportunities/<int:opportunity_id>/estimates/new')
def estimate_new(opportunity_id):
    store = EstimateStore()
    document = store.new_document(opportunity_id)
    summary = summarize_estimate(document)
    return jsonify({
        "opportunity": store.load_opportunity(opportunity_id),
        "document": summary["document"],
        "travelData": None,
        "pricing": summary["pricing"],
    })


@estimate_bp.route('/opportunities/<int:opportunity_id>/estimates', methods=['POST'])
def estimate_create(opportunity_id):
    payload = get_json_body()
    document = document_from_payload(payload)
    travel = travel_from_payload(payload)
    store = EstimateStore()
    record = store.save_estimate(opportunity_id, document, travel)
    return jsonify(estimate_response(store.load_estimate(record["id"]))), 201


@estimate_bp.route('/estimates/<int:estimate_id>')
def estimate_detail(estimate_id):
    return jsonify(estimate_response(EstimateStore().load_estimate(estimate_id)))


@estimate_bp.route('/estimates/<int:estimate_id>', methods=['PUT'])
def estimate_update(estimate_id):
    payload = get_json_body()
    document = document_from_payload(payload)
    travel = travel_from_payload(payload)
    store = EstimateStore()
    store.update_estimate(estimate_id, document, travel)
    return jsonify(estimate_response(store.load_estimate(estimate_id)))


@estimate_bp.route('/estimates/<int:estimate_id>/view')
def estimate_view(estimate_id):
    store = EstimateStore()
    loaded = store.load_estimate(estimate_id)
    opportunity = store.load_opportunity(loaded["record"]["opportunityId"])
    theme_name = normalize_theme(request.args.get("theme"))
    return render_template(
        "estimate_view.html",
        estimate=estimate_response(loaded),
        opportunity=opportunity,
        theme_name=theme_name,
        theme=compute_theme(theme_name),
    )


@estimate_bp.route('/estimates/calculate', methods=['POST'])
def estimate_calculate():
    payload = get_json_body()
    summary = summarize_estimate(document_from_payload(payload), travel_from_payload(payload))
    return jsonify(summary)


@estimate_bp.route('/estimates/travel/change', methods=['POST'])
def travel_change():
    payload = get_json_body()
    travel = travel_from_payload(payload)
    ledger = payload.get("ledger")
    field = payload.get("field")
    index = payload.get("index", 0)
    if not isinstance(ledger, str) or not isinstance(field, str):
        raise ValidationError("'ledger' and 'field' are required")
    if isinstance(index, bool) or not isinstance(index, int):
        raise ValidationError("'index' must be an integer")
    updated = apply_travel_change(recalculate_travel(travel) if travel else None,
                                  ledger, field, payload.get("value"), index)
    return jsonify({
        "travelData": updated,
        "travelCost": total_travel_cost(updated),
        "travelHours": total_travel_hours(updated),
    })
