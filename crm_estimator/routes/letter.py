from flask import Blueprint, jsonify, render_template, current_app
from crm_estimator.errors import ValidationError
from crm_estimator.request_utils import get_json_body, clean_str
from crm_estimator.services.letters import (
    LetterStore,
    build_letter_context,
    letter_snapshot,
    render_letter,
)
from crm_estimator.services.persistence import EstimateStore


letter_bp = Blueprint('letter', __name__)


def generate_letter(estimate_id, neta_standard):
    store = EstimateStore()
    loaded = store.load_estimate(estimate_id)
    opportunity = store.load_opportunity(loaded["record"]["opportunityId"])
    context = build_letter_context(loaded, opportunity, neta_standard)
    return context, render_letter(context)


@letter_bp.route('/estimates/<int:estimate_id>/letters/preview', methods=['POST'])
def letter_preview(estimate_id):
    payload = get_json_body()
    context, html = generate_letter(estimate_id, payload.get("netaStandard"))
    current_app.logger.info("[LETTER] preview estimate_id=%s letter_number=%s", estimate_id, context["letterNumber"])
    return jsonify({"html": html, "context": context})


@letter_bp.route('/opportunities/<int:opportunity_id>/letters')
def letter_list(opportunity_id):
    EstimateStore().get_opportunity(opportunity_id)
    return jsonify(LetterStore().list_letters(opportunity_id))


@letter_bp.route('/opportunities/<int:opportunity_id>/letters', methods=['POST'])
def letter_create(opportunity_id):
    payload = get_json_body()
    EstimateStore().get_opportunity(opportunity_id)
    estimate_id = payload.get("estimateId")
    if isinstance(estimate_id, bool) or not isinstance(estimate_id, int):
        raise ValidationError("'estimateId' must be an integer")
    estimate = EstimateStore().get_estimate(estimate_id)
    if estimate.opportunity_id != opportunity_id:
        raise ValidationError(f"estimate {estimate_id} belongs to another opportunity")

    neta_standard = payload.get("netaStandard")
    context, html = generate_letter(estimate_id, neta_standard)
    # an edited body from the client replaces the generated one
    edited = clean_str(payload, "html")
    letter = LetterStore().save_letter(
        opportunity_id,
        edited or html,
        estimate_id=estimate_id,
        quote_number=context["letterNumber"],
        neta_standard=neta_standard,
        data=letter_snapshot(context),
    )
    return jsonify(letter.to_dict()), 201


@letter_bp.route('/letters/<int:letter_id>')
def letter_detail(letter_id):
    return jsonify(LetterStore().get_letter(letter_id).to_dict())


@letter_bp.route('/letters/<int:letter_id>', methods=['PUT'])
def letter_update(letter_id):
    payload = get_json_body()
    letter = LetterStore().update_letter(
        letter_id,
        html=payload.get("html"),
        neta_standard=payload.get("netaStandard"),
    )
    return jsonify(letter.to_dict())


@letter_bp.route('/letters/<int:letter_id>', methods=['DELETE'])
def letter_delete(letter_id):
    LetterStore().delete_letter(letter_id)
    return "", 204


@letter_bp.route('/letters/<int:letter_id>/neta-standard', methods=['PUT'])
def letter_neta_standard(letter_id):
    payload = get_json_body()
    letter = LetterStore().set_neta_standard(letter_id, payload.get("value"))
    return jsonify(letter.to_dict())


@letter_bp.route('/letters/<int:letter_id>/print')
def letter_print(letter_id):
    letter = LetterStore().get_letter(letter_id)
    return render_template("letter_print.html", letter=letter)
