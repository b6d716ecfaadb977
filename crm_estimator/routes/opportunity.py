from flask import Blueprint, jsonify
from crm_estimator.services.persistence import EstimateStore


opportunity_bp = Blueprint('opportunity', __name__)


@opportunity_bp.route('/opportunities/<int:opportunity_id>')
def opportunity_detail(opportunity_id):
    return jsonify(EstimateStore().load_opportunity(opportunity_id))
