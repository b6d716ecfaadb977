from flask import Blueprint, jsonify, request, current_app
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from crm_estimator import db
from crm_estimator.errors import EstimatorError, NotFoundError, PersistenceError, ValidationError
from crm_estimator.models.customer import Customer, Contact
from crm_estimator.models.opportunity import Opportunity
from crm_estimator.request_utils import get_json_body, clean_str, require_str


customer_bp = Blueprint('customer', __name__)

CUSTOMER_FIELDS = {
    "name": "name",
    "companyName": "company_name",
    "address": "address",
    "phone": "phone",
    "email": "email",
    "note": "note",
}


def get_customer_or_404(customer_id):
    customer = db.session.get(Customer, customer_id)
    if customer is None:
        raise NotFoundError(f"customer {customer_id} not found")
    return customer


def commit_or_rollback(action):
    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.exception("[CUSTOMER] %s failed: %s", action, e)
        raise PersistenceError(f"Error saving customer data: {e}")


@customer_bp.route('/customers')
def customer_list():
    current_app.logger.info("[ROUTE] /customers called")
    q = request.args.get('q', '').strip()
    query = Customer.query
    if q:
        query = query.filter(or_(Customer.name.contains(q), Customer.company_name.contains(q)))
    customers = query.order_by(Customer.name).all()
    return jsonify([c.to_dict() for c in customers])


@customer_bp.route('/customers', methods=['POST'])
def customer_new():
    payload = get_json_body()
    name = require_str(payload, "name", "customer name")
    if Customer.query.filter_by(name=name).first():
        raise ValidationError("a customer with the same name already exists")
    customer = Customer(**{column: clean_str(payload, key) for key, column in CUSTOMER_FIELDS.items()})
    customer.name = name
    db.session.add(customer)
    commit_or_rollback("create")
    current_app.logger.info("[CUSTOMER] created id=%s name=%s", customer.id, customer.name)
    return jsonify(customer.to_dict()), 201


@customer_bp.route('/customers/<int:customer_id>')
def customer_detail(customer_id):
    customer = get_customer_or_404(customer_id)
    result = customer.to_dict()
    result["contacts"] = [c.to_dict() for c in customer.contacts]
    result["primaryContact"] = customer.primary_contact.to_dict() if customer.primary_contact else None
    return jsonify(result)


@customer_bp.route('/customers/<int:customer_id>', methods=['PUT'])
def customer_edit(customer_id):
    customer = get_customer_or_404(customer_id)
    payload = get_json_body()
    if "name" in payload:
        name = require_str(payload, "name", "customer name")
        duplicate = Customer.query.filter(Customer.name == name, Customer.id != customer.id).first()
        if duplicate:
            raise ValidationError("a customer with the same name already exists")
        customer.name = name
    for key, column in CUSTOMER_FIELDS.items():
        if key != "name" and key in payload:
            setattr(customer, column, clean_str(payload, key))
    commit_or_rollback("update")
    current_app.logger.info("[CUSTOMER] updated id=%s", customer.id)
    return jsonify(customer.to_dict())


@customer_bp.route('/customers/<int:customer_id>', methods=['DELETE'])
def customer_delete(customer_id):
    customer = get_customer_or_404(customer_id)
    if customer.opportunities:
        raise EstimatorError("customer has opportunities and cannot be deleted", status_code=409)
    db.session.delete(customer)
    commit_or_rollback("delete")
    current_app.logger.info("[CUSTOMER] deleted id=%s", customer_id)
    return "", 204


@customer_bp.route('/customers/<int:customer_id>/contacts')
def contact_list(customer_id):
    customer = get_customer_or_404(customer_id)
    return jsonify([c.to_dict() for c in customer.contacts])


@customer_bp.route('/customers/<int:customer_id>/contacts', methods=['POST'])
def contact_new(customer_id):
    customer = get_customer_or_404(customer_id)
    payload = get_json_body()
    first_name = clean_str(payload, "firstName")
    last_name = clean_str(payload, "lastName")
    if not first_name and not last_name:
        raise ValidationError("contact name is required")
    is_primary = bool(payload.get("isPrimary")) or not customer.contacts
    if is_primary:
        # one primary per customer
        for other in customer.contacts:
            other.is_primary = False
    contact = Contact(
        customer_id=customer.id,
        first_name=first_name,
        last_name=last_name,
        email=clean_str(payload, "email"),
        phone=clean_str(payload, "phone"),
        is_primary=is_primary,
    )
    db.session.add(contact)
    commit_or_rollback("add contact")
    current_app.logger.info("[CUSTOMER] contact added id=%s customer_id=%s primary=%s",
                            contact.id, customer.id, contact.is_primary)
    return jsonify(contact.to_dict()), 201


@customer_bp.route('/customers/<int:customer_id>/opportunities')
def opportunity_list(customer_id):
    get_customer_or_404(customer_id)
    opportunities = (
        Opportunity.query
        .filter(Opportunity.customer_id == customer_id)
        .order_by(Opportunity.created_at.desc(), Opportunity.id.desc())
        .all()
    )
    return jsonify([o.to_dict() for o in opportunities])


@customer_bp.route('/customers/<int:customer_id>/opportunities', methods=['POST'])
def opportunity_new(customer_id):
    customer = get_customer_or_404(customer_id)
    payload = get_json_body()
    opportunity = Opportunity(
        customer_id=customer.id,
        description=require_str(payload, "description"),
        quote_number=clean_str(payload, "quoteNumber") or None,
        status=clean_str(payload, "status") or "open",
    )
    db.session.add(opportunity)
    commit_or_rollback("create opportunity")
    current_app.logger.info("[OPPORTUNITY] created id=%s customer_id=%s", opportunity.id, customer.id)
    return jsonify(opportunity.to_dict()), 201
