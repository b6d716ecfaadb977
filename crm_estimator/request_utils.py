from flask import request

from crm_estimator.errors import ValidationError


def get_json_body():
    """Request body as a dict; anything else is a 400."""
    payload = request.get_json(silent=True)
    if payload is None:
        raise ValidationError("request body must be JSON")
    if not isinstance(payload, dict):
        raise ValidationError("request body must be a JSON object")
    return payload


def clean_str(payload, key, default=""):
    value = payload.get(key)
    if value is None:
        return default
    return str(value).strip()


def require_str(payload, key, label=None):
    value = clean_str(payload, key)
    if not value:
        raise ValidationError(f"{label or key} is required")
    return value
