"""
Letter proposals: the customer-facing letter built from one saved estimate.

The letter quotes the same final price the sheet shows, with mobilization and
the three NET payment options. Stored letters keep their rendered HTML; only
the NETA standard sentence is rewritten in place after saving.
"""
import json
import re
from datetime import date

from flask import current_app, render_template
from markupsafe import escape
from sqlalchemy.exc import SQLAlchemyError

from crm_estimator import db
from crm_estimator.errors import NotFoundError, PersistenceError, ValidationError
from crm_estimator.estimating.defaults import to_number
from crm_estimator.estimating.pricing import NET_TERM_MULTIPLIERS, format_currency
from crm_estimator.estimating.sheet import summarize_estimate
from crm_estimator.models.letter_proposal import LetterProposal
from crm_estimator.services.notifications import notify_letter_saved

NETA_OPTIONS = {
    "mts": (
        "All tests will be performed in accordance with ANSI/NETA MTS 2023 - Standard for "
        "Maintenance Testing Specifications for Electrical power Equipment and Systems."
    ),
    "ats": (
        "All tests will be performed in accordance with ANSI/NETA ATS 2025 - Standard for "
        "Acceptance Testing Specifications for Electrical Power Equipment and Systems"
    ),
    "both": (
        "All work will be performed in accordance with the applicable ANSI/NETA ATS/MTS "
        "& IEEE 81 Standards."
    ),
}
NETA_PLACEHOLDER = "[Select NETA Standard]"

PLACEHOLDER_SCOPE_ROW = {"name": "24-hour Power Study", "quantity": 1}

_NETA_SPAN_RE = re.compile(
    r'(<span\b[^>]*\bid=["\']neta-standard-text["\'][^>]*>)(.*?)(</span>)',
    re.DOTALL | re.IGNORECASE,
)


def neta_text(value):
    return NETA_OPTIONS.get(value or "", NETA_PLACEHOLDER)


def validate_neta_standard(value):
    if value in (None, ""):
        return None
    if value not in NETA_OPTIONS:
        raise ValidationError(
            f"unknown NETA standard {value!r}; expected one of {', '.join(NETA_OPTIONS)}"
        )
    return value


def scope_rows(document):
    rows = []
    for item in document.get("sovItems") or []:
        name = str(item.get("item") or "").strip()
        if not name:
            continue
        quantity = to_number(item.get("quantity"))
        rows.append({"name": name, "quantity": int(quantity) if quantity.is_integer() else quantity})
    return rows or [dict(PLACEHOLDER_SCOPE_ROW)]


def _format_letter_date(today):
    return f"{today:%B} {today.day}, {today.year}"


def build_letter_context(record, opportunity, neta_standard=None, today=None):
    """
    Template context for one letter.

    ``record`` is a loaded estimate (``{"record", "document", "travelData"}``)
    and ``opportunity`` the dict from ``EstimateStore.load_opportunity``.
    """
    neta_standard = validate_neta_standard(neta_standard)
    today = today or date.today()
    # travel goes inside the margin divisor here too, so the letter and the
    # sheet always quote the same final price
    summary = summarize_estimate(record["document"], record.get("travelData"))
    pricing = summary["pricing"]

    customer = opportunity.get("customer") or {}
    contact = opportunity.get("primaryContact")
    contact_name = (contact or {}).get("fullName") or customer.get("name") or "Contact Name"
    letter_number = (
        opportunity.get("quoteNumber")
        or record["record"].get("displayNumber")
        or str(record["record"].get("id"))
    )

    options = []
    for position, term in enumerate(NET_TERM_MULTIPLIERS, start=1):
        options.append({
            "label": f"Option {position}",
            "term": term.replace("NET", "NET "),
            "amount": pricing["netTerms"][term],
            "formatted": format_currency(pricing["netTerms"][term]),
        })

    config = current_app.config
    return {
        "date": _format_letter_date(today),
        "letterNumber": letter_number,
        "contactName": contact_name,
        "companyName": customer.get("companyName") or "Company",
        "address": customer.get("address") or "Address",
        "netaStandard": neta_standard,
        "netaText": neta_text(neta_standard),
        "scopeRows": scope_rows(summary["document"]),
        "final": pricing["final"],
        "mobilizationFee": pricing["mobilizationFee"],
        "mobilization": format_currency(pricing["mobilizationFee"]),
        "options": options,
        "branding": {
            "companyName": config["LETTER_COMPANY_NAME"],
            "tagline": config["LETTER_COMPANY_TAGLINE"],
            "signerName": config["LETTER_SIGNER_NAME"],
            "signerTitle": config["LETTER_SIGNER_TITLE"],
            "footer": config["LETTER_FOOTER"],
            "poEmail": config["LETTER_PO_EMAIL"],
            "signatureUrl": config["LETTER_SIGNATURE_URL"],
            "validDays": config["LETTER_VALID_DAYS"],
        },
    }


def render_letter(context):
    return render_template("letter_proposal.html", letter=context)


def apply_neta_standard(html, value):
    """Replace the NETA sentence inside ``html``; other markup is left alone."""
    value = validate_neta_standard(value)
    text = str(escape(neta_text(value)))
    updated, count = _NETA_SPAN_RE.subn(lambda m: m.group(1) + text + m.group(3), html or "", count=1)
    if count == 0:
        current_app.logger.warning("[LETTER] neta-standard-text span not found; html unchanged")
    return updated


def letter_snapshot(context):
    """Totals kept alongside the stored HTML."""
    return json.dumps({
        "final": context["final"],
        "mobilizationFee": context["mobilizationFee"],
        "options": {o["term"]: o["amount"] for o in context["options"]},
        "letterNumber": context["letterNumber"],
    })


class LetterStore:
    def __init__(self, session=None):
        self.session = session or db.session

    def list_letters(self, opportunity_id):
        rows = (
            LetterProposal.query
            .filter(LetterProposal.opportunity_id == opportunity_id)
            .order_by(LetterProposal.created_at.desc(), LetterProposal.id.desc())
            .all()
        )
        return [row.to_dict() for row in rows]

    def get_letter(self, letter_id):
        letter = self.session.get(LetterProposal, letter_id)
        if letter is None:
            raise NotFoundError(f"letter {letter_id} not found")
        return letter

    def save_letter(self, opportunity_id, html, estimate_id=None, quote_number=None,
                    neta_standard=None, data=None):
        if not html or not str(html).strip():
            raise ValidationError("letter html is required")
        letter = LetterProposal(
            opportunity_id=opportunity_id,
            estimate_id=estimate_id,
            html=html,
            quote_number=quote_number,
            neta_standard=validate_neta_standard(neta_standard),
            data=data,
        )
        self._commit(letter, "insert")
        current_app.logger.info("[LETTER] inserted id=%s opportunity_id=%s", letter.id, opportunity_id)
        notify_letter_saved(letter, "insert")
        return letter

    def update_letter(self, letter_id, html=None, neta_standard=None):
        letter = self.get_letter(letter_id)
        if html is not None:
            if not str(html).strip():
                raise ValidationError("letter html cannot be empty")
            letter.html = html
        if neta_standard is not None:
            letter.neta_standard = validate_neta_standard(neta_standard)
        self._commit(letter, "update")
        current_app.logger.info("[LETTER] updated id=%s", letter.id)
        notify_letter_saved(letter, "update")
        return letter

    def set_neta_standard(self, letter_id, value):
        letter = self.get_letter(letter_id)
        letter.html = apply_neta_standard(letter.html, value)
        letter.neta_standard = validate_neta_standard(value)
        self._commit(letter, "update")
        current_app.logger.info("[LETTER] neta standard id=%s value=%s", letter.id, letter.neta_standard)
        return letter

    def delete_letter(self, letter_id):
        letter = self.get_letter(letter_id)
        try:
            self.session.delete(letter)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            current_app.logger.exception("[LETTER] delete failed: %s", e)
            raise PersistenceError(f"Error deleting letter: {e}")
        current_app.logger.info("[LETTER] deleted id=%s", letter_id)
        notify_letter_saved(letter, "delete")

    def _commit(self, letter, action):
        try:
            self.session.add(letter)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            current_app.logger.exception("[LETTER] %s failed: %s", action, e)
            raise PersistenceError(f"Error saving letter: {e}")
