"""
Contact Service — public contact form and partner portal messages.
"""

import logging

from semisto.models import db
from semisto.models.submission import ContactMessage
from semisto.utils.helpers import is_blank, is_valid_email

logger = logging.getLogger(__name__)

SITE_SUBJECTS = (
    "Question générale",
    "Demande de devis Design Studio",
    "Inscription formation",
    "Partenariat / Presse",
    "Bénévolat / Roots",
    "Autre",
)

PORTAL_SUBJECTS = {
    "new-project": "Nouveau projet",
    "question": "Question",
    "custom": "Partenariat sur mesure",
    "support": "Support technique",
}


class ContactValidationError(Exception):
    """Raised with a per-field error map when a form is incomplete."""

    def __init__(self, errors):
        self.errors = errors
        self.message = "; ".join(f"{k}: {v}" for k, v in errors.items())
        super().__init__(self.message)


def _text(data, key):
    value = data.get(key)
    return value.strip() if isinstance(value, str) else ""


def validate_site_message(data):
    errors = {}
    if is_blank(data.get("name")):
        errors["name"] = "Name is required"
    if is_blank(data.get("email")):
        errors["email"] = "Email is required"
    elif not is_valid_email(data.get("email")):
        errors["email"] = "Email is not valid"
    if _text(data, "subject") not in SITE_SUBJECTS:
        errors["subject"] = "Please choose a subject"
    if is_blank(data.get("message")):
        errors["message"] = "Message is required"
    return errors


def send_site_message(data):
    """Validate and store a public contact form message."""
    errors = validate_site_message(data)
    if errors:
        raise ContactValidationError(errors)

    msg = ContactMessage(
        channel="site",
        name=_text(data, "name"),
        email=_text(data, "email"),
        subject=_text(data, "subject"),
        message=_text(data, "message"),
        lab=_text(data, "lab") or None,
    )
    db.session.add(msg)
    db.session.commit()
    logger.info("Contact message #%d received (%s)", msg.id, msg.subject)
    return msg


def send_portal_message(partner, data):
    """Validate and store a message sent from the partner portal."""
    errors = {}
    if _text(data, "subject") not in PORTAL_SUBJECTS:
        errors["subject"] = "Please choose a subject"
    if is_blank(data.get("message")):
        errors["message"] = "Message is required"
    if errors:
        raise ContactValidationError(errors)

    msg = ContactMessage(
        channel="portal",
        name=partner.get("contactName"),
        email=partner.get("contactEmail"),
        subject=_text(data, "subject"),
        message=_text(data, "message"),
        partner_id=partner.get("id"),
    )
    db.session.add(msg)
    db.session.commit()
    logger.info("Portal message #%d from partner %s", msg.id, msg.partner_id)
    return msg
