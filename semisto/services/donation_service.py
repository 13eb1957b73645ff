"""
Donation Service — public donation flow.

Steps:  amount → info → thanks

The amount is either one of the preset buttons or a free "custom" amount;
the two modes are mutually exclusive. Custom input that is empty or not a
number counts as 0 and keeps the flow on the amount step.
"""

import logging
from decimal import Decimal

from semisto.models import db
from semisto.models.submission import Donation
from semisto.services.workflow import Step, Workflow, WorkflowActionError
from semisto.utils.helpers import coerce_amount, is_blank, is_valid_email

logger = logging.getLogger(__name__)

PRESET_AMOUNTS = (10, 25, 50, 100, 250)
DEFAULT_AMOUNT = 50
FREQUENCIES = ("once", "monthly")

IMPACT_EXAMPLES = (
    (10, "1 arbuste à petits fruits planté"),
    (25, "5 arbres fruitiers en pépinière"),
    (50, "10m² de jardin-forêt créé"),
    (100, "1 journée de formation offerte"),
    (250, "50m² de forêt comestible plantée"),
)

DONATION_FIELDS = {
    "amount": DEFAULT_AMOUNT,
    "custom_amount": "",
    "is_custom": False,
    "frequency": "once",
    "name": "",
    "email": "",
    "message": "",
}


def final_amount(values):
    """The amount that will actually be donated."""
    if values.get("is_custom"):
        return coerce_amount(values.get("custom_amount"))
    return coerce_amount(values.get("amount"))


def impact_for(amount):
    """Most generous impact example the amount covers, or None."""
    reached = [text for threshold, text in IMPACT_EXAMPLES if threshold <= amount]
    if not reached or amount <= 0:
        return None
    return reached[-1]


# ── Action handlers ──────────────────────────────────────────────────────


def _select_amount(fields, action):
    amount = action.get("amount")
    if amount not in PRESET_AMOUNTS:
        raise WorkflowActionError(
            f"amount must be one of {', '.join(str(a) for a in PRESET_AMOUNTS)}", field="amount",
        )
    fields["amount"] = amount
    fields["is_custom"] = False
    fields["custom_amount"] = ""


def _choose_custom(fields, action):
    fields["is_custom"] = True


def _custom_amount(fields, action):
    value = action.get("value", "")
    fields["custom_amount"] = "" if value is None else str(value)
    fields["is_custom"] = True


def _set_frequency(fields, action):
    frequency = action.get("frequency")
    if frequency not in FREQUENCIES:
        raise WorkflowActionError("frequency must be 'once' or 'monthly'", field="frequency")
    fields["frequency"] = frequency


# ── Guards ───────────────────────────────────────────────────────────────


def amount_positive(values):
    return final_amount(values) > 0


def donor_info_complete(values):
    return not is_blank(values.get("name")) and is_valid_email(values.get("email"))


# ── Commit ───────────────────────────────────────────────────────────────


def record_donation(amount, is_monthly, donor=None):
    """Default donation collaborator: persist the pledge."""
    donor = donor or {}
    donation = Donation(
        amount=Decimal(str(amount)),
        is_monthly=is_monthly,
        donor_name=donor.get("name", "").strip(),
        donor_email=donor.get("email", "").strip(),
        message=donor.get("message") or None,
        project_id=donor.get("project_id"),
    )
    db.session.add(donation)
    db.session.commit()
    logger.info(
        "Donation #%d recorded: %s%s", donation.id, amount, " / month" if is_monthly else "",
    )
    return {"donation_id": donation.id}


def build_donation_workflow(on_donate=record_donation):
    """Donation workflow.

    ``on_donate(amount, is_monthly, donor=...)`` is called exactly once per
    completed run; its return value is kept as the run result.
    """

    def commit(values):
        amount = final_amount(values)
        is_monthly = values.get("frequency") == "monthly"
        donor = {
            "name": values.get("name", ""),
            "email": values.get("email", ""),
            "message": values.get("message", ""),
            "project_id": values.get("project_id"),
        }
        outcome = on_donate(amount, is_monthly, donor=donor)
        result = {"amount": amount, "is_monthly": is_monthly, "name": donor["name"]}
        if isinstance(outcome, dict):
            result.update(outcome)
        return result

    return Workflow(
        "donation",
        steps=[
            Step("amount", guard=amount_positive, error="Please choose an amount above 0 €"),
            Step("info", guard=donor_info_complete, error="Please give your name and a valid email"),
            Step("thanks"),
        ],
        commit=commit,
        fields=DONATION_FIELDS,
        handlers={
            "select_amount": _select_amount,
            "choose_custom": _choose_custom,
            "custom_amount": _custom_amount,
            "set_frequency": _set_frequency,
        },
        editable=("name", "email", "message"),
    )


donation_workflow = build_donation_workflow()


def start_donation(project=None, workflow=None):
    """New donation run, optionally earmarked for a catalog project."""
    workflow = workflow or donation_workflow
    context = {}
    if project:
        context = {"project_id": project["id"], "project_title": project.get("title")}
    return workflow.start(context=context)


def describe(state, workflow=None):
    workflow = workflow or donation_workflow
    view = workflow.describe(state)
    amount = final_amount(state.values)
    view["final_amount"] = amount
    view["impact"] = impact_for(amount)
    view["presets"] = list(PRESET_AMOUNTS)
    return view
