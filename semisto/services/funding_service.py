"""
Funding Service — partner allocations towards funding proposals.

Steps:  info → amount → confirm → success

    info     guard: the proposal is not already funded
    amount   guard: a whole amount above 0
    confirm  guard: same; the allocation is recorded on leaving it
    success  terminal

A proposal never reports more raised than its target: an allocation that
would overshoot is recorded with the requested amount but only the part
that fits counts towards the proposal.
"""

import logging

from sqlalchemy import func

from semisto.models import db
from semisto.models.submission import FundingAllocation
from semisto.services.workflow import Step, Workflow, WorkflowActionError
from semisto.utils.helpers import coerce_amount

logger = logging.getLogger(__name__)

PRESET_AMOUNTS = (1000, 2500, 5000, 10000)

FUNDING_FIELDS = {"amount": ""}


def allocate(raised, target, amount):
    """New raised total after allocating ``amount``, clamped to ``target``."""
    return min(raised + amount, target)


def raised_percent(raised, target):
    if not target or target <= 0:
        return 100
    return min(100, round(raised / target * 100))


def is_funded(proposal):
    return (
        proposal.get("status") == "funded"
        or raised_percent(proposal.get("raisedAmount", 0), proposal.get("targetAmount", 0)) >= 100
    )


def applied_total(proposal_id):
    """Sum of the applied amounts recorded for a proposal."""
    total = (
        db.session.query(func.coalesce(func.sum(FundingAllocation.applied_amount), 0))
        .filter(FundingAllocation.proposal_id == proposal_id)
        .scalar()
    )
    return int(total or 0)


def snapshot_raised(proposal):
    """Raised amount from the static bundle, before recorded allocations."""
    return proposal.get("snapshotRaisedAmount", proposal.get("raisedAmount", 0))


def effective_raised(proposal):
    """Snapshot raised amount plus recorded allocations, clamped to target."""
    target = proposal.get("targetAmount", 0)
    return allocate(snapshot_raised(proposal), target, applied_total(proposal["id"]))


def with_allocations(proposal):
    """Copy of a proposal with raised figures reflecting recorded allocations."""
    raised = effective_raised(proposal)
    updated = dict(proposal)
    updated["snapshotRaisedAmount"] = snapshot_raised(proposal)
    updated["raisedAmount"] = raised
    updated["raisedPercent"] = raised_percent(raised, proposal.get("targetAmount", 0))
    if updated["raisedPercent"] >= 100:
        updated["status"] = "funded"
    return updated


def requested_amount(values):
    return coerce_amount(values.get("amount"), integer=True)


# ── Guards ───────────────────────────────────────────────────────────────


def proposal_open(values):
    return not is_funded(values.get("proposal", {}))


def amount_positive(values):
    return requested_amount(values) > 0


# ── Action handlers ──────────────────────────────────────────────────────


def _select_amount(fields, action):
    amount = action.get("amount")
    if amount not in PRESET_AMOUNTS:
        raise WorkflowActionError(
            f"amount must be one of {', '.join(str(a) for a in PRESET_AMOUNTS)}", field="amount",
        )
    fields["amount"] = str(amount)


# ── Commit ───────────────────────────────────────────────────────────────


def record_allocation(values):
    """Persist the allocation and return the proposal's new figures."""
    proposal = values["proposal"]
    amount = requested_amount(values)
    target = proposal.get("targetAmount", 0)
    raised = effective_raised(proposal)
    new_raised = allocate(raised, target, amount)

    allocation = FundingAllocation(
        proposal_id=proposal["id"],
        proposal_title=proposal.get("title"),
        partner_id=values.get("partner_id", ""),
        lab_name=proposal.get("labName"),
        amount=amount,
        applied_amount=new_raised - raised,
        status="pending",
    )
    db.session.add(allocation)
    db.session.commit()
    logger.info(
        "Allocation #%d: %d € to %s (raised %d → %d / %d)",
        allocation.id, amount, proposal["id"], raised, new_raised, target,
    )
    return {
        "allocation_id": allocation.id,
        "proposal_id": proposal["id"],
        "amount": amount,
        "applied_amount": allocation.applied_amount,
        "raised_amount": new_raised,
        "raised_percent": raised_percent(new_raised, target),
    }


def build_funding_workflow(on_allocate=record_allocation):
    return Workflow(
        "funding",
        steps=[
            Step("info", guard=proposal_open, error="This proposal is already fully funded"),
            Step("amount", guard=amount_positive, error="Please enter an amount above 0 €"),
            Step("confirm", guard=amount_positive, error="Please enter an amount above 0 €"),
            Step("success"),
        ],
        commit=on_allocate,
        fields=FUNDING_FIELDS,
        handlers={"select_amount": _select_amount},
    )


funding_workflow = build_funding_workflow()


def start_funding(proposal, partner_id, workflow=None):
    """New allocation run for ``proposal`` (raised figures already effective)."""
    workflow = workflow or funding_workflow
    return workflow.start(context={"proposal": proposal, "partner_id": partner_id})


def describe(state, workflow=None):
    workflow = workflow or funding_workflow
    view = workflow.describe(state)
    proposal = state.context.get("proposal", {})
    view["amount"] = requested_amount(state.values)
    view["presets"] = list(PRESET_AMOUNTS)
    view["is_funded"] = is_funded(proposal)
    view["remaining"] = max(0, proposal.get("targetAmount", 0) - proposal.get("raisedAmount", 0))
    return view
