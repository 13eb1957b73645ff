"""
Portal Service — partner portal data.

The portal reads a static partner bundle (PORTAL_DATA_PATH). Records
created by partners at runtime (funding allocations, package interest)
live in the database and are merged into what the bundle says.
"""

import copy
import json
import logging
from functools import lru_cache

from flask import current_app
from sqlalchemy.exc import IntegrityError

from semisto.models import db
from semisto.models.submission import FundingAllocation, PackageInterest
from semisto.services import funding_service

logger = logging.getLogger(__name__)


class PortalDataError(Exception):
    def __init__(self, message):
        self.message = message
        super().__init__(message)


@lru_cache(maxsize=4)
def _load_portal_bundle(path):
    logger.info("Loading partner portal data from %s", path)
    with open(path, encoding="utf-8") as fh:
        return json.load(fh)


def load_section(key):
    bundle = _load_portal_bundle(current_app.config["PORTAL_DATA_PATH"])
    if key not in bundle:
        raise PortalDataError(f"Portal data has no '{key}' section")
    return copy.deepcopy(bundle[key])


def clear_portal_cache():
    _load_portal_bundle.cache_clear()


def _by_id(records, record_id):
    return next((r for r in records if r.get("id") == record_id), None)


# ── Partner & packages ───────────────────────────────────────────────────


def get_partner():
    return load_section("partner")


def get_packages():
    return load_section("packages")


def get_package_by_id(package_id):
    return _by_id(get_packages(), package_id)


def interested_package_ids(partner_id):
    rows = PackageInterest.query.filter_by(partner_id=partner_id).all()
    return {row.package_id for row in rows}


def register_package_interest(partner_id, package_id):
    """Record that a partner is interested in a package.

    Returns:
        (PackageInterest, created); ``created`` is False when the partner
        had already expressed interest in this package.
    """
    existing = PackageInterest.query.filter_by(
        partner_id=partner_id, package_id=package_id,
    ).first()
    if existing is not None:
        return existing, False

    interest = PackageInterest(partner_id=partner_id, package_id=package_id)
    db.session.add(interest)
    try:
        db.session.commit()
    except IntegrityError:
        # Concurrent request won the race on the unique constraint.
        db.session.rollback()
        existing = PackageInterest.query.filter_by(
            partner_id=partner_id, package_id=package_id,
        ).first()
        return existing, False
    logger.info("Partner %s interested in package %s", partner_id, package_id)
    return interest, True


# ── Engagements ──────────────────────────────────────────────────────────


def get_engagements(status=None):
    engagements = load_section("engagements")
    if status:
        engagements = [e for e in engagements if e.get("status") == status]
    return engagements


def get_engagement_by_id(engagement_id):
    return _by_id(get_engagements(), engagement_id)


# ── Funding ──────────────────────────────────────────────────────────────


def get_funding_proposals():
    """Proposals with raised figures including recorded allocations."""
    return [funding_service.with_allocations(p) for p in load_section("fundingProposals")]


def get_funding_proposal_by_id(proposal_id):
    proposal = _by_id(load_section("fundingProposals"), proposal_id)
    if proposal is None:
        return None
    return funding_service.with_allocations(proposal)


def get_fundings(partner_id=None):
    """Snapshot fundings followed by allocations recorded in the portal."""
    fundings = load_section("fundings")
    query = FundingAllocation.query.order_by(FundingAllocation.id)
    if partner_id:
        query = query.filter_by(partner_id=partner_id)
    fundings.extend(a.to_funding_dict() for a in query.all())
    return fundings


def get_impact_metrics():
    return load_section("impactMetrics")


def dashboard(partner_id):
    """Everything the portal home page shows."""
    engagements = get_engagements()
    return {
        "partner": get_partner(),
        "impact": get_impact_metrics(),
        "active_engagements": [e for e in engagements if e.get("status") == "active"],
        "engagement_count": len(engagements),
        "open_proposals": [
            p for p in get_funding_proposals() if not funding_service.is_funded(p)
        ],
        "fundings": get_fundings(partner_id),
    }
