"""
Catalog Service — website data layer.

Every public page reads its entities through this module. Each resource is
resolved the same way:

    1. If CATALOG_USE_API is on, GET it from the Terranova API through the
       catalog gateway.
    2. If the API is off, unreachable, answers non-2xx, or returns records
       that do not match the resource schema, use the bundled static
       snapshot (CATALOG_FALLBACK_PATH) instead.
    3. Optional foreign-key narrowing (lab, country) is applied afterwards,
       identically for both sources.

Remote problems are logged and never reach the caller. A malformed static
snapshot, on the other hand, raises CatalogSchemaError: there is nothing
left to fall back to.
"""

import copy
import json
import logging
from dataclasses import dataclass
from functools import lru_cache

from flask import current_app

from semisto.integrations import catalog_gateway as gw_module

logger = logging.getLogger(__name__)


class CatalogSchemaError(Exception):
    """Raised when catalog data does not match the expected resource shape."""

    def __init__(self, resource, message):
        self.resource = resource
        self.message = message
        super().__init__(f"{resource}: {message}")


@dataclass(frozen=True)
class CatalogResource:
    """Where a resource lives remotely and in the snapshot, and its shape."""
    name: str
    path: str
    fallback_key: str
    required: tuple
    many: bool = True


RESOURCES = {
    r.name: r
    for r in (
        CatalogResource("labs", "/website/labs", "labs", ("id", "slug", "name")),
        CatalogResource("courses", "/website/courses", "courses", ("id", "slug", "labId", "title")),
        CatalogResource("events", "/website/events", "events", ("id", "labId", "title", "type", "date")),
        CatalogResource("projects", "/website/projects", "projects", ("id", "slug", "labId", "title")),
        CatalogResource("worksites", "/website/worksites", "worksites", ("id", "labId", "title", "date")),
        CatalogResource(
            "products", "/website/products", "products",
            ("id", "name", "type", "price", "stock", "countries"),
        ),
        CatalogResource("articles", "/website/articles", "articles", ("id", "slug", "title", "category")),
        CatalogResource("press", "/website/press", "pressItems", ("id", "title", "outlet", "date")),
        CatalogResource("resources", "/website/resources", "resources", ("id", "title", "type", "url")),
        CatalogResource("design-profiles", "/website/design-profiles", "designProfiles", ("id", "name", "labId")),
        CatalogResource("map-projects", "/website/map/projects", "mapProjects", ("id", "name", "lat", "lng")),
        CatalogResource("potential-zones", "/website/map/zones", "potentialZones", ("id", "name")),
        CatalogResource("impact", "/website/impact", "impactStats", ("treesPlanted", "hectares"), many=False),
    )
}

# Service lines ("pôles") a Lab can offer.
POLES = {
    "design-studio": {
        "name": "Design Studio",
        "description": "Conception de jardins-forêts sur mesure",
    },
    "academy": {
        "name": "Academy",
        "description": "Formations et transmission des savoirs",
    },
    "nursery": {
        "name": "Pépinière",
        "description": "Plants et arbres pour votre projet",
    },
    "roots": {
        "name": "Semisto Roots",
        "description": "Bénévolat et chantiers participatifs",
    },
}


# ── Validation ───────────────────────────────────────────────────────────


def _check_record(resource, record, index=None):
    where = f"record {index}" if index is not None else "object"
    if not isinstance(record, dict):
        raise CatalogSchemaError(resource.name, f"{where} is not an object")
    missing = [k for k in resource.required if k not in record]
    if missing:
        raise CatalogSchemaError(resource.name, f"{where} is missing {', '.join(missing)}")
    if resource.name == "products":
        price = record["price"]
        if isinstance(price, bool) or not isinstance(price, (int, float)) or price < 0:
            raise CatalogSchemaError(resource.name, f"{where} has an invalid price")
        if not isinstance(record["countries"], list):
            raise CatalogSchemaError(resource.name, f"{where} countries must be a list")


def validate_records(resource, data):
    """Check ``data`` against the resource schema; return it unchanged.

    Raises:
        CatalogSchemaError: on the first record that does not fit.
    """
    if isinstance(resource, str):
        resource = get_resource(resource)
    if not resource.many:
        _check_record(resource, data)
        return data
    if not isinstance(data, list):
        raise CatalogSchemaError(resource.name, "expected a list of records")
    for i, record in enumerate(data):
        _check_record(resource, record, i)
    return data


def get_resource(name):
    """Return the CatalogResource for ``name`` or raise KeyError."""
    try:
        return RESOURCES[name]
    except KeyError:
        raise KeyError(f"Unknown catalog resource: {name}") from None


# ── Static snapshot ──────────────────────────────────────────────────────


@lru_cache(maxsize=8)
def _load_bundle(path):
    logger.info("Loading static catalog snapshot from %s", path)
    with open(path, encoding="utf-8") as fh:
        return json.load(fh)


def load_fallback(resource):
    """Return the validated static snapshot for ``resource`` (a deep copy)."""
    if isinstance(resource, str):
        resource = get_resource(resource)
    bundle = _load_bundle(current_app.config["CATALOG_FALLBACK_PATH"])
    if resource.fallback_key not in bundle:
        raise CatalogSchemaError(resource.name, f"snapshot has no '{resource.fallback_key}' key")
    data = copy.deepcopy(bundle[resource.fallback_key])
    return validate_records(resource, data)


def clear_fallback_cache():
    """Forget parsed snapshots (used when CATALOG_FALLBACK_PATH changes)."""
    _load_bundle.cache_clear()


# ── Resolution ───────────────────────────────────────────────────────────


def fetch_entities(resource, use_remote=None):
    """Resolve a catalog resource from the remote API or the static snapshot.

    Args:
        resource:   Resource name (see RESOURCES), e.g. "courses".
        use_remote: Force the remote source on/off; None reads CATALOG_USE_API.

    Returns:
        list[dict] (or dict for single-object resources such as "impact").
        Never raises for remote failures.
    """
    res = get_resource(resource)
    if use_remote is None:
        use_remote = current_app.config.get("CATALOG_USE_API", False)

    if use_remote:
        result = gw_module.catalog_gateway.fetch(
            res.path,
            base_url=current_app.config["CATALOG_API_URL"],
            timeout=current_app.config.get("CATALOG_API_TIMEOUT", 5),
        )
        if result.ok:
            try:
                return validate_records(res, result.data)
            except CatalogSchemaError as exc:
                logger.warning(
                    "Remote %s rejected, using snapshot: %s", res.name, exc.message,
                    extra={"resource": res.name, "source": "fallback"},
                )
        else:
            logger.warning(
                "Remote %s unavailable, using snapshot: %s", res.name, result.error,
                extra={"resource": res.name, "source": "fallback"},
            )

    return load_fallback(res)


def filter_by(records, field, value):
    """Keep records whose ``field`` equals ``value``; None disables narrowing."""
    if value is None:
        return list(records)
    return [r for r in records if r.get(field) == value]


def _find(records, field, value):
    return next((r for r in records if r.get(field) == value), None)


# ── Labs ─────────────────────────────────────────────────────────────────


def get_labs():
    return fetch_entities("labs")


def get_lab_by_slug(slug):
    return _find(get_labs(), "slug", slug)


def get_lab_slugs():
    return [lab["slug"] for lab in get_labs()]


def get_poles(lab=None):
    """Return pole descriptors, optionally only those a given lab offers."""
    if lab is None:
        ids = list(POLES)
    else:
        ids = [p for p in lab.get("poles", []) if p in POLES]
    return [{"id": pid, **POLES[pid]} for pid in ids]


# ── Lab-scoped collections ───────────────────────────────────────────────


def get_courses(lab_id=None):
    return filter_by(fetch_entities("courses"), "labId", lab_id)


def get_course_by_slug(slug):
    return _find(get_courses(), "slug", slug)


def get_events(lab_id=None):
    return filter_by(fetch_entities("events"), "labId", lab_id)


def get_projects(lab_id=None):
    return filter_by(fetch_entities("projects"), "labId", lab_id)


def get_project_by_slug(slug):
    return _find(get_projects(), "slug", slug)


def get_articles(lab_id=None):
    return filter_by(fetch_entities("articles"), "labId", lab_id)


def get_article_by_slug(slug):
    return _find(get_articles(), "slug", slug)


def get_worksites(lab_id=None):
    return filter_by(fetch_entities("worksites"), "labId", lab_id)


def get_design_profiles(lab_id=None):
    return filter_by(fetch_entities("design-profiles"), "labId", lab_id)


# ── Shop ─────────────────────────────────────────────────────────────────


def get_products(country=None):
    """Products, optionally only those sold in ``country`` (ISO code)."""
    products = fetch_entities("products")
    if country is None:
        return products
    return [p for p in products if country in p["countries"]]


def get_product_by_id(product_id):
    return _find(get_products(), "id", product_id)


# ── Everything else ──────────────────────────────────────────────────────


def get_impact_stats():
    return fetch_entities("impact")


def get_map_projects():
    return fetch_entities("map-projects")


def get_potential_zones():
    return fetch_entities("potential-zones")


def get_press_items():
    return fetch_entities("press")


def get_resources():
    return fetch_entities("resources")
