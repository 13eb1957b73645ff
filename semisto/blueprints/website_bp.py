"""
Website Blueprint — public catalog API.

Every list endpoint resolves its resource through the catalog service
(remote API or static snapshot) and then applies the query filters:

    lab_id    Lab-scoped collections
    country   products (ISO country code)
    type      events ("all" = every type)
    category  articles ("all" = every category)
    page      articles
"""

from flask import Blueprint, jsonify

from semisto.blueprints import query_filter, query_int
from semisto.services import catalog_service as svc
from semisto.services import listing
from semisto.services.catalog_service import CatalogSchemaError
from semisto.utils.errors import E, api_error

website_bp = Blueprint("website", __name__, url_prefix="/api/v1/website")


@website_bp.errorhandler(CatalogSchemaError)
def _catalog_schema_error(exc):
    return api_error(E.INTERNAL, f"Catalog data for {exc.resource} is unavailable")


# ═══════════════════════════════════════════════════════════════
# Labs & poles
# ═══════════════════════════════════════════════════════════════

@website_bp.route("/labs", methods=["GET"])
def list_labs():
    return jsonify(svc.get_labs()), 200


@website_bp.route("/labs/slugs", methods=["GET"])
def lab_slugs():
    return jsonify(svc.get_lab_slugs()), 200


@website_bp.route("/labs/<slug>", methods=["GET"])
def get_lab(slug):
    """Lab page: the lab, its poles and upcoming activity."""
    lab = svc.get_lab_by_slug(slug)
    if not lab:
        return api_error(E.NOT_FOUND, "Lab not found")
    return jsonify({
        "lab": lab,
        "poles": svc.get_poles(lab),
        "events": listing.filter_events(svc.get_events(), lab_id=lab["id"]),
        "courses": svc.get_courses(lab["id"]),
        "projects": svc.get_projects(lab["id"]),
    }), 200


@website_bp.route("/poles", methods=["GET"])
def list_poles():
    return jsonify(svc.get_poles()), 200


# ═══════════════════════════════════════════════════════════════
# Lab-scoped collections
# ═══════════════════════════════════════════════════════════════

@website_bp.route("/courses", methods=["GET"])
def list_courses():
    return jsonify(svc.get_courses(query_filter("lab_id"))), 200


@website_bp.route("/courses/<slug>", methods=["GET"])
def get_course(slug):
    course = svc.get_course_by_slug(slug)
    if not course:
        return api_error(E.NOT_FOUND, "Course not found")
    return jsonify(course), 200


@website_bp.route("/events", methods=["GET"])
def list_events():
    events = listing.filter_events(
        svc.get_events(),
        lab_id=query_filter("lab_id"),
        event_type=query_filter("type"),
    )
    return jsonify(events), 200


@website_bp.route("/projects", methods=["GET"])
def list_projects():
    return jsonify(svc.get_projects(query_filter("lab_id"))), 200


@website_bp.route("/projects/<slug>", methods=["GET"])
def get_project(slug):
    project = svc.get_project_by_slug(slug)
    if not project:
        return api_error(E.NOT_FOUND, "Project not found")
    return jsonify(project), 200


@website_bp.route("/articles", methods=["GET"])
def list_articles():
    """Paginated articles with the featured strip pulled out."""
    articles = svc.get_articles(query_filter("lab_id"))
    result = listing.paginate_articles(
        articles,
        category=query_filter("category"),
        page=query_int("page", 1),
    )
    return jsonify(result), 200


@website_bp.route("/articles/<slug>", methods=["GET"])
def get_article(slug):
    article = svc.get_article_by_slug(slug)
    if not article:
        return api_error(E.NOT_FOUND, "Article not found")
    related = [
        a for a in svc.get_articles()
        if a["id"] != article["id"] and a.get("category") == article.get("category")
    ][:3]
    return jsonify({"article": article, "related": related}), 200


@website_bp.route("/worksites", methods=["GET"])
def list_worksites():
    return jsonify(svc.get_worksites(query_filter("lab_id"))), 200


@website_bp.route("/design-profiles", methods=["GET"])
def list_design_profiles():
    return jsonify(svc.get_design_profiles(query_filter("lab_id"))), 200


# ═══════════════════════════════════════════════════════════════
# Shop catalog
# ═══════════════════════════════════════════════════════════════

@website_bp.route("/products", methods=["GET"])
def list_products():
    products = svc.get_products(query_filter("country"))
    product_type = query_filter("type")
    if product_type:
        products = [p for p in products if p.get("type") == product_type]
    return jsonify(products), 200


@website_bp.route("/products/<product_id>", methods=["GET"])
def get_product(product_id):
    product = svc.get_product_by_id(product_id)
    if not product:
        return api_error(E.NOT_FOUND, "Product not found")
    return jsonify(product), 200


# ═══════════════════════════════════════════════════════════════
# Everything else
# ═══════════════════════════════════════════════════════════════

@website_bp.route("/impact", methods=["GET"])
def impact():
    return jsonify(svc.get_impact_stats()), 200


@website_bp.route("/map", methods=["GET"])
def map_data():
    return jsonify({
        "projects": svc.get_map_projects(),
        "zones": svc.get_potential_zones(),
    }), 200


@website_bp.route("/press", methods=["GET"])
def list_press():
    return jsonify(svc.get_press_items()), 200


@website_bp.route("/resources", methods=["GET"])
def list_resources():
    return jsonify(svc.get_resources()), 200
