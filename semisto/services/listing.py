"""
Listing helpers — filtering, sorting and pagination of catalog lists.

Pure functions over already-resolved entity lists; nothing here touches
the network or the database.
"""

import math

ARTICLES_PER_PAGE = 9
FEATURED_ARTICLES = 2

EVENT_TYPES = ("atelier", "chantier", "visite", "conference", "formation")
ARTICLE_CATEGORIES = ("actualite", "technique", "inspiration", "recette", "portrait")


def filter_events(events, lab_id=None, event_type=None):
    """Narrow events by lab and type, soonest first.

    ``event_type`` of None or "all" keeps every type.
    """
    filtered = [e for e in events if lab_id is None or e.get("labId") == lab_id]
    if event_type and event_type != "all":
        filtered = [e for e in filtered if e.get("type") == event_type]
    return sorted(filtered, key=lambda e: e["date"])


def paginate_articles(articles, category=None, page=1, per_page=ARTICLES_PER_PAGE):
    """Split articles into a featured strip and a paginated grid.

    The first two featured articles of the (category-filtered) list are
    pulled out; the remaining articles are paginated. ``page`` is clamped
    to the available range so out-of-range requests land on a real page.
    """
    if category and category != "all":
        filtered = [a for a in articles if a.get("category") == category]
    else:
        filtered = list(articles)

    featured = [a for a in filtered if a.get("isFeatured")][:FEATURED_ARTICLES]
    featured_ids = {a["id"] for a in featured}
    regular = [a for a in filtered if a["id"] not in featured_ids]

    total_pages = max(1, math.ceil(len(regular) / per_page))
    page = min(max(1, page), total_pages)
    start = (page - 1) * per_page
    return {
        "featured": featured,
        "items": regular[start:start + per_page],
        "page": page,
        "total_pages": total_pages,
        "total": len(filtered),
    }


def similar_packages(packages, package_id, limit=3):
    """Other packages to suggest next to ``package_id``."""
    return [p for p in packages if p["id"] != package_id][:limit]


def clamp_quantity(quantity, stock):
    """Bound a quantity picker value to ``[1, stock]`` (0 when out of stock)."""
    if stock <= 0:
        return 0
    return min(max(1, int(quantity)), stock)
