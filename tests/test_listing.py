"""Tests for semisto.services.listing."""

from semisto.services import catalog_service, listing


def _articles(n, featured=()):
    return [
        {"id": f"a{i}", "category": "technique" if i % 2 else "recette", "isFeatured": i in featured}
        for i in range(n)
    ]


class TestFilterEvents:
    def test_sorted_by_date(self):
        events = listing.filter_events(catalog_service.get_events())
        dates = [e["date"] for e in events]
        assert dates == sorted(dates)

    def test_lab_and_type(self):
        events = listing.filter_events(catalog_service.get_events(), lab_id="lab-wb", event_type="chantier")
        assert [e["id"] for e in events] == ["event-001"]

    def test_all_means_every_type(self):
        events = catalog_service.get_events()
        assert len(listing.filter_events(events, event_type="all")) == len(events)


class TestPaginateArticles:
    def test_featured_split(self):
        result = listing.paginate_articles(catalog_service.get_articles())
        assert [a["id"] for a in result["featured"]] == ["article-001", "article-002"]
        grid_ids = {a["id"] for a in result["items"]}
        assert "article-001" not in grid_ids
        assert "article-004" in grid_ids  # third featured article goes to the grid
        assert result["total"] == 5

    def test_category_filter(self):
        result = listing.paginate_articles(catalog_service.get_articles(), category="actualite")
        ids = [a["id"] for a in result["featured"]] + [a["id"] for a in result["items"]]
        assert sorted(ids) == ["article-002", "article-004"]

    def test_pages(self):
        articles = _articles(20)
        first = listing.paginate_articles(articles, page=1)
        third = listing.paginate_articles(articles, page=3)
        assert first["total_pages"] == 3
        assert len(first["items"]) == 9
        assert [a["id"] for a in third["items"]] == ["a18", "a19"]

    def test_page_is_clamped(self):
        articles = _articles(5)
        assert listing.paginate_articles(articles, page=99)["page"] == 1
        assert listing.paginate_articles(articles, page=-3)["page"] == 1

    def test_empty_list_has_one_page(self):
        result = listing.paginate_articles([])
        assert result["total_pages"] == 1
        assert result["items"] == []


class TestMisc:
    def test_similar_packages_excludes_current(self):
        packages = [{"id": f"p{i}"} for i in range(5)]
        similar = listing.similar_packages(packages, "p0")
        assert [p["id"] for p in similar] == ["p1", "p2", "p3"]

    def test_clamp_quantity(self):
        assert listing.clamp_quantity(5, 3) == 3
        assert listing.clamp_quantity(0, 3) == 1
        assert listing.clamp_quantity(2, 0) == 0
