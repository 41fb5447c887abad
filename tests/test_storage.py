import pytest

from newsroom.core.errors import ValidationError
from newsroom.models import ArticleCreate, ArticleStatus, ArticleUpdate, CategoryCreate, CategoryUpdate
from newsroom.services.storage import ArticleQuery


def test_category_round_trip(storage):
    created = storage.create_category(CategoryCreate(name="Politics", slug="politics"))
    assert created.id is not None

    fetched = storage.get_category_by_slug("politics")
    assert fetched.id == created.id
    assert fetched.name == "Politics"
    assert storage.get_category_by_id(created.id).slug == "politics"


def test_missing_category_is_absence_not_error(storage):
    assert storage.get_category_by_slug("nope") is None
    assert storage.get_category_by_id(404) is None
    assert storage.update_category(404, CategoryUpdate(name="X")) is None


def test_create_category_rejects_blank_name(storage):
    with pytest.raises(ValidationError):
        storage.create_category(CategoryCreate(name="   ", slug="blank"))


def test_create_category_rejects_duplicate_slug(storage, politics):
    with pytest.raises(ValidationError, match="already in use"):
        storage.create_category(CategoryCreate(name="More Politics", slug="politics"))


def test_update_category_applies_partial_changes(storage, politics):
    updated = storage.update_category(politics.id, CategoryUpdate(name="World Politics"))
    assert updated.name == "World Politics"
    assert updated.slug == "politics"


def test_delete_category_detaches_articles(storage, politics, make_article):
    article = make_article("g20-summit", category_id=politics.id)

    assert storage.delete_category(politics.id) is True
    assert storage.get_category_by_id(politics.id) is None

    remaining = storage.get_article_by_id(article.id)
    assert remaining is not None
    assert remaining.category_id is None
    assert remaining.category is None

    # Deleting again is harmless
    assert storage.delete_category(politics.id) is False


def test_get_articles_defaults_to_published(storage, make_article):
    make_article("visible")
    make_article("hidden-draft", status=ArticleStatus.DRAFT)
    make_article("hidden-scheduled", status=ArticleStatus.SCHEDULED)

    slugs = [a.slug for a in storage.get_articles()]
    assert slugs == ["visible"]
    drafts = storage.get_articles(ArticleQuery(status=ArticleStatus.DRAFT))
    assert [a.slug for a in drafts] == ["hidden-draft"]
    assert storage.get_article_count(ArticleQuery(any_status=True)) == 3


def test_pagination_returns_ranks_three_and_four(storage, make_article):
    for hour in range(6):
        make_article(f"story-{hour}", hours=hour)

    page = storage.get_articles(ArticleQuery(limit=2, offset=2))
    # story-5 is newest, so ranks 3 and 4 are story-3 and story-2
    assert [a.slug for a in page] == ["story-3", "story-2"]


def test_count_matches_listing(storage, politics, make_article):
    for hour in range(4):
        make_article(f"story-{hour}", hours=hour, category_id=politics.id if hour % 2 else None)
    make_article("draft", status=ArticleStatus.DRAFT)

    for query in (ArticleQuery(), ArticleQuery(category_id=politics.id)):
        total = storage.get_article_count(query)
        query.limit = total + 1
        assert len(storage.get_articles(query)) == total
    assert storage.get_article_count() == 4


def test_featured_articles_are_published_and_capped(storage, make_article):
    make_article("featured-old", featured=True, hours=1)
    make_article("featured-new", featured=True, hours=2)
    make_article("featured-draft", featured=True, status=ArticleStatus.DRAFT, hours=3)
    make_article("plain", hours=4)

    featured = storage.get_featured_articles()
    assert [a.slug for a in featured] == ["featured-new", "featured-old"]
    assert [a.slug for a in storage.get_featured_articles(limit=1)] == ["featured-new"]


def test_latest_articles_filter_by_category(storage, politics, make_article):
    make_article("in-politics", category_id=politics.id, hours=1)
    make_article("elsewhere", hours=2)

    assert [a.slug for a in storage.get_latest_articles()] == ["elsewhere", "in-politics"]
    in_category = storage.get_latest_articles(category_id=politics.id)
    assert [a.slug for a in in_category] == ["in-politics"]
    assert in_category[0].category.name == "Politics"


def test_search_matches_title_or_content_case_insensitively(storage, make_article):
    make_article("climate-deal", title="Climate Deal Reached", hours=1)
    make_article("markets", content="<p>The CLIMATE affects markets</p>", hours=2)
    make_article("climate-draft", title="Climate draft", status=ArticleStatus.DRAFT)
    make_article("sports")

    results = storage.search_articles("climate")
    assert [a.slug for a in results] == ["markets", "climate-deal"]


def test_search_treats_wildcards_literally(storage, make_article):
    make_article("discount", title="Prices fall 50% overnight")
    make_article("other", title="Prices fall overnight")

    assert [a.slug for a in storage.search_articles("50%")] == ["discount"]


def test_search_rejects_blank_query(storage):
    with pytest.raises(ValidationError):
        storage.search_articles("")
    with pytest.raises(ValidationError):
        storage.search_articles("   ")


def test_article_lookup_joins_category_and_author(storage, admin, politics, make_article):
    make_article("g20-summit", category_id=politics.id)

    article = storage.get_article_by_slug("g20-summit")
    assert article.category.name == "Politics"
    assert article.author.username == admin.username
    assert storage.get_article_by_slug("missing") is None


def test_create_article_assigns_author_and_defaults(storage, admin, politics):
    data = ArticleCreate(
        title="G20 Summit",
        slug="g20-summit",
        excerpt="Leaders meet",
        content="<p>...</p>",
        category_id=politics.id,
        status=ArticleStatus.PUBLISHED,
    )
    article = storage.create_article(data, author_id=admin.id)

    assert article.id is not None
    assert article.author_id == admin.id
    assert article.featured is False
    assert article.published_at is not None


def test_create_article_rejects_unknown_category(storage, admin):
    data = ArticleCreate(title="T", slug="t", excerpt="e", content="c", category_id=99)
    with pytest.raises(ValidationError, match="does not exist"):
        storage.create_article(data, author_id=admin.id)


def test_create_article_rejects_duplicate_slug(storage, admin, make_article):
    make_article("taken")
    data = ArticleCreate(title="T", slug="taken", excerpt="e", content="c")
    with pytest.raises(ValidationError, match="already in use"):
        storage.create_article(data, author_id=admin.id)


def test_update_article_stamps_updated_at(storage, make_article):
    article = make_article("story")
    before = article.updated_at

    updated = storage.update_article(article.id, ArticleUpdate(title="New title", featured=True))
    assert updated.title == "New title"
    assert updated.featured is True
    assert updated.slug == "story"
    assert updated.updated_at > before


def test_update_article_rejects_clearing_required_field(storage, make_article):
    article = make_article("story")
    with pytest.raises(ValidationError, match="title"):
        storage.update_article(article.id, ArticleUpdate(title=None))


def test_update_article_can_clear_category(storage, politics, make_article):
    article = make_article("story", category_id=politics.id)
    updated = storage.update_article(article.id, ArticleUpdate(category_id=None))
    assert updated.category_id is None


def test_update_and_delete_missing_article(storage):
    assert storage.update_article(404, ArticleUpdate(title="x")) is None
    assert storage.delete_article(404) is False


def test_delete_article(storage, make_article):
    article = make_article("story")
    assert storage.delete_article(article.id) is True
    assert storage.get_article_by_id(article.id) is None


def test_stats(storage, admin, reader, politics, make_article):
    make_article("a", featured=True)
    make_article("b", status=ArticleStatus.DRAFT)
    make_article("c", status=ArticleStatus.SCHEDULED)

    stats = storage.get_stats()
    assert stats.total_articles == 3
    assert stats.published_articles == 1
    assert stats.draft_articles == 1
    assert stats.scheduled_articles == 1
    assert stats.featured_articles == 1
    assert stats.total_categories == 1
    assert stats.total_users == 2


def test_create_article_rejects_whitespace_only_text(storage, admin):
    for field in ("title", "excerpt", "content"):
        values = {"title": "T", "slug": f"blank-{field}", "excerpt": "e", "content": "c", field: "   "}
        with pytest.raises(ValidationError, match=f"{field} cannot be blank"):
            storage.create_article(ArticleCreate(**values), author_id=admin.id)
    assert storage.get_article_count(ArticleQuery(any_status=True)) == 0


def test_create_article_strips_title_and_excerpt(storage, admin):
    data = ArticleCreate(title="  Budget vote  ", slug="budget", excerpt=" Parliament decides ", content="<p>x</p>")
    article = storage.create_article(data, author_id=admin.id)
    assert article.title == "Budget vote"
    assert article.excerpt == "Parliament decides"


def test_update_article_rejects_whitespace_only_text(storage, make_article):
    article = make_article("story")
    with pytest.raises(ValidationError, match="content cannot be blank"):
        storage.update_article(article.id, ArticleUpdate(content=" \n "))
    assert storage.get_article_by_id(article.id).content == "<p>Body of story</p>"
