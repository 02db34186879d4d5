from datetime import datetime, timedelta

import pytest

from yourbuzzfeed import create_app, db
from yourbuzzfeed.models import Article, Category, Tag, ArticleTag
from yourbuzzfeed.utils.init_db import ensure_admin_user
from yourbuzzfeed.utils.sessions import MemorySessionRepository


class Fixtures:
    """ Usage:

            >>> # Make fixture generators
            >>> CategoryFixtures = Fixtures(Category, slug="category-{}", ...)
            >>> ArticleFixtures = Fixtures(Article, slug="article-{}", ...)

            >>> # Create a new category, formatting its strings with '1'
            >>> category = CategoryFixtures[1]

            >>> # Create 2 articles, formatting their strings with '1' and '2'
            >>> # respectively, both in the newly created category
            >>> articles = ArticleFixtures.add_extra(category_id=category.id)[1:3]

        Callable values are called with the index instead of being formatted.
    """

    def __init__(self, model, **kwargs):
        self.model = model
        self.kwargs = kwargs

    def add_extra(self, **kwargs):
        return self.__class__(self.model, **{**self.kwargs, **kwargs})

    def _get(self, i):
        result = {}
        for key, value in self.kwargs.items():
            if callable(value):
                value = value(i)
            elif isinstance(value, str):
                value = value.format(i)
            result[key] = value
        instance = self.model(**result)
        db.session.add(instance)
        db.session.commit()
        return instance

    def __getitem__(self, index):
        if isinstance(index, slice):
            start = index.start or 1
            stop = index.stop
            step = index.step or 1
            return [self._get(i) for i in range(start, stop, step)]
        else:
            return self._get(index)


BASE_DATE = datetime(2024, 1, 1, 12, 0, 0)

# Higher index means newer article
ArticleFixtures = Fixtures(Article,
                           slug="article-{}",
                           title="Article {}",
                           excerpt="Excerpt of article {}",
                           content="<p>Content of article {}</p>",
                           publish_date=lambda i: BASE_DATE + timedelta(days=i),
                           views=0,
                           shares=0,
                           read_time=1)
CategoryFixtures = Fixtures(Category,
                            slug="category-{}",
                            name="Category {}",
                            description="Articles about category {}",
                            color="#0066CC",
                            bg_color="#E6F0FF")
TagFixtures = Fixtures(Tag, slug="tag-{}", name="Tag {}")

ADMIN_PASSWORD = 'admin123'


@pytest.fixture
def app(tmp_path):
    app = create_app({
        'TESTING': True,
        'SECRET_KEY': 'test-secret',
        # A file database so worker threads share the same data
        'SQLALCHEMY_DATABASE_URI': f"sqlite:///{tmp_path / 'test.db'}",
        'SQLALCHEMY_ENGINE_OPTIONS': {'connect_args': {'timeout': 30}},
        'RATELIMIT_ENABLED': False,
        'SESSION_REPOSITORY': MemorySessionRepository(),
        'OPENAI_API_KEY': 'test-openai-key',
        'UNSPLASH_ACCESS_KEY': 'test-unsplash-key',
        'ENABLE_ADMIN_RECOVERY': False,
        'BATCH_MAX_WORKERS': 4,
    })
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin(app):
    user, _ = ensure_admin_user(password=ADMIN_PASSWORD)
    return user


@pytest.fixture
def auth_client(client, admin):
    response = client.post('/api/login', json={'username': 'admin', 'password': ADMIN_PASSWORD})
    assert response.status_code == 200
    return client


@pytest.fixture
def no_images(monkeypatch):
    from yourbuzzfeed.services import unsplash
    monkeypatch.setattr(unsplash, 'get_random_image', lambda query: None)


def tag_article(article, tag):
    db.session.add(ArticleTag(article_id=article.id, tag_id=tag.id))
    db.session.commit()
