"""
Storage access layer.

The single mediator between route handlers / services and the database. Lookups by
id or slug return None on a miss; updates and deletes by id raise NotFoundError when
no row matches. View and share counters are bumped with one UPDATE statement so
concurrent requests never lose increments.

Every ``data``/``patch`` argument is a dict keyed by model column names.
"""
import logging

from sqlalchemy import update, delete
from sqlalchemy.exc import IntegrityError

from yourbuzzfeed import db
from yourbuzzfeed.models import User, Category, Article, Tag, ArticleTag
from yourbuzzfeed.utils.article_utils import calculate_read_time
from yourbuzzfeed.utils.errors import NotFoundError, ValidationError
from yourbuzzfeed.utils.slug_generator import slugify

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY_COLOR = '#0066CC'
DEFAULT_CATEGORY_BG_COLOR = '#E6F0FF'

# Columns that only the server may write
PROTECTED_ARTICLE_FIELDS = ('id', 'views', 'shares')


def _newest_first(query):
    return query.order_by(Article.publish_date.desc(), Article.id.desc())


def _commit_unique(message):
    """Commit, turning a unique-constraint violation into a ValidationError."""
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ValidationError(message)


class DatabaseStorage:

    # --- Users ---

    def get_user(self, user_id):
        return db.session.get(User, user_id)

    def get_user_by_username(self, username):
        return User.query.filter_by(username=username).first()

    def get_first_admin(self):
        return User.query.filter_by(is_admin=True).order_by(User.id).first()

    def create_user(self, data):
        user = User(**data)
        db.session.add(user)
        _commit_unique("Username or email already exists")
        return user

    def update_user(self, user_id, patch):
        patch = {key: value for key, value in patch.items() if key != 'id'}
        if patch:
            result = db.session.execute(update(User).where(User.id == user_id).values(**patch))
            if result.rowcount == 0:
                db.session.rollback()
                raise NotFoundError("User not found")
            db.session.commit()
        user = self.get_user(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    # --- Categories ---

    def get_categories(self):
        return Category.query.all()

    def get_category(self, category_id):
        return db.session.get(Category, category_id)

    def get_category_by_slug(self, slug):
        return Category.query.filter_by(slug=slug).first()

    def create_category(self, data):
        data = dict(data)
        if not data.get('slug'):
            data['slug'] = slugify(data['name'])
        category = Category(**data)
        db.session.add(category)
        _commit_unique("Category slug already exists")
        logger.info(f"Category created: {category.slug}")
        return category

    def get_or_create_category(self, name):
        """Resolve a category by the slug of ``name``, creating it when missing."""
        slug = slugify(name)
        category = self.get_category_by_slug(slug)
        if category is not None:
            return category
        return self.create_category({
            'name': name,
            'slug': slug,
            'description': f"Articles about {name}",
            'color': DEFAULT_CATEGORY_COLOR,
            'bg_color': DEFAULT_CATEGORY_BG_COLOR,
        })

    # --- Articles ---

    def get_articles(self, limit=20, offset=0):
        return _newest_first(Article.query).limit(limit).offset(offset).all()

    def get_article(self, article_id):
        return db.session.get(Article, article_id)

    def get_article_by_slug(self, slug):
        return Article.query.filter_by(slug=slug).first()

    def get_featured_articles(self, limit=1):
        return _newest_first(Article.query.filter(Article.is_featured.is_(True))).limit(limit).all()

    def get_articles_by_category(self, category_id, limit=10):
        return _newest_first(Article.query.filter(Article.category_id == category_id)).limit(limit).all()

    def get_articles_by_category_slug(self, slug, limit=10):
        category = self.get_category_by_slug(slug)
        if category is None:
            return []
        return self.get_articles_by_category(category.id, limit)

    def get_popular_articles(self, limit=5):
        return Article.query.order_by(Article.views.desc(), Article.id.desc()).limit(limit).all()

    def get_related_articles(self, article_id, limit=3):
        """Newest articles in the same category, excluding the article itself."""
        article = self.get_article(article_id)
        if article is None or article.category_id is None:
            return []
        query = Article.query.filter(
            Article.category_id == article.category_id,
            Article.id != article_id,
        )
        return _newest_first(query).limit(limit).all()

    def create_article(self, data):
        data = {key: value for key, value in data.items() if key not in PROTECTED_ARTICLE_FIELDS}
        if not data.get('read_time'):
            data['read_time'] = calculate_read_time(data.get('content'), data.get('content_type', 'article'))
        if data.get('excerpt') is None:
            data['excerpt'] = ''
        if data.get('publish_date') is None:
            data.pop('publish_date', None)
        article = Article(views=0, shares=0, **data)
        db.session.add(article)
        _commit_unique("Article slug already exists")
        logger.info(f"Article created: id={article.id} slug={article.slug}")
        return article

    def update_article(self, article_id, patch):
        patch = {key: value for key, value in patch.items() if key not in PROTECTED_ARTICLE_FIELDS}
        if patch:
            try:
                result = db.session.execute(update(Article).where(Article.id == article_id).values(**patch))
            except IntegrityError:
                db.session.rollback()
                raise ValidationError("Article slug already exists")
            if result.rowcount == 0:
                db.session.rollback()
                raise NotFoundError("Article not found")
            db.session.commit()
        article = self.get_article(article_id)
        if article is None:
            raise NotFoundError("Article not found")
        return article

    def delete_article(self, article_id):
        """Delete an article together with its tag associations."""
        db.session.execute(delete(ArticleTag).where(ArticleTag.article_id == article_id))
        result = db.session.execute(delete(Article).where(Article.id == article_id))
        if result.rowcount == 0:
            db.session.rollback()
            raise NotFoundError("Article not found")
        db.session.commit()
        logger.info(f"Article deleted: id={article_id}")

    def _increment(self, article_id, column):
        result = db.session.execute(
            update(Article)
            .where(Article.id == article_id)
            .values({column: getattr(Article, column) + 1})
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            db.session.rollback()
            raise NotFoundError("Article not found")
        db.session.commit()

    def increment_article_views(self, article_id):
        self._increment(article_id, 'views')

    def increment_article_shares(self, article_id):
        self._increment(article_id, 'shares')

    # --- Tags ---

    def get_tags(self):
        return Tag.query.order_by(Tag.name).all()

    def get_tag_by_slug(self, slug):
        return Tag.query.filter_by(slug=slug).first()

    def create_tag(self, data):
        data = dict(data)
        if not data.get('slug'):
            data['slug'] = slugify(data['name'])
        tag = Tag(**data)
        db.session.add(tag)
        _commit_unique("Tag slug already exists")
        return tag

    def get_articles_by_tag(self, tag_id):
        article_ids = [
            article_id for (article_id,) in
            db.session.query(ArticleTag.article_id).filter(ArticleTag.tag_id == tag_id).all()
        ]
        if not article_ids:
            return []
        return _newest_first(Article.query.filter(Article.id.in_(article_ids))).all()

    def get_articles_by_tag_slug(self, slug):
        tag = self.get_tag_by_slug(slug)
        if tag is None:
            return []
        return self.get_articles_by_tag(tag.id)

    def add_tag_to_article(self, article_id, tag_id):
        self.add_tags_to_article(article_id, [tag_id])

    def add_tags_to_article(self, article_id, tag_ids):
        """
        Link every tag in ``tag_ids`` to the article in one commit.

        All ids are checked first, so an unknown article or tag writes nothing.
        Links that already exist are left alone.
        """
        tag_ids = list(dict.fromkeys(tag_ids))
        if self.get_article(article_id) is None:
            raise NotFoundError("Article not found")
        found = {tag_id for (tag_id,) in db.session.query(Tag.id).filter(Tag.id.in_(tag_ids)).all()}
        if len(found) != len(tag_ids):
            raise NotFoundError("Tag not found")
        linked = {
            tag_id for (tag_id,) in
            db.session.query(ArticleTag.tag_id).filter(ArticleTag.article_id == article_id).all()
        }
        for tag_id in tag_ids:
            if tag_id not in linked:
                db.session.add(ArticleTag(article_id=article_id, tag_id=tag_id))
        db.session.commit()

    def get_tags_for_article(self, article_id):
        return (
            Tag.query.join(ArticleTag, ArticleTag.tag_id == Tag.id)
            .filter(ArticleTag.article_id == article_id)
            .order_by(Tag.name)
            .all()
        )


storage = DatabaseStorage()
