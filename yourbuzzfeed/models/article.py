# yourbuzzfeed/models/article.py
"""
Article model (Article).
Stores published content of every kind (article, listicle, news): HTML body, excerpt,
featured image, category/author references, feature flags and the view/share counters.
The counters are only ever changed through single UPDATE statements in the storage layer.
"""
from datetime import datetime

from yourbuzzfeed import db

CONTENT_TYPES = ('article', 'listicle', 'news')


class Article(db.Model):
    __tablename__ = 'articles'

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(500), nullable=False)
    slug = db.Column(db.String(500), nullable=False, unique=True, index=True)
    excerpt = db.Column(db.Text, nullable=False, default='')
    content = db.Column(db.Text, nullable=False)
    featured_image = db.Column(db.String(1000), nullable=True)
    publish_date = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)
    # Weak references: generation may point at a category before it exists
    author_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)
    category_id = db.Column(db.Integer, nullable=True, index=True)
    is_published = db.Column(db.Boolean, default=True, nullable=False)
    is_featured = db.Column(db.Boolean, default=False, nullable=False)
    content_type = db.Column(db.String(20), default='article', nullable=False)
    views = db.Column(db.Integer, default=0, nullable=False)
    shares = db.Column(db.Integer, default=0, nullable=False)
    read_time = db.Column(db.Integer, default=5, nullable=False)

    def to_dict(self, include_content=True):
        data = {
            'id': self.id,
            'title': self.title,
            'slug': self.slug,
            'excerpt': self.excerpt,
            'featuredImage': self.featured_image,
            'publishDate': self.publish_date.isoformat() if self.publish_date else None,
            'authorId': self.author_id,
            'categoryId': self.category_id,
            'isPublished': bool(self.is_published),
            'isFeatured': bool(self.is_featured),
            'contentType': self.content_type,
            'views': self.views or 0,
            'shares': self.shares or 0,
            'readTime': self.read_time,
        }
        if include_content:
            data['content'] = self.content
        return data

    def __repr__(self):
        return f'<Article {self.slug}>'
