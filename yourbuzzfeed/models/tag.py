# yourbuzzfeed/models/tag.py
"""
Tag model (Tag) and the article/tag join table (ArticleTag).
ArticleTag rows are removed by the storage layer before their article is deleted.
"""
from yourbuzzfeed import db


class Tag(db.Model):
    __tablename__ = 'tags'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    slug = db.Column(db.String(100), nullable=False, unique=True, index=True)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'slug': self.slug,
        }

    def __repr__(self):
        return f'<Tag {self.slug}>'


class ArticleTag(db.Model):
    __tablename__ = 'articles_tags'

    id = db.Column(db.Integer, primary_key=True)
    article_id = db.Column(db.Integer, db.ForeignKey('articles.id'), nullable=False, index=True)
    tag_id = db.Column(db.Integer, db.ForeignKey('tags.id'), nullable=False, index=True)

    __table_args__ = (
        db.UniqueConstraint('article_id', 'tag_id', name='uq_articles_tags_article_tag'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'articleId': self.article_id,
            'tagId': self.tag_id,
        }

    def __repr__(self):
        return f'<ArticleTag article={self.article_id} tag={self.tag_id}>'
