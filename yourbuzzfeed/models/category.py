# yourbuzzfeed/models/category.py
"""
Category model (Category).
Groups articles; the slug is the public lookup key and the colors drive the badge styling.
"""
from yourbuzzfeed import db


class Category(db.Model):
    __tablename__ = 'categories'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    slug = db.Column(db.String(100), nullable=False, unique=True, index=True)
    description = db.Column(db.Text, nullable=True)
    color = db.Column(db.String(20), nullable=True)
    bg_color = db.Column(db.String(20), nullable=True)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'slug': self.slug,
            'description': self.description,
            'color': self.color,
            'bgColor': self.bg_color,
        }

    def __repr__(self):
        return f'<Category {self.slug}>'
