"""
Model package.

Imports every model class so they are reachable as yourbuzzfeed.models.ModelName
and registered on the metadata before migrations or create_all run.
"""
from .user import User, load_user
from .category import Category
from .article import Article
from .tag import Tag, ArticleTag

__all__ = ['User', 'load_user', 'Category', 'Article', 'Tag', 'ArticleTag']
