"""
Database bootstrap: default categories, the admin account, and the flask CLI
commands that run them.
"""
import logging

import click

from yourbuzzfeed import db
from yourbuzzfeed.models import Category, User
from .auth_utils import hash_password

logger = logging.getLogger(__name__)

DEFAULT_ADMIN_USERNAME = 'admin'
DEFAULT_ADMIN_PASSWORD = 'admin123'
DEFAULT_ADMIN_EMAIL = 'admin@yourbuzzfeed.com'

DEFAULT_CATEGORIES = [
    {"name": "Health & Wellness", "slug": "health-wellness", "description": "Tips and advice for a healthier life", "color": "#FF3B30", "bg_color": "#FFEBE9"},
    {"name": "Personal Finance", "slug": "personal-finance", "description": "Money management, saving and investing", "color": "#0066CC", "bg_color": "#E6F0FF"},
    {"name": "Technology", "slug": "technology", "description": "Gadgets, apps and the latest tech news", "color": "#FF9500", "bg_color": "#FFF4E5"},
    {"name": "Celebrity", "slug": "celebrity", "description": "Celebrity news and pop culture", "color": "#9C27B0", "bg_color": "#F3E5F5"},
    {"name": "Travel", "slug": "travel", "description": "Destinations, tips and travel guides", "color": "#35C759", "bg_color": "#E9F7EF"},
    {"name": "Home & DIY", "slug": "home-diy", "description": "Home improvement and do-it-yourself projects", "color": "#8E8E93", "bg_color": "#F2F2F7"},
    {"name": "News", "slug": "news", "description": "The latest headlines", "color": "#1C1C1E", "bg_color": "#E5E5EA"},
    {"name": "Entertainment", "slug": "entertainment", "description": "Movies, TV, music and streaming", "color": "#FF2D55", "bg_color": "#FFE5EC"},
]


def init_categories():
    """Insert any default category whose slug is missing. Returns the number added."""
    existing = {slug for (slug,) in db.session.query(Category.slug).all()}
    added = 0
    for category_data in DEFAULT_CATEGORIES:
        if category_data["slug"] in existing:
            continue
        db.session.add(Category(**category_data))
        added += 1
    db.session.commit()
    logger.info(f"Category seed complete, {added} categories added")
    return added


def ensure_admin_user(username=DEFAULT_ADMIN_USERNAME, password=DEFAULT_ADMIN_PASSWORD,
                      email=DEFAULT_ADMIN_EMAIL, full_name='Administrator'):
    """Create the admin account, or reset its password if it already exists.

    Returns ``(user, created)``.
    """
    from yourbuzzfeed.storage import storage

    user = storage.get_user_by_username(username)
    if user is None:
        user = storage.create_user({
            'username': username,
            'password': hash_password(password),
            'email': email,
            'full_name': full_name,
            'is_admin': True,
        })
        logger.info(f"Admin user '{username}' created")
        return user, True

    user = storage.update_user(user.id, {'password': hash_password(password), 'is_admin': True})
    logger.info(f"Admin user '{username}' password reset")
    return user, False


def register_commands(app):

    @app.cli.command('init-db')
    def init_db_command():
        """Create tables and seed the default categories."""
        db.create_all()
        added = init_categories()
        click.echo(f"Database initialised ({added} categories added).")

    @app.cli.command('create-admin')
    @click.option('--username', default=DEFAULT_ADMIN_USERNAME, show_default=True)
    @click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True)
    @click.option('--email', default=DEFAULT_ADMIN_EMAIL, show_default=True)
    def create_admin_command(username, password, email):
        """Create the admin user or reset its password."""
        user, created = ensure_admin_user(username, password, email)
        click.echo(f"Admin user '{user.username}' {'created' if created else 'updated'}.")
