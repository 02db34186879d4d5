# yourbuzzfeed/models/user.py
"""
User model (User).
Stores admin accounts: username, scrypt password hash, email, display name and admin flag.
Also holds the Flask-Login user_loader.
"""
from yourbuzzfeed import db, login_manager
from flask_login import UserMixin


@login_manager.user_loader
def load_user(user_id):
    from yourbuzzfeed.storage import storage
    try:
        return storage.get_user(int(user_id))
    except (TypeError, ValueError):
        return None


class User(UserMixin, db.Model):
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(100), unique=True, nullable=False, index=True)
    password = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=True)
    full_name = db.Column(db.String(255), nullable=True)
    is_admin = db.Column(db.Boolean, default=False, nullable=False)

    articles = db.relationship('Article', backref='author', lazy='dynamic')

    def to_dict(self):
        # The password hash never leaves the server
        return {
            'id': self.id,
            'username': self.username,
            'email': self.email,
            'fullName': self.full_name,
            'isAdmin': bool(self.is_admin),
        }

    def __repr__(self):
        return f'<User {self.username}>'


@login_manager.unauthorized_handler
def unauthorized():
    from yourbuzzfeed.utils.errors import UnauthorizedError
    raise UnauthorizedError()
