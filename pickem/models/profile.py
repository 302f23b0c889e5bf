from datetime import datetime, timezone

from pickem import db
from pickem.schemas import ProfileRecord


class Profile(db.Model):
    """League member; the email is the identifier picks are stored under"""

    __tablename__ = "profiles"

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)
    username = db.Column(db.String(80), unique=True, nullable=True)

    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    def __repr__(self):
        return f"<Profile {self.username or self.email}>"

    def to_record(self):
        return ProfileRecord(email=self.email, username=self.username)

    @staticmethod
    def get_all_in_join_order():
        return Profile.query.order_by(Profile.id).all()
