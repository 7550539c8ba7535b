"""Session management models."""

from accountstore.core.db import MongoModel


class Session(MongoModel):
    """Authentication session binding a user to its current token.

    Indexed on user_id. At most one session per user is kept.
    """

    user_id: str
    jwt: str
