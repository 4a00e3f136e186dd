"""Read access to the user population targeted by notifications."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy.orm import Session

from lostfound.domain.entities import Recipient
from lostfound.infrastructure.models import UserModel


class UserRepository:
    """Expose users as notification :class:`Recipient` objects."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def list_recipients(self) -> Sequence[Recipient]:
        query = self.session.query(UserModel.user_id, UserModel.notification_token)
        return [
            Recipient(user_id=user_id, notification_token=token or None)
            for user_id, token in query.order_by(UserModel.user_id).all()
        ]

    def get_recipient(self, user_id: str) -> Recipient | None:
        model = self.session.get(UserModel, user_id)
        if model is None:
            return None
        return Recipient(
            user_id=model.user_id, notification_token=model.notification_token or None
        )


__all__ = ["UserRepository"]
