"""
Settings Repository - key/value rows per establishment.
"""

from typing import Sequence

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from rest_api.models import Setting


class SettingRepository:
    """Data access for the (establishment_id, key) -> value store."""

    def __init__(self, db: Session):
        self._db = db

    def find_all(self, establishment_id: int) -> Sequence[Setting]:
        query = (
            select(Setting)
            .where(Setting.establishment_id == establishment_id)
            .order_by(Setting.key)
        )
        return self._db.execute(query).scalars().all()

    def get_map(self, establishment_id: int) -> dict[str, str | None]:
        """All settings of an establishment reduced into a dict."""
        return {row.key: row.value for row in self.find_all(establishment_id)}

    def upsert(self, establishment_id: int, key: str, value: str | None) -> None:
        """Insert or overwrite one key. Does not commit."""
        row = self._db.get(Setting, (establishment_id, key))
        if row is None:
            self._db.add(Setting(establishment_id=establishment_id, key=key, value=value))
        else:
            row.value = value

    def delete_key(self, establishment_id: int, key: str) -> None:
        self._db.execute(
            delete(Setting).where(
                Setting.establishment_id == establishment_id,
                Setting.key == key,
            )
        )

    def establishments_with_keys(self, keys: Sequence[str]) -> list[int]:
        """Ids of establishments holding at least one of `keys`."""
        query = select(Setting.establishment_id).where(Setting.key.in_(keys)).distinct()
        return list(self._db.execute(query).scalars().all())