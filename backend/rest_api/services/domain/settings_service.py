"""
Settings Service - per-establishment key/value configuration.

Storage stays an open (key -> text) map so the admin UI can persist any key,
but readers go through `EstablishmentConfig`, a typed view with named fields
and the unknown keys kept aside in `extras`.

Usage:
    from rest_api.services.domain import SettingsService

    service = SettingsService(db)
    service.upsert_many(establishment_id, {"is_open": True, "pix_key": "123"})
    config = service.get_config(establishment_id)
    if config.evolution_enabled:
        ...
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from rest_api.repositories import SettingRepository
from shared.config.constants import DEFAULT_PRIMARY_COLOR, LEGACY_SETTING_KEYS, SettingKeys
from shared.config.logging import get_logger
from shared.infrastructure.db import safe_commit
from shared.utils.exceptions import DatabaseError

logger = get_logger(__name__)

TRUTHY_VALUES = frozenset({"1", "true", "yes", "on"})


def coerce_setting_value(value: Any) -> Optional[str]:
    """
    Convert an incoming JSON value to its stored text form.

    True -> "1", False -> "0", None -> None, anything else -> str(value).
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return "1" if value else "0"
    return str(value)


def is_truthy(value: Optional[str]) -> bool:
    """Interpret a stored setting as a boolean flag."""
    if value is None:
        return False
    return value.strip().lower() in TRUTHY_VALUES


class EstablishmentConfig(BaseModel):
    """Typed view over the settings of one establishment."""

    store_name: Optional[str] = None
    store_logo: Optional[str] = None
    primary_color: str = DEFAULT_PRIMARY_COLOR
    theme: Optional[str] = None
    pix_key: Optional[str] = None
    whatsapp_kitchen: Optional[str] = None
    whatsapp_cashier: Optional[str] = None
    is_open: bool = False
    enable_reservations: bool = False
    evolution_enabled: bool = False
    evolution_api_url: Optional[str] = None
    evolution_api_key: Optional[str] = None
    evolution_instance: Optional[str] = None
    enable_ai: bool = False
    ai_provider: Optional[str] = None
    ai_api_key: Optional[str] = None
    extras: dict[str, Optional[str]] = Field(default_factory=dict)

    @classmethod
    def from_settings(cls, raw: Mapping[str, Optional[str]]) -> "EstablishmentConfig":
        """Build the typed view from the raw (key -> text) map."""
        known = set(cls.model_fields) - {"extras"}
        data: dict[str, Any] = {"extras": {}}
        for key, value in raw.items():
            if key not in known:
                data["extras"][key] = value
                continue
            if value is None:
                continue
            if cls.model_fields[key].annotation is bool:
                data[key] = is_truthy(value)
            else:
                data[key] = value
        return cls(**data)

    @property
    def automation_ready(self) -> bool:
        """Order notifications can be dispatched."""
        return self.evolution_enabled and bool(self.evolution_api_url)


class SettingsService:
    """Read and write the settings store of an establishment."""

    def __init__(self, db: Session):
        self._db = db
        self._repo = SettingRepository(db)

    def get_all(self, establishment_id: int) -> dict[str, Optional[str]]:
        """Full raw settings map (admin view)."""
        return self._repo.get_map(establishment_id)

    def get_public(self, establishment_id: int) -> dict[str, Optional[str]]:
        """Settings safe to expose to customers; integration secrets removed."""
        return {
            key: value
            for key, value in self._repo.get_map(establishment_id).items()
            if key not in SettingKeys.SECRET
        }

    def get_config(self, establishment_id: int) -> EstablishmentConfig:
        return EstablishmentConfig.from_settings(self._repo.get_map(establishment_id))

    def upsert_many(self, establishment_id: int, values: Mapping[str, Any]) -> None:
        """
        Upsert each key, all in one transaction. Keys not present are left untouched.

        Raises:
            DatabaseError: If the transaction fails; no key is written.
        """
        for key, value in values.items():
            self._repo.upsert(establishment_id, key, coerce_setting_value(value))
        try:
            safe_commit(self._db)
        except Exception as e:
            logger.error("Failed to save settings", establishment_id=establishment_id, error=str(e))
            raise DatabaseError("salvar configurações")

        logger.info("Settings saved", establishment_id=establishment_id, keys=sorted(values))

    def migrate_legacy_keys(self, establishment_id: int) -> int:
        """
        Rename legacy keys to their current names.

        When the current key already exists the legacy row is dropped and the
        current value wins. Does not commit. Returns the number of legacy rows handled.
        """
        current = self._repo.get_map(establishment_id)
        handled = 0
        for legacy_key, new_key in LEGACY_SETTING_KEYS.items():
            if legacy_key not in current:
                continue
            if new_key not in current:
                self._repo.upsert(establishment_id, new_key, current[legacy_key])
            self._repo.delete_key(establishment_id, legacy_key)
            handled += 1
        return handled


def migrate_all_legacy_settings(db: Session) -> int:
    """
    Run the legacy key migration for every establishment that needs it.

    Idempotent: a second run finds no legacy keys. Returns the number of rows migrated.
    """
    service = SettingsService(db)
    repo = SettingRepository(db)
    total = 0
    for establishment_id in repo.establishments_with_keys(list(LEGACY_SETTING_KEYS)):
        total += service.migrate_legacy_keys(establishment_id)
    safe_commit(db)
    if total:
        logger.info("Legacy settings migrated", rows=total)
    return total
