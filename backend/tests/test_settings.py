"""
Tests for the settings store, its typed view and the legacy key migration.
"""

from rest_api.models import Setting
from rest_api.services.domain import (
    EstablishmentConfig,
    SettingsService,
    migrate_all_legacy_settings,
)
from rest_api.services.domain.settings_service import coerce_setting_value, is_truthy


class TestSettingsEndpoints:
    def test_upsert_and_read_back(self, client, admin_headers):
        response = client.post(
            "/api/e/settings",
            json={"pix_key": "joe@pix", "is_open": False, "enable_reservations": True, "theme": None},
            headers=admin_headers,
        )
        assert response.status_code == 200
        assert response.json() == {"success": True}

        stored = client.get("/api/e/settings", headers=admin_headers).json()
        assert stored["pix_key"] == "joe@pix"
        assert stored["is_open"] == "0"
        assert stored["enable_reservations"] == "1"
        assert stored["theme"] is None
        # Registration defaults are untouched
        assert stored["store_name"] == "Joe's Burger"

    def test_upsert_merges_with_existing_keys(self, client, admin_headers):
        client.post("/api/e/settings", json={"a": 1, "b": 2}, headers=admin_headers)
        client.post("/api/e/settings", json={"a": 3}, headers=admin_headers)

        stored = client.get("/api/e/settings", headers=admin_headers).json()
        assert stored["a"] == "3"
        assert stored["b"] == "2"

    def test_arbitrary_keys_are_kept(self, client, admin_headers):
        client.post("/api/e/settings", json={"banner_text": "Promo de terça"}, headers=admin_headers)
        assert client.get("/api/e/settings", headers=admin_headers).json()["banner_text"] == "Promo de terça"

    def test_numbers_are_stored_as_text(self, client, admin_headers):
        client.post("/api/e/settings", json={"min_order": 25}, headers=admin_headers)
        assert client.get("/api/e/settings", headers=admin_headers).json()["min_order"] == "25"

    def test_public_subset_hides_secrets(self, client, admin_headers, customer_headers):
        client.post(
            "/api/e/settings",
            json={
                "evolution_api_key": "secret",
                "evolution_api_url": "http://gw",
                "evolution_instance": "joe",
                "ai_api_key": "sk-123",
                "pix_key": "joe@pix",
            },
            headers=admin_headers,
        )

        public = client.get("/api/e/settings/public", headers=customer_headers).json()
        assert public["pix_key"] == "joe@pix"
        for secret in ("evolution_api_key", "evolution_api_url", "evolution_instance", "ai_api_key"):
            assert secret not in public

    def test_full_settings_require_admin(self, client, customer_headers):
        assert client.get("/api/e/settings", headers=customer_headers).status_code == 401
        assert client.post("/api/e/settings", json={"is_open": True}, headers=customer_headers).status_code == 401

    def test_settings_are_per_tenant(self, client, admin_headers, make_establishment, login):
        client.post("/api/e/settings", json={"pix_key": "joe@pix"}, headers=admin_headers)
        make_establishment("other-place")

        other = client.get("/api/e/settings", headers=login("other-place")).json()
        assert "pix_key" not in other


class TestCoercion:
    def test_coerce_values(self):
        assert coerce_setting_value(True) == "1"
        assert coerce_setting_value(False) == "0"
        assert coerce_setting_value(None) is None
        assert coerce_setting_value(3.5) == "3.5"
        assert coerce_setting_value("abc") == "abc"

    def test_truthy_strings(self):
        for value in ("1", "true", "TRUE", "yes", "on", " On "):
            assert is_truthy(value)
        for value in ("0", "false", "", "no", None, "2"):
            assert not is_truthy(value)


class TestEstablishmentConfig:
    def test_typed_fields_and_extras(self):
        config = EstablishmentConfig.from_settings(
            {
                "store_name": "Joe's",
                "is_open": "1",
                "evolution_enabled": "true",
                "evolution_api_url": "http://gw",
                "enable_ai": "0",
                "banner_text": "Promo",
                "theme": None,
            }
        )

        assert config.store_name == "Joe's"
        assert config.is_open is True
        assert config.evolution_enabled is True
        assert config.enable_ai is False
        assert config.theme is None
        assert config.primary_color == "#f97316"
        assert config.extras == {"banner_text": "Promo"}
        assert config.automation_ready

    def test_automation_needs_url(self):
        config = EstablishmentConfig.from_settings({"evolution_enabled": "1"})
        assert not config.automation_ready


class TestLegacyMigration:
    def _put(self, db_session, establishment_id, **values):
        for key, value in values.items():
            db_session.add(Setting(establishment_id=establishment_id, key=key, value=value))
        db_session.commit()

    def test_renames_legacy_keys(self, db_session, tenant):
        self._put(db_session, tenant.id, automation_enabled="1", kitchen_whatsapp="5511999990000")

        migrated = migrate_all_legacy_settings(db_session)

        assert migrated == 2
        stored = SettingsService(db_session).get_all(tenant.id)
        assert stored["evolution_enabled"] == "1"
        assert stored["whatsapp_kitchen"] == "5511999990000"
        assert "automation_enabled" not in stored
        assert "kitchen_whatsapp" not in stored

    def test_current_key_wins(self, db_session, tenant):
        # primary_color was written at registration
        self._put(db_session, tenant.id, brand_color="#000000")

        migrate_all_legacy_settings(db_session)

        stored = SettingsService(db_session).get_all(tenant.id)
        assert stored["primary_color"] == "#f97316"
        assert "brand_color" not in stored

    def test_idempotent(self, db_session, tenant):
        self._put(db_session, tenant.id, logo_url="http://img/logo.png")

        assert migrate_all_legacy_settings(db_session) == 1
        assert migrate_all_legacy_settings(db_session) == 0
        assert SettingsService(db_session).get_all(tenant.id)["store_logo"] == "http://img/logo.png"
