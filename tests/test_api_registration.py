"""API-level tests for /register-ip and /remix."""

from fakes import WALLET, seed_legacy, seed_parent
from manna_art.billing.plans import PlanTier


def registration_form(**overrides) -> dict:
    form = {
        "email": "a@x.com",
        "title": "Amanecer",
        "description": "Óleo digital",
        "ipType": "image",
        "walletAddress": WALLET,
    }
    form.update(overrides)
    return form


def image_file(content: bytes = b"\x89PNG fake image") -> dict:
    return {"file": ("amanecer.png", content, "image/png")}


class TestRegisterIp:
    def test_success(self, client, billing, catalog):
        billing.subscribe("a@x.com", PlanTier.PROFESIONAL, used=3)

        response = client.post(
            "/register-ip",
            data=registration_form(licenseFee="1.5", commercialRevShare="20"),
            files=image_file(),
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        data = body["data"]
        assert data["storyIpId"] == "0xIP1"
        assert data["storyTokenId"] == "1"
        assert data["storyTxHash"] == "0xTX1"
        assert data["registrationsUsed"] == 4
        assert data["registrationsLimit"] == 20
        assert data["fileUrl"] == "https://arweave.test/tx1"
        assert data["metadataUrl"] == "https://arweave.test/tx2"
        assert catalog.get(data["artworkId"]) is not None

    def test_degraded_registration_is_200(self, client, billing, registry, catalog):
        billing.subscribe("a@x.com", PlanTier.CREADOR)
        registry.fail = True

        response = client.post("/register-ip", data=registration_form(), files=image_file())

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["storyIpId"] is None
        assert "no disponible" in data["message"]
        assert catalog.get(data["artworkId"]).ip_id is None

    def test_missing_fields(self, client, artifacts):
        response = client.post(
            "/register-ip", data=registration_form(title=""), files=image_file()
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Todos los campos son requeridos"
        assert artifacts.uploads == []

    def test_missing_file(self, client):
        response = client.post("/register-ip", data=registration_form())

        assert response.status_code == 400
        assert "error" in response.json()

    def test_no_subscription(self, client, artifacts):
        response = client.post("/register-ip", data=registration_form(), files=image_file())

        assert response.status_code == 403
        assert response.json()["error"] == "No tienes una suscripción activa"
        assert artifacts.uploads == []

    def test_limit_reached(self, client, billing, artifacts, registry):
        billing.subscribe("a@x.com", PlanTier.CREADOR, used=4)

        response = client.post("/register-ip", data=registration_form(), files=image_file())

        assert response.status_code == 403
        assert "límite" in response.json()["error"]
        assert artifacts.uploads == []
        assert registry.calls == 0

    def test_storage_failure_is_500(self, client, billing, artifacts):
        billing.subscribe("a@x.com", PlanTier.CREADOR)
        artifacts.fail_at = 1

        response = client.post("/register-ip", data=registration_form(), files=image_file())

        assert response.status_code == 500
        assert "Arweave" in response.json()["error"]

    def test_invalid_fee(self, client, billing, artifacts):
        billing.subscribe("a@x.com", PlanTier.CREADOR)

        response = client.post(
            "/register-ip", data=registration_form(licenseFee="gratis"), files=image_file()
        )

        assert response.status_code == 400
        assert artifacts.uploads == []

    def test_huge_numbers_are_rejected(self, client, billing, artifacts):
        billing.subscribe("a@x.com", PlanTier.CREADOR)

        fee = client.post(
            "/register-ip", data=registration_form(licenseFee="1e999999"), files=image_file()
        )
        share = client.post(
            "/register-ip",
            data=registration_form(commercialRevShare="1e5000000"),
            files=image_file(),
        )

        assert fee.status_code == 400
        assert share.status_code == 400
        assert artifacts.uploads == []


class TestRemix:
    def remix_form(self, **overrides) -> dict:
        form = registration_form(parentIpId="0xP", title="Amanecer (remix)")
        form.pop("email")
        form.update(overrides)
        return form

    def test_success(self, client, catalog, registry):
        seed_parent(catalog, ip_id="0xP", license_terms_ids=["7"])

        response = client.post("/remix", data=self.remix_form(), files=image_file())

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["ipId"] == "0xD1"
        assert data["tokenId"] == "2"
        assert data["txHash"] == "0xTX2"
        assert registry.derivatives[0]["parent_license_terms_ids"] == ["7"]

        record = catalog.get(data["artworkId"])
        assert record.is_remix is True
        assert record.parent_ip_id == "0xP"

    def test_parent_not_found(self, client, artifacts, registry):
        response = client.post("/remix", data=self.remix_form(), files=image_file())

        assert response.status_code == 404
        assert "0xP" in response.json()["error"]
        assert artifacts.uploads == []
        assert registry.calls == 0

    def test_parent_not_remixable(self, client, catalog, artifacts, registry):
        seed_legacy(catalog, ip_id="0xP", nft_token_id="1", license_terms_ids=[])

        response = client.post("/remix", data=self.remix_form(), files=image_file())

        assert response.status_code == 400
        assert "license terms" in response.json()["error"]
        assert artifacts.uploads == []
        assert registry.calls == 0

    def test_missing_parent(self, client):
        response = client.post(
            "/remix", data=self.remix_form(parentIpId=""), files=image_file()
        )

        assert response.status_code == 400

    def test_derivative_failure_is_500(self, client, catalog, registry):
        seed_parent(catalog, ip_id="0xP")
        registry.fail = True

        response = client.post("/remix", data=self.remix_form(), files=image_file())

        assert response.status_code == 500
        assert response.json()["code"] == "DERIVATIVE_REGISTRATION_FAILED"
        assert len(catalog.list_all()) == 1
