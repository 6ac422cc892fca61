"""API-level tests for the /artworks catalog endpoints."""

from fakes import WALLET, artwork_fields, seed_parent
from manna_art.catalog.schemas import ArtworkCreate


def add(catalog, **overrides):
    return catalog.insert(ArtworkCreate(**artwork_fields(**overrides)))


class TestListArtworks:
    def test_empty(self, client):
        response = client.get("/artworks")

        assert response.status_code == 200
        assert response.json() == {"artworks": []}

    def test_recent_is_default(self, client, catalog):
        for i in range(15):
            add(catalog, title=f"Obra {i}")

        response = client.get("/artworks")

        artworks = response.json()["artworks"]
        assert len(artworks) == 12
        created = [a["createdAt"] for a in artworks]
        assert created == sorted(created, reverse=True)

    def test_records_are_camel_case(self, client, catalog):
        seed_parent(catalog, ip_id="0xP")

        artwork = client.get("/artworks").json()["artworks"][0]

        assert artwork["ipId"] == "0xP"
        assert artwork["licenseTermsIds"] == ["7"]
        assert artwork["isRemix"] is False
        assert artwork["likes"] == 0
        assert artwork["views"] == 0

    def test_popular(self, client, catalog):
        quiet = add(catalog, title="quiet")
        loved = add(catalog, title="loved")
        catalog.increment_like(loved.id)

        response = client.get("/artworks", params={"filter": "popular", "limit": 5})

        ids = [a["id"] for a in response.json()["artworks"]]
        assert ids == [loved.id, quiet.id]

    def test_all_ignores_limit(self, client, catalog):
        for _ in range(3):
            add(catalog)

        response = client.get("/artworks", params={"filter": "all", "limit": 1})

        assert len(response.json()["artworks"]) == 3

    def test_by_creator(self, client, catalog):
        mine = add(catalog)
        add(catalog, creator_wallet="0xOther")

        response = client.get("/artworks", params={"creator": WALLET.lower()})

        assert [a["id"] for a in response.json()["artworks"]] == [mine.id]

    def test_invalid_filter(self, client):
        response = client.get("/artworks", params={"filter": "oldest"})

        assert response.status_code == 400
        assert "error" in response.json()

    def test_invalid_limit(self, client):
        response = client.get("/artworks", params={"limit": 0})

        assert response.status_code == 400


class TestSingleArtwork:
    def test_get(self, client, catalog):
        artwork = add(catalog)

        response = client.get(f"/artworks/{artwork.id}")

        assert response.status_code == 200
        assert response.json()["artwork"]["id"] == artwork.id

    def test_get_unknown(self, client):
        response = client.get("/artworks/artwork_0_missing00")

        assert response.status_code == 404

    def test_view(self, client, catalog):
        artwork = add(catalog)

        client.post(f"/artworks/{artwork.id}/view")
        response = client.post(f"/artworks/{artwork.id}/view")

        assert response.status_code == 200
        assert response.json() == {"views": 2}

    def test_like(self, client, catalog):
        artwork = add(catalog)

        response = client.post(f"/artworks/{artwork.id}/like")

        assert response.json() == {"likes": 1}
        assert catalog.get(artwork.id).likes == 1

    def test_engagement_unknown(self, client):
        assert client.post("/artworks/nope/view").status_code == 404
        assert client.post("/artworks/nope/like").status_code == 404


class TestCatalogErrors:
    def test_unexpected_error_is_500(self, client, catalog, monkeypatch):
        def broken():
            raise RuntimeError("disk on fire")

        monkeypatch.setattr(catalog, "list_all", broken)

        response = client.get("/artworks", params={"filter": "all"})

        assert response.status_code == 500
        assert response.json() == {"error": "disk on fire"}

    def test_persistence_error_body_is_generic(self, client, catalog, tmp_path):
        catalog.path = tmp_path

        response = client.get("/artworks", params={"filter": "all"})

        assert response.status_code == 500
        assert response.json() == {
            "error": "No se pudo leer el catálogo",
            "code": "PERSISTENCE_ERROR",
        }
