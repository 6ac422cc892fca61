"""Catalog store contract tests, run against both backends."""

import json
import re

import pytest
from pydantic import ValidationError as PydanticValidationError

from manna_art.catalog.schemas import ArtworkCreate
from manna_art.catalog.sql_store import SqlCatalogStore
from manna_art.catalog.store import JsonCatalogStore, create_catalog_store
from manna_art.config import Settings
from manna_art.db.base import create_db_engine, get_session_local, init_database
from manna_art.errors import PersistenceError

from fakes import WALLET, artwork_fields, seed_parent


@pytest.fixture(params=["json", "sql"])
def store(request, tmp_path):
    if request.param == "json":
        yield JsonCatalogStore(tmp_path / "artworks.json")
    else:
        engine = create_db_engine("sqlite:///:memory:")
        init_database(engine)
        sql_store = SqlCatalogStore(get_session_local(engine), engine)
        yield sql_store
        sql_store.close()


def insert(store, **overrides):
    return store.insert(ArtworkCreate(**artwork_fields(**overrides)))


class TestInsert:
    def test_assigns_id_timestamp_and_counters(self, store):
        artwork = insert(store)

        assert re.fullmatch(r"artwork_\d+_[a-z0-9]{9}", artwork.id)
        assert artwork.created_at.tzinfo is not None
        assert artwork.likes == 0
        assert artwork.views == 0

    def test_ids_are_unique(self, store):
        ids = {insert(store).id for _ in range(20)}
        assert len(ids) == 20

    def test_round_trips_on_chain_fields(self, store):
        parent = seed_parent(store, ip_id="0xP", license_terms_ids=["7", "8"])

        stored = store.get(parent.id)
        assert stored.ip_id == "0xP"
        assert stored.nft_token_id == "1"
        assert stored.license_terms_ids == ["7", "8"]
        assert stored.is_remix is False

    def test_remix_linkage(self, store):
        remix = insert(
            store,
            ip_id="0xD",
            nft_token_id="2",
            license_terms_ids=["7"],
            parent_ip_id="0xP",
            is_remix=True,
        )
        assert store.get(remix.id).parent_ip_id == "0xP"
        assert store.get(remix.id).is_remix is True


class TestInvariants:
    def test_is_remix_requires_parent(self):
        with pytest.raises(PydanticValidationError):
            ArtworkCreate(**artwork_fields(is_remix=True))

    def test_parent_requires_is_remix(self):
        with pytest.raises(PydanticValidationError):
            ArtworkCreate(**artwork_fields(parent_ip_id="0xP"))

    def test_ip_id_requires_license_terms(self):
        with pytest.raises(PydanticValidationError):
            ArtworkCreate(**artwork_fields(ip_id="0xP", nft_token_id="1", license_terms_ids=[]))

    def test_token_without_ip_id(self):
        with pytest.raises(PydanticValidationError):
            ArtworkCreate(**artwork_fields(nft_token_id="1"))


class TestLookups:
    def test_get_unknown(self, store):
        assert store.get("artwork_0_missing00") is None

    def test_get_by_ip_id(self, store):
        parent = seed_parent(store, ip_id="0xP")
        insert(store)

        assert store.get_by_ip_id("0xP").id == parent.id
        assert store.get_by_ip_id("0xUnknown") is None

    def test_list_by_creator_is_case_insensitive(self, store):
        mine = insert(store)
        insert(store, creator_wallet="0xSomeoneElse")

        result = store.list_by_creator(WALLET.upper())
        assert [a.id for a in result] == [mine.id]

    def test_list_all(self, store):
        for _ in range(3):
            insert(store)
        assert len(store.list_all()) == 3


class TestListings:
    def test_recent_respects_limit_and_order(self, store):
        for i in range(5):
            insert(store, title=f"Obra {i}")

        recent = store.list_recent(3)

        assert len(recent) == 3
        timestamps = [a.created_at for a in recent]
        assert timestamps == sorted(timestamps, reverse=True)

    def test_popular_orders_by_score(self, store):
        a = insert(store, title="a")
        b = insert(store, title="b")
        c = insert(store, title="c")

        # a: 15 views -> 15; b: 2 likes -> 20; c: 1 like + 1 view -> 11
        for _ in range(15):
            store.increment_views(a.id)
        store.increment_like(b.id)
        store.increment_like(b.id)
        store.increment_like(c.id)
        store.increment_views(c.id)

        popular = store.list_popular(10)
        assert [x.id for x in popular] == [b.id, a.id, c.id]
        scores = [x.views + x.likes * 10 for x in popular]
        assert scores == sorted(scores, reverse=True)

    def test_popular_is_deterministic(self, store):
        for i in range(6):
            insert(store, title=f"Obra {i}")

        first = [a.id for a in store.list_popular(6)]
        second = [a.id for a in store.list_popular(6)]
        assert first == second

    def test_popular_limit(self, store):
        for _ in range(4):
            insert(store)
        assert len(store.list_popular(2)) == 2


class TestCounters:
    def test_increment_views_n_times(self, store):
        artwork = insert(store)

        for _ in range(7):
            store.increment_views(artwork.id)

        assert store.get(artwork.id).views == 7

    def test_increment_like_returns_new_count(self, store):
        artwork = insert(store)

        assert store.increment_like(artwork.id) == 1
        assert store.increment_like(artwork.id) == 2
        assert store.get(artwork.id).likes == 2

    def test_increment_views_returns_new_count(self, store):
        artwork = insert(store)

        assert store.increment_views(artwork.id) == 1
        assert store.increment_views(artwork.id) == 2

    def test_unknown_ids(self, store):
        assert store.increment_like("artwork_0_missing00") is None
        assert store.increment_views("artwork_0_missing00") is None

    def test_counters_do_not_touch_other_records(self, store):
        a = insert(store)
        b = insert(store)

        store.increment_views(a.id)
        store.increment_like(a.id)

        assert store.get(b.id).views == 0
        assert store.get(b.id).likes == 0


class TestJsonCatalogFile:
    def test_file_holds_camel_case_records(self, tmp_path):
        path = tmp_path / "data" / "artworks.json"
        store = JsonCatalogStore(path)
        seed_parent(store)

        records = json.loads(path.read_text(encoding="utf-8"))
        assert isinstance(records, list)
        assert records[0]["ipId"] == "0xP"
        assert records[0]["licenseTermsIds"] == ["7"]
        assert records[0]["creatorWallet"] == WALLET
        assert "createdAt" in records[0]

    def test_reopened_store_sees_records(self, tmp_path):
        path = tmp_path / "artworks.json"
        artwork = insert(JsonCatalogStore(path))

        reopened = JsonCatalogStore(path)
        assert reopened.get(artwork.id).title == artwork.title

    def test_missing_file_is_empty(self, tmp_path):
        assert JsonCatalogStore(tmp_path / "nope.json").list_all() == []

    def test_unreadable_file_hides_cause(self, tmp_path):
        store = JsonCatalogStore(tmp_path)

        with pytest.raises(PersistenceError) as exc_info:
            store.list_all()

        assert exc_info.value.message == "No se pudo leer el catálogo"
        assert isinstance(exc_info.value.__cause__, OSError)

    def test_unwritable_directory_hides_cause(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")
        store = JsonCatalogStore(blocker / "artworks.json")

        with pytest.raises(PersistenceError) as exc_info:
            insert(store)

        assert exc_info.value.message == "No se pudo guardar el catálogo"
        assert str(blocker) not in exc_info.value.message


class TestSqlCatalogErrors:
    def test_insert_failure_hides_cause(self):
        engine = create_db_engine("sqlite:///:memory:")
        store = SqlCatalogStore(get_session_local(engine), engine)

        try:
            with pytest.raises(PersistenceError) as exc_info:
                insert(store)
        finally:
            store.close()

        assert exc_info.value.message == "No se pudo guardar la obra"
        assert "no such table" not in exc_info.value.message


class TestFactory:
    def test_json_backend(self, tmp_path):
        settings = Settings(_env_file=None, catalog_backend="json", catalog_path=str(tmp_path / "a.json"))
        assert isinstance(create_catalog_store(settings), JsonCatalogStore)

    def test_sql_backend(self):
        settings = Settings(_env_file=None, catalog_backend="sql", database_url="sqlite:///:memory:")
        store = create_catalog_store(settings)
        try:
            assert isinstance(store, SqlCatalogStore)
            assert store.list_all() == []
        finally:
            store.close()

    def test_unknown_backend(self):
        with pytest.raises(ValueError, match="Unsupported catalog backend"):
            create_catalog_store(Settings(_env_file=None, catalog_backend="mongo"))
