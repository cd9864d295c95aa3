"""Tests for the DataSource model and relation registry."""

import logging

import pytest

from docbridge.core.datasource import DataSource
from docbridge.core.errors import DuplicateKeyError, SchemaError
from docbridge.core.models import FieldSpec, RelationKind, SchemaDescriptor
from docbridge.core.repository import Model
from docbridge.tests.fakes import FakeDocumentStore


@pytest.fixture
def store() -> FakeDocumentStore:
    return FakeDocumentStore()


@pytest.fixture
def data_source(store: FakeDocumentStore) -> DataSource:
    return DataSource(store)


class TestDefine:
    """Tests for model registration."""

    def test_define_returns_model(self, data_source: DataSource) -> None:
        model = data_source.define(SchemaDescriptor(name="Post"))

        assert isinstance(model, Model)
        assert model.collection == "Post"
        assert data_source.model("Post") is model
        assert list(data_source.models) == ["Post"]

    def test_custom_collection(self, data_source: DataSource) -> None:
        model = data_source.define(SchemaDescriptor(name="Post", collection="posts"))

        assert model.collection == "posts"

    def test_duplicate_name_rejected(self, data_source: DataSource) -> None:
        data_source.define(SchemaDescriptor(name="Post"))

        with pytest.raises(SchemaError, match="already defined"):
            data_source.define(SchemaDescriptor(name="Post"))

    def test_unknown_model(self, data_source: DataSource) -> None:
        with pytest.raises(SchemaError, match="Unknown model: Ghost"):
            data_source.model("Ghost")

    def test_model_from_other_data_source_rejected(self, data_source: DataSource) -> None:
        stranger = DataSource(FakeDocumentStore()).define(SchemaDescriptor(name="User"))
        data_source.define(SchemaDescriptor(name="Post"))

        with pytest.raises(SchemaError, match="not defined on this data source"):
            data_source.has_many(stranger, "Post")

    def test_schema_validation(self) -> None:
        with pytest.raises(ValueError, match="duplicate fields"):
            SchemaDescriptor(name="Post", fields=(FieldSpec("a"), FieldSpec("a")))
        with pytest.raises(ValueError, match="identifier is not a declared field"):
            FieldSpec("id")


class TestRelations:
    """Tests for relation declaration."""

    def test_has_many_defaults(self, data_source: DataSource) -> None:
        data_source.define(SchemaDescriptor(name="User"))
        post = data_source.define(SchemaDescriptor(name="Post"))

        relation = data_source.has_many("User", "Post")

        assert relation.descriptor.name == "posts"
        assert relation.descriptor.kind is RelationKind.HAS_MANY
        assert relation.foreign_key == "userId"
        assert "userId" in post.reference_fields
        assert data_source.relation("User", "posts") is relation

    def test_belongs_to_defaults(self, data_source: DataSource) -> None:
        data_source.define(SchemaDescriptor(name="User"))
        data_source.define(SchemaDescriptor(name="Post"))

        relation = data_source.belongs_to("Post", "User")

        assert relation.descriptor.name == "user"
        assert relation.foreign_key == "userId"
        assert data_source.relation("Post", "user") is relation

    def test_explicit_name_and_foreign_key(self, data_source: DataSource) -> None:
        data_source.define(SchemaDescriptor(name="User"))
        post = data_source.define(SchemaDescriptor(name="Post"))

        relation = data_source.has_many("User", "Post", name="articles", foreign_key="authorId")

        assert relation.descriptor.name == "articles"
        assert post.reference_fields == frozenset({"authorId"})

    def test_duplicate_relation_rejected(self, data_source: DataSource) -> None:
        data_source.define(SchemaDescriptor(name="User"))
        data_source.define(SchemaDescriptor(name="Post"))
        data_source.has_many("User", "Post")

        with pytest.raises(SchemaError, match="User.posts is already defined"):
            data_source.has_many("User", "Post")

    def test_unknown_relation(self, data_source: DataSource) -> None:
        data_source.define(SchemaDescriptor(name="User"))

        with pytest.raises(SchemaError, match="Unknown relation User.posts"):
            data_source.relation("User", "posts")


class TestLifecycle:
    """Tests for index creation and connection lifecycle."""

    async def test_ensure_indexes(
        self, data_source: DataSource, store: FakeDocumentStore, caplog: pytest.LogCaptureFixture
    ) -> None:
        data_source.define(
            SchemaDescriptor(
                name="Post",
                fields=(FieldSpec("title", str, index=True), FieldSpec("content", str)),
            )
        )
        data_source.define(
            SchemaDescriptor(name="User", fields=(FieldSpec("email", str, unique=True),))
        )

        with caplog.at_level(logging.INFO, logger="docbridge.core.datasource"):
            created = await data_source.ensure_indexes()

        assert created == ["title_1", "email_1"]
        assert store.indexes == {"Post": {"title": False}, "User": {"email": True}}
        assert "Ensured 2 index(es) across 2 model(s)" in caplog.text

    async def test_unique_index_enforced(self, data_source: DataSource) -> None:
        user = data_source.define(
            SchemaDescriptor(name="User", fields=(FieldSpec("email", str, unique=True),))
        )
        await data_source.ensure_indexes()
        await user.create({"email": "a@example.com"})

        with pytest.raises(DuplicateKeyError):
            await user.create({"email": "a@example.com"})

    async def test_ping_and_close(self, data_source: DataSource, store: FakeDocumentStore) -> None:
        await data_source.ping()
        await data_source.close()

        assert store.ping_count == 1
        assert store.closed is True
