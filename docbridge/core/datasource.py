"""Data source: the registry of record types and relations over one store.

A DataSource owns a single DocumentStorePort (one shared connection) and
hands out Model instances for each defined schema.
"""

import logging

from .errors import SchemaError
from .models import RelationDescriptor, RelationKind, SchemaDescriptor
from .ports import DocumentStorePort
from .relations import BelongsTo, HasMany
from .repository import Model

logger = logging.getLogger(__name__)


def _lower_first(name: str) -> str:
    return name[:1].lower() + name[1:]


class DataSource:
    """Registry of models and relations sharing one document store."""

    def __init__(self, store: DocumentStorePort):
        self.store = store
        self._models: dict[str, Model] = {}
        self._relations: dict[tuple[str, str], HasMany | BelongsTo] = {}

    @property
    def models(self) -> dict[str, Model]:
        return dict(self._models)

    def define(self, schema: SchemaDescriptor) -> Model:
        """Register a record type and return its Model.

        Raises:
            SchemaError: If a model with the same name is already defined.
        """
        if schema.name in self._models:
            raise SchemaError(f"Model {schema.name} is already defined")
        model = Model(schema, self.store)
        self._models[schema.name] = model
        logger.debug(
            f"Defined model {schema.name}",
            extra={"model": schema.name, "collection": schema.collection},
        )
        return model

    def model(self, name: str) -> Model:
        """Return the Model registered under `name`.

        Raises:
            SchemaError: If no such model is defined.
        """
        try:
            return self._models[name]
        except KeyError:
            raise SchemaError(f"Unknown model: {name}") from None

    def has_many(
        self,
        parent: str | Model,
        child: str | Model,
        name: str | None = None,
        foreign_key: str | None = None,
    ) -> HasMany:
        """Declare that `parent` owns many `child` records.

        Args:
            parent: Parent model or model name.
            child: Child model or model name.
            name: Relation name (default: child name, lower-cased first
                letter, plus "s", e.g. "posts").
            foreign_key: Field on the child holding the parent id (default:
                parent name with lower-cased first letter plus "Id", e.g.
                "userId").
        """
        parent_model = self._resolve(parent)
        child_model = self._resolve(child)
        descriptor = RelationDescriptor(
            name=name or f"{_lower_first(child_model.name)}s",
            kind=RelationKind.HAS_MANY,
            source=parent_model.name,
            target=child_model.name,
            foreign_key=foreign_key or f"{_lower_first(parent_model.name)}Id",
        )
        relation = HasMany(descriptor, parent_model, child_model)
        self._register(descriptor, relation)
        child_model.add_reference_field(descriptor.foreign_key)
        return relation

    def belongs_to(
        self,
        child: str | Model,
        parent: str | Model,
        name: str | None = None,
        foreign_key: str | None = None,
    ) -> BelongsTo:
        """Declare that each `child` record references one `parent` record.

        Defaults mirror has_many(): the relation is named after the parent
        ("user") and the foreign key is "<parent>Id" ("userId").
        """
        child_model = self._resolve(child)
        parent_model = self._resolve(parent)
        descriptor = RelationDescriptor(
            name=name or _lower_first(parent_model.name),
            kind=RelationKind.BELONGS_TO,
            source=child_model.name,
            target=parent_model.name,
            foreign_key=foreign_key or f"{_lower_first(parent_model.name)}Id",
        )
        relation = BelongsTo(descriptor, child_model, parent_model)
        self._register(descriptor, relation)
        child_model.add_reference_field(descriptor.foreign_key)
        return relation

    def relation(self, model: str | Model, name: str) -> HasMany | BelongsTo:
        """Return the relation `name` declared on `model`.

        Raises:
            SchemaError: If no such relation is declared.
        """
        key = (self._resolve(model).name, name)
        try:
            return self._relations[key]
        except KeyError:
            raise SchemaError(f"Unknown relation {key[0]}.{name}") from None

    async def ensure_indexes(self) -> list[str]:
        """Create indexes for every field declared with index or unique.

        Returns:
            Names of the created (or already existing) indexes.
        """
        created: list[str] = []
        for model in self._models.values():
            for spec in model.schema.indexed_fields:
                index_name = await self.store.create_index(
                    model.collection, spec.name, unique=spec.unique
                )
                created.append(index_name)
        logger.info(f"Ensured {len(created)} index(es) across {len(self._models)} model(s)")
        return created

    async def ping(self) -> None:
        await self.store.ping()

    async def close(self) -> None:
        await self.store.close()

    def _resolve(self, model: str | Model) -> Model:
        if isinstance(model, Model):
            if self._models.get(model.name) is not model:
                raise SchemaError(f"Model {model.name} is not defined on this data source")
            return model
        return self.model(model)

    def _register(self, descriptor: RelationDescriptor, relation: HasMany | BelongsTo) -> None:
        key = (descriptor.source, descriptor.name)
        if key in self._relations:
            raise SchemaError(f"Relation {descriptor.source}.{descriptor.name} is already defined")
        self._relations[key] = relation
        logger.debug(
            f"Declared {descriptor.kind.value} relation "
            f"{descriptor.source}.{descriptor.name} -> {descriptor.target}"
        )
