"""Generic SQLAlchemy entity store.

Maps a domain dataclass onto one ORM model through a shared list of field
names. Stores flush but never commit: the unit of work owns the
transaction.
"""

from typing import Any, Dict, Iterable, List, Optional, Sequence, Type

from sqlalchemy import inspect, update

from hospital.core.exceptions import NotFound
from hospital.domain.interfaces import IEntityStore


class SqlAlchemyEntityStore(IEntityStore):
    """Repository for one entity kind following the IEntityStore contract."""

    model: Any = None
    entity: Type = None
    entity_name: str = ""
    fields: Sequence[str] = ()
    read_only_fields: Sequence[str] = ()

    def __init__(self, db_session) -> None:
        self.db = db_session

    @property
    def key_name(self) -> str:
        return inspect(self.model).primary_key[0].key

    def _key_of(self, entity) -> Any:
        return getattr(entity, self.key_name, None)

    def load(self, key: Any):
        row = self.db.get(self.model, key)
        if row is None:
            raise NotFound(self.entity_name or self.model.__name__, key)
        return self._to_domain(row)

    def save_all(self, entities: Iterable) -> List:
        rows = []
        for entity in entities:
            key = self._key_of(entity)
            row = self.db.get(self.model, key) if key is not None else None
            if row is None:
                row = self.model()
                if key is not None:
                    setattr(row, self.key_name, key)
                self.db.add(row)
            self._apply(row, entity)
            rows.append(row)
        self.db.flush()
        return [self._to_domain(row) for row in rows]

    def update_where(self, predicate: Dict[str, Any], patch: Dict[str, Any]) -> int:
        if not predicate:
            raise ValueError("update_where requires a predicate")
        stmt = (
            update(self.model)
            .where(*[getattr(self.model, k) == v for k, v in predicate.items()])
            .values(**patch)
            .execution_options(synchronize_session="fetch")
        )
        result = self.db.execute(stmt)
        return result.rowcount or 0

    def _apply(self, row, entity) -> None:
        for name in self.fields:
            setattr(row, name, getattr(entity, name))

    def _to_domain(self, row) -> Optional[Any]:
        if row is None:
            return None
        data = {name: getattr(row, name) for name in self.fields}
        for name in self.read_only_fields:
            data[name] = getattr(row, name)
        data[self.key_name] = getattr(row, self.key_name)
        return self.entity(**data)
