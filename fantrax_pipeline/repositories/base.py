"""
Shared repository base.

Every entity repository funnels writes through ``BaseRepository.upsert``:
look the row up by its natural key, insert it when absent, otherwise
write only the fields whose value changed. Repositories flush but never
commit; the unit of work around them decides.

Example:
    class SeasonRepository(BaseRepository[Season]):
        def upsert_season(self, year, league_id, name):
            return self.upsert({"league_id": league_id}, {"year": year, "name": name})
"""
from abc import ABC
from typing import TypeVar, Generic, Type, Optional, Any, Dict, Iterable
from sqlalchemy.orm import Query, Session

from fantrax_pipeline.core.exceptions import ValidationError

T = TypeVar("T")


class BaseRepository(Generic[T], ABC):
    """
    Natural-key upsert plus the handful of lookups entity repositories share.

    Attributes:
        model_type: Mapped class handled by this repository
        db: Session owned by the caller's unit of work
    """

    def __init__(self, model_type: Type[T], db: Session):
        self.model_type = model_type
        self.db = db

    # ------------------------------------------------------------------
    # Upsert
    # ------------------------------------------------------------------

    def upsert(
        self,
        key: Dict[str, Any],
        fields: Dict[str, Any],
        keep_existing: Iterable[str] = ()
    ) -> T:
        """
        Insert or update the row identified by ``key``.

        Args:
            key: Natural key, exact equality on every column
            fields: Non-key values; on update, exactly these are written
            keep_existing: Fields where an incoming None keeps the stored value

        Returns:
            The row after the write (flushed, so the surrogate id is set)

        Raises:
            ValidationError: If any key value is None or an empty string
        """
        missing = [name for name, value in key.items() if value is None or value == ""]
        if missing:
            raise ValidationError(
                f"{self.model_type.__name__} natural key missing: {', '.join(missing)}",
                entity=self.model_type.__name__,
                fields=missing,
            )

        instance = self.db.query(self.model_type).filter_by(**key).one_or_none()

        if instance is None:
            instance = self.model_type(**key, **fields)
            self.db.add(instance)
        else:
            keep = set(keep_existing)
            for name, value in fields.items():
                if value is None and name in keep:
                    continue
                if getattr(instance, name) != value:
                    setattr(instance, name, value)

        self.db.flush()
        return instance

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def find_by_id(self, id: Any) -> Optional[T]:
        """Row by surrogate primary key, or None."""
        return self.db.get(self.model_type, id)

    def query(self) -> Query:
        return self.db.query(self.model_type)

    def filter_by_first(self, **kwargs) -> Optional[T]:
        """First row whose columns equal ``kwargs``."""
        return self.query().filter_by(**kwargs).first()

    def where_first(self, *criterion) -> Optional[T]:
        """First row matching SQLAlchemy expressions."""
        return self.query().filter(*criterion).first()

    def exists_where(self, *criterion) -> bool:
        return self.db.query(self.query().filter(*criterion).exists()).scalar()

    # ------------------------------------------------------------------
    # Bulk deletes
    # ------------------------------------------------------------------

    def delete_where(self, *criterion) -> int:
        """
        Delete every row matching ``criterion`` in one statement.

        Returns:
            Rows removed
        """
        removed = self.query().filter(*criterion).delete(synchronize_session=False)
        # Session objects for deleted rows are stale after a bulk delete
        self.db.expire_all()
        return removed
