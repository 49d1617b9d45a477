"""
Base repository with owner-scoped operations shared by every model.
"""

import uuid
from typing import Generic, Optional, Type, TypeVar

from sqlalchemy import inspect
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from threadkeep.exceptions import OwnershipConflictError
from threadkeep.models.db import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Generic repository for a model carrying an owner ``user_id``."""

    def __init__(self, model: Type[ModelType], session: Session):
        self.model = model
        self.session = session

    def get(self, id: uuid.UUID) -> Optional[ModelType]:
        """
        Get a record by primary key, regardless of owner.

        Args:
            id: Record UUID

        Returns:
            Model instance or None
        """
        return self.session.get(self.model, id)

    def get_for_owner(self, id: uuid.UUID, user_id: str) -> Optional[ModelType]:
        """
        Get a record by primary key, only if it belongs to the given owner.

        This is the secure method for fetching by ID. Use this instead of
        `get()` anywhere the caller is an authenticated owner.

        Args:
            id: Record UUID
            user_id: Owner identity

        Returns:
            Model instance or None
        """
        return (
            self.session.query(self.model)
            .filter(self.model.id == id, self.model.user_id == user_id)
            .first()
        )

    def upsert_for_owner(
        self, id: uuid.UUID, user_id: str, **kwargs
    ) -> tuple[ModelType, bool]:
        """
        Insert or fully overwrite a record keyed by ID (race-safe).

        Uses INSERT ... ON CONFLICT (id) DO UPDATE so two writers racing on a
        new ID both succeed and the last one wins, instead of the loser
        failing with an IntegrityError. The update only applies to rows of
        the same owner.

        Args:
            id: Record UUID (client-supplied or freshly generated)
            user_id: Owner identity
            **kwargs: Field values, by model attribute name

        Returns:
            Tuple of (instance, created). ``created`` reflects what was seen
            before the write; a concurrent insert may make it stale.

        Raises:
            OwnershipConflictError: If the ID already belongs to another owner
            RuntimeError: If the row cannot be read back after the write
        """
        created = self.get(id) is None

        # Attribute names can differ from column names (extra_data -> metadata)
        columns = inspect(self.model).columns
        values = {columns[key].name: value for key, value in kwargs.items()}

        insert = (
            pg_insert
            if self.session.get_bind().dialect.name == "postgresql"
            else sqlite_insert
        )
        stmt = insert(self.model.__table__).values(id=id, user_id=user_id, **values)
        stmt = stmt.on_conflict_do_update(
            index_elements=["id"],
            set_={name: stmt.excluded[name] for name in values},
            where=self.model.__table__.c.user_id == user_id,
        )
        self.session.execute(stmt)

        instance = self.session.get(self.model, id, populate_existing=True)
        if instance is None:
            raise RuntimeError(
                f"{self.model.__name__} {id} missing after upsert for owner={user_id}"
            )
        if instance.user_id != user_id:
            # The WHERE clause left the foreign row untouched
            raise OwnershipConflictError(self.model.__name__, id)

        return instance, created

    def count_for_owner(self, user_id: str) -> int:
        """Count records belonging to an owner."""
        return (
            self.session.query(self.model)
            .filter(self.model.user_id == user_id)
            .count()
        )
