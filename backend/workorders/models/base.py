"""Shared SQLModel base with a small chainable query manager."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar, Generic, TypeVar

from sqlmodel import SQLModel, col, select

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlmodel.ext.asyncio.session import AsyncSession
    from sqlmodel.sql.expression import SelectOfScalar

ModelT = TypeVar("ModelT", bound="QueryModel")


class ModelQuery(Generic[ModelT]):
    """Immutable query builder bound to one model class.

    Usage: `await Task.objects.filter_by(status="draft").order_by(...).all(session)`.
    """

    def __init__(self, model: type[ModelT], statement: SelectOfScalar[ModelT] | None = None) -> None:
        self.model = model
        self.statement = statement if statement is not None else select(model)

    def _with(self, statement: SelectOfScalar[ModelT]) -> ModelQuery[ModelT]:
        return ModelQuery(self.model, statement)

    def by_id(self, identity: Any) -> ModelQuery[ModelT]:
        return self.filter(col(self.model.id) == identity)  # type: ignore[attr-defined]

    def filter_by(self, **values: Any) -> ModelQuery[ModelT]:
        return self._with(self.statement.filter_by(**values))

    def filter(self, *criteria: Any) -> ModelQuery[ModelT]:
        return self._with(self.statement.where(*criteria))

    def outerjoin(self, target: Any, onclause: Any) -> ModelQuery[ModelT]:
        return self._with(self.statement.outerjoin(target, onclause))

    def order_by(self, *clauses: Any) -> ModelQuery[ModelT]:
        return self._with(self.statement.order_by(*clauses))

    def offset(self, value: int) -> ModelQuery[ModelT]:
        return self._with(self.statement.offset(value))

    def limit(self, value: int) -> ModelQuery[ModelT]:
        return self._with(self.statement.limit(value))

    async def first(self, session: AsyncSession) -> ModelT | None:
        return (await session.exec(self.statement)).first()

    async def all(self, session: AsyncSession) -> Sequence[ModelT]:
        return list((await session.exec(self.statement)).all())


class _ObjectsDescriptor:
    def __get__(self, instance: object, owner: type[ModelT]) -> ModelQuery[ModelT]:
        return ModelQuery(owner)


class QueryModel(SQLModel):
    """Base class for table models; exposes `Model.objects` query access."""

    objects: ClassVar[_ObjectsDescriptor] = _ObjectsDescriptor()
