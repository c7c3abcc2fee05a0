"""Id-set helpers for self-referential (parent_id) tables and bulk deletes.

Trees are never loaded as object graphs: the helpers work on id sets,
walking one level per query.
"""

from collections.abc import Iterable
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.orm import InstrumentedAttribute, Session


def collect_descendant_ids(
    session: Session,
    id_column: InstrumentedAttribute[int],
    parent_column: InstrumentedAttribute[int | None],
    root_ids: Iterable[int],
) -> set[int]:
    """Collect root ids plus every id reachable through parent links.

    Args:
        session: Active session
        id_column: Primary key column (e.g. ``Category.id``)
        parent_column: Self-referencing column (e.g. ``Category.parent_id``)
        root_ids: Subtree roots

    Returns:
        Set containing the roots and all their descendants
    """
    collected: set[int] = set(root_ids)
    frontier = set(collected)

    while frontier:
        children = session.scalars(
            select(id_column).where(parent_column.in_(frontier))
        ).all()
        frontier = set(children) - collected
        collected |= frontier

    return collected


def collect_ancestor_ids(
    session: Session,
    id_column: InstrumentedAttribute[int],
    parent_column: InstrumentedAttribute[int | None],
    start_id: int,
) -> list[int]:
    """Walk parent links upwards from start_id (inclusive).

    Stops at a root or at the first repeated id, so an already corrupted
    cycle cannot loop forever.
    """
    chain: list[int] = []
    seen: set[int] = set()
    current: int | None = start_id

    while current is not None and current not in seen:
        chain.append(current)
        seen.add(current)
        current = session.scalar(select(parent_column).where(id_column == current))

    return chain


def delete_by_ids(
    session: Session, column: InstrumentedAttribute[Any], ids: set[int]
) -> int:
    """Bulk delete rows whose column value is in ids.

    Does not commit. Callers group several of these into one transaction.

    Returns:
        Number of deleted rows
    """
    if not ids:
        return 0
    stmt = (
        delete(column.class_)
        .where(column.in_(ids))
        .execution_options(synchronize_session=False)
    )
    return session.execute(stmt).rowcount
