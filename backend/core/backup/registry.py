"""
core/backup/registry.py

Entity collection registry - the single ordered list of persisted tables.

Only the insertion order (dependencies first) is declared; the deletion
order is its exact reverse and the export order is the sorted table list,
so the three orderings can never drift apart.
"""
from typing import Iterable, List, Optional, Sequence, Tuple


class EntityCollectionRegistry:
    """
    Ordered registry of backed-up entity collections.

    Example:
        >>> registry = EntityCollectionRegistry(["roles", "user_roles"])
        >>> registry.deletion_order
        ('user_roles', 'roles')
    """

    def __init__(self, insertion_order: Sequence[str]):
        names = [str(name).strip() for name in insertion_order]
        if not names:
            raise ValueError("Registry must contain at least one table")
        if any(not name for name in names):
            raise ValueError("Table names must be non-empty")

        seen = set()
        duplicates = []
        for name in names:
            if name in seen:
                duplicates.append(name)
            seen.add(name)
        if duplicates:
            raise ValueError(f"Duplicate tables in registry: {', '.join(duplicates)}")

        self._insertion_order: Tuple[str, ...] = tuple(names)
        self._deletion_order: Tuple[str, ...] = tuple(reversed(names))
        self._export_order: Tuple[str, ...] = tuple(sorted(names))

    @property
    def insertion_order(self) -> Tuple[str, ...]:
        """Dependencies before dependents."""
        return self._insertion_order

    @property
    def deletion_order(self) -> Tuple[str, ...]:
        """Dependents before dependencies."""
        return self._deletion_order

    @property
    def export_order(self) -> Tuple[str, ...]:
        """Deterministic iteration order for snapshots."""
        return self._export_order

    @property
    def tables(self) -> Tuple[str, ...]:
        return self._export_order

    def __contains__(self, name: object) -> bool:
        return name in self._insertion_order

    def __len__(self) -> int:
        return len(self._insertion_order)

    def __iter__(self):
        return iter(self._export_order)

    def select(self, names: Optional[Iterable[str]] = None) -> List[str]:
        """
        Validate a table subset.

        Args:
            names: Requested tables, None means every registered table

        Returns:
            The requested tables in insertion order

        Raises:
            ValueError: if any name is not registered
        """
        if names is None:
            return list(self._insertion_order)

        requested = set(names)
        unknown = sorted(requested - set(self._insertion_order))
        if unknown:
            raise ValueError(f"Unknown tables: {', '.join(unknown)}")
        return [name for name in self._insertion_order if name in requested]

    def __repr__(self) -> str:
        return f"EntityCollectionRegistry({len(self)} tables)"
