from __future__ import annotations

from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Union

from sqlrepository.exceptions import InvalidArgumentError


class RowObject(dict):
    """A row dict whose columns are also readable as attributes."""

    def __getattr__(self, name: str) -> Any:
        try:
            return self[name]
        except KeyError:
            raise AttributeError(name) from None


class ResultSet:
    """
    Wraps the rows produced by a SELECT.

    ARRAY_OBJECT yields RowObject instances, ARRAY yields plain dicts.
    A ResultSet can be passed to a repository as a prototype; it is
    (re)initialized with the rows of each query it receives.
    """

    ARRAY_OBJECT = "arrayobject"
    ARRAY = "array"

    def __init__(self, return_type: str = ARRAY_OBJECT) -> None:
        if return_type not in (self.ARRAY_OBJECT, self.ARRAY):
            raise InvalidArgumentError(f"Unsupported result set return type: {return_type!r}")
        self._return_type = return_type
        self._data_source: Optional[Iterable[Mapping[str, Any]]] = None
        self._rows: List[Dict[str, Any]] = []

    def initialize(self, data_source: Iterable[Mapping[str, Any]]) -> "ResultSet":
        """Load rows from a StatementResult or any iterable of mappings."""
        self._data_source = data_source
        self._rows = [self._wrap(row) for row in data_source]
        return self

    def _wrap(self, row: Mapping[str, Any]) -> Union[RowObject, Dict[str, Any]]:
        if self._return_type == self.ARRAY_OBJECT:
            return RowObject(row)
        return dict(row)

    def get_return_type(self) -> str:
        return self._return_type

    def get_data_source(self) -> Optional[Iterable[Mapping[str, Any]]]:
        return self._data_source

    def count(self) -> int:
        return len(self._rows)

    def current(self) -> Optional[Dict[str, Any]]:
        """First row, or None when the query returned nothing."""
        return self._rows[0] if self._rows else None

    def to_list(self) -> List[Dict[str, Any]]:
        return [dict(row) for row in self._rows]

    def __len__(self) -> int:
        return len(self._rows)

    def __iter__(self) -> Iterator[Dict[str, Any]]:
        return iter(self._rows)
