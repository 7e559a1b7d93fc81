"""Field maps returned by pattern searches."""
from __future__ import annotations

FieldValue = str | list["Fields"]


class Fields(dict[str, FieldValue]):
    """Result of ``Pattern.search()``.

    Values are plain strings or a list of sub-fields (one ``Fields`` per
    item found by a ``PatternList``). The accessors below handle the type
    checks and never raise: a missing key and a key holding the other kind
    of value both read as empty.
    """

    def get_string(self, key: str) -> str:
        value = self.get(key)
        if isinstance(value, str):
            return value
        return ""

    def get_list(self, key: str) -> list[Fields]:
        value = self.get(key)
        if not isinstance(value, list):
            return []
        if not all(isinstance(item, Fields) for item in value):
            return []
        return list(value)

    def get_map_slice(self, key: str) -> list[dict[str, str]]:
        return [
            {name: value for name, value in item.items() if isinstance(value, str)}
            for item in self.get_list(key)
        ]
