"""
=============================
Relation result reshaping.
=============================

Helpers that turn flat result rows into keyed lookups and splice related
rows back into the primary records. Keys are used exactly as they come out
of the database: 1, 2.5, "3" and None are four distinct keys.

Functions:
- map_by_primary_key: One record per key value, last one wins
- map_of_arrays_by_key: Records grouped by a column, order preserved
- remove_key_from_array_groups: Drop a column from every grouped record
- add_field_from_map: Attach lookup values to records by a source column
"""

from typing import Any, Dict, Hashable, List, Mapping, MutableMapping

Record = MutableMapping[str, Any]


def map_by_primary_key(records: List[Record], primary_key: str) -> Dict[Hashable, Record]:
    """
    Index records by a key column.

    Args:
        records: Result rows
        primary_key: Column whose value becomes the key

    Returns:
        Key value to record; a later duplicate replaces an earlier one
    """
    return {record[primary_key]: record for record in records}


def map_of_arrays_by_key(records: List[Record], key: str) -> Dict[Hashable, List[Record]]:
    """
    Group records by a column.

    Args:
        records: Result rows
        key: Column to group on; None is a valid group

    Returns:
        Group value to records, groups in first-seen order and records in
        their original relative order
    """
    groups: Dict[Hashable, List[Record]] = {}
    for record in records:
        groups.setdefault(record[key], []).append(record)
    return groups


def remove_key_from_array_groups(groups: Mapping[Hashable, List[Record]], key: str) -> None:
    """Delete ``key`` from every record of every group, in place."""
    for records in groups.values():
        for record in records:
            record.pop(key, None)


def add_field_from_map(
    records: List[Record],
    lookup: Mapping[Hashable, Any],
    new_field: str,
    source_field: str
) -> None:
    """
    Set ``record[new_field] = lookup[record[source_field]]``, in place.

    Records lacking ``source_field``, or whose value is not a lookup key,
    are left untouched (``new_field`` is not added).

    Args:
        records: Records to extend
        lookup: Source value to attached value
        new_field: Name of the field to add
        source_field: Column whose value is looked up
    """
    for record in records:
        if source_field not in record:
            continue
        value = record[source_field]
        if value in lookup:
            record[new_field] = lookup[value]
