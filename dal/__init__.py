"""
==============================
Data-access facade package.
==============================

Modules:
    generic_dal: GenericDal, cached reads and invalidating writes for one table
    relation_resolver: Reshaping of relation rows onto primary records

Example:
    >>> from dal import GenericDal
    >>> dal = GenericDal(sql_client, cache_client, metadata)
    >>> dal.get_one({'code': 'EUR'})
"""

__version__ = "0.1.0"
__all__ = [
    'GenericDal',
    'map_by_primary_key',
    'map_of_arrays_by_key',
    'remove_key_from_array_groups',
    'add_field_from_map',
]

from .generic_dal import GenericDal
from .relation_resolver import (
    add_field_from_map,
    map_by_primary_key,
    map_of_arrays_by_key,
    remove_key_from_array_groups,
)
