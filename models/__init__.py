"""
========================================
Table metadata models
========================================

Typed table descriptions consumed by the sql/ builders and the dal/ facade.

Modules:
    metadata: FieldDefinition, relation types and QueryMetadata

Example:
    >>> from models import QueryMetadata, FieldDefinition
    >>> meta = QueryMetadata('test_table', 'id', {'id': FieldDefinition('integer')})
"""

__version__ = "0.1.0"
__all__ = [
    'FieldType',
    'FieldDefinition',
    'HasOne',
    'HasMany',
    'HasManyThrough',
    'Relation',
    'QueryMetadata',
    'MetadataError',
    'relation_from_dict',
]

from .metadata import (
    FieldDefinition,
    FieldType,
    HasMany,
    HasManyThrough,
    HasOne,
    MetadataError,
    QueryMetadata,
    Relation,
    relation_from_dict,
)
