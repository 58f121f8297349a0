"""
===========================================================
Table metadata for the generic DAL
===========================================================

Typed description of one entity: its table name, primary key, ordered field
map and named relations. Built once at startup and validated on
construction; the SQL builders and the DAL facade only ever read it.

Models:
    FieldType: Closed set of column types
    FieldDefinition: Type, optional max length and required flag of a column
    HasOne / HasMany: Direct relation joined on table_key = this_key
    HasManyThrough: Relation joined through a link table
    QueryMetadata: Everything the DAL knows about one table

Example:
    >>> from models.metadata import FieldDefinition, FieldType, HasMany, QueryMetadata
    >>>
    >>> houses = QueryMetadata(
    ...     table_name='houses',
    ...     primary_key='id',
    ...     fields={
    ...         'id': FieldDefinition(FieldType.INTEGER),
    ...         'name': FieldDefinition(FieldType.STRING, length=64, required=True),
    ...     },
    ...     relations={
    ...         'cats': HasMany(table='cats', table_key='house_id',
    ...                         this_key='id', table_fields='cat_id,name'),
    ...     },
    ... )
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Union


class MetadataError(ValueError):
    """Raised when a table description is malformed."""
    pass


class FieldType(str, Enum):
    """Column types understood by the validators."""

    STRING = 'string'
    TEXT = 'text'
    INTEGER = 'integer'
    FLOAT = 'float'
    BOOLEAN = 'boolean'
    DATE = 'date'
    DATETIME = 'datetime'


@dataclass(frozen=True)
class FieldDefinition:
    """Definition of a single column.

    Attributes:
        type: Column type
        length: Maximum length of string values, None for unbounded
        required: Whether inserts must supply the column
    """

    type: FieldType = FieldType.STRING
    length: Optional[int] = None
    required: bool = False

    def __post_init__(self):
        try:
            object.__setattr__(self, 'type', FieldType(self.type))
        except ValueError:
            raise MetadataError(f"Unknown field type: {self.type!r}") from None
        if self.length is not None:
            if isinstance(self.length, bool) or not isinstance(self.length, int) or self.length <= 0:
                raise MetadataError(f"Field length must be a positive integer, got {self.length!r}")

    @classmethod
    def from_dict(cls, definition: Mapping[str, Any]) -> 'FieldDefinition':
        """Build from a plain mapping such as ``{'type': 'string', 'length': 4}``."""
        return cls(
            type=definition.get('type', FieldType.STRING),
            length=definition.get('length'),
            required=bool(definition.get('required', False))
        )


def _split_fields(table_fields: str) -> List[str]:
    return [name.strip() for name in table_fields.split(',') if name.strip()]


@dataclass(frozen=True)
class HasOne:
    """Each row of this table owns at most one row of ``table``."""

    table: str
    table_key: str
    this_key: str
    table_fields: str

    @property
    def field_list(self) -> List[str]:
        return _split_fields(self.table_fields)


@dataclass(frozen=True)
class HasMany:
    """Each row of this table owns any number of rows of ``table``."""

    table: str
    table_key: str
    this_key: str
    table_fields: str

    @property
    def field_list(self) -> List[str]:
        return _split_fields(self.table_fields)


@dataclass(frozen=True)
class HasManyThrough:
    """Rows of ``table`` reached through ``link_table``.

    Attributes:
        table: Related table
        link_table: Join table between this table and ``table``
        link_key: Column of the link table holding this table's key
        link_field: Column of the link table holding the related table's key
        table_key: Key column of the related table
        this_key: Key column of this table
        table_fields: Comma-joined columns selected from the related table
    """

    table: str
    link_table: str
    link_key: str
    link_field: str
    table_key: str
    this_key: str
    table_fields: str

    @property
    def field_list(self) -> List[str]:
        return _split_fields(self.table_fields)


Relation = Union[HasOne, HasMany, HasManyThrough]

RELATION_TYPES = {
    'has_one': HasOne,
    'has_many': HasMany,
    'has_many_through': HasManyThrough,
}


def relation_from_dict(definition: Mapping[str, Any]) -> Relation:
    """Build a relation from a mapping carrying a ``type`` tag.

    Args:
        definition: Mapping with ``type`` ('has_one', 'has_many' or
            'has_many_through') and the attributes of that relation type

    Raises:
        MetadataError: On an unknown type tag or missing attributes
    """
    attrs = dict(definition)
    tag = attrs.pop('type', None)
    tag = getattr(tag, 'value', tag)
    relation_cls = RELATION_TYPES.get(tag)
    if relation_cls is None:
        raise MetadataError(f"Unknown relation type: {tag!r}")
    try:
        return relation_cls(**attrs)
    except TypeError as e:
        raise MetadataError(f"Invalid {tag} relation: {e}") from e


@dataclass
class QueryMetadata:
    """Static description of one table.

    Attributes:
        table_name: Table the DAL reads and writes
        primary_key: Primary key column
        fields: Ordered map of column name to FieldDefinition; the order is
            the default SELECT column order
        relations: Map of relation name to relation definition
    """

    table_name: str
    primary_key: str
    fields: Dict[str, FieldDefinition]
    relations: Dict[str, Relation] = field(default_factory=dict)

    def __post_init__(self):
        if not self.table_name:
            raise MetadataError("table_name is required")
        if not self.primary_key:
            raise MetadataError("primary_key is required")
        if self.relations is None:
            self.relations = {}

        for name, definition in self.fields.items():
            if not isinstance(definition, FieldDefinition):
                raise MetadataError(f"Field {name!r} is not a FieldDefinition")
        for name, relation in self.relations.items():
            if not isinstance(relation, (HasOne, HasMany, HasManyThrough)):
                raise MetadataError(f"Relation {name!r} is not a known relation type")

    @property
    def field_names(self) -> List[str]:
        return list(self.fields)

    @classmethod
    def from_dict(
        cls,
        table_name: str,
        primary_key: str,
        fields: Mapping[str, Mapping[str, Any]],
        relations: Optional[Mapping[str, Mapping[str, Any]]] = None
    ) -> 'QueryMetadata':
        """Build metadata from plain nested mappings.

        Example:
            >>> QueryMetadata.from_dict(
            ...     'currencies', 'code',
            ...     fields={'code': {'type': 'string', 'length': 3, 'required': True}},
            ...     relations={'countries': {'type': 'has_many', 'table': 'countries',
            ...                              'table_key': 'default_currency_code',
            ...                              'this_key': 'code',
            ...                              'table_fields': 'code_alpha_2,name'}},
            ... )
        """
        return cls(
            table_name=table_name,
            primary_key=primary_key,
            fields={name: FieldDefinition.from_dict(d) for name, d in fields.items()},
            relations={name: relation_from_dict(d) for name, d in (relations or {}).items()}
        )
