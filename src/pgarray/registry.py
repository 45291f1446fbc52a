"""Registry of array types known to a database.

Each registered type binds a database type name to its array OID, the
converter applied to each element when parsing, and the scalar typecast
used when a plain list is cast to the array type. Registering also
installs an ArrayCreator for the array OID in the shared conversion-proc
table, so array columns convert like any other OID.

The registry is built once at startup. Writes are not safe against
concurrent readers; after freeze() no writes happen and reads need no
locking.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Tuple

from pgarray.catalog import CatalogLookup
from pgarray.conversion import (
    SCALAR_TYPECASTS,
    ConversionProcs,
    Converter,
    default_conversion_procs,
)
from pgarray.errors import (
    CatalogLookupError,
    ConfigurationError,
    FrozenRegistryError,
    UnknownTypeError,
)
from pgarray.parser import BRACE_GRAMMAR, ArrayGrammar
from pgarray.value import ArrayCreator

logger = logging.getLogger(__name__)

# Distinguishes "converter=None" (explicitly no conversion) from "not given".
_UNSET: Any = object()


@dataclass(frozen=True)
class TypeDescriptor:
    """Conversion metadata for one registered array type.

    Attributes:
        db_type_name: Scalar type name as the database spells it ("integer").
        array_type_id: OID of the array type (1007 for integer[]).
        scalar_type_id: OID of the element type, when conversion comes from
            the shared conversion-proc table.
        converter: Element converter, None when elements stay strings.
        scalar_cast_kind: Scalar typecast applied to plain-list elements.
        type_symbol: Base of the schema type name ("integer" -> "integer_array").
        declared_array_kind: Type used to cast the array when literalized.
        explicit_converter: True when the converter was given explicitly
            rather than resolved from a scalar OID.
    """

    db_type_name: str
    array_type_id: int
    scalar_type_id: Optional[int]
    converter: Optional[Converter]
    scalar_cast_kind: Optional[str]
    type_symbol: str
    declared_array_kind: str
    explicit_converter: bool = False

    @property
    def schema_type(self) -> str:
        """Schema type name, e.g. "integer_array"."""
        return f"{self.type_symbol}_array"


class TypeRegistry:
    """Array types registered for one database object."""

    def __init__(
        self,
        conversion_procs: Optional[ConversionProcs] = None,
        catalog: Optional[CatalogLookup] = None,
        grammar: ArrayGrammar = BRACE_GRAMMAR,
    ) -> None:
        if conversion_procs is None:
            conversion_procs = default_conversion_procs()
        self._procs = conversion_procs
        self._catalog = catalog
        self._grammar = grammar
        self._by_name: Dict[str, TypeDescriptor] = {}
        self._by_oid: Dict[int, TypeDescriptor] = {}
        self._by_schema_type: Dict[str, TypeDescriptor] = {}
        self._frozen = False

    @property
    def conversion_procs(self) -> ConversionProcs:
        return self._procs

    @property
    def grammar(self) -> ArrayGrammar:
        return self._grammar

    @property
    def frozen(self) -> bool:
        return self._frozen

    def set_catalog(self, catalog: Optional[CatalogLookup]) -> None:
        """Attach the catalog used to resolve types registered without OIDs."""
        self._catalog = catalog

    def register(
        self,
        db_type_name: str,
        *,
        array_type_id: Optional[int] = None,
        scalar_type_id: Optional[int] = None,
        converter: Any = _UNSET,
        scalar_cast_kind: Optional[str] = None,
        type_symbol: Optional[str] = None,
        array_kind: Optional[str] = None,
    ) -> TypeDescriptor:
        """Register an array type.

        Args:
            db_type_name: Scalar type name, e.g. "integer" or "character varying".
            array_type_id: Array OID. Looked up in the catalog when omitted.
            scalar_type_id: Element OID; the element converter is taken from
                the conversion-proc table.
            converter: Explicit element converter. Pass None to keep
                elements as strings.
            scalar_cast_kind: Scalar typecast for plain-list elements.
                Defaults to the type symbol when such a typecast exists.
            type_symbol: Schema type base name. Defaults to db_type_name.
            array_kind: Type used for literal casts. Defaults to db_type_name.

        Raises:
            FrozenRegistryError: If the registry is frozen.
            ConfigurationError: If both a converter and a scalar OID are given,
                or the registration conflicts with an earlier one.
            CatalogLookupError: If OIDs are missing and the catalog cannot
                resolve the type.
        """
        if self._frozen:
            raise FrozenRegistryError(
                f"cannot register array type {db_type_name!r}: registry is frozen"
            )

        if self._procs.frozen:
            raise FrozenRegistryError(
                f"cannot register array type {db_type_name!r}: conversion procs are frozen"
            )

        db_type = str(db_type_name)
        has_converter = converter is not _UNSET
        if has_converter and scalar_type_id is not None:
            raise ConfigurationError(
                f"can't provide both a converter and a scalar type id for {db_type!r}"
            )

        array_oid = array_type_id
        scalar_oid = scalar_type_id
        if not ((scalar_oid is not None or has_converter) and array_oid is not None):
            catalog_array_oid, catalog_scalar_oid = self._lookup_catalog(db_type)
            if scalar_oid is None and not has_converter:
                scalar_oid = catalog_scalar_oid
            if array_oid is None:
                array_oid = catalog_array_oid

        previous = self._by_name.get(db_type)
        if previous is not None and previous.explicit_converter != has_converter:
            raise ConfigurationError(
                f"conflicting registration for {db_type!r}: already registered with "
                + ("an explicit converter" if previous.explicit_converter else "a scalar type id")
            )

        if has_converter:
            element_converter = converter
        else:
            element_converter = self._procs.get(scalar_oid)

        symbol = type_symbol or db_type
        if scalar_cast_kind is None and symbol in SCALAR_TYPECASTS:
            scalar_cast_kind = symbol

        descriptor = TypeDescriptor(
            db_type_name=db_type,
            array_type_id=int(array_oid),
            scalar_type_id=int(scalar_oid) if scalar_oid is not None else None,
            converter=element_converter,
            scalar_cast_kind=scalar_cast_kind,
            type_symbol=symbol,
            declared_array_kind=array_kind or db_type,
            explicit_converter=has_converter,
        )

        if previous is not None:
            if self._by_oid.get(previous.array_type_id) is previous:
                del self._by_oid[previous.array_type_id]
                if previous.array_type_id != descriptor.array_type_id:
                    self._procs.discard(previous.array_type_id)
            if self._by_schema_type.get(previous.schema_type) is previous:
                del self._by_schema_type[previous.schema_type]
        self._by_name[db_type] = descriptor
        self._by_oid[descriptor.array_type_id] = descriptor
        self._by_schema_type[descriptor.schema_type] = descriptor
        self._procs.add(
            descriptor.array_type_id,
            ArrayCreator(descriptor.declared_array_kind, element_converter, self._grammar),
        )

        logger.debug(
            "Registered array type %s (oid=%s, element converter from %s)",
            db_type,
            descriptor.array_type_id,
            "explicit converter" if has_converter else f"scalar oid {descriptor.scalar_type_id}",
        )
        return descriptor

    def _lookup_catalog(self, db_type: str) -> Tuple[int, int]:
        if self._catalog is None:
            raise CatalogLookupError(
                f"no catalog available to resolve array type {db_type!r}; "
                "pass array_type_id and scalar_type_id or load a catalog snapshot"
            )
        row = self._catalog.lookup_type(db_type)
        if row is None:
            raise CatalogLookupError(f"type {db_type!r} does not exist in the database catalog")
        return row

    def resolve(self, db_type_name: str) -> TypeDescriptor:
        """Return the descriptor for a registered type name.

        Raises:
            UnknownTypeError: If the name was never registered.
        """
        try:
            return self._by_name[db_type_name]
        except KeyError:
            raise UnknownTypeError(f"array type {db_type_name!r} is not registered") from None

    def resolve_oid(self, array_type_id: int) -> TypeDescriptor:
        """Return the descriptor registered for an array OID."""
        try:
            return self._by_oid[int(array_type_id)]
        except KeyError:
            raise UnknownTypeError(f"no array type registered for OID {array_type_id}") from None

    def resolve_schema_type(self, schema_type: str) -> TypeDescriptor:
        """Return the descriptor for a schema type such as "integer_array"."""
        try:
            return self._by_schema_type[schema_type]
        except KeyError:
            raise UnknownTypeError(f"unknown array schema type {schema_type!r}") from None

    def schema_type_for(self, db_type_name: str) -> Optional[str]:
        """Return the schema type for a database type name, or None."""
        descriptor = self._by_name.get(db_type_name)
        return descriptor.schema_type if descriptor else None

    def freeze(self) -> None:
        """Reject further registrations. Calling it again is a no-op."""
        if self._frozen:
            return
        self._frozen = True
        logger.debug("Array type registry frozen with %d types", len(self._by_name))

    def names(self) -> List[str]:
        return list(self._by_name)

    def __contains__(self, db_type_name: object) -> bool:
        return db_type_name in self._by_name

    def __iter__(self) -> Iterator[TypeDescriptor]:
        return iter(list(self._by_name.values()))

    def __len__(self) -> int:
        return len(self._by_name)


# (db type name, registration options)
BUILTIN_ARRAY_TYPES: Tuple[Tuple[str, Dict[str, Any]], ...] = (
    (
        "timestamp without time zone",
        {"array_type_id": 1115, "scalar_type_id": 1114, "type_symbol": "datetime"},
    ),
    (
        "timestamp with time zone",
        {
            "array_type_id": 1185,
            "scalar_type_id": 1184,
            "type_symbol": "datetime_timezone",
            "scalar_cast_kind": "datetime",
        },
    ),
    ("text", {"array_type_id": 1009, "scalar_type_id": 25, "type_symbol": "string"}),
    ("integer", {"array_type_id": 1007, "scalar_type_id": 23}),
    ("bigint", {"array_type_id": 1016, "scalar_type_id": 20, "scalar_cast_kind": "integer"}),
    ("numeric", {"array_type_id": 1231, "scalar_type_id": 1700, "type_symbol": "decimal"}),
    ("double precision", {"array_type_id": 1022, "scalar_type_id": 701, "type_symbol": "float"}),
    ("boolean", {"array_type_id": 1000, "scalar_type_id": 16}),
    ("bytea", {"array_type_id": 1001, "scalar_type_id": 17, "type_symbol": "blob"}),
    ("date", {"array_type_id": 1182, "scalar_type_id": 1082}),
    (
        "time without time zone",
        {"array_type_id": 1183, "scalar_type_id": 1083, "type_symbol": "time"},
    ),
    (
        "time with time zone",
        {
            "array_type_id": 1270,
            "scalar_type_id": 1266,
            "type_symbol": "time_timezone",
            "scalar_cast_kind": "time",
        },
    ),
    ("smallint", {"array_type_id": 1005, "scalar_type_id": 21, "scalar_cast_kind": "integer"}),
    ("oid", {"array_type_id": 1028, "scalar_type_id": 26, "scalar_cast_kind": "integer"}),
    ("real", {"array_type_id": 1021, "scalar_type_id": 700, "scalar_cast_kind": "float"}),
    (
        "character",
        {
            "array_type_id": 1014,
            "converter": None,
            "array_kind": "text",
            "scalar_cast_kind": "string",
        },
    ),
    (
        "character varying",
        {
            "array_type_id": 1015,
            "converter": None,
            "scalar_cast_kind": "string",
            "type_symbol": "varchar",
        },
    ),
    ("xml", {"array_type_id": 143, "scalar_type_id": 142}),
    ("money", {"array_type_id": 791, "scalar_type_id": 790}),
    ("bit", {"array_type_id": 1561, "scalar_type_id": 1560}),
    ("bit varying", {"array_type_id": 1563, "scalar_type_id": 1562, "type_symbol": "varbit"}),
    ("uuid", {"array_type_id": 2951, "scalar_type_id": 2950}),
    ("xid", {"array_type_id": 1011, "scalar_type_id": 28}),
    ("cid", {"array_type_id": 1012, "scalar_type_id": 29}),
    ("name", {"array_type_id": 1003, "scalar_type_id": 19}),
    ("tid", {"array_type_id": 1010, "scalar_type_id": 27}),
    ("int2vector", {"array_type_id": 1006, "scalar_type_id": 22}),
    ("oidvector", {"array_type_id": 1013, "scalar_type_id": 30}),
)

# Redshift SUPER; shares the "string_array" schema type with text.
REDSHIFT_ARRAY_TYPES: Tuple[Tuple[str, Dict[str, Any]], ...] = (
    ("super", {"array_type_id": 4000, "scalar_type_id": 25, "type_symbol": "string"}),
)


def register_builtin_types(registry: TypeRegistry, dialect_name: str = "postgres") -> None:
    """Register the built-in array types, plus dialect-specific ones."""
    for db_type, options in BUILTIN_ARRAY_TYPES:
        registry.register(db_type, **options)
    if dialect_name == "redshift":
        for db_type, options in REDSHIFT_ARRAY_TYPES:
            registry.register(db_type, **options)
