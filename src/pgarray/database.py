"""Database-level entry point for array parsing and literalization."""

import logging
import re
from typing import Any, Callable, Iterable, List, Mapping, Optional, Tuple, Union

from pgarray.bound import BoundVariableFormatter
from pgarray.catalog import CatalogSnapshot, fetch_catalog_snapshot
from pgarray.config import ArraySettings
from pgarray.conversion import ConversionProcs, Converter, default_conversion_procs, typecast_scalar
from pgarray.dialect import ArrayDialect, get_dialect
from pgarray.errors import CatalogLookupError, InvalidValueError
from pgarray.literal import bound_variable_arg, literal_value
from pgarray.parser import ArrayLiteralParser
from pgarray.registry import TypeDescriptor, TypeRegistry, register_builtin_types
from pgarray.serializer import ArrayLiteralSerializer
from pgarray.value import ArrayValue, is_array_like, pg_array

logger = logging.getLogger(__name__)

# "integer[]", "character varying(255)[]"
_ARRAY_DB_TYPE = re.compile(r"\A([^(]+)(?:\([^(]+\))?\[\]\Z", re.IGNORECASE)
# '{}'::integer[] or ARRAY[]::integer[]
_EMPTY_ARRAY_DEFAULT = re.compile(r"\A(?:'\{\}'|ARRAY\[\])::([\w ]+)\[\]\Z")


class ArrayDatabase:
    """Owns the array type registry and conversion procs for one database.

    The dialect is fixed at construction and selects both the catalog
    grammar used for parsing and the constructor syntax used for literals.
    Call freeze() once setup is complete; after that the object is safe to
    share between threads.

    Example:
        >>> db = ArrayDatabase("postgres")
        >>> db.parse_array("{1,NULL,3}", "integer").to_list()
        [1, None, 3]
        >>> db.literal(db.pg_array([], "decimal"))
        "'{}'::decimal[]"
    """

    def __init__(
        self,
        dialect: Union[str, ArrayDialect, None] = None,
        *,
        settings: Optional[ArraySettings] = None,
        catalog: Optional[CatalogSnapshot] = None,
        conversion_procs: Optional[ConversionProcs] = None,
        register_builtins: bool = True,
    ) -> None:
        self.settings = settings or ArraySettings()
        self.dialect = get_dialect(dialect if dialect is not None else self.settings.dialect)
        if conversion_procs is None:
            conversion_procs = default_conversion_procs()
        self._procs = conversion_procs
        self._catalog = catalog
        self._registry = TypeRegistry(
            conversion_procs=self._procs, catalog=catalog, grammar=self.dialect.grammar
        )
        self._serializer = ArrayLiteralSerializer(self.dialect, literal=self.literal)
        self._bound_formatter = BoundVariableFormatter(literal=self.literal)
        self._frozen = False
        if register_builtins:
            register_builtin_types(self._registry, self.dialect.name)

    @classmethod
    def from_env(cls) -> "ArrayDatabase":
        """Build a database object from ARRAY_* environment settings."""
        settings = ArraySettings.from_env()
        return cls(settings.dialect, settings=settings)

    @property
    def dialect_name(self) -> str:
        """Current dialect tag ("postgres" or "redshift")."""
        return self.dialect.name

    @property
    def is_redshift(self) -> bool:
        return self.dialect.name == "redshift"

    @property
    def registry(self) -> TypeRegistry:
        return self._registry

    @property
    def conversion_procs(self) -> ConversionProcs:
        return self._procs

    @property
    def catalog(self) -> Optional[CatalogSnapshot]:
        return self._catalog

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        """Freeze the registry and conversion procs. Idempotent."""
        self._registry.freeze()
        self._procs.freeze()
        self._frozen = True

    async def load_catalog(self, conn: Any) -> CatalogSnapshot:
        """Fetch a pg_type snapshot over an asyncpg connection and use it for lookups.

        Raises:
            CatalogLookupError: If the catalog query fails or times out.
        """
        snapshot = await fetch_catalog_snapshot(
            conn,
            provider=self.dialect.name,
            timeout=self.settings.catalog_timeout,
            trace=self.settings.trace_catalog,
        )
        self.use_catalog(snapshot)
        return snapshot

    def use_catalog(self, catalog: CatalogSnapshot) -> None:
        """Use an already loaded catalog snapshot for type lookups."""
        self._catalog = catalog
        self._registry.set_catalog(catalog)

    def register_array_type(self, db_type_name: str, **options: Any) -> TypeDescriptor:
        """Register a database-specific array type; see TypeRegistry.register()."""
        return self._registry.register(db_type_name, **options)

    def add_named_conversion_proc(self, name: str, proc: Converter) -> TypeDescriptor:
        """Install a scalar converter for a named type and register its array type.

        Raises:
            CatalogLookupError: If no catalog is loaded or the name is unknown.
        """
        if self._catalog is None:
            raise CatalogLookupError(
                f"cannot add conversion proc for {name!r}: no catalog snapshot loaded"
            )
        row = self._catalog.lookup_type(name)
        if row is None:
            logger.warning("No pg_type row for %s; conversion proc not installed", name)
            raise CatalogLookupError(f"type {name!r} does not exist in the database catalog")
        array_oid, scalar_oid = row
        self._procs.add(scalar_oid, proc)
        return self._registry.register(name, array_type_id=array_oid, scalar_type_id=scalar_oid)

    def parse_array(
        self,
        text: str,
        db_type_name: Optional[str] = None,
        converter: Optional[Converter] = None,
    ) -> ArrayValue:
        """Parse catalog array text using this database's dialect grammar.

        With db_type_name, the registered element converter is applied and
        the result is tagged with the type's array kind; otherwise the
        optional converter is applied and the result is untagged.

        Raises:
            UnknownTypeError: If db_type_name is not registered.
            MalformedArrayError, UnterminatedArrayError: On invalid input.
        """
        element_type = None
        if db_type_name is not None:
            descriptor = self._registry.resolve(db_type_name)
            converter = descriptor.converter
            element_type = descriptor.declared_array_kind
        elements = ArrayLiteralParser(text, converter, self.dialect.grammar).parse()
        return ArrayValue(elements, element_type)

    def convert(self, oid: int, text: Optional[str]) -> Any:
        """Convert a column value by OID; array OIDs yield ArrayValue instances."""
        return self._procs.convert(oid, text)

    def pg_array(self, value: Any, element_type: Optional[str] = None) -> ArrayValue:
        return pg_array(value, element_type)

    def literal(self, value: Any) -> str:
        """Render any supported value as an inline SQL literal."""
        if is_array_like(value):
            return self._serializer.literal(value)
        return literal_value(value, self.dialect)

    def auto_param_type(self, value: Any) -> Optional[str]:
        """Return the placeholder cast for an array value, or None to inline it."""
        return self._serializer.auto_param_type(value)

    def bound_variable_arg(self, value: Any) -> Any:
        """Return the bound-parameter form of a value."""
        if is_array_like(value):
            return self._bound_formatter.format(value)
        return bound_variable_arg(value)

    def typecast_value(self, schema_type: str, value: Any) -> ArrayValue:
        """Cast a value to a registered array schema type such as "integer_array".

        Raises:
            UnknownTypeError: If schema_type is not registered.
            InvalidValueError: If value is not an ArrayValue or list/tuple.
        """
        descriptor = self._registry.resolve_schema_type(schema_type)
        array_kind = descriptor.declared_array_kind
        if isinstance(value, ArrayValue):
            if value.element_type != array_kind:
                return value.with_type(array_kind)
            return value
        if isinstance(value, (list, tuple)):
            cast_kind = descriptor.scalar_cast_kind
            if cast_kind is not None:
                value = _recursive_map(value, lambda item: typecast_scalar(cast_kind, item))
            return ArrayValue(value, array_kind)
        raise InvalidValueError(f"invalid value for array type: {value!r}")

    def schema_array_type(self, db_type: str) -> Optional[str]:
        """Map a column db_type like "integer[]" to its schema type, or None."""
        match = _ARRAY_DB_TYPE.match(db_type)
        if match is None:
            return None
        return self._registry.schema_type_for(match.group(1))

    def schema_post_process(self, columns: Iterable[Tuple[str, dict]]) -> List[Tuple[str, dict]]:
        """Attach a callable_default to columns whose default is an empty typed array."""
        processed = list(columns)
        for _, info in processed:
            default = info.get("default")
            if not isinstance(default, str):
                continue
            match = _EMPTY_ARRAY_DEFAULT.match(default)
            if match:
                info["callable_default"] = _empty_array_factory(match.group(1))
        return processed

    def column_definition_default_sql(self, column: Mapping[str, Any]) -> Optional[str]:
        """Render the DEFAULT clause for a list-valued column default.

        Returns None when the default is not a list; the caller renders
        other defaults itself.
        """
        default = column.get("default")
        if not isinstance(default, (list, tuple)):
            return None
        literal = self.literal(pg_array(default))
        return self.dialect.column_default_sql(literal, str(column.get("type", "")))


def _recursive_map(values: Iterable[Any], func: Callable[[Any], Any]) -> list:
    return [_recursive_map(item, func) if is_array_like(item) else func(item) for item in values]


def _empty_array_factory(element_type: str) -> Callable[[], ArrayValue]:
    def _default() -> ArrayValue:
        return ArrayValue([], element_type)

    return _default
