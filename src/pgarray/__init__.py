"""Array literal parsing and serialization for PostgreSQL and Redshift."""

from pgarray.aggregates import Median, StringAgg, median_sql, string_agg_sql
from pgarray.bound import BoundVariableFormatter, bound_variable_array, quote_array_member
from pgarray.catalog import (
    CatalogLookup,
    CatalogSnapshot,
    fetch_catalog_snapshot,
    load_catalog_snapshot,
)
from pgarray.config import ArraySettings, get_env_bool, get_env_float, get_env_str
from pgarray.conversion import (
    SCALAR_TYPECASTS,
    ConversionProcs,
    default_conversion_procs,
    typecast_scalar,
)
from pgarray.database import ArrayDatabase
from pgarray.dialect import (
    POSTGRES,
    REDSHIFT,
    ArrayDialect,
    get_dialect,
    normalize_dialect,
)
from pgarray.errors import (
    ArrayError,
    CatalogLookupError,
    ConfigurationError,
    FrozenRegistryError,
    InvalidValueError,
    MalformedArrayError,
    UnknownTypeError,
    UnterminatedArrayError,
)
from pgarray.literal import Raw, bound_variable_arg, literal_value, scalar_auto_param_type
from pgarray.parser import (
    BRACE_GRAMMAR,
    BRACKET_GRAMMAR,
    ArrayGrammar,
    ArrayLiteralParser,
    parse_array,
)
from pgarray.registry import (
    BUILTIN_ARRAY_TYPES,
    REDSHIFT_ARRAY_TYPES,
    TypeDescriptor,
    TypeRegistry,
    register_builtin_types,
)
from pgarray.serializer import ArrayLiteralSerializer, array_auto_param_type, array_literal
from pgarray.tracing import trace_catalog_operation, trace_enabled
from pgarray.value import ArrayCreator, ArrayValue, ElementKind, classify_element, pg_array

__all__ = [
    "ArrayCreator",
    "ArrayDatabase",
    "ArrayDialect",
    "ArrayError",
    "ArrayGrammar",
    "ArrayLiteralParser",
    "ArrayLiteralSerializer",
    "ArraySettings",
    "ArrayValue",
    "BRACE_GRAMMAR",
    "BRACKET_GRAMMAR",
    "BUILTIN_ARRAY_TYPES",
    "BoundVariableFormatter",
    "CatalogLookup",
    "CatalogLookupError",
    "CatalogSnapshot",
    "ConfigurationError",
    "ConversionProcs",
    "ElementKind",
    "FrozenRegistryError",
    "InvalidValueError",
    "MalformedArrayError",
    "Median",
    "POSTGRES",
    "REDSHIFT",
    "REDSHIFT_ARRAY_TYPES",
    "Raw",
    "SCALAR_TYPECASTS",
    "StringAgg",
    "TypeDescriptor",
    "TypeRegistry",
    "UnknownTypeError",
    "UnterminatedArrayError",
    "array_auto_param_type",
    "array_literal",
    "bound_variable_arg",
    "bound_variable_array",
    "classify_element",
    "default_conversion_procs",
    "fetch_catalog_snapshot",
    "get_dialect",
    "get_env_bool",
    "get_env_float",
    "get_env_str",
    "literal_value",
    "load_catalog_snapshot",
    "median_sql",
    "normalize_dialect",
    "parse_array",
    "pg_array",
    "quote_array_member",
    "register_builtin_types",
    "scalar_auto_param_type",
    "string_agg_sql",
    "trace_catalog_operation",
    "trace_enabled",
    "typecast_scalar",
]
