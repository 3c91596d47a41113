"""Feature table and column schema."""

from .schema import (
    ColumnKind, ColumnSpec, FeatureTable, infer_schema, numeric_columns,
    DEFAULT_TITANIC_SCHEMA
)
