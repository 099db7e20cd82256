"""Shared utilities for pandas conversion operations."""

from datetime import datetime
from decimal import Decimal
from numbers import Real

import pandas as pd  # type: ignore


def decimal_to_float(value: Decimal) -> float:
    """Convert Decimal to float for pandas compatibility."""
    return float(value)


def float_to_decimal(value: float) -> Decimal:
    """Convert a numeric cell back to Decimal via its shortest repr.

    Warning:
        Floats with >15 significant digits may lose precision. Money
        columns holding cents round-trip exactly.

    Raises:
        TypeError: If value is not numeric

    Example:
        >>> float_to_decimal(85.5)
        Decimal('85.5')
    """
    if isinstance(value, bool) or not isinstance(value, Real):
        raise TypeError(f"Expected numeric type, got {type(value)}")
    return Decimal(str(value))


def to_pydatetime(value: object) -> datetime:
    """Convert a pandas timestamp cell to a plain ``datetime``."""
    return pd.to_datetime(value).to_pydatetime()


def require_columns(df: pd.DataFrame, required_cols: list[str], what: str) -> None:
    """Raise ValueError when columns are missing or hold nulls."""
    missing_cols = set(required_cols) - set(df.columns)
    if missing_cols:
        raise ValueError(f"DataFrame missing required columns: {missing_cols}")

    if df.empty:
        return

    null_cols = df[required_cols].isnull().any()
    if null_cols.any():
        null_col_names = null_cols[null_cols].index.tolist()
        raise ValueError(
            f"Null/NaN values found in columns: {null_col_names}. "
            f"{what} require complete data."
        )
