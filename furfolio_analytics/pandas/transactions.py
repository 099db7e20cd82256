"""Pandas DataFrame adapters for transactions."""

from typing import Iterable, List

import pandas as pd  # type: ignore

from furfolio_analytics.foundation.records import Transaction, TransactionCategory
from ._utils import decimal_to_float, float_to_decimal, require_columns, to_pydatetime

TRANSACTION_COLUMNS = [
    "transaction_id",
    "date",
    "amount",
    "category",
    "owner_id",
    "notes",
]


def transactions_to_dataframe(transactions: Iterable[Transaction]) -> pd.DataFrame:
    """Convert transactions to a pandas DataFrame.

    Args:
        transactions: Transactions in any order

    Returns:
        DataFrame with columns: transaction_id, date, amount (float),
        category (enum value), owner_id, notes. Rows keep input order.

    Example:
        >>> txn_df = transactions_to_dataframe(owner.transactions)
        >>> txn_df.groupby("category")["amount"].sum()
    """
    rows = [
        {
            "transaction_id": txn.transaction_id,
            "date": txn.date,
            "amount": decimal_to_float(txn.amount),
            "category": txn.category.value,
            "owner_id": txn.owner_id,
            "notes": txn.notes,
        }
        for txn in transactions
    ]
    if not rows:
        return pd.DataFrame(columns=TRANSACTION_COLUMNS)
    return pd.DataFrame(rows, columns=TRANSACTION_COLUMNS)


def dataframe_to_transactions(
    txn_df: pd.DataFrame,
    transaction_id_col: str = "transaction_id",
    date_col: str = "date",
    amount_col: str = "amount",
    category_col: str = "category",
    owner_id_col: str = "owner_id",
    notes_col: str = "notes",
) -> List[Transaction]:
    """Convert a pandas DataFrame to validated transactions.

    The notes column is optional; every other column is required and must
    not contain nulls. Category cells hold enum values such as
    ``"full_groom"``.

    Raises:
        ValueError: If required columns are missing, hold nulls, or a
            category is unknown

    Example with custom column names:
        >>> txns = dataframe_to_transactions(
        ...     pos_export,
        ...     transaction_id_col="receipt",
        ...     amount_col="total",
        ... )
    """
    required_cols = [
        transaction_id_col,
        date_col,
        amount_col,
        category_col,
        owner_id_col,
    ]
    require_columns(txn_df, required_cols, "Transactions")
    if txn_df.empty:
        return []

    has_notes = notes_col in txn_df.columns
    transactions = []
    for record in txn_df.to_dict("records"):
        notes = record[notes_col] if has_notes else None
        transactions.append(
            Transaction(
                transaction_id=str(record[transaction_id_col]),
                date=to_pydatetime(record[date_col]),
                amount=float_to_decimal(record[amount_col]),
                category=TransactionCategory(record[category_col]),
                owner_id=str(record[owner_id_col]),
                notes=None if pd.isna(notes) else str(notes),
            )
        )

    return transactions
