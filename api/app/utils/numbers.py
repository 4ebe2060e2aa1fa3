"""
Column value normalisation shared by the storage backends
"""
from decimal import Decimal
from typing import Any, Dict

from sqlalchemy import Float, Numeric


def column_value(model, field: str, value):
    """
    `value` as the database would hand it back: Numeric columns become
    Decimals quantized to the column's scale ("1500" -> Decimal("1500.00")).
    """
    column = model.__table__.columns.get(field)
    if value is None or column is None:
        return value
    if not isinstance(column.type, Numeric) or isinstance(column.type, Float):
        return value

    value = Decimal(str(value))
    if column.type.scale is not None:
        value = value.quantize(Decimal(1).scaleb(-column.type.scale))
    return value


def column_values(model, data: Dict[str, Any]) -> Dict[str, Any]:
    return {field: column_value(model, field, value) for field, value in data.items()}
