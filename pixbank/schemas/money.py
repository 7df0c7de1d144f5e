from decimal import Decimal
from typing import Annotated

from pydantic import Field, PlainSerializer

from pixbank.services.balance import to_money

# Fixed-point amount rendered as a 2-digit string ("46.00"), never a float
Money = Annotated[
    Decimal,
    PlainSerializer(lambda v: str(to_money(v)), return_type=str, when_used="json"),
]

# Incoming amounts: at most two fractional digits
AmountIn = Annotated[Decimal, Field(max_digits=12, decimal_places=2)]
