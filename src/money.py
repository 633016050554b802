from decimal import Context, Decimal, Inexact, InvalidOperation, Overflow, localcontext

ZERO = Decimal("0")

# Balances are kept exact: any operation that would round raises Inexact instead.
MONEY_CONTEXT = Context(prec=28, traps=[Inexact, InvalidOperation, Overflow])


def fits_precision(amount: Decimal) -> bool:
    return len(amount.as_tuple().digits) <= MONEY_CONTEXT.prec


def parse_amount(text: str) -> Decimal:
    """Parse a textual amount exactly. Raises ValueError for anything that isn't a finite number."""
    text = text.strip()
    if not text:
        raise ValueError("empty amount")

    try:
        amount = Decimal(text)
    except InvalidOperation:
        raise ValueError(f"invalid amount {text!r}") from None

    if not amount.is_finite():
        raise ValueError(f"non-finite amount {text!r}")
    if not fits_precision(amount):
        raise ValueError(f"amount {text!r} has more than {MONEY_CONTEXT.prec} significant digits")
    return amount


def add(a: Decimal, b: Decimal) -> Decimal:
    with localcontext(MONEY_CONTEXT):
        return a + b


def subtract(a: Decimal, b: Decimal) -> Decimal:
    with localcontext(MONEY_CONTEXT):
        return a - b


def format_amount(value: Decimal) -> str:
    """Format decimal in plain notation, removing trailing zeros."""
    if value == ZERO:
        return "0"
    normalized = value.normalize(MONEY_CONTEXT)
    return f"{normalized:f}"
