"""Display formatting utilities"""


def format_amount(value: float) -> str:
    """Group thousands, dropping the fraction for whole amounts (12000.0 -> '12,000')"""
    if float(value).is_integer():
        return f"{int(value):,}"
    return f"{value:,.2f}"


def format_azn(value: float) -> str:
    """Format a manat amount for messages"""
    return f"{format_amount(value)} AZN"
