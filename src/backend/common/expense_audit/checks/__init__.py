from .forbidden_category import FORBIDDEN_CATEGORY
from .max_amount import MAX_AMOUNT
from .required_field import REQUIRED_FIELD
from .weekend_ban import WEEKEND_BAN

__all__ = [
    "FORBIDDEN_CATEGORY",
    "MAX_AMOUNT",
    "WEEKEND_BAN",
    "REQUIRED_FIELD",
]
