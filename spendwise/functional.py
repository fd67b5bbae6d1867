import math
from abc import ABC, abstractmethod
from typing import Any, Callable, Generic, Tuple, TypeVar

from spendwise.domain import Category

T = TypeVar('T')
U = TypeVar('U')
E = TypeVar('E')


class Maybe(Generic[T], ABC):

    @abstractmethod
    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        pass

    @abstractmethod
    def bind(self, f: Callable[[T], 'Maybe[U]']) -> 'Maybe[U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    def is_some(self) -> bool:
        return not self.is_none()

    @abstractmethod
    def is_none(self) -> bool:
        pass


class Some(Maybe[T]):

    def __init__(self, value: T):
        self._value = value

    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        return Some(f(self._value))

    def bind(self, f: Callable[[T], 'Maybe[U]']) -> 'Maybe[U]':
        return f(self._value)

    def get_or_else(self, default: T) -> T:
        return self._value

    def is_none(self) -> bool:
        return False

    def __repr__(self) -> str:
        return f"Some({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Some) and self._value == other._value


class Nothing(Maybe[T]):

    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        return Nothing()

    def bind(self, f: Callable[[T], 'Maybe[U]']) -> 'Maybe[U]':
        return Nothing()

    def get_or_else(self, default: T) -> T:
        return default

    def is_none(self) -> bool:
        return True

    def __repr__(self) -> str:
        return "Nothing()"

    def __eq__(self, other) -> bool:
        return isinstance(other, Nothing)


class Either(Generic[E, T], ABC):
    """Right carries a value, Left carries an error dict with "error" and "message" keys."""

    @abstractmethod
    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        pass

    @abstractmethod
    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def is_right(self) -> bool:
        pass

    def is_left(self) -> bool:
        return not self.is_right()

    @abstractmethod
    def get_error(self) -> E:
        pass


class Right(Either[E, T]):

    def __init__(self, value: T):
        self._value = value

    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        return Right(f(self._value))

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return f(self._value)

    def get_or_else(self, default: T) -> T:
        return self._value

    def is_right(self) -> bool:
        return True

    def get_error(self) -> E:
        raise ValueError("Cannot get error from Right")

    def __repr__(self) -> str:
        return f"Right({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Right) and self._value == other._value


class Left(Either[E, T]):

    def __init__(self, error: E):
        self._error = error

    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        return Left(self._error)

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return Left(self._error)

    def get_or_else(self, default: T) -> T:
        return default

    def is_right(self) -> bool:
        return False

    def get_error(self) -> E:
        return self._error

    def __repr__(self) -> str:
        return f"Left({self._error!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Left) and self._error == other._error


INVALID_AMOUNT_MESSAGE = "Please enter a valid amount."
INVALID_INCOME_MESSAGE = "Please enter a valid monthly income."
SAME_CURRENCY_MESSAGE = "Please select different currencies for conversion."


def parse_amount(raw: Any) -> Maybe[float]:
    """Read a user-entered amount; only finite numbers greater than zero are accepted."""
    if isinstance(raw, bool) or raw is None:
        return Nothing()
    try:
        value = float(str(raw).strip()) if isinstance(raw, str) else float(raw)
    except (TypeError, ValueError):
        return Nothing()
    if not math.isfinite(value) or value <= 0:
        return Nothing()
    return Some(value)


def validate_expense_input(name: Any, amount: Any, category: Any) -> Either[dict, Tuple[str, float, Category]]:
    clean_name = str(name or "").strip()
    if not clean_name:
        return Left({
            "error": "invalid_name",
            "message": "Please enter a name for the expense.",
        })

    parsed = parse_amount(amount)
    if parsed.is_none():
        return Left({
            "error": "invalid_amount",
            "message": INVALID_AMOUNT_MESSAGE,
            "amount": amount,
        })

    try:
        cat = Category(category)
    except ValueError:
        return Left({
            "error": "invalid_category",
            "message": f"Unknown category {category}",
            "category": category,
        })

    return Right((clean_name, parsed.get_or_else(0.0), cat))


def validate_income(raw: Any) -> Either[dict, float]:
    parsed = parse_amount(raw)
    if parsed.is_none():
        return Left({
            "error": "invalid_income",
            "message": INVALID_INCOME_MESSAGE,
            "income": raw,
        })
    return Right(parsed.get_or_else(0.0))


def validate_conversion(amount: Any, from_currency: str, to_currency: str) -> Either[dict, float]:
    """Guards the converter form runs before asking for a rate."""
    parsed = parse_amount(amount)
    if parsed.is_none():
        return Left({
            "error": "invalid_amount",
            "message": INVALID_AMOUNT_MESSAGE,
            "amount": amount,
        })
    if from_currency == to_currency:
        return Left({
            "error": "same_currency",
            "message": SAME_CURRENCY_MESSAGE,
            "currency": from_currency,
        })
    return Right(parsed.get_or_else(0.0))
