from abc import ABC, abstractmethod
from typing import TypeVar, Generic, Callable

from savings.domain import Goal, LedgerState
from savings.errors import LedgerError, InvalidAmount, InsufficientFunds, GoalNotFound

T = TypeVar('T')
U = TypeVar('U')
E = TypeVar('E')


class Maybe(Generic[T], ABC):

    @abstractmethod
    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def is_some(self) -> bool:
        pass

    def is_none(self) -> bool:
        return not self.is_some()


class Some(Maybe[T]):

    def __init__(self, value: T):
        self._value = value

    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        return Some(f(self._value))

    def get_or_else(self, default: T) -> T:
        return self._value

    def is_some(self) -> bool:
        return True

    def to_either(self, error) -> 'Either':
        return Right(self._value)

    def __repr__(self) -> str:
        return f"Some({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Some) and self._value == other._value


class Nothing(Maybe[T]):

    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        return Nothing()

    def get_or_else(self, default: T) -> T:
        return default

    def is_some(self) -> bool:
        return False

    def to_either(self, error) -> 'Either':
        return Left(error)

    def __repr__(self) -> str:
        return "Nothing()"

    def __eq__(self, other) -> bool:
        return isinstance(other, Nothing)


class Either(Generic[E, T], ABC):

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

    @abstractmethod
    def get_error(self) -> E:
        pass

    @abstractmethod
    def unwrap(self) -> T:
        """Return the value, raising the error if it is an exception."""

    def is_left(self) -> bool:
        return not self.is_right()


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

    def unwrap(self) -> T:
        return self._value

    def __repr__(self) -> str:
        return f"Right({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Right) and self._value == other._value


class Left(Either[E, T]):

    def __init__(self, error: E):
        self._error = error

    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        return self

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return self

    def get_or_else(self, default: T) -> T:
        return default

    def is_right(self) -> bool:
        return False

    def get_error(self) -> E:
        return self._error

    def unwrap(self) -> T:
        if isinstance(self._error, BaseException):
            raise self._error
        raise ValueError(self._error)

    def __repr__(self) -> str:
        return f"Left({self._error!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Left) and self._error == other._error


def safe_goal(goals: tuple[Goal, ...], goal_id: str) -> Maybe[Goal]:
    for goal in goals:
        if goal.id == goal_id:
            return Some(goal)
    return Nothing()


def validate_amount(amount, minimum: int = 1) -> Either[LedgerError, int]:
    # bool is an int subclass but never a valid amount
    if amount is None or isinstance(amount, bool) or not isinstance(amount, int):
        return Left(InvalidAmount("Please enter a valid amount", amount=amount))
    if amount <= 0:
        return Left(InvalidAmount("Please enter a valid amount", amount=amount))
    if amount < minimum:
        return Left(InvalidAmount(
            f"Minimum amount is {minimum}",
            amount=amount,
            minimum=minimum,
        ))
    return Right(amount)


def check_funds(balance: int, amount: int, fee: int = 0) -> Either[LedgerError, int]:
    required = amount + fee
    if required > balance:
        return Left(InsufficientFunds(
            "Insufficient balance" + (f" (including {fee} fee)" if fee else ""),
            balance=balance,
            amount=amount,
            fee=fee,
            required=required,
        ))
    return Right(amount)


def validate_deposit(state: LedgerState, amount, minimum: int) -> Either[LedgerError, int]:
    return validate_amount(amount, minimum)


def validate_withdrawal(state: LedgerState, amount, fee: int) -> Either[LedgerError, int]:
    return validate_amount(amount).bind(
        lambda a: check_funds(state.account.balance, a, fee)
    )


def validate_contribution(
    state: LedgerState, goal_id: str, amount
) -> Either[LedgerError, tuple[Goal, int]]:
    found = safe_goal(state.goals, goal_id).to_either(
        GoalNotFound(f"Goal with ID {goal_id} does not exist", goal_id=goal_id)
    )
    return found.bind(
        lambda goal: validate_amount(amount)
        .bind(lambda a: check_funds(state.account.balance, a))
        .map(lambda a: (goal, a))
    )
