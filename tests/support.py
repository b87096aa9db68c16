import functools
from typing import Iterator, Optional


class Audited:
    """Marker for audited operations."""


class StringList:
    def __init__(self, *items: str):
        self._items = list(items)

    def size(self) -> int:
        return len(self._items)

    def get(self, index: int) -> str:
        return self._items[index]

    def add(self, item: str) -> None:
        self._items.append(item)

    def stream(self) -> Iterator[str]:
        return iter(self._items)

    def find(self, item: str) -> Optional[int]:
        return self._items.index(item) if item in self._items else None

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, item: object) -> bool:
        return item in self._items

    def __str__(self) -> str:
        return "[" + ", ".join(self._items) + "]"


class Counter:
    def __init__(self):
        self.value = 0

    def next(self) -> int:
        self.value += 1
        return self.value

    def fail(self) -> int:
        raise ValueError("counter failure")


class Account:
    def __init__(self, balance: int = 0):
        self._balance = balance

    @property
    def balance(self) -> int:
        return self._balance

    def deposit(self, amount: int) -> int:
        self._balance += amount
        return self._balance


class Report:
    def __init__(self):
        self.computed = 0

    @functools.cached_property
    def total(self) -> int:
        self.computed += 1
        return 42


class Service:
    def __init__(self):
        self.closed = False

    async def fetch(self) -> int:
        return 10

    async def load(self, key: str) -> str:
        return key.upper()

    async def close(self) -> None:
        self.closed = True
