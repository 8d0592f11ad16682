"""
Absolute time locks (the transaction `nLockTime` field).

A lock time value below LOCKTIME_THRESHOLD is a block height, a value above or equal to it
is a UNIX timestamp. LockHeight and LockTimestamp carry a value which is known to be of one
kind, so that the two can't be confused. Zero means no lock ("anytime") for both.
"""

from __future__ import annotations

import time
from functools import total_ordering

LOCKTIME_THRESHOLD = 500_000_000
U32_MAX = 0xFFFFFFFF


class InvalidTimelock(ValueError):
    """A lock time value is not in the range of the requested kind of lock."""

    def __init__(self, message: str):
        self.message: str = message


class LockTimeParseError(ValueError):
    """Error while parsing a lock time from its string representation."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message: str = message


class InvalidDescriptor(LockTimeParseError):
    """Neither '0', 'none', 'time(N)' nor 'height(N)'."""

    def __init__(self, lock_str: str):
        super().__init__(f"Invalid lock time descriptor: '{lock_str}'")
        self.lock_str: str = lock_str


class InvalidTimestamp(LockTimeParseError):
    def __init__(self, value: int):
        super().__init__(f"Invalid lock timestamp: {value}")
        self.value: int = value


class InvalidHeight(LockTimeParseError):
    def __init__(self, value: int):
        super().__init__(f"Invalid lock height: {value}")
        self.value: int = value


class InvalidNumber(LockTimeParseError):
    def __init__(self, num_str: str):
        super().__init__(f"Invalid lock time value: '{num_str}'")
        self.num_str: str = num_str


def parse_u32(num_str: str) -> int:
    # int() would also accept signs, underscores and whitespaces.
    if not num_str.isascii() or not num_str.isdigit():
        raise InvalidNumber(num_str)
    value = int(num_str)
    if value > U32_MAX:
        raise InvalidNumber(num_str)
    return value


def parse_lock(lock_str: str, prefix: str):
    """Parse the text form of a lock. Returns None for anytime, the integer otherwise."""
    lock_str = lock_str.lower()
    if lock_str in ("0", "none"):
        return None
    if lock_str.startswith(prefix + "(") and lock_str.endswith(")"):
        return parse_u32(lock_str[len(prefix) + 1 : -1])
    raise InvalidDescriptor(lock_str)


@total_ordering
class LockTime:
    """Any value of the `nLockTime` field."""

    def __init__(self, value: int):
        if not isinstance(value, int) or isinstance(value, bool):
            raise InvalidTimelock(f"Lock time must be an int, not '{value!r}'")
        if not 0 <= value <= U32_MAX:
            raise InvalidTimelock(f"{value} is not a 32 bits lock time value")
        self._value: int = value

    @classmethod
    def from_consensus(cls, value: int) -> LockTime:
        return cls(value)

    def to_consensus(self) -> int:
        return self._value

    def is_height_based(self) -> bool:
        return self._value < LOCKTIME_THRESHOLD

    def is_time_based(self) -> bool:
        return self._value >= LOCKTIME_THRESHOLD

    def __int__(self) -> int:
        return self._value

    def __repr__(self) -> str:
        return f"LockTime({self._value})"

    def __eq__(self, other) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._value == other._value

    def __lt__(self, other) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._value < other._value

    def __hash__(self) -> int:
        return hash((type(self), self._value))


class LockTimestamp(LockTime):
    """A lock time which is always either 0 or a UNIX timestamp greater than or equal to
    500000000 (0x1DCD6500)."""

    def __init__(self, value: int):
        super().__init__(value)
        if value != 0 and value < LOCKTIME_THRESHOLD:
            raise InvalidTimelock(f"{value} is not a lock timestamp")

    @classmethod
    def anytime(cls) -> LockTimestamp:
        return cls(0)

    @classmethod
    def since_now(cls) -> LockTimestamp:
        """A lock valid from the current time on."""
        return cls.from_unix_timestamp(int(time.time()))

    @classmethod
    def from_unix_timestamp(cls, timestamp: int) -> LockTimestamp:
        """Lock until the given UNIX timestamp, which must be at least 0x1DCD6500."""
        if timestamp < LOCKTIME_THRESHOLD:
            raise InvalidTimelock(f"{timestamp} is not a lock timestamp")
        return cls(timestamp)

    @classmethod
    def from_locktime(cls, lock_time: LockTime) -> LockTimestamp:
        assert isinstance(lock_time, LockTime)
        return cls.from_consensus(lock_time.to_consensus())

    def to_locktime(self) -> LockTime:
        return LockTime(self._value)

    @classmethod
    def from_str(cls, lock_str: str) -> LockTimestamp:
        """Parse '0', 'none' or 'time(N)'."""
        value = parse_lock(lock_str, "time")
        if value is None:
            return cls.anytime()
        try:
            return cls(value)
        except InvalidTimelock:
            raise InvalidTimestamp(value)

    def __str__(self) -> str:
        if self._value == 0:
            return "0"
        return f"time({self._value})"

    def __repr__(self) -> str:
        return f"LockTimestamp({self._value})"


class LockHeight(LockTime):
    """A lock time which is always a block height, strictly less than 500000000
    (0x1DCD6500)."""

    def __init__(self, value: int):
        super().__init__(value)
        if value >= LOCKTIME_THRESHOLD:
            raise InvalidTimelock(f"{value} is not a lock height")

    @classmethod
    def anytime(cls) -> LockHeight:
        return cls(0)

    @classmethod
    def from_height(cls, height: int) -> LockHeight:
        """Lock until the given block height, which must be less than 0x1DCD6500."""
        return cls(height)

    @classmethod
    def from_locktime(cls, lock_time: LockTime) -> LockHeight:
        assert isinstance(lock_time, LockTime)
        return cls.from_consensus(lock_time.to_consensus())

    def to_locktime(self) -> LockTime:
        return LockTime(self._value)

    @classmethod
    def from_str(cls, lock_str: str) -> LockHeight:
        """Parse '0', 'none' or 'height(N)'."""
        value = parse_lock(lock_str, "height")
        if value is None:
            return cls.anytime()
        try:
            return cls(value)
        except InvalidTimelock:
            raise InvalidHeight(value)

    def __str__(self) -> str:
        if self._value == 0:
            return "0"
        return f"height({self._value})"

    def __repr__(self) -> str:
        return f"LockHeight({self._value})"
