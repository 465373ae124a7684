"""Deterministic timestamp and nonce sources for reproducing signatures."""

from typing import Iterable, List


class FixedClock:
    """Always returns the same timestamp."""

    def __init__(self, timestamp: int) -> None:
        self.timestamp = timestamp

    def __call__(self) -> int:
        return self.timestamp


class SteppingClock:
    """Returns ``start``, ``start + step``, ... on successive calls."""

    def __init__(self, start: int, step: int = 1) -> None:
        self._next = start
        self._step = step

    def __call__(self) -> int:
        value = self._next
        self._next += self._step
        return value


class SequenceNonce:
    """Returns the given nonces in order; raises once exhausted."""

    def __init__(self, nonces: Iterable[str]) -> None:
        self._nonces: List[str] = list(nonces)
        self.issued: List[str] = []

    def __call__(self) -> str:
        if not self._nonces:
            raise RuntimeError("SequenceNonce exhausted")
        nonce = self._nonces.pop(0)
        self.issued.append(nonce)
        return nonce
