# Copyright 2026 Pramod Kumar Voola
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

# -----------------------------------------------------------------------------
# VESTING MATH - REFERENCE MODEL OF THE TokenVesting CONTRACT
# -----------------------------------------------------------------------------
# Mirrors what the deployed TokenVesting template computes, so the schedule
# rules can be checked without a chain.
#
# total_ever_held = current balance + already released. Tokens that arrive
# after construction therefore raise the vested amount (top-ups accelerate
# the schedule). This matches the contract and is kept as-is.
# -----------------------------------------------------------------------------

from collections.abc import Callable
from dataclasses import dataclass


class NothingToRelease(Exception):
    """release() called while nothing is releasable."""

    pass


@dataclass(frozen=True)
class VestingSchedule:
    """start (unix seconds), cliff and duration (seconds)."""

    start: int
    cliff: int
    duration: int

    def __post_init__(self) -> None:
        if self.duration <= 0:
            raise ValueError("duration must be greater than zero")
        if self.cliff > self.duration:
            raise ValueError("cliff must not exceed duration")

    def vested(self, total_ever_held: int, timestamp: int) -> int:
        if timestamp < self.start + self.cliff:
            return 0
        if timestamp >= self.start + self.duration:
            return total_ever_held
        return total_ever_held * (timestamp - self.start) // self.duration


class VestingLedger:
    """
    Token balance and released counter of one vesting contract.

    `transfer` moves tokens to the beneficiary and raises on failure.
    """

    def __init__(
        self,
        schedule: VestingSchedule,
        balance: int = 0,
        transfer: Callable[[int], None] | None = None,
    ) -> None:
        self.schedule = schedule
        self.balance = balance
        self.released = 0
        self._transfer = transfer

    @property
    def total_ever_held(self) -> int:
        return self.balance + self.released

    def deposit(self, amount: int) -> None:
        if amount < 0:
            raise ValueError("deposit must be non-negative")
        self.balance += amount

    def vested(self, timestamp: int) -> int:
        return self.schedule.vested(self.total_ever_held, timestamp)

    def releasable(self, timestamp: int) -> int:
        return self.vested(timestamp) - self.released

    def release(self, now: int) -> int:
        """
        Release everything currently releasable.

        The transfer happens before any state changes; if it raises,
        `released` and `balance` are left untouched.

        Raises:
            NothingToRelease: releasable(now) == 0.
        """
        amount = self.releasable(now)
        if amount == 0:
            raise NothingToRelease("no tokens are due")

        if self._transfer is not None:
            self._transfer(amount)

        self.released += amount
        self.balance -= amount
        return amount
