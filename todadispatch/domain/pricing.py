"""
Fare computation  (Strategy Pattern)
====================================

Formula
-------
Total_Fare = Fare_Per_Passenger x Passenger_Count

Fares are flat per passenger (no distance component, no surge); the
strategy seam exists so a terminal can switch to a flat per-trip fare
without touching the coordinator.

Complexity: O(1) per calculation.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from .errors import ValidationError


# ── Strategy hierarchy ────────────────────────────────────────────────


class FareStrategy(ABC):
    @abstractmethod
    def calculate(self, passenger_count: int, rate: float) -> float: ...


class PerPassengerFare(FareStrategy):
    def calculate(self, passenger_count: int, rate: float) -> float:
        return round(rate * passenger_count, 2)


class FlatTripFare(FareStrategy):
    """One fare for the whole trip, regardless of passengers."""

    def calculate(self, passenger_count: int, rate: float) -> float:
        return round(rate, 2)


# ── Facade ────────────────────────────────────────────────────────────


class FareCalculator:
    """Validates the inputs and delegates to the configured strategy."""

    def __init__(self, strategy: FareStrategy | None = None):
        self.strategy = strategy or PerPassengerFare()

    def total_fare(self, passenger_count: int, rate: float) -> float:
        if passenger_count < 1:
            raise ValidationError("Passenger count must be at least 1.")
        if rate <= 0:
            raise ValidationError("Fare must be greater than zero.")
        return self.strategy.calculate(passenger_count, rate)
