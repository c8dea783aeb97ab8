"""Ошибки поиска корней полинома.

Эти исключения означают нарушение контракта компонента (пустой или
вырожденный полином, неподдерживаемая точность, сбой линейной алгебры),
а не свойство записанной речи.
"""


class PolynomialError(Exception):
    """Базовая ошибка поиска корней."""

    label = "Polynomial error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.label}: {self.message}"


class InvalidInput(PolynomialError):
    label = "Invalid input"


class NumericalBackendError(PolynomialError):
    label = "Numerical backend error"


class UnsupportedPrecision(PolynomialError):
    label = "Unsupported precision"


class NumericalInstability(PolynomialError):
    label = "Numerical instability"
