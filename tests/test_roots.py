import logging

import numpy as np
import pytest

from formant_analyzer import constants
from formant_analyzer.exceptions import (
    InvalidInput,
    NumericalBackendError,
    NumericalInstability,
    PolynomialError,
    UnsupportedPrecision,
)
import formant_analyzer.models.formant.roots as roots_module
from formant_analyzer.models.formant.roots import (
    evaluate_polynomial,
    find_roots,
    find_roots_companion,
    find_roots_laguerre,
    laguerre_root,
    prepare_coefficients,
    sort_roots,
)

METHODS = ["companion", "laguerre"]


def _ascending(roots):
    return np.poly(roots)[::-1]


@pytest.mark.parametrize("method", METHODS)
def test_complex_quadratic(method):
    # (z - 0.5)(z - 0.3i)
    coefficients = np.array([0.15j, -(0.5 + 0.3j), 1.0])

    roots = find_roots(coefficients, method=method)

    np.testing.assert_allclose(roots, [0.5, 0.3j], atol=1e-6)


@pytest.mark.parametrize("method", METHODS)
def test_conjugate_pairs_sorted_by_angle(method):
    known = [0.9 * np.exp(1j * 0.3), 0.9 * np.exp(-1j * 0.3), 0.8 * np.exp(1j * 1.2), 0.8 * np.exp(-1j * 1.2)]

    roots = find_roots(np.real(_ascending(known)), method=method)

    np.testing.assert_allclose(roots, sort_roots(known), atol=1e-8)
    assert np.all(np.diff(np.angle(roots)) >= 0)


def test_methods_agree_on_lpc_polynomial():
    coefficients = np.array([1.0, -1.999524, 0.743812, 0.248833, 0.135208, 0.152699,
                             -0.069143, -0.285817, -0.113623, 0.189982])[::-1]

    companion = find_roots(coefficients, method="companion")
    laguerre = find_roots(coefficients, method="laguerre")

    assert companion.size == laguerre.size == 9
    for root in companion:
        assert np.min(np.abs(laguerre - root)) < 1e-6


@pytest.mark.parametrize("method", METHODS)
def test_roots_satisfy_polynomial(method):
    coefficients = np.array([2.0, -3.0, 0.5, 1.0, 4.0])

    for root in find_roots(coefficients, method=method):
        assert abs(evaluate_polynomial(coefficients, root)) < 1e-8


def test_leading_near_zero_coefficients_are_trimmed():
    roots = find_roots(np.array([-1.0, 1.0, 1e-17]), method="companion")

    np.testing.assert_allclose(roots, [1.0])


def test_single_precision_input_is_accepted():
    roots = find_roots(np.array([-2.0, 1.0], dtype=np.float32))

    np.testing.assert_allclose(roots, [2.0])


@pytest.mark.parametrize("coefficients", [
    np.array([]),
    np.array([1.0]),
    np.array([0.0, 0.0, 0.0]),
    np.array([1.0, np.nan]),
    np.array([1.0, 0.0, 1e-20]),
])
def test_invalid_input(coefficients):
    with pytest.raises(InvalidInput):
        prepare_coefficients(coefficients)


def test_unsupported_precision():
    with pytest.raises(UnsupportedPrecision):
        find_roots(np.array([1, 2], dtype=object))


def test_backend_failure_is_wrapped(monkeypatch):
    import scipy.linalg

    def failing_eigvals(matrix):
        raise np.linalg.LinAlgError("did not converge")

    monkeypatch.setattr(scipy.linalg, "eigvals", failing_eigvals)

    with pytest.raises(NumericalBackendError):
        find_roots(np.array([1.0, 0.0, 1.0]), method="companion")


def test_error_messages_carry_label():
    error = InvalidInput("Empty coefficient array")

    assert isinstance(error, PolynomialError)
    assert str(error) == "Invalid input: Empty coefficient array"


def test_unknown_method():
    with pytest.raises(ValueError):
        find_roots(np.array([1.0, 1.0]), method="bairstow")


def test_laguerre_root_converges_from_guess():
    root, converged = laguerre_root(np.array([-4.0, 0.0, 1.0], dtype=np.complex128), 1.5 + 0j)

    assert converged
    assert root == pytest.approx(2.0)


# (z - 1)(z - 2)(z - 3); первый шаг Лагерра из нуля даёт z ≈ 0.988408
CUBIC = np.array([-6.0, 11.0, -6.0, 1.0], dtype=np.complex128)


def test_laguerre_root_returns_last_estimate_when_iterations_run_out(monkeypatch, caplog):
    monkeypatch.setattr(constants, "LAGUERRE_MAX_ITERATIONS", 1)

    with caplog.at_level(logging.WARNING):
        root, converged = laguerre_root(CUBIC)

    assert converged is False
    assert root == pytest.approx(0.988408, rel=1e-5)
    assert any(record.levelno == logging.WARNING and record.name == "roots" for record in caplog.records)


def test_laguerre_breakout_step_uses_cycle_fraction(monkeypatch):
    monkeypatch.setattr(constants, "LAGUERRE_MAX_ITERATIONS", 1)
    monkeypatch.setattr(constants, "LAGUERRE_STEPS_PER_CYCLE", 1)
    monkeypatch.setattr(constants, "LAGUERRE_BREAKOUT_FRACTIONS", (0.0, 0.5))

    root, converged = laguerre_root(CUBIC)

    assert converged is False
    assert root == pytest.approx(0.5 * 0.988408, rel=1e-5)


def test_laguerre_breakout_step_with_zero_fraction_stays_in_place(monkeypatch):
    monkeypatch.setattr(constants, "LAGUERRE_MAX_ITERATIONS", 3)
    monkeypatch.setattr(constants, "LAGUERRE_STEPS_PER_CYCLE", 1)
    monkeypatch.setattr(constants, "LAGUERRE_BREAKOUT_FRACTIONS", (0.0,) * 4)

    root, converged = laguerre_root(CUBIC, 0.25 + 0j)

    assert converged is False
    assert root == 0.25 + 0j


@pytest.mark.parametrize("imag, snapped", [(1e-9, True), (1e-3, False)])
def test_laguerre_snaps_tiny_imaginary_part(monkeypatch, imag, snapped):
    found = complex(2.0, imag)

    def fake_laguerre_root(polynomial, guess=0j):
        # Уточнение возвращает начальное приближение без изменений
        return (guess if guess else found), True

    monkeypatch.setattr(roots_module, "laguerre_root", fake_laguerre_root)

    roots = find_roots_laguerre(np.array([-2.0, 1.0]))

    assert roots.size == 1
    assert roots[0].real == 2.0
    if snapped:
        assert roots[0].imag == 0.0
    else:
        assert roots[0].imag == imag


def test_companion_drops_roots_with_large_residual(caplog):
    # Полином Уилкинсона степени 20: коэффициенты до 20! ≈ 2.4e18
    wilkinson = np.poly(np.arange(1, 21, dtype=np.float64))[::-1]

    with caplog.at_level(logging.WARNING):
        roots = find_roots_companion(wilkinson)

    assert roots.size < 20
    assert any(record.levelno == logging.WARNING and record.name == "roots" for record in caplog.records)


def test_companion_non_finite_normalization():
    # Старший коэффициент выше порога отсечения, но деление переполняется
    coefficients = np.array([1.2e308 + 1.2e308j, 1e294 + 1e294j])

    with pytest.raises(NumericalInstability):
        find_roots_companion(coefficients)
