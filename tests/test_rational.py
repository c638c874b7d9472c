import math
import unittest
from fractions import Fraction

import numpy as np

from fraccalc import (
    ParseError,
    Rational,
    add,
    as_rational_array,
    divide,
    format_rational,
    multiply,
    normalize,
    parse,
    rationalize,
    subtract,
    to_decimal,
    to_decimal_array,
)


def components(value):
    return value.numerator, value.denominator


class NormalizeTests(unittest.TestCase):
    def test_reduces_to_lowest_terms(self):
        self.assertEqual(components(normalize(10, 20)), (1, 2))
        self.assertEqual(components(Rational(10, 20)), (1, 2))

    def test_sign_folds_into_numerator(self):
        self.assertEqual(components(normalize(3, -4)), (-3, 4))
        self.assertEqual(components(normalize(-3, -4)), (3, 4))
        self.assertEqual(components(normalize(-6, 8)), (-3, 4))

    def test_zero_numerator_reduces_to_zero_over_one(self):
        self.assertEqual(components(normalize(0, 7)), (0, 1))
        self.assertEqual(components(normalize(0, -7)), (0, 1))

    def test_invariants_hold_over_a_grid(self):
        for n in range(-12, 13):
            for d in range(-12, 13):
                if d == 0:
                    continue
                value = normalize(n, d)
                self.assertGreater(value.denominator, 0)
                self.assertEqual(math.gcd(abs(value.numerator), value.denominator), 1)
                self.assertEqual(Fraction(value.numerator, value.denominator), Fraction(n, d))

    def test_idempotent(self):
        for n, d in [(4, 6), (-9, 3), (7, -21), (0, 5), (13, 1)]:
            once = normalize(n, d)
            twice = normalize(once.numerator, once.denominator)
            self.assertEqual(components(twice), components(once))
            self.assertIs(once.normalized(), once)

    def test_zero_denominator_passes_through(self):
        self.assertEqual(components(normalize(5, 0)), (5, 0))
        self.assertEqual(components(normalize(-5, 0)), (-5, 0))
        self.assertTrue(normalize(5, 0).is_degenerate)

    def test_zero_over_zero_is_returned_unchanged(self):
        self.assertEqual(components(normalize(0, 0)), (0, 0))

    def test_large_intermediate_values_stay_exact(self):
        value = Rational(1, 3)
        for _ in range(40):
            value = multiply(value, Rational(3**20 + 1, 3**20))
        self.assertEqual(value.as_fraction(), Fraction(1, 3) * Fraction(3**20 + 1, 3**20) ** 40)

    def test_constructor_rejects_non_integers(self):
        with self.assertRaises(TypeError):
            Rational(1.5, 2)

    def test_raw_keeps_components(self):
        value = Rational.raw(2, -4)
        self.assertEqual(components(value), (2, -4))
        self.assertFalse(value.is_normalized)
        self.assertEqual(components(value.normalized()), (-1, 2))


class ArithmeticTests(unittest.TestCase):
    def test_literal_cases(self):
        self.assertEqual(components(add(Rational(1, 2), Rational(1, 3))), (5, 6))
        self.assertEqual(components(subtract(Rational(1, 2), Rational(1, 3))), (1, 6))
        self.assertEqual(components(multiply(Rational(2, 3), Rational(3, 4))), (1, 2))
        self.assertEqual(components(divide(Rational(1, 2), Rational(1, 4))), (2, 1))

    def test_unnormalized_operands(self):
        result = add(Rational.raw(2, 4), Rational.raw(1, -3))
        self.assertEqual(components(result), (1, 6))

    def test_operands_are_not_mutated(self):
        a = Rational(1, 2)
        b = Rational(1, 3)
        add(a, b)
        self.assertEqual(components(a), (1, 2))
        self.assertEqual(components(b), (1, 3))

    def test_divide_by_zero_value_yields_zero_denominator(self):
        result = divide(Rational(3, 4), Rational(0, 1))
        self.assertEqual(components(result), (3, 0))
        self.assertTrue(math.isinf(to_decimal(result)))

    def test_operators(self):
        a = Rational(1, 3)
        b = Rational(1, 6)
        self.assertEqual(a + b, Rational(1, 2))
        self.assertEqual(a - b, Rational(1, 6))
        self.assertEqual(a * b, Rational(1, 18))
        self.assertEqual(a / b, Rational(2))
        self.assertEqual(-a, Rational(-1, 3))
        self.assertEqual(abs(Rational(-2, 5)), Rational(2, 5))

    def test_mixed_operands(self):
        self.assertEqual(Rational(1, 2) + 1, Rational(3, 2))
        self.assertEqual(1 - Rational(1, 4), Rational(3, 4))
        self.assertEqual(2 / Rational(1, 3), Rational(6))
        self.assertEqual(Rational(1, 2) * Fraction(2, 3), Rational(1, 3))
        self.assertEqual(Rational(1, 2) + 0.25, Rational(3, 4))
        with self.assertRaises(TypeError):
            _ = Rational(1, 2) + "1/2"

    def test_comparisons(self):
        self.assertLess(Rational(1, 3), Rational(1, 2))
        self.assertGreater(Rational(-1, 3), Rational(-1, 2))
        self.assertLessEqual(Rational.raw(1, -2), Rational(0))
        self.assertEqual(Rational.raw(2, 4), Rational(1, 2))
        self.assertEqual(Rational(4, 2), 2)
        self.assertNotEqual(Rational(1, 2), "1/2")

    def test_degenerate_values_compare_by_components(self):
        self.assertEqual(Rational.raw(5, 0), normalize(5, 0))
        self.assertNotEqual(Rational.raw(5, 0), Rational.raw(3, 0))
        self.assertNotEqual(Rational.raw(0, 0), Rational(0))

    def test_hash_matches_equality(self):
        self.assertEqual(hash(Rational.raw(2, 4)), hash(Rational(1, 2)))
        self.assertEqual(hash(Rational(3)), hash(3))
        self.assertEqual(len({Rational(1, 2), Rational.raw(3, 6), Fraction(1, 2)}), 1)

    def test_float_equality_is_exact_and_hash_consistent(self):
        self.assertNotEqual(Rational(1, 10), 0.1)
        self.assertEqual(Rational(1, 2), 0.5)
        self.assertEqual(hash(Rational(1, 2)), hash(0.5))
        self.assertEqual(Rational.from_float(0.1), Rational(1, 10))
        exact = Rational.from_fraction(Fraction.from_float(0.1))
        self.assertEqual(exact, 0.1)
        self.assertEqual(hash(exact), hash(0.1))
        self.assertEqual(len({Rational(1, 2), 0.5}), 1)
        self.assertEqual(len({Rational(1, 10), 0.1}), 2)

    def test_comparisons_with_non_finite_floats(self):
        self.assertNotEqual(Rational(1, 2), math.nan)
        self.assertNotEqual(Rational(1, 2), math.inf)
        self.assertLess(Rational(10**6), math.inf)
        self.assertGreater(Rational(-(10**6)), -math.inf)
        self.assertLess(Rational(1, 3), np.float64(0.34))


class OutputTests(unittest.TestCase):
    def test_format(self):
        self.assertEqual(format_rational(normalize(7, 1)), "7")
        self.assertEqual(format_rational(normalize(3, 4)), "3/4")
        self.assertEqual(format_rational(normalize(-3, 4)), "-3/4")
        self.assertEqual(format_rational(Rational.raw(0, 5)), "0")
        self.assertEqual(format_rational(Rational.raw(0, 0)), "0")
        self.assertEqual(format_rational(Rational.raw(5, 0)), "5/0")

    def test_str_and_repr(self):
        self.assertEqual(str(Rational(3, 2)), "3/2")
        self.assertEqual(repr(Rational(3, 2)), "Rational(3, 2)")
        self.assertEqual(repr(Rational.raw(2, 4)), "Rational.raw(2, 4)")
        self.assertEqual(repr(normalize(5, 0)), "Rational.raw(5, 0)")

    def test_formatting_support(self):
        value = Rational(3, 2)
        self.assertEqual(f"{value}", "3/2")
        self.assertEqual(f"{value:.2f}", "1.50")
        self.assertEqual(f"{value:r}", "3/2")

    def test_to_decimal(self):
        self.assertEqual(to_decimal(Rational(1, 4)), 0.25)
        self.assertEqual(to_decimal(Rational(-3, 4)), -0.75)
        self.assertEqual(float(Rational(1, 8)), 0.125)

    def test_to_decimal_is_non_finite_for_zero_denominator(self):
        self.assertEqual(to_decimal(normalize(5, 0)), math.inf)
        self.assertEqual(to_decimal(normalize(-5, 0)), -math.inf)
        self.assertTrue(math.isnan(to_decimal(normalize(0, 0))))

    def test_to_decimal_saturates_when_quotient_exceeds_float_range(self):
        self.assertEqual(to_decimal(Rational(10**400, 1)), math.inf)
        self.assertEqual(to_decimal(Rational(-(10**400), 3)), -math.inf)
        self.assertEqual(float(Rational(10**400, 7)), math.inf)
        self.assertEqual(to_decimal(Rational(1, 10**400)), 0.0)


class ParseTests(unittest.TestCase):
    def test_plain_integer(self):
        self.assertEqual(components(parse("7")), (7, 1))
        self.assertEqual(components(parse(" -3 ")), (-3, 1))

    def test_fraction_is_not_normalized(self):
        self.assertEqual(components(parse("2/4")), (2, 4))
        self.assertEqual(components(parse("3/-4")), (3, -4))

    def test_empty_and_non_numeric_read_as_zero(self):
        self.assertEqual(components(parse("")), (0, 1))
        self.assertEqual(components(parse(None)), (0, 1))
        self.assertEqual(components(parse("abc")), (0, 1))
        self.assertEqual(components(parse("2.5")), (0, 1))

    def test_slash_branch_keeps_zero_denominator(self):
        self.assertEqual(components(parse("3/0")), (3, 0))
        self.assertEqual(components(parse("3/")), (3, 0))
        self.assertEqual(components(parse("3/x")), (3, 0))
        self.assertEqual(components(parse("x/4")), (0, 4))

    def test_extra_fragments_are_ignored(self):
        self.assertEqual(components(parse("1/2/3")), (1, 2))

    def test_only_ascii_integers_are_numeric(self):
        self.assertEqual(components(parse("+4/5")), (4, 5))
        self.assertEqual(components(parse("1_000")), (0, 1))
        self.assertEqual(components(parse("١٢")), (0, 1))
        self.assertEqual(components(parse("3/1_0")), (3, 0))
        with self.assertRaises(ParseError):
            parse("1_000", strict=True)

    def test_non_string_text_is_rejected(self):
        with self.assertRaises(TypeError):
            parse(0)
        with self.assertRaises(TypeError):
            parse(12)

    def test_strict_mode_rejects_non_numeric_text(self):
        self.assertEqual(components(parse("5/6", strict=True)), (5, 6))
        self.assertEqual(components(parse("", strict=True)), (0, 1))
        with self.assertRaises(ParseError) as ctx:
            parse("1/two", strict=True)
        self.assertEqual(ctx.exception.fragment, "two")
        with self.assertRaises(ParseError):
            parse("1/2/3", strict=True)
        with self.assertRaises(ValueError):
            parse("half", strict=True)

    def test_parse_then_format(self):
        self.assertEqual(format_rational(parse("6/8").normalized()), "3/4")
        self.assertEqual(format_rational(parse("12")), "12")


class ConversionTests(unittest.TestCase):
    def test_from_float(self):
        self.assertEqual(Rational.from_float(0.5), Rational(1, 2))
        pi_approx = Rational.from_float(math.pi, max_denominator=1000)
        self.assertLessEqual(pi_approx.denominator, 1000)
        self.assertAlmostEqual(float(pi_approx), math.pi, places=3)
        with self.assertRaises(ValueError):
            Rational.from_float(math.nan)

    def test_rationalize_helper(self):
        self.assertEqual(rationalize(3.25, max_denominator=100), Rational(13, 4))
        self.assertEqual(rationalize(Fraction(6, 4)), Rational(3, 2))
        self.assertEqual(rationalize(np.int64(4)), Rational(4))
        self.assertEqual(components(rationalize("2/4")), (2, 4))
        with self.assertRaises(TypeError):
            rationalize(object())


class NumpyTests(unittest.TestCase):
    def test_list_broadcasting(self):
        vector = [Rational(1, 2), Rational(2, 3)]
        shifted = Rational(1, 6) + vector
        self.assertTrue(all(isinstance(item, Rational) for item in shifted))
        self.assertEqual(list(shifted), [Rational(2, 3), Rational(5, 6)])

        diff = vector - Rational(1, 3)
        self.assertEqual(list(diff), [Rational(1, 6), Rational(1, 3)])

    def test_numpy_array_operations_with_scalar(self):
        vector = np.array([0.25, 0.5, 0.75])
        result = Rational(1, 4) + vector
        self.assertEqual(result.dtype, object)
        self.assertTrue(all(isinstance(item, Rational) for item in result))
        np.testing.assert_allclose([float(item) for item in result], [0.5, 0.75, 1.0])

    def test_numpy_array_operations_with_object_array(self):
        vector = np.array([Rational(1, 2), Rational(1, 3)], dtype=object)
        result = vector + Rational(1, 6)
        self.assertEqual(list(result), [Rational(2, 3), Rational(1, 2)])

    def test_numpy_ufunc_support(self):
        vector = as_rational_array([Rational(1, 2), Rational(3, 4)])
        result = np.divide(vector, Rational(1, 4))
        self.assertEqual(list(result), [Rational(2), Rational(3)])
        self.assertEqual(np.negative(Rational(1, 2)), Rational(-1, 2))

    def test_rational_array_from_operands(self):
        operands = as_rational_array([Rational(1, 2), 0.25, "3/4", 2])
        self.assertEqual(operands.shape, (4,))
        self.assertTrue(all(isinstance(item, Rational) for item in operands))
        self.assertEqual(list(operands), [Rational(1, 2), Rational(1, 4), Rational(3, 4), Rational(2)])

        from_text = as_rational_array(np.array(["6/8", "5"]))
        self.assertEqual(components(from_text[0]), (6, 8))

        source = as_rational_array([Rational(1, 3)])
        copied = as_rational_array(source)
        self.assertIsNot(copied, source)
        self.assertEqual(list(copied), list(source))

    def test_to_decimal_array(self):
        values = [Rational(1, 4), normalize(1, 0), normalize(0, 0)]
        decimals = to_decimal_array(values)
        self.assertEqual(decimals.dtype, np.float64)
        self.assertEqual(decimals[0], 0.25)
        self.assertTrue(np.isposinf(decimals[1]))
        self.assertTrue(np.isnan(decimals[2]))


if __name__ == "__main__":  # pragma: no cover - direct execution helper
    unittest.main()
