"""Unit tests for token amount formatting."""

from arb_deployments.units import format_ether, format_units


class TestFormatUnits:
    """Test the format_units function."""

    def test_six_decimals(self):
        assert format_units(1_500_000, 6) == "1.5"

    def test_whole_amount_has_no_fraction(self):
        assert format_units(2 * 10**18, 18) == "2"

    def test_zero(self):
        assert format_units(0, 18) == "0"

    def test_small_amount(self):
        assert format_units(1, 6) == "0.000001"

    def test_zero_decimals(self):
        assert format_units(42, 0) == "42"

    def test_max_uint256_keeps_every_digit(self):
        value = 2**256 - 1

        assert format_units(value, 0) == str(value)
        assert format_units(value, 18).replace(".", "") == str(value)


class TestFormatEther:
    """Test the format_ether function."""

    def test_tenth_of_a_unit(self):
        assert format_ether(10**17) == "0.1"

    def test_five_hundredths(self):
        assert format_ether(5 * 10**16) == "0.05"
