"""Unit tests for premium calculation."""

import pytest

from securemotor.models.quote import CoverageType
from securemotor.services.premium_calculator import PremiumCalculator
from tests.fixtures.test_data import make_coverage, make_vehicle

CURRENT_YEAR = 2025


def price(year: int = 2020, coverage_type: CoverageType = CoverageType.COMPREHENSIVE, drivers: int = 0):
    return PremiumCalculator.calculate(
        make_vehicle(year=year),
        make_coverage(coverage_type=coverage_type, additional_drivers=drivers),
        current_year=CURRENT_YEAR,
    )


class TestPremiumCalculator:
    """Test the itemized premium formula."""

    def test_third_party_old_vehicle(self) -> None:
        """A 15 year old third-party vehicle carries the age loading."""
        breakdown = price(year=2010, coverage_type=CoverageType.THIRD_PARTY)

        assert breakdown.base_premium == 500
        assert breakdown.coverage_fee == 1000
        assert breakdown.vehicle_age_adjustment == 100
        assert breakdown.additional_drivers_fee == 0
        assert breakdown.subtotal == 1600
        assert breakdown.tax == 48
        assert breakdown.total_premium == 1648

    def test_comprehensive_ten_year_old_vehicle_with_driver(self) -> None:
        """Exactly ten years old is not loaded."""
        breakdown = price(year=2015, drivers=1)

        assert breakdown.vehicle_age_adjustment == 0
        assert breakdown.additional_drivers_fee == 200
        assert breakdown.subtotal == 3700
        assert breakdown.tax == 111
        assert breakdown.total_premium == 3811

    def test_comprehensive_eleven_year_old_vehicle_with_driver(self) -> None:
        breakdown = price(year=2014, drivers=1)

        assert breakdown.vehicle_age_adjustment == 100
        assert breakdown.subtotal == 3800
        assert breakdown.tax == 114
        assert breakdown.total_premium == 3914

    @pytest.mark.parametrize(
        ("year", "adjustment"),
        [(2015, 0), (2014, 100), (2025, 0), (2026, 0), (1950, 100)],
    )
    def test_age_threshold(self, year: int, adjustment: int) -> None:
        assert price(year=year).vehicle_age_adjustment == adjustment

    @pytest.mark.parametrize(
        ("subtotal", "tax"),
        [(1700, 51), (1701, 51), (1650, 50), (1750, 53), (0, 0)],
    )
    def test_tax_rounds_half_up(self, subtotal: int, tax: int) -> None:
        assert PremiumCalculator.calculate_tax(subtotal) == tax

    def test_each_additional_driver_adds_taxed_fee(self) -> None:
        """Adding a driver raises the total by 200 plus 3% tax."""
        for drivers in range(0, 6):
            lower = price(drivers=drivers).total_premium
            higher = price(drivers=drivers + 1).total_premium
            assert higher - lower == 206

    @pytest.mark.parametrize("year", [2005, 2015, 2024])
    @pytest.mark.parametrize("drivers", [0, 2, 7])
    def test_coverage_ordering(self, year: int, drivers: int) -> None:
        third_party = price(year, CoverageType.THIRD_PARTY, drivers).total_premium
        fire_theft = price(year, CoverageType.FIRE_THEFT, drivers).total_premium
        comprehensive = price(year, CoverageType.COMPREHENSIVE, drivers).total_premium

        assert third_party < fire_theft < comprehensive

    def test_deterministic(self) -> None:
        first = price(year=2012, coverage_type=CoverageType.FIRE_THEFT, drivers=3)
        second = price(year=2012, coverage_type=CoverageType.FIRE_THEFT, drivers=3)

        assert first == second
        assert first.model_dump_json() == second.model_dump_json()

    def test_excess_and_duration_do_not_affect_premium(self) -> None:
        vehicle = make_vehicle()
        standard = PremiumCalculator.calculate(
            vehicle, make_coverage(), current_year=CURRENT_YEAR
        )
        adjusted = PremiumCalculator.calculate(
            vehicle,
            make_coverage(duration_months=6, voluntary_excess=5000),
            current_year=CURRENT_YEAR,
        )

        assert standard == adjusted


class TestBreakdownLines:
    """Test the display rows of a premium summary."""

    def test_optional_rows_omitted_when_zero(self) -> None:
        lines = PremiumCalculator.breakdown_lines(price(year=2020))

        assert [line.label for line in lines] == [
            "Base Premium",
            "Coverage Fee",
            "Subtotal",
            "Tax (3%)",
            "Total Premium",
        ]

    def test_all_rows_present(self) -> None:
        lines = PremiumCalculator.breakdown_lines(
            price(year=2010, coverage_type=CoverageType.THIRD_PARTY, drivers=2)
        )

        assert [(line.label, line.amount) for line in lines] == [
            ("Base Premium", 500),
            ("Coverage Fee", 1000),
            ("Vehicle Age Adjustment", 100),
            ("Additional Drivers", 400),
            ("Subtotal", 2000),
            ("Tax (3%)", 60),
            ("Total Premium", 2060),
        ]
        assert lines[-1].formatted == "K2,060"

    @pytest.mark.parametrize(
        ("amount", "formatted"),
        [(0, "K0"), (500, "K500"), (1648, "K1,648"), (1234567, "K1,234,567")],
    )
    def test_format_currency(self, amount: int, formatted: str) -> None:
        assert PremiumCalculator.format_currency(amount) == formatted
