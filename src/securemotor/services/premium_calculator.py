# SecureMotor - Motor Insurance Portal Core
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Premium calculation.

The premium is a flat base plus a coverage-tier fee, an older-vehicle
loading and a per-driver fee, with a 3% tax rounded half-up to the nearest
whole K. The calculation is pure: the current year is passed in by the
caller so the same inputs always price the same way.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Final

from beartype import beartype

from ..models.quote import CoverageDetails, CoverageType, PremiumBreakdown, VehicleDetails
from ..models.reports import BreakdownLine

BASE_PREMIUM: Final = 500
COVERAGE_FEES: Final[dict[CoverageType, int]] = {
    CoverageType.THIRD_PARTY: 1000,
    CoverageType.FIRE_THEFT: 2000,
    CoverageType.COMPREHENSIVE: 3000,
}
VEHICLE_AGE_THRESHOLD_YEARS: Final = 10
VEHICLE_AGE_ADJUSTMENT: Final = 100
ADDITIONAL_DRIVER_FEE: Final = 200
TAX_RATE: Final = Decimal("0.03")
CURRENCY_SYMBOL: Final = "K"


class PremiumCalculator:
    """Itemized premium pricing for a vehicle and coverage selection."""

    @staticmethod
    @beartype
    def calculate(
        vehicle: VehicleDetails,
        coverage: CoverageDetails,
        *,
        current_year: int,
    ) -> PremiumBreakdown:
        """Price a vehicle/coverage pair.

        Args:
            vehicle: Vehicle being insured; only ``year`` is rated.
            coverage: Coverage selection; ``coverage_type`` and
                ``additional_drivers`` are rated.
            current_year: Calendar year used for the vehicle age loading.

        Returns:
            PremiumBreakdown: Every component plus subtotal, tax and total.
        """
        coverage_fee = COVERAGE_FEES[coverage.coverage_type]

        vehicle_age = current_year - vehicle.year
        age_adjustment = (
            VEHICLE_AGE_ADJUSTMENT if vehicle_age > VEHICLE_AGE_THRESHOLD_YEARS else 0
        )

        drivers_fee = coverage.additional_drivers * ADDITIONAL_DRIVER_FEE

        subtotal = BASE_PREMIUM + coverage_fee + age_adjustment + drivers_fee
        tax = PremiumCalculator.calculate_tax(subtotal)

        return PremiumBreakdown(
            base_premium=BASE_PREMIUM,
            coverage_fee=coverage_fee,
            vehicle_age_adjustment=age_adjustment,
            additional_drivers_fee=drivers_fee,
            subtotal=subtotal,
            tax=tax,
            total_premium=subtotal + tax,
        )

    @staticmethod
    @beartype
    def calculate_tax(subtotal: int) -> int:
        """Tax on a subtotal, rounded half-up to whole K."""
        tax = (Decimal(subtotal) * TAX_RATE).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
        return int(tax)

    @staticmethod
    @beartype
    def breakdown_lines(breakdown: PremiumBreakdown) -> list[BreakdownLine]:
        """Display rows for an itemized premium summary.

        The age and driver rows are omitted when they contribute nothing.
        """
        rows: list[tuple[str, int]] = [
            ("Base Premium", breakdown.base_premium),
            ("Coverage Fee", breakdown.coverage_fee),
        ]
        if breakdown.vehicle_age_adjustment > 0:
            rows.append(("Vehicle Age Adjustment", breakdown.vehicle_age_adjustment))
        if breakdown.additional_drivers_fee > 0:
            rows.append(("Additional Drivers", breakdown.additional_drivers_fee))
        rows.extend(
            [
                ("Subtotal", breakdown.subtotal),
                ("Tax (3%)", breakdown.tax),
                ("Total Premium", breakdown.total_premium),
            ]
        )
        return [
            BreakdownLine(
                label=label,
                amount=amount,
                formatted=PremiumCalculator.format_currency(amount),
            )
            for label, amount in rows
        ]

    @staticmethod
    @beartype
    def format_currency(amount: int) -> str:
        """Render an amount as ``K1,648``."""
        return f"{CURRENCY_SYMBOL}{amount:,}"
