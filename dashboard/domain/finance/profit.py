"""
Per-booking net profit estimate.

The company keeps: booking amount - partner payout - payment/platform charges.
Rates are business assumptions maintained by finance; change them here only.
"""

from dataclasses import dataclass
from typing import Iterable

PARTNER_GST_RATE = 0.06
PAYOUT_GATEWAY_RATE = 0.0236
COLLECTION_GATEWAY_RATE = 0.0236
PLATFORM_FEE_RATE = 0.05


@dataclass(frozen=True)
class BookingProfit:
    booking_amount: float
    partner_payout: float
    gross_revenue: float
    deductions: float
    net_profit: float


def booking_profit(total_service_price: float, tax_amount: float, partner_fare: float) -> BookingProfit:
    booking_amount = (total_service_price or 0) + (tax_amount or 0)
    fare = partner_fare or 0
    partner_payout = fare - fare * PARTNER_GST_RATE
    gross_revenue = booking_amount - partner_payout
    deductions = (
        partner_payout * PAYOUT_GATEWAY_RATE
        + booking_amount * COLLECTION_GATEWAY_RATE
        + booking_amount * PLATFORM_FEE_RATE
    )
    return BookingProfit(
        booking_amount=booking_amount,
        partner_payout=partner_payout,
        gross_revenue=gross_revenue,
        deductions=deductions,
        net_profit=gross_revenue - deductions,
    )


@dataclass(frozen=True)
class ProfitSummary:
    count: int
    amount_paid: float
    booking_amount: float
    net_profit: float
    margin_pct: float
    avg_order_value: float


def summarize_profit(bookings: Iterable) -> ProfitSummary:
    """Totals over bookings exposing totalservice_price, tax_amount, partner_fare and amount_paid"""
    count = 0
    amount_paid = 0.0
    booking_amount = 0.0
    net_profit = 0.0
    for b in bookings:
        count += 1
        amount_paid += b.amount_paid or 0
        p = booking_profit(b.totalservice_price, b.tax_amount, b.partner_fare)
        booking_amount += p.booking_amount
        net_profit += p.net_profit

    margin = net_profit / booking_amount * 100 if booking_amount > 0 else 0.0
    aov = booking_amount / count if count > 0 else 0.0
    return ProfitSummary(
        count=count,
        amount_paid=amount_paid,
        booking_amount=booking_amount,
        net_profit=round(net_profit, 2),
        margin_pct=round(margin, 2),
        avg_order_value=round(aov, 2),
    )
