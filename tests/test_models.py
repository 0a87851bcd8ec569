from datetime import datetime

from dashboard.models import Booking


def test_booking_from_doc_decodes_loose_fields():
    data = {
        "status": " Service_Completed ",
        "bookingStatus": "Pending",
        "date": "2026-01-05T10:00:00Z",
        "customer_id": "/customer/c1",
        "provider_id": "customer/p1",
        "amount_paid": "1,180",
        "taxAmount": 180,
        "rating": "",
        "subCategoryCart_id": ["subCategoryCart/a", None],
        "partnerFuel": [{"FirstBill": "https://img/1.jpg", "FirstBillAmount": "250", "SecondBillAmount": 0}],
    }

    booking = Booking.from_doc("b1", data)

    assert booking.status == "Service_Completed"
    assert booking.is_completed
    assert booking.date.replace(tzinfo=None) == datetime(2026, 1, 5, 10)
    assert booking.customer_id == "c1"
    assert booking.provider_id == "p1"
    assert booking.amount_paid == 1180
    assert booking.tax_amount == 180
    assert booking.rating is None
    assert booking.sub_category_cart_refs == ["subCategoryCart/a"]
    assert [(b.bill_no, b.amount) for b in booking.fuel_bills] == [(1, 250)]
    assert not hasattr(booking, "booking_status")
