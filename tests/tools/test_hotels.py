"""Unit tests for `tools.hotels` using a mocked Amadeus client (Hotel List + Hotel Offers)."""

from __future__ import annotations

from types import SimpleNamespace

import pytest

from tools import hotels
from tools.errors import TravelSearchError


def _hotel_offer(hotel_id, name, total):
    return {
        "hotel": {"hotelId": hotel_id, "name": name, "rating": "4"},
        "offers": [
            {
                "id": f"OFFER-{hotel_id}",
                "checkInDate": "2025-07-01",
                "checkOutDate": "2025-07-04",
                "price": {"total": total, "currency": "EUR"},
                "policies": {"paymentType": "deposit"},
                "room": {"description": {"text": "Double room, sea view"}},
            }
        ],
    }


def _mock_client(listed_ids, offers, calls):
    def _by_city(**kwargs):
        calls.append(("list", kwargs))
        return SimpleNamespace(data=[{"hotelId": hid} for hid in listed_ids])

    def _offers(**kwargs):
        calls.append(("offers", kwargs))
        return SimpleNamespace(data=offers)

    return SimpleNamespace(
        reference_data=SimpleNamespace(
            locations=SimpleNamespace(hotels=SimpleNamespace(by_city=SimpleNamespace(get=_by_city)))
        ),
        shopping=SimpleNamespace(hotel_offers_search=SimpleNamespace(get=_offers)),
    )


def test_search_hotel_offers_success():
    calls = []
    client = _mock_client(["H1", "H2"], [_hotel_offer("H1", "Ushuaia Tower", "870.00")], calls)

    results = hotels.search_hotel_offers("IBZ", "2025-07-01", "2025-07-04", adults=6, client=client)

    assert calls[0] == ("list", {"cityCode": "IBZ"})
    assert calls[1][1]["hotelIds"] == "H1,H2"
    assert calls[1][1]["adults"] == 6
    assert results == [
        {
            "hotel_id": "H1",
            "name": "Ushuaia Tower",
            "stars": "4",
            "price_total": 870.0,
            "currency": "EUR",
            "offer_id": "OFFER-H1",
            "booking_flow": "IN_APP",
            "payment_policy": "deposit",
            "room_description": "Double room, sea view",
            "check_in_date": "2025-07-01",
            "check_out_date": "2025-07-04",
        }
    ]


def test_hotel_ids_are_capped_per_request():
    calls = []
    client = _mock_client([f"H{i}" for i in range(30)], [], calls)
    hotels.search_hotel_offers("BCN", "2025-07-01", "2025-07-04", client=client)
    assert len(calls[1][1]["hotelIds"].split(",")) == hotels.MAX_HOTEL_IDS


def test_no_listed_hotels_skips_offer_search():
    calls = []
    results = hotels.search_hotel_offers("XXX", "2025-07-01", "2025-07-04", client=_mock_client([], [], calls))
    assert results == []
    assert [kind for kind, _ in calls] == ["list"]


def test_response_error_is_wrapped(monkeypatch):
    class DummyError(Exception):
        pass

    def _raise(**kwargs):  # pragma: no cover - exercised via call
        raise DummyError("quota")

    client = SimpleNamespace(
        reference_data=SimpleNamespace(
            locations=SimpleNamespace(hotels=SimpleNamespace(by_city=SimpleNamespace(get=_raise)))
        )
    )
    monkeypatch.setattr(hotels, "ResponseError", DummyError)

    with pytest.raises(TravelSearchError) as excinfo:
        hotels.search_hotel_offers("IBZ", "2025-07-01", "2025-07-04", client=client)
    assert excinfo.value.status_code is None
