from __future__ import annotations

from petotel.hotels import HotelRoom
from petotel.hotels.rates import build_price_map, group_rooms, representative_price


def _rate(mapped_room_id, amount, *, name="Deluxe King", tag=None, currency="USD"):
    rate = {
        "mappedRoomId": mapped_room_id,
        "name": name,
        "boardName": "Room Only",
        "retailRate": {
            "total": [{"amount": amount, "currency": currency}],
            "taxesAndFees": [{"included": True, "amount": 12.5}],
        },
    }
    if tag is not None:
        rate["cancellationPolicies"] = {
            "refundableTag": tag,
            "cancelPolicyInfos": [{"cancelTime": "2026-11-01 12:00:00"}],
        }
    return rate


def _rate_data(*room_types):
    return {
        "hotelId": "lp1",
        "roomTypes": [
            {"offerId": offer_id, "rates": rates} for offer_id, rates in room_types
        ],
    }


def test_rates_sharing_a_mapped_room_form_one_group_in_upstream_order():
    data = _rate_data(
        ("offer-a", [_rate(101, 120.0, tag="RFN")]),
        ("offer-b", [_rate(101, 150.0, name="Deluxe King Breakfast")]),
    )

    groups = group_rooms(data)

    assert len(groups) == 1
    assert groups[0].mapped_room_id == 101
    assert [offer.offer_id for offer in groups[0].offers] == ["offer-a", "offer-b"]
    assert [offer.price for offer in groups[0].offers] == [120.0, 150.0]
    assert groups[0].offers[0].refundable is True
    assert groups[0].offers[0].cancel_time == "2026-11-01 12:00:00"
    assert groups[0].offers[1].refundable_tag == "NRFN"
    assert groups[0].offers[0].taxes_included is True
    assert groups[0].offers[0].tax_amount == 12.5


def test_group_order_follows_first_appearance():
    data = _rate_data(
        ("offer-a", [_rate(202, 90.0, name="Twin")]),
        ("offer-b", [_rate(101, 150.0), _rate(202, 95.0, name="Twin")]),
    )

    groups = group_rooms(data)

    assert [group.mapped_room_id for group in groups] == [202, 101]
    assert [offer.price for offer in groups[0].offers] == [90.0, 95.0]


def test_grouping_is_deterministic():
    data = _rate_data(
        ("offer-a", [_rate(101, 120.0)]),
        ("offer-b", [_rate(303, 80.0, name="Queen")]),
    )

    assert group_rooms(data) == group_rooms(data)


def test_room_catalog_supplies_name_and_photo():
    data = _rate_data(("offer-a", [_rate(101, 120.0, name="Rate label")]))
    rooms = [
        HotelRoom(id=101, room_name="Deluxe King Room", photos=["https://img/1.jpg", "https://img/2.jpg"]),
        HotelRoom(id=101, room_name="Duplicate entry", photos=[]),
    ]

    group = group_rooms(data, rooms)[0]

    assert group.room_name == "Deluxe King Room"
    assert group.room_photo == "https://img/1.jpg"


def test_missing_catalog_entry_falls_back_to_rate_name():
    data = _rate_data(("offer-a", [_rate(404, 70.0, name="Standard Double")]))

    group = group_rooms(data, [HotelRoom(id=101, room_name="Other")])[0]

    assert group.room_name == "Standard Double"
    assert group.room_photo == ""


def test_malformed_room_types_are_skipped():
    data = {"roomTypes": [None, {"offerId": "x", "rates": [None, "junk"]}]}

    assert group_rooms(data) == []


def test_representative_price_is_first_rate_not_minimum():
    data = _rate_data(
        ("offer-a", [_rate(101, 200.0, tag="RFN"), _rate(101, 90.0)]),
        ("offer-b", [_rate(202, 50.0)]),
    )

    price = representative_price(data)

    assert price.price == 200.0
    assert price.currency == "USD"
    assert price.refundable is True


def test_representative_price_defaults():
    data = _rate_data(("offer-a", [{"mappedRoomId": 1, "retailRate": {}}]))

    price = representative_price(data)

    assert price.price == 0.0
    assert price.currency == "USD"
    assert price.refundable is False
    assert representative_price({"roomTypes": []}) is None


def test_price_map_is_keyed_by_hotel_id():
    items = [
        {"hotelId": "lp1", "roomTypes": [{"offerId": "a", "rates": [_rate(1, 99.0, currency="EUR")]}]},
        {"hotelId": "lp2", "roomTypes": []},
        {"roomTypes": [{"offerId": "b", "rates": [_rate(1, 10.0)]}]},
    ]

    prices = build_price_map(items)

    assert list(prices) == ["lp1"]
    assert prices["lp1"].currency == "EUR"
