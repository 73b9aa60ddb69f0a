from __future__ import annotations

from petotel.hotels import build_hotel_detail
from petotel.hotels.pet_policy import (
    BOOLEAN_POLICY_TEXT,
    CONFIRM_WITH_HOTEL_ADVISORY,
    HOTEL_PAGE_NEUTRAL_TEXT,
    PETS_REFUSED_TEXT,
    advisory_for,
    first_some,
    last_some,
    resolve_for_hotel_page,
    resolve_for_listing,
    resolve_pet_policy,
)


def _detail(**overrides):
    payload = {"id": "lp1", "name": "Test Hotel", "policies": [], "hotelFacilities": []}
    payload.update(overrides)
    return build_hotel_detail(payload)


def test_pets_allowed_field_wins_over_unrelated_negation():
    detail = _detail(
        policies=[
            {
                "name": "House Rules",
                "description": "No pets allowed in the spa area",
                "pets_allowed": "Dogs under 20lbs welcome with a $50 fee",
            }
        ]
    )

    policy = resolve_pet_policy(detail)

    assert policy.is_pet_friendly is True
    assert policy.policy_text == "Dogs under 20lbs welcome with a $50 fee"
    assert policy.source == "policy"


def test_explicit_false_flag_vetoes_every_permissive_signal():
    detail = _detail(
        petsAllowed=False,
        policies=[
            {"name": "Pet policy", "description": "Cats welcome", "pets_allowed": "Dogs welcome"},
        ],
        hotelFacilities=["Pet bowls", "Pet sitting"],
    )

    assert resolve_pet_policy(detail).is_pet_friendly is False
    assert resolve_for_listing(detail).is_pet_friendly is False
    assert resolve_pet_policy(detail).policy_text is None


def test_first_acceptable_pets_allowed_entry_wins():
    detail = _detail(
        policies=[
            {"name": "A", "description": "", "pets_allowed": "Pets are not allowed"},
            {"name": "B", "description": "", "pets_allowed": "Small dogs only"},
            {"name": "C", "description": "", "pets_allowed": "Any pet welcome"},
        ]
    )

    assert resolve_pet_policy(detail).policy_text == "Small dogs only"


def test_appending_entries_after_the_winner_does_not_change_result():
    winner = {"name": "Rules", "description": "", "pets_allowed": "Small dogs only"}
    base = resolve_pet_policy(_detail(policies=[winner]))
    extended = resolve_pet_policy(
        _detail(
            policies=[
                winner,
                {"name": "Rules", "description": "", "pets_allowed": "No pets allowed"},
                {"name": "Rules", "description": "", "pets_allowed": "Cats welcome"},
            ]
        )
    )
    reordered = resolve_pet_policy(
        _detail(
            policies=[
                {"name": "Rules", "description": "", "pets_allowed": "Cats welcome"},
                winner,
            ]
        )
    )

    assert extended == base
    assert reordered.policy_text == "Cats welcome"


def test_pet_named_policies_use_last_acceptable_description():
    detail = _detail(
        policies=[
            {"name": "Pets", "description": "Dogs allowed on the ground floor"},
            {"name": "Parking", "description": "Valet only"},
            {"name": "PET FEES", "description": "USD 25 per night"},
            {"name": "Pet restrictions", "description": "No pets are allowed in suites"},
        ]
    )

    policy = resolve_pet_policy(detail)

    assert policy.policy_text == "USD 25 per night"
    assert policy.source == "policy"


def test_pets_allowed_field_beats_later_pet_named_policy():
    detail = _detail(
        policies=[
            {"name": "Pet policy", "description": "Ask reception"},
            {"name": "General", "description": "", "pets_allowed": "Dogs up to 10kg"},
        ]
    )

    assert resolve_pet_policy(detail).policy_text == "Dogs up to 10kg"


def test_boolean_flag_used_when_policies_are_silent():
    detail = _detail(petsAllowed=True, policies=[{"name": "Pets", "description": "   "}])

    policy = resolve_pet_policy(detail)

    assert policy.is_pet_friendly is True
    assert policy.source == "boolean"
    assert policy.policy_text == BOOLEAN_POLICY_TEXT


def test_facilities_are_summarised_as_last_resort():
    detail = _detail(hotelFacilities=["Free WiFi", "Pets allowed", "Pet grooming"])

    policy = resolve_pet_policy(detail)

    assert policy.source == "facility"
    assert "Pets allowed, Pet grooming" in policy.policy_text
    assert advisory_for(policy) == CONFIRM_WITH_HOTEL_ADVISORY


def test_denied_policy_text_falls_through_to_facilities():
    detail = _detail(
        policies=[{"name": "Pets", "description": "Pets not permitted"}],
        hotelFacilities=["Pet friendly rooms"],
    )

    assert resolve_pet_policy(detail).source == "facility"


def test_malformed_policy_entries_do_not_raise():
    detail = _detail(
        policies=[None, {"description": "no name here"}, {"name": "Pets"}, "junk"],
    )

    policy = resolve_pet_policy(detail)

    assert policy.is_pet_friendly is False
    assert policy.source is None


def test_missing_detail_differs_between_listing_and_hotel_page():
    listing = resolve_for_listing(None)
    page = resolve_for_hotel_page(None)

    assert listing.is_pet_friendly is True
    assert listing.policy_text is None
    assert page.is_pet_friendly is False
    assert page.policy_text == HOTEL_PAGE_NEUTRAL_TEXT


def test_hotel_page_shows_neutral_text_for_unknown_policy():
    page = resolve_for_hotel_page(_detail())

    assert page.is_pet_friendly is False
    assert page.policy_text == HOTEL_PAGE_NEUTRAL_TEXT


def test_combinators_keep_first_and_last_values():
    assert first_some([None, 1, 2]) == 1
    assert last_some([1, None, 2, None]) == 2
    assert first_some([]) is None
    assert last_some([None]) is None


def test_hotel_page_states_refusal_when_flag_is_false():
    refused = resolve_for_hotel_page(
        _detail(petsAllowed=False, hotelFacilities=["Pet bowls"])
    )
    unknown = resolve_for_hotel_page(_detail(petsAllowed=None))

    assert refused.is_pet_friendly is False
    assert refused.policy_text == PETS_REFUSED_TEXT
    assert unknown.policy_text == HOTEL_PAGE_NEUTRAL_TEXT
    assert advisory_for(refused) is None
