"""Pet-friendliness inference over hotel detail records.

A hotel's pet policy is resolved from three independent upstream sources, tried in
order until one yields a result:

1. ``policies[].pets_allowed`` free text. The first acceptable entry wins.
2. ``policies[]`` whose name mentions "pet", using the description. Every matching
   entry is considered and the *last* acceptable one wins.
3. The top-level ``petsAllowed`` boolean, with a generic policy text.
4. ``hotelFacilities`` entries mentioning "pet", summarised into a policy text.

An explicit ``petsAllowed is False`` vetoes everything above. Text matching one of the
negation phrases in :data:`NEGATION_PHRASES` is never accepted as a permissive policy.

The asymmetry between tiers 1 and 2 (first-wins vs last-wins) is kept on purpose and
expressed with the :func:`first_some` / :func:`last_some` combinators.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, Literal, Optional, Sequence, TypeVar

from .models import HotelDetail

T = TypeVar("T")

PetPolicySource = Literal["policy", "boolean", "facility"]

NEGATION_PHRASES: tuple[str, ...] = (
    "no pets allowed",
    "pets are not allowed",
    "pets not permitted",
    "no pets are allowed",
)

BOOLEAN_POLICY_TEXT = (
    "Pets are welcome at this hotel. Contact the property for specific requirements and fees."
)
LISTING_FALLBACK_TEXT = "Contact hotel for pet policy details"
HOTEL_PAGE_NEUTRAL_TEXT = "Contact the hotel directly for pet policy details."
PETS_REFUSED_TEXT = "This hotel does not allow pets."
CONFIRM_WITH_HOTEL_ADVISORY = (
    "We recommend confirming specific pet requirements directly with the hotel before check-in."
)


@dataclass(slots=True, frozen=True)
class PetPolicy:
    is_pet_friendly: bool
    policy_text: Optional[str] = None
    source: Optional[PetPolicySource] = None

    def to_dict(self) -> dict[str, object]:
        return {
            "isPetFriendly": self.is_pet_friendly,
            "policyText": self.policy_text,
            "source": self.source,
        }


NOT_PET_FRIENDLY = PetPolicy(is_pet_friendly=False)

Strategy = Callable[[HotelDetail], Optional[PetPolicy]]


def first_some(candidates: Iterable[Optional[T]]) -> Optional[T]:
    """Return the first non-``None`` candidate, stopping the iteration there."""
    for candidate in candidates:
        if candidate is not None:
            return candidate
    return None


def last_some(candidates: Iterable[Optional[T]]) -> Optional[T]:
    """Return the last non-``None`` candidate, consuming the whole iterable."""
    found: Optional[T] = None
    for candidate in candidates:
        if candidate is not None:
            found = candidate
    return found


def _clean(text: Optional[str]) -> Optional[str]:
    if not isinstance(text, str) or not text.strip():
        return None
    return text


def is_negated(text: str) -> bool:
    lowered = text.lower()
    return any(phrase in lowered for phrase in NEGATION_PHRASES)


def _permissive_text(text: Optional[str]) -> Optional[str]:
    cleaned = _clean(text)
    if cleaned is None or is_negated(cleaned):
        return None
    return cleaned


def _from_policy_text(text: Optional[str]) -> Optional[PetPolicy]:
    accepted = _permissive_text(text)
    if accepted is None:
        return None
    return PetPolicy(is_pet_friendly=True, policy_text=accepted, source="policy")


def pets_allowed_field(detail: HotelDetail) -> Optional[PetPolicy]:
    return first_some(_from_policy_text(policy.pets_allowed) for policy in detail.policies)


def pet_named_policy(detail: HotelDetail) -> Optional[PetPolicy]:
    return last_some(
        _from_policy_text(policy.description)
        for policy in detail.policies
        if "pet" in (policy.name or "").lower()
    )


def pets_allowed_flag(detail: HotelDetail) -> Optional[PetPolicy]:
    if detail.pets_allowed is True:
        return PetPolicy(is_pet_friendly=True, policy_text=BOOLEAN_POLICY_TEXT, source="boolean")
    return None


def pet_facilities(detail: HotelDetail) -> Optional[PetPolicy]:
    matches = [item for item in detail.facilities if isinstance(item, str) and "pet" in item.lower()]
    if not matches:
        return None
    text = f"This hotel offers: {', '.join(matches)}. Contact the property for full pet policy details."
    return PetPolicy(is_pet_friendly=True, policy_text=text, source="facility")


RESOLUTION_CHAIN: Sequence[Strategy] = (
    pets_allowed_field,
    pet_named_policy,
    pets_allowed_flag,
    pet_facilities,
)


def resolve_pet_policy(detail: HotelDetail) -> PetPolicy:
    """Resolve the pet policy of a hotel whose detail record is available."""
    if detail.pets_allowed is False:
        return NOT_PET_FRIENDLY
    resolved = first_some(strategy(detail) for strategy in RESOLUTION_CHAIN)
    return resolved or NOT_PET_FRIENDLY


def resolve_for_listing(detail: Optional[HotelDetail]) -> PetPolicy:
    """Listing variant: a missing detail record trusts the upstream facility pre-filter."""
    if detail is None:
        return PetPolicy(is_pet_friendly=True)
    return resolve_pet_policy(detail)


def resolve_for_hotel_page(detail: Optional[HotelDetail]) -> PetPolicy:
    """Hotel-page variant: a missing detail record never asserts friendliness."""
    if detail is None:
        return PetPolicy(is_pet_friendly=False, policy_text=HOTEL_PAGE_NEUTRAL_TEXT)
    if detail.pets_allowed is False:
        return PetPolicy(is_pet_friendly=False, policy_text=PETS_REFUSED_TEXT)
    resolved = resolve_pet_policy(detail)
    if not resolved.is_pet_friendly:
        return PetPolicy(is_pet_friendly=False, policy_text=HOTEL_PAGE_NEUTRAL_TEXT)
    return resolved


def advisory_for(policy: PetPolicy) -> Optional[str]:
    """Extra caution shown when the policy text was inferred rather than published."""
    if policy.source in ("boolean", "facility"):
        return CONFIRM_WITH_HOTEL_ADVISORY
    return None
