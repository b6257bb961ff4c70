from __future__ import annotations

from types import SimpleNamespace

import pytest

from showdb.apps.bulletins import matcher
from showdb.apps.bulletins.keywords import RIDE_TYPE_KEYWORDS, keywords_for, ride_type_ids


def _ride(name: str, category: str, manufacturer: str | None = None) -> dict:
    return {
        "ride_name": name,
        "manufacturer": manufacturer,
        "ride_categories": {"name": category},
    }


def _bulletin(title: str, content: str = "") -> dict:
    return {"title": title, "content": content}


def test_extract_ride_types_empty_text():
    assert matcher.extract_ride_types("") == []
    assert matcher.extract_ride_types(None) == []


def test_extract_ride_types_is_case_insensitive():
    assert "chair-o-plane" in matcher.extract_ride_types("We inspected the Chair-O-Plane unit")


@pytest.mark.parametrize("ride_type,keywords", RIDE_TYPE_KEYWORDS)
def test_every_keyword_detects_its_ride_type(ride_type, keywords):
    for phrase in keywords:
        assert ride_type in matcher.extract_ride_types(phrase)


def test_extract_ride_types_keeps_dictionary_order_without_duplicates():
    text = "Diesel generator feeding the dodgems and the ghost train; dodgem cars again"
    found = matcher.extract_ride_types(text)

    assert len(found) == len(set(found))
    order = ride_type_ids()
    assert found == sorted(found, key=order.index)
    assert found[0] == "bumper-cars"
    assert found[-1] == "generator"


def test_ride_name_in_title_is_relevant():
    bulletin = _bulletin("Waltzer Safety Notice", "...")
    ride = _ride("Waltzer", "Spinning Ride")

    assert matcher.is_bulletin_relevant_to_ride(bulletin, ride) is True
    assert matcher.filter_bulletins_for_rides([bulletin], [ride]) == [bulletin]


def test_ride_name_match_ignores_case_and_checks_content():
    bulletin = _bulletin("Quarterly notice", "Operators of THE BIG APPLE must check restraints")
    assert matcher.is_bulletin_relevant_to_ride(bulletin, _ride("The Big Apple", "Family Coaster"))


def test_unrelated_generator_bulletin_is_filtered_out():
    bulletins = [_bulletin("Generator Maintenance", "diesel generator check")]
    rides = [_ride("Helter Skelter", "Slide")]

    assert matcher.filter_bulletins_for_rides(bulletins, rides) == []


def test_category_name_in_text_is_relevant():
    bulletin = _bulletin("Notice for all bumper cars", "Check floor plates")
    assert matcher.is_bulletin_relevant_to_ride(bulletin, _ride("Speedway", "Bumper Cars"))


def test_ride_type_keyword_matches_ride_name():
    # "roller coaster" in the text yields roller-coaster; "coaster" is in the ride name.
    bulletin = _bulletin("Roller coaster wheel assemblies", "Inspect axles")
    assert matcher.is_bulletin_relevant_to_ride(bulletin, _ride("Wild Mouse Coaster", "Family"))


def test_manufacturer_in_text_is_relevant():
    bulletin = _bulletin("Service letter", "All rides built by Zierer need new bolts")
    ride = _ride("Jet Star", "Thrill", manufacturer="Zierer")

    assert matcher.is_bulletin_relevant_to_ride(bulletin, ride)


def test_blank_ride_and_category_names_are_not_substring_matches():
    bulletin = _bulletin("Any bulletin", "Any content")
    assert matcher.is_bulletin_relevant_to_ride(bulletin, _ride("", "")) is False


def test_matcher_accepts_orm_like_objects():
    bulletin = SimpleNamespace(title="Dodgems floor notice", content=None)
    ride = SimpleNamespace(
        ride_name="Speedway",
        manufacturer=None,
        category=SimpleNamespace(name="Dodgem Track"),
    )

    assert matcher.is_bulletin_relevant_to_ride(bulletin, ride)


def test_filter_with_no_rides_is_identity():
    bulletins = [_bulletin("A"), _bulletin("B")]
    assert matcher.filter_bulletins_for_rides(bulletins, []) is bulletins


def test_filter_result_is_relevant_subset():
    bulletins = [
        _bulletin("Waltzer cars", "check the cars"),
        _bulletin("Ghost train lighting", "emergency lights"),
        _bulletin("Generator earthing", "diesel sets"),
    ]
    rides = [_ride("Waltzer", "Spinning Ride"), _ride("Haunted Hotel", "Dark Ride")]

    result = matcher.filter_bulletins_for_rides(bulletins, rides)

    assert all(item in bulletins for item in result)
    assert all(any(matcher.is_bulletin_relevant_to_ride(item, ride) for ride in rides) for item in result)
    assert bulletins[0] in result
    assert bulletins[2] not in result


def test_best_category_prefers_ride_type_keywords():
    categories = [
        {"id": "cat-a", "name": "Adult Rides"},
        {"id": "cat-dodgem", "name": "Dodgems"},
        {"id": "cat-gen", "name": "Generator"},
    ]
    bulletin = _bulletin("Bumper car floor plates", "Dodgem track inspection")

    assert matcher.get_best_category_for_bulletin(bulletin, categories) == "cat-dodgem"


def test_best_category_falls_back_to_name_then_first():
    categories = [{"id": "cat-1", "name": "Kiddie"}, {"id": "cat-2", "name": "Twist"}]

    named = _bulletin("Twist ride arms", "check welds")
    unnamed = _bulletin("General notice", "nothing specific")

    assert matcher.get_best_category_for_bulletin(named, categories) == "cat-2"
    assert matcher.get_best_category_for_bulletin(unnamed, categories) == "cat-1"
    assert matcher.get_best_category_for_bulletin(unnamed, []) is None


def test_best_category_skips_blank_names():
    categories = [{"id": "blank", "name": ""}, {"id": "carousel", "name": "Carousel"}]
    bulletin = _bulletin("Merry-go-round horses", "")

    assert matcher.get_best_category_for_bulletin(bulletin, categories) == "carousel"


def test_keywords_for_unknown_type_is_empty():
    assert keywords_for("not-a-ride") == ()
