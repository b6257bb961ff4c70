# backend/showdb/apps/bulletins/keywords.py
#
# Ride type keyword dictionary.
#
# Each entry maps a canonical ride-type id to the lowercase phrases that
# identify that ride type in free text. The table is a tuple of pairs, not
# a dict, so the iteration order is part of the data: the matcher walks it
# top to bottom and the first hit wins.

from __future__ import annotations

from typing import Tuple

RideTypeKeywords = Tuple[Tuple[str, Tuple[str, ...]], ...]

RIDE_TYPE_KEYWORDS: RideTypeKeywords = (
    ("chair-o-plane", ("chair o plane", "chair-o-plane", "chairoplane", "flying chairs", "chair swing", "wave swinger")),
    ("ferris-wheel", ("ferris wheel", "big wheel", "observation wheel", "giant wheel")),
    ("carousel", ("carousel", "merry-go-round", "roundabout", "horses")),
    ("roller-coaster", ("roller coaster", "coaster", "rollercoaster")),
    ("bumper-cars", ("bumper cars", "dodgems", "bumper car", "dodgem")),
    ("helter-skelter", ("helter skelter", "slide", "spiral slide")),
    ("waltzers", ("waltzer", "waltzers", "spinning ride")),
    ("pirate-ship", ("pirate ship", "pendulum", "swinging ship")),
    ("spinning-ride", ("spinning", "centrifuge", "gravitron", "rotor")),
    ("drop-tower", ("drop tower", "drop ride", "free fall", "freefall")),
    ("swinging-ride", ("swing", "swinging", "pendulum")),
    ("dark-ride", ("dark ride", "ghost train", "haunted house")),
    ("water-ride", ("log flume", "water ride", "splash", "rapids")),
    ("inflatable", ("inflatable", "bouncy castle", "bounce", "air bag")),
    ("go-kart", ("go kart", "go-kart", "karting", "racing")),
    ("train-ride", ("train", "railway", "locomotive")),
    (
        "food-stall",
        (
            "fish & chips", "burger van", "hot dog", "candy floss", "toffee apple", "ice cream", "donut",
            "pizza", "tea & coffee", "popcorn", "crepe", "jacket potato", "noodle", "sweet stall",
        ),
    ),
    (
        "game-stall",
        (
            "hook-a-duck", "ring toss", "coconut shy", "test your strength", "shooting gallery", "basketball",
            "darts", "arcade", "penny arcade", "hoopla", "tombola",
        ),
    ),
    ("generator", ("generator", "power", "electricity", "diesel")),
)

_KEYWORDS_BY_TYPE = dict(RIDE_TYPE_KEYWORDS)


def ride_type_ids() -> Tuple[str, ...]:
    return tuple(ride_type for ride_type, _ in RIDE_TYPE_KEYWORDS)


def keywords_for(ride_type: str) -> Tuple[str, ...]:
    """Phrases for a ride type; unknown types have none."""
    return _KEYWORDS_BY_TYPE.get(ride_type, ())
