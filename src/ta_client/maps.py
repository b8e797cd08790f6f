"""Static allow-list of map names the game client accepts on its command line.

Names follow the ``<GameType>-<MapName>`` convention used by the game's
own package files.  A map that is not listed here is never forwarded to
the executable.
"""

from __future__ import annotations

CTF_MAPS: tuple[str, ...] = (
    "TrCTF-ArxNovena",
    "TrCTF-BellaOmega",
    "TrCTF-BellaOmegaNS",
    "TrCTF-Blueshift",
    "TrCTF-CanyonCrusadeRevival",
    "TrCTF-Crossfire",
    "TrCTF-DangerousCrossing",
    "TrCTF-Drydock",
    "TrCTF-DrydockNight",
    "TrCTF-Hellfire",
    "TrCTF-IceCoaster",
    "TrCTF-Katabatic",
    "TrCTF-Perdition",
    "TrCTF-Permafrost",
    "TrCTF-Raindance",
    "TrCTF-Stonehenge",
    "TrCTF-Sunstar",
    "TrCTF-TempleRuins",
    "TrCTF-Tartarus",
)

CTF_BLITZ_MAPS: tuple[str, ...] = (
    "TrCTFBlitz-AirArena",
    "TrCTFBlitz-Allegiance",
    "TrCTFBlitz-BellaOmega",
    "TrCTFBlitz-Blueshift",
    "TrCTFBlitz-CanyonCrusadeRevival",
    "TrCTFBlitz-Crossfire",
    "TrCTFBlitz-DangerousCrossing",
    "TrCTFBlitz-Drydock",
    "TrCTFBlitz-Katabatic",
    "TrCTFBlitz-Stonehenge",
    "TrCTFBlitz-Sunstar",
)

ARENA_MAPS: tuple[str, ...] = (
    "TrArena-AirArena",
    "TrArena-ElysianBattleground",
    "TrArena-FrayTown",
    "TrArena-Hinterlands",
    "TrArena-LavaArena",
    "TrArena-Undercroft",
    "TrArena-WalledIn",
    "TrArena-Whiteout",
)

OTHER_MAPS: tuple[str, ...] = (
    "TrCaH-CanyonCrusadeRevival",
    "TrCaH-Drydock",
    "TrCaH-Katabatic",
    "TrCaH-Outskirts",
    "TrCaH-Raindance",
    "TrCaH-Tartarus",
    "TrRabbit-Crossfire",
    "TrRabbit-Outskirts",
    "TrRabbit-Quicksand",
    "TrTDM-Crossfire",
    "TrTDM-Drydock",
    "TrTDM-Quicksand",
)

#: Every map name accepted as a destination token.
MAPS: frozenset[str] = frozenset(CTF_MAPS + CTF_BLITZ_MAPS + ARENA_MAPS + OTHER_MAPS)


def is_valid_map(name: object) -> bool:
    """Return ``True`` if *name* is a string on the allow-list."""
    return isinstance(name, str) and name in MAPS
