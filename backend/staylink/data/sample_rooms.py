"""Sample hotel inventory — demo rooms inserted by the seed endpoint."""

_BASE = ["Air conditioning", "Private bathroom"]
_STANDARD = ["Safety deposit box", "Linen"]

# (room number, room type, floor, capacity, status, extra amenities)
_ROOMS: list[tuple[int, str, int, int, str, list[str]]] = [
    (101, "Standard Single", 1, 1, "available", []),
    (102, "Standard Double", 1, 2, "available", ["Socket near the bed"]),
    (103, "Deluxe Suite", 1, 2, "occupied", ["Hot tub", "Sauna", "Sea view"]),
    (201, "Standard Single", 2, 1, "reserved", ["Reading light"]),
    (202, "Standard Double", 2, 2, "available", ["Electric kettle"]),
    (203, "Deluxe Suite", 2, 3, "available", ["Hot tub", "Sea view", "Patio"]),
    (204, "Family Room", 2, 4, "available", ["Cots", "Children's high chair", "Video games"]),
    (301, "Standard Single", 3, 1, "maintenance", []),
    (302, "Standard Double", 3, 2, "available", ["Bathrobe"]),
    (303, "Deluxe Suite", 3, 2, "occupied", ["Hot tub", "Sauna", "Sea view", "Outdoor dining area"]),
    (304, "Presidential Suite", 3, 4, "reserved", [
        "Hot tub", "Sauna", "Sea view", "Patio", "Outdoor dining area", "Dressing room", "Bathrobe",
    ]),
    (401, "Standard Single", 4, 1, "available", ["Inner courtyard view"]),
    (402, "Standard Double", 4, 2, "available", ["Sea view"]),
    (403, "Accessible Room", 4, 2, "available", ["Hearing accessible", "Adapted bath"]),
    (404, "Deluxe Suite", 4, 3, "available", ["Hot tub", "Sea view", "Patio", "Reading light"]),
    (501, "Standard Single", 5, 1, "occupied", ["Sea view"]),
    (502, "Standard Double", 5, 2, "available", ["Sea view", "Electric kettle"]),
    (503, "Deluxe Suite", 5, 2, "reserved", ["Hot tub", "Sauna", "Sea view", "Patio"]),
    (504, "Presidential Suite", 5, 4, "available", [
        "Hot tub", "Sauna", "Sea view", "Patio", "Outdoor dining area", "Dressing room", "Bathrobe", "Stovetop",
    ]),
]


def _amenities(room_type: str, extras: list[str]) -> list[str]:
    # Suites list their premium features before the standard set
    if room_type in ("Deluxe Suite", "Presidential Suite"):
        premium = [e for e in extras if e in ("Hot tub", "Sauna", "Sea view")]
        rest = [e for e in extras if e not in premium]
        return _BASE + premium + _STANDARD + rest
    if room_type == "Family Room":
        return _BASE + extras[:2] + _STANDARD + extras[2:]
    if room_type == "Accessible Room":
        return _BASE + extras + _STANDARD
    return _BASE + _STANDARD + extras


SAMPLE_ROOMS: list[dict] = [
    {
        "room_number": number,
        "room_type": room_type,
        "floor": floor,
        "capacity": capacity,
        "status": status,
        "facilities": _amenities(room_type, extras),
    }
    for number, room_type, floor, capacity, status, extras in _ROOMS
]
