# app/keyboard_layout.py
# Reference US QWERTY finger assignment used for finger-load attribution.
from __future__ import annotations
from typing import Dict, Optional

FINGERS = (
    "L-Pinky", "L-Ring", "L-Middle", "L-Index",
    "R-Index", "R-Middle", "R-Ring", "R-Pinky",
    "Thumb",
)
UNKNOWN_FINGER = "Unknown"

# unshifted keys per finger; shifted symbols are folded in below
_ROWS = {
    "L-Pinky": "`1qaz",
    "L-Ring": "2wsx",
    "L-Middle": "3edc",
    "L-Index": "45rtfgvb",
    "R-Index": "67yuhjnm",
    "R-Middle": "8ik,",
    "R-Ring": "9ol.",
    "R-Pinky": "0-=p[]\\;'/",
    "Thumb": " ",
}

_SHIFTED = dict(zip("`1234567890-=[]\\;',./", "~!@#$%^&*()_+{}|:\"<>?"))

FINGER_MAP: Dict[str, str] = {}
for _finger, _keys in _ROWS.items():
    for _k in _keys:
        FINGER_MAP[_k] = _finger
        if _k in _SHIFTED:
            FINGER_MAP[_SHIFTED[_k]] = _finger
FINGER_MAP["\n"] = "R-Pinky"
FINGER_MAP["\t"] = "L-Pinky"


def finger_for(ch: Optional[str]) -> str:
    if not ch:
        return UNKNOWN_FINGER
    return FINGER_MAP.get(ch) or FINGER_MAP.get(ch.lower(), UNKNOWN_FINGER)
