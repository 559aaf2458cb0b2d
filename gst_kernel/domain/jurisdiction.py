"""
Jurisdiction reference data: Indian GST state codes and GSTIN parsing.

A GSTIN is 15 characters: two-digit state code, ten-character PAN,
one registration digit/letter, a literal ``Z``, and a check character.
The first two digits are the registrant's jurisdiction code.
"""

from __future__ import annotations

import re
from types import MappingProxyType

STATE_CODES: MappingProxyType[str, str] = MappingProxyType({
    "01": "Jammu and Kashmir",
    "02": "Himachal Pradesh",
    "03": "Punjab",
    "04": "Chandigarh",
    "05": "Uttarakhand",
    "06": "Haryana",
    "07": "Delhi",
    "08": "Rajasthan",
    "09": "Uttar Pradesh",
    "10": "Bihar",
    "11": "Sikkim",
    "12": "Arunachal Pradesh",
    "13": "Nagaland",
    "14": "Manipur",
    "15": "Mizoram",
    "16": "Tripura",
    "17": "Meghalaya",
    "18": "Assam",
    "19": "West Bengal",
    "20": "Jharkhand",
    "21": "Odisha",
    "22": "Chhattisgarh",
    "23": "Madhya Pradesh",
    "24": "Gujarat",
    "25": "Daman and Diu",
    "26": "Dadra and Nagar Haveli",
    "27": "Maharashtra",
    "28": "Andhra Pradesh",
    "29": "Karnataka",
    "30": "Goa",
    "31": "Lakshadweep",
    "32": "Kerala",
    "33": "Tamil Nadu",
    "34": "Puducherry",
    "35": "Andaman and Nicobar Islands",
    "36": "Telangana",
    "37": "Andhra Pradesh",
})

_GSTIN_RE = re.compile(r"^[0-3][0-9][A-Z]{5}[0-9]{4}[A-Z][1-9A-Z]Z[0-9A-Z]$")


def state_name(code: str) -> str:
    """Human-readable state name, or ``"Unknown State"``."""
    return STATE_CODES.get(code, "Unknown State")


def is_known_state(code: str | None) -> bool:
    return code is not None and code in STATE_CODES


def validate_gstin(gstin: str | None) -> bool:
    """Format check only (no checksum verification)."""
    if not gstin or len(gstin) != 15:
        return False
    return _GSTIN_RE.match(gstin.upper()) is not None


def jurisdiction_from_gstin(gstin: str | None) -> str | None:
    """State code of a valid GSTIN, else None."""
    if not validate_gstin(gstin):
        return None
    code = gstin[:2]
    return code if code in STATE_CODES else None
