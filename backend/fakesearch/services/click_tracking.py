"""
Click Tracking — realistic ad-click identifiers for served ad URLs.
Layered on top of the deterministic attribution URL; never used for tests by exact string.
"""

import random
import string
from typing import Optional
from urllib.parse import urlsplit, urlunsplit
from fakesearch.services.attribution import encode_component, ensure_absolute_url

GCLID_PREFIXES = ("CjwKCAiA", "EAIaIQob", "CjwKEAjw", "EAIaIQoB")
GCLID_ALPHABET = string.ascii_uppercase + string.ascii_lowercase + string.digits + "-_"
BRAID_ALPHABET = string.ascii_uppercase + string.ascii_lowercase + string.digits
GCLID_BODY_LENGTH = 85
BRAID_BODY_LENGTH = 25
# Share of clicks that also carry a gbraid/wbraid id
BRAID_RATE = 0.3
GOOGLE_ADS_CLICK_SOURCE = "aw.ds"

_DECORATION_KEYS = {"gclid", "gbraid", "wbraid", "gclsrc", "adpos"}


def generate_gclid(rng: random.Random) -> str:
    prefix = rng.choice(GCLID_PREFIXES)
    return prefix + "".join(rng.choice(GCLID_ALPHABET) for _ in range(GCLID_BODY_LENGTH))


def generate_gbraid(rng: random.Random) -> str:
    return "0A" + "".join(rng.choice(BRAID_ALPHABET) for _ in range(BRAID_BODY_LENGTH))


def generate_wbraid(rng: random.Random) -> str:
    return "1t" + "".join(rng.choice(BRAID_ALPHABET) for _ in range(BRAID_BODY_LENGTH))


def _query_key(piece: str) -> str:
    return piece.split("=", 1)[0]


def decorate_click_url(
    url: str,
    keyword: str,
    position: int = 0,
    rng: Optional[random.Random] = None,
) -> str:
    """
    Add gclid, optional gbraid/wbraid, gclsrc, utm_term (only if missing) and adpos.
    position is zero-based; adpos is reported 1-based like the ad slot on the page.
    Existing query parameters keep their original encoding.
    """
    rng = rng or random.Random()
    ensure_absolute_url(url)
    parts = urlsplit(url)
    pieces = [p for p in parts.query.split("&") if p and _query_key(p) not in _DECORATION_KEYS]
    has_term = any(_query_key(p) == "utm_term" for p in pieces)

    pieces.append(f"gclid={generate_gclid(rng)}")
    if rng.random() < BRAID_RATE:
        if rng.random() < 0.5:
            pieces.append(f"gbraid={generate_gbraid(rng)}")
        else:
            pieces.append(f"wbraid={generate_wbraid(rng)}")
    pieces.append(f"gclsrc={GOOGLE_ADS_CLICK_SOURCE}")
    if keyword and not has_term:
        pieces.append(f"utm_term={encode_component(keyword)}")
    pieces.append(f"adpos={position + 1}")

    return urlunsplit((parts.scheme, parts.netloc, parts.path, "&".join(pieces), parts.fragment))
