# domains/tracking/carriers.py
"""
운송장 문자열 → 택배사 / 조회 URL 추론.

규칙은 위에서 아래로 평가되고 처음 맞는 규칙이 이긴다.
접두어 규칙(1Z, EX, ...)은 숫자 길이 규칙보다 반드시 앞에 있어야 한다.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple
from urllib.parse import quote


@dataclass(frozen=True)
class CarrierMatch:
    carrier_name: Optional[str] = None
    tracking_url: Optional[str] = None

    @property
    def is_trackable(self) -> bool:
        return self.tracking_url is not None


NO_MATCH = CarrierMatch()

AMAZON_URL = "https://www.amazon.com/progress-tracker/package/?itemId=&orderId=&trackingId={id}"
ORANGE_CONNEX_URL = "https://www.orangeconnex.com/tracking?language=en&trackingnumber={id}"
ECMS_URL = "https://www.ecmsglobal.com/en-us/tracking.html?orderNumber={id}"
UPS_URL = "https://www.ups.com/track?tracknum={id}&loc=en_US&requester=ST/trackdetails"
FEDEX_URL = "https://www.fedex.com/fedextrack/?trknbr={id}"
USPS_URL = "https://tools.usps.com/go/TrackConfirmAction?tLabels={id}"
DHL_URL = "https://www.dhl.com/us-en/home/tracking/tracking-express.html?submit=1&tracking-id={id}"

_FEDEX_RE = re.compile(r"^\d{12,14}$")
_USPS_RE = re.compile(r"^\d{20,22}$")
_USPS_PREFIX_RE = re.compile(r"^(94|92|93)\d{20}$")
_DHL_RE = re.compile(r"^\d{10,11}$")

# URL 안에 들어있는 택배사 힌트 (소문자 비교)
_URL_HINTS: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("amzn", "amazon.com"), "Amazon"),
    (("fedex.com",), "FedEx"),
)

# 번호가 아닌 이름만 적힌 경우. USPS 가 UPS 를 포함하므로 USPS 먼저.
_NAME_TOKENS: Tuple[Tuple[str, str], ...] = (
    ("USPS", "USPS"),
    ("UPS", "UPS"),
    ("FEDEX", "FedEx"),
    ("DHL", "DHL"),
    ("ECMS", "ECMS"),
    ("LOCAL", "Local"),
)


def _template(carrier_name: str, url: str) -> Callable[[str], CarrierMatch]:
    def handler(tracking: str) -> CarrierMatch:
        return CarrierMatch(carrier_name, url.format(id=quote(tracking, safe="")))

    return handler


def _prebuilt_url(tracking: str) -> CarrierMatch:
    lowered = tracking.lower()
    for hints, name in _URL_HINTS:
        if any(h in lowered for h in hints):
            return CarrierMatch(name, tracking)
    return CarrierMatch(None, tracking)


def _name_only(tracking: str) -> CarrierMatch:
    upper = tracking.upper()
    for token, name in _NAME_TOKENS:
        if token in upper:
            return CarrierMatch(name, None)
    return NO_MATCH


Rule = Tuple[str, Callable[[str], bool], Callable[[str], CarrierMatch]]

RULES: List[Rule] = [
    ("url", lambda t: t.startswith("http"), _prebuilt_url),
    ("amazon", lambda t: t.upper().startswith("TBA"), _template("Amazon", AMAZON_URL)),
    ("orange_connex", lambda t: t.startswith("EX"), _template("Orange Connex", ORANGE_CONNEX_URL)),
    ("ecms", lambda t: t.startswith("ECSDT"), _template("ECMS", ECMS_URL)),
    ("ups", lambda t: t.startswith("1Z"), _template("UPS", UPS_URL)),
    ("fedex", lambda t: bool(_FEDEX_RE.match(t)), _template("FedEx", FEDEX_URL)),
    (
        "usps",
        lambda t: bool(_USPS_RE.match(t) or _USPS_PREFIX_RE.match(t)),
        _template("USPS", USPS_URL),
    ),
    ("dhl", lambda t: bool(_DHL_RE.match(t)), _template("DHL", DHL_URL)),
    ("name_only", lambda t: True, _name_only),
]


def match_rule(tracking: Optional[str]) -> Optional[str]:
    """어떤 규칙이 적용됐는지 이름으로 반환 (디버깅/테스트용)."""
    value = (tracking or "").strip()
    if not value:
        return None
    for name, predicate, _ in RULES:
        if predicate(value):
            return name
    return None


def classify(tracking: Optional[str]) -> CarrierMatch:
    if not isinstance(tracking, str):
        return NO_MATCH
    value = tracking.strip()
    if not value:
        return NO_MATCH
    for _, predicate, handler in RULES:
        if predicate(value):
            return handler(value)
    return NO_MATCH


def get_tracking_url(tracking: Optional[str]) -> Optional[str]:
    return classify(tracking).tracking_url


def get_carrier_name(tracking: Optional[str]) -> Optional[str]:
    return classify(tracking).carrier_name
