"""
メトリクスのラベル値として利用する閉じた語彙。
"""

from __future__ import annotations

import logging
from enum import Enum

import dns.rcode

LOGGER = logging.getLogger("skydns_metrics.labels")


class System(str, Enum):
    """リクエストを処理した解決サブシステム。"""

    AUTH = "auth"
    CACHE = "cache"
    RECURSIVE = "recursive"
    REVERSE = "reverse"
    STUB = "stub"


class Cause(str, Enum):
    """失敗・異常応答の分類。"""

    NXDOMAIN = "nxdomain"
    NODATA = "nodata"
    TRUNCATED = "truncated"
    REFUSED = "refused"
    OVERFLOW = "overflow"
    LOOP = "loop"
    SERVFAIL = "servfail"


class CacheType(str, Enum):
    """ミスが発生したキャッシュ層。"""

    RESPONSE = "response"
    SIGNATURE = "signature"


# NODATA は rcode だけでは NOERROR と区別できないため分類しない。
_RCODE_CAUSES: dict[dns.rcode.Rcode, Cause] = {
    dns.rcode.Rcode.SERVFAIL: Cause.SERVFAIL,
    dns.rcode.Rcode.REFUSED: Cause.REFUSED,
    dns.rcode.Rcode.NXDOMAIN: Cause.NXDOMAIN,
}


def cause_from_rcode(rcode: int) -> Cause | None:
    """
    応答コードを Cause に対応付ける。

    Returns:
        Cause | None: 対応する分類。計上対象外の rcode の場合は None。
    """

    try:
        code = dns.rcode.Rcode(rcode)
    except ValueError:
        return None
    return _RCODE_CAUSES.get(code)


def label_value(enum_type: type[Enum], value: Enum | str) -> str:
    """
    列挙値または文字列をラベル値に変換する。

    語彙外の文字列も例外にせずそのままラベル値として扱う。
    カーディナリティが増えるため推奨はしないが、記録処理は失敗させない。
    """

    if isinstance(value, Enum):
        return str(value.value)
    if value not in enum_type._value2member_map_:
        LOGGER.debug("Label value '%s' is outside the %s vocabulary", value, enum_type.__name__)
    return str(value)
