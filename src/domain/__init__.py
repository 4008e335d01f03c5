"""
ドメイン層のパッケージ初期化。
"""

from .labels import CacheType, Cause, System, cause_from_rcode, label_value
from .response import DnsResponse

__all__ = [
    "CacheType",
    "Cause",
    "DnsResponse",
    "System",
    "cause_from_rcode",
    "label_value",
]
