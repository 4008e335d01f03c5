"""
記録対象となる DNS 応答のインターフェース。
"""

from __future__ import annotations

from typing import Protocol


class DnsResponse(Protocol):
    """
    ``dns.message.Message`` が満たす最小限のインターフェース。
    """

    def rcode(self) -> int:
        ...

    def to_wire(self) -> bytes:
        ...
