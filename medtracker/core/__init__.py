"""
横断的な小物（時計/時刻/JSON）パッケージ。
"""

from __future__ import annotations
