"""
ストレージ関連パッケージ。

目的:
    - 永続化DB（SQLite）とキー/値ストレージを1箇所へ集約する。
"""

from __future__ import annotations
