"""
実行環境まわり（パス解決など）のパッケージ。
"""

from __future__ import annotations
