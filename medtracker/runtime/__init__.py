"""
実行時サービス（ログ/定期実行/イベント配信）パッケージ。
"""

from __future__ import annotations
