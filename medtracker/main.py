"""
FastAPI エントリポイント

MedTracker APIサーバーのメインモジュール。
初期化の詳細は app_bootstrap に寄せ、ここではアプリインスタンスを作るだけにする。
"""

from __future__ import annotations

from medtracker.app_bootstrap import create_app


# アプリケーションインスタンスを作成
app = create_app()
