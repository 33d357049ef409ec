"""
アプリ起動配線パッケージ。

目的:
    - 起動時の配線を `main.py` から分離する。
    - 初期化手順を責務ごとに読みやすく保つ。
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from medtracker.config import Config

if TYPE_CHECKING:  # pragma: no cover
    from fastapi import FastAPI


def create_app(config: Config | None = None) -> "FastAPI":
    """
    アプリ生成と初期化を行う。
    設定→ログ→永続化DB→ルータ登録→ライフサイクル登録の順で実行する。
    """
    # --- router は app_bootstrap.dependencies を参照するため、ここで遅延 import する ---
    from fastapi import FastAPI

    from medtracker.app_bootstrap.config_bootstrap import bootstrap_runtime_config
    from medtracker.app_bootstrap.lifecycle import register_lifecycle_hooks
    from medtracker.app_bootstrap.routers import register_http_routes

    runtime_config = bootstrap_runtime_config(config)
    app = FastAPI(title="MedTracker API")
    register_http_routes(app)
    register_lifecycle_hooks(app, config=runtime_config)
    return app


__all__ = ["create_app"]
