"""
HTTP ルート登録。

目的:
    - router 登録の配線をまとめる。
    - `main.py` から HTTP 配線の詳細を外す。
"""

from __future__ import annotations

from fastapi import FastAPI

from medtracker.api import control, events, medications


def register_http_routes(app: FastAPI) -> None:
    """
    API router を登録する。
    """

    # --- API router を登録する ---
    app.include_router(medications.router, prefix="/api")
    app.include_router(control.router, prefix="/api")
    app.include_router(events.router, prefix="/api")

    # --- ヘルスチェックを登録する ---
    @app.get("/api/health")
    async def health() -> dict[str, str]:
        """稼働確認用のヘルスチェックを返す。"""

        return {"status": "healthy"}
