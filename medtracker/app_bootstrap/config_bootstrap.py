"""
起動時の設定・DB初期化。

目的:
    - create_app() から初期化の詳細を切り離す。
    - 設定 -> ログ -> 永続化DB の順序を1箇所で固定する。
"""

from __future__ import annotations

from medtracker.app_bootstrap.dependencies import reset_services
from medtracker.config import Config, load_config, set_global_config
from medtracker.runtime.logging import setup_logging
from medtracker.storage.db import init_storage_db


def bootstrap_runtime_config(config: Config | None = None) -> Config:
    """
    起動時の初期化を実行し、確定した Config を返す。

    Args:
        config: 構築済みの設定。None なら config/setting.toml を読む。

    Returns:
        起動完了後にアプリ全体で使う Config。
    """

    # --- 1. TOML 設定を読み込み、ログ設定を先に確定する ---
    toml_config = config if config is not None else load_config()
    setup_logging(
        toml_config.log_level,
        log_file_enabled=toml_config.log_file_enabled,
        log_file_path=toml_config.log_file_path,
        log_file_max_bytes=toml_config.log_file_max_bytes,
    )

    # --- 2. 永続化DBを初期化する ---
    init_storage_db(toml_config.storage_db_path)

    # --- 3. グローバル設定を登録し、古いシングルトンを捨てる ---
    set_global_config(toml_config)
    reset_services()
    return toml_config
