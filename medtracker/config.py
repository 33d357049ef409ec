"""
設定読み込みとグローバル設定

TOML設定ファイル（config/setting.toml）を読み込み、起動時に固定される Config を構築する。
設定は起動時に一度だけ登録され、各モジュールから get_config() で参照される。
"""

from __future__ import annotations

import pathlib
from dataclasses import dataclass
from typing import Any

import tomli

from medtracker.infra import paths


# --- 既定値 ---
DEFAULT_STORAGE_KEY = "medtracker-medications"
DEFAULT_STORAGE_QUOTA_BYTES = 5 * 1024 * 1024  # ブラウザの localStorage 相当
DEFAULT_REMINDER_INTERVAL_SECONDS = 60.0
DEFAULT_NOTIFICATION_AUTO_DISMISS_SECONDS = 10.0


@dataclass
class Config:
    """
    TOML起動設定（起動時のみ使用、変更不可）。
    """
    medtracker_port: int  # API の待受ポート
    log_level: str  # ログレベル（DEBUG, INFO, WARNING, ERROR）
    log_file_enabled: bool  # ファイルログ有効/無効
    log_file_path: str  # ファイルログの保存先パス
    log_file_max_bytes: int  # ファイルログのローテーションサイズ（bytes）
    storage_db_path: str  # 永続化DB（SQLite）のパス
    storage_key: str  # 服薬リストを保存するキー
    storage_quota_bytes: int  # 1キーあたりの保存上限（bytes, 0以下で無制限）
    reminder_interval_seconds: float  # リマインダー評価の間隔（秒）
    notifications_enabled: bool  # 通知の許可（False なら tick は何もしない）
    notification_auto_dismiss_seconds: float  # 通知の自動クローズ目安（秒）


_ALLOWED_KEYS = {
    "medtracker_port",
    "log_level",
    "log_file_enabled",
    "log_file_path",
    "log_file_max_bytes",
    "storage_db_path",
    "storage_key",
    "storage_quota_bytes",
    "reminder_interval_seconds",
    "notifications_enabled",
    "notification_auto_dismiss_seconds",
}


def _require(config_dict: dict, key: str) -> Any:
    """
    設定辞書から必須キーを取得する。
    キーが存在しないか空の場合はValueErrorを発生させる。
    """
    if key not in config_dict or config_dict[key] in (None, ""):
        raise ValueError(f"config key '{key}' is required")
    return config_dict[key]


def _positive_float(data: dict, key: str, default: float) -> float:
    v = float(data.get(key, default))
    if v <= 0:
        raise ValueError(f"{key} must be a positive number")
    return v


def build_config(data: dict) -> Config:
    """
    パース済みの設定辞書から Config を構築する。
    許可されていないキーが含まれる場合はエラーを発生させる。
    """
    unknown_keys = sorted(set(data.keys()) - _ALLOWED_KEYS)
    if unknown_keys:
        keys = ", ".join(repr(k) for k in unknown_keys)
        raise ValueError(f"unknown config key(s): {keys} (allowed: {sorted(_ALLOWED_KEYS)})")

    # --- パスは相対指定なら app_root 基準に解決する ---
    # NOTE: 既定パスの取得はディレクトリを作るので、キーが無いときだけ行う。
    if "log_file_path" in data:
        raw_log_file_path = str(data["log_file_path"])
    else:
        raw_log_file_path = str(paths.get_logs_dir() / "medtracker.log")
    if "storage_db_path" in data:
        raw_storage_db_path = str(data["storage_db_path"])
    else:
        raw_storage_db_path = str(paths.get_db_dir() / "medtracker.db")

    # --- 保存キー（空文字は不可） ---
    storage_key = str(data.get("storage_key", DEFAULT_STORAGE_KEY)).strip()
    if not storage_key:
        raise ValueError("storage_key must not be empty")

    # --- 評価間隔/自動クローズ（正の数） ---
    # NOTE: 0以下だと periodic ループが空回りするため、起動時に弾く。
    reminder_interval_seconds = _positive_float(data, "reminder_interval_seconds", DEFAULT_REMINDER_INTERVAL_SECONDS)
    notification_auto_dismiss_seconds = _positive_float(
        data, "notification_auto_dismiss_seconds", DEFAULT_NOTIFICATION_AUTO_DISMISS_SECONDS
    )

    return Config(
        # --- サーバー待受ポート（必須） ---
        medtracker_port=int(_require(data, "medtracker_port")),
        log_level=str(_require(data, "log_level")),
        log_file_enabled=bool(data.get("log_file_enabled", False)),
        log_file_path=str(paths.resolve_path_under_app_root(raw_log_file_path)),
        log_file_max_bytes=int(data.get("log_file_max_bytes", 200_000)),
        storage_db_path=str(paths.resolve_path_under_app_root(raw_storage_db_path)),
        storage_key=storage_key,
        storage_quota_bytes=int(data.get("storage_quota_bytes", DEFAULT_STORAGE_QUOTA_BYTES)),
        reminder_interval_seconds=float(reminder_interval_seconds),
        notifications_enabled=bool(data.get("notifications_enabled", True)),
        notification_auto_dismiss_seconds=float(notification_auto_dismiss_seconds),
    )


def load_config(path: str | pathlib.Path | None = None) -> Config:
    """
    TOML設定ファイルを読み込む。
    """
    # --- 設定ファイルは app_root の config/setting.toml を既定にする ---
    config_path = pathlib.Path(paths.get_default_config_file_path() if path is None else path)
    config_path = paths.resolve_path_under_app_root(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"config file not found: {config_path}")

    # TOMLファイルをパース
    with config_path.open("rb") as f:
        data = tomli.load(f)

    return build_config(data)


# グローバル設定（シングルトン）
_config: Config | None = None


def set_global_config(config: Config) -> None:
    """グローバルConfigを設定。起動時に一度だけ呼び出される。"""
    global _config
    _config = config


def get_config() -> Config:
    """
    グローバルConfigを取得。
    初期化されていない場合はRuntimeErrorを発生させる。
    """
    if _config is None:
        raise RuntimeError("Config not initialized")
    return _config
