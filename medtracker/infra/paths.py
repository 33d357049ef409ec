"""
保存先パスの解決

設定ファイル・DB・ログの置き場所を1箇所で決める。

方針:
- app_root は 環境変数 MEDTRACKER_APP_ROOT > 実行ファイルの隣（配布版）> カレントディレクトリ の順で決める。
- 相対パスは app_root 基準に解決する（起動ディレクトリに依存させない）。
"""

from __future__ import annotations

import os
import sys
from pathlib import Path


APP_ROOT_ENV = "MEDTRACKER_APP_ROOT"


def get_app_root() -> Path:
    """アプリのルートディレクトリを返す。"""

    # --- 明示指定（テスト/運用向け）を最優先 ---
    env = str(os.environ.get(APP_ROOT_ENV) or "").strip()
    if env:
        return Path(env).resolve()

    # --- 配布版（PyInstaller）は exe の隣 ---
    if getattr(sys, "frozen", False):
        return Path(sys.executable).resolve().parent

    return Path.cwd().resolve()


def _ensure_dir(p: Path) -> Path:
    p.mkdir(parents=True, exist_ok=True)
    return p


def get_config_dir() -> Path:
    """設定ディレクトリ（config/）を返す。無ければ作る。"""

    return _ensure_dir(get_app_root() / "config")


def get_data_dir() -> Path:
    """データディレクトリ（data/）を返す。無ければ作る。"""

    return _ensure_dir(get_app_root() / "data")


def get_db_dir() -> Path:
    """DB 保存先ディレクトリを返す（現状は data/ と同じ）。"""

    return get_data_dir()


def get_logs_dir() -> Path:
    """ログディレクトリ（logs/）を返す。無ければ作る。"""

    return _ensure_dir(get_app_root() / "logs")


def get_default_config_file_path() -> Path:
    """既定の設定ファイルパス（config/setting.toml）を返す。"""

    return get_config_dir() / "setting.toml"


def resolve_path_under_app_root(path: str | Path) -> Path:
    """
    パスを app_root 基準で解決する。

    絶対パスはそのまま返す。
    """

    p = Path(path).expanduser()
    if p.is_absolute():
        return p
    return (get_app_root() / p).resolve()
