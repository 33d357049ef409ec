"""配布向けのエントリポイント。

設計意図:
- 「単一の起動点」を用意する
- ここでは *保存先ディレクトリ* を確実に作成し、起動に必要な前提を揃える
- uvicorn の起動はプログラムから行う（CLI依存を減らす）
"""

from __future__ import annotations


def main() -> None:
    """配布版のサーバー起動処理。"""

    # --- 先にディレクトリを確実に作る（初回起動時の事故防止） ---
    from medtracker.infra import paths

    paths.get_config_dir()
    paths.get_data_dir()
    paths.get_logs_dir()

    # --- 設定ファイルが無い場合は、案内して終了 ---
    # 初回起動時に stacktrace を出すよりも、ユーザーが取るべき行動を明確にする。
    config_path = paths.get_default_config_file_path()
    if not config_path.exists():
        print("[MedTracker] config/setting.toml が見つかりません。")
        print("[MedTracker] config/setting.toml.example をコピーして作成してください。")
        print(f"[MedTracker] 期待パス: {config_path}")
        return

    # --- setting.toml から待受ポートを取得する ---
    from medtracker.config import load_config

    toml_config = load_config(config_path)

    # --- app を直接 import して渡す ---
    from medtracker.app_bootstrap import create_app

    app = create_app(toml_config)

    import uvicorn

    uvicorn.run(
        app,
        host="127.0.0.1",
        port=toml_config.medtracker_port,
        reload=False,
    )


if __name__ == "__main__":
    main()
