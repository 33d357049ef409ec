"""
共通ユーティリティ（JSONの最小セット）。

方針:
    - 「何でも入れる utils」にはしない。保存形式で共有する部分だけを扱う。
"""

from __future__ import annotations

import json
from typing import Any


def json_dumps(payload: Any) -> str:
    """保存向けにJSONを安定した形式でダンプする（日本語保持）。"""
    return json.dumps(payload, ensure_ascii=False, separators=(",", ":"))
