from __future__ import annotations

"""输出模块：JSONL 记录器。"""

import json
import sys
from pathlib import Path
from typing import Iterable, TextIO


class JsonlEmitter:
    """JSONL 输出器（逐行 JSON）。"""

    def __init__(self, stream: TextIO | None = None, owns_stream: bool = False) -> None:
        """初始化输出流。

        参数:
            stream: 目标输出流，默认为 stdout。
            owns_stream: 为 True 时 close() 会关闭该流。
        """
        self._stream = stream if stream is not None else sys.stdout
        self._owns_stream = owns_stream

    @classmethod
    def open(cls, path: Path) -> "JsonlEmitter":
        """创建写入文件的输出器（自动创建父目录）。"""
        path.parent.mkdir(parents=True, exist_ok=True)
        return cls(path.open("w", encoding="utf-8"), owns_stream=True)

    def emit(self, record: dict) -> None:
        payload = json.dumps(record, ensure_ascii=False)
        self._stream.write(payload + "\n")
        self._stream.flush()

    def emit_many(self, records: Iterable[dict]) -> None:
        for record in records:
            self.emit(record)

    def close(self) -> None:
        if self._owns_stream:
            self._stream.close()
