# -*- coding: utf-8 -*-
"""
问诊 AskDeploy - 基于证据的部署诊断引擎
AskDeploy - Evidence-Based Deployment Diagnostic Engine

Copyright © 2025-2026 WenShape Team
License: PolyForm Noncommercial License 1.0.0

模块说明 / Module Description:
  源码快照读取 - 遍历部署 source.zip 中受支持的文本文件
  Source Snapshot Reader - Iterate supported text files inside a deployment's source.zip.
"""

import io
import zipfile
from typing import Iterator, Tuple

MAX_TEXT_FILE_BYTES = 300_000

JS_TS_EXTENSIONS = (".ts", ".tsx", ".js", ".jsx", ".mjs", ".cjs")
PYTHON_EXTENSIONS = (".py",)
TEXT_EXTENSIONS = JS_TS_EXTENSIONS + PYTHON_EXTENSIONS + (".json", ".md")

SNAPSHOT_FILENAME = "source.zip"


def is_supported_text_file(path: str) -> bool:
    return path.lower().endswith(TEXT_EXTENSIONS)


def detect_language(path: str) -> str:
    lower = path.lower()
    if lower.endswith((".ts", ".tsx")):
        return "typescript"
    if lower.endswith(JS_TS_EXTENSIONS):
        return "javascript"
    if lower.endswith(PYTHON_EXTENSIONS):
        return "python"
    if lower.endswith(".json"):
        return "json"
    if lower.endswith(".md"):
        return "markdown"
    return "text"


def iter_text_files(archive: bytes) -> Iterator[Tuple[str, str]]:
    """
    遍历压缩包中的文本文件

    Yield ``(path, text)`` for supported files no larger than
    ``MAX_TEXT_FILE_BYTES``, in archive order. Undecodable files are skipped.

    Raises:
        zipfile.BadZipFile: 如果不是有效的zip / If the archive is not a zip
    """
    with zipfile.ZipFile(io.BytesIO(archive)) as zf:
        for info in zf.infolist():
            if info.is_dir() or info.file_size > MAX_TEXT_FILE_BYTES:
                continue
            path = info.filename.lstrip("/")
            if not is_supported_text_file(path):
                continue
            try:
                text = zf.read(info).decode("utf-8")
            except UnicodeDecodeError:
                continue
            yield path, text
