# -*- coding: utf-8 -*-
"""
问诊 AskDeploy - 基于证据的部署诊断引擎
AskDeploy - Evidence-Based Deployment Diagnostic Engine

Copyright © 2025-2026 WenShape Team
License: PolyForm Noncommercial License 1.0.0

模块说明 / Module Description:
  敏感信息脱敏 - 纯函数，替换令牌、私钥、连接串和密钥赋值
  Secret Redaction - Pure substitution of tokens, private keys, connection strings
  and secret assignments. Never raises; idempotent.
"""

import re

REDACTED = "[REDACTED]"

# PEM-encoded private keys (multi-line). An unterminated block runs to end of text.
_PRIVATE_KEY_RE = re.compile(
    r"-----BEGIN [A-Z ]*PRIVATE KEY-----(?:[\s\S]*?-----END [A-Z ]*PRIVATE KEY-----|[\s\S]*\Z)"
)

# Database / service connection strings carrying credentials
_CONNECTION_STRING_RE = re.compile(r"\b(?:postgres(?:ql)?|mysql|redis|mongodb(?:\+srv)?)://[^\s\"']+")

# HTTP(S) URLs with embedded user:pass@
_CREDENTIAL_URL_RE = re.compile(r"https?://[^@/\s]+:[^@/\s]+@[^\s\"']+")

_AWS_KEY_RE = re.compile(r"\bAKIA[0-9A-Z]{16}\b")

_JWT_RE = re.compile(r"\beyJ[A-Za-z0-9_-]{10,}\.eyJ[A-Za-z0-9_-]{10,}\.[A-Za-z0-9_-]{10,}")

# Prefixed API tokens: sk_live_..., pk_test_..., ghp_..., xoxb-..., jkt_...
_PREFIXED_TOKEN_RE = re.compile(
    r"\b(?:sk|pk|rk|jkt|ghp|gho|ghu|ghs|ghr|glpat|xoxb|xoxp|xapp|whsec)[_-][A-Za-z0-9_-]{6,}"
)

_BEARER_RE = re.compile(r"Bearer\s+[A-Za-z0-9._~+/=-]{20,}")

_SECRET_KEY = r"[A-Za-z0-9_]*(?:password|passwd|secret|token|api[_-]?key)"

# "api_key": "value"
_JSON_SECRET_RE = re.compile(
    r"([\"'])(" + _SECRET_KEY + r")\1\s*:\s*([\"'])[^\"']*\3",
    re.IGNORECASE,
)

# password=value, DB_PASSWORD: "value", api-key='value'
_ASSIGNMENT_RE = re.compile(
    r"\b(" + _SECRET_KEY + r")\b\s*[:=]\s*(?:\"[^\"]*\"|'[^']*'|[^\s,;&\"']+)",
    re.IGNORECASE,
)


def redact(text: str) -> str:
    """
    脱敏文本中的敏感信息

    Scrub secrets from text. Returns the input unchanged when nothing matches.
    Non-string input is converted with ``str()``; ``None`` becomes "".

    Example:
        >>> redact('password="hunter2" ok')
        'password=[REDACTED] ok'
        >>> redact("key sk_live_abcdef123456")
        'key [REDACTED]'
    """
    if text is None:
        return ""
    result = text if isinstance(text, str) else str(text)

    # Order matters: multi-line keys first, then URL shapes, then token shapes.
    result = _PRIVATE_KEY_RE.sub("[REDACTED-PRIVATE-KEY]", result)
    result = _CONNECTION_STRING_RE.sub("[REDACTED-URL]", result)
    result = _CREDENTIAL_URL_RE.sub("[REDACTED-URL]", result)
    result = _AWS_KEY_RE.sub(REDACTED, result)
    result = _JWT_RE.sub(REDACTED, result)
    result = _PREFIXED_TOKEN_RE.sub(REDACTED, result)
    result = _BEARER_RE.sub(f"Bearer {REDACTED}", result)
    result = _JSON_SECRET_RE.sub(lambda m: f"{m.group(1)}{m.group(2)}{m.group(1)}: {m.group(3)}{REDACTED}{m.group(3)}", result)
    result = _ASSIGNMENT_RE.sub(lambda m: f"{m.group(1)}={REDACTED}", result)
    return result
