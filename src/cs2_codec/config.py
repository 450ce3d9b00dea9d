# -*- coding: utf-8 -*-
from __future__ import annotations

import os
from dataclasses import dataclass


# ============================================================
# Codec options
# ============================================================
@dataclass(frozen=True)
class EncodeOptions:
    trailing_newline: bool = True
    """Terminate the last line with a newline as well. Off reproduces files
    written without a final line break."""


@dataclass(frozen=True)
class DecodeOptions:
    strict_schema: bool = True
    """Reject keys the record does not declare. When off, unknown fields and
    everything nested below them are skipped."""

    allow_indented_lines: bool = True
    """Accept arbitrary leading whitespace in front of headers and depth
    markers (as found in hand-written or embedded documents). When off, a
    header must start in column 1 and a field line with depth markers must
    start with exactly one blank."""

    strict_hex_width: bool = False
    """Require zero padded hex integers to carry exactly width/4 digits."""


DEFAULT_ENCODE_OPTIONS = EncodeOptions()
DEFAULT_DECODE_OPTIONS = DecodeOptions()


# ============================================================
# Raw text logging
# ============================================================
@dataclass(frozen=True)
class RawLogPolicy:
    """Whether failing input text may be echoed into debug logs.

    - Off by default; cs2 files can be large and are often user data.
    - Enable with ``CS2_CODEC_LOG_RAW=true`` while debugging.
    """
    enabled: bool
    preview_chars: int = 200

    @staticmethod
    def from_env() -> "RawLogPolicy":
        enabled = os.getenv("CS2_CODEC_LOG_RAW", "false").lower() == "true"
        try:
            preview_chars = int(os.getenv("CS2_CODEC_LOG_PREVIEW_CHARS", "200"))
        except ValueError:
            preview_chars = 200
        return RawLogPolicy(enabled=enabled, preview_chars=max(0, preview_chars))


def safe_raw_preview(text: str, policy: RawLogPolicy | None = None) -> str:
    """Return a one-line preview of ``text`` according to the policy."""
    if policy is None:
        policy = RawLogPolicy.from_env()
    if not policy.enabled:
        return "REDACTED"
    preview = text[: policy.preview_chars]
    return preview.replace("\r", "\\r").replace("\n", "\\n")
