# ta_mbr/llm/prompts.py
"""
Prompt Templates (YAML) — File-based Loading + Safe Rendering

Intent
- Load the MBR summary prompt from a YAML file (`system` optional, `user` required).
- Render `{placeholder}` tokens with runtime variables. The injected data is JSON,
  so rendering never goes through str.format (braces inside values are left alone).
- Normalize Unicode whitespace that silently breaks YAML block scalars.

Literal braces in templates are written as {{ and }}.
Missing placeholders raise KeyError.
"""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, Dict

import yaml

_BAD_WHITESPACE = {
    "\u00A0",  # NO-BREAK SPACE
    "\u2007",  # FIGURE SPACE
    "\u202F",  # NARROW NO-BREAK SPACE
    "\uFEFF",  # BOM
}

_PLACEHOLDER_RE = re.compile(r"\{([A-Za-z0-9_]+)\}")


def _sanitize_prompt_text(text: str) -> str:
    for ch in _BAD_WHITESPACE:
        text = text.replace(ch, " ")
    return text.replace("\r\n", "\n")


def load_prompt_file(path: str | Path) -> Dict[str, Any]:
    """
    Load a prompt YAML file.

    Raises:
      FileNotFoundError if path doesn't exist
      ValueError if YAML isn't a mapping or lacks a `user` block
    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Prompt file not found: {p}")

    obj = yaml.safe_load(_sanitize_prompt_text(p.read_text(encoding="utf-8")))
    if not isinstance(obj, dict):
        raise ValueError(f"Prompt YAML must be a mapping/dict: {p}")

    if not obj.get("user"):
        raise ValueError(f"Prompt YAML missing required 'user' field: {p}")

    clean: Dict[str, Any] = {}
    for k, v in obj.items():
        if isinstance(v, str):
            clean[k] = _sanitize_prompt_text(v)
        elif k in ("name", "purpose", "system", "user") and v is not None:
            clean[k] = str(v)
        else:
            clean[k] = v
    clean["_path"] = str(p)
    return clean


def render_prompt_text(text: str, variables: Dict[str, Any]) -> str:
    """
    Replace {var} tokens; {{ and }} render as literal braces.
    """
    if not isinstance(text, str):
        raise TypeError("render_prompt_text expects a string template")

    l_sent, r_sent = "\uE000", "\uE001"
    tmp = text.replace("{{", l_sent).replace("}}", r_sent)

    missing = sorted({name for name in _PLACEHOLDER_RE.findall(tmp) if name not in variables})
    if missing:
        raise KeyError(f"Missing template variable: {missing[0]}")

    def _repl(m: re.Match) -> str:
        val = variables.get(m.group(1))
        return "" if val is None else str(val)

    rendered = _PLACEHOLDER_RE.sub(_repl, tmp)
    return rendered.replace(l_sent, "{").replace(r_sent, "}")


def render_prompt_blocks(prompt: Dict[str, Any], variables: Dict[str, Any]) -> str:
    """
    Compose system + user blocks (blank line between) into the final prompt text.
    """
    system = prompt.get("system", "") or ""
    user = prompt.get("user", "") or ""

    parts = []
    if system.strip():
        parts.append(render_prompt_text(system, variables).strip())
    parts.append(render_prompt_text(user, variables).strip())
    return "\n\n".join(parts).strip() + "\n"


def json_dumps_pretty(obj: Any) -> str:
    """
    Pretty JSON for prompt injection; keeps sheet column order, preserves Unicode.
    """
    return json.dumps(obj, ensure_ascii=False, indent=2)


__all__ = ["load_prompt_file", "render_prompt_text", "render_prompt_blocks", "json_dumps_pretty"]
