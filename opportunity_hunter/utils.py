# opportunity_hunter/utils.py
import hashlib
import html
import re
from typing import Any, Iterable, List, Optional, TypeVar

_ws_re = re.compile(r"\s+")
_tag_re = re.compile(r"<[^>]+>")
_first_int_re = re.compile(r"\d+")

T = TypeVar("T")


def safe_str(x: Any) -> str:
    return x.strip() if isinstance(x, str) else ""


def to_float(x: Any) -> Optional[float]:
    """Coerce API numbers that may arrive as strings ("45.00") or be missing."""
    if x is None or isinstance(x, bool):
        return None
    if isinstance(x, (int, float)):
        return float(x)
    if isinstance(x, str):
        s = x.strip().replace(",", "").lstrip("$")
        if not s:
            return None
        try:
            return float(s)
        except ValueError:
            return None
    return None


def first_int(text: str) -> Optional[int]:
    m = _first_int_re.search(text or "")
    return int(m.group(0)) if m else None


def normalize_text(text: str) -> str:
    """Lowercase and collapse whitespace."""
    if not text:
        return ""
    text = html.unescape(text)
    text = _ws_re.sub(" ", text).strip().lower()
    return text


def html_to_text(maybe_html: str) -> str:
    if not maybe_html:
        return ""
    s = html.unescape(maybe_html)
    s = _tag_re.sub(" ", s)
    s = _ws_re.sub(" ", s).strip()
    return s


def stable_fallback_id(*parts: str) -> str:
    blob = "|".join([p for p in parts if p]).encode("utf-8")
    return hashlib.sha1(blob).hexdigest()


def dedupe_by_external_id(listings: Iterable[T]) -> List[T]:
    """First occurrence of each external_id wins; order is preserved."""
    seen = set()
    out: List[T] = []
    for item in listings:
        key = getattr(item, "external_id")
        if key in seen:
            continue
        seen.add(key)
        out.append(item)
    return out
