"""
Persistent storage for the user's cart (selected courses, blockouts, overload).

This module manages the file:

    data/processed/cart.json

The cart is tied to the timetable data it was made with: it stores a hash of
the workbook rows, and a cart saved for different data is discarded on load
(section ids may no longer mean the same thing).

Selections and blockouts are stored in the same shape the engine uses.
"""

from __future__ import annotations

import hashlib
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Optional

from termplan.config import OVERLOAD_MAX, OVERLOAD_MIN
from termplan.errors import InvalidBlockoutError, InvalidSelectionError
from termplan.model import BOTH, Blockout, Selection

logger = logging.getLogger(__name__)


def _default_cart_path() -> Path:
    """
    Return the default path of cart.json inside the package.

    Using a function instead of a constant makes testing easier,
    because tests can override the path.
    """
    base_dir = Path(__file__).resolve().parent
    return base_dir / "data" / "processed" / "cart.json"


def hash_rows(rows: Iterable[dict[str, Any]]) -> str:
    """
    Stable fingerprint of the raw workbook rows (key order does not matter).
    """
    payload = json.dumps(
        [dict(sorted(row.items())) for row in rows],
        sort_keys=True,
        ensure_ascii=False,
        default=str,
    )
    return hashlib.sha1(payload.encode("utf-8")).hexdigest()[:16]


# ---------------------------------------------------------------------------
# (De)serialization
# ---------------------------------------------------------------------------


def selection_to_dict(sel: Selection) -> dict[str, Any]:
    return {
        "course_code": sel.course_code,
        "course_title": sel.title,
        "section_ids": list(sel.section_ids),
        "terms": list(sel.terms),
    }


def selection_from_dict(data: dict[str, Any]) -> Selection:
    return Selection(
        course_code=str(data["course_code"]).strip(),
        section_ids=tuple(str(s) for s in data.get("section_ids", [])),
        terms=tuple(str(t) for t in data.get("terms", [])),
        title=str(data.get("course_title", "") or ""),
    )


def blockout_to_dict(b: Blockout) -> dict[str, Any]:
    return {
        "day": b.day,
        "start_time": b.start_time,
        "end_time": b.end_time,
        "label": b.label,
        "applies_to": b.applies_to,
    }


def blockout_from_dict(data: dict[str, Any]) -> Blockout:
    # carts written before per-term blockouts existed have no 'applies_to'
    return Blockout(
        day=str(data["day"]).strip().lower(),
        start_time=str(data["start_time"]).strip(),
        end_time=str(data["end_time"]).strip(),
        label=str(data.get("label", "") or ""),
        applies_to=str(data.get("applies_to") or BOTH),
    )


# ---------------------------------------------------------------------------
# Cart file
# ---------------------------------------------------------------------------


@dataclass
class Cart:
    selections: list[Selection] = field(default_factory=list)
    blockouts: list[Blockout] = field(default_factory=list)
    overload: Optional[int] = None
    saved_at: str = ""


def save_cart(
    data_hash: str,
    selections: Iterable[Selection],
    blockouts: Iterable[Blockout],
    overload: Optional[int] = None,
    path: str | Path | None = None,
) -> None:
    """
    Save the cart to cart.json. Creates parent directories if needed.
    """
    cart_path = Path(path) if path is not None else _default_cart_path()
    cart_path.parent.mkdir(parents=True, exist_ok=True)

    payload = {
        "data_hash": data_hash,
        "selected_courses": [selection_to_dict(s) for s in selections],
        "blockouts": [blockout_to_dict(b) for b in blockouts],
        "overload": overload,
        "saved_at": datetime.now(timezone.utc).isoformat(timespec="seconds"),
    }
    cart_path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")


def load_cart(current_hash: str, path: str | Path | None = None) -> Optional[Cart]:
    """
    Load the cart saved for `current_hash`.

    Returns None (and deletes the file) if it was saved for other data or
    cannot be read. Returns None without touching anything if there is no
    file yet. Single unreadable entries are skipped.
    """
    cart_path = Path(path) if path is not None else _default_cart_path()
    if not cart_path.exists():
        return None

    try:
        data = json.loads(cart_path.read_text(encoding="utf-8"))
        if data.get("data_hash") != current_hash:
            logger.info("Data hash mismatch, clearing saved cart %s", cart_path)
            clear_cart(cart_path)
            return None

        selections: list[Selection] = []
        for item in data.get("selected_courses", []) or []:
            try:
                selections.append(selection_from_dict(item))
            except (InvalidSelectionError, KeyError, TypeError) as exc:
                logger.warning("Skipping unreadable selection %r: %s", item, exc)

        blockouts: list[Blockout] = []
        for item in data.get("blockouts", []) or []:
            try:
                blockouts.append(blockout_from_dict(item))
            except (InvalidBlockoutError, KeyError, TypeError) as exc:
                logger.warning("Skipping unreadable blockout %r: %s", item, exc)

        overload = _read_overload(data.get("overload"))
        return Cart(
            selections=selections,
            blockouts=blockouts,
            overload=overload,
            saved_at=str(data.get("saved_at", "")),
        )
    except (OSError, json.JSONDecodeError, UnicodeDecodeError, AttributeError, TypeError, ValueError) as exc:
        logger.warning("Error loading cart %s: %s", cart_path, exc)
        clear_cart(cart_path)
        return None


def _read_overload(value: Any) -> Optional[int]:
    """
    The saved per-term limit, or None (overload off) if missing or outside
    the allowed range.
    """
    if value is None:
        return None
    try:
        limit = int(value)
    except (TypeError, ValueError):
        limit = None
    if limit is None or not OVERLOAD_MIN <= limit <= OVERLOAD_MAX:
        logger.warning("Ignoring saved overload %r (allowed %d-%d)", value, OVERLOAD_MIN, OVERLOAD_MAX)
        return None
    return limit


def clear_cart(path: str | Path | None = None) -> None:
    cart_path = Path(path) if path is not None else _default_cart_path()
    cart_path.unlink(missing_ok=True)


def has_saved_cart(path: str | Path | None = None) -> bool:
    cart_path = Path(path) if path is not None else _default_cart_path()
    return cart_path.exists()
