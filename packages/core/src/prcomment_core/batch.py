from __future__ import annotations

import json
import logging
from pathlib import Path

from prcomment_core.errors import ConfigError
from prcomment_core.models import ReviewItem

logger = logging.getLogger(__name__)


def load_review_batch(path: str, log: logging.Logger | None = None) -> list[ReviewItem]:
    """Read a ``{"reviews": [...]}`` file into ReviewItems, preserving order.

    A missing file, an empty file and an empty ``reviews`` array all mean
    there is nothing to post and return []. Malformed JSON raises ConfigError.
    """
    log = log or logger
    p = Path(path)
    if not p.exists():
        log.warning("Comments file %s not found, skipping", path)
        return []

    data = p.read_text()
    if not data.strip():
        log.warning("Comments file %s is empty, skipping", path)
        return []

    try:
        parsed = json.loads(data)
        reviews = [ReviewItem.from_dict(r) for r in (parsed or {}).get("reviews") or []]
    except (AttributeError, TypeError, ValueError) as e:
        raise ConfigError(f"failed to parse comments file {path}: {e}") from e

    if not reviews:
        log.info("No reviews in %s, nothing to post", path)
    else:
        log.info("Loaded %d review(s) from %s", len(reviews), path)
    return reviews
