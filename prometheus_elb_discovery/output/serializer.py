"""JSON encoding of target groups in Prometheus file_sd format."""

from __future__ import annotations

import json

from ..discovery.models import TargetGroup
from ..exceptions import EncodeError


def ordered_groups(groups: dict[str, TargetGroup]) -> list[TargetGroup]:
    """Target groups sorted by their grouping signature."""
    return [groups[key] for key in sorted(groups)]


def serialize(groups: dict[str, TargetGroup]) -> bytes:
    """Encode target groups as an indented JSON array, ordered by signature.

    The same groups always produce the same bytes.
    """
    document = [group.to_dict() for group in ordered_groups(groups)]
    try:
        return json.dumps(document, indent=2, ensure_ascii=False).encode("utf-8")
    except (TypeError, ValueError, UnicodeEncodeError) as exc:
        raise EncodeError(f"Could not encode target groups: {exc}") from exc
