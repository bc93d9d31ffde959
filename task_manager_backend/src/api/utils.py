from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from .models import CategorySection
from .projector import empty_state


# PUBLIC_INTERFACE
def sections_envelope(
    sections: Sequence[CategorySection],
    category_count: int,
    search_text: Optional[str],
) -> Dict[str, Any]:
    """
    Build the standard envelope for the grouped task view.

    Args:
        sections: Projected sections, already in display order.
        category_count: Number of stored categories (before filtering).
        search_text: The search text the sections were projected with.

    Returns:
        Dict with keys: sections, empty_state.
    """
    return {
        "sections": list(sections),
        "empty_state": empty_state(sections, category_count, search_text),
    }
