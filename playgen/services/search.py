from typing import List, Sequence

from playgen.helpers.utils import norm
from playgen.models.song import Song


def filter_songs(rows: Sequence[Song], query: str) -> List[Song]:
    """Keep songs whose title/channel contain every token of the query."""
    if not (query or "").strip():
        return list(rows)
    toks = norm(query).split()
    out: List[Song] = []
    for s in rows:
        hay_n = norm(" | ".join([s.title, s.channel or ""]))
        if all(tok in hay_n for tok in toks):
            out.append(s)
    return out
