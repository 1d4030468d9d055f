from typing import Optional


def iso(value) -> Optional[str]:
    return value.isoformat() if value else None


def paginate(qs, page: Optional[int], page_size: Optional[int]) -> tuple[list, int]:
    """Slice ``qs`` for ``page``; returns the rows and the unsliced total."""
    total = qs.count()
    if page and page_size:
        start = (page - 1) * page_size
        qs = qs[start:start + page_size]
    return list(qs), total
