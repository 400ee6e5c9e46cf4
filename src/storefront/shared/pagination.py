"""Offset pagination over Protean querysets."""

DEFAULT_PER_PAGE = 20
MAX_PER_PAGE = 100


def normalize_page(page, per_page) -> tuple[int, int]:
    page = max(int(page or 1), 1)
    per_page = min(max(int(per_page or DEFAULT_PER_PAGE), 1), MAX_PER_PAGE)
    return page, per_page


def paginate(query, page=1, per_page=DEFAULT_PER_PAGE) -> tuple[list, int]:
    """Return one page of records and the total count matching the query."""
    page, per_page = normalize_page(page, per_page)
    result = query.offset((page - 1) * per_page).limit(per_page).all()
    return list(result.items), result.total


def iter_all(query, batch_size=MAX_PER_PAGE):
    """Yield every record matching the query, fetching one batch at a time."""
    offset = 0
    while True:
        result = query.offset(offset).limit(batch_size).all()
        yield from result.items
        if len(result.items) < batch_size:
            return
        offset += batch_size
