"""Pagination arithmetic for bounded reads.

Pages are 1-based. Page 0 means "no pagination" (no offset) and a page
size of 0 means "no limit". Both unbounded cases are reported as -1,
which the backend treats as "do not apply".
"""

from dataclasses import asdict, dataclass

from repokit.errors import InvalidArgumentError

UNBOUNDED = -1


@dataclass(frozen=True)
class PageDescriptor:
    """Offset/limit window plus the page summary derived from a row count."""
    page: int
    page_size: int
    offset: int
    limit: int
    total_count: int
    total_pages: int
    has_next_page: bool
    has_prev_page: bool

    def as_dict(self) -> dict:
        return asdict(self)


def _require_non_negative(name: str, value: int) -> None:
    if value < 0:
        raise InvalidArgumentError(f"{name} must be >= 0, got {value}")


def get_offset(page: int, page_size: int) -> int:
    """Rows to skip for a page; UNBOUNDED for page 0."""
    if page == 0:
        return UNBOUNDED
    return page_size * (page - 1)


def get_limit(page_size: int) -> int:
    """Rows to read for a page; UNBOUNDED for page size 0."""
    if page_size == 0:
        return UNBOUNDED
    return page_size


def count_total_pages(total_count: int, limit: int, page_size: int) -> int:
    """
    Number of pages needed for total_count rows.

    With no page size every row sits on a single page, so the result is
    1 for a non-empty result set and 0 otherwise.
    """
    if page_size == 0:
        return 1 if total_count > 0 else 0
    return (total_count + limit - 1) // page_size


def has_next_page(page: int, limit: int, total_count: int) -> bool:
    """
    True when rows remain after the given page.

    A limit of -1 means an unbounded read, which already returned every
    row, so there is never a next page.
    """
    if limit < 0:
        return False
    return page * limit < total_count


def has_prev_page(page: int) -> bool:
    return page > 1


def paginate(page: int, page_size: int, total_count: int) -> PageDescriptor:
    """Build the full page descriptor for a search."""
    _require_non_negative("page", page)
    _require_non_negative("page_size", page_size)
    _require_non_negative("total_count", total_count)

    limit = get_limit(page_size)
    return PageDescriptor(
        page=page,
        page_size=page_size,
        offset=get_offset(page, page_size),
        limit=limit,
        total_count=total_count,
        total_pages=count_total_pages(total_count, limit, page_size),
        has_next_page=has_next_page(page, limit, total_count),
        has_prev_page=has_prev_page(page),
    )
