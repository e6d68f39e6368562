"""Tests for repokit.pagination."""

import math

import pytest

from repokit.errors import InvalidArgumentError
from repokit.pagination import (
    UNBOUNDED,
    PageDescriptor,
    count_total_pages,
    get_limit,
    get_offset,
    has_next_page,
    has_prev_page,
    paginate,
)


class TestOffset:
    @pytest.mark.parametrize("page,page_size,expected", [(1, 10, 0), (2, 10, 10), (10, 10, 90), (3, 7, 14)])
    def test_offset_for_page(self, page: int, page_size: int, expected: int) -> None:
        assert get_offset(page, page_size) == expected

    def test_page_zero_is_unbounded(self) -> None:
        assert get_offset(0, 10) == UNBOUNDED
        assert get_offset(0, 0) == -1


class TestLimit:
    def test_zero_page_size_is_unbounded(self) -> None:
        assert get_limit(0) == -1

    def test_positive_page_size(self) -> None:
        assert get_limit(25) == 25


class TestTotalPages:
    def test_exact_multiple(self) -> None:
        assert count_total_pages(100, 10, 10) == 10

    def test_remainder_adds_a_page(self) -> None:
        assert count_total_pages(101, 10, 10) == 11

    def test_empty(self) -> None:
        assert count_total_pages(0, 10, 10) == 0

    def test_matches_ceil(self) -> None:
        for total in range(0, 60):
            for size in (1, 3, 7, 10):
                assert count_total_pages(total, size, size) == math.ceil(total / size)

    def test_zero_page_size_does_not_divide(self) -> None:
        assert count_total_pages(42, -1, 0) == 1
        assert count_total_pages(0, -1, 0) == 0


class TestNextPrev:
    def test_has_next_on_first_page(self) -> None:
        assert has_next_page(1, 10, 100) is True

    def test_no_next_on_last_page(self) -> None:
        assert has_next_page(10, 10, 100) is False

    def test_no_next_when_unbounded(self) -> None:
        assert has_next_page(1, -1, 100) is False

    def test_prev(self) -> None:
        assert has_prev_page(0) is False
        assert has_prev_page(1) is False
        assert has_prev_page(2) is True


class TestPaginate:
    def test_first_page(self) -> None:
        d: PageDescriptor = paginate(1, 10, 100)
        assert d.offset == 0
        assert d.limit == 10
        assert d.total_pages == 10
        assert d.has_next_page is True
        assert d.has_prev_page is False

    def test_last_partial_page(self) -> None:
        d: PageDescriptor = paginate(11, 10, 101)
        assert d.offset == 100
        assert d.total_pages == 11
        assert d.has_next_page is False
        assert d.has_prev_page is True

    def test_unbounded(self) -> None:
        d: PageDescriptor = paginate(0, 0, 37)
        assert (d.offset, d.limit) == (-1, -1)
        assert d.total_pages == 1
        assert d.has_next_page is False

    def test_idempotent(self) -> None:
        assert paginate(3, 10, 55) == paginate(3, 10, 55)

    def test_as_dict(self) -> None:
        data: dict = paginate(2, 5, 12).as_dict()
        assert data["offset"] == 5
        assert data["total_pages"] == 3

    @pytest.mark.parametrize("args", [(-1, 10, 0), (1, -1, 0), (1, 10, -5)])
    def test_negative_inputs_rejected(self, args: tuple[int, int, int]) -> None:
        with pytest.raises(InvalidArgumentError):
            paginate(*args)
