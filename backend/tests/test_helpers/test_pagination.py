"""Tests for page-based pagination helpers."""

import pytest

from helpers.pagination import build_pagination, page_to_offset


class TestPageToOffset:
    @pytest.mark.parametrize(
        "page,limit,offset",
        [(1, 20, 0), (2, 20, 20), (3, 7, 14)],
    )
    def test_offsets(self, page: int, limit: int, offset: int) -> None:
        assert page_to_offset(page, limit) == offset

    def test_pages_below_one_clamp_to_first(self) -> None:
        assert page_to_offset(0, 20) == 0


class TestBuildPagination:
    def test_partial_last_page(self) -> None:
        """A partial last page still counts as a page."""
        assert build_pagination(1, 20, 41) == {
            "page": 1,
            "limit": 20,
            "total": 41,
            "total_pages": 3,
        }

    def test_exact_multiple(self) -> None:
        assert build_pagination(2, 10, 30)["total_pages"] == 3

    def test_no_results(self) -> None:
        assert build_pagination(1, 20, 0)["total_pages"] == 0
