import pytest

from eventcheck.paginate import clamp_page, paginate, total_pages


class TestPaginate:
    """Fixed-size pagination"""

    @pytest.mark.parametrize(
        "count, page_size, expected",
        [(0, 10, 0), (1, 10, 1), (10, 10, 1), (11, 10, 2), (25, 10, 3)],
    )
    def test_total_pages(self, count, page_size, expected):
        assert total_pages(count, page_size) == expected

    def test_page_slices(self):
        items = list(range(25))
        page = paginate(items, 3, 10)
        assert page.items == [20, 21, 22, 23, 24]
        assert page.total_pages == 3
        assert page.start_index == 20
        assert page.end_index == 25

    def test_pages_cover_sequence_without_overlap(self):
        items = list(range(23))
        pages = total_pages(len(items), 5)
        joined = [i for p in range(1, pages + 1) for i in paginate(items, p, 5).items]
        assert joined == items

    def test_page_past_end_is_empty(self):
        page = paginate(list(range(5)), 4, 10)
        assert page.items == []

    def test_invalid_arguments(self):
        with pytest.raises(ValueError):
            paginate([1, 2], 0, 10)
        with pytest.raises(ValueError):
            total_pages(5, 0)

    @pytest.mark.parametrize(
        "page, pages, expected",
        [(0, 3, 1), (2, 3, 2), (5, 3, 3), (4, 0, 1), (-2, 0, 1)],
    )
    def test_clamp_page(self, page, pages, expected):
        assert clamp_page(page, pages) == expected
