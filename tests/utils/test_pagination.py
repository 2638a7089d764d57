from pagewise.utils.pagination import OffsetPage, PageResult


class TestOffsetPage:
    def test_neighbours(self):
        page = OffsetPage(items=[1], page=2, size=1, total=3, has_next=True, has_prev=True, total_pages=3)
        assert page.next_page == 3
        assert page.prev_page == 1

    def test_no_neighbours(self):
        page = OffsetPage(items=[1], page=1, size=5, total=1, has_next=False, has_prev=False, total_pages=1)
        assert page.next_page is None
        assert page.prev_page is None

    def test_map_returns_copy(self):
        page = OffsetPage(items=[1, 2], page=1, size=2, total=2, has_next=False, has_prev=False, total_pages=1)
        doubled = page.map(lambda x: x * 2)
        assert doubled.items == [2, 4]
        assert page.items == [1, 2]


class TestPageResult:
    def test_has_next(self):
        assert PageResult(items=[], limit=0, next_token="t").has_next is True
        assert PageResult(items=[], limit=0, next_token=None).has_next is False

    def test_map_keeps_token(self):
        result = PageResult(items=["a"], limit=1, next_token="t").map(str.upper)
        assert result.items == ["A"]
        assert result.next_token == "t"
