import pytest

from pagewise.core.snapshot import key_of
from pagewise.core.view import CollectionView, maybe_await
from pagewise.utils.exceptions import PaginationConflict


def _rows(n):
    return [{"seq": i, "kind": "even" if i % 2 == 0 else "odd"} for i in range(n)]


class TestMaybeAwait:
    async def test_plain_value(self):
        assert await maybe_await(5) == 5

    async def test_coroutine(self):
        async def produce():
            return 7

        assert await maybe_await(produce()) == 7


class TestCollectionView:
    async def test_all_is_sorted(self):
        view = CollectionView(lambda: list(reversed(_rows(5))), key=key_of("seq"))
        assert [r["seq"] for r in await view.all()] == [0, 1, 2, 3, 4]

    async def test_async_source(self):
        async def source():
            return _rows(3)

        view = CollectionView(source, key=key_of("seq"))
        assert await view.count() == 3

    async def test_filter_returns_new_view(self):
        view = CollectionView(lambda: _rows(6), key=key_of("seq"))
        evens = view.filter(lambda r: r["kind"] == "even")
        assert await view.count() == 6
        assert [r["seq"] for r in await evens.all()] == [0, 2, 4]

    async def test_filters_combine(self):
        view = (
            CollectionView(lambda: _rows(10), key=key_of("seq"))
            .filter(lambda r: r["kind"] == "even")
            .filter(lambda r: r["seq"] > 3)
        )
        assert [r["seq"] for r in await view.all()] == [4, 6, 8]

    async def test_order_by(self):
        view = CollectionView(lambda: _rows(3), key=key_of("seq")).order_by(lambda r: -r["seq"])
        assert (await view.first())["seq"] == 2

    async def test_first_of_empty(self):
        assert await CollectionView(lambda: [], key=key_of("seq")).first() is None

    async def test_named(self):
        view = CollectionView(lambda: [], key=key_of("seq")).named("jobs")
        assert view.name == "jobs"

    async def test_source_read_per_call(self):
        calls = []

        def source():
            calls.append(1)
            return _rows(2)

        view = CollectionView(source, key=key_of("seq"))
        assert len(calls) == 0
        await view.all()
        await view.count()
        assert len(calls) == 2

    async def test_aiter(self):
        view = CollectionView(lambda: _rows(3), key=key_of("seq"))
        assert [r["seq"] async for r in view] == [0, 1, 2]


class TestViewPagination:
    async def test_paginate(self):
        view = CollectionView(lambda: _rows(10), key=key_of("seq"))
        page = await view.paginate(page=3, size=4)
        assert [r["seq"] for r in page.items] == [8, 9]
        assert page.total == 10

    async def test_paginate_respects_max_size(self):
        view = CollectionView(lambda: _rows(10), key=key_of("seq"), max_size=3)
        page = await view.paginate(page=1, size=50)
        assert page.size == 3

    async def test_cursor_paginate_walks_live_source(self):
        rows = _rows(5)
        view = CollectionView(lambda: list(rows), key=key_of("seq"))
        first = await view.cursor_paginate(3)
        rows.append({"seq": 5, "kind": "odd"})
        second = await view.cursor_paginate(3, first.next_token)
        assert [r["seq"] for r in second.items] == [3, 4, 5]
        assert second.next_token is None

    async def test_cursor_paginate_conflict_after_removal(self):
        rows = _rows(5)
        view = CollectionView(lambda: list(rows), key=key_of("seq"))
        first = await view.cursor_paginate(3)
        del rows[0]
        with pytest.raises(PaginationConflict):
            await view.cursor_paginate(3, first.next_token)
