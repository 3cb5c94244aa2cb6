#!/usr/bin/env python3
"""Tests for paginated lists."""

import unittest

from fakes import FakeSession, make_response, page
from scryfall_fetch.client import GatedClient
from scryfall_fetch.endpoints import rulings, search
from scryfall_fetch.errors import ApiError, DecodeError, TransportError
from scryfall_fetch.listing import ListUri, ScryfallList

PAGE_1 = "https://api.scryfall.com/cards/search?q=zurgo&page=1"
PAGE_2 = "https://api.scryfall.com/cards/search?q=zurgo&page=2"
PAGE_3 = "https://api.scryfall.com/cards/search?q=zurgo&page=3"


def three_pages(page_2_reply=None):
    # A failing Response is falsy, so compare against None explicitly
    if page_2_reply is None:
        page_2_reply = make_response(200, page([4, 5], PAGE_3))
    return {
        PAGE_1: make_response(200, page([1, 2, 3], PAGE_2, total=7)),
        PAGE_2: page_2_reply,
        PAGE_3: make_response(200, page([6, 7])),
    }


class TestScryfallList(unittest.TestCase):
    """Test decoding a single page."""

    def test_from_json(self):
        body = page(["a"], PAGE_2, total=10, warnings=["Ignored term"])
        with self.assertLogs("scryfall_fetch.listing", level="WARNING"):
            result = ScryfallList.from_json(body, str.upper)

        self.assertEqual(result.data, ["A"])
        self.assertTrue(result.has_more)
        self.assertEqual(result.next_page, ListUri(PAGE_2))
        self.assertEqual(result.total_cards, 10)
        self.assertEqual(result.warnings, ["Ignored term"])

    def test_last_page_has_no_link(self):
        result = ScryfallList.from_json(page([]))
        self.assertFalse(result.has_more)
        self.assertIsNone(result.next_page)
        self.assertIsNone(result.total_cards)

    def test_missing_fields(self):
        with self.assertRaises(KeyError):
            ScryfallList.from_json({"has_more": False})
        with self.assertRaises(KeyError):
            ScryfallList.from_json({"data": []})


class TestFetchIter(unittest.TestCase):
    """Test lazy iteration over pages."""

    def test_yields_all_pages_in_order(self):
        session = FakeSession(three_pages())
        items = list(ListUri(PAGE_1).fetch_iter(GatedClient(session=session)))

        self.assertEqual(items, [1, 2, 3, 4, 5, 6, 7])
        self.assertEqual([url for _, url in session.calls], [PAGE_1, PAGE_2, PAGE_3])

    def test_pages_are_fetched_on_demand(self):
        """The next page is only requested once the current one is drained."""
        session = FakeSession(three_pages())
        stream = ListUri(PAGE_1).fetch_iter(GatedClient(session=session))
        self.assertEqual(len(session.calls), 1)

        for _ in range(3):
            next(stream)
        self.assertEqual(len(session.calls), 1)

        self.assertEqual(next(stream), 4)
        self.assertEqual(len(session.calls), 2)

    def test_items_are_decoded(self):
        session = FakeSession(three_pages())
        stream = ListUri(PAGE_1, lambda n: n * 10).fetch_iter(GatedClient(session=session))
        self.assertEqual(list(stream), [10, 20, 30, 40, 50, 60, 70])

    def test_not_restartable(self):
        stream = ListUri(PAGE_1).fetch_iter(GatedClient(session=FakeSession(three_pages())))
        self.assertIs(iter(stream), stream)
        list(stream)
        self.assertEqual(list(stream), [])

    def test_size_hint(self):
        stream = ListUri(PAGE_1).fetch_iter(GatedClient(session=FakeSession(three_pages())))
        self.assertEqual(stream.size_hint(), 7)

    def test_empty_page_in_the_middle_is_skipped(self):
        routes = three_pages(make_response(200, page([], PAGE_3)))
        items = list(ListUri(PAGE_1).fetch_iter(GatedClient(session=FakeSession(routes))))
        self.assertEqual(items, [1, 2, 3, 6, 7])

    def test_first_page_failure_is_raised(self):
        routes = {PAGE_1: make_response(404, {"status": 404, "details": "No cards found"})}
        with self.assertRaises(ApiError):
            ListUri(PAGE_1).fetch_iter(GatedClient(session=FakeSession(routes)))

    def test_later_page_failure_ends_iteration(self):
        """A failing later page is logged and the stream just stops."""
        routes = three_pages(make_response(500, ""))
        stream = ListUri(PAGE_1).fetch_iter(GatedClient(session=FakeSession(routes)))

        with self.assertLogs("scryfall_fetch.listing", level="ERROR") as logs:
            items = list(stream)

        self.assertEqual(items, [1, 2, 3])
        self.assertEqual(len(logs.records), 1)
        self.assertIn(PAGE_2, logs.output[0])
        self.assertEqual(list(stream), [])

    def test_item_decoder_failure_on_first_page_is_decode_error(self):
        session = FakeSession(three_pages())
        with self.assertRaises(DecodeError):
            ListUri(PAGE_1, lambda card: card.get("name")).fetch_iter(
                GatedClient(session=session)
            )

    def test_item_decoder_failure_on_later_page_ends_iteration(self):
        """A later page that does not decode is absorbed like any failure."""
        routes = three_pages(make_response(200, page(["not a card"], PAGE_3)))

        def decode(item):
            return item * 2 if isinstance(item, int) else item.get("name")

        stream = ListUri(PAGE_1, decode).fetch_iter(GatedClient(session=FakeSession(routes)))
        with self.assertLogs("scryfall_fetch.listing", level="ERROR"):
            items = list(stream)

        self.assertEqual(items, [2, 4, 6])


class TestFetchAll(unittest.TestCase):
    """Test eager collection of pages."""

    def test_collects_all_pages(self):
        items = ListUri(PAGE_1).fetch_all(GatedClient(session=FakeSession(three_pages())))
        self.assertEqual(items, [1, 2, 3, 4, 5, 6, 7])

    def test_later_page_failure_is_raised(self):
        """Any failing page aborts collection and nothing is returned."""
        session = FakeSession(three_pages(make_response(500, "")))

        with self.assertRaises(TransportError) as ctx:
            ListUri(PAGE_1).fetch_all(GatedClient(session=session))

        self.assertEqual(ctx.exception.url, PAGE_2)
        self.assertEqual([url for _, url in session.calls], [PAGE_1, PAGE_2])


class TestSearch(unittest.TestCase):
    """Test building search links."""

    def test_search_url(self):
        uri = search('!"Lightning Bolt" unique:prints', order="released")
        self.assertIsInstance(uri, ListUri)
        self.assertTrue(uri.url.startswith("https://api.scryfall.com/cards/search?q="))
        self.assertIn("unique%3Aprints", uri.url)
        self.assertIn("order=released", uri.url)

    def test_rulings_url(self):
        card_url = "https://api.scryfall.com/cards/e3285e6b-3e79-4d7c-bf96-d920f973b122"
        uri = rulings(card_url)
        self.assertIsInstance(uri, ListUri)
        self.assertEqual(uri.url, card_url + "/rulings/")
        self.assertEqual(rulings(card_url + "/"), uri)


if __name__ == "__main__":
    unittest.main()
