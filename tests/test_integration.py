"""Integration tests for a full review session."""

import asyncio

from factor_review.config import Config
from factor_review.review import IntentOutcome, ReviewTable


class TestReviewSession:
    """An operator working through a queue of line items."""

    def test_override_then_batch_approve(self, line_items, factors, scheduler):
        approved = []
        table = ReviewTable(
            line_items,
            on_batch_approve=approved.append,
            config=Config().table,
        )

        # Pick a better factor for the low-confidence item via search
        matcher = table.open_matcher("4", factors, scheduler=scheduler)
        for text in ("m", "me", "med"):
            matcher.set_query(text)
            scheduler.advance(0.1)
        scheduler.advance(0.3)
        matcher.handle_key(matcher.KEY_ENTER)
        assert table.resolved_factor_id("4") == "ef-3"

        table.toggle_select("4")
        table.toggle_select("1")
        table.batch_approve()

        assert approved == [["4", "1"]]
        assert table.ledger.get("4").factor_id == "ef-3"
        assert table.pending_count == 2

        table.resolve(["4", "1"])
        assert table.ledger.ids_with(IntentOutcome.COMMITTED) == ["4", "1"]

        # Caller removes approved items from the queue
        table.set_items(line_items[1:3])
        assert table.selected_ids == []
        assert len(table.ledger) == 0
        assert [r.item.id for r in table.visible_rows()] == ["2", "3"]

    def test_matcher_on_event_loop(self, factors):
        """Debounce driven by a real asyncio loop."""
        selected = []

        async def session():
            table = ReviewTable([])
            matcher = table.open_matcher("x", factors)
            matcher.on_select = selected.append
            matcher.set_query("grid")
            await asyncio.sleep(0.4)
            return matcher.commit()

        factor = asyncio.run(session())
        assert factor.id == "ef-2"
        assert selected == [factor]
