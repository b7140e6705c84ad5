"""Tests for token estimation, trimming and segmentation."""

import random
from datetime import datetime, timedelta, timezone

import pytest

from chat_core.context import ContextManager, estimate_tokens, estimate_total, split_system
from chat_core.models import Attachment, Message

BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


def make_messages(lengths: list[int], with_system: bool = False) -> list[Message]:
    messages = []
    if with_system:
        messages.append(
            Message(id="sys", role="system", content="S", timestamp=BASE_TIME)
        )
    for i, length in enumerate(lengths):
        messages.append(
            Message(
                id=f"m{i}",
                role="user" if i % 2 == 0 else "assistant",
                content="x" * length,
                timestamp=BASE_TIME + timedelta(seconds=i),
            )
        )
    return messages


class TestEstimateTokens:
    """Tests for the per-message token estimate."""

    def test_empty_message_costs_overhead(self):
        assert estimate_tokens(make_messages([0])[0]) == 100

    def test_quarter_token_per_char_rounded_up(self):
        assert estimate_tokens(make_messages([1])[0]) == 101
        assert estimate_tokens(make_messages([8])[0]) == 102
        assert estimate_tokens(make_messages([9])[0]) == 103

    def test_attachment_markup_is_counted(self):
        message = make_messages([0])[0]
        message.attachments = [Attachment(id="a", type="file", url="u", name="n")]
        # "[File: n](u)" is 12 chars
        assert estimate_tokens(message) == 103

    def test_total_sums_messages(self):
        assert estimate_total(make_messages([0, 8, 9])) == 100 + 102 + 103
        assert estimate_total([]) == 0


class TestSplitSystem:
    def test_first_system_message_is_separated(self):
        messages = make_messages([4, 4], with_system=True)
        system, turns = split_system(messages)
        assert system.id == "sys"
        assert [m.id for m in turns] == ["m0", "m1"]

    def test_no_system(self):
        system, turns = split_system(make_messages([4]))
        assert system is None
        assert len(turns) == 1


class TestTrim:
    """Tests for ContextManager.trim()."""

    def test_everything_fits(self):
        manager = ContextManager(max_tokens=8000)
        messages = make_messages([10, 20, 30], with_system=True)
        assert manager.trim(messages) == messages

    def test_keeps_newest_messages(self):
        manager = ContextManager()
        messages = make_messages([40, 40, 40, 40])
        # Each costs 110; budget fits two
        trimmed = manager.trim(messages, budget=230)
        assert [m.id for m in trimmed] == ["m2", "m3"]

    def test_system_message_always_first(self):
        manager = ContextManager()
        messages = make_messages([40, 40, 40], with_system=True)
        trimmed = manager.trim(messages, budget=101 + 110)
        assert [m.id for m in trimmed] == ["sys", "m2"]

    def test_stops_at_first_message_that_does_not_fit(self):
        manager = ContextManager()
        # An older short message is not used to fill the gap
        messages = make_messages([0, 4000, 0])
        trimmed = manager.trim(messages, budget=250)
        assert [m.id for m in trimmed] == ["m2"]

    def test_system_alone_when_newest_too_large(self):
        manager = ContextManager()
        messages = make_messages([2000, 10], with_system=True)
        trimmed = manager.trim(messages, budget=150)
        assert [m.id for m in trimmed] == ["sys"]

    def test_extra_system_messages_dropped(self):
        manager = ContextManager()
        messages = make_messages([4], with_system=True)
        messages.append(
            Message(id="sys2", role="system", content="T", timestamp=BASE_TIME)
        )
        assert [m.id for m in manager.trim(messages)] == ["sys", "m0"]

    def test_empty_input(self):
        assert ContextManager().trim([]) == []

    def test_budget_and_order_hold_for_random_inputs(self):
        manager = ContextManager()
        rng = random.Random(7)
        for _ in range(50):
            messages = make_messages(
                [rng.randint(0, 2000) for _ in range(rng.randint(1, 12))],
                with_system=rng.random() < 0.5,
            )
            budget = rng.randint(200, 3000)
            trimmed = manager.trim(messages, budget=budget)

            system, turns = split_system(messages)
            kept_turns = [m for m in trimmed if m.role != "system"]
            if kept_turns:
                # A contiguous suffix of the turns
                assert turns[-len(kept_turns):] == kept_turns
                assert sum(manager.estimate(m) for m in trimmed) <= budget
            if system:
                assert trimmed[0] is system

    def test_trim_is_idempotent(self):
        manager = ContextManager()
        messages = make_messages([300, 50, 900, 20, 400], with_system=True)
        once = manager.trim(messages, budget=600)
        assert manager.trim(once, budget=600) == once


class TestSegment:
    """Tests for ContextManager.segment()."""

    def test_single_window_when_everything_fits(self):
        manager = ContextManager()
        messages = make_messages([10, 10, 10])
        assert manager.segment(messages, budget=1000) == [messages]

    def test_windows_overlap_by_two(self):
        manager = ContextManager()
        messages = make_messages([40] * 6)
        segments = manager.segment(messages, budget=440)  # four 110-token turns
        assert [[m.id for m in s] for s in segments] == [
            ["m0", "m1", "m2", "m3"],
            ["m2", "m3", "m4", "m5"],
        ]

    def test_each_window_starts_with_system(self):
        manager = ContextManager()
        messages = make_messages([40] * 5, with_system=True)
        segments = manager.segment(messages, budget=101 + 220, overlap=0)
        assert len(segments) == 3
        for window in segments:
            assert window[0].id == "sys"

    def test_zero_overlap_partitions_turns(self):
        manager = ContextManager()
        messages = make_messages([40] * 7)
        segments = manager.segment(messages, budget=330, overlap=0)
        flattened = [m for window in segments for m in window]
        assert flattened == messages

    def test_all_turns_covered_in_order(self):
        manager = ContextManager()
        rng = random.Random(11)
        messages = make_messages([rng.randint(0, 800) for _ in range(20)])
        segments = manager.segment(messages, budget=700, overlap=2)

        # Dropping each window's overlap prefix reconstructs the conversation
        rebuilt = list(segments[0])
        for previous, window in zip(segments, segments[1:]):
            seed = previous[-2:]
            assert window[: len(seed)] == seed
            rebuilt.extend(window[len(seed):])
        assert rebuilt == messages

    def test_windows_within_budget_without_overlap(self):
        manager = ContextManager()
        rng = random.Random(5)
        lengths = [rng.randint(0, 1500) for _ in range(30)]
        messages = make_messages(lengths, with_system=True)
        segments = manager.segment(messages, budget=600, overlap=0)

        for window in segments:
            assert estimate_total(window) <= 600

    def test_oversized_message_gets_its_own_window(self):
        manager = ContextManager()
        messages = make_messages([10, 8000, 10])
        segments = manager.segment(messages, budget=500, overlap=0)
        assert [[m.id for m in s] for s in segments] == [["m0"], ["m1"], ["m2"]]

    def test_empty_input(self):
        assert ContextManager().segment([]) == []

    def test_negative_overlap_rejected(self):
        with pytest.raises(ValueError):
            ContextManager().segment(make_messages([1]), overlap=-1)
