"""
Unit tests for intersection observers.

Geometry used throughout: a 1024x768 viewport, element1 laid out at
200..300 and element2 at 400..500, both full width.
"""

import gc

import pytest
from pagedom.dom import Element
from pagedom.errors import RootMarginError
from pagedom.geometry import Rect
from pagedom.observer import IntersectionObserver, ObservationLog
from pagedom.viewport import Viewport


class Calls:
    """Callback that records every invocation."""

    def __init__(self):
        self.batches = []

    def __call__(self, entries):
        self.batches.append(list(entries))

    @property
    def targets(self):
        return [[e.target for e in batch] for batch in self.batches]

    def reset(self):
        self.batches.clear()


@pytest.fixture
def viewport():
    return Viewport(1024, 768)


@pytest.fixture
def elements(viewport):
    element1, element2 = Element("div"), Element("div")
    viewport.set_layout_rect(element1, top=200, bottom=300)
    viewport.set_layout_rect(element2, top=400, bottom=500)
    return element1, element2


class TestConstruction:
    def test_subscribes_once(self, viewport):
        observer = IntersectionObserver(Calls(), viewport)
        assert viewport.listener_count == 1
        observer.disconnect()
        observer.observe(Element("div"))
        assert viewport.listener_count == 1

    def test_root_margin_is_normalised(self, viewport):
        observer = IntersectionObserver(Calls(), viewport, root_margin="10px 0 10px")
        assert observer.root_margin == "10px 0px 10px 0px"

    def test_default_root_margin(self, viewport):
        assert IntersectionObserver(Calls(), viewport).root_margin == "0px 0px 0px 0px"

    def test_bad_root_margin(self, viewport):
        with pytest.raises(RootMarginError):
            IntersectionObserver(Calls(), viewport, root_margin="10%")


class TestObserve:
    def test_reports_only_the_new_element(self, viewport, elements):
        element1, element2 = elements
        calls = Calls()
        observer = IntersectionObserver(calls, viewport)

        observer.observe(element1)
        assert calls.targets == [[element1]]

        observer.observe(element2)
        assert calls.targets == [[element1], [element2]]

    def test_entry_fields(self, viewport, elements):
        element1, _ = elements
        calls = Calls()
        IntersectionObserver(calls, viewport, root_margin="10px 0 10px").observe(element1)

        entry = calls.batches[0][0]
        assert entry.target is element1
        assert entry.bounding_client_rect == Rect(top=200, right=1024, bottom=300, left=0)
        assert entry.root_bounds == Rect(top=-10, right=1024, bottom=778, left=0)
        assert entry.intersection_rect == entry.bounding_client_rect
        assert entry.intersection_ratio == 1.0
        assert entry.is_intersecting

    def test_offscreen_element(self, viewport):
        far = Element("div")
        viewport.set_layout_rect(far, top=2000, bottom=2100)
        calls = Calls()
        IntersectionObserver(calls, viewport).observe(far)

        entry = calls.batches[0][0]
        assert entry.intersection_ratio == 0.0
        assert entry.intersection_rect is None
        assert not entry.is_intersecting

    def test_element_without_layout(self, viewport):
        calls = Calls()
        IntersectionObserver(calls, viewport).observe(Element("div"))
        assert calls.batches[0][0].intersection_ratio == 0.0

    def test_observing_twice_is_a_no_op(self, viewport, elements):
        element1, _ = elements
        calls = Calls()
        observer = IntersectionObserver(calls, viewport)
        observer.observe(element1)
        observer.observe(element1)
        assert len(calls.batches) == 1
        assert observer.observed == (element1,)

    def test_take_records_is_empty(self, viewport, elements):
        observer = IntersectionObserver(Calls(), viewport)
        observer.observe(elements[0])
        assert observer.take_records() == []


class TestScroll:
    def test_no_change_no_callback(self, viewport, elements):
        element1, element2 = elements
        calls = Calls()
        observer = IntersectionObserver(calls, viewport)
        observer.observe(element1)
        observer.observe(element2)
        calls.reset()

        viewport.scroll_to(0, 100)

        assert calls.batches == []

    def test_only_changed_entries_are_delivered(self, viewport, elements):
        element1, element2 = elements
        calls = Calls()
        observer = IntersectionObserver(calls, viewport)
        observer.observe(element1)
        observer.observe(element2)
        calls.reset()

        viewport.scroll_to(0, 250)  # element1 half out, element2 fully in

        assert calls.targets == [[element1]]
        assert calls.batches[0][0].intersection_ratio == pytest.approx(0.5)

    def test_two_changes_in_one_callback_in_observe_order(self, viewport, elements):
        element1, element2 = elements
        calls = Calls()
        observer = IntersectionObserver(calls, viewport)
        observer.observe(element2)
        observer.observe(element1)
        calls.reset()

        viewport.scroll_to(0, 2000)

        assert calls.targets == [[element2, element1]]

    def test_baseline_moves_forward(self, viewport, elements):
        element1, _ = elements
        calls = Calls()
        observer = IntersectionObserver(calls, viewport)
        observer.observe(element1)
        calls.reset()

        viewport.scroll_to(0, 250)
        viewport.scroll_to(0, 250)

        assert len(calls.batches) == 1

    def test_horizontal_scroll(self, viewport):
        narrow = Element("div")
        viewport.set_layout_rect(narrow, top=0, bottom=100, left=0, right=100)
        calls = Calls()
        observer = IntersectionObserver(calls, viewport)
        observer.observe(narrow)
        calls.reset()

        viewport.scroll_to(50, 0)

        assert calls.batches[0][0].intersection_ratio == pytest.approx(0.5)

    def test_negative_margin_shrinks_root(self, viewport):
        top_band = Element("div")
        viewport.set_layout_rect(top_band, top=0, bottom=100)
        calls = Calls()
        IntersectionObserver(calls, viewport, root_margin="-100px 0px").observe(top_band)
        assert calls.batches[0][0].intersection_ratio == 0.0


class TestUnobserveAndDisconnect:
    def test_unobserve_stops_reports(self, viewport, elements):
        element1, element2 = elements
        calls = Calls()
        observer = IntersectionObserver(calls, viewport)
        observer.observe(element1)
        observer.observe(element2)
        calls.reset()

        observer.unobserve(element1)
        assert calls.batches == []

        viewport.scroll_to(0, 2000)
        assert calls.targets == [[element2]]

    def test_unobserve_unknown_element(self, viewport):
        IntersectionObserver(Calls(), viewport).unobserve(Element("div"))

    def test_disconnect_stops_all_reports(self, viewport, elements):
        calls = Calls()
        observer = IntersectionObserver(calls, viewport)
        for el in elements:
            observer.observe(el)
        calls.reset()

        observer.disconnect()
        viewport.scroll_to(0, 2000)

        assert calls.batches == []
        assert observer.observed == ()

    def test_observe_after_disconnect(self, viewport, elements):
        element1, element2 = elements
        calls = Calls()
        observer = IntersectionObserver(calls, viewport)
        observer.observe(element1)
        observer.disconnect()
        observer.observe(element2)
        calls.reset()

        viewport.scroll_to(0, 2000)

        assert calls.targets == [[element2]]


class TestObservationLog:
    def test_records_every_observe(self, viewport, elements):
        element1, element2 = elements
        log = ObservationLog()
        first = IntersectionObserver(Calls(), viewport, log=log)
        second = IntersectionObserver(Calls(), viewport, log=log)
        first.observe(element1)
        second.observe(element2)

        assert log.observed == [element1, element2]
        assert log.observed_by(first) == [element1]
        assert len(log) == 2

    def test_disconnect_leaves_log_alone(self, viewport, elements):
        log = ObservationLog()
        observer = IntersectionObserver(Calls(), viewport, log=log)
        observer.observe(elements[0])
        observer.disconnect()
        assert log.observed == [elements[0]]

    def test_clear(self, viewport, elements):
        log = ObservationLog()
        IntersectionObserver(Calls(), viewport, log=log).observe(elements[0])
        log.clear()
        assert log.observed == []


class TestLifetime:
    def test_unreferenced_observer_keeps_reporting(self, viewport, elements):
        element1, _ = elements
        calls = Calls()
        IntersectionObserver(calls, viewport).observe(element1)
        gc.collect()

        viewport.scroll_to(0, 2000)

        assert calls.targets == [[element1], [element1]]
        assert calls.batches[1][0].intersection_ratio == 0.0
