"""Tests for conference_companion.presenters -- presenter directory helpers."""

import itertools

import pytest

from conference_companion.models import Event, Presenter
from conference_companion.presenters import active_presenter_ids, filter_presenters, sort_presenters


class TestSortPresenters:
    """Tests for sort_presenters()."""

    @pytest.mark.unit
    def test_last_then_first_name(self):
        presenters = [
            Presenter(id=1, name="Zoe Adams", first_name="Zoe", last_name="Adams"),
            Presenter(id=2, name="Ana Baker", first_name="Ana", last_name="Baker"),
            Presenter(id=3, name="Al Adams", first_name="Al", last_name="Adams"),
        ]
        assert [p.id for p in sort_presenters(presenters)] == [3, 1, 2]

    @pytest.mark.unit
    def test_falls_back_to_display_name(self):
        presenters = [
            Presenter(id=1, name="Council Panel"),
            Presenter(id=2, name="ana baker", first_name="Ana", last_name="Baker"),
            Presenter(id=3, name="Board"),
        ]
        assert [p.id for p in sort_presenters(presenters)] == [2, 3, 1]

    @pytest.mark.unit
    @pytest.mark.parametrize("order", list(itertools.permutations(range(3))))
    def test_missing_last_name_sorts_by_display_name_in_any_input_order(self, order):
        presenters = [
            Presenter(id=1, name="Ann Adams", first_name="Ann", last_name="Adams"),
            Presenter(id=2, name="Mike"),
            Presenter(id=3, name="Yan Young", first_name="Yan", last_name="Young"),
        ]
        shuffled = [presenters[i] for i in order]
        assert [p.id for p in sort_presenters(shuffled)] == [1, 2, 3]

    @pytest.mark.unit
    def test_case_insensitive(self):
        presenters = [
            Presenter(id=1, name="b", last_name="bravo"),
            Presenter(id=2, name="a", last_name="Alpha"),
        ]
        assert [p.id for p in sort_presenters(presenters)] == [2, 1]


class TestFilterPresenters:
    """Tests for active_presenter_ids() and filter_presenters()."""

    @pytest.fixture
    def events(self):
        return [
            Event(id=10, title="Panel", speaker_ids=(1, 2), moderator_id=3),
            Event(id=11, title="Workshop", speaker_ids=(2,)),
        ]

    @pytest.mark.unit
    def test_active_ids_include_moderators(self, events):
        assert active_presenter_ids(events) == {1, 2, 3}

    @pytest.mark.unit
    def test_inactive_presenters_dropped(self, events):
        presenters = [Presenter(id=1, name="Ana"), Presenter(id=4, name="Idle")]
        assert [p.id for p in filter_presenters(presenters, events)] == [1]

    @pytest.mark.unit
    def test_search_over_title_org_and_bio(self, events):
        presenters = [
            Presenter(id=1, name="Ana", title="Chair"),
            Presenter(id=2, name="Ben", org="Tribal Council"),
            Presenter(id=3, name="Cy", bio_html="<p>Expert in <em>compacts</em> &amp; law</p>"),
        ]
        assert [p.id for p in filter_presenters(presenters, events, "chair")] == [1]
        assert [p.id for p in filter_presenters(presenters, events, "COUNCIL")] == [2]
        assert [p.id for p in filter_presenters(presenters, events, "compacts & law")] == [3]
        assert filter_presenters(presenters, events, "em") == []

    @pytest.mark.unit
    def test_blank_search_keeps_all_active(self, events):
        presenters = [Presenter(id=2, name="Ben"), Presenter(id=1, name="Ana")]
        assert [p.id for p in filter_presenters(presenters, events, "   ")] == [2, 1]
