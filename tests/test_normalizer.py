import pytest

from compliance.domain.details import (
    AttributeBalanceDetail,
    ImmovableDetail,
    NotTogetherDetail,
    PairMeetingApartDetail,
    PairMeetingCountSummaryDetail,
    PairMeetingTogetherDetail,
    PersonPlacement,
    RepeatEncounterDetail,
    TogetherSplitDetail,
)
from compliance.services.normalizer import dedupe_details, detail_key


def test_repeat_encounter_key_ignores_count_and_pair_order():
    a = RepeatEncounterDetail(pair=("A", "B"), count=2, max_allowed=1, sessions=(0, 1))
    b = RepeatEncounterDetail(pair=("B", "A"), count=3, max_allowed=1, sessions=(0, 1, 2))
    assert detail_key(a) == detail_key(b)


def test_attribute_balance_key_ignores_actual():
    a = AttributeBalanceDetail(0, "G1", "male", desired=2, actual=3)
    b = AttributeBalanceDetail(0, "G1", "male", desired=2, actual=4)
    c = AttributeBalanceDetail(1, "G1", "male", desired=2, actual=3)
    assert detail_key(a) == detail_key(b)
    assert detail_key(a) != detail_key(c)


def test_together_split_key_is_order_insensitive():
    a = TogetherSplitDetail(0, (PersonPlacement("A", "G1"), PersonPlacement("B", "G2")))
    b = TogetherSplitDetail(0, (PersonPlacement("B", "G1"), PersonPlacement("A", None)))
    assert detail_key(a) == detail_key(b)


def test_not_together_key_is_order_insensitive():
    a = NotTogetherDetail(0, "G1", ("C", "A"))
    b = NotTogetherDetail(0, "G1", ("A", "C"))
    assert detail_key(a) == detail_key(b)
    assert detail_key(a) != detail_key(NotTogetherDetail(0, "G2", ("A", "C")))


def test_immovable_key_includes_assigned_group():
    a = ImmovableDetail(0, "A", "G1", "G2")
    b = ImmovableDetail(0, "A", "G1", "G3")
    assert detail_key(a) != detail_key(b)
    assert detail_key(ImmovableDetail(0, "A", "G1")) == ("Immovable", 0, "A", "G1", "")


def test_pair_meeting_keys():
    s1 = PairMeetingCountSummaryDetail(("A", "B"), target=2, actual=1, mode="exact", sessions=(0, 1))
    s2 = PairMeetingCountSummaryDetail(("B", "A"), target=2, actual=2, mode="exact", sessions=(0, 1))
    assert detail_key(s1) == detail_key(s2)
    together = PairMeetingTogetherDetail(0, ("A", "B"), "G1")
    apart = PairMeetingApartDetail(0, ("B", "A"))
    assert detail_key(together) != detail_key(apart)
    assert detail_key(apart) == ("PairMeetingApart", 0, ("A", "B"))


def test_unknown_detail_type_raises():
    with pytest.raises(TypeError):
        detail_key(object())


def test_dedupe_keeps_first_occurrence():
    first = RepeatEncounterDetail(("A", "B"), 2, 1, (0, 1))
    dup = RepeatEncounterDetail(("B", "A"), 5, 1, (0,))
    other = RepeatEncounterDetail(("A", "C"), 2, 1, (0, 1))
    assert dedupe_details([first, dup, other]) == (first, other)
