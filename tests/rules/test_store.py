"""Tests for RuleStore."""

import pytest

from rule_screening.errors import RuleIndexError, RuleNotFoundError, ValidationError
from rule_screening.rules.models import EvaluationResult, LifecycleState, Outcome, Rule
from rule_screening.rules.store import RuleStore


@pytest.fixture
def store(sequential_ids) -> RuleStore:
    return RuleStore(id_factory=sequential_ids)


def _titles(store: RuleStore) -> list[str]:
    return [rule.title for rule in store.rules()]


def test_add_creates_idle_rule_without_result(store: RuleStore) -> None:
    rule_id = store.add("No Bankruptcy", "Applicant must not have filed bankruptcy.")

    rule = store.require(rule_id)
    assert rule.state == LifecycleState.IDLE
    assert rule.result is None
    assert rule.definition == "Applicant must not have filed bankruptcy."


def test_add_trims_title_and_allows_empty_definition(store: RuleStore) -> None:
    rule_id = store.add("  Income verified  ")
    assert store.require(rule_id).title == "Income verified"
    assert store.require(rule_id).definition == ""


@pytest.mark.parametrize("title", ["", "   ", "\n\t"])
def test_add_rejects_blank_title(store: RuleStore, title: str) -> None:
    store.add("Existing")
    with pytest.raises(ValidationError):
        store.add(title, "definition")
    assert _titles(store) == ["Existing"]


def test_add_appends_in_insertion_order(store: RuleStore) -> None:
    store.add("First")
    store.add("Second")
    store.add("Third")
    assert _titles(store) == ["First", "Second", "Third"]


def test_add_regenerates_colliding_ids() -> None:
    ids = iter(["same", "same", "other"])
    store = RuleStore(id_factory=lambda: next(ids))
    assert store.add("One") == "same"
    assert store.add("Two") == "other"


def test_remove_existing_and_missing(store: RuleStore) -> None:
    rule_id = store.add("Removable")
    assert store.remove(rule_id) is True
    assert store.get(rule_id) is None
    assert store.remove(rule_id) is False
    assert store.remove("never-existed") is False


def test_reorder_moves_and_shifts(store: RuleStore) -> None:
    for title in ("A", "B", "C", "D"):
        store.add(title)

    store.reorder(0, 2)
    assert _titles(store) == ["B", "C", "A", "D"]

    store.reorder(3, 0)
    assert _titles(store) == ["D", "B", "C", "A"]


def test_reorder_is_a_permutation(store: RuleStore) -> None:
    for title in ("A", "B", "C"):
        store.add(title)
    before_ids = {rule.id for rule in store.rules()}

    store.reorder(2, 1)

    assert len(store) == 3
    assert {rule.id for rule in store.rules()} == before_ids


def test_reorder_same_index_is_noop(store: RuleStore) -> None:
    store.add("A")
    store.add("B")
    before = store.rules()
    store.reorder(1, 1)
    assert store.rules() == before


@pytest.mark.parametrize("from_index,to_index", [(0, 2), (2, 0), (-1, 0), (0, -1), (5, 5)])
def test_reorder_out_of_bounds(store: RuleStore, from_index: int, to_index: int) -> None:
    store.add("A")
    store.add("B")
    with pytest.raises(RuleIndexError):
        store.reorder(from_index, to_index)
    assert _titles(store) == ["A", "B"]


def test_reorder_error_is_an_index_error(store: RuleStore) -> None:
    with pytest.raises(IndexError):
        store.reorder(0, 0)


def test_set_evaluating_keeps_previous_result_until_replaced(store: RuleStore) -> None:
    rule_id = store.add("A")
    store.apply_result(rule_id, Outcome.FAIL, "Old answer. FAIL")

    store.set_evaluating(rule_id)

    rule = store.require(rule_id)
    assert rule.state == LifecycleState.EVALUATING
    assert rule.result == EvaluationResult(Outcome.FAIL, "Old answer. FAIL")


def test_set_evaluating_unknown_rule(store: RuleStore) -> None:
    with pytest.raises(RuleNotFoundError):
        store.set_evaluating("missing")


@pytest.mark.parametrize(
    "outcome,state",
    [
        (Outcome.PASS, LifecycleState.RESOLVED),
        (Outcome.FAIL, LifecycleState.RESOLVED),
        (Outcome.NOT_APPLICABLE, LifecycleState.RESOLVED),
        (Outcome.UNKNOWN, LifecycleState.ERRORED),
    ],
)
def test_apply_result_transitions(store: RuleStore, outcome: Outcome, state: LifecycleState) -> None:
    rule_id = store.add("A")
    ticket = store.set_evaluating(rule_id)

    updated = store.apply_result(rule_id, outcome, "text", ticket=ticket)

    assert updated is not None
    assert updated.state == state
    assert updated.result == EvaluationResult(outcome, "text")
    assert store.require(rule_id) == updated


def test_apply_result_for_removed_rule_is_noop(store: RuleStore) -> None:
    keep_id = store.add("Keep")
    gone_id = store.add("Gone")
    ticket = store.set_evaluating(gone_id)
    store.remove(gone_id)

    assert store.apply_result(gone_id, Outcome.PASS, "late", ticket=ticket) is None
    assert [rule.id for rule in store.rules()] == [keep_id]


def test_apply_result_does_not_touch_siblings(store: RuleStore) -> None:
    a = store.add("A")
    b = store.add("B")
    ticket_a = store.set_evaluating(a)
    ticket_b = store.set_evaluating(b)

    store.apply_result(b, Outcome.FAIL, "B text", ticket=ticket_b)

    assert store.require(a).state == LifecycleState.EVALUATING
    assert store.require(a).result is None

    store.apply_result(a, Outcome.PASS, "A text", ticket=ticket_a)
    assert store.require(a).result == EvaluationResult(Outcome.PASS, "A text")
    assert store.require(b).result == EvaluationResult(Outcome.FAIL, "B text")


def test_stale_ticket_is_dropped_and_latest_resolves(store: RuleStore) -> None:
    rule_id = store.add("A")
    first = store.set_evaluating(rule_id)
    second = store.set_evaluating(rule_id)

    assert store.apply_result(rule_id, Outcome.PASS, "second", ticket=second) is not None
    assert store.apply_result(rule_id, Outcome.FAIL, "first", ticket=first) is None

    rule = store.require(rule_id)
    assert rule.state == LifecycleState.RESOLVED
    assert rule.result == EvaluationResult(Outcome.PASS, "second")


def test_older_result_landing_first_keeps_rule_evaluating(store: RuleStore) -> None:
    rule_id = store.add("A")
    first = store.set_evaluating(rule_id)
    second = store.set_evaluating(rule_id)

    store.apply_result(rule_id, Outcome.FAIL, "first", ticket=first)
    assert store.require(rule_id).state == LifecycleState.EVALUATING

    store.apply_result(rule_id, Outcome.PASS, "second", ticket=second)
    assert store.require(rule_id).state == LifecycleState.RESOLVED


def test_resolve_by_id_prefix_and_position(store: RuleStore) -> None:
    store.add("A")
    b = store.add("B")
    assert store.resolve(b).title == "B"
    assert store.resolve("2").title == "B"
    assert store.resolve("1").title == "A"


@pytest.mark.parametrize("ref", ["0", "3", "rule-", "nope"])
def test_resolve_unknown_reference(store: RuleStore, ref: str) -> None:
    store.add("A")
    store.add("B")
    with pytest.raises(RuleNotFoundError):
        store.resolve(ref)


def test_restore_never_leaves_rules_evaluating() -> None:
    persisted = [
        Rule(id="a", title="Fresh", state=LifecycleState.EVALUATING),
        Rule(
            id="b",
            title="Had result",
            state=LifecycleState.EVALUATING,
            result=EvaluationResult(Outcome.FAIL, "Earlier. FAIL"),
        ),
        Rule(
            id="c",
            title="Had error",
            state=LifecycleState.EVALUATING,
            result=EvaluationResult(Outcome.UNKNOWN, "Error: timeout"),
        ),
        Rule(
            id="d",
            title="Resolved",
            state=LifecycleState.RESOLVED,
            result=EvaluationResult(Outcome.PASS, "Fine. PASS"),
        ),
    ]

    store = RuleStore(persisted)
    states = {rule.id: rule.state for rule in store.rules()}

    assert states == {
        "a": LifecycleState.IDLE,
        "b": LifecycleState.IDLE,
        "c": LifecycleState.IDLE,
        "d": LifecycleState.RESOLVED,
    }
    assert store.require("a").result is None
    assert store.require("b").result is None
    assert store.require("c").result is None
    assert store.require("d").result == EvaluationResult(Outcome.PASS, "Fine. PASS")


def test_restore_drops_result_of_interrupted_evaluation() -> None:
    store = RuleStore(
        [
            Rule(
                id="a",
                title="A",
                state=LifecycleState.EVALUATING,
                result=EvaluationResult(Outcome.PASS, "old PASS"),
            )
        ]
    )
    rule = store.require("a")
    assert rule.state == LifecycleState.IDLE
    assert rule.result is None
    assert store.summary() == {"pending": 1, "rules": 1}


def test_restore_fixes_inconsistent_records_and_duplicates() -> None:
    store = RuleStore(
        [
            Rule(id="a", title="A", state=LifecycleState.RESOLVED),
            Rule(
                id="b",
                title="B",
                state=LifecycleState.IDLE,
                result=EvaluationResult(Outcome.PASS, "PASS"),
            ),
            Rule(id="a", title="Duplicate"),
        ]
    )
    assert [rule.title for rule in store.rules()] == ["A", "B"]
    assert store.require("a").state == LifecycleState.IDLE
    assert store.require("b").result is None


def test_restore_discards_in_flight_tickets(store: RuleStore) -> None:
    rule_id = store.add("A")
    ticket = store.set_evaluating(rule_id)

    store.restore(store.snapshot())

    assert store.apply_result(rule_id, Outcome.PASS, "late", ticket=ticket) is None
    assert store.require(rule_id).state == LifecycleState.IDLE


def test_snapshot_is_detached_from_store(store: RuleStore) -> None:
    store.add("A")
    snapshot = store.snapshot()
    store.add("B")
    assert len(snapshot) == 1


def test_clear_results(store: RuleStore) -> None:
    rule_id = store.add("A")
    store.apply_result(rule_id, Outcome.PASS, "PASS")
    store.clear_results()
    assert store.require(rule_id).state == LifecycleState.IDLE
    assert store.require(rule_id).result is None


def test_summary_counts(store: RuleStore) -> None:
    a = store.add("A")
    b = store.add("B")
    store.add("C")
    store.apply_result(a, Outcome.PASS, "PASS")
    store.set_evaluating(b)

    assert store.summary() == {"PASS": 1, "evaluating": 1, "pending": 1, "rules": 3}
