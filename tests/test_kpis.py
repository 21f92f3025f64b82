import pytest

from goalforge.errors import AuthorizationError, NotFoundError, ValidationError
from goalforge.schemas import KPI
from goalforge.services.kpi_service import KPIService, sort_kpis


@pytest.fixture
def team(make_user):
    return {
        "head": make_user("Hana Head", "head@example.com", department="Engineering", head=True),
        "ana": make_user("Ana", "ana@example.com", department="Engineering"),
        "ben": make_user("Ben", "ben@example.com", department="Engineering"),
        "outsider": make_user("Olga", "olga@example.com", department="Sales"),
    }


def _kpi(store, owner, name, current=0.0, target=100.0, weight=1.0, level="individual"):
    return KPIService.create(
        store, owner,
        KPI(user_id=owner.id, name=name, current_value=current, target_value=target, weight=weight, level=level),
    )


@pytest.fixture
def parent(store, team):
    return _kpi(store, team["head"], "Department uptime", level="department")


def test_relinking_replaces_children(store, team, parent):
    a = _kpi(store, team["ana"], "A")
    b = _kpi(store, team["ben"], "B")
    c = _kpi(store, team["ana"], "C")

    KPIService.link_children(store, team["head"], parent.id, [a.id, b.id])
    KPIService.link_children(store, team["head"], parent.id, [b.id, c.id])

    assert store.get(KPI, a.id).parent_kpi_id is None
    assert store.get(KPI, b.id).parent_kpi_id == parent.id
    assert store.get(KPI, c.id).parent_kpi_id == parent.id


def test_only_department_heads_link(store, team, parent):
    a = _kpi(store, team["ana"], "A")
    with pytest.raises(AuthorizationError):
        KPIService.link_children(store, team["ana"], parent.id, [a.id])


def test_cannot_link_kpis_from_another_department(store, team, parent):
    foreign = _kpi(store, team["outsider"], "Quota")
    a = _kpi(store, team["ana"], "A")
    with pytest.raises(NotFoundError):
        KPIService.link_children(store, team["head"], parent.id, [a.id, foreign.id])
    # Nothing was written before the check failed
    assert store.get(KPI, a.id).parent_kpi_id is None


def test_department_kpi_cannot_be_a_child(store, team, parent):
    other_parent = _kpi(store, team["head"], "Department cost", level="department")
    with pytest.raises(ValidationError):
        KPIService.link_children(store, team["head"], parent.id, [other_parent.id])


def test_employees_cannot_create_department_kpis(store, team):
    with pytest.raises(AuthorizationError):
        _kpi(store, team["ana"], "Sneaky", level="department")


def test_rollup_is_weighted(store, team, parent):
    a = _kpi(store, team["ana"], "A", current=50, weight=1)
    b = _kpi(store, team["ben"], "B", current=100, weight=3)
    KPIService.link_children(store, team["head"], parent.id, [a.id, b.id])

    result = KPIService.rollup(store, team["ana"], parent.id)
    assert result["rollup"] == 88
    assert {c["id"] for c in result["children"]} == {a.id, b.id}
    assert result["kpi"]["band"] == "low"


def test_rollup_without_children(store, team, parent):
    assert KPIService.rollup(store, team["head"], parent.id)["rollup"] is None


def test_department_kpis_visible_within_department(store, team, parent):
    own = _kpi(store, team["ana"], "Own")
    _kpi(store, team["ben"], "Private to Ben")

    visible = {k.id for k in KPIService.get_visible(store, team["ana"])}
    assert visible == {own.id, parent.id}
    with pytest.raises(NotFoundError):
        KPIService.get_visible_by_id(store, team["outsider"], parent.id)


def test_head_may_edit_department_members_kpis(store, team, make_user):
    a = _kpi(store, team["ana"], "A")
    updated = KPIService.record_progress(store, team["head"], a.id, 75, notes="Good quarter")
    assert updated.current_value == 75
    assert updated.notes == "Good quarter"

    with pytest.raises(AuthorizationError):
        KPIService.record_progress(store, team["ben"], a.id, 10)
    outsider_head = make_user("Sal Head", "sales-head@example.com", department="Sales", head=True)
    with pytest.raises(AuthorizationError):
        KPIService.record_progress(store, outsider_head, a.id, 10)


def test_update_cannot_reparent(store, team, parent):
    a = _kpi(store, team["ana"], "A")
    updated = KPIService.update(store, team["ana"], a.id, {"name": "A2", "parent_kpi_id": parent.id})
    assert updated.name == "A2"
    assert updated.parent_kpi_id is None


def test_validation(store, team):
    with pytest.raises(ValidationError):
        _kpi(store, team["ana"], "  ")
    with pytest.raises(ValidationError):
        KPIService.create(
            store, team["ana"],
            KPI(user_id=team["ana"].id, name="Linked", target_value=1, linked_goal_ids=["missing-goal"]),
        )


def test_deleting_a_parent_leaves_children_dangling(store, team, parent):
    a = _kpi(store, team["ana"], "A")
    KPIService.link_children(store, team["head"], parent.id, [a.id])
    KPIService.delete(store, team["head"], parent.id)

    child = store.get(KPI, a.id)
    assert child.parent_kpi_id == parent.id
    assert KPIService.resolve_parent(store, child) is None


def test_sorting(store, team):
    low = _kpi(store, team["ana"], "beta", current=10)
    high = _kpi(store, team["ana"], "Alpha", current=90)
    kpis = [low, high]
    assert [k.id for k in sort_kpis(kpis, "name")] == [high.id, low.id]
    assert [k.id for k in sort_kpis(kpis, "progress_asc")] == [low.id, high.id]
    assert [k.id for k in sort_kpis(kpis, "progress_desc")] == [high.id, low.id]
    with pytest.raises(ValidationError):
        sort_kpis(kpis, "random")


def test_relinking_detaches_children_whose_owner_moved(store, team, parent):
    a = _kpi(store, team["ana"], "A")
    KPIService.link_children(store, team["head"], parent.id, [a.id])
    store.upsert(team["ana"].model_copy(update={"department": "Sales"}))

    KPIService.link_children(store, team["head"], parent.id, [])

    child = store.get(KPI, a.id)
    assert child.parent_kpi_id is None
    assert KPIService.resolve_parent(store, child) is None
    assert KPIService.rollup(store, team["head"], parent.id)["children"] == []


def test_department_kpi_with_children_keeps_its_level(store, team, parent):
    a = _kpi(store, team["ana"], "A")
    KPIService.link_children(store, team["head"], parent.id, [a.id])

    with pytest.raises(ValidationError):
        KPIService.update(store, team["head"], parent.id, {"level": "individual"})
    assert store.get(KPI, parent.id).level == "department"
    assert KPIService.resolve_parent(store, store.get(KPI, a.id)).id == parent.id

    KPIService.link_children(store, team["head"], parent.id, [])
    assert KPIService.update(store, team["head"], parent.id, {"level": "individual"}).level == "individual"


def test_parent_that_is_not_department_level_resolves_to_none(store, team):
    individual = _kpi(store, team["ana"], "A")
    child = store.upsert(
        KPI(user_id=team["ben"].id, name="B", target_value=100, parent_kpi_id=individual.id)
    )
    assert KPIService.resolve_parent(store, child) is None


def test_head_can_read_members_individual_kpis(store, team, make_user):
    a = _kpi(store, team["ana"], "A")
    assert KPIService.get_visible_by_id(store, team["head"], a.id).id == a.id
    with pytest.raises(NotFoundError):
        KPIService.get_visible_by_id(store, team["ben"], a.id)
    sales_head = make_user("Sal Head", "sales-head@example.com", department="Sales", head=True)
    with pytest.raises(NotFoundError):
        KPIService.get_visible_by_id(store, sales_head, a.id)
