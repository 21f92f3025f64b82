from datetime import date, timedelta

import pytest

from goalforge.errors import AuthenticationError, NotFoundError, ValidationError
from goalforge.schemas import DepartmentHead, Employee
from goalforge.services.habit_service import HabitService
from goalforge.services.task_service import TaskService
from goalforge.services.user_service import UserService

TODAY = date(2026, 10, 18)


# --- Habits ---
def test_toggling_today_on_and_off(store, employee):
    habit = HabitService.create(store, employee.id, "Read 20 pages")

    logged = HabitService.toggle(store, employee.id, habit.id, today=TODAY)
    assert logged.history == [TODAY]
    assert logged.streak_count == 1
    assert logged.last_logged_date == TODAY

    cleared = HabitService.toggle(store, employee.id, habit.id, today=TODAY)
    assert cleared.history == []
    assert cleared.streak_count == 0
    assert cleared.last_logged_date is None


def test_backfilling_extends_the_streak(store, employee):
    habit = HabitService.create(store, employee.id, "Stretch")
    for offset in (0, 1, 2):
        habit = HabitService.toggle(store, employee.id, habit.id, day=TODAY - timedelta(days=offset), today=TODAY)
    assert habit.streak_count == 3

    stored = HabitService.get_by_id(store, employee.id, habit.id)
    assert stored.history == [TODAY - timedelta(days=2), TODAY - timedelta(days=1), TODAY]


def test_refresh_resets_lapsed_streaks(store, employee):
    habit = HabitService.create(store, employee.id, "Journal")
    HabitService.toggle(store, employee.id, habit.id, today=TODAY)

    refreshed = HabitService.refresh_streaks(store, employee.id, today=TODAY + timedelta(days=2))
    assert [h.streak_count for h in refreshed] == [0]


def test_completed_today_flag(store, employee):
    habit = HabitService.create(store, employee.id, "Walk")
    HabitService.toggle(store, employee.id, habit.id, today=TODAY)
    [item] = HabitService.get_all(store, employee.id, today=TODAY)
    assert item["completed_today"] is True
    [item] = HabitService.get_all(store, employee.id, today=TODAY + timedelta(days=1))
    assert item["completed_today"] is False


def test_habit_name_is_required(store, employee):
    with pytest.raises(ValidationError):
        HabitService.create(store, employee.id, "   ")


def test_rename_and_delete(store, employee):
    habit = HabitService.create(store, employee.id, "Run")
    assert HabitService.rename(store, employee.id, habit.id, "Run 5k").name == "Run 5k"
    HabitService.delete(store, employee.id, habit.id)
    with pytest.raises(NotFoundError):
        HabitService.get_by_id(store, employee.id, habit.id)


# --- Accounts ---
def test_signup_creates_default_list(store):
    user = UserService.signup(store, "Cleo", "cleo@example.com", "pw-1234")
    assert isinstance(user, Employee)
    lists = TaskService.get_lists(store, user.id)
    assert [(tl.title, tl.is_default) for tl in lists] == [("My Tasks", True)]


def test_duplicate_email_is_rejected(store):
    UserService.signup(store, "Cleo", "cleo@example.com", "pw-1234")
    with pytest.raises(ValidationError):
        UserService.signup(store, "Cleo Again", "CLEO@example.com", "pw-5678")


def test_login(store):
    user = UserService.signup(store, "Cleo", "cleo@example.com", "pw-1234")
    assert UserService.login(store, "cleo@example.com", "pw-1234").id == user.id
    with pytest.raises(AuthenticationError):
        UserService.login(store, "cleo@example.com", "wrong")
    with pytest.raises(AuthenticationError):
        UserService.login(store, "nobody@example.com", "pw-1234")


def test_promotion_requires_a_department(store):
    user = UserService.signup(store, "Cleo", "cleo@example.com", "pw-1234")
    with pytest.raises(ValidationError):
        UserService.update_profile(store, user.id, {"role": "department_head"})

    head = UserService.update_profile(store, user.id, {"role": "department_head", "department": "Design"})
    assert isinstance(head, DepartmentHead)
    assert isinstance(store.get_user(user.id), DepartmentHead)


def test_password_change(store):
    user = UserService.signup(store, "Cleo", "cleo@example.com", "pw-1234")
    UserService.update_profile(store, user.id, {"title": "Staff Engineer"}, password="new-pass")
    assert UserService.login(store, "cleo@example.com", "new-pass").title == "Staff Engineer"
