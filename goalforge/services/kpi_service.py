"""
kpi_service.py — KPIs and the department hierarchy
CRUD for KPIs, department visibility, write permissions and the
department-to-individual parent links.
"""

import logging
from typing import Iterable, Optional

from goalforge.core.kpi import achievement_band, kpi_achievement, weighted_rollup
from goalforge.errors import AuthorizationError, NotFoundError, ValidationError
from goalforge.record_store import RecordStore
from goalforge.schemas import KPI, DepartmentHead, Goal

logger = logging.getLogger(__name__)

SORT_OPTIONS = ("name", "progress_asc", "progress_desc")


def describe(kpi: KPI) -> dict:
    """KPI plus its presentation-only achievement figures."""
    achievement = kpi_achievement(kpi)
    return {**kpi.model_dump(mode="json"), "achievement": achievement, "band": achievement_band(achievement)}


def sort_kpis(kpis: Iterable[KPI], order: str = "name") -> list[KPI]:
    if order not in SORT_OPTIONS:
        raise ValidationError(f"Unknown sort order '{order}'")
    if order == "progress_asc":
        return sorted(kpis, key=kpi_achievement)
    if order == "progress_desc":
        return sorted(kpis, key=kpi_achievement, reverse=True)
    return sorted(kpis, key=lambda k: k.name.lower())


class KPIService:
    # --- Reads ---
    @staticmethod
    def get_visible(store: RecordStore, user) -> list[KPI]:
        """Own KPIs plus department-level KPIs of colleagues in the same department."""
        kpis = {k.id: k for k in store.get_all(KPI, user.id)}
        if user.department:
            for kpi in store.get_department_kpis(user.department, level="department"):
                kpis.setdefault(kpi.id, kpi)
        return list(kpis.values())

    @staticmethod
    def get_visible_by_id(store: RecordStore, user, kpi_id: str) -> KPI:
        for kpi in KPIService.get_visible(store, user):
            if kpi.id == kpi_id:
                return kpi
        # Heads also read the individual KPIs of their department members
        kpi = store.get(KPI, kpi_id)
        if kpi is not None and isinstance(user, DepartmentHead) and KPIService.can_edit(store, user, kpi):
            return kpi
        raise NotFoundError("KPI not found")

    @staticmethod
    def can_edit(store: RecordStore, user, kpi: KPI) -> bool:
        if kpi.user_id == user.id:
            return True
        if not isinstance(user, DepartmentHead):
            return False
        owner = store.get_user(kpi.user_id)
        return owner is not None and owner.department == user.department

    @staticmethod
    def _editable(store: RecordStore, user, kpi_id: str) -> KPI:
        kpi = store.get(KPI, kpi_id)
        if kpi is None:
            raise NotFoundError("KPI not found")
        if not KPIService.can_edit(store, user, kpi):
            raise AuthorizationError("You are not allowed to modify this KPI")
        return kpi

    # --- Writes ---
    @staticmethod
    def validate(store: RecordStore, kpi: KPI) -> None:
        if not kpi.name or not kpi.name.strip():
            raise ValidationError("KPI name is required")
        if kpi.target_value is None:
            raise ValidationError("Target value is required")
        if kpi.level == "department" and kpi.parent_kpi_id:
            raise ValidationError("Department KPIs cannot have a parent")
        for goal_id in kpi.linked_goal_ids:
            if store.get(Goal, goal_id, user_id=kpi.user_id) is None:
                raise ValidationError(f"Linked goal {goal_id} does not exist")

    @staticmethod
    def create(store: RecordStore, user, kpi: KPI) -> KPI:
        kpi = kpi.model_copy(update={"user_id": user.id})
        if kpi.level == "department" and not isinstance(user, DepartmentHead):
            raise AuthorizationError("Only department heads can create department KPIs")
        KPIService.validate(store, kpi)
        return store.upsert(kpi)

    @staticmethod
    def update(store: RecordStore, user, kpi_id: str, data: dict) -> KPI:
        existing = KPIService._editable(store, user, kpi_id)
        # Ownership and hierarchy links are not editable through a plain update
        data = {k: v for k, v in data.items() if k not in ("id", "user_id", "parent_kpi_id", "created_at")}
        kpi = KPI.model_validate({**existing.model_dump(), **data})
        if kpi.level == "department" and not isinstance(user, DepartmentHead):
            raise AuthorizationError("Only department heads can manage department KPIs")
        if existing.level == "department" and kpi.level != "department" and store.get_kpis_by_parent(kpi_id):
            raise ValidationError("Unlink the children of this department KPI before changing its level")
        KPIService.validate(store, kpi)
        return store.upsert(kpi)

    @staticmethod
    def record_progress(store: RecordStore, user, kpi_id: str, current_value: float, notes: Optional[str] = None) -> KPI:
        kpi = KPIService._editable(store, user, kpi_id)
        update = {"current_value": current_value}
        if notes is not None:
            update["notes"] = notes
        return store.upsert(kpi.model_copy(update=update))

    @staticmethod
    def delete(store: RecordStore, user, kpi_id: str) -> None:
        """Delete a KPI. Children of a department KPI keep their now-dangling parent id."""
        kpi = KPIService._editable(store, user, kpi_id)
        store.delete(KPI, kpi_id, kpi.user_id)

    # --- Hierarchy ---
    @staticmethod
    def resolve_parent(store: RecordStore, kpi: KPI) -> Optional[KPI]:
        """The KPI's department-level parent, or None when unset, gone or not a department KPI."""
        if not kpi.parent_kpi_id:
            return None
        parent = store.get(KPI, kpi.parent_kpi_id)
        if parent is None or parent.level != "department":
            return None
        return parent

    @staticmethod
    def get_children(store: RecordStore, parent_id: str) -> list[KPI]:
        return [k for k in store.get_kpis_by_parent(parent_id) if k.level == "individual"]

    @staticmethod
    def link_children(store: RecordStore, user, parent_id: str, child_ids: list[str]) -> list[KPI]:
        """Replace the children of a department KPI.

        Only a department head may do this, and only for KPIs owned by users of
        their own department. Every check happens before the first write.
        """
        if not isinstance(user, DepartmentHead):
            raise AuthorizationError("Only department heads can link KPIs")

        department_kpis = {k.id: k for k in store.get_department_kpis(user.department)}
        parent = department_kpis.get(parent_id)
        if parent is None:
            raise NotFoundError("Parent KPI not found in your department")
        if parent.level != "department":
            raise ValidationError("Parent KPI must be a department-level KPI")

        children = []
        for child_id in dict.fromkeys(child_ids):
            child = department_kpis.get(child_id)
            if child is None:
                raise NotFoundError(f"KPI {child_id} not found in your department")
            if child.level != "individual":
                raise ValidationError("Only individual KPIs can be linked to a department KPI")
            children.append(child)

        # Detach across departments: an owner may have moved since being linked
        for kpi in store.get_kpis_by_parent(parent_id):
            store.upsert(kpi.model_copy(update={"parent_kpi_id": None}))
        linked = [store.upsert(c.model_copy(update={"parent_kpi_id": parent_id})) for c in children]
        logger.info(f"Linked {len(linked)} KPI(s) to department KPI {parent_id}")
        return linked

    @staticmethod
    def rollup(store: RecordStore, user, parent_id: str) -> dict:
        parent = KPIService.get_visible_by_id(store, user, parent_id)
        if parent.level != "department":
            raise ValidationError("Roll-up is only defined for department KPIs")
        children = KPIService.get_children(store, parent.id)
        return {
            "kpi": describe(parent),
            "children": [describe(c) for c in children],
            "rollup": weighted_rollup(children),
        }
