"""
Hierarchy Service

Reporting lines are stored as manager -> employee edges. Only active edges describe the
current org chart; removed edges are kept with an end date. At most one active edge may
point at any employee, and edges may never form a circular reporting line.
"""
from collections import defaultdict
from typing import Dict, List, Optional, Set

from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from feedback_hub.core.exceptions import (
    AccessDeniedError, AppException, ConflictError, NotFoundError, ValidationError,
)
from feedback_hub.database import utcnow
from feedback_hub.models.hierarchy import OrganizationalHierarchy
from feedback_hub.models.user import User
from feedback_hub.schemas.hierarchy import (
    BulkHierarchyResult, HierarchyNode, HierarchyStats, HierarchyValidation, RelationshipInput,
)
from feedback_hub.services.base import BaseService

MAX_CHAIN_DEPTH = 20
DEEP_HIERARCHY_WARNING = 10
SEARCH_LIMIT = 20


class HierarchyService(BaseService):

    def __init__(self, db: Session, user: Optional[User] = None):
        super().__init__(db, org_id=user.organization_id if user else None)
        self.user = user

    # --- Access ---

    def validate_org_access(self, organization_id: str) -> None:
        """Super admins may read any organization; everyone else only their own."""
        if self.user is None or self.user.is_super_admin:
            return
        if not self.user.organization_id:
            raise AccessDeniedError("Access denied: User is not assigned to any organization")
        if self.user.organization_id != organization_id:
            raise AccessDeniedError("Access denied: Cannot access another organization's hierarchy data")

    def validate_user_belongs_to_org(self, user_id: str) -> User:
        target = self.db.get(User, user_id)
        if not target:
            raise NotFoundError("User not found")
        if self.user is not None and not self.user.is_super_admin:
            if not self.user.organization_id or target.organization_id != self.user.organization_id:
                raise AccessDeniedError("Access denied: User belongs to another organization")
        return target

    # --- Queries ---

    def _active_edges(self, *criteria) -> List[OrganizationalHierarchy]:
        return (
            self.db.query(OrganizationalHierarchy)
            .options(joinedload(OrganizationalHierarchy.employee), joinedload(OrganizationalHierarchy.manager))
            .filter(OrganizationalHierarchy.is_active == True, *criteria)  # noqa: E712
            .all()
        )

    def _active_edge_for(self, employee_id: str) -> Optional[OrganizationalHierarchy]:
        return (
            self.db.query(OrganizationalHierarchy)
            .filter(
                OrganizationalHierarchy.employee_id == employee_id,
                OrganizationalHierarchy.is_active == True,  # noqa: E712
            )
            .first()
        )

    @staticmethod
    def _node(edge: OrganizationalHierarchy) -> HierarchyNode:
        return HierarchyNode(
            id=edge.id,
            employee_id=edge.employee_id,
            employee_name=edge.employee.name if edge.employee else None,
            employee_email=edge.employee.email if edge.employee else "",
            manager_id=edge.manager_id,
            manager_name=edge.manager.name if edge.manager else None,
            level=edge.level,
        )

    def get_direct_reports(self, manager_id: str) -> List[HierarchyNode]:
        self._logger.debug("Fetching direct reports", extra={"manager_id": manager_id})
        edges = self._active_edges(OrganizationalHierarchy.manager_id == manager_id)
        nodes = [self._node(e) for e in edges]
        return sorted(nodes, key=lambda n: (n.employee_name or "").lower())

    def get_manager_chain(self, employee_id: str) -> List[HierarchyNode]:
        """Managers above the employee, top of the organization first."""
        chain: List[HierarchyNode] = []
        seen: Set[str] = set()
        current = employee_id
        while len(chain) < MAX_CHAIN_DEPTH and current not in seen:
            seen.add(current)
            edge = self._active_edge_for(current)
            if edge is None:
                break
            chain.append(self._node(edge))
            current = edge.manager_id
        chain.reverse()
        return chain

    def _build_forest(self, organization_id: str):
        edges = self._active_edges(OrganizationalHierarchy.organization_id == organization_id)
        edges.sort(key=lambda e: (e.level, (e.employee.name or "").lower() if e.employee else ""))

        nodes: Dict[str, HierarchyNode] = {e.employee_id: self._node(e) for e in edges}
        # Managers who report to nobody become the top nodes of the chart
        tops: Dict[str, HierarchyNode] = {}
        for edge in edges:
            parent = nodes.get(edge.manager_id)
            if parent is None:
                parent = tops.get(edge.manager_id)
            if parent is None:
                manager = edge.manager
                parent = tops[edge.manager_id] = HierarchyNode(
                    id=edge.manager_id,
                    employee_id=edge.manager_id,
                    employee_name=manager.name if manager else None,
                    employee_email=manager.email if manager else "",
                    manager_id=None,
                    level=0,
                )
            parent.children.append(nodes[edge.employee_id])
        return edges, list(tops.values())

    @classmethod
    def _count_descendants(cls, node: HierarchyNode) -> int:
        total = len(node.children)
        for child in node.children:
            total += cls._count_descendants(child)
        node.employee_count = total
        return total

    @classmethod
    def _depth(cls, node: HierarchyNode) -> int:
        if not node.children:
            return 0
        return 1 + max(cls._depth(child) for child in node.children)

    def get_hierarchy_tree(self, organization_id: str) -> HierarchyNode:
        self._logger.debug("Fetching hierarchy tree", extra={"organization_id": organization_id})
        _, roots = self._build_forest(organization_id)
        for root in roots:
            self._count_descendants(root)

        if len(roots) == 1:
            return roots[0]

        placeholder = HierarchyNode(
            id="root",
            employee_id="root",
            employee_name="Organization",
            employee_email="",
            manager_id=None,
            children=roots,
        )
        placeholder.employee_count = sum(1 + r.employee_count for r in roots)
        return placeholder

    def _org_user_ids(self, organization_id: str) -> Set[str]:
        rows = (
            self.db.query(User.id)
            .filter(User.organization_id == organization_id, User.is_active == True)  # noqa: E712
            .all()
        )
        return {row.id for row in rows}

    def get_hierarchy_stats(self, organization_id: str) -> HierarchyStats:
        edges, roots = self._build_forest(organization_id)
        if not edges:
            return HierarchyStats(orphaned_employees=len(self._org_user_ids(organization_id)))

        managers = {e.manager_id for e in edges}
        placed = managers | {e.employee_id for e in edges}
        max_depth = max((self._depth(root) for root in roots), default=0)

        return HierarchyStats(
            total_relationships=len(edges),
            max_depth=max_depth,
            average_span_of_control=round(len(edges) / len(managers), 2),
            orphaned_employees=len(self._org_user_ids(organization_id) - placed),
        )

    def _find_cycles(self, edges: List[OrganizationalHierarchy]) -> List[List[str]]:
        manager_of = {e.employee_id: e.manager_id for e in edges}
        cycles, done = [], set()
        for start in manager_of:
            path, current = [], start
            while current in manager_of and current not in done and current not in path:
                path.append(current)
                current = manager_of[current]
            if current in path:
                cycles.append(path[path.index(current):])
            done.update(path)
        return cycles

    def validate_hierarchy(self, organization_id: str) -> HierarchyValidation:
        self._logger.debug("Validating hierarchy", extra={"organization_id": organization_id})
        edges = self._active_edges(OrganizationalHierarchy.organization_id == organization_id)
        errors: List[str] = []
        warnings: List[str] = []

        for cycle in self._find_cycles(edges):
            errors.append(f"Circular reporting line detected: {' -> '.join(cycle)}")

        per_employee = defaultdict(int)
        for edge in edges:
            per_employee[edge.employee_id] += 1
        for employee_id, count in per_employee.items():
            if count > 1:
                errors.append(f"Employee {employee_id} has {count} active managers")

        stats = self.get_hierarchy_stats(organization_id)
        if stats.orphaned_employees > 0:
            warnings.append(f"{stats.orphaned_employees} employees are not in the hierarchy")
        if stats.max_depth > DEEP_HIERARCHY_WARNING:
            warnings.append(f"Hierarchy depth ({stats.max_depth}) is very deep, consider flattening")

        return HierarchyValidation(is_valid=not errors, errors=errors, warnings=warnings)

    def search_employees(
        self, organization_id: str, q: str = "", role: Optional[str] = None, exclude_ids: Optional[List[str]] = None
    ) -> List[HierarchyNode]:
        pattern = f"%{q.strip()}%"
        query = self.db.query(User).filter(
            User.organization_id == organization_id,
            User.is_active == True,  # noqa: E712
            or_(User.name.ilike(pattern), User.email.ilike(pattern)),
        )
        if exclude_ids:
            query = query.filter(User.id.notin_(exclude_ids))
        users = query.order_by(User.name).all()
        if role:
            users = [u for u in users if u.has_role(role)]
        users = users[:SEARCH_LIMIT]

        managers = {
            e.employee_id: e.manager_id
            for e in self._active_edges(OrganizationalHierarchy.employee_id.in_([u.id for u in users]))
        } if users else {}

        return [
            HierarchyNode(
                id=u.id,
                employee_id=u.id,
                employee_name=u.name,
                employee_email=u.email,
                manager_id=managers.get(u.id),
            )
            for u in users
        ]

    # --- Writes ---

    def _commit(self):
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    def _check_edge(self, organization_id: str, employee_id: str, manager_id: str) -> None:
        if employee_id == manager_id:
            raise ValidationError("An employee cannot be their own manager")
        for user_id, label in ((employee_id, "Employee"), (manager_id, "Manager")):
            member = self.db.get(User, user_id)
            if not member:
                raise NotFoundError(f"{label} not found")
            if member.organization_id != organization_id:
                raise ValidationError(f"{label} does not belong to this organization")
        # Walking up from the new manager must never reach the employee
        if any(node.manager_id == employee_id or node.employee_id == employee_id
               for node in self.get_manager_chain(manager_id)):
            raise ValidationError("This change would create a circular reporting line")

    def _level_under(self, manager_id: str) -> int:
        manager_edge = self._active_edge_for(manager_id)
        return manager_edge.level + 1 if manager_edge else 1

    def _relevel_reports(self, manager_id: str, manager_level: int) -> None:
        """Carry a level change down every active reporting line below ``manager_id``."""
        pending = [(manager_id, manager_level)]
        seen: Set[str] = set()
        while pending:
            current, level = pending.pop()
            if current in seen:
                continue
            seen.add(current)
            for report in self._active_edges(OrganizationalHierarchy.manager_id == current):
                report.level = level + 1
                pending.append((report.employee_id, report.level))

    def create_hierarchy(
        self, organization_id: str, employee_id: str, manager_id: str, effective_date=None
    ) -> OrganizationalHierarchy:
        self.log_info("Creating hierarchy relationship", organization_id=organization_id,
                      employee_id=employee_id, manager_id=manager_id)
        self._check_edge(organization_id, employee_id, manager_id)
        if self._active_edge_for(employee_id):
            raise ConflictError("Employee already has an active manager; update that relationship instead")

        edge = OrganizationalHierarchy(
            organization_id=organization_id,
            employee_id=employee_id,
            manager_id=manager_id,
            level=self._level_under(manager_id),
            is_active=True,
            effective_date=effective_date or utcnow(),
        )
        self.db.add(edge)
        self._commit()
        self.db.refresh(edge)
        return edge

    def _get_edge(self, hierarchy_id: str) -> OrganizationalHierarchy:
        edge = self.db.get(OrganizationalHierarchy, hierarchy_id)
        if not edge:
            raise NotFoundError("Hierarchy relationship not found")
        self.validate_org_access(edge.organization_id)
        return edge

    def update_hierarchy(self, hierarchy_id: str, manager_id: str) -> OrganizationalHierarchy:
        edge = self._get_edge(hierarchy_id)
        if not edge.is_active:
            raise ValidationError("Ended relationships cannot be changed")
        self.log_info("Updating hierarchy relationship", hierarchy_id=hierarchy_id, manager_id=manager_id)
        self._check_edge(edge.organization_id, edge.employee_id, manager_id)

        edge.manager_id = manager_id
        edge.level = self._level_under(manager_id)
        self._relevel_reports(edge.employee_id, edge.level)
        self._commit()
        self.db.refresh(edge)
        return edge

    def delete_hierarchy(self, hierarchy_id: str) -> None:
        edge = self._get_edge(hierarchy_id)
        self.log_info("Ending hierarchy relationship", hierarchy_id=hierarchy_id)
        edge.is_active = False
        edge.end_date = utcnow()
        # The employee now heads their own branch
        self._relevel_reports(edge.employee_id, 0)
        self._commit()

    def bulk_update_hierarchy(self, organization_id: str, relationships: List[RelationshipInput]) -> BulkHierarchyResult:
        self.log_info("Bulk updating hierarchy", organization_id=organization_id, count=len(relationships))
        created = updated = 0
        errors: List[str] = []
        for rel in relationships:
            try:
                existing = self._active_edge_for(rel.employee_id)
                if existing and existing.organization_id == organization_id:
                    self.update_hierarchy(existing.id, rel.manager_id)
                    updated += 1
                else:
                    self.create_hierarchy(organization_id, rel.employee_id, rel.manager_id)
                    created += 1
            except AppException as e:
                errors.append(f"Failed to process {rel.employee_id}: {e.message}")
        return BulkHierarchyResult(created=created, updated=updated, errors=errors)
