# /studioalign/services/database_helpers/class_repository_sql.py

"""
Queries for class templates, their precomputed instances and the standing
roster.

The scoped-mutation methods (`modify_class_instance`,
`modify_future_class_instances`, `modify_all_class_instances`,
`bulk_update_class_instances` and the matching deletes) each run as one
transaction and return the number of instance rows they touched.
"""

from datetime import date, timedelta
from typing import Dict, List, Optional

from sqlalchemy.orm import joinedload

from ...db.models.class_models import Class, ClassInstance, ClassStudent
from ...db.models.studio_models import Student
from ..class_helpers.calendar import expansion_window, occurrence_dates
from .base_repository_sql import BaseRepositorySQL

# Fields an instance copies from its template.
INSTANCE_FIELDS = ("name", "teacher_id", "location_id", "start_time", "end_time")


def _new_instance(class_: Class, on_date: date) -> ClassInstance:
    return ClassInstance(
        class_id=class_.id,
        date=on_date,
        **{field: getattr(class_, field) for field in INSTANCE_FIELDS},
    )


class ClassRepositorySQL(BaseRepositorySQL):

    # --- Template Reads ---

    def get_classes_for_studio(self, studio_id: str, teacher_id: Optional[str] = None) -> List[Class]:
        query = (
            self.db.query(Class)
            .options(joinedload(Class.teacher), joinedload(Class.location))
            .filter(Class.studio_id == studio_id)
        )
        if teacher_id is not None:
            query = query.filter(Class.teacher_id == teacher_id)
        return query.order_by(Class.name).all()

    def get_class_by_id(self, class_id: str, studio_id: str) -> Optional[Class]:
        return self.db.query(Class).filter(Class.id == class_id, Class.studio_id == studio_id).first()

    # --- Template Writes ---

    def add_class(self, record: Dict, instance_dates: List[date], student_ids: List[str]) -> Class:
        """Creates the template, its instance rows and its roster together."""
        new_class = Class(**record)
        with self.transaction():
            self.db.add(new_class)
            self.db.flush()
            for on_date in instance_dates:
                self.db.add(_new_instance(new_class, on_date))
            for student_id in dict.fromkeys(student_ids):
                self.db.add(ClassStudent(class_id=new_class.id, student_id=student_id))
            if instance_dates:
                new_class.materialized_through = max(instance_dates)
        self.db.refresh(new_class)
        return new_class

    def ensure_class_materialized(self, class_id: str, through: date) -> int:
        """
        Generates missing instance rows of a recurring class up to `through`
        (bounded by its `end_date`). Returns how many rows were created.
        """
        class_ = self.db.query(Class).filter(Class.id == class_id).first()
        if class_ is None or not class_.is_recurring:
            return 0
        already = class_.materialized_through
        if already is not None and already >= through:
            return 0
        window_start = (already + timedelta(days=1)) if already is not None else (class_.start_date or through)
        new_dates = occurrence_dates(class_, window_start, through)
        with self.transaction():
            for on_date in new_dates:
                self.db.add(_new_instance(class_, on_date))
            class_.materialized_through = through if class_.end_date is None else min(through, class_.end_date)
        return len(new_dates)

    def delete_class(self, class_id: str) -> int:
        """Deletes the template; instances, roster and enrollments cascade."""
        class_ = self.db.query(Class).filter(Class.id == class_id).first()
        if class_ is None:
            return 0
        affected = self.db.query(ClassInstance).filter(ClassInstance.class_id == class_id).count()
        with self.transaction():
            self.db.delete(class_)
        return affected

    # --- Roster Methods ---

    def get_roster(self, class_id: str) -> List[Student]:
        return (
            self.db.query(Student)
            .join(ClassStudent, ClassStudent.student_id == Student.id)
            .filter(ClassStudent.class_id == class_id)
            .order_by(Student.name)
            .all()
        )

    def get_roster_entries(self, class_ids: List[str]) -> List[ClassStudent]:
        if not class_ids:
            return []
        return self.db.query(ClassStudent).filter(ClassStudent.class_id.in_(class_ids)).all()

    def get_roster_for_parent(self, class_ids: List[str], parent_id: str) -> Dict[str, List[Student]]:
        """Maps each class id to the parent's own children rostered on it."""
        if not class_ids:
            return {}
        rows = (
            self.db.query(ClassStudent.class_id, Student)
            .join(Student, ClassStudent.student_id == Student.id)
            .filter(ClassStudent.class_id.in_(class_ids), Student.parent_id == parent_id)
            .all()
        )
        enrolled: Dict[str, List[Student]] = {}
        for class_id, student in rows:
            enrolled.setdefault(class_id, []).append(student)
        return enrolled

    def replace_roster(self, class_id: str, student_ids: List[str]) -> None:
        with self.transaction():
            self.db.query(ClassStudent).filter(ClassStudent.class_id == class_id).delete(synchronize_session=False)
            for student_id in dict.fromkeys(student_ids):
                self.db.add(ClassStudent(class_id=class_id, student_id=student_id))

    # --- Instance Reads ---

    def get_class_instance(self, class_id: str, on_date: date) -> Optional[ClassInstance]:
        return (
            self.db.query(ClassInstance)
            .filter(ClassInstance.class_id == class_id, ClassInstance.date == on_date)
            .first()
        )

    def get_class_instance_by_id(self, instance_id: str, studio_id: str) -> Optional[ClassInstance]:
        return (
            self.db.query(ClassInstance)
            .join(Class, ClassInstance.class_id == Class.id)
            .filter(ClassInstance.id == instance_id, Class.studio_id == studio_id)
            .first()
        )

    def get_instances_in_range(
        self, studio_id: str, start: date, end: date, teacher_id: Optional[str] = None
    ) -> List[ClassInstance]:
        query = (
            self.db.query(ClassInstance)
            .join(Class, ClassInstance.class_id == Class.id)
            .options(joinedload(ClassInstance.class_), joinedload(ClassInstance.teacher))
            .filter(Class.studio_id == studio_id, ClassInstance.date >= start, ClassInstance.date <= end)
        )
        if teacher_id is not None:
            query = query.filter(ClassInstance.teacher_id == teacher_id)
        return query.order_by(ClassInstance.date, ClassInstance.start_time).all()

    def get_instances_for_class(self, class_id: str) -> List[ClassInstance]:
        return self.db.query(ClassInstance).filter(ClassInstance.class_id == class_id).order_by(ClassInstance.date).all()

    def create_class_instance(self, class_id: str, on_date: date) -> ClassInstance:
        class_ = self.db.query(Class).filter(Class.id == class_id).one()
        instance = _new_instance(class_, on_date)
        with self.transaction():
            self.db.add(instance)
        self.db.refresh(instance)
        return instance

    # --- Scoped Mutations ---

    def modify_class_instance(self, class_id: str, on_date: date, changes: Dict) -> int:
        """Rewrites the single instance at (class_id, on_date)."""
        with self.transaction():
            affected = (
                self.db.query(ClassInstance)
                .filter(ClassInstance.class_id == class_id, ClassInstance.date == on_date)
                .update(changes, synchronize_session=False)
            )
        self.db.expire_all()
        return affected

    def modify_future_class_instances(self, class_id: str, from_date: date, changes: Dict) -> int:
        """
        Rewrites every instance of the class dated on or after `from_date`.
        The template takes the same values so that weeks generated later
        continue the edited series.
        """
        with self.transaction():
            self.db.query(Class).filter(Class.id == class_id).update(changes, synchronize_session=False)
            affected = (
                self.db.query(ClassInstance)
                .filter(ClassInstance.class_id == class_id, ClassInstance.date >= from_date)
                .update(changes, synchronize_session=False)
            )
        self.db.expire_all()
        return affected

    def modify_all_class_instances(self, class_id: str, changes: Dict) -> int:
        """Rewrites the template and propagates the same values to every instance."""
        with self.transaction():
            self.db.query(Class).filter(Class.id == class_id).update(changes, synchronize_session=False)
            affected = (
                self.db.query(ClassInstance)
                .filter(ClassInstance.class_id == class_id)
                .update(changes, synchronize_session=False)
            )
        self.db.expire_all()
        return affected

    def reschedule_class(self, class_id: str, changes: Dict, horizon_weeks: int) -> int:
        """
        Rewrites the template, schedule included, and regenerates its instance
        rows to match. Instances on dates the new schedule still covers are kept
        with their enrollments and take the instance-level changes; the others
        are deleted. Returns how many instance rows the class now has.
        """
        class_ = self.db.query(Class).filter(Class.id == class_id).one()
        instance_changes = {key: value for key, value in changes.items() if key in INSTANCE_FIELDS}
        with self.transaction():
            for key, value in changes.items():
                setattr(class_, key, value)
            window_start, window_end = expansion_window(class_, horizon_weeks)
            wanted = occurrence_dates(class_, window_start, window_end)
            missing = set(wanted)
            for instance in self.db.query(ClassInstance).filter(ClassInstance.class_id == class_id).all():
                if instance.date in missing:
                    missing.discard(instance.date)
                    for key, value in instance_changes.items():
                        setattr(instance, key, value)
                else:
                    self.db.delete(instance)
            for on_date in sorted(missing):
                self.db.add(_new_instance(class_, on_date))
            class_.materialized_through = max(wanted) if wanted else None
        self.db.expire_all()
        return len(wanted)

    def bulk_update_class_instances(self, class_id: str, instance_ids: List[str], changes: Dict) -> int:
        """Rewrites an explicit set of instances belonging to one class."""
        if not instance_ids:
            return 0
        with self.transaction():
            affected = (
                self.db.query(ClassInstance)
                .filter(ClassInstance.class_id == class_id, ClassInstance.id.in_(instance_ids))
                .update(changes, synchronize_session=False)
            )
        self.db.expire_all()
        return affected

    def delete_class_instance(self, class_id: str, on_date: date) -> int:
        instance = self.get_class_instance(class_id, on_date)
        if instance is None:
            return 0
        with self.transaction():
            self.db.delete(instance)
        return 1

    def delete_future_class_instances(self, class_id: str, from_date: date) -> int:
        """
        Deletes instances dated on or after `from_date` and ends the series
        the day before, so those dates are never generated again.
        """
        instances = (
            self.db.query(ClassInstance)
            .filter(ClassInstance.class_id == class_id, ClassInstance.date >= from_date)
            .all()
        )
        with self.transaction():
            for instance in instances:
                self.db.delete(instance)
            class_ = self.db.query(Class).filter(Class.id == class_id).one()
            class_.end_date = from_date - timedelta(days=1)
            if class_.materialized_through is not None and class_.materialized_through > class_.end_date:
                class_.materialized_through = class_.end_date
        return len(instances)
