# /studioalign/services/database_helpers/studio_repository_sql.py

"""
Queries for studio reference data: the studio row itself, its teachers,
locations (rooms), parents and students. Every lookup that returns
tenant-owned rows is filtered by `studio_id`.
"""

from typing import Dict, List, Optional

from sqlalchemy.orm import joinedload, selectinload

from ...db.models.studio_models import Studio, Location, Student
from ...db.models.user_models import Teacher, Parent
from .base_repository_sql import BaseRepositorySQL


class StudioRepositorySQL(BaseRepositorySQL):

    # --- Studio Methods ---

    def get_all_studios(self) -> List[Studio]:
        return self.db.query(Studio).order_by(Studio.name).all()

    def get_studio_by_id(self, studio_id: str) -> Optional[Studio]:
        return self.db.query(Studio).filter(Studio.id == studio_id).first()

    def update_studio(self, studio_id: str, data: Dict) -> Optional[Studio]:
        studio = self.get_studio_by_id(studio_id)
        if studio is None:
            return None
        with self.transaction():
            for key, value in data.items():
                setattr(studio, key, value)
        self.db.refresh(studio)
        return studio

    # --- Teacher Methods ---

    def get_teachers(self, studio_id: str) -> List[Teacher]:
        return self.db.query(Teacher).filter(Teacher.studio_id == studio_id).order_by(Teacher.name).all()

    def get_teacher_by_id(self, teacher_id: str, studio_id: str) -> Optional[Teacher]:
        return self.db.query(Teacher).filter(Teacher.id == teacher_id, Teacher.studio_id == studio_id).first()

    # --- Location Methods ---

    def get_locations(self, studio_id: str) -> List[Location]:
        return self.db.query(Location).filter(Location.studio_id == studio_id).order_by(Location.name).all()

    def get_location_by_id(self, location_id: str, studio_id: str) -> Optional[Location]:
        return self.db.query(Location).filter(Location.id == location_id, Location.studio_id == studio_id).first()

    def add_location(self, record: Dict) -> Location:
        location = Location(**record)
        with self.transaction():
            self.db.add(location)
        self.db.refresh(location)
        return location

    def delete_location(self, location_id: str, studio_id: str) -> bool:
        location = self.get_location_by_id(location_id, studio_id)
        if location is None:
            return False
        with self.transaction():
            self.db.delete(location)
        return True

    # --- Parent & Student Methods ---

    def get_parents_with_students(self, studio_id: str) -> List[Parent]:
        return (
            self.db.query(Parent)
            .options(selectinload(Parent.students))
            .filter(Parent.studio_id == studio_id)
            .order_by(Parent.name)
            .all()
        )

    def get_parent_by_id(self, parent_id: str, studio_id: str) -> Optional[Parent]:
        return self.db.query(Parent).filter(Parent.id == parent_id, Parent.studio_id == studio_id).first()

    def get_students(self, studio_id: str) -> List[Student]:
        return (
            self.db.query(Student)
            .options(joinedload(Student.parent))
            .filter(Student.studio_id == studio_id)
            .order_by(Student.name)
            .all()
        )

    def get_students_by_ids(self, student_ids: List[str], studio_id: str) -> List[Student]:
        if not student_ids:
            return []
        return self.db.query(Student).filter(Student.id.in_(student_ids), Student.studio_id == studio_id).all()

    def get_students_for_parent(self, parent_id: str) -> List[Student]:
        return self.db.query(Student).filter(Student.parent_id == parent_id).order_by(Student.name).all()

    def add_student(self, record: Dict) -> Student:
        student = Student(**record)
        with self.transaction():
            self.db.add(student)
        self.db.refresh(student)
        return student
