# /studioalign/services/database_helpers/attendance_repository_sql.py

from typing import Dict, List

from sqlalchemy.orm import joinedload

from ...db.models.class_models import AttendanceRecord, ClassStudent, InstanceEnrollment
from .base_repository_sql import BaseRepositorySQL


class AttendanceRepositorySQL(BaseRepositorySQL):

    def get_instance_enrollments(self, instance_id: str) -> List[InstanceEnrollment]:
        return (
            self.db.query(InstanceEnrollment)
            .options(joinedload(InstanceEnrollment.student), joinedload(InstanceEnrollment.attendance))
            .filter(InstanceEnrollment.class_instance_id == instance_id)
            .all()
        )

    def create_instance_enrollments_from_roster(self, instance_id: str, class_id: str) -> List[InstanceEnrollment]:
        """
        Copies the class's standing roster onto one instance. Students already
        enrolled on the instance are skipped.
        """
        rostered = [
            row.student_id
            for row in self.db.query(ClassStudent.student_id).filter(ClassStudent.class_id == class_id).all()
        ]
        existing = {
            row.student_id
            for row in self.db.query(InstanceEnrollment.student_id)
            .filter(InstanceEnrollment.class_instance_id == instance_id)
            .all()
        }
        with self.transaction():
            for student_id in rostered:
                if student_id not in existing:
                    self.db.add(InstanceEnrollment(class_instance_id=instance_id, student_id=student_id))
        return self.get_instance_enrollments(instance_id)

    def get_attendance_records(self, enrollment_ids: List[str]) -> List[AttendanceRecord]:
        if not enrollment_ids:
            return []
        return (
            self.db.query(AttendanceRecord)
            .filter(AttendanceRecord.instance_enrollment_id.in_(enrollment_ids))
            .all()
        )

    def upsert_attendance_records(self, records: List[Dict]) -> int:
        """
        Inserts or updates one attendance record per `instance_enrollment_id`.
        When the batch names an enrollment more than once, the last entry wins.
        The whole batch commits or rolls back together.
        """
        latest = {record["instance_enrollment_id"]: record for record in records}
        existing = {record.instance_enrollment_id: record for record in self.get_attendance_records(list(latest))}
        with self.transaction():
            for enrollment_id, record in latest.items():
                current = existing.get(enrollment_id)
                if current is None:
                    self.db.add(AttendanceRecord(**record))
                else:
                    current.status = record["status"]
                    current.notes = record.get("notes")
        return len(latest)
