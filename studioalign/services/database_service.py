# /studioalign/services/database_service.py

from datetime import date
from typing import Dict, Generator, List, Optional, Tuple

from fastapi import Depends
from sqlalchemy.orm import Session

# --- Core Database Setup ---
from ..db.database import get_db

# --- Repository Imports ---
from .database_helpers.user_repository_sql import UserRepositorySQL
from .database_helpers.studio_repository_sql import StudioRepositorySQL
from .database_helpers.class_repository_sql import ClassRepositorySQL
from .database_helpers.attendance_repository_sql import AttendanceRepositorySQL
from .database_helpers.messaging_repository_sql import MessagingRepositorySQL
from .database_helpers.channel_repository_sql import ChannelRepositorySQL
from .database_helpers.invoice_repository_sql import InvoiceRepositorySQL


class DatabaseService:
    """
    Facade over the SQL repositories. Services talk to this object only, so a
    test can hand them a `MagicMock` in its place.
    """

    def __init__(self, db_session: Session):
        if db_session is None:
            raise ValueError("A database session is required.")
        self.session = db_session
        self.user_repo = UserRepositorySQL(db_session)
        self.studio_repo = StudioRepositorySQL(db_session)
        self.class_repo = ClassRepositorySQL(db_session)
        self.attendance_repo = AttendanceRepositorySQL(db_session)
        self.messaging_repo = MessagingRepositorySQL(db_session)
        self.channel_repo = ChannelRepositorySQL(db_session)
        self.invoice_repo = InvoiceRepositorySQL(db_session)

    def reset_snapshot(self) -> None:
        """Ends the current read transaction so the next query sees other sessions' commits."""
        self.session.rollback()

    # --- USER & ROLE METHODS (DELEGATED) ---
    def get_user_by_id(self, user_id: str): return self.user_repo.get_user_by_id(user_id)
    def get_user_by_email(self, email: str): return self.user_repo.get_user_by_email(email)
    def create_owner_account(self, user_record: Dict, owner_record: Dict, studio_record: Dict): return self.user_repo.create_owner_account(user_record, owner_record, studio_record)
    def create_member_account(self, user_record: Dict, member_model, member_record: Dict): return self.user_repo.create_member_account(user_record, member_model, member_record)
    def get_owner_by_user_id(self, user_id: str): return self.user_repo.get_owner_by_user_id(user_id)
    def get_teacher_by_user_id(self, user_id: str): return self.user_repo.get_teacher_by_user_id(user_id)
    def get_parent_by_user_id(self, user_id: str): return self.user_repo.get_parent_by_user_id(user_id)
    def get_studio_for_owner(self, owner_id: str): return self.user_repo.get_studio_for_owner(owner_id)
    def get_user_ids_for_studio(self, studio_id: str) -> List[str]: return self.user_repo.get_user_ids_for_studio(studio_id)

    # --- STUDIO REFERENCE DATA METHODS (DELEGATED) ---
    def get_all_studios(self): return self.studio_repo.get_all_studios()
    def get_studio_by_id(self, studio_id: str): return self.studio_repo.get_studio_by_id(studio_id)
    def update_studio(self, studio_id: str, data: Dict): return self.studio_repo.update_studio(studio_id, data)
    def get_teachers(self, studio_id: str): return self.studio_repo.get_teachers(studio_id)
    def get_teacher_by_id(self, teacher_id: str, studio_id: str): return self.studio_repo.get_teacher_by_id(teacher_id, studio_id)
    def get_locations(self, studio_id: str): return self.studio_repo.get_locations(studio_id)
    def get_location_by_id(self, location_id: str, studio_id: str): return self.studio_repo.get_location_by_id(location_id, studio_id)
    def add_location(self, record: Dict): return self.studio_repo.add_location(record)
    def delete_location(self, location_id: str, studio_id: str) -> bool: return self.studio_repo.delete_location(location_id, studio_id)
    def get_parents_with_students(self, studio_id: str): return self.studio_repo.get_parents_with_students(studio_id)
    def get_parent_by_id(self, parent_id: str, studio_id: str): return self.studio_repo.get_parent_by_id(parent_id, studio_id)
    def get_students(self, studio_id: str): return self.studio_repo.get_students(studio_id)
    def get_students_by_ids(self, student_ids: List[str], studio_id: str): return self.studio_repo.get_students_by_ids(student_ids, studio_id)
    def get_students_for_parent(self, parent_id: str): return self.studio_repo.get_students_for_parent(parent_id)
    def add_student(self, record: Dict): return self.studio_repo.add_student(record)

    # --- CLASS & INSTANCE METHODS (DELEGATED) ---
    def get_classes_for_studio(self, studio_id: str, teacher_id: Optional[str] = None): return self.class_repo.get_classes_for_studio(studio_id, teacher_id)
    def get_class_by_id(self, class_id: str, studio_id: str): return self.class_repo.get_class_by_id(class_id, studio_id)
    def add_class(self, record: Dict, instance_dates: List[date], student_ids: List[str]): return self.class_repo.add_class(record, instance_dates, student_ids)
    def ensure_class_materialized(self, class_id: str, through: date) -> int: return self.class_repo.ensure_class_materialized(class_id, through)
    def delete_class(self, class_id: str) -> int: return self.class_repo.delete_class(class_id)
    def get_roster(self, class_id: str): return self.class_repo.get_roster(class_id)
    def get_roster_entries(self, class_ids: List[str]): return self.class_repo.get_roster_entries(class_ids)
    def get_roster_for_parent(self, class_ids: List[str], parent_id: str): return self.class_repo.get_roster_for_parent(class_ids, parent_id)
    def replace_roster(self, class_id: str, student_ids: List[str]): return self.class_repo.replace_roster(class_id, student_ids)
    def get_class_instance(self, class_id: str, on_date: date): return self.class_repo.get_class_instance(class_id, on_date)
    def get_class_instance_by_id(self, instance_id: str, studio_id: str): return self.class_repo.get_class_instance_by_id(instance_id, studio_id)
    def get_instances_in_range(self, studio_id: str, start: date, end: date, teacher_id: Optional[str] = None): return self.class_repo.get_instances_in_range(studio_id, start, end, teacher_id)
    def get_instances_for_class(self, class_id: str): return self.class_repo.get_instances_for_class(class_id)
    def create_class_instance(self, class_id: str, on_date: date): return self.class_repo.create_class_instance(class_id, on_date)
    def modify_class_instance(self, class_id: str, on_date: date, changes: Dict) -> int: return self.class_repo.modify_class_instance(class_id, on_date, changes)
    def modify_future_class_instances(self, class_id: str, from_date: date, changes: Dict) -> int: return self.class_repo.modify_future_class_instances(class_id, from_date, changes)
    def modify_all_class_instances(self, class_id: str, changes: Dict) -> int: return self.class_repo.modify_all_class_instances(class_id, changes)
    def reschedule_class(self, class_id: str, changes: Dict, horizon_weeks: int) -> int: return self.class_repo.reschedule_class(class_id, changes, horizon_weeks)
    def bulk_update_class_instances(self, class_id: str, instance_ids: List[str], changes: Dict) -> int: return self.class_repo.bulk_update_class_instances(class_id, instance_ids, changes)
    def delete_class_instance(self, class_id: str, on_date: date) -> int: return self.class_repo.delete_class_instance(class_id, on_date)
    def delete_future_class_instances(self, class_id: str, from_date: date) -> int: return self.class_repo.delete_future_class_instances(class_id, from_date)

    # --- ATTENDANCE METHODS (DELEGATED) ---
    def get_instance_enrollments(self, instance_id: str): return self.attendance_repo.get_instance_enrollments(instance_id)
    def create_instance_enrollments_from_roster(self, instance_id: str, class_id: str): return self.attendance_repo.create_instance_enrollments_from_roster(instance_id, class_id)
    def get_attendance_records(self, enrollment_ids: List[str]): return self.attendance_repo.get_attendance_records(enrollment_ids)
    def upsert_attendance_records(self, records: List[Dict]) -> int: return self.attendance_repo.upsert_attendance_records(records)

    # --- MESSAGING METHODS (DELEGATED) ---
    def get_conversations_for_user(self, user_id: str) -> List[Tuple]: return self.messaging_repo.get_conversations_for_user(user_id)
    def get_conversation_by_id(self, conversation_id: str): return self.messaging_repo.get_conversation_by_id(conversation_id)
    def get_participant(self, conversation_id: str, user_id: str): return self.messaging_repo.get_participant(conversation_id, user_id)
    def get_participant_ids(self, conversation_id: str) -> List[str]: return self.messaging_repo.get_participant_ids(conversation_id)
    def create_conversation(self, created_by: str, participant_ids: List[str]) -> str: return self.messaging_repo.create_conversation(created_by, participant_ids)
    def get_messages(self, conversation_id: str): return self.messaging_repo.get_messages(conversation_id)
    def add_message(self, conversation_id: str, sender_id: str, content: str): return self.messaging_repo.add_message(conversation_id, sender_id, content)
    def mark_messages_as_read(self, conversation_id: str, user_id: str) -> bool: return self.messaging_repo.mark_messages_as_read(conversation_id, user_id)

    # --- CHANNEL METHODS (DELEGATED) ---
    def get_channels_for_studio(self, studio_id: str, class_ids: Optional[List[str]] = None): return self.channel_repo.get_channels_for_studio(studio_id, class_ids)
    def get_channel_by_id(self, channel_id: str, studio_id: str): return self.channel_repo.get_channel_by_id(channel_id, studio_id)
    def add_channel(self, record: Dict): return self.channel_repo.add_channel(record)
    def get_channel_posts(self, channel_id: str): return self.channel_repo.get_posts(channel_id)
    def add_channel_post(self, record: Dict): return self.channel_repo.add_post(record)

    # --- INVOICE METHODS (DELEGATED) ---
    def get_invoices(self, studio_id: str, status: Optional[str] = None, search: Optional[str] = None): return self.invoice_repo.get_invoices(studio_id, status, search)
    def get_invoice_by_id(self, invoice_id: str, studio_id: str): return self.invoice_repo.get_invoice_by_id(invoice_id, studio_id)
    def count_invoices_by_status(self, studio_id: str) -> Dict[str, int]: return self.invoice_repo.count_invoices_by_status(studio_id)
    def count_invoices_since(self, studio_id: str, prefix: str) -> int: return self.invoice_repo.count_invoices_since(studio_id, prefix)
    def add_invoice(self, record: Dict): return self.invoice_repo.add_invoice(record)
    def add_invoice_items(self, invoice_id: str, items: List[Dict]): return self.invoice_repo.add_invoice_items(invoice_id, items)
    def update_invoice_status(self, invoice_id: str, studio_id: str, status: str): return self.invoice_repo.update_invoice_status(invoice_id, studio_id, status)
    def get_plan_enrollments_for_parent(self, parent_id: str): return self.invoice_repo.get_plan_enrollments_for_parent(parent_id)
    def get_pricing_plans(self, studio_id: str): return self.invoice_repo.get_pricing_plans(studio_id)
    def get_pricing_plan_by_id(self, plan_id: str, studio_id: str): return self.invoice_repo.get_pricing_plan_by_id(plan_id, studio_id)
    def add_pricing_plan(self, record: Dict): return self.invoice_repo.add_pricing_plan(record)
    def add_plan_enrollment(self, plan_id: str, student_id: str): return self.invoice_repo.add_plan_enrollment(plan_id, student_id)


# --- DEPENDENCY PROVIDER ---
def get_db_service(db: Session = Depends(get_db)) -> Generator[DatabaseService, None, None]:
    """FastAPI dependency that provides a DatabaseService bound to the request's session."""
    yield DatabaseService(db_session=db)
