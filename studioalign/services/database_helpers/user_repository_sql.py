# /studioalign/services/database_helpers/user_repository_sql.py

"""
Queries for login credentials and the owner/teacher/parent role tables.
"""

from typing import Dict, List, Optional

from ...db.models.user_models import User, Owner, Teacher, Parent
from ...db.models.studio_models import Studio
from .base_repository_sql import BaseRepositorySQL


class UserRepositorySQL(BaseRepositorySQL):

    # --- User Methods ---

    def get_user_by_id(self, user_id: str) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    def get_user_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email.lower()).first()

    def create_owner_account(self, user_record: Dict, owner_record: Dict, studio_record: Dict) -> Owner:
        """
        Creates the user, the owner row and the owner's first studio in one
        transaction, so a failed sign-up never leaves a half-built owner.
        """
        with self.transaction():
            user = User(**user_record)
            self.db.add(user)
            self.db.flush()
            owner = Owner(user_id=user.id, **owner_record)
            self.db.add(owner)
            self.db.flush()
            existing = self.db.query(Studio).filter(Studio.owner_id == owner.id).first()
            if existing is None:
                self.db.add(Studio(owner_id=owner.id, **studio_record))
        self.db.refresh(owner)
        return owner

    def create_member_account(self, user_record: Dict, member_model, member_record: Dict):
        """Creates the user and its teacher or parent row in one transaction."""
        with self.transaction():
            user = User(**user_record)
            self.db.add(user)
            self.db.flush()
            member = member_model(user_id=user.id, **member_record)
            self.db.add(member)
        self.db.refresh(member)
        return member

    # --- Role Lookups ---

    def get_owner_by_user_id(self, user_id: str) -> Optional[Owner]:
        return self.db.query(Owner).filter(Owner.user_id == user_id).first()

    def get_teacher_by_user_id(self, user_id: str) -> Optional[Teacher]:
        return self.db.query(Teacher).filter(Teacher.user_id == user_id).first()

    def get_parent_by_user_id(self, user_id: str) -> Optional[Parent]:
        return self.db.query(Parent).filter(Parent.user_id == user_id).first()

    def get_studio_for_owner(self, owner_id: str) -> Optional[Studio]:
        return self.db.query(Studio).filter(Studio.owner_id == owner_id).order_by(Studio.created_at).first()

    def get_user_ids_for_studio(self, studio_id: str) -> List[str]:
        """Every login that belongs to a studio: its owner, teachers and parents."""
        owner_ids = (
            self.db.query(Owner.user_id)
            .join(Studio, Studio.owner_id == Owner.id)
            .filter(Studio.id == studio_id)
            .all()
        )
        teacher_ids = self.db.query(Teacher.user_id).filter(Teacher.studio_id == studio_id, Teacher.user_id.isnot(None)).all()
        parent_ids = self.db.query(Parent.user_id).filter(Parent.studio_id == studio_id, Parent.user_id.isnot(None)).all()
        return [row[0] for row in owner_ids + teacher_ids + parent_ids]
