# /studioalign/services/reference_cache.py

"""
Reference data (teachers, locations, students) cached per user and studio.

Entries are filled by `studio_service.get_reference_data` and dropped when
anything that changes a studio's people or places is written, including a
new teacher or parent signing up, or when the user signs out.
"""

import threading
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from ..models import studio_model


@dataclass
class ReferenceData:
    teachers: List[studio_model.Teacher] = field(default_factory=list)
    locations: List[studio_model.Location] = field(default_factory=list)
    students: List[studio_model.StudentWithParent] = field(default_factory=list)

    def teacher_name(self, teacher_id: Optional[str]) -> Optional[str]:
        return next((t.name for t in self.teachers if t.id == teacher_id), None)

    def location_name(self, location_id: Optional[str]) -> Optional[str]:
        return next((loc.name for loc in self.locations if loc.id == location_id), None)


class ReferenceDataCache:
    """Per (user, studio) cache of `ReferenceData`. Entries hold detached Pydantic copies."""

    def __init__(self):
        self._lock = threading.Lock()
        self._entries: Dict[Tuple[str, str], ReferenceData] = {}

    def get(self, user_id: str, studio_id: str) -> Optional[ReferenceData]:
        with self._lock:
            return self._entries.get((user_id, studio_id))

    def put(self, user_id: str, studio_id: str, data: ReferenceData) -> None:
        with self._lock:
            self._entries[(user_id, studio_id)] = data

    def invalidate(self, studio_id: str) -> None:
        """Forgets every user's entry for `studio_id`."""
        with self._lock:
            for key in [key for key in self._entries if key[1] == studio_id]:
                del self._entries[key]

    def drop(self, user_id: str) -> None:
        """Forgets everything cached for `user_id`; called at sign-out."""
        with self._lock:
            for key in [key for key in self._entries if key[0] == user_id]:
                del self._entries[key]

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


reference_cache = ReferenceDataCache()
