# /studioalign/services/database_helpers/base_repository_sql.py

import logging
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


class BaseRepositorySQL:
    """
    Shared plumbing for the SQL repositories.

    Every write goes through `transaction()`, which commits on success and
    rolls the whole unit of work back on any database error before
    re-raising it. Repositories never retry.
    """

    def __init__(self, db_session: Session):
        self.db = db_session

    @contextmanager
    def transaction(self):
        try:
            yield self.db
            self.db.commit()
        except SQLAlchemyError:
            logger.exception("Database write failed; rolling back")
            self.db.rollback()
            raise
        except Exception:
            self.db.rollback()
            raise
