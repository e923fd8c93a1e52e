# app/core/transactions.py
"""Unit-of-work helper translating store failures into booking errors"""
import logging
from contextlib import contextmanager

from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session

from app.core.exceptions import ConflictError, TransientStoreError

logger = logging.getLogger(__name__)


@contextmanager
def unit_of_work(db: Session, action: str, conflict_message: str = "Conflicting change"):
    """
    Run the block as one transaction and commit it.

    Any exception rolls the whole block back. Integrity violations surface as
    ConflictError, lock/statement timeouts and lost connections as
    TransientStoreError; typed booking errors pass through unchanged.
    """
    try:
        yield db
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"{action}: integrity violation: {e.orig}")
        raise ConflictError(conflict_message) from e
    except OperationalError as e:
        db.rollback()
        logger.error(f"{action}: store unavailable: {e.orig}")
        raise TransientStoreError("Storage temporarily unavailable, please retry") from e
    except Exception:
        db.rollback()
        raise
