from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from merchstore.services.errors import ServiceError

logger = logging.getLogger(__name__)


def commit(session, *, action: str, conflict_message: str | None = None, **details) -> None:
    """Commit ``session`` and translate storage failures into service errors.

    Integrity violations become ``CONFLICT`` when ``conflict_message`` is given;
    every other failure is rolled back, logged and reported as ``INTERNAL``.
    """

    try:
        session.commit()
    except IntegrityError as exc:
        session.rollback()
        if conflict_message is not None:
            logger.info("Rejected %s: %s", action, exc.orig)
            raise ServiceError.conflict(conflict_message, **details) from exc
        logger.exception("Integrity error while trying to %s", action)
        raise ServiceError.internal(f"Failed to {action}") from exc
    except SQLAlchemyError as exc:
        session.rollback()
        logger.exception("Database error while trying to %s", action)
        raise ServiceError.internal(f"Failed to {action}") from exc


def apply_patch(instance, changes: dict, columns: dict[str, str]) -> bool:
    """Copy the supplied ``changes`` onto ``instance`` field by field.

    ``columns`` maps payload field names to model attributes and doubles as
    the allow-list of patchable fields. Returns ``True`` when a field was set.
    """

    applied = False
    for field, attribute in columns.items():
        if field in changes:
            setattr(instance, attribute, changes[field])
            applied = True
    return applied
