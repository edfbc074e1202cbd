from sqlmodel import Session, select

from peiwan.models import ActivityType, UserActivityLog


def log_activity(
    session: Session,
    *,
    user_id: int,
    action_type: ActivityType,
    title: str,
    detail: str | None = None,
    reference: str | None = None,
) -> UserActivityLog:
    """Stage an activity entry in the caller's transaction."""
    entry = UserActivityLog(
        user_id=user_id,
        action_type=action_type,
        title=title,
        detail=detail,
        reference=reference,
    )
    session.add(entry)
    return entry


def list_activities(session: Session, user_id: int, *, limit: int = 50) -> list[UserActivityLog]:
    return list(
        session.exec(
            select(UserActivityLog)
            .where(UserActivityLog.user_id == user_id)
            .order_by(UserActivityLog.created_at.desc(), UserActivityLog.id.desc())
            .limit(limit)
        ).all()
    )
