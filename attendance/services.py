import logging
from decimal import Decimal

from django.db import transaction
from django.db.models import Prefetch
from django.utils import timezone
from rest_framework.exceptions import PermissionDenied, ValidationError

from analytics.tracking import track_event
from courses.models import ScheduledSession
from grades.policy import quantize
from .models import SessionAttendance

logger = logging.getLogger(__name__)

PRESENT = SessionAttendance.Status.PRESENT


def mark_join(student, session):
    """Student clicked "join": record them PRESENT for the session."""
    if session.enrollment_for(student) is None:
        raise PermissionDenied("You are not enrolled in this course")

    attendance, _ = SessionAttendance.objects.update_or_create(
        session=session,
        student=student,
        defaults={
            'status': PRESENT,
            'joined_at': timezone.now(),
            'marked_by': SessionAttendance.MarkedBy.AUTO,
        }
    )
    track_event('ATTENDANCE', student.user, {'sessionId': session.id})
    return attendance


def session_roster(session):
    """Every enrolled student with their status for the session; no record means ABSENT."""
    records = {a.student_id: a for a in session.attendance.all()}
    roster = []
    for student in session.enrolled_students().select_related('user').order_by('id'):
        record = records.get(student.id)
        roster.append({
            'studentId': student.id,
            'studentName': student.user.display_name,
            'email': student.user.email,
            'status': record.status if record else SessionAttendance.Status.ABSENT,
            'joinedAt': record.joined_at if record else None,
            'markedBy': record.marked_by if record else None,
            'attendanceId': record.id if record else None,
        })
    return roster


def update_session_attendance(session, entries):
    """
    Applies teacher-entered statuses [{studentId, status}] all-or-nothing.
    """
    enrolled_ids = set(session.enrolled_students().values_list('id', flat=True))
    valid_statuses = set(SessionAttendance.Status.values)

    for entry in entries:
        if entry.get('status') not in valid_statuses:
            raise ValidationError(f"Invalid attendance status: {entry.get('status')}")
        if entry.get('studentId') not in enrolled_ids:
            raise ValidationError(f"Student {entry.get('studentId')} is not enrolled in this session's course")

    with transaction.atomic():
        for entry in entries:
            SessionAttendance.objects.update_or_create(
                session=session,
                student_id=entry['studentId'],
                defaults={
                    'status': entry['status'],
                    'marked_by': SessionAttendance.MarkedBy.TEACHER,
                }
            )

    logger.info("Attendance for session %s updated (%d records)", session.id, len(entries))


def student_attendance(student, *, course=None, program=None):
    own_records = Prefetch('attendance', queryset=SessionAttendance.objects.filter(student=student))
    rows = []
    for session in _sessions_of(course, program).prefetch_related(own_records):
        record = next(iter(session.attendance.all()), None)
        rows.append({
            'sessionId': session.id,
            'title': session.title or 'Untitled',
            'type': session.type,
            'date': session.date,
            'startTime': session.start_time,
            'endTime': session.end_time,
            'status': record.status if record else SessionAttendance.Status.ABSENT,
            'joinedAt': record.joined_at if record else None,
        })
    return rows


def _sessions_of(course, program):
    if course is not None:
        return ScheduledSession.objects.filter(course=course)
    return ScheduledSession.objects.filter(program=program)


def past_class_sessions(*, course=None, program=None):
    """CLASS sessions of the course/program dated today or earlier."""
    return _sessions_of(course, program).filter(
        type=ScheduledSession.SessionType.CLASS,
        date__lte=timezone.localdate(),
    )


def attendance_percentage(student, *, course=None, program=None):
    """Share of past CLASS sessions the student attended, 0 when none were held."""
    sessions = past_class_sessions(course=course, program=program)
    total = sessions.count()
    if not total:
        return Decimal("0.00")
    attended = SessionAttendance.objects.filter(
        student=student, session__in=sessions, status=PRESENT
    ).count()
    return quantize(Decimal(attended) * 100 / total)
