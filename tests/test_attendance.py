from decimal import Decimal

import pytest
from rest_framework.exceptions import PermissionDenied

from attendance import services
from attendance.models import SessionAttendance

from .conftest import create_user

pytestmark = pytest.mark.django_db

MARK_JOIN_URL = '/api/attendance/mark-join/'


@pytest.fixture
def session(course, make_session):
    return make_session(course=course, title="Week 1")


def test_mark_join_records_present(client_for, student, course, enroll, session):
    enroll(student, course=course)

    response = client_for(student.user).post(MARK_JOIN_URL, {'sessionId': session.id}, format='json')

    assert response.status_code == 200
    body = response.json()['attendance']
    assert body['status'] == 'PRESENT'
    assert body['markedBy'] == 'AUTO'
    assert body['joinedAt'] is not None


def test_mark_join_twice_keeps_one_record(student, course, enroll, session):
    enroll(student, course=course)

    first = services.mark_join(student, session)
    second = services.mark_join(student, session)

    assert first.pk == second.pk
    assert SessionAttendance.objects.filter(session=session, student=student).count() == 1


def test_mark_join_overrides_teacher_absent(student, course, enroll, session):
    enroll(student, course=course)
    SessionAttendance.objects.create(
        session=session, student=student,
        status=SessionAttendance.Status.ABSENT, marked_by=SessionAttendance.MarkedBy.TEACHER
    )

    record = services.mark_join(student, session)

    assert record.status == SessionAttendance.Status.PRESENT
    assert record.marked_by == SessionAttendance.MarkedBy.AUTO


def test_mark_join_requires_enrollment(client_for, student, session):
    response = client_for(student.user).post(MARK_JOIN_URL, {'sessionId': session.id}, format='json')

    assert response.status_code == 403
    assert response.json() == {'error': 'You are not enrolled in this course'}
    assert not SessionAttendance.objects.exists()


def test_join_program_session_by_url(client_for, student, program, enroll, make_session):
    enroll(student, program=program)
    session = make_session(program=program)

    response = client_for(student.user).post(f'/api/student-programs/sessions/{session.id}/join/')

    assert response.status_code == 200
    assert SessionAttendance.objects.get(session=session, student=student).status == 'PRESENT'


def test_join_unknown_session_is_not_found(client_for, student):
    response = client_for(student.user).post(MARK_JOIN_URL, {'sessionId': 999}, format='json')
    assert response.status_code == 404


def test_roster_defaults_missing_records_to_absent(client_for, teacher, make_student, course, enroll, session):
    present, missing = make_student(), make_student()
    enroll(present, course=course)
    enroll(missing, course=course)
    services.mark_join(present, session)

    rows = client_for(teacher.user).get(f'/api/attendance/session/{session.id}/').json()

    statuses = {row['studentId']: row['status'] for row in rows}
    assert statuses == {present.id: 'PRESENT', missing.id: 'ABSENT'}
    assert next(r for r in rows if r['studentId'] == missing.id)['attendanceId'] is None


def test_teacher_batch_update(client_for, teacher, make_student, course, enroll, session):
    first, second = make_student(), make_student()
    enroll(first, course=course)
    enroll(second, course=course)
    services.mark_join(first, session)

    response = client_for(teacher.user).put(f'/api/attendance/session/{session.id}/', {'attendance': [
        {'studentId': first.id, 'status': 'ABSENT'},
        {'studentId': second.id, 'status': 'PRESENT'},
    ]}, format='json')

    assert response.status_code == 200
    records = {a.student_id: a for a in SessionAttendance.objects.filter(session=session)}
    assert records[first.id].status == 'ABSENT'
    assert records[second.id].status == 'PRESENT'
    assert {r.marked_by for r in records.values()} == {'TEACHER'}


def test_batch_update_with_stranger_writes_nothing(client_for, teacher, student, make_student, course, enroll, session):
    enroll(student, course=course)
    stranger = make_student()

    response = client_for(teacher.user).put(f'/api/attendance/session/{session.id}/', {'attendance': [
        {'studentId': student.id, 'status': 'PRESENT'},
        {'studentId': stranger.id, 'status': 'PRESENT'},
    ]}, format='json')

    assert response.status_code == 400
    assert not SessionAttendance.objects.exists()


def test_batch_update_rejects_unknown_status(client_for, teacher, student, course, enroll, session):
    enroll(student, course=course)

    response = client_for(teacher.user).put(f'/api/attendance/session/{session.id}/', {'attendance': [
        {'studentId': student.id, 'status': 'LATE'},
    ]}, format='json')

    assert response.status_code == 400
    assert 'fields' in response.json()


def test_only_owning_teacher_edits_roster(client_for, course, session):
    outsider = create_user('TEACHER')

    response = client_for(outsider).get(f'/api/attendance/session/{session.id}/')

    assert response.status_code == 403


def test_admin_can_read_any_roster(client_for, admin_user, session):
    assert client_for(admin_user).get(f'/api/attendance/session/{session.id}/').status_code == 200


def test_student_attendance_history(client_for, student, course, enroll, make_session):
    enroll(student, course=course)
    attended = make_session(course=course, days_ago=2)
    make_session(course=course, days_ago=1)
    services.mark_join(student, attended)

    rows = client_for(student.user).get(f'/api/attendance/student/{course.id}/').json()

    assert [r['status'] for r in rows] == ['PRESENT', 'ABSENT']
    assert rows[1]['title'] == 'Untitled'


def test_attendance_percentage_counts_past_classes_only(student, course, enroll, make_session):
    enroll(student, course=course)
    past = [make_session(course=course, days_ago=d) for d in (1, 2, 3)]
    make_session(course=course, days_ago=-1)
    services.mark_join(student, past[0])

    assert services.attendance_percentage(student, course=course) == Decimal("33.33")


def test_attendance_percentage_without_sessions_is_zero(student, course):
    assert services.attendance_percentage(student, course=course) == Decimal("0.00")


def test_service_rejects_unenrolled_student(student, session):
    with pytest.raises(PermissionDenied):
        services.mark_join(student, session)
