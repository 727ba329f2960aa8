import pytest

from analytics import engine
from analytics.models import AnalyticsEvent
from analytics.tracking import track_event
from assessments.models import ExamAttempt
from attendance.models import SessionAttendance
from certificates.models import Certificate
from grades import calculator

from .conftest import create_user

pytestmark = pytest.mark.django_db


def test_trends_are_zero_filled_for_seven_days(db):
    trends = engine.enrollment_trends()

    assert len(trends) == 7
    assert all(t['total'] == 0 for t in trends)
    assert trends == sorted(trends, key=lambda t: t['date'])


def test_trends_count_todays_enrollments(student, course, program, enroll):
    enroll(student, course=course)
    enroll(student, program=program)

    today = engine.enrollment_trends()[-1]

    assert (today['courses'], today['programs'], today['total']) == (1, 1, 2)


def test_system_overview(client_for, admin_user, student, course, enroll):
    enroll(student, course=course)
    track_event('LOGIN', student.user)

    response = client_for(admin_user).get('/api/analytics/overview/')

    assert response.status_code == 200
    body = response.json()
    assert body['userStats']['student'] == 1
    assert body['enrollments'] == {'courses': 1, 'programs': 0, 'total': 1, 'active': 1}
    assert body['dailyActiveUsers'] == 1
    assert {'eventType': 'LOGIN', 'count': 1} in body['recentActivity']
    assert len(body['enrollmentTrends']) == 7


def test_overview_is_admin_only(client_for, teacher):
    assert client_for(teacher.user).get('/api/analytics/overview/').status_code == 403


def test_overview_rejects_inverted_range(client_for, admin_user):
    response = client_for(admin_user).get('/api/analytics/overview/?startDate=2026-02-01&endDate=2026-01-01')
    assert response.status_code == 400


def test_overview_applies_single_bound(client_for, admin_user):
    response = client_for(admin_user).get('/api/analytics/overview/?startDate=2020-01-01')

    assert response.status_code == 200
    assert response.json()['dateRange']['start'].startswith('2020-01-01')


def test_course_analytics_flags_at_risk_students(make_student, course, enroll, make_session, make_exam):
    steady, struggling = make_student(), make_student()
    enroll(steady, course=course)
    enroll(struggling, course=course)

    sessions = [make_session(course=course, days_ago=d) for d in (1, 2, 3, 4)]
    for session in sessions:
        SessionAttendance.objects.create(session=session, student=steady)
    SessionAttendance.objects.create(session=sessions[0], student=struggling)
    SessionAttendance.objects.create(
        session=sessions[1], student=struggling, status=SessionAttendance.Status.ABSENT
    )

    exam = make_exam(course=course, questions=(10,))
    ExamAttempt.objects.create(exam=exam, student=steady, score=9, status=ExamAttempt.Status.SUBMITTED)
    ExamAttempt.objects.create(exam=exam, student=struggling, score=8, status=ExamAttempt.Status.SUBMITTED)

    result = engine.get_course_analytics(course.id)

    assert result['attendance'] == {'totalSessions': 4, 'averageRate': 63}
    assert result['exams'] == {'total': 1, 'averageScore': 85}
    assert result['atRiskStudents'] == [{
        'studentId': struggling.id,
        'name': struggling.user.display_name,
        'attendanceRate': 25,
        'examAverage': 80,
    }]


def test_course_analytics_grade_distribution(student, make_student, course, enroll, make_session):
    other = make_student()
    enroll(student, course=course)
    enroll(other, course=course)
    session = make_session(course=course)
    SessionAttendance.objects.create(session=session, student=student)
    calculator.calculate_course_grade(student, course)
    calculator.calculate_course_grade(other, course)

    result = engine.get_course_analytics(course.id)

    assert result['gradeDistribution'] == {'F': 2}
    assert result['completionRate'] == 0


def test_teacher_sees_only_own_course(client_for, course):
    outsider = create_user('TEACHER')

    assert client_for(outsider).get(f'/api/analytics/course/{course.id}/').status_code == 403


def test_owner_sees_course_analytics(client_for, teacher, course):
    response = client_for(teacher.user).get(f'/api/analytics/course/{course.id}/')

    assert response.status_code == 200
    assert response.json()['atRiskStudents'] == []


def test_unknown_course_is_not_found(client_for, admin_user):
    assert client_for(admin_user).get('/api/analytics/course/999/').status_code == 404


def test_student_analytics(client_for, student, course, enroll, make_session):
    enroll(student, course=course)
    session = make_session(course=course)
    SessionAttendance.objects.create(session=session, student=student)
    calculator.calculate_course_grade(student, course)
    Certificate.objects.create(student=student, course=course, certificate_url='https://example.edu/c.pdf')
    track_event('ATTENDANCE', student.user, {'sessionId': session.id})

    body = client_for(student.user).get(f'/api/analytics/student/{student.id}/').json()

    assert body['totalEnrollments'] == 1
    assert body['certificatesEarned'] == 1
    assert body['courseProgress'][0]['attendanceRate'] == 100
    assert body['courseProgress'][0]['grade'] == 'F'
    assert body['recentActivity'][0]['metadata'] == {'sessionId': session.id}


def test_student_cannot_view_another_student(client_for, student, make_student):
    other = make_student()
    assert client_for(other.user).get(f'/api/analytics/student/{student.id}/').status_code == 403


def test_teacher_analytics(teacher, student, course, enroll, make_session):
    enroll(student, course=course)
    make_session(course=course)
    make_session(course=course, days_ago=2)

    result = engine.get_teacher_analytics(teacher.id)

    assert result['totalCourses'] == 1
    assert result['totalEnrollments'] == 1
    assert result['totalSessions'] == 2


def test_track_event_endpoint(client_for, student):
    response = client_for(student.user).post(
        '/api/analytics/track/', {'eventType': 'PAGE_VIEW', 'metadata': {'page': 'dashboard'}}, format='json'
    )

    assert response.status_code == 200
    event = AnalyticsEvent.objects.get(event_type='PAGE_VIEW')
    assert event.user == student.user
    assert event.metadata == {'page': 'dashboard'}


def test_csv_export(client_for, admin_user, student, course, enroll):
    enroll(student, course=course)

    response = client_for(admin_user).get('/api/analytics/export/?format=csv&type=enrollments')

    assert response.status_code == 200
    assert response['Content-Type'].startswith('text/csv')
    assert 'attachment; filename=analytics-enrollments-' in response['Content-Disposition']
    lines = response.content.decode().splitlines()
    assert lines[0] == 'Date,Course Enrollments,Program Enrollments,Total'
    assert len(lines) == 8
    assert lines[-1].endswith(',1,0,1')


def test_csv_overview_export(client_for, admin_user):
    response = client_for(admin_user).get('/api/analytics/export/?format=csv')

    lines = response.content.decode().splitlines()
    assert lines[0] == 'Metric,Value'
    assert 'Active Courses,0' in lines


def test_export_rejects_other_formats(client_for, admin_user):
    response = client_for(admin_user).get('/api/analytics/export/?format=xlsx')

    assert response.status_code == 400
    assert response.json() == {'error': 'Unsupported export format'}
