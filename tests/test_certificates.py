import re

import pytest

from analytics.models import AnalyticsEvent
from certificates.models import Certificate

pytestmark = pytest.mark.django_db

ISSUE_URL = '/api/certificates/issue/'


def issue(client, student, course, **extra):
    payload = {'student': student.id, 'course': course.id, 'certificate_url': 'https://example.edu/cert.pdf'}
    payload.update(extra)
    return client.post(ISSUE_URL, payload, format='json')


def test_teacher_issues_certificate(client_for, teacher, student, course):
    response = issue(client_for(teacher.user), student, course)

    assert response.status_code == 201
    body = response.json()
    assert re.fullmatch(r'CERT-\d{4}-\d{6}', body['certificate_number'])
    assert body['status'] == 'ACTIVE'
    assert body['issued_by_email'] == teacher.user.email
    assert AnalyticsEvent.objects.filter(event_type='CERTIFICATE_ISSUED').exists()


def test_duplicate_active_certificate_conflicts(client_for, teacher, student, course):
    client = client_for(teacher.user)
    issue(client, student, course)

    response = issue(client, student, course)

    assert response.status_code == 409
    assert Certificate.objects.filter(student=student, course=course).count() == 1


def test_reissue_after_revoke(client_for, teacher, student, course):
    client = client_for(teacher.user)
    first = issue(client, student, course).json()
    client.delete(f"/api/certificates/{first['id']}/", {'reason': 'Issued in error'}, format='json')

    assert issue(client, student, course).status_code == 201


def test_certificate_needs_exactly_one_offering(client_for, teacher, student, course, program):
    response = issue(client_for(teacher.user), student, course, program=program.id)
    assert response.status_code == 400


def test_students_cannot_issue(client_for, student, course):
    assert issue(client_for(student.user), student, course).status_code == 403


def test_revoke_keeps_row(client_for, teacher, student, course):
    client = client_for(teacher.user)
    certificate_id = issue(client, student, course).json()['id']

    response = client.delete(f'/api/certificates/{certificate_id}/', {'reason': 'Academic misconduct'}, format='json')

    assert response.status_code == 200
    certificate = Certificate.objects.get(pk=certificate_id)
    assert certificate.status == Certificate.Status.REVOKED
    assert certificate.revoked_reason == 'Academic misconduct'
    assert certificate.revoked_at is not None

    again = client.delete(f'/api/certificates/{certificate_id}/', format='json')
    assert again.status_code == 409


def test_student_lists_only_active_certificates(client_for, student, course, program):
    Certificate.objects.create(student=student, course=course, certificate_url='https://example.edu/a.pdf')
    Certificate.objects.create(
        student=student, program=program, certificate_url='https://example.edu/b.pdf',
        status=Certificate.Status.REVOKED
    )

    body = client_for(student.user).get('/api/certificates/mine/').json()

    assert [c['course'] for c in body] == [course.id]


def test_student_cannot_read_another_students_certificate(client_for, student, make_student, course):
    certificate = Certificate.objects.create(student=student, course=course, certificate_url='https://example.edu/a.pdf')
    other = make_student()

    client = client_for(other.user)
    assert client.get(f'/api/certificates/{certificate.id}/').status_code == 403
    assert client.get(f'/api/certificates/student/{student.id}/').status_code == 403


def test_admin_inventory_filters_by_status(client_for, admin_user, student, course, program):
    Certificate.objects.create(student=student, course=course, certificate_url='https://example.edu/a.pdf')
    Certificate.objects.create(
        student=student, program=program, certificate_url='https://example.edu/b.pdf',
        status=Certificate.Status.REVOKED
    )

    body = client_for(admin_user).get('/api/certificates/?status=REVOKED').json()

    assert [c['program'] for c in body] == [program.id]
