"""Shared fixtures: users with profiles, a course/program, and an exam builder."""
import itertools
from datetime import timedelta

import pytest
from django.core.cache import cache
from django.utils import timezone
from rest_framework.test import APIClient

from courses.models import Course, Program, Enrollment, ProgramEnrollment, ScheduledSession
from exams.models import Exam, Question, Choice
from users.models import User, Student, Teacher

_counter = itertools.count(1)


@pytest.fixture(autouse=True)
def clear_settings_cache():
    # PlatformSetting.load() caches across tests otherwise
    cache.clear()
    yield
    cache.clear()


def create_user(role, email=None, **extra):
    n = next(_counter)
    email = email or f"{role.lower()}{n}@example.edu"
    user = User.objects.create_user(
        username=email, email=email, password="pass1234",
        first_name=extra.pop('first_name', role.title()), last_name=extra.pop('last_name', str(n)),
        role=role, **extra
    )
    if role == User.Role.STUDENT:
        Student.objects.create(user=user)
    elif role == User.Role.TEACHER:
        Teacher.objects.create(user=user)
    return user


@pytest.fixture
def make_student(db):
    def _make(**extra):
        return create_user(User.Role.STUDENT, **extra).student
    return _make


@pytest.fixture
def student(make_student):
    return make_student()


@pytest.fixture
def teacher(db):
    return create_user(User.Role.TEACHER).teacher


@pytest.fixture
def admin_user(db):
    return create_user(User.Role.SUPER_ADMIN)


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def client_for(api_client):
    def _login(user):
        api_client.force_authenticate(user=user)
        return api_client
    return _login


@pytest.fixture
def course(teacher):
    return Course.objects.create(name="Intro to Biology", slug="intro-biology", teacher=teacher)


@pytest.fixture
def program(teacher):
    return Program.objects.create(name="Data Analytics Certificate", slug="data-analytics", teacher=teacher)


@pytest.fixture
def enroll():
    def _enroll(student, course=None, program=None, **extra):
        if course is not None:
            return Enrollment.objects.create(student=student, course=course, **extra)
        return ProgramEnrollment.objects.create(student=student, program=program, **extra)
    return _enroll


@pytest.fixture
def make_session():
    def _make(course=None, program=None, days_ago=1, type=ScheduledSession.SessionType.CLASS, **extra):
        return ScheduledSession.objects.create(
            course=course, program=program, type=type,
            date=timezone.localdate() - timedelta(days=days_ago), **extra
        )
    return _make


@pytest.fixture
def make_exam():
    """
    Builds a published exam. `questions` is a list of point values; each
    question gets choices "right" (correct) and "wrong".
    """
    def _make(course=None, program=None, questions=(5, 10), max_tab_switch=3, is_published=True, title="Midterm"):
        exam = Exam.objects.create(
            course=course, program=program, title=title,
            max_tab_switch=max_tab_switch, is_published=is_published
        )
        for position, points in enumerate(questions):
            question = Question.objects.create(exam=exam, text=f"Question {position + 1}", points=points, order=position)
            Choice.objects.create(question=question, text="right", is_correct=True, order=0)
            Choice.objects.create(question=question, text="wrong", is_correct=False, order=1)
        exam.refresh_from_db()
        return exam
    return _make


def choice(question, correct=True):
    return question.choices.get(is_correct=correct)
