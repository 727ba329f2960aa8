from decimal import Decimal

import pytest

from assessments.models import ExamAttempt
from attendance.models import SessionAttendance
from cores.models import PlatformSetting
from courses.models import ScheduledSession
from grades import calculator
from grades.models import GradeCalculation
from grades.policy import DEFAULT_POLICY, GradingPolicy, GradeBand

pytestmark = pytest.mark.django_db


def submitted(exam, student, score, **extra):
    return ExamAttempt.objects.create(
        exam=exam, student=student, score=Decimal(score),
        status=ExamAttempt.Status.SUBMITTED, **extra
    )


@pytest.fixture
def graded_course(course, student, enroll, make_session, make_exam):
    """10 past classes, 7 attended; one 10-point exam scored 8."""
    enroll(student, course=course)
    for day in range(1, 11):
        session = make_session(course=course, days_ago=day)
        if day <= 7:
            SessionAttendance.objects.create(session=session, student=student)
    exam = make_exam(course=course, questions=(10,))
    submitted(exam, student, 8)
    return course


def test_weighted_final_grade(student, graded_course):
    grade = calculator.calculate_course_grade(student, graded_course)

    assert grade.exam_score == Decimal("80.00")
    assert grade.attendance_score == Decimal("70.00")
    assert grade.final_grade == Decimal("77.00")
    assert grade.letter_grade == "C+"
    assert grade.gpa == Decimal("2.30")


def test_recalculation_keeps_one_row(student, graded_course):
    first = calculator.calculate_course_grade(student, graded_course)
    second = calculator.calculate_course_grade(student, graded_course)

    assert first.pk == second.pk
    assert second.final_grade == first.final_grade
    assert GradeCalculation.objects.filter(student=student, course=graded_course).count() == 1


def test_future_and_non_class_sessions_do_not_count(student, graded_course, make_session):
    make_session(course=graded_course, days_ago=-3)
    make_session(course=graded_course, days_ago=2, type=ScheduledSession.SessionType.EXAM)

    grade = calculator.calculate_course_grade(student, graded_course)

    assert grade.attendance_score == Decimal("70.00")


def test_absent_records_count_as_missed(student, graded_course):
    record = SessionAttendance.objects.filter(student=student).first()
    record.status = SessionAttendance.Status.ABSENT
    record.save()

    grade = calculator.calculate_course_grade(student, graded_course)

    assert grade.attendance_score == Decimal("60.00")


def test_no_sessions_and_no_attempts_is_zero(student, program, enroll):
    enroll(student, program=program)

    grade = calculator.calculate_program_grade(student, program)

    assert grade.exam_score == Decimal("0.00")
    assert grade.attendance_score == Decimal("0.00")
    assert grade.final_grade == Decimal("0.00")
    assert grade.letter_grade == "F"
    assert grade.gpa == Decimal("0.00")


def test_in_progress_attempts_are_ignored(student, graded_course, make_exam):
    exam = make_exam(course=graded_course, questions=(10,), title="Quiz")
    ExamAttempt.objects.create(exam=exam, student=student, score=Decimal(0))

    grade = calculator.calculate_course_grade(student, graded_course)

    assert grade.exam_score == Decimal("80.00")


def test_exam_average_is_mean_of_attempt_percentages(student, course, make_exam):
    small = make_exam(course=course, questions=(4,), title="Quiz")
    large = make_exam(course=course, questions=(10, 10), title="Final")
    submitted(small, student, 4)
    submitted(large, student, 10)

    assert calculator.exam_average(student, course=course) == Decimal("75.00")


def test_perfect_record_is_bounded(student, course, enroll, make_session, make_exam):
    enroll(student, course=course)
    session = make_session(course=course)
    SessionAttendance.objects.create(session=session, student=student)
    submitted(make_exam(course=course, questions=(5,)), student, 5)

    grade = calculator.calculate_course_grade(student, course)

    assert grade.final_grade == Decimal("100.00")
    assert (grade.letter_grade, grade.gpa) == ("A", Decimal("4.00"))


def test_explicit_policy_overrides_settings(student, graded_course):
    exams_only = GradingPolicy(exam_weight=Decimal("1.00"), attendance_weight=Decimal("0.00"))

    grade = calculator.calculate_course_grade(student, graded_course, exams_only)

    assert grade.final_grade == Decimal("80.00")
    assert grade.letter_grade == "B-"


def test_platform_setting_weights_are_used(student, graded_course):
    setting = PlatformSetting.load()
    setting.exam_weight = Decimal("0.50")
    setting.attendance_weight = Decimal("0.50")
    setting.save()

    grade = calculator.calculate_course_grade(student, graded_course)

    assert grade.final_grade == Decimal("75.00")
    assert grade.letter_grade == "C"


def test_custom_scale():
    pass_fail = GradingPolicy(scale=(
        GradeBand("P", Decimal("50"), Decimal("4.0")),
        GradeBand("F", Decimal("0"), Decimal("0.0")),
    ))

    assert pass_fail.letter_for(Decimal("50")) == ("P", Decimal("4.0"))
    assert pass_fail.letter_for(Decimal("49.99")) == ("F", Decimal("0.0"))


@pytest.mark.parametrize("percentage, letter", [
    ("93.00", "A"), ("92.99", "A-"), ("90", "A-"), ("87", "B+"), ("83", "B"), ("80", "B-"),
    ("77", "C+"), ("73", "C"), ("70", "C-"), ("60", "D"), ("59.99", "F"), ("0", "F"),
])
def test_default_scale_boundaries(percentage, letter):
    assert DEFAULT_POLICY.letter_for(Decimal(percentage))[0] == letter


def test_final_grade_rounds_half_up():
    assert DEFAULT_POLICY.final_grade(Decimal("33.33"), Decimal("66.67")) == Decimal("43.33")
    assert DEFAULT_POLICY.final_grade(Decimal("0.05"), Decimal("0")) == Decimal("0.04")


def test_calculate_all_covers_every_enrollment(student, course, program, enroll):
    enroll(student, course=course)
    enroll(student, program=program)

    result = calculator.calculate_all_student_grades(student)

    assert result['totalGrades'] == 2
    assert len(result['courseGrades']) == 1
    assert len(result['programGrades']) == 1


def test_student_grades_endpoint(client_for, student, graded_course):
    calculator.calculate_course_grade(student, graded_course)

    body = client_for(student.user).get(f'/api/grades/student/{student.id}/').json()

    assert body['totalGrades'] == 1
    assert body['overallGPA'] == pytest.approx(2.3)
    assert body['courseGrades'][0]['letterGrade'] == "C+"
    assert body['courseGrades'][0]['finalGrade'] == pytest.approx(77.0)


def test_students_cannot_read_other_grades(client_for, student, make_student):
    other = make_student()

    response = client_for(other.user).get(f'/api/grades/student/{student.id}/')

    assert response.status_code == 403


def test_teacher_triggers_course_calculation(client_for, teacher, student, graded_course):
    response = client_for(teacher.user).post(
        f'/api/grades/calculate/course/{graded_course.id}/', {'studentId': student.id}, format='json'
    )

    assert response.status_code == 200
    assert response.json()['letterGrade'] == "C+"


def test_roster_lists_ungraded_students(client_for, teacher, student, make_student, enroll, graded_course):
    newcomer = make_student()
    enroll(newcomer, course=graded_course)
    calculator.calculate_course_grade(student, graded_course)

    rows = client_for(teacher.user).get(f'/api/grades/course/{graded_course.id}/students/').json()

    by_student = {row['studentId']: row for row in rows}
    assert by_student[student.id]['grade']['letterGrade'] == "C+"
    assert by_student[newcomer.id]['grade'] is None
