"""
Weighted course/program grades.

    final = exam average x exam weight + attendance % x attendance weight

Every function recomputes from scratch and replaces the stored row, so
calling it again on unchanged data yields the same GradeCalculation.
"""
import logging
from decimal import Decimal

from assessments.models import ExamAttempt
from attendance.services import attendance_percentage
from cores.models import PlatformSetting
from .models import GradeCalculation
from .policy import quantize

logger = logging.getLogger(__name__)


def _policy(policy):
    return policy if policy is not None else PlatformSetting.load().grading_policy()


def exam_average(student, *, course=None, program=None):
    """Mean percentage over the student's submitted attempts; 0 when there are none."""
    attempts = ExamAttempt.objects.filter(
        student=student, status=ExamAttempt.Status.SUBMITTED
    ).select_related('exam')
    if course is not None:
        attempts = attempts.filter(exam__course=course)
    else:
        attempts = attempts.filter(exam__program=program)

    percentages = []
    for attempt in attempts:
        total_points = attempt.exam.total_points
        # An exam without points cannot be scored
        percentages.append(Decimal(attempt.score) * 100 / total_points if total_points else Decimal(0))

    if not percentages:
        return Decimal("0.00")
    return quantize(sum(percentages) / len(percentages))


def _calculate(student, policy, **scope):
    policy = _policy(policy)
    exam_score = exam_average(student, **scope)
    attendance_score = attendance_percentage(student, **scope)
    final_grade = policy.final_grade(exam_score, attendance_score)
    letter, gpa = policy.letter_for(final_grade)

    grade, _ = GradeCalculation.objects.update_or_create(
        student=student,
        **scope,
        defaults={
            'exam_score': exam_score,
            'attendance_score': attendance_score,
            'final_grade': final_grade,
            'letter_grade': letter,
            'gpa': quantize(gpa),
        }
    )
    logger.info(
        "Grade for student %s (%s) recalculated: %s -> %s",
        student.id, ", ".join(f"{k}={v.pk}" for k, v in scope.items()), final_grade, letter
    )
    return grade


def calculate_course_grade(student, course, policy=None):
    return _calculate(student, policy, course=course)


def calculate_program_grade(student, program, policy=None):
    return _calculate(student, policy, program=program)


def calculate_all_student_grades(student, policy=None):
    """Recomputes every course and program grade the student is enrolled in."""
    policy = _policy(policy)
    course_grades = [
        calculate_course_grade(student, enrollment.course, policy)
        for enrollment in student.enrollments.select_related('course')
    ]
    program_grades = [
        calculate_program_grade(student, enrollment.program, policy)
        for enrollment in student.program_enrollments.select_related('program')
    ]
    return {
        'courseGrades': course_grades,
        'programGrades': program_grades,
        'totalGrades': len(course_grades) + len(program_grades),
    }


def overall_gpa(grades):
    grades = list(grades)
    if not grades:
        return Decimal("0.00")
    return quantize(sum(Decimal(g.gpa) for g in grades) / len(grades))


def get_student_grades(student):
    grades = list(
        GradeCalculation.objects.filter(student=student)
        .select_related('course', 'program')
        .order_by('-updated_at')
    )
    return {
        'courseGrades': [g for g in grades if g.course_id],
        'programGrades': [g for g in grades if g.program_id],
        'overallGPA': overall_gpa(grades),
        'totalGrades': len(grades),
    }
