"""
Dashboard rollups over enrollments, attendance, attempts, grades and
certificates. Everything is computed per request; nothing is cached.
"""
import csv
import io
import logging
from collections import defaultdict
from datetime import timedelta
from decimal import Decimal, ROUND_HALF_UP

from django.contrib.auth import get_user_model
from django.db.models import Count, Q
from django.utils import timezone
from rest_framework.exceptions import NotFound, ValidationError

from assessments.models import ExamAttempt
from attendance.models import SessionAttendance
from attendance.services import attendance_percentage
from certificates.models import Certificate
from courses.models import Course, Program, Enrollment, ProgramEnrollment, EnrollmentStatus
from grades.models import GradeCalculation
from grades.policy import quantize
from users.models import Student, Teacher
from .models import AnalyticsEvent

logger = logging.getLogger(__name__)

User = get_user_model()

AT_RISK_THRESHOLD = 70
TREND_DAYS = 7


def _whole(value):
    return int(Decimal(value).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def _mean(values):
    values = list(values)
    if not values:
        return Decimal(0)
    return sum(values, Decimal(0)) / len(values)


def _attempt_percentage(attempt):
    total_points = attempt.exam.total_points
    if not total_points:
        return Decimal(0)
    return Decimal(attempt.score or 0) * 100 / total_points


def resolve_date_range(date_range=None):
    """(start, end) datetimes; defaults to the last 30 days."""
    now = timezone.now()
    start = (date_range or {}).get('start') or now - timedelta(days=30)
    end = (date_range or {}).get('end') or now
    if start > end:
        raise ValidationError("startDate must be before endDate")
    return start, end


def enrollment_trends(days=TREND_DAYS):
    """Enrollments per calendar day for the last `days` days, oldest first, zero-filled."""
    today = timezone.localtime().replace(hour=0, minute=0, second=0, microsecond=0)
    trends = []
    for offset in range(days - 1, -1, -1):
        day_start = today - timedelta(days=offset)
        day_end = day_start + timedelta(days=1)
        window = {'created_at__gte': day_start, 'created_at__lt': day_end}
        courses = Enrollment.objects.filter(**window).count()
        programs = ProgramEnrollment.objects.filter(**window).count()
        trends.append({
            'date': day_start.date().isoformat(),
            'courses': courses,
            'programs': programs,
            'total': courses + programs,
        })
    return trends


def get_system_analytics(date_range=None):
    start, end = resolve_date_range(date_range)
    in_range = {'created_at__gte': start, 'created_at__lte': end}

    user_stats = {
        row['role'].lower(): row['count']
        for row in User.objects.values('role').annotate(count=Count('id')).order_by('role')
    }

    course_enrollments = Enrollment.objects.count()
    program_enrollments = ProgramEnrollment.objects.count()
    active_enrollments = (
        Enrollment.objects.filter(status=EnrollmentStatus.ACTIVE).count() +
        ProgramEnrollment.objects.filter(status=EnrollmentStatus.ACTIVE).count()
    )

    certificates_issued = Certificate.objects.filter(
        status=Certificate.Status.ACTIVE, issued_date__gte=start, issued_date__lte=end
    ).count()

    recent_events = (
        AnalyticsEvent.objects.filter(**in_range)
        .values('event_type').annotate(count=Count('id')).order_by('-count', 'event_type')
    )

    daily_active_users = (
        AnalyticsEvent.objects.filter(
            event_type='LOGIN',
            user__isnull=False,
            created_at__gte=timezone.now() - timedelta(hours=24),
        ).values('user').distinct().count()
    )

    return {
        'dateRange': {'start': start, 'end': end},
        'userStats': user_stats,
        'enrollments': {
            'courses': course_enrollments,
            'programs': program_enrollments,
            'total': course_enrollments + program_enrollments,
            'active': active_enrollments,
        },
        'activeContent': {
            'courses': Course.objects.filter(is_active=True).count(),
            'programs': Program.objects.filter(is_active=True).count(),
        },
        'certificatesIssued': certificates_issued,
        'recentActivity': [
            {'eventType': e['event_type'], 'count': e['count']} for e in recent_events
        ],
        'dailyActiveUsers': daily_active_users,
        'enrollmentTrends': enrollment_trends(),
    }


def get_course_analytics(course_id):
    course = Course.objects.filter(pk=course_id).first()
    if course is None:
        raise NotFound("Course not found")

    enrollments = list(course.enrollments.select_related('student__user'))
    total_enrollments = len(enrollments)
    active_enrollments = sum(1 for e in enrollments if e.status == EnrollmentStatus.ACTIVE)

    # Attendance: PRESENT records per student in one grouped query
    total_sessions = course.sessions.count()
    present_by_student = dict(
        SessionAttendance.objects.filter(session__course=course, status=SessionAttendance.Status.PRESENT)
        .values('student').annotate(count=Count('id')).values_list('student', 'count')
    )
    attendance_records = sum(present_by_student.values())
    average_attendance = (
        Decimal(attendance_records) * 100 / (total_sessions * total_enrollments)
        if total_sessions and total_enrollments else Decimal(0)
    )

    # Exam performance from submitted attempts, grouped per student in memory
    percentages_by_student = defaultdict(list)
    submitted = ExamAttempt.objects.filter(
        exam__course=course, status=ExamAttempt.Status.SUBMITTED
    ).select_related('exam')
    for attempt in submitted:
        percentages_by_student[attempt.student_id].append(_attempt_percentage(attempt))
    all_percentages = [p for values in percentages_by_student.values() for p in values]

    letters = list(GradeCalculation.objects.filter(course=course).values_list('letter_grade', flat=True))
    grade_distribution = {}
    for letter in letters:
        grade_distribution[letter] = grade_distribution.get(letter, 0) + 1
    completed = sum(1 for letter in letters if letter != 'F')
    completion_rate = Decimal(completed) * 100 / total_enrollments if total_enrollments else Decimal(0)

    at_risk = []
    for enrollment in enrollments:
        student_id = enrollment.student_id
        attendance_rate = (
            Decimal(present_by_student.get(student_id, 0)) * 100 / total_sessions
            if total_sessions else Decimal(100)
        )
        scores = percentages_by_student.get(student_id)
        exam_avg = _mean(scores) if scores else Decimal(100)
        if attendance_rate < AT_RISK_THRESHOLD or exam_avg < AT_RISK_THRESHOLD:
            at_risk.append({
                'studentId': student_id,
                'name': enrollment.student.user.display_name,
                'attendanceRate': _whole(attendance_rate),
                'examAverage': _whole(exam_avg),
            })

    return {
        'courseId': course.id,
        'courseName': course.name,
        'enrollments': {'total': total_enrollments, 'active': active_enrollments},
        'attendance': {'totalSessions': total_sessions, 'averageRate': _whole(average_attendance)},
        'exams': {'total': course.exams.count(), 'averageScore': _whole(_mean(all_percentages))},
        'gradeDistribution': grade_distribution,
        'completionRate': _whole(completion_rate),
        'atRiskStudents': at_risk,
    }


def get_student_analytics(student_id):
    student = Student.objects.select_related('user').filter(pk=student_id).first()
    if student is None:
        raise NotFound("Student not found")

    grades = list(student.grade_calculations.all())
    course_grades = {g.course_id: g for g in grades if g.course_id}
    program_grades = {g.program_id: g for g in grades if g.program_id}
    overall_gpa = quantize(_mean(Decimal(g.gpa) for g in grades))

    def progress(parent, grade, key):
        scope = {key: parent}
        return {
            f'{key}Id': parent.id,
            f'{key}Name': parent.name,
            'attendanceRate': _whole(attendance_percentage(student, **scope)),
            'grade': grade.letter_grade if grade else None,
            'gpa': grade.gpa if grade else None,
        }

    course_progress = [
        progress(e.course, course_grades.get(e.course_id), 'course')
        for e in student.enrollments.select_related('course')
    ]
    program_progress = [
        progress(e.program, program_grades.get(e.program_id), 'program')
        for e in student.program_enrollments.select_related('program')
    ]

    activity = AnalyticsEvent.objects.filter(
        user=student.user, created_at__gte=timezone.now() - timedelta(days=30)
    ).order_by('-created_at')[:50]

    return {
        'studentId': student.id,
        'overallGPA': overall_gpa,
        'totalEnrollments': len(course_progress) + len(program_progress),
        'certificatesEarned': student.certificates.filter(status=Certificate.Status.ACTIVE).count(),
        'courseProgress': course_progress,
        'programProgress': program_progress,
        'recentActivity': [
            {'eventType': e.event_type, 'timestamp': e.created_at, 'metadata': e.metadata}
            for e in activity
        ],
    }


def get_teacher_analytics(teacher_id):
    teacher = Teacher.objects.filter(pk=teacher_id).first()
    if teacher is None:
        raise NotFound("Teacher not found")

    courses = teacher.courses.annotate(
        enrollment_count=Count('enrollments', distinct=True),
        session_count=Count('sessions', distinct=True),
    )
    programs = teacher.programs.annotate(enrollment_count=Count('enrollments', distinct=True))

    total_enrollments = sum(c.enrollment_count for c in courses) + sum(p.enrollment_count for p in programs)
    gpas = GradeCalculation.objects.filter(
        Q(course__teacher=teacher) | Q(program__teacher=teacher)
    ).values_list('gpa', flat=True)

    return {
        'teacherId': teacher.id,
        'totalCourses': len(courses),
        'totalPrograms': len(programs),
        'totalEnrollments': total_enrollments,
        'totalSessions': sum(c.session_count for c in courses),
        'certificatesIssued': Certificate.objects.filter(
            issued_by=teacher.user, status=Certificate.Status.ACTIVE
        ).count(),
        'averageStudentGPA': quantize(_mean(Decimal(g) for g in gpas)),
    }


def export_csv(export_type=None, date_range=None):
    """Renders part of the system overview as CSV text."""
    analytics = get_system_analytics(date_range)
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator='\n')

    if export_type == 'enrollments':
        writer.writerow(['Date', 'Course Enrollments', 'Program Enrollments', 'Total'])
        for trend in analytics['enrollmentTrends']:
            writer.writerow([trend['date'], trend['courses'], trend['programs'], trend['total']])
    elif export_type == 'users':
        writer.writerow(['Role', 'Count'])
        for role, count in analytics['userStats'].items():
            writer.writerow([role, count])
    else:
        writer.writerow(['Metric', 'Value'])
        writer.writerow(['Total Course Enrollments', analytics['enrollments']['courses']])
        writer.writerow(['Total Program Enrollments', analytics['enrollments']['programs']])
        writer.writerow(['Active Enrollments', analytics['enrollments']['active']])
        writer.writerow(['Active Courses', analytics['activeContent']['courses']])
        writer.writerow(['Active Programs', analytics['activeContent']['programs']])
        writer.writerow(['Certificates Issued', analytics['certificatesIssued']])
        writer.writerow(['Daily Active Users', analytics['dailyActiveUsers']])

    logger.info("Analytics export generated (type=%s)", export_type or 'overview')
    return buffer.getvalue()
