from django.shortcuts import get_object_or_404
from rest_framework import permissions, views
from rest_framework.exceptions import PermissionDenied
from rest_framework.response import Response

from courses.models import Course, Program
from users.models import Student
from users.permissions import IsTeacherOrAdmin

from . import calculator
from .models import GradeCalculation
from .serializers import GradeCalculationSerializer, CalculateGradeSerializer


def _serialize(grades):
    return GradeCalculationSerializer(grades, many=True).data


class StudentGradesView(views.APIView):
    """A student's stored grades; students may only look at their own."""
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, student_id):
        student = get_object_or_404(Student, id=student_id)
        if request.user.role == 'STUDENT' and student.user_id != request.user.id:
            raise PermissionDenied("Unauthorized")

        grades = calculator.get_student_grades(student)
        return Response({
            'courseGrades': _serialize(grades['courseGrades']),
            'programGrades': _serialize(grades['programGrades']),
            'overallGPA': grades['overallGPA'],
            'totalGrades': grades['totalGrades'],
        })


class CalculateCourseGradeView(views.APIView):
    permission_classes = [IsTeacherOrAdmin]

    def post(self, request, course_id):
        serializer = CalculateGradeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        course = get_object_or_404(Course, id=course_id)
        student = get_object_or_404(Student, id=serializer.validated_data['studentId'])
        grade = calculator.calculate_course_grade(student, course)
        return Response(GradeCalculationSerializer(grade).data)


class CalculateProgramGradeView(views.APIView):
    permission_classes = [IsTeacherOrAdmin]

    def post(self, request, program_id):
        serializer = CalculateGradeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        program = get_object_or_404(Program, id=program_id)
        student = get_object_or_404(Student, id=serializer.validated_data['studentId'])
        grade = calculator.calculate_program_grade(student, program)
        return Response(GradeCalculationSerializer(grade).data)


class CalculateAllGradesView(views.APIView):
    permission_classes = [IsTeacherOrAdmin]

    def post(self, request, student_id):
        student = get_object_or_404(Student, id=student_id)
        result = calculator.calculate_all_student_grades(student)
        return Response({
            'courseGrades': _serialize(result['courseGrades']),
            'programGrades': _serialize(result['programGrades']),
            'totalGrades': result['totalGrades'],
        })


class RosterGradesView(views.APIView):
    """Every enrolled student of a course or program with their stored grade (or null)."""
    permission_classes = [IsTeacherOrAdmin]
    scope = None  # 'course' or 'program'

    def get(self, request, pk):
        if self.scope == 'course':
            parent = get_object_or_404(Course, id=pk)
        else:
            parent = get_object_or_404(Program, id=pk)
        if not request.user.is_admin_role and (parent.teacher is None or parent.teacher.user_id != request.user.id):
            raise PermissionDenied("Unauthorized")

        grades = {
            g.student_id: g for g in GradeCalculation.objects.filter(**{self.scope: parent})
        }
        rows = []
        for enrollment in parent.enrollments.select_related('student__user').order_by('created_at'):
            student = enrollment.student
            grade = grades.get(student.id)
            rows.append({
                'studentId': student.id,
                'name': student.user.display_name,
                'email': student.user.email,
                'grade': GradeCalculationSerializer(grade).data if grade else None,
                'enrolledAt': enrollment.created_at,
            })
        return Response(rows)
