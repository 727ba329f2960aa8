from django.shortcuts import get_object_or_404
from rest_framework import generics, status, views
from rest_framework.exceptions import PermissionDenied
from rest_framework.response import Response

from courses.models import Course, Program, ScheduledSession, EnrollmentStatus
from cores.models import PlatformSetting
from users.permissions import IsStudent

from . import services
from .models import ExamAttempt
from .serializers import (
    StartExamSerializer, AnswerSerializer, AttemptStartSerializer, ExamAttemptSerializer
)


class StudentExamView(views.APIView):
    """Base for the exam-taking endpoints: authenticated students only."""
    permission_classes = [IsStudent]

    @property
    def student(self):
        return self.request.user.student


class StartExamView(StudentExamView):
    """
    Student starts an exam, or resumes the open attempt for the same session.
    Returns the exam WITH questions but without correct answers.
    """

    def post(self, request, exam_id):
        serializer = StartExamSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        session = None
        session_id = serializer.validated_data.get('sessionId')
        if session_id:
            session = get_object_or_404(ScheduledSession, id=session_id)

        attempt, created = services.start_attempt(exam_id, self.student, session)
        return Response(
            AttemptStartSerializer(attempt).data,
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK
        )


class SaveAnswerView(StudentExamView):

    def post(self, request, attempt_id):
        serializer = AnswerSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        services.record_answer(
            attempt_id,
            self.student,
            serializer.validated_data['questionId'],
            serializer.validated_data.get('choiceId'),
        )
        return Response({"success": True})


class SubmitExamView(StudentExamView):
    """Student submits; the score comes from the answers already recorded."""

    def post(self, request, attempt_id):
        return Response(services.submit_attempt(attempt_id, self.student))


class TabSwitchView(StudentExamView):

    def post(self, request, attempt_id):
        return Response(services.record_tab_switch(attempt_id, self.student))


class ExamResultView(StudentExamView):

    def get(self, request, attempt_id):
        policy = PlatformSetting.load().grading_policy()
        return Response(services.attempt_result(attempt_id, self.student, policy))


class StudentExamAttemptsView(generics.ListAPIView):
    """List all exam attempts for the logged-in student (Lightweight)."""
    permission_classes = [IsStudent]
    serializer_class = ExamAttemptSerializer

    def get_queryset(self):
        return (
            ExamAttempt.objects.filter(student=self.request.user.student)
            .select_related('exam')
            .order_by('-started_at', '-id')
        )


class ProgramGradeView(StudentExamView):

    def get(self, request, program_id):
        program = get_object_or_404(Program, id=program_id)
        policy = PlatformSetting.load().grading_policy()
        return Response(services.program_grade(self.student, program, policy))


class AvailableExamsView(StudentExamView):
    """Published exams of a program (or course with ?type=course) the student is enrolled in."""

    def get(self, request, parent_id):
        if request.query_params.get('type') == 'course':
            course = get_object_or_404(Course, id=parent_id)
            enrolled = course.enrollments.filter(student=self.student, status=EnrollmentStatus.ACTIVE).exists()
            scope = {'course': course}
        else:
            program = get_object_or_404(Program, id=parent_id)
            enrolled = program.enrollments.filter(student=self.student, status=EnrollmentStatus.ACTIVE).exists()
            scope = {'program': program}

        if not enrolled:
            raise PermissionDenied("Not enrolled")
        return Response(services.available_exams(self.student, **scope))
