import csv
import io
import logging

from django.db import transaction
from django.db.models import Q
from rest_framework import viewsets, permissions, status, filters
from rest_framework.decorators import action
from rest_framework.exceptions import ValidationError
from rest_framework.parsers import MultiPartParser, FormParser, JSONParser
from rest_framework.response import Response

from users.permissions import IsTeacherOrAdmin
from .models import Exam, Question
from .serializers import (
    ExamSerializer, ExamDetailSerializer, TakingExamSerializer,
    QuestionSerializer, create_choices
)

logger = logging.getLogger(__name__)


def owned_exams(user):
    """Exams the user may author: everything for admins, own courses/programs for teachers."""
    queryset = Exam.objects.all()
    if user.is_admin_role:
        return queryset
    return queryset.filter(Q(course__teacher__user=user) | Q(program__teacher__user=user))


class ExamViewSet(viewsets.ModelViewSet):
    # Enable search on title and the parent course/program name
    filter_backends = [filters.SearchFilter]
    search_fields = ['title', 'course__name', 'program__name']

    def get_queryset(self):
        user = self.request.user
        if getattr(user, 'role', '') == 'STUDENT':
            queryset = Exam.objects.filter(is_published=True)
        else:
            queryset = owned_exams(user)

        course_id = self.request.query_params.get('course_id')
        if course_id:
            queryset = queryset.filter(course_id=course_id)
        program_id = self.request.query_params.get('program_id')
        if program_id:
            queryset = queryset.filter(program_id=program_id)
        return queryset.order_by('order', '-created_at')

    def get_serializer_class(self):
        if getattr(self.request.user, 'role', '') == 'STUDENT':
            return TakingExamSerializer
        if self.action == 'retrieve':
            return ExamDetailSerializer
        return ExamSerializer

    def get_permissions(self):
        if self.action in ['list', 'retrieve']:
            return [permissions.IsAuthenticated()]
        return [IsTeacherOrAdmin()]

    @action(detail=True, methods=['post'], url_path='publish')
    def publish(self, request, pk=None):
        exam = self.get_object()
        if not exam.questions.exists():
            raise ValidationError("Cannot publish an exam without questions.")
        exam.is_published = True
        exam.save(update_fields=['is_published'])
        logger.info("Exam %s published by user %s", exam.id, request.user.id)
        return Response({"status": f"{exam.title} published"})

    @action(detail=True, methods=['post'], url_path='unpublish')
    def unpublish(self, request, pk=None):
        exam = self.get_object()
        exam.is_published = False
        exam.save(update_fields=['is_published'])
        return Response({"status": f"{exam.title} unpublished"})


class QuestionViewSet(viewsets.ModelViewSet):
    serializer_class = QuestionSerializer
    permission_classes = [IsTeacherOrAdmin]

    # Enable Search for the exam builder
    filter_backends = [filters.SearchFilter]
    search_fields = ['text']

    # Add parsers to handle file uploads
    parser_classes = (JSONParser, MultiPartParser, FormParser)

    def get_queryset(self):
        queryset = Question.objects.filter(exam__in=owned_exams(self.request.user)).order_by('exam_id', 'order', 'id')
        # Filter by Exam if provided ?exam_id=1
        exam_id = self.request.query_params.get('exam_id')
        if exam_id:
            queryset = queryset.filter(exam_id=exam_id)
        return queryset

    def _check_exam_owned(self, exam):
        if not owned_exams(self.request.user).filter(pk=exam.pk).exists():
            raise ValidationError({"exam": "You can only add questions to your own exams."})

    def perform_create(self, serializer):
        self._check_exam_owned(serializer.validated_data['exam'])
        serializer.save()

    def perform_update(self, serializer):
        exam = serializer.validated_data.get('exam')
        if exam is not None:
            self._check_exam_owned(exam)
        serializer.save()

    @action(detail=False, methods=['post'], url_path='bulk-upload')
    def bulk_upload(self, request):
        """
        Upload questions via CSV into one exam.
        Expected CSV Header: question_text, points, options, correct_answer
        Options are separated by '|'.
        """
        file_obj = request.FILES.get('file')
        if not file_obj:
            return Response({"error": "No file uploaded"}, status=status.HTTP_400_BAD_REQUEST)

        exam = owned_exams(request.user).filter(pk=request.data.get('exam_id')).first()
        if exam is None:
            return Response({"error": "Exam not found"}, status=status.HTTP_404_NOT_FOUND)

        try:
            decoded_file = file_obj.read().decode('utf-8')
        except UnicodeDecodeError:
            return Response({"error": "File must be UTF-8 encoded CSV"}, status=status.HTTP_400_BAD_REQUEST)

        reader = csv.DictReader(io.StringIO(decoded_file))
        created_count = 0
        offset = exam.questions.count()

        with transaction.atomic():
            for line_number, row in enumerate(reader, start=2):
                text = (row.get('question_text') or '').strip()
                if not text:
                    raise ValidationError(f"Row {line_number}: question_text is required")
                try:
                    points = int(row.get('points') or 1)
                except ValueError:
                    points = -1
                if points < 0:
                    raise ValidationError(f"Row {line_number}: points must be a whole number")

                question = Question.objects.create(
                    exam=exam,
                    text=text,
                    points=points,
                    order=offset + created_count
                )
                create_choices(question, (row.get('options') or '').split('|'), row.get('correct_answer', ''))
                created_count += 1

        logger.info("Bulk upload added %d questions to exam %s", created_count, exam.id)
        return Response({"status": f"Successfully uploaded {created_count} questions"}, status=status.HTTP_201_CREATED)
