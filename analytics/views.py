from datetime import datetime, time

from django.http import HttpResponse
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime
from rest_framework import permissions, serializers, views
from rest_framework.exceptions import PermissionDenied, ValidationError
from rest_framework.response import Response

from courses.models import Course
from users.models import Student
from users.permissions import IsAdminRole

from . import engine
from .tracking import track_event


class TrackEventSerializer(serializers.Serializer):
    eventType = serializers.CharField(max_length=50)
    metadata = serializers.JSONField(required=False, allow_null=True)


def _parse_bound(raw, end_of_day=False):
    value = parse_datetime(raw)
    if value is None:
        day = parse_date(raw)
        if day is None:
            raise ValidationError(f"Invalid date: {raw}")
        value = datetime.combine(day, time.max if end_of_day else time.min)
    if timezone.is_naive(value):
        value = timezone.make_aware(value)
    return value


def date_range_from(request):
    start = request.query_params.get('startDate')
    end = request.query_params.get('endDate')
    if not (start or end):
        return None
    # A missing bound falls back to the engine default
    return {
        'start': _parse_bound(start) if start else None,
        'end': _parse_bound(end, end_of_day=True) if end else None,
    }


class TrackEventView(views.APIView):
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request):
        serializer = TrackEventSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        track_event(serializer.validated_data['eventType'], request.user, serializer.validated_data.get('metadata'))
        return Response({"success": True})


class SystemAnalyticsView(views.APIView):
    permission_classes = [IsAdminRole]

    def get(self, request):
        return Response(engine.get_system_analytics(date_range_from(request)))


class CourseAnalyticsView(views.APIView):
    """Teachers can only view their own courses; admins see all."""
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, course_id):
        user = request.user
        if user.role == 'TEACHER':
            if not Course.objects.filter(pk=course_id, teacher__user=user).exists():
                raise PermissionDenied("Unauthorized")
        elif not user.is_admin_role:
            raise PermissionDenied("Unauthorized")
        return Response(engine.get_course_analytics(course_id))


class StudentAnalyticsView(views.APIView):
    """Students can only view their own analytics."""
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, student_id):
        if request.user.role == 'STUDENT':
            if not Student.objects.filter(pk=student_id, user=request.user).exists():
                raise PermissionDenied("Unauthorized")
        return Response(engine.get_student_analytics(student_id))


class TeacherAnalyticsView(views.APIView):
    permission_classes = [IsAdminRole]

    def get(self, request, teacher_id):
        return Response(engine.get_teacher_analytics(teacher_id))


class AnalyticsExportView(views.APIView):
    permission_classes = [IsAdminRole]

    def perform_content_negotiation(self, request, force=False):
        # ?format=csv is answered with a plain HttpResponse, not a DRF renderer
        return super().perform_content_negotiation(request, force=True)

    def get(self, request):
        export_format = request.query_params.get('format')
        if export_format != 'csv':
            return Response({"error": "Unsupported export format"}, status=400)

        export_type = request.query_params.get('type') or 'overview'
        content = engine.export_csv(export_type, date_range_from(request))
        filename = f"analytics-{export_type}-{timezone.localdate().isoformat()}.csv"

        response = HttpResponse(content, content_type='text/csv')
        response['Content-Disposition'] = f'attachment; filename={filename}'
        return response
