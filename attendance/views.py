from django.shortcuts import get_object_or_404
from rest_framework import serializers, views
from rest_framework.exceptions import PermissionDenied
from rest_framework.response import Response

from courses.models import Course, ScheduledSession
from users.permissions import IsStudent, IsTeacherOrAdmin

from . import services
from .models import SessionAttendance


class MarkJoinSerializer(serializers.Serializer):
    sessionId = serializers.IntegerField()


class AttendanceEntrySerializer(serializers.Serializer):
    studentId = serializers.IntegerField()
    status = serializers.ChoiceField(choices=SessionAttendance.Status.choices)


class AttendanceUpdateSerializer(serializers.Serializer):
    attendance = AttendanceEntrySerializer(many=True)


def check_session_owner(user, session):
    if user.is_admin_role:
        return
    owner = session.owner
    if owner is None or owner.user_id != user.id:
        raise PermissionDenied("Not authorized")


class MarkJoinView(views.APIView):
    """Auto-mark attendance when a student clicks join."""
    permission_classes = [IsStudent]

    def post(self, request):
        serializer = MarkJoinSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        session = get_object_or_404(ScheduledSession, id=serializer.validated_data['sessionId'])
        attendance = services.mark_join(request.user.student, session)
        return Response({
            "message": "Attendance marked",
            "attendance": {
                "id": attendance.id,
                "sessionId": session.id,
                "status": attendance.status,
                "joinedAt": attendance.joined_at,
                "markedBy": attendance.marked_by,
            }
        })


class JoinSessionView(views.APIView):
    """Same as mark-join, addressed by URL (program session pages)."""
    permission_classes = [IsStudent]

    def post(self, request, session_id):
        session = get_object_or_404(ScheduledSession, id=session_id)
        services.mark_join(request.user.student, session)
        return Response({"success": True})


class SessionAttendanceView(views.APIView):
    """Roster for one session; the owning teacher (or an admin) can correct it."""
    permission_classes = [IsTeacherOrAdmin]

    def get_session(self, request, session_id):
        session = get_object_or_404(
            ScheduledSession.objects.select_related('course__teacher', 'program__teacher'), id=session_id
        )
        check_session_owner(request.user, session)
        return session

    def get(self, request, session_id):
        session = self.get_session(request, session_id)
        return Response(services.session_roster(session))

    def put(self, request, session_id):
        session = self.get_session(request, session_id)
        serializer = AttendanceUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        services.update_session_attendance(session, serializer.validated_data['attendance'])
        return Response({"message": "Attendance updated"})


class StudentCourseAttendanceView(views.APIView):
    """A student's own attendance across every session of a course."""
    permission_classes = [IsStudent]

    def get(self, request, course_id):
        course = get_object_or_404(Course, id=course_id)
        return Response(services.student_attendance(request.user.student, course=course))
