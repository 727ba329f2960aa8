from django.urls import path

from .views import MarkJoinView, SessionAttendanceView, StudentCourseAttendanceView

urlpatterns = [
    path('mark-join/', MarkJoinView.as_view(), name='attendance-mark-join'),
    path('session/<int:session_id>/', SessionAttendanceView.as_view(), name='attendance-session'),
    path('student/<int:course_id>/', StudentCourseAttendanceView.as_view(), name='attendance-student'),
]
