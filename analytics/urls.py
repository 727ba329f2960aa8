from django.urls import path

from .views import (
    TrackEventView,
    SystemAnalyticsView,
    CourseAnalyticsView,
    StudentAnalyticsView,
    TeacherAnalyticsView,
    AnalyticsExportView,
)

urlpatterns = [
    path('track/', TrackEventView.as_view(), name='analytics-track'),
    path('overview/', SystemAnalyticsView.as_view(), name='analytics-overview'),
    path('course/<int:course_id>/', CourseAnalyticsView.as_view(), name='analytics-course'),
    path('student/<int:student_id>/', StudentAnalyticsView.as_view(), name='analytics-student'),
    path('teacher/<int:teacher_id>/', TeacherAnalyticsView.as_view(), name='analytics-teacher'),
    path('export/', AnalyticsExportView.as_view(), name='analytics-export'),
]
