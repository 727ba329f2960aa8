from django.urls import path

from .views import (
    StudentGradesView,
    CalculateCourseGradeView,
    CalculateProgramGradeView,
    CalculateAllGradesView,
    RosterGradesView,
)

urlpatterns = [
    path('student/<int:student_id>/', StudentGradesView.as_view(), name='student-grades'),
    path('calculate/course/<int:course_id>/', CalculateCourseGradeView.as_view(), name='calculate-course-grade'),
    path('calculate/program/<int:program_id>/', CalculateProgramGradeView.as_view(), name='calculate-program-grade'),
    path('calculate/all/<int:student_id>/', CalculateAllGradesView.as_view(), name='calculate-all-grades'),
    path('course/<int:pk>/students/', RosterGradesView.as_view(scope='course'), name='course-grades'),
    path('program/<int:pk>/students/', RosterGradesView.as_view(scope='program'), name='program-grades'),
]
