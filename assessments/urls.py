from django.urls import path

from attendance.views import JoinSessionView
from .views import (
    StartExamView,
    SaveAnswerView,
    SubmitExamView,
    TabSwitchView,
    ExamResultView,
    StudentExamAttemptsView,
    ProgramGradeView,
    AvailableExamsView,
)

urlpatterns = [
    # --- Student Exam Flow ---
    path('exams/<int:exam_id>/start/', StartExamView.as_view(), name='start-exam'),
    path('exams/attempt/<int:attempt_id>/answer/', SaveAnswerView.as_view(), name='save-answer'),
    path('exams/attempt/<int:attempt_id>/submit/', SubmitExamView.as_view(), name='submit-exam'),
    path('exams/attempt/<int:attempt_id>/tab-switch/', TabSwitchView.as_view(), name='tab-switch'),
    path('exams/attempt/<int:attempt_id>/result/', ExamResultView.as_view(), name='exam-result'),
    path('attempts/', StudentExamAttemptsView.as_view(), name='student-attempts'),

    # --- Sessions ---
    path('sessions/<int:session_id>/join/', JoinSessionView.as_view(), name='join-session'),

    # --- Program dashboards ---
    path('<int:program_id>/grade/', ProgramGradeView.as_view(), name='program-grade'),
    path('<int:parent_id>/exams/available/', AvailableExamsView.as_view(), name='available-exams'),
]
