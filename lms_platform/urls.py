from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path('admin/', admin.site.urls),

    # --- Authentication, Profiles & User Management ---
    path('api/', include('users.urls')),

    # --- Exam Authoring (Teachers / Admins) ---
    path('api/', include('exams.urls')),

    # --- Student Exam Taking, Program Grades & Session Join ---
    path('api/student-programs/', include('assessments.urls')),

    # --- Attendance ---
    path('api/attendance/', include('attendance.urls')),

    # --- Grades ---
    path('api/grades/', include('grades.urls')),

    # --- Analytics Dashboards ---
    path('api/analytics/', include('analytics.urls')),

    # --- Certificates ---
    path('api/certificates/', include('certificates.urls')),

    # --- Platform Settings ---
    path('api/', include('cores.urls')),
]
