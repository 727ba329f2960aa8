from django.urls import path
from .views import (
    IssueCertificateView,
    StudentCertificateListView,
    CertificatesByStudentView,
    CertificateDetailView,
    CertificateInventoryView,
)

urlpatterns = [
    path('', CertificateInventoryView.as_view(), name='admin-certificates'),
    path('issue/', IssueCertificateView.as_view(), name='issue-certificate'),
    path('mine/', StudentCertificateListView.as_view(), name='student-certificates'),
    path('student/<int:student_id>/', CertificatesByStudentView.as_view(), name='certificates-by-student'),
    path('<int:pk>/', CertificateDetailView.as_view(), name='certificate-detail'),
]
