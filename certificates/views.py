# certificates/views.py
import logging

from django.shortcuts import get_object_or_404
from django.utils import timezone
from rest_framework import generics, permissions, status, views
from rest_framework.exceptions import PermissionDenied
from rest_framework.response import Response

from analytics.tracking import track_event
from cores.exceptions import Conflict
from users.permissions import IsAdminRole, IsStudent, IsTeacherOrAdmin
from .models import Certificate
from .serializers import CertificateSerializer, RevokeSerializer

logger = logging.getLogger(__name__)


class IssueCertificateView(generics.CreateAPIView):
    """Teacher/Admin issues a certificate by hand; nothing is generated automatically."""
    permission_classes = [IsTeacherOrAdmin]
    serializer_class = CertificateSerializer

    def perform_create(self, serializer):
        data = serializer.validated_data
        scope = {'course': data['course']} if data.get('course') else {'program': data['program']}
        duplicate = Certificate.objects.filter(
            student=data['student'], status=Certificate.Status.ACTIVE, **scope
        ).exists()
        if duplicate:
            raise Conflict("Certificate already issued for this student and offering")

        certificate = serializer.save(issued_by=self.request.user)
        logger.info("Certificate %s issued to student %s", certificate.certificate_number, certificate.student_id)
        track_event('CERTIFICATE_ISSUED', self.request.user, {'certificateId': certificate.id})


class StudentCertificateListView(generics.ListAPIView):
    """List all active certificates owned by the logged-in student."""
    permission_classes = [IsStudent]
    serializer_class = CertificateSerializer

    def get_queryset(self):
        return Certificate.objects.filter(
            student=self.request.user.student, status=Certificate.Status.ACTIVE
        ).order_by('-issued_date')


class CertificatesByStudentView(generics.ListAPIView):
    permission_classes = [permissions.IsAuthenticated]
    serializer_class = CertificateSerializer

    def get_queryset(self):
        student_id = self.kwargs['student_id']
        user = self.request.user
        if user.role == 'STUDENT' and getattr(getattr(user, 'student', None), 'id', None) != student_id:
            raise PermissionDenied("Unauthorized")
        return Certificate.objects.filter(student_id=student_id, status=Certificate.Status.ACTIVE)


class CertificateDetailView(views.APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, pk):
        certificate = get_object_or_404(Certificate.objects.select_related('student__user'), pk=pk)
        if request.user.role == 'STUDENT' and certificate.student.user_id != request.user.id:
            raise PermissionDenied("Unauthorized")
        return Response(CertificateSerializer(certificate).data)

    def delete(self, request, pk):
        """Revoke; the row is kept with status REVOKED."""
        if not IsTeacherOrAdmin().has_permission(request, self):
            raise PermissionDenied("Unauthorized")
        certificate = get_object_or_404(Certificate, pk=pk)
        if certificate.status == Certificate.Status.REVOKED:
            raise Conflict("Certificate already revoked")

        serializer = RevokeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        certificate.status = Certificate.Status.REVOKED
        certificate.revoked_at = timezone.now()
        certificate.revoked_reason = serializer.validated_data.get('reason') or 'Revoked by issuer'
        certificate.save(update_fields=['status', 'revoked_at', 'revoked_reason'])

        logger.info("Certificate %s revoked by user %s", certificate.certificate_number, request.user.id)
        return Response({"message": "Certificate revoked"}, status=status.HTTP_200_OK)


class CertificateInventoryView(generics.ListAPIView):
    permission_classes = [IsAdminRole]
    serializer_class = CertificateSerializer

    def get_queryset(self):
        queryset = Certificate.objects.select_related('student__user', 'course', 'program').order_by('-issued_date')
        cert_status = self.request.query_params.get('status')
        if cert_status:
            queryset = queryset.filter(status=cert_status)
        course_id = self.request.query_params.get('course_id')
        if course_id:
            queryset = queryset.filter(course_id=course_id)
        program_id = self.request.query_params.get('program_id')
        if program_id:
            queryset = queryset.filter(program_id=program_id)
        return queryset
