import logging

from rest_framework import status
from rest_framework.views import APIView
from rest_framework.response import Response

from analytics.tracking import track_event
from users.permissions import IsAdminRole
from .models import PlatformSetting
from .serializers import PlatformSettingSerializer

logger = logging.getLogger(__name__)


class PlatformSettingView(APIView):
    permission_classes = [IsAdminRole]

    def get(self, request):
        settings = PlatformSetting.load()
        serializer = PlatformSettingSerializer(settings)
        return Response(serializer.data)

    def put(self, request):
        settings = PlatformSetting.load()
        serializer = PlatformSettingSerializer(settings, data=request.data, partial=True)
        if serializer.is_valid():
            serializer.save()
            logger.info("Platform settings changed by user %s", request.user.id)
            track_event('SETTINGS_CHANGED', request.user, {'fields': sorted(request.data.keys())})
            return Response(serializer.data)
        return Response({"error": "Validation failed", "fields": serializer.errors}, status=status.HTTP_400_BAD_REQUEST)
