from django.contrib.auth import get_user_model
from rest_framework import generics, permissions, viewsets
from rest_framework_simplejwt.views import TokenObtainPairView

from analytics.tracking import track_event

from .permissions import IsAdminRole
from .serializers import (
    RegisterSerializer,
    PublicRegisterSerializer,
    CustomTokenObtainPairSerializer,
    UserSerializer
)

User = get_user_model()


# --- User Management (CRUD for Admin) ---
class UserViewSet(viewsets.ModelViewSet):
    """
    Admin-only endpoint to manage all users.
    Every change is recorded as an analytics event.
    """
    queryset = User.objects.all().order_by('-date_joined')
    permission_classes = [IsAdminRole]

    def get_serializer_class(self):
        if self.action == 'create':
            return RegisterSerializer
        return UserSerializer

    def perform_create(self, serializer):
        user = serializer.save()
        track_event('USER_CREATED', self.request.user, {'userId': user.id, 'role': user.role})

    def perform_update(self, serializer):
        user = serializer.save()
        # Handle password update if present
        if 'password' in self.request.data and self.request.data['password']:
            user.set_password(self.request.data['password'])
            user.save()
        track_event('USER_UPDATED', self.request.user, {'userId': user.id})

    def perform_destroy(self, instance):
        track_event('USER_DELETED', self.request.user, {'userId': instance.id, 'email': instance.email})
        instance.delete()


# --- Authentication Views ---
class RegisterView(generics.CreateAPIView):
    serializer_class = PublicRegisterSerializer
    permission_classes = [permissions.AllowAny]


class CustomLoginView(TokenObtainPairView):
    serializer_class = CustomTokenObtainPairSerializer

    def post(self, request, *args, **kwargs):
        response = super().post(request, *args, **kwargs)
        if response.status_code == 200:
            user_id = response.data['user']['id']
            track_event('LOGIN', User.objects.filter(pk=user_id).first())
        return response


class UserProfileView(generics.RetrieveUpdateAPIView):
    serializer_class = UserSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_object(self):
        return self.request.user
