# lms_platform/users/backends.py
from django.contrib.auth import get_user_model
from django.contrib.auth.backends import ModelBackend
from django.db.models import Q

User = get_user_model()


class EmailBackend(ModelBackend):
    """Lets people sign in with either their email or their username."""

    def authenticate(self, request, username=None, password=None, **kwargs):
        login = username or kwargs.get(User.USERNAME_FIELD)
        if not login or password is None:
            return None

        matches = User.objects.filter(Q(username__iexact=login) | Q(email__iexact=login)).order_by('id')
        # Email match first
        user = matches.filter(email__iexact=login).first() or matches.first()
        if user is None:
            return None

        if user.check_password(password) and self.user_can_authenticate(user):
            return user
        return None
