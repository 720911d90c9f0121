import logging

from django.contrib.auth import authenticate
from django.contrib.auth.models import update_last_login
from rest_framework import generics, permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.tokens import RefreshToken

from .serializers import UserSerializer

logger = logging.getLogger(__name__)


def issue_tokens(user) -> dict:
  """
  Access/refresh pair carrying the claims the storefront admin reads
  without a round trip to /me/.
  """
  refresh = RefreshToken.for_user(user)
  refresh["email"] = user.email
  refresh["role"] = user.role
  access = str(refresh.access_token)
  return {"refresh": str(refresh), "access": access, "token": access}


class LoginView(APIView):
  permission_classes = [permissions.AllowAny]

  def post(self, request):
    email = (request.data.get("email") or "").strip().lower()
    password = request.data.get("password") or ""
    if not email or not password:
      return Response({"error": "Email and password required"}, status=status.HTTP_400_BAD_REQUEST)

    user = authenticate(request, email=email, password=password)
    if user is None:
      logger.warning("Failed login for %s", email)
      return Response({"error": "Invalid credentials"}, status=status.HTTP_401_UNAUTHORIZED)

    update_last_login(None, user)
    return Response({**issue_tokens(user), "user": UserSerializer(user).data}, status=status.HTTP_200_OK)


class MeView(generics.RetrieveUpdateAPIView):
  serializer_class = UserSerializer
  permission_classes = [permissions.IsAuthenticated]

  def get_object(self):
    return self.request.user
