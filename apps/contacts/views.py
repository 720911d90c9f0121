from rest_framework import permissions, viewsets
from rest_framework.throttling import ScopedRateThrottle

from apps.authentication.permissions import IsAdmin

from .models import Contact
from .serializers import ContactSerializer


class ContactViewSet(viewsets.ModelViewSet):
    """
    Contact form: anyone may submit, only admins can read or triage.
    """

    queryset = Contact.objects.all()
    serializer_class = ContactSerializer
    filterset_fields = ["is_resolved"]
    throttle_scope = "contact"

    def get_permissions(self):
        if self.action == "create":
            return [permissions.AllowAny()]
        return [IsAdmin()]

    def get_throttles(self):
        if self.action == "create":
            return [ScopedRateThrottle()]
        return super().get_throttles()
