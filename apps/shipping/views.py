from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from .serializers import ShippingQuoteRequestSerializer
from .services import quote_shipping


class ShippingQuoteView(APIView):
    permission_classes = [permissions.AllowAny]

    def post(self, request, *args, **kwargs):
        serializer = ShippingQuoteRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        quote = quote_shipping(
            cart_total_cents=int(data["cart_total"] * 100),
            destination=data["destination"],
            out_of_area=data["out_of_area"],
        )
        return Response({"options": [quote.as_dict()]}, status=status.HTTP_200_OK)
