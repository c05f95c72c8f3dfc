from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.identity import resolve_caller
from common.errors import PortalError

from . import ledger
from .serializers import PaymentRequestSerializer, PaymentSerializer


class PaymentListCreateView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        payments = ledger.payments_visible_to(resolve_caller(request))
        return Response(PaymentSerializer(payments, many=True).data)

    def post(self, request):
        serializer = PaymentRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        try:
            payment = ledger.create_payment(
                resolve_caller(request),
                student_id=data["student_id"],
                amount=data["amount"],
                month=data["month"],
                year=data["year"],
            )
        except PortalError as e:
            return Response(e.as_payload(), status=e.status_code)
        return Response(
            {"payment": PaymentSerializer(payment).data},
            status=status.HTTP_201_CREATED,
        )


class CheckoutSessionView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        try:
            session = ledger.create_checkout_session(pk, resolve_caller(request))
        except PortalError as e:
            return Response(e.as_payload(), status=e.status_code)
        return Response({"url": session.redirect_url, "session_id": session.session_id})
