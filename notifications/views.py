from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.identity import resolve_caller
from common.errors import PortalError

from . import dispatcher
from .serializers import MessageRequestSerializer, MessageSerializer


def _created(message):
    return Response(
        {"message": MessageSerializer(message).data, "status": message.status},
        status=status.HTTP_201_CREATED,
    )


class MessageListCreateView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        messages = dispatcher.messages_visible_to(resolve_caller(request))
        return Response(MessageSerializer(messages, many=True).data)

    def post(self, request):
        serializer = MessageRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        try:
            message = dispatcher.create_and_send(
                resolve_caller(request),
                student_id=data["student_id"],
                channel=data["channel"].upper(),
                content=data["content"],
            )
        except PortalError as e:
            return Response(e.as_payload(), status=e.status_code)
        return _created(message)


class MessageResendView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        try:
            message = dispatcher.resend(resolve_caller(request), pk)
        except PortalError as e:
            return Response(e.as_payload(), status=e.status_code)
        return _created(message)
