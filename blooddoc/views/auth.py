from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from ..services import build_services
from ..utils import request_body


class RegisterView(APIView):
    def post(self, request):
        result = build_services().accounts.register(request_body(request))
        return Response(result, status=status.HTTP_201_CREATED)


class LoginView(APIView):
    def post(self, request):
        return Response(build_services().accounts.login(request_body(request)))
