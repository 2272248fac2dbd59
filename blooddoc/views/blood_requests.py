from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from ..auth_utils import authenticate_request, require_role
from ..constants import ROLE_HOSPITAL
from ..services import build_services
from ..utils import request_body
from ..services.transfers import serialize_request


class BloodRequestCreateView(APIView):
    @authenticate_request
    @require_role(ROLE_HOSPITAL)
    def post(self, request):
        created = build_services().transfers.create(request.account, request_body(request))
        return Response(serialize_request(created), status=status.HTTP_201_CREATED)


class OutgoingBloodRequestsView(APIView):
    @authenticate_request
    def get(self, request, hospital_id):
        requests = build_services().transfers.list_outgoing(request.account, hospital_id)
        return Response([serialize_request(r) for r in requests])


class IncomingBloodRequestsView(APIView):
    @authenticate_request
    def get(self, request, hospital_id):
        requests = build_services().transfers.list_incoming(request.account, hospital_id)
        return Response([serialize_request(r) for r in requests])


class BloodRequestRespondView(APIView):
    @authenticate_request
    def put(self, request, request_id):
        updated = build_services().transfers.respond(request.account, request_id, request_body(request))
        return Response(serialize_request(updated))
