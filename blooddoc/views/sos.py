from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from ..auth_utils import authenticate_request, require_role
from ..constants import ROLE_PATIENT
from ..services import build_services
from ..utils import request_body
from ..services.sos import serialize_sos


class SOSCreateView(APIView):
    @authenticate_request
    @require_role(ROLE_PATIENT)
    def post(self, request):
        created = build_services().sos.create(request.account, request_body(request))
        return Response(serialize_sos(created), status=status.HTTP_201_CREATED)


class HospitalSOSView(APIView):
    @authenticate_request
    def get(self, request, hospital_id):
        requests = build_services().sos.list_incoming(request.account, hospital_id)
        return Response([serialize_sos(s) for s in requests])


class PatientSOSView(APIView):
    @authenticate_request
    def get(self, request, patient_id):
        requests = build_services().sos.list_own(request.account, patient_id)
        return Response([serialize_sos(s) for s in requests])


class SOSRespondView(APIView):
    @authenticate_request
    def put(self, request, sos_id):
        updated = build_services().sos.respond(request.account, sos_id, request_body(request))
        return Response(serialize_sos(updated))
