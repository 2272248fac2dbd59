from rest_framework.response import Response
from rest_framework.views import APIView

from ..auth_utils import authenticate_request
from ..notifications import send_sms
from ..utils import request_body, require_fields


class SendBloodRequestSMSView(APIView):
    @authenticate_request
    def post(self, request):
        data = request_body(request)
        require_fields(
            data, 'targetHospitalPhone', 'patientBloodType', 'patientName', 'message',
            message='All required fields (hospital phone, patient blood type, patient name, message) are needed.'
        )
        sid = send_sms(data['targetHospitalPhone'], data['message'])
        return Response({"message": "SMS blood request successfully sent.", "twilioSid": sid})
