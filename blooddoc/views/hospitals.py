from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from ..auth_utils import authenticate_request, require_role
from ..constants import ROLE_ADMIN, ROLE_HOSPITAL
from ..services import build_services
from ..utils import request_body
from ..services.hospitals import serialize_hospital


class HospitalListView(APIView):
    @authenticate_request
    def get(self, request):
        hospitals = build_services().hospitals.list_profiles()
        return Response([serialize_hospital(h) for h in hospitals])

    @authenticate_request
    @require_role(ROLE_HOSPITAL, ROLE_ADMIN)
    def post(self, request):
        hospital = build_services().hospitals.create_for_account(request.account, request_body(request))
        return Response(serialize_hospital(hospital), status=status.HTTP_201_CREATED)


class HospitalSearchView(APIView):
    @authenticate_request
    def get(self, request):
        params = request.query_params
        hospitals = build_services().hospitals.search(
            blood_type=params.get('bloodType') or None,
            lat=params.get('lat'),
            lng=params.get('lng'),
            city=params.get('city') or None,
        )
        return Response([serialize_hospital(h) for h in hospitals])


class HospitalByUserView(APIView):
    @authenticate_request
    def get(self, request, user_id):
        hospital = build_services().hospitals.get_for_account(request.account, user_id)
        return Response(serialize_hospital(hospital))


class HospitalDetailView(APIView):
    @authenticate_request
    def get(self, request, hospital_id):
        return Response(serialize_hospital(build_services().hospitals.get_profile(hospital_id)))

    @authenticate_request
    def put(self, request, hospital_id):
        hospital = build_services().hospitals.update_profile(request.account, hospital_id, request_body(request))
        return Response(serialize_hospital(hospital))

    @authenticate_request
    def delete(self, request, hospital_id):
        build_services().hospitals.delete_profile(request.account, hospital_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class BloodInventoryView(APIView):
    @authenticate_request
    def post(self, request, hospital_id):
        inventory = build_services().inventory.upsert_entry(request.account, hospital_id, request_body(request))
        return Response(inventory)


class BloodInventoryEntryView(APIView):
    @authenticate_request
    def put(self, request, hospital_id, entry_id):
        inventory = build_services().inventory.update_entry(
            request.account, hospital_id, entry_id, request_body(request)
        )
        return Response(inventory)

    @authenticate_request
    def delete(self, request, hospital_id, entry_id):
        build_services().inventory.delete_entry(request.account, hospital_id, entry_id)
        return Response(status=status.HTTP_204_NO_CONTENT)
