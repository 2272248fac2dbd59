from django.urls import path

from .views.auth import LoginView, RegisterView
from .views.blood_requests import (BloodRequestCreateView, BloodRequestRespondView,
                                   IncomingBloodRequestsView, OutgoingBloodRequestsView)
from .views.hospitals import (BloodInventoryEntryView, BloodInventoryView, HospitalByUserView,
                              HospitalDetailView, HospitalListView, HospitalSearchView)
from .views.sms import SendBloodRequestSMSView
from .views.sos import HospitalSOSView, PatientSOSView, SOSCreateView, SOSRespondView

urlpatterns = [
    # Auth
    path('auth/register', RegisterView.as_view(), name='register'),
    path('auth/login', LoginView.as_view(), name='login'),

    # Hospitals (search and user lookups before the id route)
    path('hospitals', HospitalListView.as_view(), name='hospital-list'),
    path('hospitals/search', HospitalSearchView.as_view(), name='hospital-search'),
    path('hospitals/user/<str:user_id>', HospitalByUserView.as_view(), name='hospital-by-user'),
    path('hospitals/<str:hospital_id>', HospitalDetailView.as_view(), name='hospital-detail'),
    path('hospitals/<str:hospital_id>/blood-inventory', BloodInventoryView.as_view(), name='blood-inventory'),
    path('hospitals/<str:hospital_id>/blood-inventory/<str:entry_id>',
         BloodInventoryEntryView.as_view(), name='blood-inventory-entry'),

    # Hospital-to-hospital transfers
    path('blood-requests/create', BloodRequestCreateView.as_view(), name='blood-request-create'),
    path('blood-requests/outgoing/<str:hospital_id>', OutgoingBloodRequestsView.as_view(), name='blood-requests-outgoing'),
    path('blood-requests/incoming/<str:hospital_id>', IncomingBloodRequestsView.as_view(), name='blood-requests-incoming'),
    path('blood-requests/<str:request_id>/respond', BloodRequestRespondView.as_view(), name='blood-request-respond'),

    # SOS
    path('sos/create', SOSCreateView.as_view(), name='sos-create'),
    path('sos/hospital/<str:hospital_id>', HospitalSOSView.as_view(), name='sos-hospital'),
    path('sos/patient/<str:patient_id>', PatientSOSView.as_view(), name='sos-patient'),
    path('sos/<str:sos_id>/respond', SOSRespondView.as_view(), name='sos-respond'),

    # SMS
    path('sms/send-blood-request', SendBloodRequestSMSView.as_view(), name='sms-blood-request'),
]
