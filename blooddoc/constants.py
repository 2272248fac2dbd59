BLOOD_TYPES = ('A+', 'A-', 'B+', 'B-', 'AB+', 'AB-', 'O+', 'O-')

URGENCY_LEVELS = ('critical', 'urgent', 'moderate')

ROLE_PATIENT = 'patient'
ROLE_HOSPITAL = 'hospital'
ROLE_ADMIN = 'admin'

# Account collection per role; the role is part of the uniqueness key for email.
ACCOUNT_COLLECTIONS = {
    ROLE_PATIENT: 'patients',
    ROLE_HOSPITAL: 'hospitalUsers',
    ROLE_ADMIN: 'admins',
}

REQUEST_PENDING = 'pending'
REQUEST_APPROVED = 'approved'
REQUEST_DENIED = 'denied'
REQUEST_FULFILLED = 'fulfilled'

SOS_ACTIVE = 'active'
SOS_RESOLVED = 'resolved'

SLOT_PENDING = 'pending'
SLOT_ACCEPTED = 'accepted'
SLOT_DENIED = 'denied'
