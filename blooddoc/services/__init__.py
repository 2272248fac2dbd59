from types import SimpleNamespace

from ..db import get_db
from .accounts import AccountService
from .hospitals import HospitalService
from .inventory import InventoryService
from .sos import SOSService
from .transfers import BloodTransferService


def build_services(db=None, geocoder=None):
    """Wire the services around one database handle."""
    db = db if db is not None else get_db()
    hospitals = HospitalService(db, geocoder)
    inventory = InventoryService(db)
    accounts = AccountService(db, hospitals)
    return SimpleNamespace(
        accounts=accounts,
        hospitals=hospitals,
        inventory=inventory,
        transfers=BloodTransferService(db, hospitals, inventory, accounts),
        sos=SOSService(db, hospitals, inventory, accounts),
    )
