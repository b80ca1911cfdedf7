from .registrant import RegistrantProfile, Attribution, RegistrantCreate, RegistrantUpdate, Registrant
from .registration import (
    PublicRegistrationRequest, RegistrationResponse, RegistrationCreate, Registration,
    TicketRecoveryRequest, TicketRecoveryResponse,
    BulkLead, BulkImportRequest, BulkImportDetail, BulkImportResult
)
from .checkin import CheckInRequest, CheckInRegistrationInfo, CheckInResponse, CheckInStats
from .credential import CredentialEvent, CredentialAttendee, CredentialView, QRCodeResponse
from .scanner import ScannerSessionCreate, ScannerSessionResponse, ScannerContext
from .event import PublicEvent
