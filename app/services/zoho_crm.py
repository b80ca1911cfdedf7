"""
Zoho CRM Integration
Refresh-token OAuth2 authentication and lead creation
"""

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, Optional
import requests
from app.core.config import settings

logger = logging.getLogger(__name__)

# Refresh this long before the token actually expires
TOKEN_EXPIRY_BUFFER = timedelta(minutes=5)


@dataclass
class ZohoLeadData:
    full_name: str
    email: str
    phone: str
    country: Optional[str] = None
    city: Optional[str] = None
    lead_source: Optional[str] = None
    campaign_id: Optional[str] = None
    utm_medium: Optional[str] = None
    utm_campaign: Optional[str] = None
    event_title: Optional[str] = None


@dataclass
class ZohoLeadResult:
    success: bool
    lead_id: Optional[str] = None
    error: Optional[str] = None


def build_lead_record(lead: ZohoLeadData) -> Dict[str, Any]:
    """Map a registrant onto the Zoho Leads module fields"""
    name_parts = lead.full_name.strip().split(" ")
    last_name = name_parts.pop() or lead.full_name
    first_name = " ".join(name_parts)

    record: Dict[str, Any] = {
        "Last_Name": last_name,
        "Email": lead.email,
        "Phone": lead.phone,
        "Country": lead.country,
        "City": lead.city,
        "Lead_Source": lead.lead_source or "Event Registration",
    }
    if first_name:
        record["First_Name"] = first_name
    if lead.event_title:
        record["Description"] = f"Registered for: {lead.event_title}"
        # UTM_Source carries the event name so leads can be traced back to it
        record["UTM_Source"] = lead.event_title
    if lead.utm_medium:
        record["UTM_Medium"] = lead.utm_medium
    if lead.utm_campaign:
        record["UTM_Campaign"] = lead.utm_campaign
    if lead.campaign_id:
        record["Campaign_ID"] = lead.campaign_id
    return record


class ZohoCRMService:
    def __init__(self):
        self.client_id = settings.ZOHO_CLIENT_ID
        self.client_secret = settings.ZOHO_CLIENT_SECRET
        self.refresh_token = settings.ZOHO_REFRESH_TOKEN
        self.accounts_domain = settings.ZOHO_ACCOUNTS_DOMAIN.rstrip("/")
        self.api_domain = settings.ZOHO_API_DOMAIN.rstrip("/")
        self.access_token = None
        self.token_expires_at = None
        self._lock = threading.Lock()

    def get_access_token(self) -> str:
        """Return the cached access token, refreshing it when close to expiry"""
        with self._lock:
            if self.access_token and self.token_expires_at and datetime.now() < self.token_expires_at - TOKEN_EXPIRY_BUFFER:
                return self.access_token

            response = requests.post(
                f"{self.accounts_domain}/oauth/v2/token",
                data={
                    "refresh_token": self.refresh_token,
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                    "grant_type": "refresh_token",
                },
                timeout=30,
            )
            response.raise_for_status()

            data = response.json()
            self.access_token = data["access_token"]
            self.token_expires_at = datetime.now() + timedelta(seconds=data.get("expires_in", 3600))
            logger.info("Obtained Zoho CRM access token")
            return self.access_token

    def create_lead(self, lead: ZohoLeadData) -> ZohoLeadResult:
        if not settings.zoho_configured:
            return ZohoLeadResult(success=False, error="Zoho CRM not configured")

        try:
            access_token = self.get_access_token()
            response = requests.post(
                f"{self.api_domain}/crm/v2/Leads",
                json={"data": [build_lead_record(lead)], "trigger": ["workflow"]},
                headers={"Authorization": f"Zoho-oauthtoken {access_token}"},
                timeout=30,
            )
            result = response.json()
        except (requests.exceptions.RequestException, ValueError, KeyError) as e:
            logger.error(f"Zoho CRM integration error: {str(e)}")
            return ZohoLeadResult(success=False, error=str(e))

        entry = (result.get("data") or [{}])[0]
        if entry.get("status") == "success":
            return ZohoLeadResult(success=True, lead_id=entry.get("details", {}).get("id"))

        # An existing lead counts as delivered
        if entry.get("code") == "DUPLICATE_DATA":
            return ZohoLeadResult(
                success=True,
                lead_id=(entry.get("details") or {}).get("id"),
                error="Duplicate lead detected",
            )

        logger.error(f"Zoho CRM lead creation failed: {result}")
        return ZohoLeadResult(success=False, error=entry.get("message") or "Unknown error")


zoho_crm_service = ZohoCRMService()
