"""
Google Sheets export service.
Appends treatment rows to a spreadsheet using a service-account JWT grant.
"""
import json
import logging
import time
from typing import List, Optional
import jwt
import requests
from amu_api.core.exceptions import SheetsExportException
from amu_api.models.treatment_entry import TreatmentEntry

logger = logging.getLogger(__name__)

SHEETS_SCOPE = "https://www.googleapis.com/auth/spreadsheets"
SHEETS_APPEND_URL = "https://sheets.googleapis.com/v4/spreadsheets/{spreadsheet_id}/values/{sheet_name}:append"
JWT_BEARER_GRANT = "urn:ietf:params:oauth:grant-type:jwt-bearer"
TOKEN_LIFETIME_SECONDS = 3600
REQUEST_TIMEOUT_SECONDS = 15


def treatment_to_row(entry: TreatmentEntry, compliance_status: str) -> List[str]:
    """Spreadsheet column order for a treatment entry."""
    return [
        entry.entry_id,
        entry.farmer_name,
        entry.farm_name or "",
        entry.state or "",
        entry.district or "",
        entry.animal_id,
        entry.animal_type or "",
        entry.medicine,
        entry.dosage or "",
        entry.frequency or "",
        entry.duration or "",
        entry.reason or "",
        entry.treatment_date,
        entry.vet_approval.value,
        compliance_status
    ]


class SheetsService:
    """Service for appending rows to Google Sheets."""

    def __init__(self, service_account_json: str, spreadsheet_id: str, session: Optional[requests.Session] = None):
        self.service_account_json = service_account_json
        self.spreadsheet_id = spreadsheet_id
        self.session = session or requests.Session()

    def append_row(self, sheet_name: str, values: List[str]) -> dict:
        """
        Append one row to the named sheet.

        Args:
            sheet_name: Target sheet (tab) name
            values: Cell values in column order

        Returns:
            Sheets API append response

        Raises:
            SheetsExportException: If configuration is missing or an API call fails
        """
        if not self.spreadsheet_id:
            raise SheetsExportException("Google Sheets spreadsheet ID is not configured")

        access_token = self._get_access_token(self._load_credentials())

        try:
            response = self.session.post(
                SHEETS_APPEND_URL.format(spreadsheet_id=self.spreadsheet_id, sheet_name=sheet_name),
                params={'valueInputOption': 'RAW', 'insertDataOption': 'INSERT_ROWS'},
                headers={'Authorization': f"Bearer {access_token}"},
                json={'values': [values]},
                timeout=REQUEST_TIMEOUT_SECONDS
            )
        except requests.RequestException as e:
            raise SheetsExportException(f"Google Sheets request failed: {str(e)}") from e

        if not response.ok:
            raise SheetsExportException(f"Google Sheets API error: {response.status_code} - {response.text}")

        result = response.json()
        logger.info("Appended row to sheet %s: %s", sheet_name, result.get('updates', {}).get('updatedRange'))
        return result

    def _load_credentials(self) -> dict:
        if not self.service_account_json:
            raise SheetsExportException("Google service account credentials not found")
        try:
            credentials = json.loads(self.service_account_json)
        except json.JSONDecodeError as e:
            raise SheetsExportException("Google service account credentials are not valid JSON") from e

        missing = [key for key in ('client_email', 'private_key', 'token_uri') if not credentials.get(key)]
        if missing:
            raise SheetsExportException(f"Service account credentials missing: {', '.join(missing)}")
        return credentials

    def _build_assertion(self, credentials: dict) -> str:
        """Sign the RS256 JWT exchanged for an access token."""
        now = int(time.time())
        payload = {
            "iss": credentials['client_email'],
            "scope": SHEETS_SCOPE,
            "aud": credentials['token_uri'],
            "iat": now,
            "exp": now + TOKEN_LIFETIME_SECONDS
        }
        private_key = credentials['private_key'].replace("\\n", "\n")
        try:
            return jwt.encode(payload, private_key, algorithm="RS256")
        except (ValueError, TypeError, jwt.PyJWTError) as e:
            raise SheetsExportException(f"Failed to sign service account token: {str(e)}") from e

    def _get_access_token(self, credentials: dict) -> str:
        try:
            response = self.session.post(
                credentials['token_uri'],
                data={'grant_type': JWT_BEARER_GRANT, 'assertion': self._build_assertion(credentials)},
                timeout=REQUEST_TIMEOUT_SECONDS
            )
        except requests.RequestException as e:
            raise SheetsExportException(f"Token request failed: {str(e)}") from e

        if not response.ok:
            raise SheetsExportException(f"Token request rejected: {response.status_code} - {response.text}")

        access_token = response.json().get('access_token')
        if not access_token:
            raise SheetsExportException("Token response did not contain an access token")
        return access_token
