"""
Wiring: one auth client, one session store and one records gateway.
"""

from dataclasses import dataclass
from typing import Optional

import httpx

from vetemr.api.auth import AuthClient
from vetemr.api.gateway import RecordsGateway
from vetemr.config import API_BASE_URL, REQUEST_TIMEOUT_SECONDS
from vetemr.session import SessionStore
from vetemr.views.roster import RosterViewModel
from vetemr.views.timeline import TimelineViewModel


@dataclass
class Clinic:
    auth: AuthClient
    session: SessionStore
    gateway: RecordsGateway

    def roster(self) -> RosterViewModel:
        return RosterViewModel(self.session, self.gateway)

    def timeline(self, patient_id: str) -> TimelineViewModel:
        return TimelineViewModel(self.session, self.gateway, patient_id)

    async def aclose(self) -> None:
        await self.gateway.aclose()
        await self.auth.aclose()


def create_clinic(
    base_url: Optional[str] = None,
    timeout: float = REQUEST_TIMEOUT_SECONDS,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Clinic:
    """Build a fully wired Clinic. A 401 from the records API ends the session."""
    base_url = base_url or API_BASE_URL
    auth = AuthClient(base_url, timeout=timeout, transport=transport)
    session = SessionStore(auth)
    gateway = RecordsGateway(
        base_url,
        token_provider=lambda: session.token,
        on_unauthorized=session.logout,
        timeout=timeout,
        transport=transport,
    )
    return Clinic(auth=auth, session=session, gateway=gateway)
