import asyncio
import json
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import aiohttp
from fastapi import HTTPException

from ...application.ports.hospital_gateway import HospitalGateway
from ...exceptions import (
    HospitalProxyError,
    UpstreamRejected,
    UpstreamTimeout,
    UpstreamUnreachable,
)
from .directory import HospitalDirectory

logger = logging.getLogger(__name__)


def _decode_body(text: str) -> Any:
    try:
        return json.loads(text)
    except ValueError:
        return text


class HospitalProxy(HospitalGateway):
    """Forwards doctor, queue-status and payment calls to a hospital's backend.

    Every call is a single attempt bounded by a timeout. Payments are never
    retried: the hospital backends take no idempotency key, so a retry after
    a timeout could charge the patient twice.
    """

    def __init__(self, directory: HospitalDirectory, read_timeout: float = 10.0, pay_timeout: float = 15.0):
        self.directory = directory
        self.read_timeout = read_timeout
        self.pay_timeout = pay_timeout

    async def list_doctors(self, hospital_id: str) -> Any:
        return await self._request("GET", hospital_id, "/api/doctors", timeout=self.read_timeout)

    async def get_queue_status(self, hospital_id: str, doctor_id: str, patient_name: str) -> Any:
        if not patient_name or not patient_name.strip():
            raise HTTPException(status_code=400, detail="Patient name is required")
        path = f"/api/doctors/{quote(str(doctor_id), safe='')}/status?name={quote(patient_name, safe='')}"
        return await self._request("GET", hospital_id, path, timeout=self.read_timeout)

    async def pay(self, hospital_id: str, doctor_id: str, payload: Dict[str, Any]) -> Any:
        path = f"/api/doctors/{quote(str(doctor_id), safe='')}/pay"
        return await self._request("POST", hospital_id, path, timeout=self.pay_timeout, json_body=payload)

    async def probe(self, hospital_id: str) -> Dict[str, Any]:
        result: Dict[str, Any] = {"hospitalId": hospital_id, "status": None, "ok": False, "error": None}
        try:
            await self.list_doctors(hospital_id)
            result.update(status=200, ok=True)
        except UpstreamRejected as e:
            result.update(status=e.status, error=e.message)
        except HospitalProxyError as e:
            result.update(error=e.message)
        return result

    async def probe_all(self) -> List[Dict[str, Any]]:
        return list(await asyncio.gather(*(self.probe(hospital_id) for hospital_id in self.directory.ids())))

    async def _request(self, method: str, hospital_id: str, path: str, timeout: float,
                       json_body: Optional[Dict[str, Any]] = None) -> Any:
        base_url = self.directory.resolve(hospital_id)
        url = f"{base_url}{path}"
        logger.info(f"Hospital {hospital_id}: {method} {path}")
        try:
            async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=timeout)) as session:
                async with session.request(
                    method,
                    url,
                    json=json_body,
                    headers={"Content-Type": "application/json"},
                ) as response:
                    status = response.status
                    text = await response.text()
        except asyncio.TimeoutError:
            logger.error(f"Hospital {hospital_id}: {method} {path} timed out after {timeout:g}s")
            raise UpstreamTimeout(hospital_id, timeout)
        except aiohttp.ClientError as e:
            logger.error(f"Hospital {hospital_id}: {method} {path} failed: {e}")
            raise UpstreamUnreachable(hospital_id, str(e) or e.__class__.__name__)

        body = _decode_body(text)
        if not 200 <= status < 300:
            logger.warning(f"Hospital {hospital_id}: {method} {path} returned {status}")
            raise UpstreamRejected(hospital_id, status, body)
        return body
