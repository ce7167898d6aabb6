from typing import Any, Dict, Protocol


class HospitalGateway(Protocol):
    async def list_doctors(self, hospital_id: str) -> Any:
        ...

    async def get_queue_status(self, hospital_id: str, doctor_id: str, patient_name: str) -> Any:
        ...

    async def pay(self, hospital_id: str, doctor_id: str, payload: Dict[str, Any]) -> Any:
        ...
