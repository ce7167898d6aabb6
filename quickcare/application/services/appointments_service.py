from dataclasses import dataclass
from typing import List

from ..ports.appointments_repo import AppointmentsRepository, AppointmentDto


@dataclass
class AppointmentsService:
    repo: AppointmentsRepository

    def list_for_user(self, user_id: str) -> List[AppointmentDto]:
        return self.repo.list_for_user(user_id)
