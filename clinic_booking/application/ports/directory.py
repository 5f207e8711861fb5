from dataclasses import dataclass
from typing import Optional, Protocol


@dataclass
class PersonDto:
    id: str
    first_name: str
    last_name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    user_id: Optional[str] = None
    clinic_id: Optional[str] = None

    @property
    def recipient_id(self) -> str:
        # Notifications go to the linked account when there is one
        return self.user_id or self.id

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass
class ClinicDto:
    id: str
    name: str


class DirectoryRepository(Protocol):
    def get_patient(self, patient_id: str) -> Optional[PersonDto]:
        ...

    def get_doctor(self, doctor_id: str) -> Optional[PersonDto]:
        ...

    def get_clinic(self, clinic_id: str) -> Optional[ClinicDto]:
        ...
