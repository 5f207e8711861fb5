from typing import Optional
from sqlmodel import Session, select

from .....db.models import Clinic, Doctor, Patient
from .....application.ports.directory import ClinicDto, DirectoryRepository, PersonDto


class SqlDirectoryRepository(DirectoryRepository):
    def __init__(self, session: Session):
        self.session = session

    def get_patient(self, patient_id: str) -> Optional[PersonDto]:
        p = self.session.exec(select(Patient).where(Patient.id == patient_id)).first()
        if not p:
            return None
        return PersonDto(id=p.id, first_name=p.first_name, last_name=p.last_name, email=p.email, phone=p.phone, user_id=p.user_id)

    def get_doctor(self, doctor_id: str) -> Optional[PersonDto]:
        d = self.session.exec(select(Doctor).where(Doctor.id == doctor_id)).first()
        if not d:
            return None
        return PersonDto(id=d.id, first_name=d.first_name, last_name=d.last_name, email=d.email, phone=d.phone, user_id=d.user_id, clinic_id=d.clinic_id)

    def get_clinic(self, clinic_id: str) -> Optional[ClinicDto]:
        c = self.session.exec(select(Clinic).where(Clinic.id == clinic_id)).first()
        return ClinicDto(id=c.id, name=c.name) if c else None
