# Models package (re-export feature modules for stable imports)
from .directory.clinic import Clinic
from .directory.doctor import Doctor
from .directory.patient import Patient
from .scheduling.time_slot import TimeSlot
from .scheduling.appointment import Appointment, AppointmentReminder
from .audit.audit_log import AuditLog
from .notifications.notification import Notification

__all__ = [
    "Clinic",
    "Doctor",
    "Patient",
    "TimeSlot",
    "Appointment",
    "AppointmentReminder",
    "AuditLog",
    "Notification",
]
