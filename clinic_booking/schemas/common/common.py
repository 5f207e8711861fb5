# clinic_booking/schemas/common/common.py
from pydantic import BaseModel

class MessageResponse(BaseModel):
    message: str

class SweepResponse(BaseModel):
    processed: int
