from .user_model import User, UserRole
from .patient_model import (
    Patient,
    Relation,
    Visit,
    PatientDetail,
)
from app.core.settings import GlobalSetting
