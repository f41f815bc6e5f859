import enum

class UserRole(str, enum.Enum):
    citizen = "citizen"
    authority = "authority"
    admin = "admin"

class HazardType(str, enum.Enum):
    coastal_flooding = "Coastal Flooding"
    high_waves = "High Waves"
    storm_surge = "Storm Surge"
    erosion = "Erosion"
    tsunami_warning = "Tsunami Warning"
    strong_winds = "Strong Winds"
    other = "Other"

class Urgency(str, enum.Enum):
    low = "low"
    medium = "medium"
    high = "high"

class ReportStatus(str, enum.Enum):
    submitted = "submitted"
    under_review = "under_review"
    resolved = "resolved"
    dismissed = "dismissed"


def enum_values(enum_cls):
    # хранить в БД value ("Coastal Flooding"), а не имя члена
    return [m.value for m in enum_cls]
