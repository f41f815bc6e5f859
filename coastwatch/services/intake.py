"""
Приём отчёта об опасности: проверка формы, загрузка фото, оценка достоверности,
запись в hazard_reports. Одна попытка, без ретраев: любая ошибка прерывает отправку.
"""
import io
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional
from uuid import UUID

from PIL import Image, UnidentifiedImageError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from coastwatch.core.config_env import settings
from coastwatch.models.enums import HazardType, Urgency
from coastwatch.models.hazard_report import HazardReport
from coastwatch.services.credibility import calculate_credibility_score
from coastwatch.services.reports_service import create_report
from coastwatch.services.storage import LocalBucket, StorageError
from coastwatch.utils.media import ext_for_format, safe_filename

logger = logging.getLogger("coastwatch.intake")


class ReportValidationError(Exception):
    pass


class ImageUploadError(Exception):
    pass


@dataclass
class ReportSubmission:
    hazard_type: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    contact_number: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    urgency: Optional[str] = None


@dataclass
class UploadedImage:
    filename: Optional[str]
    content_type: Optional[str]
    data: bytes


def format_coordinates(lat: float, lon: float) -> str:
    return f"{lat:.6f}, {lon:.6f}"


def has_coordinates(form: ReportSubmission) -> bool:
    return form.latitude is not None and form.longitude is not None


def _parse_hazard_type(raw: str) -> HazardType:
    for member in HazardType:
        if raw == member.value or raw == member.name:
            return member
    raise ReportValidationError(f"Unknown hazard type: {raw}")


def _parse_urgency(raw: Optional[str]) -> Optional[Urgency]:
    if not raw:
        return None
    try:
        return Urgency(raw.strip().lower())
    except ValueError:
        raise ReportValidationError(f"Unknown urgency: {raw}")


def validate_submission(form: ReportSubmission) -> ReportSubmission:
    # координаты с устройства подставляются как текст, если поле адреса пустое
    if has_coordinates(form) and not (form.location or "").strip():
        form.location = format_coordinates(form.latitude, form.longitude)

    missing = [
        name for name in ("hazard_type", "description", "location")
        if not (getattr(form, name) or "").strip()
    ]
    if missing:
        raise ReportValidationError("Please fill in all required fields: " + ", ".join(missing))
    if (form.latitude is None) != (form.longitude is None):
        raise ReportValidationError("Both latitude and longitude are required for coordinates")
    return form


def _check_image(image: UploadedImage) -> str:
    """Проверяет загрузку и возвращает формат по Pillow ("PNG", "GIF", ...)."""
    if not image.data:
        raise ReportValidationError("Uploaded image is empty")
    if len(image.data) > settings.MAX_IMAGE_BYTES:
        raise ReportValidationError("Uploaded image is too large")
    if image.content_type and not image.content_type.startswith("image/"):
        raise ReportValidationError("Only image uploads are accepted")
    try:
        with Image.open(io.BytesIO(image.data)) as pil_img:
            pil_img.verify()
            fmt = pil_img.format
    except (UnidentifiedImageError, OSError, SyntaxError) as e:
        raise ReportValidationError("Uploaded file is not a readable image") from e
    return fmt


def image_name(filename: Optional[str], fmt: Optional[str]) -> str:
    # расширение, которого Pillow не знает, дополняется реальным форматом файла
    name = safe_filename(filename)
    if Path(name).suffix.lower() not in Image.registered_extensions():
        name += ext_for_format(fmt)
    return name


def upload_image(bucket: LocalBucket, image: UploadedImage, fmt: Optional[str] = None) -> str:
    """Кладёт файл в бакет и возвращает ключ."""
    try:
        return bucket.upload(image_name(image.filename, fmt), image.data)
    except StorageError as e:
        raise ImageUploadError(f"Image upload failed: {e}") from e


def submit_report(
    db: Session,
    bucket: LocalBucket,
    *,
    owner_id: UUID,
    form: ReportSubmission,
    image: Optional[UploadedImage] = None,
) -> HazardReport:
    form = validate_submission(form)
    hazard_type = _parse_hazard_type(form.hazard_type.strip())
    urgency = _parse_urgency(form.urgency)

    key = None
    if image is not None:
        fmt = _check_image(image)
        key = upload_image(bucket, image, fmt)

    # nearby_reports_count пока всегда 0: поиска соседних отчётов нет
    score = calculate_credibility_score(
        has_image=key is not None,
        has_location=has_coordinates(form),
        description_length=len(form.description),
        nearby_reports_count=0,
    )

    try:
        report = create_report(
            db,
            user_id=owner_id,
            hazard_type=hazard_type,
            description=form.description,
            location=form.location,
            latitude=form.latitude,
            longitude=form.longitude,
            contact_number=(form.contact_number or "").strip() or None,
            image_url=bucket.public_url(key) if key else None,
            urgency=urgency,
            credibility_score=score,
        )
    except SQLAlchemyError:
        # отчёт не записан: файл в бакете никому не нужен
        if key:
            bucket.remove(key)
        raise
    logger.info("report %s submitted by %s, score=%s", report.id, owner_id, score)
    return report


def prepare_edit(report: HazardReport, changes: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Правка автора: форма проверяется как при отправке, оценка пересчитывается
    по сохранённому фото и новым координатам/описанию.
    """
    form = ReportSubmission(
        hazard_type=report.hazard_type.value,
        description=changes.get("description", report.description),
        location=changes.get("location", report.location),
        contact_number=changes.get("contact_number", report.contact_number),
        latitude=changes.get("latitude", report.latitude),
        longitude=changes.get("longitude", report.longitude),
    )
    form = validate_submission(form)
    score = calculate_credibility_score(
        has_image=report.image_url is not None,
        has_location=has_coordinates(form),
        description_length=len(form.description),
        nearby_reports_count=0,
    )
    return {
        "description": form.description,
        "location": form.location,
        "contact_number": (form.contact_number or "").strip() or None,
        "latitude": form.latitude,
        "longitude": form.longitude,
        "credibility_score": score,
    }
