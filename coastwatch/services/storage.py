import logging
from pathlib import Path
from typing import Optional

from coastwatch.core.config_env import settings
from coastwatch.utils.media import ensure_dir, timestamped_name

logger = logging.getLogger("coastwatch.storage")


class StorageError(Exception):
    pass


class LocalBucket:
    """
    Бакет для фото отчётов: файлы в MEDIA_ROOT/<bucket>/, раздаются как статика
    под MEDIA_URL_PREFIX/<bucket>/.
    """

    def __init__(self, bucket: str, root: Optional[str] = None, url_prefix: Optional[str] = None) -> None:
        self.bucket = bucket
        self.root = Path(root or settings.MEDIA_ROOT).resolve()
        self.url_prefix = (url_prefix if url_prefix is not None else settings.MEDIA_URL_PREFIX).rstrip("/")

    @property
    def directory(self) -> Path:
        return self.root / self.bucket

    def upload(self, filename: Optional[str], data: bytes) -> str:
        """Сохраняет файл под ключом '<epoch_ms>-<имя>' и возвращает ключ."""
        key = timestamped_name(filename)
        try:
            ensure_dir(self.directory)
            with open(self.directory / key, "wb") as f:
                f.write(data)
        except OSError as e:
            logger.warning("upload to %s failed: %s", self.bucket, e)
            raise StorageError(str(e)) from e
        return key

    def remove(self, key: str) -> None:
        try:
            self.path_for(key).unlink(missing_ok=True)
        except OSError as e:
            logger.warning("failed to remove %s/%s: %s", self.bucket, key, e)

    def public_url(self, key: str) -> str:
        return f"{self.url_prefix}/{self.bucket}/{key}"

    def path_for(self, key: str) -> Path:
        return self.directory / key


def get_report_images_bucket() -> LocalBucket:
    return LocalBucket(settings.REPORT_IMAGES_BUCKET)
