import time
from pathlib import Path
from typing import Optional

def ensure_dir(path) -> Path:
    p = Path(path)
    p.mkdir(parents=True, exist_ok=True)
    return p

def safe_filename(name: Optional[str], default: str = "upload") -> str:
    # только последний компонент пути; пробелы и слэши заменяются на "_"
    base = Path(name or "").name.strip()
    if not base or base in (".", ".."):
        return default
    return "".join(c if (c.isalnum() or c in "._-") else "_" for c in base)

def timestamped_name(filename: Optional[str], now_ms: Optional[int] = None) -> str:
    ms = int(time.time() * 1000) if now_ms is None else int(now_ms)
    return f"{ms}-{safe_filename(filename)}"

def ext_for_format(fmt: Optional[str]) -> str:
    # формат Pillow ("PNG", "JPEG", "WEBP") -> расширение файла
    if not fmt:
        return ".bin"
    fmt = fmt.lower()
    return ".jpg" if fmt == "jpeg" else f".{fmt}"
