import json
import logging
from pathlib import Path
from .models import Site

logger = logging.getLogger(__name__)

SITE_KEYS = ("template_id", "content")


def save_site(path: str | Path, site: Site) -> None:
    path = Path(path)
    path.write_text(json.dumps(site.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8")
    logger.info("Saved site %s to %s", site.id or site.subdomain, path)


def load_site(path: str | Path) -> Site:
    """Read a site document; anything that is not one raises ``ValueError``."""
    path = Path(path)
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict) or not any(key in data for key in SITE_KEYS):
        raise ValueError(f"{path.name} is not a site file")
    if not isinstance(data.get("content") or {}, dict):
        raise ValueError(f"{path.name} has malformed content")
    return Site.from_dict(data)
