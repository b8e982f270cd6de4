# src/ncmerge/core/templates.py
import logging
import os
from pathlib import Path
from typing import Dict, List, Optional

from ncmerge.config import BUILTIN_TEMPLATES, TEMPLATE_DIR_ENV
from ncmerge.errors import TemplateNotFoundError
from ncmerge.models import Template

logger = logging.getLogger(__name__)


class TemplateStore:
    """
    Named header/footer pairs spliced into merged programs as literal text.

    Built-in templates come from config; a template directory adds
    `<name>.header.nc` / `<name>.footer.nc` files, overriding built-ins
    of the same name.
    """

    def __init__(self, template_dir: Optional[Path] = None):
        self._templates: Dict[str, Dict[str, Optional[str]]] = {
            name: dict(entry) for name, entry in BUILTIN_TEMPLATES.items()
        }
        if template_dir is None and os.environ.get(TEMPLATE_DIR_ENV):
            template_dir = Path(os.environ[TEMPLATE_DIR_ENV])
        if template_dir is not None:
            self._load_dir(template_dir)

    def _load_dir(self, template_dir: Path) -> None:
        if not template_dir.is_dir():
            logger.warning("Template directory %s does not exist", template_dir)
            return
        for path in sorted(template_dir.glob("*.nc")):
            stem, _, part = path.stem.rpartition(".")
            if not stem or part not in ("header", "footer"):
                continue
            entry = self._templates.setdefault(stem, {"description": f"User template from {template_dir}"})
            entry[part] = path.read_text(encoding="utf-8").rstrip("\n")
            logger.debug("Loaded template %s (%s)", stem, part)

    def names(self) -> List[str]:
        return sorted(self._templates)

    def get_all_templates(self) -> List[Dict[str, Optional[str]]]:
        return [
            {
                "name": name,
                "description": self._templates[name].get("description", ""),
                "header": self._templates[name].get("header"),
                "footer": self._templates[name].get("footer"),
            }
            for name in self.names()
        ]

    def get_template_for_merge(self, name: Optional[str]) -> Optional[Template]:
        if not name or name == "none" or name not in self._templates:
            return None
        entry = self._templates[name]
        return Template(header=entry.get("header"), footer=entry.get("footer"))

    def require(self, name: str) -> Optional[Template]:
        """Like get_template_for_merge, but unknown names are an error."""
        if name and name != "none" and name not in self._templates:
            raise TemplateNotFoundError(name)
        return self.get_template_for_merge(name)
