"""
Template Manager

Loads document template definitions from a directory, validates them and
hands out read-only template handles.

Templates are rejected at load time when invalid; a handle that was handed
out is never mutated. reload() builds a fresh handle and swaps it in, so
renders already running on the old handle are unaffected.
"""
import json
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional

from loguru import logger

from config import settings
from errors import NotFoundError, SchemaError

from .models import DocumentTemplate, ValidatedTemplate


class TemplateManager:
    """
    Registry of validated document templates.

    Features:
    - Directory loading (*.json definitions)
    - Validation at load time
    - Copy-on-reload handle replacement
    - Built-in default templates
    """

    def __init__(
        self,
        templates_dir: Optional[Path] = None,
        auto_load: bool = True
    ):
        """
        Initialize template manager.

        Args:
            templates_dir: Directory holding template definitions
            auto_load: Load definitions from the directory right away
        """
        self.templates_dir = Path(templates_dir) if templates_dir else settings.TEMPLATES_DIR
        self._templates: Dict[str, ValidatedTemplate] = {}
        self._sources: Dict[str, Path] = {}
        self._write_lock = threading.Lock()

        if auto_load:
            self.load_templates()

    def load_templates(self) -> int:
        """Load every definition in the directory; returns the number registered"""
        self.templates_dir.mkdir(parents=True, exist_ok=True)
        if not any(self.templates_dir.glob("*.json")):
            self.create_default_templates()

        loaded = 0
        for file_path in sorted(self.templates_dir.glob("*.json")):
            template = self.load_file(file_path)
            if template is not None:
                self._register(template, file_path)
                loaded += 1

        logger.info(f"Loaded {loaded} templates from {self.templates_dir}")
        return loaded

    def load_file(self, file_path: Path) -> Optional[ValidatedTemplate]:
        """Read and validate a single definition; invalid files are logged and skipped"""
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            return DocumentTemplate.from_dict(data).validate()
        except (OSError, ValueError) as e:
            logger.error(f"Failed to read template {file_path}: {e}")
        except SchemaError as e:
            logger.error(f"Rejected invalid template {file_path}: {e}")
        return None

    def register(self, template: DocumentTemplate) -> ValidatedTemplate:
        """Validate and register a template built in memory (raises SchemaError)"""
        handle = template.validate()
        self._register(handle, None)
        return handle

    def _register(self, handle: ValidatedTemplate, source: Optional[Path]) -> None:
        with self._write_lock:
            templates = dict(self._templates)
            templates[handle.name] = handle
            self._templates = templates
            if source is not None:
                self._sources[handle.name] = source
        logger.info(f"Registered template '{handle.name}' with {len(handle)} sections")

    def get_template(self, name: str) -> ValidatedTemplate:
        """Handle for a registered template; raises NotFoundError"""
        template = self._templates.get(name)
        if template is None:
            raise NotFoundError("template", name)
        return template

    def list_templates(self) -> List[str]:
        """List all template names"""
        return sorted(self._templates.keys())

    def remove_template(self, name: str) -> bool:
        """Unregister a template by name"""
        with self._write_lock:
            if name not in self._templates:
                return False
            templates = dict(self._templates)
            del templates[name]
            self._templates = templates
            self._sources.pop(name, None)
        return True

    def reload(self, name: str) -> ValidatedTemplate:
        """
        Re-read a template from its source file and swap in the new handle.

        Raises NotFoundError for unknown or in-memory templates and
        SchemaError when the changed definition is invalid; the old handle
        stays registered in that case.
        """
        source = self._sources.get(name)
        if source is None:
            raise NotFoundError("template", name)

        try:
            with open(source, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise SchemaError(f"Cannot reload template '{name}': {e}") from e

        handle = DocumentTemplate.from_dict(data).validate()
        self._register(handle, source)
        return handle

    def save_template(self, template: DocumentTemplate) -> Path:
        """Write a template definition as JSON"""
        self.templates_dir.mkdir(parents=True, exist_ok=True)
        file_path = self.templates_dir / f"{template.name}.json"
        with open(file_path, 'w', encoding='utf-8') as f:
            json.dump(template.to_dict(), f, indent=2, ensure_ascii=False)
        logger.info(f"Saved template '{template.name}' to {file_path}")
        return file_path

    def create_default_templates(self) -> List[Path]:
        """Write the built-in templates into the directory"""
        return [
            self.save_template(DocumentTemplate.from_dict(definition))
            for definition in DEFAULT_TEMPLATES
        ]

    def get_stats(self) -> Dict[str, Any]:
        """Get statistics about registered templates"""
        return {
            "templates": len(self._templates),
            "template_details": {
                name: {
                    "sections": len(t),
                    "placeholders": len(t.placeholders),
                    "default_language": t.default_language,
                    "rtl": t.rtl,
                }
                for name, t in self._templates.items()
            },
        }


_DEFAULT_STYLES = {
    "default": {
        "font_family": "David CLM",
        "font_size": 12.0,
        "font_weight": "normal",
        "font_style": "normal",
        "color": "#000000",
        "line_spacing": 1.5,
        "paragraph_spacing": 1.0,
        "margin_top": 25.4,
        "margin_bottom": 25.4,
        "margin_left": 25.4,
        "margin_right": 25.4,
        "page_size": "A4",
        "orientation": "portrait",
    },
    "heading1": {"based_on": "default", "font_size": 16.0, "font_weight": "bold", "color": "#333333"},
    "heading2": {"based_on": "heading1", "font_size": 14.0},
    "table": {"based_on": "default", "font_size": 10.0, "line_spacing": 1.0},
}

DEFAULT_TEMPLATES = [
    {
        "name": "technical_specification",
        "description": "תבנית למפרט טכני של מערכת כיבוי אש",
        "version": "1.0.0",
        "template_type": "technical_spec",
        "sections": [
            {
                "id": "general",
                "title": "כללי",
                "content": "{{project_description}}",
                "required": True,
                "order": 1,
                "style": "heading1",
            },
            {
                "id": "requirements",
                "title": "דרישות מערכת",
                "content": "{{system_requirements}}",
                "required": True,
                "order": 2,
                "style": "heading1",
            },
        ],
        "placeholders": {
            "project_description": "text",
            "system_requirements": "text",
        },
        "styles": _DEFAULT_STYLES,
        "rtl": True,
        "default_language": "he",
        "supported_languages": ["he", "ru"],
    },
    {
        "name": "fire_inspection_report",
        "description": "דוח בדיקת מערכת כיבוי אש",
        "version": "1.0.0",
        "template_type": "inspection",
        "sections": [
            {
                "id": "details",
                "title": "פרטי הבדיקה",
                "content": "אתר: {{site_name}}. תאריך בדיקה: {{inspection_date}}. בודק: {{inspector}}.",
                "required": True,
                "order": 1,
                "style": "heading1",
                "subsections": [
                    {
                        "id": "standards",
                        "title": "תקנים",
                        "content": "{{standards}}",
                        "order": 1,
                        "style": "heading2",
                    },
                ],
            },
            {
                "id": "findings",
                "title": "ממצאים",
                "content": "{{findings}}",
                "required": True,
                "order": 2,
                "style": "heading1",
                "subsections": [
                    {
                        "id": "measurements",
                        "title": "מדידות",
                        "content": "לחץ עבודה: {{working_pressure}} בר. {{measurements}}",
                        "required": True,
                        "order": 1,
                        "style": "table",
                    },
                    {
                        "id": "remarks",
                        "title": "הערות",
                        "content": "{{remarks}}",
                        "order": 2,
                        "style": "default",
                    },
                ],
            },
            {
                "id": "approval",
                "title": "אישור",
                "content": "תאריך אישור: {{approval_date}}",
                "required": True,
                "order": 3,
                "style": "heading1",
            },
        ],
        "placeholders": {
            "site_name": "text",
            "inspection_date": "date",
            "inspector": "text",
            "standards": "list",
            "findings": "text",
            "working_pressure": "number",
            "measurements": "table",
            "remarks": "text",
            "approval_date": "date",
        },
        "styles": _DEFAULT_STYLES,
        "rtl": True,
        "default_language": "he",
        "supported_languages": ["he", "ru"],
    },
]
