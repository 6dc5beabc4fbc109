#!/usr/bin/env python3
"""
Render a document template with field values and print the sections.

Usage:
    python scripts/render_template.py template.json values.json [--lang ru] [--glossary glossary.json] [--context plumbing] [--google]

values.json maps placeholder names to values. A value may also be an object
{"value": ..., "translate": true, "language": "he"} to translate it into the
rendering language.
"""
import argparse
import json
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

from loguru import logger  # noqa: E402

from config import settings  # noqa: E402
from errors import TechDocError  # noqa: E402
from templates import DocumentTemplate, TemplateRenderer  # noqa: E402
from translation import (  # noqa: E402
    GlossaryStore,
    TermAwareTranslator,
    create_fallback,
    create_fire_protection_glossary,
)


def format_sections(result) -> str:
    """Markdown-like text: one heading per section, nested by depth."""
    lines = []
    for record in result:
        lines.append(f"{'#' * (record.depth + 1)} {record.title}")
        if record.content:
            lines.append(record.content)
        lines.append('')
    return '\n'.join(lines)


def main():
    parser = argparse.ArgumentParser(description="Render a document template")
    parser.add_argument("template", help="Template definition (JSON)")
    parser.add_argument("values", help="Field values (JSON)")
    parser.add_argument("--lang", help="Rendering language (template default if omitted)")
    parser.add_argument("--glossary", help="Glossary JSON (built-in fire-protection glossary if omitted)")
    parser.add_argument("--context", help="Glossary domain context for translated fields")
    parser.add_argument("--google", action="store_true", help="Use Google Translate for non-glossary words")
    args = parser.parse_args()

    logger.remove()
    logger.add(sys.stderr, level=settings.LOG_LEVEL)

    if args.glossary:
        glossary = GlossaryStore.load(Path(args.glossary))
        if glossary is None:
            sys.exit(1)
    else:
        glossary = create_fire_protection_glossary()

    fallback = create_fallback("google" if args.google else None)
    renderer = TemplateRenderer(TermAwareTranslator(glossary, fallback=fallback))

    try:
        definition = json.loads(Path(args.template).read_text(encoding='utf-8'))
        values = json.loads(Path(args.values).read_text(encoding='utf-8'))
        template = DocumentTemplate.from_dict(definition).validate()
        result = renderer.render(template, values, language=args.lang, context=args.context)
        print(format_sections(result))
    except (TechDocError, OSError, ValueError) as e:
        # ValueError covers json.JSONDecodeError
        print(f"Render failed: {e}", file=sys.stderr)
        sys.exit(1)

    for warning in result.warnings:
        print(f"warning: [{warning.section_id}] {warning.placeholder}: {warning.message}", file=sys.stderr)


if __name__ == '__main__':
    main()
