"""Test cases for whole-template translation."""

import tempfile
import unittest
from pathlib import Path
from unittest import mock

from errors import UnsupportedLanguageError
from templates import TemplateManager, TemplateRenderer, TemplateTranslator, find_placeholders
from translation import TermAwareTranslator, create_fire_protection_glossary


class TemplateTranslatorTest(unittest.TestCase):
    """Titles and literal text are translated, placeholder tokens are kept."""

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        manager = TemplateManager(templates_dir=Path(self._tmp.name))
        self.report = manager.get_template("fire_inspection_report")
        self.tech_spec = manager.get_template("technical_specification")
        self.translator = TemplateTranslator(TermAwareTranslator(create_fire_protection_glossary()))

    def tearDown(self):
        self._tmp.cleanup()

    def test_translated_template_targets_new_language(self):
        translated = self.translator.translate_template(self.tech_spec, "he", "ru")
        self.assertEqual(translated.default_language, "ru")
        self.assertFalse(translated.rtl)
        self.assertEqual(translated.name, "technical_specification")

    def test_glossary_terms_in_titles(self):
        translated = self.translator.translate_template(self.tech_spec, "he", "ru").validate()
        self.assertTrue(translated.find_section("requirements").title.endswith("система"))

    def test_placeholders_survive(self):
        translated = self.translator.translate_template(self.report, "he", "ru").validate()
        for section, _, _ in self.report.walk():
            self.assertEqual(
                find_placeholders(translated.find_section(section.id).content),
                find_placeholders(section.content),
            )

    def test_translated_template_renders(self):
        translated = self.translator.translate_template(self.tech_spec, "he", "ru").validate()
        result = TemplateRenderer().render(
            translated,
            {"project_description": "Насосная станция", "system_requirements": "NFPA 20"},
        )
        self.assertEqual(result.language, "ru")
        self.assertEqual([r.content for r in result], ["Насосная станция", "NFPA 20"])

    def test_unsupported_language(self):
        with self.assertRaises(UnsupportedLanguageError):
            self.translator.translate_template(self.tech_spec, "he", "en")

    def test_translate_values(self):
        values = self.translator.translate_values({"pressure": "לחץ", "floors": 3}, "he", "ru")
        self.assertEqual(values, {"pressure": "давление", "floors": 3})

    def test_repeated_text_is_translated_once(self):
        inner = mock.Mock(wraps=TermAwareTranslator(create_fire_protection_glossary()))
        translator = TemplateTranslator(inner)
        for _ in range(3):
            self.assertEqual(translator.translate_text("לחץ", "he", "ru"), "давление")
        self.assertEqual(inner.translate.call_count, 1)

    def test_memo_is_bounded(self):
        inner = mock.Mock(wraps=TermAwareTranslator(create_fire_protection_glossary()))
        translator = TemplateTranslator(inner, cache_size=2)
        for text in ("לחץ", "מגוף", "שסתום", "לחץ"):
            translator.translate_text(text, "he", "ru")
        self.assertEqual(inner.translate.call_count, 4)


if __name__ == "__main__":
    unittest.main()
