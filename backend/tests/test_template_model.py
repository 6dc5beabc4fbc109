"""Test cases for template definitions and validation."""

import copy
import unittest

from errors import NotFoundError, SchemaError
from templates import DocumentTemplate, PlaceholderKind, Section, Style, TemplateType


def make_definition():
    return {
        "name": "pump_report",
        "template_type": "inspection",
        "sections": [
            {
                "id": "summary",
                "title": "סיכום",
                "content": "תאריך: {{report_date}}",
                "required": True,
                "order": 2,
                "style": "heading",
            },
            {
                "id": "details",
                "title": "פרטים",
                "content": "{{pump_model}}",
                "order": 1,
                "subsections": [
                    {"id": "flow", "title": "ספיקה", "content": "{{flow_rate}}", "order": 2},
                    {"id": "pressure", "title": "לחץ", "content": "{{pressure}}", "order": 1},
                ],
            },
        ],
        "placeholders": {
            "report_date": "date",
            "pump_model": "text",
            "flow_rate": "number",
            "pressure": "number",
        },
        "styles": {
            "default": {"font_family": "David CLM", "font_size": 12},
            "heading": {"based_on": "default", "font_size": 16, "font_weight": "bold"},
        },
        "rtl": True,
        "default_language": "he",
        "supported_languages": ["he", "ru"],
    }


class TemplateValidationTest(unittest.TestCase):
    """validate() rejects broken cross-references."""

    def setUp(self):
        self.definition = make_definition()

    def assertRejected(self, definition):
        template = DocumentTemplate.from_dict(definition)
        with self.assertRaises(SchemaError):
            template.validate()

    def test_valid_template(self):
        handle = DocumentTemplate.from_dict(self.definition).validate()
        self.assertEqual(len(handle), 4)
        self.assertEqual(handle.name, "pump_report")
        self.assertTrue(handle.rtl)
        self.assertEqual(handle.template.template_type, TemplateType.INSPECTION)

    def test_undeclared_placeholder(self):
        self.definition["sections"][0]["content"] = "{{report_date}} {{signature}}"
        template = DocumentTemplate.from_dict(self.definition)
        with self.assertRaises(SchemaError) as ctx:
            template.validate()
        self.assertEqual(ctx.exception.placeholder, "signature")
        self.assertEqual(ctx.exception.section_id, "summary")

    def test_unresolved_section_style(self):
        self.definition["sections"][1]["subsections"][0]["style"] = "missing"
        self.assertRejected(self.definition)

    def test_unresolved_style_parent(self):
        self.definition["styles"]["heading"]["based_on"] = "missing"
        self.assertRejected(self.definition)

    def test_style_inheritance_cycle(self):
        self.definition["styles"]["default"]["based_on"] = "heading"
        self.assertRejected(self.definition)

    def test_colliding_sibling_order(self):
        self.definition["sections"][1]["subsections"][1]["order"] = 2
        self.assertRejected(self.definition)

    def test_same_order_at_different_levels_is_allowed(self):
        self.definition["sections"][1]["subsections"][1]["order"] = 2
        self.definition["sections"][1]["subsections"][0]["order"] = 1
        DocumentTemplate.from_dict(self.definition).validate()

    def test_duplicate_section_id(self):
        self.definition["sections"][1]["subsections"][0]["id"] = "summary"
        self.assertRejected(self.definition)

    def test_default_language_must_be_supported(self):
        self.definition["supported_languages"] = ["ru"]
        self.assertRejected(self.definition)

    def test_malformed_definition(self):
        del self.definition["sections"][0]["order"]
        with self.assertRaises(SchemaError):
            DocumentTemplate.from_dict(self.definition)

    def test_unknown_placeholder_kind(self):
        self.definition["placeholders"]["pressure"] = "percentage"
        with self.assertRaises(SchemaError):
            DocumentTemplate.from_dict(self.definition)

    def test_malformed_tokens_are_rejected(self):
        self.definition["sections"][0]["content"] = "תאריך: {{approval-date}} / {{approval date}}"
        template = DocumentTemplate.from_dict(self.definition)
        with self.assertRaises(SchemaError) as ctx:
            template.validate()
        self.assertEqual(ctx.exception.section_id, "summary")
        self.assertEqual(ctx.exception.placeholder, "{{approval-date}}")

    def test_padded_token_is_well_formed(self):
        self.definition["sections"][0]["content"] = "תאריך: {{ report_date }}"
        DocumentTemplate.from_dict(self.definition).validate()

    def test_definition_round_trip(self):
        template = DocumentTemplate.from_dict(self.definition)
        again = DocumentTemplate.from_dict(template.to_dict())
        self.assertEqual(again, template)


class ValidatedTemplateTest(unittest.TestCase):
    """Read-only handle queries."""

    def setUp(self):
        self.handle = DocumentTemplate.from_dict(make_definition()).validate()

    def test_find_nested_section(self):
        section = self.handle.find_section("pressure")
        self.assertEqual(section.title, "לחץ")
        self.assertEqual(self.handle.section_depth("pressure"), 1)
        self.assertEqual(self.handle.parent_id("pressure"), "details")

    def test_find_missing_section(self):
        with self.assertRaises(NotFoundError):
            self.handle.find_section("appendix")
        self.assertNotIn("appendix", self.handle)

    def test_placeholder_kind(self):
        self.assertEqual(self.handle.placeholder_kind("flow_rate"), PlaceholderKind.NUMBER)
        with self.assertRaises(NotFoundError):
            self.handle.placeholder_kind("signature")

    def test_walk_orders_siblings(self):
        order = [(section.id, depth) for section, depth, _ in self.handle.walk()]
        self.assertEqual(order, [("details", 0), ("pressure", 1), ("flow", 1), ("summary", 0)])

    def test_resolve_style_merges_parent(self):
        style = self.handle.resolve_style("heading")
        self.assertEqual(style.font_size, 16)
        self.assertEqual(style.font_family, "David CLM")
        with self.assertRaises(NotFoundError):
            self.handle.resolve_style("missing")

    def test_handle_is_read_only(self):
        with self.assertRaises(TypeError):
            self.handle.placeholders["extra"] = PlaceholderKind.TEXT

    def test_handle_is_independent_of_later_definitions(self):
        definition = make_definition()
        first = DocumentTemplate.from_dict(definition).validate()
        changed = copy.deepcopy(definition)
        changed["sections"][0]["title"] = "סיכום מעודכן"
        second = DocumentTemplate.from_dict(changed).validate()
        self.assertEqual(first.find_section("summary").title, "סיכום")
        self.assertEqual(second.find_section("summary").title, "סיכום מעודכן")


class DirectConstructionTest(unittest.TestCase):
    """Templates built in code go through the same checks as loaded ones."""

    def make_template(self, sections, placeholders):
        return DocumentTemplate(
            name="memo",
            sections=sections,
            placeholders=placeholders,
            styles={"default": Style(name="default")},
        )

    def test_unknown_kind_is_rejected(self):
        template = self.make_template((Section(id="body", content="{{share}}", order=1),), {"share": "percentage"})
        with self.assertRaises(SchemaError) as ctx:
            template.validate()
        self.assertEqual(ctx.exception.placeholder, "share")

    def test_kind_strings_are_parsed(self):
        template = self.make_template((Section(id="body", content="{{flow}}", order=1),), {"flow": "Number"})
        handle = template.validate()
        self.assertIs(handle.placeholder_kind("flow"), PlaceholderKind.NUMBER)
        self.assertIs(handle.template.placeholders["flow"], PlaceholderKind.NUMBER)

    def test_handle_does_not_share_mutable_sections(self):
        children = [Section(id="pressure", content="{{pressure}}", order=1)]
        sections = [Section(id="details", order=1, subsections=children)]
        handle = self.make_template(sections, {"pressure": "number"}).validate()

        sections.append(Section(id="appendix", order=2))
        children.append(Section(id="flow", order=2))

        self.assertIsInstance(handle.template.sections, tuple)
        self.assertIsInstance(handle.find_section("details").subsections, tuple)
        self.assertEqual([s.id for s, _, _ in handle.walk()], ["details", "pressure"])
        self.assertNotIn("appendix", handle)


if __name__ == "__main__":
    unittest.main()
