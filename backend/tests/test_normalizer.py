"""Test cases for the Hebrew/Russian morphological normalizer."""

import unittest

from morphology import MorphologicalNormalizer, normalize


class HebrewNormalizerTest(unittest.TestCase):
    """Prefix stripping for Hebrew tokens."""

    def setUp(self):
        self.normalizer = MorphologicalNormalizer(hebrew_min_stem=3, russian_min_stem=3)

    def test_prefix_stripping(self):
        test_cases = [
            ("הבית", "בית"),      # article
            ("ובבית", "בית"),     # conjunction + preposition cluster
            ("בית", "בית"),       # nothing to strip
            ("לחץ", "לחץ"),       # remainder would be too short
            ("מים", "מים"),
        ]
        for token, expected in test_cases:
            self.assertEqual(self.normalizer.normalize(token, "he"), expected, f"Failed for {token!r}")

    def test_stages_stop_at_each_strip(self):
        self.assertEqual(self.normalizer.stages("המגוף", "he"), ["המגוף", "מגוף", "גוף"])
        self.assertEqual(self.normalizer.stages("בית", "he"), ["בית"])

    def test_acronyms_are_left_alone(self):
        self.assertEqual(self.normalizer.normalize('מד"א', "he"), 'מד"א')
        self.assertEqual(self.normalizer.normalize("ת״י", "he"), "ת״י")

    def test_remainder_cannot_start_with_final_letter(self):
        self.assertEqual(self.normalizer.normalize("הםלך", "he"), "הםלך")

    def test_niqqud_is_removed(self):
        pointed = "הַבַּיִת"
        self.assertEqual(self.normalizer.normalize(pointed, "he"), "בית")

    def test_min_stem_is_configurable(self):
        strict = MorphologicalNormalizer(hebrew_min_stem=4)
        self.assertEqual(strict.normalize("הבית", "he"), "הבית")

    def test_ambiguous_leading_letters_are_stripped(self):
        # Root letters that look like prefixes still go; callers must check
        test_cases = [
            ("מגוף", "גוף"),
            ("שסתום", "סתום"),
            ("שלום", "לום"),
        ]
        for token, expected in test_cases:
            self.assertEqual(self.normalizer.normalize(token, "he"), expected, f"Failed for {token!r}")

    def test_stripped_affix(self):
        test_cases = [
            ("מגוף", "מ"),
            ("שמגוף", "שמ"),
            ("והסתום", "וה"),
            ("המגוף", "המ"),
            ("הַבַּיִת", "ה"),
            ("גוף", ""),
            ('ת"י', ""),
        ]
        for token, expected in test_cases:
            self.assertEqual(self.normalizer.stripped_affix(token, "he"), expected, f"Failed for {token!r}")


class RussianNormalizerTest(unittest.TestCase):
    """Suffix stripping for Russian tokens."""

    def setUp(self):
        self.normalizer = MorphologicalNormalizer(hebrew_min_stem=3, russian_min_stem=3)

    def test_suffix_stripping(self):
        test_cases = [
            ("трубами", "труб"),
            ("трубы", "труб"),
            ("насосом", "насос"),
            ("вода", "вод"),
            ("стол", "стол"),
            ("дом", "дом"),   # stem would drop below the minimum
        ]
        for token, expected in test_cases:
            self.assertEqual(self.normalizer.normalize(token, "ru"), expected, f"Failed for {token!r}")

    def test_inflections_share_a_lemma(self):
        self.assertEqual(
            self.normalizer.normalize("давления", "ru"),
            self.normalizer.normalize("давление", "ru"),
        )

    def test_case_is_preserved(self):
        self.assertEqual(self.normalizer.normalize("Клапана", "ru"), "Клапан")

    def test_latin_tokens_are_unchanged(self):
        self.assertEqual(self.normalizer.normalize("ventil", "ru"), "ventil")
        self.assertEqual(self.normalizer.normalize("NFPA", "ru"), "NFPA")

    def test_stripped_ending(self):
        self.assertEqual(self.normalizer.stripped_affix("трубами", "ru"), "ами")
        self.assertEqual(self.normalizer.stripped_affix("стол", "ru"), "")
        self.assertEqual(self.normalizer.stripped_affix("стол", "en"), "")


class NormalizerContractTest(unittest.TestCase):
    """Behavior shared by every language."""

    def setUp(self):
        self.normalizer = MorphologicalNormalizer()

    def test_idempotent(self):
        samples = {
            "he": ["הבית", "ובבית", "המגוף", "שסתום", "והמערכת", "לחץ", 'ת"י', "ספרינקלר"],
            "ru": ["трубами", "давления", "насосом", "клапаны", "спринклерный", "ventil", "дом"],
        }
        for lang, tokens in samples.items():
            for token in tokens:
                once = self.normalizer.normalize(token, lang)
                self.assertEqual(self.normalizer.normalize(once, lang), once, f"Failed for {token!r}")

    def test_unknown_language_passes_through(self):
        self.assertEqual(self.normalizer.normalize("valves", "en"), "valves")
        self.assertEqual(self.normalizer.normalize("הבית", "fr"), "הבית")

    def test_empty_token(self):
        self.assertEqual(self.normalizer.normalize("", "he"), "")
        self.assertEqual(self.normalizer.stages("", "ru"), [""])

    def test_module_level_helper(self):
        self.assertEqual(normalize("הבית", "he"), "בית")


if __name__ == "__main__":
    unittest.main()
