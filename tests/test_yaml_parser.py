import os
import unittest
from datetime import date

import yaml  # For creating test files
from yaml_parser import (
    load_letter_draft,
    load_yaml_file,
    normalize_keys_recursive,
)


class TestYamlParsing(unittest.TestCase):
    def setUp(self):
        self.test_dir = "temp_test_yaml_files"
        os.makedirs(self.test_dir, exist_ok=True)

        self.valid_yaml_content = {
            "Title": "Note to 2026 me",
            "Goal": "Learn Spanish",
            "Content": "Dear future me...",
            "Send Date": date(2026, 1, 1),
        }
        self.valid_yaml_filepath = os.path.join(self.test_dir, "valid.yaml")
        with open(self.valid_yaml_filepath, "w", encoding="utf-8") as f:
            yaml.dump(self.valid_yaml_content, f)

        self.malformed_yaml_filepath = os.path.join(self.test_dir, "malformed.yaml")
        with open(self.malformed_yaml_filepath, "w", encoding="utf-8") as f:
            f.write("Title: Note\nGoal: [Learn")  # Missing closing bracket

        self.empty_yaml_filepath = os.path.join(self.test_dir, "empty.yaml")
        with open(self.empty_yaml_filepath, "w", encoding="utf-8") as f:
            f.write("")

        self.non_dict_root_yaml_filepath = os.path.join(
            self.test_dir, "non_dict_root.yaml"
        )
        with open(self.non_dict_root_yaml_filepath, "w", encoding="utf-8") as f:
            f.write("- item1\n- item2")

        self.bad_date_yaml_filepath = os.path.join(self.test_dir, "bad_date.yaml")
        with open(self.bad_date_yaml_filepath, "w", encoding="utf-8") as f:
            f.write("goal: Run\nsend_date: someday\n")

    def tearDown(self):
        for path in (
            self.valid_yaml_filepath,
            self.malformed_yaml_filepath,
            self.empty_yaml_filepath,
            self.non_dict_root_yaml_filepath,
            self.bad_date_yaml_filepath,
        ):
            if os.path.exists(path):
                os.remove(path)
        if os.path.exists(self.test_dir):
            os.rmdir(self.test_dir)

    def test_load_valid_yaml_normalized_keys(self):
        data = load_yaml_file(self.valid_yaml_filepath, normalize_keys=True)
        self.assertIsNotNone(data)
        self.assertEqual(data["send_date"], date(2026, 1, 1))
        self.assertEqual(data["goal"], "Learn Spanish")

    def test_load_valid_yaml_raw_keys(self):
        data = load_yaml_file(self.valid_yaml_filepath, normalize_keys=False)
        self.assertIn("Send Date", data)

    def test_load_non_existent_file(self):
        self.assertIsNone(load_yaml_file("non_existent.yaml"))

    def test_load_non_yaml_extension(self):
        self.assertIsNone(load_yaml_file("draft.txt"))

    def test_load_malformed_yaml(self):
        self.assertIsNone(load_yaml_file(self.malformed_yaml_filepath))

    def test_load_empty_yaml(self):
        self.assertEqual(load_yaml_file(self.empty_yaml_filepath), {})

    def test_load_non_dict_root_yaml(self):
        self.assertIsNone(load_yaml_file(self.non_dict_root_yaml_filepath))

    def test_normalize_keys_recursive(self):
        data = {"Send Date": "x", "Nested Key": [{"Inner Key": 1}]}
        self.assertEqual(
            normalize_keys_recursive(data),
            {"send_date": "x", "nested_key": [{"inner_key": 1}]},
        )

    def test_load_letter_draft(self):
        draft = load_letter_draft(self.valid_yaml_filepath)
        self.assertIsNotNone(draft)
        self.assertEqual(draft.title, "Note to 2026 me")
        self.assertEqual(draft.goal, "Learn Spanish")
        self.assertEqual(draft.send_date, date(2026, 1, 1))

    def test_load_letter_draft_defaults_missing_fields(self):
        draft = load_letter_draft(self.empty_yaml_filepath)
        self.assertEqual(draft.title, "")
        self.assertIsNone(draft.send_date)

    def test_load_letter_draft_rejects_bad_date(self):
        self.assertIsNone(load_letter_draft(self.bad_date_yaml_filepath))


if __name__ == "__main__":
    unittest.main()
