import copy
import unittest

import yaml

from hrtests.exceptions import ScoringConfigError
from hrtests.utils.scoring_config import CONFIG_PATH, load_scoring_config, parse_scoring_config


def raw_config():
    with CONFIG_PATH.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f)


class TestScoringConfig(unittest.TestCase):

    def test_packaged_config_loads(self):
        config = load_scoring_config()

        self.assertEqual(config.disc.max_score, 24)
        self.assertEqual(config.aptitude.sub_max_score, 20)
        self.assertEqual(len(config.oca.characteristics), 10)
        self.assertEqual(config.for_test("Hubbard").test_type, "emotional_tone")

    def test_bands_must_descend(self):
        data = copy.deepcopy(raw_config())
        bands = data["EQ"]["bands"]
        bands[0], bands[1] = bands[1], bands[0]

        with self.assertRaises(ScoringConfigError):
            parse_scoring_config(data)

    def test_last_band_must_catch_the_rest(self):
        data = copy.deepcopy(raw_config())
        data["Integrity"]["bands"][-1]["min"] = 0

        with self.assertRaises(ScoringConfigError):
            parse_scoring_config(data)

    def test_missing_disc_verdict(self):
        data = copy.deepcopy(raw_config())
        del data["DISC"]["verdicts"]["MODERATE"]

        with self.assertRaises(ScoringConfigError):
            parse_scoring_config(data)

    def test_missing_section(self):
        data = copy.deepcopy(raw_config())
        del data["KFU"]

        with self.assertRaises(ScoringConfigError):
            parse_scoring_config(data)

    def test_unknown_key_in_test_section(self):
        data = copy.deepcopy(raw_config())
        data["EQ"]["metric"] = "tone"

        with self.assertRaises(ScoringConfigError):
            parse_scoring_config(data)

    def test_reported_markers(self):
        config = load_scoring_config()

        self.assertEqual(config.eq.reported_markers.level, "📈")
        self.assertEqual(config.integrity.reported_markers.recommendation, "✅")
        self.assertEqual(config.aptitude.reported_markers.description, "🔍")

    def test_unreadable_file(self):
        with self.assertRaises(ScoringConfigError):
            load_scoring_config(CONFIG_PATH.with_name("missing.yaml"))


if __name__ == "__main__":
    unittest.main()
